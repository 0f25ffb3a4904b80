# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the document lifecycle logic:
# - models/: Pydantic schemas for document records
# - services/: Access policy, blob storage gateway, delivery proxy and the
#   DocumentService that ties them together
# =============================================================================
