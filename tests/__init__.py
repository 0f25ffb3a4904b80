# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Document Organizer API:
# - test_utils.py: Storage handle, classification and header helpers
# - test_auth.py / test_access.py: Identity tokens and the owner-or-admin rule
# - test_storage_service.py: Blob storage gateway against a mocked Supabase
# - test_supabase_client.py: Metadata store queries
# - test_delivery_service.py: Content delivery proxy
# - test_document_service.py: Document lifecycle against in-memory fakes
# - test_documents_api.py: Integration tests for API endpoints
#
# Run tests with: pytest
# =============================================================================
