# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase operations.
# It implements the singleton pattern to reuse a single client connection
# and doubles as the document metadata store:
# - Insert a document record
# - Fetch a record by ID
# - List records by owner (newest first)
# - Search records by original filename / description
# - Delete a record
#
# Every operation touches a single row or a single filtered read; nothing
# here needs a multi-row transaction.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   rows = SupabaseClient.fetch_documents_by_owner(owner_id)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from supabase import create_client, Client

from app.config import settings

# Set up logging for this module
logger = logging.getLogger(__name__)

# PostgREST code returned by .single() when no row matches
NO_ROWS_CODE = "PGRST116"


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Provides actionable error messages:
    "Errors should tell HOW to fix, not just WHAT failed."
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


def _ilike_pattern(query: str) -> str:
    """
    Build a quoted PostgREST ilike pattern matching `query` as a substring.

    LIKE wildcards in the query are escaped so they match literally, and
    the value is double-quoted so commas and parentheses survive inside
    an or=(...) filter.
    """
    escaped = (
        query.replace("\\", "\\\\")
        .replace("%", "\\%")
        .replace("_", "\\_")
    )
    escaped = escaped.replace("\\", "\\\\").replace('"', '\\"')
    return f'"%{escaped}%"'


class SupabaseClient:
    """
    Typed wrapper for Supabase operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation, so the class itself can be handed to services as the
    metadata store.

    Example:
        row = SupabaseClient.fetch_document("6f1c...")
        if row is None:
            ...
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        Ownership checks are done by the API, not by the database.

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def _normalize_uuid(cls, uuid_value: str | UUID) -> str:
        """Convert UUID to string for queries."""
        return str(uuid_value) if isinstance(uuid_value, UUID) else uuid_value

    @classmethod
    def _table(cls):
        return cls.get_client().table(settings.DOCUMENTS_TABLE)

    # -------------------------------------------------------------------------
    # Document Records
    # -------------------------------------------------------------------------

    @classmethod
    def insert_document(cls, row: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a document record.

        The database assigns `id` and `created_at`.

        Args:
            row: Column values, as produced by NewDocument.to_row()

        Returns:
            The inserted row including `id` and `created_at`

        Raises:
            SupabaseClientError: If the insert fails or returns nothing
        """
        try:
            response = cls._table().insert(row).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to insert document: {e}",
                code="INSERT_DOCUMENT_FAILED",
                suggestion=f"Check that the {settings.DOCUMENTS_TABLE} table exists and matches the record shape",
                details={"owner_id": row.get("owner_id")}
            )

        if not response.data:
            raise SupabaseClientError(
                message="Insert returned no data",
                code="INSERT_DOCUMENT_FAILED",
                details={"owner_id": row.get("owner_id")}
            )

        document = response.data[0]
        logger.info(f"Inserted document {document.get('id')} for owner {row.get('owner_id')}")
        return document

    @classmethod
    def fetch_document(cls, document_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch a document record by ID.

        Returns:
            The row, or None if no such record exists

        Raises:
            SupabaseClientError: If the query fails
        """
        document_id_str = cls._normalize_uuid(document_id)

        try:
            response = (
                cls._table()
                .select("*")
                .eq("id", document_id_str)
                .single()
                .execute()
            )
            return response.data

        except Exception as e:
            if NO_ROWS_CODE in str(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch document: {e}",
                code="FETCH_DOCUMENT_FAILED",
                details={"document_id": document_id_str}
            )

    @classmethod
    def fetch_documents_by_owner(cls, owner_id: str | UUID) -> list[dict[str, Any]]:
        """
        List all records owned by `owner_id`, newest first.

        Raises:
            SupabaseClientError: If the query fails
        """
        owner_id_str = cls._normalize_uuid(owner_id)

        try:
            response = (
                cls._table()
                .select("*")
                .eq("owner_id", owner_id_str)
                .order("created_at", desc=True)
                .execute()
            )
            documents = response.data or []
            logger.debug(f"Fetched {len(documents)} documents for owner {owner_id_str}")
            return documents

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to list documents: {e}",
                code="LIST_DOCUMENTS_FAILED",
                details={"owner_id": owner_id_str}
            )

    @classmethod
    def search_documents(cls, query: str) -> list[dict[str, Any]]:
        """
        Case-insensitive substring search over original_name and description.

        Searches every owner's records, newest first.

        Raises:
            SupabaseClientError: If the query fails
        """
        pattern = _ilike_pattern(query)

        try:
            response = (
                cls._table()
                .select("*")
                .or_(f"original_name.ilike.{pattern},description.ilike.{pattern}")
                .order("created_at", desc=True)
                .execute()
            )
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to search documents: {e}",
                code="SEARCH_DOCUMENTS_FAILED",
                details={"query": query}
            )

    @classmethod
    def delete_document(cls, document_id: str | UUID) -> bool:
        """
        Delete a document record.

        Returns:
            True if a row was deleted, False if it was already gone

        Raises:
            SupabaseClientError: If the delete fails
        """
        document_id_str = cls._normalize_uuid(document_id)

        try:
            response = (
                cls._table()
                .delete()
                .eq("id", document_id_str)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to delete document: {e}",
                code="DELETE_DOCUMENT_FAILED",
                details={"document_id": document_id_str}
            )

        deleted = bool(response.data)
        logger.info(f"Deleted document {document_id_str} (row existed: {deleted})")
        return deleted
