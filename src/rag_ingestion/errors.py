"""Error taxonomy for the ingestion service.

Request-scoped errors (:class:`ConfigurationError`, :class:`InputError`,
a failed schema bootstrap) abort the whole request.  File-scoped errors
are caught by the orchestrator and turned into a ``skipped`` or
``failed`` outcome for that one file.

Each class carries the HTTP status the serving layer answers with when
the error escapes the orchestrator.
"""

from __future__ import annotations


class IngestionError(Exception):
    """Base class for every error raised by this package."""

    status_code: int = 500


class ConfigurationError(IngestionError):
    """A required endpoint or credential is not configured."""

    status_code = 500


class InputError(IngestionError):
    """No files supplied, or the request / file payload is malformed."""

    status_code = 400


class ExtractionError(IngestionError):
    """The extraction API was unreachable or returned an unusable response."""

    status_code = 502


class UnsupportedFormatError(IngestionError):
    """The declared MIME type has no extraction handler."""

    status_code = 415


class UploadError(IngestionError):
    """Schema bootstrap or batch insertion against the vector store failed."""

    status_code = 502


class StorageError(IngestionError):
    """A stored file could not be resolved, downloaded, or updated."""

    status_code = 502
