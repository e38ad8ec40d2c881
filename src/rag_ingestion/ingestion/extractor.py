"""Format-dispatched text extraction.

A declared MIME type is classified once into a :class:`FileFormat`, and
each format has exactly one handler:

* ``PDF`` / ``IMAGE``: one call to a multimodal Messages API
  (:class:`AnthropicExtractionClient`).
* ``OFFICE_DOCUMENT``: best-effort raw decode, a
  low-quality fallback, not a document-format parser.
* ``PLAIN_TEXT``: UTF-8 decode.
* ``UNSUPPORTED``: :class:`~rag_ingestion.errors.UnsupportedFormatError`.
"""

from __future__ import annotations

import base64
import logging
import re
from enum import Enum
from typing import Any, Callable

import requests

from rag_ingestion.config import Settings
from rag_ingestion.errors import ExtractionError, UnsupportedFormatError
from rag_ingestion.http import send

logger = logging.getLogger(__name__)

PDF_PROMPT = (
    "Extract all text from this PDF document. Return only the extracted text "
    "content, preserving the structure and formatting as much as possible."
)
IMAGE_PROMPT = (
    "Extract all text from this image using OCR. If there is no text, "
    "describe what you see in the image."
)

_OFFICE_MARKERS = ("word", "document", "presentation", "spreadsheet")
_NON_PRINTABLE = re.compile(r"[^\x20-\x7E\n]")
OFFICE_MIN_CHARS = 100


class FileFormat(str, Enum):
    PDF = "pdf"
    IMAGE = "image"
    OFFICE_DOCUMENT = "office_document"
    PLAIN_TEXT = "plain_text"
    UNSUPPORTED = "unsupported"


def classify(mime_type: str) -> FileFormat:
    """Map a declared MIME type onto the closed set of formats."""
    mime = (mime_type or "").lower()
    if "pdf" in mime:
        return FileFormat.PDF
    if "image" in mime:
        return FileFormat.IMAGE
    if any(marker in mime for marker in _OFFICE_MARKERS):
        return FileFormat.OFFICE_DOCUMENT
    if mime.startswith("text/") or "json" in mime:
        return FileFormat.PLAIN_TEXT
    return FileFormat.UNSUPPORTED


class AnthropicExtractionClient:
    """Minimal client for the Anthropic Messages endpoint.

    Parameters
    ----------
    api_key:
        Anthropic API key.
    model:
        Model id used for extraction.
    base_url:
        API root, without the ``/v1`` suffix.
    session:
        Optional pre-configured :class:`requests.Session`.
    timeout / max_attempts:
        Forwarded to :func:`rag_ingestion.http.send`.
    """

    def __init__(
        self,
        api_key: str,
        *,
        model: str = "claude-sonnet-4-5",
        base_url: str = "https://api.anthropic.com",
        api_version: str = "2023-06-01",
        session: requests.Session | None = None,
        timeout: float = 120.0,
        max_attempts: int = 1,
    ) -> None:
        self.model = model
        self._url = f"{base_url.rstrip('/')}/v1/messages"
        self._timeout = timeout
        self._max_attempts = max_attempts
        self._session = session or requests.Session()
        self._headers = {
            "x-api-key": api_key,
            "anthropic-version": api_version,
            "Content-Type": "application/json",
        }

    def complete(self, content: list[dict[str, Any]], *, max_tokens: int) -> str:
        """Send one user turn made of *content* blocks; return the first text block."""
        body = {
            "model": self.model,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": content}],
        }
        try:
            resp = send(
                self._session,
                "POST",
                self._url,
                timeout=self._timeout,
                max_attempts=self._max_attempts,
                headers=self._headers,
                json=body,
            )
        except requests.RequestException as exc:
            raise ExtractionError(f"Extraction API unreachable: {exc}") from exc

        if not resp.ok:
            logger.error("Extraction API error %s: %.500s", resp.status_code, resp.text)
            raise ExtractionError(f"Extraction API returned {resp.status_code}: {resp.text}")

        try:
            data = resp.json()
            text = data["content"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            logger.error("Unexpected extraction response: %.500s", resp.text)
            raise ExtractionError("Invalid response from extraction API") from exc
        if not isinstance(text, str) or not text:
            raise ExtractionError("Invalid response from extraction API")
        return text


class TextExtractor:
    """Turn raw bytes + declared MIME type into plain text.

    Only the PDF and image handlers touch the network, and each makes
    exactly one call.  Failures propagate to the caller unretried.
    """

    def __init__(self, client: AnthropicExtractionClient | None = None) -> None:
        self._client = client
        self._handlers: dict[FileFormat, Callable[[bytes, str, str], str]] = {
            FileFormat.PDF: self._extract_pdf,
            FileFormat.IMAGE: self._extract_image,
            FileFormat.OFFICE_DOCUMENT: self._extract_office,
            FileFormat.PLAIN_TEXT: self._extract_plain,
            FileFormat.UNSUPPORTED: self._reject,
        }

    @classmethod
    def from_settings(cls, settings: Settings) -> TextExtractor:
        client = None
        if settings.anthropic_api_key:
            client = AnthropicExtractionClient(
                settings.anthropic_api_key,
                model=settings.anthropic_model,
                base_url=settings.anthropic_base_url,
                api_version=settings.anthropic_version,
                timeout=settings.request_timeout,
                max_attempts=settings.http_max_attempts,
            )
        return cls(client)

    def extract(self, data: bytes, mime_type: str, file_name: str = "") -> str:
        """Return the text of *data*, dispatched on :func:`classify`.

        Raises
        ------
        UnsupportedFormatError
            No handler exists for *mime_type*.
        ExtractionError
            The extraction API call failed.
        """
        fmt = classify(mime_type)
        logger.debug("Extracting %s as %s (%d bytes)", file_name, fmt.value, len(data))
        return self._handlers[fmt](data, mime_type, file_name)

    # -- handlers -------------------------------------------------------------

    def _extract_pdf(self, data: bytes, mime_type: str, file_name: str) -> str:
        logger.info("Extracting text from PDF %s", file_name)
        block = {
            "type": "document",
            "source": {
                "type": "base64",
                "media_type": "application/pdf",
                "data": base64.b64encode(data).decode("ascii"),
            },
        }
        return self._require_client().complete(
            [block, {"type": "text", "text": PDF_PROMPT}], max_tokens=4096
        )

    def _extract_image(self, data: bytes, mime_type: str, file_name: str) -> str:
        logger.info("Extracting text from image %s", file_name)
        block = {
            "type": "image",
            "source": {
                "type": "base64",
                "media_type": mime_type,
                "data": base64.b64encode(data).decode("ascii"),
            },
        }
        return self._require_client().complete(
            [block, {"type": "text", "text": IMAGE_PROMPT}], max_tokens=2048
        )

    def _extract_office(self, data: bytes, mime_type: str, file_name: str) -> str:
        text = _NON_PRINTABLE.sub(" ", data.decode("utf-8", errors="replace")).strip()
        if len(text) > OFFICE_MIN_CHARS:
            return text
        logger.warning("Raw decode of %s yielded %d chars; using placeholder", file_name, len(text))
        return f"Document: {file_name} (Text extraction not fully supported for this format)"

    def _extract_plain(self, data: bytes, mime_type: str, file_name: str) -> str:
        return data.decode("utf-8", errors="replace")

    def _reject(self, data: bytes, mime_type: str, file_name: str) -> str:
        raise UnsupportedFormatError(f"Unsupported file type: {mime_type or 'unknown'}")

    def _require_client(self) -> AnthropicExtractionClient:
        if self._client is None:
            raise ExtractionError("No extraction API client configured")
        return self._client
