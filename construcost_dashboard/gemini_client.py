"""Thin wrapper over the ``google-genai`` client for one-shot generation."""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence

from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types

from .config import GEMINI_API_BASE, GEMINI_API_KEY, HTTP_TIMEOUT_SECONDS
from .exceptions import GeminiServiceError

logger = logging.getLogger(__name__)


def text_part(text: str) -> genai_types.Part:
    return genai_types.Part.from_text(text=text)


def inline_part(mime_type: str, data: bytes) -> genai_types.Part:
    return genai_types.Part.from_bytes(data=data, mime_type=mime_type)


class GeminiClient:
    """Sends one ``generate_content`` request and returns the response parts.

    Every failure (API status, transport, empty candidates) is raised as
    ``error_cls`` so callers see a single opaque error type.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[Any] = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else GEMINI_API_KEY
        self.timeout = timeout or HTTP_TIMEOUT_SECONDS
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            # HttpOptions.timeout is in milliseconds
            options = {'timeout': int(self.timeout * 1000)}
            if GEMINI_API_BASE:
                options['base_url'] = GEMINI_API_BASE
            self._client = genai.Client(
                api_key=self.api_key, http_options=genai_types.HttpOptions(**options)
            )
        return self._client

    def generate(
        self,
        model: str,
        parts: Sequence[genai_types.Part],
        response_mime_type: Optional[str] = None,
        error_cls: type = GeminiServiceError,
    ) -> List[Any]:
        if not self.api_key:
            raise error_cls("Gemini API key is not configured")

        config = None
        if response_mime_type:
            config = genai_types.GenerateContentConfig(response_mime_type=response_mime_type)
        contents = [genai_types.Content(role='user', parts=list(parts))]

        logger.info("Calling %s with %d part(s)", model, len(parts))
        try:
            response = self.client.models.generate_content(model=model, contents=contents, config=config)
        except genai_errors.APIError as exc:
            raise error_cls(f"Gemini API error: {exc.code}") from exc
        except Exception as exc:
            raise error_cls(f"Failed to contact Gemini: {exc}") from exc

        try:
            content_parts = response.candidates[0].content.parts
        except (IndexError, KeyError, TypeError, AttributeError) as exc:
            raise error_cls("Gemini response did not contain any content") from exc
        if not content_parts:
            raise error_cls("Gemini response did not contain any content")
        return list(content_parts)
