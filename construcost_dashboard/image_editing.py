"""Instruction-driven image editing through the hosted image model."""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Optional, Tuple

from .attachments import split_data_uri
from .config import GEMINI_IMAGE_MODEL
from .exceptions import ImageTransformError
from .gemini_client import GeminiClient, inline_part, text_part

logger = logging.getLogger(__name__)


def _decode_image(image: str) -> Tuple[str, bytes]:
    parts = split_data_uri(image)
    mime, payload = parts if parts else ('image/png', image)
    try:
        return mime, base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ImageTransformError("Imagem inválida") from exc


class ImageTransformClient:
    """Send one image plus an instruction, get one edited image back."""

    def __init__(self, client: Optional[GeminiClient] = None, model: Optional[str] = None) -> None:
        self.client = client or GeminiClient()
        self.model = model or GEMINI_IMAGE_MODEL

    def edit(self, image: str, instruction: str) -> str:
        """Return the edited image as a ``data:image/png;base64,`` URI.

        ``image`` may be a data URI or a bare base64 payload.
        """
        if not instruction or not instruction.strip():
            raise ImageTransformError("Descreva a edição desejada")
        mime, data = _decode_image(image)
        if not data:
            raise ImageTransformError("Imagem vazia")

        response_parts = self.client.generate(
            self.model,
            [inline_part(mime, data), text_part(f"Edite esta imagem: {instruction.strip()}")],
            error_cls=ImageTransformError,
        )
        for part in response_parts:
            inline = getattr(part, 'inline_data', None)
            if inline is not None and inline.data:
                logger.info("Received edited image from %s", self.model)
                encoded = base64.b64encode(inline.data).decode('ascii')
                return f"data:image/png;base64,{encoded}"
        logger.error("Image model returned no image part")
        raise ImageTransformError("No image generated in response")
