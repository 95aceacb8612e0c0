"""AI-assisted extraction of budget fields from attached documents."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .attachments import decode_data_uri, mime_for_attachment
from .config import GEMINI_TEXT_MODEL
from .exceptions import ExtractionError
from .gemini_client import GeminiClient, inline_part, text_part
from .models import ZERO, AttachedFile, to_amount, to_discount

logger = logging.getLogger(__name__)

INLINE_MIME_TYPES = {'application/pdf', 'image/png', 'image/jpeg', 'image/webp', 'text/plain'}

_EXTENSION_MIME = (
    ('.pdf', 'application/pdf'),
    ('.png', 'image/png'),
    ('.jpg', 'image/jpeg'),
    ('.jpeg', 'image/jpeg'),
    ('.csv', 'text/plain'),
    ('.txt', 'text/plain'),
)

EXTRACTION_PROMPT = """Você é um assistente especializado em orçamentos de engenharia civil (ConstruCost).
A planilha mestra do usuário tem as colunas: Data, Nome Cliente, Descrição Serviços,
Valor Orçamento, Desconto, Pedido e Solicitante.

Retorne APENAS um objeto JSON com os campos:
- clientName: empresa cliente.
- serviceDescription: código do tipo "PRxxxx"/"CC xxxx" se existir, senão o título do serviço
  ou o nome limpo do arquivo principal.
- budgetAmount: valor total da proposta (número).
- date: data do documento (YYYY-MM-DD).
- requester: pessoa citada como solicitante ou responsável.
- orderNumber: número do Pedido de Compra (PO) se o documento for um pedido; caso contrário null.
- discount: somente se houver linha explícita de "Desconto", "Abatimento" ou "Dedução";
  caso contrário 0. Não infira descontos por diferença de valores.

Priorize o documento mais recente se houver vários."""


@dataclass
class DocumentInput:
    name: str
    data: bytes
    mime_type: str = 'application/octet-stream'

    @classmethod
    def from_attachment(cls, attachment: AttachedFile) -> "DocumentInput":
        return cls(
            name=attachment.name,
            data=decode_data_uri(attachment.url) or b'',
            mime_type=mime_for_attachment(attachment),
        )


@dataclass
class ExtractedBudget:
    """Sparse set of field suggestions returned by the extraction service."""

    client_name: Optional[str] = None
    service_description: Optional[str] = None
    budget_amount: Optional[Decimal] = None
    date: Optional[str] = None
    discount: Decimal = ZERO
    requester: Optional[str] = None
    order_number: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ExtractedBudget":
        if not isinstance(payload, dict):
            raise ValueError("Extraction response must be a JSON object")
        amount = payload.get('budgetAmount')
        return cls(
            client_name=_clean_text(payload.get('clientName')),
            service_description=_clean_text(payload.get('serviceDescription')),
            budget_amount=to_amount(amount) if amount not in (None, '') else None,
            date=_clean_date(payload.get('date')),
            discount=to_discount(payload.get('discount')),
            requester=_clean_text(payload.get('requester')),
            order_number=_clean_text(payload.get('orderNumber')),
        )


def _clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    if not text or text.lower() in {'null', 'none'}:
        return None
    return text


def _clean_date(value: Any) -> Optional[str]:
    text = _clean_text(value)
    if text is None:
        return None
    try:
        return date.fromisoformat(text[:10]).isoformat()
    except ValueError:
        logger.debug("Ignoring non-ISO date from extraction: %r", text)
        return None


def resolve_mime_type(name: str, declared: str) -> str:
    lowered = name.lower()
    for extension, mime in _EXTENSION_MIME:
        if lowered.endswith(extension):
            return mime
    return declared


def build_parts(documents: Sequence[DocumentInput]) -> List[Dict[str, Any]]:
    parts = [text_part(EXTRACTION_PROMPT)]
    for doc in documents:
        mime = resolve_mime_type(doc.name, doc.mime_type)
        parts.append(text_part(f"Nome do Arquivo: {doc.name}"))
        if mime in INLINE_MIME_TYPES and doc.data:
            parts.append(inline_part(mime, doc.data))
    return parts


class DocumentExtractionClient:
    """Send documents to the model and parse the constrained JSON answer."""

    def __init__(self, client: Optional[GeminiClient] = None, model: Optional[str] = None) -> None:
        self.client = client or GeminiClient()
        self.model = model or GEMINI_TEXT_MODEL

    def extract(self, documents: Iterable[DocumentInput]) -> ExtractedBudget:
        docs = list(documents)
        if not docs:
            raise ExtractionError("No documents to analyse")
        try:
            response_parts = self.client.generate(
                self.model,
                build_parts(docs),
                response_mime_type='application/json',
                error_cls=ExtractionError,
            )
        except ExtractionError as exc:
            logger.error("Extraction request failed: %s", exc)
            raise

        text = ''.join(getattr(p, 'text', None) or '' for p in response_parts)
        if not text.strip():
            raise ExtractionError("Sem resposta da IA")
        try:
            result = ExtractedBudget.from_payload(json.loads(text))
        except ValueError as exc:
            logger.error("Extraction response was not valid JSON: %s", exc)
            raise ExtractionError("Resposta da IA não é um JSON válido") from exc
        logger.info("Extracted fields from %d document(s)", len(docs))
        return result

    def extract_from_attachments(self, files: Sequence[AttachedFile]) -> ExtractedBudget:
        return self.extract(DocumentInput.from_attachment(f) for f in files)
