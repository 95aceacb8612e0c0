"""Filename revision parsing used to pick the latest reference document.

Quote PDFs are usually re-issued as ``PR0930 rev.01.pdf``, ``Orcamento_Rev02.pdf``
or ``Planta_v3.pdf``.  These helpers work on plain filenames so they can be
used on attachments and on anything else that carries a name.
"""

from __future__ import annotations

import re
from typing import Optional, Sequence, TypeVar

from .models import AttachedFile

_REV_PATTERN = re.compile(r"rev[\s._-]?(\d+)", re.IGNORECASE)
_VERSION_PATTERN = re.compile(r"v(\d+)", re.IGNORECASE)
_EXTENSION = re.compile(r"\.[^/.]+$")

T = TypeVar("T")


def revision_number(filename: str) -> int:
    """Extract the revision from a filename, 0 when none is marked.

    >>> revision_number("Orcamento_Rev02.pdf")
    2
    >>> revision_number("Planta_v1.pdf")
    1
    >>> revision_number("Orcamento.pdf")
    0
    """
    match = _REV_PATTERN.search(filename) or _VERSION_PATTERN.search(filename)
    if match:
        return int(match.group(1))
    return 0


def strip_extension(filename: str) -> str:
    return _EXTENSION.sub("", filename)


def latest_revision_index(filenames: Sequence[str]) -> Optional[int]:
    """Index of the highest revision; ties go to the last one in sequence."""
    best_index: Optional[int] = None
    best_rev = -1
    for index, name in enumerate(filenames):
        rev = revision_number(name)
        if rev >= best_rev:
            best_rev = rev
            best_index = index
    return best_index


def select_reference_document(files: Sequence[AttachedFile]) -> Optional[AttachedFile]:
    """Pick the attached PDF with the highest revision number."""
    pdfs = [f for f in files if f.is_pdf]
    index = latest_revision_index([f.name for f in pdfs])
    return pdfs[index] if index is not None else None
