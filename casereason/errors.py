"""
Exception hierarchy for the Case Reasoning Engine.

"No data" is never an error: missing documents, evidence or disclosure
always produce a typed fallback result. Exceptions are reserved for
parse boundaries (caught and turned into data), invalid caller input,
and programming invariants such as an incomplete lens registry.
"""

from __future__ import annotations

from typing import Optional


class CaseReasoningError(Exception):
    """Base class for all engine errors."""
    pass


class DocumentParseError(CaseReasoningError):
    """Raised inside a structured parser when a document cannot be read as that type."""

    def __init__(self, reason: str, document_id: Optional[str] = None):
        self.reason = reason
        self.document_id = document_id
        prefix = f"[{document_id}] " if document_id else ""
        super().__init__(f"{prefix}{reason}")


class LensRegistrationError(CaseReasoningError):
    """Raised when a lens registry is incomplete or a lens is malformed."""

    def __init__(self, practice_area: Optional[str], reason: str):
        self.practice_area = practice_area
        self.reason = reason
        super().__init__(f"[{practice_area or 'registry'}] {reason}")


class CaseInputError(CaseReasoningError):
    """Raised by the calling layer when a case file cannot be loaded or validated."""

    def __init__(self, reason: str, source: Optional[str] = None):
        self.reason = reason
        self.source = source
        super().__init__(f"{source}: {reason}" if source else reason)
