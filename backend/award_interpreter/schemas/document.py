"""
Transient document types produced and consumed by the extraction stage.

None of these are persisted; downstream stages only keep a hash of the
extracted text.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class RawDocument:
    """An uploaded binary document as received from the caller."""

    content: bytes
    filename: str
    content_type: str | None = None

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class ExtractedText:
    """
    Plain text pulled from every page of a document, in page order.

    Args:
        text: Page texts joined with newlines, stripped.
        pages: Number of pages in the document.
        title: Embedded document title, if any.
        author: Embedded document author, if any.
        creation_date: Raw embedded creation date string, if any.
        file_size: Size of the source payload in bytes.
    """

    text: str
    pages: int
    title: str | None = None
    author: str | None = None
    creation_date: str | None = None
    file_size: int = 0


@dataclass
class KeyInformation:
    """Lightweight pattern-match signals over extracted text."""

    has_deadline: bool = False
    has_score_info: bool = False
    has_member_info: bool = False
    has_activity_info: bool = False
    keywords: list[str] = field(default_factory=list)
