"""
PDF Extractor — pulls plain text and metadata out of an uploaded PDF.

Uses pdfplumber for text extraction.  Parsing is CPU-bound, so the
async entry point hands it to a worker thread.

Also hosts the two pure text helpers used before interpretation:
preprocess() and extract_key_information().
"""

from __future__ import annotations

import asyncio
import io
import re

import pdfplumber

from award_interpreter.core.config import settings
from award_interpreter.core.constants import PDF_EXTENSIONS, PDF_MIME_TYPES
from award_interpreter.core.logging import get_logger
from award_interpreter.pipeline.errors import (
    ExtractionError,
    SizeLimitError,
    UnsupportedFormatError,
)
from award_interpreter.schemas.document import ExtractedText, KeyInformation, RawDocument

logger = get_logger(__name__)


# ═══════════════════════════════════════════════════════════
#  Text clean-up patterns
# ═══════════════════════════════════════════════════════════

_PAGE_OF_EN = re.compile(r"Page\s+\d+\s+of\s+\d+", re.IGNORECASE)
_PAGE_OF_ZH = re.compile(r"第\s*\d+\s*页\s*共\s*\d+\s*页")
_PAGE_NUMBER_LINE = re.compile(r"^\s*\d+\s*$", re.MULTILINE)
_WHITESPACE = re.compile(r"\s+")
_MISSING_SENTENCE_SPACE = re.compile(r"([.!?])([A-Z])")


# ═══════════════════════════════════════════════════════════
#  Key-information vocabulary
# ═══════════════════════════════════════════════════════════

_DEADLINE_PATTERNS = (
    re.compile(r"截止日期[：:]\s*(\d{4}[-/]\d{1,2}[-/]\d{1,2})"),
    re.compile(r"deadline[：:]\s*(\d{4}[-/]\d{1,2}[-/]\d{1,2})", re.IGNORECASE),
    re.compile(r"(\d{4}年\d{1,2}月\d{1,2}日)"),
    re.compile(r"(\d{1,2}/\d{1,2}/\d{4})"),
)
_SCORE_PATTERNS = (
    re.compile(r"分数|score|points?|积分|分值", re.IGNORECASE),
    re.compile(r"\d+\s*分|\d+\s*points?", re.IGNORECASE),
)
_MEMBER_PATTERNS = (
    re.compile(r"会员|member|参与者|participant", re.IGNORECASE),
    re.compile(r"人数|count|数量"),
)
_ACTIVITY_PATTERNS = (
    re.compile(r"活动|activity|event|会议|meeting", re.IGNORECASE),
    re.compile(r"培训|training|workshop"),
)

KEYWORD_VOCABULARY: tuple[str, ...] = (
    "JCI", "Junior Chamber International", "青年商会",
    "Efficient Star", "Star Point", "National Area Incentive",
    "Network Star", "Experience Star", "Social Star", "Outreach Star",
    "会员", "member", "活动", "activity", "分数", "score",
    "截止日期", "deadline", "标准", "standard", "指标", "indicator",
)


class PdfTextExtractor:
    """Extract text from PDF uploads, enforcing type and size limits."""

    def __init__(self, max_bytes: int | None = None) -> None:
        self.max_bytes = max_bytes if max_bytes is not None else settings.MAX_DOCUMENT_BYTES

    # ─── Gatekeeping ───────────────────────────────────

    @staticmethod
    def is_pdf(document: RawDocument) -> bool:
        """Accept on declared MIME type, else on filename extension."""
        content_type = (document.content_type or "").split(";")[0].strip().lower()
        if content_type in PDF_MIME_TYPES:
            return True
        return document.filename.lower().endswith(PDF_EXTENSIONS)

    def check(self, document: RawDocument) -> None:
        if not self.is_pdf(document):
            raise UnsupportedFormatError(
                f"Unsupported document type for '{document.filename}', upload a PDF",
                details={"content_type": document.content_type},
            )
        if document.size > self.max_bytes:
            raise SizeLimitError(
                f"'{document.filename}' is {document.size} bytes, limit is {self.max_bytes}",
                size=document.size,
                limit=self.max_bytes,
            )

    # ─── Extraction ────────────────────────────────────

    async def extract(self, document: RawDocument) -> ExtractedText:
        """Validate the upload, then parse it off the event loop."""
        self.check(document)
        return await asyncio.to_thread(self._extract_sync, document)

    def _extract_sync(self, document: RawDocument) -> ExtractedText:
        try:
            with pdfplumber.open(io.BytesIO(document.content)) as pdf:
                page_texts = [page.extract_text() or "" for page in pdf.pages]
                metadata = pdf.metadata or {}
        except Exception as exc:
            raise ExtractionError(
                f"Could not read PDF '{document.filename}': {exc}",
            ) from exc

        text = "\n".join(page_texts).strip()
        creation_date = metadata.get("CreationDate")

        logger.info(
            "PDF extracted",
            filename=document.filename,
            pages=len(page_texts),
            text_length=len(text),
        )

        return ExtractedText(
            text=text,
            pages=len(page_texts),
            title=metadata.get("Title") or None,
            author=metadata.get("Author") or None,
            creation_date=str(creation_date) if creation_date else None,
            file_size=document.size,
        )

    # ─── Pure helpers ──────────────────────────────────

    @staticmethod
    def preprocess(text: str) -> str:
        """Strip running footers and page numbers, collapse whitespace, fix sentence joins."""
        cleaned = _PAGE_OF_EN.sub("", text)
        cleaned = _PAGE_OF_ZH.sub("", cleaned)
        # Page-number lines only exist before whitespace is collapsed.
        cleaned = _PAGE_NUMBER_LINE.sub("", cleaned)
        cleaned = _WHITESPACE.sub(" ", cleaned)
        cleaned = _MISSING_SENTENCE_SPACE.sub(r"\1 \2", cleaned)
        return cleaned.strip()

    @staticmethod
    def extract_key_information(text: str) -> KeyInformation:
        lowered = text.lower()
        keywords: list[str] = []
        for keyword in KEYWORD_VOCABULARY:
            if keyword.lower() in lowered and keyword not in keywords:
                keywords.append(keyword)

        return KeyInformation(
            has_deadline=any(p.search(text) for p in _DEADLINE_PATTERNS),
            has_score_info=any(p.search(text) for p in _SCORE_PATTERNS),
            has_member_info=any(p.search(text) for p in _MEMBER_PATTERNS),
            has_activity_info=any(p.search(text) for p in _ACTIVITY_PATTERNS),
            keywords=keywords,
        )
