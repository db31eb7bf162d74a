"""
ExtractTextStep — turns the uploaded PDF into cleaned text.

Rejections (wrong type, too large, unreadable) propagate as
ExtractionError subclasses and stop the pipeline.
"""

from __future__ import annotations

from award_interpreter.core.logging import get_logger
from award_interpreter.pipeline.context import PipelineContext, StepResult
from award_interpreter.pipeline.step import PipelineStep
from award_interpreter.processing.extractors.pdf_extractor import PdfTextExtractor

logger = get_logger(__name__)


class ExtractTextStep(PipelineStep):
    """Extract and preprocess document text."""

    name = "extract_text"
    description = "Extract text from the uploaded PDF"

    def __init__(self, extractor: PdfTextExtractor) -> None:
        self.extractor = extractor

    async def execute(self, ctx: PipelineContext) -> StepResult:
        started_at = self._now()

        extracted = await self.extractor.extract(ctx.document)
        ctx.extracted = extracted
        ctx.cleaned_text = self.extractor.preprocess(extracted.text)
        ctx.key_information = self.extractor.extract_key_information(ctx.cleaned_text)

        if not ctx.cleaned_text:
            logger.warning("Document produced no text", filename=ctx.filename)
            ctx.add_error("Document produced no extractable text")

        return self._success(started_at, metadata={
            "pages": extracted.pages,
            "raw_length": len(extracted.text),
            "cleaned_length": len(ctx.cleaned_text),
            "keywords": ctx.key_information.keywords,
        })
