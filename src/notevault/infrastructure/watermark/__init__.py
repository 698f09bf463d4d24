"""PDF watermark engine."""

from notevault.infrastructure.watermark.pdf_watermarker import PdfWatermarker

__all__ = ["PdfWatermarker"]
