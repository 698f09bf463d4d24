"""Stamp text and logo overlays onto PDF pages with pypdf and reportlab.

Every overlay is wrapped in an ``/Artifact`` marked-content section that
carries the stamp kind. Before a page is stamped, sections of the same kind
are removed from it, so stamping an already stamped file replaces the mark
instead of layering a second copy on top.
"""

import io
import logging
from pathlib import Path

from pypdf import PdfReader, PdfWriter, Transformation
from pypdf.errors import PyPdfError
from pypdf.generic import ContentStream, DictionaryObject, NameObject
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from notevault.application.dto.stamp_options import (
    StampIdentity,
    StampKind,
    StampOptions,
    StampPlacement,
)
from notevault.domain.exceptions import MalformedDocument

logger = logging.getLogger(__name__)

_HEADER = b"%PDF-"
_EOF_MARKER = b"%%EOF"
_SCAN_WINDOW = 1024
_STAMP_KEY = "/NVStamp"
_FOOTER_MARGIN = 18.0
# Text encoding of the standard Type1 fonts; anything outside it is drawn as boxes.
_STANDARD_FONT_ENCODING = "cp1252"

# pypdf surfaces structural damage as any of these while walking the file.
_PDF_ERRORS = (PyPdfError, ValueError, KeyError, IndexError, TypeError, AttributeError)


def _section_properties(kind: StampKind) -> DictionaryObject:
    return DictionaryObject(
        {
            NameObject("/Type"): NameObject("/Pagination"),
            NameObject("/Subtype"): NameObject("/Watermark"),
            NameObject(_STAMP_KEY): NameObject(f"/{kind.value}"),
        }
    )


def _is_stamp_section(operands: list, kind: StampKind) -> bool:
    if len(operands) != 2 or operands[0] != "/Artifact":
        return False
    props = operands[1]
    if not isinstance(props, DictionaryObject):
        return False
    return props.get(_STAMP_KEY) == f"/{kind.value}"


def _strip_sections(operations: list, kind: StampKind) -> tuple[list, int]:
    """Drop marked-content sections of ``kind``. Returns (kept ops, sections removed)."""
    kept = []
    removed = 0
    depth = 0
    for operands, operator in operations:
        if depth:
            if operator in (b"BDC", b"BMC"):
                depth += 1
            elif operator == b"EMC":
                depth -= 1
            continue
        if operator == b"BDC" and _is_stamp_section(operands, kind):
            depth = 1
            removed += 1
            continue
        kept.append((operands, operator))
    return kept, removed


class PdfWatermarker:
    """Pure PDF transform: bytes in, bytes out, no I/O.

    Output is byte-identical for identical input and options. Stamp text is
    drawn in the standard Helvetica fonts unless ``font_path`` names a
    TrueType font, which is embedded instead and covers non-Latin names.
    """

    def __init__(self, font_path: str | Path | None = None) -> None:
        self._font_name: str | None = None
        if font_path:
            path = Path(font_path)
            self._font_name = f"NoteVault-{path.stem}"
            pdfmetrics.registerFont(TTFont(self._font_name, str(path)))
            logger.info("Stamp text uses TrueType font %s", path)

    def stamp(
        self,
        source: bytes,
        options: StampOptions,
        identity: StampIdentity | None = None,
    ) -> bytes:
        """Stamp every page of ``source``.

        Owners and admins get the source back untouched when the options ask
        for it.
        """
        if options.skip_if_owner_or_admin and identity is not None and identity.sees_clean_copy:
            return source

        reader = self._open(source)
        try:
            writer = PdfWriter(clone_from=reader)
            if options.kind is StampKind.PRODUCER:
                self._set_producer(writer, options)
            else:
                overlays: dict[tuple[float, float], object] = {}
                for page in writer.pages:
                    self._stamp_page(page, options, overlays)
            out = io.BytesIO()
            writer.write(out)
        except _PDF_ERRORS as e:
            raise MalformedDocument(f"Could not stamp PDF: {e}") from e
        return out.getvalue()

    def inspect(self, data: bytes) -> int:
        """Validate ``data`` as a PDF and return its page count."""
        return len(self._open(data).pages)

    def count_stamps(self, data: bytes, kind: StampKind) -> list[int]:
        """Number of stamp sections of ``kind`` on each page."""
        reader = self._open(data)
        counts = []
        try:
            for page in reader.pages:
                contents = page.get_contents()
                if contents is None:
                    counts.append(0)
                    continue
                counts.append(
                    sum(
                        1
                        for operands, operator in contents.operations
                        if operator == b"BDC" and _is_stamp_section(operands, kind)
                    )
                )
        except _PDF_ERRORS as e:
            raise MalformedDocument(f"Could not read PDF content: {e}") from e
        return counts

    def _open(self, data: bytes) -> PdfReader:
        if not data or _HEADER not in data[:_SCAN_WINDOW]:
            raise MalformedDocument("Missing %PDF- header")
        if _EOF_MARKER not in data[-_SCAN_WINDOW:]:
            raise MalformedDocument("Missing %%EOF marker; file looks truncated")
        try:
            reader = PdfReader(io.BytesIO(data))
            page_count = len(reader.pages)
        except _PDF_ERRORS as e:
            raise MalformedDocument(f"Invalid or corrupted PDF: {e}") from e
        if page_count == 0:
            raise MalformedDocument("PDF has no pages")
        return reader

    def _set_producer(self, writer: PdfWriter, options: StampOptions) -> None:
        metadata = {}
        if options.producer:
            metadata["/Producer"] = options.producer
        if options.creator:
            metadata["/Creator"] = options.creator
        if metadata:
            writer.add_metadata(metadata)

    def _stamp_page(self, page, options: StampOptions, overlays: dict) -> None:
        contents = page.get_contents()
        if contents is not None:
            kept, removed = _strip_sections(contents.operations, options.kind)
            if removed:
                contents.operations = kept
                page.replace_contents(contents)
                logger.debug("Replaced %d existing %s stamp(s) on page", removed, options.kind)

        if options.visible_text is None and options.logo_bytes is None:
            return

        box = page.mediabox
        size = (float(box.width), float(box.height))
        overlay = overlays.get(size)
        if overlay is None:
            overlay = self._build_overlay(size[0], size[1], options)
            overlays[size] = overlay

        left, bottom = float(box.left), float(box.bottom)
        if left or bottom:
            page.merge_transformed_page(overlay, Transformation().translate(left, bottom))
        else:
            page.merge_page(overlay)

    def _font_for(self, text: str, options: StampOptions) -> str:
        if self._font_name is not None:
            return self._font_name
        try:
            text.encode(_STANDARD_FONT_ENCODING)
        except UnicodeEncodeError:
            logger.warning(
                "Stamp text %r has characters the standard fonts cannot draw; configure a TrueType font",
                text,
            )
        return options.font_name

    def _build_overlay(self, width: float, height: float, options: StampOptions):
        """One-page PDF holding the text and logo, wrapped in a tagged section."""
        buf = io.BytesIO()
        c = canvas.Canvas(buf, pagesize=(width, height), invariant=1)

        if options.visible_text:
            c.saveState()
            c.setFillColorRGB(*options.text_color)
            c.setFillAlpha(options.text_opacity)
            c.setFont(self._font_for(options.visible_text, options), options.font_size)
            if options.placement is StampPlacement.FOOTER:
                c.translate(width / 2, _FOOTER_MARGIN)
            else:
                c.translate(width / 2, height / 2)
            c.rotate(options.text_rotation_degrees)
            c.drawCentredString(0, -options.font_size / 3, options.visible_text)
            c.restoreState()

        if options.logo_bytes:
            logo = ImageReader(io.BytesIO(options.logo_bytes))
            img_w, img_h = logo.getSize()
            logo_w = width * options.logo_scale
            logo_h = logo_w * img_h / img_w
            c.saveState()
            c.setFillAlpha(options.logo_opacity)
            c.drawImage(
                logo,
                width - options.logo_corner_margin - logo_w,
                height - options.logo_corner_margin - logo_h,
                width=logo_w,
                height=logo_h,
                mask="auto",
            )
            c.restoreState()

        c.showPage()
        c.save()
        buf.seek(0)

        overlay = PdfReader(buf).pages[0]
        contents = overlay.get_contents()
        contents.operations = (
            [([NameObject("/Artifact"), _section_properties(options.kind)], b"BDC")]
            + list(contents.operations)
            + [([], b"EMC")]
        )
        overlay[NameObject("/Contents")] = contents
        return overlay
