import io

from ..config import Settings
from .exceptions import ExtractionError
from .interfaces import OcrGateway, PdfTextGateway


class PypdfExtractor(PdfTextGateway):
    """Extracts text from PDF using pypdf."""

    def extract_text(self, pdf_bytes: bytes) -> str:
        from pypdf import PdfReader

        try:
            reader = PdfReader(io.BytesIO(pdf_bytes))
            pages = [page.extract_text() or "" for page in reader.pages]
        except Exception as exc:
            raise ExtractionError(f"pypdf extraction failed: {exc}") from exc
        return "\n".join(pages).strip()


class DoclingPdfExtractor(PdfTextGateway):
    """Extracts text from PDF using Docling's DocumentConverter.

    Docling is an optional extra; it is imported on first use.
    """

    def __init__(self) -> None:
        self._converter = None

    def extract_text(self, pdf_bytes: bytes) -> str:
        try:
            from docling.datamodel.base_models import DocumentStream  # type: ignore
            from docling.document_converter import DocumentConverter  # type: ignore
        except ImportError as exc:
            raise ExtractionError("docling engine selected but docling is not installed") from exc

        try:
            if self._converter is None:
                self._converter = DocumentConverter()
            source = DocumentStream(name="upload.pdf", stream=io.BytesIO(pdf_bytes))
            result = self._converter.convert(source)
            doc = result.document
        except Exception as exc:
            raise ExtractionError(f"docling extraction failed: {exc}") from exc

        # plain text export first, markdown as a fallback across versions
        for m in ("export_to_text", "export_to_markdown"):
            fn = getattr(doc, m, None)
            if callable(fn):
                return (fn() or "").strip()
        raise ExtractionError("Docling document lacks a text export method")


class DisabledOcr(OcrGateway):
    """OCR is a recognised capability that is not enabled in this service."""

    @property
    def available(self) -> bool:
        return False

    def image_to_text(self, image_bytes: bytes) -> str:
        raise NotImplementedError("OCR is not enabled")


class PdfExtractorFactory:
    """Creates the PDF text extractor selected by settings."""

    ADAPTERS: dict[str, type[PdfTextGateway]] = {
        "pypdf": PypdfExtractor,
        "docling": DoclingPdfExtractor,
    }

    @classmethod
    def create(cls, settings: Settings) -> PdfTextGateway:
        engine = settings.pdf_engine.lower()
        adapter_cls = cls.ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. Choose from: {list(cls.ADAPTERS)}"
            )
        return adapter_cls()
