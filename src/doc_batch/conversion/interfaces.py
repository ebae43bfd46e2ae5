from typing import Protocol


class PdfTextGateway(Protocol):
    def extract_text(self, pdf_bytes: bytes) -> str:
        """Extract plain text from PDF bytes synchronously.
        This is a blocking call; callers should offload to threads if needed.
        """


class OcrGateway(Protocol):
    @property
    def available(self) -> bool:
        ...

    def image_to_text(self, image_bytes: bytes) -> str:
        ...
