"""
Content-based format detection for uploads.

The claimed extension only selects which check to run; the bytes decide
whether the file really is what it claims to be.
"""

import io
import zipfile
from pathlib import Path

from .exceptions import InputRejectedError, SourceValidationError, UnsupportedSourceError
from .models import SourceKind

IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".bmp", ".tif", ".tiff"}
ALLOWED_EXTENSIONS = {".pdf", ".docx", ".txt"} | IMAGE_EXTENSIONS

PDF_SIGNATURE = b"%PDF"
ZIP_SIGNATURE = b"PK\x03\x04"

ZIP_MIME = "application/zip"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
ALLOWED_DOCX_MIME = {ZIP_MIME, DOCX_MIME}


def check_upload_name(filename: str) -> str:
    """Gate an upload on its extension before any bytes are stored.

    Returns the lower-cased extension.
    """
    ext = Path(filename or "").suffix.lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise InputRejectedError("Only PDF/DOCX/TXT files are supported")
    return ext


def looks_like_text(data: bytes) -> bool:
    return b"\x00" not in data


def detect_zip_mime(data: bytes) -> str | None:
    """Best-effort MIME for ZIP-family content, None when not a ZIP at all."""
    if not data.startswith(ZIP_SIGNATURE):
        return None
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            names = set(archive.namelist())
            if "word/document.xml" in names:
                return DOCX_MIME
            if "[Content_Types].xml" in names:
                types = archive.read("[Content_Types].xml")
                if b"wordprocessingml.document.main+xml" in types:
                    return DOCX_MIME
    except (zipfile.BadZipFile, KeyError, OSError):
        pass
    return ZIP_MIME


def classify(data: bytes, claimed_extension: str) -> SourceKind:
    ext = claimed_extension.lower()
    if ext and not ext.startswith("."):
        ext = "." + ext
    if ext == ".txt":
        return SourceKind.TXT if looks_like_text(data) else SourceKind.UNSUPPORTED
    if ext == ".pdf":
        return SourceKind.PDF if data.startswith(PDF_SIGNATURE) else SourceKind.UNSUPPORTED
    if ext == ".docx":
        return SourceKind.DOCX if detect_zip_mime(data) in ALLOWED_DOCX_MIME else SourceKind.UNSUPPORTED
    if ext in IMAGE_EXTENSIONS:
        return SourceKind.IMAGE
    return SourceKind.UNSUPPORTED


def check_source(data: bytes, filename: str) -> SourceKind:
    """Classify a staged upload, raising a per-file diagnostic on mismatch.

    Images classify successfully here; whether they can be converted is
    decided by the OCR capability downstream.
    """
    ext = Path(filename).suffix.lower()
    kind = classify(data, ext)
    if kind is not SourceKind.UNSUPPORTED:
        return kind
    if ext == ".txt":
        raise SourceValidationError(f"Not a text file: {filename}")
    if ext == ".pdf":
        raise SourceValidationError(f"Invalid PDF file: {filename}")
    if ext == ".docx":
        raise SourceValidationError(f"Not a DOCX file: {filename}")
    raise UnsupportedSourceError(f"Unsupported source: {filename}")
