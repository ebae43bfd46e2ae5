from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from urllib.parse import quote


class SourceKind(str, Enum):
    PDF = "pdf"
    DOCX = "docx"
    TXT = "txt"
    IMAGE = "image"
    UNSUPPORTED = "unsupported"


class TargetKind(str, Enum):
    TXT = "txt"
    DOCX = "docx"

    @classmethod
    def parse(cls, value: str) -> "TargetKind | None":
        """Case-insensitive lookup; returns None for unknown targets."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class UploadedFile:
    """An upload staged on disk for the duration of one batch."""

    filename: str
    path: Path
    size_bytes: int

    @property
    def extension(self) -> str:
        return Path(self.filename).suffix.lower()

    @property
    def base_name(self) -> str:
        return Path(Path(self.filename).name).stem


@dataclass(frozen=True)
class ConversionSuccess:
    suggested_name: str
    content_path: Path


@dataclass(frozen=True)
class ConversionFailure:
    reason: str
    source_name: str


ConversionOutcome = ConversionSuccess | ConversionFailure


@dataclass(frozen=True)
class Artifact:
    path: Path
    display_name: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class HistoryEntry:
    download_id: str
    display_name: str
    item_count: int
    target_format: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_public(self) -> dict[str, object]:
        """Summary fields only; never includes document content."""
        return {
            "id": self.download_id,
            "name": self.display_name,
            "count": self.item_count,
            "target": self.target_format,
            "time": int(self.timestamp.timestamp() * 1000),
        }


@dataclass(frozen=True)
class BatchResult:
    download_id: str
    display_name: str
    item_count: int
    target_format: str
    failures: list[ConversionFailure] = field(default_factory=list)

    @property
    def url(self) -> str:
        return f"/download/{self.download_id}/{quote(self.display_name, safe='')}"
