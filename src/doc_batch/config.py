import os
from dataclasses import dataclass
from pathlib import Path

from . import __version__


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Process configuration, read once from the environment at startup."""

    host: str = "0.0.0.0"
    port: int = 3000
    reload: bool = False
    data_dir: Path = Path("./data").resolve()
    max_files: int = 10
    max_size_mb: int = 25
    ttl_minutes: int = 30
    sweep_interval_minutes: int = 10
    log_level: str = "info"
    pdf_engine: str = "pypdf"
    version: str = __version__

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "3000")),
            reload=_env_flag("RELOAD", "false"),
            data_dir=Path(os.getenv("DATA_DIR", "./data")).resolve(),
            max_files=int(os.getenv("MAX_FILES", "10")),
            max_size_mb=int(os.getenv("MAX_SIZE_MB", "25")),
            ttl_minutes=int(os.getenv("CLEAN_TTL_MIN", "30")),
            sweep_interval_minutes=int(os.getenv("CLEAN_INTERVAL_MIN", "10")),
            log_level=os.getenv("LOG_LEVEL", "info"),
            pdf_engine=os.getenv("PDF_ENGINE", "pypdf"),
            version=os.getenv("DOC_SERVICE_VERSION", __version__),
        )

    @property
    def upload_dir(self) -> Path:
        return self.data_dir / "uploads"

    @property
    def output_dir(self) -> Path:
        return self.data_dir / "converted"

    @property
    def max_size_bytes(self) -> int:
        return self.max_size_mb * 1024 * 1024

    @property
    def ttl_seconds(self) -> float:
        return self.ttl_minutes * 60.0

    @property
    def sweep_interval_seconds(self) -> float:
        return self.sweep_interval_minutes * 60.0
