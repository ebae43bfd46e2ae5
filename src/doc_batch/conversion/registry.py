import secrets
import threading
from pathlib import Path

from .exceptions import ArtifactNotFoundError, PathRejectedError
from .models import Artifact

ID_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789_-"
ID_LENGTH = 10


def new_download_id(length: int = ID_LENGTH) -> str:
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(length))


class ArtifactRegistry:
    """Maps opaque download ids to artifacts stored in the output directory.

    The id is the only access control on downloads, so it is drawn from a
    cryptographic source. Mappings are kept in memory and guarded by a lock
    because concurrent batches register into the same registry.
    """

    def __init__(self, output_dir: Path) -> None:
        self._base = Path(output_dir).resolve()
        self._lock = threading.Lock()
        self._artifacts: dict[str, Artifact] = {}

    @property
    def output_dir(self) -> Path:
        return self._base

    def register(self, source: Path, display_name: str) -> str:
        """Move `source` to its mapped name and return a fresh download id."""
        with self._lock:
            download_id = new_download_id()
            while download_id in self._artifacts:
                download_id = new_download_id()
            target = self._contained(download_id, display_name)
            self._base.mkdir(parents=True, exist_ok=True)
            Path(source).replace(target)
            self._artifacts[download_id] = Artifact(path=target, display_name=display_name)
        return download_id

    def lookup(self, download_id: str) -> Artifact | None:
        with self._lock:
            return self._artifacts.get(download_id)

    def resolve(self, download_id: str, display_name: str) -> Path:
        """Return the on-disk path for a download.

        Raises:
            PathRejectedError: if the mapped path would leave the output directory.
            ArtifactNotFoundError: if no file exists at the mapped path.
        """
        candidate = self._contained(download_id, display_name)
        if not candidate.is_file():
            raise ArtifactNotFoundError("Not found")
        return candidate

    def prune_missing(self) -> int:
        """Drop mappings whose files no longer exist; returns how many were dropped."""
        with self._lock:
            gone = [k for k, a in self._artifacts.items() if not a.path.exists()]
            for k in gone:
                del self._artifacts[k]
        return len(gone)

    def __len__(self) -> int:
        with self._lock:
            return len(self._artifacts)

    def _contained(self, download_id: str, display_name: str) -> Path:
        candidate = (self._base / f"{download_id}-{display_name}").resolve()
        if self._base not in candidate.parents:
            raise PathRejectedError("Bad path")
        return candidate
