import asyncio
import time
from pathlib import Path

from ..logger import Log
from .registry import ArtifactRegistry


def remove_expired(directory: Path, ttl_seconds: float, now: float | None = None) -> int:
    """Delete regular files in `directory` older than the TTL.

    Errors on individual entries or on the directory itself are logged and
    skipped. Returns the number of files removed.
    """
    now = time.time() if now is None else now
    removed = 0
    try:
        entries = list(Path(directory).iterdir())
    except OSError as exc:
        Log.debug(f"Sweep skipped {directory}: {exc}")
        return 0
    for p in entries:
        try:
            st = p.stat()
            if p.is_file() and now - st.st_mtime > ttl_seconds:
                p.unlink()
                removed += 1
        except OSError as exc:
            Log.debug(f"Sweep could not remove {p}: {exc}")
    return removed


class RetentionSweeper:
    """Periodically reaps expired uploads and artifacts.

    Runs once when started and then every `interval_seconds`, independent of
    request traffic.
    """

    def __init__(
        self,
        directories: list[Path],
        *,
        ttl_seconds: float,
        interval_seconds: float,
        registry: ArtifactRegistry | None = None,
    ) -> None:
        self._directories = [Path(d) for d in directories]
        self._ttl = ttl_seconds
        self._interval = interval_seconds
        self._registry = registry
        self._task: asyncio.Task | None = None

    def sweep_once(self, now: float | None = None) -> int:
        removed = 0
        for d in self._directories:
            removed += remove_expired(d, self._ttl, now=now)
        if self._registry is not None:
            pruned = self._registry.prune_missing()
            if pruned:
                Log.debug(f"Pruned {pruned} download mappings")
        if removed:
            Log.info(f"Sweep removed {removed} expired files")
        return removed

    async def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._loop())

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def _loop(self) -> None:
        while True:
            try:
                await asyncio.to_thread(self.sweep_once)
            except Exception:
                Log.error("Sweep failed", exc_info=True)
            await asyncio.sleep(self._interval)
