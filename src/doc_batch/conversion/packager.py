import asyncio
import zipfile
from pathlib import Path

from .models import ConversionSuccess


def unique_entry_names(names: list[str]) -> list[str]:
    """Disambiguate repeated names as `name (2).ext`, `name (3).ext`, ..."""
    seen: set[str] = set()
    result: list[str] = []
    for name in names:
        candidate = name
        n = 1
        while candidate in seen:
            n += 1
            p = Path(name)
            candidate = f"{p.stem} ({n}){p.suffix}"
        seen.add(candidate)
        result.append(candidate)
    return result


class ArchivePackager:
    """Writes successful outputs into one maximally compressed ZIP."""

    COMPRESS_LEVEL = 9

    def package_sync(self, outputs: list[ConversionSuccess], archive_path: Path) -> Path:
        names = unique_entry_names([o.suggested_name for o in outputs])
        archive_path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(
            archive_path,
            "w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=self.COMPRESS_LEVEL,
        ) as archive:
            for output, name in zip(outputs, names):
                archive.write(output.content_path, arcname=name)
        return archive_path

    async def package(self, outputs: list[ConversionSuccess], archive_path: Path) -> Path:
        """Build the archive in a worker thread; returns once it is closed on disk."""
        return await asyncio.to_thread(self.package_sync, outputs, archive_path)
