import asyncio
import secrets
import shutil
import time
import uuid
from pathlib import Path
from typing import Awaitable, Callable

from ..logger import Log
from .codecs import TextExtractor, encode
from .exceptions import (
    BatchFailedError,
    ConversionError,
    EncodingError,
    ExtractionError,
    InputRejectedError,
    NoTextExtractedError,
    UnsupportedSourceError,
    UnsupportedTargetError,
    UploadTooLargeError,
)
from .history import HistoryLog
from .models import (
    BatchResult,
    ConversionFailure,
    ConversionOutcome,
    ConversionSuccess,
    HistoryEntry,
    SourceKind,
    TargetKind,
    UploadedFile,
)
from .packager import ArchivePackager
from .registry import ArtifactRegistry
from .sniffer import check_source, check_upload_name

Reader = Callable[[int], Awaitable[bytes]]

CHUNK = 1024 * 1024


def _remove_if_exists(path: Path) -> bool:
    try:
        path.unlink()
        return True
    except FileNotFoundError:
        return False
    except OSError as exc:
        Log.warning(f"Could not remove {path}: {exc}")
        return False


def _write_bytes(path: Path, payload: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as f:
        f.write(payload)


class BatchConversionService:
    """Core domain service converting a batch of uploads into one download.

    This service is framework-agnostic. Files in a batch are converted one
    after another; blocking parsing, encoding and archiving run in worker
    threads so other batches keep progressing on the event loop.
    """

    def __init__(
        self,
        extractor: TextExtractor,
        packager: ArchivePackager,
        registry: ArtifactRegistry,
        history: HistoryLog,
        *,
        upload_dir: Path,
        output_dir: Path,
        max_files: int = 10,
        max_size_bytes: int = 25 * 1024 * 1024,
    ) -> None:
        self._extractor = extractor
        self._packager = packager
        self._registry = registry
        self._history = history
        self._upload_dir = Path(upload_dir)
        self._output_dir = Path(output_dir)
        self._max_files = max_files
        self._max_size_bytes = max_size_bytes

    def ensure_dirs(self) -> None:
        for d in (self._upload_dir, self._output_dir):
            d.mkdir(parents=True, exist_ok=True)

    # API used by HTTP controller to run a batch from upload streams
    async def submit(self, uploads: list[tuple[str, Reader]], target: str) -> BatchResult:
        """Validate and stage uploads, then run the batch.

        Nothing is stored unless every upload passes the count and extension
        checks. A failure while staging removes whatever was already staged.
        """
        if not uploads:
            raise InputRejectedError("No file uploaded")
        if len(uploads) > self._max_files:
            raise InputRejectedError(f"Too many files (max {self._max_files})")
        for filename, _ in uploads:
            check_upload_name(filename)

        staged: list[UploadedFile] = []
        try:
            for filename, reader in uploads:
                staged.append(await self.stage_upload(filename, reader))
        except BaseException:
            await asyncio.to_thread(self._discard_uploads, staged)
            raise
        return await self.run_batch(staged, target)

    async def stage_upload(self, filename: str, reader: Reader) -> UploadedFile:
        """Stream an upload to the staging area, enforcing the size limit."""
        ext = check_upload_name(filename)
        self._upload_dir.mkdir(parents=True, exist_ok=True)
        input_path = self._upload_dir / f"{int(time.time() * 1000)}-{secrets.token_urlsafe(6)}{ext}"

        size_bytes = 0
        try:
            with input_path.open("wb") as f_out:
                while True:
                    chunk = await reader(CHUNK)
                    if not chunk:
                        break
                    b = bytes(chunk)
                    size_bytes += len(b)
                    if size_bytes > self._max_size_bytes:
                        raise UploadTooLargeError(
                            f"File too large (max {self._max_size_bytes // (1024 * 1024)}MB)"
                        )
                    f_out.write(b)
        except BaseException:
            _remove_if_exists(input_path)
            raise
        return UploadedFile(filename=filename, path=input_path, size_bytes=size_bytes)

    async def run_batch(self, files: list[UploadedFile], target: str) -> BatchResult:
        """Convert every file, then expose one file or one archive for download.

        Source files and intermediate outputs are removed on every exit path.
        """
        if not files:
            raise InputRejectedError("No file uploaded")
        target_label = (target or "").strip().lower()
        target_kind = TargetKind.parse(target_label)
        work_dir = self._output_dir / f".batch-{uuid.uuid4().hex}"
        Log.info("Batch started", files=len(files), target=target_label or "<none>")

        try:
            outcomes: list[ConversionOutcome] = []
            for index, uploaded in enumerate(files):
                outcomes.append(await self._convert_one(index, uploaded, target_kind, target_label, work_dir))

            successes = [o for o in outcomes if isinstance(o, ConversionSuccess)]
            failures = [o for o in outcomes if isinstance(o, ConversionFailure)]
            for failure in failures:
                Log.warning("Conversion failed", source=failure.source_name, reason=failure.reason)

            if not successes:
                first = failures[0].reason if failures else "Conversion failed"
                raise BatchFailedError(first, failures)

            if len(successes) == 1:
                artifact_path = successes[0].content_path
                display_name = successes[0].suggested_name
            else:
                display_name = f"converted-{int(time.time() * 1000)}.zip"
                artifact_path = await self._packager.package(successes, work_dir / display_name)
                await asyncio.to_thread(self._discard_outputs, successes)

            download_id = await asyncio.to_thread(self._registry.register, artifact_path, display_name)
            self._history.record(
                HistoryEntry(
                    download_id=download_id,
                    display_name=display_name,
                    item_count=len(successes),
                    target_format=target_label,
                )
            )
            Log.info("Batch finished", converted=len(successes), failed=len(failures), download_id=download_id)
            return BatchResult(
                download_id=download_id,
                display_name=display_name,
                item_count=len(successes),
                target_format=target_label,
                failures=failures,
            )
        finally:
            await asyncio.to_thread(self._discard_uploads, files)
            await asyncio.to_thread(shutil.rmtree, work_dir, True)

    async def _convert_one(
        self,
        index: int,
        uploaded: UploadedFile,
        target_kind: TargetKind | None,
        target_label: str,
        work_dir: Path,
    ) -> ConversionOutcome:
        name = uploaded.filename
        try:
            data = await asyncio.to_thread(uploaded.path.read_bytes)
            kind = check_source(data, name)
            if kind is SourceKind.IMAGE and not self._extractor.ocr_available:
                raise UnsupportedSourceError(f"OCR not enabled for images: {name}")
            if target_kind is None:
                raise UnsupportedTargetError(f"Unsupported target: {target_label}")

            text = await asyncio.to_thread(self._extractor.extract, kind, data, name)
            payload = await asyncio.to_thread(encode, text, target_kind)

            suggested = f"{uploaded.base_name}.{target_kind.value}"
            out_path = work_dir / f"{index}-{suggested}"
            await asyncio.to_thread(_write_bytes, out_path, payload)
            return ConversionSuccess(suggested_name=suggested, content_path=out_path)
        except NoTextExtractedError as exc:
            return ConversionFailure(reason=str(exc), source_name=name)
        except ExtractionError as exc:
            Log.warning("Extraction error", source=name, detail=exc)
            return ConversionFailure(reason=f"Could not extract text: {name}", source_name=name)
        except EncodingError as exc:
            Log.warning("Encoding error", source=name, detail=exc)
            return ConversionFailure(reason=f"Could not write {target_label.upper()}: {name}", source_name=name)
        except ConversionError as exc:
            return ConversionFailure(reason=str(exc), source_name=name)

    @staticmethod
    def _discard_uploads(files: list[UploadedFile]) -> None:
        for f in files:
            _remove_if_exists(f.path)

    @staticmethod
    def _discard_outputs(outputs: list[ConversionSuccess]) -> None:
        for o in outputs:
            _remove_if_exists(o.content_path)
