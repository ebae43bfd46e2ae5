from fastapi import FastAPI, File, Form, Request, UploadFile, status
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse

from doc_batch.config import Settings
from doc_batch.conversion import (
    ArchivePackager,
    ArtifactRegistry,
    BatchConversionService,
    HistoryLog,
    RetentionSweeper,
    TextExtractor,
)
from doc_batch.conversion.adapters import DisabledOcr, PdfExtractorFactory
from doc_batch.conversion.exceptions import (
    ArtifactNotFoundError,
    BatchFailedError,
    InputRejectedError,
    PathRejectedError,
    UploadTooLargeError,
)
from doc_batch.logger import Log


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"ok": False, "error": message})


def _reader(upload: UploadFile):
    async def read_chunk(n: int) -> bytes:
        return await upload.read(n)

    return read_chunk


def build_service(settings: Settings) -> tuple[BatchConversionService, ArtifactRegistry, HistoryLog, RetentionSweeper]:
    """Construct the process-wide services once; handlers receive them via app.state."""
    registry = ArtifactRegistry(settings.output_dir)
    history = HistoryLog()
    extractor = TextExtractor(PdfExtractorFactory.create(settings), DisabledOcr())
    service = BatchConversionService(
        extractor,
        ArchivePackager(),
        registry,
        history,
        upload_dir=settings.upload_dir,
        output_dir=settings.output_dir,
        max_files=settings.max_files,
        max_size_bytes=settings.max_size_bytes,
    )
    sweeper = RetentionSweeper(
        [settings.upload_dir, settings.output_dir],
        ttl_seconds=settings.ttl_seconds,
        interval_seconds=settings.sweep_interval_seconds,
        registry=registry,
    )
    return service, registry, history, sweeper


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    Log.configure(settings.log_level)

    app = FastAPI(
        title="Batch Document Conversion Service",
        version=settings.version,
        description=(
            "Converts uploaded PDF, DOCX and TXT documents to TXT or DOCX and "
            "returns a short-lived download link to a file or ZIP archive."
        ),
    )
    service, registry, history, sweeper = build_service(settings)
    app.state.settings = settings
    app.state.service = service
    app.state.registry = registry
    app.state.history = history
    app.state.sweeper = sweeper

    @app.on_event("startup")
    async def _startup() -> None:
        service.ensure_dirs()
        await sweeper.start()
        Log.info(f"Serving conversions from {settings.data_dir}")

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        await sweeper.stop()

    @app.get("/health")
    def health() -> dict[str, str]:
        """Basic health check endpoint."""
        return {"status": "ok"}

    @app.post("/api/convert")
    async def convert(
        request: Request,
        file: list[UploadFile] | None = File(None),
        target: str = Form("txt"),
    ) -> JSONResponse:
        """Convert one or more uploaded files to the target format.

        Accepts multipart/form-data with one or more parts named "file" and an
        optional "target" field (txt or docx). Returns a download URL for the
        single converted file, or for a ZIP of all successful conversions.
        """
        svc: BatchConversionService = request.app.state.service
        uploads = [(f.filename or "upload", _reader(f)) for f in (file or [])]
        try:
            result = await svc.submit(uploads, target)
        except UploadTooLargeError as e:
            return _error(status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, str(e))
        except InputRejectedError as e:
            return _error(status.HTTP_400_BAD_REQUEST, str(e))
        except BatchFailedError as e:
            return _error(status.HTTP_422_UNPROCESSABLE_ENTITY, str(e))
        except Exception:
            Log.error("Batch conversion failed", exc_info=True, target=target)
            return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Conversion failed")
        finally:
            for f in file or []:
                await f.close()

        body: dict[str, object] = {"ok": True, "url": result.url}
        if result.failures:
            body["failures"] = [f.reason for f in result.failures]
        return JSONResponse(content=body)

    @app.get("/download/{download_id}/{name:path}")
    async def download(download_id: str, name: str, request: Request):
        reg: ArtifactRegistry = request.app.state.registry
        try:
            path = reg.resolve(download_id, name)
        except PathRejectedError:
            return PlainTextResponse("Bad path", status_code=status.HTTP_400_BAD_REQUEST)
        except ArtifactNotFoundError:
            return PlainTextResponse("Not found", status_code=status.HTTP_404_NOT_FOUND)
        # keep the file after download; the sweeper reaps it after the TTL
        return FileResponse(path, filename=name.rsplit("/", 1)[-1])

    @app.get("/api/history")
    async def recent_history(request: Request) -> dict[str, object]:
        log: HistoryLog = request.app.state.history
        return {"ok": True, "items": [e.to_public() for e in log.recent()]}

    return app


app = create_app()


def run() -> None:
    """Run an ASGI server using uvicorn.

    Exposes the app at host:port (default 0.0.0.0:3000). Set HOST/PORT env vars to override.
    """
    import uvicorn

    settings = Settings.from_env()
    uvicorn.run("doc_batch.webapi:app", host=settings.host, port=settings.port, reload=settings.reload)


if __name__ == "__main__":
    run()
