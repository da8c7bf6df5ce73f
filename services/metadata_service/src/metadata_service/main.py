import datetime as dt
import logging
from pathlib import Path

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, HTMLResponse, JSONResponse
from starlette.requests import ClientDisconnect

from . import __version__
from .config import Settings, get_settings, settings
from .errors import InternalError, MalformedUpload, UploadError
from .logging_config import setup_logging
from .pages import (
    AVAILABLE_ENDPOINTS,
    HEALTH_URL,
    INFO_URL,
    TEST_FORM_URL,
    UPLOAD_URL,
    api_info,
    render_test_form,
)
from .schemas import (
    ErrorResponse,
    FileMetadata,
    HealthResponse,
    NotFoundResponse,
    UploadLimits,
)
from .upload import read_upload

logger = logging.getLogger(__name__)

app = FastAPI(title="File Metadata Microservice", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(UploadError)
async def _upload_error(request: Request, exc: UploadError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(Exception)
async def _unhandled_error(request: Request, exc: Exception):
    logger.error("Unexpected error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.on_event("startup")
def _startup():
    logger.info("%s started", settings.service_name)
    for endpoint in AVAILABLE_ENDPOINTS:
        logger.info("API endpoint: %s", endpoint)
    logger.info(
        'Upload field name: "%s", maximum file size: %s',
        settings.field_name,
        settings.max_file_size_label,
    )
    logger.info("Uploads are parsed in memory, files are never written to disk")


@app.get("/", response_class=HTMLResponse)
def index(settings: Settings = Depends(get_settings)):
    index_path = Path(settings.static_dir) / "index.html"
    if not index_path.exists():
        return HTMLResponse(f"<h1>{settings.service_name}</h1><p>index.html not found</p>")
    return FileResponse(index_path, media_type="text/html")


_UPLOAD_BODY = {
    "requestBody": {
        "required": True,
        "content": {
            "multipart/form-data": {
                "schema": {
                    "type": "object",
                    "properties": {"upfile": {"type": "string", "format": "binary"}},
                    "required": ["upfile"],
                }
            }
        },
    }
}


@app.post(
    UPLOAD_URL,
    response_model=FileMetadata,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    openapi_extra=_UPLOAD_BODY,
)
async def analyse_file(request: Request, settings: Settings = Depends(get_settings)):
    try:
        meta = await read_upload(
            request,
            field_name=settings.field_name,
            max_file_size=settings.max_file_size,
            max_files=settings.max_files,
            limit_label=settings.max_file_size_label,
        )
    except UploadError as e:
        logger.info("Upload rejected: %s", e.message)
        raise
    except ClientDisconnect as e:
        logger.info("Client disconnected during upload")
        raise MalformedUpload("Client disconnected") from e
    except Exception as e:
        logger.exception("Error processing file upload")
        raise InternalError() from e

    logger.info(
        "File uploaded: name=%r type=%s size=%d field=%s",
        meta.name,
        meta.type,
        meta.size,
        settings.field_name,
    )
    return meta


@app.get(HEALTH_URL, response_model=HealthResponse)
def health(settings: Settings = Depends(get_settings)):
    return HealthResponse(
        timestamp=dt.datetime.now(dt.timezone.utc),
        service=settings.service_name,
        upload_limits=UploadLimits(
            max_file_size=settings.max_file_size_label,
            max_files=settings.max_files,
            field_name=settings.field_name,
        ),
    )


@app.get(INFO_URL)
def info(settings: Settings = Depends(get_settings)):
    return api_info(settings)


@app.get(TEST_FORM_URL, response_class=HTMLResponse)
def upload_form(settings: Settings = Depends(get_settings)):
    return render_test_form(settings)


# must stay the last /api route
@app.get("/api/{path:path}", response_model=NotFoundResponse, status_code=404)
def api_not_found(path: str):
    return NotFoundResponse(error="API endpoint not found", available=AVAILABLE_ENDPOINTS)


def main() -> None:
    setup_logging(settings.log_level)
    logger.info("Starting %s on %s:%s", settings.service_name, settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
