"""
Exam Board API Server - REST API for the exam dashboard.
"""
# ruff: noqa: S104
# S104: Development server binding (guarded by __name__ check)

import logging
import mimetypes
from datetime import UTC, datetime

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from api.exam_router import exam_router
from api.response_models import HealthResponse
from lib import config, paths
from lib import db as db_module
from lib.observability import CorrelationIdMiddleware, configure_logging

logger = logging.getLogger(__name__)

# FastAPI app initialization
app = FastAPI(
    title="Exam Board API",
    description="Exam scheduling dashboard: ongoing and upcoming exams with automatic expiry",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(CorrelationIdMiddleware)

app.include_router(exam_router)


# ==== Error Handling ====
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies and path params are client errors (400), not 422."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = first.get("msg", "Invalid request")
    logger.info(f"Rejected {request.method} {request.url.path}: {location} {message}")
    return JSONResponse(
        status_code=400,
        content={"detail": f"{location}: {message}" if location else message},
    )


# ==== DB Startup ====
@app.on_event("startup")
async def ensure_schema_on_startup():
    """Create the exams schema if missing and log DB info at startup."""
    try:
        logger.info("=== Exam Board Startup ===")
        db_module.ensure_schema()
    except Exception as e:
        logger.warning(f"DB startup check failed: {e}")


# ==== Health ====
@app.get("/api/health", response_model=HealthResponse)
async def health():
    return {"status": "healthy", "timestamp": datetime.now(UTC).isoformat()}


# ==== Static client (MUST be last route) ====


def _ui_missing() -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={
            "error": "UI not installed",
            "hint": f"Place index.html in {paths.ui_dir()} or set {paths.APP_ENV_UI}",
            "api": "/api/exams",
        },
    )


@app.get("/")
async def root():
    """Serve the dashboard UI."""
    index_path = paths.ui_dir() / "index.html"
    if index_path.exists():
        return FileResponse(index_path)
    return _ui_missing()


@app.get("/{path:path}")
async def ui_asset(path: str):
    """Serve scripts, styles and sounds that index.html references."""
    if path.startswith("api/"):
        raise HTTPException(status_code=404, detail="Not Found")

    ui_root = paths.ui_dir().resolve()
    if not (ui_root / "index.html").exists():
        return _ui_missing()

    file_path = (ui_root / path).resolve()
    if not file_path.is_relative_to(ui_root) or not file_path.is_file():
        raise HTTPException(status_code=404, detail="Not Found")

    mime_type, _ = mimetypes.guess_type(str(file_path))
    return FileResponse(file_path, media_type=mime_type)


# ==== Main ====


def main(host: str = "0.0.0.0", port: int | None = None):
    """Run the server."""
    configure_logging(config.LOG_LEVEL)
    port = port or config.PORT
    logger.info(f"Server running on http://localhost:{port}")
    logger.info(f"API: http://localhost:{port}/api/exams")
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
