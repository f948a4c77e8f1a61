import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import CORS_ORIGINS, HOST, LOG_LEVEL, PORT, SEED_DEMO_PATIENTS, STATIC_DIR
from app.database import close_storage, init_storage
from app.exceptions import PatientNotFoundError, StorageError, ValidationError
from app.routers import patients, stats
from app.services.demo_seed import seed_demo_patients
from app.services.patient_store import get_patient_store, reset_patient_store

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Patient Intake...")
    await init_storage()
    logger.info("Patient storage initialized")
    if SEED_DEMO_PATIENTS:
        await seed_demo_patients(await get_patient_store())
    yield
    await close_storage()
    reset_patient_store()
    logger.info("Patient Intake shut down")


app = FastAPI(
    title="Patient Intake",
    description="Patient intake submission and provider review dashboard",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(patients.router)
app.include_router(stats.router)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(PatientNotFoundError)
async def not_found_handler(request: Request, exc: PatientNotFoundError):
    return JSONResponse(status_code=404, content={"error": "Patient not found"})


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.debug("Rejected request body on %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Unmatched routes and framework errors use the same ``{error: ...}`` envelope."""
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


def mount_dashboard(app: FastAPI, root: Path) -> None:
    """Serve the dashboard bundle in ``root``, falling back to ``index.html``
    for any non-API path so client-side routes resolve.
    """
    root = Path(root).resolve()

    @app.get("/{full_path:path}", include_in_schema=False)
    async def serve_dashboard(full_path: str):
        if full_path == "api" or full_path.startswith("api/"):
            return JSONResponse(status_code=404, content={"error": "Not found"})
        candidate = (root / full_path).resolve()
        if full_path and candidate.is_relative_to(root) and candidate.is_file():
            return FileResponse(candidate)
        return FileResponse(root / "index.html")


# Serve the dashboard bundle when one is deployed alongside the API
if Path(STATIC_DIR).is_dir():
    mount_dashboard(app, Path(STATIC_DIR))


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=HOST, port=PORT, log_level=LOG_LEVEL.lower())
