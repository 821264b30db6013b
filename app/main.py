"""
Book tracker backend: accounts, bearer-token auth, personal book collection,
catalog search, and reading analysis.

Configures logging, CORS, error handlers (every error body carries a
"Message" field), optional DB init, and mounts the routers.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import FRONTEND_URL, LOG_LEVEL, SKIP_DB_INIT
from database import init_db
from errors import ServiceError, StorageError, ValidationError
from auth import router as auth_router
from users import router as users_router
from books import router as books_router
from analysis import router as analysis_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Create DB tables if not skipping
if not SKIP_DB_INIT:
    init_db()

app = FastAPI(
    title="Book Tracker Backend",
    description="Accounts, personal book collection, Google Books search, reading analysis.",
)

# CORS: explicit origin only, bearer tokens travel in the Authorization header
app.add_middleware(
    CORSMiddleware,
    allow_origins=[FRONTEND_URL] if FRONTEND_URL else [],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    """Render service errors as {"Message": ...}; storage details stay in the log."""
    content = {"Message": exc.msg}
    if isinstance(exc, ValidationError) and exc.field:
        content["Field"] = exc.field
    if isinstance(exc, StorageError):
        logger.error("Storage error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"Message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies/params: 400 with one entry per offending field."""
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", "Invalid value"),
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"Message": "Validation failed", "Errors": errors},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch unhandled exceptions; log and return generic 500. Never leak stack traces."""
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"Message": "Internal server error"},
    )


@app.get("/health")
def health():
    return {"status": "ok"}


app.include_router(auth_router)
app.include_router(users_router)
app.include_router(books_router)
app.include_router(analysis_router)
