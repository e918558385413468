from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.exc import IntegrityError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.errors import DomainError
from app.core.logging import setup_logging
from app.api.api import api_router
from app.api.middleware import AuditMiddleware
from app.services.log_service import LogStore


async def http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=getattr(exc, "headers", None))


async def validation_error(request: Request, exc: RequestValidationError):
    details = {}
    for err in exc.errors():
        # drop the leading "body"/"query" location
        field = ".".join(str(p) for p in err["loc"][1:]) or str(err["loc"][0])
        details.setdefault(field, err["msg"])
    return JSONResponse(status_code=400, content={"error": "Validation failed", "details": details})


async def domain_error(request: Request, exc: DomainError):
    content = {"error": exc.message}
    if exc.details is not None:
        content["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content)


async def db_unavailable(request: Request, exc: OperationalError):
    logger.error(f"Database connection error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"error": "Database connection error"})


async def integrity_violation(request: Request, exc: IntegrityError):
    logger.error(f"Integrity error on {request.method} {request.url.path}: {exc.orig}")
    return JSONResponse(
        status_code=409,
        content={"error": "Operation conflicts with related records", "details": str(exc.orig)},
    )


def create_app(log_store: LogStore | None = None) -> FastAPI:
    setup_logging()
    app = FastAPI(title=settings.APP_NAME)
    app.state.log_store = log_store or LogStore(settings.LOG_MAX_ENTRIES, settings.LOG_LEVEL)

    # CORS: use CORS_ORIGINS from env in production; default to localhost for dev
    _default_origins = ["http://127.0.0.1:3000", "http://localhost:3000"]
    _origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()] if settings.CORS_ORIGINS else _default_origins
    app.add_middleware(AuditMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, http_error)
    app.add_exception_handler(RequestValidationError, validation_error)
    app.add_exception_handler(DomainError, domain_error)
    app.add_exception_handler(OperationalError, db_unavailable)
    app.add_exception_handler(IntegrityError, integrity_violation)

    app.include_router(api_router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
