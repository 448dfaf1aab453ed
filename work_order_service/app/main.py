import json
import logging
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from .api import health, work_orders
from .api.metadata import route_metadata
from .config import settings
from .exceptions import DomainError, create_error_response
from .services.odoo_client import OdooError

APP_VERSION = settings.APP_VERSION
LOG_LEVEL = settings.LOG_LEVEL.upper()

# configure a service logger; we will log structured JSON strings to stdout
logger = logging.getLogger("work_order_service")
# Avoid adding duplicate handlers if module is imported more than once
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
# Prevent double-logging via propagation to root handlers
logger.propagate = False
logger.setLevel(LOG_LEVEL)


def _log_json(obj: dict, level: str = "info"):
    try:
        payload = json.dumps(obj, default=str)
    except (TypeError, ValueError):
        payload = json.dumps({"msg": "failed to serialize log object"})
    getattr(logger, level)(payload)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint):
        started_at = time.time()
        # support X-Request-ID header propagation
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        _log_json(
            {
                "event": "request.start",
                "method": request.method,
                "path": request.url.path,
                "request_id": request_id,
            },
            level="info",
        )

        response = await call_next(request)

        duration_ms = int((time.time() - started_at) * 1000)

        _log_json(
            {
                "event": "request.end",
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
                "request_id": request_id,
            },
            level="info",
        )
        # attach request id header back to client
        response.headers["X-Request-ID"] = request_id
        return response


app = FastAPI(
    title="Work Order Service",
    description=(
        "Work orders (maintenance requests) from Odoo and Xpand, "
        "normalized into one response shape."
    ),
    version=APP_VERSION,
)

allowed_origins = settings.ALLOWED_ORIGINS.split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

# add logging middleware and exception handlers
app.add_middleware(RequestLoggingMiddleware)

# include routers; the second copy accepts any path prefix added by a gateway
for router in (health.router, work_orders.router):
    app.include_router(router)
for router in (health.router, work_orders.router):
    app.include_router(router, prefix="/{prefix:path}", include_in_schema=False)


def custom_openapi():
    """Build the schema once, without the default 422 entries; request validation answers 400."""
    if app.openapi_schema:
        return app.openapi_schema

    schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
    )
    for path_item in schema.get("paths", {}).values():
        for operation in path_item.values():
            operation.get("responses", {}).pop("422", None)
    component_schemas = schema.get("components", {}).get("schemas", {})
    for name in ("HTTPValidationError", "ValidationError"):
        component_schemas.pop(name, None)

    app.openapi_schema = schema
    return app.openapi_schema


app.openapi = custom_openapi


# Root endpoint - provides service info and links
@app.get("/")
def root():
    """
    Root endpoint that provides service information and available endpoints.
    """
    return {
        "service": settings.PROJECT_NAME,
        "version": APP_VERSION,
        "status": "running",
        "endpoints": {
            "health": "/health",
            "docs": "/docs",
            "openapi": "/openapi.json",
            "workOrders": "/workOrders",
        },
    }


# Exception handlers: domain errors -> structured JSON
@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    metadata = route_metadata(request)
    body = create_error_response(exc.message, metadata, details=exc.details)
    _log_json(
        {"event": "domain.error", "code": exc.code, "error": exc.message, **metadata},
        level="warning" if exc.status_code < 500 else "error",
    )
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(body))


# Odoo failures are passed through to the client as-is
@app.exception_handler(OdooError)
async def odoo_error_handler(request: Request, exc: OdooError):
    metadata = route_metadata(request)
    _log_json(
        {"event": "odoo.error", "model": exc.model, "method": exc.method, "error": str(exc), **metadata},
        level="error",
    )
    return JSONResponse(status_code=500, content=create_error_response(str(exc), metadata))


# Upstream records that do not match the raw schemas; detail stays in the log
@app.exception_handler(ValidationError)
async def schema_error_handler(request: Request, exc: ValidationError):
    metadata = route_metadata(request)
    _log_json(
        {"event": "schema.error", "details": exc.errors(), **metadata},
        level="error",
    )
    return JSONResponse(
        status_code=500,
        content=create_error_response("Unexpected data from upstream system", metadata),
    )


# Request validation errors -> standardized 400 body
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    metadata = route_metadata(request)
    details = jsonable_encoder(exc.errors())
    _log_json({"event": "validation.error", "details": details, **metadata}, level="warning")
    return JSONResponse(
        status_code=400,
        content=create_error_response("Validation failed", metadata, details=details),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(str(exc.detail), route_metadata(request)),
        headers=getattr(exc, "headers", None),
    )


# catch-all for unexpected errors -> 500 with the message passed through
@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    metadata = route_metadata(request)
    # log full stack trace for server-side investigation
    logger.exception("unhandled exception (request_id=%s)", metadata["request_id"])
    # runs outside RequestLoggingMiddleware, so the end line and header are added here
    _log_json(
        {
            "event": "request.end",
            "method": request.method,
            "status_code": 500,
            **metadata,
        },
        level="error",
    )
    headers = {"X-Request-ID": metadata["request_id"]} if metadata["request_id"] else None
    return JSONResponse(
        status_code=500,
        content=create_error_response(str(exc) or "Internal server error", metadata),
        headers=headers,
    )
