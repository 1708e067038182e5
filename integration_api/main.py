import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from integration_api.config import settings
from integration_api.routers import accounts, data_cloud, health, pdf, unit_of_work
from integration_api.domain.errors import (
    NotFoundError,
    UnauthorizedError,
    UpstreamError,
    ValidationError,
)
from integration_api.application.event_handlers import register_event_handlers
from integration_api.dependencies import build_alternate_org_lookup, build_data_cloud_lookup
from integration_api.infrastructure.http_client import close_http_client, get_http_client

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Salesforce Integration API",
    description="Example app as an API invoked by Salesforce orgs",
    version=settings.VERSION,
)

# Register domain event handlers and optional org lookups on startup
@app.on_event("startup")
async def startup_event():
    register_event_handlers()
    client = get_http_client()
    app.state.alternate_org = build_alternate_org_lookup(client)
    app.state.data_cloud_lookup = build_data_cloud_lookup(client)
    if app.state.alternate_org is not None:
        logger.info(f"Alternate org lookup enabled for '{settings.SALESFORCE_ORG_NAME}'")
    if app.state.data_cloud_lookup is not None:
        logger.info(f"Data Cloud lookup enabled for '{settings.DATA_CLOUD_ORG}'")


@app.on_event("shutdown")
async def shutdown_event():
    await close_http_client()

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allows all origins
    allow_credentials=True,
    allow_methods=["*"],  # Allows all methods
    allow_headers=["*"],  # Allows all headers
)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"code": str(status_code), "message": message})


# Domain error handlers
@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return error_response(400, str(exc))


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    return error_response(400, "Invalid request body")


@app.exception_handler(UnauthorizedError)
async def unauthorized_handler(request: Request, exc: UnauthorizedError):
    return error_response(401, str(exc))


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return error_response(404, str(exc))


@app.exception_handler(UpstreamError)
async def upstream_error_handler(request: Request, exc: UpstreamError):
    logger.error(str(exc))
    return error_response(502, str(exc))


# Errors raised by background tasks after the 201 (CommitError, PdfGenerationError)
# must only reach this catch-all: class-specific handlers cannot run once a
# response has started.
@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return error_response(500, str(exc))

# Include routers
app.include_router(health.router, tags=["Health"])  # Health check endpoints first
app.include_router(accounts.router, tags=["Accounts"])
app.include_router(unit_of_work.router, tags=["Unit of Work"])
app.include_router(data_cloud.router, tags=["Data Cloud"])
app.include_router(pdf.router, tags=["PDF"])

@app.get("/")
async def root():
    return {"message": "Welcome to the Salesforce Integration API. See /docs for API documentation"}
