import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from kingdom_access.config import settings
from kingdom_access.core.exceptions import (
    UnauthenticatedException,
    ForbiddenException,
    TenantRequiredError,
    NotFoundException,
    ValidationException,
    SessionConflictError,
    UnknownRoleError,
    UnknownPermissionError,
)
from kingdom_access.logging_config import configure_logging
from kingdom_access.models.permission import validate_permission_table
from kingdom_access.routes import admin_routes, auth_routes, platform_routes, view_as_routes

configure_logging(settings.LOG_LEVEL, json_format=settings.LOG_JSON)
logger = logging.getLogger(__name__)

# Misconfigured role/permission tables stop the app from starting
validate_permission_table()

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs" if settings.DEBUG else None,  # Disable in production
    redoc_url="/redoc" if settings.DEBUG else None,
)

# CORS middleware
cors_origins = settings.cors_origins_list
if cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# Exception handlers
@app.exception_handler(UnauthenticatedException)
async def unauthenticated_exception_handler(request: Request, exc: UnauthenticatedException):
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"detail": str(exc), "reason": exc.reason},
        headers={"WWW-Authenticate": "Bearer"},
    )


@app.exception_handler(ForbiddenException)
async def forbidden_exception_handler(request: Request, exc: ForbiddenException):
    return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content=exc.to_dict())


@app.exception_handler(TenantRequiredError)
async def tenant_required_exception_handler(request: Request, exc: TenantRequiredError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc), "reason": exc.reason},
    )


@app.exception_handler(NotFoundException)
async def not_found_exception_handler(request: Request, exc: NotFoundException):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(ValidationException)
async def validation_exception_handler(request: Request, exc: ValidationException):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


@app.exception_handler(SessionConflictError)
async def session_conflict_exception_handler(request: Request, exc: SessionConflictError):
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": str(exc), "reason": exc.reason},
    )


@app.exception_handler(UnknownRoleError)
@app.exception_handler(UnknownPermissionError)
async def configuration_exception_handler(request: Request, exc: Exception):
    # Route referenced a token missing from the tables; deny without details
    logger.error("Access configuration error on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Access check failed"},
    )


# Health check endpoint
@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": settings.APP_VERSION}


# Root endpoint
@app.get("/")
async def root():
    return {
        "message": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs" if settings.DEBUG else "Documentation disabled in production",
    }


# Include routers
app.include_router(auth_routes.router, prefix="/api/auth", tags=["Auth"])
app.include_router(view_as_routes.router, prefix="/api/super-admin", tags=["View As"])
app.include_router(platform_routes.router, prefix="/api/super-admin", tags=["Platform"])
app.include_router(admin_routes.router, prefix="/api/admin", tags=["Admin"])
