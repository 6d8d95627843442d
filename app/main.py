"""
FastAPI Application Entry Point
Main application setup and route registration
"""

import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.config import settings
from app.database import connect_db, disconnect_db
from app.services.form_parser import describe_validation_errors

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Standard security headers on every response; API responses are never cached"""
    async def dispatch(self, request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer"
        response.headers["Cross-Origin-Resource-Policy"] = "same-origin"
        response.headers["X-DNS-Prefetch-Control"] = "off"
        if request.url.path.startswith(settings.API_PREFIX):
            response.headers["Cache-Control"] = "no-store"
        return response


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Multi-tenant turf booking platform",
    version="1.0.0",
    debug=settings.DEBUG
)

# CORS middleware (cookies are sent cross-origin, so origins must be explicit)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.CLIENT_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(SecurityHeadersMiddleware)


# Error envelope: {"success": false, "message": ...}
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": describe_validation_errors(exc.errors())}
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Internal server error"}
    )


# Startup event
@app.on_event("startup")
async def startup():
    """Run on application startup"""
    await connect_db()
    logger.info("%s started in %s mode", settings.APP_NAME, settings.APP_ENV)


# Shutdown event
@app.on_event("shutdown")
async def shutdown():
    """Run on application shutdown"""
    await disconnect_db()
    logger.info("Shutdown complete")


# Health check endpoint
@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": "1.0.0"
    }


# Import and include routers
from app.routes import auth, organizations, roles, turfs, turf_reviews  # noqa: E402

app.include_router(auth.router, prefix=f"{settings.API_PREFIX}/auth", tags=["Authentication"])
app.include_router(organizations.router, prefix=f"{settings.API_PREFIX}/organizations", tags=["Organizations"])
app.include_router(roles.router, prefix=f"{settings.API_PREFIX}/roles", tags=["Roles"])
app.include_router(turfs.router, prefix=f"{settings.API_PREFIX}/turfs", tags=["Turfs"])
app.include_router(turf_reviews.router, prefix=f"{settings.API_PREFIX}/turf-review", tags=["Turf Reviews"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True  # Auto-reload on code changes
    )
