import os
import time
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from dotenv import load_dotenv
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from prometheus_client import make_asgi_app
from api.routes import router, get_upload_dir
from api.websocket_routes import router as websocket_router
from api.websocket_manager import connection_manager
from api.logging_config import configure_logging
from api.monitoring import (
    http_requests_total,
    http_request_duration_seconds,
)
from api.security import limiter, require_https, get_client_ip

# Load environment variables
load_dotenv()

# Configure logging
environment = os.getenv("ENVIRONMENT", "development")
logger = configure_logging(environment)

# Initialize Sentry for error tracking
sentry_dsn = os.getenv("SENTRY_DSN")
if sentry_dsn:
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration

    sentry_sdk.init(
        dsn=sentry_dsn,
        integrations=[
            FastApiIntegration(),
        ],
        traces_sample_rate=0.1 if environment == "production" else 1.0,
        environment=environment,
    )
    logger.info("sentry_initialized", environment=environment)

app = FastAPI(title="Hex Board Sync API", version="1.0.0")
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS middleware for frontend communication
# Get allowed origins from environment variable, with fallback to localhost for development
cors_origins_str = os.getenv("CORS_ORIGINS", "")
if cors_origins_str:
    # Parse comma-separated list from environment variable
    allow_origins = [origin.strip() for origin in cors_origins_str.split(",") if origin.strip()]
else:
    # Default to localhost ports for development
    allow_origins = [
        "http://localhost",
        "http://localhost:80",
        "http://localhost:5173",
        "http://localhost:3000",
        "http://localhost:3001",
        "http://127.0.0.1",
        "http://127.0.0.1:80",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:3001",
    ]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Security headers middleware
@app.middleware("http")
async def security_headers_middleware(request: Request, call_next):
    """Add security headers to all responses."""
    # HTTPS enforcement in production
    if environment == "production":
        try:
            require_https(request)
        except HTTPException as e:
            return JSONResponse(status_code=e.status_code, content={"detail": e.detail})

    response = await call_next(request)

    # Security headers
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["X-XSS-Protection"] = "1; mode=block"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

    if environment == "production":
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

    return response

# Request logging and metrics middleware
@app.middleware("http")
async def logging_middleware(request: Request, call_next):
    """Log requests and track metrics."""
    start_time = time.time()
    client_ip = get_client_ip(request)

    # Skip logging for health checks, metrics and served images
    if request.url.path in ["/health", "/metrics", "/"] or request.url.path.startswith("/uploads"):
        response = await call_next(request)
        return response

    try:
        response = await call_next(request)
        duration = time.time() - start_time

        # Track metrics
        http_requests_total.labels(
            method=request.method,
            endpoint=request.url.path,
            status=response.status_code
        ).inc()
        http_request_duration_seconds.labels(
            method=request.method,
            endpoint=request.url.path
        ).observe(duration)

        # Log request
        logger.info(
            "http_request",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration=duration,
            client_ip=client_ip,
            user_agent=request.headers.get("user-agent")
        )

        return response
    except Exception as e:
        duration = time.time() - start_time
        logger.error(
            "http_request_error",
            method=request.method,
            path=request.url.path,
            duration=duration,
            error=str(e),
            client_ip=client_ip
        )
        raise

app.include_router(router, prefix="/api")
app.include_router(websocket_router, prefix="/api")

# Uploaded avatars and backgrounds
upload_dir = get_upload_dir()
upload_dir.mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=str(upload_dir)), name="uploads")

@app.get("/")
async def root():
    return {"message": "Hex Board Sync API", "version": "1.0.0"}

@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "environment": environment,
        "connections": connection_manager.get_connection_count(),
    }

# Prometheus metrics endpoint
metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)

@app.on_event("startup")
async def startup_event():
    """Run on application startup."""
    logger.info("application_started", environment=environment, upload_dir=str(upload_dir))

@app.on_event("shutdown")
async def shutdown_event():
    """Run on application shutdown."""
    logger.info("application_shutdown")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "3001")))
