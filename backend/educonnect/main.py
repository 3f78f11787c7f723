from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from dotenv import load_dotenv
import logging
import os

# Load environment variables from .env file
load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

from educonnect.api.auth import router as auth_router
from educonnect.api.me import router as me_router
from educonnect.api.rewards import router as rewards_router
from educonnect.api.classes import router as classes_router
from educonnect.api.materials import router as materials_router
from educonnect.api.announcements import router as announcements_router
from educonnect.api.performance import router as performance_router
from educonnect.api.progress import router as progress_router
from educonnect.api.bookings import router as bookings_router
from educonnect.api.fees import router as fees_router
from educonnect.api.teachers import router as teachers_router
from educonnect.api.support import router as support_router
from educonnect.api.ai import router as ai_router
from educonnect.errors import EduConnectError, PermissionDeniedError
from educonnect.services.payment_service import PaymentSimulatorRegistry

logger = logging.getLogger(__name__)

app = FastAPI(
    title="EduConnect Pro API",
    description="Backend API for the EduConnect Pro tutoring marketplace",
    version="1.0.0",
)

# Simulated payments are tracked per booking/fee record for the lifetime of the process
app.state.payment_simulators = PaymentSimulatorRegistry()

cors_origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# Configure CORS for cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register API routers
app.include_router(auth_router)
app.include_router(me_router)
app.include_router(rewards_router, prefix="/api")
app.include_router(classes_router, prefix="/api")
app.include_router(materials_router, prefix="/api")
app.include_router(announcements_router, prefix="/api")
app.include_router(performance_router, prefix="/api")
app.include_router(progress_router, prefix="/api")
app.include_router(bookings_router, prefix="/api")
app.include_router(fees_router, prefix="/api")
app.include_router(teachers_router, prefix="/api")
app.include_router(support_router, prefix="/api")
app.include_router(ai_router, prefix="/api")


@app.exception_handler(PermissionDeniedError)
async def permission_denied_handler(request: Request, exc: PermissionDeniedError):
    """Report the denied Firestore operation and path to the caller of this request only."""
    print(f"[PERMISSION] {request.method} {request.url.path}: {exc.operation} on {exc.path} denied")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "operation": exc.operation, "path": exc.path},
    )


@app.exception_handler(EduConnectError)
async def educonnect_error_handler(request: Request, exc: EduConnectError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "Something went wrong. Please try again."},
    )


@app.get(
    "/health",
    tags=["health"],
    summary="Health check endpoint",
    description="Returns the health status of the API",
)
def health_check():
    """Basic health check endpoint to verify the API is running.

    Returns:
        dict: Health status information
    """
    return {
        "status": "healthy",
        "service": "EduConnect Pro API",
    }


@app.get("/")
def root():
    return {"status": "ok", "service": "EduConnect Pro backend"}


@app.get("/debug/env-check")
def env_check():
    """Debug endpoint to check if environment variables are loaded (without exposing sensitive data)."""
    return {
        "FIREBASE_WEB_API_KEY_set": bool(os.getenv("FIREBASE_WEB_API_KEY")),
        "OPENAI_API_KEY_set": bool(os.getenv("OPENAI_API_KEY")),
        "AI_MODEL": os.getenv("AI_MODEL", "gpt-4o-mini"),
    }
