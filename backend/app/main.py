from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from core.config import settings
from core.csrf import CSRFMiddleware
from core.exceptions import register_exception_handlers
from core.token_rotation import TokenRotationMiddleware
from app.startup import configure_logging, ensure_uploads_dir, run_startup_checks

# ========== Authentication ==========
from modules.auth.routes import router as auth_router

# ========== Profiles & Reference Data ==========
from modules.profiles.routes import (
    participant_router as participant_profile_router,
    coach_router as coach_profile_router,
)
from modules.reference.routes import router as reference_router

# ========== Events ==========
from modules.events.routes import (
    coach_router as coach_event_router,
    catalog_router as event_catalog_router,
)

# ========== Reservations ==========
from modules.reservations.routes import (
    participant_router as reservation_router,
    coach_router as coach_reservation_router,
)
from modules.reservations.events import register_default_handlers

configure_logging()

app = FastAPI(
    title="SportEvents API",
    description="""
    Sports events platform API.

    ## Features

    * **Event Catalog** - Coaches publish events; participants search and browse them
    * **Reservations** - Join events with automatic waitlisting when full
    * **Payments & Check-in** - Payment confirmation with automatic check-in
      inside the 2-day window before an event

    ## Authentication

    Send the access token as `Authorization: Bearer <token>`. Tokens close to
    expiry are replaced through the `Authorization` response header; use
    `/api/v1/auth/refresh` with the refresh cookie once a token has expired.

    State-changing requests must echo the `csrf-token` cookie in the
    `x-csrf-token` header.
    """,
    version="1.0.0",
)

# Register exception handlers for consistent error responses
register_exception_handlers(app)

# Middleware executes in reverse order of addition
app.add_middleware(TokenRotationMiddleware)

if settings.csrf_enabled:
    app.add_middleware(CSRFMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Authorization"],
)

# ========== Include all routers under the versioned prefix ==========
api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth_router)
api_router.include_router(participant_profile_router)
api_router.include_router(coach_profile_router)
api_router.include_router(reference_router)
api_router.include_router(coach_event_router)
api_router.include_router(event_catalog_router)
api_router.include_router(reservation_router)
api_router.include_router(coach_reservation_router)
app.include_router(api_router)

app.mount(
    "/uploads",
    StaticFiles(directory=settings.uploads_dir, check_dir=False),
    name="uploads",
)


@app.on_event("startup")
async def startup_event():
    """Initialize services on application startup"""
    run_startup_checks()
    ensure_uploads_dir()
    register_default_handlers()


@app.get("/health")
async def health_check():
    return {"success": True, "status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
