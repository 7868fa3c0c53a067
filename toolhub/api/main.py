"""
FastAPI app assembly: logging, middleware and router wiring.
Includes the small endpoints that do not belong to a resource module.
"""
import logging
import os

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import RedirectResponse

# Configure logging
LOG_LEVEL_NAME = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL = getattr(logging, LOG_LEVEL_NAME, logging.INFO)
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)
logger.setLevel(LOG_LEVEL)
logger.info("app_startup: log_level=%s", LOG_LEVEL_NAME)

from toolhub.api.admin import router as admin_router
from toolhub.api.audits import router as audits_router
from toolhub.api.deps import LoginRequired, get_current_user_context
from toolhub.api.tools import router as tools_router
from toolhub.utils.urls import build_login_link, get_app_base_url

# Database schema is managed by Alembic migrations.

app = FastAPI(
    title="ToolHub Service",
    description="API for the ToolHub tool catalog, unlock links and per-user tool access.",
    version="1.0.0",
)

# Avoid implicit trailing-slash redirects for predictable URLs
app.router.redirect_slashes = False


def _cors_origins() -> list:
    origins = [
        "http://localhost",
        "http://localhost:3000",
        "http://localhost:8000",
        get_app_base_url(),
    ]
    extra = os.getenv("CORS_ORIGINS", "")
    origins.extend(o.strip() for o in extra.split(",") if o.strip())
    # Keep order, drop duplicates
    return list(dict.fromkeys(origins))


app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LoginRequired)
async def redirect_to_login(request: Request, exc: LoginRequired):
    return RedirectResponse(url=build_login_link(exc.next_path), status_code=307)


@app.get("/user-info")
def get_user_info(user_context=Depends(get_current_user_context)):
    """Return the authenticated caller's profile and role."""
    user, current_user = user_context
    return {
        "authenticated": True,
        "user_id": str(user.id),
        "email": user.email,
        "name": user.name,
        "role": user.role,
        "is_admin": current_user["is_admin"],
    }


app.include_router(tools_router)
app.include_router(admin_router)
app.include_router(audits_router)


@app.get("/health")
def health_check():
    return {"status": "ok", "service": "toolhub-service"}
