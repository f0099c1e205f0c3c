# app/main.py
from contextlib import asynccontextmanager
import logging

from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from fastapi import FastAPI

from app.core.config import get_settings
from app.core.middleware import AuthRedirectMiddleware

# Routers
from app.routers.items import router as items_router
from app.routers.pages import STATIC_DIR, router as pages_router

settings = get_settings()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Report whether Supabase is configured. A missing config does not
        stop the app: the auth middleware fails closed to /login.

    Shutdown:
      - Nothing to clean up; Supabase clients are per request.
    """
    if settings.supabase_configured:
        logger.info(f"✅ Startup: Supabase configured at {settings.SUPABASE_URL}")
    else:
        logger.error(
            "❌ Startup: SUPABASE_URL / SUPABASE_KEY missing, "
            "every page will redirect to /login."
        )
    yield


app = FastAPI(
    title=settings.PROJECT_NAME or "Restaurant POS",
    version="0.1.0",
    lifespan=lifespan,
)


# --- Middleware ---
# Starlette runs the last added middleware first: CORS wraps the auth gate.
app.add_middleware(AuthRedirectMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

# Versioned API prefix, e.g. /api/v1
app.include_router(items_router, prefix=settings.API_V1_STR)
app.include_router(pages_router)


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "ok", "service": "pos-backend"}
