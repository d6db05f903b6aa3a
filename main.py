# main.py
from dotenv import load_dotenv
load_dotenv()

import asyncio
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from medsearch.container import close_engine, get_initializer, get_settings
from medsearch.presentation.health import router as health_router
from medsearch.presentation.routers import router as api_router

settings = get_settings()

# --- logging config before anything logs ---
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

app_logger = logging.getLogger("medsearch.request")
init_logger = logging.getLogger("medsearch.init")

app = FastAPI(title="MedSearch", version="0.1.0")

@app.middleware("http")
async def log_requests(request: Request, call_next):
    app_logger.info("Incoming %s %s", request.method, request.url.path)
    try:
        response = await call_next(request)
        app_logger.info("Completed %s %s -> %s", request.method, request.url.path, response.status_code)
        return response
    except Exception:
        app_logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        raise

# ─────────────────────────────────────────────────────────────
# CORS (env: CORS_ALLOW_ORIGINS="https://foo.com,https://bar.com")
# ─────────────────────────────────────────────────────────────
_origins = settings.allow_origins or ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_credentials="*" not in _origins,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# ─────────────────────────────────────────────────────────────
# Routes
# ─────────────────────────────────────────────────────────────
app.include_router(health_router, tags=["health"])
app.include_router(api_router, tags=["api"])

# ─────────────────────────────────────────────────────────────
# Startup: initialize the catalog once, in the background, so the
# port is already serving while the import runs.
# ─────────────────────────────────────────────────────────────
async def _initialize_catalog() -> None:
    try:
        initialized = await get_initializer().initialize()
        if not initialized:
            init_logger.error("Failed to initialize database on startup")
    except Exception:
        init_logger.exception("Error during startup initialization")

@app.on_event("startup")
async def start_initialization():
    if not settings.init_on_startup:
        init_logger.info("INIT_ON_STARTUP disabled; catalog initializes on first query")
        return
    app.state.init_task = asyncio.create_task(_initialize_catalog())

@app.on_event("shutdown")
async def shutdown():
    task = getattr(app.state, "init_task", None)
    if task is not None and not task.done():
        task.cancel()
    # the shared run is shielded from its callers; stop it before the client goes
    if get_initializer.cache_info().currsize:
        await get_initializer().aclose()
    await close_engine()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=settings.port)
