from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import FileResponse, JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
import os

from core.config import ALLOWED_ORIGINS, DATABASE_URL, HOST, PORT, SQL_ECHO, STATIC_DIR, logger  # type: ignore
from core.errors import StorageError
from core.store import open_store
from utils.notifications import drain_pending

# Routers
from routers import waitlist, analytics  # type: ignore


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Tests may inject their own store before startup
    if getattr(app.state, "store", None) is None:
        app.state.store = open_store(DATABASE_URL, echo=SQL_ECHO)
    try:
        yield
    finally:
        await drain_pending()
        store = getattr(app.state, "store", None)
        if store is not None:
            logger.info("Closing SQLite database connection...")
            store.close()
            app.state.store = None
            logger.info("Database connection closed.")


app = FastAPI(title="Waitlist Landing Page", lifespan=lifespan)

# ---- CORS setup ----
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials="*" not in ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Security headers ---
@app.middleware("http")
async def add_security_headers(request, call_next):
    response = await call_next(request)
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
    response.headers.setdefault("X-Frame-Options", "DENY")
    response.headers.setdefault("Permissions-Policy", "geolocation=(), microphone=(), camera=()")
    return response


@app.exception_handler(StorageError)
async def _storage_error_handler(request: Request, exc: StorageError):
    logger.error(f"[store] {request.method} {request.url.path} failed: {exc}")
    return JSONResponse({"success": False, "message": "Internal server error."}, status_code=500)


app.include_router(waitlist.router)
app.include_router(analytics.router)

if os.path.isdir(STATIC_DIR):
    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")


def _static_page(filename: str):
    path = os.path.join(STATIC_DIR, filename)
    if not os.path.isfile(path):
        return JSONResponse({"detail": "Not Found"}, status_code=404)
    return FileResponse(path, media_type="text/html")


@app.get("/")
async def root():
    return _static_page("index.html")


@app.get("/dashboard")
async def dashboard():
    return _static_page("dashboard.html")


@app.get("/health")
async def health():
    return {"ok": True}


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Server is running on port {PORT}")
    uvicorn.run(app, host=HOST, port=PORT, proxy_headers=True, forwarded_allow_ips="*")
