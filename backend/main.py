# backend/main.py
import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from config import settings
from database import init_db
from services.errors import CatalogError, StoreError

from routes.auth import router as auth_router
from routes.admin import router as admin_router
from routes.logs import router as logs_router
from routes.materials import router as materials_router
from routes.votes import router as votes_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Reading Materials API", version="1.0.0")

# Uploaded images are served straight from disk
Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
app.mount(settings.UPLOAD_URL_PREFIX, StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

origins = ["http://localhost:8081", "http://127.0.0.1:8081"]
if settings.FRONTEND_URL and settings.FRONTEND_URL not in origins:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def initialize_database() -> None:
    try:
        init_db()
    except SQLAlchemyError:
        logger.exception("Database initialization failed. Check DATABASE_URL.")


@app.exception_handler(CatalogError)
def catalog_error_handler(request: Request, exc: CatalogError):
    if isinstance(exc, StoreError):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(SQLAlchemyError)
def database_error_handler(request: Request, exc: SQLAlchemyError):
    # Full error stays in the server log, the client gets a generic message
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=StoreError.status_code, content={"detail": StoreError.default_detail})


# Router registration
app.include_router(auth_router)
app.include_router(admin_router)
app.include_router(materials_router)
app.include_router(votes_router)
app.include_router(logs_router)


@app.get("/")
def read_root():
    return {"message": "Reading Materials API is running"}
