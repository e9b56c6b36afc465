import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from app.api.auth import router as auth_router
from app.api.bookings import router as bookings_router
from app.api.places import router as places_router
from app.api.uploads import router as uploads_router
from app.config import Settings, cors_origins_from_env
from app.context import AppContext
from app.database.connection import create_asyncpg_pool
from app.database.repository import Database
from app.middleware.rate_limit import custom_rate_limit_handler, limiter
from app.services.errors import AppError
from app.services.storage_service import BlobStorage

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: build the process-wide context once
    settings = Settings.from_env()
    db = Database(await create_asyncpg_pool())
    storage = BlobStorage(settings.bucket_name)
    app.state.context = AppContext(settings=settings, db=db, storage=storage)
    logger.info("Database pool and storage client created at startup")

    yield  # App runs

    # Shutdown
    await db.close()
    app.state.context = None
    logger.info("Database pool closed")


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


app = FastAPI(title="Stayhub API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins_from_env(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, custom_rate_limit_handler)
app.add_exception_handler(AppError, app_error_handler)

app.include_router(auth_router)
app.include_router(uploads_router)
app.include_router(places_router)
app.include_router(bookings_router)


@app.get("/health")
@limiter.limit("100/minute")
async def health(request: Request):
    logger.info("Health check endpoint accessed")
    return {"message": "Welcome to Stayhub API!"}


if __name__ == "__main__":

    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
