import os

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi_limiter import FastAPILimiter
from redis.asyncio import Redis
from structlog import get_logger

from app.config import settings
from app.core.logging import setup_logging
from app.routers import health, images, inquiries, properties, users
from app.services.demo_data import seed_demo_data
from app.storage import create_storage

logger = get_logger()

app = FastAPI(title="Listing Marketplace")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(properties.router)
app.include_router(images.router)
app.include_router(inquiries.router)
app.include_router(users.router)
app.include_router(health.router)

os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
app.mount(settings.UPLOAD_URL_PREFIX, StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning("Request validation failed", path=request.url.path, errors=len(exc.errors()))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Validation failed", "detail": jsonable_encoder(exc.errors())},
    )

@app.on_event("startup")
async def startup_event():
    setup_logging()
    store = create_storage(settings)
    await store.startup()
    app.state.storage = store
    logger.info("Storage ready", backend=settings.STORAGE_BACKEND)

    if settings.SEED_DEMO_DATA:
        await seed_demo_data(store)

    if settings.RATE_LIMIT_ENABLED:
        redis = await Redis.from_url(settings.REDIS_URL, encoding="utf-8", decode_responses=True)
        await FastAPILimiter.init(redis)

@app.on_event("shutdown")
async def shutdown_event():
    if settings.RATE_LIMIT_ENABLED:
        await FastAPILimiter.close()
    await app.state.storage.close()
