from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from app.api.v1 import chamados as chamados_router
from app.api.v1 import posts as posts_router
from app.api.v1 import usuarios as usuarios_router
from app.config.db import check_db_connection, engine
from app.config.redis import check_redis_connection, close_redis_client
from app.middleware.rate_limit import global_limiter, user_limiter
from app.services.recaptcha import recaptcha_enabled
from app.services.uploads import UPLOADS_URL_PREFIX, ensure_upload_dir
from app.settings import settings
from app.utils.logging_config import logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Handle application startup and shutdown events.
    """
    await check_db_connection()
    if settings.REDIS_URL is not None:
        await check_redis_connection()
    else:
        logger.info("REDIS_URL not set, rate-limit counters kept in memory")

    if not recaptcha_enabled():
        logger.warning("RECAPTCHA_SECRET_KEY not set, reCAPTCHA verification is DISABLED")

    upload_dir = ensure_upload_dir()
    logger.info(f"Uploads stored in {upload_dir}")

    yield

    await close_redis_client()
    await engine.dispose()


app = FastAPI(
    lifespan=lifespan,
    title="Chamados API",
    description="A simple API for managing support tickets",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed or missing fields are reported as 400."""
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(
        f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc
    )
    return JSONResponse(status_code=500, content={"detail": "erro interno"})


# Include routers
app.include_router(
    usuarios_router.router,
    prefix=usuarios_router.ROUTER_PREFIX,
    tags=["Usuarios"],
    dependencies=[Depends(global_limiter)],
)
app.include_router(
    chamados_router.router,
    prefix="/api/chamados",
    tags=["Chamados"],
    dependencies=[Depends(global_limiter), Depends(user_limiter)],
)
app.include_router(
    posts_router.router,
    prefix="/api/posts",
    tags=["Posts"],
    dependencies=[Depends(global_limiter)],
)

app.mount(
    UPLOADS_URL_PREFIX,
    StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False),
    name="uploads",
)


@app.get("/")
def read_root() -> dict:
    return {
        "message": "Hello from Chamados API!",
        "endpoints": [
            usuarios_router.ROUTER_PREFIX,
            "/api/chamados",
            "/api/posts",
            UPLOADS_URL_PREFIX,
        ],
    }
