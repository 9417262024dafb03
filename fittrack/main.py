import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fittrack.api.router import api_router
from fittrack.core.config import settings
from fittrack.core.database import init_database
from fittrack.core.handlers import register_exception_handlers

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_database()
    logger.info("FitTrack API started (timezone=%s)", settings.TIMEZONE)
    yield


def create_app() -> FastAPI:
    app = FastAPI(title="FitTrack - workout ledger and AI trainer", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(api_router, prefix="/api")

    @app.get("/")
    async def root():
        return {"app": "FitTrack", "message": "Fitness API is running"}

    return app


app = create_app()
