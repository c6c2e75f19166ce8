import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import settings

logging.basicConfig(level=settings.LOG_LEVEL, format=settings.LOG_FORMAT)

from api import dependencies  # noqa: E402
from api.routes import block_data, geocode, history, rewards, simulate  # noqa: E402
from data.database import init_db  # noqa: E402

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("🚀 %s %s ready", settings.API_TITLE, settings.API_VERSION)
    yield
    dependencies.shutdown()


app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    description=settings.API_DESCRIPTION,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(block_data.router)
app.include_router(geocode.router)
app.include_router(simulate.router)
app.include_router(history.router)
app.include_router(rewards.router)


@app.get("/")
def root():
    return {
        "message": settings.API_TITLE,
        "version": settings.API_VERSION,
        "endpoints": {
            "block_data": "/api/block-data?lat={lat}&lon={lon}",
            "geocode": "/api/geocode?q={query}",
            "simulate": "/api/simulate",
            "history": "/api/history",
            "mint_credit": "/api/mint-credit",
            "docs": "/docs"
        }
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.API_HOST, port=settings.API_PORT)
