import time
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware
from travel_chatbot.db import configure_database
from travel_chatbot.db.catalog import seed_data
from travel_chatbot.routes.auth.route import router as auth_router
from travel_chatbot.routes.chatbot.route import router as chatbot_router
from travel_chatbot.routes.travel.route import router as travel_router
from travel_chatbot.settings import config

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_database(config.db_url)
    if config.seed_catalog:
        seed_data()
    yield


def initialize_app() -> FastAPI:
    app = FastAPI(
        title="Travel Chatbot API",
        description="latiNlong: a trip-planning assistant that streams advice over server-sent events",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )

    app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
    app.include_router(chatbot_router, prefix="/api/conversations", tags=["conversations"])
    app.include_router(travel_router, prefix="/api", tags=["travel"])
    return app


def add_middlewares(app: FastAPI):
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        SessionMiddleware,
        secret_key=config.session_secret,
        max_age=24 * 60 * 60,
        https_only=config.session_https_only,
    )

    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)
        return response


app = initialize_app()
add_middlewares(app)


@app.get("/")
async def root():
    return {"message": "Travel Chatbot API is running"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    logger.info("Starting Travel Chatbot API server...")
    import uvicorn

    uvicorn.run(
        "travel_chatbot.__main__:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
    )
