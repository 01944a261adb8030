from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
import uvicorn

from truthguard.api.news_api import router as news_router
from truthguard.core.config import BACKEND_HOST, BACKEND_PORT, FRONTEND_URL, MONGO_DB_NAME, MONGO_URI
from truthguard.core.container import build_services
from truthguard.core.database import create_client, get_claims_collection, ping
from truthguard.core.logging_config import configure_logging

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # The Mongo client lives exactly as long as the app
    client = create_client(MONGO_URI)
    ping(client)
    app.state.services = build_services(get_claims_collection(client, MONGO_DB_NAME))
    logger.info("[Startup] TruthGuard services ready")
    try:
        yield
    finally:
        client.close()
        logger.info("[Shutdown] MongoDB client closed")


app = FastAPI(lifespan=lifespan)

# Configure CORS - Allow both local development and production frontend
allowed_origins = [
    FRONTEND_URL,  # From .env file
    "http://localhost:3000",  # Local development
]

# Remove duplicates and None values
allowed_origins = list(filter(None, set(allowed_origins)))

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(news_router, prefix="/api", tags=["News Verification"])


@app.get("/")
async def root():
    return {"message": "TruthGuard API is running. Use /api/verify-news or /api/global-news."}


if __name__ == "__main__":
    uvicorn.run(app, host=BACKEND_HOST, port=BACKEND_PORT)
