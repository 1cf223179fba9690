from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tripscout.api.routes import models, search
from tripscout.config import settings
from tripscout.services import logger as log_service


@asynccontextmanager
async def lifespan(app: FastAPI):
    missing = [
        name
        for name, value in (
            ("FIRECRAWL_API_KEY", settings.firecrawl_api_key),
            ("OPENAI_API_KEY", settings.openai_api_key),
        )
        if not value
    ]
    if missing:
        log_service.logger.warning(f"Missing environment variables: {missing}")
    yield


app = FastAPI(
    title="TripScout",
    description="Travel search with cited, streamed answers",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["x-tripscout-stream"],
)

# Routes
app.include_router(search.router)
app.include_router(models.router)


@app.get("/api/health")
async def health():
    return {"status": "ok", "service": "tripscout"}
