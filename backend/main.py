import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from contextlib import asynccontextmanager

from core.config import get_settings
from core.exceptions import register_exception_handlers
from integrations.supabase import close_supabase_client
from api import delegate_registrations, research, system, health

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    if not settings.has_service_credentials:
        logger.warning("Supabase credentials not configured; serving the sample report catalog")
    logger.info("Application started")

    yield

    # Shutdown
    await close_supabase_client()
    logger.info("Application shutdown")


app = FastAPI(
    title="HAVEN Equities API",
    description="Student-run equity research publication: reports, upload console, registrations",
    version="1.0.0",
    lifespan=lifespan
)

register_exception_handlers(app)

app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(delegate_registrations.router, prefix="/api/delegate-registrations", tags=["registrations"])
app.include_router(research.router, prefix="/api/research", tags=["research"])
app.include_router(system.router, prefix="/api/system", tags=["system"])
app.include_router(health.router, prefix="/api/health", tags=["health"])


@app.get("/health")
async def health_check():
    return {"status": "healthy"}

