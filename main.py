import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ats.config import settings
from ats.database import close_db, engine, init_db
from ats.health import ServiceHealth, check_database, check_ollama
from ats.routers import jobs, skill_progress, skills, skills_gap

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: create tables on the shared connection pool
    logger.info(f"Starting {settings.app_name}")
    await init_db()
    logger.info("Database tables ready")
    yield
    # Shutdown: close connections
    logger.info(f"Shutting down {settings.app_name}")
    await close_db()

app = FastAPI(
    title=settings.app_name,
    description="Job application pipeline tracking: stages, deadlines and skill gaps",
    version="0.1.0",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_cors_origin],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(jobs.router)
app.include_router(skills.router)
app.include_router(skills_gap.router)
app.include_router(skill_progress.router)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report malformed input as 400 rather than FastAPI's default 422."""
    logger.info(f"Rejected {request.method} {request.url.path}: {len(exc.errors())} validation error(s)")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


@app.get("/")
async def root():
    return {"message": f"{settings.app_name} - Ready"}


@app.get("/health")
async def health_check():
    """Health check for the database and the LLM backend."""
    database_health, ollama_health = await asyncio.gather(
        check_database(engine),
        check_ollama(settings.ollama_base_url),
        return_exceptions=True,
    )

    def _status(health) -> str:
        return health.status if isinstance(health, ServiceHealth) else "error"

    # The API is usable without Ollama; only the database is required
    if _status(database_health) != "connected":
        overall = "unhealthy"
    elif _status(ollama_health) != "connected":
        overall = "degraded"
    else:
        overall = "healthy"

    return {
        "status": overall,
        "dependencies": {
            "database": _status(database_health),
            "ollama": _status(ollama_health),
        },
    }
