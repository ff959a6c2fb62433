import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from salesagent.core.config import COMPLETION_PROVIDER, CORS_ORIGINS, DATABASE_URL, ENV
from salesagent.core.database import Base, engine
from salesagent.core.logging_setup import configure_logging
from salesagent.middleware.observability import ObservabilityMiddleware
import salesagent.models  # registers every model before create_all

from salesagent.routers.agent import router as agent_router
from salesagent.routers.internal_metrics import router as internal_metrics_router

configure_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    _startup_tasks()
    yield


app = FastAPI(
    title="Page Sales Agent API",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(ObservabilityMiddleware)


def _startup_tasks() -> None:
    try:
        Base.metadata.create_all(bind=engine)
        logger.info(
            "startup complete env=%s database=%s completion_provider=%s",
            ENV,
            DATABASE_URL.split("://", 1)[0],
            COMPLETION_PROVIDER,
        )
    except Exception:
        logger.exception("startup failed")
        raise


# Routers
app.include_router(agent_router)
app.include_router(internal_metrics_router)


@app.get("/")
def root():
    return {"status": "ok"}


@app.get("/health")
def health():
    return {"status": "healthy"}
