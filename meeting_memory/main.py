"""
FastAPI application for Meeting Memory.

Ingests recorded meetings into a durable store and serves semantic search
over their transcripts. The store is constructed and loaded once in the
lifespan handler; the pipeline and search engine receive it explicitly.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import structlog

from meeting_memory.api.v1 import router as api_v1_router
from meeting_memory.config import configure_structlog, settings
from meeting_memory.ingestion import IngestionPipeline, InferenceClient, Transcoder
from meeting_memory.ingestion.pipeline import AudioTranscoder, Inference
from meeting_memory.search import SearchEngine
from meeting_memory.store import MeetingStore

configure_structlog()
logger = structlog.get_logger(__name__)


def create_app(
    store: MeetingStore | None = None,
    inference: Inference | None = None,
    transcoder: AudioTranscoder | None = None,
) -> FastAPI:
    """Build the app. Components default to the configured production ones."""
    store = store or MeetingStore(settings.data_path)
    inference = inference or InferenceClient(settings)
    transcoder = transcoder or Transcoder(settings.ffmpeg_path)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan event handler for startup and shutdown."""
        logger.info(
            "Meeting Memory API starting up",
            version=settings.api_version,
            environment=settings.get_environment_display(),
            debug=settings.debug,
        )

        # Initialization gate: nothing is served until the store is loaded
        store.load()
        app.state.store = store
        app.state.pipeline = IngestionPipeline(store, inference, transcoder)
        app.state.search_engine = SearchEngine(store, inference)
        logger.info(
            "Meeting store ready", path=str(store.path), meetings=store.count()
        )

        if not settings.openai_api_key:
            logger.warning("OPENAI_API_KEY not configured - ingestion and search will fail")

        yield

        logger.info("Meeting Memory API shutting down")

    app = FastAPI(
        title=settings.api_title,
        description="Ingest meeting recordings and search them semantically.",
        version=settings.api_version,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if not settings.is_production() else None,
        redoc_url="/redoc" if not settings.is_production() else None,
        openapi_url="/openapi.json" if not settings.is_production() else None,
    )

    app.add_middleware(CORSMiddleware, **settings.get_cors_config())
    app.include_router(api_v1_router)

    @app.get("/", tags=["Root"])
    async def root():
        """Basic service information. Use `/api/v1/health` for health checks."""
        return {
            "service": settings.api_title,
            "version": settings.api_version,
            "environment": settings.get_environment_display(),
            "status": "operational",
            "health": "/api/v1/health",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "meeting_memory.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_config=None,  # Use our structured logging
    )
