"""FastAPI application for the policy bot."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware

from policy_bot.api.schemas import (
    ChatRequest,
    ChatResponse,
    ConfigResponse,
    ErrorResponse,
    HealthResponse,
    IngestResponse,
)
from policy_bot.api.session import (
    create_session,
    delete_session,
    get_session,
    get_session_count,
)
from policy_bot.api.tracing import create_trace_metadata, get_langfuse_handler
from policy_bot.chat.service import PolicyBotService, create_policy_bot_service
from policy_bot.config import settings
from policy_bot.errors import PolicyBotError
from policy_bot.utils.logger import get_logger

logger = get_logger(__name__)


def _get_service(request: Request) -> PolicyBotService:
    service = getattr(request.app.state, "service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Policy bot is not initialized",
        )
    return service


def create_app(service: Optional[PolicyBotService] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Pre-built service; built from settings at startup when omitted
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan events.

        Startup: load, embed and index the policy documents
        """
        logger.info("Starting Policy Bot API")

        if app.state.service is None:
            try:
                app.state.service = await create_policy_bot_service()
            except PolicyBotError as e:
                logger.warning(f"Policy bot initialization failed: {e}")

        yield

        logger.info("Shutting down Policy Bot API")

    app = FastAPI(
        title="Policy Bot",
        description="Retrieval-augmented question answering over company policies",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root():
        """Root endpoint - API information."""
        return {
            "name": "Policy Bot",
            "version": "0.1.0",
            "status": "running",
            "endpoints": {"health": "/health", "chat": "/chat", "docs": "/docs"},
        }

    @app.get("/health", response_model=HealthResponse)
    async def health_check(request: Request) -> HealthResponse:
        """
        Health check endpoint.

        Checks:
        - API is running
        - Retriever is initialized
        """
        service = getattr(request.app.state, "service", None)

        if service is None:
            return HealthResponse(
                status="unhealthy",
                api="running",
                rag="unhealthy",
                rag_error="Policy bot is not initialized",
            )

        count = service.chunk_count
        if not service.retriever.is_ready:
            rag = "unhealthy"
        elif count == 0:
            rag = "empty"
        else:
            rag = "healthy"

        return HealthResponse(
            status="healthy" if rag == "healthy" else "degraded",
            api="running",
            rag=rag,
            rag_chunk_count=count,
        )

    @app.post(
        "/chat",
        response_model=ChatResponse,
        responses={
            404: {"model": ErrorResponse, "description": "Unknown session"},
            503: {"model": ErrorResponse, "description": "Not initialized"},
        },
    )
    async def chat(chat_request: ChatRequest, request: Request) -> ChatResponse:
        """
        Answer a question within a conversation session.

        Without a session_id a new session is started.
        """
        service = _get_service(request)

        if chat_request.session_id:
            memory = get_session(chat_request.session_id)
            if memory is None:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail=f"Session {chat_request.session_id} not found or expired",
                )
            session_id = chat_request.session_id
        else:
            session_id, memory = create_session()

        callbacks = []
        handler = get_langfuse_handler()
        if handler:
            callbacks.append(handler)

        answer = await service.pipeline.answer(
            chat_request.message,
            memory=memory,
            callbacks=callbacks,
            metadata=create_trace_metadata(session_id=session_id),
        )

        logger.info(f"Session {session_id}: answered ({len(memory)} turns in memory)")

        return ChatResponse(
            message=answer,
            session_id=session_id,
            turn_count=len(memory),
            metadata={"vector_backend": settings.VECTOR_BACKEND},
        )

    @app.post("/ingest", response_model=IngestResponse)
    async def ingest(request: Request) -> IngestResponse:
        """Reload the policy documents and swap in the new corpus."""
        service = _get_service(request)
        try:
            count = await service.ingest()
        except PolicyBotError as e:
            logger.error(f"Ingestion failed: {e}")
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=f"Ingestion failed: {e}",
            )
        return IngestResponse(chunk_count=count)

    @app.get("/sessions/count")
    async def session_count():
        """Get number of active sessions."""
        return {"active_sessions": get_session_count()}

    @app.delete("/sessions/{session_id}")
    async def end_session(session_id: str):
        """Forget a session's conversation memory."""
        if not delete_session(session_id):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Session {session_id} not found",
            )
        return {"deleted": session_id}

    @app.get("/config", response_model=ConfigResponse)
    async def get_config() -> ConfigResponse:
        """
        Get public configuration information.

        Returns non-sensitive configuration details.
        """
        search_paths = []
        if settings.VECTOR_SEARCH_ENABLED:
            search_paths.append("vector")
        if settings.BM25_SEARCH_ENABLED and settings.mongodb_configured:
            search_paths.append("keyword")

        return ConfigResponse(
            llm_provider=settings.LLM_PROVIDER,
            environment=settings.ENVIRONMENT,
            langfuse_enabled=settings.langfuse_enabled,
            vector_backend=settings.VECTOR_BACKEND,
            search_paths=search_paths,
            chunk_size=settings.CHUNK_SIZE,
            chunk_overlap=settings.CHUNK_OVERLAP,
            top_k_results=settings.TOP_K_RESULTS,
            max_memory_turns=settings.MAX_MEMORY_TURNS,
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting server on port {settings.API_PORT}")

    uvicorn.run(
        "policy_bot.api.main:app",
        host="0.0.0.0",
        port=settings.API_PORT,
        reload=True if settings.ENVIRONMENT == "development" else False,
        log_level=settings.LOG_LEVEL.lower(),
    )
