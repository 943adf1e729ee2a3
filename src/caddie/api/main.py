"""FastAPI main application."""

import threading
from contextlib import asynccontextmanager
from typing import Callable, Dict, Optional

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .. import config
from ..agent.agent_loop import ChatAgent
from ..logging import setup_logging, get_logger
from .models import ChatRequest, ChatResponse, HealthResponse, KeyCheckResponse

# Setup logging
setup_logging()
logger = get_logger(__name__)


class AgentSessions:
    """One ChatAgent per conversation, created on first use."""

    def __init__(self, factory: Callable[[], ChatAgent] = ChatAgent):
        self._factory = factory
        self._agents: Dict[str, ChatAgent] = {}
        self._lock = threading.Lock()

    def get(self, session_id: str) -> ChatAgent:
        with self._lock:
            agent = self._agents.get(session_id)
            if agent is None:
                agent = self._factory()
                agent.scheduler.start()
                self._agents[session_id] = agent
                logger.info(f"Created agent for session {session_id}")
            return agent

    def shutdown(self) -> None:
        with self._lock:
            for agent in self._agents.values():
                agent.scheduler.shutdown()
            self._agents.clear()


_sessions: Optional[AgentSessions] = None


def get_sessions() -> AgentSessions:
    """Get or create the session store."""
    global _sessions
    if _sessions is None:
        _sessions = AgentSessions()
    return _sessions


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    if _sessions is not None:
        _sessions.shutdown()


# Create FastAPI app
app = FastAPI(
    title="Caddie Chat Agent",
    description="Chat agent with scheduling, web browsing and tee time discovery tools",
    version="0.1.0",
    lifespan=lifespan,
)


def cors_headers(origin: Optional[str]) -> Dict[str, str]:
    allowed = bool(origin) and origin in config.CORS_ALLOWED_ORIGINS
    return {
        "Access-Control-Allow-Origin": origin if allowed else "",
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Allow-Headers": "Content-Type, Authorization",
        "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    }


@app.middleware("http")
async def cors(request: Request, call_next):
    """Allow-listed CORS; preflight answered with 204, errors still get headers."""
    origin = request.headers.get("origin")

    if request.method == "OPTIONS":
        return Response(status_code=204, headers=cors_headers(origin))

    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(f"Unhandled error for {request.url.path}: {e}", exc_info=True)
        response = JSONResponse({"error": "Internal Server Error"}, status_code=500)

    if origin and origin in config.CORS_ALLOWED_ORIGINS:
        response.headers.update(cors_headers(origin))
    return response


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return JSONResponse({"error": "Not found"}, status_code=404)
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code)


@app.get("/health", response_model=HealthResponse)
async def health():
    """Health check endpoint."""
    return HealthResponse(status="ok")


@app.get("/check-open-ai-key", response_model=KeyCheckResponse)
async def check_open_ai_key():
    """Whether the LLM API key is configured."""
    return KeyCheckResponse(success=bool(config.OPENAI_API_KEY))


@app.post("/agents/chat", response_model=ChatResponse)
def chat(request: ChatRequest, sessions: AgentSessions = Depends(get_sessions)):
    """
    Send a message and/or tool call decisions to a conversation.

    Runs in FastAPI's thread pool: Playwright's sync API cannot run on the event loop.
    """
    if not config.OPENAI_API_KEY:
        logger.error("OPENAI_API_KEY is not set, don't forget to set it in your .env file")

    try:
        agent = sessions.get(request.session_id)
    except ValueError as e:
        # API key validation error
        raise HTTPException(
            status_code=500,
            detail=f"Configuration error: {str(e)}. Please check your .env file."
        )

    logger.info(
        f"Chat request: session={request.session_id}, "
        f"message={(request.message or '')[:100]!r}, decisions={len(request.decisions)}"
    )
    result = agent.on_chat_message(
        user_message=request.message,
        decisions=request.decisions,
        max_steps=request.max_steps or config.DEFAULT_MAX_STEPS,
    )
    return ChatResponse(answer=result.get("answer"), pending=result.get("pending", []))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
