from contextlib import asynccontextmanager
from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

from core.config import settings
from core.exceptions import ConcurrentModification, SessionNotFound
from core.logger import setup_logging, logger
from constants.messages import Messages, Intents
from db.session import create_session_store
from models.quiz import Reply
from services.ai_service import AIService
from services.chat_service import ChatService
from services.intent_service import IntentService
from services.quiz_service import QuizService


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    store = create_session_store()
    intent_service = IntentService()
    app.state.chat_service = ChatService(QuizService(store, AIService()), intent_service)

    logger.info(
        "Kakapo chat relay started",
        env=settings.ENV,
        session_backend=settings.SESSION_BACKEND,
        gemini_key_configured=bool(settings.GEMINI_API_KEY),
    )
    if not intent_service.has_credentials:
        logger.error("Credentials file not found", path=intent_service.credentials_path)

    try:
        yield
    finally:
        await store.close()


app = FastAPI(
    title="Kakapo Chat API",
    description="Chat relay to Dialogflow with a built-in Kakapo quiz.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    )
    logger.warning("Invalid request body", path=request.url.path, details=details)
    return JSONResponse(status_code=422, content={"error": "Invalid request", "details": details})


class ChatRequest(BaseModel):
    """Incoming chat turn."""
    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(..., description="User message", examples=["start quiz"])
    session_id: str = Field(..., alias="sessionId", min_length=1, description="Opaque client session id")


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None


def get_chat_service(request: Request) -> ChatService:
    return request.app.state.chat_service


@app.get("/")
async def health():
    return {"ok": True, "service": "kakapo-chat"}


@app.post(
    "/chat",
    response_model=Reply,
    summary="Send a chat message",
    responses={
        409: {"model": ErrorResponse, "description": "Another request for this session is in progress"},
        500: {"model": ErrorResponse, "description": "Upstream or internal failure"},
    },
)
async def chat(body: ChatRequest, chat_service: ChatService = Depends(get_chat_service)):
    logger.info("Chat message received", message=body.message, session_id=body.session_id)
    try:
        return await chat_service.handle(body.message, body.session_id)
    except SessionNotFound:
        return Reply(message=Messages.get("NO_ACTIVE_QUIZ"), intent=Intents.NO_ACTIVE)
    except ConcurrentModification as e:
        return JSONResponse(status_code=409, content={"error": "Session busy", "details": str(e)})
    except Exception as e:
        logger.exception("Chat request failed", session_id=body.session_id)
        return JSONResponse(status_code=500, content={"error": "Failed", "details": str(e)})
