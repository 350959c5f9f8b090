"""
Chat routes with streaming support.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from typing import Optional

from ..config import settings
from ..database import get_db, get_session_factory
from ..models.chat import ChatSession
from ..models.user import User
from ..schemas.chat import ApiProvider, ChatRequest, ChatCompletion, CompletionRequest
from ..schemas.session import SessionCreate
from ..services.auth_service import AuthService
from ..services.chat_relay import ChatRelay
from ..services.llm_factory import ClientFactory, get_client_factory, resolve_provider_config
from ..services.message_store import MessageStore
from ..services.session_service import SessionService, default_title
from ..utils.security import get_current_user


router = APIRouter(prefix="/api/chat", tags=["Chat"])


def _last_user_text(chat_request: ChatRequest) -> str:
    for turn in reversed(chat_request.messages):
        if turn.role == "user":
            return turn.content
    return ""


def _build_completion(
    chat_request: ChatRequest,
    system_prompt: Optional[str],
    session: Optional[ChatSession]
) -> CompletionRequest:
    """Request fields win; the session's stored parameters fill the gaps."""
    params = (session.model_params if session is not None else None) or {}

    temperature = chat_request.temperature
    if temperature is None:
        temperature = params.get("temperature")
    if temperature is None:
        temperature = settings.DEFAULT_TEMPERATURE

    return CompletionRequest(
        messages=chat_request.messages,
        system_prompt=chat_request.system_prompt or system_prompt,
        temperature=temperature,
        max_tokens=chat_request.max_tokens or params.get("maxOutputTokens"),
        top_p=chat_request.top_p,
        top_k=chat_request.top_k or params.get("topK")
    )


async def prepare_relay(
    chat_request: ChatRequest,
    current_user: User,
    db: AsyncSession,
    factory: ClientFactory,
    session_factory: async_sessionmaker
) -> ChatRelay:
    """
    Resolve the session and provider, then open a relay.

    A new session is only created once the relay has validated the request,
    so a misconfigured provider leaves nothing behind.
    """
    session_service = SessionService(db)
    session = None
    draft = None

    if chat_request.session_id is not None:
        session = await session_service.get_owned(chat_request.session_id, current_user.id)
    elif chat_request.persona_id:
        draft = ChatSession(user_id=current_user.id, persona_id=chat_request.persona_id)

    system_prompt = None
    if not chat_request.system_prompt and (session or draft) is not None:
        system_prompt = await session_service.resolve_system_prompt(session or draft)

    user_settings = await AuthService(db).get_user_settings(current_user.id)
    config = resolve_provider_config(chat_request, user_settings)

    relay = ChatRelay(
        factory,
        config,
        _build_completion(chat_request, system_prompt, session),
        store=MessageStore(session_factory),
        session_id=session.id if session else None
    )
    relay.open()

    if draft is not None:
        session = await session_service.create(
            current_user.id,
            SessionCreate(title=default_title(_last_user_text(chat_request)), persona_id=chat_request.persona_id)
        )
        relay.session_id = session.id

    return relay


@router.post("", response_model=ChatCompletion, response_model_exclude_none=True)
async def send_message(
    chat_request: ChatRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    factory: ClientFactory = Depends(get_client_factory),
    session_factory: async_sessionmaker = Depends(get_session_factory)
):
    """Send a message and get the complete response."""
    relay = await prepare_relay(chat_request, current_user, db, factory, session_factory)
    return await relay.complete()


@router.post("/stream")
async def stream_message(
    chat_request: ChatRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    factory: ClientFactory = Depends(get_client_factory),
    session_factory: async_sessionmaker = Depends(get_session_factory)
):
    """Send a message and stream the response as server-sent events."""
    relay = await prepare_relay(chat_request, current_user, db, factory, session_factory)

    headers = {
        "Cache-Control": "no-cache",
        "Connection": "keep-alive",
        "X-Accel-Buffering": "no"
    }
    if relay.session_id is not None:
        headers["X-Session-Id"] = str(relay.session_id)

    return StreamingResponse(relay.events(), media_type="text/event-stream", headers=headers)


@router.get("/models")
async def list_models(
    provider: Optional[ApiProvider] = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    factory: ClientFactory = Depends(get_client_factory)
):
    """List available models for a provider using the caller's credentials."""
    user_settings = await AuthService(db).get_user_settings(current_user.id)
    config = resolve_provider_config(ChatRequest(provider=provider), user_settings)

    client = factory(config)
    models = await client.list_models()
    return {"provider": config.provider.value, "models": models}
