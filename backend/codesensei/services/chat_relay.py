"""
Stream relay between a provider adapter and one client connection.

The relay forwards every upstream fragment to the client as a server-sent
event while buffering the full reply, then hands the buffered text to the
message store. It persists whatever was received even when the upstream fails
part-way or the client goes away.

Event format::

    data: {"content": "<fragment>"}\\n\\n     one per non-empty fragment
    data: [DONE]\\n\\n                         after a successful stream
    data: {"error": "<message>"}\\n\\n        instead of [DONE] on failure
"""

from enum import Enum
from typing import Any, AsyncGenerator, Callable, Dict, List, Optional
import asyncio
import json
import logging

import anyio

from ..config import settings
from ..errors import CodeSenseiError, UpstreamError, ValidationError
from ..schemas.chat import ChatCompletion, CompletionRequest, ProviderConfig
from .message_store import MessageStore


logger = logging.getLogger(__name__)

DONE_EVENT = "data: [DONE]\n\n"


class RelayState(str, Enum):
    IDLE = "idle"
    AWAITING_UPSTREAM = "awaiting_upstream"
    STREAMING = "streaming"
    FINALIZING = "finalizing"
    CLOSED = "closed"
    ERROR = "error"


def encode_event(payload: Dict[str, Any]) -> str:
    """Serialize one SSE ``data:`` event."""
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


class ChatRelay:
    """
    Single-use relay for one chat request.

    Call :meth:`open` first; it validates the request and builds the adapter,
    so configuration problems surface before any response is started. Then
    consume either :meth:`events` (streaming) or :meth:`complete`.
    """

    def __init__(
        self,
        factory: Callable,
        config: ProviderConfig,
        request: CompletionRequest,
        store: Optional[MessageStore] = None,
        session_id: Optional[int] = None,
        timeout: Optional[float] = None,
        max_fragments: Optional[int] = None
    ):
        self.factory = factory
        self.config = config
        self.request = request
        self.store = store
        self.session_id = session_id
        self.timeout = settings.CHAT_STREAM_TIMEOUT if timeout is None else timeout
        self.max_fragments = settings.CHAT_STREAM_MAX_FRAGMENTS if max_fragments is None else max_fragments

        self.state = RelayState.IDLE
        self.adapter = None
        self._fragments: List[str] = []
        self._finalized = False

    @property
    def accumulated(self) -> str:
        return "".join(self._fragments)

    def _transition(self, state: RelayState):
        logger.debug("Relay %s -> %s (session %s)", self.state.value, state.value, self.session_id)
        self.state = state

    def open(self) -> "ChatRelay":
        """
        Validate the request and build the adapter.

        Raises:
            ValidationError: if there are no messages.
            ConfigurationError: if the factory cannot configure the provider.
        """
        if self.state != RelayState.IDLE:
            raise RuntimeError("ChatRelay is single-use")

        try:
            if not self.request.messages:
                raise ValidationError("messages must not be empty", field="messages")
            self.adapter = self.factory(self.config)
        except Exception:
            self._transition(RelayState.CLOSED)
            raise

        self._transition(RelayState.AWAITING_UPSTREAM)
        return self

    async def _persist(self, role: str, content: str):
        """Append one message; failures are logged, never raised."""
        if self.store is None or self.session_id is None:
            return
        try:
            await self.store.append(self.session_id, role, content)
        except Exception:
            logger.exception("Failed to persist %s message for session %s", role, self.session_id)

    async def _persist_user_turn(self):
        last = self.request.messages[-1]
        if last.role == "user":
            await self._persist("user", last.content)

    async def _finalize(self):
        """Persist the accumulated reply once, if there is any."""
        if self._finalized:
            return
        self._finalized = True

        content = self.accumulated
        if content:
            await self._persist("model", content)

    async def _next_fragment(self, stream, deadline: Optional[float]) -> str:
        if deadline is None:
            return await stream.__anext__()

        remaining = deadline - asyncio.get_running_loop().time()
        if remaining <= 0:
            raise asyncio.TimeoutError()
        return await asyncio.wait_for(stream.__anext__(), remaining)

    def _error_message(self, error: Exception) -> str:
        if isinstance(error, CodeSenseiError):
            return error.message
        if isinstance(error, asyncio.TimeoutError):
            return f"Stream timed out after {self.timeout:g}s"
        return str(error) or type(error).__name__

    async def events(self) -> AsyncGenerator[str, None]:
        """Relay the upstream stream as SSE events."""
        if self.state != RelayState.AWAITING_UPSTREAM:
            raise RuntimeError("ChatRelay.open() must be called before events()")

        await self._persist_user_turn()

        stream = self.adapter.chat_stream(self.request)
        deadline = asyncio.get_running_loop().time() + self.timeout if self.timeout else None
        count = 0

        try:
            while True:
                try:
                    fragment = await self._next_fragment(stream, deadline)
                except StopAsyncIteration:
                    break

                if self.state == RelayState.AWAITING_UPSTREAM:
                    self._transition(RelayState.STREAMING)

                if not fragment:
                    continue

                count += 1
                if self.max_fragments and count > self.max_fragments:
                    raise UpstreamError(f"Stream exceeded {self.max_fragments} fragments")

                self._fragments.append(fragment)
                yield encode_event({"content": fragment})

            self._transition(RelayState.FINALIZING)
            await self._finalize()
            yield DONE_EVENT

        except Exception as e:
            self._transition(RelayState.ERROR)
            message = self._error_message(e)
            logger.warning("Chat stream failed for session %s: %s", self.session_id, message)
            await self._finalize()
            yield encode_event({"error": message})

        finally:
            # Runs on client disconnect too; the host cancels this task then.
            with anyio.CancelScope(shield=True):
                aclose = getattr(stream, "aclose", None)
                if aclose is not None:
                    try:
                        await aclose()
                    except Exception:
                        logger.debug("Error closing upstream stream", exc_info=True)
                await self._finalize()
            self._transition(RelayState.CLOSED)

    async def complete(self) -> ChatCompletion:
        """Non-streaming variant with the same persistence order."""
        if self.state != RelayState.AWAITING_UPSTREAM:
            raise RuntimeError("ChatRelay.open() must be called before complete()")

        await self._persist_user_turn()

        try:
            result = await self.adapter.chat(self.request)
        except Exception:
            self._transition(RelayState.ERROR)
            self._transition(RelayState.CLOSED)
            raise

        self._transition(RelayState.FINALIZING)
        if result.content:
            self._fragments.append(result.content)
            await self._finalize()
        self._transition(RelayState.CLOSED)

        return result.model_copy(update={"session_id": self.session_id})
