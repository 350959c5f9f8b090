"""
Provider adapter for OpenAI-compatible chat completion APIs.

DeepSeek, Qwen (DashScope compatible mode), Doubao (Ark) and any custom
OpenAI-compatible endpoint share one wire format, so a single adapter serves
all of them; the provider only decides which base URL and model are used
when the caller leaves them out.
"""

from openai import AsyncOpenAI, OpenAIError
from typing import AsyncGenerator, AsyncIterable, List, Optional, Dict, Any
import aiohttp
import asyncio
import codecs
import json
import logging
import time

from ..config import settings
from ..errors import ConfigurationError, UpstreamError
from ..schemas.chat import ApiProvider, ChatCompletion, CompletionRequest, ProviderConfig, Usage


logger = logging.getLogger(__name__)

# Built-in provider defaults. The "openai" provider stands for any
# OpenAI-compatible endpoint and has no URL of its own.
PROVIDER_DEFAULTS: Dict[ApiProvider, Dict[str, Any]] = {
    ApiProvider.DEEPSEEK: {
        "base_url": "https://api.deepseek.com/v1",
        "model": "deepseek-chat",
        "requires_url": False,
    },
    ApiProvider.QWEN: {
        "base_url": "https://dashscope.aliyuncs.com/compatible-mode/v1",
        "model": "qwen-max",
        "requires_url": False,
    },
    ApiProvider.DOUBAO: {
        "base_url": "https://ark.cn-beijing.volces.com/api/v3",
        "model": "doubao-pro-32k",
        "requires_url": False,
    },
    ApiProvider.OPENAI: {
        "base_url": "",
        "model": "gpt-4o",
        "requires_url": True,
    },
}

DONE_SENTINEL = "[DONE]"


async def iter_sse_data(chunks: AsyncIterable[bytes]) -> AsyncGenerator[str, None]:
    """
    Yield the payload of every ``data:`` line of a server-sent-event body.

    Bytes are decoded incrementally so multi-byte characters split across
    chunks survive; lines without the ``data:`` prefix (comments, keep-alives,
    ``event:`` fields) are dropped.
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    buffer = ""

    async for chunk in chunks:
        buffer += decoder.decode(chunk)
        lines = buffer.split("\n")
        buffer = lines.pop()

        for line in lines:
            line = line.strip()
            if line.startswith("data:"):
                yield line[5:].strip()

    buffer += decoder.decode(b"", final=True)
    line = buffer.strip()
    if line.startswith("data:"):
        yield line[5:].strip()


def _delta_content(payload: Any) -> Optional[str]:
    try:
        content = payload["choices"][0]["delta"].get("content")
    except (KeyError, IndexError, TypeError, AttributeError):
        return None
    return content if isinstance(content, str) else None


async def iter_fragments(chunks: AsyncIterable[bytes]) -> AsyncGenerator[str, None]:
    """
    Turn a chat-completions SSE body into text fragments.

    Stops at ``[DONE]``. Malformed JSON payloads are skipped silently; some
    providers interleave keep-alive or comment lines with the data.
    """
    async for data in iter_sse_data(chunks):
        if data == DONE_SENTINEL:
            return

        try:
            payload = json.loads(data)
        except ValueError:
            continue

        content = _delta_content(payload)
        if content:
            yield content


class OpenAICompatibleAdapter:
    """Chat adapter for one provider configuration. Holds no state between calls."""

    def __init__(self, config: ProviderConfig, timeout: Optional[float] = None):
        if not config.api_key:
            raise ConfigurationError("API key is required")

        defaults = PROVIDER_DEFAULTS[config.provider]

        self.provider = config.provider
        self.api_key = config.api_key
        self.api_base = (config.base_url or defaults["base_url"]).rstrip("/")
        self.model_id = config.model or defaults["model"]
        self.timeout = timeout or settings.CHAT_REQUEST_TIMEOUT

    @property
    def endpoint(self) -> str:
        return f"{self.api_base}/chat/completions"

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

    def _build_messages(self, request: CompletionRequest) -> List[Dict[str, str]]:
        """Build the message list for the API call."""
        messages = []

        if request.system_prompt:
            messages.append({"role": "system", "content": request.system_prompt})

        for turn in request.messages:
            # Stored model turns use the "model" role
            role = "assistant" if turn.role == "model" else turn.role
            messages.append({"role": role, "content": turn.content})

        return messages

    def _build_body(self, request: CompletionRequest, stream: bool) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "model": self.model_id,
            "messages": self._build_messages(request),
            "stream": stream,
        }

        # top_k is not part of the chat-completions schema; strict endpoints reject it
        optional = {
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
            "top_p": request.top_p,
        }
        body.update({name: value for name, value in optional.items() if value is not None})

        return body

    async def _upstream_error(self, response: aiohttp.ClientResponse, action: str) -> UpstreamError:
        """Build an error from a non-2xx response, preferring the provider's own message."""
        message = None
        try:
            data = await response.json(content_type=None)
            error = data.get("error") if isinstance(data, dict) else None
            if isinstance(error, dict):
                message = error.get("message")
            elif isinstance(error, str):
                message = error
        except (ValueError, aiohttp.ClientError):
            pass

        return UpstreamError(
            f"{self.provider.value} {action} failed: {message or f'HTTP {response.status}'}",
            status=response.status
        )

    def _parse_response(self, data: Dict[str, Any]) -> ChatCompletion:
        choices = data.get("choices") or [{}]
        choice = choices[0] or {}
        message = choice.get("message") or {}
        usage = data.get("usage")

        return ChatCompletion(
            id=data.get("id") or f"chat-{int(time.time() * 1000)}",
            content=message.get("content") or "",
            model=data.get("model") or self.model_id,
            finish_reason=choice.get("finish_reason"),
            usage=Usage(
                prompt_tokens=usage.get("prompt_tokens", 0),
                completion_tokens=usage.get("completion_tokens", 0),
                total_tokens=usage.get("total_tokens", 0)
            ) if isinstance(usage, dict) else None
        )

    async def chat(self, request: CompletionRequest) -> ChatCompletion:
        """Non-streaming chat completion."""
        body = self._build_body(request, stream=False)

        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    self.endpoint,
                    json=body,
                    headers=self._headers(),
                    timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as response:
                    if response.status >= 300:
                        raise await self._upstream_error(response, "API request")

                    data = await response.json(content_type=None)
        except UpstreamError as e:
            logger.warning("%s", e)
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.warning("%s API request failed: %r", self.provider.value, e)
            raise UpstreamError(f"{self.provider.value} API request failed: {e or type(e).__name__}")

        if not isinstance(data, dict):
            raise UpstreamError(f"{self.provider.value} API request failed: malformed response")

        return self._parse_response(data)

    async def chat_stream(self, request: CompletionRequest) -> AsyncGenerator[str, None]:
        """
        Stream a chat completion as text fragments.

        The generator is single-use. Upstream failures raise ``UpstreamError``
        from whichever ``__anext__`` call observes them.
        """
        body = self._build_body(request, stream=True)
        timeout = aiohttp.ClientTimeout(total=None, sock_connect=self.timeout, sock_read=self.timeout)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(self.endpoint, json=body, headers=self._headers()) as response:
                    if response.status >= 300:
                        raise await self._upstream_error(response, "stream request")

                    async for fragment in iter_fragments(response.content.iter_any()):
                        yield fragment
        except UpstreamError as e:
            logger.warning("%s", e)
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("%s stream request failed: %r", self.provider.value, e)
            raise UpstreamError(f"{self.provider.value} stream request failed: {e or type(e).__name__}")

    async def list_models(self) -> List[Dict[str, Any]]:
        """List available models from the provider."""
        client = AsyncOpenAI(base_url=self.api_base, api_key=self.api_key)
        try:
            response = await client.models.list()
            models = []
            for model in response.data:
                models.append({
                    "id": model.id,
                    "owned_by": getattr(model, "owned_by", "unknown"),
                    "created": getattr(model, "created", None)
                })
            return models
        except OpenAIError as e:
            logger.warning("Error listing %s models: %s", self.provider.value, e)
            return []
        finally:
            await client.close()
