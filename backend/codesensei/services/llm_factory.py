"""
Client factory: picks and configures the provider adapter for a request.
"""

from typing import Any, Callable, Dict, Optional
import logging

from ..config import ProviderEnvironment
from ..errors import ConfigurationError
from ..models.user import UserSettings
from ..schemas.chat import ApiProvider, ProviderConfig
from ..utils.crypto import decrypt_provider_settings
from .llm_service import OpenAICompatibleAdapter, PROVIDER_DEFAULTS


logger = logging.getLogger(__name__)

ClientFactory = Callable[[ProviderConfig], OpenAICompatibleAdapter]

_ENV_KEYS = {
    ApiProvider.DEEPSEEK: "DEEPSEEK_API_KEY",
    ApiProvider.QWEN: "QWEN_API_KEY",
    ApiProvider.DOUBAO: "DOUBAO_API_KEY",
    ApiProvider.OPENAI: "OPENAI_API_KEY",
}


def get_provider_defaults(provider: ApiProvider) -> Dict[str, Any]:
    return dict(PROVIDER_DEFAULTS[provider])


def get_api_key_from_env(provider: ApiProvider) -> str:
    """Read the provider's API key from the environment; never cached."""
    return getattr(ProviderEnvironment(), _ENV_KEYS[provider], "") or ""


def get_default_provider() -> ApiProvider:
    """Provider named by ``DEFAULT_AI_PROVIDER``, falling back to DeepSeek."""
    value = (ProviderEnvironment().DEFAULT_AI_PROVIDER or "").strip().lower()
    try:
        return ApiProvider(value)
    except ValueError:
        if value:
            logger.warning("Unknown DEFAULT_AI_PROVIDER %r, using deepseek", value)
        return ApiProvider.DEEPSEEK


def create_api_client(config: ProviderConfig) -> OpenAICompatibleAdapter:
    """
    Build a fresh adapter for ``config``.

    Raises:
        ConfigurationError: if the API key is missing, or the provider has no
            built-in endpoint and no base URL was given. Nothing touches the
            network before these checks.
    """
    provider = config.provider.value

    if not config.api_key:
        raise ConfigurationError(f"{provider} API key is not configured; set it in settings")

    if PROVIDER_DEFAULTS[config.provider]["requires_url"] and not config.base_url:
        raise ConfigurationError(f"{provider} requires a base URL; set it in settings")

    return OpenAICompatibleAdapter(config)


def _stored_provider_settings(user_settings: Optional[UserSettings], provider: ApiProvider) -> Dict[str, Any]:
    if user_settings is None or not user_settings.provider_settings:
        return {}
    stored = user_settings.provider_settings.get(provider.value)
    if not isinstance(stored, dict):
        return {}
    return decrypt_provider_settings({provider.value: stored})[provider.value]


def resolve_provider_config(payload: Any, user_settings: Optional[UserSettings] = None) -> ProviderConfig:
    """
    Merge request fields, stored user settings and the environment.

    ``payload`` is any request body exposing ``provider``, ``model``,
    ``api_key`` and ``base_url``. Each value is taken from the first source
    that sets it: the request, then the user's settings, then the environment
    or provider default. A missing key is reported by :func:`create_api_client`.
    """
    provider = payload.provider
    if provider is None and user_settings is not None and user_settings.api_provider:
        try:
            provider = ApiProvider(user_settings.api_provider)
        except ValueError:
            provider = None
    if provider is None:
        provider = get_default_provider()

    stored = _stored_provider_settings(user_settings, provider)

    return ProviderConfig(
        provider=provider,
        api_key=payload.api_key or stored.get("apiKey") or get_api_key_from_env(provider),
        base_url=payload.base_url or stored.get("baseUrl") or None,
        model=payload.model or stored.get("selectedModel") or None,
    )


def get_client_factory() -> ClientFactory:
    """Dependency returning the adapter factory; overridden in tests."""
    return create_api_client
