"""LLM provider clients."""

import hashlib
import logging
from typing import Dict, Optional

import anthropic
import openai
from diskcache import Cache
from tenacity import retry, stop_after_attempt, wait_exponential

from ..core.config import Settings, settings as default_settings
from ..core.constants import CacheConstants, PromptConstants, ProviderConstants
from ..core.models import LlmProvider

logger = logging.getLogger(__name__)


def _has_valid_key(key: Optional[str]) -> bool:
    return bool(key) and len(key.strip()) > 0


def resolve_provider(value, role: str = "provider") -> Optional[LlmProvider]:
    """Map a configured provider name to ``LlmProvider``; unknown names give None."""
    if value is None or value == "":
        return None
    try:
        return LlmProvider(value)
    except ValueError:
        logger.warning(f"Unknown {role} '{value}', ignoring")
        return None


def mock_response(provider: LlmProvider, prompt: str) -> str:
    """Recognizable stub returned instead of a call when a provider has no key."""
    return f"[{provider.value.upper()} MOCK] {prompt[:PromptConstants.MOCK_PROMPT_PREVIEW]}"


class LLMClient:
    """Single-shot text completion against the configured providers.

    Credentials come from the ``Settings`` object handed to the constructor,
    so every query against it is pure and independent of global state.
    """

    def __init__(self, config: Optional[Settings] = None):
        self.settings = config or default_settings
        self._openai_clients: Dict[LlmProvider, openai.OpenAI] = {}
        self._anthropic_client: Optional[anthropic.Anthropic] = None
        self.cache = Cache(self.settings.cache_dir) if self.settings.llm_cache_enabled else None

    def api_key(self, provider: LlmProvider) -> str:
        provider = LlmProvider(provider)
        if provider == LlmProvider.OPENAI:
            return self.settings.openai_api_key
        if provider == LlmProvider.ANTHROPIC:
            return self.settings.anthropic_api_key
        return self.settings.gemini_api_key

    def model_for(self, provider: LlmProvider) -> str:
        provider = LlmProvider(provider)
        if provider == LlmProvider.OPENAI:
            return self.settings.openai_model
        if provider == LlmProvider.ANTHROPIC:
            return self.settings.anthropic_model
        return self.settings.gemini_model

    def has_credential(self, provider: LlmProvider) -> bool:
        """Check whether a usable API key is configured for ``provider``."""
        try:
            return _has_valid_key(self.api_key(provider))
        except ValueError:
            return False

    def generate_answer(self, provider: LlmProvider, prompt: str) -> str:
        """Return the provider's answer to ``prompt``.

        Without a credential the mock sentinel is returned and no request is
        made. Transport errors propagate after the configured retries.
        """
        provider = LlmProvider(provider)
        if not self.has_credential(provider):
            logger.warning(f"[{provider.value}] API key not configured, returning mock response")
            return mock_response(provider, prompt)

        model = self.model_for(provider)
        cache_key = None
        if self.cache is not None:
            cache_key = hashlib.md5(
                f"{provider.value}|{model}|{prompt}|{PromptConstants.PROMPT_VERSION}".encode()
            ).hexdigest()
            cached = self.cache.get(cache_key)
            if cached:
                logger.debug(f"Cache hit for LLM request: {cache_key[:CacheConstants.CACHE_KEY_LENGTH]}...")
                return cached

        call = retry(
            stop=stop_after_attempt(max(1, self.settings.max_retries)),
            wait=wait_exponential(multiplier=self.settings.retry_delay, max=self.settings.retry_backoff * 10),
            reraise=True,
        )(self._dispatch)

        logger.info(f"[{provider.value}] Calling {model}")
        logger.debug(f"[{provider.value}] Prompt: {prompt[:PromptConstants.LOG_PREVIEW_LENGTH]}")
        answer = call(provider, model, prompt)
        if not answer:
            logger.warning(f"[{provider.value}] Empty answer received")
        else:
            logger.debug(f"[{provider.value}] Received response ({len(answer)} chars)")

        if cache_key is not None and answer:
            self.cache.set(cache_key, answer, expire=3600 * CacheConstants.CACHE_TTL_HOURS)
        return answer

    def _dispatch(self, provider: LlmProvider, model: str, prompt: str) -> str:
        if provider == LlmProvider.ANTHROPIC:
            return self._call_anthropic(model, prompt)
        return self._call_openai_compatible(provider, model, prompt)

    def _openai_client(self, provider: LlmProvider) -> openai.OpenAI:
        client = self._openai_clients.get(provider)
        if client is None:
            if provider == LlmProvider.GEMINI:
                # Gemini exposes an OpenAI-compatible chat completions endpoint
                client = openai.OpenAI(
                    api_key=self.settings.gemini_api_key,
                    base_url=ProviderConstants.GEMINI_OPENAI_BASE_URL,
                )
            else:
                client = openai.OpenAI(api_key=self.settings.openai_api_key)
            self._openai_clients[provider] = client
        return client

    def _call_openai_compatible(self, provider: LlmProvider, model: str, prompt: str) -> str:
        response = self._openai_client(provider).chat.completions.create(
            model=model,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=PromptConstants.MAX_TOKENS,
            temperature=PromptConstants.TEMPERATURE,
            timeout=self.settings.request_timeout,
        )
        content = response.choices[0].message.content
        return (content or "").strip()

    def _call_anthropic(self, model: str, prompt: str) -> str:
        if self._anthropic_client is None:
            self._anthropic_client = anthropic.Anthropic(api_key=self.settings.anthropic_api_key)
        response = self._anthropic_client.messages.create(
            model=model,
            max_tokens=PromptConstants.MAX_TOKENS,
            messages=[{"role": "user", "content": prompt}],
            timeout=self.settings.request_timeout,
        )
        parts = [block.text for block in response.content if getattr(block, "type", None) == "text"]
        return "".join(parts).strip()


class LLMClientFactory:
    """Factory for creating LLM clients."""

    @staticmethod
    def create(config: Optional[Settings] = None) -> LLMClient:
        """Create a client bound to ``config`` (the global settings by default)."""
        client = LLMClient(config)
        available = [p.value for p in LlmProvider if client.has_credential(p)]
        if available:
            logger.info(f"LLM client initialized with providers: {', '.join(available)}")
        else:
            logger.warning("No provider API keys configured - answers will be mock responses")
        return client
