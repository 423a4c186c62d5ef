"""Shared fixtures for LLM Visibility tests."""

import threading

import pytest

from llmvisibility.core.config import Settings
from llmvisibility.core.models import CompanyProfile, GeneratedQuestion, LlmProvider
from llmvisibility.services.llm import mock_response

SCORING_MARKER = "You are an AI visibility analyst"
ANSWER_MARKER = "You are an assistant. The user asked"
GENERATION_MARKER = "You are a market research assistant"
RECOMMENDATION_MARKER = "You are an AI marketing consultant"


class FakeLLMClient:
    """In-memory stand-in for ``LLMClient``.

    ``responder(provider, prompt)`` returns the answer text, or an exception
    instance to raise. Providers without a credential get the mock sentinel.
    """

    def __init__(self, credentials=(), responder=None):
        self.credentials = {LlmProvider(p) for p in credentials}
        self.responder = responder or (lambda provider, prompt: "")
        self.calls = []
        self._lock = threading.Lock()

    def has_credential(self, provider):
        return LlmProvider(provider) in self.credentials

    def generate_answer(self, provider, prompt):
        provider = LlmProvider(provider)
        with self._lock:
            self.calls.append((provider, prompt))
        if provider not in self.credentials:
            return mock_response(provider, prompt)
        result = self.responder(provider, prompt)
        if isinstance(result, Exception):
            raise result
        return result

    def calls_with(self, marker):
        return [call for call in self.calls if marker in call[1]]


@pytest.fixture
def fake_client():
    """Factory for fake clients."""
    return FakeLLMClient


@pytest.fixture
def make_settings():
    """Factory for isolated settings that ignore .env files and real keys."""
    def _make(**overrides):
        values = dict(
            openai_api_key="",
            anthropic_api_key="",
            gemini_api_key="",
            visibility_scoring_enabled=True,
            visibility_scoring_provider=None,
            visibility_scoring_weights="",
            scoring_weights_file=None,
            question_generation_provider="openai",
            recommendation_provider="openai",
            max_retries=1,
            retry_delay=0,
            llm_cache_enabled=False,
        )
        values.update(overrides)
        return Settings(_env_file=None, **values)
    return _make


@pytest.fixture
def company():
    return CompanyProfile(
        name="Acme Cloud",
        description="Managed cloud backup for small businesses.",
        services=["backup"],
    )


@pytest.fixture
def question():
    return GeneratedQuestion(
        id="0-1",
        text="Which companies provide backup in my region?",
        language="en",
        intent="find_service",
    )
