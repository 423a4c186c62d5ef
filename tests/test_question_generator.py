"""Tests for question generation."""

import json

import pytest

from llmvisibility.core.models import CompanyProfile, LlmProvider
from llmvisibility.services.question_generator import (
    QuestionGenerationError,
    QuestionGenerationOptions,
    build_question_generation_prompt,
    generate_template_questions,
    question_generator_agent,
)

TWO_SERVICES = CompanyProfile(
    name="Acme Cloud",
    description="Managed cloud backup.",
    services=["backup", "disaster recovery"],
    target_locales=["fi"],
)


def _generated(count, language="en"):
    return [
        {"text": f"Which providers offer backup option {i}?", "intent": "find_service", "language": language}
        for i in range(count)
    ]


class TestTemplateQuestions:

    def test_three_per_service(self):
        questions = generate_template_questions(TWO_SERVICES)
        assert [q.id for q in questions] == ["0-1", "0-2", "0-3", "1-1", "1-2", "1-3"]
        assert questions[0].text == "Which companies provide backup in my region?"
        assert questions[4].text == "What are the best options for disaster recovery?"
        assert questions[5].intent == "pricing"
        assert all(q.language == "en" for q in questions)
        assert all("Acme" not in q.text for q in questions)


class TestQuestionGeneratorAgent:

    def test_no_credential_uses_templates(self, fake_client, make_settings):
        client = fake_client()
        questions = question_generator_agent(client, TWO_SERVICES, settings=make_settings())
        assert len(questions) == 6
        assert client.calls == []

    def test_no_credential_without_fallback_raises(self, fake_client, make_settings):
        with pytest.raises(QuestionGenerationError):
            question_generator_agent(fake_client(), TWO_SERVICES,
                                     QuestionGenerationOptions(enable_fallback=False),
                                     settings=make_settings())

    def test_llm_questions(self, fake_client, make_settings):
        payload = "```json\n" + json.dumps(_generated(10, "FI")) + "\n```"
        client = fake_client(credentials=["openai"], responder=lambda p, prompt: payload)
        questions = question_generator_agent(client, TWO_SERVICES, settings=make_settings())
        assert len(questions) == 10
        assert questions[0].id.startswith("q-0-")
        assert questions[3].id.startswith("q-3-")
        assert all(q.language == "fi" for q in questions)

    def test_truncated_to_max(self, fake_client, make_settings):
        client = fake_client(credentials=["openai"], responder=lambda p, prompt: json.dumps(_generated(15)))
        questions = question_generator_agent(client, TWO_SERVICES, settings=make_settings())
        assert len(questions) == 12

    def test_too_few_questions_uses_templates(self, fake_client, make_settings):
        client = fake_client(credentials=["openai"], responder=lambda p, prompt: json.dumps(_generated(3)))
        questions = question_generator_agent(client, TWO_SERVICES, settings=make_settings())
        assert [q.id for q in questions][:3] == ["0-1", "0-2", "0-3"]

    def test_too_few_questions_kept_without_fallback(self, fake_client, make_settings):
        client = fake_client(credentials=["openai"], responder=lambda p, prompt: json.dumps(_generated(3)))
        questions = question_generator_agent(client, TWO_SERVICES,
                                             QuestionGenerationOptions(enable_fallback=False),
                                             settings=make_settings())
        assert len(questions) == 3

    def test_invalid_batch_uses_templates(self, fake_client, make_settings):
        batch = _generated(9) + [{"text": "short", "intent": "find_service", "language": "en"}]
        client = fake_client(credentials=["openai"], responder=lambda p, prompt: json.dumps(batch))
        questions = question_generator_agent(client, TWO_SERVICES, settings=make_settings())
        assert questions[0].id == "0-1"

    def test_invalid_batch_without_fallback_raises(self, fake_client, make_settings):
        batch = [{"text": "short", "intent": "find_service", "language": "en"}]
        client = fake_client(credentials=["openai"], responder=lambda p, prompt: json.dumps(batch))
        with pytest.raises(QuestionGenerationError, match="validation failed"):
            question_generator_agent(client, TWO_SERVICES, QuestionGenerationOptions(enable_fallback=False),
                                     settings=make_settings())

    def test_unparseable_response_uses_templates(self, fake_client, make_settings):
        client = fake_client(credentials=["openai"], responder=lambda p, prompt: "No idea, sorry.")
        questions = question_generator_agent(client, TWO_SERVICES, settings=make_settings())
        assert len(questions) == 6

    def test_provider_error_uses_templates(self, fake_client, make_settings):
        client = fake_client(credentials=["openai"], responder=lambda p, prompt: TimeoutError("slow"))
        questions = question_generator_agent(client, TWO_SERVICES, settings=make_settings())
        assert len(questions) == 6

    def test_provider_from_options(self, fake_client, make_settings):
        client = fake_client(credentials=["gemini"], responder=lambda p, prompt: json.dumps(_generated(8)))
        questions = question_generator_agent(client, TWO_SERVICES,
                                             QuestionGenerationOptions(provider=LlmProvider.GEMINI),
                                             settings=make_settings())
        assert len(questions) == 8
        assert client.calls[0][0] == LlmProvider.GEMINI

    def test_unknown_provider_uses_templates(self, fake_client, make_settings):
        client = fake_client(credentials=["openai"], responder=lambda p, prompt: json.dumps(_generated(10)))
        questions = question_generator_agent(client, TWO_SERVICES,
                                             settings=make_settings(question_generation_provider="claude"))
        assert [q.id for q in questions] == ["0-1", "0-2", "0-3", "1-1", "1-2", "1-3"]
        assert client.calls == []

    def test_unknown_provider_without_fallback_raises(self, fake_client, make_settings):
        with pytest.raises(QuestionGenerationError, match="No valid question generation provider"):
            question_generator_agent(fake_client(credentials=["openai"]), TWO_SERVICES,
                                     QuestionGenerationOptions(enable_fallback=False),
                                     settings=make_settings(question_generation_provider="claude"))

    def test_provider_from_settings(self, fake_client, make_settings):
        client = fake_client(credentials=["anthropic"], responder=lambda p, prompt: json.dumps(_generated(8)))
        question_generator_agent(client, TWO_SERVICES,
                                 settings=make_settings(question_generation_provider="anthropic"))
        assert client.calls[0][0] == LlmProvider.ANTHROPIC


def test_generation_prompt():
    prompt = build_question_generation_prompt(TWO_SERVICES, 8, 12)
    assert "Generate 8-12 diverse questions" in prompt
    assert "- Services offered: backup, disaster recovery" in prompt
    assert "- Industry context: Managed cloud backup." in prompt
    assert 'Language: fi (use language code "fi")' in prompt
    assert "Acme Cloud" not in prompt


def test_generation_prompt_default_language():
    company = CompanyProfile(name="Acme", description="", services=["backup"])
    prompt = build_question_generation_prompt(company, 8, 12)
    assert 'Language: English (use language code "en")' in prompt
    assert "Industry context" not in prompt
