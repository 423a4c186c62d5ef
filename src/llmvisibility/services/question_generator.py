"""Question generation: customer-style questions asked to every provider."""

import logging
import time
from dataclasses import dataclass
from typing import List, Optional

from ..core.config import Settings, settings as default_settings
from ..core.constants import PromptConstants, QuestionConstants
from ..core.extraction import MOCK_RESPONSE_ERROR, ParsedError, extract_questions
from ..core.models import CompanyProfile, GeneratedQuestion, LlmProvider, QuestionIntent
from ..core.validation import validate_questions
from .llm import resolve_provider

logger = logging.getLogger(__name__)


class QuestionGenerationError(Exception):
    """Raised when question generation fails and template fallback is disabled."""


@dataclass
class QuestionGenerationOptions:
    provider: Optional[LlmProvider] = None
    min_questions: int = QuestionConstants.MIN_QUESTIONS
    max_questions: int = QuestionConstants.MAX_QUESTIONS
    enable_fallback: bool = True


def generate_template_questions(company: CompanyProfile) -> List[GeneratedQuestion]:
    """Three template questions per service; none mention the company name."""
    questions = []
    for idx, service in enumerate(company.services):
        questions.extend([
            GeneratedQuestion(
                id=f"{idx}-1",
                text=f"Which companies provide {service} in my region?",
                language=QuestionConstants.DEFAULT_LANGUAGE,
                intent=QuestionIntent.FIND_SERVICE.value,
            ),
            GeneratedQuestion(
                id=f"{idx}-2",
                text=f"What are the best options for {service}?",
                language=QuestionConstants.DEFAULT_LANGUAGE,
                intent=QuestionIntent.COMPARE_OPTIONS.value,
            ),
            GeneratedQuestion(
                id=f"{idx}-3",
                text=f"How much does {service} cost?",
                language=QuestionConstants.DEFAULT_LANGUAGE,
                intent=QuestionIntent.PRICING.value,
            ),
        ])
    return questions


def build_question_generation_prompt(company: CompanyProfile, min_questions: int, max_questions: int) -> str:
    """Prompt asking for a JSON array of questions; the company name is left out on purpose."""
    locale = company.target_locales[0] if company.target_locales else None
    target_language = locale or QuestionConstants.DEFAULT_LANGUAGE_NAME
    language_code = locale or QuestionConstants.DEFAULT_LANGUAGE
    first_service = company.services[0] if company.services else "this service"
    context = f"- Industry context: {company.description}\n" if company.description else ""

    return (
        "You are a market research assistant.\n"
        "Generate realistic questions that potential customers would ask AI assistants when searching for services.\n"
        "\n"
        "Context (for reference only - DO NOT mention company name in questions):\n"
        f"- Services offered: {', '.join(company.services)}\n"
        f"{context}"
        "\n"
        "Requirements:\n"
        f"- Generate {min_questions}-{max_questions} diverse questions\n"
        "- Questions should be from a customer's perspective searching for these services\n"
        "- Questions should NOT mention any specific company names\n"
        "- Questions should be natural, as if a real customer is asking an AI assistant\n"
        "- Include different intents: finding services, comparing options, pricing inquiries, reviews, features\n"
        f"- Language: {target_language} (use language code \"{language_code}\")\n"
        "\n"
        "Examples of good questions:\n"
        f"- \"Which companies provide {first_service}?\"\n"
        f"- \"What are the best options for {first_service}?\"\n"
        f"- \"How much does {first_service} cost?\"\n"
        f"- \"What should I look for when choosing a {first_service} provider?\"\n"
        "\n"
        "Return your response as a valid JSON array with this exact structure:\n"
        "[\n"
        "  {\n"
        "    \"text\": \"Question text here (without company names)\",\n"
        "    \"intent\": \"find_service\" | \"compare_options\" | \"pricing\" | \"reviews\" | \"features\",\n"
        f"    \"language\": \"{language_code}\"\n"
        "  }\n"
        "]\n"
        "\n"
        "Ensure the JSON is valid and parseable."
    )


def _fallback_or_raise(company: CompanyProfile, enable_fallback: bool, message: str) -> List[GeneratedQuestion]:
    if enable_fallback:
        logger.warning(f"{message}; falling back to template questions")
        return generate_template_questions(company)
    raise QuestionGenerationError(message)


def question_generator_agent(
    client,
    company: CompanyProfile,
    options: Optional[QuestionGenerationOptions] = None,
    settings: Optional[Settings] = None,
) -> List[GeneratedQuestion]:
    """Generate questions with the LLM, falling back to templates when enabled."""
    config = settings or default_settings
    options = options or QuestionGenerationOptions()
    provider = resolve_provider(options.provider or config.question_generation_provider,
                                "question generation provider")
    if provider is None:
        return _fallback_or_raise(company, options.enable_fallback, "No valid question generation provider configured")

    if not client.has_credential(provider):
        return _fallback_or_raise(company, options.enable_fallback, f"{provider.value} API key not configured")

    prompt = build_question_generation_prompt(company, options.min_questions, options.max_questions)

    try:
        logger.info(f"[Question Generation] Calling {provider.value} to generate questions...")
        response = client.generate_answer(provider, prompt)
    except Exception as e:
        logger.error(f"Error in question generation: {e}")
        return _fallback_or_raise(company, options.enable_fallback, f"Question generation failed: {e}")

    logger.debug(f"[Question Generation] Response preview: {response[:PromptConstants.LOG_PREVIEW_LENGTH]}")

    parsed = extract_questions(response)
    if isinstance(parsed, ParsedError):
        if parsed.reason == MOCK_RESPONSE_ERROR:
            message = "Question generation unavailable (LLM API key not configured)"
        else:
            message = f"Failed to parse LLM response: {parsed.reason}"
        return _fallback_or_raise(company, options.enable_fallback, message)

    if not parsed.value:
        return _fallback_or_raise(company, options.enable_fallback, "LLM returned no questions")

    validation = validate_questions(parsed.value)
    if not validation.valid or not validation.questions:
        logger.warning(f"Question validation failed: {[e.message for e in validation.errors]}")
        return _fallback_or_raise(
            company,
            options.enable_fallback,
            f"Question validation failed: {', '.join(e.message for e in validation.errors)}",
        )

    stamp = int(time.time() * 1000)
    questions = [
        GeneratedQuestion(id=f"q-{idx}-{stamp}", text=q["text"], language=q["language"], intent=q["intent"])
        for idx, q in enumerate(validation.questions)
    ]

    if len(questions) < options.min_questions and options.enable_fallback:
        logger.warning(
            f"LLM generated only {len(questions)} questions, expected {options.min_questions}. Using fallback.")
        return generate_template_questions(company)

    logger.info(f"[Question Generation] Generated {len(questions)} questions")
    return questions[:options.max_questions]
