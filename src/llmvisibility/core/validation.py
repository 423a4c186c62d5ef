"""Validation of LLM-generated questions."""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .constants import QuestionConstants
from .models import VALID_INTENTS

_LANGUAGE_RE = re.compile(QuestionConstants.LANGUAGE_CODE_PATTERN)


@dataclass
class ValidationConfig:
    """Validation bounds; defaults match the generation prompt."""
    min_text_length: int = QuestionConstants.MIN_TEXT_LENGTH
    max_text_length: int = QuestionConstants.MAX_TEXT_LENGTH
    allowed_intents: Sequence[str] = VALID_INTENTS
    allowed_languages: Optional[Sequence[str]] = None


@dataclass
class ValidationError:
    """A single validation problem."""
    field: str
    value: Any
    message: str


@dataclass
class ValidationResult:
    """Accepted (normalized) questions plus every collected error."""
    valid: bool
    questions: List[Dict[str, str]] = field(default_factory=list)
    errors: List[ValidationError] = field(default_factory=list)


def _validate_single(question: Any, index: int, config: ValidationConfig) -> List[ValidationError]:
    errors: List[ValidationError] = []
    prefix = f"questions[{index}]"

    if not isinstance(question, dict):
        errors.append(ValidationError(prefix, question, "Question must be an object"))
        return errors

    text = question.get("text")
    if not isinstance(text, str):
        errors.append(ValidationError(f"{prefix}.text", text, "Question text must be a string"))
    else:
        length = len(text.strip())
        if length < config.min_text_length:
            errors.append(ValidationError(
                f"{prefix}.text", text,
                f"Question text must be at least {config.min_text_length} characters"))
        if length > config.max_text_length:
            errors.append(ValidationError(
                f"{prefix}.text", text,
                f"Question text must not exceed {config.max_text_length} characters"))
        if length == 0:
            errors.append(ValidationError(f"{prefix}.text", text, "Question text cannot be empty"))

    intent = question.get("intent")
    if not isinstance(intent, str):
        errors.append(ValidationError(f"{prefix}.intent", intent, "Question intent must be a string"))
    elif intent not in config.allowed_intents:
        errors.append(ValidationError(
            f"{prefix}.intent", intent,
            f"Intent must be one of: {', '.join(config.allowed_intents)}"))

    language = question.get("language")
    if not isinstance(language, str):
        errors.append(ValidationError(f"{prefix}.language", language, "Question language must be a string"))
    else:
        code = language.lower().strip()
        if not _LANGUAGE_RE.match(code):
            errors.append(ValidationError(
                f"{prefix}.language", language,
                "Language must be a valid ISO 639-1 code (2 letters)"))
        elif config.allowed_languages is not None and code not in config.allowed_languages:
            errors.append(ValidationError(
                f"{prefix}.language", language,
                f"Language must be one of: {', '.join(config.allowed_languages)}"))

    return errors


def validate_questions(questions: Any, config: Optional[ValidationConfig] = None) -> ValidationResult:
    """Validate candidate questions.

    A candidate with any error is excluded; ``valid`` is False as soon as a
    single error is found, but every individually valid candidate is still
    returned in normalized form.
    """
    config = config or ValidationConfig()

    if not isinstance(questions, list):
        return ValidationResult(
            valid=False,
            errors=[ValidationError("questions", questions, "Questions must be an array")],
        )

    accepted: List[Dict[str, str]] = []
    errors: List[ValidationError] = []

    for index, question in enumerate(questions):
        question_errors = _validate_single(question, index, config)
        if question_errors:
            errors.extend(question_errors)
            continue
        accepted.append({
            "text": question["text"].strip(),
            "intent": question["intent"],
            "language": question["language"].lower().strip(),
        })

    return ValidationResult(valid=not errors, questions=accepted, errors=errors)
