"""Recover structured JSON from free-text LLM responses.

Model output is unpredictable: a response may be bare JSON, JSON inside a
markdown code fence, or JSON buried in prose. Extraction tries an ordered list
of strategies and stops at the first one that yields a value of the expected
shape. Callers only ever see a ``ParsedOk`` or a ``ParsedError``.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple, Union

from .constants import ScoringConstants

logger = logging.getLogger(__name__)

ARRAY_MODE = "array"
RECORD_MODE = "record"

MOCK_RESPONSE_ERROR = "LLM API key not configured - received mock response"
EMPTY_RESPONSE_ERROR = "Empty or invalid response"

_JSON_BLOCK_RE = re.compile(r"```json\s*([\s\S]*?)\s*```", re.IGNORECASE)
_CODE_BLOCK_RE = re.compile(r"```\s*([\s\S]*?)\s*```")
_ARRAY_OF_OBJECTS_RE = re.compile(r"\[\s*\{[\s\S]*\}\s*\]")


@dataclass(frozen=True)
class ParsedOk:
    """Successfully extracted value and the strategy that produced it."""
    value: Any
    strategy: str


@dataclass(frozen=True)
class ParsedError:
    """Extraction failure with a human-readable reason."""
    reason: str


ParseOutcome = Union[ParsedOk, ParsedError]


def is_mock_response(text: str) -> bool:
    """Return True for the stub responses emitted when a provider has no credential."""
    if not isinstance(text, str):
        return False
    trimmed = text.strip()
    return trimmed.startswith(ScoringConstants.MOCK_PREFIX) and ScoringConstants.MOCK_MARKER in trimmed


def _whole_text(text: str) -> Optional[str]:
    return text


def _json_block(text: str) -> Optional[str]:
    match = _JSON_BLOCK_RE.search(text)
    return match.group(1) if match else None


def _any_code_block(text: str) -> Optional[str]:
    match = _CODE_BLOCK_RE.search(text)
    return match.group(1) if match else None


def _array_scan(text: str) -> Optional[str]:
    match = _ARRAY_OF_OBJECTS_RE.search(text)
    return match.group(0) if match else None


# (name, candidate finder, modes it applies to) in precedence order
STRATEGIES: List[Tuple[str, Callable[[str], Optional[str]], Tuple[str, ...]]] = [
    ("direct", _whole_text, (ARRAY_MODE, RECORD_MODE)),
    ("json_block", _json_block, (ARRAY_MODE, RECORD_MODE)),
    ("code_block", _any_code_block, (ARRAY_MODE, RECORD_MODE)),
    ("array_scan", _array_scan, (ARRAY_MODE,)),
]


def _has_shape(value: Any, mode: str) -> bool:
    if mode == ARRAY_MODE:
        return isinstance(value, list)
    return isinstance(value, dict)


def extract(text: str, mode: str) -> ParseOutcome:
    """Extract a JSON array (``ARRAY_MODE``) or object (``RECORD_MODE``) from text."""
    if not text or not isinstance(text, str):
        return ParsedError(EMPTY_RESPONSE_ERROR)

    if is_mock_response(text):
        return ParsedError(MOCK_RESPONSE_ERROR)

    trimmed = text.strip()
    for name, find_candidate, modes in STRATEGIES:
        if mode not in modes:
            continue
        candidate = find_candidate(trimmed)
        if not candidate:
            continue
        try:
            value = json.loads(candidate.strip())
        except ValueError:
            continue
        if _has_shape(value, mode):
            logger.debug(f"Extracted {mode} via '{name}' strategy")
            return ParsedOk(value=value, strategy=name)

    if mode == ARRAY_MODE:
        return ParsedError("Could not extract valid JSON array from response")
    return ParsedError("Could not extract valid JSON object from response")


def extract_questions(text: str) -> ParseOutcome:
    """Extract a list of question records."""
    return extract(text, ARRAY_MODE)


def extract_scoring(text: str) -> ParseOutcome:
    """Extract a single scoring record."""
    return extract(text, RECORD_MODE)
