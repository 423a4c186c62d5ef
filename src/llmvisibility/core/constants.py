"""Constants and configuration values for LLM Visibility."""

# Question Generation Constants
class QuestionConstants:
    """Constants related to question generation and validation."""

    MIN_QUESTIONS = 8  # minimum questions requested from the LLM
    MAX_QUESTIONS = 12  # questions kept after validation
    MIN_TEXT_LENGTH = 10  # minimum trimmed question length
    MAX_TEXT_LENGTH = 200  # maximum trimmed question length
    DEFAULT_LANGUAGE = "en"
    DEFAULT_LANGUAGE_NAME = "English"
    LANGUAGE_CODE_PATTERN = r"^[a-z]{2}$"

# Prompt Constants
class PromptConstants:
    """Constants for LLM prompts and templates."""

    # Prompt Versions (for cache invalidation)
    PROMPT_VERSION = "v1.2"

    # Response Limits
    MAX_TOKENS = 1024  # max tokens per provider response
    TEMPERATURE = 0.3  # provider temperature
    MOCK_PROMPT_PREVIEW = 100  # prompt chars echoed in mock responses
    LOG_PREVIEW_LENGTH = 300  # chars of prompts/answers shown in debug logs

# Scoring Constants
class ScoringConstants:
    """Constants for visibility scoring."""

    NOT_MENTIONED_CAP = 0.2  # score cap when the company is not mentioned

    # Heuristic scores
    HEURISTIC_COMPANY_AND_SERVICE = 0.9
    HEURISTIC_COMPANY_ONLY = 0.7
    HEURISTIC_SERVICE_ONLY = 0.4
    HEURISTIC_NONE = 0.1

    # Mock sentinel emitted by providers without credentials
    MOCK_PREFIX = "["
    MOCK_MARKER = "MOCK]"

# Insight Constants
class InsightConstants:
    """Constants for dashboard insights and recommendations."""

    WELL_REPRESENTED_THRESHOLD = 0.75
    MODERATE_THRESHOLD = 0.4

    WELL_REPRESENTED_COMMENT = "Service is well represented in LLM answers."
    MODERATE_COMMENT = "Service has moderate visibility. There is room for improvement."
    INVISIBLE_COMMENT = "Service is almost invisible in LLM answers. It needs active optimization."

    REINFORCE_DESCRIPTION = "Reinforce current positioning and keep descriptions up to date."
    ENHANCE_DESCRIPTION = (
        "Enhance descriptions of this service on your website and in public documentation; "
        "add clear, LLM-friendly wording."
    )

    MAX_RECOMMENDATION_BULLETS = 3

# Cache Constants
class CacheConstants:
    """Constants for caching behavior."""

    CACHE_TTL_HOURS = 24  # cache time-to-live in hours
    CACHE_KEY_LENGTH = 8  # length of cache key for logging

# Error Handling Constants
class ErrorConstants:
    """Constants for error handling and retries."""

    PROVIDER_TIMEOUT = 300  # seconds to wait for all provider question loops
    RECOMMENDATION_TIMEOUT = 120  # seconds to wait for all recommendations

# Metadata Constants
class MetadataConstants:
    """Constants for website metadata fetching."""

    DEFAULT_TIMEOUT = 5.0  # seconds
    MAX_DESCRIPTION_LENGTH = 500
    MAX_RESPONSE_BYTES = 512 * 1024  # stop reading the page after this many bytes
    CHUNK_SIZE = 8192

# Provider Constants
class ProviderConstants:
    """Constants for LLM provider endpoints."""

    GEMINI_OPENAI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"

# File and Path Constants
class FileConstants:
    """Constants for file operations."""

    LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    EXPORT_VERSION = "1.0.0"
