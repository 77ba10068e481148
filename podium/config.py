"""Configuration management for the mock interview session core."""

import os
import logging
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _split_list(value: str):
    return tuple(item.strip() for item in value.split("|") if item.strip())


class Config:
    """Main configuration class."""

    # API Keys
    GOOGLE_API_KEY = os.getenv('GOOGLE_API_KEY')
    GEMINI_API_KEY = os.getenv('GEMINI_API_KEY')
    GEMINI_MODEL = os.getenv('GEMINI_MODEL', 'gemini-2.5-flash')

    # Backend Configuration
    BACKEND = os.getenv('PODIUM_BACKEND', 'http').lower()  # "http" or "gemini"
    API_BASE_URL = os.getenv('PODIUM_API_BASE_URL', 'http://localhost:4000/api/app').rstrip('/')
    REQUEST_TIMEOUT = float(os.getenv('REQUEST_TIMEOUT', 120))

    # The review/question endpoints have shipped with different field names;
    # the active schema is picked by version.
    API_SCHEMA_VERSION = os.getenv('API_SCHEMA_VERSION', 'v1')
    API_SCHEMAS = {
        'v1': {'position_field': 'positionTitle'},
        'v2': {'position_field': 'position'},
    }

    # Scoring
    SCORE_MIN = int(os.getenv('SCORE_MIN', 1))
    SCORE_MAX = int(os.getenv('SCORE_MAX', 10))
    DEFAULT_SCORE = int(os.getenv('DEFAULT_SCORE', 1))

    # Setup form limits
    MIN_QUESTION_COUNT = 1
    MAX_QUESTION_COUNT = int(os.getenv('MAX_QUESTION_COUNT', 8))

    # Recording
    RECORDING_TIMESLICE_MS = int(os.getenv('RECORDING_TIMESLICE_MS', 1000))
    FINAL_SLICE_TIMEOUT = float(os.getenv('FINAL_SLICE_TIMEOUT', 0.5))
    VIDEO_MIME_PREFERENCES = _split_list(os.getenv(
        'VIDEO_MIME_PREFERENCES',
        'video/webm;codecs=vp9,opus|video/webm;codecs=vp8,opus|video/webm|video/mp4'
    ))

    # Persistence
    DB_PATH = os.getenv('PODIUM_DB_PATH', 'interview_reviews.db')
    PERSIST_REVIEWS = os.getenv('PERSIST_REVIEWS', 'False').lower() == 'true'

    # Logging Configuration
    LOG_LEVEL = getattr(logging, os.getenv('LOG_LEVEL', 'INFO').upper(), logging.INFO)
    LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'

    @classmethod
    def validate_api_keys(cls):
        """Validate that the keys required by the selected backend are present."""
        if cls.BACKEND != 'gemini':
            return None

        if not (cls.GOOGLE_API_KEY or cls.GEMINI_API_KEY):
            raise ValueError("GOOGLE_API_KEY or GEMINI_API_KEY not found in environment variables.")

        if cls.GOOGLE_API_KEY and cls.GEMINI_API_KEY:
            # Use Google API key and remove Gemini key to avoid conflicts
            os.environ.pop('GEMINI_API_KEY', None)
            return cls.GOOGLE_API_KEY
        elif cls.GEMINI_API_KEY and not cls.GOOGLE_API_KEY:
            return cls.GEMINI_API_KEY

        return cls.GOOGLE_API_KEY or cls.GEMINI_API_KEY

    @classmethod
    def position_field(cls) -> str:
        """Name of the position field for the active API schema."""
        schema = cls.API_SCHEMAS.get(cls.API_SCHEMA_VERSION)
        if schema is None:
            raise ValueError(f"Unknown API_SCHEMA_VERSION: {cls.API_SCHEMA_VERSION}")
        return schema['position_field']


def setup_logging():
    """Setup logging configuration."""
    logging.basicConfig(
        level=Config.LOG_LEVEL,
        format=Config.LOG_FORMAT
    )

    # Suppress verbose logging from external libraries
    logging.getLogger("google.genai").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    return logging.getLogger(__name__)
