"""
Search pipeline configuration
"""
import os

class SearchConfig:
    """Policy thresholds and external service settings for the search pipeline"""

    # Broadening policy
    MIN_USEFUL_RESULTS = int(os.getenv("SEARCH_MIN_USEFUL_RESULTS", "5"))
    GOOD_ENOUGH_RESULTS = int(os.getenv("SEARCH_GOOD_ENOUGH_RESULTS", "10"))
    MAX_SEARCH_ATTEMPTS = int(os.getenv("SEARCH_MAX_ATTEMPTS", "5"))  # including the initial query

    # Preference scoring
    ICP_MIN_CONFIDENCE = float(os.getenv("ICP_MIN_CONFIDENCE", "0.2"))
    NEUTRAL_SCORE = int(os.getenv("ICP_NEUTRAL_SCORE", "50"))
    ICP_FULL_CONFIDENCE_DATA_POINTS = int(os.getenv("ICP_FULL_CONFIDENCE_DATA_POINTS", "50"))

    # Interpretation
    DEFAULT_CONFIDENCE = 0.5
    FAILED_PARSE_CONFIDENCE = 0.3
    LOW_CONFIDENCE = 0.4

    # Pagination
    DEFAULT_PAGE = 1
    DEFAULT_PER_PAGE = int(os.getenv("SEARCH_DEFAULT_PER_PAGE", "25"))
    LOW_ESTIMATE_PER_PAGE = 10
    HIGH_ESTIMATE_PER_PAGE = 50
    MAX_PER_PAGE = 100

    # Suggestions
    NARROW_DOWN_THRESHOLD = 50
    BROADEN_TITLE_THRESHOLD = 3

    # People search provider
    PROVIDER_BASE_URL = os.getenv("PEOPLE_SEARCH_API_URL", "https://api.apollo.io/api/v1")
    PROVIDER_API_KEY = os.getenv("PEOPLE_SEARCH_API_KEY", "")
    PROVIDER_TIMEOUT = int(os.getenv("PEOPLE_SEARCH_TIMEOUT", "30"))

    # Query extraction
    OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
    OPENAI_MODEL = os.getenv("SEARCH_EXTRACTION_MODEL", "gpt-4o-mini")
    OPENAI_TIMEOUT = float(os.getenv("SEARCH_EXTRACTION_TIMEOUT", "20"))
