"""
Exceptions raised by the lead search pipeline
"""
from typing import Optional


class SearchError(Exception):
    """Base class for search pipeline errors"""


class ExtractionError(SearchError):
    """Query extraction call failed or returned an unusable payload"""


class ProviderError(SearchError):
    """People search provider failed; distinct from an empty result"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class SessionNotFoundError(SearchError):
    """Search session does not exist or belongs to another user"""

    def __init__(self, session_id: int):
        super().__init__(f"Search session {session_id} not found")
        self.session_id = session_id
