"""
Exception types shared across services and routes
"""
from typing import Optional


class CivicAIError(Exception):
    """Base class for application errors"""


class TicketStoreError(CivicAIError):
    """Raised when the ticket store cannot persist the collection"""


class PipelineStageError(CivicAIError):
    """
    Raised when a generative stage (draft or persona) fails.

    Args:
        stage: Stage name ("draft", "persona", ...)
        message: Failure description
    """

    def __init__(self, stage: str, message: str, cause: Optional[Exception] = None):
        super().__init__(f"{stage} stage failed: {message}")
        self.stage = stage
        self.message = message
        self.cause = cause


class GeocodingError(CivicAIError):
    """Raised when the geocoding service cannot resolve a request"""
