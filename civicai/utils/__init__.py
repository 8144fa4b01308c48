"""
Utility functions
"""
from civicai.utils.logger import setup_logger, get_logger
from civicai.utils.clock import now_ms
from civicai.utils.validators import (
    validate_ticket_id,
    validate_phone,
    sanitize_input
)

__all__ = [
    "setup_logger",
    "get_logger",
    "now_ms",
    "validate_ticket_id",
    "validate_phone",
    "sanitize_input",
]
