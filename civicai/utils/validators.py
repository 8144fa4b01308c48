"""
Input validation utilities
"""
import re


def validate_ticket_id(ticket_id: str) -> bool:
    """
    Validate ticket ID format

    Args:
        ticket_id: Ticket ID to validate

    Returns:
        True if valid format
    """
    # Ticket IDs are short zero-padded numbers (e.g. "0042")
    return bool(ticket_id) and ticket_id.isdigit()


def validate_phone(number: str) -> bool:
    """
    Validate WhatsApp contact number (digits only, country code included)

    Args:
        number: Phone number to validate

    Returns:
        True if valid format
    """
    return re.match(r'^[0-9]{8,15}$', number) is not None


def sanitize_input(text: str, max_length: int = 10000) -> str:
    """
    Sanitize user input

    Args:
        text: Input text to sanitize
        max_length: Maximum allowed length

    Returns:
        Sanitized text
    """
    # Remove null bytes
    text = text.replace('\x00', '')

    # Truncate to max length
    if len(text) > max_length:
        text = text[:max_length]

    return text.strip()
