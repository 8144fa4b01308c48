"""
Virtual Commissioner Agent (persona) - committed ticket → status update

Expected resolution windows come from the severity → window table in
settings, not from the prompt.
"""
from typing import Mapping

from civicai.exceptions import PipelineStageError
from civicai.models.ticket import Ticket
from civicai.services.llm_service import LLMService
from civicai.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_WINDOW = "as soon as possible"


def resolution_window(ticket: Ticket, windows: Mapping[str, str]) -> str:
    """Expected resolution window for the ticket severity"""
    return windows.get(ticket.severity.value, DEFAULT_WINDOW)


def build_persona_instruction(ticket: Ticket, window: str) -> str:
    """System instruction for the persona call"""
    return f"""You are the "Virtual Commissioner", an AI representative of the city administration.
Your goal is to reassure the citizen that their ticket (ID: {ticket.id}) regarding "{ticket.title}" is being looked into.
Be empathetic but professional. Mention the severity ({ticket.severity.value}) and the estimated resolution time for that severity ({window}).
Keep it under 50 words."""


async def commissioner_response(
    llm: LLMService,
    ticket: Ticket,
    windows: Mapping[str, str],
    max_output_tokens: int = 100
) -> str:
    """
    Run the persona agent

    Args:
        llm: Gemini service
        ticket: Committed ticket
        windows: Severity value → resolution window text
        max_output_tokens: Token limit for the reply

    Returns:
        Status update text

    Raises:
        PipelineStageError: On model failure or empty output
    """
    window = resolution_window(ticket, windows)
    logger.info(f"Requesting commissioner response for ticket {ticket.id} (window={window})")

    try:
        return await llm.generate_text(
            "Generate a status update response.",
            system_instruction=build_persona_instruction(ticket, window),
            max_output_tokens=max_output_tokens,
        )
    except Exception as e:
        logger.error(f"Commissioner response failed for ticket {ticket.id}: {e}")
        raise PipelineStageError("persona", str(e), e) from e
