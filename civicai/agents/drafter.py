"""
Drafting Agent - detection facts + address → formal complaint drafts
"""
from pydantic import ValidationError

from civicai.exceptions import PipelineStageError
from civicai.models.schemas import DetectionResult
from civicai.models.ticket import ComplaintDrafts
from civicai.services.llm_service import LLMService
from civicai.utils.logger import get_logger

logger = get_logger(__name__)


def build_draft_prompt(detection: DetectionResult, address: str) -> str:
    """Prompt for the drafting call"""
    return f"""Draft a formal complaint for:
Issue: {detection.title}
Details: {detection.description}
Location: {address}
Severity: {detection.severity.value}

Output JSON with:
1. emailSubject (Formal, citing severity)
2. emailBody (Polite, citing citizen rights, requesting immediate action)
3. whatsappMessage (Short, urgent, includes location)
"""


async def draft_complaint(
    llm: LLMService,
    detection: DetectionResult,
    address: str
) -> ComplaintDrafts:
    """
    Run the drafting agent

    Args:
        llm: Gemini service
        detection: Detection agent output
        address: Resolved address

    Returns:
        ComplaintDrafts

    Raises:
        PipelineStageError: On model, JSON or schema failure
    """
    logger.info(f"Drafting complaint for '{detection.title}' at {address}")

    try:
        raw = await llm.generate_json(build_draft_prompt(detection, address))
        drafts = ComplaintDrafts.model_validate(raw)
    except ValidationError as e:
        logger.error(f"Draft response missing fields: {e.error_count()} errors")
        raise PipelineStageError("draft", "response did not match the drafts schema", e) from e
    except Exception as e:
        logger.error(f"Complaint drafting failed: {e}")
        raise PipelineStageError("draft", str(e), e) from e

    logger.info(f"Drafts ready: {drafts.email_subject}")
    return drafts
