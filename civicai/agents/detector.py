"""
Detection Agent (vision) - image + context → structured civic issue facts

Never raises: any failure (network, blocked response, malformed JSON,
schema violation) yields the deterministic fallback stub so the citizen can
continue to manual review.
"""
from typing import Optional

from pydantic import ValidationError

from civicai.models.schemas import AnalysisSubmission, DetectionResult
from civicai.models.ticket import AuthorityCategory, Severity
from civicai.services.llm_service import LLMService
from civicai.utils.logger import get_logger
from civicai.utils.validators import sanitize_input

logger = get_logger(__name__)


DETECTION_INSTRUCTION = f"""
You are an expert autonomous civic issue detector.
Analyze the image and user description to identify civic infrastructure problems (potholes, garbage, broken lights, water leaks, etc.).
Determine the severity based on public safety impact.
Identify the likely responsible authority type (e.g., Corporation for roads/garbage, Water Board for leaks, Electricity Board for poles, Traffic Police for signals and traffic hazards).
Provide a confidence score (0.0 to 1.0) and a brief reasoning for your assessment.

Return strict JSON with exactly these fields (all required):
{{
  "title": "Short title of the issue (e.g., 'Severe Pothole on Main St')",
  "description": "Detailed technical description of the damage",
  "severity": one of {[s.value for s in Severity]},
  "authorityType": one of {[c.value for c in AuthorityCategory]},
  "detectedObjects": ["object", ...],
  "confidence": number between 0.0 and 1.0,
  "reasoning": "Why this issue was identified and why the severity level was chosen"
}}
"""


def build_detection_prompt(user_prompt: Optional[str]) -> str:
    """User-turn prompt for the detection call"""
    if user_prompt and user_prompt.strip():
        return f"Additional user context: {sanitize_input(user_prompt, max_length=4096)}"
    return "Analyze this civic issue."


async def detect_issue(
    llm: LLMService,
    submission: AnalysisSubmission,
    fallback_category: AuthorityCategory
) -> DetectionResult:
    """
    Run the detection agent

    Args:
        llm: Gemini service
        submission: Image payload and optional context
        fallback_category: Authority category reported by the fallback stub

    Returns:
        Validated DetectionResult, or DetectionResult.fallback(...) on failure
    """
    logger.info("Starting issue detection")

    try:
        raw = await llm.generate_json(
            build_detection_prompt(submission.user_prompt),
            system_instruction=DETECTION_INSTRUCTION,
            image=submission.image,
            mime_type=submission.mime_type,
        )
        result = DetectionResult.model_validate(raw)

    except ValidationError as e:
        logger.warning(f"Detection response failed schema validation, using fallback: {e.error_count()} errors")
        return DetectionResult.fallback(fallback_category)
    except Exception as e:
        logger.error(f"AI analysis failed, using fallback: {e}")
        return DetectionResult.fallback(fallback_category)

    logger.info(
        f"Detection complete: '{result.title}' severity={result.severity.value} "
        f"authority={result.authority_type.value} confidence={result.confidence:.2f}"
    )
    return result
