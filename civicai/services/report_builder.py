"""
Turns an analysis report into a routable TicketDraft

- Resolves authorityType to a registry authority (default on no match)
- Applies the submitter's severity override while keeping the detected
  severity in aiAnalysis
"""
from typing import Optional

from civicai.models.schemas import AnalysisReport
from civicai.models.ticket import AIAnalysis, Severity, TicketDraft
from civicai.services.authorities import AuthorityRegistry
from civicai.utils.logger import get_logger

logger = get_logger(__name__)


def build_ticket_draft(
    report: AnalysisReport,
    registry: AuthorityRegistry,
    image_url: Optional[str] = None,
    severity_override: Optional[Severity] = None
) -> TicketDraft:
    """
    Build the draft committed by TicketService.create_ticket

    Args:
        report: Pipeline output
        registry: Authority registry
        image_url: Evidence reference
        severity_override: Submitter-chosen severity (replaces the AI one)

    Returns:
        TicketDraft
    """
    detection = report.detection
    authority = registry.resolve(detection.authority_type)
    severity = severity_override or detection.severity

    if severity_override and severity_override != detection.severity:
        logger.info(f"Severity overridden by submitter: {detection.severity.value} → {severity_override.value}")

    return TicketDraft(
        title=detection.title,
        description=detection.description,
        image_url=image_url,
        severity=severity,
        location=report.location,
        address=report.address,
        authority_id=authority.id,
        ai_analysis=AIAnalysis(
            detected_objects=detection.detected_objects,
            confidence=detection.confidence,
            reasoning=detection.reasoning,
            detected_severity=detection.severity,
        ),
        drafts=report.drafts,
    )
