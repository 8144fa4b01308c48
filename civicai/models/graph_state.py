"""
LangGraph State Schema for the analysis pipeline

State Flow:
    1. submission: Raw image + context (input)
    2. detection: Detection agent facts (fallback stub on failure)
    3. address: Resolved address used for drafting
    4. drafts: Outreach text from the drafting agent
    5. stage: Current pipeline stage (detecting → drafting → ready | failed)
    6. errors: Error tracking throughout the workflow
"""
from enum import Enum
from typing import TypedDict, Optional, List, Dict, Any
from typing_extensions import NotRequired

from pydantic import BaseModel, Field, ConfigDict

from civicai.models.schemas import AnalysisReport


class PipelineStage(str, Enum):
    """Analysis pipeline states"""
    DETECTING = "detecting"
    DRAFTING = "drafting"
    READY = "ready"
    FAILED = "failed"


# ============================================================================
# TypedDict Definitions (for LangGraph)
# ============================================================================

class PipelineState(TypedDict):
    """
    LangGraph workflow state.

    All fields are optional (NotRequired) to allow partial state updates.
    Model objects are stored as-is; the graph never serializes state.
    """
    submission: NotRequired[Any]  # AnalysisSubmission
    detection: NotRequired[Optional[Any]]  # DetectionResult
    used_fallback: NotRequired[bool]
    address: NotRequired[Optional[str]]
    drafts: NotRequired[Optional[Any]]  # ComplaintDrafts
    stage: NotRequired[str]  # PipelineStage value
    failed_stage: NotRequired[Optional[str]]
    errors: NotRequired[List[str]]
    metadata: NotRequired[Dict[str, Any]]


# ============================================================================
# Pydantic Definitions
# ============================================================================

class PipelineResult(BaseModel):
    """
    Final outcome of one pipeline run.

    Attributes:
        stage: READY or FAILED
        report: Analysis report (READY only)
        failed_stage: Stage that failed (FAILED only)
        errors: Errors collected during the run
    """
    model_config = ConfigDict(from_attributes=True)

    stage: PipelineStage
    report: Optional[AnalysisReport] = None
    failed_stage: Optional[str] = None
    errors: List[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.stage == PipelineStage.READY
