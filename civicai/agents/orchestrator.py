"""
LangGraph orchestrator - 분석 파이프라인 그래프 조립

Detecting → Drafting → Ready | Failed
"""
from typing import Optional

from langgraph.graph import StateGraph, END

from civicai.agents.detector import detect_issue
from civicai.agents.drafter import draft_complaint
from civicai.agents.utils import stage_condition, with_error_handling
from civicai.exceptions import PipelineStageError
from civicai.models.graph_state import PipelineResult, PipelineStage, PipelineState
from civicai.models.schemas import AnalysisReport, AnalysisSubmission, DetectionResult
from civicai.models.ticket import Coordinates
from civicai.services.authorities import AuthorityRegistry
from civicai.services.geocoding import GeocodingClient
from civicai.services.llm_service import LLMService
from civicai.utils.logger import get_logger

logger = get_logger(__name__)


class AnalysisPipeline:
    """
    Submission → AnalysisReport via the detect and draft agents

    Args:
        llm: Gemini service
        geocoder: Reverse geocoding client
        registry: Authority registry (fallback category)
    """

    def __init__(
        self,
        llm: LLMService,
        geocoder: GeocodingClient,
        registry: AuthorityRegistry
    ):
        self.llm = llm
        self.geocoder = geocoder
        self.registry = registry
        self.workflow = self.build_graph().compile()
        logger.info("Analysis pipeline compiled")

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    async def detect(self, state: PipelineState) -> PipelineState:
        """
        감지 노드 - 실패 시 fallback 결과 사용 (예외 없음)
        """
        fallback_category = self.registry.default_category
        detection = await detect_issue(self.llm, state["submission"], fallback_category)
        used_fallback = detection == DetectionResult.fallback(fallback_category)
        return {
            "detection": detection,
            "used_fallback": used_fallback,
            "stage": PipelineStage.DRAFTING.value,
        }

    async def resolve_address(self, state: PipelineState) -> PipelineState:
        """
        주소 결정: 제출된 주소 → 역지오코딩 → "Unknown Location"
        """
        submission: AnalysisSubmission = state["submission"]
        if submission.address and submission.address.strip():
            return {"address": submission.address.strip()}

        address = await self.geocoder.resolve_address(submission.location)
        return {"address": address}

    @with_error_handling
    async def draft(self, state: PipelineState) -> PipelineState:
        """
        초안 작성 노드 - 실패 시 PipelineStageError → failed
        """
        drafts = await draft_complaint(self.llm, state["detection"], state["address"])
        return {"drafts": drafts}

    async def ready(self, state: PipelineState) -> PipelineState:
        logger.info("Pipeline ready")
        return {"stage": PipelineStage.READY.value}

    async def failed(self, state: PipelineState) -> PipelineState:
        """
        에러 처리 노드
        """
        logger.error(f"Pipeline failed at {state.get('failed_stage')}: {state.get('errors', [])}")
        return {"stage": PipelineStage.FAILED.value}

    # ------------------------------------------------------------------
    # Graph
    # ------------------------------------------------------------------

    def build_graph(self) -> StateGraph:
        """
        LangGraph 워크플로우 그래프 생성

        플로우:
        1. START → detect
        2. detect → resolve_address → draft
        3. draft → (ready | failed)
        4. ready/failed → END
        """
        graph = StateGraph(PipelineState)

        # 노드 추가
        graph.add_node("detect", self.detect)
        graph.add_node("resolve_address", self.resolve_address)
        graph.add_node("draft", self.draft)
        graph.add_node("ready", self.ready)
        graph.add_node("failed", self.failed)

        # 시작점 설정
        graph.set_entry_point("detect")

        graph.add_edge("detect", "resolve_address")
        graph.add_edge("resolve_address", "draft")

        # 조건부 엣지: draft → (ready | failed)
        graph.add_conditional_edges(
            "draft",
            stage_condition,
            {
                "continue": "ready",
                "failed": "failed"
            }
        )

        graph.add_edge("ready", END)
        graph.add_edge("failed", END)

        return graph

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def run(self, submission: AnalysisSubmission) -> PipelineResult:
        """
        Run one submission through the graph

        Returns:
            PipelineResult (READY with report, or FAILED with errors)
        """
        initial: PipelineState = {
            "submission": submission,
            "stage": PipelineStage.DETECTING.value,
            "errors": [],
        }
        final = await self.workflow.ainvoke(initial)

        if final.get("stage") != PipelineStage.READY.value:
            return PipelineResult(
                stage=PipelineStage.FAILED,
                failed_stage=final.get("failed_stage"),
                errors=final.get("errors", []),
            )

        report = AnalysisReport(
            detection=final["detection"],
            drafts=final["drafts"],
            address=final["address"],
            location=submission.location or Coordinates(),
            used_fallback=final.get("used_fallback", False),
        )
        return PipelineResult(stage=PipelineStage.READY, report=report, errors=final.get("errors", []))

    async def analyze(self, submission: AnalysisSubmission) -> AnalysisReport:
        """
        Run the pipeline, raising on failure

        Raises:
            PipelineStageError: When drafting failed
        """
        result = await self.run(submission)
        if not result.ok:
            message = "; ".join(result.errors) or "pipeline failed"
            raise PipelineStageError(result.failed_stage or "pipeline", message)
        return result.report


def compile_pipeline(
    llm: Optional[LLMService] = None,
    geocoder: Optional[GeocodingClient] = None,
    registry: Optional[AuthorityRegistry] = None
) -> AnalysisPipeline:
    """
    파이프라인 생성 및 컴파일

    Returns:
        AnalysisPipeline with compiled LangGraph workflow
    """
    return AnalysisPipeline(
        llm=llm or LLMService(),
        geocoder=geocoder or GeocodingClient(),
        registry=registry or AuthorityRegistry(),
    )
