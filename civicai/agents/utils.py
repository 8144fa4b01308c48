"""
Shared utilities for LangGraph agents
"""
from functools import wraps
from typing import Callable

from civicai.exceptions import PipelineStageError
from civicai.models.graph_state import PipelineStage, PipelineState
from civicai.utils.logger import get_logger

logger = get_logger(__name__)


def with_error_handling(func: Callable) -> Callable:
    """
    Record stage failures in state instead of raising

    A PipelineStageError marks the run FAILED with the failing stage;
    any other exception is recorded the same way under the node name.

    Args:
        func: Async node function or method (state is the last positional arg)

    Returns:
        Wrapped node
    """
    @wraps(func)
    async def wrapper(*args, **kwargs) -> PipelineState:
        state: PipelineState = args[-1] if args else kwargs.get("state", {})
        try:
            return await func(*args, **kwargs)
        except PipelineStageError as e:
            logger.error(f"Error in {func.__name__}: {e}")
            return {
                "stage": PipelineStage.FAILED.value,
                "failed_stage": e.stage,
                "errors": state.get("errors", []) + [str(e)],
            }
        except Exception as e:
            logger.error(f"Error in {func.__name__}: {str(e)}", exc_info=True)
            return {
                "stage": PipelineStage.FAILED.value,
                "failed_stage": func.__name__,
                "errors": state.get("errors", []) + [f"{func.__name__}: {str(e)}"],
            }
    return wrapper


def stage_condition(state: PipelineState) -> str:
    """Route to 'failed' once any node marked the run FAILED"""
    if state.get("stage") == PipelineStage.FAILED.value:
        return "failed"
    return "continue"
