"""Turn-processing entry point."""

from frontdesk.pipeline.engine import CallPipeline
from frontdesk.pipeline.models import PipelineStepTiming, TurnRequest, TurnResult, TurnTrace

__all__ = ["CallPipeline", "PipelineStepTiming", "TurnRequest", "TurnResult", "TurnTrace"]
