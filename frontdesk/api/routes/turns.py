"""Turn entry point."""

from fastapi import APIRouter

from frontdesk.api.dependencies import CallPipelineDep
from frontdesk.api.exceptions import InvalidRequestError
from frontdesk.observability.logging import get_logger
from frontdesk.pipeline.models import TurnRequest, TurnResult

logger = get_logger(__name__)

router = APIRouter()


@router.post("/turns", response_model=TurnResult)
async def process_turn(request: TurnRequest, pipeline: CallPipelineDep) -> TurnResult:
    """Process one caller utterance.

    Pass back the returned `updated_session_state` as `session_state` on
    the next turn of the same call. A turn for a closed call gets 409.
    """
    if not (request.normalized_utterance or request.raw_utterance).strip():
        raise InvalidRequestError("normalized_utterance or raw_utterance is required")
    try:
        return await pipeline.process_turn(request)
    except ValueError as e:
        raise InvalidRequestError(str(e)) from e
