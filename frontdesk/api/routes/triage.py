"""Triage authoring tools: test-match, preview and the invalidation hook."""

from uuid import UUID

from fastapi import APIRouter

from frontdesk.api.dependencies import PreviewServiceDep, RuleCompilerDep
from frontdesk.api.models.triage import InvalidateResponse, TestMatchRequest
from frontdesk.observability.logging import get_logger
from frontdesk.triage.preview import MatchTrialResult, RulePreview

logger = get_logger(__name__)

router = APIRouter(prefix="/tenants/{tenant_id}/triage")


@router.post("/test-match", response_model=MatchTrialResult)
async def test_match(
    tenant_id: UUID,
    body: TestMatchRequest,
    preview_service: PreviewServiceDep,
) -> MatchTrialResult:
    """Run an utterance through the live matcher and explain the result."""
    return await preview_service.test_match(tenant_id, body.utterance, body.auxiliary_keywords)


@router.get("/preview", response_model=RulePreview)
async def preview_rules(tenant_id: UUID, preview_service: PreviewServiceDep) -> RulePreview:
    """Compiled rule order with keyword conflicts and emergency gaps."""
    return await preview_service.preview(tenant_id)


@router.post("/invalidate", response_model=InvalidateResponse)
async def invalidate_rules(tenant_id: UUID, compiler: RuleCompilerDep) -> InvalidateResponse:
    """Called by the authoring side after any rule change.

    Returns once the rebuilt set is published, so the next turn sees it.
    """
    ruleset = await compiler.invalidate(tenant_id)
    logger.info(
        "triage_invalidated",
        tenant_id=str(tenant_id),
        version=ruleset.version,
        rule_count=len(ruleset),
    )
    return InvalidateResponse(
        tenant_id=tenant_id,
        ruleset_version=ruleset.version,
        rule_count=len(ruleset),
        degraded=ruleset.degraded,
    )
