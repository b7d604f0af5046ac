"""Triage authoring request and response models."""

from uuid import UUID

from pydantic import BaseModel, Field


class TestMatchRequest(BaseModel):
    """Candidate utterance to run through the live matcher."""

    __test__ = False

    utterance: str = Field(..., min_length=1)
    auxiliary_keywords: list[str] = Field(default_factory=list)


class InvalidateResponse(BaseModel):
    """Compiled set published by the invalidation hook."""

    tenant_id: UUID
    ruleset_version: str
    rule_count: int
    degraded: bool
