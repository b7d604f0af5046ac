"""Assembled response models."""

from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class AssemblyStrategy(str, Enum):
    """Which reply lists produced the text."""

    FULL_ONLY = "FULL_ONLY"
    QUICK_ONLY = "QUICK_ONLY"
    QUICK_THEN_FULL = "QUICK_THEN_FULL"
    CACHED = "CACHED"
    FALLBACK = "FALLBACK"


class AssembledResponse(BaseModel):
    """Caller-facing text for one turn."""

    text: str = Field(..., min_length=1)
    template: str = Field(
        ..., description="Reply before filler and placeholder substitution, safe to cache"
    )
    strategy: AssemblyStrategy
    scenario_id: UUID | None = None
    filler: str | None = Field(default=None, description="Filler phrase prepended, if any")
    follow_up: str | None = Field(default=None, description="Follow-up sentence appended")
