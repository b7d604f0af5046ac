"""Tenant profile: per-company voice, phrases and threshold overrides."""

from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class Trade(str, Enum):
    """Line of business, used to pick emergency phrase coverage."""

    HVAC = "HVAC"
    PLUMBING = "PLUMBING"
    ELECTRICAL = "ELECTRICAL"
    GENERAL = "GENERAL"


class ActionPhrases(BaseModel):
    """What the agent says when the call leaves the resolver loop."""

    escalate: str = "Let me get you over to a team member who can help right away."
    take_message: str = (
        "I'd be happy to take a message. Can I get your name and the best number to reach you?"
    )
    end_call: str = "Thanks for calling {company_name}. Have a great day!"
    booking_handoff: str = "Great, let's get you on the schedule."
    clarify: str = "Sorry, could you tell me a little more about what's going on?"
    booking_offer: str = "Would you like me to get a technician out to you?"


class ThresholdOverrides(BaseModel):
    """Per-tenant resolver and gate overrides. None keeps the global default."""

    tier1_min_confidence: float | None = Field(default=None, ge=0.0, le=1.0)
    tier2_min_confidence: float | None = Field(default=None, ge=0.0, le=1.0)
    tier3_min_confidence: float | None = Field(default=None, ge=0.0, le=1.0)
    path_min_samples: int | None = Field(default=None, gt=0)
    path_min_success_rate: float | None = Field(default=None, ge=0.0, le=1.0)
    caller_min_successes: int | None = Field(default=None, gt=0)
    max_spend_usd: float | None = Field(default=None, ge=0.0)
    max_latency_ms: float | None = Field(default=None, ge=0.0)


class TenantProfile(BaseModel):
    """Read-only tenant configuration consumed by the pipeline."""

    tenant_id: UUID
    company_name: str = "our company"
    trade: Trade = Trade.GENERAL
    phone: str | None = None
    technician_name: str | None = None
    filler_phrases: list[str] = Field(
        default_factory=lambda: ["Okay.", "Got it.", "Sure thing."],
        description="Voice-only acknowledgements prepended at random",
    )
    default_reply: str = Field(
        default="I can help with that. Could you tell me a bit more about the issue?",
        description="Said when nothing in the scenario pool fits",
    )
    phrases: ActionPhrases = Field(default_factory=ActionPhrases)
    overrides: ThresholdOverrides = Field(default_factory=ThresholdOverrides)
    tier3_enabled: bool = True

    @classmethod
    def default(cls, tenant_id: UUID) -> "TenantProfile":
        """Profile used when the tenant has none on file."""
        return cls(tenant_id=tenant_id)
