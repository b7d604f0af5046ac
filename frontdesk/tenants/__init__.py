"""Tenant configuration consumed by the pipeline."""

from frontdesk.tenants.models import ActionPhrases, TenantProfile, ThresholdOverrides, Trade
from frontdesk.tenants.store import TenantConfigStore

__all__ = ["ActionPhrases", "TenantConfigStore", "TenantProfile", "ThresholdOverrides", "Trade"]
