"""Tenant configuration store implementations."""

from frontdesk.tenants.stores.inmemory import InMemoryTenantConfigStore

__all__ = ["InMemoryTenantConfigStore"]
