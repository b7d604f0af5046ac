"""Test factories for creating test data."""

from tests.factories.frontdesk import RuleFactory, ScenarioFactory
from tests.factories.pipeline import PipelineFactory

__all__ = [
    "PipelineFactory",
    "RuleFactory",
    "ScenarioFactory",
]
