"""Unit tests for the turn endpoint."""

from uuid import UUID

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from frontdesk.api.app import create_app
from frontdesk.api.dependencies import get_call_pipeline, reset_dependencies
from frontdesk.pipeline.engine import CallPipeline
from frontdesk.tenants.models import TenantProfile
from frontdesk.tenants.stores import InMemoryTenantConfigStore
from frontdesk.triage.models import TriageAction
from tests.factories import PipelineFactory, RuleFactory, ScenarioFactory


@pytest.fixture
async def pipeline(
    tenant_id: UUID, config_store: InMemoryTenantConfigStore, profile: TenantProfile
) -> CallPipeline:
    await config_store.save_profile(profile)
    await config_store.save_rule(RuleFactory.create(tenant_id=tenant_id))
    await config_store.save_rule(
        RuleFactory.create(
            tenant_id=tenant_id,
            label="CANCEL",
            category="cancel",
            keywords=["cancel"],
            action=TriageAction.END_CALL_POLITE,
            priority=500,
        )
    )
    await config_store.save_scenario(ScenarioFactory.create(tenant_id=tenant_id))
    return PipelineFactory.create(config_store=config_store)


@pytest.fixture
async def app(env_override, pipeline: CallPipeline) -> FastAPI:
    """Create the application with the pipeline swapped in."""
    await reset_dependencies()
    with env_override({"FRONTDESK_ENV": "test"}):
        app = create_app()
    app.dependency_overrides[get_call_pipeline] = lambda: pipeline
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


class TestTurnsEndpoint:
    """Tests for POST /v1/turns."""

    def test_turn_returns_response_and_session(
        self, client: TestClient, tenant_id: UUID
    ) -> None:
        """A resolvable utterance returns CONTINUE with session state."""
        response = client.post(
            "/v1/turns",
            json={
                "tenant_id": str(tenant_id),
                "call_id": "call-1",
                "raw_utterance": "my ac not cooling",
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["action"] == "CONTINUE"
        assert data["response_text"] == "Sorry to hear your AC isn't cooling."
        assert data["updated_session_state"]["call_id"] == "call-1"
        assert data["trace"]["triage"]["label"] == "AC_REPAIR"

    def test_session_round_trips(self, client: TestClient, tenant_id: UUID) -> None:
        """The returned session is accepted on the next turn."""
        first = client.post(
            "/v1/turns",
            json={
                "tenant_id": str(tenant_id),
                "call_id": "call-1",
                "raw_utterance": "my ac not cooling",
            },
        ).json()

        second = client.post(
            "/v1/turns",
            json={
                "tenant_id": str(tenant_id),
                "call_id": "call-1",
                "raw_utterance": "please cancel it",
                "session_state": first["updated_session_state"],
            },
        )

        assert second.status_code == 200
        data = second.json()
        assert data["action"] == "END_CALL_POLITE"
        assert data["response_text"] == "Thanks for calling Acme Heating & Air. Have a great day!"
        assert len(data["updated_session_state"]["turns"]) == 2

    def test_closed_call_is_conflict(self, client: TestClient, tenant_id: UUID) -> None:
        """Turns after the call ended get 409 CALL_CLOSED."""
        body = {"tenant_id": str(tenant_id), "call_id": "call-1", "raw_utterance": "cancel"}
        client.post("/v1/turns", json=body)

        response = client.post("/v1/turns", json=body)

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "CALL_CLOSED"

    def test_blank_utterance_rejected(self, client: TestClient, tenant_id: UUID) -> None:
        """An utterance of only whitespace is a bad request."""
        response = client.post(
            "/v1/turns",
            json={"tenant_id": str(tenant_id), "call_id": "call-1", "raw_utterance": "   "},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"

    def test_malformed_body_rejected(self, client: TestClient) -> None:
        """A missing tenant id fails validation with field details."""
        response = client.post("/v1/turns", json={"call_id": "call-1", "raw_utterance": "hi"})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "INVALID_REQUEST"
        assert any("tenant_id" in d["field"] for d in error["details"])

    def test_mismatched_session_rejected(self, client: TestClient, tenant_id: UUID) -> None:
        """A session from another call is a bad request."""
        session = client.post(
            "/v1/turns",
            json={
                "tenant_id": str(tenant_id),
                "call_id": "call-1",
                "raw_utterance": "my ac not cooling",
            },
        ).json()["updated_session_state"]

        response = client.post(
            "/v1/turns",
            json={
                "tenant_id": str(tenant_id),
                "call_id": "call-2",
                "raw_utterance": "still warm",
                "session_state": session,
            },
        )

        assert response.status_code == 400
