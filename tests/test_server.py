"""Tests for the HTTP entry point."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from ledger_agent.server import AgentRunner, create_app


@pytest.fixture
def runner():
    with AgentRunner() as runner:
        yield runner


@pytest.fixture
def agent():
    agent = MagicMock()
    agent.handle_message = AsyncMock(return_value="Bank account 42 deleted successfully.")
    return agent


@pytest.fixture
def client(agent, runner):
    app = create_app(agent, runner)
    app.config["TESTING"] = True
    return app.test_client()


class TestMessageEndpoint:
    """Tests for POST /api/message."""

    def test_reply_is_returned(self, client, agent):
        response = client.post("/api/message", json={"message": "delete bank account 42"})

        assert response.status_code == 200
        assert response.get_json() == {"reply": "Bank account 42 deleted successfully."}
        agent.handle_message.assert_awaited_once_with("delete bank account 42")

    def test_missing_message(self, client, agent):
        response = client.post("/api/message", json={})

        assert response.status_code == 400
        agent.handle_message.assert_not_called()

    def test_non_json_body(self, client):
        response = client.post("/api/message", data="hello", content_type="text/plain")

        assert response.status_code == 400

    @pytest.mark.parametrize("body", [["hi"], "hi", 42])
    def test_non_object_json_body(self, client, agent, body):
        response = client.post("/api/message", json=body)

        assert response.status_code == 400
        assert response.get_json() == {"error": "no message provided"}
        agent.handle_message.assert_not_called()

    def test_model_failure_returns_502(self, client, agent):
        agent.handle_message.side_effect = RuntimeError("quota exceeded")

        response = client.post("/api/message", json={"message": "hi"})

        assert response.status_code == 502
        assert "quota exceeded" in response.get_json()["error"]

    def test_only_post_is_served(self, client):
        assert client.get("/api/message").status_code == 405


class TestAgentRunner:
    """Tests for AgentRunner."""

    def test_runs_coroutines_on_background_loop(self):
        async def answer():
            return 42

        with AgentRunner() as runner:
            assert runner.is_running is True
            assert runner.run(answer()) == 42

        assert runner.is_running is False

    def test_exceptions_propagate_to_caller(self):
        async def fail():
            raise ValueError("bad")

        with AgentRunner() as runner:
            with pytest.raises(ValueError):
                runner.run(fail())
