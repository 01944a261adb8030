"""Tests for the news verification routes."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from conftest import seed_records
from truthguard.api.news_api import router
from truthguard.core.container import Services
from truthguard.models.claim import Scope
from truthguard.repository.claim_repository import ClaimRepository
from truthguard.services.chat_service import ChatService
from truthguard.services.pipeline_service import NewsVerificationPipeline


@pytest.fixture
def retriever() -> MagicMock:
    return MagicMock()


@pytest.fixture
def generator() -> MagicMock:
    return MagicMock()


@pytest.fixture
def services(repo: ClaimRepository, retriever: MagicMock, generator: MagicMock) -> Services:
    acquirer = MagicMock()
    acquirer.acquire.return_value = ([], "Emergency Snapshot")
    pipeline = NewsVerificationPipeline(
        repo=repo, acquirer=acquirer, retriever=retriever, generator=generator,
        targets={Scope.LOCAL: [], Scope.GLOBAL: []}, sleep=lambda _: None,
    )
    return Services(repo=repo, pipeline=pipeline, chat=ChatService(generator))


@pytest.fixture
def client(services: Services) -> TestClient:
    app = FastAPI()
    app.include_router(router, prefix="/api")
    app.state.services = services
    return TestClient(app)


class TestNewsRoutes:
    def test_verify_news_fast_path(self, client: TestClient, repo: ClaimRepository, retriever, generator):
        """Should return the six seeded local records with no search or model call."""
        seed_records(repo, Scope.LOCAL, 6)

        response = client.get("/api/verify-news")

        assert response.status_code == 200
        body = response.json()
        assert len(body) == 6
        assert body[0]["title"] == "Local seeded claim number 5"
        assert body[0]["scope"] == "Local"
        assert body[0]["label"] == "Real"
        assert "created_at" in body[0]
        retriever.retrieve.assert_not_called()
        generator.generate.assert_not_called()

    def test_global_news_only_global_records(self, client: TestClient, repo: ClaimRepository):
        seed_records(repo, Scope.LOCAL, 7)
        seed_records(repo, Scope.GLOBAL, 6)

        body = client.get("/api/global-news").json()

        assert len(body) == 6
        assert {item["scope"] for item in body} == {"Global"}

    def test_empty_store_returns_empty_list(self, client: TestClient):
        response = client.get("/api/verify-news")
        assert response.status_code == 200
        assert response.json() == []

    def test_internal_failure_returns_500_empty_list(self, client: TestClient, services: Services):
        services.pipeline.run = MagicMock(side_effect=RuntimeError("mongo down"))

        response = client.get("/api/global-news")

        assert response.status_code == 500
        assert response.json() == []


class TestChatRoute:
    def test_reply_passthrough(self, client: TestClient, generator: MagicMock):
        generator.generate_raw.return_value = {"reply": "That claim is unverified."}

        response = client.post("/api/chat-agent", json={"message": "Is the airport open?"})

        assert response.status_code == 200
        assert response.json() == {"reply": "That claim is unverified."}
        messages = generator.generate_raw.call_args.args[0]
        assert messages[-1]["content"] == "Is the airport open?"

    def test_explanation_fallback(self, client: TestClient, generator: MagicMock):
        generator.generate_raw.return_value = {"explanation": "No evidence either way."}
        assert client.post("/api/chat-agent", json={"message": "hi"}).json() == {"reply": "No evidence either way."}

    def test_busy_when_model_unavailable(self, client: TestClient, generator: MagicMock):
        generator.generate_raw.return_value = None
        assert client.post("/api/chat-agent", json={"message": "hi"}).json() == {"reply": "System busy."}

    def test_failure_returns_500(self, client: TestClient, services: Services):
        services.chat.reply = MagicMock(side_effect=RuntimeError("boom"))

        response = client.post("/api/chat-agent", json={"message": "hi"})

        assert response.status_code == 500
        assert response.json() == {"reply": "Error."}

    def test_missing_message_is_422(self, client: TestClient):
        assert client.post("/api/chat-agent", json={}).status_code == 422
