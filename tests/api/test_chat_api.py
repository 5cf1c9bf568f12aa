"""
Tests for Chat API Endpoints
"""

from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select

from alphaclass.ai import get_ai_client
from alphaclass.core.database import get_db
from alphaclass.core.models import ConversationTurn, User
from alphaclass.main import app
from tests.conftest import FailingInferenceClient, FakeInferenceClient, auth_headers


async def _serve(db_session, ai_client):
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_ai_client] = lambda: ai_client
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def client(db_session, fake_ai: FakeInferenceClient):
    """Test client whose assistant answers with a canned reply."""
    async for ac in _serve(db_session, fake_ai):
        yield ac


@pytest.fixture
async def failing_client(db_session, failing_ai: FailingInferenceClient):
    """Test client whose assistant is always unavailable."""
    async for ac in _serve(db_session, failing_ai):
        yield ac


class TestChat:
    async def test_new_conversation(
        self, client: AsyncClient, student: User, active_enrollment, fake_ai: FakeInferenceClient
    ) -> None:
        response = await client.post(
            "/api/v1/chat",
            json={"message": "What's on tomorrow?"},
            headers=auth_headers(student),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["response"] == fake_ai.reply
        assert data["conversation_id"]

    async def test_continue_and_read_transcript(self, client: AsyncClient, student: User) -> None:
        headers = auth_headers(student)
        first = (
            await client.post("/api/v1/chat", json={"message": "one"}, headers=headers)
        ).json()
        await client.post(
            "/api/v1/chat",
            json={"message": "two", "conversation_id": first["conversation_id"]},
            headers=headers,
        )

        response = await client.get(
            f"/api/v1/chat/conversations/{first['conversation_id']}/turns", headers=headers
        )

        assert response.status_code == 200
        turns = response.json()["turns"]
        assert [t["sender"] for t in turns] == ["user", "assistant", "user", "assistant"]
        assert [t["body"] for t in turns][::2] == ["one", "two"]

    async def test_list_conversations(self, client: AsyncClient, student: User) -> None:
        headers = auth_headers(student)
        await client.post("/api/v1/chat", json={"message": "When is my exam?"}, headers=headers)

        response = await client.get("/api/v1/chat/conversations", headers=headers)

        assert response.status_code == 200
        assert [c["title"] for c in response.json()] == ["When is my exam?"]

    async def test_someone_elses_conversation_forbidden(
        self, client: AsyncClient, student: User, other_student: User
    ) -> None:
        theirs = (
            await client.post(
                "/api/v1/chat", json={"message": "private"}, headers=auth_headers(other_student)
            )
        ).json()["conversation_id"]

        post = await client.post(
            "/api/v1/chat",
            json={"message": "peek", "conversation_id": theirs},
            headers=auth_headers(student),
        )
        read = await client.get(
            f"/api/v1/chat/conversations/{theirs}/turns", headers=auth_headers(student)
        )

        assert post.status_code == 403
        assert read.status_code == 403

    async def test_unknown_conversation(self, client: AsyncClient, student: User) -> None:
        response = await client.post(
            "/api/v1/chat",
            json={"message": "hello", "conversation_id": str(uuid4())},
            headers=auth_headers(student),
        )

        assert response.status_code == 404

    async def test_empty_message_rejected(self, client: AsyncClient, student: User) -> None:
        response = await client.post(
            "/api/v1/chat", json={"message": ""}, headers=auth_headers(student)
        )

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_resource"
        assert "message" in response.json()["detail"]


class TestChatInferenceFailure:
    async def test_503_carries_conversation_id(
        self,
        failing_client: AsyncClient,
        db_session,
        student: User,
        failing_ai: FailingInferenceClient,
    ) -> None:
        response = await failing_client.post(
            "/api/v1/chat", json={"message": "anyone there?"}, headers=auth_headers(student)
        )

        assert response.status_code == 503
        body = response.json()
        assert body["error"] == "inference_unavailable"
        assert body["retryable"] is True
        assert body["conversation_id"]

        result = await db_session.execute(select(ConversationTurn))
        turns = result.scalars().all()
        assert [(t.sender, t.body) for t in turns] == [("user", "anyone there?")]
