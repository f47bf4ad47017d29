"""End-to-end tests for the invite link, resolve and consume endpoints.

Runs the full FastAPI app against in-memory persistence.
"""

from datetime import timedelta
from uuid import UUID

import httpx
import pytest
import pytest_asyncio

from sitesisters.config import Settings
from sitesisters.domain.error import StoreError
from sitesisters.domain.model import User
from sitesisters.domain.model.invite import utcnow
from sitesisters.domain.repository import InviteRepository, UserRepository
from sitesisters.domain.value import InviteCode
from sitesisters.interface.api.app import create_app
from sitesisters.persistence.repository import PostgresInviteRepository
from sitesisters.util.jwt import create_token
from tests.conftest import CommitFailingSession, make_invite, new_user_id
from tests.di import build_test_container


@pytest_asyncio.fixture
async def container():
    container = build_test_container(for_api=True)
    yield container
    await container.close()


@pytest_asyncio.fixture
async def client(container):
    app = create_app(container)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest_asyncio.fixture
async def invite_repo(container) -> InviteRepository:
    return await container.get(InviteRepository)


@pytest_asyncio.fixture
async def user_repo(container) -> UserRepository:
    return await container.get(UserRepository)


def sign_in(client: httpx.AsyncClient, user_id: UUID) -> None:
    """Attach a session cookie for the user to the client."""
    settings = Settings()
    token = create_token(str(user_id), None, settings.auth)
    client.cookies.set(settings.auth.auth_cookie_name, token)


class TestResolveInvite:
    """GET /invites/resolve"""

    @pytest.mark.asyncio
    async def test_valid_code_with_inviter(self, client, invite_repo, user_repo):
        # Arrange
        inviter_id = new_user_id()
        await user_repo.save(User(id=inviter_id, display_name="Maya R."))
        await invite_repo.add(make_invite("ABC123", inviter_user_id=inviter_id))

        # Act
        response = await client.get("/invites/resolve", params={"code": "ABC123"})

        # Assert
        assert response.status_code == 200
        assert response.json() == {"valid": True, "inviter_display_name": "Maya R."}
        assert str(inviter_id) not in response.text

    @pytest.mark.asyncio
    async def test_valid_code_without_name(self, client, invite_repo):
        await invite_repo.add(make_invite("SYSTEM"))

        response = await client.get("/invites/resolve", params={"code": "SYSTEM"})

        assert response.status_code == 200
        assert response.json() == {"valid": True, "inviter_display_name": None}

    @pytest.mark.asyncio
    async def test_unknown_code(self, client):
        response = await client.get("/invites/resolve", params={"code": "NOPE"})

        assert response.status_code == 200
        assert response.json() == {"valid": False, "reason": "Invalid invite code."}

    @pytest.mark.asyncio
    async def test_expired_code(self, client, invite_repo):
        await invite_repo.add(make_invite("OLD", expires_in=timedelta(days=-1)))

        response = await client.get("/invites/resolve", params={"code": "OLD"})

        assert response.json() == {"valid": False, "reason": "This invite has expired."}

    @pytest.mark.asyncio
    async def test_exhausted_code(self, client, invite_repo):
        await invite_repo.add(make_invite("FULL", uses=1, max_uses=1))

        response = await client.get("/invites/resolve", params={"code": "FULL"})

        assert response.json() == {
            "valid": False,
            "reason": "This invite has reached its maximum uses.",
        }

    @pytest.mark.asyncio
    @pytest.mark.parametrize("params", [{}, {"code": ""}, {"code": "   "}])
    async def test_missing_code(self, client, params):
        response = await client.get("/invites/resolve", params=params)

        assert response.status_code == 400
        assert response.json() == {
            "valid": False,
            "reason": "No invite code provided.",
        }

    @pytest.mark.asyncio
    async def test_store_failure(self, client, invite_repo, monkeypatch):
        async def fail(code, now):
            raise StoreError("connection refused")

        monkeypatch.setattr(invite_repo, "get_status", fail)

        response = await client.get("/invites/resolve", params={"code": "ABC123"})

        assert response.status_code == 500
        assert response.json() == {
            "valid": False,
            "reason": "Failed to validate invite code.",
        }


class TestConsumeInvite:
    """POST /invites/consume"""

    @pytest.mark.asyncio
    async def test_requires_session(self, client, invite_repo):
        await invite_repo.add(make_invite("ABC123"))

        response = await client.post("/invites/consume", json={"code": "ABC123"})

        assert response.status_code == 401
        assert response.json() == {
            "ok": False,
            "reason": "Unauthorized. Please sign in.",
        }
        invite = await invite_repo.find_by_code(InviteCode("ABC123"))
        assert invite is not None and invite.uses == 0

    @pytest.mark.asyncio
    async def test_invalid_session_token(self, client):
        client.cookies.set("auth_token", "not-a-jwt")

        response = await client.post("/invites/consume", json={"code": "ABC123"})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_bearer_token(self, client, invite_repo):
        await invite_repo.add(make_invite("ABC123"))
        token = create_token(str(new_user_id()), None, Settings().auth)

        response = await client.post(
            "/invites/consume",
            json={"code": "ABC123"},
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 200
        assert response.json() == {"ok": True}

    @pytest.mark.asyncio
    async def test_consume_and_repeat(self, client, invite_repo):
        await invite_repo.add(make_invite("ABC123", max_uses=1))
        sign_in(client, new_user_id())

        first = await client.post("/invites/consume", json={"code": "ABC123"})
        second = await client.post("/invites/consume", json={"code": "ABC123"})

        assert first.status_code == 200
        assert first.json() == {"ok": True}
        assert second.json() == {"ok": True}
        invite = await invite_repo.find_by_code(InviteCode("ABC123"))
        assert invite is not None and invite.uses == 1

    @pytest.mark.asyncio
    async def test_self_referral(self, client, invite_repo):
        inviter = new_user_id()
        await invite_repo.add(make_invite("MINE", inviter_user_id=inviter))
        sign_in(client, inviter)

        response = await client.post("/invites/consume", json={"code": "MINE"})

        assert response.status_code == 200
        assert response.json() == {
            "ok": False,
            "reason": "You cannot use your own invite code.",
        }

    @pytest.mark.asyncio
    async def test_exhausted(self, client, invite_repo):
        await invite_repo.add(make_invite("FULL", uses=1, max_uses=1))
        sign_in(client, new_user_id())

        response = await client.post("/invites/consume", json={"code": "FULL"})

        assert response.json() == {
            "ok": False,
            "reason": "This invite has reached its maximum uses.",
        }

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "content",
        [b"not json", b"[1, 2]", b'"ABC123"', b'{"code": 123}'],
    )
    async def test_invalid_body(self, client, content):
        sign_in(client, new_user_id())

        response = await client.post(
            "/invites/consume",
            content=content,
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {"ok": False, "reason": "Invalid request body."}

    @pytest.mark.asyncio
    async def test_missing_code(self, client):
        sign_in(client, new_user_id())

        response = await client.post("/invites/consume", json={"code": "  "})

        assert response.status_code == 400
        assert response.json() == {"ok": False, "reason": "No invite code provided."}

    @pytest.mark.asyncio
    async def test_store_failure(self, client, invite_repo, monkeypatch):
        async def fail(code, user_id, now):
            raise StoreError("statement timeout")

        monkeypatch.setattr(invite_repo, "consume", fail)
        sign_in(client, new_user_id())

        response = await client.post("/invites/consume", json={"code": "ABC123"})

        assert response.status_code == 500
        assert response.json() == {"ok": False, "reason": "Failed to consume invite."}
        assert "invite_code" not in response.headers.get("set-cookie", "")

    @pytest.mark.asyncio
    async def test_failed_commit_is_not_reported_as_success(
        self, client, invite_repo, monkeypatch
    ):
        # Arrange: the usage is written but the commit is lost
        invite = make_invite("ABC123", max_uses=1)
        session = CommitFailingSession(invite)
        postgres_repo = PostgresInviteRepository(session)
        monkeypatch.setattr(invite_repo, "consume", postgres_repo.consume)
        sign_in(client, new_user_id())

        # Act
        response = await client.post("/invites/consume", json={"code": "ABC123"})

        # Assert
        assert response.status_code == 500
        assert response.json() == {"ok": False, "reason": "Failed to consume invite."}
        assert session.events[-2:] == ["commit attempted", "rolled back"]


class TestInviteLink:
    """GET /invite/{code} and the pending-code hand-off to consume."""

    @pytest.mark.asyncio
    async def test_valid_link_sets_pending_cookie_and_redirects(
        self, client, invite_repo
    ):
        # Arrange
        await invite_repo.add(make_invite("ABC123"))

        # Act
        response = await client.get("/invite/ABC123")

        # Assert
        assert response.status_code == 302
        assert response.headers["location"] == (
            f"{Settings().api.frontend_url}/signup?invite=ABC123"
        )
        set_cookies = [c.lower() for c in response.headers.get_list("set-cookie")]
        code_cookie = next(c for c in set_cookies if c.startswith("invite_code="))
        assert code_cookie.startswith("invite_code=abc123;")
        assert "max-age=604800" in code_cookie
        assert "path=/" in code_cookie
        assert "samesite=lax" in code_cookie
        assert "httponly" not in code_cookie
        expiry_cookie = next(
            c for c in set_cookies if c.startswith("invite_code_expires_at=")
        )
        expires_at = int(expiry_cookie.split(";")[0].split("=")[1])
        week_from_now = (utcnow() + timedelta(days=7)).timestamp()
        assert abs(expires_at - week_from_now) < 60

    @pytest.mark.asyncio
    async def test_invalid_link_shows_reason(self, client, invite_repo):
        await invite_repo.add(make_invite("OLD", expires_in=timedelta(days=-1)))

        response = await client.get("/invite/OLD")

        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert "Invite link invalid or expired" in response.text
        assert "This invite has expired." in response.text
        assert "set-cookie" not in response.headers

    @pytest.mark.asyncio
    async def test_store_failure_page(self, client, invite_repo, monkeypatch):
        async def fail(code, now):
            raise StoreError("connection refused")

        monkeypatch.setattr(invite_repo, "get_status", fail)

        response = await client.get("/invite/ABC123")

        assert response.status_code == 503
        assert "Failed to validate invite code." in response.text

    @pytest.mark.asyncio
    async def test_pending_code_consumed_after_signup(self, client, invite_repo):
        # Invitee opens the link, signs up, then the client posts without a code
        await invite_repo.add(make_invite("ABC123", inviter_user_id=new_user_id()))
        await client.get("/invite/ABC123")
        assert client.cookies.get("invite_code") == "ABC123"
        sign_in(client, new_user_id())

        response = await client.post("/invites/consume", json={})

        assert response.status_code == 200
        assert response.json() == {"ok": True}
        assert "invite_code" not in client.cookies
        assert "invite_code_expires_at" not in client.cookies
        invite = await invite_repo.find_by_code(InviteCode("ABC123"))
        assert invite is not None and invite.uses == 1

    @pytest.mark.asyncio
    async def test_pending_cookie_cleared_after_decline(self, client, invite_repo):
        await invite_repo.add(make_invite("ABC123", max_uses=1))
        await client.get("/invite/ABC123")
        await invite_repo.consume(InviteCode("ABC123"), new_user_id(), utcnow())
        sign_in(client, new_user_id())

        response = await client.post("/invites/consume", json={})

        assert response.json()["ok"] is False
        assert "invite_code" not in client.cookies
        assert "invite_code_expires_at" not in client.cookies

    @pytest.mark.asyncio
    async def test_expired_pending_code_is_not_used(self, client, invite_repo):
        # Arrange: the carrier outlived its lifetime but the client kept it
        await invite_repo.add(make_invite("ABC123"))
        expired = int((utcnow() - timedelta(days=1)).timestamp())
        client.cookies.set("invite_code", "ABC123")
        client.cookies.set("invite_code_expires_at", str(expired))
        sign_in(client, new_user_id())

        # Act
        response = await client.post("/invites/consume", json={})

        # Assert
        assert response.status_code == 400
        assert response.json() == {"ok": False, "reason": "No invite code provided."}
        cleared = [c.lower() for c in response.headers.get_list("set-cookie")]
        assert any(
            c.startswith("invite_code=") and "max-age=0" in c for c in cleared
        )
        invite = await invite_repo.find_by_code(InviteCode("ABC123"))
        assert invite is not None and invite.uses == 0


class TestHealth:
    """Health routes."""

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_auth_health_without_session(self, client):
        response = await client.get("/health/auth")

        assert response.status_code == 200
        assert response.json()["has_session"] is False
        assert response.headers["cache-control"] == "no-store, max-age=0"

    @pytest.mark.asyncio
    async def test_auth_health_with_session(self, client):
        user_id = new_user_id()
        sign_in(client, user_id)

        response = await client.get("/health/auth")

        assert response.json()["has_session"] is True
        assert response.json()["user_id"] == str(user_id)