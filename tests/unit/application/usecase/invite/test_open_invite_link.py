"""Tests for open invite link use case."""

from datetime import timedelta

import pytest

from sitesisters.application.usecase.base import BaseUseCase
from sitesisters.application.usecase.invite import (
    OpenInviteLinkRequest,
    OpenInviteLinkUseCase,
)
from sitesisters.config import APISettings, InvitationSettings
from sitesisters.domain.repository import InviteRepository
from sitesisters.domain.service import InviteValidator
from sitesisters.domain.value import DeclineReason, InviteCode, PendingInviteState
from tests.conftest import make_invite
from tests.harness import create_env_fixture

# Unit test fixture
unit_env = create_env_fixture()


class TestOpenInviteLinkUseCase:
    """Tests for OpenInviteLinkUseCase."""

    @pytest.mark.asyncio
    async def test_valid_link_redirects_to_signup(self, unit_env):
        # Arrange
        repo = await unit_env.get(InviteRepository)
        await repo.add(make_invite("ABC123"))
        use_case = await unit_env.get(OpenInviteLinkUseCase)
        api_settings = await unit_env.get(APISettings)

        # Act
        response = await use_case.execute(OpenInviteLinkRequest(code="ABC123"))

        # Assert
        assert response.valid is True
        assert response.redirect_url == f"{api_settings.frontend_url}/signup?invite=ABC123"
        assert response.pending is not None
        assert response.pending.state == PendingInviteState.PENDING
        assert response.pending.code == InviteCode("ABC123")

    @pytest.mark.asyncio
    async def test_code_is_url_encoded(self, unit_env):
        repo = await unit_env.get(InviteRepository)
        await repo.add(make_invite("a b/c&d"))
        use_case = await unit_env.get(OpenInviteLinkUseCase)

        response = await use_case.execute(OpenInviteLinkRequest(code="a b/c&d"))

        assert response.redirect_url is not None
        assert response.redirect_url.endswith("?invite=a%20b%2Fc%26d")

    @pytest.mark.asyncio
    async def test_pending_lifetime_follows_settings(self, unit_env):
        repo = await unit_env.get(InviteRepository)
        await repo.add(make_invite("ABC123"))
        validator = await unit_env.get(InviteValidator)
        use_case = OpenInviteLinkUseCase(
            validator,
            InvitationSettings(pending_code_ttl_days=2, signup_path="/join"),
            APISettings(
                host="api.example.com",
                port=443,
                protocol="https",
                frontend_host="example.com",
            ),
        )

        response = await use_case.execute(OpenInviteLinkRequest(code="ABC123"))

        assert response.redirect_url == "https://example.com/join?invite=ABC123"
        assert response.pending is not None
        assert response.pending.expires_at is not None
        lifetime = response.pending.expires_at - validator.clock()
        assert timedelta(days=1, hours=23) < lifetime <= timedelta(days=2)

    @pytest.mark.asyncio
    async def test_expired_link_is_declined_without_carrier(self, unit_env):
        repo = await unit_env.get(InviteRepository)
        await repo.add(make_invite("OLD", expires_in=timedelta(days=-1)))
        use_case = await unit_env.get(OpenInviteLinkUseCase)

        response = await use_case.execute(OpenInviteLinkRequest(code="OLD"))

        assert response.valid is False
        assert response.reason == DeclineReason.EXPIRED
        assert response.pending is None
        assert response.redirect_url is None

    @pytest.mark.asyncio
    async def test_is_a_use_case(self, unit_env):
        use_case = await unit_env.get(OpenInviteLinkUseCase)

        assert isinstance(use_case, BaseUseCase)
