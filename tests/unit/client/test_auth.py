"""
Unit Tests for the Auth Gate.
"""

from unittest.mock import AsyncMock

import pytest
from structlog.testing import capture_logs

from notesync.client.auth import ALERT_MESSAGE, AuthContext, AuthGate, AuthStatus, UserCredentials
from notesync.client.errors import AuthFailure


@pytest.fixture
def provider() -> AsyncMock:
    provider = AsyncMock()
    provider.sign_in_anonymously = AsyncMock(return_value=UserCredentials(uid="u-42", token="t"))
    return provider


class TestAuthGate:
    def test_starts_unauthenticated(self, provider):
        gate = AuthGate(provider)

        assert gate.status is AuthStatus.UNAUTHENTICATED
        assert gate.context is None
        assert gate.alert is None

    @pytest.mark.asyncio
    async def test_successful_sign_in(self, provider):
        gate = AuthGate(provider)

        context = await gate.start()

        assert context == AuthContext(uid="u-42")
        assert gate.status is AuthStatus.AUTHENTICATED
        assert gate.alert is None

    @pytest.mark.asyncio
    async def test_failed_sign_in_raises_alert(self, provider):
        provider.sign_in_anonymously.side_effect = AuthFailure("provider down")
        gate = AuthGate(provider)

        with capture_logs() as logs:
            context = await gate.start()

        assert context is None
        assert gate.status is AuthStatus.AUTH_FAILED
        assert gate.alert == ALERT_MESSAGE == "Something went wrong. Please refresh the page and try again."
        assert isinstance(gate.error, AuthFailure)
        assert logs[0]["log_level"] == "error"
        assert logs[0]["error"] == "provider down"

    @pytest.mark.asyncio
    async def test_sign_in_happens_once(self, provider):
        gate = AuthGate(provider)

        await gate.start()
        await gate.start()

        provider.sign_in_anonymously.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_no_retry_after_failure(self, provider):
        provider.sign_in_anonymously.side_effect = AuthFailure()
        gate = AuthGate(provider)

        await gate.start()
        await gate.start()

        provider.sign_in_anonymously.assert_awaited_once()
        assert gate.status is AuthStatus.AUTH_FAILED
