"""
Integration Test Fixtures.

Fixtures for integration tests - the real application, services and an
in-memory database. These fixtures build on the root conftest.py database
fixtures.
"""

from collections.abc import AsyncGenerator
from dataclasses import dataclass
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from notesync.backend.core.database import get_db_session, get_session_factory


# =============================================================================
# Application Fixtures
# =============================================================================


@pytest.fixture
def app(db_session_factory: async_sessionmaker[AsyncSession]) -> FastAPI:
    """
    Application wired to the test database.

    Each request gets its own session from the test factory and commits on
    success, exactly like the production dependency.
    """
    from notesync.backend.main import create_app

    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with db_session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app = create_app()
    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[get_session_factory] = lambda: db_session_factory
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTP client talking to the app in-process.

    Usage:
        async def test_health_endpoint(client: AsyncClient):
            response = await client.get("/health")
            assert response.status_code == 200
    """
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client


# =============================================================================
# Authentication Fixtures
# =============================================================================


@dataclass
class SignedIn:
    uid: str
    headers: dict[str, str]

    def notes_url(self, note_id: str | None = None) -> str:
        base = f"/api/v1/users/{self.uid}/notes"
        return base if note_id is None else f"{base}/{note_id}"


async def _sign_in(client: AsyncClient) -> SignedIn:
    response = await client.post("/api/v1/auth/anonymous")
    assert response.status_code == 201, response.text
    data = response.json()["data"]
    return SignedIn(uid=data["uid"], headers={"Authorization": f"Bearer {data['access_token']}"})


@pytest.fixture
async def user(client: AsyncClient) -> SignedIn:
    """An anonymous user signed in through the API."""
    return await _sign_in(client)


@pytest.fixture
async def other_user(client: AsyncClient) -> SignedIn:
    """A second, unrelated anonymous user."""
    return await _sign_in(client)


# =============================================================================
# API Response Assertion Helpers
# =============================================================================


class ApiAssertions:
    """Helper class for API response assertions."""

    @staticmethod
    def assert_success(response: Any, expected_status: int = 200) -> dict[str, Any]:
        """
        Assert API response is successful.

        Returns:
            Response JSON data
        """
        assert response.status_code == expected_status, (
            f"Expected status {expected_status}, got {response.status_code}: "
            f"{response.text}"
        )
        data = response.json()
        assert data.get("success") is True, f"Response not successful: {data}"
        return data

    @staticmethod
    def assert_error(
        response: Any,
        expected_status: int,
        expected_code: str | None = None,
    ) -> dict[str, Any]:
        """
        Assert API response is an error.

        Returns:
            Response JSON data
        """
        assert response.status_code == expected_status, (
            f"Expected status {expected_status}, got {response.status_code}: "
            f"{response.text}"
        )
        data = response.json()
        assert data.get("success") is False, f"Response should be error: {data}"
        assert data.get("error") is not None, f"Missing error details: {data}"

        if expected_code:
            actual_code = data["error"].get("code")
            assert actual_code == expected_code, (
                f"Expected error code {expected_code}, got {actual_code}"
            )

        return data

    @staticmethod
    def assert_validation_error(
        response: Any,
        field: str | None = None,
    ) -> dict[str, Any]:
        """Assert API response is a validation error (422)."""
        data = ApiAssertions.assert_error(response, 422, "VAL_REQUEST_INVALID")

        if field:
            errors = data["error"].get("details", {}).get("validation_errors", [])
            fields = [e.get("field", "") for e in errors]
            assert any(field in f for f in fields), (
                f"Expected validation error for field '{field}', "
                f"got errors for: {fields}"
            )

        return data


@pytest.fixture
def api() -> ApiAssertions:
    """Provide API assertion helpers."""
    return ApiAssertions()
