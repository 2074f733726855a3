"""
Remote Note Store.

Gateway and auth provider for the notesync note store service. Requests go
through APIClient, which carries the bearer token and the X-Frontend-ID
header used for log routing on the server.

Live reads use the Server-Sent Events stream at
/api/v1/users/{uid}/notes/stream: a ``snapshot`` event with every note,
then one ``change`` event per write.
"""

import asyncio
import json
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any

import httpx

from notesync.backend.core.config import get_server_base_url
from notesync.backend.core.logging import get_logger, log_with_source
from notesync.client.auth import AuthProvider, UserCredentials
from notesync.client.errors import AuthFailure, DeleteFailure, ReadFailure, WriteFailure
from notesync.client.gateway import NoteGateway
from notesync.client.snapshot import ErrorCallback, Note, Snapshot, Subscription, ValueCallback

logger = get_logger(__name__)

API_PREFIX = "/api/v1"


class APIClient:
    """
    HTTP client for the note store service.

    Features:
    - Base URL and timeout from client.yaml unless given
    - X-Frontend-ID header for log routing
    - Bearer token once signed in
    - Structured logging of requests/responses

    Usage:
        client = APIClient(frontend="tui")
        response = await client.get("/health")
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        frontend: str = "cli",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            base_url: Service base URL. If None, reads from config/settings/client.yaml.
            timeout: Request timeout in seconds. If None, reads from config/settings/client.yaml.
            frontend: Value of the X-Frontend-ID header and log source.
            transport: Optional httpx transport (tests use MockTransport).
        """
        if base_url is None or timeout is None:
            config_base_url, config_timeout = get_server_base_url()
            base_url = base_url or config_base_url
            timeout = timeout if timeout is not None else config_timeout

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.frontend = frontend
        self.token: str | None = None
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={"X-Frontend-ID": self.frontend},
                transport=self._transport,
            )
        return self._client

    def _headers(self) -> dict[str, str]:
        if self.token is None:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """
        Make an HTTP request to the note store.

        Raises:
            httpx.HTTPError: On transport failure
        """
        client = self._get_client()
        log_with_source(logger, self.frontend, "debug", "API request", method=method, path=path)

        try:
            response = await client.request(method, path, headers=self._headers(), **kwargs)
        except httpx.HTTPError as e:
            log_with_source(
                logger,
                self.frontend,
                "error",
                "API request failed",
                method=method,
                path=path,
                error=str(e),
            )
            raise

        log_with_source(
            logger,
            self.frontend,
            "debug",
            "API response",
            method=method,
            path=path,
            status_code=response.status_code,
        )
        return response

    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PUT", path, **kwargs)

    async def patch(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PATCH", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("DELETE", path, **kwargs)

    @asynccontextmanager
    async def stream(self, path: str) -> AsyncIterator[httpx.Response]:
        """Open a long-lived GET without a read timeout."""
        client = self._get_client()
        log_with_source(logger, self.frontend, "debug", "API stream opened", path=path)
        async with client.stream(
            "GET",
            path,
            headers={**self._headers(), "Accept": "text/event-stream"},
            timeout=httpx.Timeout(self.timeout, read=None),
        ) as response:
            yield response


def _error_message(response: httpx.Response) -> str:
    """Error message from the service's error envelope, or the status line."""
    try:
        return response.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return f"HTTP {response.status_code}"


async def iter_sse(response: httpx.Response) -> AsyncIterator[tuple[str, Any]]:
    """Yield ``(event, data)`` pairs from a Server-Sent Events response."""
    event = "message"
    data_lines: list[str] = []
    async for line in response.aiter_lines():
        if not line:
            if data_lines:
                yield event, json.loads("\n".join(data_lines))
            event, data_lines = "message", []
        elif line.startswith(":"):
            continue
        elif line.startswith("event:"):
            event = line[len("event:"):].strip()
        elif line.startswith("data:"):
            data_lines.append(line[len("data:"):].lstrip())


class HttpAuthProvider(AuthProvider):
    """Anonymous sign-in against POST /api/v1/auth/anonymous."""

    def __init__(self, client: APIClient) -> None:
        self._client = client

    async def sign_in_anonymously(self) -> UserCredentials:
        try:
            response = await self._client.post(f"{API_PREFIX}/auth/anonymous")
        except httpx.HTTPError as e:
            raise AuthFailure(f"Note store unreachable: {e}") from e

        if response.status_code != 201:
            raise AuthFailure(_error_message(response))

        data = response.json()["data"]
        self._client.token = data["access_token"]
        return UserCredentials(uid=data["uid"], token=data["access_token"])


class HttpNoteGateway(NoteGateway):
    """
    NoteGateway backed by the note store service.

    Every read runs as an asyncio task owned by its Subscription; closing
    the subscription cancels the task, so no callback fires afterwards.
    """

    def __init__(self, client: APIClient) -> None:
        self._client = client

    @staticmethod
    def _notes_path(uid: str) -> str:
        return f"{API_PREFIX}/users/{uid}/notes"

    def _note_path(self, uid: str, note_id: str) -> str:
        return f"{self._notes_path(uid)}/{note_id}"

    def _spawn(self, work: Callable[[], Awaitable[None]], on_error: ErrorCallback) -> Subscription:
        async def run() -> None:
            try:
                await work()
            except httpx.HTTPError as e:
                on_error(ReadFailure(f"Note store unreachable: {e}"))
            except ReadFailure as e:
                on_error(e)
            except (ValueError, KeyError) as e:
                on_error(ReadFailure(f"Malformed note store response: {e}"))

        task = asyncio.get_running_loop().create_task(run())
        return Subscription(on_close=task.cancel)

    async def _fetch_note(self, uid: str, note_id: str) -> Snapshot:
        response = await self._client.get(self._note_path(uid, note_id))
        if response.status_code == 404:
            return Snapshot(None)
        if response.status_code != 200:
            raise ReadFailure(_error_message(response))
        return Snapshot(Note.from_dict(response.json()["data"]))

    def read_once(
        self,
        uid: str,
        note_id: str,
        on_value: ValueCallback,
        on_error: ErrorCallback,
    ) -> Subscription:
        async def work() -> None:
            on_value(await self._fetch_note(uid, note_id))

        return self._spawn(work, on_error)

    async def _listen(self, uid: str, handle: Callable[[str, Any], None]) -> None:
        async with self._client.stream(f"{self._notes_path(uid)}/stream") as response:
            if response.status_code != 200:
                await response.aread()
                raise ReadFailure(_error_message(response))
            async for event, data in iter_sse(response):
                handle(event, data)
        logger.warning("Change stream ended by server", uid=uid)
        raise ReadFailure("Change stream ended")

    def subscribe(
        self,
        uid: str,
        note_id: str,
        on_value: ValueCallback,
        on_error: ErrorCallback,
    ) -> Subscription:
        def handle(event: str, data: Any) -> None:
            if event == "snapshot":
                stored = data.get(note_id)
                on_value(Snapshot(Note.from_dict(stored) if stored is not None else None))
            elif event == "change" and data["note_id"] == note_id:
                stored = data.get("note")
                on_value(Snapshot(Note.from_dict(stored) if stored is not None else None))

        return self._spawn(lambda: self._listen(uid, handle), on_error)

    def subscribe_all(
        self,
        uid: str,
        on_value: ValueCallback,
        on_error: ErrorCallback,
    ) -> Subscription:
        notes: dict[str, Note] = {}

        def handle(event: str, data: Any) -> None:
            if event == "snapshot":
                notes.clear()
                notes.update({note_id: Note.from_dict(stored) for note_id, stored in data.items()})
            elif event == "change":
                if data.get("note") is None:
                    notes.pop(data["note_id"], None)
                else:
                    notes[data["note_id"]] = Note.from_dict(data["note"])
            else:
                return
            on_value(Snapshot(dict(notes)))

        return self._spawn(lambda: self._listen(uid, handle), on_error)

    async def create(self, uid: str, note_id: str, note: Note) -> None:
        await self._write("PUT", uid, note_id, note.to_dict())

    async def update(
        self,
        uid: str,
        note_id: str,
        title: str,
        body: str,
        last_modified: int | None = None,
    ) -> None:
        payload: dict[str, Any] = {"title": title, "body": body}
        if last_modified is not None:
            payload["last_modified"] = last_modified
        await self._write("PATCH", uid, note_id, payload)

    async def _write(self, method: str, uid: str, note_id: str, payload: dict[str, Any]) -> None:
        try:
            response = await self._client.request(method, self._note_path(uid, note_id), json=payload)
        except httpx.HTTPError as e:
            raise WriteFailure(f"Note store unreachable: {e}") from e
        if response.status_code != 200:
            raise WriteFailure(_error_message(response))

    async def delete(self, uid: str, note_id: str) -> None:
        try:
            response = await self._client.delete(self._note_path(uid, note_id))
        except httpx.HTTPError as e:
            raise DeleteFailure(f"Note store unreachable: {e}") from e
        if response.status_code != 204:
            raise DeleteFailure(_error_message(response))
