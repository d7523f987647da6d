"""
HTTP Client for the Terminal Client.

Async wrapper over the Focusdesk API. Every request carries
``X-Frontend-ID: cli`` for log routing plus the caller's identity:
signed Telegram init data when available, otherwise the dev Telegram id.
"""

from dataclasses import dataclass
from typing import Any

import httpx

from focusdesk.backend.core.config import get_app_config, get_server_base_url
from focusdesk.backend.core.logging import get_logger, log_with_source

logger = get_logger(__name__)


class ApiError(Exception):
    """Error envelope returned by the API."""

    def __init__(self, status_code: int, code: str, message: str) -> None:
        self.status_code = status_code
        self.code = code
        self.message = message
        super().__init__(f"{code}: {message}")


@dataclass
class ToggleResult:
    """Outcome of an optimistic status toggle."""

    task: dict[str, Any]
    rolled_back: bool = False
    error: ApiError | None = None


def next_status(status: str) -> str:
    """Status a toggle moves to: done <-> todo."""
    return "todo" if status == "done" else "done"


class FocusdeskClient:
    """
    Client for the Focusdesk API.

    Usage:
        client = FocusdeskClient(dev_tg_id=1001)
        focuses = await client.list_focuses()
        await client.close()
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        dev_tg_id: int | None = None,
        init_data: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if base_url is None or timeout is None:
            config_base_url, config_timeout = get_server_base_url()
            base_url = base_url or config_base_url
            timeout = timeout if timeout is not None else config_timeout

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.api_prefix = get_app_config().application.api_prefix
        self.dev_tg_id = dev_tg_id
        self.init_data = init_data
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _headers(self) -> dict[str, str]:
        headers = {"X-Frontend-ID": "cli"}
        if self.init_data:
            headers["X-Telegram-Init-Data"] = self.init_data
        elif self.dev_tg_id is not None:
            headers["X-Dev-Tg-Id"] = str(self.dev_tg_id)
        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=self._headers(),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """
        Make a raw HTTP request to the backend.

        Raises:
            httpx.HTTPError: On transport failure
        """
        client = await self._get_client()
        log_with_source(logger, "cli", "debug", "API request", method=method, path=path)

        try:
            response = await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            log_with_source(logger, "cli", "error", "API request failed", method=method, path=path, error=str(e))
            raise

        log_with_source(
            logger, "cli", "debug", "API response", method=method, path=path, status_code=response.status_code
        )
        return response

    async def call(self, method: str, path: str, **kwargs: Any) -> Any:
        """
        Call a versioned endpoint and unwrap the response envelope.

        Returns:
            The envelope's ``data``; None for 204 responses

        Raises:
            ApiError: When the API answers with an error envelope
        """
        response = await self.request(method, f"{self.api_prefix}{path}", **kwargs)
        if response.status_code == 204:
            return None

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.is_error or body.get("success") is False:
            error = body.get("error") or {}
            raise ApiError(
                response.status_code,
                error.get("code", "HTTP_ERROR"),
                error.get("message", response.reason_phrase),
            )
        return body.get("data")

    # --- Me -----------------------------------------------------------------

    async def me(self) -> dict[str, Any]:
        return await self.call("GET", "/me")

    async def subscription(self) -> dict[str, Any]:
        return await self.call("GET", "/me/subscription")

    # --- Focuses ------------------------------------------------------------

    async def list_focuses(self) -> list[dict[str, Any]]:
        return await self.call("GET", "/focuses")

    async def create_focus(self, title: str, **fields: Any) -> dict[str, Any]:
        return await self.call("POST", "/focuses", json={"title": title, **fields})

    async def get_focus(self, focus_id: str) -> dict[str, Any]:
        return await self.call("GET", f"/focuses/{focus_id}")

    # --- Tasks --------------------------------------------------------------

    async def list_tasks(
        self,
        focus_id: str,
        assigned: str = "me",
        status: str | None = None,
    ) -> list[dict[str, Any]]:
        params = {"assigned": assigned}
        if status:
            params["status"] = status
        return await self.call("GET", f"/focuses/{focus_id}/tasks", params=params)

    async def create_task(self, focus_id: str, title: str, **fields: Any) -> dict[str, Any]:
        return await self.call("POST", f"/focuses/{focus_id}/tasks", json={"title": title, **fields})

    async def update_task(self, task_id: str, **fields: Any) -> dict[str, Any]:
        return await self.call("PATCH", f"/tasks/{task_id}", json=fields)

    async def toggle_task(self, task: dict[str, Any]) -> ToggleResult:
        """
        Flip a task between done and todo.

        The new status is applied to a local copy first. When the server
        rejects the change the copy is rolled back to the old status.
        """
        previous = task["status"]
        local = {**task, "status": next_status(previous)}
        try:
            updated = await self.update_task(task["id"], status=local["status"])
        except ApiError as e:
            local["status"] = previous
            return ToggleResult(task=local, rolled_back=True, error=e)
        return ToggleResult(task=updated)

    # --- Assistant ----------------------------------------------------------

    async def get_thread(self, focus_id: str) -> dict[str, Any]:
        return await self.call("GET", f"/focuses/{focus_id}/assistant/thread")

    async def send_message(self, focus_id: str, content: str) -> dict[str, Any]:
        return await self.call("POST", f"/focuses/{focus_id}/assistant/message", json={"content": content})

    async def plan_to_tasks(self, focus_id: str, tasks: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return await self.call("POST", f"/focuses/{focus_id}/assistant/plan_to_tasks", json={"tasks": tasks})

    # --- Invites ------------------------------------------------------------

    async def create_invite(self, focus_id: str, **options: Any) -> dict[str, Any]:
        return await self.call("POST", f"/focuses/{focus_id}/invites", json=options)

    async def accept_invite(self, code: str) -> dict[str, Any]:
        return await self.call("POST", f"/invites/{code}/accept")


_client_options: dict[str, Any] = {}
_client: FocusdeskClient | None = None


def configure_client(**options: Any) -> None:
    """Set options for the client built by get_client (from global CLI flags)."""
    global _client
    _client_options.clear()
    _client_options.update({k: v for k, v in options.items() if v is not None})
    _client = None


def get_client() -> FocusdeskClient:
    """Get or create the client singleton."""
    global _client
    if _client is None:
        _client = FocusdeskClient(**_client_options)
    return _client


async def close_client() -> None:
    global _client
    if _client:
        await _client.close()
        _client = None
