"""
Authenticated API client for the TuitionDesk backend.

Usage:
    session = Session("~/.tuitiondesk.json")
    async with ApiClient("http://localhost:5000", session, on_logout=redirect) as api:
        await api.login("admin@example.com", "secret1")
        batches = await api.get("/api/batches")

Every request carries the session's bearer token. A 401 from any endpoint
ends the session: the token is cleared, `on_logout("/login")` is called and
AuthenticationExpired is raised. Other failures raise ApiRequestError with
the server's message and field errors.
"""

import logging
from typing import Any, Callable

import httpx

from tuitiondesk.client.session import Session

logger = logging.getLogger(__name__)

LOGIN_ROUTE = "/login"
FALLBACK_MESSAGE = "Something went wrong. Please try again."


class ApiRequestError(Exception):
    def __init__(self, status_code: int, message: str, errors: list | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.errors = errors or []

    @property
    def field_errors(self) -> dict[str, str]:
        return {e.get("field"): e.get("message") for e in self.errors if e.get("field")}


class AuthenticationExpired(ApiRequestError):
    pass


class ApiClient:
    def __init__(
        self,
        base_url: str,
        session: Session,
        on_logout: Callable[[str], Any] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ):
        self.session = session
        self.on_logout = on_logout
        self._http = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def _headers(self) -> dict:
        headers = {"Accept": "application/json"}
        if self.session.token:
            headers["Authorization"] = f"Bearer {self.session.token}"
        return headers

    async def request(self, method: str, path: str, *, json: Any = None, params: dict | None = None) -> Any:
        """Send a request and return the `data` member of the response envelope."""
        if params:
            params = {k: v for k, v in params.items() if v is not None}
        try:
            response = await self._http.request(
                method, path, json=json, params=params or None, headers=self._headers(),
            )
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ApiRequestError(0, "Unable to reach the server") from exc

        logger.debug("%s %s -> %s", method, path, response.status_code)
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {"data": body}

        if response.status_code == 401:
            self._expire_session()
            raise AuthenticationExpired(401, body.get("message") or "Session expired", body.get("errors"))
        if response.is_error:
            raise ApiRequestError(
                response.status_code,
                body.get("message") or FALLBACK_MESSAGE,
                body.get("errors"),
            )
        return body.get("data", body)

    def _expire_session(self) -> None:
        logger.info("Session rejected by server, logging out")
        self.session.clear()
        if self.on_logout:
            self.on_logout(LOGIN_ROUTE)

    async def get(self, path: str, params: dict | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, payload: Any = None) -> Any:
        return await self.request("POST", path, json=payload)

    async def put(self, path: str, payload: Any = None) -> Any:
        return await self.request("PUT", path, json=payload)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)

    async def login(self, email: str, password: str) -> dict:
        data = await self.post("/api/auth/login", {"email": email, "password": password})
        self.session.save(data["token"], data["user"])
        return data["user"]

    def logout(self) -> None:
        self.session.clear()
