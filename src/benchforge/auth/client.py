"""Client for the authentication service."""

from typing import Any, Optional

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from benchforge.config import AuthServiceSettings
from benchforge.models.registry import User

logger = structlog.get_logger(__name__)


class AuthError(Exception):
    """Login or signup failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class SignupResult(BaseModel):
    """Confirmation returned by a successful signup."""

    message: str
    email: str


class AuthClient:
    """Client for the ``/login`` and ``/signup`` endpoints."""

    def __init__(
        self,
        settings: Optional[AuthServiceSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings or AuthServiceSettings()
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self._settings.url,
                timeout=self._settings.timeout_seconds,
                transport=self._transport,
            )
        return self._http_client

    async def close(self) -> None:
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def login(self, email: str, password: str) -> User:
        """Authenticate and return the user record."""
        data = await self._post("/login", email, password, action="Login")
        if not isinstance(data.get("user"), dict):
            raise AuthError("Login response missing user data.")
        try:
            user = User.model_validate(data["user"])
        except ValidationError as e:
            raise AuthError("Login response missing user data.") from e

        logger.info("Login succeeded", user_id=user.id)
        return user

    async def signup(self, email: str, password: str) -> SignupResult:
        """Create an account."""
        data = await self._post("/signup", email, password, action="Signup")
        try:
            return SignupResult.model_validate(data)
        except ValidationError as e:
            raise AuthError("Signup response malformed.") from e

    async def _post(self, path: str, email: str, password: str, action: str) -> dict[str, Any]:
        client = await self._get_client()
        try:
            response = await client.post(path, json={"email": email, "password": password})
        except httpx.HTTPError as e:
            raise AuthError(f"{action} failed: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if not response.is_success:
            logger.warning("Auth request rejected", action=action, status=response.status_code)
            raise AuthError(
                str(data.get("detail") or f"{action} failed: {response.reason_phrase}"),
                status_code=response.status_code,
            )
        return data

    async def __aenter__(self) -> "AuthClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
