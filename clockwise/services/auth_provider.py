# clockwise/services/auth_provider.py
# Thin async client for the hosted auth provider's admin REST API.
import logging
from typing import List, Optional

import httpx

from clockwise.core.config import settings
from clockwise.core.exceptions import AuthProviderError

logger = logging.getLogger(__name__)

PAGE_SIZE = 1000


class AuthProviderClient:
    def __init__(self, base_url: str, service_role_key: str, timeout: float = 30,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self._base_url = base_url.rstrip("/") + "/auth/v1"
        self._headers = {
            "apikey": service_role_key,
            "Authorization": f"Bearer {service_role_key}",
            "Content-Type": "application/json",
        }
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url, headers=self._headers, timeout=self._timeout, transport=self._transport
        )

    @staticmethod
    def _raise_for_error(response: httpx.Response) -> None:
        if response.is_success:
            return
        try:
            body = response.json()
            message = body.get("msg") or body.get("message") or body.get("error_description") or body.get("error")
        except ValueError:
            message = None
        raise AuthProviderError(message or response.text or f"Auth provider returned {response.status_code}",
                                provider_status=response.status_code)

    async def list_users(self) -> List[dict]:
        """Every user record, page by page."""
        users: List[dict] = []
        page = 1
        async with self._client() as client:
            while True:
                try:
                    response = await client.get("/admin/users", params={"page": page, "per_page": PAGE_SIZE})
                except httpx.RequestError as exc:
                    raise AuthProviderError(f"Auth provider unreachable: {exc}") from exc
                self._raise_for_error(response)
                batch = response.json().get("users", [])
                users.extend(batch)
                if len(batch) < PAGE_SIZE:
                    return users
                page += 1

    async def create_user(self, *, email: str, password: str, email_confirm: bool = True,
                          user_metadata: Optional[dict] = None) -> dict:
        payload = {
            "email": email,
            "password": password,
            "email_confirm": email_confirm,
            "user_metadata": user_metadata or {},
        }
        async with self._client() as client:
            try:
                response = await client.post("/admin/users", json=payload)
            except httpx.RequestError as exc:
                raise AuthProviderError(f"Auth provider unreachable: {exc}") from exc
        self._raise_for_error(response)
        return response.json()


def get_auth_provider() -> AuthProviderClient:
    return AuthProviderClient(
        settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY, timeout=settings.AUTH_HTTP_TIMEOUT
    )
