"""Firebase Authentication over the Identity Toolkit REST API.

Only the email/password flow is used: signUp, signInWithPassword,
sendOobCode (VERIFY_EMAIL) and lookup. The provider keeps the current
account's id token in memory; sign_out forgets it.
"""

import logging

import httpx

from agenda.application.ports import ProviderAccount, ProviderError

logger = logging.getLogger(__name__)

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"
DEFAULT_TIMEOUT = 10.0


def _error_code(response: httpx.Response) -> str:
    """Extract the error code; messages look like 'WEAK_PASSWORD : Password should be ...'."""
    try:
        message = response.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return f"HTTP_{response.status_code}"
    return str(message).split(":", 1)[0].strip() or f"HTTP_{response.status_code}"


class FirebaseIdentityProvider:
    def __init__(
        self,
        api_key: str,
        *,
        client: httpx.AsyncClient | None = None,
        base_url: str = IDENTITY_TOOLKIT_URL,
    ) -> None:
        if not api_key:
            raise ValueError("api_key must be non-empty")
        self._api_key = api_key
        self._client = client or httpx.AsyncClient(timeout=DEFAULT_TIMEOUT)
        self._owns_client = client is None
        self._base_url = base_url.rstrip("/")
        self._id_token: str | None = None
        self._account: ProviderAccount | None = None

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def create_account(self, email: str, password: str) -> ProviderAccount:
        data = await self._post(
            "accounts:signUp",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        return self._remember(data, email_verified=False)

    async def sign_in(self, email: str, password: str) -> ProviderAccount:
        data = await self._post(
            "accounts:signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        self._remember(data, email_verified=False)
        # signInWithPassword does not report verification; lookup does.
        account = await self.reload()
        if account is None:
            raise ProviderError("INTERNAL_ERROR", "lookup returned no account")
        return account

    async def send_email_verification(self) -> None:
        if self._id_token is None:
            raise ProviderError("USER_NOT_FOUND", "no signed-in account")
        await self._post(
            "accounts:sendOobCode",
            {"requestType": "VERIFY_EMAIL", "idToken": self._id_token},
        )

    async def reload(self) -> ProviderAccount | None:
        if self._id_token is None:
            return None
        data = await self._post("accounts:lookup", {"idToken": self._id_token})
        users = data.get("users") or []
        if not users:
            raise ProviderError("USER_NOT_FOUND", "lookup returned no account")
        info = users[0]
        self._account = ProviderAccount(
            uid=info["localId"],
            email=info.get("email", ""),
            email_verified=bool(info.get("emailVerified", False)),
        )
        return self._account

    async def sign_out(self) -> None:
        self._id_token = None
        self._account = None

    def _remember(self, data: dict, *, email_verified: bool) -> ProviderAccount:
        self._id_token = data.get("idToken")
        self._account = ProviderAccount(
            uid=data["localId"],
            email=data.get("email", ""),
            email_verified=email_verified,
        )
        return self._account

    async def _post(self, method: str, payload: dict) -> dict:
        url = f"{self._base_url}/{method}"
        try:
            response = await self._client.post(url, params={"key": self._api_key}, json=payload)
        except httpx.TransportError as e:
            logger.warning("Identity provider unreachable (%s): %s", method, e)
            raise ProviderError("NETWORK_ERROR", str(e)) from e
        if response.status_code >= 400:
            code = _error_code(response)
            raise ProviderError(code, f"{method} failed: {code}")
        return response.json()
