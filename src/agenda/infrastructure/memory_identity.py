"""In-memory identity provider. Mirrors the error codes of the Identity Toolkit REST API."""

import uuid
from dataclasses import dataclass

from agenda.application.ports import ProviderAccount, ProviderError
from agenda.domain import normalize_identifier

MIN_PASSWORD_LENGTH = 6


@dataclass
class _Account:
    uid: str
    email: str
    password: str
    email_verified: bool = False
    disabled: bool = False


class InMemoryIdentityProvider:
    """Accounts in a dict; one current account at a time."""

    def __init__(self, *, fail_verification_email: bool = False) -> None:
        self._accounts: dict[str, _Account] = {}
        self._current: _Account | None = None
        self.fail_verification_email = fail_verification_email
        self.verification_emails: list[str] = []

    async def create_account(self, email: str, password: str) -> ProviderAccount:
        email = normalize_identifier(email)
        if "@" not in email or email.startswith("@") or email.endswith("@"):
            raise ProviderError("INVALID_EMAIL")
        if email in self._accounts:
            raise ProviderError("EMAIL_EXISTS")
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise ProviderError("WEAK_PASSWORD")
        account = _Account(uid=str(uuid.uuid4()), email=email, password=password)
        self._accounts[email] = account
        self._current = account
        return _public(account)

    async def sign_in(self, email: str, password: str) -> ProviderAccount:
        account = self._accounts.get(normalize_identifier(email))
        if account is None:
            raise ProviderError("EMAIL_NOT_FOUND")
        if account.disabled:
            raise ProviderError("USER_DISABLED")
        if account.password != password:
            raise ProviderError("INVALID_PASSWORD")
        self._current = account
        return _public(account)

    async def send_email_verification(self) -> None:
        if self._current is None:
            raise ProviderError("USER_NOT_FOUND")
        if self.fail_verification_email:
            raise ProviderError("TOO_MANY_ATTEMPTS_TRY_LATER")
        self.verification_emails.append(self._current.email)

    async def reload(self) -> ProviderAccount | None:
        if self._current is None:
            return None
        return _public(self._current)

    async def sign_out(self) -> None:
        self._current = None

    def mark_verified(self, email: str) -> None:
        """Simulate the user following the verification link."""
        self._accounts[normalize_identifier(email)].email_verified = True

    def disable(self, email: str) -> None:
        self._accounts[normalize_identifier(email)].disabled = True


def _public(account: _Account) -> ProviderAccount:
    return ProviderAccount(
        uid=account.uid, email=account.email, email_verified=account.email_verified
    )
