"""Sign-up and sign-in through an external identity provider with an email verification gate."""

import dataclasses
import logging

from agenda.application.credential_service import CredentialService
from agenda.application.dto import (
    EmailTaken,
    FailureReason,
    NotAuthenticated,
    NotVerified,
    ProviderFailure,
    Registered,
    SignedIn,
    StoreFailure,
    UsernameTaken,
    VerificationSent,
)
from agenda.application.ports import IdentityProvider, ProviderError, StoreError
from agenda.application.session import Session
from agenda.domain import User, normalize_identifier

logger = logging.getLogger(__name__)

# Provider codes: Identity Toolkit REST messages and the numeric codes of the mobile SDKs.
_CODE_REASONS: dict[str | int, FailureReason] = {
    "EMAIL_EXISTS": FailureReason.EMAIL_ALREADY_IN_USE,
    17007: FailureReason.EMAIL_ALREADY_IN_USE,
    "INVALID_EMAIL": FailureReason.INVALID_EMAIL,
    17008: FailureReason.INVALID_EMAIL,
    "WEAK_PASSWORD": FailureReason.WEAK_PASSWORD,
    17026: FailureReason.WEAK_PASSWORD,
    "EMAIL_NOT_FOUND": FailureReason.USER_NOT_FOUND,
    "USER_NOT_FOUND": FailureReason.USER_NOT_FOUND,
    17011: FailureReason.USER_NOT_FOUND,
    "INVALID_PASSWORD": FailureReason.WRONG_PASSWORD,
    "INVALID_LOGIN_CREDENTIALS": FailureReason.WRONG_PASSWORD,
    17009: FailureReason.WRONG_PASSWORD,
    "NETWORK_ERROR": FailureReason.NETWORK_ERROR,
    17020: FailureReason.NETWORK_ERROR,
    "USER_DISABLED": FailureReason.USER_DISABLED,
    17005: FailureReason.USER_DISABLED,
    "OPERATION_NOT_ALLOWED": FailureReason.PROVIDER_DISABLED,
    "PASSWORD_LOGIN_DISABLED": FailureReason.PROVIDER_DISABLED,
    17006: FailureReason.PROVIDER_DISABLED,
    "INTERNAL_ERROR": FailureReason.INTERNAL_ERROR,
    17999: FailureReason.INTERNAL_ERROR,
}

_MESSAGES: dict[FailureReason, str] = {
    FailureReason.EMAIL_ALREADY_IN_USE: "This email is already in use.",
    FailureReason.INVALID_EMAIL: "The email address is not valid.",
    FailureReason.WEAK_PASSWORD: "The password is too weak. Use at least 6 characters.",
    FailureReason.USER_NOT_FOUND: "No account exists for this email.",
    FailureReason.WRONG_PASSWORD: "Incorrect password.",
    FailureReason.NETWORK_ERROR: "Network error. Check your connection and try again.",
    FailureReason.USER_DISABLED: "This account has been disabled.",
    FailureReason.PROVIDER_DISABLED: "Email and password sign-in is not enabled.",
    FailureReason.INTERNAL_ERROR: "Internal authentication error. Try again later.",
}


def translate_provider_error(code: str | int) -> ProviderFailure:
    """Map a raw provider code to a domain failure; unknown codes keep the code in the message."""
    key: str | int = code.strip().upper() if isinstance(code, str) else code
    reason = _CODE_REASONS.get(key)
    if reason is None:
        return ProviderFailure(
            reason=FailureReason.UNKNOWN,
            message=f"Authentication error ({code}).",
            code=code,
        )
    return ProviderFailure(reason=reason, message=_MESSAGES[reason], code=code)


class AuthService:
    """Registration with email verification, gated sign-in, and sign-out."""

    def __init__(
        self,
        provider: IdentityProvider,
        credentials: CredentialService,
        session: Session,
    ) -> None:
        self._provider = provider
        self._credentials = credentials
        self._session = session

    async def register_with_verification(
        self, user: User
    ) -> Registered | UsernameTaken | EmailTaken | ProviderFailure | StoreFailure:
        """Create the provider account, send the verification email, then store the profile.

        Username and email are checked against the user store before the provider
        is touched. A failed verification email does not fail the registration.
        """
        try:
            if not await self._credentials.is_username_available(user.username):
                return UsernameTaken(username=user.username)
            if not await self._credentials.is_email_available(user.email):
                return EmailTaken(email=user.email)
        except StoreError as e:
            return StoreFailure(message=str(e))
        try:
            account = await self._provider.create_account(user.email, user.password)
        except ProviderError as e:
            failure = translate_provider_error(e.code)
            logger.warning("Provider rejected registration of %s: %s", user.email, failure.reason.value)
            return failure
        try:
            await self._provider.send_email_verification()
        except ProviderError as e:
            logger.warning("Verification email to %s not sent: %s", user.email, e.code)
        profile = dataclasses.replace(user, user_id=account.uid)
        return await self._credentials.register(profile)

    async def sign_in(
        self, email: str, password: str
    ) -> SignedIn | NotVerified | ProviderFailure:
        """Sign in and start a session. Unverified accounts are refused even with correct credentials."""
        email = normalize_identifier(email)
        try:
            account = await self._provider.sign_in(email, password)
        except ProviderError as e:
            return translate_provider_error(e.code)
        if not account.email_verified:
            logger.info("Sign-in blocked for %s: email not verified", email)
            return NotVerified(email=email)
        identifier = self._session.set_current_user(account.email or email)
        logger.info("Signed in %s", identifier)
        return SignedIn(identifier=identifier)

    async def resend_verification(self) -> VerificationSent | NotAuthenticated | ProviderFailure:
        try:
            account = await self._provider.reload()
            if account is None:
                return NotAuthenticated()
            await self._provider.send_email_verification()
        except ProviderError as e:
            return translate_provider_error(e.code)
        return VerificationSent(email=account.email)

    async def check_verification_status(self) -> bool:
        """True if the provider's current account has a verified email."""
        try:
            account = await self._provider.reload()
        except ProviderError as e:
            logger.warning("Verification status check failed: %s", e.code)
            return False
        return account is not None and account.email_verified

    async def sign_out(self) -> None:
        """Sign out of the provider and clear the session."""
        try:
            await self._provider.sign_out()
        except ProviderError as e:
            logger.warning("Provider sign-out failed: %s", e.code)
        finally:
            self._session.logout()
