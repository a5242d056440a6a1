"""Unit tests for CredentialService over the in-memory user repository."""

import asyncio

from agenda.application import (
    CredentialService,
    DuplicateKeyError,
    EmailTaken,
    Registered,
    Session,
    StoreError,
    StoreFailure,
    StorePermissionError,
    UsernameTaken,
)
from agenda.domain import User
from agenda.infrastructure import InMemoryKeyValueStore, InMemoryUserRepository


def _ana(**overrides) -> User:
    fields = dict(name="Ana", email="ana@x.com", username="ana", password="secret1")
    fields.update(overrides)
    return User(**fields)


def _service() -> CredentialService:
    return CredentialService(InMemoryUserRepository())


class _FailingUsers(InMemoryUserRepository):
    """Lookups raise the given error."""

    def __init__(self, error: StoreError) -> None:
        super().__init__()
        self._error = error

    async def find_by_username(self, username):
        raise self._error

    async def find_by_email(self, email):
        raise self._error


class _RacingUsers(InMemoryUserRepository):
    """Pre-checks always pass; the write hits a uniqueness constraint."""

    def __init__(self, field: str) -> None:
        super().__init__()
        self._field = field

    async def find_by_username(self, username):
        return None

    async def find_by_email(self, email):
        return None

    async def add(self, user):
        raise DuplicateKeyError(self._field, "x")


def test_register_assigns_id_and_normalizes() -> None:
    service = _service()
    result = asyncio.run(service.register(_ana(username="  Ana ", email="ANA@X.com")))
    assert isinstance(result, Registered)
    assert result.user_id
    assert result.username == "ana"
    assert result.email == "ana@x.com"

    stored = asyncio.run(service.get_user_by_username("ANA"))
    assert stored is not None
    assert stored.user_id == result.user_id
    assert stored.email == "ana@x.com"


def test_register_same_username_different_case_is_taken() -> None:
    service = _service()
    assert isinstance(asyncio.run(service.register(_ana())), Registered)
    second = asyncio.run(service.register(_ana(username="ANA", email="other@x.com")))
    assert isinstance(second, UsernameTaken)
    assert second.username == "ana"
    assert len(asyncio.run(service.list_all_users())) == 1


def test_register_same_email_different_case_is_taken() -> None:
    service = _service()
    asyncio.run(service.register(_ana()))
    second = asyncio.run(service.register(_ana(username="ana2", email="Ana@X.COM")))
    assert isinstance(second, EmailTaken)
    assert second.email == "ana@x.com"


def test_availability_checks_are_case_insensitive() -> None:
    service = _service()
    assert asyncio.run(service.is_username_available("ana")) is True
    asyncio.run(service.register(_ana()))
    assert asyncio.run(service.is_username_available("AnA")) is False
    assert asyncio.run(service.is_email_available("ANA@x.com")) is False
    assert asyncio.run(service.is_email_available("carol@y.com")) is True


def test_validate_credentials_exact_password_match() -> None:
    service = _service()
    asyncio.run(service.register(_ana()))
    assert asyncio.run(service.validate_credentials("ana", "secret1")) is True
    assert asyncio.run(service.validate_credentials("ANA", "secret1")) is True
    assert asyncio.run(service.validate_credentials("ana", "Secret1")) is False
    assert asyncio.run(service.validate_credentials("ana", "secret1 ")) is False
    assert asyncio.run(service.validate_credentials("nobody", "secret1")) is False


def test_permission_error_counts_as_available() -> None:
    service = CredentialService(_FailingUsers(StorePermissionError("denied")))
    assert asyncio.run(service.is_username_available("ana")) is True
    assert asyncio.run(service.is_email_available("ana@x.com")) is True


def test_store_error_denies_login() -> None:
    service = CredentialService(_FailingUsers(StorePermissionError("denied")))
    assert asyncio.run(service.validate_credentials("ana", "secret1")) is False
    service = CredentialService(_FailingUsers(StoreError("offline")))
    assert asyncio.run(service.validate_credentials("ana", "secret1")) is False


def test_register_reports_store_failure() -> None:
    service = CredentialService(_FailingUsers(StoreError("offline")))
    result = asyncio.run(service.register(_ana()))
    assert isinstance(result, StoreFailure)
    assert "offline" in result.message


def test_constraint_violation_maps_to_taken() -> None:
    username_race = CredentialService(_RacingUsers("username"))
    assert isinstance(asyncio.run(username_race.register(_ana())), UsernameTaken)
    email_race = CredentialService(_RacingUsers("email"))
    assert isinstance(asyncio.run(email_race.register(_ana())), EmailTaken)


def test_get_user_by_email_and_resolve() -> None:
    service = _service()
    asyncio.run(service.register(_ana(phone="555-1111")))
    by_email = asyncio.run(service.get_user_by_email("ANA@x.com"))
    assert by_email is not None
    assert by_email.username == "ana"
    assert by_email.phone == "555-1111"
    assert asyncio.run(service.resolve("ana@x.com")) == by_email
    assert asyncio.run(service.resolve("ana")) == by_email
    assert asyncio.run(service.get_user_by_email("nobody@x.com")) is None


def test_get_current_user_follows_session() -> None:
    service = _service()
    asyncio.run(service.register(_ana()))
    session = Session(InMemoryKeyValueStore())
    assert asyncio.run(service.get_current_user(session)) is None
    session.set_current_user("ana@x.com")
    current = asyncio.run(service.get_current_user(session))
    assert current is not None
    assert current.username == "ana"


def test_profile_image_can_be_set_and_cleared() -> None:
    service = _service()
    registered = asyncio.run(service.register(_ana()))
    assert isinstance(registered, Registered)
    assert asyncio.run(service.update_profile_image(registered.user_id, "aGVsbG8=")) is True
    assert asyncio.run(service.get_user_by_username("ana")).profile_image == "aGVsbG8="
    assert asyncio.run(service.update_profile_image(registered.user_id, None)) is True
    assert asyncio.run(service.get_user_by_username("ana")).profile_image is None
    assert asyncio.run(service.update_profile_image("missing", "x")) is False


def test_clear_all_users() -> None:
    service = _service()
    asyncio.run(service.register(_ana()))
    asyncio.run(service.register(_ana(username="bob", email="bob@x.com")))
    assert asyncio.run(service.clear_all_users()) == 2
    assert asyncio.run(service.list_all_users()) == []
    assert asyncio.run(service.is_username_available("ana")) is True
