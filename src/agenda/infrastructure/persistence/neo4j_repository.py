"""Neo4j implementations of the user and contact repositories (async driver).

One node label per collection: (:User) and (:Contact). A contact carries its
owner as a plain ownerIdentifier property; there is no relationship to the
User node. Property names are the stored record names from records.py.
"""

import re
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from neo4j import AsyncDriver
from neo4j.exceptions import (
    AuthError,
    ConstraintError,
    DriverError,
    Forbidden,
    Neo4jError,
)

from agenda.application.ports import DuplicateKeyError, StoreError, StorePermissionError
from agenda.domain import Contact, User, normalize_identifier
from agenda.infrastructure.records import (
    decode_contact,
    decode_user,
    encode_contact,
    encode_contact_fields,
    encode_user,
)

_CONSTRAINT_QUERIES = (
    "CREATE CONSTRAINT user_username_unique IF NOT EXISTS FOR (u:User) REQUIRE u.username IS UNIQUE",
    "CREATE CONSTRAINT user_email_unique IF NOT EXISTS FOR (u:User) REQUIRE u.email IS UNIQUE",
    "CREATE CONSTRAINT user_id_unique IF NOT EXISTS FOR (u:User) REQUIRE u.userId IS UNIQUE",
    "CREATE CONSTRAINT contact_id_unique IF NOT EXISTS FOR (c:Contact) REQUIRE c.id IS UNIQUE",
)

_ADD_USER_QUERY = """
CREATE (u:User)
SET u = $props
RETURN u.userId AS user_id
"""

_FIND_USER_BY_USERNAME_QUERY = """
MATCH (u:User { username: $value })
RETURN u
LIMIT 1
"""

_FIND_USER_BY_EMAIL_QUERY = """
MATCH (u:User { email: $value })
RETURN u
LIMIT 1
"""

_LIST_USERS_QUERY = """
MATCH (u:User)
RETURN u
ORDER BY u.registrationDate
"""

_SET_PROFILE_IMAGE_QUERY = """
MATCH (u:User { userId: $user_id })
SET u.profileImage = $image
RETURN u.userId AS user_id
"""

_CLEAR_USERS_QUERY = """
MATCH (u:User)
DETACH DELETE u
RETURN count(u) AS removed
"""

_ADD_CONTACT_QUERY = """
CREATE (c:Contact)
SET c = $props
"""

_GET_CONTACT_QUERY = """
MATCH (c:Contact { id: $contact_id, ownerIdentifier: $owner })
RETURN c
"""

_LIST_CONTACTS_QUERY = """
MATCH (c:Contact { ownerIdentifier: $owner })
RETURN c
ORDER BY c.nombre
"""

_UPDATE_CONTACT_QUERY = """
MATCH (c:Contact { id: $contact_id, ownerIdentifier: $owner })
SET c += $fields
RETURN c.id AS contact_id
"""

_DELETE_CONTACT_QUERY = """
MATCH (c:Contact { id: $contact_id, ownerIdentifier: $owner })
DETACH DELETE c
RETURN count(c) AS removed
"""

_FIND_ORPHANS_QUERY = """
MATCH (c:Contact)
WHERE c.ownerIdentifier IS NULL OR trim(c.ownerIdentifier) = ''
RETURN c.id AS contact_id
"""

_FIND_BY_OWNER_CI_QUERY = """
MATCH (c:Contact)
WHERE toLower(c.ownerIdentifier) = $owner
RETURN c.id AS contact_id
"""

_REASSIGN_OWNER_QUERY = """
UNWIND $contact_ids AS contact_id
MATCH (c:Contact { id: contact_id })
SET c.ownerIdentifier = $owner
RETURN count(c) AS changed
"""


_VIOLATED_PROPERTY = re.compile(r"propert(?:y|ies) `(\w+)`")


def duplicate_field(message: str) -> str:
    """Name of the property a uniqueness violation reports, e.g.
    "Node(0) already exists with label `User` and property `email` = 'a@b.c'".
    """
    match = _VIOLATED_PROPERTY.search(message)
    if match:
        return match.group(1)
    for name, field in (("user_email_unique", "email"), ("user_id_unique", "userId")):
        if name in message:
            return field
    return "username"


@contextmanager
def _store_errors() -> Iterator[None]:
    """Translate driver exceptions into StoreError subclasses."""
    try:
        yield
    except ConstraintError as e:
        message = e.message or str(e)
        raise DuplicateKeyError(duplicate_field(message), message) from e
    except (Forbidden, AuthError) as e:
        raise StorePermissionError(str(e)) from e
    except (Neo4jError, DriverError) as e:
        raise StoreError(str(e)) from e


def _props(node: Any) -> dict[str, Any]:
    return dict(node.items())


async def ensure_constraints(driver: AsyncDriver, database: str | None = None) -> None:
    """Create the uniqueness constraints if missing. Call once at startup."""
    with _store_errors():
        async with driver.session(database=database) as session:
            for query in _CONSTRAINT_QUERIES:
                await session.run(query)


class Neo4jUserRepository:
    """Stores users as (:User) nodes. The uniqueness constraints back the service's pre-checks."""

    def __init__(self, driver: AsyncDriver, database: str | None = None) -> None:
        self._driver = driver
        self._database = database

    async def add(self, user: User) -> str:
        props = encode_user(user)
        if not user.user_id:
            props["userId"] = str(uuid.uuid4())
        with _store_errors():
            async with self._driver.session(database=self._database) as session:
                result = await session.run(_ADD_USER_QUERY, props=props)
                record = await result.single()
        if not record:
            raise StoreError("add user: expected one result")
        return record["user_id"]

    async def find_by_username(self, username: str) -> User | None:
        return await self._find_one(_FIND_USER_BY_USERNAME_QUERY, normalize_identifier(username))

    async def find_by_email(self, email: str) -> User | None:
        return await self._find_one(_FIND_USER_BY_EMAIL_QUERY, normalize_identifier(email))

    async def list_all(self) -> list[User]:
        with _store_errors():
            async with self._driver.session(database=self._database) as session:
                result = await session.run(_LIST_USERS_QUERY)
                nodes = [record["u"] async for record in result]
        return [decode_user(_props(node)) for node in nodes]

    async def set_profile_image(self, user_id: str, image: str | None) -> bool:
        with _store_errors():
            async with self._driver.session(database=self._database) as session:
                result = await session.run(
                    _SET_PROFILE_IMAGE_QUERY, user_id=user_id, image=image or None
                )
                record = await result.single()
        return record is not None

    async def clear_all(self) -> int:
        with _store_errors():
            async with self._driver.session(database=self._database) as session:
                result = await session.run(_CLEAR_USERS_QUERY)
                record = await result.single()
        return record["removed"] if record else 0

    async def _find_one(self, query: str, value: str) -> User | None:
        with _store_errors():
            async with self._driver.session(database=self._database) as session:
                result = await session.run(query, value=value)
                record = await result.single()
        if not record:
            return None
        return decode_user(_props(record["u"]))


class Neo4jContactRepository:
    """Stores contacts as (:Contact) nodes filtered by ownerIdentifier."""

    def __init__(self, driver: AsyncDriver, database: str | None = None) -> None:
        self._driver = driver
        self._database = database

    async def add(self, contact: Contact) -> None:
        props = encode_contact(contact)
        with _store_errors():
            async with self._driver.session(database=self._database) as session:
                await session.run(_ADD_CONTACT_QUERY, props=props)

    async def get_by_id(self, owner: str, contact_id: str) -> Contact | None:
        with _store_errors():
            async with self._driver.session(database=self._database) as session:
                result = await session.run(_GET_CONTACT_QUERY, contact_id=contact_id, owner=owner)
                record = await result.single()
        if not record:
            return None
        return decode_contact(_props(record["c"]))

    async def list_by_owner(self, owner: str) -> list[Contact]:
        with _store_errors():
            async with self._driver.session(database=self._database) as session:
                result = await session.run(_LIST_CONTACTS_QUERY, owner=owner)
                nodes = [record["c"] async for record in result]
        return [decode_contact(_props(node)) for node in nodes]

    async def update(self, owner: str, contact_id: str, fields: dict[str, Any]) -> bool:
        # SET += with a null value removes the property.
        stored = encode_contact_fields(fields)
        with _store_errors():
            async with self._driver.session(database=self._database) as session:
                result = await session.run(
                    _UPDATE_CONTACT_QUERY, contact_id=contact_id, owner=owner, fields=stored
                )
                record = await result.single()
        return record is not None

    async def delete(self, owner: str, contact_id: str) -> bool:
        with _store_errors():
            async with self._driver.session(database=self._database) as session:
                result = await session.run(_DELETE_CONTACT_QUERY, contact_id=contact_id, owner=owner)
                record = await result.single()
        return bool(record and record["removed"])

    async def find_orphan_ids(self) -> list[str]:
        return await self._ids(_FIND_ORPHANS_QUERY)

    async def find_ids_by_owner_ci(self, owner: str) -> list[str]:
        return await self._ids(_FIND_BY_OWNER_CI_QUERY, owner=normalize_identifier(owner))

    async def reassign_owner(self, contact_ids: list[str], owner: str) -> int:
        if not contact_ids:
            return 0
        with _store_errors():
            async with self._driver.session(database=self._database) as session:
                result = await session.run(
                    _REASSIGN_OWNER_QUERY, contact_ids=list(contact_ids), owner=owner
                )
                record = await result.single()
        return record["changed"] if record else 0

    async def _ids(self, query: str, **params: Any) -> list[str]:
        with _store_errors():
            async with self._driver.session(database=self._database) as session:
                result = await session.run(query, **params)
                return [record["contact_id"] async for record in result]
