"""Typed decoding of stored user and contact records.

Field names on the store side are stable across revisions (contacts keep
their Spanish field names). Malformed records raise RecordDecodeError.
"""

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from agenda.application.ports import RecordDecodeError
from agenda.domain import Contact, User

# Domain field name -> stored field name.
CONTACT_FIELD_NAMES = {
    "id": "id",
    "name": "nombre",
    "phone": "telefono",
    "address": "direccion",
    "age": "edad",
    "hobbies": "hobbies",
    "latitude": "latitude",
    "longitude": "longitude",
    "profile_image": "profileImage",
    "created_at": "createdAt",
    "owner_identifier": "ownerIdentifier",
}

USER_FIELD_NAMES = {
    "name": "name",
    "email": "email",
    "username": "username",
    "password": "password",
    "phone": "phone",
    "registration_date": "registrationDate",
    "user_id": "userId",
    "profile_image": "profileImage",
}


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class UserRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str
    email: str
    username: str
    password: str
    phone: str | None = None
    registration_date: datetime = Field(alias="registrationDate")
    user_id: str | None = Field(default=None, alias="userId")
    profile_image: str | None = Field(default=None, alias="profileImage")

    @field_validator("phone", "user_id", "profile_image", mode="before")
    @classmethod
    def blank_optionals(cls, value: Any) -> Any:
        return _blank_to_none(value)


class ContactRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    name: str = Field(alias="nombre")
    phone: str | None = Field(default=None, alias="telefono")
    address: str | None = Field(default=None, alias="direccion")
    age: int | None = Field(default=None, alias="edad")
    hobbies: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    profile_image: str | None = Field(default=None, alias="profileImage")
    # Legacy records without a timestamp are treated as created now.
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), alias="createdAt"
    )
    owner_identifier: str | None = Field(default=None, alias="ownerIdentifier")

    @field_validator(
        "phone",
        "address",
        "age",
        "hobbies",
        "latitude",
        "longitude",
        "profile_image",
        "owner_identifier",
        mode="before",
    )
    @classmethod
    def blank_optionals(cls, value: Any) -> Any:
        return _blank_to_none(value)


def decode_user(doc: Mapping[str, Any]) -> User:
    try:
        record = UserRecord.model_validate(dict(doc))
        return User(**record.model_dump())
    except (ValidationError, ValueError) as e:
        raise RecordDecodeError(f"invalid user record: {e}") from e


def encode_user(user: User) -> dict[str, Any]:
    """Stored shape of a user. Absent optionals are omitted."""
    doc = {
        "name": user.name,
        "email": user.email,
        "username": user.username,
        "password": user.password,
        "registrationDate": user.registration_date.isoformat(),
    }
    if user.phone:
        doc["phone"] = user.phone
    if user.user_id:
        doc["userId"] = user.user_id
    if user.profile_image:
        doc["profileImage"] = user.profile_image
    return doc


def decode_contact(doc: Mapping[str, Any], contact_id: str | None = None) -> Contact:
    """Decode a stored contact. contact_id overrides an id stored inside the document."""
    data = dict(doc)
    if contact_id is not None:
        data["id"] = contact_id
    try:
        record = ContactRecord.model_validate(data)
        return Contact(**record.model_dump())
    except (ValidationError, ValueError) as e:
        raise RecordDecodeError(f"invalid contact record: {e}") from e


def encode_contact(contact: Contact) -> dict[str, Any]:
    """Stored shape of a contact. Empty optionals are omitted."""
    doc = {
        "id": contact.id,
        "nombre": contact.name,
        "createdAt": contact.created_at.isoformat(),
    }
    for key, value in encode_contact_fields(_contact_optionals(contact)).items():
        if value is not None:
            doc[key] = value
    return doc


def encode_contact_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Rename domain fields to stored names. Blank strings become None (field removed)."""
    out: dict[str, Any] = {}
    for name, value in fields.items():
        stored = CONTACT_FIELD_NAMES.get(name)
        if stored is None:
            raise ValueError(f"unknown contact field: {name}")
        out[stored] = _blank_to_none(value)
    return out


def _contact_optionals(contact: Contact) -> dict[str, Any]:
    return {
        "phone": contact.phone,
        "address": contact.address,
        "age": contact.age,
        "hobbies": contact.hobbies,
        "latitude": contact.latitude,
        "longitude": contact.longitude,
        "profile_image": contact.profile_image,
        "owner_identifier": contact.owner_identifier,
    }
