"""Alphabetical index over a contact list."""

from dataclasses import dataclass

from agenda.domain.entities import Contact

OTHER_BUCKET = "#"


@dataclass(frozen=True)
class ContactGroup:
    """Contacts whose name starts with the same letter."""

    letter: str
    contacts: tuple[Contact, ...]


def initial_letter(name: str | None) -> str:
    """Upper-cased first letter when it is A-Z, otherwise the '#' bucket."""
    first = (name or "")[:1].upper()
    if len(first) == 1 and "A" <= first <= "Z":
        return first
    return OTHER_BUCKET


def group_by_initial(contacts: list[Contact]) -> list[ContactGroup]:
    """Group contacts by initial letter. Keys sorted; order inside a group is preserved."""
    buckets: dict[str, list[Contact]] = {}
    for contact in contacts:
        buckets.setdefault(initial_letter(contact.name), []).append(contact)
    return [ContactGroup(letter=key, contacts=tuple(buckets[key])) for key in sorted(buckets)]
