"""Gmail label value type and the system labels the inbox cares about."""

from __future__ import annotations


class Label:
    """A Gmail label.

    Compares equal to another ``Label`` with the same id, or to a raw label
    id string as it appears in ``labelIds`` of an API payload.

    Args:
        name: Display name of the label.
        id: Label id used by the API.
    """

    def __init__(self, name: str, id: str) -> None:
        self.name = name
        self.id = id

    def __repr__(self) -> str:
        return f"Label(name={self.name!r}, id={self.id!r})"

    def __str__(self) -> str:
        return self.name

    def __hash__(self) -> int:
        return hash(self.id)

    def __eq__(self, other) -> bool:
        if isinstance(other, str):
            return self.id == other
        if isinstance(other, Label):
            return self.id == other.id
        return NotImplemented


INBOX = Label('INBOX', 'INBOX')
UNREAD = Label('UNREAD', 'UNREAD')
STARRED = Label('STARRED', 'STARRED')
