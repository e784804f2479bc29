"""Validation messages and the field-keyed message bag."""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field as dataclass_field, replace
from types import MappingProxyType
from typing import Any, Iterable, Iterator

from formcheck.resolver import default_resolver
from formcheck.types import InvalidMessageError, MessageResolver


@dataclass(frozen=True)
class Message:
    """A deferred validation message.

    The text is only produced when the message is resolved, so the resolver
    can be reconfigured after the message was recorded.

    Attributes:
        field: Field name this message belongs to
        key: Message key (e.g., "required", "max.string")
        args: Placeholder values for the template (read-only)
        resolver: Resolver used to render the text
    """

    field: str
    key: str
    args: Mapping[str, Any] = dataclass_field(default_factory=dict)
    resolver: MessageResolver = dataclass_field(
        default=default_resolver, compare=False, repr=False
    )

    # Args are a mapping, so messages compare by value but are not hashable
    __hash__ = None

    def __post_init__(self):
        object.__setattr__(self, "args", MappingProxyType(dict(self.args)))

    def resolve(self) -> str:
        """Render the message text."""
        return self.resolver.resolve_message(self.field, self.key, dict(self.args))

    def with_resolver(self, resolver: MessageResolver) -> "Message":
        """Return a copy of this message bound to another resolver."""
        return replace(self, resolver=resolver)

    def to_dict(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "key": self.key,
            "args": dict(self.args),
            "message": self.resolve(),
        }

    def __str__(self) -> str:
        return self.resolve()


class MessageBag:
    """Ordered, field-keyed collection of messages.

    Fields are kept in order of their first message, and each field's
    messages in the order they were added.
    """

    def __init__(self, resolver: MessageResolver | None = None):
        """Initialize an empty bag.

        Args:
            resolver: Resolver for messages added as plain text
        """
        self.resolver = resolver or default_resolver
        self._messages: dict[str, list[Message]] = {}

    def add(self, field: str, message: Message | str) -> Message:
        """Add a message for a field.

        Args:
            field: Field name
            message: A Message, or a message key to wrap in one

        Returns:
            The stored Message

        Raises:
            InvalidMessageError: If message is neither text nor a Message
        """
        if isinstance(message, str):
            message = Message(field, message, resolver=self.resolver)
        elif not isinstance(message, Message):
            raise InvalidMessageError(
                "Message must be a string or an instance of Message, "
                f"got {type(message).__name__}"
            )

        self._messages.setdefault(field, []).append(message)
        return message

    def all(self) -> list[Message]:
        """All messages, grouped by field in first-insertion order."""
        return [message for messages in self._messages.values() for message in messages]

    def except_(self, fields: Iterable[str]) -> list[Message]:
        """All messages except those belonging to the given fields."""
        excluded = set(fields)
        return [
            message
            for name, messages in self._messages.items()
            if name not in excluded
            for message in messages
        ]

    def get(self, field: str) -> list[Message]:
        """All messages for a field (empty if none)."""
        return list(self._messages.get(field, []))

    def get_first(self, field: str) -> Message | None:
        """The first message for a field, or None."""
        messages = self._messages.get(field)
        return messages[0] if messages else None

    def has(self, field: str) -> bool:
        return field in self._messages

    def fields(self) -> list[str]:
        """Field names in order of their first message."""
        return list(self._messages)

    def count(self) -> int:
        """Total number of messages across all fields."""
        return sum(len(messages) for messages in self._messages.values())

    def is_empty(self) -> bool:
        return self.count() == 0

    def to_dict(self) -> dict[str, list[str]]:
        """Field name -> resolved message texts, order preserved."""
        return {
            name: [message.resolve() for message in messages]
            for name, messages in self._messages.items()
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    def __len__(self) -> int:
        return self.count()

    def __iter__(self) -> Iterator[Message]:
        return iter(self.all())

    def __contains__(self, field: object) -> bool:
        return field in self._messages

    def __repr__(self) -> str:
        return f"MessageBag({self.to_dict()!r})"
