"""Core types for the formcheck validation system.

This module defines the foundational types shared by every component:
- Variable rule-chain states and generic value types
- Collaborator protocols (message resolution, CSRF token lookup)
- The exception hierarchy for API misuse and catalog problems

Validation failures caused by bad user input are never raised; they are
recorded as messages. The exceptions here signal bugs in calling code.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from formcheck.messages import MessageBag
    from formcheck.validator import Validator


class State(Enum):
    """Rule-chain state of a Variable.

    PROCESS: Every rule runs
    BAIL: Rules run until the next failure, then the chain stops
    IGNORE: Every subsequent rule is a no-op
    """

    PROCESS = "process"
    BAIL = "bail"
    IGNORE = "ignore"


class ValueType(Enum):
    """Generic type of a variable's value, used as the message key suffix."""

    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"


class MessageResolver(Protocol):
    """Protocol for turning a message key into human-readable text."""

    def resolve_message(self, field: str, key: str, args: dict[str, Any]) -> str:
        """Create a complete human-readable message.

        Args:
            field: Name of the field the message belongs to
            key: Message key (e.g., "required", "between.number")
            args: Placeholder values for the template

        Returns:
            The rendered message
        """
        ...


class TokenProvider(Protocol):
    """Protocol for the CSRF token collaborator consulted by Validator.passes()."""

    def get_token_key(self, validator: Validator) -> str:
        """Return the input key holding the submitted token."""
        ...

    def get_token_value(self, validator: Validator) -> str:
        """Return the token value the submission is expected to carry."""
        ...


# =============================================================================
# Exceptions
# =============================================================================


class FormcheckError(Exception):
    """Base class for all formcheck errors."""
    pass


class MisuseError(FormcheckError):
    """The validation API was called incorrectly (a bug, not bad input)."""
    pass


class AmbiguousTypeError(MisuseError):
    """A size or membership rule ran before a type-assertion rule."""
    pass


class InvalidMessageError(MisuseError, TypeError):
    """A message bag was given something other than text or a Message."""
    pass


class CatalogError(FormcheckError):
    """A message catalog could not be loaded."""
    pass


class ValidationFailed(FormcheckError):
    """Raised by Validator.validate() when the input did not pass.

    Attributes:
        errors: The message bag holding every recorded failure
    """

    def __init__(self, errors: MessageBag):
        super().__init__(f"Validation failed with {errors.count()} error(s)")
        self.errors = errors
