"""Per-field rule chaining.

A Variable holds one input value and exposes chainable rules:

    validator.string("title").bail().between(3, 80).value()

Rules never raise for bad input. Failures are recorded in the owning
validator's message bag and steer the rule-chain state:

- PROCESS: every rule runs (initial state)
- BAIL: armed by bail(); the next recorded failure switches to IGNORE
- IGNORE: every later rule is a no-op; entered directly when required()
  or a type assertion fails

Size and membership rules need a known type, so a type assertion
(string, integer, float, array, boolean) must come first. Calling them on
an ambiguous variable raises AmbiguousTypeError.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping, Sequence, Sized
from typing import TYPE_CHECKING, Any, Iterable

from formcheck.messages import Message
from formcheck.types import AmbiguousTypeError, State, ValueType

if TYPE_CHECKING:
    from formcheck.validator import Validator


# Decimal or exponent notation, surrounding whitespace allowed
NUMERIC_PATTERN = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")
INTEGER_PATTERN = re.compile(r"^\s*[+-]?\d+\s*$")

TRUTHY_VALUES: tuple[Any, ...] = ("yes", "on", "1", 1, True, "true")


def is_blank(value: Any) -> bool:
    """Check if a value is blank: None, whitespace-only text, or an empty container.

    Numbers and booleans are never blank, including 0 and False.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (bool, int, float)):
        return False
    if isinstance(value, Sized):
        return len(value) == 0
    return False


def is_container(value: Any) -> bool:
    """Check if a value is a sequence or mapping (text does not count)."""
    if isinstance(value, (str, bytes, bytearray)):
        return False
    return isinstance(value, (Mapping, Sequence))


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_numeric(value: Any) -> bool:
    """Check if a value is a number or a numeric string."""
    if is_number(value):
        return True
    return isinstance(value, str) and NUMERIC_PATTERN.match(value) is not None


def stringify(value: Any) -> str:
    """Convert a scalar to its form-field text representation."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def strict_equals(left: Any, right: Any) -> bool:
    """Equality that also requires identical types (so 1 != True != "1")."""
    return type(left) is type(right) and left == right


def loose_equals(left: Any, right: Any) -> bool:
    if left == right:
        return True
    if is_container(left) or is_container(right):
        return False
    return stringify(left) == stringify(right)


class Variable:
    """A single input value with chainable validation rules.

    Every rule returns the variable itself so rules can be chained.
    """

    def __init__(
        self,
        validator: Validator,
        name: str,
        value: Any,
        args: dict[str, Any] | None = None,
    ):
        """Initialize the variable.

        Args:
            validator: Validator whose message bag receives failures
            name: Field name, used as the message bag key
            value: The raw input value
            args: Extra placeholder values for every message of this field
        """
        self._validator = validator
        self._name = name
        self._value = value
        self._args = dict(args or {})
        self._ambiguous = True
        self._state = State.PROCESS

    @property
    def validator(self) -> Validator:
        return self._validator

    @property
    def name(self) -> str:
        return self._name

    @property
    def args(self) -> dict[str, Any]:
        return dict(self._args)

    @property
    def state(self) -> State:
        return self._state

    @property
    def ambiguous(self) -> bool:
        return self._ambiguous

    def value(self) -> Any:
        """Get the current (possibly coerced or defaulted) value."""
        return self._value

    # =========================================================================
    # Presence
    # =========================================================================

    def required(self) -> Variable:
        """The value must not be blank."""
        if is_blank(self._value):
            self._state = State.IGNORE
            self._add_error("required")
        return self

    def default(self, fallback: Any) -> Variable:
        """Replace a blank value with a fallback. Never records an error."""
        if is_blank(self._value):
            self._value = fallback
        return self

    # =========================================================================
    # Type assertions
    # =========================================================================

    def string(self) -> Variable:
        """The value must be a scalar; it is converted to text."""
        if self._value is None:
            self._ambiguous = False
        elif is_container(self._value):
            self._fail_type("string", "")
        else:
            self._value = stringify(self._value)
            self._ambiguous = False
        return self

    def integer(self) -> Variable:
        """The value must be numeric; it is truncated to an int."""
        if self._value is None:
            self._ambiguous = False
            return self

        # Plain integers keep full precision
        if is_number(self._value) and isinstance(self._value, int):
            self._ambiguous = False
            return self
        if isinstance(self._value, str) and INTEGER_PATTERN.match(self._value):
            try:
                self._value = int(self._value.strip())
            except ValueError:
                # Longer than the interpreter's int conversion limit
                self._fail_type("integer", 0)
                return self
            self._ambiguous = False
            return self

        number = self._to_float()
        if number is None:
            self._fail_type("integer", 0)
        else:
            self._value = int(number)
            self._ambiguous = False
        return self

    def float(self) -> Variable:
        """The value must be numeric; it is converted to a float."""
        if self._value is None:
            self._ambiguous = False
            return self

        number = self._to_float()
        if number is None:
            self._fail_type("float", 0.0)
        else:
            self._value = number
            self._ambiguous = False
        return self

    def boolean(self) -> Variable:
        """Convert the value to a bool. Only the literal truthy tokens are True."""
        self._value = any(strict_equals(self._value, truthy) for truthy in TRUTHY_VALUES)
        self._ambiguous = False
        return self

    def array(self) -> Variable:
        """The value must be a sequence or mapping."""
        if self._value is None or is_container(self._value):
            self._ambiguous = False
        else:
            self._fail_type("array", [])
        return self

    # =========================================================================
    # Chain control
    # =========================================================================

    def bail(self) -> Variable:
        """Stop validating after the next failure."""
        if self._state != State.IGNORE:
            self._state = State.BAIL
        return self

    # =========================================================================
    # Size and membership rules
    # =========================================================================

    def between(self, min: int | float, max: int | float) -> Variable:
        """The value's size must be within [min, max]."""
        if self._state != State.IGNORE:
            size = self.get_size()
            if size < min or size > max:
                self._add_error(
                    f"between.{self.get_type().value}", {"min": min, "max": max}
                )
        return self

    def max(self, max: int | float) -> Variable:
        """The value's size must be at most max."""
        if self._state != State.IGNORE and self.get_size() > max:
            self._add_error(f"max.{self.get_type().value}", {"max": max})
        return self

    def min(self, min: int | float) -> Variable:
        """The value's size must be at least min."""
        if self._state != State.IGNORE and self.get_size() < min:
            self._add_error(f"min.{self.get_type().value}", {"min": min})
        return self

    def size(self, size: int | float) -> Variable:
        """The value's size must be exactly size."""
        if self._state != State.IGNORE and self.get_size() != size:
            self._add_error(f"size.{self.get_type().value}", {"size": size})
        return self

    def in_(self, values: Iterable[Any], strict: bool = True) -> Variable:
        """The value must be one of the given candidates.

        Args:
            values: Allowed values
            strict: If true, candidates must also match the value's type
        """
        if self._state == State.IGNORE:
            return self

        self._check_ambiguity()

        candidates = list(values)
        equals = strict_equals if strict else loose_equals
        if not any(equals(self._value, candidate) for candidate in candidates):
            self._add_error(
                "in", {"values": ", ".join(stringify(c) for c in candidates)}
            )
        return self

    # =========================================================================
    # Type introspection
    # =========================================================================

    def get_type(self) -> ValueType:
        """Get the generic type of the current value."""
        if is_number(self._value):
            return ValueType.NUMBER
        if is_container(self._value):
            return ValueType.ARRAY
        return ValueType.STRING

    def get_size(self) -> int | float:
        """Get the size of the current value.

        Numbers are their own size, arrays count their elements and strings
        count their characters.

        Raises:
            AmbiguousTypeError: If no type assertion has run yet
        """
        self._check_ambiguity()

        value_type = self.get_type()
        if value_type == ValueType.NUMBER:
            return self._value
        if value_type == ValueType.ARRAY:
            return len(self._value)
        return len(stringify(self._value))

    # =========================================================================
    # Internals
    # =========================================================================

    def _to_float(self) -> float | None:
        """Parse the value as a finite number, or None if it is not numeric."""
        if not is_numeric(self._value):
            return None
        try:
            number = float(self._value)
        except OverflowError:
            return None
        if not math.isfinite(number):
            return None
        return number

    def _fail_type(self, key: str, reset: Any) -> None:
        self._value = reset
        self._state = State.IGNORE
        self._add_error(key)

    def _add_error(self, key: str, merge: dict[str, Any] | None = None) -> Message:
        """Record a failure, ending the chain if bail() was armed."""
        if self._state == State.BAIL:
            self._state = State.IGNORE

        errors = self._validator.errors()
        message = Message(
            self._name,
            key,
            {**self._args, **(merge or {})},
            resolver=errors.resolver,
        )
        return errors.add(self._name, message)

    def _check_ambiguity(self) -> None:
        if self._ambiguous:
            raise AmbiguousTypeError(
                f"Cannot validate ambiguous variable '{self._name}'; "
                "apply a type rule (string, integer, float, boolean, array) first"
            )
