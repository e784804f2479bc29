"""Input validation orchestration.

A Validator wraps one request's raw input, hands out Variables for the
fields a handler wants, and collects every failure in a MessageBag.

Usage:
    validator = Validator(request_data, token_provider=tokens)

    title = validator.string("title").between(3, 80).value()
    tags = validator.array("tags", []).max(5).value()
    public = validator.boolean("public", False).value()

    if not validator.passes():
        return render_errors(validator.errors().to_dict())
"""

from __future__ import annotations

import hmac
import logging
from collections.abc import Mapping
from typing import Any

from formcheck.messages import Message, MessageBag
from formcheck.resolver import default_resolver
from formcheck.types import MessageResolver, TokenProvider, ValidationFailed
from formcheck.variable import Variable

logger = logging.getLogger(__name__)


class _Missing:
    """Marker for "no default given", which makes a field required."""

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


class Validator:
    """Validates one set of input values.

    A Validator belongs to a single request; create a new one for each
    submission.
    """

    def __init__(
        self,
        input: Mapping[str, Any],
        *,
        resolver: MessageResolver | None = None,
        token_provider: TokenProvider | None = None,
    ):
        """Initialize the validator.

        Args:
            input: Raw input values (form fields, JSON body, ...)
            resolver: Resolver used to render this validator's messages
            token_provider: CSRF token source checked by passes(); if None,
                the token check is skipped
        """
        self._input = input
        self.resolver = resolver or default_resolver
        self.token_provider = token_provider
        self._errors = MessageBag(self.resolver)

    def get_input(self) -> Mapping[str, Any]:
        """Get the raw input values."""
        return self._input

    def errors(self) -> MessageBag:
        """Get the message bag holding the validation errors."""
        return self._errors

    def get_value(self, key: str, fallback: Any = None) -> Any:
        """Get an input value, descending into nested mappings for dotted keys.

        A key that literally exists (even one containing ".") wins over
        path traversal.

        Args:
            key: Input key, or a dotted path such as "address.city"
            fallback: Returned when the key or any path segment is missing

        Returns:
            The input value or the fallback
        """
        if key in self._input:
            return self._input[key]

        if "." not in key:
            return fallback

        node: Any = self._input
        for segment in key.split("."):
            if isinstance(node, Mapping) and segment in node:
                node = node[segment]
            else:
                return fallback
        return node

    def retrieve(
        self,
        key: str,
        default: Any = MISSING,
        args: dict[str, Any] | None = None,
    ) -> Variable:
        """Create a variable for an input field.

        Without a default the field is required.

        Args:
            key: Input key (dotted paths allowed)
            default: Value used when the input is blank
            args: Extra placeholder values for this field's messages

        Returns:
            The variable, with required() or default() already applied
        """
        variable = Variable(self, key, self.get_value(key), args)
        logger.debug("Retrieved field '%s' (required=%s)", key, default is MISSING)

        if default is MISSING:
            variable.required()
        else:
            variable.default(default)

        return variable

    def string(
        self, key: str, default: str | None = MISSING, args: dict[str, Any] | None = None
    ) -> Variable:
        """Create a variable for a string field."""
        return self.retrieve(key, default, args).string()

    def integer(
        self, key: str, default: int | None = MISSING, args: dict[str, Any] | None = None
    ) -> Variable:
        """Create a variable for an integer field."""
        return self.retrieve(key, default, args).integer()

    def float(
        self, key: str, default: float | None = MISSING, args: dict[str, Any] | None = None
    ) -> Variable:
        """Create a variable for a number field."""
        return self.retrieve(key, default, args).float()

    def boolean(
        self, key: str, default: bool | None = MISSING, args: dict[str, Any] | None = None
    ) -> Variable:
        """Create a variable for a boolean field."""
        return self.retrieve(key, default, args).boolean()

    def array(
        self, key: str, default: Any = MISSING, args: dict[str, Any] | None = None
    ) -> Variable:
        """Create a variable for a list or mapping field."""
        return self.retrieve(key, default, args).array()

    def passes(self, expect_token: bool = True) -> bool:
        """Check for validation errors.

        Rules run as variables are chained, so call this after every field
        has been retrieved.

        Args:
            expect_token: Also compare the submitted CSRF token with the
                token provider's expected value

        Returns:
            True if no errors have been recorded
        """
        if expect_token:
            self._check_token()

        passed = self._errors.is_empty()
        if not passed:
            logger.info("Validation failed with %d error(s)", self._errors.count())
        return passed

    def validate(self, expect_token: bool = True) -> None:
        """Like passes(), but raise when validation fails.

        Raises:
            ValidationFailed: If any error has been recorded
        """
        if not self.passes(expect_token):
            raise ValidationFailed(self._errors)

    def _check_token(self) -> None:
        if self.token_provider is None:
            logger.debug("No token provider configured, skipping token check")
            return

        token_key = self.token_provider.get_token_key(self)
        expected = self.token_provider.get_token_value(self)
        submitted = self.get_value(token_key)
        if not isinstance(submitted, str) or not hmac.compare_digest(
            submitted.encode(), expected.encode()
        ):
            logger.warning("Token mismatch for input key '%s'", token_key)
            self._errors.add(token_key, Message(token_key, "token", resolver=self.resolver))
