"""formcheck: coerce-or-reject validation for untrusted form input.

This package provides:
- Validator: looks up input fields and collects failures per field
- Variable: chainable, coercing rules for one field
- MessageBag / Message: ordered, lazily rendered error messages
- DefaultMessageResolver: template catalog with YAML overrides

Usage:
    from formcheck import Validator

    validator = Validator({"name": "Mario", "age": "31"})
    name = validator.string("name").max(40).value()
    age = validator.integer("age").between(13, 120).value()

    if not validator.passes():
        print(validator.errors().to_dict())
"""

from formcheck.config import FormcheckConfig
from formcheck.messages import Message, MessageBag
from formcheck.resolver import (
    DEFAULT_MESSAGES,
    DefaultMessageResolver,
    load_catalog,
)
from formcheck.tokens import StaticTokenProvider
from formcheck.types import (
    AmbiguousTypeError,
    CatalogError,
    FormcheckError,
    InvalidMessageError,
    MessageResolver,
    MisuseError,
    State,
    TokenProvider,
    ValidationFailed,
    ValueType,
)
from formcheck.validator import MISSING, Validator
from formcheck.variable import Variable, is_blank

__all__ = [
    # Types
    "MessageResolver",
    "State",
    "TokenProvider",
    "ValueType",
    # Errors
    "AmbiguousTypeError",
    "CatalogError",
    "FormcheckError",
    "InvalidMessageError",
    "MisuseError",
    "ValidationFailed",
    # Messages
    "DEFAULT_MESSAGES",
    "DefaultMessageResolver",
    "Message",
    "MessageBag",
    "load_catalog",
    # Validation
    "MISSING",
    "Validator",
    "Variable",
    "is_blank",
    # Setup
    "FormcheckConfig",
    "StaticTokenProvider",
]
