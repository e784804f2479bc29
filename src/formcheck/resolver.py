"""Message resolution for formcheck.

DefaultMessageResolver renders message keys against a static template
catalog. Templates use {placeholder} tokens:
- {field} - the field name (or an explicit "field" arg)
- {min}, {max}, {size} - rule bounds
- {values} - the candidate list of the "in" rule

Applications can override templates with a YAML catalog:

    # messages.yaml
    required: "Please fill in the {field}."
    max.string: "The {field} is too long (at most {max} characters)."
"""

import logging
from pathlib import Path
from typing import Any

import yaml

from formcheck.types import CatalogError

logger = logging.getLogger(__name__)


DEFAULT_MESSAGES: dict[str, str] = {
    "required": "The {field} is required.",
    "string": "The {field} must be a string.",
    "integer": "The {field} must be a number.",
    "float": "The {field} must be a number.",
    "array": "The {field} has invalid data.",
    "token": "Invalid token. Please try again.",
    "between.number": "The {field} must be between {min} and {max}.",
    "between.array": "The {field} must have between {min} and {max} elements.",
    "between.string": "The {field} must have between {min} and {max} characters.",
    "max.number": "The {field} may not be greater than {max}.",
    "max.string": "The {field} may not have more than {max} characters.",
    "max.array": "The {field} may not have more than {max} elements.",
    "min.number": "The {field} must be at least {min}.",
    "min.string": "The {field} must have at least {min} characters.",
    "min.array": "The {field} must have at least {min} elements.",
    "size.number": "The {field} must be {size}.",
    "size.string": "The {field} must have {size} characters.",
    "size.array": "The {field} must have {size} elements.",
    "in": "The {field} must be one of {values}.",
    "unique": "The {field} has already been taken.",
    "exists": "The {field} does not exist.",
}


def load_catalog(path: Path | str) -> dict[str, str]:
    """Load message templates from a YAML file.

    Args:
        path: Path to a YAML document mapping message keys to templates

    Returns:
        Dict of message key -> template

    Raises:
        CatalogError: If the file is missing, unparsable, or not a flat
            mapping of string keys to string templates
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise CatalogError(f"Cannot read message catalog {path}: {e}") from e
    except yaml.YAMLError as e:
        raise CatalogError(f"Invalid YAML in message catalog {path}: {e}") from e

    # An empty file is an empty catalog
    if data is None:
        return {}

    if not isinstance(data, dict):
        raise CatalogError(
            f"Message catalog {path} must be a mapping of keys to templates"
        )

    catalog: dict[str, str] = {}
    for key, template in data.items():
        if not isinstance(template, str):
            raise CatalogError(
                f"Template for '{key}' in {path} must be a string, "
                f"got {type(template).__name__}"
            )
        catalog[str(key)] = template

    logger.debug("Loaded %d message template(s) from %s", len(catalog), path)
    return catalog


class DefaultMessageResolver:
    """Resolves message keys against the template catalog.

    Unknown keys are not an error: the key itself is returned verbatim so
    that callers still get something to display.

    Example:
        resolver = DefaultMessageResolver({"required": "{field} is missing"})
        resolver.resolve_message("name", "required", {})  # "name is missing"
    """

    def __init__(self, messages: dict[str, str] | None = None):
        """Initialize the resolver.

        Args:
            messages: Templates overriding (or extending) DEFAULT_MESSAGES
        """
        self.messages = {**DEFAULT_MESSAGES, **(messages or {})}

    @classmethod
    def from_yaml(cls, path: Path | str) -> "DefaultMessageResolver":
        """Create a resolver whose templates are overridden by a YAML catalog."""
        return cls(load_catalog(path))

    def resolve_message(self, field: str, key: str, args: dict[str, Any]) -> str:
        template = self.messages.get(key)
        if template is None:
            logger.debug("No template for message key '%s', using the key", key)
            return key

        # Args first, so an explicit "field" arg overrides the field name
        message = template
        for name, value in args.items():
            message = message.replace("{" + name + "}", str(value))

        return message.replace("{field}", field)


default_resolver = DefaultMessageResolver()
