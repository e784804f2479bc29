"""Environment configuration for formcheck."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from formcheck.resolver import DefaultMessageResolver
from formcheck.tokens import StaticTokenProvider

DEFAULT_TOKEN_FIELD = "_token"


@dataclass
class FormcheckConfig:
    """Validation configuration.

    Attributes:
        messages_path: Optional YAML catalog overriding the default templates
        token_field: Input key that carries the CSRF token
        token_value: Fixed expected token value; None leaves the token
            provider to the application
    """

    messages_path: Path | None = None
    token_field: str = DEFAULT_TOKEN_FIELD
    token_value: str | None = None

    @classmethod
    def from_env(cls) -> FormcheckConfig:
        """Create config from environment variables.

        Reads:
        1. FORMCHECK_MESSAGES_PATH - YAML message catalog
        2. FORMCHECK_TOKEN_FIELD - token input key (default: "_token")
        3. FORMCHECK_TOKEN_VALUE - fixed expected token
        """
        messages_path = os.environ.get("FORMCHECK_MESSAGES_PATH")
        return cls(
            messages_path=Path(messages_path) if messages_path else None,
            token_field=os.environ.get("FORMCHECK_TOKEN_FIELD") or DEFAULT_TOKEN_FIELD,
            token_value=os.environ.get("FORMCHECK_TOKEN_VALUE") or None,
        )

    def create_resolver(self) -> DefaultMessageResolver:
        """Create the message resolver, applying the YAML catalog if configured.

        Raises:
            CatalogError: If the configured catalog cannot be loaded
        """
        if self.messages_path is not None:
            return DefaultMessageResolver.from_yaml(self.messages_path)
        return DefaultMessageResolver()

    def create_token_provider(self) -> StaticTokenProvider | None:
        """Create a fixed token provider, or None if no token value is configured."""
        if self.token_value is None:
            return None
        return StaticTokenProvider(self.token_field, self.token_value)
