"""Token providers for the CSRF check in Validator.passes().

Issuing and storing tokens belongs to the application's session layer.
A provider only tells the validator where the submitted token lives and
what value it must have.
"""

from dataclasses import dataclass

from formcheck.validator import Validator


@dataclass(frozen=True)
class StaticTokenProvider:
    """Provider with a fixed input key and expected value.

    Useful when the expected token is known up front, e.g. read from the
    session before the validator is created:

        provider = StaticTokenProvider("_token", session["csrf_token"])
        validator = Validator(form, token_provider=provider)
    """

    key: str
    value: str

    def get_token_key(self, validator: Validator) -> str:
        return self.key

    def get_token_value(self, validator: Validator) -> str:
        return self.value
