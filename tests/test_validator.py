"""Tests for Validator input lookup, retrieval and the token check."""

import pytest

from formcheck.resolver import DefaultMessageResolver
from formcheck.tokens import StaticTokenProvider
from formcheck.types import ValidationFailed
from formcheck.validator import MISSING, Validator


class FixedTokenProvider:
    """Token provider expecting "foo" under the "token" key."""

    def __init__(self):
        self.calls = []

    def get_token_key(self, validator):
        self.calls.append(validator)
        return "token"

    def get_token_value(self, validator):
        return "foo"


@pytest.fixture
def nested_input():
    return {
        "shallow": "Shallow value",
        "nested": {
            "value": "Nested value",
            "deeper": {"value": 3},
        },
        "dotted.key": "Literal dotted key",
        "list": ["a", "b"],
    }


# =============================================================================
# Token Tests
# =============================================================================


class TestPasses:
    """Test passes() and the CSRF token comparison."""

    def test_validates_token(self):
        validator = Validator({"token": "bar"}, token_provider=FixedTokenProvider())

        assert validator.passes(False)
        assert not validator.passes()

    def test_token_failure_is_recorded_under_token_key(self):
        validator = Validator({"token": "bar"}, token_provider=FixedTokenProvider())
        validator.passes()

        message = validator.errors().get_first("token")
        assert message is not None
        assert message.key == "token"
        assert message.args == {}
        assert str(message) == "Invalid token. Please try again."

    def test_matching_token_passes(self):
        provider = FixedTokenProvider()
        validator = Validator({"token": "foo"}, token_provider=provider)

        assert validator.passes()
        assert provider.calls == [validator]

    def test_missing_or_non_string_token_fails(self):
        provider = FixedTokenProvider()

        assert not Validator({}, token_provider=provider).passes()
        assert not Validator({"token": ["foo"]}, token_provider=provider).passes()

    def test_without_provider_token_check_is_skipped(self):
        assert Validator({}).passes()

    def test_static_token_provider(self):
        provider = StaticTokenProvider("_token", "secret")

        assert Validator({"_token": "secret"}, token_provider=provider).passes()
        assert not Validator({"_token": "guess"}, token_provider=provider).passes()

    def test_passes_does_not_run_rules(self):
        validator = Validator({"name": ""})
        assert validator.passes()

        validator.string("name")
        assert not validator.passes()

    def test_validate_raises_with_errors(self):
        validator = Validator({"name": ""})
        validator.string("name")

        with pytest.raises(ValidationFailed) as exc_info:
            validator.validate()

        assert exc_info.value.errors is validator.errors()
        assert exc_info.value.errors.count() == 1

    def test_validate_returns_when_valid(self):
        validator = Validator({"name": "Mario"})
        validator.string("name")

        validator.validate()


# =============================================================================
# Input Lookup Tests
# =============================================================================


class TestGetValue:
    """Test exact and dotted-path lookup."""

    def test_get_value(self, nested_input):
        validator = Validator(nested_input)

        assert validator.get_value("shallow") == "Shallow value"
        assert validator.get_value("nested.value") == "Nested value"
        assert validator.get_value("nested.deeper.value") == 3

    def test_missing_values_return_fallback(self, nested_input):
        validator = Validator(nested_input)

        assert validator.get_value("doesnt_exist") is None
        assert validator.get_value("nested.doesnt_exist") is None
        assert validator.get_value("doesnt_exist", "Default value") == "Default value"
        assert validator.get_value("nested.doesnt_exist", "Default value") == "Default value"

    def test_non_mapping_mid_path_returns_fallback(self, nested_input):
        validator = Validator(nested_input)

        assert validator.get_value("shallow.value", "fallback") == "fallback"
        assert validator.get_value("list.0", "fallback") == "fallback"
        assert validator.get_value("nested.value.more", "fallback") == "fallback"

    def test_literal_dotted_key_wins(self, nested_input):
        validator = Validator({**nested_input, "nested.value": "Literal"})

        assert validator.get_value("nested.value") == "Literal"
        assert validator.get_value("dotted.key") == "Literal dotted key"

    def test_present_none_is_returned(self):
        validator = Validator({"empty": None})
        assert validator.get_value("empty", "fallback") is None

    def test_get_input(self, nested_input):
        assert Validator(nested_input).get_input() is nested_input


# =============================================================================
# Retrieval Tests
# =============================================================================


class TestRetrieve:
    """Test retrieve() and the typed shortcuts."""

    def test_retrieves_required_variable(self):
        validator = Validator({"foo": "bar"})

        assert validator.retrieve("foo").value() == "bar"
        assert validator.passes()

        assert validator.retrieve("doesnt_exist").value() is None
        assert not validator.passes()

    def test_retrieves_optional_variable(self):
        validator = Validator({"foo": "bar"})

        assert validator.retrieve("doesnt_exist", "default").value() == "default"
        assert validator.passes()

    def test_explicit_none_default_makes_field_optional(self):
        validator = Validator({})

        assert validator.string("nickname", None).value() is None
        assert validator.passes()

    def test_missing_sentinel_makes_field_required(self):
        validator = Validator({})
        validator.retrieve("foo", MISSING)

        assert [m.key for m in validator.errors().all()] == ["required"]

    def test_retrieves_nested_field(self):
        validator = Validator({"address": {"city": "Toad Town"}})

        city = validator.string("address.city")

        assert city.value() == "Toad Town"
        assert city.name == "address.city"

    def test_typed_shortcuts(self):
        validator = Validator(
            {
                "name": "Mario",
                "lives": "3",
                "speed": "1.5",
                "public": "on",
                "tags": ["red", "hat"],
            }
        )

        assert validator.string("name").value() == "Mario"
        assert validator.integer("lives").value() == 3
        assert validator.float("speed").value() == 1.5
        assert validator.boolean("public").value() is True
        assert validator.array("tags").value() == ["red", "hat"]
        assert validator.passes()

    def test_typed_shortcut_defaults(self):
        validator = Validator({})

        assert validator.integer("page", 1).value() == 1
        assert validator.boolean("public", False).value() is False
        assert validator.array("tags", []).value() == []
        assert validator.passes()

    def test_args_reach_messages(self):
        validator = Validator({})
        validator.string("user_name", args={"field": "user name"})

        assert validator.errors().to_dict() == {"user_name": ["The user name is required."]}

    def test_errors_accumulate_across_fields_in_call_order(self):
        validator = Validator({"title": "x", "age": "abc", "color": "green"})

        validator.string("title").min(3)
        validator.integer("age").between(1, 99)
        validator.string("color").in_(["red", "blue"])
        validator.string("title_again", "x").min(2)

        assert not validator.passes()
        assert validator.errors().to_dict() == {
            "title": ["The title must have at least 3 characters."],
            "age": ["The age must be a number."],
            "color": ["The color must be one of red, blue."],
            "title_again": ["The title_again must have at least 2 characters."],
        }

    def test_custom_resolver_renders_messages(self):
        resolver = DefaultMessageResolver({"required": "Please enter your {field}."})
        validator = Validator({}, resolver=resolver)
        validator.string("email")

        assert validator.errors().to_dict() == {"email": ["Please enter your email."]}

    def test_validators_do_not_share_resolvers(self):
        custom = Validator({}, resolver=DefaultMessageResolver({"required": "custom"}))
        plain = Validator({})

        custom.string("a")
        plain.string("a")

        assert custom.errors().to_dict() == {"a": ["custom"]}
        assert plain.errors().to_dict() == {"a": ["The a is required."]}
