"""Tests for the bundled descriptor-based validation engine."""

import pytest

from formforge.validation.schema import (
    EMAIL_PATTERN,
    PHONE_PATTERN,
    URL_PATTERN,
    UUID_PATTERN,
    Schema,
    is_empty,
)
from formforge.validation.types import SchemaError


async def run(rules, value, name="field", first=True):
    """Validate one value against a rule list and return the errors."""
    return await Schema({name: rules}).validate({name: value}, first=first)


# =============================================================================
# Pattern Tests
# =============================================================================


class TestPatterns:
    """Test the regex patterns used for type validation."""

    def test_email_valid(self):
        for email in ["test@example.com", "user.name@domain.co.uk", "user+tag@example.org"]:
            assert EMAIL_PATTERN.match(email), f"{email} should be valid"

    def test_email_invalid(self):
        for email in ["not-an-email", "@example.com", "user@", "user name@example.com"]:
            assert not EMAIL_PATTERN.match(email), f"{email} should be invalid"

    def test_phone_valid(self):
        for phone in ["123-456-7890", "(123) 456-7890", "+1 123 456 7890"]:
            assert PHONE_PATTERN.match(phone), f"{phone} should be valid"

    def test_url_valid(self):
        assert URL_PATTERN.match("https://example.com/path")
        assert not URL_PATTERN.match("example.com")

    def test_uuid(self):
        assert UUID_PATTERN.match("123e4567-e89b-12d3-a456-426614174000")
        assert not UUID_PATTERN.match("123e4567")


class TestIsEmpty:
    @pytest.mark.parametrize("value", [None, "", [], {}, ()])
    def test_empty(self, value):
        assert is_empty(value)

    @pytest.mark.parametrize("value", [0, False, " ", "x", [0]])
    def test_not_empty(self, value):
        assert not is_empty(value)


# =============================================================================
# Required / Whitespace
# =============================================================================


class TestRequired:
    @pytest.mark.asyncio
    async def test_missing_required_value(self):
        errors = await run([{"required": True}], "", name="email")
        assert len(errors) == 1
        assert errors[0].message == "email is required"
        assert errors[0].code == "REQUIRED"
        assert errors[0].field == "email"

    @pytest.mark.asyncio
    async def test_custom_message(self):
        errors = await run([{"required": True, "message": "Please fill in"}], None)
        assert errors[0].message == "Please fill in"

    @pytest.mark.asyncio
    async def test_required_present(self):
        assert await run([{"required": True}], "x") == []

    @pytest.mark.asyncio
    async def test_whitespace_counts_as_empty(self):
        errors = await run([{"required": True, "whitespace": True}], "   ")
        assert errors[0].code == "REQUIRED"

    @pytest.mark.asyncio
    async def test_whitespace_allowed_without_flag(self):
        assert await run([{"required": True}], "   ") == []

    @pytest.mark.asyncio
    async def test_optional_empty_skips_checks(self):
        assert await run([{"type": "email"}, {"min": 3}], "") == []


# =============================================================================
# Types
# =============================================================================


class TestTypes:
    @pytest.mark.asyncio
    async def test_invalid_email(self):
        errors = await run([{"type": "email"}], "not-an-email", name="email")
        assert errors[0].message == "email is not a valid email"
        assert errors[0].code == "INVALID_EMAIL"

    @pytest.mark.asyncio
    async def test_valid_email(self):
        assert await run([{"type": "email"}], "a@b.com") == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "rule_type,good,bad",
        [
            ("string", "abc", 12),
            ("number", 1.5, "1.5"),
            ("integer", 3, 3.5),
            ("float", 3.5, 3),
            ("boolean", False, "false"),
            ("array", [1], "1"),
            ("object", {"a": 1}, [1]),
            ("url", "http://x.io", "x.io"),
            ("date", "2024-01-31", "31/01/2024"),
            ("regexp", "^a+$", "(["),
        ],
    )
    async def test_type_checks(self, rule_type, good, bad):
        assert await run([{"type": rule_type}], good) == []
        errors = await run([{"type": rule_type}], bad)
        assert errors[0].code == f"INVALID_{rule_type.upper()}"

    @pytest.mark.asyncio
    async def test_bool_is_not_a_number(self):
        errors = await run([{"type": "number"}], True)
        assert errors[0].code == "INVALID_NUMBER"

    @pytest.mark.asyncio
    async def test_enum_type(self):
        rule = {"type": "enum", "enum": ["a", "b"]}
        assert await run([rule], "a") == []
        assert (await run([rule], "c"))[0].code == "INVALID_ENUM"


# =============================================================================
# Ranges, Enum, Pattern
# =============================================================================


class TestRanges:
    @pytest.mark.asyncio
    async def test_string_min_length(self):
        errors = await run([{"min": 3}], "ab", name="code")
        assert errors[0].message == "code must be at least 3 characters"
        assert errors[0].code == "MIN_LENGTH"

    @pytest.mark.asyncio
    async def test_string_max_length(self):
        errors = await run([{"max": 2}], "abc")
        assert errors[0].code == "MAX_LENGTH"

    @pytest.mark.asyncio
    async def test_numeric_bounds(self):
        assert (await run([{"min": 10}], 5))[0].code == "MIN_VALUE"
        assert (await run([{"max": 10}], 50))[0].code == "MAX_VALUE"
        assert await run([{"min": 1, "max": 10}], 5) == []

    @pytest.mark.asyncio
    async def test_exact_len(self):
        assert await run([{"len": 4}], "abcd") == []
        assert (await run([{"len": 4}], [1, 2]))[0].code == "LENGTH"

    @pytest.mark.asyncio
    async def test_enum(self):
        errors = await run([{"enum": ["red", "green"]}], "blue")
        assert errors[0].code == "INVALID_OPTION"

    @pytest.mark.asyncio
    async def test_pattern_mismatch(self):
        errors = await run([{"pattern": r"^\d+$"}], "12a")
        assert errors[0].code == "PATTERN_MISMATCH"

    @pytest.mark.asyncio
    async def test_pattern_match(self):
        assert await run([{"pattern": r"^\d+$"}], "123") == []


# =============================================================================
# Custom Validators
# =============================================================================


class TestCustomValidator:
    @pytest.mark.asyncio
    async def test_false_uses_rule_message(self):
        rule = {"validator": lambda rule, value: value == "ok", "message": "Not ok"}
        assert await run([rule], "ok") == []
        assert (await run([rule], "nope"))[0].message == "Not ok"

    @pytest.mark.asyncio
    async def test_string_result_is_message(self):
        rule = {"validator": lambda rule, value: "Taken"}
        errors = await run([rule], "x")
        assert errors[0].message == "Taken"
        assert errors[0].code == "CUSTOM"

    @pytest.mark.asyncio
    async def test_async_validator(self):
        async def check(rule, value):
            return value != "admin"

        assert await run([{"validator": check}], "bob") == []
        assert len(await run([{"validator": check}], "admin")) == 1

    @pytest.mark.asyncio
    async def test_value_error_message(self):
        def check(rule, value):
            raise ValueError("Too short")

        errors = await run([{"validator": check}], "x")
        assert errors[0].message == "Too short"

    @pytest.mark.asyncio
    async def test_other_exceptions_propagate(self):
        def check(rule, value):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await run([{"validator": check}], "x")


# =============================================================================
# First-error-wins and Schema Errors
# =============================================================================


class TestSchema:
    @pytest.mark.asyncio
    async def test_first_stops_at_first_failing_rule(self):
        rules = [{"type": "string", "min": 5}, {"pattern": "^z"}]
        errors = await run(rules, "abc", first=True)
        assert len(errors) == 1
        assert errors[0].code == "MIN_LENGTH"

    @pytest.mark.asyncio
    async def test_all_errors_without_first(self):
        rules = [{"min": 5}, {"pattern": "^z"}]
        errors = await run(rules, "abc", first=False)
        assert [e.code for e in errors] == ["MIN_LENGTH", "PATTERN_MISMATCH"]

    @pytest.mark.asyncio
    async def test_single_rule_mapping_accepted(self):
        errors = await Schema({"age": {"type": "integer"}}).validate({"age": "x"})
        assert errors[0].field == "age"

    def test_unknown_type(self):
        with pytest.raises(SchemaError, match="Unknown type 'colour'"):
            Schema({"f": [{"type": "colour"}]})

    def test_invalid_pattern(self):
        with pytest.raises(SchemaError, match="Invalid pattern"):
            Schema({"f": [{"pattern": "["}]})

    def test_enum_type_without_values(self):
        with pytest.raises(SchemaError):
            Schema({"f": [{"type": "enum"}]})

    def test_validator_must_be_callable(self):
        with pytest.raises(SchemaError):
            Schema({"f": [{"validator": "nope"}]})
