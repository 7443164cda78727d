"""
Tests for the two-stage account validator.
"""

import pytest

from networth.config import AppSettings
from networth.validation import AccountValidator, parse_json_payload


class TestSchemaValidation:
    """Stage 1: shape, kinds and required fields."""

    @pytest.mark.parametrize("account_type", [
        "Investment", "HSA", "Traditional IRA", "Roth IRA", "Retirement 401k",
        "Roth 401k", "Credit Card", "Checking", "Savings", "Loan", "Payroll", "Other",
    ])
    def test_valid_payload_for_every_type(self, validator, valid_payloads, account_type):
        result = validator.validate(valid_payloads[account_type], account_type)
        assert result.is_valid, result.error_message
        assert result.schema_valid and result.semantic_valid
        assert result.account_type == account_type
        assert result.record.type == account_type

    def test_payload_must_be_a_mapping(self, validator):
        result = validator.validate(["not", "an", "object"])
        assert not result.is_valid
        assert result.errors == [("payload", "Account data must be a JSON object")]

    def test_missing_type(self, validator):
        result = validator.validate({"name": "x"})
        assert not result.is_valid
        assert result.issues[0].field == "type"
        assert result.issues[0].issue_type == "missing"

    def test_unknown_type_lists_allowed_values(self, validator):
        result = validator.validate({"type": "Checking/Savings", "name": "x", "currentAmount": 5})
        assert not result.is_valid
        issue = result.issues[0]
        assert issue.issue_type == "invalid_value"
        assert "Checking" in issue.suggested_fix
        assert "Savings" in issue.suggested_fix

    def test_claimed_type_must_match_payload(self, validator, valid_payloads):
        result = validator.validate(valid_payloads["Loan"], "Credit Card")
        assert not result.is_valid
        assert result.issues[0].issue_type == "inconsistent"

    def test_claimed_type_fills_in_missing_tag(self, validator, valid_payloads):
        payload = valid_payloads["Savings"]
        del payload["type"]
        result = validator.validate(payload, "Savings")
        assert result.is_valid
        assert result.record.type == "Savings"

    def test_missing_required_field(self, validator):
        result = validator.validate({"type": "Other", "name": "Misc", "totalIncome": 10})
        assert not result.is_valid
        assert ("totalDebt", "This field is required") in result.errors

    def test_blank_name_is_rejected(self, validator):
        result = validator.validate({"type": "Other", "name": "   ", "totalIncome": 1, "totalDebt": 0})
        assert not result.is_valid
        assert result.errors[0][0] == "name"

    def test_numeric_strings_are_coerced(self, validator):
        result = validator.validate({"type": "Loan", "name": "Car", "principalLeft": "12500.75"})
        assert result.is_valid
        assert result.record.principal_left == 12500.75

    def test_non_numeric_string_is_rejected(self, validator):
        result = validator.validate({"type": "Loan", "name": "Car", "principalLeft": "lots"})
        assert not result.is_valid
        assert result.errors[0][0] == "principalLeft"

    @pytest.mark.parametrize("value", ["nan", "inf", "-Infinity", float("inf"), float("nan")])
    def test_non_finite_required_amount_is_rejected(self, validator, value):
        result = validator.validate({"type": "Other", "name": "X", "totalIncome": value, "totalDebt": 0})
        assert not result.is_valid
        assert result.errors[0][0] == "totalIncome"

    @pytest.mark.parametrize("value", ["nan", "inf", float("inf")])
    def test_non_finite_optional_amount_is_rejected(self, validator, valid_payloads, value):
        payload = valid_payloads["Savings"]
        payload["interestRate"] = value
        result = validator.validate(payload)
        assert not result.is_valid
        assert result.errors[0][0] == "interestRate"

    def test_non_finite_nested_amount_is_rejected(self, validator, valid_payloads):
        payload = valid_payloads["Investment"]
        payload["holdings"][0]["quantity"] = "inf"
        result = validator.validate(payload)
        assert not result.is_valid
        assert result.errors[0][0] == "holdings.0.quantity"

    @pytest.mark.parametrize("payload, field", [
        ({"type": "Investment", "name": "B", "uninvestedAmount": True}, "uninvestedAmount"),
        ({"type": "Loan", "name": "Car", "principalLeft": False}, "principalLeft"),
        ({"type": "Savings", "name": "S", "currentAmount": 10, "interestRate": True}, "interestRate"),
    ])
    def test_boolean_is_not_a_number(self, validator, payload, field):
        result = validator.validate(payload)
        assert not result.is_valid
        assert result.errors[0][0] == field

    def test_negative_rate_is_rejected(self, validator, valid_payloads):
        payload = valid_payloads["Savings"]
        payload["interestRate"] = -1
        result = validator.validate(payload)
        assert not result.is_valid
        assert result.errors[0][0] == "interestRate"

    def test_nested_item_errors_have_paths(self, validator, valid_payloads):
        payload = valid_payloads["Investment"]
        payload["holdings"][1]["ticker"] = ""
        payload["holdings"][1]["quantity"] = -2
        result = validator.validate(payload)
        fields = [field for field, _ in result.errors]
        assert "holdings.1.ticker" in fields
        assert "holdings.1.quantity" in fields

    def test_nested_record_is_validated(self, validator, valid_payloads):
        payload = valid_payloads["Checking"]
        payload["fee"]["atmFee"] = -3
        result = validator.validate(payload)
        assert ("fee.atmFee" in [field for field, _ in result.errors])

    def test_foreign_field_is_rejected(self, validator, valid_payloads):
        payload = valid_payloads["Credit Card"]
        payload["principalLeft"] = 10
        result = validator.validate(payload)
        assert not result.is_valid
        assert result.errors == [
            ("principalLeft", "This field does not belong to this account type")
        ]

    def test_currency_defaults_from_settings(self, valid_payloads):
        validator = AccountValidator(AppSettings(default_currency="EUR"))
        payload = valid_payloads["Other"]
        result = validator.validate(payload)
        assert result.record.currency == "EUR"

    def test_invalid_currency(self, validator, valid_payloads):
        payload = valid_payloads["Other"]
        payload["currency"] = "US"
        result = validator.validate(payload)
        assert not result.is_valid
        assert result.errors[0][0] == "currency"

    def test_supplied_balance_is_ignored(self, validator, valid_payloads):
        payload = valid_payloads["Loan"]
        payload["balance"] = 999999
        result = validator.validate(payload)
        assert result.is_valid
        assert result.record.balance == 0.0
        info = [issue for issue in result.issues if issue.severity == "info"]
        assert [issue.field for issue in info] == ["balance"]

    def test_defaults_are_filled_in(self, validator):
        result = validator.validate({"type": "Credit Card", "name": "Card", "outstandingDebt": 10})
        record = result.record
        assert record.annual_fee == 0.0
        assert record.transactions == []
        assert record.rewards_summary == ""

    def test_error_message_concatenates(self, validator):
        result = validator.validate({"type": "Other", "name": ""})
        assert not result.is_valid
        assert result.error_count == 3
        for field, message in result.errors:
            assert f"{field}: {message}" in result.error_message


class TestSemanticValidation:
    """Stage 2: cross-field checks on a typed record."""

    def _warning_fields(self, result):
        return [issue.field for issue in result.issues if issue.severity == "warning"]

    def test_duplicate_nested_ids_are_errors(self, validator, valid_payloads):
        payload = valid_payloads["Investment"]
        payload["holdings"][0]["id"] = "h1"
        payload["holdings"][1]["id"] = "h1"
        result = validator.validate(payload)
        assert result.schema_valid
        assert not result.semantic_valid
        assert not result.is_valid
        assert result.record is None
        assert result.errors[0][0] == "holdings"

    def test_duplicate_tickers_warn(self, validator, valid_payloads):
        payload = valid_payloads["Investment"]
        payload["holdings"][1]["ticker"] = "VTI"
        result = validator.validate(payload)
        assert result.is_valid
        assert self._warning_fields(result) == ["holdings"]

    def test_current_limit_above_total_warns(self, validator, valid_payloads):
        payload = valid_payloads["Credit Card"]
        payload["currentLimit"] = 20000
        result = validator.validate(payload)
        assert result.is_valid
        assert "currentLimit" in self._warning_fields(result)

    def test_debt_above_limit_warns(self, validator, valid_payloads):
        payload = valid_payloads["Credit Card"]
        payload["outstandingDebt"] = 15000
        result = validator.validate(payload)
        assert "outstandingDebt" in self._warning_fields(result)

    def test_below_minimum_balance_warns(self, validator, valid_payloads):
        payload = valid_payloads["Savings"]
        payload["currentAmount"] = 100
        result = validator.validate(payload)
        assert result.is_valid
        assert self._warning_fields(result) == ["currentAmount"]

    def test_loan_end_before_start_warns(self, validator, valid_payloads):
        payload = valid_payloads["Loan"]
        payload["loanEndDate"] = "2020-01-01"
        result = validator.validate(payload)
        assert result.is_valid
        assert "loanEndDate" in self._warning_fields(result)

    def test_payroll_net_above_gross_warns(self, validator, valid_payloads):
        payload = valid_payloads["Payroll"]
        payload["netIncome"] = 5000
        result = validator.validate(payload)
        assert "netIncome" in self._warning_fields(result)

    def test_payroll_withholdings_above_gross_warn(self, validator, valid_payloads):
        payload = valid_payloads["Payroll"]
        payload["federalTaxesWithheld"] = 4000
        result = validator.validate(payload)
        assert "grossIncome" in self._warning_fields(result)

    def test_unusually_large_amount_warns(self, valid_payloads):
        validator = AccountValidator(AppSettings(max_reasonable_amount=10_000))
        result = validator.validate(valid_payloads["Savings"])
        assert result.is_valid
        assert "currentAmount" in self._warning_fields(result)
        assert result.warnings


class TestJsonPayloads:
    """The pasted-JSON path."""

    def test_malformed_json_is_one_issue(self):
        payload, issues = parse_json_payload("{not json")
        assert payload is None
        assert len(issues) == 1
        assert issues[0].field == "payload"
        assert issues[0].issue_type == "invalid_json"

    def test_json_array_is_rejected(self):
        payload, issues = parse_json_payload("[1, 2]")
        assert payload is None
        assert issues[0].issue_type == "invalid_type"

    def test_validate_json(self, validator):
        result = validator.validate_json(
            '{"type": "Loan", "name": "Car", "principalLeft": 12500.75}'
        )
        assert result.is_valid
        assert result.record.principal_left == 12500.75

    def test_validate_json_malformed(self, validator):
        result = validator.validate_json("")
        assert not result.is_valid
        assert result.errors == [("payload", "Invalid JSON format")]


class TestUserFriendlySummary:

    def test_clean_result(self, validator, valid_payloads):
        result = validator.validate(valid_payloads["Other"])
        assert validator.get_user_friendly_summary(result) == "✅ Account details look good."

    def test_errors_are_listed(self, validator):
        result = validator.validate({"type": "Other", "name": "Misc", "totalIncome": 1})
        summary = validator.get_user_friendly_summary(result)
        assert "❌" in summary
        assert "totalDebt: This field is required" in summary

    def test_warnings_are_listed(self, validator, valid_payloads):
        payload = valid_payloads["Savings"]
        payload["currentAmount"] = 100
        summary = validator.get_user_friendly_summary(validator.validate(payload))
        assert "⚠️" in summary
        assert "You can still save" in summary


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
