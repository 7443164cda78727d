"""
Tests for Net Worth Dashboard

Test strategy:
1. Unit tests for individual components (models, validators, derivation)
2. Integration tests for stores and flows (with in-memory storage)
3. No real API calls in tests (use mocks)
"""

import pytest
from datetime import date
from uuid import uuid4

from pydantic import ValidationError

from networth.models.account import (
    AccountType,
    CheckingOrSavingsFee,
    CreditCardAccount,
    Holding,
    InvestmentAccount,
    LoanAccount,
    OtherAccount,
    PayrollAccount,
    ValidationIssue,
    ValidationResult,
)
from networth.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from networth.models.chat import ChatMessage, ChatSender
from networth.models.user import UserDetails


class TestAccountModels:
    """Tests for account Pydantic models."""

    def test_holding_creation(self):
        """Test Holding model creation with camelCase input."""
        holding = Holding(ticker="vti", quantity=3, averageCostBasis=200)
        assert holding.ticker == "VTI"
        assert holding.average_cost_basis == 200.0
        assert holding.id is None

    def test_holding_rejects_negative_quantity(self):
        """Test that negative quantities are rejected."""
        with pytest.raises(ValidationError):
            Holding(ticker="VTI", quantity=-1)

    def test_holding_rejects_empty_ticker(self):
        """Whitespace-only tickers are stripped, then rejected."""
        with pytest.raises(ValidationError):
            Holding(ticker="   ", quantity=1)

    def test_investment_account_defaults(self):
        """Optional fields are filled in with their defaults."""
        account = InvestmentAccount(type="Investment", name="Brokerage", uninvested_amount=10)
        assert account.holdings == []
        assert account.currency == "USD"
        assert account.balance == 0.0
        assert account.description == ""

    def test_currency_is_uppercased(self):
        account = OtherAccount(
            type="Other", name="Misc", currency="eur", total_income=1, total_debt=0,
        )
        assert account.currency == "EUR"

    def test_currency_must_be_three_letters(self):
        with pytest.raises(ValidationError):
            OtherAccount(
                type="Other", name="Misc", currency="EURO", total_income=1, total_debt=0,
            )

    def test_blank_optional_number_defaults_to_zero(self):
        """Forms submit "" for untouched number inputs."""
        card = CreditCardAccount(
            type="Credit Card", name="Card", outstandingDebt=10, annualFee="", totalLimit=None,
        )
        assert card.annual_fee == 0.0
        assert card.total_limit == 0.0

    def test_numeric_strings_are_coerced(self):
        loan = LoanAccount(type="Loan", name="Mortgage", principalLeft="250000.50")
        assert loan.principal_left == 250000.50

    def test_card_last4_must_be_digits(self):
        with pytest.raises(ValidationError):
            CreditCardAccount(
                type="Credit Card", name="Card", outstandingDebt=0, cardNumberLast4="12a4",
            )

    def test_foreign_fields_are_rejected(self):
        """A field of another variant is not legal."""
        with pytest.raises(ValidationError) as exc:
            OtherAccount(
                type="Other", name="Misc", totalIncome=1, totalDebt=0, principalLeft=5,
            )
        assert exc.value.errors()[0]["type"] == "extra_forbidden"

    def test_wrong_type_literal_is_rejected(self):
        with pytest.raises(ValidationError):
            OtherAccount(type="Loan", name="Misc", totalIncome=1, totalDebt=0)

    def test_dump_uses_camel_case(self):
        loan = LoanAccount(
            type="Loan", name="Car", principal_left=100, loan_start_date=date(2024, 1, 1),
        )
        data = loan.model_dump(mode="json", by_alias=True)
        assert data["principalLeft"] == 100
        assert data["loanStartDate"] == "2024-01-01"
        assert data["paymentHistory"] == []
        assert "principal_left" not in data

    def test_fee_record_defaults(self):
        fee = CheckingOrSavingsFee()
        assert fee.monthly_fee == 0.0
        assert fee.overdraft_fee == 0.0

    def test_payroll_total_withheld(self):
        payroll = PayrollAccount(
            type="Payroll",
            name="Pay",
            net_income=3000,
            federal_taxes_withheld=500,
            state_taxes_withheld=200,
            social_security_withheld=100,
            medicare_withheld=50,
            other_deductions=25,
        )
        assert payroll.total_withheld == 875


class TestValidationModels:
    """Tests for validation result models."""

    def test_validation_issue_creation(self):
        """Test ValidationIssue creation."""
        issue = ValidationIssue(
            field="outstandingDebt",
            issue_type="missing",
            message="This field is required",
            severity="error",
        )
        assert issue.severity == "error"

    def test_validation_issue_severity_pattern(self):
        """Test severity must be error, warning, or info."""
        with pytest.raises(ValidationError):
            ValidationIssue(
                field="test",
                issue_type="test",
                message="test",
                severity="critical",  # Invalid
            )

    def test_validation_result_errors(self):
        """Errors are (field, message) pairs; info and warnings are excluded."""
        result = ValidationResult(
            schema_valid=False,
            semantic_valid=False,
            is_valid=False,
            issues=[
                ValidationIssue(field="name", issue_type="missing",
                                message="This field is required", severity="error"),
                ValidationIssue(field="balance", issue_type="ignored",
                                message="ignored", severity="info"),
                ValidationIssue(field="holdings.0.ticker", issue_type="string_too_short",
                                message="too short", severity="error"),
            ],
        )
        assert result.has_errors
        assert result.error_count == 2
        assert result.errors == [
            ("name", "This field is required"),
            ("holdings.0.ticker", "too short"),
        ]
        assert result.error_message == "name: This field is required, holdings.0.ticker: too short"


class TestUserAndChatModels:

    def test_user_details(self):
        details = UserDetails(
            name="  Sam  ",
            age=34,
            state="CA",
            country="USA",
            citizen_of="USA",
            tax_filing_status="Single",
        )
        assert details.name == "Sam"
        assert details.is_tax_resident is False

    def test_user_details_rejects_negative_age(self):
        with pytest.raises(ValidationError):
            UserDetails(
                name="Sam", age=-1, state="CA", country="USA",
                citizen_of="USA", tax_filing_status="Single",
            )

    def test_chat_message_defaults(self):
        message = ChatMessage(sender=ChatSender.USER, text="hi")
        assert message.id
        assert message.timestamp > 0
        assert message.is_loading is None

    def test_chat_message_wire_shape(self):
        message = ChatMessage(sender="bot", text="Thinking...", is_loading=True)
        data = message.model_dump(mode="json", by_alias=True)
        assert data["sender"] == "bot"
        assert data["isLoading"] is True
        assert ChatMessage.model_validate(data) == message


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent creation."""
        event = AuditEvent(
            event_type=AuditEventType.ACCOUNT_ADDED,
            description="Account added",
        )
        assert event.event_type == AuditEventType.ACCOUNT_ADDED
        assert event.severity == AuditSeverity.INFO
        assert event.event_id is not None

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        correlation_id = uuid4()
        event = AuditEventBuilder.account_added(
            account_id="abc",
            account_type=AccountType.LOAN.value,
            name="Car Loan",
            correlation_id=correlation_id,
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "account_added"
        assert log_dict["entity_id"] == "abc"
        assert log_dict["correlation_id"] == str(correlation_id)
        assert log_dict["details"] == {"account_type": "Loan"}

    def test_audit_event_builder_storage_failure(self):
        """Test AuditEventBuilder for storage failures."""
        event = AuditEventBuilder.storage_write_failed("financial_accounts")
        assert event.event_type == AuditEventType.STORAGE_WRITE_FAILED
        assert event.severity == AuditSeverity.ERROR
        assert event.entity_id == "financial_accounts"

    def test_audit_event_builder_rehydrated(self):
        event = AuditEventBuilder.state_rehydrated("financial_accounts", 3, 2)
        assert event.details == {"previous_count": 3, "new_count": 2}
        assert event.is_user_action is False


class TestAccountTypeEnum:
    """Tests for the account type enum."""

    def test_all_types_exist(self):
        """Test that expected account types exist."""
        expected = [
            "Investment", "HSA", "Traditional IRA", "Roth IRA",
            "Retirement 401k", "Roth 401k", "Credit Card", "Checking",
            "Savings", "Loan", "Payroll", "Other",
        ]
        for tag in expected:
            assert AccountType(tag) is not None
        assert len(AccountType) == len(expected)

    def test_combined_checking_savings_tag_is_gone(self):
        with pytest.raises(ValueError):
            AccountType("Checking/Savings")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
