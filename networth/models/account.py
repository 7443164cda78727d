"""
Account Data Models for Net Worth Dashboard

Every account is one variant of a tagged union selected by its `type`.
The models define the field contract of each variant; the registry in
networth.accounts.registry turns them into metadata for the rest of the
system.

DESIGN DECISION: The wire shape is camelCase (it is what the browser
stored and what the chat backend expects), while Python code uses
snake_case attributes. Aliases bridge the two and either spelling is
accepted on input.

DESIGN DECISION: `balance` exists on every account but is NEVER taken
from input. It is written only by networth.accounts.derivation.
"""

from datetime import date
from enum import Enum
from typing import Annotated, Any, Literal, Optional

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    SerializeAsAny,
    StringConstraints,
    field_validator,
)
from pydantic.alias_generators import to_camel


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class AccountType(str, Enum):
    """
    The closed set of account variants.

    Checking and Savings are separate types; "Other" is the only
    catch-all, so no other variant accepts free-form fields.
    """
    INVESTMENT = "Investment"
    HSA = "HSA"
    TRADITIONAL_IRA = "Traditional IRA"
    ROTH_IRA = "Roth IRA"
    RETIREMENT_401K = "Retirement 401k"
    ROTH_401K = "Roth 401k"
    CREDIT_CARD = "Credit Card"
    CHECKING = "Checking"
    SAVINGS = "Savings"
    LOAN = "Loan"
    PAYROLL = "Payroll"
    OTHER = "Other"


# =============================================================================
# FIELD TYPES - Shared coercion rules
# =============================================================================

def _not_a_boolean(value: Any) -> Any:
    """JSON true/false is not a number, even though float(True) is 1.0."""
    if isinstance(value, bool):
        raise ValueError("Input should be a number, not a boolean")
    return value


def _blank_as_zero(value: Any) -> Any:
    """Forms submit "" for untouched number inputs."""
    if value is None:
        return 0.0
    if isinstance(value, str) and not value.strip():
        return 0.0
    return _not_a_boolean(value)


def _blank_as_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _none_as_empty(value: Any) -> Any:
    return "" if value is None else value


# Required amount that may be signed
Amount = Annotated[float, BeforeValidator(_not_a_boolean)]

# Optional amount that may be signed
OptionalAmount = Annotated[float, BeforeValidator(_blank_as_zero)]

# Optional amount, rate or fee that must not be negative
NonNegativeAmount = Annotated[float, BeforeValidator(_blank_as_zero), Field(ge=0)]

OptionalText = Annotated[str, BeforeValidator(_none_as_empty)]

OptionalDate = Annotated[Optional[date], BeforeValidator(_blank_as_none)]

ItemId = Annotated[Optional[str], BeforeValidator(_blank_as_none)]

Last4Digits = Annotated[
    Optional[Annotated[str, StringConstraints(pattern=r"^\d{4}$")]],
    BeforeValidator(_blank_as_none),
]


class AccountModel(BaseModel):
    """Common configuration for accounts and their sub-records."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="forbid",
        allow_inf_nan=False,
    )


# =============================================================================
# SUB-RECORDS
# =============================================================================

class Holding(AccountModel):
    """
    One position inside an investment-like account.

    Holdings are informational: they do not feed the balance.
    """
    id: ItemId = None
    ticker: str = Field(
        ...,
        min_length=1,
        max_length=20,
        description="Ticker symbol (e.g., VTI)"
    )
    quantity: Amount = Field(
        ...,
        ge=0,
        description="Number of units held"
    )
    average_cost_basis: NonNegativeAmount = 0.0

    @field_validator('ticker')
    @classmethod
    def upper_ticker(cls, v: str) -> str:
        return v.upper()


class BillingCycleTransaction(AccountModel):
    """A transaction in the current billing cycle."""
    id: ItemId = None
    amount: Amount
    category: OptionalText = ""


class CheckingOrSavingsFee(AccountModel):
    """Fee schedule shared by checking and savings accounts."""
    no_minimum_balance_fee: NonNegativeAmount = 0.0
    monthly_fee: NonNegativeAmount = 0.0
    atm_fee: NonNegativeAmount = 0.0
    overdraft_fee: NonNegativeAmount = 0.0


class LoanFees(AccountModel):
    """Fees currently outstanding on a loan."""
    late_fee: NonNegativeAmount = 0.0
    prepayment_penalty: NonNegativeAmount = 0.0
    origination_fee: NonNegativeAmount = 0.0
    other_fees: NonNegativeAmount = 0.0


class LoanPayment(AccountModel):
    """A past loan payment."""
    id: ItemId = None
    payment_date: OptionalDate = None
    amount: Amount
    note: OptionalText = ""


# =============================================================================
# ACCOUNT VARIANTS
# =============================================================================

class BaseAccount(AccountModel):
    """
    Fields shared by every account variant.

    `id` is None only on a payload that has not reached the store yet.
    """
    id: ItemId = None
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display label"
    )
    type: str
    currency: str = Field(
        default="USD",
        pattern=r"^[A-Za-z]{3}$",
        description="3-letter currency code"
    )
    balance: float = Field(
        default=0.0,
        description="Derived balance (see networth.accounts.derivation)"
    )
    description: OptionalText = ""

    @field_validator('currency')
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.upper()


class _InvestmentFeatures(BaseAccount):
    uninvested_amount: Amount
    holdings: list[Holding] = Field(default_factory=list)


class _RetirementFeatures(_InvestmentFeatures):
    average_monthly_contribution: NonNegativeAmount = 0.0


class _EmployerPlanFeatures(_RetirementFeatures):
    employer_match: OptionalText = ""


class InvestmentAccount(_InvestmentFeatures):
    type: Literal["Investment"]


class HSAAccount(_RetirementFeatures):
    type: Literal["HSA"]


class TraditionalIRAAccount(_RetirementFeatures):
    type: Literal["Traditional IRA"]


class RothIRAAccount(_RetirementFeatures):
    type: Literal["Roth IRA"]


class Retirement401kAccount(_EmployerPlanFeatures):
    type: Literal["Retirement 401k"]


class Roth401kAccount(_EmployerPlanFeatures):
    type: Literal["Roth 401k"]


class CreditCardAccount(BaseAccount):
    """Balance is the outstanding debt, always negative."""
    type: Literal["Credit Card"]
    outstanding_debt: Amount
    total_limit: NonNegativeAmount = 0.0
    current_limit: NonNegativeAmount = 0.0
    interest_rate: NonNegativeAmount = 0.0
    annual_fee: NonNegativeAmount = 0.0
    rewards_summary: OptionalText = ""
    due_date: OptionalDate = None
    card_number_last4: Last4Digits = None
    transactions: list[BillingCycleTransaction] = Field(default_factory=list)


class _DepositFeatures(BaseAccount):
    current_amount: Amount
    interest_rate: NonNegativeAmount = 0.0
    minimum_balance_requirement: NonNegativeAmount = 0.0
    fee: CheckingOrSavingsFee = Field(default_factory=CheckingOrSavingsFee)
    rewards_summary: OptionalText = ""
    overdraft_protection: OptionalText = ""
    bank_name: OptionalText = ""
    transactions: list[BillingCycleTransaction] = Field(default_factory=list)


class CheckingAccount(_DepositFeatures):
    type: Literal["Checking"]


class SavingsAccount(_DepositFeatures):
    type: Literal["Savings"]


class LoanAccount(BaseAccount):
    """Balance is the principal left, always negative."""
    type: Literal["Loan"]
    principal_left: Amount
    interest_rate: NonNegativeAmount = 0.0
    monthly_contribution: NonNegativeAmount = 0.0
    loan_term: OptionalText = ""
    loan_type: OptionalText = ""
    original_amount: NonNegativeAmount = 0.0
    loan_start_date: OptionalDate = None
    loan_end_date: OptionalDate = None
    payment_due_date: OptionalDate = None
    total_paid: NonNegativeAmount = 0.0
    fees: LoanFees = Field(default_factory=LoanFees)
    payment_history: list[LoanPayment] = Field(default_factory=list)
    collateral: Annotated[Optional[str], BeforeValidator(_blank_as_none)] = None


class PayrollAccount(BaseAccount):
    """Balance is the most recent pay period's net income."""
    type: Literal["Payroll"]
    net_income: Amount
    gross_income: NonNegativeAmount = 0.0
    federal_taxes_withheld: NonNegativeAmount = 0.0
    state: OptionalText = ""
    state_taxes_withheld: NonNegativeAmount = 0.0
    social_security_withheld: NonNegativeAmount = 0.0
    medicare_withheld: NonNegativeAmount = 0.0
    other_deductions: NonNegativeAmount = 0.0
    pay_frequency: OptionalText = ""
    pay_period_start_date: OptionalDate = None
    pay_period_end_date: OptionalDate = None
    benefits: OptionalText = ""
    bonus_income: NonNegativeAmount = 0.0
    year_to_date_income: NonNegativeAmount = 0.0
    employer_name: OptionalText = ""

    @property
    def total_withheld(self) -> float:
        return (
            self.federal_taxes_withheld
            + self.state_taxes_withheld
            + self.social_security_withheld
            + self.medicare_withheld
            + self.other_deductions
        )


class OtherAccount(BaseAccount):
    """Catch-all for anything not otherwise modeled."""
    type: Literal["Other"]
    total_income: Amount
    total_debt: Amount


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Dotted path of the field with the issue (e.g., holdings.0.ticker)"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'greater_than_equal', 'inconsistent')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of the two-stage validation.

    Stage 1: Schema validation (types, required fields, variant shape)
    Stage 2: Semantic validation (cross-field logic checks)

    On success `record` holds the typed, defaulted account, ready for
    balance derivation.
    """

    account_type: Optional[str] = Field(
        default=None,
        description="The type tag that was validated against"
    )

    # Stage results
    schema_valid: bool = Field(
        ...,
        description="Did schema validation pass?"
    )
    semantic_valid: bool = Field(
        ...,
        description="Did semantic validation pass?"
    )

    # Overall result
    is_valid: bool = Field(
        ...,
        description="Overall validation result"
    )

    record: Optional[SerializeAsAny[BaseAccount]] = Field(
        default=None,
        description="Typed account record (only when valid)"
    )

    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )

    # Warnings don't block but should be shown
    warnings: list[str] = Field(
        default_factory=list,
        description="Non-blocking warnings"
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def errors(self) -> list[tuple[str, str]]:
        """(field path, message) pairs for field-level rendering."""
        return [
            (issue.field, issue.message)
            for issue in self.issues
            if issue.severity == "error"
        ]

    @property
    def error_message(self) -> str:
        """All errors joined into one line, for a toast."""
        return ", ".join(f"{path}: {message}" for path, message in self.errors)
