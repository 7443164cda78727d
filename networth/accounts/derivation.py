"""
Balance Derivation Engine

Maps an account's type-specific fields to the one signed `balance`
every summary view uses. Pure functions: no I/O, no state.

This module is the ONLY writer of `balance`. Whatever balance a payload
carries is discarded by validation and recomputed here on every create,
edit and re-hydration.

NOTE: Investment-like accounts take their balance from the uninvested
cash alone. Holdings (quantity x cost basis) are not added in. Whether
they should be is an open question, so the rule is kept as is.
"""

from typing import Any, Callable

from networth.accounts.registry import UnknownAccountTypeError, list_types, parse_type
from networth.models.account import AccountType, BaseAccount


def _number(fields: Any, name: str) -> float:
    """Read a numeric field, treating missing/None as 0."""
    value = getattr(fields, name, None)
    return float(value) if value is not None else 0.0


def _as_debt(value: float) -> float:
    # + 0.0 turns -0.0 into 0.0
    return -abs(value) + 0.0


def _investment_balance(fields: Any) -> float:
    return _number(fields, "uninvested_amount")


def _credit_card_balance(fields: Any) -> float:
    return _as_debt(_number(fields, "outstanding_debt"))


def _deposit_balance(fields: Any) -> float:
    return _number(fields, "current_amount")


def _loan_balance(fields: Any) -> float:
    return _as_debt(_number(fields, "principal_left"))


def _payroll_balance(fields: Any) -> float:
    return _number(fields, "net_income")


def _other_balance(fields: Any) -> float:
    return _number(fields, "total_income") - _number(fields, "total_debt")


_RULES: dict[AccountType, Callable[[Any], float]] = {
    AccountType.INVESTMENT: _investment_balance,
    AccountType.HSA: _investment_balance,
    AccountType.TRADITIONAL_IRA: _investment_balance,
    AccountType.ROTH_IRA: _investment_balance,
    AccountType.RETIREMENT_401K: _investment_balance,
    AccountType.ROTH_401K: _investment_balance,
    AccountType.CREDIT_CARD: _credit_card_balance,
    AccountType.CHECKING: _deposit_balance,
    AccountType.SAVINGS: _deposit_balance,
    AccountType.LOAN: _loan_balance,
    AccountType.PAYROLL: _payroll_balance,
    AccountType.OTHER: _other_balance,
}

_missing_rules = set(list_types()) - set(_RULES)
if _missing_rules:
    raise RuntimeError(
        f"No balance rule for account types: {sorted(t.value for t in _missing_rules)}"
    )


def derive_balance(account_type: Any, fields: Any) -> float:
    """
    Compute the canonical balance for an account type.

    Args:
        account_type: Type tag (AccountType or its string value)
        fields: Validated record (any object exposing the variant's attributes)

    Returns:
        The signed balance

    Raises:
        UnknownAccountTypeError: No rule exists for the tag. This is a
            registry/derivation mismatch, not bad user input.
    """
    parsed = parse_type(account_type)
    if parsed is None or parsed not in _RULES:
        raise UnknownAccountTypeError(account_type)
    return _RULES[parsed](fields)


def with_derived_balance(account: BaseAccount) -> BaseAccount:
    """Return a copy of the account carrying its derived balance."""
    return account.model_copy(
        update={"balance": derive_balance(account.type, account)}
    )
