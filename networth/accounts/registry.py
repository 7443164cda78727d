"""
Account Type Registry

One authoritative table of account types. Validation, derivation, the
store and any UI query it instead of branching on type names.

Adding an account type means:
1. A model in networth.models.account
2. One entry in _ENTRIES below
3. One rule in networth.accounts.derivation

Nothing else needs to change.
"""

import types
import typing
from datetime import date
from enum import Enum
from functools import lru_cache
from typing import Any, Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic_core import PydanticUndefined

from networth.models.account import (
    AccountType,
    BaseAccount,
    CheckingAccount,
    CreditCardAccount,
    HSAAccount,
    InvestmentAccount,
    LoanAccount,
    OtherAccount,
    PayrollAccount,
    Retirement401kAccount,
    Roth401kAccount,
    RothIRAAccount,
    SavingsAccount,
    TraditionalIRAAccount,
)


class UnknownAccountTypeError(KeyError):
    """An account type tag that has no registry entry."""
    pass


class AccountFamily(str, Enum):
    """Broad grouping used for summaries."""
    INVESTMENT = "investment"
    CREDIT = "credit"
    BANKING = "banking"
    LOAN = "loan"
    INCOME = "income"
    OTHER = "other"


class AccountTypeSpec(BaseModel):
    """Registry entry for one account type."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    type: AccountType
    model: type[BaseAccount]
    family: AccountFamily
    emoji: str
    counts_toward_net_worth: bool = True


class FieldSpec(BaseModel):
    """
    Contract of one field of an account type.

    `element` describes the shape of list items and sub-records.
    """

    name: str
    alias: str
    kind: str = Field(
        ...,
        pattern="^(text|number|integer|boolean|date|tag|list|record)$",
    )
    required: bool
    default: Any = None
    derived: bool = False
    element: Optional[list["FieldSpec"]] = None


_ENTRIES: list[AccountTypeSpec] = [
    AccountTypeSpec(type=AccountType.INVESTMENT, model=InvestmentAccount,
                    family=AccountFamily.INVESTMENT, emoji="📈"),
    AccountTypeSpec(type=AccountType.HSA, model=HSAAccount,
                    family=AccountFamily.INVESTMENT, emoji="🏥"),
    AccountTypeSpec(type=AccountType.TRADITIONAL_IRA, model=TraditionalIRAAccount,
                    family=AccountFamily.INVESTMENT, emoji="👴"),
    AccountTypeSpec(type=AccountType.ROTH_IRA, model=RothIRAAccount,
                    family=AccountFamily.INVESTMENT, emoji="🌅"),
    AccountTypeSpec(type=AccountType.RETIREMENT_401K, model=Retirement401kAccount,
                    family=AccountFamily.INVESTMENT, emoji="🏢"),
    AccountTypeSpec(type=AccountType.ROTH_401K, model=Roth401kAccount,
                    family=AccountFamily.INVESTMENT, emoji="🏦"),
    AccountTypeSpec(type=AccountType.CREDIT_CARD, model=CreditCardAccount,
                    family=AccountFamily.CREDIT, emoji="💳"),
    AccountTypeSpec(type=AccountType.CHECKING, model=CheckingAccount,
                    family=AccountFamily.BANKING, emoji="💵"),
    AccountTypeSpec(type=AccountType.SAVINGS, model=SavingsAccount,
                    family=AccountFamily.BANKING, emoji="💰"),
    AccountTypeSpec(type=AccountType.LOAN, model=LoanAccount,
                    family=AccountFamily.LOAN, emoji="📄"),
    # A payroll balance is one pay period's net income, a flow rather than a holding
    AccountTypeSpec(type=AccountType.PAYROLL, model=PayrollAccount,
                    family=AccountFamily.INCOME, emoji="💼",
                    counts_toward_net_worth=False),
    AccountTypeSpec(type=AccountType.OTHER, model=OtherAccount,
                    family=AccountFamily.OTHER, emoji="🧾"),
]

_BY_TYPE: dict[AccountType, AccountTypeSpec] = {entry.type: entry for entry in _ENTRIES}


def _check_entries() -> None:
    """Every entry's model must declare the entry's tag as its literal type."""
    for entry in _ENTRIES:
        annotation = entry.model.model_fields["type"].annotation
        if typing.get_args(annotation) != (entry.type.value,):
            raise RuntimeError(
                f"{entry.model.__name__}.type does not match registry tag {entry.type.value!r}"
            )
    missing = set(AccountType) - set(_BY_TYPE)
    if missing:
        raise RuntimeError(f"Account types without registry entry: {sorted(missing)}")


_check_entries()


# =============================================================================
# LOOKUPS
# =============================================================================

def list_types() -> list[AccountType]:
    """All account types, in display order."""
    return [entry.type for entry in _ENTRIES]


def parse_type(value: Any) -> Optional[AccountType]:
    """Map a raw tag to an AccountType, or None if it is not registered."""
    if isinstance(value, AccountType):
        return value
    if not isinstance(value, str):
        return None
    try:
        return AccountType(value.strip())
    except ValueError:
        return None


def get_spec(account_type: Any) -> AccountTypeSpec:
    """
    Registry entry for a tag.

    Raises:
        UnknownAccountTypeError: The tag is not registered
    """
    parsed = parse_type(account_type)
    if parsed is None or parsed not in _BY_TYPE:
        raise UnknownAccountTypeError(account_type)
    return _BY_TYPE[parsed]


def model_for(account_type: Any) -> type[BaseAccount]:
    """Model class for a tag."""
    return get_spec(account_type).model


# =============================================================================
# FIELD CONTRACTS
# =============================================================================

def _unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    origin = typing.get_origin(annotation)
    if origin is Annotated:
        return _unwrap_optional(typing.get_args(annotation)[0])
    if origin in (Union, types.UnionType):
        args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            inner, _ = _unwrap_optional(args[0])
            return inner, True
    return annotation, False


def _describe(annotation: Any) -> tuple[str, Optional[list[FieldSpec]]]:
    annotation, _ = _unwrap_optional(annotation)
    origin = typing.get_origin(annotation)

    if origin is Literal:
        return "tag", None
    if origin is list:
        (item,) = typing.get_args(annotation)
        item, _ = _unwrap_optional(item)
        if isinstance(item, type) and issubclass(item, BaseModel):
            return "list", _fields_of(item)
        return "list", None
    if isinstance(annotation, type):
        if issubclass(annotation, BaseModel):
            return "record", _fields_of(annotation)
        if issubclass(annotation, bool):
            return "boolean", None
        if issubclass(annotation, int):
            return "integer", None
        if issubclass(annotation, float):
            return "number", None
        if issubclass(annotation, date):
            return "date", None
    return "text", None


def _fields_of(model: type[BaseModel]) -> list[FieldSpec]:
    specs = []
    for name, info in model.model_fields.items():
        kind, element = _describe(info.annotation)
        if info.default_factory is not None:
            default = info.default_factory()
            if isinstance(default, BaseModel):
                default = default.model_dump(by_alias=True)
        elif info.default is PydanticUndefined:
            default = None
        else:
            default = info.default
        specs.append(FieldSpec(
            name=name,
            alias=info.alias or name,
            kind=kind,
            required=info.is_required(),
            default=default,
            derived=(name == "balance"),
            element=element,
        ))
    return specs


@lru_cache(maxsize=None)
def _fields_for_type(account_type: AccountType) -> tuple[FieldSpec, ...]:
    return tuple(_fields_of(_BY_TYPE[account_type].model))


def fields_for(account_type: Any) -> list[FieldSpec]:
    """
    Field contract of an account type.

    Includes the shared fields; `balance` is flagged as derived.
    """
    spec = get_spec(account_type)
    return [field.model_copy(deep=True) for field in _fields_for_type(spec.type)]


def keyed_list_fields(account_type: Any) -> list[str]:
    """Names of the fields whose items carry their own client-side id."""
    return [
        field.name
        for field in fields_for(account_type)
        if field.kind == "list" and field.element
        and any(sub.name == "id" for sub in field.element)
    ]


# =============================================================================
# UNION ADAPTER
# =============================================================================

AnyAccount = Annotated[
    Union[tuple(entry.model for entry in _ENTRIES)],
    Field(discriminator="type"),
]


@lru_cache(maxsize=1)
def account_list_adapter() -> TypeAdapter:
    """Adapter for a persisted array of accounts (discriminated by `type`)."""
    return TypeAdapter(list[AnyAccount])
