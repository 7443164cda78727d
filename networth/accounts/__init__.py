"""Account registry, balance derivation and summaries."""

from networth.accounts.derivation import derive_balance, with_derived_balance
from networth.accounts.registry import (
    AccountFamily,
    AccountTypeSpec,
    AnyAccount,
    FieldSpec,
    UnknownAccountTypeError,
    account_list_adapter,
    fields_for,
    get_spec,
    keyed_list_fields,
    list_types,
    model_for,
    parse_type,
)
from networth.accounts.summary import (
    group_by_type,
    net_worth,
    to_financial_data,
    totals_by_currency,
)

__all__ = [
    "AccountFamily",
    "AccountTypeSpec",
    "AnyAccount",
    "FieldSpec",
    "UnknownAccountTypeError",
    "account_list_adapter",
    "derive_balance",
    "fields_for",
    "get_spec",
    "group_by_type",
    "keyed_list_fields",
    "list_types",
    "model_for",
    "net_worth",
    "parse_type",
    "to_financial_data",
    "totals_by_currency",
    "with_derived_balance",
]
