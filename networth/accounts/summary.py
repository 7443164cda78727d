"""
Net Worth Summary

Deterministic aggregations over the account collection, and the JSON
projection handed to the LLM flows as `financialData`.

DESIGN DECISION: There is no currency conversion. Totals are kept per
currency and never added across currencies.
"""

import json
from collections import defaultdict
from typing import Iterable

from networth.accounts.registry import get_spec, list_types
from networth.models.account import AccountType, BaseAccount


def group_by_type(accounts: Iterable[BaseAccount]) -> dict[AccountType, list[BaseAccount]]:
    """
    Group accounts by type, in registry order.

    Types without accounts are omitted. Within a group the
    collection's insertion order is kept.
    """
    groups: dict[AccountType, list[BaseAccount]] = defaultdict(list)
    for account in accounts:
        groups[get_spec(account.type).type].append(account)
    return {t: groups[t] for t in list_types() if t in groups}


def totals_by_currency(accounts: Iterable[BaseAccount]) -> dict[str, float]:
    """Sum of balances per currency, over every account."""
    totals: dict[str, float] = defaultdict(float)
    for account in accounts:
        totals[account.currency] += account.balance
    return dict(totals)


def net_worth(accounts: Iterable[BaseAccount]) -> dict[str, float]:
    """
    Net worth per currency.

    Only account types whose registry entry counts toward net worth
    contribute (payroll, a per-period income flow, does not).
    """
    return totals_by_currency(
        account for account in accounts
        if get_spec(account.type).counts_toward_net_worth
    )


def to_financial_data(accounts: Iterable[BaseAccount]) -> str:
    """
    Faithful JSON projection of the collection, as stored.

    Used as the `financialData` input of the prompt flows.
    """
    return json.dumps(
        [account.model_dump(mode="json", by_alias=True) for account in accounts],
        indent=2,
        ensure_ascii=False,
    )
