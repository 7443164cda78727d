"""
Shared fixtures.

Every test runs against in-memory storage; nothing touches the network
or the user's environment.
"""

import copy

import pytest

from networth.audit import AuditLogger
from networth.config import AppSettings
from networth.services.storage import InMemorySlotStorage, SharedStorageArea
from networth.stores import AccountStore, ChatHistoryStore, UserDetailsStore
from networth.validation import AccountValidator


ACCOUNTS_KEY = "financial_accounts"


VALID_PAYLOADS = {
    "Investment": {
        "type": "Investment",
        "name": "Brokerage",
        "currency": "USD",
        "uninvestedAmount": 2500.0,
        "holdings": [
            {"ticker": "vti", "quantity": 10, "averageCostBasis": 210.5},
            {"ticker": "BND", "quantity": 5},
        ],
    },
    "HSA": {
        "type": "HSA",
        "name": "Health Savings",
        "uninvestedAmount": 800,
        "averageMonthlyContribution": 300,
    },
    "Traditional IRA": {
        "type": "Traditional IRA",
        "name": "Rollover IRA",
        "uninvestedAmount": 1200,
    },
    "Roth IRA": {
        "type": "Roth IRA",
        "name": "Roth",
        "uninvestedAmount": 650.25,
        "averageMonthlyContribution": 500,
    },
    "Retirement 401k": {
        "type": "Retirement 401k",
        "name": "Work 401k",
        "uninvestedAmount": 0,
        "averageMonthlyContribution": 1000,
        "employerMatch": "100% up to 4%",
    },
    "Roth 401k": {
        "type": "Roth 401k",
        "name": "Work Roth 401k",
        "uninvestedAmount": 150,
        "employerMatch": "50% up to 6%",
    },
    "Credit Card": {
        "type": "Credit Card",
        "name": "Travel Card",
        "outstandingDebt": 1200.5,
        "totalLimit": 10000,
        "currentLimit": 8799.5,
        "interestRate": 24.99,
        "cardNumberLast4": "4242",
        "transactions": [{"amount": 54.2, "category": "Groceries"}],
    },
    "Checking": {
        "type": "Checking",
        "name": "Everyday Checking",
        "currentAmount": 3400.12,
        "bankName": "First Bank",
        "fee": {"monthlyFee": 5, "atmFee": 2.5},
    },
    "Savings": {
        "type": "Savings",
        "name": "Emergency Fund",
        "currentAmount": 15000,
        "interestRate": 4.1,
        "minimumBalanceRequirement": 500,
    },
    "Loan": {
        "type": "Loan",
        "name": "Car Loan",
        "principalLeft": 12500.75,
        "interestRate": 6.5,
        "monthlyContribution": 450,
        "originalAmount": 25000,
        "loanStartDate": "2022-03-01",
        "loanEndDate": "2027-03-01",
        "fees": {"lateFee": 35},
        "paymentHistory": [{"paymentDate": "2024-05-01", "amount": 450}],
        "collateral": "2021 Sedan",
    },
    "Payroll": {
        "type": "Payroll",
        "name": "Acme Paycheck",
        "netIncome": 3100,
        "grossIncome": 4500,
        "federalTaxesWithheld": 700,
        "stateTaxesWithheld": 250,
        "socialSecurityWithheld": 279,
        "medicareWithheld": 65.25,
        "payFrequency": "Bi-weekly",
        "employerName": "Acme",
    },
    "Other": {
        "type": "Other",
        "name": "Side Business",
        "totalIncome": 4500,
        "totalDebt": 1500,
    },
}


@pytest.fixture
def valid_payloads():
    """A fresh deep copy of one valid payload per account type."""
    return copy.deepcopy(VALID_PAYLOADS)


@pytest.fixture
def app_settings():
    return AppSettings(default_currency="USD", max_reasonable_amount=1_000_000_000.0)


@pytest.fixture
def validator(app_settings):
    return AccountValidator(app_settings)


@pytest.fixture
def audit_logger():
    return AuditLogger()


@pytest.fixture
def storage_area():
    return SharedStorageArea()


@pytest.fixture
def storage(storage_area):
    return InMemorySlotStorage(storage_area)


@pytest.fixture
def account_store(storage, validator, audit_logger):
    return AccountStore(storage, ACCOUNTS_KEY, validator=validator, audit_logger=audit_logger)


@pytest.fixture
def user_details_store(storage, audit_logger):
    return UserDetailsStore(storage, audit_logger=audit_logger)


@pytest.fixture
def chat_store(storage, audit_logger):
    return ChatHistoryStore(storage, audit_logger=audit_logger)
