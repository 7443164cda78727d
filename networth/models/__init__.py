"""
Data Models Package

This package contains all Pydantic models used in the Net Worth Dashboard.
All data flowing through the system must conform to these schemas.
"""

from networth.models.account import (
    AccountModel,
    AccountType,
    BaseAccount,
    BillingCycleTransaction,
    CheckingAccount,
    CheckingOrSavingsFee,
    CreditCardAccount,
    Holding,
    HSAAccount,
    InvestmentAccount,
    LoanAccount,
    LoanFees,
    LoanPayment,
    OtherAccount,
    PayrollAccount,
    Retirement401kAccount,
    Roth401kAccount,
    RothIRAAccount,
    SavingsAccount,
    TraditionalIRAAccount,
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

__all__ = [
    # Account models
    "AccountModel",
    "AccountType",
    "BaseAccount",
    "BillingCycleTransaction",
    "CheckingAccount",
    "CheckingOrSavingsFee",
    "CreditCardAccount",
    "Holding",
    "HSAAccount",
    "InvestmentAccount",
    "LoanAccount",
    "LoanFees",
    "LoanPayment",
    "OtherAccount",
    "PayrollAccount",
    "Retirement401kAccount",
    "Roth401kAccount",
    "RothIRAAccount",
    "SavingsAccount",
    "TraditionalIRAAccount",
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
    # Chat and profile
    "ChatMessage",
    "ChatSender",
    "UserDetails",
]
