"""
Account Store

The canonical collection of accounts and its mutation API.

Every payload goes through the same pipeline:
    validate -> assign ids -> derive balance -> mutate -> write through

IDENTITY RULES:
- An account id is assigned once (or taken from the payload on add) and
  never reassigned
- Adding an id that already exists is rejected; nothing is overwritten
  or merged
- Nested items (holdings, transactions, payments) get their own id when
  they arrive without one

Insertion order is the only ordering. Edits replace in place.
"""

from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, SerializeAsAny

from networth.accounts.derivation import with_derived_balance
from networth.accounts.registry import keyed_list_fields
from networth.audit import AuditLogger, create_correlation_id
from networth.models.account import BaseAccount, ValidationIssue
from networth.services.storage import SlotStorageInterface
from networth.stores.base import SlotBackedStore
from networth.validation import AccountValidator


DUPLICATE_ID_MESSAGE = "Account with this ID already exists. Please use a unique ID."
NOT_PERSISTED_MESSAGE = "Changes were applied but may not persist."


class MutationOutcome(str, Enum):
    OK = "ok"
    INVALID = "invalid"
    DUPLICATE_ID = "duplicate_id"
    NOT_FOUND = "not_found"


class MutationResult(BaseModel):
    """What happened to one add or edit."""

    outcome: MutationOutcome
    account: Optional[SerializeAsAny[BaseAccount]] = None
    issues: list[ValidationIssue] = Field(default_factory=list)
    message: Optional[str] = None
    persisted: bool = Field(
        default=False,
        description="Was the collection written to storage?"
    )

    @property
    def ok(self) -> bool:
        return self.outcome == MutationOutcome.OK

    @property
    def errors(self) -> list[tuple[str, str]]:
        return [
            (issue.field, issue.message)
            for issue in self.issues
            if issue.severity == "error"
        ]


def _new_id() -> str:
    return str(uuid4())


def _with_item_ids(account: BaseAccount) -> BaseAccount:
    """Give every nested item without an id a fresh one."""
    update = {}
    for name in keyed_list_fields(account.type):
        items = getattr(account, name)
        if any(item.id is None for item in items):
            update[name] = [
                item if item.id is not None else item.model_copy(update={"id": _new_id()})
                for item in items
            ]
    return account.model_copy(update=update) if update else account


class AccountStore(SlotBackedStore):
    """
    CRUD over the persisted account collection.

    Args:
        storage: Slot storage shared with the other stores
        slot_key: Slot holding the account array
        validator: Payload validator
        audit_logger: Receives an event for every outcome
    """

    def __init__(
        self,
        storage: SlotStorageInterface,
        slot_key: str = "financial_accounts",
        validator: Optional[AccountValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._validator = validator or AccountValidator()
        self._accounts: list[BaseAccount] = []
        super().__init__(storage, slot_key, audit_logger)

    # ------------------------------------------------------------------
    # Slot plumbing
    # ------------------------------------------------------------------

    def _hydrate(self, value: Any) -> bool:
        """
        Rebuild the collection from a stored array.

        Anything other than an array of valid accounts yields an empty
        collection. Balances are always re-derived. Accounts and nested
        items stored without an id get one here, and the caller writes
        them back so the id is assigned only once.
        """
        if value is None:
            self._accounts = []
            return False
        if not isinstance(value, list):
            self._logger.warning("stored_accounts_not_a_list", value_type=type(value).__name__)
            self._accounts = []
            return False

        accounts: list[BaseAccount] = []
        seen: set[str] = set()
        assigned = False
        for index, item in enumerate(value):
            result = self._validator.validate(item)
            if not result.is_valid:
                self._logger.warning(
                    "stored_accounts_invalid",
                    index=index,
                    errors=result.errors,
                )
                self._accounts = []
                return False
            account = result.record
            if account.id is None:
                account = account.model_copy(update={"id": _new_id()})
                assigned = True
            if account.id in seen:
                self._logger.warning("stored_account_duplicate_id", account_id=account.id)
                continue
            seen.add(account.id)
            with_ids = _with_item_ids(account)
            assigned = assigned or with_ids is not account
            accounts.append(with_derived_balance(with_ids))

        self._accounts = accounts
        return assigned

    def _serialize(self) -> list[dict]:
        return [account.model_dump(mode="json", by_alias=True) for account in self._accounts]

    def _size(self) -> int:
        return len(self._accounts)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_by_id(self, account_id: str) -> Optional[BaseAccount]:
        for account in self._accounts:
            if account.id == account_id:
                return account
        return None

    def _index_of(self, account_id: Optional[str]) -> Optional[int]:
        if account_id is None:
            return None
        for index, account in enumerate(self._accounts):
            if account.id == account_id:
                return index
        return None

    def __len__(self) -> int:
        return len(self._accounts)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _validated(
        self,
        payload: Any,
        account_type: Any,
        correlation_id: UUID,
    ) -> tuple[Optional[BaseAccount], list[ValidationIssue], Optional[MutationResult]]:
        result = self._validator.validate(payload, account_type)
        if not result.is_valid:
            self._audit.log_validation_failed(
                account_type=result.account_type,
                issues=[issue.model_dump() for issue in result.issues if issue.severity == "error"],
                correlation_id=correlation_id,
            )
            return None, result.issues, MutationResult(
                outcome=MutationOutcome.INVALID,
                issues=result.issues,
                message=result.error_message,
            )
        return result.record, result.issues, None

    def _committed(
        self,
        account: BaseAccount,
        issues: list[ValidationIssue],
        correlation_id: UUID,
    ) -> MutationResult:
        persisted = self._persist(correlation_id)
        return MutationResult(
            outcome=MutationOutcome.OK,
            account=account,
            issues=issues,
            message=None if persisted else NOT_PERSISTED_MESSAGE,
            persisted=persisted,
        )

    def add(self, payload: Any, account_type: Any = None) -> MutationResult:
        """
        Validate and append a new account.

        An id is generated unless the payload supplies one. A supplied id
        that is already in use is rejected without touching the collection.
        """
        correlation_id = create_correlation_id()
        record, issues, rejected = self._validated(payload, account_type, correlation_id)
        if rejected:
            return rejected

        if record.id is None:
            record = record.model_copy(update={"id": _new_id()})
        elif self._index_of(record.id) is not None:
            self._audit.log_duplicate_rejected(record.id, correlation_id)
            return MutationResult(
                outcome=MutationOutcome.DUPLICATE_ID,
                message=DUPLICATE_ID_MESSAGE,
            )

        account = with_derived_balance(_with_item_ids(record))
        self._accounts.append(account)
        self._audit.log_account_added(account.id, account.type, account.name, correlation_id)
        return self._committed(account, issues, correlation_id)

    def edit(self, payload: Any, account_type: Any = None) -> MutationResult:
        """
        Replace an existing account wholesale, keeping its position.

        The payload must carry the id of an account in the collection.
        The balance is re-derived; a supplied balance is ignored.
        """
        correlation_id = create_correlation_id()
        record, issues, rejected = self._validated(payload, account_type, correlation_id)
        if rejected:
            return rejected

        index = self._index_of(record.id)
        if index is None:
            self._audit.log_account_not_found(record.id, correlation_id)
            return MutationResult(
                outcome=MutationOutcome.NOT_FOUND,
                message=f"No account with id {record.id!r} to edit.",
            )

        account = with_derived_balance(_with_item_ids(record))
        self._accounts[index] = account
        self._audit.log_account_updated(account.id, account.type, account.name, correlation_id)
        return self._committed(account, issues, correlation_id)

    def remove(self, account_id: str) -> bool:
        """
        Remove an account by id. Removing an absent id is a no-op.

        Returns:
            True if an account was removed
        """
        index = self._index_of(account_id)
        if index is None:
            return False
        del self._accounts[index]
        correlation_id = create_correlation_id()
        self._audit.log_account_deleted(account_id, correlation_id)
        self._persist(correlation_id)
        return True

    # Defined last: inside the class body the name shadows the builtin
    def list(self) -> list[BaseAccount]:
        """Snapshot of the collection in insertion order."""
        return list(self._accounts)
