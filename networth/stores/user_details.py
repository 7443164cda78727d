"""
User Profile Store

Holds the single user's profile in its own slot. The profile is absent
until the user fills in the form.
"""

from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from networth.audit import AuditLogger
from networth.models.account import ValidationIssue
from networth.models.user import UserDetails
from networth.services.storage import SlotStorageInterface
from networth.stores.base import SlotBackedStore
from networth.validation import issues_from_validation_error


class UserDetailsStore(SlotBackedStore):
    """Persisted user profile."""

    def __init__(
        self,
        storage: SlotStorageInterface,
        slot_key: str = "user_details",
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._details: Optional[UserDetails] = None
        super().__init__(storage, slot_key, audit_logger)

    def _hydrate(self, value: Any) -> bool:
        if value is None:
            self._details = None
            return False
        try:
            self._details = UserDetails.model_validate(value)
        except PydanticValidationError as e:
            self._logger.warning("stored_user_details_invalid", error_count=e.error_count())
            self._details = None
        return False

    def _serialize(self) -> Optional[dict]:
        return self._details.model_dump(mode="json") if self._details else None

    def _size(self) -> int:
        return 1 if self._details else 0

    def get(self) -> Optional[UserDetails]:
        return self._details

    def update(self, payload: Any) -> tuple[Optional[UserDetails], list[ValidationIssue]]:
        """
        Validate and replace the profile.

        Returns:
            (details_or_None, list_of_issues). On issues the stored
            profile is left unchanged.
        """
        try:
            details = UserDetails.model_validate(payload)
        except PydanticValidationError as e:
            return None, issues_from_validation_error(e)

        self._details = details
        self._audit.log_user_details_updated(details.name)
        self._persist()
        return details, []
