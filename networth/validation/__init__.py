"""Account validation package."""

from networth.validation.validator import (
    AccountValidator,
    issues_from_validation_error,
    parse_json_payload,
)

__all__ = ["AccountValidator", "issues_from_validation_error", "parse_json_payload"]
