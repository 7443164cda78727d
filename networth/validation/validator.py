"""
Two-Stage Account Validation

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- The payload is a JSON object with a registered `type`
- Required fields present, primitive kinds correct
- Numeric-looking strings coerced, text trimmed
- Rates, fees and quantities non-negative, currency 3 letters
- Nested list elements validated against their own contract
- Fields belonging to other account types rejected

STAGE 2 - SEMANTIC VALIDATION:
- Cross-field checks (limits, date order, payroll withholdings)
- Duplicate nested ids (error) and duplicate tickers (warning)
- Unusually large amounts

IMPORTANT: Validation NEVER raises for user input and NEVER silently
fixes issues. The one exception is `balance`: it is always derived, so a
supplied value is dropped and reported as an info issue.
"""

import json
from collections import Counter
from collections.abc import Mapping
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from networth.accounts.registry import (
    AccountFamily,
    fields_for,
    get_spec,
    keyed_list_fields,
    list_types,
    parse_type,
)
from networth.config import AppSettings, get_settings
from networth.models.account import BaseAccount, ValidationIssue, ValidationResult


def _path(loc: tuple) -> str:
    return ".".join(str(part) for part in loc) or "payload"


def issues_from_validation_error(error: PydanticValidationError) -> list[ValidationIssue]:
    """Turn pydantic errors into field-level issues."""
    issues = []
    for detail in error.errors():
        issue_type = detail["type"]
        message = detail["msg"]
        suggested_fix = None
        if issue_type == "missing":
            message = "This field is required"
        elif issue_type == "extra_forbidden":
            message = "This field does not belong to this account type"
            suggested_fix = "Remove the field or pick the matching account type"
        issues.append(ValidationIssue(
            field=_path(detail["loc"]),
            issue_type=issue_type,
            message=message,
            severity="error",
            suggested_fix=suggested_fix,
        ))
    return issues


class AccountValidator:
    """
    Validates account payloads through a two-stage pipeline.

    Stage 1: Schema validation against the registry's model for the type
    Stage 2: Semantic validation on the typed record
    """

    def __init__(self, settings: Optional[AppSettings] = None):
        """
        Initialize validator.

        Args:
            settings: Application settings. Defaults to the cached settings.
        """
        self._settings = settings or get_settings().app

    def _validate_schema(
        self,
        payload: Any,
        account_type: Any = None,
    ) -> tuple[Optional[BaseAccount], Optional[str], list[ValidationIssue]]:
        """
        Stage 1: Schema validation.

        Returns: (record_or_None, resolved_type, list_of_issues)
        """
        issues = []

        if not isinstance(payload, Mapping):
            issues.append(ValidationIssue(
                field="payload",
                issue_type="invalid_type",
                message="Account data must be a JSON object",
                severity="error",
            ))
            return None, None, issues

        data = dict(payload)
        raw_type = data.get("type")

        if (
            account_type is not None
            and raw_type is not None
            and parse_type(account_type) != parse_type(raw_type)
        ):
            issues.append(ValidationIssue(
                field="type",
                issue_type="inconsistent",
                message=f"Payload type {raw_type!r} does not match {account_type!r}",
                severity="error",
            ))
            return None, None, issues

        claimed = account_type if account_type is not None else raw_type
        parsed = parse_type(claimed)
        if parsed is None:
            allowed = ", ".join(t.value for t in list_types())
            issues.append(ValidationIssue(
                field="type",
                issue_type="missing" if claimed is None else "invalid_value",
                message=(
                    "Account type is required" if claimed is None
                    else f"Unknown account type {claimed!r}"
                ),
                severity="error",
                suggested_fix=f"Use one of: {allowed}",
            ))
            return None, None, issues

        data["type"] = parsed.value

        if "balance" in data:
            data.pop("balance")
            issues.append(ValidationIssue(
                field="balance",
                issue_type="ignored",
                message="Balance is derived from the account fields; the supplied value was ignored",
                severity="info",
            ))

        if data.get("currency") in (None, ""):
            data["currency"] = self._settings.default_currency

        model = get_spec(parsed).model
        try:
            record = model.model_validate(data)
        except PydanticValidationError as e:
            issues.extend(issues_from_validation_error(e))
            return None, parsed.value, issues

        return record, parsed.value, issues

    def _validate_semantic(
        self,
        record: BaseAccount,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 2: Semantic validation.

        Checks run by account family, so a new type in an existing
        family gets them without changes here.

        Returns: (is_valid, list_of_issues)
        """
        issues = []
        family = get_spec(record.type).family

        issues.extend(self._check_item_ids(record))
        issues.extend(self._check_amounts(record))

        if family == AccountFamily.INVESTMENT:
            issues.extend(self._check_holdings(record))
        elif family == AccountFamily.CREDIT:
            issues.extend(self._check_credit_limits(record))
        elif family == AccountFamily.BANKING:
            issues.extend(self._check_minimum_balance(record))
        elif family == AccountFamily.LOAN:
            issues.extend(self._check_loan(record))
        elif family == AccountFamily.INCOME:
            issues.extend(self._check_payroll(record))

        is_valid = not any(issue.severity == "error" for issue in issues)

        return is_valid, issues

    def _check_item_ids(self, record: BaseAccount) -> list[ValidationIssue]:
        """Ids supplied for nested items must be unique within their list."""
        issues = []
        for name in keyed_list_fields(record.type):
            ids = [item.id for item in getattr(record, name) if item.id is not None]
            for item_id, count in Counter(ids).items():
                if count > 1:
                    issues.append(ValidationIssue(
                        field=to_camel(name),
                        issue_type="duplicate_id",
                        message=f"Id {item_id!r} is used by {count} items",
                        severity="error",
                        suggested_fix="Remove the ids and let new ones be assigned",
                    ))
        return issues

    def _check_amounts(self, record: BaseAccount) -> list[ValidationIssue]:
        """Flag top-level amounts beyond the configured sanity limit."""
        issues = []
        limit = self._settings.max_reasonable_amount
        for field in fields_for(record.type):
            if field.kind != "number" or field.derived:
                continue
            value = getattr(record, field.name)
            if abs(value) > limit:
                issues.append(ValidationIssue(
                    field=field.alias,
                    issue_type="suspicious_value",
                    message=f"Amount ({value:,.2f}) seems unusually high",
                    severity="warning",
                    suggested_fix="Please verify this amount is correct",
                ))
        return issues

    def _check_holdings(self, record: BaseAccount) -> list[ValidationIssue]:
        issues = []
        tickers = Counter(holding.ticker for holding in record.holdings)
        for ticker, count in tickers.items():
            if count > 1:
                issues.append(ValidationIssue(
                    field="holdings",
                    issue_type="duplicate_value",
                    message=f"Ticker {ticker} appears {count} times",
                    severity="warning",
                    suggested_fix="Combine the positions into one holding",
                ))
        return issues

    def _check_credit_limits(self, record: BaseAccount) -> list[ValidationIssue]:
        issues = []
        if record.total_limit > 0 and record.current_limit > record.total_limit:
            issues.append(ValidationIssue(
                field="currentLimit",
                issue_type="inconsistent",
                message="Current limit is higher than the total limit",
                severity="warning",
                suggested_fix="Please verify both limits",
            ))
        if record.total_limit > 0 and abs(record.outstanding_debt) > record.total_limit:
            issues.append(ValidationIssue(
                field="outstandingDebt",
                issue_type="inconsistent",
                message="Outstanding debt exceeds the total limit",
                severity="warning",
                suggested_fix="Please verify the debt and the limit",
            ))
        return issues

    def _check_minimum_balance(self, record: BaseAccount) -> list[ValidationIssue]:
        if record.current_amount < record.minimum_balance_requirement:
            return [ValidationIssue(
                field="currentAmount",
                issue_type="below_minimum",
                message="Current amount is below the minimum balance requirement",
                severity="warning",
                suggested_fix="A minimum balance fee may apply",
            )]
        return []

    def _check_loan(self, record: BaseAccount) -> list[ValidationIssue]:
        issues = []
        if (
            record.loan_start_date
            and record.loan_end_date
            and record.loan_end_date < record.loan_start_date
        ):
            issues.append(ValidationIssue(
                field="loanEndDate",
                issue_type="inconsistent",
                message="Loan end date is before the start date",
                severity="warning",
                suggested_fix="Please verify both dates",
            ))
        if record.original_amount > 0 and record.total_paid > record.original_amount:
            issues.append(ValidationIssue(
                field="totalPaid",
                issue_type="inconsistent",
                message="Total paid is higher than the original loan amount",
                severity="warning",
                suggested_fix="Interest may explain this; please verify",
            ))
        return issues

    def _check_payroll(self, record: BaseAccount) -> list[ValidationIssue]:
        issues = []
        if (
            record.pay_period_start_date
            and record.pay_period_end_date
            and record.pay_period_end_date < record.pay_period_start_date
        ):
            issues.append(ValidationIssue(
                field="payPeriodEndDate",
                issue_type="inconsistent",
                message="Pay period end is before its start",
                severity="warning",
                suggested_fix="Please verify the pay period",
            ))
        if record.gross_income > 0:
            if record.net_income > record.gross_income:
                issues.append(ValidationIssue(
                    field="netIncome",
                    issue_type="inconsistent",
                    message="Net income is higher than gross income",
                    severity="warning",
                    suggested_fix="Please verify both incomes",
                ))
            if record.total_withheld > record.gross_income:
                issues.append(ValidationIssue(
                    field="grossIncome",
                    issue_type="inconsistent",
                    message="Withholdings add up to more than gross income",
                    severity="warning",
                    suggested_fix="Please verify the withholding breakdown",
                ))
        return issues

    def validate(
        self,
        payload: Any,
        account_type: Any = None,
    ) -> ValidationResult:
        """
        Run full two-stage validation pipeline.

        Args:
            payload: Untyped account data (form submission or parsed JSON)
            account_type: Claimed type tag. If omitted, the payload's
                `type` is used; if both are given they must agree.

        Returns:
            ValidationResult with all issues found and, when valid,
            the typed record
        """
        all_issues = []

        # Stage 1: Schema validation
        record, resolved_type, schema_issues = self._validate_schema(payload, account_type)
        all_issues.extend(schema_issues)
        schema_valid = record is not None

        # Only run stage 2 if stage 1 passes
        semantic_valid = False
        if schema_valid:
            semantic_valid, semantic_issues = self._validate_semantic(record)
            all_issues.extend(semantic_issues)

        warnings = [issue.message for issue in all_issues if issue.severity == "warning"]
        is_valid = schema_valid and semantic_valid

        return ValidationResult(
            account_type=resolved_type,
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            is_valid=is_valid,
            record=record if is_valid else None,
            issues=all_issues,
            warnings=warnings,
        )

    def validate_json(
        self,
        text: str,
        account_type: Any = None,
    ) -> ValidationResult:
        """
        Validate pasted JSON text.

        Malformed JSON is reported as a single `payload` issue.
        """
        payload, issues = parse_json_payload(text)
        if issues:
            return ValidationResult(
                schema_valid=False,
                semantic_valid=False,
                is_valid=False,
                issues=issues,
            )
        return self.validate(payload, account_type)

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """
        Generate a user-friendly summary of validation results.

        This is what the form shows above its fields.
        """
        if result.is_valid and not result.warnings:
            return "✅ Account details look good."

        lines = []

        if result.has_errors:
            lines.append("❌ Some account details need fixing:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.field}: {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        if result.is_valid:
            lines.append("")
            lines.append("You can still save, but please review carefully.")

        return "\n".join(lines)


def parse_json_payload(text: str) -> tuple[Optional[dict], list[ValidationIssue]]:
    """
    Parse pasted account JSON.

    Returns: (payload_or_None, list_of_issues)
    """
    try:
        payload = json.loads(text)
    except (TypeError, ValueError):
        return None, [ValidationIssue(
            field="payload",
            issue_type="invalid_json",
            message="Invalid JSON format",
            severity="error",
            suggested_fix="Paste a single JSON object describing one account",
        )]
    if not isinstance(payload, dict):
        return None, [ValidationIssue(
            field="payload",
            issue_type="invalid_type",
            message="Account data must be a JSON object",
            severity="error",
        )]
    return payload, []
