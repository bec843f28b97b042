"""
Form Input Validation

Raw form values (strings typed by the user) are parsed and checked here
before anything touches the document.

IMPORTANT: Validation never raises and never creates anything. A rejected
submission simply produces no entry; the returned ValidationResult lists
the issues so a form can explain what went wrong.
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

from finledger.config import get_settings
from finledger.config.settings import LedgerSettings
from finledger.models.ledger import EntryKind, ValidationIssue, ValidationResult
from finledger.periods import parse_local_date


CENTS = Decimal("0.01")

CURRENCY_MARKERS = ("R$", "US$", "$", "€", "£")


def parse_amount(value: Any) -> Optional[Decimal]:
    """
    Parse a user-typed amount.

    Accepts numbers and strings such as "1200", "1200,50", "R$ 99.90" or
    "1.234,56". Returns None for anything that is not a finite number.
    The result is rounded to cents.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float)):
        number = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        for marker in CURRENCY_MARKERS:
            text = text.replace(marker, "")
        text = text.replace(" ", "")
        if "," in text and "." in text:
            # 1.234,56 style
            text = text.replace(".", "").replace(",", ".")
        else:
            text = text.replace(",", ".")
        if not text:
            return None
        try:
            number = Decimal(text)
        except InvalidOperation:
            return None
    else:
        return None

    if not number.is_finite():
        return None
    try:
        return number.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # too many digits for the decimal context
        return None


def parse_recurrence(value: Any) -> Optional[int]:
    """
    Parse a recurrence count. Blank means 0; negatives and non-integers
    are invalid (None).
    """
    if value is None or value == "":
        return 0
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        count = value
    elif isinstance(value, str) and value.strip().lstrip("-").isdigit():
        count = int(value.strip())
    else:
        return None
    return count if count >= 0 else None


class EntryValidator:
    """Checks income / expense / card-due form submissions."""

    def __init__(self, settings: Optional[LedgerSettings] = None):
        self._settings = settings or get_settings().ledger

    def validate(
        self,
        kind: EntryKind,
        name: Any,
        amount: Any,
        entry_date: Any,
        category: Any = None,
        recurrence: Any = 0,
        known_types: Optional[list[str]] = None,
    ) -> ValidationResult:
        """
        Validate one submission.

        Args:
            kind: Which list the entry is meant for
            name: Entry name as typed
            amount: Amount as typed
            entry_date: Date (ISO string or date)
            category: Category; required for expenses
            recurrence: Number of following months to repeat the entry in
            known_types: Current category list, for an unknown-category warning

        Returns:
            ValidationResult with parsed values and any issues
        """
        result = ValidationResult()
        issues = result.issues

        # Name
        clean_name = name.strip() if isinstance(name, str) else ""
        if not clean_name:
            issues.append(ValidationIssue(
                field="name",
                issue_type="missing",
                message="A name is required",
            ))
        else:
            result.name = clean_name

        # Amount
        parsed_amount = parse_amount(amount)
        if parsed_amount is None:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing" if amount in (None, "") else "invalid_value",
                message="Amount is required and must be a number",
            ))
        elif parsed_amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than zero",
            ))
        else:
            result.amount = parsed_amount

        # Date
        result.entry_date = self._validate_date(entry_date, issues)

        # Category
        clean_category = category.strip() if isinstance(category, str) else None
        if kind == EntryKind.EXPENSE:
            if not clean_category:
                issues.append(ValidationIssue(
                    field="category",
                    issue_type="missing",
                    message="Expenses need a category",
                ))
            elif known_types is not None and clean_category not in known_types:
                issues.append(ValidationIssue(
                    field="category",
                    issue_type="unknown_category",
                    message=f"Category {clean_category!r} is not in the category list",
                    severity="warning",
                ))
        result.category = clean_category or None

        # Recurrence
        count = parse_recurrence(recurrence)
        if count is None:
            issues.append(ValidationIssue(
                field="recurrence",
                issue_type="invalid_value",
                message="Recurrence must be a whole number of months (0 or more)",
            ))
        elif count > self._settings.max_recurrence_months:
            issues.append(ValidationIssue(
                field="recurrence",
                issue_type="invalid_value",
                message=(
                    f"Recurrence cannot exceed "
                    f"{self._settings.max_recurrence_months} months"
                ),
            ))
        else:
            result.recurrence = count

        return result

    def _validate_date(
        self,
        value: Any,
        issues: list[ValidationIssue],
    ) -> Optional[date]:
        if value is None or value == "":
            issues.append(ValidationIssue(
                field="entry_date",
                issue_type="missing",
                message="A date is required",
            ))
            return None
        try:
            return parse_local_date(value)
        except ValueError:
            issues.append(ValidationIssue(
                field="entry_date",
                issue_type="invalid_format",
                message=f"Not a valid date: {value!r} (expected YYYY-MM-DD)",
            ))
            return None

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """Short text a form can show under the submit button."""
        if result.is_valid and not result.issues:
            return "All good."

        lines = []
        errors = [i for i in result.issues if i.severity == "error"]
        warnings = [i for i in result.issues if i.severity == "warning"]

        if errors:
            lines.append("Please fix the following:")
            for issue in errors:
                lines.append(f"   • {issue.message}")
        if warnings:
            if lines:
                lines.append("")
            lines.append("Please check:")
            for issue in warnings:
                lines.append(f"   • {issue.message}")

        return "\n".join(lines)
