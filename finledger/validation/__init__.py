"""Form input validation package."""

from finledger.validation.validator import (
    EntryValidator,
    parse_amount,
    parse_recurrence,
)

__all__ = ["EntryValidator", "parse_amount", "parse_recurrence"]
