"""
Recurrence Materializer

A recurring entry is expanded eagerly, once, when it is created: the base
entry plus one independent copy per following month. There is no recurrence
rule kept around afterwards; each copy can be edited or deleted on its own.
"""

from uuid import uuid4

from finledger.models.ledger import Entry
from finledger.periods import add_months


def materialize(base: Entry, count: int = 0) -> list[Entry]:
    """
    Expand an entry into its monthly occurrences.

    Returns the base entry followed by `count` copies dated
    base + 1 month, ..., base + count months. Every copy gets a fresh id;
    all other fields are copied verbatim. Each month offset is computed
    from the base date, so a 31st keeps snapping back to the 31st where
    the month has one.

    Raises:
        ValueError: If count is negative
    """
    if count is None:
        count = 0
    if count < 0:
        raise ValueError(f"Recurrence count cannot be negative: {count}")

    entries = [base]
    for offset in range(1, count + 1):
        entries.append(base.model_copy(
            update={
                "id": uuid4(),
                "entry_date": add_months(base.entry_date, offset),
                "tags": list(base.tags),
            },
        ))
    return entries
