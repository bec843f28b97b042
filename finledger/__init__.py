"""
Finledger - Source Package

A personal finance ledger organised by calendar month: incomes,
expenses and credit-card dues, recurring entries, savings goals and
notes, all kept in one locally persisted document.

DESIGN PRINCIPLES:
1. The in-memory document is authoritative
2. A failed save never loses or rolls back data
3. Destructive actions need explicit confirmation
4. Every structural change is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Finledger Team"
