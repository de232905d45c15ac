"""
BudgetBuddy - Core Package

The state layer behind a student budget tracker: expenses, category
limits, over-budget alerts and the derived numbers the screens show.

DESIGN PRINCIPLES:
1. One owned snapshot per session, replaced whole on every mutation
2. Every mutation writes through to storage
3. Derived values are computed on read, never stored
4. Every step must be auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "BudgetBuddy Team"
