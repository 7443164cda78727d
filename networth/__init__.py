"""
Net Worth Dashboard - Source Package

The account model, validation and persistence core of a personal
finance dashboard, plus the flows that hand account data to an
LLM assistant.

DESIGN PRINCIPLES:
1. One registry describes every account type
2. Balance is derived, never entered
3. Validation reports, it never silently corrects
4. Only the storage adapter touches persisted slots
5. The last external write wins
"""

__version__ = "1.0.0"
__author__ = "Net Worth Dashboard Team"
