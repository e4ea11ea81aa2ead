"""
dancecomp - fee and financial reconciliation engine for dance competitions.

Computes tiered entry fees, group shares, outstanding balances, event
mutation safety verdicts and medal tiers over records supplied by the
surrounding application.
"""

__version__ = "0.1.0"
