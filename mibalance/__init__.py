"""
mibalance
~~~~~~~~~

Personal finance tracking API. Users record income and expense transactions
against their own categories, plan monthly budgets and savings goals, and read
back derived analytics (balance, category breakdown, monthly trends).

The analytics logic lives in :mod:`mibalance.utils.analyzer` and is kept free
of database access so it can be reused by routes, scripts and tests alike.
"""

__version__ = "1.0.0"
