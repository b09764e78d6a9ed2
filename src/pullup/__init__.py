# src/pullup/__init__.py

"""PullUp match ledger and rating engine."""
