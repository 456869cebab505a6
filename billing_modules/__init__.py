"""
Billing modules: analytics reports and fee adjustment.

Each module owns its config, its service (the transaction boundary) and
its report or result models.  Modules call engines for calculation and
kernel selectors/services for persistence.
"""
