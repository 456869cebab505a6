"""
Billing Kernel

The reconciliation core of the practice-management billing system:
- Exact decimal money arithmetic
- Adjustable-amount bookkeeping for fee and write-off edits
- Read-only selectors over appointments, invoices and payments
- Structured logging and typed errors
"""

__version__ = "0.1.0"
