"""
Stock Kernel

Read-only foundations for the inventory movement ledger reconciliation
report:
- Pure domain types for movements, lines, balance keys and snapshots
- Ports for the movement store, snapshot provider and product catalog
- SQLAlchemy adapters implementing those ports
- Structured JSON logging and a typed exception hierarchy
"""

__version__ = "0.1.0"
