"""
Cashbook Kernel

Shared foundation for the branch cashbook reconciliation packages:
- Typed, coded exceptions
- Structured JSON logging
- Decimal amounts, date-only values and calendar months
- Persistence of raw daily movements (SQLAlchemy)
"""

__version__ = "0.1.0"
