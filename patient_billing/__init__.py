"""
Patient Billing Kernel

Tracks patients and the invoices raised against them:
- Patient registration and lookup
- Invoice creation with referential and amount validation
- One-way pending -> paid lifecycle
- Multi-predicate invoice queries
"""

__version__ = "0.1.0"
