"""
PayTracker Kernel

The record layer of the freelance income ledger:
- Immutable Employer / WorkEntry / Payment records
- Typed exceptions with machine-readable codes
- Structured JSON logging
- Slot-based persistence with whole-collection replacement
"""

__version__ = "0.1.0"
