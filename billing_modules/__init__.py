"""
Billing Modules.

Thin orchestration layers over the Billing Kernel.

Modules:
- Reporting: Bill filtering, summaries, contractor statements, exports
"""

from billing_modules import reporting

__all__ = [
    "reporting",
]
