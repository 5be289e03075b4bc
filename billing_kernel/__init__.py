"""
Billing Kernel

Shared infrastructure for the transport billing reporting engine:
- Structured JSON logging
- Typed exception hierarchy with machine-readable codes
- Injectable clock
- Immutable record DTOs and the record-store boundary
"""

__version__ = "0.1.0"
