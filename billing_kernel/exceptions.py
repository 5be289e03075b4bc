"""
Typed Exception Hierarchy for the Billing Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Reporting callers (print preview, CSV export, statement generation) must be
able to tell a recoverable user precondition apart from a data problem
without parsing message strings.

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example:
    try:
        snapshot = service.generate_statement(filter_state)
    except NoContractorSelectedError as e:
        show_notice(e.code)           # "NO_CONTRACTOR_SELECTED"
    except EmptyReportError as e:
        show_notice(f"Nothing to print for {e.report_kind}")

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    BillingKernelError (base)
    |
    +-- ValidationError
    |   +-- NoContractorSelectedError
    |   +-- EmptyReportError
    |
    +-- DataIntegrityError
    |   +-- ContractorNotFoundError
    |   +-- ContractNotFoundError
    |   +-- BillNotFoundError
    |
    +-- AccessDeniedError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                    | When Raised
----------------|-------------------------|-------------------------------------
Validation      | NO_CONTRACTOR_SELECTED  | Statement requested for "all"
                | EMPTY_REPORT            | Export/print with zero matching rows
----------------|-------------------------|-------------------------------------
Data integrity  | CONTRACTOR_NOT_FOUND    | Contractor id not in the directory
                | CONTRACT_NOT_FOUND      | Contract id not in the contract list
                | BILL_NOT_FOUND          | Bill id not in the record store
----------------|-------------------------|-------------------------------------
Access          | ACCESS_DENIED           | Audit view without audit permission

===============================================================================
HANDLING PATTERNS
===============================================================================

1. VALIDATION ERRORS are blocking but recoverable. The caller changes its
   input (selects a contractor, widens the filters) and re-invokes. Retrying
   with the same input is pointless: every operation is deterministic.

2. DATA INTEGRITY inside summaries is NOT raised. Summary builders skip an
   item whose contract cannot be resolved and report the number of skipped
   items on the result. ContractNotFoundError, ContractorNotFoundError and
   BillNotFoundError are raised only by explicit single-entity lookups.

===============================================================================
"""


class BillingKernelError(Exception):
    """
    Base exception for all billing kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "BILLING_KERNEL_ERROR"


# Validation errors


class ValidationError(BillingKernelError):
    """An operation was requested whose precondition is not met."""

    code: str = "VALIDATION_ERROR"


class NoContractorSelectedError(ValidationError):
    """A contractor-scoped operation was requested with the "all" selector."""

    code: str = "NO_CONTRACTOR_SELECTED"

    def __init__(self, operation: str = "statement"):
        self.operation = operation
        super().__init__(
            f"No contractor selected: select a specific contractor to "
            f"generate a {operation}"
        )


class EmptyReportError(ValidationError):
    """Export or print was requested but no records match the filters."""

    code: str = "EMPTY_REPORT"

    def __init__(self, report_kind: str):
        self.report_kind = report_kind
        super().__init__(
            f"No data available for report '{report_kind}' with the selected filters"
        )


# Data integrity errors


class DataIntegrityError(BillingKernelError):
    """A referenced entity could not be resolved."""

    code: str = "DATA_INTEGRITY_ERROR"


class ContractorNotFoundError(DataIntegrityError):
    """Contractor id is not present in the contractor directory."""

    code: str = "CONTRACTOR_NOT_FOUND"

    def __init__(self, contractor_id: int):
        self.contractor_id = contractor_id
        super().__init__(f"Contractor not found: {contractor_id}")


class ContractNotFoundError(DataIntegrityError):
    """Contract id is not present in the contract list."""

    code: str = "CONTRACT_NOT_FOUND"

    def __init__(self, contract_id: int):
        self.contract_id = contract_id
        super().__init__(f"Contract not found: {contract_id}")


class BillNotFoundError(DataIntegrityError):
    """Bill id is not present in the record store."""

    code: str = "BILL_NOT_FOUND"

    def __init__(self, bill_id: str):
        self.bill_id = bill_id
        super().__init__(f"Bill not found: {bill_id}")


# Access errors


class AccessDeniedError(BillingKernelError):
    """The resolved actor lacks the permission the view requires."""

    code: str = "ACCESS_DENIED"

    def __init__(self, view: str, actor_id: str | None = None):
        self.view = view
        self.actor_id = actor_id
        super().__init__(f"Access denied to '{view}' for actor {actor_id}")
