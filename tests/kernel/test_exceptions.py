"""Tests for the typed exception hierarchy."""

import pytest

from billing_kernel.exceptions import (
    AccessDeniedError,
    BillNotFoundError,
    BillingKernelError,
    ContractNotFoundError,
    ContractorNotFoundError,
    DataIntegrityError,
    EmptyReportError,
    NoContractorSelectedError,
    ValidationError,
)


@pytest.mark.parametrize(
    "exc, code, parent",
    [
        (NoContractorSelectedError(), "NO_CONTRACTOR_SELECTED", ValidationError),
        (EmptyReportError("details"), "EMPTY_REPORT", ValidationError),
        (ContractorNotFoundError(3), "CONTRACTOR_NOT_FOUND", DataIntegrityError),
        (ContractNotFoundError(9), "CONTRACT_NOT_FOUND", DataIntegrityError),
        (BillNotFoundError("b-404"), "BILL_NOT_FOUND", DataIntegrityError),
        (AccessDeniedError("audit"), "ACCESS_DENIED", BillingKernelError),
    ],
)
def test_codes_and_hierarchy(exc, code, parent):
    assert exc.code == code
    assert isinstance(exc, parent)
    assert isinstance(exc, BillingKernelError)


def test_structured_fields():
    assert NoContractorSelectedError("tax summary").operation == "tax summary"
    assert EmptyReportError("station").report_kind == "station"
    assert ContractorNotFoundError(3).contractor_id == 3
    assert ContractNotFoundError(9).contract_id == 9
    assert BillNotFoundError("b-404").bill_id == "b-404"
    denied = AccessDeniedError("audit", "clerk-7")
    assert (denied.view, denied.actor_id) == ("audit", "clerk-7")


def test_messages_name_the_subject():
    assert "statement" in str(NoContractorSelectedError())
    assert "details" in str(EmptyReportError("details"))
    assert "3" in str(ContractorNotFoundError(3))
