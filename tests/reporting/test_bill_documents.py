"""
Per-bill print tests: the transportation bill and its audit summary.

Bill B-002 from the shared fixtures is used throughout: two items, gross
1500, income tax 100 plus 50 "Late delivery", net 1350.
"""

from dataclasses import replace
from datetime import UTC, datetime

import pytest

from billing_kernel.exceptions import BillNotFoundError, EmptyReportError
from billing_modules.reporting.config import DEFAULT_CERTIFICATION_POINTS, ReportingConfig
from billing_modules.reporting.export import (
    build_bill_audit_summary,
    build_bill_document,
    render_to_dict,
)
from billing_modules.reporting.models import BillDocumentKind, FilterState


@pytest.fixture
def acme_b002(bills):
    return bills[1]


def _section(document, heading):
    (section,) = [s for s in document.sections if s.heading == heading]
    return section


# ---------------------------------------------------------------------------
# Transportation bill
# ---------------------------------------------------------------------------


class TestBillDocument:
    def test_title_header_and_kind(self, acme_b002):
        document = build_bill_document(acme_b002)
        assert document.kind is BillDocumentKind.BILL
        assert document.title == "Transportation Bill"
        assert document.header_lines[1] == "Directorate of Food"
        assert document.filter_summary == ()

    def test_bill_to_block(self, acme_b002):
        lines = dict(_section(build_bill_document(acme_b002), "Bill To").lines)
        assert lines == {
            "Contractor": "Acme",
            "Sanctioned No": "SN-1",
            "Bill #": "B-002",
            "Bill Date": "2024-02-05",
        }

    def test_missing_sanctioned_no(self, acme_b002):
        bill = replace(acme_b002, sanctioned_no="")
        lines = dict(_section(build_bill_document(bill), "Bill To").lines)
        assert lines["Sanctioned No"] == "N/A"

    def test_item_rows_numbered_in_entry_order(self, acme_b002):
        items = _section(build_bill_document(acme_b002), "Items")
        assert items.columns == ("S#", "From", "To", "Bags", "Net KGs", "Rate/Kg", "Amount")
        assert items.rows == (
            ("1", "Rawalpindi", "Muzaffarabad", "10", "250.00", "2.0000", "Rs. 500.00"),
            ("2", "Muzaffarabad", "Bagh", "10", "400.00", "2.5000", "Rs. 1,000.00"),
        )

    def test_only_positive_deductions_listed(self, acme_b002):
        deductions = _section(build_bill_document(acme_b002), "Deductions")
        assert deductions.lines == (
            ("Income Tax", "Rs. 100.00"),
            ("Late delivery", "Rs. 50.00"),
        )

    def test_no_deduction_section_without_deductions(self, bills):
        document = build_bill_document(bills[2])
        assert [s.heading for s in document.sections] == [
            "Bill To",
            "Items",
            "Summary",
            "Certification",
        ]

    def test_summary(self, acme_b002):
        lines = _section(build_bill_document(acme_b002), "Summary").lines
        assert lines == (
            ("Grand Total", "Rs. 1,500.00"),
            ("Total Deductions", "(-) Rs. 150.00"),
            ("Net Amount Payable", "Rs. 1,350.00"),
        )

    def test_default_certification(self, acme_b002):
        certification = _section(build_bill_document(acme_b002), "Certification")
        assert len(certification.lines) == 8
        assert certification.lines[0] == (
            "1.",
            "The amount claimed in the bill is claimed for the first time.",
        )
        assert [point for _, point in certification.lines] == list(DEFAULT_CERTIFICATION_POINTS)
        assert certification.notes[0].startswith("Countersigned and forwarded")

    def test_bill_certification_overrides_default(self, acme_b002):
        bill = replace(acme_b002, certification_points=("Weights verified", "Rates checked"))
        certification = _section(build_bill_document(bill), "Certification")
        assert certification.lines == (("1.", "Weights verified"), ("2.", "Rates checked"))

    def test_signatures_and_footer(self, acme_b002):
        document = build_bill_document(
            acme_b002, generated_at=datetime(2024, 3, 15, 9, 30, tzinfo=UTC)
        )
        assert document.signatures == (
            ("Accounts Officer Food", "(AJK) Rawalpindi"),
            ("Assistant Director Food(DDO)", "(AJK) Rawalpindi"),
        )
        assert document.footer == "Generated by FDBMS on 2024-03-15 09:30:00"

    def test_configured_labels(self, acme_b002):
        config = ReportingConfig.from_dict(
            {"currency_label": "PKR", "deduction_labels": {"income_tax": "WHT"}}
        )
        deductions = _section(build_bill_document(acme_b002, config), "Deductions")
        assert deductions.lines[0] == ("WHT", "PKR 100.00")

    def test_renders_to_plain_data(self, acme_b002):
        data = render_to_dict(build_bill_document(acme_b002))
        assert data["kind"] == "bill"
        assert data["signatures"][0] == ["Accounts Officer Food", "(AJK) Rawalpindi"]


# ---------------------------------------------------------------------------
# Audit summary
# ---------------------------------------------------------------------------


class TestBillAuditSummary:
    def test_title_and_subtitle(self, bills):
        document = build_bill_audit_summary(bills[0])
        assert document.kind is BillDocumentKind.AUDIT_SUMMARY
        assert document.title == "Audit Summary"
        assert document.header_lines[-1] == "Bill #B-001 for Acme"

    def test_every_category_listed(self, bills):
        breakdown = _section(build_bill_audit_summary(bills[0]), "Deductions Breakdown")
        assert breakdown.lines == (
            ("Penalty", "(-) Rs. 0.00"),
            ("Income Tax", "(-) Rs. 80.00"),
            ("Tajveed-ul Quran", "(-) Rs. 0.00"),
            ("Education Cess", "(-) Rs. 0.00"),
            ("K.L.C", "(-) Rs. 20.00"),
            ("S.D Current", "(-) Rs. 0.00"),
            ("GST Current", "(-) Rs. 0.00"),
            ("Others", "(-) Rs. 0.00"),
        )

    def test_others_uses_description(self, acme_b002):
        breakdown = _section(build_bill_audit_summary(acme_b002), "Deductions Breakdown")
        assert breakdown.lines[-1] == ("Late delivery", "(-) Rs. 50.00")

    def test_totals(self, acme_b002):
        document = build_bill_audit_summary(acme_b002)
        assert _section(document, "Grand Total Amount").lines == (
            ("Grand Total Amount", "Rs. 1,500.00"),
        )
        assert _section(document, "Totals").lines == (
            ("Total Deductions", "(-) Rs. 150.00"),
            ("Net Amount Payable", "Rs. 1,350.00"),
        )

    def test_signatures(self, bills):
        document = build_bill_audit_summary(bills[0])
        assert [title for title, _ in document.signatures] == [
            "Prepared By",
            "Checked By",
            "Approved By",
        ]
        assert document.footer == "Generated by FDBMS"


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


class TestCertificationConfig:
    def test_lists_coerced_to_tuples(self):
        config = ReportingConfig.from_dict(
            {
                "certification_points": ["Checked"],
                "bill_signatories": [["Director", "Food"]],
            }
        )
        assert config.certification_points == ("Checked",)
        assert config.bill_signatories == (("Director", "Food"),)

    def test_empty_certification_rejected(self):
        with pytest.raises(ValueError):
            ReportingConfig(certification_points=())

    def test_signatory_must_be_pair(self):
        with pytest.raises(ValueError):
            ReportingConfig(audit_signatories=(("Prepared By",),))


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class TestServiceBillDocuments:
    def test_bill_document_by_id(self, reporting_service, captured_logs):
        document = reporting_service.bill_document("bill-B-002")
        assert dict(_section(document, "Bill To").lines)["Bill #"] == "B-002"
        assert document.footer == "Generated by FDBMS on 2024-03-15 09:30:00"

        built = [r for r in captured_logs() if r["message"] == "report_document_built"]
        assert built[0]["bill_number"] == "B-002"
        assert built[0]["report_kind"] == "bill"

    def test_audit_summary_by_id(self, reporting_service):
        document = reporting_service.bill_audit_summary("bill-B-001")
        assert document.header_lines[-1] == "Bill #B-001 for Acme"

    @pytest.mark.parametrize("method", ["bill_document", "bill_audit_summary"])
    def test_unknown_bill(self, reporting_service, method):
        with pytest.raises(BillNotFoundError) as exc:
            getattr(reporting_service, method)("bill-B-999")
        assert exc.value.bill_id == "bill-B-999"

    def test_documents_for_filtered_bills(self, reporting_service, captured_logs):
        documents = reporting_service.bill_documents(FilterState(contractor_id=2))
        numbers = [dict(_section(d, "Bill To").lines)["Bill #"] for d in documents]
        assert numbers == ["B-003", "B-004"]

        (built,) = [r for r in captured_logs() if r["message"] == "bill_documents_built"]
        assert built["bill_count"] == 2

    def test_documents_for_no_bills(self, reporting_service):
        with pytest.raises(EmptyReportError):
            reporting_service.bill_documents(FilterState(search="no-such-bill"))
