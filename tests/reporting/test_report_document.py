"""
Report document tests.

The document is renderer-agnostic: these tests check titles, the filter
block, per-kind sections and the empty-report preconditions.
"""

import json
from datetime import UTC, date, datetime

import pytest

from billing_kernel.exceptions import EmptyReportError, NoContractorSelectedError
from billing_modules.reporting.config import ReportingConfig
from billing_modules.reporting.export import build_report_document, format_details
from billing_modules.reporting.models import (
    FilterState,
    ReportInputs,
    ReportKind,
    StatementPeriod,
)
from billing_modules.reporting.statement import generate_statement

GENERATED_AT = datetime(2024, 3, 15, 9, 30, tzinfo=UTC)


def _document(kind, inputs, state=None, config=None):
    return build_report_document(
        kind,
        inputs,
        state or FilterState(),
        config or ReportingConfig(),
        generated_at=GENERATED_AT,
    )


@pytest.fixture
def inputs(bills, contracts, contractors, audit_entries):
    return ReportInputs(
        bills=bills,
        contracts=contracts,
        contractors=contractors,
        audit_entries=audit_entries,
    )


# =========================================================================
# Frame: title, header, filter block, footer
# =========================================================================


class TestDocumentFrame:
    @pytest.mark.parametrize(
        "kind, title",
        [
            (ReportKind.DETAILS, "Bill Details Report"),
            (ReportKind.CONTRACTOR, "Contractor Summary Report"),
            (ReportKind.CONTRACT, "Contract-wise Summary Report"),
            (ReportKind.STATION, "Station Summary Report"),
            (ReportKind.MONTHLY, "Monthly Summary Report"),
            (ReportKind.DEDUCTIONS, "Deductions Summary Report"),
            (ReportKind.AUDIT, "Audit Log Report"),
        ],
    )
    def test_titles(self, inputs, kind, title):
        assert _document(kind, inputs).title == title

    def test_contractor_titles(self, inputs):
        state = FilterState(contractor_id=1)
        assert _document(ReportKind.TAX_SUMMARY, inputs, state).title == (
            "Tax Deduction Summary for Acme"
        )

    def test_header_and_footer(self, inputs):
        doc = _document(ReportKind.DETAILS, inputs)
        assert doc.header_lines == (
            "Azad Govt of the State of Jammu & Kashmir",
            "Directorate of Food",
            "D-151 Satellite Town, Rwp",
        )
        assert doc.footer == "Report generated by FDBMS on 2024-03-15 09:30:00"

    def test_footer_without_timestamp(self, inputs):
        doc = build_report_document(ReportKind.DETAILS, inputs, FilterState())
        assert doc.footer == "Report generated by FDBMS"

    def test_filter_block_defaults(self, inputs):
        doc = _document(ReportKind.DETAILS, inputs)
        assert doc.filter_summary == (
            ("Contractor", "All"),
            ("Route", "All"),
            ("Date Range", "N/A to N/A"),
        )

    def test_filter_block_with_selection(self, inputs):
        state = FilterState(
            contractor_id=2,
            route="Rawalpindi -> Kotli",
            start_date=date(2024, 1, 1),
        )
        doc = _document(ReportKind.CONTRACTOR, inputs, state)
        assert dict(doc.filter_summary) == {
            "Contractor": "Bolt Transport",
            "Route": "Rawalpindi -> Kotli",
            "Date Range": "2024-01-01 to N/A",
        }

    def test_audit_filter_block(self, inputs):
        state = FilterState(audit_action="LOGIN")
        summary = dict(_document(ReportKind.AUDIT, inputs, state).filter_summary)
        assert summary["Action"] == "LOGIN"
        assert summary["Search"] == "N/A"

    def test_custom_system_name(self, inputs):
        config = ReportingConfig(system_name="Transport Billing")
        doc = _document(ReportKind.DETAILS, inputs, config=config)
        assert doc.footer.startswith("Report generated by Transport Billing on")


# =========================================================================
# Preconditions
# =========================================================================


class TestPreconditions:
    @pytest.mark.parametrize(
        "kind",
        [
            ReportKind.DETAILS,
            ReportKind.CONTRACTOR,
            ReportKind.CONTRACT,
            ReportKind.STATION,
            ReportKind.MONTHLY,
            ReportKind.DEDUCTIONS,
            ReportKind.TAX_SUMMARY,
        ],
    )
    def test_no_bills(self, audit_entries, kind):
        with pytest.raises(EmptyReportError) as exc_info:
            _document(kind, ReportInputs(audit_entries=audit_entries), FilterState(contractor_id=1))
        assert exc_info.value.report_kind == kind.value

    def test_audit_needs_entries_not_bills(self, bills, audit_entries):
        with pytest.raises(EmptyReportError):
            _document(ReportKind.AUDIT, ReportInputs(bills=bills))
        doc = _document(ReportKind.AUDIT, ReportInputs(audit_entries=audit_entries))
        assert len(doc.sections[0].rows) == 3

    def test_statement_needs_snapshot(self, inputs):
        with pytest.raises(EmptyReportError):
            _document(ReportKind.STATEMENT, inputs, FilterState(contractor_id=1))

    def test_tax_summary_needs_contractor(self, inputs):
        with pytest.raises(NoContractorSelectedError):
            _document(ReportKind.TAX_SUMMARY, inputs)


# =========================================================================
# Bodies
# =========================================================================


class TestBodies:
    def test_details(self, inputs):
        (section,) = _document(ReportKind.DETAILS, inputs).sections
        assert section.columns == ("Bill #", "Date", "Contractor", "Gross", "Deductions", "Net Amount")
        assert section.rows[0] == ("B-001", "2024-01-10", "Acme", "1,000.00", "100.00", "900.00")
        assert section.total_row == ("Total", "", "4 bills", "3,700.00", "290.00", "3,410.00")

    def test_contractor(self, inputs):
        (section,) = _document(ReportKind.CONTRACTOR, inputs).sections
        assert section.columns == ("Contractor", "Bills", "Net Amount")
        assert section.rows == (
            ("Acme", "2", "2,250.00"),
            ("Bolt Transport", "2", "1,160.00"),
        )

    def test_contract_sections_break_pages(self, inputs):
        sections = _document(ReportKind.CONTRACT, inputs).sections
        assert [s.heading for s in sections] == [
            "Acme (Rawalpindi → Muzaffarabad)",
            "Bolt Transport (Rawalpindi → Kotli)",
            "Acme (Muzaffarabad → Bagh)",
        ]
        assert [s.page_break_before for s in sections] == [False, True, True]
        first = sections[0]
        assert first.columns == ("Bill #", "Date", "Net KGs", "Amount")
        assert first.rows == (
            ("B-001", "2024-01-10", "500", "1,000.00"),
            ("B-002", "2024-02-05", "250", "500.00"),
        )
        assert first.total_row == ("Contract Total:", "", "750", "1,500.00")

    def test_station_sections(self, inputs):
        sections = _document(ReportKind.STATION, inputs).sections
        assert sections[0].heading == "Station: Rawalpindi"
        assert sections[0].columns == (
            "Bill #",
            "Date",
            "Contractor",
            "Kgs Dispatched",
            "Kgs Received",
        )
        assert all(row[4] == "-" for row in sections[0].rows)
        muzaffarabad = sections[1]
        assert muzaffarabad.rows == (
            ("B-001", "2024-01-10", "Acme", "-", "500"),
            ("B-002", "2024-02-05", "Acme", "400", "250"),
        )
        assert sections[1].page_break_before

    def test_monthly(self, inputs):
        (section,) = _document(ReportKind.MONTHLY, inputs).sections
        assert section.rows == (("2024-02", "2", "2,150.00"), ("2024-01", "2", "1,260.00"))

    def test_deductions_use_labels(self, inputs):
        (section,) = _document(ReportKind.DEDUCTIONS, inputs).sections
        labels = [row[0] for row in section.rows]
        assert labels == [
            "Penalty",
            "Income Tax",
            "Tajveed-ul Quran",
            "Education Cess",
            "K.L.C",
            "S.D Current",
            "GST Current",
            "Others",
        ]
        assert section.total_row == ("Total Deductions", "290.00")

    def test_tax_summary(self, inputs):
        (section,) = _document(
            ReportKind.TAX_SUMMARY, inputs, FilterState(contractor_id=1)
        ).sections
        assert section.columns[:4] == ("Bill #", "Date", "Net KGs", "Gross Amount")
        assert section.columns[-2:] == ("Total Deductions", "Net Amount")
        assert len(section.rows) == 2
        assert section.total_row[0] == "Total"
        assert section.total_row[-1] == "2,250.00"

    def test_audit_details_dumped_as_json(self, inputs):
        (section,) = _document(ReportKind.AUDIT, inputs).sections
        assert section.columns == ("Timestamp", "User", "Action", "Details")
        row = section.rows[1]
        assert row[:3] == ("2024-03-10 23:59:00", "clerk", "CREATE_BILL")
        assert json.loads(row[3]) == {"bill_number": "B-003"}
        assert row[3] == format_details({"bill_number": "B-003"})

    def test_statement(self, inputs):
        snapshot = generate_statement(inputs.bills, 1, StatementPeriod(start=date(2024, 1, 1)))
        statement_inputs = ReportInputs(statement=snapshot)
        doc = _document(ReportKind.STATEMENT, statement_inputs, FilterState(contractor_id=1))
        assert doc.title == "Contractor Statement for Acme"
        summary, listing = doc.sections
        assert summary.heading == "Contractor Payment Summary"
        lines = dict(summary.lines)
        assert lines["Contractor"] == "Acme"
        assert lines["Period"] == "2024-01-01 to End"
        assert lines["Total Gross Amount"] == "Rs. 2,500.00"
        assert lines["Income Tax"] == "Rs. 180.00"
        assert lines["Late delivery"] == "Rs. 50.00"
        assert lines["Total Deductions"] == "Rs. 250.00"
        assert lines["Net Amount Payable"] == "Rs. 2,250.00"
        assert [row[0] for row in listing.rows] == ["B-001", "B-002"]

    def test_statement_others_label_fallback(self, bills):
        snapshot = generate_statement(bills, 2, StatementPeriod())
        doc = _document(ReportKind.STATEMENT, ReportInputs(statement=snapshot))
        lines = dict(doc.sections[0].lines)
        assert lines["Others"] == "Rs. 0.00"
        assert lines["Period"] == "Start to End"
