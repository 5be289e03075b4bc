"""
Reporting Module Service (``billing_modules.reporting.service``).

Responsibility
--------------
Orchestrates bill reporting -- filtering, the summary views, contractor
statements, CSV export, print documents and the dashboard overview -- by
reading a snapshot from the injected ``RecordStore`` and delegating to the
pure functions in ``filters``, ``summaries``, ``statement``, ``export``
and ``overview``.

Architecture position
---------------------
**Modules layer** -- thin glue.  ``ReportingService`` is the sole public
entry point for hosts.  Constructor: ``store`` + ``clock`` + ``config``.

Invariants enforced
-------------------
* Read-only with respect to records -- the store is never appended to.
* Every call reads a fresh snapshot; no result is cached, except the
  statement snapshot which the caller holds and passes back explicitly.
* All monetary amounts use ``Decimal`` -- NEVER ``float``.

Failure modes
-------------
* Statement for "all" contractors  -> ``NoContractorSelectedError``.
* Statement for a contractor missing from the directory: the name on
  its bills is used; with no bills either -> ``ContractorNotFoundError``.
* Export / print with no matching records  -> ``EmptyReportError``.
* Bill print or audit summary for an unknown bill id  -> ``BillNotFoundError``.
* Audit view without the audit permission  -> ``AccessDeniedError``.
* Store read failure  -> exception propagates.

Audit relevance
---------------
Structured log events are emitted for every report, statement and export,
carrying the report kind and the active filters.
"""

from __future__ import annotations

from dataclasses import asdict
from pathlib import Path

from billing_kernel.domain.clock import Clock, SystemClock
from billing_kernel.domain.records import AuditLogEntry, BillRecord
from billing_kernel.exceptions import (
    AccessDeniedError,
    BillNotFoundError,
    ContractNotFoundError,
    EmptyReportError,
    NoContractorSelectedError,
)
from billing_kernel.logging_config import LogContext, get_logger
from billing_kernel.store import RecordStore

from billing_modules.reporting.config import ReportingConfig
from billing_modules.reporting.export import (
    build_bill_audit_summary,
    build_bill_document,
    build_report_document,
    export_filename,
    to_csv_rows,
    write_csv,
)
from billing_modules.reporting.filters import (
    audit_action_options,
    filter_audit_log,
    filter_bills,
    index_contracts,
    route_options,
)
from billing_modules.reporting.models import (
    BillDocumentKind,
    ContractBillLine,
    ContractSummary,
    DashboardOverview,
    FilterState,
    ReportDocument,
    ReportInputs,
    ReportKind,
    ReportResult,
    StationBillLine,
    StatementSnapshot,
)
from billing_modules.reporting.overview import build_dashboard_overview
from billing_modules.reporting.statement import generate_statement
from billing_modules.reporting.summaries import (
    build_summary,
    contract_bill_lines,
    station_bill_lines,
)

logger = get_logger("modules.reporting.service")


def _filters_for_log(state: FilterState) -> dict:
    return {k: v for k, v in asdict(state).items() if v not in (None, "")}


class ReportingService:
    """
    Bill reporting service.

    Contract
    --------
    * Every public method returns a typed result (``ReportResult``,
      ``StatementSnapshot``, ``ReportDocument``, ``DashboardOverview``)
      or the path of a written export.
    * No record is ever mutated.

    Guarantees
    ----------
    * No reporting logic lives in this class; it loads, filters and
      delegates.
    * Clock is injectable for deterministic export names and timestamps.

    Non-goals
    ---------
    * Does NOT compute deductions from tax-rate configuration.
    * Does NOT write the audit log.
    * Does NOT render markup; documents are structured sections.
    """

    def __init__(
        self,
        store: RecordStore,
        clock: Clock | None = None,
        config: ReportingConfig | None = None,
    ):
        self._store = store
        self._clock = clock or SystemClock()
        self._config = config or ReportingConfig.with_defaults()

        logger.info(
            "reporting_service_initialized",
            extra={"system_name": self._config.system_name},
        )

    # =========================================================================
    # Internal helpers
    # =========================================================================

    def _normalized(self, state: FilterState) -> FilterState:
        """Drop a route selection the contractor's contracts no longer offer."""
        normalized = state.with_valid_route(self.route_options(state.contractor_id))
        if normalized is not state:
            logger.info(
                "route_filter_reset",
                extra={"route": state.route, "contractor_id": state.contractor_id},
            )
        return normalized

    def _audit_entries(
        self,
        state: FilterState,
        can_view_audit: bool,
        actor_id: str | None,
    ) -> tuple[AuditLogEntry, ...]:
        if not can_view_audit:
            logger.warning(
                "audit_view_denied",
                extra={"actor_id": actor_id},
            )
            raise AccessDeniedError(ReportKind.AUDIT.value, actor_id)
        return filter_audit_log(self._store.read_audit_log(), state)

    def _inputs(
        self,
        kind: ReportKind,
        state: FilterState,
        *,
        can_view_audit: bool,
        actor_id: str | None,
        statement: StatementSnapshot | None,
    ) -> ReportInputs:
        contracts = self._store.read_contracts()
        audit_entries: tuple[AuditLogEntry, ...] = ()
        if kind is ReportKind.AUDIT:
            audit_entries = self._audit_entries(state, can_view_audit, actor_id)
        return ReportInputs(
            bills=filter_bills(self._store.read_bills(), state, contracts),
            contracts=contracts,
            contractors=self._store.read_contractors(),
            audit_entries=audit_entries,
            statement=statement,
        )

    def _contractor_name(self, contractor_id: int) -> str | None:
        """Directory name, or None (logged) so the name on the bills is used."""
        for contractor in self._store.read_contractors():
            if contractor.contractor_id == contractor_id:
                return contractor.name
        logger.warning(
            "contractor_not_in_directory",
            extra={"contractor_id": contractor_id},
        )
        return None

    # =========================================================================
    # Public API
    # =========================================================================

    def route_options(self, contractor_id: int | None = None) -> tuple[str, ...]:
        """Route selector options, narrowed to one contractor when given."""
        return route_options(self._store.read_contracts(), contractor_id)

    def audit_action_options(self) -> tuple[str, ...]:
        return audit_action_options(self._store.read_audit_log())

    def filtered_bills(self, state: FilterState) -> tuple[BillRecord, ...]:
        state = self._normalized(state)
        return filter_bills(self._store.read_bills(), state, self._store.read_contracts())

    def contract_lines(
        self, contract_id: int, state: FilterState
    ) -> tuple[ContractBillLine, ...]:
        """Filtered bills carrying items of one contract, with that contract's share."""
        contracts = index_contracts(self._store.read_contracts())
        if contract_id not in contracts:
            raise ContractNotFoundError(contract_id)
        return contract_bill_lines(self.filtered_bills(state), contract_id)

    def station_lines(self, station: str, state: FilterState) -> tuple[StationBillLine, ...]:
        """Filtered bills touching one station, with kg dispatched and received."""
        return station_bill_lines(self.filtered_bills(state), station)

    def build_report(
        self,
        kind: ReportKind,
        state: FilterState,
        *,
        can_view_audit: bool = False,
        actor_id: str | None = None,
    ) -> ReportResult | None:
        """
        Compute the result for one report kind under ``state``.

        Returns ``None`` only for ``TAX_SUMMARY`` without a selected
        contractor.
        """
        if kind is ReportKind.STATEMENT:
            return self.generate_statement(state)

        state = self._normalized(state)
        with LogContext.bind(report_kind=kind.value, actor_id=actor_id):
            inputs = self._inputs(
                kind,
                state,
                can_view_audit=can_view_audit,
                actor_id=actor_id,
                statement=None,
            )

            result = build_summary(kind, inputs, state)

            if isinstance(result, ContractSummary) and result.skipped_items:
                logger.warning(
                    "contract_reference_unresolved",
                    extra={"skipped_items": result.skipped_items},
                )
            logger.info(
                "report_built",
                extra={
                    "bill_count": len(inputs.bills),
                    "audit_entry_count": len(inputs.audit_entries),
                    "filters": _filters_for_log(state),
                },
            )
            return result

    def generate_statement(self, state: FilterState) -> StatementSnapshot:
        """
        Freeze a statement for the selected contractor and date range.

        Raises:
            NoContractorSelectedError: ``state`` selects all contractors.
            ContractorNotFoundError: contractor is neither in the directory
                nor named on any bill in the period.
        """
        with LogContext.bind(report_kind=ReportKind.STATEMENT.value):
            if state.contractor_id is None:
                logger.warning("statement_rejected_no_contractor")
                raise NoContractorSelectedError("statement")

            state = self._normalized(state)
            name = self._contractor_name(state.contractor_id)
            bills = filter_bills(
                self._store.read_bills(), state, self._store.read_contracts()
            )
            snapshot = generate_statement(bills, state.contractor_id, state.period, name)

            logger.info(
                "statement_generated",
                extra={
                    "contractor_id": snapshot.contractor_id,
                    "bill_count": len(snapshot.bills),
                    "net_amount": str(snapshot.summary.net_amount),
                },
            )
            return snapshot

    def report_document(
        self,
        kind: ReportKind,
        state: FilterState,
        *,
        statement: StatementSnapshot | None = None,
        can_view_audit: bool = False,
        actor_id: str | None = None,
    ) -> ReportDocument:
        """
        Build the print/export document for ``kind``.

        For ``STATEMENT`` the caller passes the snapshot it generated
        earlier; it is printed as-is.
        """
        state = self._normalized(state)
        with LogContext.bind(report_kind=kind.value, actor_id=actor_id):
            inputs = self._inputs(
                kind,
                state,
                can_view_audit=can_view_audit,
                actor_id=actor_id,
                statement=statement,
            )
            document = build_report_document(
                kind,
                inputs,
                state,
                self._config,
                generated_at=self._clock.now(),
            )
            logger.info(
                "report_document_built",
                extra={
                    "title": document.title,
                    "section_count": len(document.sections),
                },
            )
            return document

    def _bill(self, bill_id: str) -> BillRecord:
        for bill in self._store.read_bills():
            if bill.bill_id == bill_id:
                return bill
        raise BillNotFoundError(bill_id)

    def _log_bill_document(self, document: ReportDocument, bill: BillRecord) -> None:
        logger.info(
            "report_document_built",
            extra={
                "title": document.title,
                "bill_number": bill.bill_number,
                "section_count": len(document.sections),
            },
        )

    def bill_document(self, bill_id: str) -> ReportDocument:
        """
        Build the printable transportation bill for one bill.

        Raises:
            BillNotFoundError: ``bill_id`` is not in the store.
        """
        with LogContext.bind(report_kind=BillDocumentKind.BILL.value):
            bill = self._bill(bill_id)
            document = build_bill_document(bill, self._config, generated_at=self._clock.now())
            self._log_bill_document(document, bill)
            return document

    def bill_documents(self, state: FilterState) -> tuple[ReportDocument, ...]:
        """Bill prints for every filtered bill, one page each, in filter order."""
        with LogContext.bind(report_kind=BillDocumentKind.BILL.value):
            bills = self.filtered_bills(state)
            if not bills:
                raise EmptyReportError(BillDocumentKind.BILL.value)
            now = self._clock.now()
            documents = tuple(build_bill_document(b, self._config, generated_at=now) for b in bills)
            logger.info(
                "bill_documents_built",
                extra={"bill_count": len(documents), "filters": _filters_for_log(state)},
            )
            return documents

    def bill_audit_summary(self, bill_id: str) -> ReportDocument:
        """
        Build the audit summary page for one bill.

        Raises:
            BillNotFoundError: ``bill_id`` is not in the store.
        """
        with LogContext.bind(report_kind=BillDocumentKind.AUDIT_SUMMARY.value):
            bill = self._bill(bill_id)
            document = build_bill_audit_summary(
                bill, self._config, generated_at=self._clock.now()
            )
            self._log_bill_document(document, bill)
            return document

    def csv_rows(self, state: FilterState) -> list[dict[str, str]]:
        return to_csv_rows(self.filtered_bills(state))

    def export_csv(self, state: FilterState, directory: Path) -> Path:
        """
        Write the filtered bills as ``<prefix>-<today>.csv`` into ``directory``.

        Raises:
            EmptyReportError: no bill items match ``state``.
        """
        with LogContext.bind(report_kind=ReportKind.DETAILS.value):
            rows = self.csv_rows(state)
            name = export_filename(self._config.export_file_prefix, self._clock.today())
            path = write_csv(rows, Path(directory) / name, self._config.csv_encoding)
            logger.info(
                "csv_exported",
                extra={"path": str(path), "row_count": len(rows)},
            )
            return path

    def dashboard(self) -> DashboardOverview:
        overview = build_dashboard_overview(
            self._store.read_bills(),
            self._store.read_contracts(),
            self._clock.today(),
            sanctioned_budget=self._config.sanctioned_budget,
            window_days=self._config.activity_window_days,
        )
        logger.info(
            "dashboard_computed",
            extra={
                "total_bills": overview.total_bills,
                "consumed_percentage": str(overview.consumed_percentage),
            },
        )
        return overview
