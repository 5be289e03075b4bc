"""
Reporting Configuration Schema.

Defines presentation settings for bill reports: the office letterhead,
deduction category labels, export naming and the dashboard budget.
Deduction *amounts* are never computed here -- they arrive on each bill
already resolved.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any, Self

import yaml

from billing_kernel.domain.records import DEDUCTION_CATEGORIES
from billing_kernel.logging_config import get_logger

logger = get_logger("modules.reporting.config")


def _default_deduction_labels() -> dict[str, str]:
    return {
        "penalty": "Penalty",
        "income_tax": "Income Tax",
        "tajveed_ul_quran": "Tajveed-ul Quran",
        "education_cess": "Education Cess",
        "klc": "K.L.C",
        "sd_current": "S.D Current",
        "gst_current": "GST Current",
        "others": "Others",
    }


DEFAULT_CERTIFICATION_POINTS: tuple[str, ...] = (
    "The amount claimed in the bill is claimed for the first time.",
    "The Amount of this bill was not claimed previously",
    "The above mentioned Qty has actually been lifted by the Contractor.",
    "Verified statements are attached",
    "The bill prepared is correct.",
    "The bill prepared have been claimed in accordance with the sanctioned rates.",
    "The amount of shortage has been recovered from the bill in full from contractor (if any).",
    "If any deduction in the taxes imposed by this bill is required, the Department "
    "should be informed accordingly",
)

DEFAULT_CERTIFICATION_NOTE = (
    "Countersigned and forwarded to the Accounts Officer AJK Council Secretariate "
    "Accounts Office Islamabad for pre-audit and payments please. The Cheque may be "
    "issued in favour of Contractor and delivered to the authorized official of this "
    "Directorate."
)


@dataclass
class ReportingConfig:
    """
    Configuration schema for the reporting module.

    Controls letterhead text, labels, export naming and dashboard figures.
    """

    # Letterhead printed above every report document
    header_lines: tuple[str, ...] = (
        "Azad Govt of the State of Jammu & Kashmir",
        "Directorate of Food",
        "D-151 Satellite Town, Rwp",
    )

    # System name shown in the "Report generated by ..." footer
    system_name: str = "FDBMS"

    # Currency prefix for amounts in report documents
    currency_label: str = "Rs."

    # Display label per deduction category
    deduction_labels: dict[str, str] = field(default_factory=_default_deduction_labels)

    # Per-bill print: certification used when a bill carries none, the
    # countersign paragraph and the (title, subtitle) signature blocks
    bill_document_title: str = "Transportation Bill"
    certification_points: tuple[str, ...] = DEFAULT_CERTIFICATION_POINTS
    certification_note: str = DEFAULT_CERTIFICATION_NOTE
    bill_signatories: tuple[tuple[str, str], ...] = (
        ("Accounts Officer Food", "(AJK) Rawalpindi"),
        ("Assistant Director Food(DDO)", "(AJK) Rawalpindi"),
    )
    audit_signatories: tuple[tuple[str, str], ...] = (
        ("Prepared By", ""),
        ("Checked By", ""),
        ("Approved By", ""),
    )

    # CSV export file name is "<prefix>-<YYYY-MM-DD>.csv"
    export_file_prefix: str = "Bills-Report"
    csv_encoding: str = "utf-8"

    # Dashboard
    sanctioned_budget: Decimal = Decimal("0")
    activity_window_days: int = 7

    def __post_init__(self):
        self.header_lines = tuple(self.header_lines)
        self.certification_points = tuple(self.certification_points)
        self.bill_signatories = tuple(tuple(s) for s in self.bill_signatories)
        self.audit_signatories = tuple(tuple(s) for s in self.audit_signatories)
        self.sanctioned_budget = Decimal(str(self.sanctioned_budget))
        missing = [c for c in DEDUCTION_CATEGORIES if c not in self.deduction_labels]
        if missing:
            raise ValueError(f"deduction_labels missing categories: {missing}")
        if self.sanctioned_budget < 0:
            raise ValueError("sanctioned_budget cannot be negative")
        if self.activity_window_days < 1:
            raise ValueError("activity_window_days must be at least 1")
        if not self.export_file_prefix:
            raise ValueError("export_file_prefix cannot be empty")
        if not self.certification_points:
            raise ValueError("certification_points cannot be empty")
        if any(len(s) != 2 for s in self.bill_signatories + self.audit_signatories):
            raise ValueError("signatories must be (title, subtitle) pairs")

    def deduction_label(self, category: str) -> str:
        return self.deduction_labels[category]

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with standard defaults."""
        logger.info("reporting_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create config from dictionary."""
        data = dict(data)
        if "deduction_labels" in data:
            labels = _default_deduction_labels()
            labels.update(data["deduction_labels"] or {})
            data["deduction_labels"] = labels
        logger.info(
            "reporting_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)

    @classmethod
    def from_yaml(cls, path: Path) -> Self:
        """
        Load config from a YAML file whose top-level ``reporting`` mapping
        (or the whole document, when that key is absent) holds the fields.

        Raises:
            FileNotFoundError: if the file does not exist.
            yaml.YAMLError: if the file contains invalid YAML.
            TypeError: on unknown keys.
        """
        with Path(path).open("r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        section = raw.get("reporting", raw)
        logger.info("reporting_config_loading_from_yaml", extra={"path": str(path)})
        return cls.from_dict(section)
