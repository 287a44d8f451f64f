"""
Module: report.config

Purpose:
    Immutable configuration for one report run: which variant, which
    target percentage and which banding policy. Defaults come from
    common.thresholds; every field can be overridden explicitly.

Key Classes:
    - ReportConfig: Validated report settings

Dependencies:
    - common.thresholds: Targets
    - report.aggregation.banding: BandingPolicy

Used By:
    - report.assembler
    - report.output.export_queue
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from attainment_toolkit.common.thresholds import TARGET_THRESHOLDS, subject_target
from attainment_toolkit.core.models import ReportVariant

from .aggregation.banding import BandingPolicy
from .layout.index_map import DEFAULT_FIXED_PREFIX_WIDTH
from .layout.models import SummaryLabels

# Roll No, PID, Name
IDENTITY_HEADERS = ("Roll No", "PID", "Name")

SUBJECT_SUMMARY_LABELS = SummaryLabels()
LAB_SUMMARY_LABELS = SummaryLabels(
    obtained="Marks\nobtained",
    attempted="Marks\nattempted",
    percent="In\npercentage",
)


@dataclass(frozen=True)
class ReportConfig:
    """
    Report settings (immutable).

    Attributes:
        variant: Subject CO report or lab LO report
        target: Per-student target percentage (0-100)
        policy: Banding policy for attainment levels
        fixed_prefix_width: Identity columns before the outcome columns
        include_legend: Append the attainment legend to the summary block
        summary_labels: Header labels of the three summary columns
    """

    variant: ReportVariant
    target: float
    policy: BandingPolicy
    fixed_prefix_width: int = DEFAULT_FIXED_PREFIX_WIDTH
    include_legend: bool = True
    summary_labels: SummaryLabels = field(default_factory=SummaryLabels)

    def __post_init__(self) -> None:
        """Validate config on construction."""
        if not 0 <= self.target <= 100:
            raise ValueError(f"target must be within 0-100: {self.target}")
        if self.fixed_prefix_width < len(IDENTITY_HEADERS):
            raise ValueError(
                f"fixed_prefix_width must hold the {len(IDENTITY_HEADERS)} identity columns: "
                f"{self.fixed_prefix_width}"
            )

    @classmethod
    def for_variant(
        cls,
        variant: ReportVariant,
        subject_code: str = "",
        target: Optional[float] = None,
        policy: Optional[BandingPolicy] = None,
        include_legend: bool = True,
    ) -> ReportConfig:
        """
        Create a config with the variant's defaults.

        Subject reports use the subject's target and WITH_ZERO_FLOOR; lab
        reports use the fixed lab target and NO_ZERO_FLOOR.

        Example:
            >>> ReportConfig.for_variant(ReportVariant.LAB_LO).target
            75.0
        """
        if variant == ReportVariant.SUBJECT_CO:
            default_target = subject_target(subject_code)
            default_policy = BandingPolicy.WITH_ZERO_FLOOR
            labels = SUBJECT_SUMMARY_LABELS
        else:
            default_target = TARGET_THRESHOLDS.lab_target
            default_policy = BandingPolicy.NO_ZERO_FLOOR
            labels = LAB_SUMMARY_LABELS

        return cls(
            variant=variant,
            target=default_target if target is None else target,
            policy=default_policy if policy is None else policy,
            include_legend=include_legend,
            summary_labels=labels,
        )
