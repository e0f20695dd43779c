"""Report Manager - Generating and storing progress reports.

A report is aggregated once and stored frozen: later entries never change a
stored report's data or narrative.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any
import uuid

from .. import catalogs, const
from ..engines.report_engine import ReportEngine
from ..exceptions import LilLearnerError, ReportNotFoundError
from ..utils import dt_utils
from .base_manager import BaseManager

if TYPE_CHECKING:
    from ..type_defs import ReportRecord


class ReportManager(BaseManager):
    """Manager for weekly, monthly and seasonal reports."""

    async def async_setup(self) -> None:
        """Nothing to subscribe to; reports are generated on request."""

    def category_names(self) -> dict[str, str]:
        """Return display names for catalog and user categories."""
        names = {category.category_id: category.name for category in catalogs.CATEGORIES}
        for category_id, category in self.coordinator.user_categories_data.items():
            names[category_id] = category.get(const.DATA_USER_CATEGORY_NAME, category_id)
        return names

    async def async_generate_report(
        self,
        child_id: str,
        report_type: str,
        *,
        season: str | None = None,
        period_start: date | None = None,
        period_end: date | None = None,
        reference: date | None = None,
    ) -> ReportRecord:
        """Aggregate a child's activity over a period and store the report.

        Raises:
            ChildNotFoundError: Unknown child
            LilLearnerError: Invalid period or report type
        """
        child = self._get_child(child_id)
        try:
            start, end = ReportEngine.resolve_period(
                report_type,
                reference or dt_utils.dt_today_local(),
                season=season,
                period_start=period_start,
                period_end=period_end,
            )
        except ValueError as err:
            raise LilLearnerError(str(err)) from err

        coordinator = self.coordinator
        data = ReportEngine.build_report_data(
            start,
            end,
            coordinator.entries_for_child(child_id),
            coordinator.milestones_for_child(child_id),
            coordinator.xp_events_for_child(child_id),
            catalogs.CATEGORIES,
        )
        narrative = ReportEngine.generate_narrative(
            child.get(const.DATA_CHILD_NAME, child_id), data, self.category_names()
        )

        report_id = str(uuid.uuid4())
        report: ReportRecord = {
            const.DATA_INTERNAL_ID: report_id,
            const.DATA_CHILD_ID: child_id,
            const.DATA_REPORT_TYPE: report_type,
            const.DATA_REPORT_PERIOD_START: start.isoformat(),
            const.DATA_REPORT_PERIOD_END: end.isoformat(),
            const.DATA_REPORT_SEASON: season,
            const.DATA_REPORT_DATA: data,
            const.DATA_REPORT_NARRATIVE: narrative,
            const.DATA_REPORT_GENERATED_AT: dt_utils.dt_now_iso(),
        }  # type: ignore[assignment]
        coordinator.reports_data[report_id] = report
        coordinator._persist_and_update()

        const.LOGGER.info(
            "INFO: Generated %s report %s for child %s (%s..%s)",
            report_type,
            report_id,
            child_id,
            start,
            end,
        )
        self.emit(
            const.SIGNAL_SUFFIX_REPORT_GENERATED,
            child_id=child_id,
            report_id=report_id,
            report_type=report_type,
        )
        return report

    def get_report(self, report_id: str) -> ReportRecord:
        """Return a stored report.

        Raises:
            ReportNotFoundError: Unknown report id
        """
        report = self.coordinator.reports_data.get(report_id)
        if report is None:
            raise ReportNotFoundError(report_id)
        return report

    def delete_report(self, report_id: str) -> None:
        """Delete a stored report."""
        self.get_report(report_id)
        del self.coordinator.reports_data[report_id]
        self.coordinator._persist_and_update()
        const.LOGGER.info("INFO: Deleted report %s", report_id)
