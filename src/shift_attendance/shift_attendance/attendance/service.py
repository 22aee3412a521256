from __future__ import annotations

import logging
from concurrent.futures import Executor, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import local_date, to_instant
from ..common.validators import normalize_employee_number, require_date, require_date_range
from ..core.constants import DEFAULT_TOLERANCE_HOURS
from ..core.enums import ConfusedStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..on_duty.repository import OnDutyRepository
from ..punches.repository import PunchRepository
from ..rosters.model import RosterAssignment
from ..rosters.repository import RosterRepository
from ..settings.repository import SettingsRepository
from ..shifts.matcher import find_candidates
from ..shifts.model import ShiftDefinition
from ..shifts.repository import ShiftRepository
from ..shifts.resolver import ShiftCandidateResolver
from .aggregator import aggregate_day
from .locking import InProcessLockProvider, LockProvider
from .model import ConfusedShiftRecord, DailyAttendance, PairFailure, ShiftSegment
from .repository import ConfusedShiftRepository, DailyAttendanceRepository
from .segmenter import SegmenterContext, segment_day

logger = logging.getLogger(__name__)

DownstreamHook = Callable[[str, date], None]


@dataclass(frozen=True)
class DayOutcome:
    attendance: DailyAttendance
    confusions: tuple[ConfusedShiftRecord, ...] = ()
    failures: tuple[PairFailure, ...] = ()


@dataclass(frozen=True)
class BatchError:
    employee_number: str
    work_date: date
    message: str


@dataclass
class BatchReport:
    processed: int = 0
    errors: list[BatchError] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.errors)

    def to_dict(self) -> dict:
        return {
            "processed": self.processed,
            "failed": self.failed,
            "errors": [
                {"employee_number": e.employee_number, "work_date": e.work_date.isoformat(), "message": e.message}
                for e in self.errors
            ],
        }


class AttendanceProcessingService:
    """Runs the engine for one (employee, date) and performs every write it implies."""

    def __init__(
        self,
        *,
        employees: EmployeeRepository,
        shifts: ShiftRepository,
        rosters: RosterRepository,
        punches: PunchRepository,
        on_duty: OnDutyRepository,
        settings: SettingsRepository,
        daily: DailyAttendanceRepository,
        confused: ConfusedShiftRepository,
        resolver: ShiftCandidateResolver,
        locks: Optional[LockProvider] = None,
        tz: timezone = timezone(timedelta(hours=5, minutes=30)),
        tolerance_hours: float = DEFAULT_TOLERANCE_HOURS,
        max_workers: int = 4,
        downstream_hooks: Sequence[DownstreamHook] = (),
        hook_executor: Optional[Executor] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self._employees = employees
        self._shifts = shifts
        self._rosters = rosters
        self._punches = punches
        self._on_duty = on_duty
        self._settings = settings
        self._daily = daily
        self._confused = confused
        self._resolver = resolver
        self._locks = locks or InProcessLockProvider()
        self._tz = tz
        self._tolerance_hours = float(tolerance_hours)
        self._max_workers = max(1, int(max_workers))
        self._hooks = tuple(downstream_hooks)
        self._hook_executor = hook_executor
        self._clock = clock

    # ---- single day -------------------------------------------------

    def process_day(self, employee_number: str, work_date) -> DayOutcome:
        employee_number = normalize_employee_number(employee_number)
        work_date = require_date(work_date, "date")

        with self._locks.hold(employee_number, work_date):
            outcome = self._process_locked(employee_number, work_date)

        self._trigger_downstream(employee_number, work_date)
        return outcome

    def _process_locked(self, employee_number: str, work_date: date) -> DayOutcome:
        employee = self._employees.get_by_number(employee_number)
        if not employee:
            raise NotFoundError(f"Employee {employee_number} not found")

        roster = self._rosters.get_for_employee_and_date(employee_number=employee_number, work_date=work_date)
        candidate_set = self._resolver.resolve(employee_number, work_date, roster=roster, employee=employee)
        if not candidate_set:
            logger.warning("No candidate shifts for %s on %s", employee_number, work_date)

        punches = self._punches.list_between(
            employee_number=employee_number,
            start=to_instant(work_date, "00:00", self._tz, days=-1),
            end=to_instant(work_date, "00:00", self._tz, days=2),
        )
        on_duty = tuple(self._on_duty.list_approved(employee_number=employee_number, work_date=work_date))
        reviews = self._confused.list_for_day(employee_number=employee_number, work_date=work_date)
        manual, pending = self._review_state(reviews, employee_number)

        ctx = SegmenterContext(
            employee_number=employee_number,
            work_date=work_date,
            tz=self._tz,
            candidate_set=candidate_set,
            grace=self._settings.get_grace_overrides(),
            on_duty=on_duty,
            tolerance_hours=self._tolerance_hours,
            manual_assignments=manual,
            pending_pairs=pending,
        )
        state = segment_day(punches, ctx)

        has_punches = any(p.is_in and local_date(p.instant, self._tz) == work_date for p in punches)
        attendance = aggregate_day(
            employee_number, work_date, state.segments, roster=roster, on_duty=on_duty, has_punches=has_punches
        )

        for record in state.confusions:
            self._confused.upsert_pending(record)
        self._close_settled_reviews(reviews, state.segments)
        self._write_back_roster(roster, attendance)
        self._daily.upsert(attendance, synced_at=self._clock())

        logger.info(
            "Processed %s on %s: status=%s segments=%d confused=%d failed=%d",
            employee_number, work_date, attendance.status.value, len(attendance.segments),
            len(state.confusions), len(state.failures),
        )
        return DayOutcome(attendance=attendance, confusions=state.confusions, failures=state.failures)

    def _review_state(
        self, reviews: Sequence[ConfusedShiftRecord], employee_number: str
    ) -> tuple[dict[datetime, ShiftDefinition], frozenset]:
        manual: dict[datetime, ShiftDefinition] = {}
        pending = set()
        for record in reviews:
            if record.is_pending:
                pending.add((record.in_time, record.out_time))
            elif record.assigned_shift_id is not None:
                shift = self._shifts.get_by_id(record.assigned_shift_id)
                if shift:
                    manual[record.in_time] = shift
                else:
                    logger.warning("Resolved shift %s for %s no longer exists", record.assigned_shift_id, employee_number)
        return manual, frozenset(pending)

    def _close_settled_reviews(
        self, reviews: Sequence[ConfusedShiftRecord], segments: Sequence[ShiftSegment]
    ) -> None:
        """Pending records whose IN now detects a shift on its own are resolved with it."""
        assigned = {s.in_time: s for s in segments if s.is_assigned}
        for record in reviews:
            segment = assigned.get(record.in_time)
            if not record.is_pending or segment is None:
                continue
            logger.info(
                "Closing confused record %s for %s: %s now assigned automatically",
                record.confused_id, record.employee_number, segment.shift_name,
            )
            self._confused.mark_resolved(
                confused_id=record.confused_id,
                shift_id=segment.shift_id,
                reviewed_by="system",
                reviewed_at=self._clock(),
                comments="Assigned automatically on reprocessing",
            )

    def _write_back_roster(self, roster: Optional[RosterAssignment], attendance: DailyAttendance) -> None:
        if roster is None:
            return
        assigned = next((s for s in attendance.segments if s.is_assigned), None)
        if assigned is None:
            # nothing detected any more; drop what an earlier run wrote
            if roster.actual_shift_id is not None or roster.is_deviation:
                self._rosters.record_actual_shift(roster_id=roster.roster_id, actual_shift_id=None, is_deviation=False)
            return
        self._rosters.record_actual_shift(
            roster_id=roster.roster_id,
            actual_shift_id=assigned.shift_id,
            is_deviation=roster.deviates_from(assigned.shift_id),
        )

    # ---- downstream -------------------------------------------------

    def _trigger_downstream(self, employee_number: str, work_date: date) -> None:
        if not self._hooks:
            return
        if self._hook_executor is None:
            self._hook_executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="attendance-hooks")
        for hook in self._hooks:
            self._hook_executor.submit(self._run_hook, hook, employee_number, work_date)

    @staticmethod
    def _run_hook(hook: DownstreamHook, employee_number: str, work_date: date) -> None:
        try:
            hook(employee_number, work_date)
        except Exception:
            logger.warning("Downstream recalculation failed for %s on %s", employee_number, work_date, exc_info=True)

    def shutdown(self, *, wait: bool = True) -> None:
        if self._hook_executor is not None:
            self._hook_executor.shutdown(wait=wait)

    # ---- batch ------------------------------------------------------

    def reprocess_batch(self, employee_numbers: Optional[Sequence[str]], start_date, end_date) -> BatchReport:
        """Reprocess every (employee, date) in range; one failure never stops the run."""
        start, end = require_date_range(start_date, end_date)
        numbers = [normalize_employee_number(n) for n in (employee_numbers or self._employees.list_active_numbers())]
        days = [start + timedelta(days=i) for i in range((end - start).days + 1)]

        report = BatchReport()
        with ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="attendance-batch") as pool:
            futures = [pool.submit(self._reprocess_employee, n, days) for n in numbers]
            for future in as_completed(futures):
                processed, errors = future.result()
                report.processed += processed
                report.errors.extend(errors)

        report.errors.sort(key=lambda e: (e.employee_number, e.work_date))
        logger.info("Batch reprocess %s..%s: processed=%d failed=%d", start, end, report.processed, report.failed)
        return report

    def _reprocess_employee(self, employee_number: str, days: Sequence[date]) -> tuple[int, list[BatchError]]:
        processed = 0
        errors: list[BatchError] = []
        for day in days:
            try:
                self.process_day(employee_number, day)
                processed += 1
            except Exception as exc:
                logger.exception("Reprocessing failed for %s on %s", employee_number, day)
                errors.append(BatchError(employee_number=employee_number, work_date=day, message=str(exc)))
        return processed, errors

    # ---- reads & manual review ---------------------------------------

    def get_day(self, employee_number: str, work_date) -> DailyAttendance:
        employee_number = normalize_employee_number(employee_number)
        work_date = require_date(work_date, "date")
        record = self._daily.get(employee_number=employee_number, work_date=work_date)
        if not record:
            raise NotFoundError(f"No attendance for {employee_number} on {work_date}")
        return record

    def list_confused(
        self,
        *,
        status: Optional[str] = None,
        employee_number: Optional[str] = None,
        start_date=None,
        end_date=None,
    ) -> Sequence[ConfusedShiftRecord]:
        try:
            status_enum = ConfusedStatus(status) if status else None
        except ValueError:
            raise ValidationError(f"Unknown status {status!r}")
        return self._confused.list_records(
            status=status_enum,
            employee_number=employee_number.upper() if employee_number else None,
            start_date=require_date(start_date, "start_date") if start_date else None,
            end_date=require_date(end_date, "end_date") if end_date else None,
        )

    def resolve_confused_shift(
        self,
        confused_id: int,
        shift_id: int,
        *,
        reviewed_by: Optional[str] = None,
        comments: Optional[str] = None,
    ) -> DayOutcome:
        """Record a reviewer's choice and rebuild the day with it."""
        record = self._confused.get_by_id(confused_id)
        if not record:
            raise NotFoundError("Confused shift record not found")
        if not record.is_pending:
            raise ValidationError("This record has already been resolved")

        shift = self._shifts.get_by_id(int(shift_id))
        if not shift:
            raise NotFoundError("Shift not found")
        if not shift.is_active:
            raise ValidationError("Shift is not active")

        self._confused.mark_resolved(
            confused_id=int(confused_id),
            shift_id=shift.shift_id,
            reviewed_by=reviewed_by,
            reviewed_at=self._clock(),
            comments=comments,
        )
        return self.process_day(record.employee_number, record.work_date)

    def auto_assign_nearest(self, confused_id: int, *, reviewed_by: Optional[str] = "system") -> DayOutcome:
        """Resolve a confused record with the best proximity candidate."""
        record = self._confused.get_by_id(confused_id)
        if not record:
            raise NotFoundError("Confused shift record not found")

        candidate_set = self._resolver.resolve(record.employee_number, record.work_date)
        if not candidate_set:
            raise ValidationError("No shifts available for auto-assignment")

        ranked = find_candidates(
            record.in_time, candidate_set.candidates, record.work_date, self._tz,
            tolerance_hours=self._tolerance_hours,
        )
        if not ranked:
            raise ValidationError("No matching shifts found within tolerance")

        best = ranked[0]
        return self.resolve_confused_shift(
            confused_id,
            best.shift_id,
            reviewed_by=reviewed_by,
            comments=f"Auto-assigned nearest: {best.describe()}",
        )
