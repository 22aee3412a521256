from src.shift_attendance.shift_attendance.attendance.factory import SegmentStatusFactory
from src.shift_attendance.shift_attendance.attendance.strategies.absent_strategy import AbsentStrategy
from src.shift_attendance.shift_attendance.attendance.strategies.half_day_strategy import HalfDayStrategy
from src.shift_attendance.shift_attendance.attendance.strategies.incomplete_strategy import IncompleteStrategy
from src.shift_attendance.shift_attendance.attendance.strategies.present_strategy import PresentStrategy
from src.shift_attendance.shift_attendance.core.enums import SegmentStatus


def test_factory_present_at_ninety_percent():
    factory = SegmentStatusFactory()

    strategy = factory.for_segment(working_hours=8.1, expected_hours=9, has_out=True)

    assert isinstance(strategy, PresentStrategy)
    assert strategy.decide(payable_value=1.0).payable_fraction == 1.0


def test_factory_half_day_between_thresholds():
    factory = SegmentStatusFactory()

    strategy = factory.for_segment(working_hours=4.05, expected_hours=9, has_out=True)
    decision = strategy.decide(payable_value=1.0)

    assert isinstance(strategy, HalfDayStrategy)
    assert decision.status == SegmentStatus.HALF_DAY
    assert decision.payable_fraction == 0.5


def test_factory_absent_below_half_day_threshold():
    strategy = SegmentStatusFactory().for_segment(working_hours=3.33, expected_hours=9, has_out=True)

    assert isinstance(strategy, AbsentStrategy)
    assert strategy.decide(payable_value=1.0).payable_fraction == 0


def test_factory_incomplete_without_out_punch():
    strategy = SegmentStatusFactory().for_segment(working_hours=12, expected_hours=9, has_out=False)

    assert isinstance(strategy, IncompleteStrategy)


def test_payable_value_of_the_shift_is_carried():
    strategy = SegmentStatusFactory().for_segment(working_hours=5, expected_hours=9, has_out=True)

    assert strategy.decide(payable_value=1.5).payable_fraction == 0.75
