from src.shift_attendance.shift_attendance.shifts.model import (
    ShiftConfigEntry,
    ShiftDefinition,
    filter_by_gender,
    normalize_duration_hours,
    normalize_shift_configs,
)


def test_duration_above_twenty_is_read_as_minutes():
    assert normalize_duration_hours(540) == 9.0
    assert normalize_duration_hours("9") == 9.0
    assert normalize_duration_hours(None) == 8.0
    assert normalize_duration_hours(0) == 8.0


def test_overnight_shift():
    night = ShiftDefinition(shift_id=1, name="Night", start_time="22:00", end_time="06:00")
    day = ShiftDefinition(shift_id=2, name="General", start_time="09:00", end_time="18:00")

    assert night.is_overnight
    assert not day.is_overnight


def test_legacy_and_tagged_configs_normalize_to_one_shape():
    legacy = normalize_shift_configs([1, 2])
    tagged = normalize_shift_configs([{"shift_id": 3, "gender": "Female"}, {"shiftId": 4}, {"gender": "Male"}, None])

    assert legacy == [ShiftConfigEntry(1, legacy=True), ShiftConfigEntry(2, legacy=True)]
    assert [c.shift_id for c in tagged] == [3, 4]
    assert normalize_shift_configs(None) == []


def test_gender_filter_keeps_legacy_and_untagged_entries():
    configs = [
        ShiftConfigEntry(1, legacy=True),
        ShiftConfigEntry(2, gender="Female"),
        ShiftConfigEntry(3, gender="male"),
        ShiftConfigEntry(4, gender="All"),
        ShiftConfigEntry(5),
    ]

    assert filter_by_gender(configs, "Male") == [1, 3, 4, 5]
    assert filter_by_gender(configs, "female") == [1, 2, 4, 5]
    assert filter_by_gender(configs, None) == [1, 4, 5]
