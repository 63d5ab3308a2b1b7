"""Tests for medication intent parsing, schedules and dose tracking."""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from mimucare.agents.medication import (
    MAX_DURATION_DAYS,
    DoseStatus,
    FrequencyCode,
    MedicationInfo,
    MedicationIntentParser,
    MedicationSchedule,
    build_schedule,
    check_missed_doses,
    completion_status,
    mark_dose_taken,
    medication_summary,
    missed_dose_guidance,
    reminder_message,
    upcoming_doses,
)


@pytest.fixture
def parser():
    return MedicationIntentParser()


def test_parses_english_reminder(parser, fixed_now):
    info = parser.parse("Set a reminder for Napa 500mg twice daily for 5 days", "en", now=fixed_now)

    assert info.name == "Napa"
    assert info.strength == "500 mg"
    assert info.frequency == FrequencyCode.BD
    assert info.doses_per_day == 2
    assert info.duration_days == 5
    assert info.instructions == "After food"
    assert info.start_time == fixed_now


def test_parses_bengali_reminder(parser, fixed_now):
    info = parser.parse("ওষুধ: Napa 500mg দিনে দুইবার ৫ দিন রিমাইন্ডার সেট করুন", "bn", now=fixed_now)

    assert info.name == "Napa"
    assert info.frequency == FrequencyCode.BD
    assert info.duration_days == 5
    assert info.instructions == "খাবারের পর"


def test_bengali_medicine_name_after_label(parser):
    info = parser.parse("ওষুধ - নাপা রিমাইন্ডার দিনে তিনবার", "bn")
    assert info.name == "নাপা"
    assert info.frequency == FrequencyCode.TID
    assert info.strength == "১টি ট্যাবলেট"


def test_no_intent_returns_none(parser):
    assert parser.parse("What is the weather today?", "en") is None
    assert parser.parse("I have a headache since yesterday", "en") is None
    assert parser.parse("", "en") is None


def test_intent_without_name_returns_none(parser):
    assert parser.parse("Please set a reminder for me", "en") is None


def test_intent_patterns_are_locale_specific(parser):
    assert parser.detect_intent("set a medicine reminder", "en") == r"set.*reminder"
    assert parser.detect_intent("set a medicine reminder", "bn") is None


@pytest.mark.parametrize("message,expected", [
    ("Remind me to take Seclo capsule", ("Seclo", None)),
    ("medication reminder for Paracetamol 650 mg tablet", ("Paracetamol", "650 mg")),
    ("set reminder, medicine called Fexo", ("Fexo", None)),
    ("Set a reminder for Napa", ("Napa", None)),
])
def test_name_patterns(parser, message, expected):
    assert parser.extract_name(message) == expected


@pytest.mark.parametrize("message,expected", [
    ("take it twice a day", FrequencyCode.BD),
    ("1 tab BD", FrequencyCode.BD),
    ("three times a day", FrequencyCode.TID),
    ("tid", FrequencyCode.TID),
    ("four times daily", FrequencyCode.QID),
    ("দিনে চারবার", FrequencyCode.QID),
    ("every morning", FrequencyCode.OD),
])
def test_frequency(parser, message, expected):
    assert parser.parse_frequency(message) == expected


@pytest.mark.parametrize("message,expected", [
    ("for 10 days", 10),
    ("for 1 day", 1),
    ("for 2 weeks", 14),
    ("৩ দিন", 3),
    ("for 0 days", 1),
    ("twice daily", 7),
    ("for 400 days", MAX_DURATION_DAYS),
    ("for 3000000 days", MAX_DURATION_DAYS),
    ("for 100 weeks", MAX_DURATION_DAYS),
])
def test_duration(parser, message, expected):
    assert parser.parse_duration(message) == expected


def test_instructions(parser):
    assert parser.parse_instructions("take before meals", "en") == "Before food"
    assert parser.parse_instructions("on an empty stomach", "en") == "On an empty stomach"
    assert parser.parse_instructions("whenever", "bn") == "খাবারের পর"


def test_schedule_expansion(parser, fixed_now):
    info = parser.parse("Set a reminder for Napa 500mg three times daily for 3 days", "en", now=fixed_now)
    schedule = build_schedule(info, "user-1")

    assert len(schedule.doses) == 9
    assert schedule.doses[0].scheduled_time == fixed_now
    assert schedule.doses[1].scheduled_time == fixed_now + timedelta(hours=8)
    assert schedule.doses[3].scheduled_time == fixed_now + timedelta(days=1)
    assert all(d.status == DoseStatus.DUE for d in schedule.doses)
    assert schedule.end_date == fixed_now + timedelta(days=3)
    assert schedule.timezone == "Asia/Dhaka"
    assert schedule.reminder_channels == ["app"]


def test_schedule_round_trips_through_dict(parser, fixed_now):
    info = parser.parse("Set a reminder for Napa twice daily for 2 days", "en", now=fixed_now)
    schedule = build_schedule(info, "user-1")
    mark_dose_taken(schedule, schedule.doses[0].id, now=fixed_now)

    restored = MedicationSchedule.from_dict(schedule.to_dict())

    assert restored.id == schedule.id
    assert restored.medication.frequency == FrequencyCode.BD
    assert restored.doses[0].status == DoseStatus.TAKEN
    assert restored.doses[0].taken_at == fixed_now


def test_dose_tracking(parser, fixed_now):
    info = parser.parse("Set a reminder for Napa twice daily for 5 days", "en", now=fixed_now)
    schedule = build_schedule(info, "user-1")

    upcoming = upcoming_doses(schedule, hours=24, now=fixed_now)
    assert [d.scheduled_time for d in upcoming] == [
        fixed_now, fixed_now + timedelta(hours=12), fixed_now + timedelta(hours=24),
    ]

    assert mark_dose_taken(schedule, schedule.doses[0].id, now=fixed_now) is True
    assert mark_dose_taken(schedule, "missing", now=fixed_now) is False

    # Second dose at +12h is still within the 30 minute grace period at +12h20m.
    assert check_missed_doses(schedule, now=fixed_now + timedelta(hours=12, minutes=20)) == []
    missed = check_missed_doses(schedule, now=fixed_now + timedelta(hours=12, minutes=31))
    assert [d.id for d in missed] == [schedule.doses[1].id]
    assert schedule.doses[1].status == DoseStatus.MISSED


def test_completion_status(parser, fixed_now):
    info = parser.parse("Set a reminder for Napa for 5 days", "en", now=fixed_now)
    schedule = build_schedule(info, "user-1")
    for dose in schedule.doses[:4]:
        mark_dose_taken(schedule, dose.id, now=fixed_now)

    status = completion_status(schedule)
    assert status["total_doses"] == 5
    assert status["taken_doses"] == 4
    assert status["adherence_rate"] == pytest.approx(80.0)
    assert status["is_completed"] is True


def test_summary_and_reminder_texts(parser, fixed_now):
    info = parser.parse("Set a reminder for Napa 500mg twice daily for 5 days", "en", now=fixed_now)
    schedule = build_schedule(info, "user-1")

    assert medication_summary(info, "en") == "Napa 500 mg - Twice daily - 5 days"
    assert medication_summary(info, "bn") == "Napa 500 mg - দিনে ২ বার - 5 দিন"
    assert reminder_message(info, schedule.doses[0], "en") == (
        "Medicine Reminder: Time to take Napa 500 mg at 08:00 AM"
    )
    assert "double dose" in missed_dose_guidance("en")


def test_medication_info_rejects_overlong_course(fixed_now):
    with pytest.raises(ValueError):
        MedicationInfo("Napa", "500 mg", FrequencyCode.OD, MAX_DURATION_DAYS + 1, "After food", fixed_now)


def test_naive_start_is_read_in_parser_timezone(parser):
    info = parser.parse("Set a reminder for Napa for 2 days", "en", now=datetime(2024, 3, 1, 8, 0))
    assert info.start_time == datetime(2024, 3, 1, 8, 0, tzinfo=ZoneInfo("Asia/Dhaka"))

    schedule = build_schedule(info, "user-1")
    assert schedule.doses[0].scheduled_time.tzinfo == ZoneInfo("Asia/Dhaka")


def test_schedule_uses_its_own_timezone(parser, fixed_now):
    info = parser.parse("Set a reminder for Napa for 2 days", "en", now=fixed_now)
    schedule = build_schedule(info, "user-1", timezone="UTC")

    first = schedule.doses[0].scheduled_time
    assert first == fixed_now
    assert first.tzinfo == ZoneInfo("UTC")
    assert first.hour == 2
    assert reminder_message(info, schedule.doses[0], "en").endswith("at 02:00 AM")


def test_naive_clock_is_compared_in_schedule_timezone(parser, fixed_now):
    info = parser.parse("Set a reminder for Napa for 2 days", "en", now=fixed_now)
    schedule = build_schedule(info, "user-1")

    # 08:20 Dhaka wall time is inside the grace period for the 08:00 dose.
    assert check_missed_doses(schedule, now=datetime(2024, 3, 1, 8, 20)) == []
    missed = check_missed_doses(schedule, now=datetime(2024, 3, 1, 8, 31))
    assert [d.id for d in missed] == [schedule.doses[0].id]


def test_restored_naive_schedule_is_localized(parser, fixed_now):
    info = parser.parse("Set a reminder for Napa for 1 day", "en", now=fixed_now)
    data = build_schedule(info, "user-1").to_dict()
    for dose in data["doses"]:
        dose["scheduled_time"] = "2024-03-01T08:00:00"
    data["created_at"] = "2024-03-01T08:00:00"

    restored = MedicationSchedule.from_dict(data)
    assert restored.doses[0].scheduled_time == fixed_now
    assert upcoming_doses(restored, hours=1, now=fixed_now) == restored.doses
