"""
Medication Intent Parser

Recognises "set a reminder for <medicine>" style requests in English and
Bengali free text and turns them into a concrete dose schedule.

Parsing is a sequence of ordered regex tables, each tried top to bottom with
the first acceptable match winning:
1. Intent patterns (locale-specific)
2. Name patterns: labelled name, name + dosage form, bare word + dose
3. Frequency (BD / TID / QID, default OD) and duration (days or weeks,
   capped at MAX_DURATION_DAYS)

A message that shows intent but yields no medicine name is a soft miss
(``None``), never an error.

Also provides the tracking helpers used once a schedule exists: upcoming
doses, marking doses taken, missed-dose detection and adherence summaries.
Dose times are timezone-aware in the schedule's timezone.
"""

import logging
import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional, Tuple
from zoneinfo import ZoneInfo

from ..locale import check_locale, t

logger = logging.getLogger(__name__)

DEFAULT_DURATION_DAYS = 7
MAX_DURATION_DAYS = 365
MISSED_DOSE_GRACE = timedelta(minutes=30)
COMPLETION_THRESHOLD = 0.8
DEFAULT_TIMEZONE = "Asia/Dhaka"


def localize(moment: Optional[datetime] = None, timezone: str = DEFAULT_TIMEZONE) -> datetime:
    """``moment`` (or now) as an aware datetime in ``timezone``. Naive values are wall time there."""
    zone = ZoneInfo(timezone)
    if moment is None:
        return datetime.now(zone)
    if moment.tzinfo is None:
        return moment.replace(tzinfo=zone)
    return moment.astimezone(zone)


class FrequencyCode(Enum):
    OD = "OD"
    BD = "BD"
    TID = "TID"
    QID = "QID"

    @property
    def doses_per_day(self) -> int:
        return {"OD": 1, "BD": 2, "TID": 3, "QID": 4}[self.value]


class DoseStatus(Enum):
    DUE = "due"
    TAKEN = "taken"
    MISSED = "missed"
    SKIPPED = "skipped"


INTENT_PATTERNS = {
    "en": [
        re.compile(p, re.IGNORECASE) for p in (
            r"set.*reminder",
            r"medicine.*reminder",
            r"medication.*reminder",
            r"remind.*medicine",
            r"remind.*medication",
            r"pill.*reminder",
        )
    ],
    "bn": [
        re.compile(p) for p in (
            r"রিমাইন্ডার.*সেট",
            r"ওষুধ.*মনে.*করিয়ে",
            r"ওষুধ.*রিমাইন্ডার",
            r"মেডিসিন.*রিমাইন্ডার",
            r"ওষুধ.*খাওয়ার.*সময়",
            r"ওষুধ.*নেওয়ার.*সময়",
        )
    ],
}

_DOSE = r"(\d+(?:\.\d+)?)\s*(mg|ml|mcg|g|iu)\b"
_FORM = r"(?:tablets?|tabs?\b|capsules?|caps?\b|syrup|ট্যাবলেট|ক্যাপসুল|সিরাপ)"

NAME_PATTERNS = [
    # "medicine: Napa", "ওষুধ - নাপা", "medication called Seclo"
    re.compile(
        rf"(?:medicine|medication|ওষুধ|মেডিসিন)\s*(?:[:\-]|named|called)\s*([^\s,.;:।]+)(?:\s*{_DOSE})?",
        re.IGNORECASE,
    ),
    # "Paracetamol 500mg tablet", "Omeprazole capsule"
    re.compile(rf"\b([A-Za-z][A-Za-z\-]*)(?:\s+{_DOSE})?\s+{_FORM}", re.IGNORECASE),
    # "Napa 500mg", "Napa"
    re.compile(rf"\b([A-Za-z][A-Za-z\-]*)(?:\s*{_DOSE})?", re.IGNORECASE),
]

STRENGTH_PATTERN = re.compile(_DOSE, re.IGNORECASE)

# Words that can never be a medicine name.
STOPWORDS = frozenset("""
    a an the and or of to for me my please can you i need want would like with on in at
    set setup add create make remind reminder reminders alert notify notification
    take taking took medicine medicines medication medications drug drugs pill pills
    tablet tablets tab tabs capsule capsules cap caps syrup dose doses
    once twice thrice times time daily day days week weeks every each per hour hours
    morning noon afternoon evening night bedtime after before food meal meals eating empty stomach
    one two three four five od bd bid tid qid mg ml mcg g iu is it this that
""".split())

FREQUENCY_PATTERNS = [
    (FrequencyCode.BD, re.compile(
        r"twice|two\s+times|2\s*times|\bb\.?i?\.?d\b|দিনে\s*দুই\s*বার|দুইবার|দুবার|২\s*বার", re.IGNORECASE)),
    (FrequencyCode.TID, re.compile(
        r"three\s+times|thrice|3\s*times|\bt\.?i\.?d\b|দিনে\s*তিন\s*বার|তিনবার|৩\s*বার", re.IGNORECASE)),
    (FrequencyCode.QID, re.compile(
        r"four\s+times|4\s*times|\bq\.?i\.?d\b|দিনে\s*চার\s*বার|চারবার|৪\s*বার", re.IGNORECASE)),
]

DAYS_PATTERN = re.compile(r"(\d+)\s*(?:days?\b|দিন)", re.IGNORECASE)
WEEKS_PATTERN = re.compile(r"(\d+)\s*(?:weeks?\b|সপ্তাহ)", re.IGNORECASE)

INSTRUCTION_PATTERNS = [
    ("medication.instructions.empty_stomach", re.compile(r"empty\s+stomach|খালি\s*পেটে", re.IGNORECASE)),
    ("medication.instructions.before_food", re.compile(
        r"before\s+(?:food|meals?|eating)|খাবারের\s*আগে|খাওয়ার\s*আগে", re.IGNORECASE)),
    ("medication.instructions.after_food", re.compile(
        r"after\s+(?:food|meals?|eating)|খাবারের\s*পর|খাওয়ার\s*পর", re.IGNORECASE)),
]


@dataclass
class MedicationInfo:
    name: str
    strength: str
    frequency: FrequencyCode
    duration_days: int
    instructions: str
    start_time: datetime

    def __post_init__(self):
        if self.duration_days < 1:
            raise ValueError(f"duration_days must be at least 1, got {self.duration_days}")
        if self.duration_days > MAX_DURATION_DAYS:
            raise ValueError(
                f"duration_days must be at most {MAX_DURATION_DAYS}, got {self.duration_days}"
            )

    @property
    def doses_per_day(self) -> int:
        return self.frequency.doses_per_day

    @property
    def total_doses(self) -> int:
        return self.doses_per_day * self.duration_days

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "strength": self.strength,
            "frequency": self.frequency.value,
            "doses_per_day": self.doses_per_day,
            "duration_days": self.duration_days,
            "instructions": self.instructions,
            "start_time": self.start_time.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MedicationInfo":
        return cls(
            name=data["name"],
            strength=data["strength"],
            frequency=FrequencyCode(data["frequency"]),
            duration_days=int(data["duration_days"]),
            instructions=data["instructions"],
            start_time=datetime.fromisoformat(data["start_time"]),
        )


@dataclass
class MedicationDose:
    id: str
    scheduled_time: datetime
    status: DoseStatus = DoseStatus.DUE
    taken_at: Optional[datetime] = None
    reminder_sent: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "scheduled_time": self.scheduled_time.isoformat(),
            "status": self.status.value,
            "taken_at": self.taken_at.isoformat() if self.taken_at else None,
            "reminder_sent": self.reminder_sent,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MedicationDose":
        return cls(
            id=data["id"],
            scheduled_time=datetime.fromisoformat(data["scheduled_time"]),
            status=DoseStatus(data["status"]),
            taken_at=datetime.fromisoformat(data["taken_at"]) if data.get("taken_at") else None,
            reminder_sent=bool(data.get("reminder_sent", False)),
        )


@dataclass
class MedicationSchedule:
    id: str
    user_id: str
    medication: MedicationInfo
    doses: List[MedicationDose] = field(default_factory=list)
    timezone: str = DEFAULT_TIMEZONE
    reminder_channels: List[str] = field(default_factory=lambda: ["app"])
    created_at: datetime = field(default_factory=localize)
    active: bool = True

    def __post_init__(self):
        self.created_at = localize(self.created_at, self.timezone)
        for dose in self.doses:
            dose.scheduled_time = localize(dose.scheduled_time, self.timezone)
            if dose.taken_at is not None:
                dose.taken_at = localize(dose.taken_at, self.timezone)

    @property
    def start_date(self) -> datetime:
        return self.medication.start_time

    @property
    def end_date(self) -> datetime:
        return self.start_date + timedelta(days=self.medication.duration_days)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "medication": self.medication.to_dict(),
            "doses": [d.to_dict() for d in self.doses],
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "timezone": self.timezone,
            "reminder_channels": list(self.reminder_channels),
            "created_at": self.created_at.isoformat(),
            "active": self.active,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MedicationSchedule":
        return cls(
            id=data["id"],
            user_id=data["user_id"],
            medication=MedicationInfo.from_dict(data["medication"]),
            doses=[MedicationDose.from_dict(d) for d in data["doses"]],
            timezone=data.get("timezone", DEFAULT_TIMEZONE),
            reminder_channels=list(data.get("reminder_channels", ["app"])),
            created_at=datetime.fromisoformat(data["created_at"]),
            active=bool(data.get("active", True)),
        )


class MedicationIntentParser:
    """
    Extracts a medication reminder request from chat text.

    Example:
        >>> parser = MedicationIntentParser()
        >>> info = parser.parse("Set a reminder for Napa 500mg twice daily for 5 days", "en")
        >>> info.name, info.frequency.value, info.duration_days
        ('Napa', 'BD', 5)
    """

    def __init__(self, timezone: str = DEFAULT_TIMEZONE):
        self.timezone = timezone

    def detect_intent(self, message: str, locale: str) -> Optional[str]:
        """Return the first matching intent pattern, or None."""
        check_locale(locale)
        for pattern in INTENT_PATTERNS[locale]:
            if pattern.search(message):
                return pattern.pattern
        return None

    def extract_name(self, message: str) -> Optional[Tuple[str, Optional[str]]]:
        """
        Find the medicine name (and strength, if written next to it).

        Returns:
            (name, strength or None), or None when no pattern yields a name
        """
        for pattern in NAME_PATTERNS:
            for match in pattern.finditer(message):
                name = match.group(1).strip("-")
                if not name or name.lower() in STOPWORDS or name.isdigit():
                    continue
                strength = None
                if match.group(2):
                    strength = f"{match.group(2)} {match.group(3).lower()}"
                return name, strength
        return None

    def extract_strength(self, message: str) -> Optional[str]:
        match = STRENGTH_PATTERN.search(message)
        if match is None:
            return None
        return f"{match.group(1)} {match.group(2).lower()}"

    def parse_frequency(self, message: str) -> FrequencyCode:
        for code, pattern in FREQUENCY_PATTERNS:
            if pattern.search(message):
                return code
        return FrequencyCode.OD

    def parse_duration(self, message: str) -> int:
        """Course length in days, clamped to 1..MAX_DURATION_DAYS."""
        match = DAYS_PATTERN.search(message)
        if match:
            days = int(match.group(1))
        else:
            match = WEEKS_PATTERN.search(message)
            if match is None:
                return DEFAULT_DURATION_DAYS
            days = int(match.group(1)) * 7
        return min(max(days, 1), MAX_DURATION_DAYS)

    def parse_instructions(self, message: str, locale: str) -> str:
        for message_id, pattern in INSTRUCTION_PATTERNS:
            if pattern.search(message):
                return t(message_id, locale)
        return t("medication.instructions.after_food", locale)

    def parse(
        self,
        message: str,
        locale: str = "en",
        now: Optional[datetime] = None,
    ) -> Optional[MedicationInfo]:
        """
        Parse a chat message into MedicationInfo.

        Args:
            message: Free text from the user
            locale: "bn" or "en"; selects the intent patterns
            now: Start time of the first dose (defaults to the current time;
                naive values are read in the parser's timezone)

        Returns:
            MedicationInfo, or None when there is no reminder intent or no name
        """
        if not message or not message.strip():
            return None
        if self.detect_intent(message, locale) is None:
            return None

        found = self.extract_name(message)
        if found is None:
            logger.debug("Reminder intent without a recognisable medicine name")
            return None
        name, strength = found

        return MedicationInfo(
            name=name,
            strength=strength or self.extract_strength(message) or t("medication.default_strength", locale),
            frequency=self.parse_frequency(message),
            duration_days=self.parse_duration(message),
            instructions=self.parse_instructions(message, locale),
            start_time=localize(now, self.timezone),
        )


def build_schedule(
    info: MedicationInfo,
    user_id: str,
    reminder_channels: Optional[List[str]] = None,
    timezone: str = DEFAULT_TIMEZONE,
) -> MedicationSchedule:
    """
    Expand MedicationInfo into concrete dose times.

    Doses are spaced evenly across each day starting at ``info.start_time``:
    day ``d``, dose ``k`` falls at ``start + d days + k * 24/doses_per_day hours``.
    """
    schedule_id = f"schedule_{uuid.uuid4().hex[:12]}"
    start = localize(info.start_time, timezone)
    interval = timedelta(hours=24 / info.doses_per_day)
    doses = [
        MedicationDose(
            id=f"{schedule_id}_d{day + 1}_{k + 1}",
            scheduled_time=start + timedelta(days=day) + k * interval,
        )
        for day in range(info.duration_days)
        for k in range(info.doses_per_day)
    ]
    return MedicationSchedule(
        id=schedule_id,
        user_id=user_id,
        medication=info,
        doses=doses,
        timezone=timezone,
        reminder_channels=list(reminder_channels or ["app"]),
        created_at=start,
    )


def upcoming_doses(
    schedule: MedicationSchedule,
    hours: int = 24,
    now: Optional[datetime] = None,
) -> List[MedicationDose]:
    """Due doses scheduled within the next ``hours`` hours."""
    now = localize(now, schedule.timezone)
    horizon = now + timedelta(hours=hours)
    return sorted(
        (d for d in schedule.doses
         if d.status == DoseStatus.DUE and now <= d.scheduled_time <= horizon),
        key=lambda d: d.scheduled_time,
    )


def mark_dose_taken(
    schedule: MedicationSchedule,
    dose_id: str,
    now: Optional[datetime] = None,
) -> bool:
    for dose in schedule.doses:
        if dose.id == dose_id:
            dose.status = DoseStatus.TAKEN
            dose.taken_at = localize(now, schedule.timezone)
            return True
    return False


def check_missed_doses(
    schedule: MedicationSchedule,
    now: Optional[datetime] = None,
) -> List[MedicationDose]:
    """Mark due doses older than the grace period as missed and return them."""
    cutoff = localize(now, schedule.timezone) - MISSED_DOSE_GRACE
    missed = [
        d for d in schedule.doses
        if d.status == DoseStatus.DUE and d.scheduled_time < cutoff
    ]
    for dose in missed:
        dose.status = DoseStatus.MISSED
    return missed


def completion_status(schedule: MedicationSchedule) -> dict:
    total = len(schedule.doses)
    counts = {status: 0 for status in DoseStatus}
    for dose in schedule.doses:
        counts[dose.status] += 1
    taken = counts[DoseStatus.TAKEN]
    return {
        "total_doses": total,
        "taken_doses": taken,
        "missed_doses": counts[DoseStatus.MISSED],
        "remaining_doses": counts[DoseStatus.DUE],
        "adherence_rate": (taken / total * 100) if total else 0.0,
        "is_completed": bool(total) and taken / total >= COMPLETION_THRESHOLD,
    }


def medication_summary(info: MedicationInfo, locale: str = "en") -> str:
    return t(
        "medication.summary",
        locale,
        name=info.name,
        strength=info.strength,
        frequency=t(f"frequency.{info.frequency.value}", locale),
        days=info.duration_days,
    )


def reminder_message(info: MedicationInfo, dose: MedicationDose, locale: str = "en") -> str:
    return t(
        "medication.reminder",
        locale,
        name=info.name,
        strength=info.strength,
        time=dose.scheduled_time.strftime("%I:%M %p"),
    )


def missed_dose_guidance(locale: str = "en") -> str:
    return t("medication.missed_dose_guidance", locale)
