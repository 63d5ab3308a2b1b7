"""
Symptom Catalog

Static, versioned table of the symptoms a user can report, grouped by body
part. Declaration order is significant: it drives the order of follow-up
question blocks and of report listings.

Also holds the user's in-progress selection (``SymptomSession``) and the
emergency red-flag screen.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple, Union

from ..locale import check_locale, t

CATALOG_VERSION = "2024.1"

INTENSITY_MIN = 1
INTENSITY_MAX = 10
RED_FLAG_INTENSITY = 9
RED_FLAG_SYMPTOMS = ("chest-pain", "breathing-difficulty")


class Severity(Enum):
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"

    def escalate(self) -> "Severity":
        """One tier up, saturating at SEVERE."""
        order = list(Severity)
        return order[min(order.index(self) + 1, len(order) - 1)]


class Duration(Enum):
    FEW_HOURS = "few-hours"
    TODAY = "today"
    FEW_DAYS = "few-days"
    WEEK = "week"
    WEEKS = "weeks"
    MONTH = "month"
    MONTHS = "months"


@dataclass(frozen=True)
class Symptom:
    id: str
    category: str
    severity: Severity
    body_part: str

    @property
    def name_key(self) -> str:
        return f"symptom.{self.id}"

    def display_name(self, locale: str) -> str:
        return t(self.name_key, locale)


def _symptoms(body_part: str, *entries: Tuple[str, str, Severity]) -> Tuple[Symptom, ...]:
    return tuple(Symptom(sid, category, severity, body_part) for sid, category, severity in entries)


SYMPTOM_CATALOG: Dict[str, Tuple[Symptom, ...]] = {
    "head": _symptoms(
        "head",
        ("headache", "pain", Severity.MODERATE),
        ("dizziness", "neurological", Severity.MODERATE),
        ("fever", "general", Severity.MODERATE),
        ("nausea", "gastrointestinal", Severity.MILD),
    ),
    "chest": _symptoms(
        "chest",
        ("chest-pain", "pain", Severity.SEVERE),
        ("breathing-difficulty", "respiratory", Severity.SEVERE),
        ("cough", "respiratory", Severity.MILD),
        ("palpitations", "cardiac", Severity.MODERATE),
    ),
    "abdomen": _symptoms(
        "abdomen",
        ("abdominal-pain", "pain", Severity.MODERATE),
        ("diarrhea", "gastrointestinal", Severity.MODERATE),
        ("vomiting", "gastrointestinal", Severity.MODERATE),
        ("constipation", "gastrointestinal", Severity.MILD),
    ),
    "general": _symptoms(
        "general",
        ("fatigue", "general", Severity.MILD),
        ("weight-loss", "general", Severity.MODERATE),
        ("night-sweats", "general", Severity.MODERATE),
    ),
}

BODY_PARTS = tuple(SYMPTOM_CATALOG)

_BY_ID: Dict[str, Symptom] = {
    s.id: s for symptoms in SYMPTOM_CATALOG.values() for s in symptoms
}
_ORDER: Dict[str, int] = {sid: i for i, sid in enumerate(_BY_ID)}


def all_symptoms() -> List[Symptom]:
    """Every symptom, in declaration order."""
    return list(_BY_ID.values())


def get_symptom(symptom_id: str) -> Symptom:
    try:
        return _BY_ID[symptom_id]
    except KeyError:
        raise KeyError(f"Unknown symptom id: {symptom_id!r}") from None


def symptoms_for_body_part(body_part: str) -> Tuple[Symptom, ...]:
    if body_part not in SYMPTOM_CATALOG:
        raise ValueError(
            f"Unsupported body part: {body_part!r}. Use one of: {', '.join(BODY_PARTS)}"
        )
    return SYMPTOM_CATALOG[body_part]


def catalog_order(symptom_ids: Iterable[str]) -> List[str]:
    """Sort symptom ids by catalog declaration order (unknown ids raise)."""
    ids = set(symptom_ids)
    for sid in ids:
        get_symptom(sid)
    return sorted(ids, key=_ORDER.__getitem__)


def search_symptoms(query: str, locale: str, body_part: Optional[str] = None) -> List[Symptom]:
    """Case-insensitive substring search over localized names and ids."""
    check_locale(locale)
    pool = symptoms_for_body_part(body_part) if body_part else all_symptoms()
    needle = query.strip().lower()
    if not needle:
        return list(pool)
    return [
        s for s in pool
        if needle in s.display_name(locale).lower() or needle in s.id
    ]


@dataclass
class SelectedSymptom:
    """A symptom the user reported, with duration and intensity (1-10)."""

    symptom: Symptom
    duration: Duration
    intensity: int
    notes: Optional[str] = None

    def __post_init__(self):
        if isinstance(self.symptom, str):
            self.symptom = get_symptom(self.symptom)
        if not isinstance(self.duration, Duration):
            self.duration = Duration(self.duration)
        if isinstance(self.intensity, bool) or not isinstance(self.intensity, int):
            raise ValueError(f"Intensity must be an integer, got {self.intensity!r}")
        if not INTENSITY_MIN <= self.intensity <= INTENSITY_MAX:
            raise ValueError(
                f"Intensity must be between {INTENSITY_MIN} and {INTENSITY_MAX}, "
                f"got {self.intensity}"
            )

    @property
    def id(self) -> str:
        return self.symptom.id

    @property
    def category(self) -> str:
        return self.symptom.category

    def to_dict(self) -> dict:
        return {
            "symptom_id": self.symptom.id,
            "body_part": self.symptom.body_part,
            "category": self.symptom.category,
            "severity": self.symptom.severity.value,
            "duration": self.duration.value,
            "intensity": self.intensity,
            "notes": self.notes,
        }


class SymptomSession:
    """
    Ordered list of the user's symptom picks.

    Re-selecting a symptom replaces the earlier pick for that id, moving it to
    the end of the list.
    """

    def __init__(self):
        self._selected: List[SelectedSymptom] = []

    def select(
        self,
        symptom_id: str,
        duration: Union[Duration, str],
        intensity: int,
        notes: Optional[str] = None,
    ) -> SelectedSymptom:
        entry = SelectedSymptom(get_symptom(symptom_id), duration, intensity, notes)
        self._selected = [s for s in self._selected if s.id != symptom_id]
        self._selected.append(entry)
        return entry

    def remove(self, symptom_id: str) -> bool:
        before = len(self._selected)
        self._selected = [s for s in self._selected if s.id != symptom_id]
        return len(self._selected) < before

    def clear(self) -> None:
        self._selected = []

    @property
    def selected(self) -> List[SelectedSymptom]:
        return list(self._selected)

    @property
    def symptom_ids(self) -> List[str]:
        return [s.id for s in self._selected]

    def __len__(self) -> int:
        return len(self._selected)

    def __iter__(self):
        return iter(list(self._selected))

    def to_dict(self) -> dict:
        return {
            "catalog_version": CATALOG_VERSION,
            "symptoms": [s.to_dict() for s in self._selected],
        }


def detect_red_flags(selected: Iterable[SelectedSymptom]) -> List[str]:
    """
    Emergency screen over the selected symptoms.

    Returns:
        Red-flag message ids (empty when nothing alarming was reported)
    """
    flags = []
    selected = list(selected)
    if any(s.intensity >= RED_FLAG_INTENSITY for s in selected):
        flags.append("red_flag.high_intensity")
    ids = {s.id for s in selected}
    for sid in RED_FLAG_SYMPTOMS:
        if sid in ids:
            flags.append(f"red_flag.{sid}")
    return flags
