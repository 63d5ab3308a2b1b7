"""
Doctor directory.

The router only needs ``lookup_doctors(specialty_id, locale)``. The bundled
``StaticDoctorDirectory`` serves a small sample roster from
``mimucare/data/doctors.json``; a deployment can plug in any object with
the same method.
"""

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from .locale import check_locale, t

DEFAULT_DOCTORS_PATH = Path(__file__).parent / "data" / "doctors.json"


@dataclass
class Doctor:
    id: str
    name: str
    specialty: str
    experience: str
    rating: float
    fee: str
    availability: str
    hospital: str

    def to_dict(self) -> dict:
        return asdict(self)


class DoctorDirectory:
    """Interface for doctor lookups by specialty id."""

    def lookup_doctors(self, specialty_id: str, locale: str = "en") -> List[Doctor]:
        raise NotImplementedError


class EmptyDirectory(DoctorDirectory):
    def lookup_doctors(self, specialty_id: str, locale: str = "en") -> List[Doctor]:
        return []


class StaticDoctorDirectory(DoctorDirectory):
    """
    In-memory roster keyed by specialty id.

    Each record stores localized text fields as ``{"en": ..., "bn": ...}``
    maps; ``rating`` is a plain number.
    """

    LOCALIZED_FIELDS = ("name", "experience", "fee", "availability", "hospital")

    def __init__(self, roster: Mapping[str, List[dict]]):
        self._roster: Dict[str, List[dict]] = {k: list(v) for k, v in roster.items()}

    @classmethod
    def from_json(cls, path: Optional[Path] = None) -> "StaticDoctorDirectory":
        path = Path(path) if path else DEFAULT_DOCTORS_PATH
        with open(path, encoding="utf-8") as f:
            return cls(json.load(f))

    @property
    def specialties(self) -> List[str]:
        return list(self._roster)

    def lookup_doctors(self, specialty_id: str, locale: str = "en") -> List[Doctor]:
        check_locale(locale)
        specialty = t(f"specialty.{specialty_id}.name", locale)
        doctors = []
        for record in self._roster.get(specialty_id, []):
            fields = {}
            for key in self.LOCALIZED_FIELDS:
                value = record[key]
                fields[key] = value[locale] if isinstance(value, dict) else value
            doctors.append(Doctor(
                id=record["id"],
                specialty=specialty,
                rating=float(record["rating"]),
                **fields,
            ))
        return doctors
