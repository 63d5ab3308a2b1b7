"""
Specialty Router

Decides which specialist(s) a patient should see and how urgently, from the
selected symptoms alone. Four ordered guards:

1. Cardiology       - chest pain, breathing difficulty or palpitations
                      (high if chest pain is present, else medium)
2. Gastroenterology - abdominal pain, diarrhea, vomiting or nausea (medium)
3. Neurology        - headache or dizziness
                      (high if any reported intensity is 8 or more, else medium)
4. General Medicine - nothing above fired, or any symptom is of the general
                      category (low)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

from ..directory import Doctor, DoctorDirectory, EmptyDirectory
from ..locale import check_locale, t
from .catalog import SelectedSymptom

CARDIOLOGY_SYMPTOMS = frozenset({"chest-pain", "breathing-difficulty", "palpitations"})
GASTRO_SYMPTOMS = frozenset({"abdominal-pain", "diarrhea", "vomiting", "nausea"})
NEURO_SYMPTOMS = frozenset({"headache", "dizziness"})
NEURO_HIGH_INTENSITY = 8


class RoutingUrgency(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass
class SpecialtyRecommendation:
    specialty: str
    reason: str
    urgency: RoutingUrgency
    doctors: List[Doctor] = field(default_factory=list)
    specialty_id: str = ""

    def to_dict(self) -> dict:
        return {
            "specialty_id": self.specialty_id,
            "specialty": self.specialty,
            "reason": self.reason,
            "urgency": self.urgency.value,
            "doctors": [d.to_dict() for d in self.doctors],
        }


class SpecialtyRouter:
    """Routes a symptom selection to specialties with an urgency level."""

    def __init__(self, directory: Optional[DoctorDirectory] = None):
        self.directory = directory or EmptyDirectory()

    def _recommend(self, specialty_id: str, urgency: RoutingUrgency, locale: str) -> SpecialtyRecommendation:
        return SpecialtyRecommendation(
            specialty=t(f"specialty.{specialty_id}.name", locale),
            reason=t(f"specialty.{specialty_id}.reason", locale),
            urgency=urgency,
            doctors=self.directory.lookup_doctors(specialty_id, locale),
            specialty_id=specialty_id,
        )

    def route(self, selected: Iterable[SelectedSymptom], locale: str = "en") -> List[SpecialtyRecommendation]:
        check_locale(locale)
        selected = list(selected)
        ids = {s.id for s in selected}
        recommendations = []

        if ids & CARDIOLOGY_SYMPTOMS:
            urgency = RoutingUrgency.HIGH if "chest-pain" in ids else RoutingUrgency.MEDIUM
            recommendations.append(self._recommend("cardiology", urgency, locale))

        if ids & GASTRO_SYMPTOMS:
            recommendations.append(self._recommend("gastroenterology", RoutingUrgency.MEDIUM, locale))

        if ids & NEURO_SYMPTOMS:
            # Any symptom counts here, not only the neurological ones.
            high = any(s.intensity >= NEURO_HIGH_INTENSITY for s in selected)
            urgency = RoutingUrgency.HIGH if high else RoutingUrgency.MEDIUM
            recommendations.append(self._recommend("neurology", urgency, locale))

        if not recommendations or any(s.category == "general" for s in selected):
            recommendations.append(self._recommend("general_medicine", RoutingUrgency.LOW, locale))

        return recommendations
