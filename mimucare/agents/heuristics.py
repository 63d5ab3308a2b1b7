"""
Clinical Heuristics

Deterministic rule tables mapping a symptom selection to:
- ranked differential diagnoses (at most five, probability 0-95)
- recommended diagnostic tests with urgency and cost in BDT
- lifestyle advice grouped by category

Rules are data, evaluated in declaration order. A candidate with a trigger
symptom is escalated (higher probability, severity one tier up) when that
symptom's intensity reaches ``ESCALATION_INTENSITY``. Question responses are
carried as context only; they never change the rule outcome.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from ..locale import check_locale, t, t_list
from .catalog import SelectedSymptom, Severity, detect_red_flags, get_symptom

ESCALATION_INTENSITY = 7
PROBABILITY_CAP = 95
MAX_DIAGNOSES = 5


class TestUrgency(Enum):
    IMMEDIATE = "immediate"
    WITHIN_WEEK = "within_week"
    ROUTINE = "routine"


@dataclass(frozen=True)
class DiagnosisCandidate:
    condition_id: str
    probability: int
    severity: Severity
    trigger: Optional[str] = None
    escalated_probability: Optional[int] = None


@dataclass(frozen=True)
class DiagnosisRule:
    """Fires when every symptom in ``requires`` was selected."""

    requires: FrozenSet[str]
    candidates: Tuple[DiagnosisCandidate, ...]


@dataclass(frozen=True)
class TestRule:
    """
    Fires when any symptom in ``symptoms`` was selected.

    ``escalate_at`` upgrades the urgency to immediate at that intensity;
    ``min_intensity`` gates the whole rule.
    """

    test_id: str
    symptoms: Tuple[str, ...]
    urgency: TestUrgency
    escalate_at: Optional[int] = None
    min_intensity: Optional[int] = None


@dataclass(frozen=True)
class LifestyleRule:
    lifestyle_id: str
    symptom_id: str


def _rule(requires, *candidates) -> DiagnosisRule:
    return DiagnosisRule(frozenset(requires), tuple(candidates))


DIAGNOSIS_RULES: Tuple[DiagnosisRule, ...] = (
    _rule(
        {"chest-pain", "breathing-difficulty"},
        DiagnosisCandidate("coronary_artery_disease", 45, Severity.MODERATE, "chest-pain", 75),
        DiagnosisCandidate("angina", 60, Severity.MODERATE),
    ),
    _rule(
        {"abdominal-pain", "nausea"},
        DiagnosisCandidate("gastritis", 70, Severity.MILD),
        DiagnosisCandidate("peptic_ulcer", 45, Severity.MODERATE, "abdominal-pain", 65),
    ),
    _rule(
        {"abdominal-pain", "vomiting"},
        DiagnosisCandidate("gastritis", 70, Severity.MILD),
        DiagnosisCandidate("peptic_ulcer", 45, Severity.MODERATE, "abdominal-pain", 65),
    ),
    _rule(
        {"headache", "dizziness"},
        DiagnosisCandidate("migraine", 65, Severity.MODERATE, "headache", 85),
        DiagnosisCandidate("tension_headache", 80, Severity.MILD),
    ),
    _rule(
        {"fever"},
        DiagnosisCandidate("viral_infection", 85, Severity.MILD),
    ),
    _rule(
        {"cough", "fever"},
        DiagnosisCandidate("respiratory_infection", 60, Severity.MILD, "cough", 75),
    ),
    _rule(
        {"diarrhea", "vomiting"},
        DiagnosisCandidate("gastroenteritis", 70, Severity.MILD, "diarrhea", 80),
    ),
    _rule(
        {"weight-loss", "night-sweats"},
        DiagnosisCandidate("chronic_infection", 40, Severity.MODERATE),
    ),
)

TEST_RULES: Tuple[TestRule, ...] = (
    TestRule("ecg", ("chest-pain",), TestUrgency.WITHIN_WEEK, escalate_at=ESCALATION_INTENSITY),
    TestRule("chest_xray", ("chest-pain",), TestUrgency.WITHIN_WEEK),
    TestRule("troponin", ("chest-pain",), TestUrgency.IMMEDIATE, min_intensity=6),
    TestRule("abdominal_ultrasound", ("abdominal-pain",), TestUrgency.WITHIN_WEEK),
    TestRule("ct_head", ("headache",), TestUrgency.WITHIN_WEEK, escalate_at=ESCALATION_INTENSITY),
    TestRule("cbc", ("fever", "abdominal-pain"), TestUrgency.ROUTINE),
)

LIFESTYLE_RULES: Tuple[LifestyleRule, ...] = (
    LifestyleRule("heart_care", "chest-pain"),
    LifestyleRule("stomach_care", "abdominal-pain"),
    LifestyleRule("headache_care", "headache"),
    LifestyleRule("fever_care", "fever"),
)


@dataclass
class Diagnosis:
    condition: str
    probability: int
    severity: Severity
    description: str
    condition_id: str

    def to_dict(self) -> dict:
        return {
            "condition_id": self.condition_id,
            "condition": self.condition,
            "probability": self.probability,
            "severity": self.severity.value,
            "description": self.description,
        }


@dataclass
class RecommendedTest:
    name: str
    reason: str
    urgency: TestUrgency
    cost_range: str
    test_id: str

    def to_dict(self) -> dict:
        return {
            "test_id": self.test_id,
            "name": self.name,
            "reason": self.reason,
            "urgency": self.urgency.value,
            "cost_range": self.cost_range,
        }


@dataclass
class LifestyleRecommendation:
    category: str
    suggestions: List[str] = field(default_factory=list)
    lifestyle_id: str = ""

    def to_dict(self) -> dict:
        return {
            "lifestyle_id": self.lifestyle_id,
            "category": self.category,
            "suggestions": list(self.suggestions),
        }


@dataclass
class ClinicalAssessment:
    """Output of one heuristics pass."""

    diagnoses: List[Diagnosis] = field(default_factory=list)
    tests: List[RecommendedTest] = field(default_factory=list)
    lifestyle: List[LifestyleRecommendation] = field(default_factory=list)
    red_flags: List[str] = field(default_factory=list)

    @property
    def emergency(self) -> bool:
        return bool(self.red_flags)


def validate_rules(
    diagnosis_rules: Iterable[DiagnosisRule],
    test_rules: Iterable[TestRule],
    lifestyle_rules: Iterable[LifestyleRule],
) -> None:
    """Raise ValueError if a rule references an unknown symptom or a bad probability."""
    referenced = []
    for rule in diagnosis_rules:
        if not rule.requires or not rule.candidates:
            raise ValueError(f"Empty diagnosis rule: {rule}")
        referenced.extend(rule.requires)
        for c in rule.candidates:
            for p in (c.probability, c.escalated_probability):
                if p is not None and not 0 <= p <= 100:
                    raise ValueError(f"{c.condition_id}: probability {p} out of range")
            if (c.trigger is None) != (c.escalated_probability is None):
                raise ValueError(f"{c.condition_id}: trigger and escalated probability go together")
            if c.trigger is not None:
                referenced.append(c.trigger)
    for rule in test_rules:
        referenced.extend(rule.symptoms)
    for rule in lifestyle_rules:
        referenced.append(rule.symptom_id)
    for symptom_id in referenced:
        try:
            get_symptom(symptom_id)
        except KeyError as e:
            raise ValueError(f"Rule table references {e.args[0]}") from None


class ClinicalHeuristics:
    """
    Evaluates the diagnosis, test and lifestyle rule tables.

    Example:
        >>> heuristics = ClinicalHeuristics()
        >>> result = heuristics.evaluate(session.selected, locale="en")
        >>> result.diagnoses[0].condition
        'Migraine'
    """

    def __init__(
        self,
        diagnosis_rules: Tuple[DiagnosisRule, ...] = DIAGNOSIS_RULES,
        test_rules: Tuple[TestRule, ...] = TEST_RULES,
        lifestyle_rules: Tuple[LifestyleRule, ...] = LIFESTYLE_RULES,
    ):
        validate_rules(diagnosis_rules, test_rules, lifestyle_rules)
        self.diagnosis_rules = diagnosis_rules
        self.test_rules = test_rules
        self.lifestyle_rules = lifestyle_rules

    @staticmethod
    def _intensities(selected: Iterable[SelectedSymptom]) -> Dict[str, int]:
        return {s.id: s.intensity for s in selected}

    def diagnose(self, selected: Iterable[SelectedSymptom], locale: str = "en") -> List[Diagnosis]:
        check_locale(locale)
        intensities = self._intensities(selected)
        found: Dict[str, Diagnosis] = {}

        for rule in self.diagnosis_rules:
            if not rule.requires <= intensities.keys():
                continue
            for c in rule.candidates:
                probability, severity = c.probability, c.severity
                if c.trigger and intensities.get(c.trigger, 0) >= ESCALATION_INTENSITY:
                    probability = c.escalated_probability
                    severity = severity.escalate()
                probability = min(probability, PROBABILITY_CAP)

                existing = found.get(c.condition_id)
                if existing is not None and existing.probability >= probability:
                    continue
                found[c.condition_id] = Diagnosis(
                    condition=t(f"diagnosis.{c.condition_id}.name", locale),
                    probability=probability,
                    severity=severity,
                    description=t(f"diagnosis.{c.condition_id}.description", locale),
                    condition_id=c.condition_id,
                )

        # sorted() is stable: equal probabilities keep rule order.
        ranked = sorted(found.values(), key=lambda d: -d.probability)
        return ranked[:MAX_DIAGNOSES]

    def recommend_tests(self, selected: Iterable[SelectedSymptom], locale: str = "en") -> List[RecommendedTest]:
        check_locale(locale)
        intensities = self._intensities(selected)
        tests = []

        for rule in self.test_rules:
            matched = [intensities[s] for s in rule.symptoms if s in intensities]
            if not matched:
                continue
            peak = max(matched)
            if rule.min_intensity is not None and peak < rule.min_intensity:
                continue
            urgency = rule.urgency
            if rule.escalate_at is not None and peak >= rule.escalate_at:
                urgency = TestUrgency.IMMEDIATE
            tests.append(RecommendedTest(
                name=t(f"test.{rule.test_id}.name", locale),
                reason=t(f"test.{rule.test_id}.reason", locale),
                urgency=urgency,
                cost_range=t(f"test.{rule.test_id}.cost", locale),
                test_id=rule.test_id,
            ))
        return tests

    def lifestyle(self, selected: Iterable[SelectedSymptom], locale: str = "en") -> List[LifestyleRecommendation]:
        check_locale(locale)
        ids = {s.id for s in selected}
        return [
            LifestyleRecommendation(
                category=t(f"lifestyle.{rule.lifestyle_id}.category", locale),
                suggestions=t_list(f"lifestyle.{rule.lifestyle_id}.suggestions", locale),
                lifestyle_id=rule.lifestyle_id,
            )
            for rule in self.lifestyle_rules
            if rule.symptom_id in ids
        ]

    def evaluate(
        self,
        selected: Iterable[SelectedSymptom],
        locale: str = "en",
        responses=None,
    ) -> ClinicalAssessment:
        """
        Run all three rule tables plus the red-flag screen.

        Args:
            selected: Reported symptoms
            locale: "bn" or "en"
            responses: Follow-up answers (context only, not scored)

        Returns:
            ClinicalAssessment
        """
        selected = list(selected)
        return ClinicalAssessment(
            diagnoses=self.diagnose(selected, locale),
            tests=self.recommend_tests(selected, locale),
            lifestyle=self.lifestyle(selected, locale),
            red_flags=detect_red_flags(selected),
        )
