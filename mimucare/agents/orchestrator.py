"""
Dr. Mimu Health Assistant - Coordinator

Wires the agents together behind the two user-facing paths:

- Chat: free text -> medication-intent parser (always first) -> multi-provider
  aggregation. A recognised reminder request is turned into a dose schedule,
  saved for the user and confirmed at the end of the reply.
- Symptom checker: symptom picks -> follow-up questionnaire -> rule-based
  diagnoses, tests, lifestyle advice and specialty routing. Optionally an AI
  narrative is added on top of the deterministic result.

This is the main entry point for the MimuCare core.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from ..config import Settings, load_settings
from ..directory import DoctorDirectory, StaticDoctorDirectory
from ..locale import check_locale, t
from ..providers import ProviderRegistry
from ..storage import HISTORY_KEY, SCHEDULES_KEY, InMemoryStore, JsonFileStore, KeyValueStore
from .aggregator import AggregatedAnswer, ResponseAggregator
from .catalog import SelectedSymptom
from .heuristics import ClinicalHeuristics, Diagnosis, LifestyleRecommendation, RecommendedTest
from .medication import (
    MedicationIntentParser,
    MedicationSchedule,
    build_schedule,
    medication_summary,
)
from .questions import QuestionGenerator, Questionnaire, QuestionResponse
from .routing import RoutingUrgency, SpecialtyRecommendation, SpecialtyRouter

logger = logging.getLogger(__name__)

DEFAULT_USER_ID = "guest"


@dataclass
class ChatReply:
    """Reply to one chat message."""
    text: str
    answer: AggregatedAnswer
    medication_schedule: Optional[MedicationSchedule] = None

    @property
    def consensus(self) -> bool:
        return self.answer.consensus

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "consensus": self.consensus,
            "answer": self.answer.to_dict(),
            "medication_schedule": self.medication_schedule.to_dict() if self.medication_schedule else None,
        }


@dataclass
class AssessmentResult:
    """Complete result of one symptom-checker run."""
    locale: str
    symptoms: List[SelectedSymptom] = field(default_factory=list)
    responses: List[QuestionResponse] = field(default_factory=list)

    # Rule-based findings
    diagnoses: List[Diagnosis] = field(default_factory=list)
    tests: List[RecommendedTest] = field(default_factory=list)
    lifestyle: List[LifestyleRecommendation] = field(default_factory=list)
    specialties: List[SpecialtyRecommendation] = field(default_factory=list)
    red_flags: List[str] = field(default_factory=list)

    # Optional AI explanation
    narrative: Optional[str] = None

    # Metadata
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())
    processing_steps: List[str] = field(default_factory=list)
    timings: Dict[str, float] = field(default_factory=dict)

    @property
    def emergency(self) -> bool:
        return bool(self.red_flags)

    @property
    def overall_urgency(self) -> RoutingUrgency:
        if self.emergency:
            return RoutingUrgency.HIGH
        priority = {RoutingUrgency.LOW: 0, RoutingUrgency.MEDIUM: 1, RoutingUrgency.HIGH: 2}
        urgencies = [s.urgency for s in self.specialties]
        if urgencies:
            return max(urgencies, key=lambda u: priority[u])
        return RoutingUrgency.LOW

    def to_report(self) -> str:
        """Generate a plain-text report in the assessment's locale."""
        loc = self.locale
        lines = [
            "=" * 60,
            t("report.title", loc),
            "=" * 60,
            f"{t('report.generated', loc)}: {self.timestamp}",
            f"{t('report.urgency', loc)}: {t(f'routing_urgency.{self.overall_urgency.value}', loc)}",
            "",
        ]

        if self.emergency:
            lines.append("!" * 60)
            lines.append(t("report.emergency", loc))
            for flag in self.red_flags:
                lines.append(f"  - {t(flag, loc)}")
            lines.append("!" * 60)
            lines.append("")

        def section(title_id: str):
            lines.append("-" * 40)
            lines.append(t(title_id, loc))
            lines.append("-" * 40)

        section("report.symptoms")
        for s in self.symptoms:
            lines.append(
                f"- {s.symptom.display_name(loc)}: {t(f'duration.{s.duration.value}', loc)}, "
                f"{t('report.intensity', loc)} {s.intensity}/10"
            )
        lines.append("")

        if self.diagnoses:
            section("report.diagnoses")
            for i, d in enumerate(self.diagnoses, 1):
                lines.append(
                    f"{i}. {d.condition} ({d.probability}% {t('report.probability', loc)}, "
                    f"{t(f'severity.{d.severity.value}', loc)})"
                )
                lines.append(f"   {d.description}")
            lines.append("")

        if self.tests:
            section("report.tests")
            for test in self.tests:
                lines.append(
                    f"- {test.name} [{t(f'test_urgency.{test.urgency.value}', loc)}] - {test.cost_range}"
                )
                lines.append(f"  {test.reason}")
            lines.append("")

        if self.lifestyle:
            section("report.lifestyle")
            for rec in self.lifestyle:
                lines.append(f"{rec.category}:")
                for suggestion in rec.suggestions:
                    lines.append(f"  - {suggestion}")
            lines.append("")

        if self.specialties:
            section("report.specialists")
            for spec in self.specialties:
                lines.append(f"- {spec.specialty} [{t(f'routing_urgency.{spec.urgency.value}', loc)}]")
                lines.append(f"  {spec.reason}")
                for doc in spec.doctors:
                    lines.append(f"    * {doc.name}, {doc.hospital} ({doc.availability}, {doc.fee})")
            lines.append("")

        if self.narrative:
            section("report.narrative")
            lines.append(self.narrative)
            lines.append("")

        lines.append("=" * 60)
        lines.append(t("report.disclaimer", loc))
        lines.append("=" * 60)

        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "timestamp": self.timestamp,
            "locale": self.locale,
            "urgency": self.overall_urgency.value,
            "emergency": self.emergency,
            "red_flags": list(self.red_flags),
            "symptoms": [s.to_dict() for s in self.symptoms],
            "responses": [r.to_dict() for r in self.responses],
            "diagnoses": [d.to_dict() for d in self.diagnoses],
            "tests": [x.to_dict() for x in self.tests],
            "lifestyle": [x.to_dict() for x in self.lifestyle],
            "specialties": [x.to_dict() for x in self.specialties],
            "narrative": self.narrative,
            "processing_steps": self.processing_steps,
            "timings": self.timings,
        }


class HealthAssistant:
    """
    Main coordinator for the Dr. Mimu assistant.

    Agents are created on first use; pass collaborators explicitly to share
    them or to substitute test doubles.

    Usage:
        assistant = HealthAssistant()

        reply = await assistant.chat("I have a fever and headache", locale="en")
        print(reply.text)

        session = SymptomSession()
        session.select("headache", "few-days", 8)
        result = assistant.assess(session.selected, locale="en")
        print(result.to_report())
    """

    def __init__(
        self,
        registry: Optional[ProviderRegistry] = None,
        settings: Optional[Settings] = None,
        directory: Optional[DoctorDirectory] = None,
        store: Optional[KeyValueStore] = None,
        locale: Optional[str] = None,
    ):
        """
        Initialize the assistant.

        Args:
            registry: Provider registry (built from settings if omitted)
            settings: Runtime settings (read from the environment if omitted)
            directory: Doctor directory (bundled sample roster if omitted)
            store: Persistence (JSON files under DATA_DIR, else in-memory)
            locale: Default locale (settings.DEFAULT_LOCALE if omitted)
        """
        self._settings = settings
        self._registry = registry
        self._directory = directory
        self._store = store
        self.locale = check_locale(locale or self.settings.DEFAULT_LOCALE)

        self._aggregator = None
        self._question_generator = None
        self._heuristics = None
        self._router = None
        self._medication_parser = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = load_settings()
        return self._settings

    @property
    def registry(self) -> ProviderRegistry:
        if self._registry is None:
            self._registry = ProviderRegistry.from_settings(self.settings)
        return self._registry

    @property
    def store(self) -> KeyValueStore:
        if self._store is None:
            data_dir = self.settings.DATA_DIR
            self._store = JsonFileStore(data_dir) if data_dir else InMemoryStore()
        return self._store

    @property
    def directory(self) -> DoctorDirectory:
        if self._directory is None:
            self._directory = StaticDoctorDirectory.from_json()
        return self._directory

    @property
    def aggregator(self) -> ResponseAggregator:
        if self._aggregator is None:
            self._aggregator = ResponseAggregator(
                self.registry, timeout=self.settings.PROVIDER_TIMEOUT_SECONDS
            )
        return self._aggregator

    @property
    def question_generator(self) -> QuestionGenerator:
        if self._question_generator is None:
            self._question_generator = QuestionGenerator()
        return self._question_generator

    @property
    def heuristics(self) -> ClinicalHeuristics:
        if self._heuristics is None:
            self._heuristics = ClinicalHeuristics()
        return self._heuristics

    @property
    def router(self) -> SpecialtyRouter:
        if self._router is None:
            self._router = SpecialtyRouter(self.directory)
        return self._router

    @property
    def medication_parser(self) -> MedicationIntentParser:
        if self._medication_parser is None:
            self._medication_parser = MedicationIntentParser()
        return self._medication_parser

    def reconfigure(self, settings: Settings) -> int:
        """Swap in new settings (e.g. updated API keys) without a restart."""
        self._settings = settings
        ready = self.registry.reconfigure(settings)
        if self._aggregator is not None:
            self._aggregator.timeout = settings.PROVIDER_TIMEOUT_SECONDS
        return ready

    # ------------------------------------------------------------------
    # Chat path
    # ------------------------------------------------------------------

    async def chat(
        self,
        message: str,
        locale: Optional[str] = None,
        user_id: str = DEFAULT_USER_ID,
        now: Optional[datetime] = None,
    ) -> ChatReply:
        """
        Answer a chat message.

        Args:
            message: User text
            locale: "bn" or "en" (assistant default if omitted)
            user_id: Owner of any medication schedule created
            now: Clock override for the schedule's first dose

        Returns:
            ChatReply with the aggregated text and any new schedule
        """
        locale = check_locale(locale or self.locale)
        if not message or not message.strip():
            raise ValueError("message must not be empty")

        schedule = None
        info = self.medication_parser.parse(message, locale, now=now)
        if info is not None:
            schedule = build_schedule(info, user_id)
            self.store.append(SCHEDULES_KEY.format(user_id=user_id), schedule.to_dict())
            logger.info(
                "Medication schedule %s created: %s",
                schedule.id, medication_summary(info, "en"),
            )

        answer = await self.aggregator.aggregate(message, locale)
        text = answer.text
        if schedule is not None:
            text += "\n\n" + t("chat.reminder_confirmation", locale)

        return ChatReply(text=text, answer=answer, medication_schedule=schedule)

    def medication_schedules(self, user_id: str = DEFAULT_USER_ID) -> List[MedicationSchedule]:
        stored = self.store.load(SCHEDULES_KEY.format(user_id=user_id), [])
        return [MedicationSchedule.from_dict(s) for s in stored]

    def save_medication_schedules(self, user_id: str, schedules: Iterable[MedicationSchedule]) -> None:
        self.store.save(SCHEDULES_KEY.format(user_id=user_id), [s.to_dict() for s in schedules])

    # ------------------------------------------------------------------
    # Symptom-checker path
    # ------------------------------------------------------------------

    def build_questionnaire(
        self,
        selected: Iterable[SelectedSymptom],
        locale: Optional[str] = None,
    ) -> Questionnaire:
        locale = check_locale(locale or self.locale)
        return Questionnaire(self.question_generator.generate(selected, locale))

    def assess(
        self,
        selected: Iterable[SelectedSymptom],
        responses: Optional[List[QuestionResponse]] = None,
        locale: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> AssessmentResult:
        """
        Run the rule-based assessment.

        Args:
            selected: Reported symptoms
            responses: Questionnaire answers (kept as context)
            locale: "bn" or "en"
            user_id: If given, the result is appended to the user's history

        Returns:
            AssessmentResult
        """
        locale = check_locale(locale or self.locale)
        selected = list(selected)
        if not selected:
            raise ValueError("At least one symptom is required for an assessment")

        result = AssessmentResult(locale=locale, symptoms=selected, responses=list(responses or []))

        start = time.time()
        clinical = self.heuristics.evaluate(selected, locale, responses=result.responses)
        result.diagnoses = clinical.diagnoses
        result.tests = clinical.tests
        result.lifestyle = clinical.lifestyle
        result.red_flags = clinical.red_flags
        result.timings["heuristics"] = time.time() - start
        result.processing_steps.append("heuristics")

        start = time.time()
        result.specialties = self.router.route(selected, locale)
        result.timings["routing"] = time.time() - start
        result.processing_steps.append("routing")

        if result.emergency:
            logger.warning("Red flags raised: %s", ", ".join(result.red_flags))

        if user_id:
            self.store.append(HISTORY_KEY.format(user_id=user_id), result.to_dict())
            result.processing_steps.append("saved")

        return result

    async def narrate(self, result: AssessmentResult) -> str:
        """
        Ask the providers for a plain-language explanation of an assessment.

        The deterministic result is unchanged; the narrative is attached to it
        and also returned.
        """
        loc = result.locale
        symptoms = "\n".join(
            f"- {s.symptom.display_name(loc)} ({t(f'duration.{s.duration.value}', loc)}, {s.intensity}/10)"
            for s in result.symptoms
        )
        diagnoses = "\n".join(f"- {d.condition} ({d.probability}%)" for d in result.diagnoses) or "-"
        prompt = t("narrative.prompt", loc, symptoms=symptoms, diagnoses=diagnoses)

        start = time.time()
        answer = await self.aggregator.aggregate(prompt, loc)
        result.narrative = answer.text
        result.timings["narrative"] = time.time() - start
        result.processing_steps.append("narrative")
        return answer.text

    def assessment_history(self, user_id: str) -> List[Dict[str, Any]]:
        return self.store.load(HISTORY_KEY.format(user_id=user_id), [])
