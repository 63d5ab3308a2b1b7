"""
Dr. Mimu - Agent Components

Two paths share one coordinator:

    Chat:
    ┌────────────┐   ┌────────────┐   ┌──────────────────────────────┐
    │ Medication │-->│ Response   │-->│ Gemini | OpenAI | DeepSeek   │
    │ Parser     │   │ Aggregator │   │ (concurrent, per-call bound) │
    └────────────┘   └────────────┘   └──────────────────────────────┘
          │                │
          v                v
     Dose schedule    Consensus / ranked answer

    Symptom checker:
    ┌─────────┐   ┌───────────┐   ┌────────────┐   ┌───────────┐
    │ Catalog │-->│ Questions │-->│ Heuristics │-->│ Routing   │
    └─────────┘   └───────────┘   └────────────┘   └───────────┘
        │              │                │                │
        v              v                v                v
    Symptom picks  Follow-ups    Diagnoses, tests,   Specialists
                                 lifestyle advice    + urgency

Agents:
- ResponseAggregator: Multi-provider fan-out with consensus detection
- QuestionGenerator: Deterministic follow-up questionnaire
- ClinicalHeuristics: Diagnosis, test and lifestyle rule tables
- SpecialtyRouter: Specialty and urgency decision
- MedicationIntentParser: Reminder requests to dose schedules
- HealthAssistant: Coordinates all agents

Usage:
    from mimucare.agents import HealthAssistant

    assistant = HealthAssistant()
    reply = await assistant.chat("Set a reminder for Napa 500mg twice daily", locale="en")
"""

from .aggregator import ResponseAggregator, AggregatedAnswer, ProviderResponse
from .catalog import SymptomSession, SelectedSymptom, Severity, Duration
from .questions import QuestionGenerator, Questionnaire, DetailedQuestion, QuestionResponse
from .heuristics import ClinicalHeuristics, Diagnosis, RecommendedTest, LifestyleRecommendation
from .routing import SpecialtyRouter, SpecialtyRecommendation, RoutingUrgency
from .medication import MedicationIntentParser, MedicationInfo, MedicationSchedule
from .orchestrator import HealthAssistant, AssessmentResult, ChatReply

__all__ = [
    # Core agents
    "ResponseAggregator",
    "QuestionGenerator",
    "ClinicalHeuristics",
    "SpecialtyRouter",
    "MedicationIntentParser",
    "HealthAssistant",
    # Data classes
    "AggregatedAnswer",
    "ProviderResponse",
    "SymptomSession",
    "SelectedSymptom",
    "Severity",
    "Duration",
    "Questionnaire",
    "DetailedQuestion",
    "QuestionResponse",
    "Diagnosis",
    "RecommendedTest",
    "LifestyleRecommendation",
    "SpecialtyRecommendation",
    "RoutingUrgency",
    "MedicationInfo",
    "MedicationSchedule",
    "AssessmentResult",
    "ChatReply",
]
