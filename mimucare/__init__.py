# MimuCare - Dr. Mimu Health Assistant Core
"""
Decision-support core of the Dr. Mimu conversational health assistant.

Modules:
- providers: AI backend adapters (Gemini, OpenAI, DeepSeek) and registry
- agents: Aggregation, symptom checking, routing and medication reminders
- config: Environment-driven settings and logging setup
- locale: Bengali / English message catalog
- directory, storage: Doctor lookup and key-value persistence collaborators
"""

__version__ = "0.1.0"

from importlib import import_module

__all__ = [
    # Configuration
    "Settings",
    "load_settings",
    "configure_logging",
    # Providers
    "ProviderId",
    "ProviderRegistry",
    "ProviderError",
    # Agents
    "HealthAssistant",
    "ResponseAggregator",
    "SymptomSession",
    "QuestionGenerator",
    "ClinicalHeuristics",
    "SpecialtyRouter",
    "MedicationIntentParser",
    # Collaborators
    "StaticDoctorDirectory",
    "InMemoryStore",
    "JsonFileStore",
]


_LAZY_EXPORTS = {
    # Configuration
    "Settings": ("mimucare.config", "Settings"),
    "load_settings": ("mimucare.config", "load_settings"),
    "configure_logging": ("mimucare.config", "configure_logging"),
    # Providers
    "ProviderId": ("mimucare.providers", "ProviderId"),
    "ProviderRegistry": ("mimucare.providers", "ProviderRegistry"),
    "ProviderError": ("mimucare.providers", "ProviderError"),
    # Agents
    "HealthAssistant": ("mimucare.agents.orchestrator", "HealthAssistant"),
    "ResponseAggregator": ("mimucare.agents.aggregator", "ResponseAggregator"),
    "SymptomSession": ("mimucare.agents.catalog", "SymptomSession"),
    "QuestionGenerator": ("mimucare.agents.questions", "QuestionGenerator"),
    "ClinicalHeuristics": ("mimucare.agents.heuristics", "ClinicalHeuristics"),
    "SpecialtyRouter": ("mimucare.agents.routing", "SpecialtyRouter"),
    "MedicationIntentParser": ("mimucare.agents.medication", "MedicationIntentParser"),
    # Collaborators
    "StaticDoctorDirectory": ("mimucare.directory", "StaticDoctorDirectory"),
    "InMemoryStore": ("mimucare.storage", "InMemoryStore"),
    "JsonFileStore": ("mimucare.storage", "JsonFileStore"),
}


def __getattr__(name):
    """Lazily load submodules so importing the package doesn't pull in the provider SDK."""
    if name not in _LAZY_EXPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module_name, attr_name = _LAZY_EXPORTS[name]
    module = import_module(module_name)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value
