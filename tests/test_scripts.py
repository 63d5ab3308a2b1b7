"""Tests for the command-line scripts, run in-process with stubbed settings."""

import importlib.util
import json
import sys
from functools import partial
from pathlib import Path
from types import SimpleNamespace

import pytest

from mimucare.agents.orchestrator import HealthAssistant
from mimucare.providers import ProviderId, ProviderRegistry

from conftest import StubProvider

SCRIPTS_DIR = Path(__file__).parent.parent / "scripts"


def load_script(name):
    spec = importlib.util.spec_from_file_location(name, SCRIPTS_DIR / f"{name}.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def check_providers(monkeypatch, test_settings):
    module = load_script("check_providers")
    monkeypatch.setattr(module, "load_settings", lambda: test_settings)
    monkeypatch.setattr(module, "configure_logging", lambda: None)
    return module


def test_check_providers_reports_unconfigured_vendors(check_providers, monkeypatch, capsys):
    monkeypatch.setattr(sys, "argv", ["check_providers.py"])

    check_providers.main()

    out = capsys.readouterr().out
    assert "AI Provider Status" in out
    for name in ("Gemini", "OpenAI GPT", "DeepSeek"):
        assert name in out
    assert out.count("not configured") == 3
    assert "No providers configured" in out


def test_check_providers_sends_message_through_aggregator(check_providers, make_registry, monkeypatch, capsys):
    registry = make_registry(
        StubProvider(ProviderId.GEMINI, reply="Drink water and rest.", display_name="Gemini"),
        StubProvider(ProviderId.DEEPSEEK, error=RuntimeError("unused"), display_name="DeepSeek"),
    )
    registry.get(ProviderId.DEEPSEEK).configure(None)
    monkeypatch.setattr(check_providers, "ProviderRegistry", SimpleNamespace(from_settings=lambda s: registry))
    monkeypatch.setattr(sys, "argv", ["check_providers.py", "--message", "fever?", "--locale", "en"])

    check_providers.main()

    out = capsys.readouterr().out
    assert "Gemini       ready" in out
    assert "DeepSeek     not configured" in out
    assert "Responses:" in out
    assert "Drink water and rest." in out
    assert registry.get(ProviderId.GEMINI).calls == [("fever?", "en")]


@pytest.fixture
def assess_symptoms(monkeypatch, test_settings, store):
    module = load_script("assess_symptoms")
    monkeypatch.setattr(module, "configure_logging", lambda: None)
    monkeypatch.setattr(
        module, "HealthAssistant",
        partial(HealthAssistant, registry=ProviderRegistry([]), settings=test_settings, store=store),
    )
    return module


def test_assess_symptoms_prints_report(assess_symptoms, monkeypatch, capsys):
    monkeypatch.setattr(sys, "argv", [
        "assess_symptoms.py", "--symptom", "headache:8", "--symptom", "dizziness:6:today",
        "--locale", "en",
    ])

    assess_symptoms.main()

    out = capsys.readouterr().out
    assert "Migraine" in out
    assert "Neurology" in out
    assert "DISCLAIMER" in out


def test_assess_symptoms_json_and_history(assess_symptoms, store, monkeypatch, capsys):
    monkeypatch.setattr(sys, "argv", [
        "assess_symptoms.py", "--symptom", "fever:5", "--locale", "en", "--user-id", "cli", "--json",
    ])

    assess_symptoms.main()

    data = json.loads(capsys.readouterr().out)
    assert data["diagnoses"][0]["condition_id"] == "viral_infection"
    assert len(store.load("symptom_history:cli")) == 1


def test_assess_symptoms_rejects_bad_symptom(assess_symptoms, monkeypatch):
    monkeypatch.setattr(sys, "argv", ["assess_symptoms.py", "--symptom", "headache:11"])
    with pytest.raises(SystemExit):
        assess_symptoms.main()
