"""Tests for the Gradio demo helpers (the interface itself is not launched)."""

import importlib.util
from pathlib import Path

import pytest

from mimucare.agents.catalog import Duration
from mimucare.locale import t

DEMO_PATH = Path(__file__).parent.parent / "app" / "demo.py"


@pytest.fixture(scope="module")
def demo():
    spec = importlib.util.spec_from_file_location("mimucare_demo", DEMO_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_picker_labels_follow_locale(demo):
    symptoms_update, duration_update = demo.relabel_pickers("bn")

    assert ("জ্বর", "fever") in symptoms_update["choices"]
    assert (t("duration.today", "bn"), Duration.TODAY.value) in duration_update["choices"]

    english, _ = demo.relabel_pickers("en")
    assert ("Fever", "fever") in english["choices"]


def test_picker_values_are_locale_independent(demo):
    en = [value for _, value in demo.symptom_choices("en")]
    bn = [value for _, value in demo.symptom_choices("bn")]
    assert en == bn
    assert [value for _, value in demo.duration_choices("bn")] == [d.value for d in Duration]


def test_build_selection_applies_overrides(demo):
    selected = demo.build_selection(["headache", "fever"], "today", 5.0, "fever:9")
    assert [(s.id, s.intensity) for s in selected] == [("headache", 5), ("fever", 9)]
    with pytest.raises(ValueError):
        demo.build_selection(["headache"], "today", 5, "headache:12")
