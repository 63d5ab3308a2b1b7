"""Tests for the symptom catalog, symptom sessions and follow-up questions."""

import pytest

from mimucare.agents.catalog import (
    BODY_PARTS,
    Duration,
    SelectedSymptom,
    SymptomSession,
    all_symptoms,
    catalog_order,
    detect_red_flags,
    get_symptom,
    search_symptoms,
    symptoms_for_body_part,
)
from mimucare.agents.questions import (
    QuestionCategory,
    QuestionGenerator,
    Questionnaire,
    QuestionType,
)

BASE_IDS = [
    "symptom_onset",
    "symptom_pattern",
    "previous_conditions",
    "current_medications",
    "allergies",
    "smoking_status",
    "stress_level",
]


def test_catalog_layout():
    assert BODY_PARTS == ("head", "chest", "abdomen", "general")
    assert [s.id for s in symptoms_for_body_part("chest")] == [
        "chest-pain", "breathing-difficulty", "cough", "palpitations",
    ]
    assert len(all_symptoms()) == 15
    assert get_symptom("fever").category == "general"
    assert get_symptom("chest-pain").severity.value == "severe"


def test_unknown_symptom_and_body_part_raise():
    with pytest.raises(KeyError):
        get_symptom("toothache")
    with pytest.raises(ValueError):
        symptoms_for_body_part("leg")


def test_catalog_order_uses_declaration_order():
    assert catalog_order(["abdominal-pain", "headache", "chest-pain"]) == [
        "headache", "chest-pain", "abdominal-pain",
    ]


def test_search_symptoms_in_both_locales():
    assert [s.id for s in search_symptoms("pain", "en")] == ["chest-pain", "abdominal-pain"]
    assert [s.id for s in search_symptoms("জ্বর", "bn")] == ["fever"]


@pytest.mark.parametrize("intensity", [0, 11, 5.5, True])
def test_intensity_must_be_integer_in_range(intensity):
    with pytest.raises(ValueError):
        SelectedSymptom(get_symptom("headache"), Duration.TODAY, intensity)


def test_reselecting_replaces_previous_entry():
    session = SymptomSession()
    session.select("headache", "today", 4)
    session.select("fever", "few-days", 6)
    session.select("headache", Duration.WEEK, 8)

    assert session.symptom_ids == ["fever", "headache"]
    headache = session.selected[-1]
    assert headache.intensity == 8
    assert headache.duration == Duration.WEEK


def test_red_flags(make_selection):
    assert detect_red_flags(make_selection(("headache", 5))) == []
    assert detect_red_flags(make_selection(("headache", 9))) == ["red_flag.high_intensity"]
    assert detect_red_flags(make_selection(("breathing-difficulty", 3))) == [
        "red_flag.breathing-difficulty",
    ]


def test_base_questions_always_come_first():
    questions = QuestionGenerator().generate([], "en")

    assert [q.id for q in questions] == BASE_IDS
    assert questions[0].category == QuestionCategory.TIMING
    assert questions[2].required is False
    assert questions[3].type == QuestionType.YES_NO
    assert questions[6].type == QuestionType.SCALE


def test_symptom_blocks_follow_catalog_order(make_selection):
    selected = make_selection(("abdominal-pain", 5), ("chest-pain", 6), ("headache", 4), ("fever", 3))
    ids = QuestionGenerator().question_ids(selected)

    assert ids[:7] == BASE_IDS
    assert ids[7:] == [
        "headache_location", "headache_triggers",
        "fever_pattern", "fever_associated_symptoms",
        "chest_pain_radiation", "chest_pain_breathing",
        "abdominal_pain_location", "abdominal_pain_food_relation",
    ]


def test_generation_is_order_independent():
    generator = QuestionGenerator()
    assert generator.question_ids(["fever", "headache"]) == generator.question_ids(["headache", "fever"])


def test_symptoms_without_a_block_add_nothing():
    assert QuestionGenerator().question_ids(["cough", "fatigue"]) == BASE_IDS


def test_questions_are_localized():
    en = QuestionGenerator().generate(["headache"], "en")
    bn = QuestionGenerator().generate(["headache"], "bn")

    assert [q.id for q in en] == [q.id for q in bn]
    assert en[0].text == "When did the symptoms start?"
    assert bn[0].text == "লক্ষণগুলো কখন শুরু হয়েছে?"
    assert len(en[-2].options) == len(bn[-2].options) == 5


def test_unknown_locale_raises():
    with pytest.raises(ValueError):
        QuestionGenerator().generate(["headache"], "fr")


def test_questionnaire_required_and_optional_flow():
    questionnaire = Questionnaire(QuestionGenerator().generate(["headache"], "en"))

    assert questionnaire.is_complete is False
    assert questionnaire.next_unanswered().id == "symptom_onset"

    with pytest.raises(ValueError):
        questionnaire.skip("symptom_onset")

    questionnaire.answer("symptom_onset", "Today")
    questionnaire.answer("symptom_pattern", "Intermittent")
    questionnaire.skip("previous_conditions")
    questionnaire.answer("current_medications", False)
    questionnaire.answer("allergies", True)
    questionnaire.answer("smoking_status", "No")
    questionnaire.answer("stress_level", 6)

    assert questionnaire.missing_required() == ["headache_location"]
    assert questionnaire.next_unanswered().id == "headache_location"

    questionnaire.answer("headache_location", "Forehead")
    assert questionnaire.is_complete is True
    # Optional headache_triggers is still open.
    assert questionnaire.next_unanswered().id == "headache_triggers"


def test_later_answer_overwrites_earlier():
    questionnaire = Questionnaire(QuestionGenerator().generate([], "en"))
    questionnaire.answer("stress_level", 3)
    questionnaire.answer("stress_level", 9)

    responses = {r.question_id: r.answer for r in questionnaire.responses}
    assert responses == {"stress_level": 9}


@pytest.mark.parametrize("question_id,answer", [
    ("stress_level", 11),
    ("stress_level", "high"),
    ("allergies", "yes"),
    ("symptom_onset", "Last year"),
])
def test_invalid_answers_are_rejected(question_id, answer):
    questionnaire = Questionnaire(QuestionGenerator().generate([], "en"))
    with pytest.raises(ValueError):
        questionnaire.answer(question_id, answer)


def test_unknown_question_id_raises():
    questionnaire = Questionnaire(QuestionGenerator().generate([], "en"))
    with pytest.raises(KeyError):
        questionnaire.answer("blood_type", "O+")
