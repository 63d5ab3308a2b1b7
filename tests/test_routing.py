"""Tests for SpecialtyRouter and the doctor directory."""

from mimucare.agents.routing import RoutingUrgency, SpecialtyRouter
from mimucare.directory import StaticDoctorDirectory


def routes(router, selected, locale="en"):
    return [(r.specialty_id, r.urgency) for r in router.route(selected, locale)]


def test_chest_pain_routes_to_cardiology_high(directory, make_selection):
    router = SpecialtyRouter(directory)
    assert routes(router, make_selection(("chest-pain", 4))) == [
        ("cardiology", RoutingUrgency.HIGH),
    ]


def test_palpitations_alone_is_medium_cardiology(make_selection):
    assert routes(SpecialtyRouter(), make_selection(("palpitations", 5))) == [
        ("cardiology", RoutingUrgency.MEDIUM),
    ]


def test_nausea_routes_to_gastroenterology(make_selection):
    assert routes(SpecialtyRouter(), make_selection(("nausea", 2))) == [
        ("gastroenterology", RoutingUrgency.MEDIUM),
    ]


def test_abdominal_pain_skips_general_medicine(make_selection):
    assert routes(SpecialtyRouter(), make_selection(("abdominal-pain", 3))) == [
        ("gastroenterology", RoutingUrgency.MEDIUM),
    ]


def test_neurology_urgency_uses_any_symptom_intensity(make_selection):
    router = SpecialtyRouter()
    assert routes(router, make_selection(("dizziness", 3))) == [("neurology", RoutingUrgency.MEDIUM)]
    assert routes(router, make_selection(("dizziness", 3), ("vomiting", 8))) == [
        ("gastroenterology", RoutingUrgency.MEDIUM),
        ("neurology", RoutingUrgency.HIGH),
    ]


def test_general_category_adds_general_medicine(make_selection):
    # Fever sits under "head" but is a general-category symptom.
    assert routes(SpecialtyRouter(), make_selection(("headache", 5), ("fever", 5))) == [
        ("neurology", RoutingUrgency.MEDIUM),
        ("general_medicine", RoutingUrgency.LOW),
    ]


def test_unmatched_symptoms_fall_back_to_general_medicine(make_selection):
    assert routes(SpecialtyRouter(), make_selection(("constipation", 3))) == [
        ("general_medicine", RoutingUrgency.LOW),
    ]
    assert routes(SpecialtyRouter(), make_selection(("cough", 3))) == [
        ("general_medicine", RoutingUrgency.LOW),
    ]


def test_multiple_guards_fire_in_order(make_selection):
    selected = make_selection(("fatigue", 2), ("abdominal-pain", 4), ("breathing-difficulty", 5), ("headache", 9))
    assert routes(SpecialtyRouter(), selected) == [
        ("cardiology", RoutingUrgency.MEDIUM),
        ("gastroenterology", RoutingUrgency.MEDIUM),
        ("neurology", RoutingUrgency.HIGH),
        ("general_medicine", RoutingUrgency.LOW),
    ]


def test_recommendations_carry_localized_reason_and_doctors(directory, make_selection):
    router = SpecialtyRouter(directory)
    en = router.route(make_selection(("chest-pain", 6)), "en")[0]
    bn = router.route(make_selection(("chest-pain", 6)), "bn")[0]

    assert en.specialty == "Cardiology"
    assert en.reason == "Chest pain, breathing difficulty, or palpitations require cardiology consultation."
    assert [d.id for d in en.doctors] == ["card1"]
    assert en.doctors[0].name == "Dr. Nasir Uddin"
    assert bn.specialty == "হৃদরোগ বিশেষজ্ঞ"
    assert bn.doctors[0].name == "ডা. নাসির উদ্দিন"


def test_router_without_directory_has_no_doctors(make_selection):
    recommendation = SpecialtyRouter().route(make_selection(("cough", 3)), "en")[0]
    assert recommendation.doctors == []


def test_static_directory_lookup():
    directory = StaticDoctorDirectory.from_json()
    doctors = directory.lookup_doctors("general_medicine", "en")

    assert [d.id for d in doctors] == ["gm1", "gm2"]
    assert doctors[0].rating == 4.8
    assert doctors[0].specialty == "General Medicine"
    assert directory.lookup_doctors("dermatology", "en") == []
