"""
Follow-up Question Generator

Builds the detailed questionnaire shown after the user picks symptoms:
two timing questions, three medical-history questions and two lifestyle
questions always come first, followed by symptom-specific blocks for
headache, fever, chest pain and abdominal pain (in catalog order).

The generator is pure and deterministic: the same set of symptom ids, in any
order, always yields the same question-id sequence.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple, Union

from ..locale import check_locale, t, t_list
from .catalog import SelectedSymptom, catalog_order

SCALE_MIN = 1
SCALE_MAX = 10


class QuestionType(Enum):
    MULTIPLE_CHOICE = "multiple-choice"
    SCALE = "scale"
    YES_NO = "yes-no"
    TEXT = "text"


class QuestionCategory(Enum):
    TIMING = "timing"
    SEVERITY = "severity"
    ASSOCIATED = "associated"
    TRIGGERS = "triggers"
    MEDICAL_HISTORY = "medical-history"
    LIFESTYLE = "lifestyle"


@dataclass(frozen=True)
class QuestionTemplate:
    """Locale-independent definition of a question."""

    id: str
    type: QuestionType
    category: QuestionCategory
    required: bool = True

    def build(self, locale: str) -> "DetailedQuestion":
        options = []
        if self.type == QuestionType.MULTIPLE_CHOICE:
            options = t_list(f"question.{self.id}.options", locale)
        return DetailedQuestion(
            id=self.id,
            text=t(f"question.{self.id}.text", locale),
            type=self.type,
            category=self.category,
            required=self.required,
            options=options,
        )


@dataclass
class DetailedQuestion:
    id: str
    text: str
    type: QuestionType
    category: QuestionCategory
    required: bool
    options: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "text": self.text,
            "type": self.type.value,
            "category": self.category.value,
            "required": self.required,
            "options": list(self.options),
        }


@dataclass
class QuestionResponse:
    question_id: str
    answer: Union[str, int, bool]

    def to_dict(self) -> dict:
        return {"question_id": self.question_id, "answer": self.answer}


_MC = QuestionType.MULTIPLE_CHOICE
_YN = QuestionType.YES_NO

BASE_QUESTIONS: Tuple[QuestionTemplate, ...] = (
    QuestionTemplate("symptom_onset", _MC, QuestionCategory.TIMING),
    QuestionTemplate("symptom_pattern", _MC, QuestionCategory.TIMING),
    QuestionTemplate("previous_conditions", _MC, QuestionCategory.MEDICAL_HISTORY, required=False),
    QuestionTemplate("current_medications", _YN, QuestionCategory.MEDICAL_HISTORY),
    QuestionTemplate("allergies", _YN, QuestionCategory.MEDICAL_HISTORY),
    QuestionTemplate("smoking_status", _MC, QuestionCategory.LIFESTYLE),
    QuestionTemplate("stress_level", QuestionType.SCALE, QuestionCategory.LIFESTYLE),
)

SYMPTOM_QUESTION_BLOCKS: Dict[str, Tuple[QuestionTemplate, ...]] = {
    "headache": (
        QuestionTemplate("headache_location", _MC, QuestionCategory.ASSOCIATED),
        QuestionTemplate("headache_triggers", _MC, QuestionCategory.TRIGGERS, required=False),
    ),
    "fever": (
        QuestionTemplate("fever_pattern", _MC, QuestionCategory.TIMING),
        QuestionTemplate("fever_associated_symptoms", _MC, QuestionCategory.ASSOCIATED, required=False),
    ),
    "chest-pain": (
        QuestionTemplate("chest_pain_radiation", _MC, QuestionCategory.ASSOCIATED),
        QuestionTemplate("chest_pain_breathing", _YN, QuestionCategory.TRIGGERS),
    ),
    "abdominal-pain": (
        QuestionTemplate("abdominal_pain_location", _MC, QuestionCategory.ASSOCIATED),
        QuestionTemplate("abdominal_pain_food_relation", _MC, QuestionCategory.TRIGGERS),
    ),
}


def _symptom_ids(selected: Iterable[Union[SelectedSymptom, str]]) -> List[str]:
    return [s if isinstance(s, str) else s.id for s in selected]


class QuestionGenerator:
    """Turns a symptom selection into an ordered list of follow-up questions."""

    def templates(self, selected: Iterable[Union[SelectedSymptom, str]]) -> List[QuestionTemplate]:
        templates = list(BASE_QUESTIONS)
        for symptom_id in catalog_order(_symptom_ids(selected)):
            templates.extend(SYMPTOM_QUESTION_BLOCKS.get(symptom_id, ()))
        return templates

    def question_ids(self, selected: Iterable[Union[SelectedSymptom, str]]) -> List[str]:
        return [q.id for q in self.templates(selected)]

    def generate(
        self,
        selected: Iterable[Union[SelectedSymptom, str]],
        locale: str = "en",
    ) -> List[DetailedQuestion]:
        """
        Build the questionnaire for a selection.

        Args:
            selected: SelectedSymptom entries or bare symptom ids
            locale: "bn" or "en"

        Returns:
            Localized questions, base block first
        """
        check_locale(locale)
        return [template.build(locale) for template in self.templates(selected)]


class Questionnaire:
    """
    Answer state for a generated question list.

    Required questions must be answered before the questionnaire is complete;
    optional ones may be answered or explicitly skipped.
    """

    def __init__(self, questions: List[DetailedQuestion]):
        self.questions = list(questions)
        self._by_id = {q.id: q for q in self.questions}
        self._answers: Dict[str, Union[str, int, bool]] = {}
        self._skipped: set = set()

    def _question(self, question_id: str) -> DetailedQuestion:
        try:
            return self._by_id[question_id]
        except KeyError:
            raise KeyError(f"Unknown question id: {question_id!r}") from None

    def answer(self, question_id: str, answer: Union[str, int, bool]) -> QuestionResponse:
        """Record an answer; a later answer for the same question overwrites."""
        question = self._question(question_id)
        self._validate(question, answer)
        self._answers[question_id] = answer
        self._skipped.discard(question_id)
        return QuestionResponse(question_id, answer)

    def skip(self, question_id: str) -> None:
        question = self._question(question_id)
        if question.required:
            raise ValueError(f"Question {question_id!r} is required and cannot be skipped")
        self._answers.pop(question_id, None)
        self._skipped.add(question_id)

    @staticmethod
    def _validate(question: DetailedQuestion, answer) -> None:
        if question.type == QuestionType.YES_NO:
            if not isinstance(answer, bool):
                raise ValueError(f"{question.id}: expected True/False, got {answer!r}")
        elif question.type == QuestionType.SCALE:
            if isinstance(answer, bool) or not isinstance(answer, int):
                raise ValueError(f"{question.id}: expected an integer, got {answer!r}")
            if not SCALE_MIN <= answer <= SCALE_MAX:
                raise ValueError(f"{question.id}: scale answer must be {SCALE_MIN}-{SCALE_MAX}")
        elif question.type == QuestionType.MULTIPLE_CHOICE:
            if answer not in question.options:
                raise ValueError(f"{question.id}: {answer!r} is not one of the options")
        elif not isinstance(answer, str) or not answer.strip():
            raise ValueError(f"{question.id}: expected non-empty text")

    def is_settled(self, question_id: str) -> bool:
        """Whether the user may move past this question."""
        self._question(question_id)
        return question_id in self._answers or question_id in self._skipped

    def next_unanswered(self) -> Optional[DetailedQuestion]:
        for question in self.questions:
            if not self.is_settled(question.id):
                return question
        return None

    def missing_required(self) -> List[str]:
        return [
            q.id for q in self.questions
            if q.required and q.id not in self._answers
        ]

    @property
    def is_complete(self) -> bool:
        return not self.missing_required()

    @property
    def responses(self) -> List[QuestionResponse]:
        """Answers in question order."""
        return [
            QuestionResponse(q.id, self._answers[q.id])
            for q in self.questions
            if q.id in self._answers
        ]
