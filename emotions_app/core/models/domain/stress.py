"""
Stress assessment scoring.

Patients answer a fixed questionnaire on a 1..5 scale (1 = never, 5 = very
often). Answers are combined as a weighted mean, normalised onto 0..10 and
bucketed into a stress level. The health percentage shown on the dashboard
is the mirror image of the stress score.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Tuple

from emotions_app.core.exceptions import DomainValidationError

from .enums import StressLevel

MIN_ANSWER = 1
MAX_ANSWER = 5
LOW_STRESS_BELOW = 4.0
HIGH_STRESS_FROM = 7.0


@dataclass(frozen=True)
class StressQuestion:
    id: int
    text: str
    category: str
    weight: float = 1.0


QUESTIONS: Tuple[StressQuestion, ...] = (
    StressQuestion(1, "How often have you felt overwhelmed by your responsibilities?", "emotional", 1.5),
    StressQuestion(2, "How often have you had trouble falling or staying asleep?", "physical", 1.0),
    StressQuestion(3, "How often have you felt irritable or on edge?", "emotional", 1.0),
    StressQuestion(4, "How often have you had headaches, tension or an upset stomach?", "physical", 1.0),
    StressQuestion(5, "How often have you found it hard to concentrate?", "cognitive", 1.0),
    StressQuestion(6, "How often have you felt unable to control important things in your life?", "emotional", 1.5),
    StressQuestion(7, "How often have you avoided people or activities you usually enjoy?", "behavioral", 1.0),
    StressQuestion(8, "How often have you felt that difficulties were piling up too high?", "cognitive", 1.5),
)

_QUESTIONS_BY_ID: Dict[int, StressQuestion] = {q.id: q for q in QUESTIONS}


@dataclass(frozen=True)
class StressScore:
    stress_score: float
    health_percentage: float
    status: StressLevel


def classify(stress_score: float) -> StressLevel:
    if stress_score < LOW_STRESS_BELOW:
        return StressLevel.low
    if stress_score < HIGH_STRESS_FROM:
        return StressLevel.moderate
    return StressLevel.high


def score_responses(responses: Mapping[int, int]) -> StressScore:
    """Score a complete set of answers.

    Args:
        responses: Mapping of question id to an answer in ``1..5``.

    Raises:
        DomainValidationError: when a question is unanswered, an unknown question
            id is present, or an answer is out of range.
    """
    unknown = sorted(set(responses) - set(_QUESTIONS_BY_ID))
    if unknown:
        raise DomainValidationError(f"Unknown stress question ids: {unknown}")
    missing = sorted(set(_QUESTIONS_BY_ID) - set(responses))
    if missing:
        raise DomainValidationError(f"Missing answers for stress questions: {missing}")

    weighted_total = 0.0
    weight_sum = 0.0
    for question_id, answer in responses.items():
        if not MIN_ANSWER <= answer <= MAX_ANSWER:
            raise DomainValidationError(
                f"Answer for question {question_id} must be between {MIN_ANSWER} and {MAX_ANSWER}"
            )
        weight = _QUESTIONS_BY_ID[question_id].weight
        weighted_total += answer * weight
        weight_sum += weight

    mean = weighted_total / weight_sum
    stress_score = round((mean - MIN_ANSWER) / (MAX_ANSWER - MIN_ANSWER) * 10, 2)
    health_percentage = round(100 - stress_score * 10, 2)
    return StressScore(stress_score=stress_score, health_percentage=health_percentage, status=classify(stress_score))
