"""
Appraisal scoring.

Every function here is pure: the stored `overall_score` is a cache of
`score_appraisal(...).total` and can always be recomputed from the document.
"""
import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Sequence

from sams.constants.criteria import (
    RATING_MAX,
    RATING_MIN,
    TARGET_MAX_MARKS,
    CategoryProfile,
    profile_for_role,
)
from sams.schemas.appraisal import AppraisalData, Observation, ScoreBreakdown, Target

# (minimum average %, rating, marks), checked top-down
TARGET_BANDS = (
    (99.0, "Excellent", 33),
    (95.0, "Above Average", 30),
    (86.0, "Satisfactory", 20),
)
TARGET_FLOOR = ("Unsatisfactory", 5)

# (minimum percentage, band), checked top-down
OVERALL_BANDS = (
    (93.0, "Leading"),
    (80.0, "Strong"),
    (65.0, "Solid"),
    (50.0, "Building"),
)
OVERALL_FLOOR = "Below Expectations"


@dataclass(frozen=True)
class TargetStats:
    average: float
    rating: str
    marks: int


def to_number(value: Any) -> Optional[float]:
    """Numeric value of a form field, or None for blanks and non-numbers."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).strip())
        except ValueError:
            return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def valid_rating(value: Any) -> Optional[int]:
    number = to_number(value)
    if number is None or not number.is_integer():
        return None
    rating = int(number)
    if RATING_MIN <= rating <= RATING_MAX:
        return rating
    return None


def target_percentage(target: Target) -> Optional[float]:
    goal = to_number(target.target)
    actual = to_number(target.actual)
    if goal is None or goal <= 0 or actual is None:
        return None
    return actual / goal * 100


def target_stats(targets: Iterable[Target]) -> TargetStats:
    targets = list(targets)
    if not targets:
        return TargetStats(average=0.0, rating=TARGET_FLOOR[0], marks=0)

    # targets exist but none qualify: floor band, floor marks
    percentages = [p for p in (target_percentage(t) for t in targets) if p is not None]
    average = sum(percentages) / len(percentages) if percentages else 0.0

    for threshold, rating, marks in TARGET_BANDS:
        if average >= threshold:
            return TargetStats(average=round(average, 1), rating=rating, marks=marks)
    rating, marks = TARGET_FLOOR
    return TargetStats(average=round(average, 1), rating=rating, marks=marks)


def rating_sum(ratings: Mapping[int, Any], parameters: Sequence[str]) -> int:
    total = 0
    for index in range(len(parameters)):
        rating = valid_rating(ratings.get(index))
        if rating is not None:
            total += rating
    return total


def has_ratings(ratings: Mapping[int, Any], parameters: Sequence[str]) -> bool:
    return any(valid_rating(ratings.get(i)) is not None for i in range(len(parameters)))


def observation_score(first: Observation, second: Observation, parameters: Sequence[str]) -> float:
    first_sum = rating_sum(first.ratings, parameters)
    if not has_ratings(second.ratings, parameters):
        return float(first_sum)
    second_sum = rating_sum(second.ratings, parameters)
    return round((first_sum + second_sum) / 2, 1)


def overall_band(percentage: float) -> str:
    for threshold, band in OVERALL_BANDS:
        if percentage >= threshold:
            return band
    return OVERALL_FLOOR


def score_appraisal(data: AppraisalData, role=None, profile: Optional[CategoryProfile] = None) -> ScoreBreakdown:
    profile = profile or profile_for_role(role)

    targets = target_stats(data.targets)
    obs_params = profile.observation_parameters
    eval_params = profile.evaluation_parameters

    obs1 = float(rating_sum(data.observation1.ratings, obs_params))
    obs2 = float(rating_sum(data.observation2.ratings, obs_params))
    obs_score = observation_score(data.observation1, data.observation2, obs_params)
    eval_score = float(rating_sum(data.evaluation.ratings, eval_params))

    max_targets = TARGET_MAX_MARKS if profile.has_targets else 0
    max_observation = len(obs_params) * RATING_MAX
    max_evaluation = len(eval_params) * RATING_MAX
    max_total = max_targets + max_observation + max_evaluation

    total = eval_score
    if profile.has_targets:
        total += targets.marks
    if profile.has_observations:
        total += obs_score
    total = round(total, 1)

    percentage = total / max_total * 100 if max_total > 0 else 0.0

    return ScoreBreakdown(
        target_average=targets.average,
        target_rating=targets.rating,
        target_marks=targets.marks,
        observation1_score=obs1,
        observation2_score=obs2,
        observation_score=obs_score,
        evaluation_score=eval_score,
        total=total,
        max_targets=max_targets,
        max_observation=max_observation,
        max_evaluation=max_evaluation,
        max_total=max_total,
        percentage=round(percentage, 1),
        rating=overall_band(percentage),
    )


def overall_score(data: AppraisalData, role=None) -> float:
    return score_appraisal(data, role).total
