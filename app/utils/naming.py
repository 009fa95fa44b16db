from collections import Counter
from dataclasses import dataclass
from typing import Callable, Sequence

from app.models.exercise import ExerciseRecord
from app.utils.taxonomy import PULL_GROUPS, PUSH_GROUPS, MuscleGroup

FULL_BODY = "Full Body"


class InvalidInputError(ValueError):
    """Raised when a workout cannot be named from the given exercises."""

    pass


@dataclass(frozen=True)
class NamingRule:
    name: str
    matches: Callable[[Counter], bool]


def _is_leg_day(counts: Counter) -> bool:
    legs = counts.get(MuscleGroup.LEGS, 0)
    if not legs:
        return False
    # Ties go to legs
    return all(legs >= n for group, n in counts.items() if group != MuscleGroup.LEGS)


def _exactly(*groups: MuscleGroup) -> Callable[[Counter], bool]:
    wanted = frozenset(groups)
    return lambda counts: set(counts) == wanted


# Evaluated top to bottom, first match wins. Order matters more than
# specificity: "Pull Day" shadows "Back & Biceps" and "Push Day" shadows
# "Chest & Triceps".
NAMING_RULES: tuple[NamingRule, ...] = (
    NamingRule(
        "Strength & Conditioning", lambda counts: MuscleGroup.EXPLOSIVE in counts
    ),
    NamingRule("Push Day", lambda counts: len(PUSH_GROUPS & set(counts)) >= 2),
    NamingRule("Pull Day", lambda counts: len(PULL_GROUPS & set(counts)) >= 2),
    NamingRule("Leg Day", _is_leg_day),
    NamingRule("Chest & Triceps", _exactly(MuscleGroup.CHEST, MuscleGroup.TRICEPS)),
    NamingRule("Back & Biceps", _exactly(MuscleGroup.BACK, MuscleGroup.BICEPS)),
    NamingRule("Shoulders", _exactly(MuscleGroup.SHOULDERS)),
    NamingRule("Arms", _exactly(MuscleGroup.BICEPS, MuscleGroup.TRICEPS)),
)


def count_muscle_groups(exercises: Sequence[ExerciseRecord]) -> Counter:
    """
    Count exercises per muscle group.

    Raises InvalidInputError for an empty sequence or any exercise
    without a resolved muscle group.
    """
    if not exercises:
        raise InvalidInputError("Cannot name a workout with no exercises")

    counts: Counter = Counter()
    for exercise in exercises:
        if exercise.muscle_group is None:
            raise InvalidInputError(
                f"Exercise '{exercise.name}' has no resolved muscle group"
            )
        counts[exercise.muscle_group] += 1
    return counts


def derive_workout_name(exercises: Sequence[ExerciseRecord]) -> str:
    """
    Derive a workout name from the muscle groups its exercises target.

    The result depends only on the muscle groups (and how many exercises hit
    each), never on exercise names or order, so the same workout always gets
    the same name.
    """
    counts = count_muscle_groups(exercises)

    for rule in NAMING_RULES:
        if rule.matches(counts):
            return rule.name

    if len(counts) == 1:
        (group,) = counts
        return group.display_name

    return FULL_BODY
