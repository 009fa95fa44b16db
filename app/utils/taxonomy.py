# app/utils/taxonomy.py

import re
from enum import Enum


class MuscleGroup(str, Enum):
    """Body-region categories used to classify a recognised exercise."""

    CHEST = "Chest"
    SHOULDERS = "Shoulders"
    TRICEPS = "Triceps"
    BACK = "Back"
    BICEPS = "Biceps"
    LEGS = "Legs"
    # Compound / power movements (clean, snatch, sprints, ...)
    EXPLOSIVE = "Explosive"

    @property
    def display_name(self) -> str:
        return self.value


PUSH_GROUPS: frozenset[MuscleGroup] = frozenset(
    {MuscleGroup.CHEST, MuscleGroup.SHOULDERS, MuscleGroup.TRICEPS}
)
PULL_GROUPS: frozenset[MuscleGroup] = frozenset({MuscleGroup.BACK, MuscleGroup.BICEPS})


EXERCISES_BY_GROUP: dict[MuscleGroup, tuple[str, ...]] = {
    MuscleGroup.CHEST: (
        "Bench Press",
        "Incline Bench Press",
        "Decline Bench Press",
        "Chest Flyes",
        "Cable Flyes",
        "Dumbbell Flyes",
        "Chest Press",
        "Pec Deck",
        "Push-ups",
        "Dips",
    ),
    MuscleGroup.SHOULDERS: (
        "Lateral Raises",
        "Front Raises",
        "Rear Delt Flyes",
        "Shoulder Press",
        "Military Press",
        "Arnold Press",
        "Upright Rows",
        "Face Pulls",
        "Shrugs",
    ),
    MuscleGroup.TRICEPS: (
        "Tricep Extensions",
        "Tricep Pushdowns",
        "Skull Crushers",
        "Overhead Tricep Extensions",
        "Close-Grip Bench Press",
        "Tricep Kickbacks",
    ),
    MuscleGroup.BACK: (
        "Lat Pulldown",
        "Seated Rows",
        "Bent-Over Rows",
        "T-Bar Rows",
        "Pull-ups",
        "Cable Rows",
        "Deadlift",
        "Back Extensions",
    ),
    MuscleGroup.BICEPS: (
        "Bicep Curls",
        "Hammer Curls",
        "Preacher Curls",
        "Concentration Curls",
        "Cable Curls",
        "Incline Curls",
    ),
    MuscleGroup.LEGS: (
        "Squats",
        "Leg Press",
        "Leg Extensions",
        "Leg Curls",
        "Lunges",
        "Romanian Deadlift",
        "Calf Raises",
        "Hip Thrusts",
        "Bulgarian Split Squats",
    ),
    MuscleGroup.EXPLOSIVE: (
        "Clean",
        "Snatch",
        "Clean & Jerk",
        "Power Clean",
        "Turkish Get-Up",
        "Kettlebell Swings",
        "Box Jumps",
        "Battle Ropes",
        "Sled Push",
        "Sled Pull",
        "Tire Flips",
        "Burpees",
        "Sprints",
    ),
}

_SEPARATORS = re.compile(r"[\s\-_]+")


def normalise_exercise_name(name: str) -> str:
    """
    Canonical lookup key for an exercise name.

    "Push-Ups", "push ups" and " PUSH_UPS " all map to "push ups".
    """
    return _SEPARATORS.sub(" ", name.strip().casefold()).strip()


EXERCISE_MUSCLE_GROUPS: dict[str, MuscleGroup] = {
    normalise_exercise_name(exercise): group
    for group, exercises in EXERCISES_BY_GROUP.items()
    for exercise in exercises
}


def classify_exercise(name: str) -> MuscleGroup | None:
    """
    Look up the muscle group for an exercise name in the static table.

    Singular/plural variants are tolerated ("Squat" / "Squats").
    Returns None for anything not in the table.
    """
    key = normalise_exercise_name(name)
    if not key:
        return None

    candidates = [key, f"{key}s"]
    if key.endswith("s"):
        candidates.append(key[:-1])

    for candidate in candidates:
        group = EXERCISE_MUSCLE_GROUPS.get(candidate)
        if group is not None:
            return group
    return None


def parse_muscle_group(value: str | None) -> MuscleGroup | None:
    """Parse a free-form muscle group label, returning None if unknown."""
    if not value:
        return None

    wanted = value.strip().casefold()
    for group in MuscleGroup:
        if group.value.casefold() == wanted:
            return group
    return None
