from .client import BlockedEmail, Client
from .exercise import ExerciseRecord, ExtractionResult
from .profile import GiftProRequest, UserProfile
from .workout import ProcessedWorkout, ProcessWorkoutRequest, Workout, WorkoutSet

__all__ = [
    "BlockedEmail",
    "Client",
    "ExerciseRecord",
    "ExtractionResult",
    "GiftProRequest",
    "ProcessedWorkout",
    "ProcessWorkoutRequest",
    "UserProfile",
    "Workout",
    "WorkoutSet",
]
