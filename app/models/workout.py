from datetime import date as DateType
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Literal

from pydantic import BaseModel, Field, StringConstraints, field_validator

from app.models.exercise import ExerciseRecord
from app.utils.dates import date_to_iso, dt_to_iso
from app.utils.taxonomy import MuscleGroup

NameStr = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)
]

AI_NOTES = "Processed by AI (OpenAI)"


class Workout(BaseModel):
    PK: str  # "USER#<sub>" or "CLIENT#<client id>"
    SK: str  # "WORKOUT#2025-11-04#W1"
    type: Literal["workout"]
    date: DateType
    name: NameStr
    user_sub: str
    client_id: str | None = None
    notes: str | None = Field(default=None, max_length=2000)
    audio_path: str | None = None
    duration_seconds: int = Field(default=0, ge=0)

    created_at: datetime
    updated_at: datetime

    @property
    def workout_id(self) -> str:
        return self.SK.split("#")[-1]

    def to_ddb_item(self) -> dict:
        data = self.model_dump(exclude_none=True)
        data["date"] = date_to_iso(self.date)
        data["created_at"] = dt_to_iso(self.created_at)
        data["updated_at"] = dt_to_iso(self.updated_at)
        return data


class WorkoutSet(BaseModel):
    PK: str
    SK: str  # "WORKOUT#2025-11-04#W1#SET#001"
    type: Literal["set"]
    exercise_name: NameStr
    muscle_group: MuscleGroup | None = None
    weight: Decimal = Field(default=Decimal("0"), ge=0)
    sets: int = Field(ge=1)
    reps: int = Field(ge=1)
    order_index: int = Field(ge=0)

    created_at: datetime
    updated_at: datetime

    @property
    def workout_id(self) -> str:
        parts = self.SK.split("#")
        if len(parts) < 3:
            raise ValueError(f"Invalid SK format: {self.SK}")
        return parts[2]

    def to_ddb_item(self) -> dict:
        data = self.model_dump(exclude_none=True, mode="python")
        if self.muscle_group is not None:
            data["muscle_group"] = self.muscle_group.value
        data["created_at"] = dt_to_iso(self.created_at)
        data["updated_at"] = dt_to_iso(self.updated_at)
        return data


class ProcessWorkoutRequest(BaseModel):
    storage_path: str = Field(min_length=1)
    duration: int = Field(default=0, ge=0)
    client_id: str | None = None

    @field_validator("duration", mode="before")
    @classmethod
    def whole_seconds(cls, v):
        # recorders report fractional seconds; missing means 0
        if not v:
            return 0
        if isinstance(v, float):
            return round(v)
        return v

    @field_validator("client_id", mode="before")
    @classmethod
    def blank_client_is_none(cls, v):
        return v or None

    @property
    def owner_folder(self) -> str:
        """First path segment of the object key, e.g. "<sub>/2025/rec.m4a" -> "<sub>"."""
        return self.storage_path.lstrip("/").split("/")[0]


class ProcessedWorkout(BaseModel):
    workout: Workout
    sets: list[WorkoutSet]
    exercises: list[ExerciseRecord]
    transcription: str

    def to_response(self) -> dict:
        return {
            "success": True,
            "data": {
                "workout_id": self.workout.workout_id,
                "workout_name": self.workout.name,
                "exercises": [
                    {
                        "name": e.name,
                        "muscle_group": e.muscle_group.value if e.muscle_group else None,
                        "weight": float(e.weight),
                        "sets": e.sets,
                        "reps": e.reps,
                    }
                    for e in self.exercises
                ],
            },
            "transcription": self.transcription,
        }
