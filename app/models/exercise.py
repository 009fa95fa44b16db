from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

from app.utils.taxonomy import MuscleGroup, parse_muscle_group

NameStr = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=100),
]

DEFAULT_WEIGHT = Decimal("0")
DEFAULT_SETS = 3
DEFAULT_REPS = 10


class ExerciseRecord(BaseModel):
    """
    One exercise recognised in a recording.

    Missing, null or zero numbers from the extractor fall back to
    0 kg / 3 sets / 10 reps.
    """

    model_config = ConfigDict(frozen=True)

    name: NameStr
    muscle_group: MuscleGroup | None = None
    weight: Decimal = Field(default=DEFAULT_WEIGHT, ge=0)
    sets: int = Field(default=DEFAULT_SETS, ge=1)
    reps: int = Field(default=DEFAULT_REPS, ge=1)

    @field_validator("muscle_group", mode="before")
    @classmethod
    def parse_group(cls, v):
        if v is None or isinstance(v, MuscleGroup):
            return v
        return parse_muscle_group(str(v))

    @field_validator("weight", mode="before")
    @classmethod
    def default_weight(cls, v):
        if v in (None, ""):
            return DEFAULT_WEIGHT
        # go via str so floats like 22.5 don't pick up binary noise
        return Decimal(str(v)) if isinstance(v, float) else v

    @field_validator("sets", mode="before")
    @classmethod
    def default_sets(cls, v):
        return v or DEFAULT_SETS

    @field_validator("reps", mode="before")
    @classmethod
    def default_reps(cls, v):
        return v or DEFAULT_REPS


class ExtractionResult(BaseModel):
    not_gym_related: bool = False
    exercises: list[ExerciseRecord] = Field(default_factory=list)
