from dataclasses import dataclass

from app.models.exercise import ExerciseRecord, ExtractionResult
from app.models.workout import ProcessedWorkout, ProcessWorkoutRequest
from app.repositories.client import ClientRepository
from app.repositories.workout import WorkoutRepository
from app.settings import settings
from app.utils import db
from app.utils.ai import ExerciseExtractor, Transcriber
from app.utils.log import logger
from app.utils.naming import derive_workout_name
from app.utils.storage import AudioStore
from app.utils.taxonomy import classify_exercise

FALLBACK_WORKOUT_NAME = "Workout"


# ─────────────────────────────────────────
# Errors
# ─────────────────────────────────────────


class RecordingRejected(Exception):
    """The recording was processed but contains nothing we can log."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message}


class ForbiddenRecordingError(Exception):
    """The recording lives outside the caller's storage folder."""

    pass


EMPTY_RECORDING = (
    "EMPTY_RECORDING",
    "Sorry, we could not detect any workout details. Please try again and speak clearly.",
)
NOT_GYM_RELATED = (
    "NOT_GYM_RELATED",
    "Sorry, we could not understand what you said. Please describe your workout exercises.",
)
NO_EXERCISES = (
    "NO_EXERCISES",
    "Sorry, we could not detect any workout details. Please try again and mention your exercises.",
)


# ─────────────────────────────────────────
# Steps
# ─────────────────────────────────────────


def validate_transcript(transcription: str | None) -> str:
    text = (transcription or "").strip()
    if len(text) < settings.MIN_TRANSCRIPT_LENGTH:
        logger.info("Empty or too short transcription")
        raise RecordingRejected(*EMPTY_RECORDING)
    return text


def check_extraction(result: ExtractionResult) -> list[ExerciseRecord]:
    if result.not_gym_related:
        logger.info("Transcription is not gym related")
        raise RecordingRejected(*NOT_GYM_RELATED)
    if not result.exercises:
        logger.info("No exercises extracted")
        raise RecordingRejected(*NO_EXERCISES)
    return result.exercises


def resolve_muscle_groups(exercises: list[ExerciseRecord]) -> list[ExerciseRecord]:
    """
    Muscle group per exercise: the static exercise table wins, the model's
    label is only used for names the table doesn't know. Exercises with
    neither stay unresolved.
    """
    resolved = []
    for exercise in exercises:
        group = classify_exercise(exercise.name)
        if group is None and exercise.muscle_group is None:
            logger.warning(f"No muscle group for '{exercise.name}'")
        elif group is not None and group != exercise.muscle_group:
            if exercise.muscle_group is not None:
                logger.debug(
                    f"'{exercise.name}' labelled {exercise.muscle_group.value}, "
                    f"using {group.value}"
                )
            exercise = exercise.model_copy(update={"muscle_group": group})
        resolved.append(exercise)
    return resolved


def name_workout(exercises: list[ExerciseRecord]) -> str:
    classified = [e for e in exercises if e.muscle_group is not None]
    if not classified:
        return FALLBACK_WORKOUT_NAME
    return derive_workout_name(classified)


# ─────────────────────────────────────────
# Pipeline
# ─────────────────────────────────────────


@dataclass
class WorkoutPipeline:
    audio_store: AudioStore
    transcriber: Transcriber
    extractor: ExerciseExtractor
    workout_repo: WorkoutRepository
    client_repo: ClientRepository

    def process(self, request: ProcessWorkoutRequest, user_sub: str) -> ProcessedWorkout:
        """
        Recording -> transcript -> exercises -> name -> stored workout.

        The name is derived only once every exercise has been extracted, and
        before anything is written.
        """
        logger.info(
            f"Processing {request.storage_path} for user {user_sub}, client {request.client_id}"
        )

        if request.owner_folder != user_sub:
            logger.warning(f"User {user_sub} tried to process {request.storage_path}")
            raise ForbiddenRecordingError(request.storage_path)

        owner_pk = db.build_user_pk(user_sub)
        if request.client_id:
            # raises ClientNotFoundError if the client isn't the caller's
            self.client_repo.get_client(user_sub, request.client_id)
            owner_pk = db.build_client_pk(request.client_id)

        audio = self.audio_store.download_audio(request.storage_path)
        transcription = validate_transcript(self.transcriber.transcribe_audio(audio))

        extraction = self.extractor.extract_exercises(transcription)
        exercises = resolve_muscle_groups(check_extraction(extraction))
        name = name_workout(exercises)
        logger.debug(f"Named workout '{name}' from {len(exercises)} exercises")

        workout, sets = self.workout_repo.create_workout_with_sets(
            owner_pk,
            user_sub=user_sub,
            name=name,
            exercises=exercises,
            client_id=request.client_id,
            audio_path=request.storage_path,
            duration_seconds=request.duration,
        )

        logger.info(f"Workout {workout.workout_id} saved with {len(sets)} exercises")
        return ProcessedWorkout(
            workout=workout, sets=sets, exercises=exercises, transcription=transcription
        )
