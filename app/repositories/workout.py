import uuid
from typing import List, Protocol, Sequence

from boto3.dynamodb.conditions import Key

from app.models.exercise import ExerciseRecord
from app.models.workout import AI_NOTES, Workout, WorkoutSet
from app.repositories.base import DynamoRepository
from app.repositories.errors import RepoError, WorkoutRepoError
from app.utils import dates, db
from app.utils.log import logger


class WorkoutRepository(Protocol):
    def create_workout_with_sets(
        self,
        owner_pk: str,
        *,
        user_sub: str,
        name: str,
        exercises: Sequence[ExerciseRecord],
        client_id: str | None = None,
        audio_path: str | None = None,
        duration_seconds: int = 0,
    ) -> tuple[Workout, List[WorkoutSet]]: ...
    def get_all_for_owner(self, owner_pk: str) -> List[Workout]: ...
    def delete_workout_and_sets(self, workout: Workout) -> None: ...
    def delete_all_for_owner(self, owner_pk: str) -> int: ...


class DynamoWorkoutRepository(DynamoRepository[Workout]):
    """
    Workouts and their set rows. Both live under the owner's partition
    (USER#<sub> or CLIENT#<id>), sets keyed beneath their workout's SK.
    """

    def _to_model(self, item: dict):
        item_type = item.get("type")

        try:
            if item_type == "workout":
                return Workout(**item)
            elif item_type == "set":
                return WorkoutSet(**item)
        except Exception as e:
            logger.error(f"_to_model failed: {e}")
            raise WorkoutRepoError("Failed to create workout model from item") from e

        raise WorkoutRepoError(f"Unknown item type: {item_type}")

    def _build_sets(
        self, workout: Workout, exercises: Sequence[ExerciseRecord]
    ) -> List[WorkoutSet]:
        sets = []
        for idx, exercise in enumerate(exercises):
            sets.append(
                WorkoutSet(
                    PK=workout.PK,
                    SK=db.build_set_sk(workout.date, workout.workout_id, idx + 1),
                    type="set",
                    exercise_name=exercise.name,
                    muscle_group=exercise.muscle_group,
                    weight=exercise.weight,
                    sets=exercise.sets,
                    reps=exercise.reps,
                    order_index=idx,
                    created_at=workout.created_at,
                    updated_at=workout.updated_at,
                )
            )
        return sets

    # ----------------------- Get -----------------------------

    def get_all_for_owner(self, owner_pk: str) -> List[Workout]:
        """
        Return only workout items for a partition, newest first. Sets are filtered out.
        """
        logger.debug(f"Fetching all workouts for {owner_pk}")

        try:
            items = self._safe_query(
                KeyConditionExpression=Key("PK").eq(owner_pk)
                & Key("SK").begins_with("WORKOUT#")
            )
        except RepoError as e:
            logger.error(f"Repo error fetching workouts: {e}")
            raise WorkoutRepoError("Failed to fetch workouts from database") from e

        workouts = [
            self._to_model(item) for item in items if not db.is_set_sk(item["SK"])
        ]
        logger.debug(f"{len(workouts)} workouts parsed for {owner_pk}")

        workouts.sort(key=lambda w: w.date, reverse=True)
        return workouts

    # ----------------------- Add -----------------------------

    def create_workout_with_sets(
        self,
        owner_pk: str,
        *,
        user_sub: str,
        name: str,
        exercises: Sequence[ExerciseRecord],
        client_id: str | None = None,
        audio_path: str | None = None,
        duration_seconds: int = 0,
    ) -> tuple[Workout, List[WorkoutSet]]:
        """
        Persist a workout, then one set row per exercise in the given order.
        """
        new_id = str(uuid.uuid4())
        now = dates.now()

        workout = Workout(
            PK=owner_pk,
            SK=db.build_workout_sk(now.date(), new_id),
            type="workout",
            date=now.date(),
            name=name,
            user_sub=user_sub,
            client_id=client_id,
            notes=AI_NOTES,
            audio_path=audio_path,
            duration_seconds=duration_seconds,
            created_at=now,
            updated_at=now,
        )
        sets = self._build_sets(workout, exercises)

        logger.debug(f"Creating workout {workout.SK} under {owner_pk} with {len(sets)} sets")

        try:
            self._safe_put(workout.to_ddb_item())
        except RepoError as e:
            logger.error(f"Failed to put workout: {e}")
            raise WorkoutRepoError("Failed to create workout in database") from e

        try:
            for s in sets:
                self._safe_put(s.to_ddb_item())
        except RepoError as e:
            logger.error(f"Failed writing sets for {workout.SK}, removing workout: {e}")
            try:
                self.delete_workout_and_sets(workout)
            except WorkoutRepoError:
                logger.exception(f"Cleanup of half-written workout {workout.SK} failed")
            raise WorkoutRepoError("Failed to save workout sets") from e

        return workout, sets

    # ----------------------- Delete -----------------------------

    def delete_workout_and_sets(self, workout: Workout) -> None:
        """
        Delete a workout's sets, then the workout itself.
        """
        try:
            items = self._safe_query(
                KeyConditionExpression=Key("PK").eq(workout.PK)
                & Key("SK").begins_with(workout.SK)
            )
        except RepoError as e:
            logger.error(f"Failed loading items for deletion: {e}")
            raise WorkoutRepoError(
                "Failed to load workout and sets for deletion"
            ) from e

        sets = [item for item in items if db.is_set_sk(item["SK"])]
        logger.debug(f"Deleting {len(sets)} sets for workout {workout.SK}")

        try:
            self._safe_batch_delete(sets)
            self._safe_batch_delete([{"PK": workout.PK, "SK": workout.SK}])
        except RepoError as e:
            logger.error(f"Delete of workout {workout.SK} failed: {e}")
            raise WorkoutRepoError(
                "Failed to delete workout and sets from database"
            ) from e

    def delete_all_for_owner(self, owner_pk: str) -> int:
        """
        Delete every workout (sets first) in a partition. Returns the workout count.
        """
        workouts = self.get_all_for_owner(owner_pk)
        for workout in workouts:
            self.delete_workout_and_sets(workout)

        logger.debug(f"Deleted {len(workouts)} workouts for {owner_pk}")
        return len(workouts)
