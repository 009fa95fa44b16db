from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from app.models.workout import ProcessWorkoutRequest
from app.repositories.client import DynamoClientRepository
from app.repositories.errors import ClientNotFoundError, RepoError
from app.repositories.workout import DynamoWorkoutRepository
from app.utils import auth
from app.utils.ai import AIServiceError, OpenAIWorkoutModel
from app.utils.log import logger
from app.utils.storage import S3AudioStore, StorageError
from app.utils.workout_processing import (
    ForbiddenRecordingError,
    RecordingRejected,
    WorkoutPipeline,
)

router = APIRouter(tags=["workout"])


def get_workout_pipeline() -> WorkoutPipeline:  # pragma: no cover
    """Build the pipeline with the real AWS and OpenAI collaborators"""
    model = OpenAIWorkoutModel()
    return WorkoutPipeline(
        audio_store=S3AudioStore(),
        transcriber=model,
        extractor=model,
        workout_repo=DynamoWorkoutRepository(),
        client_repo=DynamoClientRepository(),
    )


@router.post("/process-workout")
def process_workout(
    body: ProcessWorkoutRequest,
    claims=Depends(auth.require_auth),
    pipeline: WorkoutPipeline = Depends(get_workout_pipeline),
):
    """Turn an uploaded voice recording into a stored, named workout."""
    user_sub = claims["sub"]

    try:
        result = pipeline.process(body, user_sub)
    except RecordingRejected as e:
        return JSONResponse(status_code=400, content=e.to_dict())
    except ForbiddenRecordingError:
        raise HTTPException(status_code=403, detail="Recording does not belong to you")
    except ClientNotFoundError:
        raise HTTPException(status_code=404, detail="Client not found")
    except StorageError as e:
        logger.exception(f"Error downloading recording {body.storage_path}")
        raise HTTPException(status_code=500, detail=str(e))
    except AIServiceError as e:
        logger.exception("Error calling the transcription/extraction model")
        raise HTTPException(status_code=500, detail=str(e))
    except RepoError:
        logger.exception(f"Error saving workout for user {user_sub}")
        raise HTTPException(status_code=500, detail="Error saving workout")

    return result.to_response()
