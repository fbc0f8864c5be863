"""
Triple-Narrator Video API

REST endpoints for commentary video creation:
- POST /api/video/create       run one job and wait for it
- GET  /api/video/status/{id}  ledger view of a job
- GET  /api/video/narrators    the narrator style table
- GET  /api/video/health
"""

# Load environment variables from .env file BEFORE anything else
from dotenv import load_dotenv
load_dotenv()

from typing import Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from ..config import get_settings
from ..core import EncodingError, ffmpeg_available
from ..log import configure_logging
from ..models import CreateVideoRequest, VideoJobResult
from ..narrators import NARRATOR_STYLES, PARTICIPATION_RULE, CommentaryValidationError
from ..pipeline import JobNotFoundError, SecondaryWriteError, VideoPipeline


app = FastAPI(
    title="Triple-Narrator Video API",
    description="Burn three narrators' commentary into a video as styled subtitles",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


_pipeline: Optional[VideoPipeline] = None


def get_pipeline() -> VideoPipeline:
    """Pipeline shared by all requests, built on first use."""
    global _pipeline
    if _pipeline is None:
        settings = get_settings()
        configure_logging(settings.log_level)
        _pipeline = VideoPipeline(settings)
    return _pipeline


@app.get("/api/video/health")
def health() -> dict:
    return {
        "status": "ok",
        "service": "Triple-Narrator Video API",
        "narrators": [n.value for n in NARRATOR_STYLES],
        "ffmpeg": ffmpeg_available(get_settings().ffmpeg_binary),
    }


@app.post("/api/video/create", response_model=VideoJobResult)
async def create_video(
    request: CreateVideoRequest,
    pipeline: VideoPipeline = Depends(get_pipeline),
) -> VideoJobResult:
    logger.info(f"Received video creation request: {request.output_file_name}")

    try:
        return await pipeline.create_video(request)
    except CommentaryValidationError as e:
        raise HTTPException(
            status_code=422,
            detail={"error": str(e), "message": "Video creation failed"},
        )
    except SecondaryWriteError as e:
        # The video exists; callers should re-check the job status
        raise HTTPException(
            status_code=500,
            detail={
                "error": str(e),
                "message": "Video created but not fully recorded",
                "jobId": e.job_id,
                "ledgerStatus": e.ledger_status,
                "partial": True,
            },
        )
    except (EncodingError, OSError) as e:
        raise HTTPException(
            status_code=500,
            detail={"error": str(e), "message": "Video creation failed"},
        )


@app.get("/api/video/status/{job_id}", response_model=VideoJobResult)
def get_job_status(
    job_id: str,
    pipeline: VideoPipeline = Depends(get_pipeline),
) -> VideoJobResult:
    logger.info(f"Checking job status: {job_id}")
    try:
        return pipeline.get_job_status(job_id)
    except JobNotFoundError as e:
        raise HTTPException(
            status_code=404,
            detail={"error": str(e), "message": f"Job {job_id} not found"},
        )


@app.get("/api/video/narrators")
def get_narrators() -> dict:
    return {
        "narrators": [
            {
                "type": config.identity.value,
                "name": config.name,
                "position": config.position,
                "color": config.color,
                "fontSize": config.font_size,
                "characteristics": list(config.traits),
            }
            for config in NARRATOR_STYLES.values()
        ],
        "rule": PARTICIPATION_RULE,
    }
