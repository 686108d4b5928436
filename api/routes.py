"""
REST endpoints for the live heat-map session and offline video sampling.
"""
from typing import Optional
from fastapi import APIRouter, UploadFile, File, HTTPException, Query
from fastapi.responses import JSONResponse, Response
import logging

from emomap.config import Settings
from emomap.live import LiveSession
from emomap.models import HistoryResponse, SessionStatus
from emomap.offline import sample_video_file
from emomap.render import HeatmapCanvas, encode_png

import tempfile
import shutil
import os


router = APIRouter()
settings = Settings()
logger = logging.getLogger(__name__)

live_session: Optional[LiveSession] = None


def _new_session() -> LiveSession:
    return LiveSession(settings)


def _get_session() -> LiveSession:
    global live_session
    if live_session is None:
        live_session = _new_session()
    return live_session


@router.post("/live/start")
def live_start():
    # sync endpoint: model loading stays off the event loop
    s = _get_session()
    if s.running:
        return {"status": "already_running"}
    try:
        started = s.start()
    except RuntimeError as e:
        logger.exception("[api] live start failed")
        raise HTTPException(status_code=500, detail=str(e))
    if not started:
        raise HTTPException(status_code=409, detail="Previous sampling loop is still finishing; retry shortly")
    return {"status": "started"}

@router.get("/live/status", response_model=SessionStatus)
async def live_status():
    if live_session is None:
        return SessionStatus(running=False)
    return live_session.status()

@router.post("/live/stop")
def live_stop():
    if live_session is None:
        return {"status": "not_running"}
    was_running = live_session.running
    # always release camera thread and audio stream, even for an idle session
    live_session.stop()
    return {"status": "stopped" if was_running else "not_running"}

@router.post("/live/unlock-audio")
def live_unlock_audio():
    s = _get_session()
    unlocked = s.unlock_audio()
    return {"audio_unlocked": True, "changed": unlocked}

@router.get("/live/history", response_model=HistoryResponse)
async def live_history():
    samples = list(live_session.state.snapshot()) if live_session is not None else []
    return HistoryResponse(interval_ms=settings.SAMPLE_INTERVAL_MS, samples=samples)

@router.get("/live/heatmap.png")
async def live_heatmap(
    width: Optional[int] = Query(None, gt=0),
    height: Optional[int] = Query(None, gt=0),
):
    """
    Render the visible (right-most) slice of the heat-map as PNG.

    Args:
        width: Viewport width override in pixels.
        height: Viewport height override in pixels.
    """
    history = live_session.state.snapshot() if live_session is not None else ()
    canvas = HeatmapCanvas(width or settings.VIEWPORT_WIDTH,
                           height or settings.VIEWPORT_HEIGHT,
                           settings.COL_WIDTH)
    try:
        png = encode_png(canvas.frame(history))
    except Exception as e:
        logger.exception("[api] heatmap render failed")
        raise HTTPException(status_code=500, detail=str(e))
    return Response(content=png, media_type="image/png")

@router.post("/analyze/video")
async def analyze_video(file: UploadFile = File(...)):
    """
    Sample an uploaded video every SAMPLE_INTERVAL_MS and return the emotion history.

    Args:
        file: Uploaded video file.

    Returns:
        JSONResponse: HistoryResponse payload.
    """
    logger.debug(f"[api] /analyze/video filename={file.filename}")
    try:
        suffix = os.path.splitext(file.filename or "")[1] or ".mp4"
        with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as tmp:
            shutil.copyfileobj(file.file, tmp)
            tmp_path = tmp.name
    except Exception as e:
        logger.exception("[api] upload save failed")
        raise HTTPException(status_code=400, detail=f"Upload failed: {e}")

    try:
        samples = sample_video_file(tmp_path, settings)
        payload = HistoryResponse(interval_ms=settings.SAMPLE_INTERVAL_MS, samples=samples)
        return JSONResponse(payload.model_dump())
    except FileNotFoundError as e:
        logger.exception("[api] sample_video_file file not found")
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.exception("[api] sample_video_file failed")
        raise HTTPException(status_code=500, detail=str(e))
    finally:
        try:
            os.unlink(tmp_path)
        except Exception:
            logger.warning(f"[api] failed to cleanup tmp file: {tmp_path}")
