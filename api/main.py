"""
FastAPI application entrypoint for the emotion heat-map.

Serves the live webcam session (start/stop/status, audio unlock, sample
history as JSON, the visible heat-map as PNG) and offline sampling of
uploaded videos; see api/routes.py.
"""
import logging
from fastapi import FastAPI
from api.routes import router

logging.basicConfig(level=logging.DEBUG)
app = FastAPI(title="Emotion Heat-Map API", version="1.0.0")
app.include_router(router)

@app.get("/health")
def health() -> dict:
    """
    Liveness check; does not touch the camera or the audio device.

    Returns:
        dict: Simple status payload.
    """
    return {"status": "ok"}
