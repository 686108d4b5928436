
"""Run the live emotion heat-map window.

Usage:
    uvicorn api.main:app --reload  # (separate, for the HTTP API)
    python scripts/live_heatmap.py  # (to see the heat-map window)

Click the window once to enable sound. Press 'q' to quit.
"""
import logging
from emomap.config import Settings
from emomap.live import run_live_heatmap

if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    s = Settings()
    run_live_heatmap(s)
