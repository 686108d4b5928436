"""
CLI to sample a video -> emotion history JSON + heat-map PNG.
"""
from __future__ import annotations
import argparse, json, os
import cv2
from emomap.config import Settings
from emomap.models import HistoryResponse
from emomap.offline import sample_video_file
from emomap.render import draw_heatmap, required_width

def main():
    p = argparse.ArgumentParser()
    p.add_argument("--video", required=True, help="Path to input video")
    p.add_argument("--out", default="output", help="Output directory")
    p.add_argument("--height", type=int, default=None, help="Heat-map height in pixels")
    args = p.parse_args()

    settings = Settings()
    samples = sample_video_file(args.video, settings)
    result = HistoryResponse(interval_ms=settings.SAMPLE_INTERVAL_MS, samples=samples).model_dump()

    os.makedirs(args.out, exist_ok=True)
    json_path = os.path.join(args.out, "history.json")
    with open(json_path, "w", encoding="utf-8") as f:
        json.dump(result, f, indent=2, ensure_ascii=False)

    height = args.height or settings.VIEWPORT_HEIGHT
    width = required_width(len(samples), 1, settings.COL_WIDTH)
    png_path = os.path.join(args.out, "heatmap.png")
    cv2.imwrite(png_path, draw_heatmap(samples, width, height, settings.COL_WIDTH))

    print(f"✅ {len(samples)} samples written to {json_path} and {png_path}")

if __name__ == "__main__":
    main()
