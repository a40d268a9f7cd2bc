"""
Minimal smoke test to verify vision endpoint access.

Usage:
  export VISION_API_KEYS=key1,key2
  uv run python scripts/vision_smoke.py --model gemini-2.0-flash
  uv run python scripts/vision_smoke.py --pdf resume.pdf
"""
import argparse
import json
import sys
from pathlib import Path

# Ensure repository root is on sys.path for local execution.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config import EndpointConfig
from llm.client import VisionClient
from llm.pipeline import extract_resume
from resume_parser.parser import rasterize_pdf


def main():
    parser = argparse.ArgumentParser(description="Vision endpoint smoke test.")
    parser.add_argument("--model", default=None, help="Model name to test.")
    parser.add_argument("--pdf", default=None, help="Resume PDF to run a full extraction on.")
    args = parser.parse_args()

    config = EndpointConfig.from_env()
    if args.model:
        config = config.model_copy(update={"model": args.model})
    if not config.api_keys:
        raise SystemExit("Set VISION_API_KEYS or VISION_API_KEY before running this script.")

    if args.pdf:
        pages = rasterize_pdf(args.pdf).pages
        resume = extract_resume(pages, config=config)
        print(json.dumps(resume.to_payload(), indent=2))
        return

    client = VisionClient(api_key=config.api_keys[0], model=config.model, base_url=config.base_url)
    print("Response:", client.complete("Say a short greeting with exactly 3 words.", []))


if __name__ == "__main__":
    main()
