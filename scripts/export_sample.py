"""
Render a resume JSON file to a standalone portfolio page without calling any model.

Usage:
  uv run python scripts/export_sample.py resume.json --theme light --out build/
"""
import argparse
import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from render.static import ThemePreference, export_portfolio


def main():
    parser = argparse.ArgumentParser(description="Export a portfolio page from resume JSON.")
    parser.add_argument("resume", help="Path to a resume JSON document.")
    parser.add_argument("--theme", choices=["dark", "light"], default="dark")
    parser.add_argument("--out", default=".", help="Output directory.")
    args = parser.parse_args()

    data = json.loads(Path(args.resume).read_text(encoding="utf-8"))
    filename, html = export_portfolio(data, theme=ThemePreference(default=args.theme))
    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)
    (out_dir / filename).write_text(html, encoding="utf-8")
    print("Wrote", out_dir / filename)


if __name__ == "__main__":
    main()
