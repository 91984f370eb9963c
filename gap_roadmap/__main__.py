# gap_roadmap/__main__.py
"""Allow running as `python -m gap_roadmap`."""

from gap_roadmap.cli import app

if __name__ == "__main__":
    app()
