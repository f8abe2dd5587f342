"""Vercel entrypoint: exposes the BirdGuide FastAPI app as ``app``."""

from __future__ import annotations

import sys
from pathlib import Path

# Vercel runs this file from api/; the birdguide package lives one level up.
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.append(str(ROOT_DIR))

from birdguide.main import app  # noqa: E402,F401
