import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Keep test runs independent of a developer's local .env tuning
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("CANVAS_WIDTH", "800")
os.environ.setdefault("CANVAS_HEIGHT", "600")
os.environ.setdefault("LIMITER_STORAGE_URI", "memory://")
