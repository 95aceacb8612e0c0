"""Configuration management for the ConstruCost dashboard.

This module centralizes all configuration values including paths,
AI service settings and environment variable overrides.
"""

from __future__ import annotations

import os
from pathlib import Path

# Base project root - assumes this file is in construcost_dashboard/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("CONSTRUCOST_DATA_DIR", _PROJECT_ROOT / "data"))
STORE_DIR = DATA_DIR / "store"

# Fixed record keys inside the store
BUDGETS_KEY = "construcost_budgets"
SETTINGS_KEY = "construcost_settings"

# Hosted generative AI (Gemini REST API)
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY", "")
# Empty uses the SDK default endpoint
GEMINI_API_BASE = os.getenv("GEMINI_API_BASE", "")
GEMINI_TEXT_MODEL = os.getenv("GEMINI_TEXT_MODEL", "gemini-2.5-flash")
GEMINI_IMAGE_MODEL = os.getenv("GEMINI_IMAGE_MODEL", "gemini-2.5-flash-image")
HTTP_TIMEOUT_SECONDS = float(os.getenv("CONSTRUCOST_HTTP_TIMEOUT", "60"))

# Multiplier applied to every simulated Drive/Sheets delay (0 disables them)
DELAY_SCALE = float(os.getenv("CONSTRUCOST_DELAY_SCALE", "1.0"))

LOG_LEVEL = os.getenv("CONSTRUCOST_LOG_LEVEL", "INFO")


def ensure_data_directories() -> None:
    """Create all required data directories if they don't exist."""
    for directory in [DATA_DIR, STORE_DIR]:
        directory.mkdir(parents=True, exist_ok=True)


def scaled_delay(seconds: float) -> float:
    """Apply the configured scale to a simulated delay."""
    return max(0.0, seconds * DELAY_SCALE)
