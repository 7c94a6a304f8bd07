"""
Ledgerline - Configuration
Feature flags, constants, and timeouts
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# =============================================================================
# PATHS
# =============================================================================
PROJECT_ROOT = Path(__file__).parent
DATA_DIR = PROJECT_ROOT / "data"
LOGS_DIR = PROJECT_ROOT / "logs"
DIAGNOSTIC_LOG_PATH = LOGS_DIR / "diagnostic.log"

# =============================================================================
# VERSION
# =============================================================================
VERSION = "0.1.0"
PROJECT_NAME = "Ledgerline"

# =============================================================================
# LOGGING
# =============================================================================
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_TO_FILE = os.getenv("LOG_TO_FILE", "true").lower() == "true"

# =============================================================================
# BROWSER CONFIGURATION
# =============================================================================
# The browser is launched lazily on the first action that needs a page and
# lives until the "close" action (or process exit). Nothing is persisted.
BROWSER_HEADLESS = os.getenv("BROWSER_HEADLESS", "true").lower() == "true"
BROWSER_VIEWPORT = {"width": 1280, "height": 720}
BROWSER_LAUNCH_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--no-sandbox",
]

# Hard bounds: expiry is reported as an action failure
BROWSER_NAVIGATION_TIMEOUT_MS = 30000       # navigate / open
BROWSER_ACTION_TIMEOUT_MS = 8000            # click / fill / hover
BROWSER_SNAPSHOT_TIMEOUT_MS = 10000         # AI-mode accessibility capture

# Best-effort settle bounds: expiry is swallowed
BROWSER_CLICK_SETTLE_MS = 10000             # network idle after click
BROWSER_SETTLE_MS = 5000                    # network idle before snapshot/read, after press

BROWSER_SCROLL_PIXELS = 500                 # wheel delta per scroll action
BROWSER_SCROLL_SETTLE_MS = 500              # fixed pause after scrolling
BROWSER_WAIT_DEFAULT_MS = 2000
BROWSER_WAIT_MAX_MS = 10000

BROWSER_SNAPSHOT_MAX_CHARS = 50000          # default snapshot truncation limit

# Content containers tried in order by the "read" action before falling back to <body>
BROWSER_READ_SELECTORS = [
    "main",
    "article",
    '[role="main"]',
    ".content",
    "#content",
]

# =============================================================================
# FINANCIAL DATA API
# =============================================================================
FINANCIAL_API_BASE_URL = os.getenv("FINANCIAL_API_BASE_URL", "https://api.financialdatasets.ai")
FINANCIAL_API_KEY_ENV = "FINANCIAL_DATASETS_API_KEY"    # Read at call time, not import time
FINANCIAL_API_TIMEOUT = 30                  # Seconds per HTTP request
FINANCIAL_NEWS_MAX_LIMIT = 10
FINANCIAL_CACHE_DIR = DATA_DIR / "api_cache"

# =============================================================================
# FILESYSTEM TOOLS
# =============================================================================
# All file tools are sandboxed to this root (empty = working directory at call time)
FILE_WORKSPACE_ROOT = os.getenv("FILE_WORKSPACE_ROOT", "")
FILE_READ_MAX_CHARS = 100000                # Max chars returned by read_file (0 = no limit)

# =============================================================================
# SKILLS
# =============================================================================
# Each directory holds one sub-directory per skill containing a SKILL.md file.
# Earlier directories win when two skills share a name.
SKILL_DIRS = [
    PROJECT_ROOT / "skills",
    Path.home() / ".ledgerline" / "skills",
]
