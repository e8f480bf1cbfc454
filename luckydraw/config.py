import os

# Config
DEFAULT_TITLE = "Lucky Draw"
DEFAULT_SUBTITLE = "Fair and square, good luck to everyone!"
DEFAULT_WINNER_COUNT = 1

# Rolling preview speed tiers, seconds between re-samples
ROLLING_INTERVALS = {
    "slow": 0.150,
    "medium": 0.070,
    "fast": 0.030,
}
DEFAULT_ROLLING_SPEED = "medium"

MAX_IMAGE_BYTES = 5 * 1024 * 1024  # 5MB, background and prize images
SPREADSHEET_EXTENSIONS = {"xlsx", "csv"}
EXPORT_FILENAME = "draw_history.xlsx"

# Environment overrides
HOST = os.environ.get("LUCKYDRAW_HOST", "127.0.0.1")
PORT = int(os.environ.get("LUCKYDRAW_PORT", "5000"))
DEBUG = os.environ.get("LUCKYDRAW_DEBUG", "0").lower() in ("1", "true", "yes")
LOG_LEVEL = os.environ.get("LUCKYDRAW_LOG_LEVEL", "INFO").upper()
MAX_UPLOAD_BYTES = int(os.environ.get("LUCKYDRAW_MAX_UPLOAD_MB", "16")) * 1024 * 1024
