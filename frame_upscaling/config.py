"""
Centralized configuration for frame_upscaling.
Edit values here to tune resampling behavior across the engine and scheduler.
"""

# ── Enhancement defaults ────────────────────────────────────────────
DEFAULT_SCALE_FACTOR = 2.0                 # one of SUPPORTED_SCALE_FACTORS
DEFAULT_ALGORITHM = "bicubic"              # bicubic | lanczos | nearest
DEFAULT_QUALITY = "medium"                 # advisory only; no kernel reads it
DEFAULT_REAL_TIME = False

SUPPORTED_SCALE_FACTORS = (1.5, 2.0, 3.0, 4.0)
FALLBACK_ALGORITHM = "nearest"             # used for unknown algorithm names

# ── Kernel parameters ───────────────────────────────────────────────
LANCZOS_SUPPORT = 3        # window radius a; samples cover [-a+1, a-1]
ALPHA_OPAQUE = 255         # output alpha is never resampled
RESAMPLE_BLOCK_ROWS = 128  # target rows computed per pass; bounds temporary memory

# ── Encoding ────────────────────────────────────────────────────────
DOWNLOAD_JPEG_QUALITY = 95     # cv2 scale 0-100
PREVIEW_JPEG_QUALITY = 90
DOWNLOAD_FILENAME_TEMPLATE = "enhanced-resolution-{timestamp}.jpg"

# ── Real-time loop ──────────────────────────────────────────────────
REALTIME_TICK_INTERVAL = 1.0 / 60.0    # seconds; roughly one display refresh

# ── Logging ─────────────────────────────────────────────────────────
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DEFAULT_LOG_LEVEL = "INFO"
