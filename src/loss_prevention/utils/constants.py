"""
Constants used throughout the loss prevention recorder
"""

# Tag events
EVENT_MOVED = "moved"  # Only actionable tag event kind
MIN_LOCATION_HISTORY = 2  # Current + previous location

# Recording layout
RECORDING_FOLDER_NAME = "{timestamp}_{product_id}_{epc}"  # Under the output root
VIDEO_BASENAME = "video"
FRAME_FIRST = "frame.first.jpg"
FRAME_MIDDLE = "frame.middle.jpg"
FRAME_LAST = "frame.last.jpg"
THUMBNAIL = "thumb.jpg"
REGION_PATTERN = "{name}.{index}.jpg"
OUTPUT_FOLDER_MODE = 0o777

# Sanity check recording
SANITY_CHECK_FRAMES = 3
SANITY_CHECK_FOLDER = "loss-prevention-sanity"  # Under the system temp dir

# Artifact writes
ARTIFACT_WAIT_TIMEOUT = 10.0  # Seconds to wait for pending writes when asked

# Live view
LIVE_VIEW_WINDOW = "Loss Prevention"
CANCEL_KEYS = (27, ord("q"), ord("Q"))  # ESC, q, Q
OVERLAY_LABEL_OFFSET = 10  # Pixels above the region for the annotation

# Debug stats text layout
DEBUG_FONT_SCALE = 0.75
DEBUG_FONT_THICKNESS = 2
DEBUG_TEXT_PADDING = 5
DEBUG_LINE_HEIGHT = 35
DEBUG_COLUMN_GAP = 60
DEBUG_STATS_COLOR = (0, 255, 0)  # BGR green

# Default haar cascade location
DEFAULT_CASCADE_DIR = "/data/haarcascades"

# Environment variables
ENV_VIDEO_DEVICE = "VIDEO_DEVICE"
ENV_LOG_LEVEL = "LOG_LEVEL"
