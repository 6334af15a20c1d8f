"""Central configuration for DB text-detection postprocessing.

All tunable parameters are defined here with descriptive names.
These values are the defaults of PostProcessConfig and can be overridden
per run through a YAML config file or CLI flags.
"""

# =============================================================================
# MODEL SELECTION
# =============================================================================

# Postprocessing variant to run. Only the DB text detection head is supported.
DET_MODEL_NAME = "DET"

# =============================================================================
# BINARIZATION
# =============================================================================

# Probability above which a pixel counts as text (scaled to 0-255 internally)
DET_DB_THRESH = 0.3

# Dilate the binary mask so near-adjacent strokes merge into one region
USE_DILATION = True

# Structuring element size for the dilation (width, height)
DILATION_KERNEL_SIZE = (2, 2)

# =============================================================================
# REGION EXTRACTION
# =============================================================================

# Maximum number of contours considered per image; the rest are ignored
MAX_CANDIDATES = 1000

# Contours with fewer points than this cannot form a polygon
MIN_OUTLINE_POINTS = 3

# =============================================================================
# BOX FITTING AND SCORING
# =============================================================================

# Minimum size (max side of the fitted rectangle) of a candidate box
MIN_BOX_SIZE = 3

# Minimum mean probability inside a box for it to be kept
DET_DB_BOX_THRESH = 0.6

# How the region score is computed:
#   "fast" - mean probability inside the fitted rectangle
#   "slow" - mean probability inside the raw contour polygon
SCORE_MODE = "fast"
SCORE_MODES = ("fast", "slow")

# =============================================================================
# UNCLIP (POLYGON EXPANSION)
# =============================================================================

# Expansion ratio: offset distance = area * ratio / perimeter
DET_DB_UNCLIP_RATIO = 1.5

# Extra size an expanded box must have over MIN_BOX_SIZE
UNCLIP_MIN_SIZE_MARGIN = 2

# Expanded rectangles with both sides below this are degenerate
DEGENERATE_RECT_SIZE = 1.001

# =============================================================================
# FINAL FILTERING
# =============================================================================

# Detections whose top or left edge is this many pixels or less are dropped
MIN_DETECTION_SIDE = 4
