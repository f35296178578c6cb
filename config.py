"""Central configuration for the imgproc kernels.

Numeric constants used by the kernels are defined here with descriptive
names so that the conventions they encode are visible in one place.
"""

# =============================================================================
# PIXEL FORMAT
# =============================================================================

# 8-bit to float normalization: out = (in - NORMALIZE_OFFSET) / NORMALIZE_SCALE
# Maps 0 -> -0.9921875 and 255 -> 1.0
NORMALIZE_OFFSET = 127.0
NORMALIZE_SCALE = 128.0

# Float dtype used when a kernel allocates its own float output
FLOAT_DTYPE = "float32"

# Largest value representable in an 8-bit channel
MAX_PIXEL_VALUE = 255

# =============================================================================
# HISTOGRAMS
# =============================================================================

# Number of intensity bins for single-channel 8-bit images
HISTOGRAM_BINS = 256

# Value written for foreground / background pixels by binarize()
BINARY_FOREGROUND = 255
BINARY_BACKGROUND = 0

# =============================================================================
# DRAWING
# =============================================================================

# Default stroke thickness for lines and polygons
DEFAULT_LINE_THICKNESS = 1

# Number of color components a drawing color carries (x, y, z)
COLOR_COMPONENTS = 3

# =============================================================================
# POOLING
# =============================================================================

# Window and stride of maxpool2()
POOL_SIZE = 2
