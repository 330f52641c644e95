# --- Configuration Constants ---
DEFAULT_FPS = 30
DEFAULT_RESOLUTION = (1280, 720)
FRAME_SIZE = 2048  # Analysis size, gives FRAME_SIZE / 2 bins
SMOOTHING_FACTOR = 0.8  # 0.0 = no smoothing, 0.9 = heavy trails
MIN_DB = -100.0
MAX_DB = -30.0
MIN_FRAME_SIZE = 32
MAX_FRAME_SIZE = 32768

# Bars mode
BAR_COUNT = 64
BAR_GAP = 1  # pixels between bars
BAR_X_AXIS_MARGIN = 18  # pixels reserved under the bars for labels

# Perceptual compression exponents
WATERFALL_EXPONENT = 0.5
BAR_EXPONENT = 0.8

# Colour ramp (HSL): cold/dark when quiet, hot/bright when loud
HUE_QUIET = 260.0
LIGHTNESS_QUIET = 10.0
LIGHTNESS_LOUD = 60.0
SATURATION = 100.0

# Frequency legend
SCALE_WIDTH = 60
TICK_FREQUENCIES = (100, 200, 500, 1000, 2000, 5000, 10000, 20000)

# Colors (BGR format for OpenCV)
BG_COLOR = (0, 0, 0)
GUIDE_COLOR = (68, 68, 68)
LABEL_COLOR = (170, 170, 170)
FONT_SCALE = 0.35
