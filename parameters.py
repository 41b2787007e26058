import PySpin

from trigger import TriggerType

# Which trigger to use for the whole run. The trigger cannot be switched while acquiring.
TRIGGER_TYPE = TriggerType.SOFTWARE

# Input line used as the TriggerSource when TRIGGER_TYPE is HARDWARE
HARDWARE_TRIGGER_LINE = "Line0"

# Pressing this key in any of the display windows ends acquisition after the current cycle
STOP_KEY = "q"

# Windows are named WINDOW_LABEL + camera index, e.g. Cam0, Cam1
WINDOW_LABEL = "Cam"
DISPLAY_WIDTH = 640
DISPLAY_HEIGHT = 480

PIXEL_FORMAT = PySpin.PixelFormat_BGR8  # What color format to convert to before display; cv2 expects BGR
COLOR_PROCESSING = PySpin.SPINNAKER_COLOR_PROCESSING_ALGORITHM_HQ_LINEAR

SAVE_LOCATION = None  # Set to a directory to also save every displayed image; None disables saving
SAVE_PREFIX = "trigger"
FILETYPE = ".png"
