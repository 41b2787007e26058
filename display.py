# Converts, displays and saves images retrieved from the cameras

import logging
from pathlib import Path

import cv2
import PySpin
from PIL import Image

from parameters import (
    PIXEL_FORMAT,
    COLOR_PROCESSING,
    WINDOW_LABEL,
    DISPLAY_WIDTH,
    DISPLAY_HEIGHT,
    STOP_KEY,
    SAVE_PREFIX,
    FILETYPE,
)

logger = logging.getLogger(__name__)

_processor = None


def _get_processor():
    global _processor
    if _processor is None:
        _processor = PySpin.ImageProcessor()
        _processor.SetColorProcessing(COLOR_PROCESSING)
    return _processor


def convert_image(image, pixel_format=PIXEL_FORMAT):
    """Converts a Spinnaker image to `pixel_format` and returns it as a numpy array."""
    image_converted = _get_processor().Convert(image, pixel_format)
    return image_converted.GetNDArray()


class FrameDisplay:
    """One OpenCV window per camera, plus polling of the stop key."""

    def __init__(self, label=WINDOW_LABEL, width=DISPLAY_WIDTH, height=DISPLAY_HEIGHT, stop_key=STOP_KEY):
        self.label = label
        self.width = width
        self.height = height
        self.stop_key = stop_key
        self.last_key = None

    def window_name(self, cam_idx):
        return self.label + str(cam_idx)

    def show(self, cam_idx, frame):
        frame = cv2.resize(frame, (self.width, self.height), interpolation=cv2.INTER_LINEAR)
        cv2.imshow(self.window_name(cam_idx), frame)
        self.poll_key()

    def poll_key(self):
        """
        Waits 1 ms for a key press in any window. Once the stop key is seen, later keys are ignored until reset().
        """
        key = cv2.waitKey(1) & 0xFF
        if key != 0xFF and not self.stop_requested():
            self.last_key = chr(key)
        return self.last_key

    def stop_requested(self):
        return self.last_key == self.stop_key

    def reset(self):
        self.last_key = None

    def close(self):
        cv2.destroyAllWindows()


class FrameSaver:
    """
    Saves converted images as SAVE_PREFIX-Cam<i>-<frame id>.<ext> in `save_location`.
    """

    def __init__(self, save_location, prefix=SAVE_PREFIX, filetype=FILETYPE, label=WINDOW_LABEL):
        self.save_location = Path(save_location)
        self.prefix = prefix
        self.filetype = filetype
        self.label = label
        self.save_location.mkdir(parents=True, exist_ok=True)

    def save(self, cam_idx, frame_id, frame):
        # pad frame id with zeros to order correctly
        filename = self.prefix + "-" + self.label + str(cam_idx) + "-" + str(frame_id).zfill(9) + self.filetype
        filepath = Path(self.save_location, filename)

        # PIL expects RGB; frames are converted to BGR for cv2
        img = Image.fromarray(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB))
        img.save(filepath)
        logger.debug("Image saved at %s", filepath)
        return filepath
