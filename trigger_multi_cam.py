### Main script for triggering and displaying multiple FLIR cameras. Change the trigger type and display settings in parameters.py.

import datetime
import logging
import sys

import PySpin

from display import FrameDisplay, FrameSaver
from parameters import TRIGGER_TYPE, HARDWARE_TRIGGER_LINE, SAVE_LOCATION
from session import CameraSession, run_multiple_cameras

logger = logging.getLogger(__name__)


def main():
    """
    Configures the trigger, acquires images on all cameras until the stop key is pressed, then resets the trigger.

    :returns: 0 if successful, -1 otherwise.
    """
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    logger.info("Application start: %s\n", datetime.datetime.now().strftime("%Y-%m-%d %H:%M:%S"))

    try:
        with CameraSession(TRIGGER_TYPE, HARDWARE_TRIGGER_LINE) as session:
            # Finish if there are no cameras; the session still releases the system
            if session.num_cameras == 0:
                logger.info("Not enough cameras!")
                result = False
            else:
                logger.info("Running example for all cameras...")

                saver = FrameSaver(SAVE_LOCATION) if SAVE_LOCATION is not None else None
                result = run_multiple_cameras(session, FrameDisplay(), saver)

                logger.info("Example complete...\n")

    except PySpin.SpinnakerException as ex:
        logger.error("Error: %s", ex)
        result = False

    input("Done! Press Enter to exit...")
    return 0 if result else -1


if __name__ == "__main__":
    sys.exit(main())
