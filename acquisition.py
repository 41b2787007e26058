# Contains the pseudo-simultaneous acquisition loop used by trigger_multi_cam.py

import logging

import cv2
import PySpin

from display import convert_image
from trigger import TriggeredGrabber, FrameOutstandingError

logger = logging.getLogger(__name__)


def set_acquisition_mode_continuous(cam, cam_idx):
    """
    Sets AcquisitionMode to Continuous on the camera's nodemap.

    :returns: True if successful, False otherwise.
    """
    nodemap = cam.GetNodeMap()

    node_acquisition_mode = PySpin.CEnumerationPtr(nodemap.GetNode("AcquisitionMode"))
    if not PySpin.IsAvailable(node_acquisition_mode) or not PySpin.IsWritable(node_acquisition_mode):
        logger.info(
            "Unable to set acquisition mode to continuous (node retrieval; camera %d). Aborting...\n", cam_idx
        )
        return False

    node_acquisition_mode_continuous = node_acquisition_mode.GetEntryByName("Continuous")
    if not PySpin.IsAvailable(node_acquisition_mode_continuous) or not PySpin.IsReadable(
        node_acquisition_mode_continuous
    ):
        logger.info(
            "Unable to set acquisition mode to continuous (entry 'continuous' retrieval %d). Aborting...\n", cam_idx
        )
        return False

    acquisition_mode_continuous = node_acquisition_mode_continuous.GetValue()
    node_acquisition_mode.SetIntValue(acquisition_mode_continuous)
    logger.info("Camera %d acquisition mode set to continuous...", cam_idx)

    return True


def end_acquisition(cams):
    """Ends acquisition on each camera in order, continuing past failures."""
    result = True
    for cam in cams:
        try:
            cam.EndAcquisition()
        except PySpin.SpinnakerException as ex:
            logger.error("Error: %s", ex)
            result = False
    return result


def process_image(cam_idx, image, display, saver=None):
    """
    Converts a complete image to the display format, optionally saves it, and shows it in the camera's window.

    Incomplete images are logged and skipped.

    :returns: True if the image was shown, False if it was incomplete.
    """
    if image.IsIncomplete():
        logger.info("Image incomplete with image status %d ...\n", image.GetImageStatus())
        return False

    frame = convert_image(image)

    if saver is not None:
        saver.save(cam_idx, image.GetFrameID(), frame)

    display.show(cam_idx, frame)
    return True


def acquire_images(cam_list, nodemap, trigger_type, display, saver=None, wait_for_operator=input):
    """
    Acquires images from every camera until the stop key is pressed.

    Each camera is prepared as if it were alone, but in a loop (pseudo-simultaneous streaming). In the acquisition loop, the inner loop iterates through the cameras so that one image is grabbed from every camera per cycle, in index order.

    The trigger is executed through `nodemap`, which belongs to the camera the trigger was configured on.

    Retrieving an image blocks without a timeout. If a trigger never produces an image the loop waits forever.

    :param cam_list: List of cameras, addressed by index.
    :param nodemap: Nodemap used to execute the trigger.
    :param trigger_type: TriggerType.SOFTWARE or TriggerType.HARDWARE.
    :param display: FrameDisplay that shows the images and reports the stop key.
    :param saver: Optional FrameSaver.
    :param wait_for_operator: Called with a prompt before each software trigger.
    :returns: True if successful, False otherwise.
    """
    logger.info("\n*** IMAGE ACQUISITION ***\n")

    result = True
    num_cameras = cam_list.GetSize()
    started = []

    try:
        # Prepare each camera to acquire images
        for cam_idx in range(num_cameras):
            cam = cam_list.GetByIndex(cam_idx)

            if not set_acquisition_mode_continuous(cam, cam_idx):
                return False

            cam.BeginAcquisition()
            started.append(cam)
            logger.info("Camera %d started acquiring images...", cam_idx)

        grabbers = [
            TriggeredGrabber(cam_list.GetByIndex(cam_idx), nodemap, trigger_type, wait_for_operator)
            for cam_idx in range(num_cameras)
        ]

        # Retrieve, convert and display images for each camera
        display.reset()
        while not display.stop_requested():
            for cam_idx, grabber in enumerate(grabbers):
                try:
                    image_result = grabber.grab()
                    if image_result is None:
                        result = False
                        continue

                    try:
                        process_image(cam_idx, image_result, display, saver)
                    finally:
                        grabber.release()

                except (PySpin.SpinnakerException, FrameOutstandingError, cv2.error, OSError) as ex:
                    logger.error("Error: %s", ex)
                    result = False

            display.poll_key()

    except PySpin.SpinnakerException as ex:
        logger.error("Error: %s", ex)
        result = False

    finally:
        # End acquisition for each camera that was started, also when the loop raised
        result &= end_acquisition(started)
        display.close()

    return result
