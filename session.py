# Contains the camera session and the function that runs the trigger example on all cameras

import logging

import PySpin

from acquisition import acquire_images
from trigger import TriggerType, configure_trigger, reset_trigger

logger = logging.getLogger(__name__)


class SessionState:
    UNINITIALIZED = "Uninitialized"
    INITIALIZED = "Initialized"
    TRIGGER_CONFIGURED = "TriggerConfigured"
    ACQUIRING = "Acquiring"
    TRIGGER_RESET = "TriggerReset"
    DEINITIALIZED = "Deinitialized"


class CameraSession:
    """
    Owns the system object and the camera list for one run.

    Use as a context manager; the camera list is cleared and the system released on exit, also when an exception is raised. This is important or else you might need to reset (unplug) the cameras.
    """

    def __init__(self, trigger_type=TriggerType.SOFTWARE, hardware_line="Line0", system=None):
        self.trigger_type = trigger_type
        self.hardware_line = hardware_line
        self.system = system
        self.cam_list = None
        self.state = SessionState.UNINITIALIZED
        self.history = [SessionState.UNINITIALIZED]

    def __enter__(self):
        if self.system is None:
            self.system = PySpin.System.GetInstance()

        try:
            version = self.system.GetLibraryVersion()
            logger.info("Library version: %d.%d.%d.%d", version.major, version.minor, version.type, version.build)

            self.cam_list = self.system.GetCameras()
        except PySpin.SpinnakerException:
            # __exit__ is not called when __enter__ raises
            release_cameras(self.cam_list, self.system)
            raise

        logger.info("Number of cameras detected: %d\n", self.num_cameras)
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        release_cameras(self.cam_list, self.system)
        return False

    @property
    def num_cameras(self):
        return self.cam_list.GetSize()

    def advance(self, state):
        """Moves the session to `state` and records it in `history`."""
        self.state = state
        self.history.append(state)
        logger.debug("Session state: %s", state)

    def cameras(self):
        """Yields (index, camera) in ascending index order."""
        for cam_idx in range(self.num_cameras):
            yield cam_idx, self.cam_list.GetByIndex(cam_idx)


def release_cameras(cam_list, system):
    """
    Cleanly releases the cameras and system.
    """
    if cam_list is not None:
        cam_list.Clear()
    system.ReleaseInstance()
    logger.info("\nCameras and system released.")


def print_device_info(nodemap, cam_idx):
    """
    Prints the device information of the camera from the transport layer.

    :param nodemap: Transport layer device nodemap.
    :param cam_idx: Camera index.
    :returns: True if successful, False otherwise.
    """
    logger.info("Printing device information for camera %d... \n", cam_idx)

    try:
        node_device_information = PySpin.CCategoryPtr(nodemap.GetNode("DeviceInformation"))

        if PySpin.IsAvailable(node_device_information) and PySpin.IsReadable(node_device_information):
            for feature in node_device_information.GetFeatures():
                node_feature = PySpin.CValuePtr(feature)
                logger.info(
                    "%s: %s",
                    node_feature.GetName(),
                    node_feature.ToString() if PySpin.IsReadable(node_feature) else "Node not readable",
                )
        else:
            logger.info("Device control information not available.")
        logger.info("")

    except PySpin.SpinnakerException as ex:
        logger.error("Error: %s", ex)
        return False

    return True


def deinitialize_cameras(session):
    """Deinitializes every camera, continuing past failures."""
    result = True
    for cam_idx, cam in session.cameras():
        try:
            cam.DeInit()
        except PySpin.SpinnakerException as ex:
            logger.error("Error: %s", ex)
            result = False
    return result


def run_multiple_cameras(session, display, saver=None, wait_for_operator=input):
    """
    Runs the trigger example on all cameras of `session`.

    The trigger is configured once, through the nodemap of the first camera, and shared by all cameras; cameras with different trigger support are not handled. If there are no cameras, nothing is initialized. If configuring the trigger fails, acquisition and the trigger reset are skipped, but the cameras are still deinitialized.

    :returns: True if successful, False otherwise.
    """
    if session.num_cameras == 0:
        logger.info("Not enough cameras!")
        return False

    result = True

    try:
        logger.info("\n*** DEVICE INFORMATION ***\n")
        for cam_idx, cam in session.cameras():
            result &= print_device_info(cam.GetTLDeviceNodeMap(), cam_idx)

        try:
            # Initialize each camera; each needs to be deinitialized once all images have been acquired
            for cam_idx, cam in session.cameras():
                cam.Init()
            session.advance(SessionState.INITIALIZED)

            nodemap = session.cam_list.GetByIndex(0).GetNodeMap()

            if configure_trigger(nodemap, session.trigger_type, session.hardware_line):
                session.advance(SessionState.TRIGGER_CONFIGURED)

                try:
                    session.advance(SessionState.ACQUIRING)
                    result &= acquire_images(
                        session.cam_list, nodemap, session.trigger_type, display, saver, wait_for_operator
                    )
                finally:
                    # Trigger mode is turned off even if acquisition raised
                    result &= reset_trigger(nodemap)
                    session.advance(SessionState.TRIGGER_RESET)
            else:
                result = False

        finally:
            result &= deinitialize_cameras(session)
            session.advance(SessionState.DEINITIALIZED)

    except PySpin.SpinnakerException as ex:
        logger.error("Error: %s", ex)
        result = False

    return result
