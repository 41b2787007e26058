# Contains the functions that arm, fire and disarm the camera trigger

import logging

import PySpin

logger = logging.getLogger(__name__)


class TriggerType:
    SOFTWARE = 1
    HARDWARE = 2


class FrameOutstandingError(RuntimeError):
    """Raised when an image is requested before the previous one was released."""


def _trigger_name(trigger_type):
    return "Software" if trigger_type == TriggerType.SOFTWARE else "Hardware"


def _get_enum_entry(node_enum, entry_name):
    """
    Returns the enum entry `entry_name` of `node_enum`, or None if it is unavailable or unreadable.
    """
    entry = PySpin.CEnumEntryPtr(node_enum.GetEntryByName(entry_name))
    if not PySpin.IsAvailable(entry) or not PySpin.IsReadable(entry):
        return None
    return entry


def configure_trigger(nodemap, trigger_type, hardware_line="Line0"):
    """
    Configures the camera to use a trigger.

    Trigger mode is first turned off so that the trigger source can be selected. Once the source has been selected, trigger mode is turned back on, which has the camera capture a single image upon each execution of the chosen trigger.

    Nothing is rolled back if a step fails; callers are expected to reset or deinitialize the camera.

    :param nodemap: GenICam nodemap of the camera.
    :param trigger_type: TriggerType.SOFTWARE or TriggerType.HARDWARE.
    :param hardware_line: Input line selected as the source for a hardware trigger.
    :returns: True if successful, False otherwise.
    """
    logger.info("\n*** CONFIGURING TRIGGER ***\n")
    logger.info("%s trigger chosen...", _trigger_name(trigger_type))

    try:
        # The trigger must be disabled in order to configure the source
        node_trigger_mode = PySpin.CEnumerationPtr(nodemap.GetNode("TriggerMode"))
        if not PySpin.IsAvailable(node_trigger_mode) or not PySpin.IsReadable(node_trigger_mode):
            logger.info("Unable to disable trigger mode (node retrieval). Aborting...")
            return False

        node_trigger_mode_off = _get_enum_entry(node_trigger_mode, "Off")
        if node_trigger_mode_off is None:
            logger.info("Unable to disable trigger mode (enum entry retrieval). Aborting...")
            return False

        node_trigger_mode.SetIntValue(node_trigger_mode_off.GetValue())
        logger.info("Trigger mode disabled...")

        # Select trigger source while trigger mode is off
        node_trigger_source = PySpin.CEnumerationPtr(nodemap.GetNode("TriggerSource"))
        if not PySpin.IsAvailable(node_trigger_source) or not PySpin.IsWritable(node_trigger_source):
            logger.info("Unable to set trigger source (node retrieval). Aborting...")
            return False

        if trigger_type == TriggerType.SOFTWARE:
            source_name = "Software"
        else:
            source_name = hardware_line

        node_trigger_source_entry = _get_enum_entry(node_trigger_source, source_name)
        if node_trigger_source_entry is None:
            logger.info("Unable to set trigger source (enum entry retrieval). Aborting...")
            return False

        node_trigger_source.SetIntValue(node_trigger_source_entry.GetValue())
        logger.info("Trigger source set to %s...", source_name)

        # Turn trigger mode back on so that images are only retrieved using the trigger
        node_trigger_mode_on = _get_enum_entry(node_trigger_mode, "On")
        if node_trigger_mode_on is None or not PySpin.IsWritable(node_trigger_mode):
            logger.info("Unable to enable trigger mode (enum entry retrieval). Aborting...")
            return False

        node_trigger_mode.SetIntValue(node_trigger_mode_on.GetValue())
        logger.info("Trigger mode turned back on...\n")

    except PySpin.SpinnakerException as ex:
        logger.error("Error: %s", ex)
        return False

    return True


def execute_trigger(nodemap, trigger_type, wait_for_operator=input):
    """
    Executes a single trigger.

    For a software trigger, blocks until the operator presses Enter and then executes the TriggerSoftware command. For a hardware trigger, the physical line does the work, so nothing is sent to the camera.

    :returns: True if successful, False otherwise.
    """
    try:
        if trigger_type == TriggerType.SOFTWARE:
            wait_for_operator("Press the Enter key to initiate software trigger.")

            node_softwaretrigger_cmd = PySpin.CCommandPtr(nodemap.GetNode("TriggerSoftware"))
            if not PySpin.IsAvailable(node_softwaretrigger_cmd) or not PySpin.IsWritable(node_softwaretrigger_cmd):
                logger.info("Unable to execute trigger. Aborting...")
                return False

            node_softwaretrigger_cmd.Execute()

        elif trigger_type == TriggerType.HARDWARE:
            logger.info("Use the hardware to trigger image acquisition.")

    except PySpin.SpinnakerException as ex:
        logger.error("Error: %s", ex)
        return False

    return True


class TriggeredGrabber:
    """
    Pairs one trigger execution with the one image it produces.

    Trigger mode has the camera capture a single image per trigger, so asking for a second image before the first is released would hang. grab() refuses instead.
    """

    def __init__(self, cam, nodemap, trigger_type, wait_for_operator=input):
        self.cam = cam
        self.nodemap = nodemap
        self.trigger_type = trigger_type
        self.wait_for_operator = wait_for_operator
        self._outstanding = None

    @property
    def outstanding(self):
        return self._outstanding

    def grab(self):
        """
        Executes the trigger and retrieves the resulting image.

        GetNextImage() is called without a timeout and blocks until the camera delivers an image.

        :returns: The image, or None if the trigger could not be executed.
        :raises FrameOutstandingError: if the previous image has not been released.
        """
        if self._outstanding is not None:
            raise FrameOutstandingError("Previous image has not been released")

        if not execute_trigger(self.nodemap, self.trigger_type, self.wait_for_operator):
            return None

        self._outstanding = self.cam.GetNextImage()
        return self._outstanding

    def release(self):
        if self._outstanding is None:
            return
        image, self._outstanding = self._outstanding, None
        image.Release()


def reset_trigger(nodemap):
    """
    Returns the camera to a normal state by turning off trigger mode.

    :returns: True if successful, False otherwise.
    """
    try:
        node_trigger_mode = PySpin.CEnumerationPtr(nodemap.GetNode("TriggerMode"))
        if not PySpin.IsAvailable(node_trigger_mode) or not PySpin.IsReadable(node_trigger_mode):
            logger.info("Unable to disable trigger mode (node retrieval). Non-fatal error...")
            return False

        node_trigger_mode_off = _get_enum_entry(node_trigger_mode, "Off")
        if node_trigger_mode_off is None:
            logger.info("Unable to disable trigger mode (enum entry retrieval). Non-fatal error...")
            return False

        node_trigger_mode.SetIntValue(node_trigger_mode_off.GetValue())
        logger.info("Trigger mode disabled...\n")

    except PySpin.SpinnakerException as ex:
        logger.error("Error: %s", ex)
        return False

    return True
