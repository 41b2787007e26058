import unittest
from unittest.mock import Mock
import sys
import os

# Add project root and tests dir to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

# Replace PySpin BEFORE importing
import fake_pyspin

PySpin = fake_pyspin.install()

from trigger import (
    TriggerType,
    FrameOutstandingError,
    TriggeredGrabber,
    configure_trigger,
    execute_trigger,
    reset_trigger,
)


class TestConfigureTrigger(unittest.TestCase):
    def setUp(self):
        self.nodemap = PySpin.make_camera_nodemap()
        self.trigger_mode = self.nodemap.GetNode("TriggerMode")
        self.trigger_source = self.nodemap.GetNode("TriggerSource")

    def test_software_trigger(self):
        """Mode is turned off, source set to Software, then mode turned on"""
        self.assertTrue(configure_trigger(self.nodemap, TriggerType.SOFTWARE))

        self.assertEqual(self.trigger_source.symbolic, "Software")
        self.assertEqual(self.trigger_mode.symbolic, "On")
        self.assertEqual(self.trigger_mode.set_calls, [0, 1])

    def test_hardware_trigger_uses_line(self):
        self.assertTrue(configure_trigger(self.nodemap, TriggerType.HARDWARE))
        self.assertEqual(self.trigger_source.symbolic, "Line0")

        self.assertTrue(configure_trigger(self.nodemap, TriggerType.HARDWARE, hardware_line="Line3"))
        self.assertEqual(self.trigger_source.symbolic, "Line3")

    def test_mode_is_off_while_source_changes(self):
        """Trigger mode must never be On while the source is written"""
        self.trigger_mode.value = self.trigger_mode.GetEntryByName("On").GetValue()
        modes_seen = []
        original_set = self.trigger_source.SetIntValue

        def record_mode(value):
            modes_seen.append(self.trigger_mode.symbolic)
            original_set(value)

        self.trigger_source.SetIntValue = record_mode

        self.assertTrue(configure_trigger(self.nodemap, TriggerType.SOFTWARE))
        self.assertEqual(modes_seen, ["Off"])

    def test_trigger_mode_unavailable(self):
        """Unavailable TriggerMode aborts before any value is set"""
        self.trigger_mode.available = False

        self.assertFalse(configure_trigger(self.nodemap, TriggerType.SOFTWARE))
        self.assertEqual(self.trigger_mode.set_calls, [])
        self.assertEqual(self.trigger_source.set_calls, [])

    def test_trigger_mode_missing(self):
        del self.nodemap.nodes["TriggerMode"]

        self.assertFalse(configure_trigger(self.nodemap, TriggerType.SOFTWARE))
        self.assertEqual(self.trigger_source.set_calls, [])

    def test_trigger_mode_off_entry_unreadable(self):
        self.trigger_mode.GetEntryByName("Off").readable = False

        self.assertFalse(configure_trigger(self.nodemap, TriggerType.SOFTWARE))
        self.assertEqual(self.trigger_mode.set_calls, [])

    def test_trigger_source_not_writable(self):
        """Source is checked for write access; mode stays off"""
        self.trigger_source.writable = False

        self.assertFalse(configure_trigger(self.nodemap, TriggerType.SOFTWARE))
        self.assertEqual(self.trigger_source.set_calls, [])
        self.assertEqual(self.trigger_mode.symbolic, "Off")

    def test_hardware_line_missing(self):
        self.assertFalse(configure_trigger(self.nodemap, TriggerType.HARDWARE, hardware_line="Line7"))
        self.assertEqual(self.trigger_source.set_calls, [])

    def test_trigger_mode_not_writable_for_enable(self):
        """No rollback: source stays selected and mode stays off"""
        original_set = self.trigger_mode.SetIntValue

        def set_then_lock(value):
            original_set(value)
            self.trigger_mode.writable = False

        self.trigger_mode.SetIntValue = set_then_lock

        self.assertFalse(configure_trigger(self.nodemap, TriggerType.SOFTWARE))
        self.assertEqual(self.trigger_mode.symbolic, "Off")
        self.assertEqual(self.trigger_source.symbolic, "Software")

    def test_spinnaker_exception(self):
        self.trigger_source.SetIntValue = Mock(side_effect=PySpin.SpinnakerException("Spinnaker: -1010"))

        self.assertFalse(configure_trigger(self.nodemap, TriggerType.SOFTWARE))


class TestResetTrigger(unittest.TestCase):
    def setUp(self):
        self.nodemap = PySpin.make_camera_nodemap()
        self.trigger_mode = self.nodemap.GetNode("TriggerMode")

    def test_configure_then_reset_leaves_mode_off(self):
        for trigger_type in (TriggerType.SOFTWARE, TriggerType.HARDWARE):
            self.assertTrue(configure_trigger(self.nodemap, trigger_type))
            self.assertEqual(self.trigger_mode.symbolic, "On")

            self.assertTrue(reset_trigger(self.nodemap))
            self.assertEqual(self.trigger_mode.symbolic, "Off")

    def test_reset_is_idempotent(self):
        self.assertTrue(reset_trigger(self.nodemap))
        self.assertTrue(reset_trigger(self.nodemap))
        self.assertEqual(self.trigger_mode.symbolic, "Off")

    def test_unreadable_trigger_mode(self):
        self.trigger_mode.readable = False

        self.assertFalse(reset_trigger(self.nodemap))
        self.assertEqual(self.trigger_mode.set_calls, [])

    def test_spinnaker_exception(self):
        self.trigger_mode.SetIntValue = Mock(side_effect=PySpin.SpinnakerException("Spinnaker: -1002"))

        self.assertFalse(reset_trigger(self.nodemap))


class TestExecuteTrigger(unittest.TestCase):
    def setUp(self):
        self.nodemap = PySpin.make_camera_nodemap()
        self.command = self.nodemap.GetNode("TriggerSoftware")
        self.wait_for_operator = Mock()

    def test_software_trigger_waits_then_executes(self):
        order = []
        self.wait_for_operator.side_effect = lambda prompt: order.append("wait")
        self.command.Execute = Mock(side_effect=lambda: order.append("execute"))

        self.assertTrue(execute_trigger(self.nodemap, TriggerType.SOFTWARE, self.wait_for_operator))
        self.assertEqual(order, ["wait", "execute"])
        self.wait_for_operator.assert_called_once_with("Press the Enter key to initiate software trigger.")

    def test_software_trigger_command_not_writable(self):
        self.command.writable = False

        self.assertFalse(execute_trigger(self.nodemap, TriggerType.SOFTWARE, self.wait_for_operator))
        self.assertEqual(self.command.executions, 0)

    def test_hardware_trigger_never_executes_command(self):
        self.assertTrue(execute_trigger(self.nodemap, TriggerType.HARDWARE, self.wait_for_operator))
        self.assertEqual(self.command.executions, 0)
        self.wait_for_operator.assert_not_called()

    def test_spinnaker_exception(self):
        self.command.Execute = Mock(side_effect=PySpin.SpinnakerException("Spinnaker: -1011"))

        self.assertFalse(execute_trigger(self.nodemap, TriggerType.SOFTWARE, self.wait_for_operator))


class TestTriggeredGrabber(unittest.TestCase):
    def setUp(self):
        self.cam = PySpin.FakeCamera(0, [])
        self.nodemap = self.cam.GetNodeMap()
        self.grabber = TriggeredGrabber(self.cam, self.nodemap, TriggerType.SOFTWARE, Mock())

    def test_grab_executes_one_trigger_per_image(self):
        image = self.grabber.grab()

        self.assertIs(image, self.cam.retrieved[0])
        self.assertIs(self.grabber.outstanding, image)
        self.assertEqual(self.nodemap.GetNode("TriggerSoftware").executions, 1)

    def test_second_grab_before_release_fails(self):
        """Only one image is produced per trigger, so a second grab must not reach the camera"""
        self.grabber.grab()

        with self.assertRaises(FrameOutstandingError):
            self.grabber.grab()
        self.assertEqual(len(self.cam.retrieved), 1)
        self.assertEqual(self.nodemap.GetNode("TriggerSoftware").executions, 1)

    def test_release_allows_next_grab(self):
        first = self.grabber.grab()
        self.grabber.release()
        second = self.grabber.grab()

        self.assertEqual(first.release_count, 1)
        self.assertIsNot(first, second)
        self.assertEqual(self.nodemap.GetNode("TriggerSoftware").executions, 2)

    def test_release_without_image_is_noop(self):
        self.grabber.release()
        self.assertIsNone(self.grabber.outstanding)

    def test_failed_trigger_does_not_retrieve(self):
        self.nodemap.GetNode("TriggerSoftware").available = False

        self.assertIsNone(self.grabber.grab())
        self.assertEqual(self.cam.retrieved, [])
        self.assertIsNone(self.grabber.outstanding)


if __name__ == "__main__":
    unittest.main()
