import pytest

from skillsynth.assessment import SessionHardware
from skillsynth.assessment.testing import MockMediaDevices
from skillsynth.errors import HardwareUnavailableError


def noop_result(text, is_final):
    pass


def test_acquire_opens_every_device():
    devices = MockMediaDevices()
    hardware = SessionHardware(devices, noop_result)

    hardware.acquire()

    assert hardware.acquired
    assert [r.name for r in devices.created] == ["microphone", "analyser", "camera", "recognizer"]
    assert hardware.recognizer is devices.resource("recognizer")


def test_release_closes_each_resource_once():
    devices = MockMediaDevices()
    hardware = SessionHardware(devices, noop_result)
    hardware.acquire()

    hardware.release()
    hardware.release()

    assert not hardware.acquired
    assert all(resource.close_count == 1 for resource in devices.created)


def test_release_before_acquire_is_harmless():
    hardware = SessionHardware(MockMediaDevices(), noop_result)
    hardware.release()
    assert not hardware.acquired


def test_failed_camera_closes_already_opened_devices():
    devices = MockMediaDevices(fail_on="camera")
    hardware = SessionHardware(devices, noop_result)

    with pytest.raises(HardwareUnavailableError):
        hardware.acquire()

    assert not hardware.acquired
    assert devices.resource("microphone").close_count == 1
    assert devices.resource("analyser").close_count == 1
    assert devices.resource("camera") is None


def test_denied_microphone_opens_nothing():
    devices = MockMediaDevices(fail_on="microphone")
    with pytest.raises(HardwareUnavailableError):
        SessionHardware(devices, noop_result).acquire()
    assert devices.created == []


def test_recognizer_is_optional():
    devices = MockMediaDevices(with_recognizer=False)
    hardware = SessionHardware(devices, noop_result)
    hardware.acquire()

    hardware.start_listening()
    hardware.stop_listening()
    hardware.release()

    assert hardware.recognizer is None
    assert len(devices.created) == 3


def test_listening_toggles_recognizer():
    devices = MockMediaDevices(answers=["hi"])
    heard = []
    hardware = SessionHardware(devices, lambda text, final: heard.append((text, final)))
    hardware.acquire()

    hardware.start_listening()
    hardware.stop_listening()

    recognizer = devices.resource("recognizer")
    assert recognizer.start_count == 1
    assert recognizer.stop_count == 1
    assert heard[-1] == ("hi", True)


def test_failing_close_does_not_stop_release():
    devices = MockMediaDevices()
    hardware = SessionHardware(devices, noop_result)
    hardware.acquire()

    camera = devices.resource("camera")

    def broken_close():
        raise OSError("device busy")

    camera.close = broken_close
    hardware.release()

    assert devices.resource("microphone").close_count == 1
    assert devices.resource("analyser").close_count == 1
    assert devices.resource("recognizer").close_count == 1


def test_acquire_after_release_closes_what_it_opened():
    devices = MockMediaDevices()
    hardware = SessionHardware(devices, noop_result)

    hardware.release()
    hardware.acquire()

    assert not hardware.acquired
    assert len(devices.created) == 4
    assert all(resource.close_count == 1 for resource in devices.created)
