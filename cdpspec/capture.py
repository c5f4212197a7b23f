"""Scoped access to a capture device (camera or microphone).

The device is opened on entry and released on every way out of the block:
a normal shot, a cancel, or an error.  A failed open still triggers a
release so no half-opened stream is left behind.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional, Protocol

from .errors import DeviceAccessError

logger = logging.getLogger("cdpspec-api")


class CaptureDevice(Protocol):
    def open(self) -> None: ...

    def read_frame(self) -> Optional[bytes]:
        """Encoded image (or audio clip) bytes, or None when the user cancelled."""
        ...

    def release(self) -> None: ...


def _release(device: CaptureDevice) -> None:
    try:
        device.release()
    except Exception as exc:
        logger.warning(f"Capture device release failed: {exc}")


@contextmanager
def capture_stream(device: CaptureDevice) -> Iterator[CaptureDevice]:
    try:
        device.open()
    except Exception as exc:
        _release(device)
        raise DeviceAccessError(f"cannot access capture device: {exc}") from exc
    try:
        yield device
    finally:
        _release(device)


def grab_frame(device: CaptureDevice) -> Optional[bytes]:
    """Open the device, take one frame, release it.  None means cancelled."""
    with capture_stream(device) as dev:
        try:
            return dev.read_frame()
        except DeviceAccessError:
            raise
        except Exception as exc:
            raise DeviceAccessError(f"capture failed: {exc}") from exc
