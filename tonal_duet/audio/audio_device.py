"""Audio device utilities for pitch detection."""

from typing import Any, Dict, List, Optional

import sounddevice as sd

from ..core.exceptions import AcquisitionFailure
from ..core.interfaces import DeviceSelector
from ..logger import get_logger

logger = get_logger(__name__)


def list_input_devices() -> List[Dict[str, Any]]:
    """List the devices that can capture audio.

    Returns:
        One dict per input device with id, name, max_input_channels and default_samplerate

    Raises:
        AcquisitionFailure: If PortAudio cannot enumerate devices
    """
    try:
        devices = sd.query_devices()
    except sd.PortAudioError as e:
        raise AcquisitionFailure(f"Cannot query audio devices: {e}") from e

    return [
        {
            "id": device_id,
            "name": device["name"],
            "max_input_channels": device["max_input_channels"],
            "default_samplerate": device["default_samplerate"],
        }
        for device_id, device in enumerate(devices)
        if device["max_input_channels"] > 0
    ]


def resolve_input_device(selector: DeviceSelector) -> Optional[int]:
    """Turn a device selector into a PortAudio device id.

    Args:
        selector: None for the system default, a device id (int or digit
            string), or a case-insensitive substring of the device name

    Returns:
        The device id, or None for the system default input

    Raises:
        AcquisitionFailure: If no input device matches
    """
    if selector is None:
        return None
    if isinstance(selector, str) and selector.strip().isdigit():
        selector = int(selector)

    devices = list_input_devices()

    if isinstance(selector, int):
        for device in devices:
            if device["id"] == selector:
                return selector
        raise AcquisitionFailure(f"No input device with id {selector}")

    needle = selector.lower()
    for device in devices:
        if needle in device["name"].lower():
            logger.info(f"Found input device: {device['name']} (id {device['id']})")
            return device["id"]
    raise AcquisitionFailure(f"No input device matching {selector!r}")
