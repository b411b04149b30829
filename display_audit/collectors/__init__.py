"""
Collectors for raw orientation facts.

Each collector wraps one external source and degrades to "no value"
when the tool or file is missing.
"""

from .base import have, read_text, run_probe
from .boot import BootFacts, collect_boot
from .drm import DrmConnector, DrmFacts, collect_drm, plain_connector_name
from .compositor import CompositorFacts, collect_compositor
from .kernel_log import KernelLogFacts, collect_kernel_log
from .firmware import FirmwareFacts, PiStack, collect_firmware
from .inputs import InputDevice, InputToolFacts, collect_input_tools, collect_inputs
from .kiosk import BrowserProcess, KioskFacts, collect_kiosk

__all__ = [
    "have",
    "read_text",
    "run_probe",
    "BootFacts",
    "collect_boot",
    "DrmConnector",
    "DrmFacts",
    "collect_drm",
    "plain_connector_name",
    "CompositorFacts",
    "collect_compositor",
    "KernelLogFacts",
    "collect_kernel_log",
    "FirmwareFacts",
    "PiStack",
    "collect_firmware",
    "InputDevice",
    "collect_inputs",
    "InputToolFacts",
    "collect_input_tools",
    "BrowserProcess",
    "KioskFacts",
    "collect_kiosk",
]
