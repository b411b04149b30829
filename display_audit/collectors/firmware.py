"""
Raspberry Pi firmware configuration facts (config.txt family).

Detects the graphics stack, panel overlays, HDMI timing settings, legacy
rotation keys and overlay rotation hints.
"""

import re
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, List, Optional

from ..orientation.models import CONSOLE_DISPLAY_ID, RawSignal
from ..orientation.overlay import OverlayLine, parse_overlay_lines, select_overlay_signal, strip_comment
from .base import read_text

logger = logging.getLogger(__name__)

_OVERLAY_NAME = re.compile(r"\bdtoverlay=([^,\s]*)")
_KMS = re.compile(r"^vc4-kms-v3d(-pi4|-pi5)?$")
_FKMS = re.compile(r"^vc4-fkms-v3d$")
_DSI = re.compile(
    r"^(vc4-kms-dsi|panel-|rpi-ft5406|rpi_touchscreen|rpi-backlight|tc3587(62|68)|"
    r"ili9(881|401|406)|st77(01|89)|otm8009a|nt35510|s6e3|jd[0-9]+|khadas-ts050|waveshare.*dsi)"
)
_DPI_OVERLAY = re.compile(r"^(dpi|rpi-dpi|ltn101nt05|auo_|raspberrypi-dpi)")
_DPI_KEYS = re.compile(r"(^|\s)enable_dpi_lcd=1|(^|\s)dpi_[a-z_]+=|(^|\s)display_default_lcd=1")
_SPI = re.compile(
    r"(waveshare|pitft|fbtft|fb_ili9341|ili93(41|28)|st77(35|89)|st7789|ssd13(06|11)|"
    r"gc9a01|hx8357|ili9486|ili9488|adafruit.*tft)"
)
_HDMI_TIMING = re.compile(r"(^|\s)hdmi_(group|mode|cvt|timings)=")
_CORE_KEYS = re.compile(
    r"^\s*(dtoverlay|display_rotate|display_hdmi_rotate|display_lcd_rotate|lcd_rotate|"
    r"hdmi_group|hdmi_mode|hdmi_cvt|hdmi_drive|disable_overscan|overscan_\w+|"
    r"framebuffer_(width|height)|enable_dpi_lcd|dpi_\w+|gpu_mem)\s*=",
    re.IGNORECASE,
)
_LEGACY_ROTATION = re.compile(
    r"^\s*(display_rotate|display_hdmi_rotate|display_lcd_rotate|lcd_rotate)\s*=\s*(\S+)",
    re.IGNORECASE,
)

STACK_KMS = "KMS"
STACK_FKMS = "FKMS"
STACK_LEGACY = "Legacy/Unknown (no vc4 overlay)"


def _dedupe(items: List[str]) -> List[str]:
    seen = set()
    result = []
    for item in items:
        if item and item not in seen:
            seen.add(item)
            result.append(item)
    return result


def clean_config(text: str) -> str:
    """Strip comments and lowercase a config file."""
    return "\n".join(line.split("#", 1)[0] for line in text.splitlines()).lower()


@dataclass
class PiStack:
    """Graphics stack and panel families detected from firmware config."""
    stack: str = STACK_LEGACY
    stack_detail: Optional[str] = None
    dsi_overlays: List[str] = field(default_factory=list)
    dpi_enabled: bool = False
    dpi_overlays: List[str] = field(default_factory=list)
    spi_overlays: List[str] = field(default_factory=list)
    hdmi_timing_keys: bool = False

    @property
    def is_kms(self) -> bool:
        return self.stack in (STACK_KMS, STACK_FKMS)

    def summary(self) -> str:
        """One-line summary."""
        stack = self.stack + (f" [{self.stack_detail}]" if self.stack_detail else "")
        dpi = "yes" if self.dpi_enabled else "no"
        if self.dpi_overlays:
            dpi += f" (overlays: {','.join(self.dpi_overlays)})"
        return (
            f"Stack: {stack} "
            f"DSI overlays: {','.join(self.dsi_overlays) or 'none'} "
            f"DPI: {dpi} "
            f"SPI panels: {','.join(self.spi_overlays) or 'none'} "
            f"HDMI timing keys: {'yes' if self.hdmi_timing_keys else 'no'}"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "stack": self.stack,
            "stack_detail": self.stack_detail,
            "dsi_overlays": self.dsi_overlays,
            "dpi_enabled": self.dpi_enabled,
            "dpi_overlays": self.dpi_overlays,
            "spi_overlays": self.spi_overlays,
            "hdmi_timing_keys": self.hdmi_timing_keys,
        }


def detect_pi_stack(cfg: str) -> PiStack:
    """
    Detect graphics stack and panel overlays.

    Args:
        cfg: Concatenated config text, already passed through clean_config()
    """
    overlays = [m.group(1) for m in _OVERLAY_NAME.finditer(cfg) if m.group(1)]

    stack, detail = STACK_LEGACY, None
    kms = [o for o in overlays if _KMS.match(o)]
    if kms:
        stack, detail = STACK_KMS, kms[0]
    elif any(_FKMS.match(o) for o in overlays):
        stack, detail = STACK_FKMS, "vc4-fkms-v3d"

    dpi_overlays = _dedupe([o for o in overlays if _DPI_OVERLAY.match(o)])
    dpi_keys = any(_DPI_KEYS.search(line) for line in cfg.splitlines())

    return PiStack(
        stack=stack,
        stack_detail=detail,
        dsi_overlays=_dedupe([o for o in overlays if _DSI.match(o)]),
        dpi_enabled=bool(dpi_overlays) or dpi_keys,
        dpi_overlays=dpi_overlays,
        spi_overlays=_dedupe([o for o in overlays if _SPI.search(o)]),
        hdmi_timing_keys=any(_HDMI_TIMING.search(line) for line in cfg.splitlines()),
    )


def summarize_group_mode(group: str = "", mode: str = "", cvt: str = "") -> str:
    """
    Describe HDMI group/mode settings.

    Args:
        group: hdmi_group value
        mode: hdmi_mode value
        cvt: Full hdmi_cvt line, e.g. "hdmi_cvt=1366 768 60 3 0 0 1"
    """
    if cvt:
        fields = cvt.split("=", 1)[-1].split()
        fields += [""] * (7 - len(fields))
        w, h, r, a, margins, interlace, rb = fields[:7]
        return (
            f"CVT custom {w}x{h}@{r} aspect={a} margins={margins} "
            f"interlace={interlace} reduced-blanking={rb}"
        )
    if group == "1":
        return f"Group CEA mode {mode} (HDMI TV timings)"
    if group == "2":
        return f"Group DMT mode {mode} (PC monitor timings)"
    if group in ("0", ""):
        return "Auto group/mode"
    return f"Group {group} mode {mode}"


def _last_value(text: str, key: str) -> str:
    value = ""
    pattern = re.compile(rf"^\s*{key}\s*=(.*)$")
    for line in text.splitlines():
        match = pattern.match(line)
        if match:
            value = re.sub(r"\s", "", match.group(1))
    return value


def parse_hdmi_section(text: str) -> Optional[str]:
    """Summarize the last hdmi_group/hdmi_mode/hdmi_cvt settings, None if absent."""
    group = _last_value(text, "hdmi_group")
    mode = _last_value(text, "hdmi_mode")
    cvt = ""
    for line in text.splitlines():
        if re.match(r"^\s*hdmi_cvt\s*=", line):
            cvt = line.strip()
    if not (group or mode or cvt):
        return None
    return summarize_group_mode(group, mode, cvt)


def parse_legacy_rotation(text: str) -> Dict[str, str]:
    """Find legacy firmware rotation keys (display_rotate, lcd_rotate, ...)."""
    found = {}
    for line in text.splitlines():
        match = _LEGACY_ROTATION.match(strip_comment(line))
        if match:
            found[match.group(1).lower()] = match.group(2)
    return found


@dataclass
class FirmwareFile:
    """Facts extracted from one firmware config file."""
    path: str
    core_lines: List[str] = field(default_factory=list)
    hdmi_summary: Optional[str] = None
    overlays: List[OverlayLine] = field(default_factory=list)
    legacy_rotation: Dict[str, str] = field(default_factory=dict)

    @property
    def reported_overlays(self) -> List[OverlayLine]:
        """Overlays worth reporting: panel overlays or any with rotation hints."""
        return [o for o in self.overlays if o.is_panel_overlay or o.has_rotation_hint]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "path": self.path,
            "core_lines": self.core_lines,
            "hdmi_summary": self.hdmi_summary,
            "overlays": [o.to_dict() for o in self.reported_overlays],
            "legacy_rotation": self.legacy_rotation,
        }


def parse_firmware_file(path: str, text: str) -> FirmwareFile:
    """Parse one config file."""
    core = []
    for line in text.splitlines():
        if _CORE_KEYS.match(line):
            cleaned = strip_comment(line)
            if cleaned:
                core.append(cleaned)
    return FirmwareFile(
        path=path,
        core_lines=core,
        hdmi_summary=parse_hdmi_section(text),
        overlays=parse_overlay_lines(text),
        legacy_rotation=parse_legacy_rotation(text),
    )


@dataclass
class FirmwareFacts:
    """Firmware configuration across all config files present."""
    files: List[FirmwareFile] = field(default_factory=list)
    stack: Optional[PiStack] = None

    @property
    def present(self) -> bool:
        return bool(self.files)

    @property
    def legacy_rotation(self) -> Dict[str, str]:
        merged: Dict[str, str] = {}
        for f in self.files:
            merged.update(f.legacy_rotation)
        return merged

    def signal(self, display_id: str = CONSOLE_DISPLAY_ID) -> Optional[RawSignal]:
        """
        Get the FIRMWARE_OVERLAY signal.

        Uses the first overlay line carrying a rotation hint, in file order;
        within that line orientation= wins over rotate=.
        """
        for f in self.files:
            for overlay in f.overlays:
                selected = select_overlay_signal(overlay.signals)
                if selected is not None:
                    return RawSignal(selected.source, display_id, selected.raw_value)
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "files": [f.to_dict() for f in self.files],
            "stack": self.stack.to_dict() if self.stack else None,
        }


def collect_firmware(paths: List[str]) -> FirmwareFacts:
    """
    Read the firmware config files that exist.

    Args:
        paths: Candidate config files, in read order

    Returns:
        FirmwareFacts; empty when no file is present (not a Pi, or /boot not mounted)
    """
    files = []
    texts = []
    for path in paths:
        if not Path(path).is_file():
            continue
        text = read_text(path)
        if text is None:
            continue
        files.append(parse_firmware_file(path, text))
        texts.append(text)

    if not files:
        logger.debug("No firmware config files found")
        return FirmwareFacts()

    stack = detect_pi_stack(clean_config("\n".join(texts)))
    logger.info(f"Firmware config: {len(files)} file(s), stack {stack.stack}")
    return FirmwareFacts(files=files, stack=stack)
