"""
Orientation audit: collect signals, normalize them and resolve conflicts.

Data flows one way, Collector -> Normalizer -> Resolver. Every value is
passed explicitly so nothing survives between runs.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Any, List, Mapping, Optional

from .config.audit_config import AuditConfig
from .collectors.boot import BootFacts, collect_boot
from .collectors.drm import DrmConnector, DrmFacts, collect_drm
from .collectors.compositor import CompositorFacts, collect_compositor
from .collectors.kernel_log import KernelLogFacts, collect_kernel_log
from .collectors.firmware import FirmwareFacts, collect_firmware
from .collectors.inputs import InputDevice, InputToolFacts, collect_input_tools, collect_inputs
from .collectors.kiosk import KioskFacts, collect_kiosk
from .orientation.models import (
    CONSOLE_DISPLAY_ID,
    DisplayOrientationRecord,
    OrientationSource,
    RawSignal,
)
from .orientation.normalizer import normalize_signal
from .orientation.overlay import parse_overlay_line, select_overlay_signal
from .orientation.resolver import ConflictResolver
from .orientation.calibration import libinput_calibration, map_touch_point, xinput_command

logger = logging.getLogger(__name__)

GENERAL_ADVICE = [
    "Touch calibration: prefer a single 3x3 coordinate transformation matrix and derive other angles.",
    "Backlight quirks: if brightness behaves oddly, check drm_panel_backlight_quirks.c "
    "and prefer DRM native backlight path.",
]

PI_ADVICE = [
    "On KMS or FKMS, prefer kernel panel_orientation and xrandr over legacy display_rotate or lcd_rotate.",
    "If dpi overlays specify rotate or orientation, treat them as kernel-level hints.",
]


def reconcile(
    signals: List[RawSignal],
    primary_id: str = CONSOLE_DISPLAY_ID,
    panel_evidence: bool = False,
    resolver: Optional[ConflictResolver] = None,
    display_ids: Optional[List[str]] = None,
) -> Dict[str, DisplayOrientationRecord]:
    """
    Build one resolved record per display identity.

    Signals addressed to the "console" identity (fbcon, firmware overlays)
    have no connector of their own and apply to the primary display.

    Args:
        signals: Raw signals from all collectors
        primary_id: Display that receives console-level signals
        panel_evidence: Whether the kernel log mentions panel_orientation
        resolver: Resolver to use (default ConflictResolver())
        display_ids: Displays that get a record even without signals

    Returns:
        Mapping display_id -> resolved record, primary first
    """
    resolver = resolver or ConflictResolver()

    order = [primary_id]
    for display_id in list(display_ids or []) + [s.display_id for s in signals]:
        if display_id == CONSOLE_DISPLAY_ID:
            display_id = primary_id
        if display_id not in order:
            order.append(display_id)

    grouped: Dict[str, Dict[OrientationSource, RawSignal]] = {d: {} for d in order}
    for signal in signals:
        target = primary_id if signal.display_id == CONSOLE_DISPLAY_ID else signal.display_id
        per_display = grouped[target]
        if signal.source in per_display:
            logger.debug(
                f"Ignoring duplicate {signal.source.value} signal for {target}: {signal.raw_value!r}"
            )
            continue
        per_display[signal.source] = signal

    records = {}
    for display_id in order:
        by_source = grouped[display_id]
        record = DisplayOrientationRecord(
            display_id=display_id,
            per_source={src: normalize_signal(sig) for src, sig in by_source.items()},
            raw_values={src: sig.raw_value for src, sig in by_source.items()},
            panel_evidence=panel_evidence,
        )
        records[display_id] = resolver.resolve(record)
    return records


def reconcile_values(
    cmdline: Optional[str] = None,
    panel: Optional[str] = None,
    compositor: Optional[str] = None,
    overlay: Optional[str] = None,
    panel_evidence: bool = False,
    display_id: str = CONSOLE_DISPLAY_ID,
    resolver: Optional[ConflictResolver] = None,
) -> DisplayOrientationRecord:
    """
    Reconcile raw values for a single display without probing anything.

    Args:
        cmdline: fbcon rotate index ("0".."3")
        panel: DRM panel_orientation value
        compositor: xrandr rotation word
        overlay: dtoverlay line, or a bare "rotate=..,orientation=.." parameter string
        panel_evidence: Whether the kernel log mentions panel_orientation
        display_id: Identity for the resulting record

    Returns:
        Resolved record
    """
    signals = []
    for source, value in (
        (OrientationSource.CMDLINE, cmdline),
        (OrientationSource.KERNEL_PANEL, panel),
        (OrientationSource.COMPOSITOR, compositor),
    ):
        if value is not None:
            signals.append(RawSignal(source, display_id, value))

    if overlay:
        parsed = parse_overlay_line(overlay, display_id=display_id)
        if parsed is not None:
            selected = select_overlay_signal(parsed.signals)
            if selected is not None:
                signals.append(selected)
        else:
            signals.append(RawSignal(OrientationSource.FIRMWARE_OVERLAY, display_id, overlay))

    records = reconcile(signals, display_id, panel_evidence=panel_evidence, resolver=resolver)
    return records[display_id]


def choose_primary(
    connectors: List[DrmConnector],
    outputs: List[str],
    preferred: str = "eDP-1",
) -> str:
    """
    Pick the display that console-level signals belong to.

    Order: the preferred connector, the first connected connector, the
    preferred or first compositor output, else the "console" identity.
    """
    for conn in connectors:
        if preferred in (conn.name, conn.sysfs_name):
            return conn.name
    for conn in sorted(connectors, key=lambda c: c.sysfs_name):
        if conn.connected:
            return conn.name
    if preferred in outputs:
        return preferred
    if outputs:
        return outputs[0]
    return CONSOLE_DISPLAY_ID


@dataclass
class AuditFacts:
    """Everything the collectors found."""
    boot: BootFacts = field(default_factory=BootFacts)
    drm: DrmFacts = field(default_factory=DrmFacts)
    compositor: CompositorFacts = field(default_factory=CompositorFacts)
    kernel_log: KernelLogFacts = field(default_factory=KernelLogFacts)
    firmware: FirmwareFacts = field(default_factory=FirmwareFacts)
    inputs: List[InputDevice] = field(default_factory=list)
    input_tools: InputToolFacts = field(default_factory=InputToolFacts)
    kiosk: KioskFacts = field(default_factory=KioskFacts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "boot": self.boot.to_dict(),
            "drm": self.drm.to_dict(),
            "compositor": self.compositor.to_dict(),
            "kernel_log": self.kernel_log.to_dict(),
            "firmware": self.firmware.to_dict(),
            "inputs": [d.to_dict() for d in self.inputs],
            "input_tools": self.input_tools.to_dict(),
            "kiosk": self.kiosk.to_dict(),
        }


@dataclass
class AuditReport:
    """
    Result of one audit run.

    Attributes:
        facts: Raw collector facts
        primary_id: Display that received console-level signals
        records: Resolved records, primary first
        signals: Signals fed into reconciliation
    """
    facts: AuditFacts
    primary_id: str
    records: Dict[str, DisplayOrientationRecord] = field(default_factory=dict)
    signals: List[RawSignal] = field(default_factory=list)

    @property
    def primary(self) -> DisplayOrientationRecord:
        return self.records[self.primary_id]

    @property
    def touch_devices(self) -> List[InputDevice]:
        return [d for d in self.facts.inputs if d.is_touch]

    def suggestions(self) -> List[str]:
        """
        Remediation hints: primary conflicts first, then other displays,
        then calibration and general advice.
        """
        hints = [f.detail for f in self.primary.conflicts]
        for display_id, record in self.records.items():
            if display_id == self.primary_id:
                continue
            hints.extend(f"{display_id}: {f.detail}" for f in record.conflicts)

        firmware = self.facts.firmware
        if firmware.present:
            legacy = firmware.legacy_rotation
            if legacy and firmware.stack is not None and firmware.stack.is_kms:
                keys = ", ".join(f"{k}={v}" for k, v in legacy.items())
                hints.append(
                    f"Legacy rotation keys ({keys}) conflict with {firmware.stack.stack} rotation. "
                    "Remove them and rotate via panel_orientation or the compositor."
                )
            else:
                hints.append(
                    "On Raspberry Pi, remove legacy display_rotate or lcd_rotate when using KMS "
                    "to prevent conflicts."
                )

        gui = self.primary.effective_gui
        calibration = libinput_calibration(gui)
        if calibration is not None and self.touch_devices:
            # Where a touch on the panel's top-left corner ends up
            x, y = map_touch_point((0.0, 0.0), gui)
            for device in self.touch_devices:
                command = xinput_command(device.name, gui)
                hints.append(
                    f"Touch '{device.name}' at {gui} deg: "
                    f"LIBINPUT_CALIBRATION_MATRIX=\"{calibration}\" or "
                    + " ".join(f"'{c}'" if " " in c else c for c in command)
                    + f"; raw corner (0, 0) maps to ({x:g}, {y:g})"
                )

        hints.extend(GENERAL_ADVICE)
        return hints

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "primary": self.primary_id,
            "records": [r.to_dict() for r in self.records.values()],
            "signals": [s.to_dict() for s in self.signals],
            "suggestions": self.suggestions(),
            "facts": self.facts.to_dict(),
        }


class OrientationAudit:
    """
    Runs a full orientation audit.

    Example:
        >>> audit = OrientationAudit(AuditConfig(probe_timeout=2.0))
        >>> report = audit.run()
        >>> print(report.primary.effective_gui)
    """

    def __init__(
        self,
        config: Optional[AuditConfig] = None,
        resolver: Optional[ConflictResolver] = None,
        env: Optional[Mapping[str, str]] = None,
    ):
        """
        Initialize audit.

        Args:
            config: Audit configuration (default AuditConfig())
            resolver: Conflict resolver (default ConflictResolver())
            env: Environment for session detection (default os.environ)
        """
        self.config = config or AuditConfig.default()
        self.resolver = resolver or ConflictResolver()
        self.env = env

    def collect(self) -> AuditFacts:
        """Run every collector."""
        cfg = self.config
        timeout = cfg.probe_timeout

        facts = AuditFacts(
            boot=collect_boot(cfg.cmdline_path, timeout=timeout),
            drm=collect_drm(cfg.drm_root, max_modes=cfg.max_modes, timeout=timeout),
            firmware=collect_firmware(cfg.firmware_config_paths),
            inputs=collect_inputs(cfg.input_devices_path),
        )
        if cfg.use_compositor:
            facts.compositor = collect_compositor(env=self.env, timeout=timeout)
        if cfg.use_kernel_log:
            facts.kernel_log = collect_kernel_log(
                timeout=timeout, framebuffer_lines=cfg.framebuffer_log_lines
            )
        if cfg.use_input_tools:
            facts.input_tools = collect_input_tools(cfg.input_by_path_dir, timeout=timeout)
            facts.kiosk = collect_kiosk(timeout=timeout)
        return facts

    def analyze(self, facts: AuditFacts) -> AuditReport:
        """
        Reconcile collected facts.

        Records are produced for connected connectors, compositor outputs
        and the primary display; a lone "console" record stands in when
        no display was discovered.
        """
        outputs = list(facts.compositor.rotations)
        primary_id = choose_primary(facts.drm.connectors, outputs, self.config.preferred_connector)

        display_ids = [c.name for c in facts.drm.connectors if c.connected] + outputs
        wanted = set(display_ids) | {primary_id}

        signals: List[RawSignal] = []
        for signal in (facts.boot.signal(), facts.firmware.signal()):
            if signal is not None:
                signals.append(signal)
        signals.extend(s for s in facts.drm.signals() if s.display_id in wanted)
        signals.extend(facts.compositor.signals())

        records = reconcile(
            signals,
            primary_id=primary_id,
            panel_evidence=facts.kernel_log.panel_evidence,
            resolver=self.resolver,
            display_ids=display_ids,
        )
        logger.info(
            f"Primary {primary_id}: console={records[primary_id].effective_console} "
            f"gui={records[primary_id].effective_gui}"
        )
        return AuditReport(facts=facts, primary_id=primary_id, records=records, signals=signals)

    def run(self) -> AuditReport:
        """Collect and reconcile."""
        return self.analyze(self.collect())
