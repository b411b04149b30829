"""
Plain-text rendering of audit reports.
"""

from typing import List, Optional

from .audit import AuditReport, PI_ADVICE
from .orientation.models import DisplayOrientationRecord, OrientationSource
from .orientation.normalizer import normalize

RULE = "-" * 40


def _section(lines: List[str], title: str, body: List[str]) -> None:
    lines.append(title)
    lines.extend(body)
    lines.append(RULE)


def _indented(text: Optional[str]) -> List[str]:
    return [f"  {line}" for line in text.splitlines()] if text else []


def format_record(record: DisplayOrientationRecord) -> List[str]:
    """Render one record as indented key=value lines."""
    lines = [f"  {record.display_id}:"]
    for source in OrientationSource:
        raw = record.raw_values.get(source) or "none"
        lines.append(f"    {source.value:<17} raw={raw:<16} ({record.angle(source)} deg)")
    lines.append(f"    console (fbcon):   {record.effective_console} deg")
    lines.append(f"    GUI (panel + compositor): {record.effective_gui} deg")
    for finding in record.conflicts:
        lines.append(f"    ! {finding.kind.value}: {finding.detail}")
    return lines


def format_report(report: AuditReport) -> str:
    """
    Render the full audit as sectioned text.

    Args:
        report: Audit result

    Returns:
        Multi-line report
    """
    facts = report.facts
    boot = facts.boot
    lines = [RULE, "Orientation audit", RULE]

    _section(lines, "Kernel cmdline:", [f"  {boot.cmdline if boot.cmdline is not None else 'unavailable'}"])
    fbcon_deg = report.primary.angle(OrientationSource.CMDLINE)
    _section(lines, "fbcon:", [
        f"  fbcon=rotate index: {boot.fbcon_index or 'none'}",
        f"  fbcon degrees:      {fbcon_deg}",
    ])
    _section(lines, "video= parameters:", [f"  {' '.join(boot.video_params) or 'none'}"])
    _section(lines, "Plymouth:", [f"  {boot.plymouth_theme or 'plymouth not installed'}"])

    log = facts.kernel_log
    body = list(log.panel_lines) or ["  no panel_orientation messages"]
    body += list(log.quirk_lines) or ["  no panel/backlight quirk messages"]
    _section(lines, "dmesg orientation and quirk hints:", body)
    _section(lines, "Framebuffer and DRM handoff (last lines):", list(log.framebuffer_lines) or ["  none"])

    body = []
    for conn in facts.drm.connectors:
        orientation = conn.panel_orientation or "unknown"
        modes = " ".join(conn.modes) if conn.modes is not None else "n/a"
        body.append(
            f"{conn.sysfs_name:<20} status={conn.status:<12} "
            f"panel_orientation={orientation:<14} "
            f"({normalize(OrientationSource.KERNEL_PANEL, conn.panel_orientation)} deg) modes: {modes}"
        )
    _section(lines, "DRM connectors:", body or ["  no connectors under sysfs"])

    body = []
    if facts.drm.edid_nodes == 0:
        body.append("  no EDID nodes found under /sys/class/drm")
    for conn in facts.drm.connectors:
        if conn.edid_summary is not None:
            body.append(f"  {conn.sysfs_name}:")
            body.extend(f"    {line}" for line in conn.edid_summary.splitlines())
    for owner, summary in facts.drm.unmatched_edid.items():
        body.append(f"  {owner}:")
        body.extend(f"    {line}" for line in summary.splitlines())
    _section(lines, "EDID per connector:", body)

    comp = facts.compositor
    if comp.rotations:
        body = [
            f"  {name:<16} rotation={rotation:<10} ({normalize(OrientationSource.COMPOSITOR, rotation)} deg)"
            for name, rotation in comp.rotations.items()
        ]
        _section(lines, "Xorg xrandr rotation:", body + [f"  Note: {n}" for n in comp.notes])
    else:
        lines.append("Xorg xrandr rotation: not available or no DISPLAY")
        lines.extend(f"  Note: {n}" for n in comp.notes)
        lines.append(RULE)

    tools = facts.input_tools
    _section(lines, "Input devices via libinput:", _indented(tools.libinput) or [
        "  libinput list-devices not available"
    ])
    _section(lines, "Input devices via xinput:", _indented(tools.xinput) or [
        "  xinput not available or no X session"
    ])

    body = [
        f"  {d.name} [{' '.join(d.handlers)}]{' (touch)' if d.is_touch else ''}"
        for d in facts.inputs
    ]
    _section(lines, "Evdev devices summary:", body or ["  evdev device list not available"])

    body = []
    for entry in tools.udev:
        body.append(f"  {entry.path}{' (touchscreen)' if entry.is_touch else ''}:")
        body.extend(f"    {k}={v}" for k, v in entry.properties.items())
    _section(lines, "Udev properties for inputs (by-path):", body or [
        "  no /dev/input/by-path entries found"
    ])

    body = [
        f"  {p.pid:>7} {p.command}{'  [kiosk]' if p.kiosk else ''}"
        for p in facts.kiosk.processes
    ]
    _section(lines, "Chromium kiosk processes (if any):", body or ["  chromium not detected"])

    firmware = facts.firmware
    if firmware.present:
        body = [f"  {firmware.stack.summary()}"] if firmware.stack else []
        for f in firmware.files:
            body.append(f"  File: {f.path}")
            body.extend(f"    {line}" for line in f.core_lines)
            if f.hdmi_summary:
                body.append(f"    HDMI: {f.hdmi_summary}")
            for overlay in f.reported_overlays:
                hints = " ".join(s.raw_value for s in overlay.signals)
                body.append(f"    overlay={overlay.name} params={overlay.param_string} {hints}".rstrip())
        body.extend(f"  - {advice}" for advice in PI_ADVICE)
        _section(lines, "Raspberry Pi firmware:", body)
    else:
        _section(lines, "Raspberry Pi firmware:", [
            "  No Pi config files found; likely not Raspberry Pi OS (or configs not mounted)."
        ])

    lines.append("Effective orientation summary:")
    lines.append(f"  Primary display: {report.primary_id}")
    for record in report.records.values():
        lines.extend(format_record(record))
    lines.append(RULE)

    lines.append("Suggestions:")
    lines.extend(f"  - {hint}" for hint in report.suggestions())
    return "\n".join(lines)


def format_flat(record: DisplayOrientationRecord) -> str:
    """Render a record as key=value lines."""
    return "\n".join(f"{k}={v}" for k, v in record.to_flat_dict().items())
