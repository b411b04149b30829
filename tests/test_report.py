"""Tests for report rendering."""

import re

from display_audit.audit import AuditFacts, OrientationAudit, reconcile_values
from display_audit.collectors.boot import BootFacts
from display_audit.collectors.compositor import WAYLAND_NOTE, CompositorFacts
from display_audit.collectors.drm import DrmConnector, DrmFacts
from display_audit.collectors.firmware import collect_firmware
from display_audit.collectors.inputs import InputToolFacts, UdevInput, parse_input_devices
from display_audit.collectors.kiosk import BrowserProcess, KioskFacts
from display_audit.config.audit_config import AuditConfig
from display_audit.report import RULE, format_flat, format_record, format_report
from tests.fixtures.display_fixtures import INPUT_DEVICES, PI_CONFIG


def build_report(facts):
    return OrientationAudit(AuditConfig()).analyze(facts)


class TestFormatReport:
    """Tests for format_report."""

    def test_empty_host(self):
        text = format_report(build_report(AuditFacts()))

        assert text.startswith(RULE)
        assert "Kernel cmdline:\n  unavailable" in text
        assert "no connectors under sysfs" in text
        assert "no EDID nodes found" in text
        assert "Xorg xrandr rotation: not available or no DISPLAY" in text
        assert "No Pi config files found" in text
        assert "Primary display: console" in text

    def test_sections(self):
        facts = AuditFacts(
            boot=BootFacts(cmdline="quiet fbcon=rotate:1", fbcon_index="1", plymouth_theme="spinner"),
            drm=DrmFacts(
                connectors=[DrmConnector(
                    "card0-eDP-1", "connected",
                    modes=["1920x1200"], panel_orientation="normal",
                    edid_summary="Preferred mode: 1920x1200\nManufacturer: BOE",
                )],
                edid_nodes=1,
            ),
            compositor=CompositorFacts(
                session_type="wayland", display=":0", rotations={"eDP-1": "right"},
                queried=True, notes=[WAYLAND_NOTE],
            ),
            inputs=parse_input_devices(INPUT_DEVICES),
        )
        text = format_report(build_report(facts))

        assert "fbcon degrees:      90" in text
        assert "spinner" in text
        assert "panel_orientation=normal" in text
        assert "    Manufacturer: BOE" in text
        assert re.search(r"rotation=right\s+\(270 deg\)", text)
        assert re.search(r"panel_orientation=normal\s+\(0 deg\) modes: 1920x1200", text)
        assert f"Note: {WAYLAND_NOTE}" in text
        assert "ELAN Touchscreen [mouse0 event5] (touch)" in text
        assert "GUI (panel + compositor): 270 deg" in text
        assert "kernel_fbcon_mismatch" in text

    def test_unknown_panel_degrees(self):
        facts = AuditFacts(drm=DrmFacts(connectors=[DrmConnector("card0-HDMI-A-1", "connected")]))
        text = format_report(build_report(facts))
        assert re.search(r"panel_orientation=unknown\s+\(unknown deg\) modes: n/a", text)

    def test_input_sections_empty(self):
        text = format_report(build_report(AuditFacts()))

        assert "Input devices via libinput:\n  libinput list-devices not available" in text
        assert "Input devices via xinput:\n  xinput not available or no X session" in text
        assert "Evdev devices summary:\n  evdev device list not available" in text
        assert "Udev properties for inputs (by-path):\n  no /dev/input/by-path entries found" in text
        assert "Chromium kiosk processes (if any):\n  chromium not detected" in text

    def test_input_sections(self):
        facts = AuditFacts(
            input_tools=InputToolFacts(
                libinput="Device:           ELAN Touchscreen\nCapabilities:     touch",
                xinput="⎡ Virtual core pointer    id=2 [master pointer  (3)]",
                udev=[UdevInput(
                    path="/dev/input/by-path/platform-i2c-event",
                    properties={"DEVNAME": "/dev/input/event5", "ID_INPUT_TOUCHSCREEN": "1"},
                )],
            ),
            kiosk=KioskFacts(
                processes=[BrowserProcess(812, "/usr/lib/chromium/chromium --kiosk http://localhost:3000")],
                queried=True,
            ),
        )
        text = format_report(build_report(facts))

        assert "Input devices via libinput:\n  Device:           ELAN Touchscreen\n  Capabilities:" in text
        assert "  ⎡ Virtual core pointer" in text
        assert "  /dev/input/by-path/platform-i2c-event (touchscreen):\n    DEVNAME=/dev/input/event5" in text
        assert "    ID_INPUT_TOUCHSCREEN=1" in text
        assert "    812 /usr/lib/chromium/chromium --kiosk http://localhost:3000  [kiosk]" in text

    def test_suggestions_last(self):
        text = format_report(build_report(AuditFacts()))
        suggestions = text.split("Suggestions:\n", 1)[1]
        assert suggestions.startswith("  - No orientation property found.")

    def test_firmware_section(self, tmp_path):
        path = tmp_path / "config.txt"
        path.write_text(PI_CONFIG)
        text = format_report(build_report(AuditFacts(firmware=collect_firmware([str(path)]))))

        assert "Stack: KMS [vc4-kms-v3d]" in text
        assert f"File: {path}" in text
        assert "HDMI: Group DMT mode 82 (PC monitor timings)" in text
        assert "overlay=vc4-kms-dsi-generic params=rotate=180,orientation=normal rotate=180 orientation=normal" in text
        assert "overlay=gpio-ir params" not in text


class TestFormatRecord:

    def test_record_lines(self):
        record = reconcile_values(cmdline="1", panel="normal", compositor="right")
        lines = format_record(record)

        assert lines[0] == "  console:"
        assert any("cmdline" in line and "raw=1" in line and "(90 deg)" in line for line in lines)
        assert any("firmware_overlay" in line and "raw=none" in line for line in lines)
        assert sum(line.strip().startswith("!") for line in lines) == 2


class TestFormatFlat:

    def test_key_value_lines(self):
        record = reconcile_values(cmdline="1", panel="normal", compositor="right")
        lines = format_flat(record).splitlines()

        assert "display_id=console" in lines
        assert "effective_console=90" in lines
        assert "effective_gui=270" in lines
        assert "conflict.1.kind=kernel_fbcon_mismatch" in lines
        assert "conflict.2.kind=compositor_double_rotation" in lines
