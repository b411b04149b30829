"""Tests for firmware config collection."""

import pytest

from display_audit.collectors.firmware import (
    STACK_FKMS,
    STACK_KMS,
    STACK_LEGACY,
    clean_config,
    collect_firmware,
    detect_pi_stack,
    parse_firmware_file,
    parse_hdmi_section,
    parse_legacy_rotation,
    summarize_group_mode,
)
from display_audit.orientation.models import OrientationSource
from tests.fixtures.display_fixtures import PI_CONFIG, PI_USERCONFIG


@pytest.fixture
def boot_dir(tmp_path):
    (tmp_path / "config.txt").write_text(PI_CONFIG)
    (tmp_path / "userconfig.txt").write_text(PI_USERCONFIG)
    return tmp_path


class TestDetectPiStack:
    """Tests for detect_pi_stack."""

    def test_kms_with_panels(self):
        stack = detect_pi_stack(clean_config(PI_CONFIG + PI_USERCONFIG))

        assert stack.stack == STACK_KMS
        assert stack.stack_detail == "vc4-kms-v3d"
        assert stack.is_kms
        assert stack.dsi_overlays == ["vc4-kms-dsi-generic"]
        assert stack.dpi_enabled
        assert stack.dpi_overlays == ["dpi24"]
        assert stack.spi_overlays == ["waveshare35a"]
        assert stack.hdmi_timing_keys

    def test_fkms(self):
        stack = detect_pi_stack(clean_config("dtoverlay=vc4-fkms-v3d\n"))
        assert stack.stack == STACK_FKMS

    def test_legacy(self):
        stack = detect_pi_stack(clean_config("gpu_mem=64\n"))
        assert stack.stack == STACK_LEGACY
        assert not stack.is_kms
        assert not stack.dpi_enabled

    def test_commented_overlay_ignored(self):
        stack = detect_pi_stack(clean_config("#dtoverlay=vc4-kms-v3d\n"))
        assert stack.stack == STACK_LEGACY

    def test_dpi_keys_without_overlay(self):
        stack = detect_pi_stack(clean_config("enable_dpi_lcd=1\ndpi_group=2\n"))
        assert stack.dpi_enabled
        assert stack.dpi_overlays == []

    def test_summary(self):
        summary = detect_pi_stack(clean_config(PI_CONFIG)).summary()
        assert "Stack: KMS [vc4-kms-v3d]" in summary
        assert "DPI: yes (overlays: dpi24)" in summary
        assert "SPI panels: none" in summary


class TestHdmiSummary:
    """Tests for HDMI group/mode summaries."""

    @pytest.mark.parametrize("group,mode,expected", [
        ("1", "16", "Group CEA mode 16 (HDMI TV timings)"),
        ("2", "82", "Group DMT mode 82 (PC monitor timings)"),
        ("0", "", "Auto group/mode"),
        ("", "", "Auto group/mode"),
        ("3", "4", "Group 3 mode 4"),
    ])
    def test_group_mode(self, group, mode, expected):
        assert summarize_group_mode(group, mode) == expected

    def test_cvt(self):
        assert summarize_group_mode(cvt="hdmi_cvt=1366 768 60 3 0 0 1") == (
            "CVT custom 1366x768@60 aspect=3 margins=0 interlace=0 reduced-blanking=1"
        )

    def test_cvt_short(self):
        assert summarize_group_mode(cvt="hdmi_cvt=800 480 60").startswith("CVT custom 800x480@60 aspect= ")

    def test_last_setting_wins(self):
        assert parse_hdmi_section("hdmi_group=1\nhdmi_mode=4\nhdmi_group=2\n") == (
            "Group DMT mode 4 (PC monitor timings)"
        )

    def test_absent(self):
        assert parse_hdmi_section("gpu_mem=128\n") is None


class TestParseFirmwareFile:
    """Tests for parse_firmware_file."""

    def test_core_lines(self):
        parsed = parse_firmware_file("/boot/config.txt", PI_CONFIG)
        assert "dtoverlay=vc4-kms-dsi-generic,rotate=180,orientation=normal" in parsed.core_lines
        assert "gpu_mem=128" in parsed.core_lines
        assert not any(line.startswith("#") for line in parsed.core_lines)

    def test_reported_overlays(self):
        parsed = parse_firmware_file("/boot/config.txt", PI_CONFIG)
        assert [o.name for o in parsed.reported_overlays] == ["vc4-kms-dsi-generic", "dpi24"]

    def test_legacy_rotation(self):
        assert parse_legacy_rotation(PI_CONFIG) == {"display_rotate": "2"}
        assert parse_legacy_rotation("#lcd_rotate=2\n") == {}


class TestCollectFirmware:
    """Tests for collect_firmware."""

    def test_collect(self, boot_dir):
        paths = [str(boot_dir / name) for name in ("config.txt", "absent.txt", "userconfig.txt")]

        facts = collect_firmware(paths)

        assert facts.present
        assert [f.path for f in facts.files] == [paths[0], paths[2]]
        assert facts.stack.spi_overlays == ["waveshare35a"]
        assert facts.files[1].hdmi_summary.startswith("CVT custom 1366x768@60")
        assert facts.legacy_rotation == {"display_rotate": "2"}

    def test_signal_prefers_orientation(self, boot_dir):
        """Test that the first hinted overlay line decides and orientation= wins."""
        facts = collect_firmware([str(boot_dir / "config.txt")])

        signal = facts.signal()

        assert signal.source is OrientationSource.FIRMWARE_OVERLAY
        assert signal.display_id == "console"
        assert signal.raw_value == "orientation=normal"

    def test_signal_display_id(self, boot_dir):
        facts = collect_firmware([str(boot_dir / "config.txt")])
        assert facts.signal("DSI-1").display_id == "DSI-1"

    def test_no_hint(self, tmp_path):
        path = tmp_path / "config.txt"
        path.write_text("dtoverlay=vc4-kms-v3d\n")
        assert collect_firmware([str(path)]).signal() is None

    def test_not_a_pi(self, tmp_path):
        facts = collect_firmware([str(tmp_path / "config.txt")])
        assert not facts.present
        assert facts.stack is None
        assert facts.signal() is None
