"""
Sample tool output and fake sysfs trees for collector tests.
"""

from pathlib import Path
from typing import Dict, Optional


MODETEST_CONNECTORS = """\
Connectors:
id\tencoder\tstatus\t\tname\t\tsize (mm)\tmodes\tencoders
77\t76\tconnected\teDP-1          \t310x170\t\t1\t76
  modes:
\tindex name refresh (Hz) hdisp hss hse htot vdisp vss vse vtot
  #0 1200x1920 60.00 1200 1280 1300 1340 1920 1940 1942 1960 157600 flags: nhsync, nvsync; type: preferred, driver
  props:
\t1 EDID:
\t\tflags: immutable blob
\t86 panel orientation:
\t\tflags: immutable enum
\t\tenums: Normal=0 Upside Down=1 Left Side Up=2 Right Side Up=3
\t\tvalue: 3

85\t0\tdisconnected\tHDMI-A-1       \t0x0\t\t0\t84
  props:
\t1 EDID:
\t\tflags: immutable blob
"""

DRM_INFO_TEXT = """\
Node: /dev/dri/card0
├───Driver: i915 (Intel Graphics) version 1.6.0 (20201103)
├───Device: PCI 8086:9a49 Intel Corporation TigerLake-LP GT2 [Iris Xe Graphics]
├───Framebuffer size
│   ├───Width: [0, 16384]
│   └───Height: [0, 16384]
├───Connectors
│   ├───Connector 0
│   │   ├───Object ID: 236
│   │   ├───Type: eDP
│   │   ├───Status: connected
│   │   ├───Physical size: 170x310 mm
│   │   ├───Subpixel: unknown
│   │   ├───Encoders: {0}
│   │   ├───Modes
│   │   │   └───1200x1920@60.00 preferred driver phsync nvsync
│   │   └───Properties
│   │       ├───"EDID" (immutable): blob = 250
│   │       ├───"DPMS": enum {On, Standby, Suspend, Off} = On
│   │       ├───"link-status": enum {Good, Bad} = Good
│   │       ├───"non-desktop" (immutable): range [0, 1] = 0
│   │       ├───"panel orientation" (immutable): enum {Normal, Upside Down, Left Side Up, Right Side Up} = Left Side Up
│   │       └───"scaling mode": enum {None, Full, Center, Full aspect} = Full aspect
│   ├───Connector 1
│   │   ├───Object ID: 245
│   │   ├───Type: HDMI-A
│   │   ├───Status: disconnected
│   │   ├───Encoders: {1}
│   │   └───Properties
│   │       ├───"EDID" (immutable): blob = 0
│   │       └───"DPMS": enum {On, Standby, Suspend, Off} = On
│   └───Connector 2
│       ├───Object ID: 254
│       ├───Type: HDMI-A
│       ├───Status: connected
│       ├───Encoders: {2}
│       └───Properties
│           └───"DPMS": enum {On, Standby, Suspend, Off} = On
├───Encoders
│   └───Encoder 0
│       ├───Object ID: 235
│       ├───Type: TMDS
│       ├───CRTCS: {0, 1, 2, 3}
│       └───Clones: {0}
└───Planes
    └───Plane 0
        ├───Object ID: 31
        └───Properties
            └───"type" (immutable): enum {Overlay, Primary, Cursor} = Primary
Node: /dev/dri/card1
├───Driver: vc4 (Broadcom VC4 graphics) version 0.0.0 (20140616)
└───Connectors
    └───Connector 0
        ├───Object ID: 32
        ├───Type: DSI
        ├───Status: connected
        └───Properties
            └───"panel orientation" (immutable): enum {Normal, Upside Down, Left Side Up, Right Side Up} = Upside Down
"""

DRM_INFO_NO_ORIENTATION = """\
Node: /dev/dri/card0
└───Connectors
    └───Connector 0
        ├───Object ID: 236
        ├───Type: eDP
        └───Status: connected
"""

XRANDR_VERBOSE = """\
Screen 0: minimum 320 x 200, current 1920 x 1200, maximum 16384 x 16384
eDP-1 connected primary 1920x1200+0+0 (0x47) right (normal left inverted right x axis y axis) 170mm x 310mm
\tIdentifier: 0x42
\tTimestamp:  1234
HDMI-1 disconnected (normal left inverted right x axis y axis)
DP-1 connected 1920x1080+1920+0 (0x50) normal (normal left inverted right x axis y axis) 527mm x 296mm
"""

DMESG_TEXT = """\
[    0.000000] Command line: BOOT_IMAGE=/vmlinuz fbcon=rotate:1
[    0.512000] efifb: probing for efifb
[    1.100000] i915 0000:00:02.0: [drm] panel_orientation quirk applied: right_side_up
[    1.200000] i915 0000:00:02.0: [drm] backlight quirk for panel detected
[    1.300000] fbcon: i915drmfb (fb0) is primary device
[    2.000000] usb 1-1: new high-speed USB device number 2
"""

EDID_DECODE_OUTPUT = """\
Block 0, Base EDID:
  Vendor & Product Identification:
    Manufacturer: BOE
    Model: 2074
  Detailed Timing Descriptors:
    DTD 1:  1920x1200   60.000 Hz  16:10
    Preferred mode: 1920x1200 60.000 Hz
"""

PI_CONFIG = """\
# Display settings
dtoverlay=vc4-kms-v3d
dtoverlay=vc4-kms-dsi-generic,rotate=180,orientation=normal  # panel
dtoverlay=dpi24,rotate=90
dtoverlay=gpio-ir,gpio_pin=17
hdmi_group=2
hdmi_mode=82
display_rotate=2
gpu_mem=128
"""

PI_USERCONFIG = """\
hdmi_cvt=1366 768 60 3 0 0 1
dtoverlay=waveshare35a
"""

INPUT_DEVICES = """\
I: Bus=0019 Vendor=0000 Product=0001 Version=0000
N: Name="Power Button"
P: Phys=LNXPWRBN/button/input0
H: Handlers=kbd event0
B: EV=3

I: Bus=0018 Vendor=0416 Product=038f Version=0100
N: Name="ELAN Touchscreen"
P: Phys=i2c-ELAN0001:00
H: Handlers=mouse0 event5
B: EV=b
B: ABS=2608000 3

I: Bus=0003 Vendor=046d Product=c52b Version=0111
N: Name="Logitech USB Receiver"
H: Handlers=sysrq kbd leds event3
B: EV=120013
"""

UDEV_TOUCH_PROPERTIES = """\
DEVPATH=/devices/platform/soc/fe205000.i2c/i2c-22/22-0038/input/input5/event5
DEVNAME=/dev/input/event5
MAJOR=13
MINOR=69
SUBSYSTEM=input
ID_INPUT=1
ID_INPUT_TOUCHSCREEN=1
ID_PATH=platform-fe205000.i2c
LIBINPUT_CALIBRATION_MATRIX=0 1 0 -1 0 1
"""

LIBINPUT_LIST_DEVICES = """\
Device:           ELAN Touchscreen
Kernel:           /dev/input/event5
Group:            4
Seat:             seat0, default
Size:             293x165mm
Capabilities:     touch
Calibration:      identity matrix
Rotation:         n/a
"""

PS_OUTPUT = """\
    PID CMD
      1 /sbin/init splash
    812 /usr/lib/chromium/chromium --kiosk --noerrdialogs http://localhost:3000
    845 /usr/lib/chromium/chromium --type=gpu-process --field-trial-handle=1
    901 /usr/bin/python3 /opt/volumio/app.py
   1203 /opt/google/chrome/chrome --start-fullscreen
"""


def make_drm_tree(
    root: Path,
    connectors: Dict[str, str],
    modes: Optional[Dict[str, str]] = None,
    edid: Optional[Dict[str, bytes]] = None,
) -> Path:
    """
    Create a fake /sys/class/drm tree.

    Args:
        root: Directory to create the tree in
        connectors: sysfs connector name -> status
        modes: sysfs connector name -> modes file content
        edid: sysfs connector name -> edid bytes

    Returns:
        Path of the drm directory
    """
    drm = root / "drm"
    drm.mkdir(parents=True, exist_ok=True)
    (drm / "card0").mkdir(exist_ok=True)
    (drm / "version").write_text("drm 1.1.0 20060810\n")

    for name, status in connectors.items():
        conn = drm / name
        conn.mkdir()
        (conn / "status").write_text(status + "\n")
        if modes and name in modes:
            (conn / "modes").write_text(modes[name])
        if edid and name in edid:
            (conn / "edid").write_bytes(edid[name])
    return drm
