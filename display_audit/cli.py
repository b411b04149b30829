"""
Command-line interface for the display audit.

Usage:
    python -m display_audit orientation [--output text|json] [--config audit.yaml]
    python -m display_audit reconcile --cmdline 1 --panel normal --compositor right
    python -m display_audit touch-matrix left
    python -m display_audit --help
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from typing import List, Optional

from .orientation.models import NormalizedAngle, OrientationSource
from .orientation.normalizer import normalize


def setup_argparse() -> argparse.ArgumentParser:
    """Set up argument parser."""
    parser = argparse.ArgumentParser(
        prog="display-audit",
        description="Display orientation audit for Linux kiosks",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 1.0.0",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # orientation command
    orientation_parser = subparsers.add_parser(
        "orientation",
        help="Audit kernel, compositor and firmware orientation on this host",
    )
    orientation_parser.add_argument(
        "--output",
        "-o",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )
    orientation_parser.add_argument(
        "--config",
        type=str,
        help="YAML configuration file",
    )
    orientation_parser.add_argument(
        "--timeout",
        type=float,
        help="Timeout in seconds for each external tool (overrides config)",
    )
    orientation_parser.add_argument(
        "--no-compositor",
        action="store_true",
        help="Do not query xrandr",
    )
    orientation_parser.add_argument(
        "--no-input-tools",
        action="store_true",
        help="Do not query libinput, xinput, udevadm or ps",
    )

    # reconcile command
    reconcile_parser = subparsers.add_parser(
        "reconcile",
        help="Reconcile orientation values given on the command line",
    )
    reconcile_parser.add_argument("--cmdline", help="fbcon rotate index (0-3)")
    reconcile_parser.add_argument("--panel", help="DRM panel_orientation value")
    reconcile_parser.add_argument("--compositor", help="xrandr rotation (normal, left, inverted, right)")
    reconcile_parser.add_argument("--overlay", help="dtoverlay line or rotate=/orientation= parameters")
    reconcile_parser.add_argument(
        "--panel-evidence",
        action="store_true",
        help="Kernel log mentions panel_orientation",
    )
    reconcile_parser.add_argument(
        "--display",
        default="console",
        help="Display identity for the record (default: console)",
    )
    reconcile_parser.add_argument(
        "--output",
        "-o",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )

    # touch-matrix command
    matrix_parser = subparsers.add_parser(
        "touch-matrix",
        help="Print touch calibration for a display rotation",
    )
    matrix_parser.add_argument(
        "rotation",
        help="Rotation in degrees (0, 90, 180, 270) or xrandr word (normal, left, inverted, right)",
    )
    matrix_parser.add_argument(
        "--device",
        default="<touch device>",
        help="xinput device name for the printed command",
    )

    return parser


def parse_rotation(value: str) -> NormalizedAngle:
    """Parse degrees or an xrandr rotation word."""
    try:
        degrees = int(value)
    except ValueError:
        return normalize(OrientationSource.COMPOSITOR, value)
    if degrees % 90 != 0:
        return NormalizedAngle.UNKNOWN
    return NormalizedAngle.from_degrees(degrees)


def cmd_orientation(args) -> int:
    """Handle orientation command."""
    from .audit import OrientationAudit
    from .config.audit_config import AuditConfig
    from .report import format_report
    import yaml

    try:
        config = AuditConfig.from_yaml(args.config) if args.config else AuditConfig.default()
        if args.timeout is not None:
            config = replace(config, probe_timeout=args.timeout)
        if args.no_compositor:
            config = replace(config, use_compositor=False)
        if args.no_input_tools:
            config = replace(config, use_input_tools=False)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Error: Invalid configuration: {e}", file=sys.stderr)
        return 1

    report = OrientationAudit(config).run()

    if args.output == "json":
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print(format_report(report))

    return 0


def cmd_reconcile(args) -> int:
    """Handle reconcile command."""
    from .audit import reconcile_values
    from .report import format_flat

    record = reconcile_values(
        cmdline=args.cmdline,
        panel=args.panel,
        compositor=args.compositor,
        overlay=args.overlay,
        panel_evidence=args.panel_evidence,
        display_id=args.display,
    )

    if args.output == "json":
        print(json.dumps(record.to_dict(), indent=2))
    else:
        print(format_flat(record))

    return 0


def cmd_touch_matrix(args) -> int:
    """Handle touch-matrix command."""
    from .orientation.calibration import format_matrix, libinput_calibration, touch_matrix, xinput_command

    angle = parse_rotation(args.rotation)
    if not angle.is_known:
        print(f"Error: Unrecognized rotation: {args.rotation}", file=sys.stderr)
        return 1

    command = xinput_command(args.device, angle)
    print(f"Rotation: {angle} deg")
    print(f"Coordinate Transformation Matrix: {format_matrix(touch_matrix(angle))}")
    print(f"LIBINPUT_CALIBRATION_MATRIX=\"{libinput_calibration(angle)}\"")
    print("xinput: " + " ".join(f"'{c}'" if " " in c else c for c in command))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = setup_argparse()
    args = parser.parse_args(argv)

    # Logs go to stderr so stdout stays parseable
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "orientation":
        return cmd_orientation(args)

    if args.command == "reconcile":
        return cmd_reconcile(args)

    if args.command == "touch-matrix":
        return cmd_touch_matrix(args)

    return 0


if __name__ == "__main__":
    sys.exit(main())
