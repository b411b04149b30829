"""
Conflict resolution for reconciled display orientation.
"""

from dataclasses import replace
from typing import List
import logging

from .models import (
    ConflictFinding,
    ConflictKind,
    DisplayOrientationRecord,
    NormalizedAngle,
    OrientationSource,
)
from .normalizer import add

logger = logging.getLogger(__name__)


class ConflictResolver:
    """
    Computes effective orientation and advisory conflicts for a display.

    The resolver never fails: unknown inputs only suppress the rules that
    need them. Rules are evaluated independently and reported in a fixed
    order:

    - KERNEL_FBCON_MISMATCH: panel_orientation and fbcon disagree
    - COMPOSITOR_DOUBLE_ROTATION: compositor rotates on top of a known panel orientation
    - NO_ORIENTATION_SIGNAL: kernel reports no panel orientation anywhere
    - FIRMWARE_OVERLAY_MISMATCH: overlay rotation hint disagrees with the panel

    Example:
        >>> resolver = ConflictResolver()
        >>> record = resolver.resolve(DisplayOrientationRecord("eDP-1", per_source=angles))
        >>> for finding in record.conflicts:
        ...     print(finding.detail)
    """

    def __init__(self, check_firmware_overlay: bool = True):
        """
        Initialize resolver.

        Args:
            check_firmware_overlay: Whether to compare overlay hints against the panel
        """
        self.check_firmware_overlay = check_firmware_overlay

    def resolve(self, record: DisplayOrientationRecord) -> DisplayOrientationRecord:
        """
        Resolve effective orientation for one display.

        Args:
            record: Record with populated per_source angles

        Returns:
            New record with effective_console, effective_gui and conflicts set
        """
        cmdline = record.angle(OrientationSource.CMDLINE)
        panel = record.angle(OrientationSource.KERNEL_PANEL)
        compositor = record.angle(OrientationSource.COMPOSITOR)

        effective_console = cmdline
        effective_gui = add(panel, compositor)
        conflicts = self.find_conflicts(record)

        logger.debug(
            f"{record.display_id}: console={effective_console} gui={effective_gui} "
            f"conflicts={len(conflicts)}"
        )
        for finding in conflicts:
            logger.info(f"{record.display_id}: {finding.kind.value}")

        return replace(
            record,
            effective_console=effective_console,
            effective_gui=effective_gui,
            conflicts=conflicts,
        )

    def find_conflicts(self, record: DisplayOrientationRecord) -> List[ConflictFinding]:
        """Evaluate every conflict rule against a record."""
        cmdline = record.angle(OrientationSource.CMDLINE)
        panel = record.angle(OrientationSource.KERNEL_PANEL)
        compositor = record.angle(OrientationSource.COMPOSITOR)
        overlay = record.angle(OrientationSource.FIRMWARE_OVERLAY)

        findings = []

        if panel.is_known and cmdline.is_known and panel != cmdline:
            findings.append(ConflictFinding(
                kind=ConflictKind.KERNEL_FBCON_MISMATCH,
                sources_involved=frozenset({
                    OrientationSource.KERNEL_PANEL,
                    OrientationSource.CMDLINE,
                }),
                detail=(
                    f"Kernel panel_orientation ({panel} deg) and fbcon ({cmdline} deg) differ. "
                    "Align values to avoid boot mismatch."
                ),
            ))

        if panel.is_known and compositor.is_known and compositor != NormalizedAngle.DEG_0:
            findings.append(ConflictFinding(
                kind=ConflictKind.COMPOSITOR_DOUBLE_ROTATION,
                sources_involved=frozenset({
                    OrientationSource.KERNEL_PANEL,
                    OrientationSource.COMPOSITOR,
                }),
                detail=(
                    f"Compositor is rotating ({compositor} deg) on top of kernel orientation "
                    f"({panel} deg). Remove compositor rotation or clear panel_orientation."
                ),
            ))

        if not panel.is_known and not record.panel_evidence:
            findings.append(ConflictFinding(
                kind=ConflictKind.NO_ORIENTATION_SIGNAL,
                sources_involved=frozenset({OrientationSource.KERNEL_PANEL}),
                detail=(
                    "No orientation property found. If device is known rotated, check "
                    "drm_panel_orientation_quirks.c or set "
                    f"video={record.display_id}:panel_orientation=..."
                ),
            ))

        if (
            self.check_firmware_overlay
            and overlay.is_known
            and panel.is_known
            and overlay != panel
        ):
            findings.append(ConflictFinding(
                kind=ConflictKind.FIRMWARE_OVERLAY_MISMATCH,
                sources_involved=frozenset({
                    OrientationSource.FIRMWARE_OVERLAY,
                    OrientationSource.KERNEL_PANEL,
                }),
                detail=(
                    f"Firmware overlay requests {overlay} deg but kernel panel_orientation "
                    f"is {panel} deg. Keep rotation in one place."
                ),
            ))

        return findings
