"""Configuration for display audits."""

from .audit_config import AuditConfig, DEFAULT_FIRMWARE_CONFIG_PATHS

__all__ = ["AuditConfig", "DEFAULT_FIRMWARE_CONFIG_PATHS"]
