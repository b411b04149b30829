"""
Audit configuration: probe timeouts, probed paths and connector preferences.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, List


DEFAULT_FIRMWARE_CONFIG_PATHS = [
    "/boot/config.txt",
    "/boot/firmware/config.txt",
    "/boot/userconfig.txt",
    "/boot/volumioconfig.txt",
]


@dataclass
class AuditConfig:
    """
    Configuration for an orientation audit run.

    Attributes:
        probe_timeout: Seconds before an external tool counts as absent
        drm_root: DRM class directory in sysfs
        cmdline_path: Kernel command line file
        input_devices_path: Kernel input device listing
        input_by_path_dir: Persistent input device links passed to udevadm
        firmware_config_paths: Raspberry Pi config files, in read order
        preferred_connector: Connector treated as primary when present
        max_modes: Number of modes listed per connector
        framebuffer_log_lines: Trailing framebuffer handoff lines kept from dmesg
        use_compositor: Whether to query xrandr
        use_kernel_log: Whether to read dmesg
        use_input_tools: Whether to query libinput, xinput, udevadm and ps
    """
    probe_timeout: float = 5.0
    drm_root: str = "/sys/class/drm"
    cmdline_path: str = "/proc/cmdline"
    input_devices_path: str = "/proc/bus/input/devices"
    input_by_path_dir: str = "/dev/input/by-path"
    firmware_config_paths: List[str] = field(
        default_factory=lambda: list(DEFAULT_FIRMWARE_CONFIG_PATHS)
    )
    preferred_connector: str = "eDP-1"
    max_modes: int = 5
    framebuffer_log_lines: int = 50
    use_compositor: bool = True
    use_kernel_log: bool = True
    use_input_tools: bool = True

    def __post_init__(self):
        """Validate configuration values."""
        self._validate()

    def _validate(self):
        """Validate all configuration values."""
        if self.probe_timeout <= 0:
            raise ValueError(f"probe_timeout must be > 0, got {self.probe_timeout}")

        if self.max_modes < 1:
            raise ValueError(f"max_modes must be >= 1, got {self.max_modes}")

        if self.framebuffer_log_lines < 0:
            raise ValueError(
                f"framebuffer_log_lines must be >= 0, got {self.framebuffer_log_lines}"
            )

        if not self.preferred_connector:
            raise ValueError("preferred_connector must not be empty")

        if isinstance(self.firmware_config_paths, str):
            object.__setattr__(self, "firmware_config_paths", [self.firmware_config_paths])

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "probe_timeout": self.probe_timeout,
            "drm_root": self.drm_root,
            "cmdline_path": self.cmdline_path,
            "input_devices_path": self.input_devices_path,
            "input_by_path_dir": self.input_by_path_dir,
            "firmware_config_paths": list(self.firmware_config_paths),
            "preferred_connector": self.preferred_connector,
            "max_modes": self.max_modes,
            "framebuffer_log_lines": self.framebuffer_log_lines,
            "use_compositor": self.use_compositor,
            "use_kernel_log": self.use_kernel_log,
            "use_input_tools": self.use_input_tools,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuditConfig":
        """Create from dictionary (e.g., from YAML config)."""
        return cls(
            probe_timeout=data.get("probe_timeout", 5.0),
            drm_root=data.get("drm_root", "/sys/class/drm"),
            cmdline_path=data.get("cmdline_path", "/proc/cmdline"),
            input_devices_path=data.get("input_devices_path", "/proc/bus/input/devices"),
            input_by_path_dir=data.get("input_by_path_dir", "/dev/input/by-path"),
            firmware_config_paths=data.get(
                "firmware_config_paths", list(DEFAULT_FIRMWARE_CONFIG_PATHS)
            ),
            preferred_connector=data.get("preferred_connector", "eDP-1"),
            max_modes=data.get("max_modes", 5),
            framebuffer_log_lines=data.get("framebuffer_log_lines", 50),
            use_compositor=data.get("use_compositor", True),
            use_kernel_log=data.get("use_kernel_log", True),
            use_input_tools=data.get("use_input_tools", True),
        )

    @classmethod
    def from_yaml(cls, yaml_path: str) -> "AuditConfig":
        """Load configuration from YAML file."""
        import yaml

        with open(yaml_path, "r") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"{yaml_path} must contain a mapping, got {type(data).__name__}")

        return cls.from_dict(data.get("audit", data))

    @classmethod
    def default(cls) -> "AuditConfig":
        """Create default configuration."""
        return cls()
