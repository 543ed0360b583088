"""Resource monitoring utilities."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import psutil
from loguru import logger

from simpleconvert.config import ConversionConfig

GIB = 1024 * 1024 * 1024


@dataclass
class SystemResources:
    """Disk usage at an output location.

    Attributes:
        disk_percent: Disk usage percentage
        disk_free_gb: Free disk space in GB
    """
    disk_percent: float
    disk_free_gb: float


def _existing_ancestor(path: Path) -> Path:
    """Closest existing directory containing ``path``."""
    path = path.absolute()
    for candidate in (path, *path.parents):
        if candidate.exists():
            return candidate if candidate.is_dir() else candidate.parent
    return Path.cwd()


class ResourceMonitor:
    """Monitor system resources before starting an encode."""

    def __init__(self, config: ConversionConfig):
        """Initialize monitor with config."""
        self.config = config

    def get_resources(self, path: Optional[Path] = None) -> SystemResources:
        """Get disk usage for an output location.

        Args:
            path: Optional path to check disk space for, need not exist yet

        Returns:
            Disk usage of the filesystem holding ``path``
        """
        disk = psutil.disk_usage(str(_existing_ancestor(path or Path.cwd())))
        return SystemResources(
            disk_percent=disk.percent,
            disk_free_gb=disk.free / GIB,
        )

    def check_disk_space(self, path: Path) -> bool:
        """Check there is enough free space where an output will be written.

        Args:
            path: Output file or directory

        Returns:
            True if at least ``min_disk_gb`` is free
        """
        required_gb = self.config.min_disk_gb
        if required_gb <= 0:
            return True

        resources = self.get_resources(path)
        if resources.disk_free_gb < required_gb:
            logger.error(
                f"Not enough disk space. Required: {required_gb:.1f}GB, "
                f"Available: {resources.disk_free_gb:.1f}GB"
            )
            return False
        logger.debug(f"Disk space OK: {resources.disk_free_gb:.1f}GB free")
        return True
