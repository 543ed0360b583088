"""System resource monitoring."""

from .resources import ResourceMonitor, SystemResources

__all__ = ['ResourceMonitor', 'SystemResources']
