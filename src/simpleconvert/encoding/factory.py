"""Factory for creating route encoders."""

from typing import Dict, Type

from loguru import logger

from simpleconvert.config import ConversionConfig
from simpleconvert.core.video.errors import ConfigurationError
from simpleconvert.core.video.types import Route
from .base import BaseEncoder
from .dolby_vision import DolbyVisionEncoder
from .standard import X265Encoder


class EncoderFactory:
    """Factory for creating encoder instances per content route."""

    def __init__(self):
        """Initialize factory."""
        self._encoders: Dict[Route, Type[BaseEncoder]] = {}

        # Register default routes
        self.register(Route.SDR, X265Encoder)
        self.register(Route.HDR10, X265Encoder)
        self.register(Route.DOLBY_VISION, DolbyVisionEncoder)

    def register(self, route: Route, encoder_class: Type[BaseEncoder]) -> None:
        """Register the encoder for a route.

        Args:
            route: Content route
            encoder_class: Class implementing the route
        """
        self._encoders[route] = encoder_class
        logger.debug(f"Registered encoder for {route.name}: {encoder_class.__name__}")

    def create(self, route: Route, config: ConversionConfig) -> BaseEncoder:
        """Create the encoder for a route.

        Args:
            route: Content route
            config: Conversion configuration

        Returns:
            Encoder instance

        Raises:
            ConfigurationError: If no encoder is registered for the route
        """
        encoder_class = self._encoders.get(route)
        if encoder_class is None:
            raise ConfigurationError(f"No encoder registered for route {route.name}")
        return encoder_class(config)


# Global factory instance
factory = EncoderFactory()
