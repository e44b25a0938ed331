"""CoinRun platformer environment with its level generator, renderer and entity-component-system."""

__version__ = "1.0.0"