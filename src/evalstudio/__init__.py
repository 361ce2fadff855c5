"""evalstudio -- scoring core for agent evaluation datasets and runs."""

__version__ = "0.1.0"
