"""Press briefing service: section generation, layered API configuration and
dependency status probing."""

__version__ = "0.1.0"
