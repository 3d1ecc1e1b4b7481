"""Podcastr: podcast publishing API and playback client."""

__version__ = "1.0.0"
