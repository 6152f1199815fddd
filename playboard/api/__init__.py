"""Playboard API package - FastAPI surface for remote board editing and playback."""

from playboard.api.main import app, create_app

__all__ = ["app", "create_app"]
