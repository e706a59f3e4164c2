"""Framework integrations for wire applications."""

from artiflare.wire.contrib import fastapi

__all__ = ("fastapi",)
