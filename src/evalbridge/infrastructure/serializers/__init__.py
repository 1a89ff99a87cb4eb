"""Payload serializers."""

from evalbridge.infrastructure.serializers.json import JsonSerializer

__all__ = ["JsonSerializer"]
