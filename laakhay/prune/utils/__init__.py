"""Utility helpers."""

from .http import HTTPClient, error_for_response

__all__ = ["HTTPClient", "error_for_response"]
