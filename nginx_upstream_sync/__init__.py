"""Keeps an nginx upstream block in sync with Kubernetes pod membership."""

__version__ = "0.1.0"
