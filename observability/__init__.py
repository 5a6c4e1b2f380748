"""Observability utilities for the assessment service."""
from .logger import log_event

__all__ = ["log_event"]
