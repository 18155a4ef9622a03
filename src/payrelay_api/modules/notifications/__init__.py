"""Outbound customer notifications."""

from .email import EmailNotifier

__all__ = ["EmailNotifier"]
