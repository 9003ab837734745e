"""Verification provider adapters."""

from .console import ConsoleVerificationProvider
from .message_central import MessageCentralClient

__all__ = ["ConsoleVerificationProvider", "MessageCentralClient"]
