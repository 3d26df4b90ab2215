"""Enumerations used across models."""

from enum import Enum


class MessageRole(str, Enum):
    """Enum for message roles in a transcript.

    ``USER`` denotes a human message, ``ASSISTANT`` a reply from the
    model and ``SYSTEM`` the instruction seeded at the start of a
    conversation.
    """

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
