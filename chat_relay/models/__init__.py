"""Expose commonly used model classes at the package level.

Importing these classes here allows consumers to write concise imports like::

    from chat_relay.models import ChatRequest, ChatResponse, ChatMessage

These names refer to the underlying Pydantic models defined in their
respective modules.
"""

from .chat_request import ChatRequest  # noqa: F401
from .chat_response import ChatResponse, ErrorResponse, ProviderInfo  # noqa: F401
from .chat_message import ChatMessage  # noqa: F401
from .session import SessionState  # noqa: F401
from .enums import MessageRole  # noqa: F401
