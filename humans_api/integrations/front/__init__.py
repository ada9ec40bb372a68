"""Front messaging platform integration."""

from humans_api.integrations.front.client import FrontClient
from humans_api.integrations.front.domain import (
    FrontContact,
    FrontConversation,
    FrontMessage,
    FrontPage,
    FrontRecipient,
)

__all__ = [
    "FrontClient",
    "FrontContact",
    "FrontConversation",
    "FrontMessage",
    "FrontPage",
    "FrontRecipient",
]
