"""Classify Front conversations into CRM activity types."""

import re
from collections.abc import Iterable

from humans_api.models.activity import ActivityType

# Front channel ids, grouped by the activity type they produce
SOCIAL_CHANNEL_IDS: frozenset[str] = frozenset(
    {
        "cha_lxdeo",  # Facebook
        "cha_lxdcw",  # Instagram
    }
)
WHATSAPP_CHANNEL_IDS: frozenset[str] = frozenset(
    {
        "cha_m1868",  # US +1 202-573-8145
        "cha_m3274",  # Malta +356 2034 1713
        "cha_m17mo",  # Malta Go +356 7954 9994
        "cha_lxdb4",  # US 15558236373
        "cha_m17ts",  # UK +44 1225 266970
        "cha_m17vk",  # Switzerland +41 41 563 99 98
    }
)
EMAIL_CHANNEL_IDS: frozenset[str] = frozenset({"cha_lxe5c", "cha_ly6sg", "cha_m7tuo"})

_PHONE_HANDLE = re.compile(r"\+?\d[\d\s-]{6,}")


class ChannelClassifier:
    """Maps a channel id and/or contact handle to an activity type.

    A known channel id always wins. Without one, the handle shape decides:
    anything with ``@`` is email, phone-like handles are WhatsApp, and the
    rest are treated as social-platform usernames.
    """

    def __init__(
        self,
        social_channel_ids: Iterable[str] = SOCIAL_CHANNEL_IDS,
        whatsapp_channel_ids: Iterable[str] = WHATSAPP_CHANNEL_IDS,
        email_channel_ids: Iterable[str] = EMAIL_CHANNEL_IDS,
    ) -> None:
        self._social = frozenset(social_channel_ids)
        self._whatsapp = frozenset(whatsapp_channel_ids)
        self._email = frozenset(email_channel_ids)

    def classify(self, channel_id: str | None, handle: str) -> ActivityType:
        """Classify a conversation.

        Args:
            channel_id: Front channel id, when known.
            handle: The contact handle of the conversation.

        Returns:
            The activity type to record messages under.
        """
        if channel_id:
            if channel_id in self._social:
                return ActivityType.SOCIAL_MESSAGE
            if channel_id in self._whatsapp:
                return ActivityType.WHATSAPP_MESSAGE
            if channel_id in self._email:
                return ActivityType.EMAIL

        if "@" in handle:
            return ActivityType.EMAIL
        if _PHONE_HANDLE.fullmatch(handle):
            return ActivityType.WHATSAPP_MESSAGE
        return ActivityType.SOCIAL_MESSAGE
