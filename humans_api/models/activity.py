"""Activity types and the activity row written by integrations."""

from enum import Enum

from pydantic import BaseModel, Field


class ActivityType(str, Enum):
    """Kinds of activity recorded against CRM contacts."""

    EMAIL = "email"
    WHATSAPP_MESSAGE = "whatsapp_message"
    ONLINE_MEETING = "online_meeting"
    PHONE_CALL = "phone_call"
    SOCIAL_MESSAGE = "social_message"


SUBJECT_MAX_LENGTH = 500


class ActivityCreate(BaseModel):
    """Row inserted into the ``activities`` table."""

    id: str
    display_id: str
    type: ActivityType
    subject: str = Field(..., max_length=SUBJECT_MAX_LENGTH)
    body: str | None = None
    notes: str | None = None
    activity_date: str = Field(..., description="ISO-8601 instant of the activity")
    human_id: str | None = None
    account_id: str | None = None
    route_signup_id: str | None = None
    website_booking_request_id: str | None = None
    gmail_id: str | None = None
    front_id: str | None = None
    front_conversation_id: str | None = None
    sync_run_id: str | None = None
    colleague_id: str | None = None
    created_by_colleague_id: str
    created_at: str
    updated_at: str
