"""Session identity models."""

from pydantic import BaseModel


class SessionLabel(BaseModel):
    """Cosmetic identity for a session. Carries no authentication guarantee."""

    name: str
    account_id: str


class ChatTurn(BaseModel):
    role: str  # "user" or "assistant"
    text: str
