"""Credential key switching response."""

from pydantic import BaseModel


class KeySwitchResponse(BaseModel):
    key: str
    message: str
