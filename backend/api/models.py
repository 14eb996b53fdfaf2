"""Request bodies for the HTTP API."""

from pydantic import BaseModel, ConfigDict


class SignupRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: str | None = None


class UnsubscribeRequest(BaseModel):
    """Either a plain email or a signed token from an email link."""

    model_config = ConfigDict(str_strip_whitespace=True)

    email: str | None = None
    token: str | None = None
