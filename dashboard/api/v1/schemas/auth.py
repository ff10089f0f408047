from pydantic import BaseModel, EmailStr, Field


class Credentials(BaseModel):
    """Login and registration form."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=256)


class SessionResponse(BaseModel):
    """Session state reported to the browser. The bearer token stays server-side."""

    authenticated: bool
    token_type: str | None = None


class LoginPageResponse(BaseModel):
    """Landing data for the login view, including why the user was sent there."""

    authenticated: bool
    message: str | None = None
