# app/models/user.py
from pydantic import BaseModel


class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    success: bool
    message: str
    authenticated: bool


class AuthStatus(BaseModel):
    authenticated: bool
    username: str | None = None


class DebugInfo(BaseModel):
    debug_mode: bool
