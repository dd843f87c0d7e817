import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse
from werkzeug.security import check_password_hash

from app.models.user import AuthStatus, LoginRequest, LoginResponse

router = APIRouter()

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "username"


# --- helper: get current logged in username from the signed session cookie ---
def get_current_username(request: Request) -> str | None:
    username = request.session.get(SESSION_USER_KEY)
    if not isinstance(username, str) or not username:
        return None
    return username


# --- dependency guarding every file endpoint ---
def require_auth(request: Request) -> str:
    username = get_current_username(request)
    if username is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return username


@router.post("/login", response_model=LoginResponse)
def login(request: Request, credentials: LoginRequest):
    settings = request.app.state.settings
    password_hash = request.app.state.password_hash

    if credentials.username != settings.admin_username or not check_password_hash(
        password_hash, credentials.password
    ):
        logger.warning("Failed login attempt for %r", credentials.username)
        return JSONResponse(
            status_code=401,
            content=LoginResponse(success=False, message="Invalid credentials", authenticated=False).model_dump(),
        )

    # login success → remember the user in the session cookie
    request.session[SESSION_USER_KEY] = credentials.username
    logger.info("User %s logged in", credentials.username)
    return LoginResponse(success=True, message="Login successful", authenticated=True)


@router.post("/logout", response_model=LoginResponse)
def logout(request: Request):
    request.session.clear()
    return LoginResponse(success=True, message="Logged out successfully", authenticated=False)


@router.get("/auth/status", response_model=AuthStatus)
def auth_status(request: Request):
    username = get_current_username(request)
    return AuthStatus(authenticated=username is not None, username=username)
