"""
Auth Routes - Officer sign-in for the device (demo identity)

Endpoints:
- POST /api/auth/login - Sign in
- POST /api/auth/logout - Sign out
- GET /api/auth/me - Signed-in officer
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from trafficguard.auth import is_disposable_email
from trafficguard.errors import AuthenticationError
from trafficguard.models import Officer
from trafficguard.state import AppState

from .common import message_response, require_state

router = APIRouter(tags=["auth"])


class LoginRequest(BaseModel):
    email: str
    password: str

    class Config:
        json_schema_extra = {
            "example": {
                "email": "officer@trafficguard.in",
                "password": "traffic123"
            }
        }


class OfficerResponse(BaseModel):
    id: str
    name: str
    firstName: str
    badgeNumber: str
    email: str
    role: str


def _officer_response(officer: Officer) -> OfficerResponse:
    return OfficerResponse(
        id=officer.id,
        name=officer.name,
        firstName=officer.first_name,
        badgeNumber=officer.badge_number,
        email=officer.email,
        role=officer.role,
    )


@router.post("/api/auth/login", response_model=OfficerResponse)
async def login(request: LoginRequest, state: AppState = Depends(require_state)):
    """
    Sign in

    Disposable email domains are rejected with 400; wrong credentials and
    lockouts with 401.
    """
    try:
        officer = state.auth.login(request.email, request.password)
    except AuthenticationError as e:
        status_code = 400 if is_disposable_email(request.email) else 401
        raise HTTPException(status_code=status_code, detail=e.message)
    return _officer_response(officer)


@router.post("/api/auth/logout")
async def logout(state: AppState = Depends(require_state)):
    state.auth.logout()
    return message_response("Signed out")


@router.get("/api/auth/me", response_model=OfficerResponse)
async def get_current_officer(state: AppState = Depends(require_state)):
    officer = state.auth.current_officer
    if officer is None:
        raise HTTPException(status_code=401, detail="Not signed in")
    return _officer_response(officer)
