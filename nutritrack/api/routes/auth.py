"""Signup and login routes."""

from fastapi import APIRouter, status

from nutritrack.api.deps import DB
from nutritrack.schemas.auth import ActivePlanInfo, AuthResponse, LoginRequest, SignupRequest, UserResponse
from nutritrack.services.auth_service import AuthService
from nutritrack.services.entitlement_service import EntitlementService
from nutritrack.utils.envelopes import api_success
from nutritrack.utils.exceptions import UnauthorizedException

router = APIRouter(tags=["auth"])


@router.post("/auth/signup", response_model=dict, status_code=status.HTTP_201_CREATED)
async def signup(payload: SignupRequest, db: DB):
    user = await AuthService.create_user(db, email=payload.email, password=payload.password, name=payload.name)
    response = AuthResponse(
        user=UserResponse.model_validate(user),
        token=AuthService.generate_token(user),
    )
    return api_success(response.model_dump())


@router.post("/auth/login", response_model=dict)
async def login(payload: LoginRequest, db: DB):
    user = await AuthService.authenticate_email(db, payload.email, payload.password)
    if user is None:
        raise UnauthorizedException("Invalid email or password")

    active_plan = await EntitlementService.resolve_active_plan(db, user.id)
    response = AuthResponse(
        user=UserResponse.model_validate(user),
        token=AuthService.generate_token(user, remember_me=payload.remember_me),
        active_plan=ActivePlanInfo(id=active_plan.id, name=active_plan.name) if active_plan else None,
    )
    return api_success(response.model_dump())
