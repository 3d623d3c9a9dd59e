from fastapi import APIRouter, Depends, status

from gametracker.api.deps import get_auth_service
from gametracker.core.auth_gate import require_identity
from gametracker.core.security import Identity
from gametracker.schemas.user import (
    AuthResponse,
    LoginRequest,
    ProfileResponse,
    RegisterRequest,
    RegisterResponse,
    UserRead,
)
from gametracker.services.auth import AuthService


router = APIRouter(prefix="/auth", tags=["auth"])
protected = APIRouter(prefix="/api", tags=["auth"], dependencies=[Depends(require_identity)])


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, auth: AuthService = Depends(get_auth_service)):
    user = await auth.register(
        username=body.username,
        email=body.email,
        password=body.password,
        first_name=body.first_name,
        last_name=body.last_name,
    )
    return RegisterResponse(message="User created successfully", user=UserRead.model_validate(user))


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, auth: AuthService = Depends(get_auth_service)):
    token, user = await auth.login(body.username, body.password)
    return AuthResponse(token=token, user=UserRead.model_validate(user))


@protected.get("/profile", response_model=ProfileResponse)
async def get_profile(identity: Identity = Depends(require_identity)):
    return ProfileResponse(user_id=identity.user_id, username=identity.username)
