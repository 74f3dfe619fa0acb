"""FastAPI endpoints for the Identity domain."""

from fastapi import APIRouter, Depends

from identity.api.dependencies import current_context
from identity.api.schemas import AuthResponse, LoginRequest, RegisterRequest, SuccessResponse, UserSummary
from identity.context import RequestContext
from shared.api import get_marketplace

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=201, response_model=AuthResponse)
async def register(body: RegisterRequest, ref: str | None = None, marketplace=Depends(get_marketplace)) -> AuthResponse:
    token, user = marketplace.identity.register(
        email=body.email,
        password=body.password,
        name=body.name,
        is_seller=body.is_seller,
        referral_code=ref,
    )
    return AuthResponse(token=token, user=UserSummary(**user))


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, marketplace=Depends(get_marketplace)) -> AuthResponse:
    token, user = marketplace.identity.login(email=body.email, password=body.password)
    return AuthResponse(token=token, user=UserSummary(**user))


@router.get("/me", response_model=UserSummary)
async def me(ctx: RequestContext = Depends(current_context)) -> UserSummary:
    return UserSummary(**ctx.user.summary())


@router.post("/logout", response_model=SuccessResponse)
async def logout(ctx: RequestContext = Depends(current_context), marketplace=Depends(get_marketplace)) -> SuccessResponse:
    marketplace.identity.logout(ctx.token)
    return SuccessResponse()
