"""认证路由

POST /api/v1/auth/register: 注册，201 + {user, token}；邮箱已注册 409。
POST /api/v1/auth/login: 登录，200 + {user, token}；凭据错误 401。
GET  /api/v1/auth/me: 当前 token 对应的用户。
"""

from fastapi import APIRouter, Depends
from tasksync.core.models import AuthResponse, LoginInput, RegisterInput, User, UserPublic

from ..deps import get_store_group, get_token_service
from ..security import get_current_user
from ..services.auth_service import AuthService

router = APIRouter(prefix="/api/v1/auth")


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(
    data: RegisterInput,
    store_group=Depends(get_store_group),
    token_service=Depends(get_token_service),
):
    service = AuthService(store_group, token_service)
    return await service.register(data)


@router.post("/login", response_model=AuthResponse)
async def login(
    data: LoginInput,
    store_group=Depends(get_store_group),
    token_service=Depends(get_token_service),
):
    service = AuthService(store_group, token_service)
    return await service.login(data)


@router.get("/me", response_model=UserPublic)
async def me(user: User = Depends(get_current_user)):
    return user.to_public()
