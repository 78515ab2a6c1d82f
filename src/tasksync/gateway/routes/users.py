"""用户查询路由（需认证）

GET /api/v1/users: 全部用户公开信息，按名称正序。
GET /api/v1/users/{user_id}: 单个用户，不存在返回 404。
"""

from fastapi import APIRouter, Depends
from tasksync.core.models import UserPublic

from ..deps import get_store_group
from ..security import get_current_user
from ..services.user_service import UserService

router = APIRouter(prefix="/api/v1/users", dependencies=[Depends(get_current_user)])


@router.get("", response_model=list[UserPublic])
async def list_users(store_group=Depends(get_store_group)):
    return await UserService(store_group).list_users()


@router.get("/{user_id}", response_model=UserPublic)
async def get_user(user_id: str, store_group=Depends(get_store_group)):
    return await UserService(store_group).get_user(user_id)
