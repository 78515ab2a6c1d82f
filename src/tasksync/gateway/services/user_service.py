"""UserService -- 用户查询（分配任务时选择被分配者）"""

from tasksync.core.exceptions import NotFoundError
from tasksync.core.models import UserPublic
from tasksync.core.store import StoreGroup


class UserService:
    """用户查询服务"""

    def __init__(self, store_group: StoreGroup) -> None:
        self._stores = store_group

    async def list_users(self) -> list[UserPublic]:
        users = await self._stores.user_store.find_all()
        return [u.to_public() for u in users]

    async def get_user(self, user_id: str) -> UserPublic:
        user = await self._stores.user_store.find_by_id(user_id)
        if user is None:
            raise NotFoundError(
                f"User with id {user_id} does not exist", code="USER_NOT_FOUND"
            )
        return user.to_public()
