"""任务路由（需认证）

变更接口在 TaskStore 提交成功后才广播事件：
POST   /api/v1/tasks             -> 201 + Task，task:created（已分配时追加 task:assigned）
PATCH  /api/v1/tasks/{task_id}   -> 200 + Task，task:updated
DELETE /api/v1/tasks/{task_id}   -> 204，task:deleted；仅创建者可删除

查询接口：
GET /api/v1/tasks                      按 status/priority 筛选，sort_by/sort_order 排序
GET /api/v1/tasks/{task_id}            单个任务
GET /api/v1/tasks/dashboard/assigned   分配给当前用户的任务
GET /api/v1/tasks/dashboard/created    当前用户创建的任务
GET /api/v1/tasks/dashboard/overdue    逾期未完成的任务（mine=true 只看与自己相关的）
"""

from fastapi import APIRouter, Depends, Query
from starlette.responses import Response
from tasksync.core.models import (
    Priority,
    SortField,
    SortOrder,
    Task,
    TaskCreate,
    TaskFilter,
    TaskStatus,
    TaskUpdate,
    User,
)

from ..deps import get_broadcaster, get_store_group
from ..security import get_current_user
from ..services.task_service import TaskService

router = APIRouter(prefix="/api/v1/tasks")


def _service(
    store_group=Depends(get_store_group),
    broadcaster=Depends(get_broadcaster),
) -> TaskService:
    return TaskService(store_group, broadcaster)


@router.post("", response_model=Task, status_code=201)
async def create_task(
    data: TaskCreate,
    user: User = Depends(get_current_user),
    service: TaskService = Depends(_service),
):
    return await service.create_task(data, user)


@router.get("", response_model=list[Task])
async def list_tasks(
    status: TaskStatus | None = Query(default=None, description="按状态筛选"),
    priority: Priority | None = Query(default=None, description="按优先级筛选"),
    sort_by: SortField | None = Query(default=None, description="排序字段"),
    sort_order: SortOrder = Query(default=SortOrder.ASC, description="排序方向"),
    user: User = Depends(get_current_user),
    service: TaskService = Depends(_service),
):
    """查询任务列表；未指定 sort_by 时按 created_at 倒序"""
    task_filter = TaskFilter(
        status=status,
        priority=priority,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return await service.list_tasks(task_filter)


@router.get("/dashboard/assigned", response_model=list[Task])
async def dashboard_assigned(
    user: User = Depends(get_current_user),
    service: TaskService = Depends(_service),
):
    return await service.assigned_to(user)


@router.get("/dashboard/created", response_model=list[Task])
async def dashboard_created(
    user: User = Depends(get_current_user),
    service: TaskService = Depends(_service),
):
    return await service.created_by(user)


@router.get("/dashboard/overdue", response_model=list[Task])
async def dashboard_overdue(
    mine: bool = Query(default=False, description="只返回自己创建或被分配的任务"),
    user: User = Depends(get_current_user),
    service: TaskService = Depends(_service),
):
    return await service.overdue(user if mine else None)


@router.get("/{task_id}", response_model=Task)
async def get_task(
    task_id: str,
    user: User = Depends(get_current_user),
    service: TaskService = Depends(_service),
):
    return await service.get_task(task_id)


@router.patch("/{task_id}", response_model=Task)
async def update_task(
    task_id: str,
    data: TaskUpdate,
    user: User = Depends(get_current_user),
    service: TaskService = Depends(_service),
):
    return await service.update_task(task_id, data, user)


@router.delete("/{task_id}", status_code=204)
async def delete_task(
    task_id: str,
    user: User = Depends(get_current_user),
    service: TaskService = Depends(_service),
):
    await service.delete_task(task_id, user)
    return Response(status_code=204)
