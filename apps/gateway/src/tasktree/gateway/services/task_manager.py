"""TaskManager -- 任务树创建/更新/删除/查询业务逻辑

每个写操作在单个 StoreGroup.transaction() 内完成"解析 -> 校验 -> 写入 -> 回读"，
任一校验失败都会回滚，不留下任何记录；读操作在 snapshot() 内完成。

创建流程：
1. 向 CodeGenerator 申请（预留）编码
2. 解析父任务并校验层级上限
3. 持久化并回读，构建视图
4. 提交成功后登记编码；失败时释放预留
5. 编码与库中已有记录冲突时登记该编码并换新编码重试，重试耗尽视为编码耗尽
"""

import aiosqlite
import structlog
from tasktree.core.codes import CodeGenerator
from tasktree.core.config import (
    CODE_CONFLICT_RETRIES,
    DEFAULT_PAGE_SIZE,
    DEFAULT_SORT_DIRECTION,
    DEFAULT_SORT_FIELD,
    MAX_HIERARCHY_LEVEL,
)
from tasktree.core.exceptions import (
    CodeGenerationExhaustedError,
    TaskNotFoundError,
    TaskValidationError,
)
from tasktree.core.hierarchy import (
    depth_of,
    detects_cycle,
    exceeds_after_move,
    would_exceed_max_depth,
)
from tasktree.core.models import (
    Page,
    SortDirection,
    SortSpec,
    Task,
    TaskRequest,
    TaskView,
)
from tasktree.core.store import StoreGroup, TaskStore

log = structlog.get_logger()


class TaskManager:
    """任务树业务服务"""

    _max_code_conflict_retries = CODE_CONFLICT_RETRIES

    def __init__(self, store_group: StoreGroup, code_generator: CodeGenerator) -> None:
        self._stores = store_group
        self._codes = code_generator

    async def rehydrate(self) -> int:
        """从 store 回填编码登记表（进程重启后调用）"""
        async with self._stores.snapshot() as store:
            codes = await store.list_codes()
        loaded = self._codes.load(codes)
        log.info("code_registry_rehydrated", code_count=loaded)
        return loaded

    async def create(self, request: TaskRequest) -> TaskView:
        """创建任务

        Raises:
            TaskNotFoundError: 父任务不存在
            TaskValidationError: 父任务已在最大层级
            CodeGenerationExhaustedError: 无法生成新编码
        """
        log.debug("task_create_requested", title=request.title)

        for attempt in range(1, self._max_code_conflict_retries + 1):
            code = self._codes.generate()
            try:
                view = await self._create_with_code(code, request)
            except aiosqlite.IntegrityError as e:
                if not self._is_code_conflict(e):
                    self._codes.release(code)
                    raise
                # 编码已被库中记录占用（如其他进程签发），登记后换新编码重试
                self._codes.register(code)
                if attempt == self._max_code_conflict_retries:
                    log.error("task_code_conflict_exhausted", code=code, attempts=attempt)
                    raise CodeGenerationExhaustedError(attempt) from e
                log.warning("task_code_conflict_retry", code=code, attempt=attempt)
                continue
            except BaseException:
                self._codes.release(code)
                raise

            self._codes.register(code)
            log.info(
                "task_created",
                code=view.code,
                parent_code=view.parent_code,
                hierarchy_level=view.hierarchy_level,
            )
            return view

    async def _create_with_code(self, code: str, request: TaskRequest) -> TaskView:
        async with self._stores.transaction() as store:
            parent_code = None
            if request.parent_code:
                parent_chain = await self._load_chain(
                    store, request.parent_code, label="Parent task"
                )
                if would_exceed_max_depth(parent_chain):
                    raise TaskValidationError(
                        f"Cannot create task: maximum hierarchy level "
                        f"({MAX_HIERARCHY_LEVEL}) reached"
                    )
                parent_code = parent_chain[0].code

            task = Task(
                code=code,
                title=request.title,
                description=request.description,
                status=request.status,
                assigned_date=request.assigned_date,
                due_date=request.due_date,
                creator_id=request.creator_id,
                assignee_id=request.assignee_id,
                parent_code=parent_code,
                priority=request.priority,
                tags=request.tags,
            )
            saved = await store.save(task)
            return await self._reload_view(store, saved.code)

    async def get_by_code(self, code: str) -> TaskView:
        """按编码查询任务"""
        log.debug("task_fetch_requested", code=code)
        async with self._stores.snapshot() as store:
            task = await self._require(store, code)
            return await self._to_view(store, task)

    async def list_tasks(
        self,
        page: int = 0,
        size: int = DEFAULT_PAGE_SIZE,
        sort_field: str = DEFAULT_SORT_FIELD,
        sort_direction: str = DEFAULT_SORT_DIRECTION,
    ) -> Page[TaskView]:
        """分页查询任务，排序方向大小写不敏感（仅 "asc" 为升序）"""
        if page < 0:
            raise TaskValidationError("Page index must not be negative")
        if size < 1:
            raise TaskValidationError("Page size must be at least 1")

        sort = SortSpec(field=sort_field, direction=SortDirection.parse(sort_direction))
        log.debug("task_list_requested", page=page, size=size, sort=sort.field, direction=sort.direction)

        async with self._stores.snapshot() as store:
            result = await store.find_all(page, size, sort)
            views = [await self._to_view(store, task) for task in result.items]

        return Page[TaskView](
            items=views,
            page=result.page,
            size=result.size,
            total_elements=result.total_elements,
        )

    async def update(self, code: str, request: TaskRequest) -> TaskView:
        """更新任务（可更换或清除父任务）

        Raises:
            TaskNotFoundError: 任务或新父任务不存在
            TaskValidationError: 循环引用或层级超限
        """
        log.debug("task_update_requested", code=code, parent_code=request.parent_code)

        async with self._stores.transaction() as store:
            task = await self._require(store, code)

            parent_code = None
            if request.parent_code:
                parent_chain = await self._load_chain(
                    store, request.parent_code, label="Parent task"
                )
                if detects_cycle(task.code, parent_chain):
                    raise TaskValidationError(
                        "Cannot set parent: circular reference detected"
                    )
                if would_exceed_max_depth(parent_chain):
                    raise TaskValidationError(
                        f"Cannot update task: maximum hierarchy level "
                        f"({MAX_HIERARCHY_LEVEL}) reached"
                    )
                height = await store.subtree_height(task.code, MAX_HIERARCHY_LEVEL)
                if exceeds_after_move(parent_chain, height):
                    raise TaskValidationError(
                        f"Cannot update task: maximum hierarchy level "
                        f"({MAX_HIERARCHY_LEVEL}) reached by descendants of {task.code}"
                    )
                parent_code = parent_chain[0].code

            updated = task.model_copy(
                update={
                    "title": request.title,
                    "description": request.description,
                    "status": request.status,
                    "assigned_date": request.assigned_date,
                    "due_date": request.due_date,
                    "assignee_id": request.assignee_id,
                    "priority": request.priority,
                    "tags": request.tags,
                    "parent_code": parent_code,
                }
            )
            saved = await store.save(updated)
            view = await self._reload_view(store, saved.code)

        log.info("task_updated", code=view.code, parent_code=view.parent_code)
        return view

    async def delete(self, code: str) -> None:
        """删除任务；存在直接子任务时拒绝

        Raises:
            TaskNotFoundError: 任务不存在
            TaskValidationError: 任务仍有子任务
        """
        log.debug("task_delete_requested", code=code)

        async with self._stores.transaction() as store:
            task = await self._require(store, code)
            children = await store.find_by_parent_code(code)
            if children:
                raise TaskValidationError(
                    f"Cannot delete task: task has {len(children)} child task(s); "
                    "delete or reassign children first"
                )
            await store.delete(task)

        log.info("task_deleted", code=code)

    async def list_children(self, parent_code: str) -> list[TaskView]:
        """查询直接子任务（不含孙任务）"""
        log.debug("task_children_requested", parent_code=parent_code)
        async with self._stores.snapshot() as store:
            parent_chain = await self._load_chain(store, parent_code, label="Parent task")
            child_level = min(depth_of(parent_chain) + 1, MAX_HIERARCHY_LEVEL)
            children = await store.find_by_parent_code(parent_code)
        return [self._build_view(child, child_level) for child in children]

    async def list_roots(self) -> list[TaskView]:
        """查询所有根任务"""
        log.debug("task_roots_requested")
        async with self._stores.snapshot() as store:
            roots = await store.find_root_tasks()
        return [self._build_view(task, 1) for task in roots]

    async def _require(self, store: TaskStore, code: str) -> Task:
        task = await store.find_by_code(code)
        if task is None:
            raise TaskNotFoundError(f"Task not found with code: {code}")
        return task

    async def _load_chain(self, store: TaskStore, code: str, label: str) -> list[Task]:
        chain = await store.find_ancestors(code, MAX_HIERARCHY_LEVEL)
        if not chain:
            raise TaskNotFoundError(f"{label} not found with code: {code}")
        return chain

    async def _reload_view(self, store: TaskStore, code: str) -> TaskView:
        """写入后回读，取得 store 派生的子任务状态"""
        task = await self._require(store, code)
        return await self._to_view(store, task)

    async def _to_view(self, store: TaskStore, task: Task) -> TaskView:
        level = 1
        if task.parent_code is not None:
            chain = await store.find_ancestors(task.code, MAX_HIERARCHY_LEVEL)
            level = depth_of(chain) if chain else 1
        return self._build_view(task, level)

    @staticmethod
    def _build_view(task: Task, hierarchy_level: int) -> TaskView:
        return TaskView(
            id=task.id,
            code=task.code,
            title=task.title,
            description=task.description,
            status=task.status,
            assigned_date=task.assigned_date,
            due_date=task.due_date,
            creator_id=task.creator_id,
            assignee_id=task.assignee_id,
            parent_code=task.parent_code,
            priority=task.priority,
            tags=task.tags,
            created_at=task.created_at,
            updated_at=task.updated_at,
            hierarchy_level=hierarchy_level,
            child_codes=list(task.child_codes),
        )

    @staticmethod
    def _is_code_conflict(error: Exception) -> bool:
        if not isinstance(error, aiosqlite.IntegrityError):
            return False
        return "tasks.code" in str(error)
