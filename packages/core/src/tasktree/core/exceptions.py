"""TaskTree 异常体系

核心层只抛出领域异常，HTTP 层统一映射为错误响应。
所有异常均为同步失败结果，不可重试。
"""


class TaskTreeError(Exception):
    """TaskTree 基础异常"""

    code: str = "TASKTREE_ERROR"

    def __init__(self, message: str, retryable: bool = False) -> None:
        """
        Args:
            message: 错误描述（需指明具体违反的规则）
            retryable: 是否可通过重试恢复
        """
        super().__init__(message)
        self.message = message
        self.retryable = retryable


class TaskNotFoundError(TaskTreeError):
    """引用的任务或父任务编码不存在"""

    code = "TASK_NOT_FOUND"


class TaskValidationError(TaskTreeError):
    """业务规则校验失败：层级超限、循环引用、存在子任务时删除等"""

    code = "VALIDATION_FAILED"


class CodeGenerationExhaustedError(TaskTreeError):
    """在尝试次数上限内未能生成未使用的编码

    属于运维层面的异常情况，不应由调用方重试。
    """

    code = "CODE_GENERATION_EXHAUSTED"

    def __init__(self, attempts: int) -> None:
        super().__init__(
            f"Unable to generate unique code after {attempts} attempts",
        )
        self.attempts = attempts
