"""CodeGenerator -- 任务编码签发与登记

编码格式：两位大写字母 + "-" + 两位数字 + "-" + 四位小写字母/数字，
总长 10，例如 ``QX-07-a9k2``。生成、校验与数据库列约束三者一致。

并发模型：
- generate() 在同一临界区内完成"检查未签发 + 预留"，两个并发调用不会拿到同一候选；
- 预留的编码在持久化成功后经 register() 转为已签发，失败时经 release() 释放。
"""

import random
import re
import string
import threading
from collections.abc import Iterable
from typing import Protocol

import structlog

from .config import CODE_LENGTH, MAX_GENERATION_ATTEMPTS
from .exceptions import CodeGenerationExhaustedError

log = structlog.get_logger()

UPPERCASE_LETTERS = string.ascii_uppercase
DIGITS = string.digits
ALPHANUMERIC = string.digits + string.ascii_lowercase

CODE_PATTERN = re.compile(r"^[A-Z]{2}-[0-9]{2}-[0-9a-z]{4}$")


class ChoiceSource(Protocol):
    """随机源接口（random.Random 兼容）"""

    def choice(self, seq: str) -> str: ...


class CodeGenerator:
    """任务编码生成器，维护已签发编码登记表"""

    def __init__(
        self,
        max_attempts: int = MAX_GENERATION_ATTEMPTS,
        rng: ChoiceSource | None = None,
    ) -> None:
        self._max_attempts = max_attempts
        self._rng = rng or random.SystemRandom()
        self._issued: set[str] = set()
        self._reserved: set[str] = set()
        self._lock = threading.Lock()

    def generate(self) -> str:
        """生成一个未签发、未预留的编码并预留

        Raises:
            CodeGenerationExhaustedError: 超过最大尝试次数
        """
        with self._lock:
            for _ in range(self._max_attempts):
                candidate = self._candidate()
                if candidate in self._issued or candidate in self._reserved:
                    continue
                self._reserved.add(candidate)
                return candidate

        log.error("code_generation_exhausted", attempts=self._max_attempts)
        raise CodeGenerationExhaustedError(self._max_attempts)

    @staticmethod
    def validate_format(code: object) -> bool:
        """结构校验：长度、字符类别、分隔符位置任一不符即为 False"""
        if not isinstance(code, str) or len(code) != CODE_LENGTH:
            return False
        return CODE_PATTERN.fullmatch(code) is not None

    def exists(self, code: str) -> bool:
        with self._lock:
            return code in self._issued

    def register(self, code: str) -> None:
        """登记已持久化的编码；格式不合法时忽略"""
        if not self.validate_format(code):
            log.warning("code_register_skipped_malformed", code=code)
            return
        with self._lock:
            self._reserved.discard(code)
            self._issued.add(code)

    def release(self, code: str) -> None:
        """释放未能持久化的预留编码"""
        with self._lock:
            self._reserved.discard(code)

    def load(self, codes: Iterable[str]) -> int:
        """批量登记（启动时从 store 回填），返回实际登记数量"""
        accepted = [code for code in codes if self.validate_format(code)]
        with self._lock:
            self._issued.update(accepted)
        return len(accepted)

    def clear(self) -> None:
        """清空登记表（仅限管理/测试用途）"""
        with self._lock:
            self._issued.clear()
            self._reserved.clear()

    @property
    def issued_codes(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._issued)

    def _candidate(self) -> str:
        letters = "".join(self._rng.choice(UPPERCASE_LETTERS) for _ in range(2))
        digits = "".join(self._rng.choice(DIGITS) for _ in range(2))
        suffix = "".join(self._rng.choice(ALPHANUMERIC) for _ in range(4))
        return f"{letters}-{digits}-{suffix}"
