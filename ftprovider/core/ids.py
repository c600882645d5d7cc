"""记录主键生成器。

新记录的主键由存储对象在插入前生成，调用方不能自行指定。生成器就是一个
无参可调用对象，返回 ``int``；存储对象只负责把负值取反。
"""

from __future__ import annotations

import itertools
import threading
import time
from typing import Callable, Optional

IdGenerator = Callable[[], int]

_ID_MASK = 2**63 - 1


class ClockIdGenerator:
    """以毫秒时钟为种子、进程内严格递增的主键生成器。

    同一毫秒内的多次调用依次加一，因此单进程内不会重复；跨进程只是
    概率上不冲突，冲突时由存储层的主键约束报告 ``ConstraintError``。
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None) -> None:
        self._clock = clock or time.time
        self._last = -1
        self._lock = threading.Lock()

    def __call__(self) -> int:
        with self._lock:
            now_ms = int(self._clock() * 1000)
            if now_ms < 0:
                now_ms = -now_ms
            value = max(now_ms, self._last + 1) & _ID_MASK
            self._last = value
            return value


class SequenceIdGenerator:
    """从给定起点开始递增的生成器，主要用于测试与数据导入。"""

    def __init__(self, start: int = 1) -> None:
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def __call__(self) -> int:
        with self._lock:
            return next(self._counter)


def non_negative(value: int) -> int:
    """生成值为负时取反，保证主键可以直接写入地址路径。"""
    if value < 0:
        return -value
    return value
