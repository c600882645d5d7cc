"""变更通知：进程内的观察者注册表。

存储对象在每次写操作提交后调用 ``notify_change``，通知内容只有受影响的
地址。外部的缓存或界面通过 ``register`` 订阅某个地址；订阅集合地址并开启
``notify_for_descendants`` 时，集合下任意单条记录的变更也会收到通知。
"""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, List

from ftprovider.core.addresses import Address, is_descendant

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[Address], None]


@dataclass(frozen=True)
class _Observer:
    handle: int
    address: Address
    callback: ChangeCallback
    notify_for_descendants: bool

    def matches(self, changed: Address) -> bool:
        if self.address.uri == changed.uri:
            return True
        if self.notify_for_descendants and is_descendant(changed, self.address):
            return True
        # 集合整体变更时，订阅其中单条记录的观察者同样需要刷新
        return is_descendant(self.address, changed)


class ChangeNotifier:
    def __init__(self) -> None:
        self._observers: Dict[int, _Observer] = {}
        self._handles = itertools.count(1)
        self._lock = threading.Lock()

    def register(
        self,
        address: Address,
        callback: ChangeCallback,
        *,
        notify_for_descendants: bool = True,
    ) -> int:
        """注册观察者，返回用于注销的句柄。"""
        with self._lock:
            handle = next(self._handles)
            self._observers[handle] = _Observer(handle, address, callback, notify_for_descendants)
        return handle

    def unregister(self, handle: int) -> bool:
        with self._lock:
            return self._observers.pop(handle, None) is not None

    def notify_change(self, address: Address) -> int:
        """通知所有匹配的观察者，返回被通知的数量。

        回调抛出的异常只记录日志：写操作此时已经提交，不能因为观察者失败而回报错误。
        """
        with self._lock:
            observers: List[_Observer] = [o for o in self._observers.values() if o.matches(address)]
        logger.debug("Change notified to %d observer(s)", len(observers), extra={"address": address.uri})
        for observer in observers:
            try:
                observer.callback(address)
            except Exception:
                logger.exception("Change observer %s failed", observer.handle, extra={"address": address.uri})
        return len(observers)
