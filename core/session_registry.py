"""
Session 生命週期管理

負責綁定、取得、關閉每個 worker 的瀏覽器 session，確保平行測試時互不干擾。

規則：
- 每個 worker id 同時最多綁一個 session；bind() 對同一 worker 是冪等的
- session 只會被綁定它的 worker 操作，不跨 worker 共用
- 每個建立出來的 session 都必須被 unbind() 關閉一次（scope() 保證所有離開路徑都會關）
- 建立失敗時不留下任何綁定

用法：
    from core.session_registry import session_registry

    session = session_registry.bind()
    ...
    session_registry.unbind()

    # 或
    with session_registry.scope() as session:
        ...
"""

import threading
from contextlib import contextmanager
from typing import Callable, Iterator

from core.exceptions import SessionAlreadyBoundError
from core.session_builder import Session, SessionBuilder
from utils.logger import logger
from utils.parallel import current_worker_id


class SessionRegistry:
    """
    worker id -> Session 的對照表

    對照表本身是唯一會被多個 worker 同時修改的狀態，用 lock 保護；
    建立 / 關閉瀏覽器這種慢動作在 lock 外進行，不會卡住其他 worker。
    """

    def __init__(self, factory: Callable[[], Session] | None = None):
        self._factory = factory
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def _build(self) -> Session:
        if self._factory is not None:
            return self._factory()
        return SessionBuilder().build_from_config()

    # ── 綁定 ──

    def bind(self, worker_id: str | None = None) -> Session:
        """
        取得 worker 的 session，沒有就建立並綁定。

        Args:
            worker_id: 預設為目前執行緒的 worker id

        Returns:
            綁定中的 Session
        """
        worker_id = worker_id or current_worker_id()
        with self._lock:
            existing = self._sessions.get(worker_id)
        if existing is not None:
            return existing

        # 建立失敗直接往上拋，對照表維持沒有這個 worker
        session = self._build()

        with self._lock:
            existing = self._sessions.get(worker_id)
            if existing is None:
                self._sessions[worker_id] = session
        if existing is not None:
            logger.warning(f"[{worker_id}] 已有 session，關閉多建立的 {session}")
            self._terminate(worker_id, session)
            return existing

        logger.info(f"[{worker_id}] 綁定 session: {session}")
        return session

    def attach(self, worker_id: str, session: Session) -> None:
        """
        綁定一個外部建立好的 session。

        Raises:
            SessionAlreadyBoundError: 這個 worker 已經綁定了 session
        """
        with self._lock:
            if worker_id in self._sessions:
                raise SessionAlreadyBoundError(worker_id)
            self._sessions[worker_id] = session
        logger.info(f"[{worker_id}] 綁定外部 session: {session}")

    def current(self, worker_id: str | None = None) -> Session | None:
        """取得 worker 目前的 session，不會建立（失敗處理流程用）"""
        worker_id = worker_id or current_worker_id()
        with self._lock:
            return self._sessions.get(worker_id)

    # ── 釋放 ──

    def unbind(self, worker_id: str | None = None) -> None:
        """關閉並移除 worker 的 session；沒有綁定時什麼都不做"""
        worker_id = worker_id or current_worker_id()
        with self._lock:
            session = self._sessions.pop(worker_id, None)
        if session is not None:
            self._terminate(worker_id, session)

    def unbind_all(self) -> int:
        """關閉所有還綁著的 session（測試 session 結束時的保險）"""
        with self._lock:
            leftovers = list(self._sessions.items())
            self._sessions.clear()
        for worker_id, session in leftovers:
            logger.warning(f"[{worker_id}] 測試結束仍未釋放 session，強制關閉")
            self._terminate(worker_id, session)
        return len(leftovers)

    @contextmanager
    def scope(self, worker_id: str | None = None) -> Iterator[Session]:
        """bind 並保證在所有離開路徑 (含例外) 都 unbind"""
        worker_id = worker_id or current_worker_id()
        session = self.bind(worker_id)
        try:
            yield session
        finally:
            self.unbind(worker_id)

    def active_workers(self) -> list[str]:
        with self._lock:
            return list(self._sessions)

    @staticmethod
    def _terminate(worker_id: str, session: Session) -> None:
        try:
            session.quit()
            logger.info(f"[{worker_id}] Session 已關閉: {session}")
        except Exception as e:
            # 關閉失敗只記錄，不往外拋
            logger.error(f"[{worker_id}] 關閉 session 失敗: {e}")


# 全域 singleton
session_registry = SessionRegistry()
