"""
平行執行的 worker 識別

搭配 pytest-xdist 平行執行時，每個 worker process 有自己的 session registry；
同一個 process 內若再開執行緒，則以執行緒區分。
worker id 就是 SessionRegistry 的 key。
"""

import os
import threading


def xdist_worker() -> str:
    """
    取得 pytest-xdist 的 worker 名稱。

    Returns:
        "gw0", "gw1"...；非平行模式則為 "master"
    """
    return os.getenv("PYTEST_XDIST_WORKER", "master")


def current_worker_id() -> str:
    """
    取得目前執行單位的 worker id。

    格式: "<xdist worker>:<thread id>"，例如 "gw1:140213"
    """
    return f"{xdist_worker()}:{threading.get_ident()}"
