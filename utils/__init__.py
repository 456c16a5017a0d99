from utils.logger import logger
from utils.retry_helper import retry
from utils.parallel import current_worker_id
from utils.allure_helper import allure_step, report

__all__ = [
    "logger",
    "retry",
    "current_worker_id",
    "allure_step",
    "report",
]
