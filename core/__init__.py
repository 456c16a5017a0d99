"""
core: 框架核心

統一匯出所有核心元件，方便外部 import。

用法：
    from core import BasePage, Condition, session_registry
    from core import SessionBuilder, SessionTarget, Engine
    from core import ResolutionTimeoutError, SessionNotBoundError
"""

from core.base_page import BasePage, Condition
from core.exceptions import (
    ConfigError,
    HarnessError,
    InteractionError,
    InvalidConfigError,
    InvalidEndpointError,
    ResolutionTimeoutError,
    SessionAlreadyBoundError,
    SessionConnectionError,
    SessionError,
    SessionNotBoundError,
    UnsupportedEngineError,
)
from core.session_builder import (
    Engine,
    ExecutionMode,
    Session,
    SessionBuilder,
    SessionTarget,
)
from core.session_registry import SessionRegistry, session_registry

__all__ = [
    # Session
    "SessionRegistry",
    "session_registry",
    "SessionBuilder",
    "Session",
    "SessionTarget",
    "Engine",
    "ExecutionMode",
    # Page
    "BasePage",
    "Condition",
    # Exceptions
    "HarnessError",
    "SessionError",
    "UnsupportedEngineError",
    "InvalidEndpointError",
    "SessionConnectionError",
    "SessionNotBoundError",
    "SessionAlreadyBoundError",
    "InteractionError",
    "ResolutionTimeoutError",
    "ConfigError",
    "InvalidConfigError",
]
