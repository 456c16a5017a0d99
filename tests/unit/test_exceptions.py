"""
core/exceptions.py 單元測試

驗證自訂例外體系的繼承關係、訊息格式、context 欄位。
"""

import pytest

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
from utils.screenshot import CaptureFailed, EvidenceArtifact


@pytest.mark.unit
class TestExceptionHierarchy:
    """測試例外繼承關係"""

    @pytest.mark.unit
    def test_all_inherit_from_base(self):
        """所有例外都繼承 HarnessError"""
        classes = [
            SessionError, UnsupportedEngineError, InvalidEndpointError,
            SessionConnectionError, SessionNotBoundError, SessionAlreadyBoundError,
            InteractionError, ResolutionTimeoutError,
            ConfigError, InvalidConfigError,
        ]
        for cls in classes:
            assert issubclass(cls, HarnessError), f"{cls.__name__} 沒有繼承 HarnessError"

    @pytest.mark.unit
    def test_session_errors(self):
        for cls in (UnsupportedEngineError, InvalidEndpointError,
                    SessionConnectionError, SessionNotBoundError,
                    SessionAlreadyBoundError):
            assert issubclass(cls, SessionError)

    @pytest.mark.unit
    def test_resolution_timeout_fails_the_test(self):
        """ResolutionTimeoutError 同時是 AssertionError"""
        assert issubclass(ResolutionTimeoutError, InteractionError)
        assert issubclass(ResolutionTimeoutError, AssertionError)

    @pytest.mark.unit
    def test_catch_by_base(self):
        with pytest.raises(HarnessError):
            raise SessionNotBoundError("gw0:1")


@pytest.mark.unit
class TestExceptionMessages:
    """訊息與 context"""

    @pytest.mark.unit
    def test_unsupported_engine(self):
        e = UnsupportedEngineError("safari", ("chrome", "firefox"))
        assert "safari" in str(e)
        assert "chrome, firefox" in str(e)
        assert e.context == {"engine": "safari"}

    @pytest.mark.unit
    def test_invalid_endpoint(self):
        e = InvalidEndpointError("ftp://grid", "必須是 http:// 或 https://")
        assert "ftp://grid" in str(e)
        assert "http://" in str(e)
        assert e.context["endpoint"] == "ftp://grid"

    @pytest.mark.unit
    def test_session_connection_keeps_original(self):
        original = ConnectionRefusedError("refused")
        e = SessionConnectionError("http://grid:4444", original)
        assert e.original is original
        assert "ConnectionRefusedError" in str(e)
        assert e.context["url"] == "http://grid:4444"

    @pytest.mark.unit
    def test_session_not_bound(self):
        e = SessionNotBoundError("gw0:123")
        assert "gw0:123" in str(e)
        assert e.context["worker_id"] == "gw0:123"

    @pytest.mark.unit
    def test_session_already_bound(self):
        e = SessionAlreadyBoundError("gw0:123")
        assert "gw0:123" in str(e)

    @pytest.mark.unit
    def test_invalid_config(self):
        e = InvalidConfigError("wait.explicit", "abc", "必須是數字")
        assert "wait.explicit=abc" in str(e)
        assert "必須是數字" in str(e)

    @pytest.mark.unit
    def test_default_context_is_empty_dict(self):
        assert HarnessError("x").context == {}


@pytest.mark.unit
class TestResolutionTimeoutError:
    """ResolutionTimeoutError 欄位與訊息"""

    @pytest.mark.unit
    def test_fields(self):
        locator = ("id", "login-button")
        artifact = EvidenceArtifact(path="/r/click_1.png", label="click",
                                    trigger="failure")
        e = ResolutionTimeoutError(locator, 5, "click", artifact)

        assert e.locator == locator
        assert e.timeout == 5
        assert e.action == "click"
        assert e.artifact is artifact
        assert "click 逾時" in str(e)
        assert "login-button" in str(e)
        assert "等待 5s" in str(e)
        assert "截圖: /r/click_1.png" in str(e)

    @pytest.mark.unit
    def test_message_without_artifact_path(self):
        e = ResolutionTimeoutError(("id", "x"), 2, "get_text",
                                   CaptureFailed("get_text", "invalid session"))
        assert "截圖" not in str(e)
