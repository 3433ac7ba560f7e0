"""Tests for iu.core.errors module."""

from iu.core.errors import ErrorCode


class TestErrorCodeValues:
    """Exit codes are part of the CLI contract."""

    def test_values(self) -> None:
        assert ErrorCode.OK == 0
        assert ErrorCode.USER_ERROR == 1
        assert ErrorCode.ENV_ERROR == 2
        assert ErrorCode.IO_ERROR == 5
        assert ErrorCode.PRIVILEGE_ERROR == 6

    def test_str(self) -> None:
        assert str(ErrorCode.PRIVILEGE_ERROR) == "privilege error"


class TestErrorCodeUsage:
    def test_can_use_as_int(self) -> None:
        code: int = ErrorCode.IO_ERROR
        assert code == 5

    def test_is_success(self) -> None:
        assert ErrorCode.OK.is_success is True
        assert ErrorCode.USER_ERROR.is_success is False

    def test_is_error(self) -> None:
        assert ErrorCode.OK.is_error is False
        assert all(code.is_error for code in ErrorCode if code != ErrorCode.OK)
