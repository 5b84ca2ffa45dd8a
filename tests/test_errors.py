"""
通用错误结构解析单元测试。
"""

from __future__ import annotations

import pytest

from alipanapi.errors import (
    FileNotFoundApiError,
    InvalidArgumentError,
    InvalidPathError,
    PanProtocolError,
    TokenExpiredError,
    parse_common_api_error,
)


@pytest.mark.parametrize(
    "body",
    [
        b'{"items": [], "next_marker": ""}',
        b'{"code": ""}',
        b"[1, 2]",
        b"not json",
        b"",
    ],
)
def test_parse_common_api_error_returns_none_for_normal_body(body: bytes) -> None:
    """正常响应、非对象或无法解析的内容不视为通用错误。"""
    assert parse_common_api_error(body) is None


def test_parse_common_api_error_not_found() -> None:
    err = parse_common_api_error(b'{"code": "NotFound.File", "message": "The resource file cannot be found."}')
    assert isinstance(err, FileNotFoundApiError)
    assert err.code == "FileNotFound"
    assert err.server_code == "NotFound.File"
    assert "cannot be found" in err.message


def test_parse_common_api_error_token_expired() -> None:
    err = parse_common_api_error(b'{"code": "AccessTokenInvalid", "message": "AccessToken is invalid."}')
    assert isinstance(err, TokenExpiredError)
    assert err.code == "TokenExpired"
    assert err.server_code == "AccessTokenInvalid"


def test_parse_common_api_error_other_code() -> None:
    """未知 code 保留服务端原值。"""
    err = parse_common_api_error('{"code": "Forbidden", "message": "禁止访问"}'.encode())
    assert type(err) is PanProtocolError
    assert err.code == "Forbidden"
    assert str(err) == "[Forbidden] 禁止访问"


def test_invalid_path_error_is_value_error() -> None:
    assert isinstance(InvalidPathError("x"), InvalidArgumentError)
    assert isinstance(InvalidPathError("x"), ValueError)
    assert InvalidPathError("x").code == "InvalidArgument"
