"""
阿里云盘 API 错误类型。

- PanTransportError：网络/传输失败（httpx 抛出的异常）
- PanProtocolError：服务端返回了通用错误结构 {"code": ..., "message": ...}
- PanDecodeError：响应体不是预期的 JSON 结构
- FileNotFoundApiError：路径某一段或文件 ID 不存在
- InvalidArgumentError：调用参数不合法；InvalidPathError 为其子类，表示传入的路径不是绝对路径
"""

from __future__ import annotations

import json
from typing import Any

# 错误码（与服务端 code 字段区分，服务端原始 code 保存在 server_code）
CODE_FAILED = "Failed"
CODE_TRANSPORT = "TransportError"
CODE_DECODE = "DecodeError"
CODE_FILE_NOT_FOUND = "FileNotFound"
CODE_INVALID_ARGUMENT = "InvalidArgument"
CODE_TOKEN_EXPIRED = "TokenExpired"

# 服务端 code -> 本地错误类
_NOT_FOUND_SERVER_CODES = {"NotFound.File", "NotFound.FileId", "NotFound.ParentFileId"}
_TOKEN_SERVER_CODES = {"AccessTokenInvalid", "AccessTokenExpired", "UserNotLogin"}


class PanApiError(Exception):
    """所有 API 错误的基类。"""

    code: str = CODE_FAILED

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class PanTransportError(PanApiError):
    """HTTP 请求本身失败（连接、超时等）。"""

    code = CODE_TRANSPORT


class PanDecodeError(PanApiError):
    """响应体无法解析为预期结构。"""

    code = CODE_DECODE


class PanProtocolError(PanApiError):
    """服务端返回通用错误结构。"""

    def __init__(self, message: str, *, server_code: str, code: str | None = None) -> None:
        super().__init__(message, code=code or server_code)
        self.server_code = server_code


class TokenExpiredError(PanProtocolError):
    """access token 无效或已过期。"""

    code = CODE_TOKEN_EXPIRED


class FileNotFoundApiError(PanProtocolError):
    code = CODE_FILE_NOT_FOUND

    def __init__(self, message: str = "文件不存在", *, server_code: str = CODE_FILE_NOT_FOUND) -> None:
        super().__init__(message, server_code=server_code, code=CODE_FILE_NOT_FOUND)


class InvalidArgumentError(PanApiError, ValueError):
    """调用参数不合法，如未知的排序字段。"""

    code = CODE_INVALID_ARGUMENT


class InvalidPathError(InvalidArgumentError):
    code = CODE_INVALID_ARGUMENT


def parse_common_api_error(body: bytes) -> PanProtocolError | None:
    """
    检查响应体是否为通用错误结构；是则返回对应错误对象，否则返回 None。

    列表/详情接口的正常响应不含 code 字段；无法解析为 JSON 对象时也返回 None，交给后续解析报错。
    """
    try:
        data: Any = json.loads(body)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    server_code = data.get("code")
    if not isinstance(server_code, str) or not server_code:
        return None
    message = str(data.get("message") or server_code)
    if server_code in _NOT_FOUND_SERVER_CODES:
        return FileNotFoundApiError(message, server_code=server_code)
    if server_code in _TOKEN_SERVER_CODES:
        return TokenExpiredError(message, server_code=server_code, code=CODE_TOKEN_EXPIRED)
    return PanProtocolError(message, server_code=server_code)
