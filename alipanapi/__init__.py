"""阿里云盘文件 API Python 客户端：文件列表、路径解析与目录树遍历。"""

from alipanapi.client import PanClient, WalkStatus, WebToken
from alipanapi.errors import (
    FileNotFoundApiError,
    InvalidArgumentError,
    InvalidPathError,
    PanApiError,
    PanDecodeError,
    PanProtocolError,
    PanTransportError,
    TokenExpiredError,
)
from alipanapi.models import (
    DEFAULT_ROOT_PARENT_FILE_ID,
    FileEntity,
    FileList,
    FileListParam,
    FileListResult,
    FileOrderBy,
    FileOrderDirection,
    create_file_entity,
    root_file_entity,
)

__all__ = [
    "PanClient",
    "WebToken",
    "WalkStatus",
    "FileEntity",
    "FileList",
    "FileListParam",
    "FileListResult",
    "FileOrderBy",
    "FileOrderDirection",
    "DEFAULT_ROOT_PARENT_FILE_ID",
    "create_file_entity",
    "root_file_entity",
    "PanApiError",
    "PanTransportError",
    "PanProtocolError",
    "PanDecodeError",
    "TokenExpiredError",
    "FileNotFoundApiError",
    "InvalidArgumentError",
    "InvalidPathError",
]
