"""
阿里云盘文件 API 数据模型。

- FileEntity：文件/文件夹信息，由 create_file_entity 从接口返回的记录构造
- FileList：有序文件列表（跨页顺序与服务端返回顺序一致）
- FileListParam / FileListResult：单页列表请求参数与结果
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from enum import Enum
from typing import Any

from alipanapi.errors import InvalidArgumentError, PanDecodeError

# 网盘根目录的固定 file_id
DEFAULT_ROOT_PARENT_FILE_ID = "root"

FILE_TYPE_FILE = "file"
FILE_TYPE_FOLDER = "folder"

DEFAULT_LIST_LIMIT = 100

# 本地时间展示格式
LOCAL_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

# 接口返回的单条文件记录（file/list 的 items 每一项、file/get 的响应体）
FileRecord = dict[str, Any]


class FileOrderBy(str, Enum):
    NAME = "name"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"
    SIZE = "size"


class FileOrderDirection(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


def utc_time_to_local(value: str | None, tz: tzinfo | None = None) -> str:
    """
    将服务端 UTC 时间（如 2021-07-19T13:57:38.123Z）转换为本地时间字符串（YYYY-MM-DD HH:MM:SS）。

    空值返回空字符串；无法解析时原样返回。
    :param tz: 目标时区，默认系统本地时区
    """
    if not value:
        return ""
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return dt.astimezone(tz).strftime(LOCAL_TIME_FORMAT)


@dataclass
class FileEntity:
    """文件/文件夹信息。path 由路径解析或目录遍历赋值，接口本身不返回完整路径。"""

    file_id: str
    file_name: str = ""
    file_type: str = FILE_TYPE_FILE
    drive_id: str = ""
    domain_id: str = ""
    file_size: int = 0
    created_at: str = ""
    updated_at: str = ""
    # 后缀名，如 dmg
    file_extension: str = ""
    upload_id: str = ""
    parent_file_id: str = ""
    # 以下三项只有文件才有；content_hash_name 默认为 sha1
    crc64_hash: str = ""
    content_hash: str = ""
    content_hash_name: str = ""
    path: str = ""
    # 文件分类，如 image/video/doc/others
    category: str = ""
    # 同步盘标记；sync_meta 记录同步盘对应的机器与目录等信息
    sync_flag: bool = False
    sync_meta: str = ""

    def is_folder(self) -> bool:
        return self.file_type == FILE_TYPE_FOLDER

    def is_file(self) -> bool:
        return self.file_type == FILE_TYPE_FILE

    def is_drive_root_folder(self) -> bool:
        """是否为网盘根目录。"""
        return self.file_id == DEFAULT_ROOT_PARENT_FILE_ID

    def __str__(self) -> str:
        kind = "目录" if self.is_folder() else "文件"
        return (
            f"文件ID: {self.file_id}\n"
            f"文件名: {self.file_name}\n"
            f"文件类型: {kind}\n"
            f"文件路径: {self.path}\n"
        )


def root_file_entity() -> FileEntity:
    """创建根目录 "/" 的默认文件信息（不请求服务端）。"""
    return FileEntity(
        file_id=DEFAULT_ROOT_PARENT_FILE_ID,
        file_name="/",
        file_type=FILE_TYPE_FOLDER,
        parent_file_id="",
        path="/",
    )


def create_file_entity(record: FileRecord | None, tz: tzinfo | None = None) -> FileEntity | None:
    """
    将接口返回的一条文件记录转换为 FileEntity；record 为 None 时返回 None。不设置 path。

    :raises PanDecodeError: 记录不是 JSON 对象，或 size 不是整数
    """
    if record is None:
        return None
    if not isinstance(record, dict):
        raise PanDecodeError(f"file record is not an object: {record!r}")
    try:
        file_size = int(record.get("size") or 0)
    except (TypeError, ValueError) as e:
        raise PanDecodeError(f"invalid size in file record {record.get('file_id')!r}: {record.get('size')!r}") from e
    return FileEntity(
        drive_id=record.get("drive_id") or "",
        domain_id=record.get("domain_id") or "",
        file_id=record.get("file_id") or "",
        file_name=record.get("name") or "",
        file_size=file_size,
        file_type=record.get("type") or "",
        created_at=utc_time_to_local(record.get("created_at"), tz),
        updated_at=utc_time_to_local(record.get("updated_at"), tz),
        file_extension=record.get("file_extension") or "",
        upload_id=record.get("upload_id") or "",
        parent_file_id=record.get("parent_file_id") or "",
        crc64_hash=record.get("crc64_hash") or "",
        content_hash=record.get("content_hash") or "",
        content_hash_name=record.get("content_hash_name") or "",
        category=record.get("category") or "",
        sync_flag=bool(record.get("sync_flag")),
        sync_meta=record.get("sync_meta") or "",
    )


class FileList(list):
    """FileEntity 的有序列表，允许包含 None（统计时跳过）。"""

    def total_size(self) -> int:
        """目录下文件的总大小（字节）。"""
        return sum(f.file_size for f in self if f is not None)

    def counts(self) -> tuple[int, int]:
        """返回 (文件数, 目录数)。"""
        file_n = directory_n = 0
        for f in self:
            if f is None:
                continue
            if f.is_folder():
                directory_n += 1
            else:
                file_n += 1
        return file_n, directory_n


@dataclass
class FileListParam:
    """单页文件列表请求参数。marker 为空表示第一页。"""

    drive_id: str
    parent_file_id: str = DEFAULT_ROOT_PARENT_FILE_ID
    order_by: FileOrderBy | str = FileOrderBy.UPDATED_AT
    order_direction: FileOrderDirection | str = FileOrderDirection.DESC
    limit: int = DEFAULT_LIST_LIMIT
    marker: str = ""

    def normalized(self) -> FileListParam:
        """
        返回补全默认值后的副本：父目录为空→root，limit<=0→100，排序字段/方向为空→updated_at/DESC。

        :raises InvalidArgumentError: 未知的排序字段或排序方向
        """
        try:
            order_by = FileOrderBy(self.order_by or FileOrderBy.UPDATED_AT)
            order_direction = FileOrderDirection(self.order_direction or FileOrderDirection.DESC)
        except ValueError as e:
            raise InvalidArgumentError(f"unknown order: {self.order_by!r} {self.order_direction!r}") from e
        return FileListParam(
            drive_id=self.drive_id,
            parent_file_id=self.parent_file_id or DEFAULT_ROOT_PARENT_FILE_ID,
            order_by=order_by,
            order_direction=order_direction,
            limit=self.limit if self.limit > 0 else DEFAULT_LIST_LIMIT,
            marker=self.marker,
        )


@dataclass
class FileListResult:
    """单页结果；next_marker 不为空代表还有下一页。"""

    file_list: FileList = field(default_factory=FileList)
    next_marker: str = ""
