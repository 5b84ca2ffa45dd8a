"""
阿里云盘文件 API Python 客户端。

支持文件列表（分页与全量）、按 ID / 绝对路径获取文件信息、递归遍历目录树。
所有请求均为顺序、同步调用，不做重试。
"""

from __future__ import annotations

import logging
import posixpath
import re
from dataclasses import dataclass
from datetime import tzinfo
from enum import Enum
from typing import Any, Callable, Iterator

import httpx

from alipanapi.errors import (
    FileNotFoundApiError,
    InvalidPathError,
    PanApiError,
    PanDecodeError,
    PanProtocolError,
    PanTransportError,
    parse_common_api_error,
)
from alipanapi.models import (
    DEFAULT_ROOT_PARENT_FILE_ID,
    FileEntity,
    FileList,
    FileListParam,
    FileListResult,
    create_file_entity,
    root_file_entity,
)

logger = logging.getLogger(__name__)

API_URL = "https://api.aliyundrive.com"
FILE_LIST_ENDPOINT = "/v2/file/list"
FILE_GET_ENDPOINT = "/v2/file/get"
PATH_SEPARATOR = "/"

# 与网页端一致的公共请求头
COMMON_HEADERS = {
    "accept": "application/json, text/plain, */*",
    "content-type": "application/json;charset=UTF-8",
    "origin": "https://www.aliyundrive.com",
    "referer": "https://www.aliyundrive.com/",
    "user-agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.114 Safari/537.36",
}

# 列表请求中固定附带的图片/视频处理参数（与网页端一致）
_LIST_EXTRA_FIELDS = {
    "url_expire_sec": 1600,
    "image_thumbnail_process": "image/resize,w_400/format,jpeg",
    "image_url_process": "image/resize,w_1920/format,jpeg",
    "video_thumbnail_process": "video/snapshot,t_0,f_jpg,ar_auto,w_800",
    "fields": "*",
}

# 遍历回调：(深度, 完整路径, 文件信息或 None, 错误或 None) -> 是否继续遍历
HandleFileDirectoryFunc = Callable[[int, str, FileEntity | None, PanApiError | None], bool]


class WalkStatus(Enum):
    """目录遍历的内部结果：完整遍历或被回调/错误中止。"""

    COMPLETED = "completed"
    STOPPED = "stopped"


@dataclass
class WebToken:
    """网页端登录得到的 access token，用于生成 authorization 请求头。"""

    access_token: str
    token_type: str = "Bearer"
    expires_in: int = 7200

    def authorization_str(self) -> str:
        return f"{self.token_type} {self.access_token}"


def clean_path(path: str) -> str:
    """规范化绝对路径：合并多余的 /，处理 . 与 ..，去掉末尾 /。"""
    return posixpath.normpath(re.sub(r"/{2,}", "/", path))


def join_path(parent: str, name: str) -> str:
    """拼接父路径与名称，并合并重复的 /。"""
    return re.sub(r"/{2,}", "/", parent + PATH_SEPARATOR + name)


class PanClient:
    """
    阿里云盘文件 API 客户端。

    认证方式：由外部提供 access token（WebToken 或字符串），每个请求带 authorization 头。
    示例： PanClient(WebToken("eyJhbGciOi..."))
    """

    def __init__(
        self,
        web_token: WebToken | str,
        *,
        api_url: str = API_URL,
        timeout: float = 30.0,
        verify: bool = True,
        tz: tzinfo | None = None,
    ):
        """
        :param web_token: 登录 token；传字符串时视为 Bearer access token
        :param api_url: API 根地址，如 https://api.aliyundrive.com
        :param timeout: 请求超时秒数
        :param verify: 是否验证 HTTPS 证书
        :param tz: 时间字段转换的目标时区，默认系统本地时区
        """
        self.web_token = WebToken(web_token) if isinstance(web_token, str) else web_token
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.verify = verify
        self.tz = tz
        self._client: httpx.Client | None = None

    def _get_client(self) -> httpx.Client:
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(
                base_url=self.api_url,
                timeout=self.timeout,
                verify=self.verify,
                follow_redirects=True,
            )
        return self._client

    def _headers(self) -> dict[str, str]:
        return {**COMMON_HEADERS, "authorization": self.web_token.authorization_str()}

    def close(self) -> None:
        """关闭底层 HTTP 客户端。"""
        if self._client and not self._client.is_closed:
            self._client.close()
            self._client = None

    def __enter__(self) -> PanClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    # ------------------------- 请求 -------------------------

    def _fetch(self, endpoint: str, post_data: dict[str, Any]) -> httpx.Response:
        """发送一次 POST 请求；传输层失败转为 PanTransportError。"""
        logger.debug("[_fetch] do request url: %s%s", self.api_url, endpoint)
        try:
            return self._get_client().post(endpoint, json=post_data, headers=self._headers())
        except httpx.HTTPError as e:
            logger.debug("[_fetch] request %s error: %s", endpoint, e)
            raise PanTransportError(str(e)) from e

    def _post_json(self, endpoint: str, post_data: dict[str, Any]) -> dict[str, Any]:
        """
        POST 并解析 JSON 对象。

        先检查通用错误结构（code/message），再检查 HTTP 状态，最后解析响应体。
        """
        r = self._fetch(endpoint, post_data)
        body = r.content
        api_error = parse_common_api_error(body)
        if api_error is not None:
            raise api_error
        if not r.is_success:
            raise PanProtocolError(f"HTTP {r.status_code}", server_code=str(r.status_code))
        try:
            data = r.json()
        except ValueError as e:
            logger.debug("[_post_json] parse %s result json error: %s", endpoint, e)
            raise PanDecodeError(f"invalid json from {endpoint}: {e}") from e
        if not isinstance(data, dict):
            raise PanDecodeError(f"unexpected response from {endpoint}: {type(data).__name__}")
        return data

    # ------------------------- 文件列表 -------------------------

    def file_list(self, param: FileListParam) -> FileListResult:
        """
        获取一页文件列表（只发一次请求）。

        参数默认值：parent_file_id 为空→root，limit<=0→100，order_by 为空→updated_at，order_direction 为空→DESC。
        接口返回的空记录会被跳过；记录结构不对（非对象、size 非整数）时抛 PanDecodeError。

        :param param: 列表参数；marker 为空表示第一页
        :return: FileListResult，next_marker 为空表示没有下一页
        :raises PanApiError: 传输、服务端或解析错误
        """
        p = param.normalized()
        post_data: dict[str, Any] = {
            "drive_id": p.drive_id,
            "parent_file_id": p.parent_file_id,
            "limit": p.limit,
            "all": False,
            **_LIST_EXTRA_FIELDS,
            "order_by": p.order_by.value,
            "order_direction": p.order_direction.value,
        }
        if p.marker:
            post_data["marker"] = p.marker
        data = self._post_json(FILE_LIST_ENDPOINT, post_data)
        items = data.get("items") or []
        if not isinstance(items, list):
            raise PanDecodeError(f"unexpected items in file list: {type(items).__name__}")
        result = FileListResult(next_marker=data.get("next_marker") or "")
        for item in items:
            entity = create_file_entity(item, self.tz)
            if entity is not None:
                result.file_list.append(entity)
        return result

    def file_list_get_all(self, param: FileListParam) -> FileList:
        """
        获取指定目录下的全部文件（自动翻页，直到 next_marker 为空）。

        第一页失败时抛出错误；之后某一页失败则停止翻页，返回已获取的部分（尽力而为）。
        """
        internal = FileListParam(
            drive_id=param.drive_id,
            parent_file_id=param.parent_file_id,
            order_by=param.order_by,
            order_direction=param.order_direction,
            limit=param.limit,
            marker=param.marker,
        )
        result = self.file_list(internal)
        files = FileList(result.file_list)
        while result.next_marker:
            internal.marker = result.next_marker
            try:
                result = self.file_list(internal)
            except PanApiError as e:
                logger.warning(
                    "[file_list_get_all] stop paging parent:%s marker:%s error:%s",
                    internal.parent_file_id,
                    internal.marker,
                    e,
                )
                break
            files.extend(result.file_list)
        return files

    # ------------------------- 文件信息 -------------------------

    def file_info_by_id(self, drive_id: str, file_id: str) -> FileEntity:
        """
        通过 file_id 获取文件信息；file_id 为空时取根目录。返回的 path 为空。
        """
        post_data = {
            "drive_id": drive_id,
            "file_id": file_id or DEFAULT_ROOT_PARENT_FILE_ID,
        }
        data = self._post_json(FILE_GET_ENDPOINT, post_data)
        entity = create_file_entity(data, self.tz)
        if entity is None or not entity.file_id:
            raise PanDecodeError(f"file record without file_id: {file_id}")
        return entity

    def file_info_by_path(self, drive_id: str, path: str) -> FileEntity:
        """
        通过绝对路径获取文件信息。从根目录开始逐级列出子项，按名称精确匹配。

        "/" 直接返回根目录，不发请求。中间某一级是文件时不做特殊处理，继续列出会找不到子项。

        :param path: 绝对路径，如 "/我的资源/电影"；空字符串视为 "/"
        :return: 文件信息，path 为规范化后的路径
        :raises InvalidPathError: 不是绝对路径
        :raises FileNotFoundApiError: 某一级不存在
        """
        path = path or PATH_SEPARATOR
        if not path.startswith(PATH_SEPARATOR):
            raise InvalidPathError(f"路径必须是绝对路径: {path}")
        if len(path) > 1:
            path = clean_path(path)

        current = root_file_entity()
        if path == PATH_SEPARATOR:
            return current
        for name in path.split(PATH_SEPARATOR)[1:]:
            children = self.file_list_get_all(
                FileListParam(drive_id=drive_id, parent_file_id=current.file_id)
            )
            match = next((f for f in children if f is not None and f.file_name == name), None)
            if match is None:
                raise FileNotFoundApiError(f"文件不存在: {path}")
            current = match
        current.path = path
        return current

    # ------------------------- 递归遍历 -------------------------

    def files_directories_recurse_list(
        self,
        drive_id: str,
        path: str,
        handle: HandleFileDirectoryFunc | None = None,
        *,
        keep_partial: bool = False,
        max_depth: int | None = None,
    ) -> FileList | None:
        """
        递归获取目录下的文件和目录（深度优先、先序，同级按列表顺序）。

        handle(depth, path, entity, error) 对每个节点调用一次，返回 False 则中止整个遍历：
        - 起始路径解析失败：handle(0, path, None, error)，返回 None
        - 起始路径是文件：handle(0, ...)，返回只含该文件的列表
        - 起始路径是目录：handle(0, ...)，然后从 depth=1 开始遍历子项；某级列表失败时 handle(depth, 目录路径, None, error) 并中止

        :param keep_partial: 被中止时是否返回已收集的部分结果；默认 False 返回 None
        :param max_depth: 最大深度；深度等于 max_depth 的目录不再列出子项，None 表示不限
        :return: 起始目录下的所有子孙（不含起始目录本身）；被中止时见 keep_partial
        """
        try:
            target = self.file_info_by_path(drive_id, path)
        except PanApiError as e:
            if handle is not None:
                handle(0, path, None, e)
            return None

        ok = handle(0, target.path, target, None) if handle is not None else True
        if not target.is_folder():
            return FileList([target])

        files = FileList()
        if not ok:
            status = WalkStatus.STOPPED
        else:
            status = self._walk_folder(drive_id, target, handle, files, max_depth)
        if status is WalkStatus.STOPPED:
            logger.debug("[files_directories_recurse_list] walk %s stopped after %d entries", path, len(files))
            return files if keep_partial else None
        return files

    def _list_children(
        self,
        drive_id: str,
        folder: FileEntity,
        depth: int,
        handle: HandleFileDirectoryFunc | None,
    ) -> FileList | None:
        """列出 folder 的全部子项；失败时以 (depth, folder.path) 回调错误并返回 None。"""
        try:
            return self.file_list_get_all(FileListParam(drive_id=drive_id, parent_file_id=folder.file_id))
        except PanApiError as e:
            if handle is not None:
                handle(depth, folder.path, None, e)
            return None

    def _walk_folder(
        self,
        drive_id: str,
        start: FileEntity,
        handle: HandleFileDirectoryFunc | None,
        files: FileList,
        max_depth: int | None,
    ) -> WalkStatus:
        if max_depth is not None and max_depth < 1:
            return WalkStatus.COMPLETED
        children = self._list_children(drive_id, start, 1, handle)
        if children is None:
            return WalkStatus.STOPPED

        # 栈中每项为 (子项深度, 所属目录, 子项迭代器)；进入子目录时压栈，迭代完弹出
        stack: list[tuple[int, FileEntity, Iterator[FileEntity | None]]] = [(1, start, iter(children))]
        while stack:
            depth, folder, it = stack[-1]
            for child in it:
                if child is None:
                    continue
                child.path = join_path(folder.path, child.file_name)
                files.append(child)
                if handle is not None and not handle(depth, child.path, child, None):
                    return WalkStatus.STOPPED
                if child.is_folder() and (max_depth is None or depth < max_depth):
                    grandchildren = self._list_children(drive_id, child, depth + 1, handle)
                    if grandchildren is None:
                        return WalkStatus.STOPPED
                    stack.append((depth + 1, child, iter(grandchildren)))
                    break
            else:
                stack.pop()
        return WalkStatus.COMPLETED
