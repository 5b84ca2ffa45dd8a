"""
真实阿里云盘接口的集成测试。

需要先执行 `alipan login` 保存 token 与 drive_id，否则整个模块跳过（见 conftest.live_client）。
遍历路径见 tests.config.INTEGRATION_PATH。
"""

from __future__ import annotations

import pytest

from alipanapi import FileEntity, FileListParam, FileNotFoundApiError, InvalidPathError, PanApiError, PanClient

from tests.config import INTEGRATION_PATH


@pytest.mark.integration
class TestListing:
    def test_first_page_respects_limit(self, live_client: PanClient, live_drive_id: str) -> None:
        result = live_client.file_list(FileListParam(drive_id=live_drive_id, limit=5))
        assert len(result.file_list) <= 5
        for f in result.file_list:
            assert f.file_id
            assert f.file_type in ("file", "folder")

    def test_get_all_matches_page_sum(self, live_client: PanClient, live_drive_id: str) -> None:
        """全量结果条数等于逐页条数之和。"""
        param = FileListParam(drive_id=live_drive_id, limit=20)
        total = 0
        result = live_client.file_list(param)
        total += len(result.file_list)
        while result.next_marker:
            param.marker = result.next_marker
            result = live_client.file_list(param)
            total += len(result.file_list)
        param.marker = ""
        assert len(live_client.file_list_get_all(param)) == total


@pytest.mark.integration
class TestPath:
    def test_root(self, live_client: PanClient, live_drive_id: str) -> None:
        assert live_client.file_info_by_path(live_drive_id, "/").file_id == "root"

    def test_relative_path_rejected(self, live_client: PanClient, live_drive_id: str) -> None:
        with pytest.raises(InvalidPathError):
            live_client.file_info_by_path(live_drive_id, "relative/path")

    def test_missing_path(self, live_client: PanClient, live_drive_id: str) -> None:
        with pytest.raises(FileNotFoundApiError):
            live_client.file_info_by_path(live_drive_id, "/__alipanapi_missing__/x")

    def test_first_child_round_trip(self, live_client: PanClient, live_drive_id: str) -> None:
        """根目录第一项：按路径与按 ID 获取到同一个文件。"""
        children = live_client.file_list_get_all(FileListParam(drive_id=live_drive_id))
        if not children:
            pytest.skip("网盘根目录为空")
        first = children[0]
        by_path = live_client.file_info_by_path(live_drive_id, f"/{first.file_name}")
        by_id = live_client.file_info_by_id(live_drive_id, first.file_id)
        assert by_path.file_id == by_id.file_id == first.file_id


@pytest.mark.integration
def test_walk_stops_after_first_child(live_client: PanClient, live_drive_id: str) -> None:
    """回调第二次返回 False 后不再有回调。"""
    visits: list[str] = []

    def handle(depth: int, path: str, entity: FileEntity | None, error: PanApiError | None) -> bool:
        visits.append(path)
        return error is None and len(visits) < 2

    live_client.files_directories_recurse_list(live_drive_id, INTEGRATION_PATH, handle)
    assert len(visits) <= 2
