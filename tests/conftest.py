"""
pytest 配置与共享 fixture。

单元测试的 client 通过 FakeDriveApi 替换底层 post，不访问网络；
集成测试（integration 标记）使用本地保存的 token，未登录时跳过。
"""

from __future__ import annotations

from unittest.mock import patch

import pytest

from alipanapi import PanClient
from alipanapi.cli_config import load_config

from tests.config import ACCESS_TOKEN, API_URL
from tests.fake_api import FakeDriveApi


@pytest.fixture
def client() -> PanClient:
    """使用测试 token 的客户端（未打桩，需自行 patch）。"""
    c = PanClient(ACCESS_TOKEN, api_url=API_URL, timeout=5.0)
    yield c
    c.close()


@pytest.fixture
def fake_api(client: PanClient) -> FakeDriveApi:
    """将 client 底层 post 替换为基于 SAMPLE_TREE 的假接口。"""
    api = FakeDriveApi()
    with patch.object(client._get_client(), "post", side_effect=api):
        yield api


@pytest.fixture(scope="module")
def live_client() -> PanClient:
    """使用 `alipan login` 保存的 token；未保存时跳过整个模块。"""
    cfg = load_config()
    if not cfg or not cfg.get("drive_id"):
        pytest.skip("未保存阿里云盘 token，请先执行 alipan login。")
    c = PanClient(cfg["access_token"], api_url=cfg.get("api_url") or API_URL, timeout=10.0)
    yield c
    c.close()


@pytest.fixture(scope="module")
def live_drive_id() -> str:
    cfg = load_config() or {}
    return cfg.get("drive_id", "")
