import os
from unittest.mock import MagicMock

import pytest

from tests.factories.groups import create_result_for
from ti_dding.infrastructure.configuration import Settings
from ti_dding.integrations.dingtalk import DingTalkClient
from ti_dding.modules.groups import FileGroupStore, GroupService


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Keep TI_DDING_* variables and a stray .env out of every test."""
    for key in list(os.environ):
        if key.upper().startswith("TI_DDING_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "data"


@pytest.fixture
def store(data_dir):
    return FileGroupStore(data_dir)


@pytest.fixture
def mock_client():
    client = MagicMock(spec=DingTalkClient)
    client.create_group.side_effect = create_result_for
    return client


@pytest.fixture
def service(mock_client, store):
    return GroupService(client=mock_client, store=store)


@pytest.fixture
def settings(data_dir):
    return Settings(
        dingtalk={"access_token": "preissued-token"},
        app={"data_dir": str(data_dir)},
    )
