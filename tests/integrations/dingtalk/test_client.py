"""Unit tests for the DingTalk API client."""

from unittest.mock import MagicMock

import pytest
import requests

from tests.factories.dingtalk import (
    make_dingtalk_settings,
    make_response,
    make_session,
    token_response,
)
from ti_dding.infrastructure.configuration import GroupDefaultSettings
from ti_dding.infrastructure.operations import OperationStatus
from ti_dding.integrations.dingtalk import (
    AuthError,
    DingTalkClient,
    RemoteError,
    TransportError,
)
from ti_dding.infrastructure.logging.formatters import scrub_query_secrets


def make_client(session, group_defaults=None, **settings_overrides):
    return DingTalkClient(
        make_dingtalk_settings(**settings_overrides),
        group_defaults=group_defaults,
        session=session,
    )


def request_kwargs(session, index):
    return session.request.call_args_list[index].kwargs


@pytest.mark.unit
class TestAccessToken:
    def test_token_exchanged_once_and_cached(self):
        session = make_session(token_response("tok-1"))
        client = make_client(session)

        assert client.get_access_token() == "tok-1"
        assert client.get_access_token() == "tok-1"

        assert session.request.call_count == 1
        kwargs = request_kwargs(session, 0)
        assert kwargs["method"] == "GET"
        assert kwargs["url"] == "https://oapi.example.com/gettoken"
        assert kwargs["params"] == {"appkey": "key123", "appsecret": "secret123"}
        assert kwargs["timeout"] == 5

    def test_preissued_token_skips_exchange(self):
        session = make_session()
        client = make_client(session, access_token="given", app_key="", app_secret="")

        assert client.get_access_token() == "given"
        session.request.assert_not_called()

    def test_missing_credentials(self):
        client = make_client(make_session(), app_key="", app_secret="")
        with pytest.raises(AuthError, match="app_key and app_secret"):
            client.get_access_token()

    def test_platform_rejects_credentials(self):
        session = make_session(make_response({"errcode": 40089, "errmsg": "bad"}))
        client = make_client(session)
        with pytest.raises(AuthError, match="bad"):
            client.get_access_token()

    def test_response_without_token(self):
        session = make_session(make_response({"errcode": 0, "errmsg": "ok"}))
        client = make_client(session)
        with pytest.raises(AuthError, match="no access_token"):
            client.get_access_token()

    def test_transport_failure_becomes_auth_error(self):
        session = make_session()
        session.request.side_effect = requests.ConnectionError("refused")
        client = make_client(session)
        with pytest.raises(AuthError, match="failed to obtain access token"):
            client.get_access_token()


@pytest.mark.unit
class TestCreatePayload:
    def test_external_group(self):
        client = make_client(
            make_session(),
            group_defaults=GroupDefaultSettings(
                allow_member_invite=False, allow_member_view=False
            ),
        )
        payload = client.build_create_payload("g", "d", "o", ["o", "u1"], True)
        assert payload == {
            "name": "g",
            "description": "d",
            "owner": "o",
            "useridlist": ["o", "u1"],
            "conversation_type": 2,
            "show_history_type": 1,
            "validation_type": 1,
        }

    def test_internal_group_with_defaults(self):
        client = make_client(make_session())
        payload = client.build_create_payload("g", "", "o", ["o"], False)
        assert payload["conversation_type"] == 1
        assert payload["show_history_type"] == 1
        assert payload["validation_type"] == 1

    def test_internal_group_with_attributes_disabled(self):
        client = make_client(
            make_session(),
            group_defaults=GroupDefaultSettings(
                allow_member_invite=False, allow_member_view=False
            ),
        )
        payload = client.build_create_payload("g", "", "o", ["o"], False)
        assert payload["conversation_type"] == 1
        assert "show_history_type" not in payload
        assert "validation_type" not in payload


@pytest.mark.unit
class TestCreateGroup:
    def test_success(self):
        session = make_session(
            token_response("tok"),
            make_response({"errcode": 0, "errmsg": "ok", "chatid": "chat-9"}),
        )
        client = make_client(session)

        result = client.create_group("ops", "team", "o", ["o", "u1"], False)

        assert result.is_success
        assert result.data == {"chat_id": "chat-9"}
        kwargs = request_kwargs(session, 1)
        assert kwargs["url"] == "https://oapi.example.com/chat/create"
        assert kwargs["params"] == {"access_token": "tok"}
        assert kwargs["json"]["name"] == "ops"
        assert kwargs["json"]["useridlist"] == ["o", "u1"]

    def test_platform_error_is_a_result(self):
        session = make_session(
            token_response(),
            make_response({"errcode": 60011, "errmsg": "no permission"}),
        )
        client = make_client(session)

        result = client.create_group("ops", "", "o", ["o"])

        assert not result.is_success
        assert result.status == OperationStatus.PERMANENT_ERROR
        assert result.message == "failed to create group: no permission"
        assert result.error_code == "60011"

    def test_missing_chat_id_is_rejected(self):
        session = make_session(
            token_response(), make_response({"errcode": 0, "errmsg": "ok"})
        )
        client = make_client(session)

        result = client.create_group("ops", "", "o", ["o"])

        assert not result.is_success
        assert result.status == OperationStatus.PERMANENT_ERROR
        assert result.message == "failed to create group: response carried no chat id"
        assert result.error_code is None

    def test_timeout_raises_transport_error(self):
        session = make_session(token_response())
        session.request.side_effect = [token_response(), requests.Timeout("slow")]
        client = make_client(session)

        with pytest.raises(TransportError, match="timed out after 5s"):
            client.create_group("ops", "", "o", ["o"])

    def test_http_error_scrubs_token(self):
        failing = make_response()
        failing.raise_for_status.side_effect = requests.HTTPError(
            "500 Server Error for url: "
            "https://oapi.example.com/chat/create?access_token=tok"
        )
        session = make_session(token_response("tok"), failing)
        client = make_client(session)

        with pytest.raises(TransportError) as exc_info:
            client.create_group("ops", "", "o", ["o"])

        assert "access_token=***" in str(exc_info.value)
        assert "tok" not in str(exc_info.value).replace("access_token", "")

    def test_invalid_json(self):
        broken = make_response()
        broken.json.side_effect = ValueError("not json")
        session = make_session(token_response(), broken)
        client = make_client(session)

        with pytest.raises(TransportError, match="invalid JSON"):
            client.create_group("ops", "", "o", ["o"])

    def test_non_object_json(self):
        session = make_session(token_response(), make_response(["unexpected"]))
        client = make_client(session)

        with pytest.raises(TransportError, match="unexpected response"):
            client.create_group("ops", "", "o", ["o"])


@pytest.mark.unit
class TestMembers:
    def test_add_members(self):
        session = make_session(token_response("tok"), make_response())
        client = make_client(session)

        client.add_members("chat-1", ["u1", "u2"])

        kwargs = request_kwargs(session, 1)
        assert kwargs["url"] == "https://oapi.example.com/chat/addmember"
        assert kwargs["json"] == {"chatid": "chat-1", "useridlist": ["u1", "u2"]}

    def test_remove_members_platform_error(self):
        session = make_session(
            token_response(), make_response({"errcode": 34007, "errmsg": "not found"})
        )
        client = make_client(session)

        with pytest.raises(RemoteError) as exc_info:
            client.remove_members("chat-1", ["u1"])

        assert exc_info.value.errcode == 34007
        assert str(exc_info.value) == "remove members failed: not found"
        kwargs = request_kwargs(session, 1)
        assert kwargs["url"] == "https://oapi.example.com/chat/removemember"

    def test_transport_error_is_a_remote_error(self):
        session = make_session(token_response())
        session.request.side_effect = [
            token_response(),
            requests.ConnectionError("reset"),
        ]
        client = make_client(session)

        with pytest.raises(RemoteError):
            client.add_members("chat-1", ["u1"])


@pytest.mark.unit
class TestDirectoryAndLookups:
    def test_remote_listing_is_unsupported(self):
        session = make_session()
        client = make_client(session)

        assert client.list_groups() == []
        assert client.group_exists("ops") is False
        session.request.assert_not_called()

    def test_list_departments(self):
        session = make_session(
            token_response(),
            make_response(
                {"errcode": 0, "department": [{"id": 1, "name": "Root"}]}
            ),
        )
        client = make_client(session)

        assert client.list_departments() == [{"id": 1, "name": "Root"}]

    def test_list_department_users(self):
        session = make_session(
            token_response("tok"),
            make_response({"errcode": 0, "userlist": [{"userid": "u1"}]}),
        )
        client = make_client(session)

        assert client.list_department_users("7") == [{"userid": "u1"}]
        assert request_kwargs(session, 1)["params"] == {
            "access_token": "tok",
            "department_id": "7",
        }

    def test_get_user(self):
        session = make_session(
            token_response(),
            make_response({"errcode": 0, "userid": "u1", "name": "Li"}),
        )
        client = make_client(session)

        assert client.get_user("u1")["name"] == "Li"


@pytest.mark.unit
class TestClientLifecycle:
    def test_context_manager_closes_session(self):
        session = MagicMock()
        session.headers = {}
        with make_client(session):
            pass
        session.close.assert_called_once()

    def test_user_agent_header(self):
        session = make_session()
        make_client(session)
        assert session.headers["User-Agent"].startswith("ti-dding/")

    def test_scrub_query_secrets(self):
        text = "GET /gettoken?appkey=k1&appsecret=s1 failed"
        expected = "GET /gettoken?appkey=***&appsecret=*** failed"
        assert scrub_query_secrets(text) == expected
