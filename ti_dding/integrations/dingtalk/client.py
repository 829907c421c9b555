"""DingTalk open API client.

Thin request/response wrapper around the endpoints this tool needs:

    GET  /gettoken?appkey=&appsecret=      -> {errcode, errmsg, access_token}
    POST /chat/create?access_token=        -> {errcode, errmsg, chatid}
    POST /chat/addmember?access_token=     -> {errcode, errmsg}
    POST /chat/removemember?access_token=  -> {errcode, errmsg}
    GET  /department/list?access_token=    -> {errcode, errmsg, department}
    GET  /user/simplelist?access_token=    -> {errcode, errmsg, userlist}
    GET  /user/get?access_token=           -> {errcode, errmsg, ...user}

Every call is one synchronous round-trip with the configured timeout. There
is no retry and no token refresh: a token is fetched once and cached for the
life of the client.

Usage:
    from ti_dding.integrations.dingtalk import DingTalkClient

    with DingTalkClient(settings.dingtalk, settings.group.default_settings) as client:
        result = client.create_group("ops", "", "owner1", ["owner1", "u2"], False)
        if result.is_success:
            chat_id = result.data["chat_id"]
"""

from typing import Any, Dict, List, Optional

import requests

from ti_dding import __version__
from ti_dding.infrastructure.configuration import (
    DingTalkSettings,
    GroupDefaultSettings,
)
from ti_dding.infrastructure.logging import get_module_logger
from ti_dding.infrastructure.logging.formatters import scrub_query_secrets
from ti_dding.infrastructure.operations import OperationResult
from ti_dding.integrations.dingtalk.errors import (
    AuthError,
    RemoteError,
    TransportError,
)

logger = get_module_logger()

CONVERSATION_TYPE_INTERNAL = 1
CONVERSATION_TYPE_EXTERNAL = 2


def _errcode(data: Dict[str, Any]) -> int:
    try:
        return int(data.get("errcode", 0) or 0)
    except (TypeError, ValueError):
        return -1


class DingTalkClient:
    """HTTP client for the DingTalk open API.

    Attributes:
        base_url: API root, e.g. ``https://oapi.dingtalk.com``
        timeout: Per-request timeout in seconds
    """

    def __init__(
        self,
        settings: DingTalkSettings,
        group_defaults: Optional[GroupDefaultSettings] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialize the client.

        Args:
            settings: DingTalk credentials and endpoint.
            group_defaults: Attributes applied to new internal groups.
            session: Optional pre-built session (tests inject a mock).
        """
        self.base_url = settings.base_url.rstrip("/")
        self.timeout = settings.timeout
        self._app_key = settings.app_key
        self._app_secret = settings.app_secret
        self._access_token: Optional[str] = settings.access_token or None
        self._group_defaults = group_defaults or GroupDefaultSettings()
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "User-Agent": f"ti-dding/{__version__}",
                "Accept": "application/json",
            }
        )
        self._logger = logger.bind(base_url=self.base_url)

    def __enter__(self) -> "DingTalkClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close HTTP session and release connections."""
        self._session.close()

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Send one request and decode the JSON body.

        Raises:
            TransportError: On connection errors, timeouts, non-2xx status
                codes or a body that is not a JSON object.
        """
        url = f"{self.base_url}{path}"
        log = self._logger.bind(method=method, path=path)
        log.debug("dingtalk_request")

        try:
            response = self._session.request(
                method=method,
                url=url,
                params=params,
                json=json_data,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.Timeout as exc:
            log.error("dingtalk_timeout", timeout=self.timeout)
            raise TransportError(
                f"{method} {path} timed out after {self.timeout}s"
            ) from exc
        except requests.RequestException as exc:
            message = scrub_query_secrets(str(exc))
            log.error("dingtalk_transport_error", error=message)
            raise TransportError(f"{method} {path} failed: {message}") from exc

        try:
            data = response.json()
        except ValueError as exc:
            log.error("dingtalk_invalid_response", content=response.text[:200])
            raise TransportError(f"invalid JSON response from {path}") from exc

        if not isinstance(data, dict):
            raise TransportError(f"unexpected response from {path}: {data!r}")

        log.debug("dingtalk_response", errcode=data.get("errcode"))
        return data

    def _authorized(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        query = {"access_token": self.get_access_token()}
        if params:
            query.update(params)
        return self._request(method, path, params=query, json_data=json_data)

    def _checked(self, action: str, data: Dict[str, Any]) -> Dict[str, Any]:
        errcode = _errcode(data)
        if errcode != 0:
            errmsg = data.get("errmsg") or "unknown error"
            self._logger.warning(
                "dingtalk_error", action=action, errcode=errcode, errmsg=errmsg
            )
            raise RemoteError(f"{action} failed: {errmsg}", errcode=errcode)
        return data

    def get_access_token(self) -> str:
        """Return the cached access token, exchanging credentials if needed.

        Raises:
            AuthError: If credentials are missing, the exchange fails or the
                platform reports an error.
        """
        if self._access_token:
            return self._access_token

        if not self._app_key or not self._app_secret:
            raise AuthError("app_key and app_secret are required to obtain a token")

        try:
            data = self._request(
                "GET",
                "/gettoken",
                params={"appkey": self._app_key, "appsecret": self._app_secret},
            )
        except TransportError as exc:
            raise AuthError(f"failed to obtain access token: {exc}") from exc

        errcode = _errcode(data)
        if errcode != 0:
            self._logger.error(
                "access_token_rejected", errcode=errcode, errmsg=data.get("errmsg")
            )
            raise AuthError(f"failed to obtain access token: {data.get('errmsg')}")

        token = data.get("access_token")
        if not token:
            raise AuthError("token endpoint returned no access_token")

        self._access_token = token
        self._logger.info("access_token_obtained")
        return token

    def build_create_payload(
        self,
        name: str,
        description: str,
        owner_id: str,
        member_ids: List[str],
        is_external: bool,
    ) -> Dict[str, Any]:
        """Build the /chat/create body.

        External groups always get history visible and invites allowed;
        internal groups take both attributes from the configured defaults.
        """
        payload: Dict[str, Any] = {
            "name": name,
            "description": description,
            "owner": owner_id,
            "useridlist": list(member_ids),
        }

        if is_external:
            payload["conversation_type"] = CONVERSATION_TYPE_EXTERNAL
            payload["show_history_type"] = 1
            payload["validation_type"] = 1
        else:
            payload["conversation_type"] = CONVERSATION_TYPE_INTERNAL
            if self._group_defaults.allow_member_invite:
                payload["show_history_type"] = 1
            if self._group_defaults.allow_member_view:
                payload["validation_type"] = 1

        return payload

    def create_group(
        self,
        name: str,
        description: str,
        owner_id: str,
        member_ids: List[str],
        is_external: bool = False,
    ) -> OperationResult:
        """Create a group chat.

        Returns:
            OperationResult: success carries ``{"chat_id": ...}``; a
            platform-reported error is a PERMANENT_ERROR result whose
            ``error_code`` is the errcode. A reply without a chat id is
            rejected too.

        Raises:
            AuthError: If no token can be obtained.
            TransportError: If the request itself fails.
        """
        payload = self.build_create_payload(
            name, description, owner_id, member_ids, is_external
        )
        data = self._authorized("POST", "/chat/create", json_data=payload)

        errcode = _errcode(data)
        if errcode != 0:
            errmsg = data.get("errmsg") or "unknown error"
            self._logger.warning(
                "group_create_rejected", name=name, errcode=errcode, errmsg=errmsg
            )
            return OperationResult.rejected(
                f"failed to create group: {errmsg}", errcode=errcode
            )

        chat_id = data.get("chatid") or ""
        if not chat_id:
            self._logger.warning("group_create_missing_chat_id", name=name)
            return OperationResult.rejected(
                "failed to create group: response carried no chat id"
            )

        self._logger.info("group_created", name=name, chat_id=chat_id)
        return OperationResult.success(
            data={"chat_id": chat_id}, message="group created"
        )

    def add_members(self, group_id: str, user_ids: List[str]) -> None:
        """Add users to a group chat.

        Raises:
            AuthError: If no token can be obtained.
            RemoteError: If the platform rejects the call or it fails.
        """
        data = self._authorized(
            "POST",
            "/chat/addmember",
            json_data={"chatid": group_id, "useridlist": list(user_ids)},
        )
        self._checked("add members", data)
        self._logger.info("members_added", group_id=group_id, count=len(user_ids))

    def remove_members(self, group_id: str, user_ids: List[str]) -> None:
        """Remove users from a group chat.

        Raises:
            AuthError: If no token can be obtained.
            RemoteError: If the platform rejects the call or it fails.
        """
        data = self._authorized(
            "POST",
            "/chat/removemember",
            json_data={"chatid": group_id, "useridlist": list(user_ids)},
        )
        self._checked("remove members", data)
        self._logger.info("members_removed", group_id=group_id, count=len(user_ids))

    def list_groups(self) -> List[Dict[str, Any]]:
        """The platform has no "list all groups" call; always empty.

        The local record store is the source of truth for listings.
        """
        self._logger.debug("remote_group_listing_unsupported")
        return []

    def group_exists(self, name: str) -> bool:
        """The platform has no lookup by group name; always False."""
        self._logger.debug("remote_group_lookup_unsupported", name=name)
        return False

    def list_departments(self) -> List[Dict[str, Any]]:
        data = self._checked(
            "list departments", self._authorized("GET", "/department/list")
        )
        return list(data.get("department") or [])

    def list_department_users(self, department_id: str) -> List[Dict[str, Any]]:
        data = self._checked(
            "list department users",
            self._authorized(
                "GET", "/user/simplelist", params={"department_id": department_id}
            ),
        )
        return list(data.get("userlist") or [])

    def get_user(self, user_id: str) -> Dict[str, Any]:
        data = self._checked(
            "get user",
            self._authorized("GET", "/user/get", params={"userid": user_id}),
        )
        return data.get("userinfo") or data
