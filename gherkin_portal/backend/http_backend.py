"""ReportPortal REST backend."""

from typing import Any, Optional

import orjson
import requests

from ..config.defaults import BackendParams
from ..errors import BackendCallError, BackendConfigurationError
from ..logging.config import get_backend_logger
from ..utils.time import to_epoch_millis
from .base import (
    FinishItemRequest,
    FinishLaunchRequest,
    ItemRequest,
    LaunchRequest,
    LogRequest,
    ReportingBackend,
)

logger = get_backend_logger(__name__)

API_VERSION = "v1"
USER_AGENT = "gherkin-portal/0.1"


class HttpReportingBackend(ReportingBackend):
    """ReportPortal v1 API over HTTP."""

    def __init__(self, params: BackendParams, session: Optional[requests.Session] = None):
        missing = [name for name in ("endpoint", "project", "uuid") if not getattr(params, name)]
        if missing:
            raise BackendConfigurationError(
                f"Missing backend settings: {', '.join(missing)}",
                missing_fields=missing,
            )

        self.params = params
        self.base_url = f"{params.endpoint.rstrip('/')}/api/{API_VERSION}/{params.project}"
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"bearer {params.uuid}",
            "User-Agent": USER_AGENT,
        })
        self.session.verify = params.verify_ssl

    def _request(
        self,
        operation: str,
        method: str,
        path: str,
        target: Optional[str] = None,
        json_data: Optional[dict[str, Any]] = None,
        files: Optional[list[tuple]] = None
    ) -> dict[str, Any]:
        """
        Make an HTTP request and return the decoded JSON body.

        Raises:
            BackendCallError: On network errors and non-2xx responses
        """
        url = f"{self.base_url}{path}"
        try:
            if files is not None:
                response = self.session.request(method, url, files=files,
                                                timeout=self.params.timeout_seconds)
            else:
                response = self.session.request(method, url, json=json_data,
                                                timeout=self.params.timeout_seconds)
        except requests.RequestException as e:
            raise BackendCallError(f"Network error: {e}", operation=operation, target=target)

        if not 200 <= response.status_code < 300:
            raise BackendCallError(
                f"HTTP {response.status_code}: {response.text[:200]}",
                operation=operation,
                target=target,
                status_code=response.status_code,
            )

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise BackendCallError(f"Invalid JSON response: {e}", operation=operation,
                                   target=target, status_code=response.status_code)

    def _created_id(self, body: dict[str, Any], operation: str, target: Optional[str]) -> str:
        entry_id = body.get("id")
        if not entry_id:
            raise BackendCallError("Response carries no id", operation=operation, target=target)
        return str(entry_id)

    def start_launch(self, request: LaunchRequest) -> str:
        payload = {
            "name": request.name,
            "description": request.description,
            "startTime": to_epoch_millis(request.start_time),
            "tags": sorted(request.tags),
            "mode": request.mode,
        }
        body = self._request("start_launch", "POST", "/launch", target=request.name,
                             json_data=payload)
        return self._created_id(body, "start_launch", request.name)

    def finish_launch(self, launch_id: str, request: FinishLaunchRequest) -> None:
        payload = {"endTime": to_epoch_millis(request.end_time)}
        self._request("finish_launch", "PUT", f"/launch/{launch_id}/finish",
                      target=launch_id, json_data=payload)

    def start_item(self, request: ItemRequest, parent_id: Optional[str] = None) -> str:
        payload = {
            "name": request.name,
            "description": request.description,
            "launchId": request.launch_id,
            "startTime": to_epoch_millis(request.start_time),
            "type": request.item_type.value,
            "tags": sorted(request.tags),
        }
        path = "/item" if parent_id is None else f"/item/{parent_id}"
        body = self._request("start_item", "POST", path, target=parent_id or request.name,
                             json_data=payload)
        return self._created_id(body, "start_item", request.name)

    def finish_item(self, item_id: str, request: FinishItemRequest) -> None:
        payload: dict[str, Any] = {"endTime": to_epoch_millis(request.end_time)}
        if request.status is not None:
            payload["status"] = request.status.value
        if request.issue is not None:
            issue: dict[str, Any] = {"issue_type": request.issue.issue_type}
            if request.issue.comment:
                issue["comment"] = request.issue.comment
            payload["issue"] = issue
        self._request("finish_item", "PUT", f"/item/{item_id}", target=item_id,
                      json_data=payload)

    def log(self, request: LogRequest) -> None:
        payload: dict[str, Any] = {
            "item_id": request.item_id,
            "message": request.message,
            "level": request.level.value,
            "time": to_epoch_millis(request.log_time),
        }

        if request.attachment is None:
            self._request("log", "POST", "/log", target=request.item_id, json_data=payload)
            return

        # Multipart: JSON request part plus the binary file part
        attachment = request.attachment
        payload["file"] = {"name": attachment.name}
        files = [
            ("json_request_part", (None, orjson.dumps([payload]), "application/json")),
            ("file", (attachment.name, attachment.content, attachment.mime_type)),
        ]
        self._request("log", "POST", "/log", target=request.item_id, files=files)

    def close(self) -> None:
        self.session.close()
        logger.debug("HTTP session closed", base_url=self.base_url)
