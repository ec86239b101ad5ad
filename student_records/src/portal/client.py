"""
Records API client used by the portal.

Every call opens a short-lived httpx client with a bounded timeout and
transport-level retries on connection failures. Failures are reported as
ApiError carrying the API's error code so callers can log it.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx

from ..models.student import StudentRecord

logger = logging.getLogger(__name__)

UploadedFile = Tuple[str, bytes, str]


class ApiError(Exception):
    """Raised when the records API cannot be reached or answers with an error."""

    def __init__(self, status_code: int, error: str, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error = error
        self.message = message

    @property
    def unauthorized(self) -> bool:
        return self.status_code == 401


class RecordsApiClient:
    """Thin async wrapper over the records API endpoints."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        retries: int = 2,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: Root URL of the records API
            timeout: Per-request timeout in seconds
            retries: Connection retries performed by the default transport
            transport: Alternative transport (tests route calls in-process)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retries = retries
        self._transport = transport

    def _client(self, token: Optional[str] = None) -> httpx.AsyncClient:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        transport = self._transport or httpx.AsyncHTTPTransport(retries=self.retries)
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers=headers,
            transport=transport,
        )

    async def _request(
        self, method: str, path: str, *, token: Optional[str] = None, **kwargs: Any
    ) -> httpx.Response:
        try:
            async with self._client(token) as client:
                response = await client.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            logger.warning("Records API timed out", extra={"path": path})
            raise ApiError(504, "api_timeout", "Records API timed out") from exc
        except httpx.HTTPError as exc:
            logger.warning("Records API unreachable", extra={"path": path, "reason": str(exc)})
            raise ApiError(503, "api_unreachable", "Records API unreachable") from exc

        if response.is_success:
            return response
        raise self._error_from(response)

    @staticmethod
    def _error_from(response: httpx.Response) -> ApiError:
        error, message = "api_error", f"Records API answered {response.status_code}"
        try:
            body: Dict[str, Any] = response.json()
        except ValueError:
            body = {}
        if isinstance(body, dict):
            error = body.get("error") or error
            message = body.get("message") or message
        return ApiError(response.status_code, error, message)

    async def login(self, username: str, password: str) -> str:
        """Return a bearer token for the given credentials."""
        response = await self._request(
            "POST", "/auth/login", json={"username": username, "password": password}
        )
        try:
            body = response.json()
        except ValueError:
            body = None
        token = body.get("token") if isinstance(body, dict) else None
        if not token:
            raise ApiError(response.status_code, "missing_token", "Login response had no token")
        return token

    async def list_students(self, token: str) -> List[StudentRecord]:
        response = await self._request("GET", "/home/index", token=token)
        return [StudentRecord.model_validate(item) for item in response.json()]

    async def get_student(self, token: str, student_id: int) -> StudentRecord:
        response = await self._request(
            "GET", "/home/getstudentbyid", token=token, params={"studentID": student_id}
        )
        return StudentRecord.model_validate(response.json())

    async def save_student(
        self,
        token: str,
        *,
        student_id: str,
        name: str,
        file_path: Optional[str] = None,
        upload: Optional[UploadedFile] = None,
    ) -> StudentRecord:
        """Send the full record (and optional file) as a multipart form."""
        data = {"StudentID": student_id, "Name": name, "FilePath": file_path or ""}
        files = {"File": upload} if upload else None
        response = await self._request(
            "POST", "/home/save", token=token, data=data, files=files
        )
        return StudentRecord.model_validate(response.json())

    async def delete_student(self, token: str, student_id: int) -> StudentRecord:
        response = await self._request(
            "DELETE", "/home/deletebyid", token=token, params={"studentID": student_id}
        )
        return StudentRecord.model_validate(response.json())

    async def get_image(self, token: str, file_name: str) -> Tuple[bytes, str]:
        response = await self._request("GET", f"/home/get/{file_name}", token=token)
        return response.content, response.headers.get("content-type", "image/jpeg")


__all__ = ["ApiError", "RecordsApiClient", "UploadedFile"]
