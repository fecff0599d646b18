"""
Core HTTP client for the Cloud DLP v2 API.

Handles authentication, request/response, pagination, and error handling
for the stored infoType endpoints.
"""

import json
import os
import re
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Iterator
from typing import Any

from dlp_cli.logging_config import get_logger

# Configuration
DEFAULT_BASE_URL = "https://dlp.googleapis.com/v2"
DEFAULT_TIMEOUT = 60
STORED_INFO_TYPE_NAME_PATTERN = re.compile(
    r"^(projects|organizations)/[^/?#]+(/locations/[^/?#]+)?/storedInfoTypes/[^/?#]+$"
)

logger = get_logger(__name__)


class ServiceError(Exception):
    """Base error class for every failure surfaced to callers."""

    def __init__(self, message: str, reason: str = "", details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.reason = reason
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result: dict[str, Any] = {"error": self.message}
        if self.reason:
            result["reason"] = self.reason
        if self.details:
            result["details"] = self.details
        return result


class APIError(ServiceError):
    """API error with status code and message."""

    def __init__(
        self,
        message: str,
        status: int = 0,
        reason: str = "",
        details: dict | None = None,
    ):
        super().__init__(message, reason, details)
        self.status = status

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result = super().to_dict()
        if self.status:
            result["status"] = self.status
        return result


class ValidationError(ServiceError):
    """Validation error for local input/data issues (not API errors)."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, "INVALID_ARGUMENT", details)


def _ensure_stored_info_type_name(name: str) -> str:
    """Raise ValidationError unless name is a full stored infoType resource name."""
    if not isinstance(name, str) or not STORED_INFO_TYPE_NAME_PATTERN.match(name):
        raise ValidationError(
            f"Invalid stored infoType name: {name!r}. "
            "Expected projects/{project}/storedInfoTypes/{id}",
            details={"field": "name"},
        )
    return name


def _parse_error_body(body: str, fallback: str) -> tuple[str, str, dict]:
    """Pull message and reason out of a Google error envelope."""
    error_data = json.loads(body)
    # Handle both {"error": "message"} and {"error": {"message": "...", "status": "..."}}
    error_field = error_data.get("error", {}) if isinstance(error_data, dict) else {}
    if isinstance(error_field, str):
        return error_field, "", error_data
    if isinstance(error_field, dict):
        return error_field.get("message", fallback), error_field.get("status", ""), error_data
    return fallback, "", error_data


class DlpApiClient:
    """
    Low-level HTTP client for the DLP v2 API.

    Handles:
    - Authentication via OAuth access token
    - HTTP methods (GET, POST, DELETE)
    - Error handling and response parsing
    - Page-token pagination for list endpoints
    """

    def __init__(
        self,
        access_token: str | None = None,
        base_url: str | None = None,
        quota_project: str | None = None,
        timeout: int = DEFAULT_TIMEOUT,
    ):
        """
        Initialize the API client.

        Args:
            access_token: OAuth access token (or DLP_ACCESS_TOKEN / GOOGLE_OAUTH_ACCESS_TOKEN env var)
            base_url: API base URL (or DLP_API_BASE_URL env var)
            quota_project: Project billed for the request (or DLP_QUOTA_PROJECT env var)
            timeout: Request timeout in seconds

        """
        self.access_token = (
            access_token or os.environ.get("DLP_ACCESS_TOKEN") or os.environ.get("GOOGLE_OAUTH_ACCESS_TOKEN")
        )
        self.base_url = (base_url or os.environ.get("DLP_API_BASE_URL", DEFAULT_BASE_URL)).rstrip("/")
        self.quota_project = quota_project or os.environ.get("DLP_QUOTA_PROJECT")
        self.timeout = timeout

    def _ensure_access_token(self) -> str:
        """Ensure an access token is configured."""
        if not self.access_token:
            raise APIError(
                "DLP_ACCESS_TOKEN environment variable not set",
                reason="UNAUTHENTICATED",
            )
        return self.access_token

    def _build_url(self, path: str) -> str:
        """Build full URL from a resource path; always under base_url."""
        return f"{self.base_url}/{path.lstrip('/')}"

    def _make_request(
        self,
        method: str,
        path: str,
        data: dict | None = None,
        timeout: int | None = None,
    ) -> dict[str, Any]:
        """
        Make an HTTP request to the API.

        Args:
            method: HTTP method (GET, POST, DELETE)
            path: Resource path (e.g., projects/{id}/storedInfoTypes)
            data: Request body for POST
            timeout: Request timeout override

        Returns:
            Parsed JSON response

        Raises:
            APIError: On HTTP or parsing errors

        """
        token = self._ensure_access_token()

        url = self._build_url(path)
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.quota_project:
            headers["x-goog-user-project"] = self.quota_project

        body = json.dumps(data).encode("utf-8") if data else None
        request_timeout = timeout or self.timeout

        logger.debug("dlp_request", method=method, url=url)

        try:
            req = urllib.request.Request(url, data=body, headers=headers, method=method)
            with urllib.request.urlopen(req, timeout=request_timeout) as response:
                response_data = response.read().decode("utf-8")
                if response_data:
                    return json.loads(response_data)
                return {}

        except urllib.error.HTTPError as e:
            try:
                message, reason, details = _parse_error_body(e.read().decode("utf-8"), str(e))
            except json.JSONDecodeError:
                logger.warning("dlp_request_failed", method=method, url=url, status=e.code)
                raise APIError(str(e), status=e.code)
            logger.warning("dlp_request_failed", method=method, url=url, status=e.code, reason=reason)
            raise APIError(message, status=e.code, reason=reason, details=details)

        except urllib.error.URLError as e:
            logger.warning("dlp_connection_error", url=url, error=str(e.reason))
            raise APIError(f"Connection error: {e.reason}", reason="UNAVAILABLE")

        except TimeoutError:
            logger.warning("dlp_request_timeout", url=url, timeout=request_timeout)
            raise APIError(
                f"Request timed out after {request_timeout} seconds",
                reason="DEADLINE_EXCEEDED",
            )

        except json.JSONDecodeError as e:
            raise APIError(f"Invalid JSON response: {e}")

    # =========================================================================
    # HTTP Methods
    # =========================================================================

    def get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Make a GET request."""
        if params:
            # Filter out None values and URL-encode
            filtered_params = {k: v for k, v in params.items() if v is not None}
            if filtered_params:
                query_string = urllib.parse.urlencode(filtered_params)
                separator = "&" if "?" in path else "?"
                path = f"{path}{separator}{query_string}"
        return self._make_request("GET", path)

    def post(self, path: str, data: dict | None = None) -> dict[str, Any]:
        """Make a POST request."""
        return self._make_request("POST", path, data)

    def delete(self, path: str) -> dict[str, Any]:
        """Make a DELETE request."""
        return self._make_request("DELETE", path)

    # =========================================================================
    # Resource paths
    # =========================================================================

    def project_path(self, project_id: str, location: str | None = None) -> str:
        """Get the parent resource path for a project."""
        if project_id.startswith(("projects/", "organizations/")):
            return project_id
        if location:
            return f"projects/{project_id}/locations/{location}"
        return f"projects/{project_id}"

    # =========================================================================
    # Pagination
    # =========================================================================

    def paginate(
        self,
        path: str,
        items_key: str,
        params: dict[str, Any] | None = None,
    ) -> Iterator[dict[str, Any]]:
        """
        Iterate through all pages of a page-token endpoint.

        Args:
            path: Resource collection path
            items_key: Response key holding the page items
            params: Extra query parameters (pageSize, orderBy, ...)

        Yields:
            Raw items from all pages

        """
        query = dict(params or {})

        while True:
            result = self.get(path, query)
            yield from result.get(items_key, [])

            next_token = result.get("nextPageToken")
            if not next_token:
                break
            query["pageToken"] = next_token

    # =========================================================================
    # Stored infoType RPCs
    # =========================================================================

    def create_stored_info_type(self, request: dict[str, Any]) -> dict[str, Any]:
        """Create a stored infoType under request["parent"]."""
        body: dict[str, Any] = {"config": request["config"]}
        if request.get("storedInfoTypeId"):
            body["storedInfoTypeId"] = request["storedInfoTypeId"]
        return self.post(f"{request['parent']}/storedInfoTypes", body)

    def list_stored_info_types(self, request: dict[str, Any]) -> list[dict[str, Any]]:
        """List every stored infoType under request["parent"]."""
        params = {"pageSize": request.get("pageSize"), "orderBy": request.get("orderBy")}
        return list(self.paginate(f"{request['parent']}/storedInfoTypes", "storedInfoTypes", params))

    def get_stored_info_type(self, request: dict[str, Any]) -> dict[str, Any]:
        """Get a stored infoType by its full resource name."""
        return self.get(_ensure_stored_info_type_name(request["name"]))

    def delete_stored_info_type(self, request: dict[str, Any]) -> None:
        """Delete a stored infoType by its full resource name."""
        self.delete(_ensure_stored_info_type_name(request["name"]))
