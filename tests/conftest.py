"""Pytest configuration - loads .env for smoke tests and provides a fake DLP service."""

import re
from pathlib import Path
from typing import Any

import pytest
from dotenv import load_dotenv

from dlp_cli.core.client import APIError
from dlp_cli.sdk import StoredInfoTypeClient

# Load .env from project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)

PROJECT_ID = "test-project"
STORED_INFO_TYPE_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_-]{1,100}$")


class FakeDlpService:
    """In-memory stand-in for DlpApiClient."""

    def __init__(self) -> None:
        self.stored_info_types: dict[str, dict[str, Any]] = {}
        self.requests: list[tuple[str, dict[str, Any]]] = []
        self._next_id = 1

    def project_path(self, project_id: str, location: str | None = None) -> str:
        if location:
            return f"projects/{project_id}/locations/{location}"
        return f"projects/{project_id}"

    def create_stored_info_type(self, request: dict[str, Any]) -> dict[str, Any]:
        self.requests.append(("create", request))
        stored_info_type_id = request.get("storedInfoTypeId")
        if stored_info_type_id is None:
            stored_info_type_id = f"generated-{self._next_id}"
            self._next_id += 1
        if not STORED_INFO_TYPE_ID_PATTERN.match(stored_info_type_id):
            raise APIError(
                f"Invalid storedInfoTypeId: {stored_info_type_id}",
                status=400,
                reason="INVALID_ARGUMENT",
            )

        name = f"{request['parent']}/storedInfoTypes/{stored_info_type_id}"
        if name in self.stored_info_types:
            raise APIError(f"{name} already exists", status=409, reason="ALREADY_EXISTS")

        resource = {
            "name": name,
            "pendingVersions": [
                {
                    "config": request["config"],
                    "createTime": "2019-01-01T12:00:00.123456789Z",
                    "state": "PENDING",
                }
            ],
        }
        self.stored_info_types[name] = resource
        return resource

    def list_stored_info_types(self, request: dict[str, Any]) -> list[dict[str, Any]]:
        self.requests.append(("list", request))
        prefix = f"{request['parent']}/storedInfoTypes/"
        return [v for k, v in self.stored_info_types.items() if k.startswith(prefix)]

    def get_stored_info_type(self, request: dict[str, Any]) -> dict[str, Any]:
        self.requests.append(("get", request))
        try:
            return self.stored_info_types[request["name"]]
        except KeyError:
            raise APIError(f"Stored infoType not found: {request['name']}", status=404, reason="NOT_FOUND")

    def delete_stored_info_type(self, request: dict[str, Any]) -> None:
        self.requests.append(("delete", request))
        if self.stored_info_types.pop(request["name"], None) is None:
            raise APIError(f"Stored infoType not found: {request['name']}", status=404, reason="NOT_FOUND")


@pytest.fixture
def fake_service() -> FakeDlpService:
    return FakeDlpService()


@pytest.fixture
def client(fake_service: FakeDlpService) -> StoredInfoTypeClient:
    return StoredInfoTypeClient(PROJECT_ID, service=fake_service)
