"""
Core types for the DLP stored infoType resource.

These dataclasses provide type safety for requests and responses and
validate their input at construction time.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Generic, Literal, TypeVar

from dlp_cli.core.client import ServiceError, ValidationError

T = TypeVar("T")


def _require(value: Any, name: str) -> None:
    """Raise ValidationError unless value is a non-empty string."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{name} is required", details={"field": name})


# =============================================================================
# Results
# =============================================================================


@dataclass
class Result(Generic[T]):
    """Outcome of a client operation: a value or a ServiceError."""

    value: T | None = None
    error: ServiceError | None = None

    @property
    def ok(self) -> bool:
        """Check if the operation succeeded."""
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        """Wrap a successful value."""
        return cls(value=value)

    @classmethod
    def failure(cls, error: ServiceError) -> "Result[T]":
        """Wrap a ServiceError."""
        return cls(error=error)

    def unwrap(self) -> T:
        """Return the value, raising the error if the operation failed."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


# =============================================================================
# Dictionary Sources
# =============================================================================


@dataclass(frozen=True)
class FileSetSource:
    """Cloud Storage files holding one dictionary phrase per line."""

    input_path: str
    kind: Literal["file_set"] = field(default="file_set", init=False)

    def __post_init__(self) -> None:
        _require(self.input_path, "input_path")

    def to_dict(self) -> dict[str, Any]:
        """Convert to the largeCustomDictionary source fields."""
        return {"cloudStorageFileSet": {"url": self.input_path}}


@dataclass(frozen=True)
class TableSource:
    """A single BigQuery column holding dictionary phrases."""

    project_id: str
    dataset_id: str
    table_id: str
    field_name: str
    kind: Literal["table"] = field(default="table", init=False)

    def __post_init__(self) -> None:
        _require(self.project_id, "project_id")
        _require(self.dataset_id, "dataset_id")
        _require(self.table_id, "table_id")
        _require(self.field_name, "field_name")

    def to_dict(self) -> dict[str, Any]:
        """Convert to the largeCustomDictionary source fields."""
        return {
            "bigQueryField": {
                "table": {
                    "projectId": self.project_id,
                    "datasetId": self.dataset_id,
                    "tableId": self.table_id,
                },
                "field": {"name": self.field_name},
            }
        }


DictionarySource = FileSetSource | TableSource


@dataclass(frozen=True)
class StoredInfoTypeConfig:
    """Configuration of a large custom dictionary stored infoType."""

    source: DictionarySource
    output_path: str
    display_name: str = ""
    description: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.source, (FileSetSource, TableSource)):
            raise ValidationError("source must be a FileSetSource or TableSource")
        _require(self.output_path, "output_path")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request."""
        dictionary: dict[str, Any] = {"outputPath": {"path": self.output_path}}
        dictionary.update(self.source.to_dict())

        config: dict[str, Any] = {}
        if self.display_name:
            config["displayName"] = self.display_name
        if self.description:
            config["description"] = self.description
        config["largeCustomDictionary"] = dictionary
        return config


# =============================================================================
# Stored infoType Types
# =============================================================================


class StoredInfoTypeState(str, Enum):
    """Build state of a stored infoType version."""

    UNSPECIFIED = "STORED_INFO_TYPE_STATE_UNSPECIFIED"
    PENDING = "PENDING"
    READY = "READY"
    FAILED = "FAILED"
    INVALID = "INVALID"

    @classmethod
    def parse(cls, value: str | None) -> "StoredInfoTypeState":
        try:
            return cls(value)
        except ValueError:
            return cls.UNSPECIFIED


def parse_timestamp(value: Any) -> int | None:
    """
    Convert an API timestamp to seconds since the epoch.

    Accepts RFC 3339 strings (REST JSON), {"seconds": ...} objects
    (protobuf JSON) and integer seconds, bare or as a string.
    Raises ValueError for anything else.
    """
    if value is None or value == "":
        return None
    if isinstance(value, dict):
        return int(value.get("seconds", 0))
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value)
    # fromisoformat() only learned the trailing "Z" in 3.11
    text = str(value).replace("Z", "+00:00")
    if "." in text:
        # Nanosecond precision is more than datetime can parse
        head, _, tail = text.partition(".")
        fraction, offset = re.match(r"(\d*)(.*)", tail).groups()
        text = f"{head}.{fraction[:6].ljust(6, '0')}{offset}"
    return int(datetime.fromisoformat(text).timestamp())


@dataclass
class StoredInfoTypeVersion:
    """One build attempt of a stored infoType."""

    state: StoredInfoTypeState
    create_time: int | None = None
    errors: list[dict[str, Any]] = field(default_factory=list)
    display_name: str | None = None
    description: str | None = None

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def is_pending(self) -> bool:
        return self.state == StoredInfoTypeState.PENDING

    @property
    def is_ready(self) -> bool:
        return self.state == StoredInfoTypeState.READY

    @property
    def is_failed(self) -> bool:
        return self.state in (StoredInfoTypeState.FAILED, StoredInfoTypeState.INVALID)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StoredInfoTypeVersion":
        """Create from API response dict."""
        config = data.get("config") or {}
        return cls(
            state=StoredInfoTypeState.parse(data.get("state")),
            create_time=parse_timestamp(data.get("createTime")),
            errors=list(data.get("errors") or []),
            display_name=config.get("displayName"),
            description=config.get("description"),
        )


@dataclass
class StoredInfoType:
    """A stored infoType with its current and pending versions."""

    name: str
    current_version: StoredInfoTypeVersion | None = None
    pending_versions: list[StoredInfoTypeVersion] = field(default_factory=list)

    @property
    def resource_id(self) -> str:
        """Last segment of the resource name."""
        return self.name.rsplit("/", 1)[-1]

    @property
    def project_id(self) -> str | None:
        """Project segment of the resource name, if any."""
        parts = self.name.split("/")
        if "projects" in parts:
            idx = parts.index("projects")
            if idx + 1 < len(parts):
                return parts[idx + 1]
        return None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StoredInfoType":
        """Create from API response dict."""
        current = data.get("currentVersion")
        return cls(
            name=data.get("name", ""),
            current_version=StoredInfoTypeVersion.from_dict(current) if current else None,
            pending_versions=[StoredInfoTypeVersion.from_dict(v) for v in data.get("pendingVersions") or []],
        )
