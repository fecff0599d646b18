"""
DLP SDK - Stored infoType client with explicit results.

This layer turns dictionary source descriptors into a single remote call
and maps the response (or failure) into a Result. It holds no state beyond
its configuration and never prints.
Built on top of the core DlpApiClient.
"""

import builtins
from typing import Any, Protocol

from dlp_cli.core.client import APIError, DlpApiClient, ServiceError
from dlp_cli.core.types import (
    FileSetSource,
    Result,
    StoredInfoType,
    StoredInfoTypeConfig,
    TableSource,
)
from dlp_cli.logging_config import get_logger

logger = get_logger(__name__)


class StoredInfoTypeService(Protocol):
    """The remote calls the client depends on."""

    def project_path(self, project_id: str, location: str | None = None) -> str: ...

    def create_stored_info_type(self, request: dict[str, Any]) -> dict[str, Any]: ...

    def list_stored_info_types(self, request: dict[str, Any]) -> builtins.list[dict[str, Any]]: ...

    def get_stored_info_type(self, request: dict[str, Any]) -> dict[str, Any]: ...

    def delete_stored_info_type(self, request: dict[str, Any]) -> None: ...


def parse_stored_info_type(data: Any) -> StoredInfoType:
    """Map a response dict to a StoredInfoType, raising APIError if it is malformed."""
    try:
        return StoredInfoType.from_dict(data)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise APIError(f"Invalid stored infoType in response: {e}", reason="INTERNAL")


def build_file_set_config(
    input_path: str,
    output_path: str,
    display_name: str = "",
    description: str = "",
) -> StoredInfoTypeConfig:
    """Build the config for a dictionary read from Cloud Storage files."""
    return StoredInfoTypeConfig(
        source=FileSetSource(input_path=input_path),
        output_path=output_path,
        display_name=display_name,
        description=description,
    )


def build_table_config(
    table_project_id: str,
    dataset_id: str,
    table_id: str,
    field_name: str,
    output_path: str,
    display_name: str = "",
    description: str = "",
) -> StoredInfoTypeConfig:
    """Build the config for a dictionary read from a BigQuery column."""
    return StoredInfoTypeConfig(
        source=TableSource(
            project_id=table_project_id,
            dataset_id=dataset_id,
            table_id=table_id,
            field_name=field_name,
        ),
        output_path=output_path,
        display_name=display_name,
        description=description,
    )


class StoredInfoTypeClient:
    """
    Stored infoType client with typed methods returning Result values.

    Example:
        client = StoredInfoTypeClient("my-project")

        result = client.create_from_file_set(
            "gs://my-bucket/words.txt",
            "gs://my-bucket/",
            stored_info_type_id="my-stored-info-type",
        )
        if result.ok:
            print(result.value.name)
        else:
            print(result.error.message)

    """

    def __init__(
        self,
        project_id: str,
        location: str | None = None,
        service: StoredInfoTypeService | None = None,
    ):
        """
        Initialize the client.

        Args:
            project_id: Project (or parent resource path) requests run under
            location: Optional processing location, e.g. "global"
            service: Remote collaborator (a DlpApiClient by default)

        """
        self.project_id = project_id
        self.location = location
        self._service: StoredInfoTypeService = service or DlpApiClient()

    def _parent(self, project_id: str | None) -> str:
        return self._service.project_path(project_id or self.project_id, self.location)

    # =========================================================================
    # Create
    # =========================================================================

    def create_from_file_set(
        self,
        input_path: str,
        output_path: str,
        stored_info_type_id: str | None = None,
        display_name: str = "",
        description: str = "",
        project_id: str | None = None,
    ) -> Result[StoredInfoType]:
        """
        Create a stored infoType from Cloud Storage files.

        Args:
            input_path: Cloud Storage URL of the word files (wildcards allowed)
            output_path: Cloud Storage path the service writes its artifacts to
            stored_info_type_id: Optional ID; the service assigns one if omitted
            display_name: Optional display name
            description: Optional description
            project_id: Project override

        Returns:
            Result holding the created StoredInfoType

        """
        try:
            config = build_file_set_config(input_path, output_path, display_name, description)
        except ServiceError as e:
            return Result.failure(e)
        return self.create(config, stored_info_type_id, project_id)

    def create_from_table(
        self,
        table_project_id: str,
        dataset_id: str,
        table_id: str,
        field_name: str,
        output_path: str,
        stored_info_type_id: str | None = None,
        display_name: str = "",
        description: str = "",
        project_id: str | None = None,
    ) -> Result[StoredInfoType]:
        """
        Create a stored infoType from a BigQuery table column.

        Args:
            table_project_id: Project owning the table
            dataset_id: Dataset of the table
            table_id: Table holding the words
            field_name: Column holding the words
            output_path: Cloud Storage path the service writes its artifacts to
            stored_info_type_id: Optional ID; the service assigns one if omitted
            display_name: Optional display name
            description: Optional description
            project_id: Project override

        Returns:
            Result holding the created StoredInfoType

        """
        try:
            config = build_table_config(
                table_project_id,
                dataset_id,
                table_id,
                field_name,
                output_path,
                display_name,
                description,
            )
        except ServiceError as e:
            return Result.failure(e)
        return self.create(config, stored_info_type_id, project_id)

    def create(
        self,
        config: StoredInfoTypeConfig,
        stored_info_type_id: str | None = None,
        project_id: str | None = None,
    ) -> Result[StoredInfoType]:
        """
        Create a stored infoType from a config.

        The service builds the dictionary asynchronously; the returned
        resource normally has a single PENDING version.
        """
        try:
            request: dict[str, Any] = {
                "parent": self._parent(project_id),
                "config": config.to_dict(),
            }
            if stored_info_type_id:
                request["storedInfoTypeId"] = stored_info_type_id

            stored_info_type = parse_stored_info_type(self._service.create_stored_info_type(request))
        except ServiceError as e:
            logger.info("stored_info_type_create_failed", reason=e.reason, error=e.message)
            return Result.failure(e)

        logger.info("stored_info_type_created", name=stored_info_type.name)
        return Result.success(stored_info_type)

    # =========================================================================
    # Read
    # =========================================================================

    def list(self, project_id: str | None = None) -> Result[builtins.list[StoredInfoType]]:
        """List every stored infoType under the project."""
        try:
            items = self._service.list_stored_info_types({"parent": self._parent(project_id)})
            stored_info_types = [parse_stored_info_type(item) for item in items]
        except ServiceError as e:
            logger.info("stored_info_type_list_failed", reason=e.reason, error=e.message)
            return Result.failure(e)
        return Result.success(stored_info_types)

    def get(self, name: str) -> Result[StoredInfoType]:
        """Get a stored infoType by its full resource name."""
        try:
            stored_info_type = parse_stored_info_type(self._service.get_stored_info_type({"name": name}))
        except ServiceError as e:
            return Result.failure(e)
        return Result.success(stored_info_type)

    # =========================================================================
    # Delete
    # =========================================================================

    def delete(self, name: str) -> Result[None]:
        """
        Delete a stored infoType.

        Args:
            name: Full resource name, e.g.
                projects/my-project/storedInfoTypes/my-stored-info-type

        Returns:
            Result with no value; a failure if the name does not resolve

        """
        try:
            self._service.delete_stored_info_type({"name": name})
        except ServiceError as e:
            logger.info("stored_info_type_delete_failed", name=name, reason=e.reason, error=e.message)
            return Result.failure(e)
        logger.info("stored_info_type_deleted", name=name)
        return Result.success(None)
