"""MCP tool handlers for OpenProject work packages.

All handlers follow a consistent pattern:
- Accept: arguments dict, OpenProjectClient, and the immutable Settings
- Return: CallToolResult with isError set on failure
- Catch every error at the boundary; the host always gets a well-formed result
- Use formatters for consistent output
"""
import logging
from typing import Awaitable, Callable

from mcp.types import CallToolResult, TextContent

from openproject_core.attachments import AttachmentFetcher
from openproject_core.client import OpenProjectClient
from openproject_core.config import Settings
from openproject_core.reducer import reduce_work_package
from openproject_core.statuses import InvalidStatusError, StatusLookup, StatusUpdateRequest

from . import formatters
from .tools import (
    CHANGE_WORK_PACKAGE_STATUS,
    DOWNLOAD_WORK_PACKAGE_ATTACHMENTS,
    GET_WORK_PACKAGE_DETAIL,
)

logger = logging.getLogger("openproject-mcp.handlers")

Handler = Callable[[dict, OpenProjectClient, Settings], Awaitable[CallToolResult]]


def text_result(text: str, is_error: bool = False) -> CallToolResult:
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=is_error)


def _require_work_package_id(arguments: dict) -> int:
    value = arguments.get("work_package_id")
    if isinstance(value, bool) or value is None:
        raise ValueError("work_package_id is required and must be an integer")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"work_package_id must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"work_package_id must be an integer, got {value!r}") from e


def _invalid_arguments(error: ValueError) -> CallToolResult:
    logger.warning(f"Invalid tool arguments: {error}")
    return text_result(f"Error: {error}", is_error=True)


# ============================================================================
# Work Package Handlers
# ============================================================================

async def handle_get_work_package_detail(
    arguments: dict,
    client: OpenProjectClient,
    settings: Settings
) -> CallToolResult:
    """Get a work package reduced to a flat record, plus all status names."""
    try:
        work_package_id = _require_work_package_id(arguments)
    except ValueError as e:
        return _invalid_arguments(e)

    try:
        work_package = await client.get_work_package(work_package_id)
        catalog = await client.list_statuses()
        record = reduce_work_package(work_package, catalog)
    except Exception as e:
        logger.exception(f"Error retrieving work package #{work_package_id}")
        return text_result(f"Error retrieving work package #{work_package_id}: {e}", is_error=True)

    logger.info(f"Successfully retrieved work package {work_package_id}: {record.subject}")
    return text_result(formatters.format_work_package_detail(record))


async def handle_change_work_package_status(
    arguments: dict,
    client: OpenProjectClient,
    settings: Settings
) -> CallToolResult:
    """Transition a work package to the status with the given name.

    The stale-lockVersion rejection (409) is reported, never retried: a retry
    with a refetched token could overwrite someone else's change.
    """
    try:
        work_package_id = _require_work_package_id(arguments)
        requested = arguments.get("status")
        if not isinstance(requested, str):
            raise ValueError("status is required and must be a string")
    except ValueError as e:
        return _invalid_arguments(e)

    try:
        work_package = await client.get_work_package(work_package_id)
        catalog = await client.list_statuses()

        try:
            target = StatusLookup.from_catalog(catalog).resolve(requested)
        except InvalidStatusError as e:
            return text_result(
                f'Error: Status "{e.requested}" is not available for work package #{work_package_id}. '
                f"Available statuses are: {', '.join(e.valid_names)}",
                is_error=True
            )

        update = StatusUpdateRequest.for_transition(work_package, target)
        updated = await client.update_work_package(work_package_id, update)
        record = reduce_work_package(updated, catalog)
    except Exception as e:
        logger.exception(f"Error updating work package #{work_package_id} status")
        return text_result(f"Error updating work package #{work_package_id} status: {e}", is_error=True)

    previous_status = work_package.status_name or "Unknown status"
    logger.info(f"Successfully transitioned work package {work_package_id} from {previous_status} to {target.name}")
    return text_result(formatters.format_status_change(record, previous_status, target.name))


async def handle_download_work_package_attachments(
    arguments: dict,
    client: OpenProjectClient,
    settings: Settings
) -> CallToolResult:
    """Download every attachment of a work package to its scratch directory.

    Per-attachment failures are part of the successful result; only a failure
    to list the attachments is an error.
    """
    try:
        work_package_id = _require_work_package_id(arguments)
    except ValueError as e:
        return _invalid_arguments(e)

    try:
        report = await AttachmentFetcher(client, settings.scratch_root).fetch(work_package_id)
    except Exception as e:
        logger.exception(f"Error processing attachments for work package #{work_package_id}")
        return text_result(
            f"Error processing attachments for work package #{work_package_id}: {e}", is_error=True
        )

    return text_result(formatters.format_download_report(report))


HANDLERS: dict[str, Handler] = {
    GET_WORK_PACKAGE_DETAIL: handle_get_work_package_detail,
    CHANGE_WORK_PACKAGE_STATUS: handle_change_work_package_status,
    DOWNLOAD_WORK_PACKAGE_ATTACHMENTS: handle_download_work_package_attachments,
}
