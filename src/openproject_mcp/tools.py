"""MCP tool definitions for OpenProject.

This module provides the definitive list of tools exposed by the server.
"""

from mcp.types import Tool

GET_WORK_PACKAGE_DETAIL = "get_work_package_detail"
CHANGE_WORK_PACKAGE_STATUS = "change_work_package_status"
DOWNLOAD_WORK_PACKAGE_ATTACHMENTS = "download_work_package_attachments"


def get_tools() -> list[Tool]:
    """Get the list of all MCP tools for OpenProject work packages."""
    return [
        Tool(
            name=GET_WORK_PACKAGE_DETAIL,
            description="Get the details of an OpenProject work package. "
                       "\n\nRETURNS: id, subject, status, type, priority, assignee, project, description, "
                       "dates, estimate, percentage done, lockVersion and the names of all statuses "
                       "known to the system.",
            inputSchema={
                "type": "object",
                "properties": {
                    "work_package_id": {
                        "type": "integer",
                        "description": "ID of the work package to retrieve"
                    }
                },
                "required": ["work_package_id"]
            }
        ),
        Tool(
            name=CHANGE_WORK_PACKAGE_STATUS,
            description="Change the status of an OpenProject work package. "
                       "\n\nThe status name is matched case-insensitively against the statuses known to "
                       "the system (see the 'statuses' field of get_work_package_detail)."
                       "\n\nERRORS:"
                       "\n• Unknown status: the error lists every valid status name"
                       "\n• 409: the work package was changed concurrently; fetch it again and retry",
            inputSchema={
                "type": "object",
                "properties": {
                    "work_package_id": {
                        "type": "integer",
                        "description": "ID of the work package to update"
                    },
                    "status": {
                        "type": "string",
                        "description": "New status for the work package (e.g. 'In progress')"
                    }
                },
                "required": ["work_package_id", "status"]
            }
        ),
        Tool(
            name=DOWNLOAD_WORK_PACKAGE_ATTACHMENTS,
            description="Download all attachments from a work package to a temporary folder. "
                       "\n\nRETURNS: one result line per attachment (downloaded, skipped or failed), "
                       "the folder the files were saved to, and a mapping from attachment id to "
                       "local file path and content type.",
            inputSchema={
                "type": "object",
                "properties": {
                    "work_package_id": {
                        "type": "integer",
                        "description": "ID of the work package containing the attachments"
                    }
                },
                "required": ["work_package_id"]
            }
        ),
    ]
