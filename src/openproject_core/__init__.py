"""OpenProject adaptation layer (transport-agnostic).

Modules:
- config: settings from CLI, environment and .env
- client: authenticated HTTP client and error classification
- schemas: HAL resource models and flat records
- reducer: work package -> flat record
- statuses: status lookup and update-request builder
- attachments: sequential attachment downloads with an outcome ledger
"""

__version__ = "1.0.0"

from .attachments import AttachmentFetcher, scratch_directory
from .client import (
    OpenProjectAPIError,
    OpenProjectClient,
    OpenProjectConnectionError,
    OpenProjectError,
    OpenProjectParseError,
    build_auth_header,
    create_http_client,
)
from .config import ConfigurationError, Settings, load_settings
from .reducer import reduce_work_package
from .schemas import DownloadReport, ResponseShapeError, WorkPackageRecord
from .statuses import InvalidStatusError, StatusLookup, StatusUpdateRequest

__all__ = [
    "AttachmentFetcher",
    "ConfigurationError",
    "DownloadReport",
    "InvalidStatusError",
    "OpenProjectAPIError",
    "OpenProjectClient",
    "OpenProjectConnectionError",
    "OpenProjectError",
    "OpenProjectParseError",
    "ResponseShapeError",
    "Settings",
    "StatusLookup",
    "StatusUpdateRequest",
    "WorkPackageRecord",
    "build_auth_header",
    "create_http_client",
    "load_settings",
    "reduce_work_package",
    "scratch_directory",
    "__version__",
]
