"""Reduce verbose work package documents to flat records."""
from typing import Union

from .schemas import (
    StatusCatalog,
    WorkPackage,
    WorkPackageRecord,
    parse_resource,
)


def reduce_work_package(document: Union[WorkPackage, dict], catalog: StatusCatalog) -> WorkPackageRecord:
    """Project a work package onto a WorkPackageRecord.

    `catalog` is the same status collection used for resolution, so its names
    are attached without another request.

    Raises:
        ResponseShapeError: if the document lacks id or lockVersion.
    """
    if isinstance(document, WorkPackage):
        work_package = document
    else:
        work_package = parse_resource(WorkPackage, document, "work package")

    description = work_package.description.raw if work_package.description else None

    return WorkPackageRecord(
        id=work_package.id,
        subject=work_package.subject,
        status=work_package.status_name,
        type=work_package.get_embedded_name("type"),
        priority=work_package.get_embedded_name("priority"),
        assignee=work_package.get_embedded_name("assignee"),
        project=work_package.get_embedded_name("project"),
        project_id=work_package.project_id,
        description=description or None,
        created_at=work_package.created_at,
        updated_at=work_package.updated_at,
        start_date=work_package.start_date,
        due_date=work_package.due_date,
        estimated_time=work_package.estimated_time,
        percentage_done=work_package.percentage_done,
        lock_version=work_package.lock_version,
        statuses=catalog.names,
    )
