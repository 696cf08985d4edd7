"""Download work package attachments to per-item scratch storage.

Attachments are processed one at a time in the order OpenProject returns them.
A single attachment never aborts the batch:
- no usable download link -> skipped
- transfer or write failure -> failed
- otherwise -> downloaded
"""
import logging
from pathlib import Path, PurePosixPath, PureWindowsPath

import httpx

from .client import OpenProjectClient, OpenProjectError
from .schemas import Attachment, DownloadOutcome, DownloadReport

logger = logging.getLogger("openproject-core.attachments")

SCRATCH_SUBDIR = "openproject"


def scratch_directory(scratch_root: Path, work_package_id: int) -> Path:
    """Deterministic scratch path for a work package."""
    return Path(scratch_root) / SCRATCH_SUBDIR / str(work_package_id)


def stored_file_name(attachment: Attachment) -> str:
    """`<id>.<name>`; the id prefix keeps same-named attachments apart.

    Only the base name of the remote file name is kept so it cannot point
    outside the scratch directory.
    """
    base = PureWindowsPath(PurePosixPath(attachment.file_name).name).name
    if base in ("", ".", ".."):
        base = "attachment"
    return f"{attachment.id}.{base}"


class AttachmentFetcher:
    """Enumerates and downloads all attachments of a work package."""

    def __init__(self, client: OpenProjectClient, scratch_root: Path):
        self.client = client
        self.scratch_root = Path(scratch_root)

    async def fetch(self, work_package_id: int) -> DownloadReport:
        collection = await self.client.list_attachments(work_package_id)
        attachments = collection.attachments
        if not attachments:
            logger.info(f"No attachments found for work package {work_package_id}")
            return DownloadReport(work_package_id=work_package_id)

        directory = scratch_directory(self.scratch_root, work_package_id)
        directory.mkdir(parents=True, exist_ok=True)

        report = DownloadReport(work_package_id=work_package_id, directory=str(directory))
        for attachment in attachments:
            report.outcomes.append(await self._download_one(attachment, directory))

        logger.info(
            f"Processed {len(report.outcomes)} attachments for work package {work_package_id}: "
            f"{len(report.downloaded)} downloaded, {len(report.skipped)} skipped, {len(report.failed)} failed"
        )
        return report

    async def _download_one(self, attachment: Attachment, directory: Path) -> DownloadOutcome:
        outcome = DownloadOutcome(
            attachment_id=attachment.id,
            file_name=attachment.file_name,
            outcome="skipped",
            reason="",
            file_size=attachment.file_size,
            content_type=attachment.content_type,
        )

        link = attachment.download_link
        if link is None or not link.href:
            outcome.reason = "Download URL not available"
            return outcome
        if link.templated:
            outcome.reason = "Download URL is templated"
            return outcome

        file_path = directory / stored_file_name(attachment)
        try:
            await self.client.download(link.href, file_path)
        except (OpenProjectError, httpx.HTTPError, OSError) as e:
            logger.warning(f"Failed to download attachment {attachment.id} ({attachment.file_name}): {e}")
            file_path.unlink(missing_ok=True)
            outcome.outcome = "failed"
            outcome.reason = str(e)
            return outcome

        outcome.outcome = "downloaded"
        outcome.reason = f"Saved to {file_path}"
        outcome.file_path = str(file_path)
        return outcome
