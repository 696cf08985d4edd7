"""Formatting functions for MCP responses."""
import json

from openproject_core.schemas import DownloadOutcome, DownloadReport, WorkPackageRecord


def format_work_package(record: WorkPackageRecord) -> str:
    """Format a work package record as indented JSON with placeholders filled in."""
    return json.dumps(record.to_display(), indent=2, ensure_ascii=False)


def format_work_package_detail(record: WorkPackageRecord) -> str:
    return f"Work Package #{record.id} Details:\n{format_work_package(record)}"


def format_status_change(record: WorkPackageRecord, previous_status: str, new_status: str) -> str:
    return (f'Successfully updated work package #{record.id} status from "{previous_status}" to "{new_status}".\n\n'
            f"Updated work package:\n{format_work_package(record)}")


def format_download_outcome(outcome: DownloadOutcome) -> str:
    """Format one ledger line."""
    label = f"{outcome.file_name} (ID: {outcome.attachment_id})"
    if outcome.outcome == "downloaded":
        return f"✅ Downloaded {label}"
    if outcome.outcome == "skipped":
        return f"⚠️ Skipped {label}: {outcome.reason}"
    return f"❌ Failed to download {label}: {outcome.reason}"


def format_download_report(report: DownloadReport) -> str:
    """Format the full ledger, scratch directory and file mapping."""
    if report.is_empty:
        return f"No attachments found for work package #{report.work_package_id}."

    lines = "\n".join(format_download_outcome(outcome) for outcome in report.outcomes)
    mapping = json.dumps(report.file_mapping, indent=2, ensure_ascii=False)
    return (f"Download results for work package #{report.work_package_id}:\n{lines}\n\n"
            f"Files saved to: {report.directory}\n\n"
            f"File mapping:\n{mapping}")
