"""
Export and import of forms between an environment and the forms directory.

Forms are processed one at a time, in the order given. A failure on one
form is recorded in the TransferResult and the batch moves on to the next.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from pingone_forms.core.config import EnvironmentConfig
from pingone_forms.core.exceptions import PingOneClientError
from pingone_forms.forms.api import FormSummary, FormsManager
from pingone_forms.storage import FormStore, LocalFormFile

logger = logging.getLogger(__name__)

# Environment-specific fields the platform assigns on creation
EXPORT_EXCLUDED_FIELDS = ("_links", "id", "environment", "created", "modified")

NameResolver = Callable[[List[Tuple[LocalFormFile, Dict[str, Any]]]], Dict[str, str]]


@dataclass
class TransferResult:
    """
    Outcome of an export or import batch.

    Attributes:
        successful: (label, detail) pairs; for exports the form name and the
            written path, for imports the file name and the uploaded name.
        failed: (label, error message) pairs.
        skipped: Labels the operator chose not to write.
    """

    successful: List[Tuple[str, str]] = field(default_factory=list)
    failed: List[Tuple[str, str]] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        return bool(self.failed)


def transform_form_for_export(form_data: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of form_data without environment-specific fields."""
    transformed = {k: v for k, v in form_data.items() if k not in EXPORT_EXCLUDED_FIELDS}
    logger.debug("Removed fields: %s", ", ".join(EXPORT_EXCLUDED_FIELDS))
    return transformed


def form_filename(form_name: str) -> str:
    """
    Build the export file name of a form.

    Examples:
        >>> form_filename("Registration Form (v2)")
        'registration-form-v2.json'
    """
    sanitized = re.sub(r"[^a-zA-Z0-9\s\-_]", "", form_name)
    sanitized = re.sub(r"\s+", "-", sanitized).lower()
    return f"{sanitized}.json"


def export_forms(
    manager: FormsManager,
    environment: EnvironmentConfig,
    forms: Sequence[FormSummary],
    store: FormStore,
    confirm_overwrite: Optional[Callable[[str], bool]] = None,
) -> TransferResult:
    """
    Download forms and save their cleaned definitions to the forms directory.

    Args:
        manager: FormsManager used for the downloads.
        environment: Source environment.
        forms: Forms to export, in processing order.
        store: Destination directory.
        confirm_overwrite: Asked before replacing an existing file.

    Returns:
        TransferResult with one entry per form.
    """
    result = TransferResult()

    for form in forms:
        logger.debug("Downloading form: %s (%s)", form.name, form.id)
        try:
            raw_form = manager.download_form(environment, form.id)
            cleaned = transform_form_for_export(raw_form)
            path = store.save(cleaned, form_filename(form.name), confirm_overwrite)
        except PingOneClientError as e:
            logger.warning('Failed to download form "%s" (%s): %s', form.name, form.id, e)
            result.failed.append((form.name, str(e)))
            continue

        if path is None:
            result.skipped.append(form.name)
        else:
            result.successful.append((form.name, str(path)))

    return result


def import_forms(
    manager: FormsManager,
    environment: EnvironmentConfig,
    local_files: Sequence[LocalFormFile],
    store: FormStore,
    resolve_names: Optional[NameResolver] = None,
) -> TransferResult:
    """
    Upload local form files to an environment.

    All files are loaded first; unreadable files are recorded as failures.
    The name resolver is then asked for the final name of every loaded
    form, and the forms are uploaded in order with that name.

    Args:
        manager: FormsManager used for the uploads.
        environment: Target environment.
        local_files: Files to import, in processing order.
        store: Directory the files are read from.
        resolve_names: Returns a mapping of file name to final form name.
            Without it, the payload's own name (or the file name) is kept.

    Returns:
        TransferResult with one entry per file.
    """
    result = TransferResult()
    loaded: List[Tuple[LocalFormFile, Dict[str, Any]]] = []

    for local_file in local_files:
        try:
            form_data = store.load(local_file.filename)
        except PingOneClientError as e:
            result.failed.append((local_file.filename, f"Failed to load file: {e}"))
            continue
        if not isinstance(form_data, dict):
            result.failed.append(
                (local_file.filename, "Failed to load file: not a JSON object")
            )
            continue
        loaded.append((local_file, form_data))

    if not loaded:
        return result

    names = resolve_names(loaded) if resolve_names else {}

    for local_file, form_data in loaded:
        form_name = str(names.get(local_file.filename) or form_data.get("name") or local_file.name)
        logger.debug("Processing form: %s (%s)", local_file.name, local_file.filename)
        try:
            manager.upload_form(environment, {**form_data, "name": form_name})
        except PingOneClientError as e:
            logger.warning("Failed to upload %s: %s", local_file.filename, e)
            result.failed.append((local_file.filename, str(e)))
            continue

        logger.info("Successfully uploaded: %s", form_name)
        result.successful.append((local_file.filename, form_name))

    return result
