"""
Local forms directory.

Reads and writes form JSON files in the forms directory (./forms by
default). Scanning reports files that are not valid JSON instead of
failing, so the operator can see and skip them.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, List, Optional, Union

from pingone_forms.core.config import DEFAULT_FORMS_DIR
from pingone_forms.core.exceptions import PingOneStorageError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocalFormFile:
    """
    A JSON file found in the forms directory.

    Attributes:
        filename: File name, including the .json extension.
        name: File name without the extension.
        is_valid: Whether the file parses as JSON.
        error: Parse error message for invalid files.
    """

    filename: str
    name: str
    is_valid: bool
    error: Optional[str] = None


class FormStore:
    """Reads and writes form files in one directory."""

    def __init__(self, directory: Union[str, Path] = DEFAULT_FORMS_DIR):
        self.directory = Path(directory)

    def scan(self) -> List[LocalFormFile]:
        """
        List the JSON files of the forms directory, sorted by name.

        Returns:
            LocalFormFile entries; an empty list if the directory does not exist.

        Raises:
            PingOneStorageError: If the directory cannot be listed.
        """
        if not self.directory.is_dir():
            return []

        try:
            paths = [p for p in self.directory.iterdir() if p.suffix == ".json" and p.is_file()]
        except OSError as e:
            raise PingOneStorageError(f"Failed to scan forms directory: {e}") from e

        files = []
        for path in paths:
            try:
                json.loads(path.read_text(encoding="utf-8"))
                files.append(LocalFormFile(filename=path.name, name=path.stem, is_valid=True))
            except (OSError, ValueError) as e:
                files.append(
                    LocalFormFile(filename=path.name, name=path.stem, is_valid=False, error=str(e))
                )

        return sorted(files, key=lambda f: f.name)

    def save(
        self,
        form_data: Any,
        filename: str,
        confirm_overwrite: Optional[Callable[[str], bool]] = None,
    ) -> Optional[Path]:
        """
        Write a form to the forms directory as indented JSON.

        Args:
            form_data: JSON-serializable form definition.
            filename: Target file name inside the directory.
            confirm_overwrite: Called with the file name when the file already
                exists; returning False skips the write.

        Returns:
            Path of the written file, or None if the operator declined to overwrite.

        Raises:
            PingOneStorageError: If the file cannot be written.
        """
        path = self.directory / filename
        try:
            if not self.directory.exists():
                logger.debug("Creating forms directory: %s", self.directory)
                self.directory.mkdir(parents=True, exist_ok=True)

            exists = path.exists()
            if exists and confirm_overwrite and not confirm_overwrite(filename):
                logger.debug("User chose not to overwrite: %s", path)
                return None

            path.write_text(json.dumps(form_data, indent=2), encoding="utf-8")
        except (OSError, TypeError, ValueError) as e:
            raise PingOneStorageError(f"Failed to save form to file {filename}: {e}") from e

        logger.debug("%s: %s", "Overwrote" if exists else "Saved form to", path)
        return path

    def load(self, filename: str) -> Any:
        """
        Read a form file.

        Raises:
            PingOneStorageError: If the file is missing or not valid JSON.
        """
        path = self.directory / filename
        logger.debug("Loading form from: %s", path)
        try:
            form_data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise PingOneStorageError(f"Failed to load form from file {filename}: {e}") from e

        if isinstance(form_data, dict):
            logger.debug("Successfully loaded form: %s", form_data.get("name", "Unknown"))
        return form_data
