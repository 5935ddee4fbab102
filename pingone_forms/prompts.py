"""
Interactive prompts for the forms CLI.

Plain console prompts: numbered menus for single and multiple selection,
free-text prompts with validation, and yes/no confirmations. Input and
output functions are injectable so the prompts can be driven from tests.
"""

import logging
from typing import Any, Callable, Dict, List, Sequence, Tuple, TypeVar

from pingone_forms.core.config import EnvironmentConfig
from pingone_forms.forms.api import FormSummary
from pingone_forms.storage import LocalFormFile

logger = logging.getLogger(__name__)

T = TypeVar("T")

MODES = (("export", "Export PingOne Forms"), ("import", "Import PingOne Forms"))
MAX_FORM_NAME_LENGTH = 100


def parse_selection(text: str, count: int) -> List[int]:
    """
    Parse a multi-selection answer into zero-based indexes.

    Accepts "all", comma or space separated numbers, and ranges such as
    "2-4". Numbers are one-based. Order of first appearance is kept and
    duplicates are dropped.

    Raises:
        ValueError: If the answer is empty, malformed or out of range.

    Examples:
        >>> parse_selection("3, 1-2", 4)
        [2, 0, 1]
    """
    text = text.strip().lower()
    if not text:
        raise ValueError("Please select at least one form.")
    if text in ("all", "*"):
        return list(range(count))

    indexes: List[int] = []
    for token in text.replace(",", " ").split():
        if "-" in token:
            start_text, _, end_text = token.partition("-")
            start, end = int(start_text), int(end_text)
            if start > end:
                raise ValueError(f"Invalid range: {token}")
            numbers = range(start, end + 1)
        else:
            numbers = [int(token)]
        for number in numbers:
            if not 1 <= number <= count:
                raise ValueError(f"Selection out of range: {number}")
            if number - 1 not in indexes:
                indexes.append(number - 1)
    return indexes


def validate_form_name(name: str) -> str:
    """Return the trimmed name, or raise ValueError if it is unusable."""
    name = name.strip()
    if not name:
        raise ValueError("Form name cannot be empty.")
    if len(name) > MAX_FORM_NAME_LENGTH:
        raise ValueError(f"Form name cannot exceed {MAX_FORM_NAME_LENGTH} characters.")
    return name


class Prompter:
    """
    Console prompts used by the CLI.

    Attributes:
        input_func: Reads one answer; receives the prompt text.
        output: Writes one line to the operator.
    """

    def __init__(
        self,
        input_func: Callable[[str], str] = input,
        output: Callable[[str], Any] = print,
    ):
        self.input_func = input_func
        self.output = output

    def _choose_one(self, message: str, labels: Sequence[str]) -> int:
        self.output(message)
        for number, label in enumerate(labels, 1):
            self.output(f"  {number}) {label}")
        while True:
            answer = self.input_func(f"Enter a number [1-{len(labels)}]: ").strip()
            if answer.isdigit() and 1 <= int(answer) <= len(labels):
                return int(answer) - 1
            self.output("Please enter one of the listed numbers.")

    def _choose_many(self, message: str, items: Sequence[T], label: Callable[[T], str]) -> List[T]:
        self.output(message)
        for number, item in enumerate(items, 1):
            self.output(f"  {number}) {label(item)}")
        while True:
            answer = self.input_func("Enter numbers (e.g. 1,3,5-7) or 'all': ")
            try:
                return [items[i] for i in parse_selection(answer, len(items))]
            except ValueError as e:
                self.output(str(e))

    def select_mode(self) -> str:
        """Ask whether to export or import."""
        index = self._choose_one("What would you like to do?", [label for _, label in MODES])
        return MODES[index][0]

    def select_environment(self, environments: Sequence[EnvironmentConfig], mode: str) -> EnvironmentConfig:
        """Ask for the source (export) or target (import) environment."""
        ordered = sorted(environments, key=lambda env: env.name.lower())
        message = "Select source environment:" if mode == "export" else "Select target environment:"
        return ordered[self._choose_one(message, [env.name for env in ordered])]

    def select_forms(self, forms: Sequence[FormSummary]) -> List[FormSummary]:
        """Ask which remote forms to export."""
        if not forms:
            self.output("No forms found in the selected environment.")
            return []
        return self._choose_many("Select forms to export:", forms, lambda form: form.name)

    def select_local_forms(self, local_files: Sequence[LocalFormFile]) -> List[LocalFormFile]:
        """Ask which local files to import; invalid JSON files are listed and left out."""
        invalid = [f for f in local_files if not f.is_valid]
        valid = [f for f in local_files if f.is_valid]

        if invalid:
            self.output("Warning: Found invalid JSON files:")
            for local_file in invalid:
                self.output(f"  - {local_file.filename}: {local_file.error}")
            self.output("")

        if not valid:
            self.output("No valid JSON files found in the forms directory.")
            return []
        return self._choose_many("Select forms to import:", valid, lambda f: f.name)

    def prompt_for_form_name(self, current_name: str, filename: str) -> str:
        """Ask for the final name of a form; an empty answer keeps current_name."""
        while True:
            answer = self.input_func(f'Enter name for "{filename}" [{current_name}]: ')
            try:
                return validate_form_name(answer or str(current_name))
            except ValueError as e:
                self.output(str(e))

    def prompt_for_form_names(
        self, loaded: Sequence[Tuple[LocalFormFile, Dict[str, Any]]]
    ) -> Dict[str, str]:
        """Ask for the final name of every form about to be imported."""
        logger.debug("Prompting for names for %d forms", len(loaded))
        self.output("")
        self.output("=== Configure Form Names ===")
        self.output("You can customize the name for each form before import:")
        self.output("")

        names = {}
        for local_file, form_data in loaded:
            current_name = str(form_data.get("name") or local_file.name)
            names[local_file.filename] = self.prompt_for_form_name(current_name, local_file.filename)
            logger.debug('Set name for %s: "%s"', local_file.filename, names[local_file.filename])
        return names

    def confirm_overwrite(self, filename: str) -> bool:
        """Ask before replacing an existing file; the default is no."""
        answer = self.input_func(f'File "{filename}" already exists. Overwrite? [y/N]: ')
        return answer.strip().lower() in ("y", "yes")
