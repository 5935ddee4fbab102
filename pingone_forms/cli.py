"""
Command line entry point for exporting and importing PingOne forms.

Workflow:
1. Loads and validates the configured environments
2. Asks for the operation (export or import) and the environment
3. Export: lists remote forms, asks which to export, saves cleaned JSON files
4. Import: scans the forms directory, asks which files to import and the
   final name of each form, uploads them
5. Prints a summary; failed forms are listed without stopping the batch

Usage:
    pingone-forms [export|import] [--env NAME] [--verbose]
"""

import argparse
import locale
import logging
import sys
from typing import List, Optional, Sequence

from pingone_forms import __version__
from pingone_forms.core.auth import PingOneAuthenticator
from pingone_forms.core.config import AppConfig, EnvironmentConfig
from pingone_forms.core.exceptions import PingOneClientError, PingOneConfigurationError
from pingone_forms.forms.api import FormsManager
from pingone_forms.forms.transfer import TransferResult, export_forms, import_forms
from pingone_forms.logging_utils import setup_logging
from pingone_forms.prompts import Prompter
from pingone_forms.storage import FormStore

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pingone-forms",
        description="Export and import PingOne Forms between environments",
    )
    parser.add_argument("mode", nargs="?", choices=["export", "import"],
                        help="Operation to run (prompted for when omitted)")
    parser.add_argument("--env", dest="environment",
                        help="Name of the source/target environment (prompted for when omitted)")
    parser.add_argument("--config", help="Path of the environments file (default: environments.json)")
    parser.add_argument("--forms-dir", help="Directory holding form JSON files (default: ./forms)")
    parser.add_argument("--log-file", help="Also write a debug log to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def section(title: str) -> None:
    print()
    print("=" * 60)
    print(title)
    print("=" * 60)


def find_environment(environments: Sequence[EnvironmentConfig], name: str) -> EnvironmentConfig:
    for environment in environments:
        if environment.name == name:
            return environment
    available = ", ".join(env.name for env in environments)
    raise PingOneConfigurationError(f"Unknown environment: {name}. Available: {available}")


def print_failures(result: TransferResult) -> None:
    if result.failed:
        print(f"\n✗ Failed ({len(result.failed)}):")
        for label, error in result.failed:
            print(f"  ✗ {label}: {error}")


def handle_export(
    manager: FormsManager,
    environment: EnvironmentConfig,
    store: FormStore,
    prompter: Prompter,
) -> int:
    """Run an export from environment into the forms directory."""
    section("Export Forms")
    print("Loading forms from PingOne...")
    forms = manager.list_forms(environment)

    if not forms:
        print("No forms found in the selected environment.")
        return 0

    print(f"Found {len(forms)} form(s) in {environment.name}")
    selected = prompter.select_forms(forms)
    if not selected:
        print("No forms selected. Exiting.")
        return 0

    section("Downloading Forms")
    print(f"Downloading {len(selected)} form(s) from {environment.name}...")
    result = export_forms(manager, environment, selected, store, prompter.confirm_overwrite)

    section("Export Complete")
    print(f"Environment: {environment.name}")
    print(f"\nDownloaded Forms ({len(result.successful)}):")
    for name, path in result.successful:
        print(f"  ✓ {name} → {path}")
    for name in result.skipped:
        print(f"  - {name} (skipped, file kept)")
    print_failures(result)
    print(f"\nForms saved to {store.directory}/ directory")
    return 1 if result.has_failures else 0


def handle_import(
    manager: FormsManager,
    environment: EnvironmentConfig,
    store: FormStore,
    prompter: Prompter,
) -> int:
    """Run an import from the forms directory into environment."""
    section("Import Forms")
    local_files = store.scan()

    if not local_files:
        print(f"No JSON files found in {store.directory} directory.")
        print(f"Please ensure the {store.directory} directory exists and contains form JSON files.")
        return 0

    print(f"Found {len(local_files)} form file(s) in {store.directory} directory")
    selected = prompter.select_local_forms(local_files)
    if not selected:
        print("No forms selected. Exiting.")
        return 0

    section("Starting Import")
    print(f"Importing {len(selected)} form(s) to {environment.name}...")
    result = import_forms(manager, environment, selected, store, prompter.prompt_for_form_names)

    section("Import Complete")
    print(f"Target Environment: {environment.name}")
    if result.successful:
        print(f"\n✓ Successfully Imported ({len(result.successful)}):")
        for filename, form_name in result.successful:
            print(f"  ✓ {filename} → {form_name}")
    print_failures(result)
    print("\nImport operation completed.")
    return 1 if result.has_failures else 0


def run(
    args: argparse.Namespace,
    prompter: Optional[Prompter] = None,
    manager: Optional[FormsManager] = None,
) -> int:
    """Run the CLI workflow for parsed arguments; returns the exit code."""
    prompter = prompter or Prompter()

    print("PingOne Forms CLI")
    print("Export and import PingOne Forms between environments")

    try:
        config = AppConfig.from_env(
            environments_file=args.config,
            forms_dir=args.forms_dir,
            log_file=args.log_file,
        )
        environments = config.load_environments()
        logger.debug("Loaded %d environment(s)", len(environments))
        if not environments:
            raise PingOneConfigurationError("No environments found in configuration")

        mode = args.mode or prompter.select_mode()
        logger.debug("Selected mode: %s", mode)
        if args.environment:
            environment = find_environment(environments, args.environment)
        else:
            environment = prompter.select_environment(environments, mode)
        logger.debug("Selected environment: %s", environment.name)
    except PingOneConfigurationError as e:
        print(f"✗ Configuration error: {e}")
        return 1

    if manager is None:
        authenticator = PingOneAuthenticator(timeout=config.auth_timeout)
        manager = FormsManager(authenticator, timeout=config.api_timeout)
    store = FormStore(config.forms_dir)

    try:
        if mode == "export":
            return handle_export(manager, environment, store, prompter)
        return handle_import(manager, environment, store, prompter)
    except PingOneClientError as e:
        print(f"✗ Error: {e}")
        return 1


def use_system_collation() -> None:
    """Sort form names with the operator's locale instead of the C locale."""
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as e:
        logger.debug("Keeping default collation: %s", e)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(verbose=args.verbose, log_file=args.log_file)
    use_system_collation()
    try:
        return run(args)
    except KeyboardInterrupt:
        print("\nAborted.")
        return 130
    except EOFError:
        print("\nInput closed. Aborted.")
        return 1


if __name__ == "__main__":
    sys.exit(main())
