#!/usr/bin/env python3
"""
Main script for PingOne Forms export and import.

Runs the interactive workflow from a source checkout without installing
the package:

Usage:
    python3 main.py                 # prompts for operation and environment
    python3 main.py export --env "Dev US"
    python3 main.py import --forms-dir ./forms --verbose

Configuration:
    environments.json (or PINGONE_FORMS_ENVIRONMENTS) lists the environments;
    see environments.example.json.
"""

import sys

from pingone_forms.cli import main

if __name__ == "__main__":
    sys.exit(main())
