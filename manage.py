#!/usr/bin/env python
"""
Command line entry point for the Patient 360 administration backend.

Besides Django's built-in commands this exposes the project commands
``load_catalogs``, ``ensure_admin`` and ``check_account_audit``.
"""
import os
import sys


def main() -> None:
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'patient360.settings')
    try:
        from django.core.management import execute_from_command_line  # type: ignore
    except ImportError as exc:
        raise ImportError(
            "Django is not importable; install the project with "
            "`pip install -e .` inside an activated virtual environment."
        ) from exc
    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()
