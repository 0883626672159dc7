from cli.app import main
from cli.rich_display import (
    console,
    print_error_panel,
    print_json_panel,
    print_result_panel,
    print_start_panel,
    setup_logging,
)

__all__ = [
    "main",
    "console",
    "print_error_panel",
    "print_json_panel",
    "print_result_panel",
    "print_start_panel",
    "setup_logging",
]
