from .common import (
    ensure_paths_exist,
    exit_with_message,
    format_accounting,
    resolve_output_path,
    write_json_outputs,
)

from .handlers import (
    handle_build,
    handle_estimate,
    handle_validate,
)

__all__ = [
    "ensure_paths_exist",
    "exit_with_message",
    "format_accounting",
    "resolve_output_path",
    "write_json_outputs",
    "handle_build",
    "handle_estimate",
    "handle_validate",
]
