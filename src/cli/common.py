from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import Any, Iterable


def _json_dump(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def resolve_output_path(path_value: str | Path | None) -> Path | None:
    if path_value is None:
        return None
    return Path(path_value).expanduser().resolve()


def ensure_paths_exist(paths: Iterable[Path | None]) -> None:
    for path in paths:
        if path is None:
            continue
        path.parent.mkdir(parents=True, exist_ok=True)


def write_json_outputs(
    *,
    payload: Any,
    out_path: str | Path | None = None,
    emit_stdout: bool = False,
) -> Path | None:
    """Write ``payload`` as pretty JSON to ``out_path`` and/or stdout."""
    out_resolved = resolve_output_path(out_path)

    if out_resolved is not None:
        ensure_paths_exist([out_resolved])
        out_resolved.write_text(_json_dump(payload), encoding="utf-8")

    if emit_stdout:
        sys.stdout.write(_json_dump(payload))
        sys.stdout.flush()

    return out_resolved


def format_accounting(details: dict) -> str:
    """One-line page summary for terminal output.

    Examples:
        >>> format_accounting({"pageCount": 8, "fullPageCount": 8, "bPages": 2, "cPages": 6})
        '8 pages (full 8): 6 colour, 2 grayscale'
    """
    return (
        f"{details['pageCount']} pages (full {details['fullPageCount']}): "
        f"{details['cPages']} colour, {details['bPages']} grayscale"
    )


def exit_with_message(message: str, *, code: int = 0) -> None:
    stream = sys.stderr if code else sys.stdout
    stream.write(message + os.linesep)
    stream.flush()
    raise SystemExit(code)
