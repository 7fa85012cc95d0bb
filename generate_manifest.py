#!/usr/bin/env python3
"""
Manifest generator for the revision-text CLI.

Introspects the Typer app and writes src/revision_text/manifest.json from
command docstrings and parameter metadata.

Usage:
    python generate_manifest.py

Run before building the package to update manifest.json.
"""

import inspect
import json
import sys
from pathlib import Path
from typing import Any

import typer


SCRIPT_DIR = Path(__file__).parent
SRC_DIR = SCRIPT_DIR / "src" / "revision_text"
MANIFEST_PATH = SRC_DIR / "manifest.json"

# Terminal-only switches, not useful to an agent caller
SKIPPED_PARAMS = {"human", "verbose"}


def introspect_parameter(param_name: str, param: inspect.Parameter) -> dict[str, Any] | None:
    """Extract parameter metadata from a Typer parameter."""
    if param_name in SKIPPED_PARAMS or param.default is inspect.Parameter.empty:
        return None

    info = param.default
    class_name = info.__class__.__name__
    description = getattr(info, "help", "") or ""

    if "Argument" in class_name:
        return {
            "name": param_name,
            "type": "argument",
            "required": getattr(info, "default", ...) is ...,
            "description": description,
        }

    if "Option" in class_name:
        default_val = getattr(info, "default", ...)
        cli_name = param_name
        for decl in getattr(info, "param_decls", None) or ():
            if decl.startswith("--"):
                cli_name = decl[2:]
                break

        result = {
            "name": cli_name,
            "type": "flag" if isinstance(default_val, bool) else "option",
            "required": default_val is ...,
            "description": description,
        }
        if default_val is not ... and default_val is not None and default_val is not False:
            result["default"] = default_val
        return result

    return None


def introspect_typer_app(app: typer.Typer, name: str, command: str) -> dict[str, Any]:
    """Introspect a Typer app and extract all command metadata."""
    actions = []
    for cmd_info in app.registered_commands:
        callback = cmd_info.callback
        if callback is None:
            continue

        docstring = inspect.getdoc(callback) or ""
        parameters = [
            info
            for param_name, param in inspect.signature(callback).parameters.items()
            if (info := introspect_parameter(param_name, param))
        ]
        actions.append({
            "name": cmd_info.name or callback.__name__.replace("_", "-"),
            "description": docstring.split("\n")[0],
            "parameters": parameters,
        })

    return {
        "name": name,
        "type": "cli",
        "description": (app.info.help if app.info else "") or "",
        "command": command,
        "actions": actions,
        "documentation": {
            "usage": f"{command} <command> [options]",
            "examples": [
                f"{command} prepare body.html",
                f"{command} prepare body.txt --format text --human",
                f"{command} check reply.txt",
            ],
        },
    }


def main():
    """Generate manifest.json from CLI introspection."""
    sys.path.insert(0, str(SRC_DIR.parent))

    try:
        from revision_text.main import app
    except ImportError as e:
        print(f"Error: Could not import CLI app: {e}", file=sys.stderr)
        print("Make sure dependencies are installed: pip install -e .", file=sys.stderr)
        return 1

    print("Introspecting CLI app...")
    manifest = introspect_typer_app(app, name="revision-text", command="revision-text")

    print(f"Found {len(manifest['actions'])} commands")
    print(f"Writing {MANIFEST_PATH}...")
    MANIFEST_PATH.write_text(json.dumps(manifest, indent=2) + "\n")

    print("Done!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
