"""Configuration scaffold generation helpers."""

from __future__ import annotations

from pathlib import Path

DEFAULT_CONFIG_FILENAME = "aecu.yaml"

_CONFIG_SCAFFOLD_TEMPLATE = """# Configuration template for aecu.
# Replace every <REQUIRED> placeholder before running files, execute or run.

repository:
  # filesystem: scripts and history live below repository.root
  # memory: empty in-process repository, useful for trying out the CLI
  type: filesystem
  # Relative paths are resolved against the directory of this file.
  root: "<REQUIRED>"

history:
  # Absolute repository path below which execution history entries are stored.
  root: "/var/aecu"

# Active run modes. Folders named like `scripts.author;publish.dev` only apply when one of
# their `.`-joined run-mode combinations is fully active.
run_modes:
  - author

interpreter:
  # Command used to run each script; the script file path is appended.
  command:
    - groovy
"""


def build_placeholder_configuration() -> str:
    """Build a YAML configuration template with placeholders and inline guidance."""
    return _CONFIG_SCAFFOLD_TEMPLATE


def write_placeholder_configuration(output_path: Path | str) -> Path:
    """Write the placeholder configuration template to the requested output path.

    Args:
      output_path: Destination file path for the scaffold.

    Returns:
      The resolved destination path.

    Raises:
      FileExistsError: If the destination file already exists.
      OSError: If writing the scaffold fails.
    """
    destination = Path(output_path)
    if destination.exists():
        raise FileExistsError(f"Configuration file already exists: {destination.resolve()}")
    destination.write_text(build_placeholder_configuration(), encoding="utf-8")
    return destination.resolve()
