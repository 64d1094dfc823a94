from __future__ import annotations

"""Path utilities.

CONTRACT
- Inputs: template names or paths
- Outputs:
  - ensure_dir() creates directory tree
  - copy_template() writes bundled resource to dest, returns True if written
- Invariants:
  - copy_template never overwrites existing files (unless `overwrite=True`)
- Failure:
  - copy_template raises FileNotFoundError if resource missing
"""

import importlib.resources
from pathlib import Path

from .. import templates


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def copy_template(template_name: str, dest: Path, overwrite: bool = False) -> bool:
    # Only write if missing (avoid clobber) unless forced.
    if dest.exists() and not overwrite:
        return False
    resource = importlib.resources.files(templates).joinpath(template_name)
    dest.write_text(resource.read_text(encoding="utf-8"), encoding="utf-8")
    return True
