from __future__ import annotations

"""Template initializer.

CONTRACT
- Inputs: Target directory
- Outputs (required):
  - Writes .viewgate/instances.yaml
- Invariants:
  - Creates .viewgate directory if missing
  - Does not overwrite existing files (by default)
- Failure:
  - Raises OSError on permission issues
"""

from pathlib import Path

from .util.paths import copy_template, ensure_dir


def write_templates(root: Path, force: bool = False) -> Path:
    cfg_dir = root / ".viewgate"
    ensure_dir(cfg_dir)

    dest = cfg_dir / "instances.yaml"
    copy_template("instances.yaml", dest, overwrite=force)
    return dest
