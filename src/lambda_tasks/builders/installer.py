"""Installs a function's runtime dependencies into its bundle."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path
from typing import List, Optional

from .. import output
from ..errors import InstallError

MANIFEST = "requirements.txt"
DEV_MANIFEST = "requirements-dev.txt"


class PipInstaller:
    """Runs 'pip install -t' against the requirements files in a directory."""

    def __init__(
        self, python: Optional[str] = None, extra_args: Optional[List[str]] = None
    ):
        self.python = python or sys.executable
        self.extra_args = list(extra_args or [])

    def manifests(self, manifest_dir: Path, production: bool = True) -> List[Path]:
        names = [MANIFEST] if production else [MANIFEST, DEV_MANIFEST]
        paths = [Path(manifest_dir) / name for name in names]
        return [path for path in paths if path.is_file()]

    def install(self, manifest_dir: Path, production: bool = True) -> None:
        """
        Installs the requirements found in manifest_dir into manifest_dir.

        Production mode skips requirements-dev.txt.
        """
        manifest_dir = Path(manifest_dir)
        for manifest in self.manifests(manifest_dir, production):
            output.log(f"Installing dependencies from {manifest}...")
            cmd = [
                self.python,
                "-m",
                "pip",
                "install",
                "--disable-pip-version-check",
                "-r",
                str(manifest),
                "-t",
                str(manifest_dir),
            ] + self.extra_args
            try:
                subprocess.run(cmd, check=True)
            except subprocess.CalledProcessError as e:
                raise InstallError(
                    f"pip exited with status {e.returncode} for {manifest}"
                ) from e
            except OSError as e:
                raise InstallError(f"Could not run {self.python}: {e}") from e
