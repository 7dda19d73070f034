"""Deterministic ZIP creation for Lambda bundles."""

from __future__ import annotations

import os
import zipfile
from pathlib import Path

from .. import output
from ..errors import ArchiveError


class ZipExporter:
    """
    Creates deterministic ZIP files from a bundle directory.

    A ZIP is deterministic if its contents and their metadata (timestamps, permissions)
    are identical for every run on the same bundle, so re-deploying unchanged code
    uploads a byte-identical artifact.
    """

    def __init__(self, date_time=(1980, 1, 1, 0, 0, 0)):
        self.date_time = date_time

    def archive(self, src_dir: Path, archive_name: str, dest_dir: Path) -> Path:
        """
        Compresses every file under src_dir, dotfiles included, into dest_dir/archive_name.

        Entries are sorted, stamped with a fixed date and keep their Unix
        permission bits, which Lambda needs for bundled executables.
        """
        src_dir = Path(src_dir)
        if not src_dir.is_dir():
            raise ArchiveError(f"Nothing to archive: {src_dir} does not exist")

        dest_zip = Path(dest_dir) / archive_name
        dest_zip.parent.mkdir(parents=True, exist_ok=True)

        with zipfile.ZipFile(dest_zip, "w", zipfile.ZIP_DEFLATED) as zf:
            for root, dirs, files in os.walk(src_dir):
                dirs.sort()
                files.sort()

                for file in files:
                    file_path = Path(root) / file
                    arcname = file_path.relative_to(src_dir).as_posix()

                    zinfo = zipfile.ZipInfo(arcname, date_time=self.date_time)
                    st = os.stat(file_path)
                    zinfo.external_attr = (st.st_mode & 0xFFFF) << 16
                    zinfo.compress_type = zipfile.ZIP_DEFLATED

                    with open(file_path, "rb") as f:
                        zf.writestr(zinfo, f.read())

        output.log(f"Exported ZIP: {dest_zip}")
        return dest_zip
