"""
Zip archive of the exported policy directory.

Creates a single deflated archive of every file under the policies directory,
stored relative to the directory's parent so that entries read
``policies/<name>.json``. An existing archive of the same name is replaced.
"""

import zipfile
from pathlib import Path
from typing import Optional, Union

from policy_export import utils


def directory_has_entries(directory: Union[str, Path]) -> bool:
    """Return True if directory exists and contains at least one entry."""
    path = Path(directory)
    if not path.is_dir():
        return False
    return any(path.iterdir())


def create_archive(source_dir: Union[str, Path], archive_path: Union[str, Path]) -> Optional[Path]:
    """
    Create a zip archive of source_dir.

    Args:
        source_dir: Directory to archive (the policies directory)
        archive_path: Destination .zip file

    Returns:
        Path of the archive, or None if the directory was empty or archiving failed.
    """
    source = Path(source_dir)
    destination = Path(archive_path)

    if not directory_has_entries(source):
        utils.log_error(f"No policy documents found in {source}, skipping zip creation")
        return None

    tmp_path = destination.with_name(f".{destination.name}.tmp")
    excluded = {destination.resolve(), tmp_path.resolve()}
    files = sorted(p for p in source.rglob("*") if p.is_file() and p.resolve() not in excluded)
    base = source.resolve().parent

    utils.log_info(f"Found {len(files)} file(s) to archive.")

    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(tmp_path, 'w', zipfile.ZIP_DEFLATED) as zipf:
            for file in files:
                arcname = file.resolve().relative_to(base).as_posix()
                zipf.write(file, arcname=arcname)
                utils.log_debug(f"  Added: {arcname}")
        tmp_path.replace(destination)

    except (OSError, zipfile.BadZipFile) as e:
        utils.log_error("Failed to create archive", e)
        try:
            tmp_path.unlink()
        except OSError:
            pass
        return None

    utils.log_success(f"Created zip archive: {destination}")
    return destination
