"""
Optional on-disk ARN manifest.

The pipeline passes ARNs between stages in memory. When a manifest path is
configured the listing is also written out, one ARN per line, and removed
again at the end of the run.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional, Union

from policy_export.utils import atomic_write_text

logger = logging.getLogger(__name__)


def write_manifest(path: Union[str, Path], arns: Iterable[str]) -> Path:
    """Write newline-delimited ARNs to path and return it."""
    manifest_path = Path(path)
    lines = list(arns)
    atomic_write_text(manifest_path, "".join(f"{arn}\n" for arn in lines))
    logger.debug("Wrote %d ARN(s) to manifest %s", len(lines), manifest_path)
    return manifest_path


def remove_manifest(path: Optional[Union[str, Path]]) -> bool:
    """
    Delete the manifest file. Best-effort: a missing file is not an error.

    Returns:
        bool: True if a file was removed
    """
    if path is None:
        return False

    manifest_path = Path(path)
    try:
        manifest_path.unlink()
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.warning("Could not remove manifest %s: %s", manifest_path, e)
        return False

    logger.debug("Removed manifest %s", manifest_path)
    return True
