"""Snapshot Storage Utility

Saves camera snapshot images to local files.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from ..core.config import get_settings
from .datetime_utils import file_timestamp

logger = logging.getLogger(__name__)


def get_snapshot_storage_path(directory: Optional[Union[str, Path]] = None) -> Path:
    """
    Get (and create) the directory snapshots are written to.

    Args:
        directory: Target directory. Defaults to NEST_SNAPSHOT_DIR.

    Returns:
        Path object for the storage directory
    """
    storage_path = Path(directory or get_settings().snapshot_dir)
    storage_path.mkdir(parents=True, exist_ok=True)
    return storage_path


def save_snapshot(
    data: bytes,
    directory: Optional[Union[str, Path]] = None,
    name: Optional[str] = None,
) -> Path:
    """
    Write snapshot bytes as a JPEG file.

    Args:
        data: Image bytes returned by the camera API
        directory: Target directory. Defaults to NEST_SNAPSHOT_DIR.
        name: File name. Defaults to snap_<timestamp>.jpg

    Returns:
        Path of the written file
    """
    if not data:
        raise ValueError("Snapshot is empty")

    image_path = get_snapshot_storage_path(directory) / (name or f"snap_{file_timestamp()}.jpg")
    try:
        image_path.write_bytes(data)
    except OSError as e:
        logger.error(f"Failed to save snapshot to {image_path}: {e}")
        raise

    logger.info(f"Saved snapshot: {image_path} ({len(data)} bytes)")
    return image_path
