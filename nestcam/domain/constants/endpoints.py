"""Camera API endpoint templates"""

# Standard library imports
from typing import Dict, Optional


class NestEndpoints:
    """Path templates of the nexus camera API, parameterized by the camera id"""
    EVENTS = "/cuepoint/{nest_id}/2"
    LATEST_IMAGE = "/get_image"
    SNAPSHOT = "/event_snapshot/{nest_id}/{snapshot_id}"

    LATEST_IMAGE_WIDTH = 640
    SNAPSHOT_WIDTH = 300
    SNAPSHOT_CROP_TYPE = "timeline"

    @classmethod
    def events_path(cls, nest_id: str) -> str:
        return cls.EVENTS.format(nest_id=nest_id)

    @classmethod
    def latest_image_path(cls) -> str:
        return cls.LATEST_IMAGE

    @classmethod
    def latest_image_params(cls, nest_id: str) -> Dict[str, str]:
        return {"width": str(cls.LATEST_IMAGE_WIDTH), "uuid": nest_id}

    @classmethod
    def snapshot_path(cls, nest_id: str, snapshot_id: str) -> str:
        return cls.SNAPSHOT.format(nest_id=nest_id, snapshot_id=snapshot_id)

    @classmethod
    def snapshot_params(cls) -> Dict[str, str]:
        return {"crop_type": cls.SNAPSHOT_CROP_TYPE, "width": str(cls.SNAPSHOT_WIDTH)}

    @staticmethod
    def events_params(start: Optional[int] = None, end: Optional[int] = None) -> Dict[str, str]:
        """Query parameters for the events window; unset bounds are omitted."""
        params: Dict[str, str] = {}
        if start:
            params["start_time"] = str(start)
        if end:
            params["end_time"] = str(end)
        return params
