"""
Module 'broadcasts' (feature-first): diffusions Impact TV et archive vidéo.
"""

from .service import (
    list_broadcasts,
    create_broadcast,
    set_broadcast_live,
    delete_broadcast,
    list_videos,
    create_video,
    delete_video,
)

__all__ = [
    "list_broadcasts",
    "create_broadcast",
    "set_broadcast_live",
    "delete_broadcast",
    "list_videos",
    "create_video",
    "delete_video",
]
