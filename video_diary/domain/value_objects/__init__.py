"""Domain value objects."""

from video_diary.domain.value_objects.user_segment import (
    DEFAULT_SEGMENT,
    current_segment_var,
    get_current_segment,
    resolve_segment,
    sanitize_path_component,
    sanitize_segment,
    set_current_segment,
)

__all__ = [
    "DEFAULT_SEGMENT",
    "current_segment_var",
    "get_current_segment",
    "set_current_segment",
    "resolve_segment",
    "sanitize_segment",
    "sanitize_path_component",
]
