from .quality import (
    NEW_PART_LABEL,
    REPAIRED_PART_LABEL,
    ExtractedRecord,
    Fragment,
)


__all__ = [
    "ExtractedRecord",
    "Fragment",
    "NEW_PART_LABEL",
    "REPAIRED_PART_LABEL",
]
