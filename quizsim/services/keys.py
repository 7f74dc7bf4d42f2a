import re
from typing import Optional

PART_SEP = "__"
_NON_ALNUM = re.compile(r"[\W_]+")

def normalize(text: Optional[str]) -> str:
    """Lowercase, trim, collapse non-alphanumeric runs to '_'. Idempotent."""
    if not text:
        return ""
    return _NON_ALNUM.sub("_", text.lower().strip()).strip("_")

def storage_key(topic: str, subtopic: Optional[str] = None,
                grade: Optional[str] = None, curriculum: Optional[str] = None) -> str:
    parts = [normalize(p) for p in (topic, subtopic, grade, curriculum)]
    if not parts[0]:
        raise ValueError(f"topic {topic!r} has no usable characters")
    return PART_SEP.join(p for p in parts if p)

def humanize(part: str) -> str:
    return part.replace("_", " ")
