import base64
import re
from typing import Optional

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(;[\w=-]+)*;base64,", re.IGNORECASE)


def encode_image(raw: bytes, mime_type: str = "image/jpeg") -> str:
    """Bytes -> data URL, the form images are persisted in"""
    encoded = base64.b64encode(raw).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def strip_data_url_prefix(image: str) -> str:
    """Drop a ``data:<mime>;base64,`` prefix, leaving raw base64"""
    return _DATA_URL_RE.sub("", image.strip(), count=1)


def data_url_mime(image: str, default: str = "image/jpeg") -> str:
    match = _DATA_URL_RE.match(image.strip())
    if match and match.group("mime"):
        return match.group("mime").lower()
    return default


def is_data_url(image: Optional[str]) -> bool:
    return bool(image) and bool(_DATA_URL_RE.match(image.strip()))
