import base64
import binascii
import struct
from datetime import datetime

from cliptag.config import DATA_DIR, EXPORT_DIR

DATA_URL_PREFIX = "data:"


def truncate_text(text: str, max_len: int) -> str:
    single_line = " ".join(text.split())
    if len(single_line) <= max_len:
        return single_line
    return single_line[: max_len - 3] + "..."


def ensure_dirs() -> None:
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    EXPORT_DIR.mkdir(parents=True, exist_ok=True)


def get_image_dimensions(png_bytes: bytes) -> tuple[int, int]:
    if len(png_bytes) < 24 or png_bytes[:8] != b"\x89PNG\r\n\x1a\n":
        return (0, 0)
    width = struct.unpack(">I", png_bytes[16:20])[0]
    height = struct.unpack(">I", png_bytes[20:24])[0]
    return (width, height)


def to_data_url(data: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def from_data_url(url: str) -> tuple[str, bytes] | None:
    """Split a base64 data URL into (mime_type, bytes); None if it isn't one."""
    if not url.startswith(DATA_URL_PREFIX) or ";base64," not in url:
        return None
    header, _, payload = url.partition(";base64,")
    try:
        return header[len(DATA_URL_PREFIX):], base64.b64decode(payload, validate=True)
    except binascii.Error:
        return None


def relative_time(then: datetime, now: datetime | None = None) -> str:
    now = now or datetime.now()
    seconds = (now - then).total_seconds()
    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return f"{int(seconds // 60)}m ago"
    if seconds < 86400:
        return f"{int(seconds // 3600)}h ago"
    if seconds < 604800:
        return f"{int(seconds // 86400)}d ago"
    return then.strftime("%Y-%m-%d")
