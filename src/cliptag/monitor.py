import logging

from cliptag.config import MAX_IMAGE_SIZE, MAX_TEXT_SIZE
from cliptag.models import Category, Entry, Snapshot, SnapshotKind
from cliptag.pipeline import ClipboardPipeline
from cliptag.utils import from_data_url, get_image_dimensions, to_data_url

logger = logging.getLogger(__name__)

# Uniform type identifiers behind NSPasteboardTypeString / PNG / TIFF
TYPE_STRING = "public.utf8-plain-text"
TYPE_PNG = "public.png"
TYPE_TIFF = "public.tiff"

IMAGE_TYPES = {TYPE_PNG: "image/png", TYPE_TIFF: "image/tiff"}


def general_pasteboard():
    from AppKit import NSPasteboard

    return NSPasteboard.generalPasteboard()


class ClipboardMonitor:
    """Polls the system pasteboard and feeds new content to the pipeline."""

    def __init__(self, pipeline: ClipboardPipeline, pasteboard=None):
        self._pipeline = pipeline
        self._pasteboard = pasteboard if pasteboard is not None else general_pasteboard()
        self._last_change_count = self._pasteboard.changeCount()

    def check_clipboard(self) -> bool:
        current_count = self._pasteboard.changeCount()
        if current_count == self._last_change_count:
            return False

        self._last_change_count = current_count

        try:
            snapshot = self._read_clipboard()
            if snapshot is None:
                return False
            return bool(self._pipeline.process(snapshot))
        except Exception:
            logger.exception("Error reading clipboard")
            return False

    def sync_change_count(self) -> None:
        self._last_change_count = self._pasteboard.changeCount()

    def _read_clipboard(self) -> Snapshot | None:
        types = self._pasteboard.types()
        if types is None:
            return None

        if TYPE_STRING in types:
            snapshot = self._read_text()
            if snapshot:
                return snapshot

        for img_type in (TYPE_PNG, TYPE_TIFF):
            if img_type in types:
                snapshot = self._read_image(img_type)
                if snapshot:
                    return snapshot

        return None

    def _read_text(self) -> Snapshot | None:
        text = self._pasteboard.stringForType_(TYPE_STRING)
        if not text:
            return None

        text = str(text)
        if len(text.encode("utf-8")) > MAX_TEXT_SIZE:
            logger.warning("Text too large, skipping")
            return None

        return Snapshot(kind=SnapshotKind.TEXT, payload=text)

    def _read_image(self, img_type: str) -> Snapshot | None:
        data = self._pasteboard.dataForType_(img_type)
        if data is None:
            return None

        img_bytes = bytes(data)
        if len(img_bytes) > MAX_IMAGE_SIZE:
            logger.warning("Image too large (%d bytes), skipping", len(img_bytes))
            return None

        width, height = get_image_dimensions(img_bytes)
        preview = f"[Image: {width}x{height}]" if width > 0 else "[Image]"
        return Snapshot(
            kind=SnapshotKind.IMAGE,
            payload=to_data_url(img_bytes, IMAGE_TYPES[img_type]),
            preview=preview,
        )

    def write_back(self, entry: Entry, content: str) -> bool:
        """Place an entry's content back on the pasteboard without re-capturing it."""
        if not content:
            return False

        if entry.category == Category.IMAGE:
            decoded = from_data_url(content)
            if decoded is None:
                logger.warning("Image entry %s has no decodable data", entry.id)
                return False
            mime_type, img_bytes = decoded
            from Foundation import NSData

            img_type = TYPE_TIFF if mime_type == "image/tiff" else TYPE_PNG
            self._pasteboard.clearContents()
            self._pasteboard.setData_forType_(NSData.dataWithBytes_length_(img_bytes, len(img_bytes)), img_type)
        else:
            self._pasteboard.clearContents()
            self._pasteboard.setString_forType_(content, TYPE_STRING)

        self.sync_change_count()
        self._pipeline.mark_seen(content)
        return True
