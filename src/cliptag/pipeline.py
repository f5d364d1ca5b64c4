import logging

from cliptag.classifier import classify, classify_image
from cliptag.dedup import should_process
from cliptag.factory import build_drafts
from cliptag.history import HistoryStore
from cliptag.models import Entry, Snapshot, SnapshotKind
from cliptag.privacy import apply_policy
from cliptag.settings import SettingsManager

logger = logging.getLogger(__name__)


class ClipboardPipeline:
    """Runs snapshots through dedup, classification and policy into the history."""

    def __init__(self, store: HistoryStore, settings: SettingsManager):
        self._store = store
        self._settings = settings
        self._last_payload: str | None = None

    @property
    def last_payload(self) -> str | None:
        return self._last_payload

    def mark_seen(self, payload: str) -> None:
        """Record a payload we wrote ourselves so it isn't captured again."""
        self._last_payload = payload

    def process(self, snapshot: Snapshot) -> list[Entry]:
        settings = self._settings.current
        if not settings.enabled or not snapshot.payload:
            return []
        if not should_process(snapshot.payload, self._last_payload):
            return []
        self._last_payload = snapshot.payload

        try:
            if snapshot.kind == SnapshotKind.IMAGE:
                classification = classify_image()
            else:
                classification = classify(snapshot.payload)

            policy = apply_policy(classification, snapshot.payload, settings)
            if not policy.persist:
                logger.debug("Skipping %s snapshot (disabled in settings)", classification.category.value)
                return []

            drafts = build_drafts(classification, policy, snapshot.payload, settings, snapshot.preview)
            return [self._store.insert(draft) for draft in drafts]
        except Exception:
            logger.exception("Error processing clipboard snapshot")
            return []
