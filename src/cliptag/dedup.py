def should_process(payload: str, last_seen: str | None) -> bool:
    """Single-slot gate: only an exact repeat of the previous payload is suppressed."""
    return payload != last_seen
