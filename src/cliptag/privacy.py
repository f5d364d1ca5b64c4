"""Privacy policy: what gets saved, and how sensitive content is stored at rest."""

import base64
import binascii

from cliptag.models import Category, Classification, PolicyResult
from cliptag.settings import Settings

REDACTED_PREVIEW = "•" * 12


class DecryptionError(ValueError):
    """Stored content could not be decoded back to text."""


def encrypt(text: str) -> str:
    """Reversibly encode text for storage.

    This is base64 over UTF-8: it keeps passwords out of plain sight in the
    history file, but it is not a cipher.
    """
    return base64.b64encode(text.encode("utf-8", errors="surrogatepass")).decode("ascii")


def decrypt(encoded: str) -> str:
    try:
        return base64.b64decode(encoded.encode("ascii"), validate=True).decode(
            "utf-8", errors="surrogatepass"
        )
    except (binascii.Error, UnicodeError) as exc:
        raise DecryptionError("content is not a valid encoded value") from exc


def should_save(category: Category, settings: Settings) -> bool:
    toggles = {
        Category.TEXT: settings.save_text,
        Category.CODE: settings.save_code,
        Category.LINK: settings.save_links,
        Category.EMAIL: settings.save_emails,
        Category.PASSWORD: settings.save_passwords,
        Category.IMAGE: settings.save_images,
    }
    # Phone and color have no toggle of their own
    return toggles.get(category, True)


def apply_policy(classification: Classification, raw: str, settings: Settings) -> PolicyResult:
    """Decide whether and how a classified payload is stored.

    Args:
        classification: Result of classifying the payload.
        raw: The raw clipboard payload.
        settings: Current user settings.

    Returns:
        PolicyResult with the content to store; encrypted only for passwords
        when encrypt_passwords is on.
    """
    if not should_save(classification.category, settings):
        return PolicyResult(persist=False, content=raw)

    if classification.category == Category.PASSWORD and settings.encrypt_passwords:
        return PolicyResult(persist=True, content=encrypt(raw), is_encrypted=True)

    return PolicyResult(persist=True, content=raw)
