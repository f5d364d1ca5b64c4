from cliptag.classifier import extract_domain
from cliptag.config import PREVIEW_LENGTH
from cliptag.models import Category, Classification, EntryDraft, PolicyResult
from cliptag.privacy import REDACTED_PREVIEW, should_save
from cliptag.settings import Settings

IMAGE_PREVIEW = "[Image]"


def make_preview(text: str, category: Category, image_preview: str | None = None) -> str:
    if category == Category.PASSWORD:
        return REDACTED_PREVIEW
    if category == Category.IMAGE:
        return image_preview or IMAGE_PREVIEW
    if len(text) <= PREVIEW_LENGTH:
        return text
    return text[:PREVIEW_LENGTH] + "..."


def build_drafts(
    classification: Classification,
    policy: PolicyResult,
    raw: str,
    settings: Settings,
    image_preview: str | None = None,
) -> list[EntryDraft]:
    """Turn a classified, policy-checked payload into entry drafts.

    Code that mentions URLs also yields one Link draft per distinct URL, placed
    after the code draft.
    """
    category = classification.category
    drafts = [
        EntryDraft(
            category=category,
            content=policy.content,
            preview=make_preview(raw, category, image_preview),
            tags=list(classification.tags),
            metadata=dict(classification.metadata),
            is_encrypted=policy.is_encrypted,
        )
    ]

    urls = classification.metadata.get("urls") or []
    if category != Category.CODE or not urls or not should_save(Category.LINK, settings):
        return drafts

    for url in dict.fromkeys(urls):
        drafts.append(
            EntryDraft(
                category=Category.LINK,
                content=url,
                preview=make_preview(url, Category.LINK),
                tags=["link", "extracted-from-code"],
                metadata={"extracted_from": "code", "domain": extract_domain(url)},
            )
        )
    return drafts
