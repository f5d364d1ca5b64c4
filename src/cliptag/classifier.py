"""Heuristic content classification for clipboard text."""

import re
from urllib.parse import urlparse

from cliptag.models import Category, Classification

EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}", re.ASCII)
URL_RE = re.compile(r"(?:https?://|www\.)\S+", re.IGNORECASE)
# Stops at quotes, brackets and backticks so string literals don't leak into the URL
CODE_URL_RE = re.compile(r"(?:https?://|www\.)[^\s)\"'`\]]+", re.IGNORECASE)

STRONG_PASSWORD_RE = re.compile(r"(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]{8,}", re.ASCII)
UPPER_RE = re.compile(r"[A-Z]")
LOWER_RE = re.compile(r"[a-z]")
DIGIT_RE = re.compile(r"[0-9]")
SPECIAL_RE = re.compile(r"[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?]")

PHONE_RE = re.compile(r"\+?\(?[0-9]{3}\)?[-\s.]?[0-9]{3}[-\s.]?[0-9]{4,6}")
COLOR_RE = re.compile(r"#[0-9A-Fa-f]{3,8}|rgb\(|rgba\(|hsl\(|hsla\(")

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128
CODE_MIN_LENGTH = 50

CODE_SIGNALS: list[re.Pattern] = [
    re.compile(
        r"^(const|let|var|function|class|import|export|if|else|for|while|return|def|public|private|async|await)\s",
        re.MULTILINE,
    ),
    re.compile(r"[{}\[\]();].*[{}\[\]();]"),  # bracket pairs
    re.compile(r"^\s*(//|#|/\*|\*|<!--|-->)", re.MULTILINE),  # comment markers
    re.compile(r"=>"),
    re.compile(r"\$\{.*\}"),  # template interpolation
    re.compile(r"^<[a-zA-Z][^>]*>", re.MULTILINE),
    re.compile(r"\.(js|ts|py|java|cpp|c|html|css|json|xml|yaml|yml|md|sh|bash|sql)$", re.IGNORECASE),
    re.compile(r"^(SELECT|INSERT|UPDATE|DELETE|CREATE|DROP|ALTER)\s", re.IGNORECASE),
    re.compile(r"^\s*@(import|media|keyframes|mixin|include)", re.MULTILINE),
    re.compile(r"console\.(log|error|warn)"),
    re.compile(r"document\.|window\.|querySelector"),
    re.compile(r"\b(null|undefined|true|false|None|True|False)\b"),
]

INDENTED_LINE_RE = re.compile(r"^[ \t]{2,}\S", re.MULTILINE)

# Checked in order; the first language with any matching signal wins
LANGUAGE_SIGNALS: dict[str, list[re.Pattern]] = {
    "javascript": [
        re.compile(r"\b(const|let|var|function|console\.log|document\.|window\.)\b|=>"),
        re.compile(r"\.js$", re.IGNORECASE),
    ],
    "typescript": [
        re.compile(r"\b(interface|type|enum|namespace|declare)\b"),
        re.compile(r"\.ts$", re.IGNORECASE),
    ],
    "python": [
        re.compile(r"\b(def|import|from|class|self|elif|__init__)\b|\bprint\("),
        re.compile(r"\.py$", re.IGNORECASE),
    ],
    "html": [re.compile(r"^<!DOCTYPE|<html|<head|<body|<div|<span|<p>", re.IGNORECASE)],
    "css": [re.compile(r"\{[\s\S]*?:[\s\S]*?;[\s\S]*?\}|@media|@import|@keyframes")],
    "json": [re.compile(r"^\s*[{\[][\s\S]*[}\]]\s*$")],
    "sql": [re.compile(r"\b(SELECT|INSERT|UPDATE|DELETE|FROM|WHERE|JOIN|CREATE|DROP|ALTER)\b", re.IGNORECASE)],
    "java": [re.compile(r"\b(public|private|protected|class|static|void|String|int|boolean)\b")],
    "cpp": [re.compile(r"#include\b|\b(iostream|int main|cout|cin)\b|\bstd::")],
    "bash": [
        re.compile(r"^#!"),
        re.compile(r"\b(echo|export|source|chmod|mkdir|cd|ls|grep|awk|sed)\b"),
    ],
    "yaml": [re.compile(r"^\s*[\w-]+:\s*[^\n]*$", re.MULTILINE)],
    "markdown": [re.compile(r"^#{1,6}\s|^\*\s|\[.*\]\(.*\)|^>\s", re.MULTILINE)],
}


def _unique(items: list[str]) -> list[str]:
    return list(dict.fromkeys(items))


def _parse_url(url: str) -> tuple[str | None, str | None]:
    """Return (hostname, scheme) for a URL, or (None, None) if it can't be parsed."""
    try:
        parsed = urlparse("https://" + url if url.lower().startswith("www.") else url)
        hostname = parsed.hostname
    except ValueError:
        return None, None
    if not hostname:
        return None, None
    return hostname, parsed.scheme


def extract_domain(url: str) -> str:
    """Hostname of a URL, falling back to the URL itself when it can't be parsed."""
    hostname, _ = _parse_url(url)
    return hostname or url


def password_strength(password: str) -> str:
    """Score a password on a 7-point rubric.

    One point each for length >= 8, >= 12 and >= 16, and one for each of
    upper-case, lower-case, digit and special character classes.

    Returns:
        One of "weak", "medium", "strong" or "very-strong".
    """
    length = len(password)
    score = sum(
        [
            length >= 8,
            length >= 12,
            length >= 16,
            bool(UPPER_RE.search(password)),
            bool(LOWER_RE.search(password)),
            bool(DIGIT_RE.search(password)),
            bool(SPECIAL_RE.search(password)),
        ]
    )
    if score <= 2:
        return "weak"
    if score <= 4:
        return "medium"
    if score <= 6:
        return "strong"
    return "very-strong"


def looks_like_password(trimmed: str) -> bool:
    if not PASSWORD_MIN_LENGTH <= len(trimmed) <= PASSWORD_MAX_LENGTH:
        return False
    if re.search(r"\s", trimmed):
        return False
    if STRONG_PASSWORD_RE.fullmatch(trimmed):
        return True
    return all(p.search(trimmed) for p in (UPPER_RE, LOWER_RE, DIGIT_RE, SPECIAL_RE))


def looks_like_code(text: str) -> bool:
    if not any(p.search(text) for p in CODE_SIGNALS):
        return False
    multi_line = len(text.split("\n")) > 2
    indented = bool(INDENTED_LINE_RE.search(text))
    return multi_line or indented or len(text) > CODE_MIN_LENGTH


def detect_language(code: str) -> str | None:
    """Guess the programming language of a code snippet.

    Args:
        code: Text already classified as code.

    Returns:
        The first language in LANGUAGE_SIGNALS with a matching signal, or None.
    """
    for language, signals in LANGUAGE_SIGNALS.items():
        if any(signal.search(code) for signal in signals):
            return language
    return None


def classify(text: str) -> Classification:
    """Assign a category, tags and metadata to a piece of clipboard text.

    Rules run in a fixed priority order (email, link, password, code, phone,
    color) and the first match wins. Tags and metadata gathered by earlier
    rules that did not match are kept on the final result.

    Args:
        text: The raw clipboard text.

    Returns:
        A Classification; Category.TEXT when nothing else matches.
    """
    result = Classification(category=Category.TEXT)
    trimmed = text.strip()

    if EMAIL_RE.fullmatch(trimmed):
        result.category = Category.EMAIL
        result.add_tags("email")
        result.metadata["domain"] = trimmed.split("@", 1)[1]
        return result

    emails = EMAIL_RE.findall(text)
    if emails:
        result.add_tags("contains-email")
        result.metadata["emails"] = emails

    if URL_RE.fullmatch(trimmed):
        result.category = Category.LINK
        result.add_tags("link")
        domain, protocol = _parse_url(trimmed)
        if domain:
            result.metadata["domain"] = domain
            result.metadata["protocol"] = protocol
        return result

    urls = URL_RE.findall(text)
    if urls:
        result.add_tags("contains-link")
        result.metadata["urls"] = urls

    if looks_like_password(trimmed):
        result.category = Category.PASSWORD
        result.add_tags("password", "sensitive")
        result.metadata["strength"] = password_strength(trimmed)
        return result

    if looks_like_code(text):
        result.category = Category.CODE
        result.add_tags("code")
        language = detect_language(text)
        if language:
            result.add_tags(language)
            result.metadata["language"] = language
        code_urls = _unique(CODE_URL_RE.findall(text))
        if code_urls:
            result.add_tags("contains-link")
            result.metadata["urls"] = code_urls
        else:
            result.metadata.pop("urls", None)
            if "contains-link" in result.tags:
                result.tags.remove("contains-link")
        return result

    if PHONE_RE.fullmatch(re.sub(r"\s", "", trimmed)):
        result.category = Category.PHONE
        result.add_tags("phone", "contact")
        return result

    if COLOR_RE.match(trimmed):
        result.category = Category.COLOR
        result.add_tags("color", "design")
        result.metadata["color"] = trimmed
        return result

    result.add_tags("text")
    result.metadata["word_count"] = len(text.split())
    result.metadata["char_count"] = len(text)
    return result


def classify_image() -> Classification:
    """Images skip text heuristics entirely."""
    return Classification(category=Category.IMAGE, tags=["image"])
