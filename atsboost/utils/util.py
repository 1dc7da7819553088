import re
from typing import Any

from bs4 import BeautifulSoup
from email_validator import EmailNotValidError, validate_email

_WORD = re.compile(r"[a-z][a-z0-9+#.\-]*[a-z0-9+#]|[a-z]")

STOP_WORDS = frozenset(
    """
    a about above after all also an and any are as at be been being but by can could
    do does each for from had has have having he her here his how i if in into is it
    its just may more most must no not of on or our out over own per she should so
    some such than that the their them then there these they this those through to
    under up very was we were what when where which while who will with within would
    you your years year experience work working role candidate candidates ability
    strong good excellent required requirements responsibilities include including
    """.split()
)


def looks_like_html(text: str) -> bool:
    return bool(re.search(r"<(html|body|div|p|br|span|table)\b", text, re.IGNORECASE))


def sanitize_html(text: str) -> str:
    """Strip markup from HTML-looking text and collapse the whitespace left behind."""
    soup = BeautifulSoup(text, "html.parser")
    for tag in soup(["script", "style"]):
        tag.decompose()
    lines = [re.sub(r"[ \t\xa0]+", " ", line).strip() for line in soup.get_text("\n").splitlines()]
    return "\n".join(line for line in lines if line)


def extract_keywords(text: str, limit: int | None = None) -> list[str]:
    """Return distinct lower-cased keywords in first-seen order, stop words removed."""
    seen: dict[str, None] = {}
    for word in _WORD.findall(text.lower()):
        word = word.strip(".-")
        if len(word) < 3 or word in STOP_WORDS or word.isdigit():
            continue
        seen.setdefault(word, None)
    keywords = list(seen)
    return keywords[:limit] if limit is not None else keywords


def is_valid_email(value: Any) -> bool:
    """Syntax check only; no DNS lookups."""
    if not isinstance(value, str) or not value.strip():
        return False
    try:
        validate_email(value.strip(), check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def format_exception_message(exc: Exception) -> str:
    message = str(exc).strip()
    if message:
        return message
    return f"{type(exc).__name__}: {exc!r}"
