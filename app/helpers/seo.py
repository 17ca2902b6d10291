"""
Rule-based SEO report for a site page.

Report shape:
    {"score": 0-100,
     "issues": [{"type": "error|warning|info", "message": str, "field": str}],
     "suggestions": [{"field", "current", "suggested", "reason"}],
     "keywords": [str]}

Each failed check costs points (error 20, warning 10, info 3).
"""
import re
from collections import Counter

META_TITLE_MAX = 60
META_DESCRIPTION_MIN = 70
META_DESCRIPTION_MAX = 160
MIN_WORDS = 150

PENALTY = {"error": 20, "warning": 10, "info": 3}

STOPWORDS = {
    "a", "an", "and", "are", "as", "at", "be", "by", "for", "from", "has", "have",
    "in", "is", "it", "its", "of", "on", "or", "our", "that", "the", "this", "to",
    "was", "we", "were", "will", "with", "you", "your",
}

_WORD = re.compile(r"[a-z0-9][a-z0-9'-]*")
_TAG = re.compile(r"<[^>]+>")


def _block_text(value) -> list:
    """Collect every string inside a block's JSON content."""
    if isinstance(value, str):
        return [_TAG.sub(" ", value)]
    if isinstance(value, dict):
        out = []
        for key, v in value.items():
            if key in ("url", "src", "href", "link", "image", "video_url"):
                continue
            out.extend(_block_text(v))
        return out
    if isinstance(value, list):
        out = []
        for v in value:
            out.extend(_block_text(v))
        return out
    return []


def page_text(blocks) -> str:
    parts = []
    for b in blocks:
        if b.visible:
            parts.extend(_block_text(b.content or {}))
    return " ".join(p.strip() for p in parts if p and p.strip())


def extract_keywords(text: str, limit: int = 10) -> list:
    words = [w.strip("'-") for w in _WORD.findall((text or "").lower())]
    counts = Counter(w for w in words if len(w) > 2 and w not in STOPWORDS)
    return [w for w, _ in counts.most_common(limit)]


def _images_missing_alt(blocks) -> int:
    missing = 0
    for b in blocks:
        if b.type != "image" or not b.visible:
            continue
        if not ((b.content or {}).get("alt") or "").strip():
            missing += 1
    return missing


def analyze_page(page, blocks=None) -> dict:
    blocks = list(page.blocks if blocks is None else blocks)
    seo = page.seo or {}
    meta_title = (seo.get("meta_title") or "").strip()
    meta_description = (seo.get("meta_description") or page.description or "").strip()
    focus = (seo.get("focus_keyword") or "").strip().lower()

    text = page_text(blocks)
    word_count = len(_WORD.findall(text.lower()))

    issues, suggestions = [], []

    def issue(kind, message, field):
        issues.append({"type": kind, "message": message, "field": field})

    if not meta_title:
        issue("error", "Meta title is missing.", "meta_title")
        suggestions.append({
            "field": "meta_title",
            "current": "",
            "suggested": page.title[:META_TITLE_MAX],
            "reason": "Search results show the meta title as the headline.",
        })
    elif len(meta_title) > META_TITLE_MAX:
        issue("warning", f"Meta title is {len(meta_title)} characters; keep it under {META_TITLE_MAX}.", "meta_title")

    if not meta_description:
        issue("error", "Meta description is missing.", "meta_description")
        if text:
            suggestions.append({
                "field": "meta_description",
                "current": "",
                "suggested": text[:META_DESCRIPTION_MAX].rsplit(" ", 1)[0],
                "reason": "Search results show the description under the title.",
            })
    elif len(meta_description) > META_DESCRIPTION_MAX:
        issue("warning", f"Meta description is longer than {META_DESCRIPTION_MAX} characters.", "meta_description")
    elif len(meta_description) < META_DESCRIPTION_MIN:
        issue("info", f"Meta description is short; aim for {META_DESCRIPTION_MIN}-{META_DESCRIPTION_MAX} characters.",
              "meta_description")

    if not focus:
        issue("warning", "No focus keyword set.", "focus_keyword")
    else:
        if focus not in (meta_title or page.title).lower():
            issue("warning", f"Focus keyword '{focus}' is not in the title.", "meta_title")
        if meta_description and focus not in meta_description.lower():
            issue("info", f"Focus keyword '{focus}' is not in the meta description.", "meta_description")
        if text and focus not in text.lower():
            issue("warning", f"Focus keyword '{focus}' does not appear in the page content.", "content")
        slug_words = page.slug.strip("/").replace("-", " ")
        if page.slug != "/" and focus.split()[0] not in slug_words:
            issue("info", "Consider including the focus keyword in the URL.", "slug")

    if not blocks:
        issue("error", "Page has no content blocks.", "content")
    elif word_count < MIN_WORDS:
        issue("warning", f"Page has {word_count} words; aim for at least {MIN_WORDS}.", "content")

    if blocks and not any(b.type in ("hero", "heading") for b in blocks if b.visible):
        issue("info", "Add a heading or hero block so the page has a clear H1.", "content")

    missing_alt = _images_missing_alt(blocks)
    if missing_alt:
        issue("warning", f"{missing_alt} image(s) have no alt text.", "content")

    score = 100 - sum(PENALTY[i["type"]] for i in issues)
    return {
        "score": max(0, min(100, score)),
        "issues": issues,
        "suggestions": suggestions,
        "keywords": extract_keywords(text),
        "word_count": word_count,
    }
