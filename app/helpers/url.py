import re
import secrets
import hashlib

def slugify(name: str, fallback: str = "item") -> str:
    """Create URL friendly string ("Spring Open 2025" -> "spring-open-2025")"""
    s = re.sub(r"[^a-zA-Z0-9]+", "-", (name or "").strip().lower()).strip("-")
    return s or fallback

def make_token() -> str:
    return secrets.token_urlsafe(32)

def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
