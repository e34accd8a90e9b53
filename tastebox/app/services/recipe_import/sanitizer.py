import re

SCRIPT_RE = re.compile(r"<script[^>]*>[\s\S]*?</script>", re.IGNORECASE)
STYLE_RE = re.compile(r"<style[^>]*>[\s\S]*?</style>", re.IGNORECASE)
COMMENT_RE = re.compile(r"<!--[\s\S]*?-->")
WHITESPACE_RE = re.compile(r"\s+")

DEFAULT_MAX_CHARS = 8000
ELLIPSIS = "..."


def sanitize_html(html: str, max_chars: int = DEFAULT_MAX_CHARS) -> str:
    """Strip script/style/comment blocks, collapse whitespace and cap the length."""
    cleaned = SCRIPT_RE.sub("", html)
    cleaned = STYLE_RE.sub("", cleaned)
    cleaned = COMMENT_RE.sub("", cleaned)
    cleaned = WHITESPACE_RE.sub(" ", cleaned).strip()
    if len(cleaned) > max_chars:
        return cleaned[:max_chars] + ELLIPSIS
    return cleaned
