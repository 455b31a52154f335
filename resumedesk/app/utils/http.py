"""Response header helpers."""
from urllib.parse import quote


def attachment_disposition(filename: str) -> str:
    """Content-Disposition for a download; adds RFC 5987 filename* for non-ASCII names."""
    safe = "".join(ch for ch in filename if ch not in '"\\\r\n')
    if safe.isascii():
        return f'attachment; filename="{safe}"'
    fallback = safe.encode("ascii", "replace").decode("ascii").replace("?", "_")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(safe)}"
