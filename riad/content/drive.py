"""Google Drive share links → directly fetchable image URLs."""

import re
from urllib.parse import urlparse

_DRIVE_HOSTS = {"drive.google.com", "docs.google.com"}
_FILE_PATH_ID = re.compile(r"/(?:file/)?d/([A-Za-z0-9_-]+)")
_QUERY_ID = re.compile(r"[?&]id=([A-Za-z0-9_-]+)")

DIRECT_URL = "https://lh3.googleusercontent.com/d/{file_id}"


def extract_drive_file_id(url: str) -> str | None:
    """Return the Drive file id embedded in a share/open/uc link, if any."""
    parsed = urlparse(url.strip())
    if parsed.netloc.lower() not in _DRIVE_HOSTS:
        return None
    match = _FILE_PATH_ID.search(parsed.path) or _QUERY_ID.search(url)
    return match.group(1) if match else None


def convert_drive_url(url: str | None) -> str:
    """Rewrite a Drive link to its direct image URL.

    Non-Drive URLs are returned unchanged and empty values become "".
    """
    if not url:
        return ""
    file_id = extract_drive_file_id(url)
    if file_id is None:
        return url
    return DIRECT_URL.format(file_id=file_id)
