"""
Referer header inference for proxied media.

Some image and video CDNs refuse hotlinked requests unless they carry the
referer of the site that embeds them. Lookup is by exact hostname first,
then by hostname suffix in the order listed.
"""

from __future__ import annotations

from types import MappingProxyType
from urllib.parse import urlsplit


REFERER_BY_HOSTNAME = MappingProxyType(
    {
        "cdnfile.sspai.com": "https://sspai.com",
        "f.video.weibocdn.com": "https://weibo.com",
        "i.pximg.net": "https://www.pixiv.net",
        "img.hellogithub.com": "https://hellogithub.com",
        "sp1.piokok.com": "https://sp1.piokok.com",
    }
)

# (hostname suffix, referer)
REFERER_BY_SUFFIX: tuple[tuple[str, str], ...] = (
    (".sinaimg.cn", "https://weibo.com"),
    (".cdninstagram.com", "https://www.instagram.com"),
)


def get_referer_for_url(url: str) -> str:
    """Return the referer to send when fetching ``url``, or "" when none is known."""
    try:
        hostname = urlsplit(url).hostname or ""
    except ValueError:
        return ""
    if not hostname:
        return ""

    referer = REFERER_BY_HOSTNAME.get(hostname)
    if referer:
        return referer

    for suffix, referer in REFERER_BY_SUFFIX:
        if hostname.endswith(suffix):
            return referer
    return ""
