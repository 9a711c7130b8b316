"""
Predefined rewrite rules selected by site domain.

Entries are scanned top to bottom and the first fragment contained in the
entry host wins, so fragments must stay non-overlapping or be listed most
specific first.
"""

from __future__ import annotations

import logging
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)


# (domain fragment, rule text)
PREDEFINED_RULES: tuple[tuple[str, str], ...] = (
    ("abstrusegoose.com", "add_image_title"),
    ("amazingsuperpowers.com", "add_image_title"),
    ("blog.cloudflare.com", 'add_image_title,remove("figure.kg-image-card figure.kg-image + img")'),
    ("cowbirdsinlove.com", "add_image_title"),
    ("drawingboardcomic.com", "add_image_title"),
    ("exocomics.com", "add_image_title"),
    ("framatube.org", "nl2br,convert_text_link"),
    ("happletea.com", "add_image_title"),
    (
        "ilpost.it",
        'remove(".art_tag, #audioPlayerArticle, .author-container, .caption, .ilpostShare, '
        '.lastRecents, #mc_embed_signup, .outbrain_inread, p:has(.leggi-anche), .youtube-overlay")',
    ),
    ("imogenquest.net", "add_image_title"),
    ("lukesurl.com", "add_image_title"),
    ("medium.com", "fix_medium_images"),
    ("mercworks.net", "add_image_title"),
    ("monkeyuser.com", "add_image_title"),
    ("mrlovenstein.com", "add_image_title"),
    ("nedroid.com", "add_image_title"),
    ("oglaf.com", 'replace("media.oglaf.com/story/tt(.+).gif"|"media.oglaf.com/comic/$1.jpg"),add_image_title'),
    ("optipess.com", "add_image_title"),
    ("peebleslab.com", "add_image_title"),
    (
        "quantamagazine.org",
        'add_youtube_video_from_id, remove("h6:not(.byline,.post__title__kicker), #comments, '
        '.next-post__content, .footer__section, figure .outer--content, script")',
    ),
    ("sentfromthemoon.com", "add_image_title"),
    ("thedoghousediaries.com", "add_image_title"),
    ("theverge.com", 'add_dynamic_image, remove("div.duet--recirculation--related-list, .hidden")'),
    ("treelobsters.com", "add_image_title"),
    ("webtoons.com", 'add_dynamic_image,replace("webtoon"|"swebtoon")'),
    ("www.qwantz.com", "add_image_title,add_mailto_subject"),
    ("xkcd.com", "add_image_title"),
    ("youtube.com", "add_youtube_video"),
)


def url_domain(url: str) -> str:
    """Return the host (with port) of a URL, or the input when it cannot be parsed."""
    try:
        return urlsplit(url).netloc
    except ValueError:
        return url


def predefined_rules_for(url: str) -> str:
    """Return the predefined rule text for the site of ``url``, or "" when none applies."""
    domain = url_domain(url)
    if not domain:
        return ""
    for fragment, rules in PREDEFINED_RULES:
        if fragment in domain:
            logger.debug("Predefined rewrite rules matched", extra={"domain": domain, "fragment": fragment})
            return rules
    return ""
