"""
HTML and text transformations applied by rewrite rules.

Every function takes the current value (content or title) first and returns
the new value. Functions are fail-open: when the HTML, a selector or a
regular expression cannot be handled, the input is returned untouched.

HTML is parsed with BeautifulSoup's ``html.parser`` builder, so a fragment
is rendered back without any ``<html>``/``<body>`` wrapper. Functions that
find nothing to change return the original string rather than a
re-serialized copy.
"""

from __future__ import annotations

import base64
import binascii
import functools
import html
import logging
import re
from typing import Callable, TypeVar
from urllib.parse import parse_qs, parse_qsl, urlencode, urlsplit, urlunsplit

from bs4 import BeautifulSoup, NavigableString, Tag
from markdown_it import MarkdownIt

from ..core.regex import compile_pattern, template_replacer

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., str])


YOUTUBE_VIDEO_RE = re.compile(r"youtube\.com/watch\?v=(.*)$")
YOUTUBE_SHORT_RE = re.compile(r"youtube\.com/shorts/([a-zA-Z0-9_-]{11})$")
YOUTUBE_ID_RE = re.compile(r"youtube_id\"?\s*[:=]\s*\"([a-zA-Z0-9_-]{11})\"")
INVIDIOUS_RE = re.compile(r"https?://(.*)/watch\?v=(.*)")
TEXT_LINK_RE = re.compile(
    r"(\bhttps?://[-A-Z0-9+&@#/%?=~_|!:,.;]*[-A-Z0-9+&@#/%=~_|])",
    re.IGNORECASE | re.MULTILINE,
)
WORD_RE = re.compile(r"\S+")

# Ordered most preferred to least preferred.
DYNAMIC_IMAGE_SRC_ATTRS = (
    "data-src",
    "data-original",
    "data-orig",
    "data-url",
    "data-orig-file",
    "data-large-file",
    "data-medium-file",
    "data-original-mos",
    "data-2000src",
    "data-1000src",
    "data-800src",
    "data-655src",
    "data-500src",
    "data-380src",
)
DYNAMIC_IMAGE_SRCSET_ATTRS = ("data-srcset",)
DYNAMIC_IFRAME_SRC_ATTRS = (
    "data-src",
    "data-original",
    "data-orig",
    "data-url",
    "data-lazy-src",
)

# td is checked twice: unwrapping a th can expose cells nested inside it.
TABLE_SELECTORS = ("table", "tbody", "thead", "tfoot", "tr", "td", "th", "td")

GHOST_CARD_CLASS = "kg-card"
GHOST_CARD_SELECTOR = "figure.kg-card"

HACKER_NEWS_PREFIX = "https://news.ycombinator.com/"


def fail_open(func: F) -> F:
    """Return the first argument unchanged when ``func`` raises."""

    @functools.wraps(func)
    def wrapper(value: str, *args, **kwargs) -> str:
        try:
            return func(value, *args, **kwargs)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "Rewrite function failed, keeping original value",
                extra={"function": func.__name__, "error": str(exc)},
            )
            return value

    return wrapper  # type: ignore[return-value]


def _parse(content: str) -> BeautifulSoup:
    return BeautifulSoup(content, "html.parser")


def _render(soup: BeautifulSoup) -> str:
    # A full document renders as the contents of its body.
    if soup.body is not None:
        return soup.body.decode_contents()
    return soup.decode()


def _fragment(markup: str) -> list:
    """Parse markup into detached nodes ready to be inserted elsewhere."""
    return [node.extract() for node in list(_parse(markup).contents)]


def _replace_with_html(tag: Tag, markup: str) -> None:
    nodes = _fragment(markup)
    if nodes:
        tag.replace_with(*nodes)
    else:
        tag.decompose()


@fail_open
def add_image_title(content: str) -> str:
    """Turn ``img[src][title]`` into a figure with the title as caption."""
    soup = _parse(content)
    images = soup.select("img[src][title]")
    if not images:
        return content

    for img in images:
        figure = soup.new_tag("figure")
        figure.append(soup.new_tag("img", attrs={"src": img["src"], "alt": img.get("alt", "")}))
        caption = soup.new_tag("figcaption")
        paragraph = soup.new_tag("p")
        paragraph.string = img["title"]
        caption.append(paragraph)
        figure.append(caption)
        img.replace_with(figure)

    return _render(soup)


@fail_open
def add_mailto_subject(content: str) -> str:
    """Show the subject of ``mailto:`` links next to the link text."""
    soup = _parse(content)
    links = soup.select('a[href^="mailto:"]')
    if not links:
        return content

    for link in links:
        subjects = parse_qs(urlsplit(link["href"]).query).get("subject")
        if not subjects or not subjects[0]:
            continue
        link.append(f" [{subjects[0]}]")

    return _render(soup)


@fail_open
def add_dynamic_image(content: str) -> str:
    """Resolve lazy-loaded images from their ``data-*`` attributes.

    For each ``img`` and ``div`` the first candidate attribute found (in
    priority order) becomes the ``src``; a ``div`` is replaced by a new
    ``img``. The same is done for ``srcset`` candidates. When no element
    changed, every ``noscript`` holding exactly one image is unwrapped.
    """
    soup = _parse(content)
    changed = False

    for element in soup.find_all(["img", "div"]):
        if element.parent is None:
            continue

        replaced = False
        src = _first_attr(element, DYNAMIC_IMAGE_SRC_ATTRS)
        if src is not None:
            changed = True
            if element.name == "img":
                element["src"] = src
            else:
                element.replace_with(soup.new_tag("img", attrs={"src": src, "alt": element.get("alt", "")}))
                replaced = True

        srcset = _first_attr(element, DYNAMIC_IMAGE_SRCSET_ATTRS)
        if srcset is not None:
            changed = True
            if element.name == "img":
                element["srcset"] = srcset
            elif not replaced:
                element.replace_with(
                    soup.new_tag("img", attrs={"srcset": srcset, "alt": element.get("alt", "")})
                )

    if not changed:
        for noscript in soup.find_all("noscript"):
            if len(noscript.find_all("img")) == 1:
                noscript.unwrap()
                changed = True

    return _render(soup) if changed else content


@fail_open
def add_dynamic_iframe(content: str) -> str:
    """Resolve lazy-loaded iframes from their ``data-*`` attributes."""
    soup = _parse(content)
    changed = False

    for iframe in soup.find_all("iframe"):
        src = _first_attr(iframe, DYNAMIC_IFRAME_SRC_ATTRS)
        if src is not None:
            iframe["src"] = src
            changed = True

    return _render(soup) if changed else content


def _first_attr(element: Tag, candidates: tuple[str, ...]) -> str | None:
    for name in candidates:
        if name in element.attrs:
            return element[name]
    return None


@fail_open
def fix_medium_images(content: str) -> str:
    """Replace Medium's placeholder figures by the image kept in ``noscript``."""
    soup = _parse(content)
    changed = False

    for figure in soup.select("figure.paragraph-image"):
        if figure.parent is None:
            continue
        noscript = figure.find("noscript")
        if noscript is None:
            continue
        _replace_with_html(figure, noscript.decode_contents())
        changed = True

    return _render(soup) if changed else content


@fail_open
def use_noscript_figure_images(content: str) -> str:
    """Promote the ``noscript`` image of a figure over its placeholder image."""
    soup = _parse(content)
    changed = False

    for figure in soup.find_all("figure"):
        images = [img for img in figure.find_all("img") if img.find_parent("noscript") is None]
        noscripts = figure.find_all("noscript")
        if not images or not noscripts:
            continue

        markup = "".join(noscript.decode_contents() for noscript in noscripts)
        for position, node in enumerate(_fragment(markup)):
            figure.insert(position, node)
        for node in images + noscripts:
            node.extract()
        changed = True

    return _render(soup) if changed else content


@fail_open
def fix_ghost_cards(content: str) -> str:
    """Collapse Ghost bookmark cards into plain links.

    A card needs a link and a title, otherwise it is left untouched. Runs of
    two or more sibling cards, separated only by whitespace, become a single
    ``<ul>`` with one ``<li>`` per card.
    """
    soup = _parse(content)

    runs: list[list[tuple[Tag, Tag]]] = []
    previous: Tag | None = None
    for card in soup.select(GHOST_CARD_SELECTOR):
        link = _ghost_card_link(soup, card)
        if link is None:
            previous = None
            continue
        if previous is not None and _next_sibling_card(previous) is card:
            runs[-1].append((card, link))
        else:
            runs.append([(card, link)])
        previous = card

    if not runs:
        return content

    for run in runs:
        if len(run) == 1:
            card, link = run[0]
            card.replace_with(link)
            continue

        listing = soup.new_tag("ul")
        run[0][0].insert_before(listing)
        for card, link in run:
            item = soup.new_tag("li")
            item.append(link)
            listing.append(item)
            card.extract()

    return _render(soup).strip()


def _ghost_card_link(soup: BeautifulSoup, card: Tag) -> Tag | None:
    title = _first_text(card, ".kg-bookmark-title")
    author = _first_text(card, ".kg-bookmark-author")
    container = card.select_one("a.kg-bookmark-container")
    href = container.get("href", "") if container is not None else ""

    if not href or not title:
        return None

    link = soup.new_tag("a", attrs={"href": href})
    if not author or title.endswith(author):
        link.string = title
    else:
        link.string = f"{title} - {author}"
    return link


def _first_text(card: Tag, selector: str) -> str:
    element = card.select_one(selector)
    return element.get_text().strip() if element is not None else ""


def _next_sibling_card(card: Tag) -> Tag | None:
    for sibling in card.next_siblings:
        if isinstance(sibling, Tag):
            if sibling.name == "figure" and GHOST_CARD_CLASS in sibling.get("class", []):
                return sibling
            return None
        if type(sibling) is NavigableString and sibling.strip():
            return None
    return None


@fail_open
def remove_tables(content: str) -> str:
    """Flatten table markup, hoisting cell contents into the surrounding flow."""
    soup = _parse(content)
    changed = False

    for selector in TABLE_SELECTORS:
        element = soup.find(selector)
        while element is not None:
            element.unwrap()
            changed = True
            element = soup.find(selector)

    return _render(soup) if changed else content


@fail_open
def remove_img_blur_params(content: str) -> str:
    """Drop the query string of images requested with a positive ``blur`` parameter."""
    soup = _parse(content)
    changed = False

    for img in soup.select("img[src]"):
        parts = urlsplit(img["src"])
        if not parts.query or not _has_blur(parts.query):
            continue
        img["src"] = urlunsplit((parts.scheme, parts.netloc, parts.path, "", parts.fragment))
        changed = True

    return _render(soup) if changed else content


def _has_blur(query: str) -> bool:
    for value in parse_qs(query).get("blur", []):
        try:
            if float(value) > 0:
                return True
        except ValueError:
            continue
    return False


def youtube_video_id(entry_url: str) -> str:
    """Extract the video ID from a YouTube watch or shorts URL."""
    match = YOUTUBE_VIDEO_RE.search(entry_url) or YOUTUBE_SHORT_RE.search(entry_url)
    return match.group(1) if match else ""


def video_player_iframe(video_url: str) -> str:
    return (
        '<iframe width="650" height="350" frameborder="0" src="'
        + html.escape(video_url)
        + '" allowfullscreen></iframe><br>'
    )


def add_youtube_video(content: str, entry_url: str, embed_url_prefix: str) -> str:
    video_id = youtube_video_id(entry_url)
    if not video_id:
        return content
    return video_player_iframe(embed_url_prefix + video_id) + content


def add_youtube_video_using_invidious_player(content: str, entry_url: str, instance: str) -> str:
    video_id = youtube_video_id(entry_url)
    if not video_id:
        return content
    return video_player_iframe(f"https://{instance}/embed/{video_id}") + content


def add_youtube_video_from_id(content: str, embed_url_prefix: str) -> str:
    """Prepend one player per ``youtube_id: "..."`` marker found in the content."""
    players = [video_player_iframe(embed_url_prefix + video_id) for video_id in YOUTUBE_ID_RE.findall(content)]
    if not players:
        return content
    return "".join(players) + content


def add_invidious_video(content: str, entry_url: str) -> str:
    """Embed the video of an Invidious watch URL, keeping its extra query parameters."""
    match = INVIDIOUS_RE.search(entry_url)
    if match is None:
        return content

    host, watch_query = match.group(1), match.group(2)
    video_id, _, extra = watch_query.partition("&")
    embed_url = f"https://{host}/embed/{video_id}"
    params = sorted(parse_qsl(extra, keep_blank_values=True))
    if params:
        embed_url += "?" + urlencode(params)
    return video_player_iframe(embed_url) + content


def add_castopod_episode(content: str, entry_url: str) -> str:
    player = '<iframe width="650" frameborder="0" src="' + html.escape(entry_url + "/embed/light") + '"></iframe>'
    return player + "<br>" + content


def add_pdf_link(content: str, entry_url: str) -> str:
    if not entry_url.endswith(".pdf"):
        return content
    return f'<a href="{html.escape(entry_url)}">PDF</a><br>{content}'


def replace_line_feeds(content: str) -> str:
    return content.replace("\n", "<br>")


def replace_text_links(content: str) -> str:
    return TEXT_LINK_RE.sub(r'<a href="\1">\1</a>', content)


@fail_open
def parse_markdown(content: str) -> str:
    """Render Markdown content to HTML, passing raw HTML blocks through."""
    return MarkdownIt("commonmark", {"html": True}).render(content)


def replace_custom(value: str, search: str, replacement: str) -> str:
    """Regex substitution with ``$1``-style references in the replacement."""
    pattern = compile_pattern(search)
    if pattern is None:
        return value
    return pattern.sub(template_replacer(replacement), value)


@fail_open
def remove_custom(content: str, selector: str) -> str:
    """Remove every element matching a CSS selector."""
    soup = _parse(content)
    elements = soup.select(selector)
    if not elements:
        return content
    for element in elements:
        element.decompose()
    return _render(soup)


@fail_open
def apply_func_on_text_content(content: str, selector: str, repl: Callable[[str], str]) -> str:
    """Apply ``repl`` to every text node below the elements matching ``selector``.

    A fragment has no ``<body>``; the ``body`` selector then covers the
    whole fragment. Whitespace-only text nodes are left alone.
    """
    soup = _parse(content)
    roots = soup.select(selector)
    if not roots and selector == "body":
        roots = [soup]

    changed = False
    for root in roots:
        for node in list(root.find_all(string=True)):
            if type(node) is not NavigableString or not node.strip():
                continue
            result = repl(str(node))
            if result != node:
                node.replace_with(NavigableString(result))
                changed = True

    return _render(soup) if changed else content


def decode_base64_content(text: str) -> str:
    """Decode strict, padded base64 text; return the text unchanged otherwise."""
    try:
        return base64.b64decode(text.strip(), validate=True).decode("utf-8")
    except (binascii.Error, ValueError):
        return text


def base64_decode(content: str, selector: str = "body") -> str:
    return apply_func_on_text_content(content, selector, decode_base64_content)


@fail_open
def add_hacker_news_links_using(content: str, app: str) -> str:
    """Add an "Open with ..." deep link after every Hacker News link.

    Args:
        content: Entry HTML
        app: "hack" or "opener"; any other value logs a warning and changes nothing
    """
    if app not in ("hack", "opener"):
        logger.warning("Unknown app provided for Hacker News links rewrite rule", extra={"app": app})
        return content

    soup = _parse(content)
    links = soup.select(f'a[href^="{HACKER_NEWS_PREFIX}"]')
    if not links:
        return content

    for link in links:
        href = link["href"]
        if app == "opener":
            app_url = "opener://x-callback-url/show-options?" + urlencode({"url": href})
            label = "Open with Opener"
        else:
            app_url = href.replace(HACKER_NEWS_PREFIX, "hack://", 1)
            label = "Open with HACK"

        app_link = soup.new_tag("a", attrs={"href": app_url})
        app_link.string = label
        link.parent.append(" ")
        link.parent.append(app_link)

    return _render(soup)


def remove_clickbait(title: str) -> str:
    """Lower-case every word of the title except its first character."""
    return WORD_RE.sub(lambda m: m.group(0)[:1].upper() + m.group(0)[1:].lower(), title)
