"""Tests for rule selection and application on whole entries."""

from __future__ import annotations

import logging

from feed_rewrite import RewriteConfig, apply_feed_rules, rewrite
from feed_rewrite.core.types import Entry, Feed
from feed_rewrite.rewrite.actions import AddPdfDownloadLink, Remove
from feed_rewrite.rewrite.rewriter import build_actions


def _entry(url: str = "https://example.org/article", title: str = "A title", content: str = "") -> Entry:
    return Entry(url=url, title=title, content=content)


def test_rewrite_without_matching_rule_keeps_entry():
    entry = _entry(content="Some text.")

    rewrite(entry.url, entry)

    assert entry == _entry(content="Some text.")


def test_rewrite_returns_the_same_entry():
    entry = _entry(content="Some text.")

    assert rewrite(entry.url, entry) is entry


def test_rewrite_youtube_link_with_default_embed():
    entry = _entry(url="https://www.youtube.com/watch?v=1234", content="Video Description")

    rewrite(entry.url, entry)

    assert entry.content == (
        '<iframe width="650" height="350" frameborder="0" '
        'src="https://www.youtube-nocookie.com/embed/1234" allowfullscreen></iframe><br>Video Description'
    )


def test_rewrite_youtube_link_with_custom_embed_prefix():
    entry = _entry(url="https://www.youtube.com/watch?v=1234", content="Video Description")
    config = RewriteConfig(youtube_embed_url_override="https://invidious.custom/embed/")

    rewrite(entry.url, entry, config=config)

    assert 'src="https://invidious.custom/embed/1234"' in entry.content


def test_rewrite_incorrect_youtube_link():
    entry = _entry(url="https://www.youtube.com/some-page", content="Video Description")

    rewrite(entry.url, entry)

    assert entry.content == "Video Description"


def test_rewrite_xkcd_with_predefined_rule():
    entry = _entry(
        url="https://xkcd.com/1912/",
        content='<img src="https://imgs.xkcd.com/comics/thermostat.png" title="Your problem is so terrible" alt="Thermostat">',
    )

    rewrite(entry.url, entry)

    assert entry.content == (
        '<figure><img src="https://imgs.xkcd.com/comics/thermostat.png" alt="Thermostat"/>'
        "<figcaption><p>Your problem is so terrible</p></figcaption></figure>"
    )


def test_rewrite_qwantz_runs_every_predefined_rule():
    entry = _entry(
        url="https://www.qwantz.com/",
        content=(
            '<img src="comic.png" title="Hidden" alt="">'
            '<a href="mailto:ryan@qwantz.com?subject=blah%20blah">contact</a>'
        ),
    )

    rewrite(entry.url, entry)

    assert entry.content == (
        '<figure><img src="comic.png" alt=""/><figcaption><p>Hidden</p></figcaption></figure>'
        '<a href="mailto:ryan@qwantz.com?subject=blah%20blah">contact [blah blah]</a>'
    )


def test_rewrite_pdf_link_always_added():
    entry = _entry(url="https://example.org/document.pdf", content="test")

    rewrite(entry.url, entry)

    assert entry.content == '<a href="https://example.org/document.pdf">PDF</a><br>test'


def test_custom_rules_override_predefined_rules():
    entry = _entry(
        url="https://xkcd.com/1912/",
        content='<img src="comic.png" title="Hover text" alt="Comic">',
    )

    rewrite(entry.url, entry, "nl2br")

    assert entry.content == '<img src="comic.png" title="Hover text" alt="Comic">'


def test_blank_custom_rules_fall_back_to_predefined_rules():
    entry = _entry(url="https://xkcd.com/1912/", content='<img src="comic.png" title="Hover text">')

    rewrite(entry.url, entry, "   ")

    assert entry.content.startswith("<figure>")


def test_unknown_custom_rule_is_ignored():
    entry = _entry(content='<img src="https://example.org/a.png">')

    rewrite(entry.url, entry, "some rule")

    assert entry.content == '<img src="https://example.org/a.png">'


def test_replace_title():
    entry = _entry(title="A title")

    rewrite(entry.url, entry, r'replace_title("(?i)^a\\s*ti"|"Ouch, a this")')

    assert entry.title == "Ouch, a thistle"


def test_replace_title_whole_word():
    entry = _entry(title="A title")

    rewrite(entry.url, entry, 'replace_title("(?i)title"|"thistle")')

    assert entry.title == "A thistle"
    assert entry.content == ""


def test_remove_clickbait_rewrites_title_only():
    entry = _entry(title="THIS IS AMAZING", content="Some description")

    rewrite(entry.url, entry, "remove_clickbait")

    assert entry.title == "This Is Amazing"
    assert entry.content == "Some description"


def test_rule_with_missing_arguments_is_skipped(caplog):
    entry = _entry(content="Line 1\nLine 2")

    with caplog.at_level(logging.WARNING, logger="feed_rewrite"):
        rewrite(entry.url, entry, 'replace("Line"),nl2br')

    assert entry.content == "Line 1<br>Line 2"
    assert [record.rule for record in caplog.records] == ["replace"]


def test_rules_apply_in_order():
    entry = _entry(content="Line 1\nLine 2")

    rewrite(entry.url, entry, 'nl2br,replace("<br>"|" | ")')

    assert entry.content == "Line 1 | Line 2"


def test_remove_rule():
    entry = _entry(
        content=(
            '<div>Lorem Ipsum <span class="spam">I dont want to see this</span>'
            '<span class="ads keep">Super important info</span></div>'
        )
    )

    rewrite(entry.url, entry, 'remove(".spam, .ads:not(.keep)")')

    assert entry.content == '<div>Lorem Ipsum <span class="ads keep">Super important info</span></div>'


def test_base64_decode_rule_with_selector():
    entry = _entry(content='<p class="secret">SGVsbG8gV29ybGQ=</p><p>SGVsbG8gV29ybGQ=</p>')

    rewrite(entry.url, entry, 'base64_decode(".secret")')

    assert entry.content == '<p class="secret">Hello World</p><p>SGVsbG8gV29ybGQ=</p>'


def test_rewrite_twice_duplicates_embeds():
    entry = _entry(url="https://www.youtube.com/watch?v=1234", content="Video Description")

    rewrite(entry.url, entry)
    rewrite(entry.url, entry)

    assert entry.content.count("<iframe") == 2


def test_rewrite_is_deterministic():
    content = '<p>Hello</p><img data-src="a.jpg"><span class="ads">x</span>'
    rules = 'add_dynamic_image,remove(".ads"),convert_text_link'

    first = rewrite("https://example.org/", _entry(content=content), rules)
    second = rewrite("https://example.org/", _entry(content=content), rules)

    assert first.content == second.content == '<p>Hello</p><img data-src="a.jpg" src="a.jpg"/>'


def test_build_actions_appends_pdf_link_last():
    actions = build_actions('remove(".ads")')

    assert actions == [Remove(selector=".ads"), AddPdfDownloadLink()]


def test_apply_feed_rules_rewrites_url_then_content():
    feed = Feed(
        id=7,
        url_rewrite_rules='rewrite("^https://example.org/(.+)\\.html$"|"https://example.org/$1.pdf")',
        rewrite_rules='replace("draft"|"final")',
    )
    entry = _entry(url="https://example.org/report.html", content="draft report")

    apply_feed_rules(feed, entry)

    assert entry.url == "https://example.org/report.pdf"
    assert entry.content == '<a href="https://example.org/report.pdf">PDF</a><br>final report'


def test_apply_feed_rules_uses_predefined_rules_for_rewritten_url():
    feed = Feed(url_rewrite_rules='rewrite("^https://m.youtube.com/"|"https://www.youtube.com/")')
    entry = _entry(url="https://m.youtube.com/watch?v=1234", content="Video")

    apply_feed_rules(feed, entry)

    assert entry.url == "https://www.youtube.com/watch?v=1234"
    assert 'src="https://www.youtube-nocookie.com/embed/1234"' in entry.content


def test_parse_markdown_rule():
    entry = _entry(content="# Title\n\n*em*")

    rewrite(entry.url, entry, "parse_markdown")

    assert entry.content == "<h1>Title</h1>\n<p><em>em</em></p>\n"


def test_remove_img_blur_params_rule():
    entry = _entry(content='<img src="https://example.org/a.jpg?blur=10&w=1" alt="">')

    rewrite(entry.url, entry, "remove_img_blur_params")

    assert entry.content == '<img src="https://example.org/a.jpg" alt=""/>'
