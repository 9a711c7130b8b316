"""
Rewrite actions decoded from parsed rules.

Each rule kind is a small frozen dataclass carrying its validated arguments.
Rules are decoded once, before any of them runs: unknown names and rules
missing required arguments are dropped at that point, so ``apply`` never has
to check its arguments again.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from types import MappingProxyType
from typing import Callable, ClassVar, Iterable

from ..config import RewriteConfig
from ..core.rules import Rule
from . import functions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RewriteContext:
    """Read-only values an action may need besides the value it rewrites."""

    entry_url: str
    config: RewriteConfig


class RewriteAction:
    """Base class of all rule kinds.

    Subclasses set ``target`` to "title" when they rewrite the entry title
    and implement ``apply`` returning the new value.
    """

    target: ClassVar[str] = "content"
    required_args: ClassVar[int] = 0

    @classmethod
    def from_rule(cls, rule: Rule) -> RewriteAction:
        return cls()

    def apply(self, value: str, ctx: RewriteContext) -> str:
        raise NotImplementedError


_registry: dict[str, type[RewriteAction]] = {}


def _register(*names: str) -> Callable[[type[RewriteAction]], type[RewriteAction]]:
    def decorator(cls: type[RewriteAction]) -> type[RewriteAction]:
        for name in names:
            _registry[name] = cls
        return cls

    return decorator


@_register("add_image_title")
@dataclass(frozen=True)
class AddImageTitle(RewriteAction):
    def apply(self, value: str, ctx: RewriteContext) -> str:
        return functions.add_image_title(value)


@_register("add_mailto_subject")
@dataclass(frozen=True)
class AddMailtoSubject(RewriteAction):
    def apply(self, value: str, ctx: RewriteContext) -> str:
        return functions.add_mailto_subject(value)


@_register("add_dynamic_image")
@dataclass(frozen=True)
class AddDynamicImage(RewriteAction):
    def apply(self, value: str, ctx: RewriteContext) -> str:
        return functions.add_dynamic_image(value)


@_register("add_dynamic_iframe")
@dataclass(frozen=True)
class AddDynamicIframe(RewriteAction):
    def apply(self, value: str, ctx: RewriteContext) -> str:
        return functions.add_dynamic_iframe(value)


@_register("add_youtube_video")
@dataclass(frozen=True)
class AddYoutubeVideo(RewriteAction):
    def apply(self, value: str, ctx: RewriteContext) -> str:
        return functions.add_youtube_video(value, ctx.entry_url, ctx.config.youtube_embed_url_override)


@_register("add_youtube_video_using_invidious_player")
@dataclass(frozen=True)
class AddYoutubeVideoUsingInvidiousPlayer(RewriteAction):
    def apply(self, value: str, ctx: RewriteContext) -> str:
        return functions.add_youtube_video_using_invidious_player(
            value, ctx.entry_url, ctx.config.invidious_instance
        )


@_register("add_youtube_video_from_id")
@dataclass(frozen=True)
class AddYoutubeVideoFromId(RewriteAction):
    def apply(self, value: str, ctx: RewriteContext) -> str:
        return functions.add_youtube_video_from_id(value, ctx.config.youtube_embed_url_override)


@_register("add_invidious_video")
@dataclass(frozen=True)
class AddInvidiousVideo(RewriteAction):
    def apply(self, value: str, ctx: RewriteContext) -> str:
        return functions.add_invidious_video(value, ctx.entry_url)


@_register("add_pdf_download_link")
@dataclass(frozen=True)
class AddPdfDownloadLink(RewriteAction):
    def apply(self, value: str, ctx: RewriteContext) -> str:
        return functions.add_pdf_link(value, ctx.entry_url)


@_register("add_castopod_episode")
@dataclass(frozen=True)
class AddCastopodEpisode(RewriteAction):
    def apply(self, value: str, ctx: RewriteContext) -> str:
        return functions.add_castopod_episode(value, ctx.entry_url)


@_register("nl2br")
@dataclass(frozen=True)
class Nl2br(RewriteAction):
    def apply(self, value: str, ctx: RewriteContext) -> str:
        return functions.replace_line_feeds(value)


@_register("convert_text_link", "convert_text_links")
@dataclass(frozen=True)
class ConvertTextLinks(RewriteAction):
    def apply(self, value: str, ctx: RewriteContext) -> str:
        return functions.replace_text_links(value)


@_register("fix_medium_images")
@dataclass(frozen=True)
class FixMediumImages(RewriteAction):
    def apply(self, value: str, ctx: RewriteContext) -> str:
        return functions.fix_medium_images(value)


@_register("use_noscript_figure_images")
@dataclass(frozen=True)
class UseNoscriptFigureImages(RewriteAction):
    def apply(self, value: str, ctx: RewriteContext) -> str:
        return functions.use_noscript_figure_images(value)


@_register("fix_ghost_cards")
@dataclass(frozen=True)
class FixGhostCards(RewriteAction):
    def apply(self, value: str, ctx: RewriteContext) -> str:
        return functions.fix_ghost_cards(value)


@_register("remove_tables")
@dataclass(frozen=True)
class RemoveTables(RewriteAction):
    def apply(self, value: str, ctx: RewriteContext) -> str:
        return functions.remove_tables(value)


@_register("remove_img_blur_params")
@dataclass(frozen=True)
class RemoveImgBlurParams(RewriteAction):
    def apply(self, value: str, ctx: RewriteContext) -> str:
        return functions.remove_img_blur_params(value)


@_register("parse_markdown")
@dataclass(frozen=True)
class ParseMarkdown(RewriteAction):
    def apply(self, value: str, ctx: RewriteContext) -> str:
        return functions.parse_markdown(value)


@_register("replace")
@dataclass(frozen=True)
class Replace(RewriteAction):
    """Format: replace("search-term"|"replace-term")"""

    search: str
    replacement: str

    required_args: ClassVar[int] = 2

    @classmethod
    def from_rule(cls, rule: Rule) -> RewriteAction:
        return cls(search=rule.args[0], replacement=rule.args[1])

    def apply(self, value: str, ctx: RewriteContext) -> str:
        return functions.replace_custom(value, self.search, self.replacement)


@_register("replace_title")
@dataclass(frozen=True)
class ReplaceTitle(Replace):
    """Format: replace_title("search-term"|"replace-term")"""

    target: ClassVar[str] = "title"


@_register("remove")
@dataclass(frozen=True)
class Remove(RewriteAction):
    """Format: remove("#selector > .element, .another")"""

    selector: str

    required_args: ClassVar[int] = 1

    @classmethod
    def from_rule(cls, rule: Rule) -> RewriteAction:
        return cls(selector=rule.args[0])

    def apply(self, value: str, ctx: RewriteContext) -> str:
        return functions.remove_custom(value, self.selector)


@_register("base64_decode")
@dataclass(frozen=True)
class Base64Decode(RewriteAction):
    selector: str = "body"

    @classmethod
    def from_rule(cls, rule: Rule) -> RewriteAction:
        if rule.args:
            return cls(selector=rule.args[0])
        return cls()

    def apply(self, value: str, ctx: RewriteContext) -> str:
        return functions.base64_decode(value, self.selector)


@_register("add_hn_links_using_hack", "add_hn_links_using_opener")
@dataclass(frozen=True)
class AddHackerNewsLinks(RewriteAction):
    app: str

    @classmethod
    def from_rule(cls, rule: Rule) -> RewriteAction:
        return cls(app=rule.name.rsplit("_", 1)[-1])

    def apply(self, value: str, ctx: RewriteContext) -> str:
        return functions.add_hacker_news_links_using(value, self.app)


@_register("remove_clickbait")
@dataclass(frozen=True)
class RemoveClickbait(RewriteAction):
    target: ClassVar[str] = "title"

    def apply(self, value: str, ctx: RewriteContext) -> str:
        return functions.remove_clickbait(value)


ACTIONS = MappingProxyType(_registry)


def decode_rule(rule: Rule, entry_url: str = "") -> RewriteAction | None:
    """Turn a parsed rule into an action, or None when it cannot run."""
    cls = ACTIONS.get(rule.name)
    if cls is None:
        logger.debug("Unknown rewrite rule", extra={"rule": rule.name, "entry_url": entry_url})
        return None
    if len(rule.args) < cls.required_args:
        logger.warning(
            "Missing arguments for rewrite rule",
            extra={"rule": rule.name, "args": list(rule.args), "entry_url": entry_url},
        )
        return None
    return cls.from_rule(rule)


def decode_rules(rules: Iterable[Rule], entry_url: str = "") -> list[RewriteAction]:
    actions = []
    for rule in rules:
        action = decode_rule(rule, entry_url)
        if action is not None:
            actions.append(action)
    return actions
