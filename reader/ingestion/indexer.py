"""Chapter heading detection over decoded book text."""

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass

from reader.ingestion.numerals import CN_NUMERAL_CHARS, ENGLISH_NUMBERS, extract_chapter_number
from reader.models.chapter import ChapterMarker

logger = logging.getLogger(__name__)

# Headings longer than this (after trimming) are treated as body text.
MAX_HEADING_LENGTH = 50

_EN_TENS = ("thirty", "forty", "fifty", "sixty", "seventy", "eighty", "ninety")
_EN_NUMBER_WORDS = "|".join(sorted([*ENGLISH_NUMBERS, *_EN_TENS], key=len, reverse=True))


@dataclass(frozen=True)
class HeadingRule:
    """A named pattern tested against each trimmed line.

    Patterns are matched with ``fullmatch`` so they describe the whole
    heading line.
    """

    name: str
    pattern: re.Pattern[str]

    def matches(self, line: str) -> bool:
        return self.pattern.fullmatch(line) is not None


# Rules in priority order; the first match wins for a line.
DEFAULT_HEADING_RULES: tuple[HeadingRule, ...] = (
    HeadingRule(
        "cn_numbered",
        re.compile(
            rf"第\s{{0,4}}[\d{CN_NUMERAL_CHARS}]+\s{{0,4}}"
            r"(?:章|节(?!课)|卷|集(?![合和])|部(?![分赛游])|篇(?!张)|回)"
            r".{0,30}"
        ),
    ),
    HeadingRule(
        "cn_named",
        re.compile(r"(?:序章|序言|卷首语|扉页|楔子|正文(?![完结])|终章|后记|尾声|番外).{0,30}"),
    ),
    HeadingRule(
        "en_numbered",
        re.compile(
            r"(?:chapter|part|book)\s+(?:\d{1,4}|[ivxlcdm]{1,8}|"
            rf"(?:{_EN_NUMBER_WORDS})(?:-[a-z]+)?)"
            r"(?:\s*[:.\-–—]\s*.*|\s+.*)?",
            re.IGNORECASE,
        ),
    ),
    HeadingRule(
        "en_named",
        re.compile(r"(?:prologue|epilogue|interlude)(?:\s*[:.\-–—]\s*.*)?", re.IGNORECASE),
    ),
    HeadingRule(
        "bare_numeral",
        re.compile(r"(?:\d{1,4}|[IVXLCDM]{1,8})\.?"),
    ),
)


class ChapterIndexer:
    """Finds chapter headings in a single left-to-right pass over lines.

    The indexer is a pure function of the text and its rule set: the same
    input always yields the same markers, and it never raises for any text.
    Text before the first heading (the preamble) is not a chapter.

    Args:
        rules: Ordered heading rules; earlier rules take priority.
    """

    def __init__(self, rules: Sequence[HeadingRule] = DEFAULT_HEADING_RULES) -> None:
        self._rules = tuple(rules)

    def index(self, text: str) -> list[ChapterMarker]:
        """Detect chapter headings in decoded text.

        Args:
            text: Full decoded book text.

        Returns:
            Markers in ascending position order; empty when nothing matched.
        """
        markers: list[ChapterMarker] = []
        offset = 0

        for line in text.splitlines(keepends=True):
            title = self._match_line(line)
            if title is not None:
                markers.append(
                    ChapterMarker(
                        title=title,
                        position=offset,
                        number=extract_chapter_number(title),
                    )
                )
            offset += len(line)

        logger.debug("Detected %d chapter headings", len(markers))
        return markers

    def _match_line(self, line: str) -> str | None:
        """Return the trimmed heading if a rule matches this line."""
        stripped = line.strip()
        if not stripped or len(stripped) > MAX_HEADING_LENGTH:
            return None
        for rule in self._rules:
            if rule.matches(stripped):
                return stripped
        return None
