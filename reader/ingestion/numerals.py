"""Chapter number parsing for Chinese, roman and English headings."""

import re

CN_DIGITS: dict[str, int] = {
    "零": 0, "〇": 0,
    "一": 1, "壹": 1,
    "二": 2, "贰": 2, "两": 2,
    "三": 3, "叁": 3,
    "四": 4, "肆": 4,
    "五": 5, "伍": 5,
    "六": 6, "陆": 6,
    "七": 7, "柒": 7,
    "八": 8, "捌": 8,
    "九": 9, "玖": 9,
}

CN_UNITS: dict[str, int] = {
    "十": 10, "拾": 10,
    "百": 100, "佰": 100,
    "千": 1000, "仟": 1000,
}

CN_NUMERAL_CHARS = "".join(CN_DIGITS) + "".join(CN_UNITS) + "万"

ROMAN_VALUES: dict[str, int] = {"I": 1, "V": 5, "X": 10, "L": 50, "C": 100, "D": 500, "M": 1000}

ENGLISH_NUMBERS: dict[str, int] = {
    "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10,
    "eleven": 11, "twelve": 12, "thirteen": 13, "fourteen": 14, "fifteen": 15,
    "sixteen": 16, "seventeen": 17, "eighteen": 18, "nineteen": 19, "twenty": 20,
}

_CN_NUMBERED = re.compile(rf"第\s*([\d{CN_NUMERAL_CHARS}]+)\s*[章节卷集部篇回]")
_EN_NUMBERED = re.compile(r"^(?:chapter|part|book)\s+(\w+)", re.IGNORECASE)
_ROMAN = re.compile(r"^[IVXLCDM]+$")
_BARE_NUMBER = re.compile(r"^(\d{1,4}|[IVXLCDM]{1,8})\.?$")


def parse_chinese_numeral(text: str) -> int | None:
    """Convert a Chinese numeral such as "一百二十三" or "十一" to an int.

    Returns None when the text holds no numeral characters.
    """
    text = text.strip()
    if not text:
        return None
    if text.isdigit():
        return int(text)

    total = 0  # Completed groups of 万
    section = 0  # Value below 万
    digit = 0
    seen = False

    for char in text:
        if char in CN_DIGITS:
            digit = CN_DIGITS[char]
            seen = True
        elif char in CN_UNITS:
            # A unit with no preceding digit counts as one: 十一 == 11
            section += (digit or 1) * CN_UNITS[char]
            digit = 0
            seen = True
        elif char == "万":
            total += (section + digit or 1) * 10000
            section = digit = 0
            seen = True
        else:
            return None

    if not seen:
        return None
    return total + section + digit


def parse_roman_numeral(text: str) -> int | None:
    text = text.strip().upper()
    if not text or not _ROMAN.match(text):
        return None

    value = 0
    for i, char in enumerate(text):
        current = ROMAN_VALUES[char]
        if i + 1 < len(text) and ROMAN_VALUES[text[i + 1]] > current:
            value -= current
        else:
            value += current
    return value


def _parse_token(token: str) -> int | None:
    if token.isdigit():
        return int(token)
    lowered = token.lower()
    if lowered in ENGLISH_NUMBERS:
        return ENGLISH_NUMBERS[lowered]
    return parse_roman_numeral(token)


def extract_chapter_number(title: str) -> int | None:
    """Extract the chapter number from a heading title.

    Handles "第12章", "第一百零三章", "Chapter 7", "Chapter Seven",
    "Part IV" and bare numeral headings such as "12." or "XIV".

    Args:
        title: The trimmed heading line.

    Returns:
        The chapter number, or None if the heading carries none.
    """
    match = _CN_NUMBERED.search(title)
    if match:
        return parse_chinese_numeral(match.group(1))

    match = _EN_NUMBERED.match(title)
    if match:
        return _parse_token(match.group(1))

    match = _BARE_NUMBER.match(title.strip())
    if match:
        return _parse_token(match.group(1))

    return None
