"""Inline markdown rendering for the storage format encoder.

Converts the inline spans of a single markdown line (emphasis, code,
strikethrough, links, autolinks and emoji shorthand) into storage format
XHTML. The substitutions run in a fixed order: code spans first, then
strikethrough, bold-italic, bold, italic and finally explicit links, so a
later pattern never re-matches delimiters consumed by an earlier one.

The reverse direction (XHTML spans to markdown) is handled by the
storage walker's convert_strong/convert_em/convert_code/convert_del rules.
"""

import html
import re
from typing import List


# Emoji glyphs stored as numeric character references. Sequences with a
# variation selector come before their bare glyph.
EMOJI_ENTITIES = (
    ('\U0001F4CB', '&#128203;'),          # clipboard
    ('\U0001F4C4', '&#128196;'),          # page facing up
    ('\U0001F50D', '&#128269;'),          # magnifying glass
    ('\U0001F3F7️', '&#127991;'),    # label
    ('\U0001F3F7', '&#127991;'),
    ('\U0001F465', '&#128101;'),          # busts in silhouette
    ('\U0001F3E2', '&#127970;'),          # office building
    ('\U0001F4DD', '&#128221;'),          # memo
    ('⭐', '&#11088;'),               # star
    ('✅', '&#9989;'),                # check mark button
    ('❌', '&#10060;'),               # cross mark
    ('\U0001F680', '&#128640;'),          # rocket
    ('\U0001F4E6', '&#128230;'),          # package
    ('\U0001F4A1', '&#128161;'),          # light bulb
    ('\U0001F527', '&#128295;'),          # wrench
    ('⚠️', '&#9888;'),          # warning
    ('⚠', '&#9888;'),
    ('\U0001F4CA', '&#128202;'),          # bar chart
    ('\U0001F91D', '&#129309;'),          # handshake
    ('\U0001F4C8', '&#128200;'),          # chart increasing
    ('\U0001F3AF', '&#127919;'),          # direct hit
)

AUTOLINK_PATTERN = re.compile(r'<(https?://[^\s>]+)>')
MAILTO_PATTERN = re.compile(r'<([^\s@<>]+@[^\s@<>]+\.[^\s@<>]+)>')
LINK_TARGET_PATTERN = re.compile(r'(\[[^\]]+\]\()([^)\s]+)(\))')

# Ampersands that do not already start a numeric character reference
BARE_AMPERSAND_PATTERN = re.compile(r'&(?!#\d+;)')

CODE_SPAN_PATTERN = re.compile(r'`([^`]+)`')
STRIKETHROUGH_PATTERN = re.compile(r'~~([^~\n]+)~~')
BOLD_ITALIC_STAR_PATTERN = re.compile(r'\*\*\*([^*\n]+)\*\*\*')
BOLD_ITALIC_UNDERSCORE_PATTERN = re.compile(r'(?<!\w)___([^_\n]+)___(?!\w)')
BOLD_STAR_PATTERN = re.compile(r'\*\*([^*\n]+)\*\*')
BOLD_UNDERSCORE_PATTERN = re.compile(r'(?<!\w)__([^_\n]+)__(?!\w)')
ITALIC_STAR_PATTERN = re.compile(r'\*([^*\n]+)\*')
ITALIC_UNDERSCORE_PATTERN = re.compile(r'(?<!\w)_([^_\n]+)_(?!\w)')
LINK_PATTERN = re.compile(r'\[([^\]]+)\]\(([^)]+)\)')

# Stashed fragments are referenced by NUL-delimited indexes
STASH_TOKEN_PATTERN = re.compile(r'\x00(\d+)\x00')


class _Stash:
    """Holds finished fragments out of reach of later substitutions."""

    def __init__(self):
        self._fragments: List[str] = []

    def put(self, fragment: str) -> str:
        self._fragments.append(fragment)
        return f'\x00{len(self._fragments) - 1}\x00'

    def restore(self, text: str) -> str:
        # Fragments may contain tokens of earlier fragments
        while STASH_TOKEN_PATTERN.search(text):
            text = STASH_TOKEN_PATTERN.sub(
                lambda m: self._fragments[int(m.group(1))], text
            )
        return text


def escape_text(text: str) -> str:
    """Escape &, < and > while keeping numeric character references."""
    text = BARE_AMPERSAND_PATTERN.sub('&amp;', text)
    return text.replace('<', '&lt;').replace('>', '&gt;')


def escape_attribute(value: str) -> str:
    """Escape a value for use inside a double-quoted XML attribute."""
    return html.escape(value, quote=True)


def replace_emoji(text: str) -> str:
    """Replace known emoji glyphs with numeric character references."""
    for glyph, entity in EMOJI_ENTITIES:
        text = text.replace(glyph, entity)
    return text


def render_inline(text: str) -> str:
    """Render the inline markdown of a single line as storage format XHTML.

    Args:
        text: One line of markdown (block markers already removed)

    Returns:
        XHTML fragment. Unmatched delimiters are left verbatim.

    Example:
        >>> render_inline("a **bold** and `x < y`")
        'a <strong>bold</strong> and <code>x &lt; y</code>'
    """
    if not text:
        return ''

    stash = _Stash()
    text = text.replace('\x00', '')
    text = replace_emoji(text)

    # Autolinks are protected before the generic escaping pass
    text = AUTOLINK_PATTERN.sub(
        lambda m: stash.put(
            f'<a href="{escape_attribute(m.group(1))}">{escape_text(m.group(1))}</a>'
        ),
        text,
    )
    text = MAILTO_PATTERN.sub(
        lambda m: stash.put(
            f'<a href="mailto:{escape_attribute(m.group(1))}">{escape_text(m.group(1))}</a>'
        ),
        text,
    )
    # Link targets must not be touched by the emphasis patterns
    text = LINK_TARGET_PATTERN.sub(
        lambda m: m.group(1) + stash.put(escape_attribute(m.group(2))) + m.group(3),
        text,
    )

    text = escape_text(text)

    text = CODE_SPAN_PATTERN.sub(lambda m: stash.put(f'<code>{m.group(1)}</code>'), text)
    text = STRIKETHROUGH_PATTERN.sub(r'<del>\1</del>', text)
    text = BOLD_ITALIC_STAR_PATTERN.sub(r'<strong><em>\1</em></strong>', text)
    text = BOLD_ITALIC_UNDERSCORE_PATTERN.sub(r'<strong><em>\1</em></strong>', text)
    text = BOLD_STAR_PATTERN.sub(r'<strong>\1</strong>', text)
    text = BOLD_UNDERSCORE_PATTERN.sub(r'<strong>\1</strong>', text)
    text = ITALIC_STAR_PATTERN.sub(r'<em>\1</em>', text)
    text = ITALIC_UNDERSCORE_PATTERN.sub(r'<em>\1</em>', text)
    text = LINK_PATTERN.sub(r'<a href="\2">\1</a>', text)

    return stash.restore(text)
