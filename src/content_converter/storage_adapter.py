"""Final normalization of encoder output before upload.

Confluence rejects or re-renders a few shapes the line encoder can
produce: empty paragraphs, empty table cells and the newline-separated
element layout. CDATA sections are masked while rewriting so literal code
bodies are never altered.
"""

import re

CDATA_SECTION_PATTERN = re.compile(r'<!\[CDATA\[.*?\]\]>', re.DOTALL)
CDATA_TOKEN_PATTERN = re.compile(r'\x00CDATA(\d+)\x00')
EMPTY_PARAGRAPH_PATTERN = re.compile(r'<p>\s*</p>')
EMPTY_CELL_PATTERN = re.compile(r'<(td|th)>\s*</\1>')
# Encoder output has one element per line; text never spans lines
LINE_BREAK_PATTERN = re.compile(r'[ \t]*\n\s*')

NON_BREAKING_SPACE = '&#160;'


def adapt_to_storage(storage: str) -> str:
    """Normalize encoded storage format.

    Drops empty paragraphs, fills empty table cells with a non-breaking
    space and removes the line breaks between elements.

    Args:
        storage: Output of the storage encoder

    Returns:
        Storage format ready for upload
    """
    if not storage:
        return ''

    sections = []

    def mask(match):
        sections.append(match.group(0))
        return f'\x00CDATA{len(sections) - 1}\x00'

    text = CDATA_SECTION_PATTERN.sub(mask, storage)
    text = EMPTY_PARAGRAPH_PATTERN.sub('', text)
    text = EMPTY_CELL_PATTERN.sub(lambda m: f'<{m.group(1)}>{NON_BREAKING_SPACE}</{m.group(1)}>', text)
    text = LINE_BREAK_PATTERN.sub('', text)
    text = CDATA_TOKEN_PATTERN.sub(lambda m: sections[int(m.group(1))], text)
    return text.strip()
