"""Post-processing of markdown produced by the storage walker.

Fixes escaping artifacts and spacing left by the tree walk. Fenced code
blocks are never rewritten, except mermaid fences, which are reflowed so
that the diagram declaration, each edge and each style directive sit on
their own line.
"""

import re

FENCED_BLOCK_PATTERN = re.compile(r'(^```[^\n]*\n.*?^```[ \t]*$)', re.MULTILINE | re.DOTALL)

ESCAPED_HEADING_NUMBER_PATTERN = re.compile(r'^(#+\s+\d+)\\\.', re.MULTILINE)
ESCAPED_LIST_NUMBER_PATTERN = re.compile(r'^(\d+)\\\.\s+', re.MULTILINE)
BLANK_RUN_BEFORE_RULE_PATTERN = re.compile(r'\n{3,}---')
BLANK_RUN_AFTER_RULE_PATTERN = re.compile(r'---\n{3,}')
WIDE_BULLET_PATTERN = re.compile(r'^-[ \t]{2,}', re.MULTILINE)
BROKEN_NESTED_BULLET_PATTERN = re.compile(r'^-[ \t]+-[ \t]+', re.MULTILINE)
BLANK_BEFORE_CHILD_BULLET_PATTERN = re.compile(r'(^-[ \t]+.*)\n\n( {4}-[ \t]+)', re.MULTILINE)
STRAY_ESCAPE_PATTERN = re.compile(r'\\(`{1,3}|-|#|\[|\])')
WHITESPACE_ONLY_LINE_PATTERN = re.compile(r'^[ \t]+$', re.MULTILINE)
BLANK_RUN_PATTERN = re.compile(r'\n{3,}')

MERMAID_FENCE_PATTERN = re.compile(r'^```mermaid[ \t]*\n(.*?)^```[ \t]*$', re.MULTILINE | re.DOTALL)
FLOWCHART_DECLARATION_PATTERN = re.compile(r'\s*flowchart\s+([A-Z]{2})\s*', re.IGNORECASE)
MERMAID_EDGE_PATTERN = re.compile(
    r'\s+([A-Za-z0-9_\[\]{}:.]+\s*--?>\|?[^\n]*?\|?\s*[A-Za-z0-9_\[\]{}:.]+)'
)
MERMAID_STYLE_PATTERN = re.compile(r'\s+style\s+')


def reflow_mermaid(block: str) -> str:
    """Put a mermaid fence's declaration, edges and styles on separate lines."""
    match = MERMAID_FENCE_PATTERN.match(block)
    if not match:
        return block
    diagram = match.group(1)
    diagram = FLOWCHART_DECLARATION_PATTERN.sub(
        lambda m: f'flowchart {m.group(1)}\n', diagram, count=1
    )
    diagram = MERMAID_EDGE_PATTERN.sub(r'\n\1', diagram)
    diagram = MERMAID_STYLE_PATTERN.sub('\nstyle ', diagram)
    return '```mermaid\n' + diagram.strip() + '\n```'


def _cleanup_prose(text: str) -> str:
    text = ESCAPED_HEADING_NUMBER_PATTERN.sub(r'\1.', text)
    text = ESCAPED_LIST_NUMBER_PATTERN.sub(r'\1. ', text)

    text = WHITESPACE_ONLY_LINE_PATTERN.sub('', text)
    text = BLANK_RUN_BEFORE_RULE_PATTERN.sub('\n\n---', text)
    text = BLANK_RUN_AFTER_RULE_PATTERN.sub('---\n\n', text)
    text = BLANK_RUN_PATTERN.sub('\n\n', text)

    text = WIDE_BULLET_PATTERN.sub('- ', text)
    text = BROKEN_NESTED_BULLET_PATTERN.sub('    - ', text)
    text = BLANK_BEFORE_CHILD_BULLET_PATTERN.sub(r'\1\n\2', text)

    return STRAY_ESCAPE_PATTERN.sub(r'\1', text)


def cleanup_markdown(markdown: str) -> str:
    """Clean up walker output.

    Args:
        markdown: Markdown emitted by the storage walker

    Returns:
        Cleaned markdown without leading or trailing blank lines
    """
    if not markdown:
        return ''

    parts = FENCED_BLOCK_PATTERN.split(markdown)
    cleaned = []
    for index, part in enumerate(parts):
        # split() with one group alternates prose and fenced blocks
        if index % 2 == 1:
            cleaned.append(reflow_mermaid(part) if part.startswith('```mermaid') else part)
        else:
            cleaned.append(_cleanup_prose(part))
    return ''.join(cleaned).strip()
