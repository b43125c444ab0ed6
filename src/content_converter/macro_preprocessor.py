"""Macro preprocessing for storage format to markdown conversion.

Rewrites the structured macros that carry literal bodies into plain
elements the storage walker understands:

- code macros become <pre><code data-language="..."> blocks, so a single
  code-block rule handles both macro-sourced and plain code blocks
- markdown macros holding a diagram become mermaid code blocks; any other
  markdown body is wrapped in a <markdown-source> element and emitted
  verbatim by the walker

Every remaining CDATA section is replaced by its escaped text, so the HTML
parser used downstream never has to understand CDATA. All other macros are
left in place for the walker's macro rules.
"""

import html
import logging
import re

from bs4 import BeautifulSoup

from .models import MacroKind, StructuredMacro

logger = logging.getLogger(__name__)


# A code or markdown macro. CDATA sections are consumed whole so a closing
# tag inside a code sample does not end the match early.
LITERAL_MACRO_PATTERN = re.compile(
    r'<ac:structured-macro\b[^>]*?\bac:name\s*=\s*(["\'])(?:code|markdown)\1[^>]*>'
    r'(?:<!\[CDATA\[.*?\]\]>|.)*?'
    r'</ac:structured-macro>',
    re.DOTALL | re.IGNORECASE,
)

CDATA_PATTERN = re.compile(r'<!\[CDATA\[(.*?)\]\]>', re.DOTALL)
PLAIN_TEXT_BODY_PATTERN = re.compile(
    r'<ac:plain-text-body\b[^>]*>(.*?)</ac:plain-text-body>',
    re.DOTALL | re.IGNORECASE,
)
TAG_PATTERN = re.compile(r'<[^>]+>')

MERMAID_FENCE_PATTERN = re.compile(r'^```\s*mermaid', re.IGNORECASE)
DIAGRAM_DECLARATION_PATTERN = re.compile(
    r'^\s*(?:flowchart|graph|sequenceDiagram|classDiagram(?:-v2)?|stateDiagram(?:-v2)?'
    r'|erDiagram|gantt|journey|pie|timeline)\b',
    re.IGNORECASE,
)

MARKDOWN_SOURCE_TAG = 'markdown-source'


def is_mermaid_diagram(text: str) -> bool:
    """Check whether a markdown macro body describes a mermaid diagram.

    A body counts as a diagram when it is already a fenced mermaid block or
    when its first line is a diagram declaration (flowchart, graph,
    sequence, class, state, entity-relationship, gantt, journey, pie or
    timeline).
    """
    stripped = text.strip()
    if MERMAID_FENCE_PATTERN.match(stripped):
        return True
    return bool(DIAGRAM_DECLARATION_PATTERN.match(stripped))


def _literal_body(fragment: str) -> str:
    """Return the literal plain-text body of a macro fragment.

    CDATA sections are unwrapped (split sections are joined back); without
    CDATA the raw text is unescaped.
    """
    match = PLAIN_TEXT_BODY_PATTERN.search(fragment)
    if not match:
        return ''
    raw = match.group(1)
    sections = CDATA_PATTERN.findall(raw)
    if sections:
        return ''.join(sections)
    return html.unescape(TAG_PATTERN.sub('', raw))


def parse_literal_macro(fragment: str) -> StructuredMacro:
    """Parse a code or markdown macro fragment into a StructuredMacro."""
    body = _literal_body(fragment)
    # Parameters are read from the fragment with its body removed
    without_body = PLAIN_TEXT_BODY_PATTERN.sub('', fragment)
    soup = BeautifulSoup(without_body, 'html.parser')
    element = soup.find('ac:structured-macro')
    if element is None:
        return StructuredMacro(name='', plain_text_body=body)
    macro = StructuredMacro.from_element(element)
    return StructuredMacro(
        name=macro.name.lower(),
        parameters=macro.parameters,
        plain_text_body=body,
    )


def _code_block(language: str, body: str) -> str:
    return (
        f'<pre><code data-language="{html.escape(language, quote=True)}">'
        f'{html.escape(body, quote=False)}</code></pre>'
    )


def _rewrite_literal_macro(match: 're.Match') -> str:
    fragment = match.group(0)
    macro = parse_literal_macro(fragment)

    if macro.kind is MacroKind.CODE:
        # The body is kept verbatim, edge blank lines included
        return _code_block(macro.language, macro.plain_text_body or '')

    if macro.kind is MacroKind.MARKDOWN:
        inner = (macro.plain_text_body or '').strip()
        if not inner:
            # Left for the walker's no-op markdown rule
            return fragment
        if is_mermaid_diagram(inner) and not MERMAID_FENCE_PATTERN.match(inner):
            logger.debug("Converting markdown macro diagram to mermaid code block")
            return '\n' + _code_block('mermaid', inner) + '\n'
        return (
            f'\n<{MARKDOWN_SOURCE_TAG}>{html.escape(inner, quote=False)}'
            f'</{MARKDOWN_SOURCE_TAG}>\n'
        )

    return fragment


def preprocess(storage_text: str) -> str:
    """Normalize literal-body macros and CDATA sections of storage format.

    Args:
        storage_text: Confluence storage format XHTML

    Returns:
        XHTML in which code and markdown macros are replaced by plain
        elements and no CDATA section remains.
    """
    if not storage_text:
        return ''

    text = LITERAL_MACRO_PATTERN.sub(_rewrite_literal_macro, storage_text)
    # Remaining CDATA (unknown plain-text macros, link bodies) becomes text
    return CDATA_PATTERN.sub(lambda m: html.escape(m.group(1), quote=False), text)


def strip_tags(storage_text: str) -> str:
    """Best-effort plain text: remove every tag and trim the result."""
    return TAG_PATTERN.sub('', storage_text or '').strip()
