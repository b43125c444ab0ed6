"""Tag-tree walker converting normalized storage format to markdown.

Built on markdownify: every storage format construct gets its own
convert_<tag> rule (namespaced tags such as ac:task-list map to
convert_ac_task_list). Structured macros are dispatched on their
MacroKind, with unknown macros falling through to an HTML comment marker
so their content is never dropped silently.

The input is expected to have been normalized by macro_preprocessor first:
code and markdown macros are already plain <pre>/<markdown-source>
elements and no CDATA sections remain.
"""

import logging
import re
from typing import List, Tuple
from urllib.parse import quote

from bs4 import Tag
from markdownify import MarkdownConverter as BaseMarkdownConverter

from .models import MacroKind, StructuredMacro

logger = logging.getLogger(__name__)


# Table cells and rows are tagged with control characters while the table
# is being assembled; they never reach the output.
CELL_MARK = '\x1f'
HEADER_CELL_MARK = '\x1d'
ROW_MARK = '\x1e'
CELL_SPLIT_PATTERN = re.compile('[\x1d\x1f]')

TASK_NOTE_STYLE_PATTERN = re.compile(r'list-style-type:\s*none', re.IGNORECASE)

INLINE_CONTEXT_TAGS = {'_inline', 'p', 'li', 'a', 'span', 'td', 'th'}

PAGE_TITLE_SAFE_CHARS = "-_.!~*'()"


def _chomp(text: str) -> Tuple[str, str, str]:
    """Split surrounding spaces off inline content."""
    prefix = ' ' if text[:1].isspace() else ''
    suffix = ' ' if text[-1:].isspace() else ''
    return prefix, suffix, text.strip()


def _fence(language: str, body: str) -> str:
    """Fenced code block whose body is kept byte for byte."""
    body = body.replace('\r\n', '\n')
    if not body:
        return f'\n\n```{language}\n```\n\n'
    return f'\n\n```{language}\n{body}\n```\n\n'


def escape_table_cell(text: str) -> str:
    """Escape pipes and fold line breaks so the text fits in a pipe table."""
    text = text.replace('|', '\\|')
    return re.sub(r'\s*\n\s*', ' ', text).strip()


class StorageMarkdownConverter(BaseMarkdownConverter):
    """markdownify converter with Confluence storage format rules.

    A new instance should be used per conversion; unknown macros seen
    during the walk are recorded in ``warnings``.
    """

    def __init__(self, page_link_scheme: str = 'confluence', **options):
        options.setdefault('heading_style', 'atx')  # Use # style headings
        options.setdefault('bullets', '-')  # Use - for bullets
        options.setdefault('strong_em_symbol', '*')  # Use * for bold/italic
        super().__init__(**options)
        self.page_link_scheme = page_link_scheme
        self.warnings: List[str] = []

    def get_conv_fn(self, tag_name):
        """Resolve rules for namespaced and hyphenated tag names."""
        if ':' in tag_name or '-' in tag_name:
            return getattr(self, 'convert_' + re.sub(r'[:-]', '_', tag_name), None)
        return super().get_conv_fn(tag_name)

    # -- inline spans -------------------------------------------------------

    def convert_del(self, el, text, parent_tags):
        if '_noformat' in parent_tags:
            return text
        prefix, suffix, text = _chomp(text)
        if not text:
            return ''
        return f'{prefix}~~{text}~~{suffix}'

    convert_s = convert_del

    # -- code blocks --------------------------------------------------------

    def convert_pre(self, el, text, parent_tags):
        """Fenced code block; the language comes from data-language if set."""
        code = el.find('code')
        if code is not None and code.has_attr('data-language'):
            # Rewritten code macro: the body is the literal macro body
            return _fence(code['data-language'].strip(), el.get_text())

        body = el.get_text()
        # Layout newlines right after <pre> and before </pre>
        if body.startswith('\n'):
            body = body[1:]
        if body.endswith('\n'):
            body = body[:-1]
        return _fence('', body)

    def convert_markdown_source(self, el, text, parent_tags):
        """Markdown macro body that is already markdown; emitted verbatim."""
        return '\n\n' + el.get_text().strip('\r\n') + '\n\n'

    # -- tables -------------------------------------------------------------

    def _table_cell(self, mark: str, el, text: str) -> str:
        colspan = 1
        if (el.get('colspan') or '').isdigit():
            colspan = max(1, min(1000, int(el['colspan'])))
        return mark + escape_table_cell(text) + mark * (colspan - 1)

    def convert_td(self, el, text, parent_tags):
        return self._table_cell(CELL_MARK, el, text)

    def convert_th(self, el, text, parent_tags):
        return self._table_cell(HEADER_CELL_MARK, el, text)

    def convert_tr(self, el, text, parent_tags):
        return ROW_MARK + text

    def convert_table(self, el, text, parent_tags):
        """GFM pipe table; short rows are padded to the first row's width.

        A table without header cells gets its first row promoted to the
        header, since pipe tables always need one.
        """
        rows = []
        for raw_row in text.split(ROW_MARK)[1:]:
            cells = CELL_SPLIT_PATTERN.split(raw_row)[1:]
            if cells:
                rows.append((HEADER_CELL_MARK in raw_row, [cell.strip() for cell in cells]))
        if not rows:
            return ''

        column_count = len(rows[0][1])
        lines = []
        for cells in [row for _, row in rows]:
            padded = cells + [''] * (column_count - len(cells))
            lines.append('| ' + ' | '.join(padded) + ' |')
        lines.insert(1, '| ' + ' | '.join(['---'] * column_count) + ' |')
        return '\n\n' + '\n'.join(lines) + '\n\n'

    # -- lists --------------------------------------------------------------

    def _is_task_note_list(self, el) -> bool:
        if not TASK_NOTE_STYLE_PATTERN.search(el.get('style') or ''):
            return False
        for previous in el.previous_siblings:
            if isinstance(previous, Tag):
                return previous.name == 'ac:task-list'
            if previous.strip():
                return False
        return False

    def convert_ul(self, el, text, parent_tags):
        """Bullet list, or note lines attached to the preceding task list.

        Only a single level of notes is supported: each direct item becomes
        one 4-space indented bullet and the text of nested items is joined
        onto it.
        """
        if self._is_task_note_list(el):
            lines = []
            for item in el.find_all('li', recursive=False):
                cleaned = ' '.join(item.get_text(' ').split())
                if cleaned:
                    lines.append(f'    - {cleaned}')
            return '\n' + '\n'.join(lines) + '\n\n' if lines else ''
        return super().convert_ul(el, text, parent_tags)

    def convert_ac_task_list(self, el, text, parent_tags):
        lines = [line.strip() for line in text.split('\n') if line.strip()]
        return '\n\n' + '\n'.join(lines) + '\n\n'

    def convert_ac_task(self, el, text, parent_tags):
        status = el.find('ac:task-status')
        complete = status is not None and status.get_text().strip().lower() == 'complete'
        checkbox = '[x]' if complete else '[ ]'
        body = ' '.join(text.split())
        return f'\n- {checkbox} {body}\n'

    def convert_ac_task_body(self, el, text, parent_tags):
        return text

    def convert_ac_task_id(self, el, text, parent_tags):
        return ''

    convert_ac_task_uuid = convert_ac_task_id
    convert_ac_task_status = convert_ac_task_id

    # -- images and links ---------------------------------------------------

    def convert_ac_image(self, el, text, parent_tags):
        """Image with an external URL or an attachment file name."""
        alt = el.get('ac:alt') or ''
        url_element = el.find('ri:url')
        attachment = el.find('ri:attachment')
        if url_element is not None:
            target = url_element.get('ri:value') or ''
        elif attachment is not None:
            target = attachment.get('ri:filename') or ''
        else:
            return ''

        image = f'![{alt}]({target})'
        if set(parent_tags) & INLINE_CONTEXT_TAGS:
            return image
        return f'\n\n{image}\n\n'

    def convert_ac_link(self, el, text, parent_tags):
        """User mentions become @name, page links become [Title](...)."""
        user = el.find('ri:user')
        if user is not None:
            identifier = (
                user.get('ri:username')
                or user.get('ri:userkey')
                or user.get('ri:account-id')
                or 'unknown'
            )
            return f'@{identifier}'

        page = el.find('ri:page')
        if page is not None:
            title = page.get('ri:content-title') or 'Page'
            space_key = page.get('ri:space-key') or ''
            if not space_key:
                return f'[{title}]'
            encoded_title = quote(title, safe=PAGE_TITLE_SAFE_CHARS)
            return f'[{title}]({self.page_link_scheme}://{space_key}/{encoded_title})'

        return text

    # -- structured macros --------------------------------------------------

    def convert_ac_parameter(self, el, text, parent_tags):
        # Parameters of known macros are read structurally by their rules
        parent = el.parent
        if parent is not None and parent.name == 'ac:structured-macro':
            if MacroKind.from_name(parent.get('ac:name', '')) is not MacroKind.UNKNOWN:
                return ''
        return f' {text.strip()} '

    def convert_ac_plain_text_body(self, el, text, parent_tags):
        return '\n\n' + el.get_text().strip('\r\n') + '\n\n'

    def convert_ac_structured_macro(self, el, text, parent_tags):
        macro = StructuredMacro.from_element(el)
        rules = {
            MacroKind.CODE: self._convert_code_macro,
            MacroKind.MARKDOWN: self._convert_markdown_macro,
            MacroKind.EXPAND: self._convert_expand_macro,
            MacroKind.PANEL: self._convert_panel_macro,
            MacroKind.UNKNOWN: self._convert_unknown_macro,
        }
        return rules[macro.kind](macro, text)

    def _convert_code_macro(self, macro: StructuredMacro, text: str) -> str:
        return _fence(macro.language, macro.plain_text_body or '')

    def _convert_markdown_macro(self, macro: StructuredMacro, text: str) -> str:
        # Markdown macros were expanded during preprocessing
        return ''

    def _convert_expand_macro(self, macro: StructuredMacro, text: str) -> str:
        title = macro.title or 'Details'
        return f'\n\n<details>\n<summary>{title}</summary>\n\n{text.strip()}\n</details>\n\n'

    def _convert_panel_macro(self, macro: StructuredMacro, text: str) -> str:
        body = text.strip()
        # Blank lines stay inside the quote as a bare '>'
        quoted = '\n'.join(
            f'> {line}' if line.strip() else '>'
            for line in body.split('\n')
        ) if body else ''
        header = f'> [!{macro.name.upper()}]'
        return f'\n\n{header}\n{quoted}\n\n' if quoted else f'\n\n{header}\n\n'

    def _convert_unknown_macro(self, macro: StructuredMacro, text: str) -> str:
        name = macro.name or 'unknown'
        logger.debug(f"Unsupported macro kept as comment marker: {name}")
        self.warnings.append(f"Unsupported macro: {name}")
        marker = f'<!-- Confluence Macro: {name} -->'
        content = text.strip()
        return f'\n\n{marker}\n{content}\n\n' if content else f'\n\n{marker}\n\n'


def tree_to_markdown(normalized_storage: str, page_link_scheme: str = 'confluence') -> Tuple[str, List[str]]:
    """Walk normalized storage format and emit markdown.

    Returns:
        Tuple of (markdown, warnings about unsupported macros)
    """
    walker = StorageMarkdownConverter(page_link_scheme=page_link_scheme)
    return walker.convert(normalized_storage), walker.warnings
