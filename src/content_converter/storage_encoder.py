"""Line-oriented markdown to storage format encoder.

A single forward pass over markdown lines. Block state (open table, list
levels, blockquote depth, code fence) is carried in an EncoderState and
each line is matched against the block rules in a fixed priority order:

    blank line, code fence, heading, bullet item, numbered item,
    <details> block, image, horizontal rule, blockquote, table, paragraph

End of input closes every construct that is still open, so malformed
markdown (unterminated fences, details blocks or lists) never raises.
"""

import logging
import posixpath
import re
import uuid
from typing import Dict, List

from .inline_formatter import escape_attribute, escape_text, render_inline
from .models import EncoderState, FenceKind, ListContext, ListKind, TableContext

logger = logging.getLogger(__name__)


DEFAULT_MAX_NESTING_DEPTH = 10

HEADING_PATTERN = re.compile(r'^(#{1,6})(?:\s+(.*))?$')
BULLET_PATTERN = re.compile(r'^(\s*)([-*])\s+(.*)$')
ORDERED_PATTERN = re.compile(r'^(\s*)(\d+)[.)]\s+(.*)$')
CHECKBOX_PATTERN = re.compile(r'^\[([ xX])\]\s*(.*)$')
DETAILS_OPEN_PATTERN = re.compile(r'^<details(?:\s[^>]*)?>', re.IGNORECASE)
DETAILS_CLOSE_PATTERN = re.compile(r'^</details>', re.IGNORECASE)
SUMMARY_PATTERN = re.compile(r'^<summary>(.*?)</summary>$', re.IGNORECASE)
IMAGE_PATTERN = re.compile(r'^!\[([^\]]*)\]\(([^)]+)\)$')
HORIZONTAL_RULE_PATTERN = re.compile(r'^[-*_]{3,}$')
ALERT_PATTERN = re.compile(r'^>\s*\[!(NOTE|TIP|INFO|WARNING|CAUTION)\]\s*$', re.IGNORECASE)
BLOCKQUOTE_PATTERN = re.compile(r'^((?:>\s*)+)(.*)$')
TABLE_SEPARATOR_PATTERN = re.compile(r'^\|?\s*:?-{3,}:?\s*(?:\|\s*:?-{3,}:?\s*)*\|?$')
UNESCAPED_PIPE_PATTERN = re.compile(r'(?<!\\)\|')
QUOTE_PREFIX_PATTERN = re.compile(r'^>\s*')

LINK_DEFINITION_PATTERN = re.compile(r'^\[([^\]]+)\]:\s*(.+)$', re.MULTILINE)
LINK_DEFINITION_LINE_PATTERN = re.compile(r'^\[([^\]]+)\]:\s*.+\n?', re.MULTILINE)
FULL_REFERENCE_PATTERN = re.compile(r'\[([^\]]+)\]\[([^\]]*)\]')
SHORTCUT_REFERENCE_PATTERN = re.compile(r'\[([^\]]+)\](?![(\[:])')


def expand_link_references(content: str) -> str:
    """Expand reference-style links into inline links.

    ``[text][ref]``, ``[text][]`` and ``[text]`` are rewritten to
    ``[text](url)`` using ``[ref]: url`` definition lines, which are then
    removed. Labels match case-insensitively; a full reference to an
    undefined label is reduced to ``[text]``.
    """
    definitions: Dict[str, str] = {}
    for match in LINK_DEFINITION_PATTERN.finditer(content):
        definitions[match.group(1).lower()] = match.group(2).strip()
    if not definitions:
        return content

    content = LINK_DEFINITION_LINE_PATTERN.sub('', content)

    def replace_full(match):
        text, ref = match.group(1), match.group(2)
        url = definitions.get((ref or text).lower())
        return f'[{text}]({url})' if url else f'[{text}]'

    def replace_shortcut(match):
        url = definitions.get(match.group(1).lower())
        return f'[{match.group(1)}]({url})' if url else match.group(0)

    content = FULL_REFERENCE_PATTERN.sub(replace_full, content)
    return SHORTCUT_REFERENCE_PATTERN.sub(replace_shortcut, content)


def wrap_cdata(text: str) -> str:
    """Wrap text in a CDATA section, splitting any embedded terminator."""
    return '<![CDATA[' + text.replace(']]>', ']]]]><![CDATA[>') + ']]>'


def _macro_id() -> str:
    return str(uuid.uuid4())


class StorageEncoder:
    """Converts a markdown body into Confluence storage format.

    Each encode() call starts from a fresh EncoderState, so an encoder may
    be reused but must not be shared between threads.

    Args:
        max_nesting_depth: Cap for list and blockquote nesting; deeper
            indentation is clamped to this level
    """

    def __init__(self, max_nesting_depth: int = DEFAULT_MAX_NESTING_DEPTH):
        self.max_nesting_depth = max(1, max_nesting_depth)
        self.state = EncoderState()
        self._out: List[str] = []
        self._task_count = 0

    def encode(self, markdown: str) -> str:
        """Encode a markdown body (without front matter).

        Returns:
            Storage format XHTML, one element per line
        """
        self.state = EncoderState()
        self._out = []
        self._task_count = 0

        lines = markdown.replace('\r\n', '\n').replace('\r', '\n').split('\n')
        index = 0
        while index < len(lines):
            index = self._process_line(lines, index)

        if self.state.fence is not FenceKind.NONE:
            logger.warning("Unterminated code fence closed at end of input")
            self._close_fence()
        self._close_blocks()

        logger.debug(f"Encoded {len(lines)} markdown lines into {len(self._out)} elements")
        return '\n'.join(self._out)

    def _emit(self, fragment: str) -> None:
        self._out.append(fragment)

    # -- line dispatch ------------------------------------------------------

    def _process_line(self, lines: List[str], index: int) -> int:
        """Handle the line at index and return the index of the next line."""
        line = lines[index]
        stripped = line.strip()
        state = self.state

        if state.fence is not FenceKind.NONE:
            if stripped.startswith('```'):
                self._close_fence()
            else:
                state.fence_lines.append(line)
            return index + 1

        if not stripped:
            self._close_blocks()
            return index + 1

        if stripped.startswith('```'):
            self._close_blocks()
            self._open_fence(stripped[3:].strip())
            return index + 1

        heading = HEADING_PATTERN.match(stripped)
        if heading:
            self._close_blocks()
            level = len(heading.group(1))
            title = render_inline((heading.group(2) or '').strip())
            self._emit(f'<h{level}>{title}</h{level}>')
            return index + 1

        bullet = BULLET_PATTERN.match(line)
        if bullet:
            self._close_table()
            self._close_blockquote()
            self._bullet_item(self._depth_for(bullet.group(1)), bullet.group(3))
            return index + 1

        ordered = ORDERED_PATTERN.match(line)
        if ordered:
            self._close_table()
            self._close_blockquote()
            self._list_item(ListKind.ORDERED, self._depth_for(ordered.group(1)), ordered.group(3))
            return index + 1

        if DETAILS_OPEN_PATTERN.match(stripped):
            self._close_blocks()
            return self._details_block(lines, index)

        image = IMAGE_PATTERN.match(stripped)
        if image:
            self._close_blocks()
            self._image(image.group(1), image.group(2).strip())
            return index + 1

        if HORIZONTAL_RULE_PATTERN.match(stripped):
            self._close_blocks()
            self._emit('<hr />')
            return index + 1

        if stripped.startswith('>'):
            self._close_table()
            self._close_list()
            alert = ALERT_PATTERN.match(stripped)
            if alert:
                self._close_blockquote()
                return self._alert_panel(lines, index, alert.group(1).lower())
            self._blockquote_line(stripped)
            return index + 1
        self._close_blockquote()

        if state.table is not None:
            if '|' in stripped:
                self._table_row(stripped)
                return index + 1
            self._close_table()
        elif '|' in stripped and index + 1 < len(lines) \
                and TABLE_SEPARATOR_PATTERN.match(lines[index + 1].strip()):
            self._close_list()
            self._open_table(stripped)
            # The separator row is consumed with the header
            return index + 2

        self._paragraph(stripped)
        return index + 1

    def _depth_for(self, indent: str) -> int:
        return len(indent.expandtabs(4)) // 2 + 1

    def _close_blocks(self) -> None:
        self._close_table()
        self._close_blockquote()
        self._close_list()

    # -- code fences --------------------------------------------------------

    def _open_fence(self, info: str) -> None:
        language = info.split()[0] if info else ''
        state = self.state
        state.fence = FenceKind.MERMAID if language.lower() == 'mermaid' else FenceKind.CODE
        state.fence_language = language
        state.fence_lines = []

    def _close_fence(self) -> None:
        state = self.state
        if state.fence is FenceKind.MERMAID:
            body = '\n'.join(['```mermaid'] + state.fence_lines + ['```'])
            self._emit(
                f'<ac:structured-macro ac:name="markdown" ac:schema-version="1" '
                f'ac:macro-id="{_macro_id()}">'
                f'<ac:plain-text-body>{wrap_cdata(body)}</ac:plain-text-body>'
                f'</ac:structured-macro>'
            )
        else:
            parameter = ''
            if state.fence_language:
                parameter = (
                    f'<ac:parameter ac:name="language">'
                    f'{escape_text(state.fence_language)}</ac:parameter>'
                )
            body = '\n'.join(state.fence_lines)
            self._emit(
                f'<ac:structured-macro ac:name="code" ac:schema-version="1" '
                f'ac:macro-id="{_macro_id()}">{parameter}'
                f'<ac:plain-text-body>{wrap_cdata(body)}</ac:plain-text-body>'
                f'</ac:structured-macro>'
            )
        state.fence = FenceKind.NONE
        state.fence_language = ''
        state.fence_lines = []

    # -- lists --------------------------------------------------------------

    def _bullet_item(self, depth: int, body: str) -> None:
        checkbox = CHECKBOX_PATTERN.match(body)
        if checkbox:
            self._task_item(checkbox.group(1).lower() == 'x', checkbox.group(2))
            return

        current = self.state.list
        if current is not None and current.kind in (ListKind.TASK, ListKind.TASK_NOTE) and depth > 1:
            self._task_note_item(body)
            return
        self._list_item(ListKind.UNORDERED, depth, body)

    def _task_item(self, complete: bool, body: str) -> None:
        current = self.state.list
        if current is None or current.kind is not ListKind.TASK:
            self._close_list()
            self._emit('<ac:task-list>')
            self.state.list = ListContext([ListKind.TASK])

        self._task_count += 1
        status = 'complete' if complete else 'incomplete'
        self._emit('<ac:task>')
        self._emit(f'<ac:task-id>{self._task_count}</ac:task-id>')
        self._emit(f'<ac:task-uuid>{_macro_id()}</ac:task-uuid>')
        self._emit(f'<ac:task-status>{status}</ac:task-status>')
        self._emit(f'<ac:task-body>{render_inline(body)}</ac:task-body>')
        self._emit('</ac:task>')

    def _task_note_item(self, body: str) -> None:
        """Indented plain bullet under a task list, kept as a single-level note."""
        if self.state.list.kind is not ListKind.TASK_NOTE:
            self._close_list()
            self._emit('<ul style="list-style-type: none;">')
            self.state.list = ListContext([ListKind.TASK_NOTE])
        self._emit(f'<li>{render_inline(body)}</li>')

    def _list_item(self, kind: ListKind, depth: int, body: str) -> None:
        """Emit an ordinary list item, adjusting nesting one level at a time.

        Every open level keeps its current <li> open, so nested lists are
        placed inside their parent item.
        """
        current = self.state.list
        if current is not None and current.kind in (ListKind.TASK, ListKind.TASK_NOTE):
            self._close_list()
            current = None

        if current is None:
            self._emit(f'<{kind.tag}>')
            self.state.list = ListContext([kind])
        else:
            target = min(depth, current.depth + 1, self.max_nesting_depth)
            if depth > self.max_nesting_depth:
                logger.warning(f"List nesting clamped to depth {self.max_nesting_depth}")
            if target > current.depth:
                self._emit(f'<{kind.tag}>')
                current.levels.append(kind)
            else:
                while current.depth > target:
                    self._emit(f'</li></{current.levels.pop().tag}>')
                if current.innermost is kind:
                    self._emit('</li>')
                else:
                    self._emit(f'</li></{current.levels.pop().tag}>')
                    self._emit(f'<{kind.tag}>')
                    current.levels.append(kind)

        self._emit(f'<li>{render_inline(body)}')

    def _close_list(self) -> None:
        current = self.state.list
        if current is None:
            return
        if current.kind is ListKind.TASK:
            self._emit('</ac:task-list>')
        elif current.kind is ListKind.TASK_NOTE:
            self._emit('</ul>')
        else:
            while current.levels:
                self._emit(f'</li></{current.levels.pop().tag}>')
        self.state.list = None

    # -- collapsible sections -----------------------------------------------

    def _details_block(self, lines: List[str], index: int) -> int:
        """Collect a <details> block into an expand macro.

        Returns the index of the first line after the matching </details>,
        or the end of input when the block is never closed.
        """
        opener = lines[index].strip()
        rest = opener[DETAILS_OPEN_PATTERN.match(opener).end():]
        candidates = [(index, rest)] + [(i, lines[i]) for i in range(index + 1, len(lines))]

        title = 'Details'
        found_summary = False
        body: List[str] = []
        nesting = 1
        end = len(lines)
        for cursor, raw in candidates:
            text = raw.strip()
            if not text:
                continue
            if DETAILS_OPEN_PATTERN.match(text):
                nesting += 1
            elif DETAILS_CLOSE_PATTERN.match(text):
                nesting -= 1
                if nesting == 0:
                    end = cursor + 1
                    break
            elif nesting == 1 and not found_summary:
                summary = SUMMARY_PATTERN.match(text)
                if summary:
                    title = summary.group(1).strip() or title
                    found_summary = True
                    continue
            body.append(text)
        else:
            logger.warning("Unterminated <details> block closed at end of input")

        self._emit(
            f'<ac:structured-macro ac:name="expand" ac:schema-version="1" '
            f'ac:macro-id="{_macro_id()}">'
        )
        self._emit(f'<ac:parameter ac:name="title">{escape_text(title)}</ac:parameter>')
        self._emit('<ac:rich-text-body>')
        for text in body:
            self._emit(f'<p>{render_inline(text)}</p>')
        self._emit('</ac:rich-text-body>')
        self._emit('</ac:structured-macro>')
        return end

    # -- images and rules ---------------------------------------------------

    def _image(self, alt: str, url: str) -> None:
        alt_attribute = escape_attribute(alt)
        if url.startswith('http://') or url.startswith('https://'):
            self._emit(
                f'<ac:image ac:alt="{alt_attribute}">'
                f'<ri:url ri:value="{escape_attribute(url)}" /></ac:image>'
            )
        else:
            filename = posixpath.basename(url.rstrip('/')) or url
            self._emit(
                f'<ac:image ac:alt="{alt_attribute}">'
                f'<ri:attachment ri:filename="{escape_attribute(filename)}" /></ac:image>'
            )

    # -- blockquotes and panels ---------------------------------------------

    def _alert_panel(self, lines: List[str], index: int, panel: str) -> int:
        """Collect a GitHub alert into an info/note/tip/warning/caution macro."""
        body: List[str] = []
        cursor = index + 1
        while cursor < len(lines):
            text = lines[cursor].strip()
            if not text.startswith('>'):
                break
            body.append(QUOTE_PREFIX_PATTERN.sub('', text))
            cursor += 1

        self._emit(
            f'<ac:structured-macro ac:name="{panel}" ac:schema-version="1" '
            f'ac:macro-id="{_macro_id()}">'
        )
        self._emit('<ac:rich-text-body>')
        for text in body:
            if text:
                self._emit(f'<p>{render_inline(text)}</p>')
        self._emit('</ac:rich-text-body>')
        self._emit('</ac:structured-macro>')
        return cursor

    def _blockquote_line(self, stripped: str) -> None:
        match = BLOCKQUOTE_PATTERN.match(stripped)
        depth = match.group(1).count('>')
        if depth > self.max_nesting_depth:
            logger.warning(f"Blockquote nesting clamped to depth {self.max_nesting_depth}")
            depth = self.max_nesting_depth
        content = match.group(2).strip()

        state = self.state
        while state.blockquote_depth < depth:
            self._emit('<blockquote>')
            state.blockquote_depth += 1
        while state.blockquote_depth > depth:
            self._emit('</blockquote>')
            state.blockquote_depth -= 1

        if content:
            self._emit(f'<p>{render_inline(content)}</p>')

    def _close_blockquote(self) -> None:
        while self.state.blockquote_depth > 0:
            self._emit('</blockquote>')
            self.state.blockquote_depth -= 1

    # -- tables -------------------------------------------------------------

    def _split_row(self, row: str) -> List[str]:
        row = row.strip()
        if row.startswith('|'):
            row = row[1:]
        if row.endswith('|') and not row.endswith('\\|'):
            row = row[:-1]
        return [cell.strip().replace('\\|', '|') for cell in UNESCAPED_PIPE_PATTERN.split(row)]

    def _open_table(self, header_row: str) -> None:
        headers = self._split_row(header_row)
        self.state.table = TableContext(columns=len(headers))
        self._emit('<table>')
        self._emit('<thead>')
        self._emit('<tr>' + ''.join(f'<th>{render_inline(cell)}</th>' for cell in headers) + '</tr>')
        self._emit('</thead>')
        self._emit('<tbody>')

    def _table_row(self, row: str) -> None:
        columns = self.state.table.columns
        cells = self._split_row(row)[:columns]
        cells += [''] * (columns - len(cells))
        self._emit('<tr>' + ''.join(f'<td>{render_inline(cell)}</td>' for cell in cells) + '</tr>')

    def _close_table(self) -> None:
        if self.state.table is None:
            return
        self._emit('</tbody>')
        self._emit('</table>')
        self.state.table = None

    # -- paragraphs ---------------------------------------------------------

    def _paragraph(self, stripped: str) -> None:
        """Plain text line; inside an ordinary list it joins the open item."""
        current = self.state.list
        if current is not None and current.kind in (ListKind.TASK, ListKind.TASK_NOTE):
            self._close_list()
        self._emit(f'<p>{render_inline(stripped)}</p>')


def markdown_to_storage(markdown_body: str, max_nesting_depth: int = DEFAULT_MAX_NESTING_DEPTH) -> str:
    """Encode a markdown body with a freshly constructed encoder."""
    return StorageEncoder(max_nesting_depth=max_nesting_depth).encode(markdown_body)
