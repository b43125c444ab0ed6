"""Data models for the content conversion pipeline.

Macros found in storage format are modelled as typed values so that the
decode rules can read their parameters as plain fields. The line-oriented
encoder keeps its block state in EncoderState, whose fields are enums and
small context objects rather than loose flags.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from bs4 import Tag


PANEL_MACRO_NAMES = ('info', 'note', 'warning', 'tip', 'caution')


class MacroKind(Enum):
    """Structured macro variants recognised by the converter."""

    CODE = "code"
    MARKDOWN = "markdown"
    EXPAND = "expand"
    PANEL = "panel"
    UNKNOWN = "unknown"

    @classmethod
    def from_name(cls, name: str) -> 'MacroKind':
        name = (name or '').lower()
        if name in PANEL_MACRO_NAMES:
            return cls.PANEL
        for kind in (cls.CODE, cls.MARKDOWN, cls.EXPAND):
            if kind.value == name:
                return kind
        return cls.UNKNOWN


@dataclass(frozen=True)
class StructuredMacro:
    """A parsed ac:structured-macro element.

    Attributes:
        name: Macro name from the ac:name attribute (e.g. "code", "jira")
        parameters: Macro parameters keyed by their ac:name attribute
        plain_text_body: Literal body for plain-text macros, None otherwise
    """

    name: str
    parameters: Dict[str, str] = field(default_factory=dict)
    plain_text_body: Optional[str] = None

    @property
    def kind(self) -> MacroKind:
        return MacroKind.from_name(self.name)

    @property
    def language(self) -> str:
        return self.parameters.get('language', '').strip()

    @property
    def title(self) -> str:
        return self.parameters.get('title', '').strip()

    @classmethod
    def from_element(cls, element: Tag) -> 'StructuredMacro':
        """Build a macro from its BeautifulSoup element.

        Only direct ac:parameter children are read, so parameters of nested
        macros never leak into the outer one.
        """
        parameters = {}
        for param in element.find_all('ac:parameter', recursive=False):
            key = param.get('ac:name')
            if key:
                parameters[key] = param.get_text()

        body_element = element.find('ac:plain-text-body', recursive=False)
        plain_text_body = body_element.get_text() if body_element is not None else None

        return cls(
            name=element.get('ac:name', ''),
            parameters=parameters,
            plain_text_body=plain_text_body,
        )


class FenceKind(Enum):
    """State of a fenced code block in the encoder."""

    NONE = "none"
    CODE = "code"
    MERMAID = "mermaid"


class ListKind(Enum):
    """Kinds of list nesting levels emitted by the encoder."""

    UNORDERED = "ul"
    ORDERED = "ol"
    TASK = "ac:task-list"
    # Plain bullets attached under a task list as notes
    TASK_NOTE = "ul-note"

    @property
    def tag(self) -> str:
        return 'ul' if self is ListKind.TASK_NOTE else self.value


@dataclass
class ListContext:
    """Open list levels, outermost first.

    Task lists and task notes are always a single level; ordinary lists
    may mix ul and ol levels.
    """

    levels: List[ListKind] = field(default_factory=list)

    @property
    def depth(self) -> int:
        return len(self.levels)

    @property
    def kind(self) -> ListKind:
        return self.levels[0]

    @property
    def innermost(self) -> ListKind:
        return self.levels[-1]


@dataclass
class TableContext:
    """Open table; the column count is fixed by its first row."""

    columns: int


@dataclass
class EncoderState:
    """Block-level state carried across lines by the encoder.

    At most one of table, list and blockquote is open at a time.
    """

    table: Optional[TableContext] = None
    fence: FenceKind = FenceKind.NONE
    fence_language: str = ""
    fence_lines: List[str] = field(default_factory=list)
    list: Optional[ListContext] = None
    blockquote_depth: int = 0
