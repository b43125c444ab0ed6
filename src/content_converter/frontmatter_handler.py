"""Front matter parsing and generation for converted markdown.

Exported pages start with a fixed six-field block:

    ---
    title: "Page Title"
    id: 12345
    spaceKey: "TEAM"
    createdAt: "2024-01-01T00:00:00.000Z"
    updatedAt: "2024-01-02T00:00:00.000Z"
    author: "Jane Doe"
    ---

Reading is lenient: each line is split on its first colon and only
double-quoted values are unwrapped, so a hand-edited header never blocks
an upload and never loses text after a '#'.
"""

import logging
import re
from pathlib import PurePath
from typing import Dict, Optional, Tuple

import yaml

from src.models import ConversionMetadata

logger = logging.getLogger(__name__)


class FrontmatterHandler:
    """Extracts and injects the front matter block of markdown documents."""

    # Block delimited by --- lines at the very start of the document
    FRONTMATTER_PATTERN = re.compile(
        r'\A---[ \t]*\n(.*?)^---[ \t]*(?:\n|\Z)',
        re.DOTALL | re.MULTILINE
    )

    # Fixed key set, in output order
    FIELDS = ('title', 'id', 'spaceKey', 'createdAt', 'updatedAt', 'author')

    HEADING_PATTERN = re.compile(r'^#[ \t]+(.+?)[ \t]*#*[ \t]*$')

    @classmethod
    def extract(cls, markdown: str) -> Tuple[Optional[Dict[str, str]], str]:
        """Split a markdown document into front matter and body.

        Args:
            markdown: Full markdown document

        Returns:
            Tuple of (front matter fields, body). Returns (None, markdown)
            unchanged when the document has no front matter block.
        """
        if not markdown:
            return None, markdown
        text = markdown.replace('\r\n', '\n')
        match = cls.FRONTMATTER_PATTERN.match(text)
        if not match:
            return None, markdown

        front_matter = cls._parse_block(match.group(1))
        body = text[match.end():].lstrip('\n')
        return front_matter, body

    @classmethod
    def _parse_block(cls, block: str) -> Dict[str, str]:
        """Split each line on its first colon; values are trimmed.

        Unquoted and single-quoted values are taken literally. Only a value
        wrapped in double quotes is unwrapped.
        """
        fields = {}
        for line in block.split('\n'):
            key, separator, value = line.partition(':')
            key = key.strip()
            if not separator or not key:
                continue
            fields[key] = cls._unquote(value.strip())
        return fields

    @staticmethod
    def _unquote(value: str) -> str:
        if len(value) < 2 or not (value.startswith('"') and value.endswith('"')):
            return value
        try:
            # Double-quoted scalar; undoes the escaping written by inject()
            unquoted = yaml.safe_load(value)
        except yaml.YAMLError as e:
            logger.debug(f"Front matter value is not a quoted scalar, unwrapping as-is: {e}")
            unquoted = None
        if isinstance(unquoted, str):
            return unquoted
        return value[1:-1]

    @classmethod
    def inject(cls, metadata: ConversionMetadata) -> str:
        """Generate the front matter block for a page.

        All six fields are always present; string values are always
        double-quoted and the id is written bare.

        Args:
            metadata: Page metadata

        Returns:
            Front matter block including both --- delimiters, without a
            trailing newline
        """
        values = metadata.to_dict()
        lines = ['---']
        for key in cls.FIELDS:
            value = values.get(key)
            if key == 'id':
                lines.append(f"id: {value if value is not None else ''}")
            else:
                lines.append(f"{key}: {cls._quote(value or '')}")
        lines.append('---')
        return '\n'.join(lines)

    @staticmethod
    def _quote(value: str) -> str:
        escaped = str(value).replace('\\', '\\\\').replace('"', '\\"').replace('\n', '\\n')
        return f'"{escaped}"'

    @classmethod
    def resolve_title(
        cls,
        front_matter: Optional[Dict[str, str]],
        body: str,
        file_path: str
    ) -> str:
        """Resolve the page title for upload.

        Precedence: front matter title, then the first level-1 heading
        outside code fences, then the file name without its extension.
        """
        if front_matter and (front_matter.get('title') or '').strip():
            return front_matter['title'].strip()

        in_fence = False
        for line in body.split('\n'):
            if line.strip().startswith('```'):
                in_fence = not in_fence
                continue
            if in_fence:
                continue
            match = cls.HEADING_PATTERN.match(line)
            if match:
                return match.group(1)

        return PurePath(file_path).stem
