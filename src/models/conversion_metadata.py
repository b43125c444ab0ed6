"""Page metadata carried in markdown front matter."""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ConversionMetadata:
    """Metadata of a Confluence page written as markdown front matter.

    Attributes:
        title: Page title
        id: Numeric page ID (None if unknown)
        space_key: Space key or space ID of the page
        created_at: ISO 8601 creation timestamp
        updated_at: ISO 8601 timestamp of the current version
        author: Display name of the author of the current version
    """
    title: str = ""
    id: Optional[int] = None
    space_key: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    author: Optional[str] = None

    @classmethod
    def from_page_data(cls, page_data: Dict[str, Any]) -> 'ConversionMetadata':
        """Build metadata from a Confluence REST page payload.

        Supports both the v2 shape (spaceId, version.createdAt) and the v1
        shape (space.key, version.when, version.by).
        """
        version = page_data.get('version') or {}
        author_info = version.get('createdBy') or version.get('by') or {}
        space_key = page_data.get('spaceId') or (page_data.get('space') or {}).get('key')

        page_id = page_data.get('id')
        try:
            page_id = int(page_id) if page_id not in (None, '') else None
        except (TypeError, ValueError):
            page_id = None

        return cls(
            title=page_data.get('title') or '',
            id=page_id,
            space_key=str(space_key) if space_key else None,
            created_at=page_data.get('createdAt'),
            updated_at=version.get('createdAt') or version.get('when'),
            author=author_info.get('displayName'),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Return the metadata keyed by front matter field names."""
        return {
            'title': self.title,
            'id': self.id,
            'spaceKey': self.space_key,
            'createdAt': self.created_at,
            'updatedAt': self.updated_at,
            'author': self.author,
        }
