"""Unit tests for the shared data models."""

import pytest
from bs4 import BeautifulSoup

from src.content_converter.models import (
    EncoderState,
    FenceKind,
    ListContext,
    ListKind,
    MacroKind,
    StructuredMacro,
)
from src.models import ConversionMetadata, ConversionResult, UploadDocument
from tests.fixtures.sample_pages import SAMPLE_PAGE_DATA


class TestConversionMetadata:
    """Test cases for ConversionMetadata."""

    def test_from_v2_page_data(self):
        """The v2 payload shape is read."""
        metadata = ConversionMetadata.from_page_data(SAMPLE_PAGE_DATA)

        assert metadata == ConversionMetadata(
            title="Release Plan: Q3",
            id=123456,
            space_key="TEAM",
            created_at="2024-01-01T00:00:00.000Z",
            updated_at="2024-02-01T12:30:00.000Z",
            author="Jane Doe",
        )

    def test_from_v1_page_data(self):
        """The v1 payload shape is read."""
        page_data = {
            'id': '42',
            'title': 'Legacy',
            'space': {'key': 'OPS'},
            'version': {'when': '2023-05-01T00:00:00.000Z', 'by': {'displayName': 'Sam'}},
        }

        metadata = ConversionMetadata.from_page_data(page_data)

        assert metadata.id == 42
        assert metadata.space_key == "OPS"
        assert metadata.updated_at == "2023-05-01T00:00:00.000Z"
        assert metadata.author == "Sam"
        assert metadata.created_at is None

    @pytest.mark.parametrize("page_id", [None, "", "abc"])
    def test_non_numeric_id(self, page_id):
        """Missing or non-numeric ids become None."""
        assert ConversionMetadata.from_page_data({'id': page_id}).id is None

    def test_to_dict_uses_front_matter_names(self):
        """Keys match the front matter field names."""
        assert list(ConversionMetadata().to_dict()) == [
            'title', 'id', 'spaceKey', 'createdAt', 'updatedAt', 'author'
        ]


class TestResultModels:
    """Test cases for ConversionResult and UploadDocument defaults."""

    def test_conversion_result_defaults(self):
        """Optional fields start empty."""
        result = ConversionResult(markdown="x")

        assert result.metadata == {}
        assert result.warnings == []
        assert result.file_path is None

    def test_upload_document_defaults(self):
        """Metadata defaults to an empty dict."""
        assert UploadDocument(title="T", content="<p/>").metadata == {}


class TestMacroKind:
    """Test cases for MacroKind.from_name."""

    @pytest.mark.parametrize("name,kind", [
        ("code", MacroKind.CODE),
        ("CODE", MacroKind.CODE),
        ("markdown", MacroKind.MARKDOWN),
        ("expand", MacroKind.EXPAND),
        ("info", MacroKind.PANEL),
        ("caution", MacroKind.PANEL),
        ("jira", MacroKind.UNKNOWN),
        ("", MacroKind.UNKNOWN),
        (None, MacroKind.UNKNOWN),
    ])
    def test_from_name(self, name, kind):
        """Names map to their macro kind case-insensitively."""
        assert MacroKind.from_name(name) is kind


class TestStructuredMacro:
    """Test cases for StructuredMacro.from_element."""

    def test_reads_direct_parameters_only(self):
        """Parameters of nested macros are not collected."""
        soup = BeautifulSoup(
            '<ac:structured-macro ac:name="expand">'
            '<ac:parameter ac:name="title">Outer</ac:parameter>'
            '<ac:rich-text-body><ac:structured-macro ac:name="code">'
            '<ac:parameter ac:name="language">go</ac:parameter>'
            '</ac:structured-macro></ac:rich-text-body></ac:structured-macro>',
            'html.parser'
        )

        macro = StructuredMacro.from_element(soup.find('ac:structured-macro'))

        assert macro.kind is MacroKind.EXPAND
        assert macro.title == "Outer"
        assert macro.language == ""
        assert macro.plain_text_body is None

    def test_plain_text_body(self):
        """The literal body of a plain-text macro is kept."""
        soup = BeautifulSoup(
            '<ac:structured-macro ac:name="code">'
            '<ac:parameter ac:name="language"> sh </ac:parameter>'
            '<ac:plain-text-body>echo hi</ac:plain-text-body></ac:structured-macro>',
            'html.parser'
        )

        macro = StructuredMacro.from_element(soup.find('ac:structured-macro'))

        assert macro.language == "sh"
        assert macro.plain_text_body == "echo hi"


class TestEncoderModels:
    """Test cases for the encoder state types."""

    def test_list_kind_tags(self):
        """Task notes are written as plain ul elements."""
        assert ListKind.UNORDERED.tag == "ul"
        assert ListKind.ORDERED.tag == "ol"
        assert ListKind.TASK.tag == "ac:task-list"
        assert ListKind.TASK_NOTE.tag == "ul"

    def test_list_context_levels(self):
        """The outermost level is the list kind."""
        context = ListContext([ListKind.UNORDERED, ListKind.ORDERED])

        assert context.depth == 2
        assert context.kind is ListKind.UNORDERED
        assert context.innermost is ListKind.ORDERED

    def test_encoder_state_defaults(self):
        """A fresh state has nothing open."""
        state = EncoderState()

        assert state.fence is FenceKind.NONE
        assert state.table is None
        assert state.list is None
        assert state.blockquote_depth == 0
        assert state.fence_lines == []
