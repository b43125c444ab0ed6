"""Unit tests for content_converter.storage_adapter module."""

from src.content_converter.storage_adapter import adapt_to_storage


class TestAdaptToStorage:
    """Test cases for adapt_to_storage."""

    def test_empty_input(self):
        """Empty input stays empty."""
        assert adapt_to_storage("") == ""

    def test_removes_empty_paragraphs(self):
        """Paragraphs without content are dropped."""
        assert adapt_to_storage("<p>a</p>\n<p></p>\n<p> </p>") == "<p>a</p>"

    def test_fills_empty_cells(self):
        """Empty cells get a non-breaking space."""
        storage = "<tr><td></td><th> </th><td>x</td></tr>"

        assert adapt_to_storage(storage) == "<tr><td>&#160;</td><th>&#160;</th><td>x</td></tr>"

    def test_removes_line_breaks_between_elements(self):
        """Elements are joined without whitespace between them."""
        storage = "<ul>\n<li>a b  \n</li></ul>\n  <p>c</p>\n"

        assert adapt_to_storage(storage) == "<ul><li>a b</li></ul><p>c</p>"

    def test_cdata_sections_untouched(self):
        """Line breaks and markup inside CDATA are preserved."""
        storage = (
            "<ac:plain-text-body><![CDATA[line1\n\n  <p></p>\n<td></td>]]></ac:plain-text-body>\n"
            "<p>after</p>"
        )

        assert adapt_to_storage(storage) == (
            "<ac:plain-text-body><![CDATA[line1\n\n  <p></p>\n<td></td>]]></ac:plain-text-body>"
            "<p>after</p>"
        )

    def test_split_cdata_sections(self):
        """Split CDATA sections are both restored."""
        storage = "<![CDATA[a]]]]><![CDATA[>b\n]]>\n<p>x</p>"

        assert adapt_to_storage(storage) == "<![CDATA[a]]]]><![CDATA[>b\n]]><p>x</p>"
