"""Unit tests for content_converter.inline_formatter module."""

import pytest

from src.content_converter.inline_formatter import (
    escape_attribute,
    escape_text,
    render_inline,
    replace_emoji,
)


class TestRenderInlineEmphasis:
    """Test cases for emphasis and strikethrough spans."""

    def test_bold_with_asterisks(self):
        """Double asterisks should become <strong>."""
        assert render_inline("**bold**") == "<strong>bold</strong>"

    def test_italic_with_asterisks(self):
        """Single asterisks should become <em>."""
        assert render_inline("*italic*") == "<em>italic</em>"

    def test_bold_italic(self):
        """Triple asterisks should nest <em> inside <strong>."""
        assert render_inline("***both***") == "<strong><em>both</em></strong>"

    def test_underscore_forms(self):
        """Underscore delimiters should behave like asterisks."""
        assert render_inline("__b__ and _i_") == "<strong>b</strong> and <em>i</em>"

    def test_underscores_inside_words_are_kept(self):
        """Identifiers with underscores should not be italicized."""
        assert render_inline("snake_case_name") == "snake_case_name"

    def test_strikethrough(self):
        """Double tildes should become <del>."""
        assert render_inline("~~old~~ new") == "<del>old</del> new"

    def test_bold_before_italic(self):
        """Bold must be matched before italic so no stray asterisk remains."""
        assert render_inline("**a** and *b*") == "<strong>a</strong> and <em>b</em>"

    def test_unmatched_delimiter_left_verbatim(self):
        """A lone asterisk should be left as is."""
        assert render_inline("a * b") == "a * b"


class TestRenderInlineCodeAndEscaping:
    """Test cases for code spans and entity escaping."""

    def test_code_span_escapes_and_protects_content(self):
        """Code span content is escaped and never formatted."""
        assert render_inline("`a*b*c < d`") == "<code>a*b*c &lt; d</code>"

    def test_markup_characters_are_escaped(self):
        """&, < and > in plain text become entities."""
        assert render_inline("x < y & z > w") == "x &lt; y &amp; z &gt; w"

    def test_numeric_references_not_double_escaped(self):
        """Existing numeric character references are kept."""
        assert render_inline("&#128203; list") == "&#128203; list"

    def test_documented_example(self):
        """Mixed bold and code spans."""
        assert render_inline("a **bold** and `x < y`") == (
            "a <strong>bold</strong> and <code>x &lt; y</code>"
        )

    def test_empty_text(self):
        """Empty input returns an empty string."""
        assert render_inline("") == ""


class TestRenderInlineLinks:
    """Test cases for explicit links and autolinks."""

    def test_explicit_link(self):
        """[text](url) becomes an anchor."""
        assert render_inline("[docs](https://example.com)") == (
            '<a href="https://example.com">docs</a>'
        )

    def test_link_target_not_formatted(self):
        """Underscores in a link target must not turn into emphasis."""
        assert render_inline("[x](https://example.com/a_b_c)") == (
            '<a href="https://example.com/a_b_c">x</a>'
        )

    def test_formatted_link_text(self):
        """Link text keeps its inline formatting."""
        assert render_inline("[**x**](https://example.com)") == (
            '<a href="https://example.com"><strong>x</strong></a>'
        )

    def test_autolink(self):
        """<https://...> becomes an anchor showing the URL."""
        assert render_inline("see <https://example.com/a_b>") == (
            'see <a href="https://example.com/a_b">https://example.com/a_b</a>'
        )

    def test_mailto_autolink(self):
        """<user@host> becomes a mailto anchor."""
        assert render_inline("<user@example.com>") == (
            '<a href="mailto:user@example.com">user@example.com</a>'
        )


class TestEscapingHelpers:
    """Test cases for escape_text, escape_attribute and replace_emoji."""

    @pytest.mark.parametrize("text,expected", [
        ("a & b", "a &amp; b"),
        ("&#160;", "&#160;"),
        ("<tag>", "&lt;tag&gt;"),
    ])
    def test_escape_text(self, text, expected):
        """escape_text escapes markup but keeps numeric references."""
        assert escape_text(text) == expected

    def test_escape_attribute_escapes_quotes(self):
        """Double quotes are escaped for attribute values."""
        assert escape_attribute('say "hi" & go') == 'say &quot;hi&quot; &amp; go'

    def test_replace_emoji(self):
        """Known emoji become numeric character references."""
        assert replace_emoji("\u2705 done \U0001F680") == "&#9989; done &#128640;"

    def test_emoji_in_rendered_text(self):
        """Emoji references survive the escaping pass."""
        assert render_inline("\u2b50 star") == "&#11088; star"
