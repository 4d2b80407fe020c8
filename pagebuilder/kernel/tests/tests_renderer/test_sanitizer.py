"""
Config Sanitizer Tests

Every reachable string is escaped, except a string stored directly under
`content`. The input config is never mutated.
"""

import copy

from pagebuilder.kernel.sanitizer import escape_html, sanitize_config


class TestEscapeHtml:
    def test_all_five_characters(self):
        assert escape_html("&<>\"'") == "&amp;&lt;&gt;&quot;&#039;"

    def test_ampersand_is_not_double_counted(self):
        assert escape_html("&lt;") == "&amp;lt;"

    def test_plain_text_unchanged(self):
        assert escape_html("Hello, world") == "Hello, world"


class TestSanitizeConfig:
    def test_string_fields_are_escaped(self):
        result = sanitize_config({"title": "<script>alert(1)</script>"})
        assert result == {"title": "&lt;script&gt;alert(1)&lt;/script&gt;"}

    def test_content_is_verbatim(self):
        html = "<p>Hello <strong>there</strong> & 'friends'</p>"
        assert sanitize_config({"content": html}) == {"content": html}

    def test_content_key_is_exact(self):
        result = sanitize_config({"Content": "<b>", "contents": "<b>", "body_content": "<b>"})
        assert result == {"Content": "&lt;b&gt;", "contents": "&lt;b&gt;", "body_content": "&lt;b&gt;"}

    def test_content_exemption_in_nested_mapping(self):
        result = sanitize_config({"card": {"content": "<em>x</em>", "title": "<em>x</em>"}})
        assert result == {"card": {"content": "<em>x</em>", "title": "&lt;em&gt;x&lt;/em&gt;"}}

    def test_content_exemption_inside_list_elements(self):
        result = sanitize_config({"items": [{"content": "<i>a</i>", "label": "<i>a</i>"}]})
        assert result == {"items": [{"content": "<i>a</i>", "label": "&lt;i&gt;a&lt;/i&gt;"}]}

    def test_list_under_content_is_escaped(self):
        result = sanitize_config({"content": ["<b>", "<i>"]})
        assert result == {"content": ["&lt;b&gt;", "&lt;i&gt;"]}

    def test_mapping_under_content_is_walked(self):
        result = sanitize_config({"content": {"title": "<b>"}})
        assert result == {"content": {"title": "&lt;b&gt;"}}

    def test_non_string_scalars_pass_through(self):
        config = {"columns": 3, "ratio": 1.5, "showPrice": True, "caption": None}
        assert sanitize_config(config) == config

    def test_scalars_in_lists_become_escaped_text(self):
        result = sanitize_config({"values": [1, True, "<x>", None]})
        assert result == {"values": ["1", "true", "&lt;x&gt;", None]}

    def test_nested_lists(self):
        result = sanitize_config({"grid": [["<a>"], [{"t": "<b>"}]]})
        assert result == {"grid": [["&lt;a&gt;"], [{"t": "&lt;b&gt;"}]]}

    def test_non_mapping_input_passes_through(self):
        assert sanitize_config("plain") == "plain"
        assert sanitize_config(42) == 42
        assert sanitize_config(None) is None

    def test_input_not_mutated(self):
        config = {"title": "<b>", "items": [{"label": "<i>"}], "meta": {"x": "&"}}
        before = copy.deepcopy(config)
        sanitize_config(config)
        assert config == before
