import unittest

from revision_text.text_processor import (
    ProcessorConfig,
    TextProcessor,
    clean_text,
    convert_text_to_html,
    get_default_processor,
    has_translatable_content,
    is_safe_for_insertion,
    looks_like_html,
    prepare_for_translation,
)


class TestCleanText(unittest.TestCase):
    def test_normalizes_line_endings(self):
        result = clean_text("Line 1\r\nLine 2\rLine 3")
        self.assertEqual(result, "Line 1\nLine 2\nLine 3")
        self.assertNotIn("\r", result)

    def test_caps_blank_lines(self):
        self.assertEqual(clean_text("a\n\n\n\n\nb"), "a\n\nb")
        self.assertNotIn("\n\n\n", clean_text("a\r\n\r\n\r\n\r\nb"))

    def test_collapses_inline_whitespace(self):
        self.assertEqual(clean_text("  too    many\t\tspaces  "), "too many spaces")

    def test_strips_trailing_spaces_before_newline(self):
        self.assertEqual(clean_text("trailing   \nnext"), "trailing\nnext")

    def test_unescapes_markdown_characters(self):
        self.assertEqual(clean_text("\\*bold\\* \\_x\\_ \\- \\# h"), "*bold* _x_ - # h")

    def test_idempotent(self):
        samples = [
            "a\n \n\nb",
            "Hello \r\n\r\n\r\n\tWorld  ",
            "\\\\*x",
            "  - item one  \n\n\n\n  - item two\t",
        ]
        for sample in samples:
            once = clean_text(sample)
            self.assertEqual(clean_text(once), once, repr(sample))

    def test_empty_and_non_string(self):
        self.assertEqual(clean_text(""), "")
        self.assertEqual(clean_text(None), "")
        self.assertEqual(clean_text(["a"]), "")


class TestPrepareForTranslation(unittest.TestCase):
    def test_html_tags_removed(self):
        result = prepare_for_translation("<p>Hi</p>")
        self.assertNotIn("<p>", result)
        self.assertNotIn("</p>", result)
        self.assertEqual(result, "Hi")

    def test_angle_bracket_url_is_plain_text(self):
        self.assertEqual(prepare_for_translation("Hi <https://example.com>"), "Hi")

    def test_plain_text_strips_www_and_email_addresses(self):
        result = prepare_for_translation("Contact <jane@example.com> or <www.example.com>")
        self.assertEqual(result, "Contact  or")

    def test_plain_text_keeps_internal_spacing(self):
        result = prepare_for_translation("  Dear   team,\r\n\r\n\r\nThanks  ")
        self.assertEqual(result, "Dear   team,\n\n\nThanks")

    def test_end_to_end_html_document(self):
        result = prepare_for_translation("<html><body><p>Hello</p><p>World</p></body></html>")
        self.assertNotIn("<", result)
        self.assertNotIn(">", result)
        self.assertLess(result.index("Hello"), result.index("World"))
        self.assertIn(result, ("Hello\nWorld", "Hello\n\nWorld"))

    def test_table_is_flattened(self):
        result = prepare_for_translation("<table><tr><td>A</td><td>B</td></tr></table>")
        self.assertEqual(result.split("\n"), ["A", "B"])

    def test_idempotent_on_own_output(self):
        samples = [
            "<html><body><p>Hello</p><p>World</p></body></html>",
            "<div>Dear   team,<br><br><br>Please <a href='https://x.io'>review</a>.</div>",
            "Hi <https://example.com>\r\n\r\nBye",
            "<<https://a>https://b>",
            "<<https://x>b>x",
            "<p>&lt;b&gt;hi&lt;/b&gt;</p>",
            "<p>&lt;https://example.com&gt; see</p>",
            "<p>a</p><![ x",
        ]
        for sample in samples:
            once = prepare_for_translation(sample)
            self.assertEqual(prepare_for_translation(once), once, repr(sample))

    def test_nested_angle_urls_fully_removed(self):
        self.assertEqual(prepare_for_translation("<<https://a>https://b>"), "")
        self.assertEqual(prepare_for_translation("Hi <<www.a.io>www.b.io>"), "Hi")

    def test_exposed_markup_is_converted(self):
        self.assertEqual(prepare_for_translation("<<https://x>b>x"), "**x**")

        result = prepare_for_translation("<p>&lt;b&gt;hi&lt;/b&gt;</p>")
        self.assertIn("hi", result)
        self.assertFalse(looks_like_html(result))

    def test_empty_and_non_string(self):
        self.assertEqual(prepare_for_translation(""), "")
        self.assertEqual(prepare_for_translation(None), "")


class TestHtmlDetection(unittest.TestCase):
    def test_detects_tags(self):
        self.assertTrue(looks_like_html("<p>Hi</p>"))
        self.assertTrue(looks_like_html("Hi<br/>there"))
        self.assertTrue(looks_like_html("<!DOCTYPE html><html></html>"))

    def test_ignores_angle_bracket_urls_and_addresses(self):
        self.assertFalse(looks_like_html("<https://example.com>"))
        self.assertFalse(looks_like_html("<http://example.com/a?b=c>"))
        self.assertFalse(looks_like_html("<www.example.com>"))
        self.assertFalse(looks_like_html("<jane.doe@example.com>"))

    def test_ignores_comparisons(self):
        self.assertFalse(looks_like_html("a < b and c > d"))


class TestTranslatableContent(unittest.TestCase):
    def test_gate(self):
        self.assertFalse(has_translatable_content("   "))
        self.assertTrue(has_translatable_content("Hi!"))
        self.assertFalse(has_translatable_content("12345"))
        self.assertFalse(has_translatable_content("ab"))
        self.assertFalse(has_translatable_content("!!! ???"))
        self.assertTrue(has_translatable_content("Über"))
        self.assertFalse(has_translatable_content(None))

    def test_non_latin_scripts_rejected_by_default(self):
        self.assertFalse(has_translatable_content("你好世界"))
        self.assertFalse(has_translatable_content("Привет"))

    def test_non_latin_scripts_accepted_when_configured(self):
        processor = TextProcessor(ProcessorConfig(latin_letters_only=False))
        self.assertTrue(processor.has_translatable_content("你好世界"))
        self.assertTrue(processor.has_translatable_content("Привет"))
        self.assertFalse(processor.has_translatable_content("12345"))

    def test_min_length_configurable(self):
        processor = TextProcessor(ProcessorConfig(min_content_length=1))
        self.assertTrue(processor.has_translatable_content("a"))


class TestSafeForInsertion(unittest.TestCase):
    def test_gate(self):
        self.assertFalse(is_safe_for_insertion("<script>x</script>"))
        self.assertTrue(is_safe_for_insertion("Hello world"))
        self.assertFalse(is_safe_for_insertion('<img onerror="x()">'))

    def test_dangerous_schemes_case_insensitive(self):
        self.assertFalse(is_safe_for_insertion("click JavaScript:alert(1)"))
        self.assertFalse(is_safe_for_insertion("see data:text/html;base64,AAAA"))
        self.assertFalse(is_safe_for_insertion("VBScript:msgbox"))
        self.assertFalse(is_safe_for_insertion("<SCRIPT src=x>"))
        self.assertFalse(is_safe_for_insertion("<div onclick = 'x'>"))

    def test_empty_is_not_insertable(self):
        self.assertFalse(is_safe_for_insertion(""))
        self.assertFalse(is_safe_for_insertion(None))


class TestTextToHtml(unittest.TestCase):
    def test_escapes_and_converts_line_breaks(self):
        self.assertEqual(
            convert_text_to_html("a < b & 'c'\r\nd \"e\" >"),
            "a &lt; b &amp; &#39;c&#39;<br>d &quot;e&quot; &gt;",
        )

    def test_empty(self):
        self.assertEqual(convert_text_to_html(""), "")


class TestDefaultProcessor(unittest.TestCase):
    def test_built_once(self):
        self.assertIs(get_default_processor(), get_default_processor())

    def test_instances_share_nothing(self):
        a = TextProcessor()
        b = TextProcessor(ProcessorConfig(latin_letters_only=False))
        self.assertIsNot(a._converter, b._converter)
        self.assertTrue(a.config.latin_letters_only)


if __name__ == "__main__":
    unittest.main()
