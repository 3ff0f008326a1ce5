from html.parser import HTMLParser

import pytest

from edu_research.markup import parse_document, plain_blocks
from edu_research.notation import plain_text
from edu_research.render import RenderOptions, render_document, render_html, render_printable, render_screen


EXAMPLE = "## Intro\nWater is $H_2O$ and important.\n\n- point one\n- point two\n---\n"

DOCUMENTS = [
	EXAMPLE,
	"",
	"### Sub *heading*\n- a\n***\n- b\nplain $x^2$ text\n\n\n## End",
	"- only\n- list\n- items",
	"text with $ and <tags> & stuff\n- $E=mc^2$\n___",
	"**bold** para\n### $CO_2$\n- \n-\n## ",
]


class BlockReader(HTMLParser):
	"""Reads the export HTML back into (block kind, text) pairs."""

	_TAGS = {"h2": "heading2", "h3": "heading3", "li": "list_item", "p": "paragraph"}

	def __init__(self):
		super().__init__()
		self.blocks = []
		self.lists_opened = 0
		self.lists_closed = 0
		self._current = None
		self._text = []

	def handle_starttag(self, tag, attrs):
		if tag in self._TAGS:
			self._current = self._TAGS[tag]
			self._text = []
		elif tag == "ul":
			self.lists_opened += 1
		elif tag == "div" and "height: 12px" in (dict(attrs).get("style") or ""):
			self.blocks.append(("blank", ""))

	def handle_endtag(self, tag):
		if tag == "ul":
			self.lists_closed += 1
		elif self._current and self._TAGS.get(tag) == self._current:
			self.blocks.append((self._current, "".join(self._text)))
			self._current = None

	def handle_data(self, data):
		if self._current:
			self._text.append(data)


def read_html(html):
	reader = BlockReader()
	reader.feed(html)
	reader.close()
	return reader


def screen_blocks(document):
	out = []
	for block in document.blocks:
		if block.kind == "list":
			out.extend(("list_item", plain_text(item.inlines)) for item in block.items)
		elif block.kind == "heading":
			out.append((f"heading{block.level}", plain_text(block.inlines)))
		else:
			out.append((block.kind, plain_text(block.inlines)))
	return out


def test_example_screen_rendering():
	screen = render_screen(EXAMPLE)
	assert [b.kind for b in screen.blocks] == ["heading", "paragraph", "blank", "list"]
	assert [plain_text(item.inlines) for item in screen.blocks[3].items] == ["point one", "point two"]
	assert all(item.in_list for item in screen.blocks[3].items)
	assert not screen.blocks[1].in_list


def test_example_export_html():
	html = render_html(EXAMPLE)
	assert html.count("<h2") == 1
	assert html.count("<li") == 2
	assert html.count("<ul") == 1 and html.count("</ul>") == 1
	assert '<span dir="ltr"' in html
	assert "H<sub>2</sub>O" in html
	assert "---" not in html


def test_export_html_is_self_styled():
	html = render_html("hello", RenderOptions(direction="ltr", font_size=24, line_height=2.0))
	assert html.startswith('<div dir="ltr"')
	assert "font-size: 24px" in html
	assert "line-height: 2.0" in html
	assert "text-align: left" in html
	assert "color: #000000" in html
	assert "background-color: #ffffff" in html
	assert "<style" not in html and "class=" not in html


def test_list_margin_follows_direction():
	assert "margin-right: 25px" in render_html("- a", RenderOptions(direction="rtl"))
	assert "margin-left: 25px" in render_html("- a", RenderOptions(direction="ltr"))


def test_math_is_ltr_inside_rtl_document():
	html = render_html("نص $x^2$", RenderOptions(direction="rtl"))
	assert 'dir="rtl"' in html
	assert '<span dir="ltr"' in html
	assert "x<sup>2</sup>" in html


def test_text_is_escaped():
	html = render_html("a <b> & c")
	assert "a &lt;b&gt; &amp; c" in html


def test_unmatched_dollar_rendered_literally():
	html = render_html("price 5$ each")
	assert "price 5$ each" in html
	assert "<span" not in html


@pytest.mark.parametrize("text", DOCUMENTS)
def test_dual_target_equivalence(text):
	expected = plain_blocks(parse_document(text))
	reader = read_html(render_html(text))
	assert reader.blocks == expected
	assert screen_blocks(render_screen(text)) == expected
	assert reader.lists_opened == reader.lists_closed


@pytest.mark.parametrize("text", DOCUMENTS)
def test_no_rule_markers_or_asterisks_in_output(text):
	rendered = render_document(text)
	for kind, body in screen_blocks(rendered.screen):
		assert "*" not in body
		assert body not in ("---", "***", "___")
	assert "*" not in rendered.html


def test_render_document_carries_plain_text_and_options():
	rendered = render_document(EXAMPLE, RenderOptions(direction="ltr", font_size=14, line_height=1.2))
	assert rendered.plain_text == EXAMPLE
	assert rendered.screen.direction == "ltr"
	assert rendered.screen.font_size == 14
	assert rendered.screen.line_height == 1.2


def test_empty_document_renders_empty_wrapper():
	rendered = render_document("")
	assert rendered.screen.blocks == []
	assert read_html(rendered.html).blocks == []


@pytest.mark.parametrize("field,value", [("font_size", 8), ("font_size", 40), ("line_height", 0.5), ("line_height", 3)])
def test_renderer_accepts_options_outside_ui_range(field, value):
	options = RenderOptions(**{field: value})
	assert read_html(render_html("x", options)).blocks == [("paragraph", "x")]
	assert getattr(render_screen("x", options), field) == value


def test_fractional_font_size():
	assert "font-size: 40px" in render_html("x", RenderOptions(font_size=40))
	assert "font-size: 18.5px" in render_html("x", RenderOptions(font_size=18.5))


def test_printable_page():
	page = render_printable(EXAMPLE, "Water & <life>", auto_print=True)
	assert page.startswith("<!DOCTYPE html>")
	assert "<title>Water &amp; &lt;life&gt;</title>" in page
	assert "window.print()" in page
	assert 'class="print-only"' in page
	assert render_html(EXAMPLE) in page
	assert "window.print()" not in render_printable(EXAMPLE, "t")
