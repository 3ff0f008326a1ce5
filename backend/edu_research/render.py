"""Screen and clipboard renderings of a generated document.

Both targets are built from one ``parse_document`` pass so rule suppression,
emphasis stripping, list grouping and math handling cannot drift apart.
The export HTML carries every style inline and is always black on white so it
pastes cleanly into a word processor whatever theme the page is using.
"""
from __future__ import annotations
from html import escape
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from .markup import Node, parse_document
from .notation import Inline


Direction = Literal["rtl", "ltr"]

FONT_FAMILY = "'Simplified Arabic', 'Traditional Arabic', serif"
PRINT_FOOTER = "تم إعداد هذا التقرير البحثي آلياً عبر منصة مولد الأبحاث التربوية المتقدم."


class RenderOptions(BaseModel):
	direction: Direction = "rtl"
	font_size: float = 18
	line_height: float = 1.6


class ScreenBlock(BaseModel):
	kind: Literal["heading", "list", "list_item", "paragraph", "blank"]
	level: Optional[int] = None
	in_list: bool = False
	inlines: List[Inline] = Field(default_factory=list)
	items: List["ScreenBlock"] = Field(default_factory=list)


class ScreenDocument(BaseModel):
	direction: Direction
	font_size: float
	line_height: float
	blocks: List[ScreenBlock] = Field(default_factory=list)


class RenderedDocument(BaseModel):
	screen: ScreenDocument
	html: str
	plain_text: str


def render_screen(text: str, options: Optional[RenderOptions] = None) -> ScreenDocument:
	options = options or RenderOptions()
	blocks: List[ScreenBlock] = []
	current_list: Optional[ScreenBlock] = None
	for node in parse_document(text):
		if node.kind == "list_open":
			current_list = ScreenBlock(kind="list")
			blocks.append(current_list)
		elif node.kind == "list_close":
			current_list = None
		elif node.kind == "list_item" and current_list is not None:
			current_list.items.append(ScreenBlock(kind="list_item", in_list=True, inlines=node.inlines))
		else:
			blocks.append(ScreenBlock(kind=node.kind, level=node.level, inlines=node.inlines))
	return ScreenDocument(
		direction=options.direction,
		font_size=options.font_size,
		line_height=options.line_height,
		blocks=blocks,
	)


def _inline_html(segments: List[Inline]) -> str:
	parts: List[str] = []
	for segment in segments:
		if segment.kind == "text":
			parts.append(escape(segment.text, quote=False))
			continue
		formula = []
		for run in segment.runs:
			body = escape(run.text, quote=False)
			formula.append(body if run.kind == "text" else f"<{run.kind}>{body}</{run.kind}>")
		parts.append(
			'<span dir="ltr" style="display: inline-block; direction: ltr; unicode-bidi: isolate;">'
			f"{''.join(formula)}</span>"
		)
	return "".join(parts)


def _node_html(node: Node, direction: Direction) -> str:
	if node.kind == "heading" and node.level == 2:
		return (
			'<h2 style="color: #000000; margin-top: 24px; margin-bottom: 8px; font-size: 1.5em; font-weight: bold;">'
			f"{_inline_html(node.inlines)}</h2>"
		)
	if node.kind == "heading":
		return (
			'<h3 style="color: #000000; margin-top: 18px; margin-bottom: 6px; font-size: 1.3em; font-weight: bold;">'
			f"{_inline_html(node.inlines)}</h3>"
		)
	if node.kind == "list_open":
		side = "right" if direction == "rtl" else "left"
		return f'<ul style="margin-{side}: 25px; margin-bottom: 12px; list-style-type: disc; color: #000000;">'
	if node.kind == "list_close":
		return "</ul>"
	if node.kind == "list_item":
		return f'<li style="margin-bottom: 6px;">{_inline_html(node.inlines)}</li>'
	if node.kind == "blank":
		return '<div style="height: 12px;"></div>'
	return f'<p style="margin-bottom: 12px; text-align: justify; color: #000000;">{_inline_html(node.inlines)}</p>'


def render_html(text: str, options: Optional[RenderOptions] = None) -> str:
	options = options or RenderOptions()
	align = "right" if options.direction == "rtl" else "left"
	parts = [
		f'<div dir="{options.direction}" style="font-family: {FONT_FAMILY}; text-align: {align}; '
		f"direction: {options.direction}; font-size: {options.font_size:g}px; line-height: {options.line_height}; "
		'color: #000000; background-color: #ffffff;">'
	]
	parts.extend(_node_html(node, options.direction) for node in parse_document(text))
	parts.append("</div>")
	return "".join(parts)


def render_printable(text: str, title: str, options: Optional[RenderOptions] = None, *, auto_print: bool = False) -> str:
	"""Full HTML page for the browser's print / save-as-PDF dialog."""
	options = options or RenderOptions()
	title_html = escape(title, quote=False)
	script = '<script>window.addEventListener("load", function () { window.print(); });</script>' if auto_print else ""
	return (
		"<!DOCTYPE html>"
		f'<html dir="{options.direction}"><head><meta charset="utf-8"><title>{title_html}</title>'
		"<style>@page { size: A4; margin: 20mm; } body { margin: 0 auto; max-width: 210mm; background: #ffffff; color: #000000; }"
		" .print-only { display: none; } @media print { .print-only { display: block; } }</style>"
		f"{script}</head><body>"
		'<header style="border-bottom: 2px solid #000000; padding-bottom: 16px; margin-bottom: 24px; text-align: center;">'
		f'<h1 style="font-family: {FONT_FAMILY}; font-size: 2em; font-weight: 900; color: #000000; margin: 0;">{title_html}</h1>'
		"</header>"
		f"{render_html(text, options)}"
		'<footer class="print-only" style="margin-top: 48px; padding-top: 16px; border-top: 1px solid #000000; '
		f'font-size: 10px; font-style: italic; text-align: center; color: #000000;">{PRINT_FOOTER}</footer>'
		"</body></html>"
	)


def render_document(text: str, options: Optional[RenderOptions] = None) -> RenderedDocument:
	options = options or RenderOptions()
	return RenderedDocument(
		screen=render_screen(text, options),
		html=render_html(text, options),
		plain_text=text,
	)
