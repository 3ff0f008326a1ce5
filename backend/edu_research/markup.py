from __future__ import annotations
import re
from typing import List, Literal, Optional, Tuple

from pydantic import BaseModel, Field

from .notation import Inline, plain_text, split_inline


RULE_MARKERS = frozenset({"---", "***", "___"})
_EMPHASIS = re.compile(r"\*+")

NodeKind = Literal["heading", "list_open", "list_item", "list_close", "paragraph", "blank"]


class Node(BaseModel):
	kind: NodeKind
	level: Optional[int] = None
	text: str = ""
	inlines: List[Inline] = Field(default_factory=list)

	@property
	def block_kind(self) -> str:
		if self.kind == "heading":
			return f"heading{self.level}"
		return self.kind


def strip_emphasis(line: str) -> str:
	return _EMPHASIS.sub("", line)


def _split_lines(text: str) -> List[str]:
	lines = text.split("\n")
	# A final newline ends the last line, it does not start a new one
	if lines and lines[-1] == "":
		lines.pop()
	return lines


def _text_node(kind: NodeKind, text: str, level: Optional[int] = None) -> Node:
	return Node(kind=kind, level=level, text=text, inlines=split_inline(text))


def classify_line(line: str) -> Optional[Node]:
	"""Map one raw line to its node, or None for a horizontal rule."""
	if line.strip() in RULE_MARKERS:
		return None
	clean = strip_emphasis(line).strip()
	if clean.startswith("## "):
		return _text_node("heading", clean[3:].strip(), level=2)
	if clean.startswith("### "):
		return _text_node("heading", clean[4:].strip(), level=3)
	if clean.startswith("- "):
		return _text_node("list_item", clean[2:].strip())
	if not clean:
		return Node(kind="blank")
	return _text_node("paragraph", clean)


def parse_document(text: str) -> List[Node]:
	nodes: List[Node] = []
	in_list = False
	for line in _split_lines(text):
		node = classify_line(line)
		if node is None:
			continue
		if node.kind == "list_item":
			if not in_list:
				nodes.append(Node(kind="list_open"))
				in_list = True
		elif in_list:
			nodes.append(Node(kind="list_close"))
			in_list = False
		nodes.append(node)
	if in_list:
		nodes.append(Node(kind="list_close"))
	return nodes


def plain_blocks(nodes: List[Node]) -> List[Tuple[str, str]]:
	"""(block kind, markup-free text) for every content node, boundaries skipped."""
	return [
		(node.block_kind, plain_text(node.inlines))
		for node in nodes
		if node.kind not in ("list_open", "list_close")
	]
