"""Inline scientific notation inside generated documents.

A formula is written between single dollar signs. Inside it ``_`` opens a
subscript and ``^`` a superscript, each covering one run of digits or one run
of letters, so ``$H_2O$`` reads H, 2 (subscript), O and ``$x^2y$`` reads x,
2 (superscript), y. A plain alphanumeric run would instead make "2y" the
superscript there. Dollar signs without a partner stay in the text as-is.
"""
from __future__ import annotations
import re
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


MATH_SPAN = re.compile(r"\$([^$]+)\$")
# Digits first so "H_2O" stops before the O; [^\W\d_] is any letter
_SCRIPT_RUN = re.compile(r"([_^])([0-9]+|[^\W\d_]+)")


class Run(BaseModel):
	kind: Literal["text", "sub", "sup"]
	text: str


class Inline(BaseModel):
	kind: Literal["text", "math"]
	# For math segments this is the formula source without its delimiters
	text: str
	runs: List[Run] = Field(default_factory=list)
	direction: Optional[Literal["ltr"]] = None


def split_formula(formula: str) -> List[Run]:
	runs: List[Run] = []
	pos = 0
	for match in _SCRIPT_RUN.finditer(formula):
		if match.start() > pos:
			runs.append(Run(kind="text", text=formula[pos:match.start()]))
		kind = "sub" if match.group(1) == "_" else "sup"
		runs.append(Run(kind=kind, text=match.group(2)))
		pos = match.end()
	if pos < len(formula):
		runs.append(Run(kind="text", text=formula[pos:]))
	return runs


def split_inline(text: str) -> List[Inline]:
	segments: List[Inline] = []
	pos = 0
	for match in MATH_SPAN.finditer(text):
		if match.start() > pos:
			segments.append(Inline(kind="text", text=text[pos:match.start()]))
		formula = match.group(1)
		segments.append(Inline(kind="math", text=formula, runs=split_formula(formula), direction="ltr"))
		pos = match.end()
	if pos < len(text):
		segments.append(Inline(kind="text", text=text[pos:]))
	return segments


def plain_text(segments: List[Inline]) -> str:
	"""Visible text of the segments with every notation marker removed."""
	parts: List[str] = []
	for segment in segments:
		if segment.kind == "math":
			parts.extend(run.text for run in segment.runs)
		else:
			parts.append(segment.text)
	return "".join(parts)
