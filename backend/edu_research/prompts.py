from __future__ import annotations
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field, field_validator


class EducationalLevel(str, Enum):
	PRIMARY = "primary"
	INTERMEDIATE = "intermediate"
	SECONDARY = "secondary"
	AUTO = "auto"


class DocumentLength(str, Enum):
	SHORT = "short"
	MEDIUM = "medium"
	LONG = "long"


class DocumentLanguage(str, Enum):
	ARABIC = "arabic"
	ENGLISH = "english"
	FRENCH = "french"


class GenerationRequest(BaseModel):
	model_config = {"frozen": True}

	topic: str = Field(min_length=1, max_length=500)
	educational_level: EducationalLevel = EducationalLevel.PRIMARY
	length: DocumentLength = DocumentLength.SHORT
	language: DocumentLanguage = DocumentLanguage.ARABIC
	single_paragraph: bool = False
	additional_details: Optional[str] = Field(default=None, max_length=2000)

	@field_validator("topic")
	@classmethod
	def _topic_not_blank(cls, value: str) -> str:
		value = value.strip()
		if not value:
			raise ValueError("topic must not be blank")
		return value


class GeneratedDocument(BaseModel):
	content: str
	source_request: GenerationRequest
	generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class InstructionPair(BaseModel):
	system: str
	user: str


LANGUAGE_NAMES: Dict[DocumentLanguage, str] = {
	DocumentLanguage.ARABIC: "Arabic",
	DocumentLanguage.ENGLISH: "English",
	DocumentLanguage.FRENCH: "French",
}

LANGUAGE_DIRECTIONS: Dict[DocumentLanguage, str] = {
	DocumentLanguage.ARABIC: "rtl",
	DocumentLanguage.ENGLISH: "ltr",
	DocumentLanguage.FRENCH: "ltr",
}

LEVEL_RULES: Dict[EducationalLevel, str] = {
	EducationalLevel.PRIMARY: "Primary school: short sentences, simple words, direct explanations.",
	EducationalLevel.INTERMEDIATE: "Intermediate school: clearer explanations supported by examples.",
	EducationalLevel.SECONDARY: "Secondary school: analysis, reasoning and a deep logical structure.",
	EducationalLevel.AUTO: (
		"No level was chosen: pick the educational level that best suits the topic "
		"and keep the vocabulary and depth consistent with it."
	),
}

LENGTH_RULES: Dict[DocumentLength, str] = {
	DocumentLength.SHORT: "Short: at most two main sections in the body.",
	DocumentLength.MEDIUM: "Medium: three to four main sections in the body.",
	DocumentLength.LONG: "Long: five or more main sections, each expanded in detail.",
}

SINGLE_PARAGRAPH_LENGTH_RULES: Dict[DocumentLength, str] = {
	DocumentLength.SHORT: "Short: about 80 to 120 words.",
	DocumentLength.MEDIUM: "Medium: about 150 to 220 words.",
	DocumentLength.LONG: "Long: about 250 to 350 words.",
}


def _check_exhaustive(table: Dict, enum_type: type) -> None:
	missing = [member for member in enum_type if member not in table]
	if missing:
		raise RuntimeError(f"No prompt text for {', '.join(m.name for m in missing)} of {enum_type.__name__}")


for _table, _enum in (
	(LANGUAGE_NAMES, DocumentLanguage),
	(LANGUAGE_DIRECTIONS, DocumentLanguage),
	(LEVEL_RULES, EducationalLevel),
	(LENGTH_RULES, DocumentLength),
	(SINGLE_PARAGRAPH_LENGTH_RULES, DocumentLength),
):
	_check_exhaustive(_table, _enum)


def default_direction(language: DocumentLanguage) -> str:
	return LANGUAGE_DIRECTIONS[language]


def _structure_rules(request: GenerationRequest) -> str:
	if request.single_paragraph:
		return (
			"- Write the whole text as ONE continuous paragraph.\n"
			"- Do not use headings, lists, line breaks or horizontal rules.\n"
		)
	return (
		'- Use "## " for main headings and "### " for sub-headings.\n'
		'- Use "- " at the start of a line for list items.\n'
		"- Separate paragraphs with a blank line.\n"
		"- Follow the mandatory structure: introduction, body, conclusion.\n"
		"- Avoid asterisks (*) and horizontal rules (---) unless strictly necessary.\n"
	)


def _system_instruction(request: GenerationRequest) -> str:
	language = LANGUAGE_NAMES[request.language]
	length_rules = SINGLE_PARAGRAPH_LENGTH_RULES if request.single_paragraph else LENGTH_RULES
	return (
		"You are an expert in educational research and teaching.\n"
		f"Your task is to write a professionally formatted educational research text in {language}.\n\n"
		"General rules:\n"
		f"- Write accurately and eloquently in {language} only.\n"
		f"- Respect the text direction of the language ({default_direction(request.language).upper()}).\n"
		f"{_structure_rules(request)}"
		"- Write formulas between single dollar signs, using _ for subscripts and ^ for superscripts, e.g. $H_2O$, $x^2$.\n\n"
		f"Target educational level rules:\n- {LEVEL_RULES[request.educational_level]}\n\n"
		f"Length rules:\n- {length_rules[request.length]}\n\n"
		"Output only the formatted research text."
	)


def _request_summary(request: GenerationRequest) -> str:
	lines = [
		f"Topic: [{request.topic}]",
		f"Language: [{LANGUAGE_NAMES[request.language]}]",
		f"Target educational level: [{request.educational_level.value}]",
		f"Requested length: [{request.length.value}]",
	]
	if request.additional_details and request.additional_details.strip():
		lines.append(f"Additional details from the student: [{request.additional_details.strip()}]")
	return "\n".join(lines)


def build_instructions(request: GenerationRequest) -> InstructionPair:
	return InstructionPair(
		system=_system_instruction(request),
		user=f"Write an educational research text on the following topic.\n{_request_summary(request)}",
	)


def build_extend_instructions(prior_text: str, request: GenerationRequest) -> InstructionPair:
	return InstructionPair(
		system=_system_instruction(request),
		user=(
			"Below is an educational research text you wrote earlier. Expand it: deepen every section, "
			"add examples and any missing sections, and keep the same language, level and formatting rules.\n"
			"Return the COMPLETE expanded text from start to finish, not only the additions.\n"
			f"{_request_summary(request)}\n\n"
			f"Existing text:\n<<<\n{prior_text}\n>>>"
		),
	)
