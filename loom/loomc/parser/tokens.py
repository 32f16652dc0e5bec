# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Token kinds and lookup tables for the Loom tokenizer.

Tokens are ephemeral: the parser keeps exactly one lookahead `TokenInfo` and
takes ownership of its payload (identifier name, digit text, or string
components) when it consumes it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, Optional


class TokenKind(Enum):
	DIGITS = auto()
	STRING_LITERAL = auto()
	IDENTIFIER = auto()
	UNDERSCORE = auto()

	KEYWORD_IMPORT = auto()
	KEYWORD_EXPORT = auto()
	KEYWORD_STRUCT = auto()
	KEYWORD_FUNC = auto()
	KEYWORD_METHOD = auto()
	KEYWORD_IF = auto()
	KEYWORD_ELSE = auto()
	KEYWORD_WHILE = auto()
	KEYWORD_BREAK = auto()
	KEYWORD_CONTINUE = auto()
	KEYWORD_RETURN = auto()
	KEYWORD_END = auto()
	KEYWORD_VAR = auto()
	KEYWORD_INT = auto()
	KEYWORD_FLOAT = auto()

	PLUS = auto()
	PLUS_EQUAL = auto()
	HYPHEN = auto()
	HYPHEN_EQUAL = auto()
	HYPHEN_GREATER = auto()
	ASTERISK = auto()
	ASTERISK_EQUAL = auto()
	SLASH = auto()
	SLASH_EQUAL = auto()
	PERCENT = auto()
	PERCENT_EQUAL = auto()
	EQUAL = auto()
	DOUBLE_EQUAL = auto()
	EQUAL_GREATER = auto()
	EXCLAMATION = auto()
	EXCLAMATION_EQUAL = auto()
	GREATER = auto()
	GREATER_EQUAL = auto()
	DOUBLE_GREATER = auto()
	DOUBLE_GREATER_EQUAL = auto()
	LESS = auto()
	LESS_EQUAL = auto()
	DOUBLE_LESS = auto()
	DOUBLE_LESS_EQUAL = auto()
	AMPERSAND = auto()
	AMPERSAND_EQUAL = auto()
	DOUBLE_AMPERSAND = auto()
	BAR = auto()
	BAR_EQUAL = auto()
	DOUBLE_BAR = auto()
	CIRCUMFLEX = auto()
	CIRCUMFLEX_EQUAL = auto()
	DOT = auto()
	COLON = auto()
	SEMICOLON = auto()
	COMMA = auto()
	QUESTION = auto()
	TILDE = auto()
	DOLLAR = auto()
	OPENING_PARENTHESIS = auto()
	CLOSING_PARENTHESIS = auto()
	OPENING_BRACKET = auto()
	CLOSING_BRACKET = auto()
	OPENING_BRACE = auto()
	CLOSING_BRACE = auto()


KEYWORDS: Dict[str, TokenKind] = {
	"import": TokenKind.KEYWORD_IMPORT,
	"export": TokenKind.KEYWORD_EXPORT,
	"struct": TokenKind.KEYWORD_STRUCT,
	"func": TokenKind.KEYWORD_FUNC,
	"method": TokenKind.KEYWORD_METHOD,
	"if": TokenKind.KEYWORD_IF,
	"else": TokenKind.KEYWORD_ELSE,
	"while": TokenKind.KEYWORD_WHILE,
	"break": TokenKind.KEYWORD_BREAK,
	"continue": TokenKind.KEYWORD_CONTINUE,
	"return": TokenKind.KEYWORD_RETURN,
	"end": TokenKind.KEYWORD_END,
	"var": TokenKind.KEYWORD_VAR,
	"int": TokenKind.KEYWORD_INT,
	"float": TokenKind.KEYWORD_FLOAT,
	"_": TokenKind.UNDERSCORE,
}

# Punctuation, matched longest first. Comment openers (`--`, `/-`, `//`) are
# handled by the tokenizer before this table is consulted.
OPERATORS: Dict[str, TokenKind] = {
	">>=": TokenKind.DOUBLE_GREATER_EQUAL,
	"<<=": TokenKind.DOUBLE_LESS_EQUAL,
	"+=": TokenKind.PLUS_EQUAL,
	"-=": TokenKind.HYPHEN_EQUAL,
	"->": TokenKind.HYPHEN_GREATER,
	"*=": TokenKind.ASTERISK_EQUAL,
	"/=": TokenKind.SLASH_EQUAL,
	"%=": TokenKind.PERCENT_EQUAL,
	"==": TokenKind.DOUBLE_EQUAL,
	"=>": TokenKind.EQUAL_GREATER,
	"!=": TokenKind.EXCLAMATION_EQUAL,
	">=": TokenKind.GREATER_EQUAL,
	">>": TokenKind.DOUBLE_GREATER,
	"<=": TokenKind.LESS_EQUAL,
	"<<": TokenKind.DOUBLE_LESS,
	"&&": TokenKind.DOUBLE_AMPERSAND,
	"&=": TokenKind.AMPERSAND_EQUAL,
	"||": TokenKind.DOUBLE_BAR,
	"|=": TokenKind.BAR_EQUAL,
	"^=": TokenKind.CIRCUMFLEX_EQUAL,
	"+": TokenKind.PLUS,
	"-": TokenKind.HYPHEN,
	"*": TokenKind.ASTERISK,
	"/": TokenKind.SLASH,
	"%": TokenKind.PERCENT,
	"=": TokenKind.EQUAL,
	"!": TokenKind.EXCLAMATION,
	">": TokenKind.GREATER,
	"<": TokenKind.LESS,
	"&": TokenKind.AMPERSAND,
	"|": TokenKind.BAR,
	"^": TokenKind.CIRCUMFLEX,
	".": TokenKind.DOT,
	":": TokenKind.COLON,
	";": TokenKind.SEMICOLON,
	",": TokenKind.COMMA,
	"?": TokenKind.QUESTION,
	"~": TokenKind.TILDE,
	"$": TokenKind.DOLLAR,
	"(": TokenKind.OPENING_PARENTHESIS,
	")": TokenKind.CLOSING_PARENTHESIS,
	"[": TokenKind.OPENING_BRACKET,
	"]": TokenKind.CLOSING_BRACKET,
	"{": TokenKind.OPENING_BRACE,
	"}": TokenKind.CLOSING_BRACE,
}


@dataclass
class Token:
	"""
	A token kind plus its payload.

	Payload by kind: IDENTIFIER → name (str), DIGITS → digit text (str),
	STRING_LITERAL → list of string components. Other kinds carry None.
	"""

	kind: TokenKind
	value: object = None


@dataclass
class TokenInfo:
	token: Token
	# No whitespace or comment between the previous token and this one.
	is_adjacent: bool
	# At least one line break between the previous token and this one.
	is_on_new_line: bool

	@property
	def kind(self) -> TokenKind:
		return self.token.kind


def describe(kind: Optional[TokenKind]) -> str:
	"""Human-readable token name for messages."""
	if kind is None:
		return "end of input"
	for text, k in KEYWORDS.items():
		if k is kind:
			return f"'{text}'"
	for text, k in OPERATORS.items():
		if k is kind:
			return f"'{text}'"
	return kind.name.lower().replace("_", " ")


__all__ = [
	"KEYWORDS",
	"OPERATORS",
	"Token",
	"TokenInfo",
	"TokenKind",
	"describe",
]
