"""Lexer for the schema definition DSL."""

import ply.lex as lex


class SchemaLexer:
    """Lexer for tokenizing schema definition DSL."""

    # Reserved keywords (short forms follow the ob/hom/attr naming)
    reserved = {
        "object": "OBJECT",
        "ob": "OBJECT",
        "morphism": "MORPHISM",
        "hom": "MORPHISM",
        "attrtype": "ATTRTYPE",
        "attr_type": "ATTRTYPE",
        "attribute": "ATTRIBUTE",
        "attr": "ATTRIBUTE",
        "indexed": "INDEXED",
        "optional": "OPTIONAL",
        "required": "REQUIRED",
    }

    # Token list
    tokens = [
        "IDENTIFIER",
        "ARROW",
        "LBRACKET",
        "RBRACKET",
        "COLON",
        "COMMA",
    ] + sorted(set(reserved.values()))

    # Simple tokens
    t_ARROW = r"->"
    t_LBRACKET = r"\["
    t_RBRACKET = r"\]"
    t_COLON = r":"
    t_COMMA = r","

    # Ignored characters (spaces and tabs)
    t_ignore = " \t"

    # Comments
    t_ignore_COMMENT = r"\#[^\n]*"

    def __init__(self) -> None:
        self.lexer: lex.Lexer = None  # type: ignore

    def t_IDENTIFIER(self, t: lex.LexToken) -> lex.LexToken:
        r"[a-zA-Z_][a-zA-Z0-9_]*"
        t.type = self.reserved.get(t.value, "IDENTIFIER")
        return t

    def t_NEWLINE(self, t: lex.LexToken) -> None:
        r"\n+"
        t.lexer.lineno += len(t.value)

    def t_error(self, t: lex.LexToken) -> None:
        raise SyntaxError(f"Illegal character '{t.value[0]}' at line {t.lineno}")

    def build(self, **kwargs) -> None:  # type: ignore
        """Build the lexer."""
        self.lexer = lex.lex(module=self, **kwargs)
