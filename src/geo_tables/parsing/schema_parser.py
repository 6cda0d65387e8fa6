"""Parser for the schema definition DSL."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import ply.yacc as yacc

from geo_tables.errors import SchemaError
from geo_tables.parsing.schema_lexer import SchemaLexer
from geo_tables.types import AttributeDefinition, MorphismDefinition, SchemaRegistry


@dataclass
class SortSpec:
    """Object kinds or attribute types declared in one statement."""

    keyword: str  # "object" or "attrtype"
    names: list[str]
    lineno: int = 0


@dataclass
class FieldSpec:
    """A morphism or attribute declaration before resolution."""

    keyword: str  # "morphism" or "attribute"
    name: str
    dom: str
    codom: str
    modifiers: list[str] = field(default_factory=list)
    lineno: int = 0


class SchemaParser:
    """Parser for the schema definition DSL.

    Example::

        object Region, District
        attrtype Name
        morphism district_of: District -> Region [indexed]
        attribute region_name: Region -> Name
    """

    tokens = SchemaLexer.tokens

    def __init__(self) -> None:
        self.lexer = SchemaLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore
        self.registry: SchemaRegistry = SchemaRegistry()

    def p_schema(self, p: yacc.YaccProduction) -> None:
        """schema : statement_list
                  | empty"""
        p[0] = p[1] if p[1] is not None else []

    def p_empty(self, p: yacc.YaccProduction) -> None:
        """empty :"""
        p[0] = None

    def p_statement_list_single(self, p: yacc.YaccProduction) -> None:
        """statement_list : statement"""
        p[0] = [p[1]]

    def p_statement_list_multiple(self, p: yacc.YaccProduction) -> None:
        """statement_list : statement_list statement"""
        p[0] = p[1]
        p[0].append(p[2])

    def p_statement_objects(self, p: yacc.YaccProduction) -> None:
        """statement : OBJECT name_list"""
        p[0] = SortSpec(keyword="object", names=p[2], lineno=p.lineno(1))

    def p_statement_attr_types(self, p: yacc.YaccProduction) -> None:
        """statement : ATTRTYPE name_list"""
        p[0] = SortSpec(keyword="attrtype", names=p[2], lineno=p.lineno(1))

    def p_statement_morphism(self, p: yacc.YaccProduction) -> None:
        """statement : MORPHISM IDENTIFIER COLON IDENTIFIER ARROW IDENTIFIER modifiers"""
        p[0] = FieldSpec(
            keyword="morphism", name=p[2], dom=p[4], codom=p[6],
            modifiers=p[7], lineno=p.lineno(1),
        )

    def p_statement_attribute(self, p: yacc.YaccProduction) -> None:
        """statement : ATTRIBUTE IDENTIFIER COLON IDENTIFIER ARROW IDENTIFIER modifiers"""
        p[0] = FieldSpec(
            keyword="attribute", name=p[2], dom=p[4], codom=p[6],
            modifiers=p[7], lineno=p.lineno(1),
        )

    def p_name_list_single(self, p: yacc.YaccProduction) -> None:
        """name_list : IDENTIFIER"""
        p[0] = [p[1]]

    def p_name_list_multiple(self, p: yacc.YaccProduction) -> None:
        """name_list : name_list COMMA IDENTIFIER"""
        p[0] = p[1] + [p[3]]

    def p_modifiers_none(self, p: yacc.YaccProduction) -> None:
        """modifiers : empty"""
        p[0] = []

    def p_modifiers_list(self, p: yacc.YaccProduction) -> None:
        """modifiers : LBRACKET modifier_list RBRACKET
                     | LBRACKET modifier_list COMMA RBRACKET"""
        p[0] = p[2]

    def p_modifier_list_single(self, p: yacc.YaccProduction) -> None:
        """modifier_list : modifier"""
        p[0] = [p[1]]

    def p_modifier_list_multiple(self, p: yacc.YaccProduction) -> None:
        """modifier_list : modifier_list COMMA modifier"""
        p[0] = p[1] + [p[3]]

    def p_modifier(self, p: yacc.YaccProduction) -> None:
        """modifier : INDEXED
                    | OPTIONAL
                    | REQUIRED"""
        p[0] = p[1]

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            raise SyntaxError(f"Syntax error at '{p.value}' (line {p.lineno})")
        else:
            raise SyntaxError("Syntax error at end of input")

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        self.parser = yacc.yacc(module=self, **kwargs)

    def parse(self, data: str) -> SchemaRegistry:
        """Parse schema definitions and return a populated SchemaRegistry."""
        if self.parser is None:
            self.build(debug=False, write_tables=False)

        self.registry = SchemaRegistry()
        self.lexer.lexer.lineno = 1

        specs = self.parser.parse(data, lexer=self.lexer.lexer)
        if specs is None:
            specs = []

        self._resolve_specs(specs)
        return self.registry

    def _resolve_specs(self, specs: list[SortSpec | FieldSpec]) -> None:
        """Resolve specs into the registry in two phases.

        Phase 1 registers every object kind and attribute type so that fields
        may name kinds declared later in the text. Phase 2 registers the
        morphisms and attributes in declaration order.
        """
        for spec in specs:
            if isinstance(spec, SortSpec):
                for name in spec.names:
                    if spec.keyword == "object":
                        self.registry.register_object(name)
                    else:
                        self.registry.register_attr_type(name)

        for spec in specs:
            if isinstance(spec, FieldSpec):
                self.registry.register(self._resolve_field(spec))

    def _resolve_field(self, spec: FieldSpec) -> MorphismDefinition | AttributeDefinition:
        """Turn a field spec into a definition, checking its modifiers."""
        modifiers = set(spec.modifiers)
        if spec.keyword == "morphism":
            if "required" in modifiers:
                raise SchemaError(
                    f"Morphism '{spec.name}' (line {spec.lineno}): morphisms are "
                    "required unless marked optional"
                )
            return MorphismDefinition(
                name=spec.name,
                dom=spec.dom,
                codom=spec.codom,
                indexed="indexed" in modifiers,
                optional="optional" in modifiers,
            )

        if "indexed" in modifiers:
            raise SchemaError(
                f"Attribute '{spec.name}' (line {spec.lineno}): only morphisms can be indexed"
            )
        if {"optional", "required"} <= modifiers:
            raise SchemaError(
                f"Attribute '{spec.name}' (line {spec.lineno}): cannot be both "
                "optional and required"
            )
        return AttributeDefinition(
            name=spec.name,
            dom=spec.dom,
            attr_type=spec.codom,
            required="required" in modifiers,
        )
