import pytest  # type: ignore

from sebnf.grammar.annotations import scan_attribute_block
from sebnf.grammar.parser import parse_grammar
from sebnf.resolve import ResolvedGrammar, resolve_grammar


SHAPES_EBNF = """\
file = HEADER, ';', instanceList, ENDSEC, ';' ;
instanceList = instancePlus | instanceList, instancePlus ;
instancePlus = instanceId, '=', instance, ';' ;
instanceId = '#', INTSTRING ;
instance = cartesianPoint | circle | line ;
shape = circle | line ;
cartesianPoint = CARTESIAN_POINT, '(', REALSTRING, c, REALSTRING, ')' ;
circle = CIRCLE, '(', optLabel, c, cartesianPoint, c, REALSTRING, ')' ;
line = LINE, '(', optLabel, c, cartesianPoint, c, cartesianPoint, ')' ;
optLabel = label | '$' ;
label = CHARSTRING ;
c = ',' ;

(* Start attributes *)
(* file : instances *)
(* instanceId : val *)
(* shape : name *)
(* cartesianPoint : x y *)
(* circle : center radius *)
(* line : start end *)
(* label : text *)
(* End attributes *)
"""


def resolve_text(src: str, required: bool = True, options=None) -> ResolvedGrammar:
    g = parse_grammar(src)
    decls = scan_attribute_block(src, required=required)
    return resolve_grammar(g, decls, options)


@pytest.fixture
def shapes_src() -> str:
    return SHAPES_EBNF


@pytest.fixture
def shapes_model() -> ResolvedGrammar:
    return resolve_text(SHAPES_EBNF)


@pytest.fixture
def resolve():
    """grammar text (+ attribute block) → ResolvedGrammar"""
    return resolve_text
