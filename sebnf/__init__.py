"""sebnf: annotated EXPRESS / STEP Part 21 EBNF compiler.

Grammar text → Grammar model → resolved object model → C++ classes / YACC / Lex.
"""

from .grammar.ast import (
    Keyword, NamedReference, TerminalClass, LiteralText, LiteralChar, CharPair,
    Alternative, Production, Grammar, AttributeDecl,
    ListKind, SupertypeKind, OptionalRole,
)
from .grammar.parser import ScanOptions, parse_grammar
from .grammar.annotations import scan_attribute_block
from .resolve import (
    ResolveError, ResolveOptions, ResolvedGrammar, resolve_grammar, snapshot_grammar,
)
