from __future__ import annotations
from ..grammar.ast import Grammar, NamedReference
from .errors import UndefinedReference


def link_references(g: Grammar) -> int:
    """모든 NamedReference 에 ProductionId 를 채운다. 채운 개수를 돌려준다."""
    n = 0
    for prod in g.productions:
        for alt in prod.alternatives:
            for sym in alt.symbols:
                if not isinstance(sym, NamedReference):
                    continue
                pid = g.id_of(sym.name)
                if pid is None:
                    raise UndefinedReference(prod.lhs, sym.name)
                sym.resolved = pid
                n += 1
    return n
