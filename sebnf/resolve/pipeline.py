# sebnf/resolve/pipeline.py
"""해석 파이프라인

Link → Classifier → Graph Builder → Instance Propagator → Optional Resolver
→ Attribute Resolver → Scheduler → 불변식 검사 순으로 돌린다.
어느 단계든 오류가 나면 예외가 그대로 올라가고 ResolvedGrammar 는 만들어지지 않는다.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from ..grammar.ast import (
    AttributeDecl, Grammar, NamedReference, OptionalRole, Production, ProductionId,
    SupertypeKind, WRAPPER_ROLES, symbol_text,
)
from .attributes import apply_annotations, match_attribute_symbols, propagate_attribute_names
from .classify import classify_productions
from .errors import (
    AttributeArityMismatch, MalformedOptional, MalformedSupertype, SupertypeCycle, UndefinedReference,
)
from .instances import propagate_instances
from .link import link_references
from .optionals import resolve_optionals
from .options import ResolveOptions
from .schedule import schedule_productions
from .supertypes import build_ancestors

Trace = Callable[[str], None]


@dataclass(frozen=True)
class ResolvedGrammar:
    """
    방출기에 넘기는 읽기 전용 결과.
    - grammar : 해석이 끝난 Grammar (방출기는 읽기만 한다)
    - order   : 스케줄러 순서 (ProductionId)
    - options : 해석에 쓴 지정 이름/표식
    """
    grammar: Grammar
    order: Tuple[ProductionId, ...]
    options: ResolveOptions

    @property
    def productions(self) -> Tuple[Production, ...]:
        return tuple(self.grammar.productions)

    @property
    def tokens(self) -> Dict[str, str]:
        return dict(self.grammar.tokens)

    @property
    def terminals(self) -> List[str]:
        return list(self.grammar.terminals)

    def production(self, name: str) -> Production:
        prod = self.grammar.find(name)
        if prod is None:
            raise KeyError(f"Unknown production: {name}")
        return prod

    def name_of(self, pid: ProductionId) -> str:
        return self.grammar.name_of(pid)

    def ordered(self) -> List[Production]:
        return [self.grammar[p] for p in self.order]

    def snapshot(self) -> Dict[str, Any]:
        """결정적 비교/JSON 덤프용: 모든 필드를 이름/문자열로 바꾼 dict"""
        return snapshot_grammar(self.grammar, self.order)


def _names(g: Grammar, ids) -> List[str]:
    return [g.name_of(i) for i in ids]

def _opt_name(g: Grammar, pid: Optional[ProductionId]) -> Optional[str]:
    return None if pid is None else g.name_of(pid)


def snapshot_grammar(g: Grammar, order=()) -> Dict[str, Any]:
    prods: Dict[str, Any] = {}
    for p in g.productions:
        prods[p.lhs] = {
            "list_kind": p.list_kind.value,
            "supertype_kind": p.supertype_kind.value,
            "is_instance": p.is_instance,
            "instance_witness": _opt_name(g, p.instance_witness),
            "optionality": p.optionality.value,
            "paired": _opt_name(g, p.paired),
            "carrier_name": p.carrier_name,
            "immediate_supertypes": _names(g, p.immediate_supertypes),
            "ancestors": _names(g, p.ancestors),
            "attribute_names": list(p.attribute_names),
            "own_attribute_names": list(p.own_attribute_names),
            "own_symbols": [symbol_text(s) for s in p.own_symbols],
            "scheduled": p.scheduled,
        }
    return {
        "start": g.start,
        "order": _names(g, order),
        "tokens": dict(g.tokens),
        "terminals": list(g.terminals),
        "productions": prods,
    }


def validate_model(g: Grammar) -> None:
    """해석이 끝난 모델의 불변식을 다시 확인한다. 어기면 해당 ResolveError."""
    for prod in g.productions:
        for alt in prod.alternatives:
            for sym in alt.symbols:
                if isinstance(sym, NamedReference) and sym.resolved is None:
                    raise UndefinedReference(prod.lhs, sym.name)

        if prod.supertype_kind is not SupertypeKind.NONE:
            for alt in prod.alternatives:
                sym = alt.only()
                if not isinstance(sym, NamedReference) or g[sym.resolved].is_list:
                    raise MalformedSupertype(
                        prod.lhs, "every alternative must be one reference to a non-list production"
                    )

        if prod.optionality in WRAPPER_ROLES:
            ok = (
                len(prod.alternatives) == 2
                and isinstance(prod.alternatives[0].only(), NamedReference)
                and prod.alternatives[1].only() is not None
                and prod.carrier_name is not None
            )
            if not ok:
                raise MalformedOptional(prod.lhs, "wrapper must be exactly `child | absent-marker`")
        if prod.optionality is OptionalRole.IS_WRAPPED and prod.paired is None:
            raise MalformedOptional(prod.lhs, "wrapped production has no wrapper")

        if len(prod.own_symbols) != len(prod.own_attribute_names):
            raise AttributeArityMismatch(
                prod.lhs,
                f"{len(prod.own_symbols)} symbols for {len(prod.own_attribute_names)} own attributes",
            )

        if not prod.scheduled:
            raise SupertypeCycle(prod.lhs, "production was never scheduled")


def resolve_grammar(
    g: Grammar,
    annotations: Optional[Mapping[str, AttributeDecl]] = None,
    options: Optional[ResolveOptions] = None,
    trace: Optional[Trace] = None,
) -> ResolvedGrammar:
    """
    resolve_grammar
    ===============
    ingestion 결과(Grammar)와 속성 주석을 받아 모든 해석 단계를 순서대로 수행한다.
    g 는 제자리에서 채워진다. trace 를 주면 단계별 요약 한 줄씩을 넘긴다.
    """
    opts = options or ResolveOptions()
    emit = trace or (lambda _msg: None)

    n_refs = link_references(g)
    emit(f"[DEBUG] Linked | productions={len(g)} references={n_refs}")

    apply_annotations(g, annotations or {})
    emit(f"[DEBUG] Annotations applied | annotated={len(annotations or {})}")

    classify_productions(g, opts)
    emit("[DEBUG] Classified | lists=%d supertypes=%d wrappers=%d" % (
        sum(p.is_list for p in g), sum(p.is_supertype for p in g), sum(p.is_wrapper for p in g)))

    build_ancestors(g, opts)
    emit(f"[DEBUG] Ancestors built | with_ancestors={sum(bool(p.ancestors) for p in g)}")

    propagate_instances(g, opts)
    emit("[DEBUG] Instances propagated | instances=%d witnessed=%d mixed=%d" % (
        sum(p.is_instance for p in g),
        sum(p.instance_witness is not None for p in g),
        sum(p.supertype_kind is SupertypeKind.MIXED for p in g)))

    resolve_optionals(g)
    emit("[DEBUG] Optionals resolved | instance_like=%d other=%d" % (
        sum(p.optionality is OptionalRole.WRAPS_INSTANCE_LIKE for p in g),
        sum(p.optionality is OptionalRole.WRAPS_OTHER for p in g)))

    propagate_attribute_names(g, opts)
    match_attribute_symbols(g)
    emit(f"[DEBUG] Attributes resolved | with_attributes={sum(bool(p.attribute_names) for p in g)}")

    order = schedule_productions(g, opts)
    emit(f"[DEBUG] Scheduled | ordered={len(order)}")

    validate_model(g)
    return ResolvedGrammar(g, tuple(order), opts)
