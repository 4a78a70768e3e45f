# sebnf/resolve/schedule.py
"""Print Scheduler

"더 이상 바뀌지 않을 때까지 찍는다"는 고정점 순서화를 한 번만 구현해 두고
resolve(전체 production)와 각 방출기(자기 선택 목록)가 같이 쓴다.
"""

from __future__ import annotations
from typing import Callable, Hashable, List, Optional, Sequence, Set, Tuple, TypeVar

from ..grammar.ast import Grammar, ProductionId
from .errors import SupertypeCycle
from .options import ResolveOptions

T = TypeVar("T", bound=Hashable)


def fixpoint_order(
    items: Sequence[T],
    is_ready: Callable[[T, Set[T]], bool],
) -> Tuple[List[T], List[T]]:
    """
    items 를 여러 번 훑으며 is_ready(item, done) 가 참인 것을 순서에 붙인다.
    한 패스 안에서도 방금 붙인 것은 곧바로 done 에 들어간다.
    한 패스에서 아무것도 못 붙이면 멈춘다.

    반환: (순서, 끝내 못 붙인 나머지)
    """
    done: Set[T] = set()
    order: List[T] = []
    pending = list(items)
    while pending:
        rest: List[T] = []
        for it in pending:
            if is_ready(it, done):
                done.add(it)
                order.append(it)
            else:
                rest.append(it)
        if len(rest) == len(pending):
            break
        pending = rest
    return order, pending


def supertype_ready(g: Grammar, root_id: Optional[ProductionId]):
    """슈퍼타입이 모두 끝났고, instance 면 루트도 끝났을 때 준비 완료"""
    def ready(pid: ProductionId, done: Set[ProductionId]) -> bool:
        prod = g[pid]
        if prod.is_instance and root_id is not None and root_id not in done:
            return False
        return all(s in done for s in prod.immediate_supertypes)
    return ready


def schedule_productions(g: Grammar, options: Optional[ResolveOptions] = None) -> List[ProductionId]:
    """
    모든 production 을 슈퍼타입 우선 순서로 세운다.
    전부 세우지 못하면 슈퍼타입 그래프에 순환이 있는 것 → SupertypeCycle.
    """
    opts = options or ResolveOptions()
    root_id = g.id_of(opts.instance_root)
    order, stuck = fixpoint_order(range(len(g)), supertype_ready(g, root_id))
    if stuck:
        names = ", ".join(g.name_of(p) for p in stuck)
        raise SupertypeCycle(
            g.name_of(stuck[0]),
            f"only {len(order)} of {len(g)} productions could be ordered; stuck: {names}",
        )
    for pid in order:
        g[pid].scheduled = True
    return order
