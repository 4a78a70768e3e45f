# sebnf/resolve/errors.py
"""해석(resolve) 단계 오류 분류

모든 오류는 복구 불가: 발생 즉시 실행을 중단하고, 어떤 production 이
어떤 규칙을 어겼는지 메시지로 알린다.
"""

from __future__ import annotations
from typing import Optional


class ResolveError(Exception):
    """Thrown when the grammar model cannot be resolved."""

    rule = "ResolveError"

    def __init__(self, production: Optional[str], message: str) -> None:
        super().__init__(message)
        self.production = production
        self.message = message

    def __str__(self) -> str:
        if self.production is None:
            return f"{self.rule}: {self.message}"
        return f"{self.rule} in '{self.production}': {self.message}"


class UndefinedReference(ResolveError):
    """A name used in a production (or the attribute block) has no production."""

    rule = "UndefinedReference"

    def __init__(self, production: Optional[str], name: str, message: Optional[str] = None) -> None:
        super().__init__(production, message or f"reference to undefined production '{name}'")
        self.name = name


class MalformedList(ResolveError):
    """Two alternatives that fit none of the list/optional/supertype idioms."""

    rule = "MalformedList"


class MalformedSupertype(ResolveError):
    """A production shaped like a supertype that breaks the supertype idiom."""

    rule = "MalformedSupertype"


class MalformedOptional(ResolveError):
    """A `x | '$'` production whose wrapped side is not a single production reference."""

    rule = "MalformedOptional"


class UnresolvedCarrier(ResolveError):
    """No instance production can carry a reference for an optional wrapper."""

    rule = "UnresolvedCarrier"


class AttributeArityMismatch(ResolveError):
    """Attribute names and data-bearing symbols ran out at different times."""

    rule = "AttributeArityMismatch"


class AttributeNameMismatch(ResolveError):
    """Own attribute names disagree with the inherited attribute order."""

    rule = "AttributeNameMismatch"


class AmbiguousAttributeOrder(ResolveError):
    """
    Several supertypes contribute attributes and the attribute block does
    not give the full order.
    """

    rule = "AmbiguousAttributeOrder"


class SupertypeCycle(ResolveError):
    """The supertype graph contains a cycle, so not every production can be ordered."""

    rule = "SupertypeCycle"
