from .errors import (
    ResolveError,
    UndefinedReference,
    MalformedList,
    MalformedSupertype,
    MalformedOptional,
    UnresolvedCarrier,
    AttributeArityMismatch,
    AttributeNameMismatch,
    AmbiguousAttributeOrder,
    SupertypeCycle,
)
from .options import ResolveOptions
from .pipeline import ResolvedGrammar, resolve_grammar, snapshot_grammar, validate_model
from .schedule import fixpoint_order

__all__ = [
    "ResolveError",
    "UndefinedReference",
    "MalformedList",
    "MalformedSupertype",
    "MalformedOptional",
    "UnresolvedCarrier",
    "AttributeArityMismatch",
    "AttributeNameMismatch",
    "AmbiguousAttributeOrder",
    "SupertypeCycle",
    "ResolveOptions",
    "ResolvedGrammar",
    "resolve_grammar",
    "snapshot_grammar",
    "validate_model",
    "fixpoint_order",
]
