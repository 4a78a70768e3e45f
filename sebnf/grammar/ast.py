# sebnf/grammar/ast.py
"""Grammar Model
- Symbol: Keyword / NamedReference / TerminalClass / LiteralText / LiteralChar / CharPair
- Alternative: 심볼 시퀀스 하나(문법 대안 1개)
- Production: 좌변 이름 + 대안들 + 해석 단계에서 채워지는 분류/상속/속성 필드
- Grammar: Production 아레나(ProductionId = 리스트 인덱스) + 토큰/터미널 레지스트리

해석 단계들은 Production 필드를 **추가적으로만** 채운다(지우지 않음).
"""

from __future__     import annotations
from dataclasses    import dataclass, field
from enum           import Enum
from typing         import Dict, Iterator, List, Optional, Union

ProductionId = int


# ---- Symbols ----

@dataclass(frozen=True)
class Keyword:
    """대문자 키워드 토큰 (예: POINT, ENDSEC)"""
    name: str

@dataclass
class NamedReference:
    """다른 Production 참조. resolved 는 link 단계에서 채워진다."""
    name: str
    resolved: Optional[ProductionId] = None

@dataclass(frozen=True)
class TerminalClass:
    """어휘 범주 (정수/실수/문자열 리터럴 등)"""
    name: str

@dataclass(frozen=True)
class LiteralText:
    text: str

@dataclass(frozen=True)
class LiteralChar:
    char: str

@dataclass(frozen=True)
class CharPair:
    """'Aa' 형태: 대문자 + 같은 글자의 소문자 (키워드 철자 표기용)"""
    chars: str


Symbol = Union[Keyword, NamedReference, TerminalClass, LiteralText, LiteralChar, CharPair]


def is_data_symbol(sym: Symbol) -> bool:
    """속성 값을 실어 나르는 심볼인지 (NamedReference / TerminalClass 만 해당)"""
    return isinstance(sym, (NamedReference, TerminalClass))


def symbol_text(sym: Symbol) -> str:
    """디버그/진단용 표기"""
    if isinstance(sym, (Keyword, NamedReference, TerminalClass)):
        return sym.name
    if isinstance(sym, LiteralText):
        return repr(sym.text)
    if isinstance(sym, LiteralChar):
        return repr(sym.char)
    if isinstance(sym, CharPair):
        return repr(sym.chars)
    raise TypeError(f"Unknown symbol {sym!r}")


@dataclass
class Alternative:
    symbols: List[Symbol] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.symbols)

    def only(self) -> Optional[Symbol]:
        """단일 심볼 대안이면 그 심볼, 아니면 None"""
        return self.symbols[0] if len(self.symbols) == 1 else None


# ---- Classification enums ----

class ListKind(Enum):
    NONE            = "none"
    UNSEPARATED     = "unseparated"
    COMMA_SEPARATED = "comma_separated"

class SupertypeKind(Enum):
    NONE  = "none"
    PURE  = "pure"
    MIXED = "mixed"

class OptionalRole(Enum):
    NONE                = "none"
    WRAPS_INSTANCE_LIKE = "wraps_instance_like"
    WRAPS_OTHER         = "wraps_other"
    IS_WRAPPED          = "is_wrapped"

WRAPPER_ROLES = (OptionalRole.WRAPS_INSTANCE_LIKE, OptionalRole.WRAPS_OTHER)


@dataclass
class Production:
    """
    Production
    ==========
    lhs / alternatives 는 ingestion 이 채우고, 나머지는 해석 단계가 채운다.

    - list_kind / supertype_kind      : Classifier (+ Instance Propagator 의 MIXED 재분류)
    - immediate_supertypes / ancestors : Classifier / Supertype Graph Builder
    - is_instance / instance_witness   : Instance Propagator
    - optionality / paired / carrier_name : Classifier(잠정) → Optional Resolver(확정)
    - own_attribute_names / attribute_names / own_symbols : Attribute Resolver
    - scheduled                        : Print Scheduler

    집합 성격의 필드(immediate_supertypes, ancestors)는 결정성을 위해
    중복 없는 삽입순 리스트로 보관한다.
    """
    lhs: str
    alternatives: List[Alternative] = field(default_factory=list)

    list_kind: ListKind = ListKind.NONE
    supertype_kind: SupertypeKind = SupertypeKind.NONE
    is_instance: bool = False
    instance_witness: Optional[ProductionId] = None
    optionality: OptionalRole = OptionalRole.NONE
    paired: Optional[ProductionId] = None
    immediate_supertypes: List[ProductionId] = field(default_factory=list)
    ancestors: List[ProductionId] = field(default_factory=list)
    attribute_names: List[str] = field(default_factory=list)
    own_attribute_names: List[str] = field(default_factory=list)
    own_symbols: List[Symbol] = field(default_factory=list)
    carrier_name: Optional[str] = None
    scheduled: bool = False

    # 주석 블록이 전체 순서를 명시했는지 (AmbiguousAttributeOrder 판정용)
    explicit_order: bool = False

    @property
    def is_list(self) -> bool:
        return self.list_kind is not ListKind.NONE

    @property
    def is_supertype(self) -> bool:
        return self.supertype_kind is not SupertypeKind.NONE

    @property
    def is_wrapper(self) -> bool:
        return self.optionality in WRAPPER_ROLES


@dataclass
class AttributeDecl:
    """주석 블록 한 줄: (* name : own... [: explicit...] *)"""
    name: str
    own: List[str] = field(default_factory=list)
    explicit: Optional[List[str]] = None
    line: int = 0


@dataclass
class Grammar:
    """
    Production 아레나 + ingestion 이 소유하는 두 레지스트리.
    - tokens    : 키워드 토큰 이름 → lex 철자 (reviseSpelling 반영)
    - terminals : 어휘 범주 이름 (정렬)
    """
    productions: List[Production] = field(default_factory=list)
    index: Dict[str, ProductionId] = field(default_factory=dict)
    tokens: Dict[str, str] = field(default_factory=dict)
    terminals: List[str] = field(default_factory=list)
    start: Optional[str] = None

    def add(self, prod: Production) -> ProductionId:
        if prod.lhs in self.index:
            raise KeyError(f"Duplicate production: {prod.lhs}")
        pid = len(self.productions)
        self.productions.append(prod)
        self.index[prod.lhs] = pid
        if self.start is None:
            self.start = prod.lhs
        return pid

    def __len__(self) -> int:
        return len(self.productions)

    def __iter__(self) -> Iterator[Production]:
        return iter(self.productions)

    def __getitem__(self, pid: ProductionId) -> Production:
        return self.productions[pid]

    def find(self, name: str) -> Optional[Production]:
        pid = self.index.get(name)
        return None if pid is None else self.productions[pid]

    def id_of(self, name: str) -> Optional[ProductionId]:
        return self.index.get(name)

    def name_of(self, pid: ProductionId) -> str:
        return self.productions[pid].lhs

    def is_lexical(self, name: str) -> bool:
        """키워드 철자 정의 또는 터미널 더미 production 인지"""
        return name in self.tokens or name in self.terminals
