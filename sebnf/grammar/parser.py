"""sebnf EBNF 파서
- 규칙: name = sym , sym | sym ;
- 주석: (* ... *)  (속성 주석 블록도 여기서는 그냥 건너뜀 → annotations.py 가 따로 읽음)
- 식별자 분류
    c                    → 쉼표 심볼 LiteralChar(',')
    CHARSTRING 등 설정값 → TerminalClass
    ALLCAPS              → Keyword (토큰 레지스트리에 기록)
    Capitalized          → TerminalClass (터미널 레지스트리에 기록)
    lowercase            → NamedReference
- 인용 리터럴: 'x' → LiteralChar, 'Xx' → CharPair, 그 외 → LiteralText
- 세미콜론(;)은 모든 규칙 종료에 **반드시 필요**
"""

from __future__ import annotations
import regex as re
from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Tuple
from .ast import *

DEFAULT_TERMINAL_CLASSES = frozenset({"CHARSTRING", "INTSTRING", "REALSTRING"})


@dataclass
class ScanOptions:
    """
    ingestion 설정.
    - terminal_classes : 대문자여도 Keyword 가 아닌 TerminalClass 로 볼 이름들
    - comma_name       : 쉼표를 뜻하는 production 이름 (`c = ',' ;`)
    - comma_token      : 쉼표 production 이 등록하는 토큰 이름
    - attr_start/attr_end : 속성 주석 블록 경계 표식
    """
    terminal_classes: FrozenSet[str] = DEFAULT_TERMINAL_CLASSES
    comma_name: str = "c"
    comma_token: str = "C"
    attr_start: str = "Start attributes"
    attr_end: str = "End attributes"


# ---- Lexer 토큰 ----
_TOKEN_SPEC = [
    ("WS",       r"[ \t\f\r]+"),
    ("NEWLINE",  r"\n"),
    ("COMMENT",  r"\(\*.*?\*\)"),
    ("EQ",       r"="),
    ("SEMI",     r";"),
    ("COMMA",    r","),
    ("OR",       r"\|"),
    ("SSTRING",  r"'[^'\n]*'"),
    ("STRING",   r'"[^"\n]*"'),
    ("IDENT",    r"[A-Za-z_][A-Za-z0-9_]*"),
]
MASTER_RE = re.compile("|".join(f"(?P<{n}>{p})" for n, p in _TOKEN_SPEC), re.S)


@dataclass
class Tok:
    kind: str
    lexeme: str
    start: int
    end: int
    line: int
    col: int

def _scan(src: str) -> List[Tok]:
    """개행/공백/주석은 줄·칼럼 갱신만 하고 토큰스트림에는 넣지 않는다."""
    toks: List[Tok] = []
    line = col = 1
    i = 0
    while i < len(src):
        m = MASTER_RE.match(src, i)
        if not m:
            snippet = _snippet_caret_at_pos(src, i)
            if src.startswith("(*", i):
                raise SyntaxError(f"Unterminated comment at {line}:{col}\n{snippet}")
            raise SyntaxError(f"Unexpected char {src[i]!r} at {line}:{col}\n{snippet}")
        kind = m.lastgroup or ""
        lex = m.group(0)
        start, end = i, m.end()
        nl_count = lex.count("\n")

        if kind not in ("WS", "COMMENT", "NEWLINE"):
            toks.append(Tok(kind, lex, start, end, line, col))

        if nl_count:
            line += nl_count
            col = len(lex) - lex.rfind("\n")
        else:
            col += len(lex)
        i = end

    toks.append(Tok("EOF", "", len(src), len(src), line, col))
    return toks


# ---------- error handling utils ----------
def _line_bounds(src: str, pos: int) -> Tuple[int, int]:
    """pos가 속한 라인의 [시작, 끝+1) 범위"""
    start = src.rfind("\n", 0, pos)
    if start == -1:
        start = 0
    else:
        start += 1
    end = src.find("\n", pos)
    if end == -1:
        end = len(src)
    return start, end

def _snippet_with_caret(src: str, tok: Tok) -> str:
    """토큰 시작 위치에 캐럿"""
    start, end = _line_bounds(src, tok.start)
    line_text = src[start:end]
    caret = " " * (tok.col - 1) + "^"
    return f"{line_text}\n{caret}"

def _snippet_caret_at_pos(src: str, pos: int) -> str:
    """임의의 절대 위치 pos에 캐럿"""
    start, end = _line_bounds(src, pos)
    line_text = src[start:end]
    col = (pos - start) + 1
    caret = " " * (col - 1) + "^"
    return f"{line_text}\n{caret}"


# --- 토큰 스트림 ---
class _TS:
    def __init__(self, toks: List[Tok], src: str):
        self.toks = toks
        self.i = 0
        self.src = src

    def la(self) -> Tok:
        return self.toks[self.i]

    def prev(self) -> Tok:
        return self.toks[self.i - 1] if self.i > 0 else self.toks[0]

    def eat(self, kind: str) -> Tok:
        t = self.la()
        if t.kind != kind:
            snippet = _snippet_with_caret(self.src, t)
            raise SyntaxError(
                f"Expected {kind}, got {t.kind} at {t.line}:{t.col}\n{snippet}"
            )
        self.i += 1
        return t

    def match(self, kind: str) -> Optional[Tok]:
        if self.la().kind == kind:
            return self.eat(kind)
        return None


def _require_semi(ts: _TS, context: str, example: str, anchor: Optional[Tok] = None) -> None:
    """
    세미콜론 강제. 없으면 캐럿은 anchor(직전 토큰)의 '끝 위치'에 찍는다.
    """
    if ts.match("SEMI"):
        return
    got = ts.la()
    where = f"{got.line}:{got.col}"
    found = "EOF" if got.kind == "EOF" else got.kind
    if anchor is not None:
        snippet = _snippet_caret_at_pos(ts.src, anchor.end)
    else:
        snippet = _snippet_with_caret(ts.src, got)
    msg = (
        f"Missing ';' after {context} (semicolon is mandatory).\n"
        f"- Found: {found} at {where}\n"
        f"- Example: {example}\n\n"
        f"{snippet}"
    )
    raise SyntaxError(msg)


# --- 식별자/리터럴 분류 ---
def _is_keyword_name(name: str, opts: ScanOptions) -> bool:
    return name.isupper() and name not in opts.terminal_classes

def _is_terminal_name(name: str, opts: ScanOptions) -> bool:
    return name in opts.terminal_classes or (name[0].isupper() and not name.isupper())

def _classify_ident(name: str, g: Grammar, opts: ScanOptions) -> Symbol:
    if name == opts.comma_name:
        return LiteralChar(",")
    if _is_terminal_name(name, opts):
        if name not in g.terminals:
            g.terminals.append(name)
        return TerminalClass(name)
    if _is_keyword_name(name, opts):
        g.tokens.setdefault(name, name)
        return Keyword(name)
    return NamedReference(name)

def _classify_quoted(text: str) -> Symbol:
    if len(text) == 1:
        return LiteralChar(text)
    if len(text) == 2 and text[0].isupper() and text[1].isalpha():
        return CharPair(text)
    return LiteralText(text)


# --- Grammar Parsing ---
def parse_grammar(src: str, options: Optional[ScanOptions] = None) -> Grammar:
    """
    EBNF 텍스트 → Grammar.
    NamedReference 는 이름만 가진 채(resolved=None)로 돌려준다. 이름 해석은 resolve 쪽 몫.
    """
    opts = options or ScanOptions()
    ts = _TS(_scan(src), src)
    g = Grammar()
    spelling: List[str] = []

    while ts.la().kind != "EOF":
        lhs_tok = ts.eat("IDENT")
        lhs = lhs_tok.lexeme
        ts.eat("EQ")
        alts = _parse_alternatives(ts, g, opts)
        _require_semi(ts, f"production '{lhs}'", f"{lhs} = ... ;", anchor=ts.prev())

        if lhs == opts.comma_name:
            # 쉼표 정의는 production 이 아니라 토큰 C 로 기록
            g.tokens[opts.comma_token] = ","
            continue
        if lhs in g.index:
            snippet = _snippet_with_caret(src, lhs_tok)
            raise SyntaxError(
                f"Duplicate production '{lhs}' at {lhs_tok.line}:{lhs_tok.col}\n{snippet}"
            )
        if _is_terminal_name(lhs, opts):
            if lhs not in g.terminals:
                g.terminals.append(lhs)
        elif _is_keyword_name(lhs, opts):
            g.tokens.setdefault(lhs, lhs)
            spelling.append(lhs)
        g.add(Production(lhs, alts))

    _revise_spelling(g, spelling)
    g.tokens = dict(sorted(g.tokens.items()))
    g.terminals = sorted(g.terminals)
    return g

def _parse_alternatives(ts: _TS, g: Grammar, opts: ScanOptions) -> List[Alternative]:
    alts = [_parse_sequence(ts, g, opts)]
    while ts.match("OR"):
        alts.append(_parse_sequence(ts, g, opts))
    return alts

def _parse_sequence(ts: _TS, g: Grammar, opts: ScanOptions) -> Alternative:
    """시퀀스: (sym (',' sym)*)?, 빈 대안 허용"""
    syms: List[Symbol] = []
    if ts.la().kind not in ("IDENT", "SSTRING", "STRING"):
        return Alternative(syms)
    syms.append(_parse_symbol(ts, g, opts))
    while ts.match("COMMA"):
        syms.append(_parse_symbol(ts, g, opts))
    return Alternative(syms)

def _parse_symbol(ts: _TS, g: Grammar, opts: ScanOptions) -> Symbol:
    t = ts.la()
    if t.kind == "IDENT":
        return _classify_ident(ts.eat("IDENT").lexeme, g, opts)
    if t.kind in ("SSTRING", "STRING"):
        text = ts.eat(t.kind).lexeme[1:-1]
        if not text:
            snippet = _snippet_with_caret(ts.src, t)
            raise SyntaxError(f"Empty literal at {t.line}:{t.col}\n{snippet}")
        return _classify_quoted(text)
    snippet = _snippet_with_caret(ts.src, t)
    raise SyntaxError(f"Unexpected token {t.kind} at {t.line}:{t.col}\n{snippet}")


def _revise_spelling(g: Grammar, spelling: List[str]) -> None:
    """
    키워드 철자 production(`ENDSEC = 'E','N','D','S','E','C' ;`)으로 토큰 lex 철자를 고친다.
    - LiteralChar : 그 글자
    - CharPair    : 'Xx' 는 대문자 X 하나 (두 번째 글자는 첫 글자의 소문자여야 함)
    그 밖의 심볼이나 대안 개수가 1이 아니면 오류.
    """
    for name in spelling:
        prod = g.find(name)
        if prod is None:
            continue
        if len(prod.alternatives) != 1:
            raise SyntaxError(f"Bad token spelling for {name}: expected exactly one alternative")
        chars: List[str] = []
        for sym in prod.alternatives[0].symbols:
            if isinstance(sym, LiteralChar):
                chars.append(sym.char)
            elif isinstance(sym, CharPair):
                if sym.chars[1] != sym.chars[0].lower():
                    raise SyntaxError(
                        f"Bad token spelling for {name}: {sym.chars!r} is not an upper/lower letter pair"
                    )
                chars.append(sym.chars[0])
            else:
                raise SyntaxError(
                    f"Bad token spelling for {name}: unexpected {symbol_text(sym)}"
                )
        if chars:
            g.tokens[name] = "".join(chars)
