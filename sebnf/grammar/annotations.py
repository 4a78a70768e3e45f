# sebnf/grammar/annotations.py
"""속성 주석 블록 스캐너

문법 파일 어딘가(보통 끝)에 다음 형태의 EBNF 주석 묶음이 있다:

    (* Start attributes *)
    (* angleTaper : angle *)
    (* approval : status level *)
    (* rapidMovement : : itsSecplane itsToolpath itsToolDirection *)
    (* End attributes *)

한 줄 = production 하나. 첫 콜론 뒤는 그 production 이 **직접** 선언한 속성 이름,
두 번째 콜론이 있으면 그 뒤는 상속 포함 전체 속성 순서(명시적 순서)다.
빈 줄은 건너뛴다. 한 줄에 하나의 production 만 허용.
"""

from __future__ import annotations
import regex as re
from typing import Dict, Optional

from .ast import AttributeDecl
from .parser import ScanOptions, _snippet_caret_at_pos

_LINE_RE = re.compile(
    r"""^[ \t]*\(\*[ \t]*
        (?P<name>[A-Za-z_][A-Za-z0-9_]*)[ \t]*:
        (?P<own>[^:*]*)
        (?::(?P<explicit>[^:*]*))?
        \*\)[ \t]*$""",
    re.X,
)
_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def _marker_re(text: str):
    return re.compile(r"^[ \t]*\(\*[ \t]*" + re.escape(text) + r"[ \t]*\*\)[ \t]*$", re.M)


def _names(text: str, src: str, pos: int, line_no: int):
    parts = text.split()
    for p in parts:
        if not _NAME_RE.fullmatch(p):
            snippet = _snippet_caret_at_pos(src, pos)
            raise SyntaxError(f"Bad attribute name {p!r} at line {line_no}\n{snippet}")
    return parts


def scan_attribute_block(
    src: str,
    options: Optional[ScanOptions] = None,
    required: bool = True,
) -> Dict[str, AttributeDecl]:
    """
    src 전체에서 속성 블록을 찾아 production 이름 → AttributeDecl 로 돌려준다.
    - 시작 표식이 없으면: required 면 SyntaxError, 아니면 빈 dict
    - 시작 뒤에 끝 표식이 없으면 SyntaxError
    - 형식이 틀린 줄, 같은 이름이 두 번 나오면 SyntaxError
    """
    opts = options or ScanOptions()
    start_m = _marker_re(opts.attr_start).search(src)
    if start_m is None:
        if required:
            raise SyntaxError(f"Attribute block start marker '(* {opts.attr_start} *)' not found")
        return {}
    end_m = _marker_re(opts.attr_end).search(src, start_m.end())
    if end_m is None:
        raise SyntaxError(f"Attribute block end marker '(* {opts.attr_end} *)' not found")

    decls: Dict[str, AttributeDecl] = {}
    pos = start_m.end()
    first_line = src.count("\n", 0, pos) + 1
    # 조각 0 은 시작 표식 줄의 나머지(빈 문자열)
    for k, raw in enumerate(src[pos:end_m.start()].split("\n")):
        line_start = pos
        line_no = first_line + k
        pos += len(raw) + 1
        if raw.strip() == "":
            continue
        m = _LINE_RE.match(raw)
        if not m:
            snippet = _snippet_caret_at_pos(src, line_start)
            raise SyntaxError(f"Malformed attribute line {line_no}: expected '(* name : attrs *)'\n{snippet}")
        name = m.group("name")
        if name in decls:
            snippet = _snippet_caret_at_pos(src, line_start)
            raise SyntaxError(f"Duplicate attribute line for '{name}' at line {line_no}\n{snippet}")
        own = _names(m.group("own"), src, line_start, line_no)
        explicit = None
        if m.group("explicit") is not None:
            explicit = _names(m.group("explicit"), src, line_start, line_no)
        decls[name] = AttributeDecl(name=name, own=own, explicit=explicit, line=line_no)
    return decls
