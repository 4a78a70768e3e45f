# sebnf/codegen/emit_lex.py
"""Lex Emit (BASE.lex 한 개를 문자열로 생성).

- 키워드 규칙은 토큰 레지스트리(철자 정리 후)에서 만든다. 대문자는 {X} 글자 클래스로
  바꿔 대소문자를 가리지 않게 하고, 나머지 글자는 "c" 그대로 둔다.
  예) ENDSEC → {_}{E}{N}{D}{S}{E}{C}{_}                {ECH; return ENDSEC;}
- 토큰 C 는 YACC 에서 쉼표를 뜻하므로 키워드 규칙을 만들지 않는다.
- 구두점/숫자/문자열/주석 규칙은 Part 21 고정 규칙이다.
"""

from __future__ import annotations
from typing import List

from .ir import ModelIR

_RULE_WIDTH = 40

_MIDDLE = r"""
#define ECH  for (k=0; ((k < yyleng) && (lineTextIndex < 4095));)\
    lineText[lineTextIndex++] = yytext[k++];\
    lineText[lineTextIndex] = 0

extern char lineText[];
extern char lexMessage[];
int lineTextIndex;
char stringText[4096];
int j;      // index for stringText
double num; // number to parse reals into
int k;      // utility index, used in ECH compiler macro

%}

{letters}
_ [ \t\n\r]*

%x COMMENT
%x INSTRING
%x INID

%%

"""

_END = r"""{_}"/*"                                 {ECH; BEGIN(COMMENT);}
<COMMENT>.                              {ECH;}
<COMMENT>\n                             {ECH;}
<COMMENT>"*/"{_}                        {ECH; BEGIN(INITIAL);}
{_}'                                    {ECH; j=0; BEGIN INSTRING;}
<INSTRING>('')                          {ECH; stringText[j++] = '\'';}
<INSTRING>'{_}                          {ECH; BEGIN INITIAL;
                                         stringText[j] = 0;
                                         yylval.sval = strdup(stringText);
                                         return CHARSTRING;}
<INSTRING>[ -&(-~\t]                    {ECH; stringText[j++]=yytext[0];}
<INSTRING>\n                            {ECH;
                                         sprintf(lexMessage,
                                                 "newline in string");
                                         BEGIN INITIAL;
                                         return BAD;}
<INSTRING>.                             {ECH;
                                         sprintf(lexMessage,
                                              "bad character in string");
                                         BEGIN INITIAL;
                                         return BAD;}
<INID>[0-9]+{_}                         {ECH;
                                         sscanf(yytext, "%d", &k);
                                         yylval.ival = k;
                                         BEGIN INITIAL;
                                         return INTSTRING;}
<INID>.                                 {ECH;
                                         sprintf(lexMessage,
                                              "bad character in id");
                                         BEGIN INITIAL;
                                         return BAD;}
{_}"$"{_}                               {ECH; return DOLLAR;}
{_}","{_}                               {ECH; return C;}
{_}":"{_}                               {ECH; return COLON;}
{_}"="{_}                               {ECH; return EQUALS;}
{_}"["{_}                               {ECH; return LBOX;}
{_}"("{_}                               {ECH; return LPAREN;}
{_}"]"{_}                               {ECH; return RBOX;}
{_}")"{_}                               {ECH; return RPAREN;}
{_}";"{_}                               {ECH;
                                           lineTextIndex = 0;
                                           return SEMICOLON;}
{_}"#"                                  {ECH; BEGIN INID; return SHARP;}
{_}"/"{_}                               {ECH; return SLASH;}
{_}[0-9]+{_}                            {ECH;
                                         sscanf(yytext, "%d", &k);
                                         yylval.ival = k;
                                         return INTSTRING;}
{_}(-?|"+")(([0-9]+"."[0-9]+)|("."[0-9]+)){_} {ECH;
                                         sscanf(yytext, "%lf", &num);
                                         yylval.rval = num;
                                         return REALSTRING;}
{_}(-?|"+")([0-9]+".")/[^a-zA-Z]{_}     {ECH;
                                         sscanf(yytext, "%lf", &num);
                                         yylval.rval = num;
                                         return REALSTRING;}
.                                 {ECH;
                                   sprintf(lexMessage, "bad character");
                                   BEGIN INITIAL;
                                   return BAD;}

%%

int yywrap()
{
  return 1;
}
"""


def _preflight_check(ir: ModelIR) -> None:
    for name, spelling in ir.tokens.items():
        if not spelling:
            raise ValueError(f"emit_lex: token {name} has an empty spelling")


def _lex_pattern(spelling: str) -> str:
    return "".join(f"{{{ch}}}" if "A" <= ch <= "Z" else f'"{ch}"' for ch in spelling)


def _fmt_token_rule(name: str, spelling: str) -> str:
    rule = f"{{_}}{_lex_pattern(spelling)}{{_}} "
    return rule.ljust(_RULE_WIDTH) + f"{{ECH; return {name};}}"


def _fmt_letters() -> str:
    return "".join(f"{c} [{c.lower()}{c}]\n" for c in "ABCDEFGHIJKLMNOPQRSTUVWXYZ")


def emit_lex_to_string(ir: ModelIR, comma_token: str = "C") -> str:
    _preflight_check(ir)
    start = (
        "%{\n"
        "\n"
        f"/* {ir.base_name}.lex : generated by sebnfc. Do not edit. */\n"
        "\n"
        "#include <string.h>          // for strdup, etc.\n"
        "#include <ctype.h>           // for isalpha\n"
        f'#include "{ir.base_name}classes.hh"\n'
        f'#include "{ir.base_name}YACC.hh"\n'
    )
    rules: List[str] = [
        _fmt_token_rule(name, spelling)
        for name, spelling in ir.tokens.items()
        if name != comma_token
    ]
    body = "\n".join(rules) + "\n" if rules else ""
    return start + _MIDDLE.replace("{letters}", _fmt_letters()) + body + _END
