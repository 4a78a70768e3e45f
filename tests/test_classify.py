import pytest  # type: ignore

from sebnf.grammar.ast import Grammar, ListKind, OptionalRole, SupertypeKind
from sebnf.grammar.parser import parse_grammar
from sebnf.resolve import (
    MalformedList,
    MalformedOptional,
    MalformedSupertype,
    ResolveOptions,
    UndefinedReference,
)
from sebnf.resolve.classify import classify_productions, is_paren_list, list_item
from sebnf.resolve.link import link_references


def classified(src: str, options=None) -> Grammar:
    g = parse_grammar(src)
    link_references(g)
    classify_productions(g, options)
    return g


class TestLinkReferences:
    def test_all_references_resolved(self) -> None:
        g = parse_grammar("a = b, c, b ;\nb = B ;\nc = ',' ;")
        assert link_references(g) == 2
        assert all(s.resolved == 1 for s in g.find("a").alternatives[0].symbols if hasattr(s, "resolved"))

    def test_undefined_reference(self) -> None:
        g = parse_grammar("a = A, missing ;")
        with pytest.raises(UndefinedReference) as exc_info:
            link_references(g)
        assert exc_info.value.production == "a"
        assert exc_info.value.name == "missing"
        assert "UndefinedReference in 'a'" in str(exc_info.value)


class TestLists:
    @pytest.mark.parametrize(
        "rule, kind",
        [
            ("xs = x | xs, x ;", ListKind.UNSEPARATED),
            ("xs = x | x, xs ;", ListKind.UNSEPARATED),
            ("xs = x | xs, c, x ;", ListKind.COMMA_SEPARATED),
            ("xs = x | x, c, xs ;", ListKind.COMMA_SEPARATED),
        ],
    )
    def test_list_shapes(self, rule: str, kind: ListKind) -> None:
        g = classified(f"{rule}\nx = X ;")
        xs = g.find("xs")
        assert xs.list_kind is kind
        assert xs.is_list
        assert not xs.is_supertype
        assert list_item(xs).name == "x"

    def test_terminal_item(self) -> None:
        g = classified("ss = CHARSTRING | ss, c, CHARSTRING ;")
        assert g.find("ss").list_kind is ListKind.COMMA_SEPARATED

    def test_other_separator_is_not_a_list(self) -> None:
        with pytest.raises(MalformedList):
            classified("xs = x | xs, ';', x ;\nx = X ;")


class TestSupertypes:
    def test_pure_supertype(self) -> None:
        g = classified("shape = circle | square ;\ncircle = CIRCLE ;\nsquare = SQUARE ;")
        shape = g.find("shape")
        assert shape.supertype_kind is SupertypeKind.PURE
        assert g.find("circle").immediate_supertypes == [g.id_of("shape")]
        assert g.find("square").immediate_supertypes == [g.id_of("shape")]

    def test_two_supertypes(self) -> None:
        g = classified("e = d | x ;\nf = d | y ;\nd = D ;\nx = X ;\ny = Y ;")
        assert g.find("d").immediate_supertypes == [g.id_of("e"), g.id_of("f")]

    def test_instance_root_is_not_registered(self) -> None:
        g = classified("instance = a | b ;\na = A ;\nb = B ;")
        assert g.find("instance").is_supertype
        assert g.find("a").immediate_supertypes == []

    def test_single_list_reference_is_plain(self) -> None:
        g = classified("points = pointList ;\npointList = point | pointList, c, point ;\npoint = POINT ;")
        points = g.find("points")
        assert not points.is_supertype
        assert g.find("pointList").is_list
        assert g.find("pointList").immediate_supertypes == []

    def test_list_beside_other_reference_is_not_a_supertype(self) -> None:
        with pytest.raises(MalformedList):
            classified("s = xs | x ;\nxs = x | xs, x ;\nx = X ;")

    def test_root_must_have_supertype_shape(self) -> None:
        with pytest.raises(MalformedSupertype):
            classified("instance = A, B ;")

    def test_custom_root_name(self) -> None:
        opts = ResolveOptions(instance_root="entity")
        with pytest.raises(MalformedSupertype, match="'entity'"):
            classified("entity = A, B ;", opts)

    def test_many_mixed_alternatives_rejected(self) -> None:
        with pytest.raises(MalformedSupertype, match="3 alternatives"):
            classified("s = A | B | C ;")


class TestOptionals:
    def test_wrapper_pairing(self) -> None:
        g = classified("opt = thing | '$' ;\nthing = THING ;")
        opt, thing = g.find("opt"), g.find("thing")
        assert opt.is_wrapper
        assert opt.paired == g.id_of("thing")
        assert thing.optionality is OptionalRole.IS_WRAPPED
        assert thing.paired == g.id_of("opt")

    def test_custom_absent_marker(self) -> None:
        g = classified("opt = thing | '*' ;\nthing = THING ;", ResolveOptions(absent_marker="*"))
        assert g.find("opt").is_wrapper

    @pytest.mark.parametrize("field", ["absent_marker", "comma"])
    def test_markers_are_one_character(self, field: str) -> None:
        with pytest.raises(ValueError, match=f"ResolveOptions.{field} must be one character"):
            ResolveOptions(**{field: "$$"})

    def test_present_side_must_be_one_reference(self) -> None:
        with pytest.raises(MalformedOptional):
            classified("opt = A, B | '$' ;")

    def test_self_wrap_rejected(self) -> None:
        with pytest.raises(MalformedOptional, match="wrap itself"):
            classified("opt = opt | '$' ;")

    def test_child_wrapped_twice_rejected(self) -> None:
        with pytest.raises(MalformedOptional, match="already wrapped"):
            classified("o1 = thing | '$' ;\no2 = thing | '$' ;\nthing = THING ;")

    def test_wrapper_of_wrapper_rejected(self) -> None:
        with pytest.raises(MalformedOptional):
            classified("o1 = o2 | '$' ;\no2 = thing | '$' ;\nthing = THING ;")


class TestShapes:
    def test_paren_list_accepted(self) -> None:
        g = classified("p = '(', xs, ')' | '(', ')' ;\nxs = x | xs, c, x ;\nx = X ;")
        p = g.find("p")
        assert is_paren_list(g, p)
        assert not p.is_list and not p.is_supertype and not p.is_wrapper

    def test_two_unrelated_alternatives(self) -> None:
        with pytest.raises(MalformedList):
            classified("p = x | y, z ;\nx = X ;\ny = Y ;\nz = Z ;")

    def test_lexical_productions_are_skipped(self) -> None:
        g = classified("f = END ;\nEND = 'E', 'N', 'D' ;")
        end = g.find("END")
        assert not end.is_list and not end.is_supertype and not end.is_wrapper
