import json

import pytest  # type: ignore

from sebnf.grammar.annotations import scan_attribute_block
from sebnf.grammar.parser import parse_grammar
from sebnf.resolve import (
    MalformedOptional,
    ResolveOptions,
    SupertypeCycle,
    resolve_grammar,
    snapshot_grammar,
    validate_model,
)


class TestResolveGrammar:
    def test_every_production_is_ordered(self, shapes_model) -> None:
        assert len(shapes_model.order) == len(shapes_model.productions)
        assert len(set(shapes_model.order)) == len(shapes_model.order)

    def test_registries(self, shapes_model) -> None:
        assert shapes_model.terminals == ["CHARSTRING", "INTSTRING", "REALSTRING"]
        assert list(shapes_model.tokens) == ["C", "CARTESIAN_POINT", "CIRCLE", "ENDSEC", "HEADER", "LINE"]

    def test_unknown_production(self, shapes_model) -> None:
        with pytest.raises(KeyError):
            shapes_model.production("nothing")

    def test_same_input_same_model(self, shapes_src, resolve) -> None:
        first = resolve(shapes_src).snapshot()
        second = resolve(shapes_src).snapshot()
        assert first == second

    def test_snapshot_is_json_ready(self, shapes_model) -> None:
        snap = json.loads(json.dumps(shapes_model.snapshot()))
        circle = snap["productions"]["circle"]
        assert circle["is_instance"] is True
        assert circle["ancestors"] == ["shape"]
        assert circle["own_symbols"] == ["cartesianPoint", "REALSTRING"]
        assert snap["productions"]["optLabel"]["optionality"] == "wraps_other"
        assert snap["start"] == "file"

    def test_trace_lines(self, shapes_src) -> None:
        lines = []
        g = parse_grammar(shapes_src)
        resolve_grammar(g, scan_attribute_block(shapes_src), trace=lines.append)
        assert lines[0].startswith("[DEBUG] Linked")
        assert lines[-1].startswith("[DEBUG] Scheduled")

    def test_options_are_kept(self, resolve) -> None:
        opts = ResolveOptions(instance_root="entity")
        model = resolve("entity = a ;\na = A ;", required=False, options=opts)
        assert model.options.instance_root == "entity"
        assert model.production("a").is_instance

    def test_no_annotations(self) -> None:
        g = parse_grammar("a = A ;")
        model = resolve_grammar(g)
        assert model.production("a").attribute_names == []


class TestValidateModel:
    def test_resolved_model_is_valid(self, shapes_model) -> None:
        validate_model(shapes_model.grammar)

    def test_unscheduled_production(self, shapes_model) -> None:
        shapes_model.production("label").scheduled = False
        with pytest.raises(SupertypeCycle, match="'label'"):
            validate_model(shapes_model.grammar)

    def test_wrapper_without_carrier(self, shapes_model) -> None:
        shapes_model.production("optLabel").carrier_name = None
        with pytest.raises(MalformedOptional, match="'optLabel'"):
            validate_model(shapes_model.grammar)

    def test_snapshot_of_unresolved_grammar(self) -> None:
        g = parse_grammar("a = b ;\nb = B ;")
        snap = snapshot_grammar(g)
        assert snap["order"] == []
        assert snap["productions"]["a"]["list_kind"] == "none"
