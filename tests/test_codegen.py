import pytest  # type: ignore

from sebnf.codegen.emit_cc import emit_cc_to_string
from sebnf.codegen.emit_cpp import emit_cpp_to_string
from sebnf.codegen.emit_lex import emit_lex_to_string
from sebnf.codegen.emit_yacc import emit_yacc_to_string
from sebnf.codegen.ir import build_model_ir


@pytest.fixture
def ir(shapes_model):
    return build_model_ir(shapes_model, "shapes")


class TestModelIR:
    def test_class_selection(self, ir) -> None:
        assert [p.lhs for p in ir.classes] == [
            "file", "instanceId", "instance", "shape", "cartesianPoint", "circle", "line", "label",
        ]

    def test_rule_selection(self, ir) -> None:
        rules = [p.lhs for p in ir.rules]
        assert "shape" not in rules
        assert "optLabel" in rules
        assert "file" not in rules

    def test_union_selection(self, ir) -> None:
        assert [p.lhs for p in ir.union_types] == [
            "file", "instanceList", "instanceId", "instance", "cartesianPoint", "circle", "line", "label",
        ]

    def test_type_names(self, ir) -> None:
        file_sym = ir.model.production("file").own_symbols[0]
        assert ir.type_name(file_sym) == "instance"
        assert ir.cpp_type(file_sym) == "std::list<instance *> *"
        shape_sym = ir.model.production("shape").own_symbols[0]
        assert ir.cpp_type(shape_sym) == "label *"
        x_sym = ir.model.production("cartesianPoint").own_symbols[0]
        assert ir.cpp_type(x_sym) == "double"
        val_sym = ir.model.production("instanceId").own_symbols[0]
        assert ir.cpp_type(val_sym) == "int"


class TestEmitCpp:
    def test_names_and_enum(self, ir) -> None:
        out = emit_cpp_to_string(ir)
        assert "class cartesianPoint;" in out
        assert "enum shapesClassEName {" in out
        assert "  shapesCppBase_E};" in out

    def test_instance_class(self, ir) -> None:
        out = emit_cpp_to_string(ir)
        assert "class instance :\n  public shapesCppBase\n" in out
        assert "  instanceId * get_id(){return id;}" in out

    def test_parent_class(self, ir) -> None:
        out = emit_cpp_to_string(ir)
        assert "class shape :\n  public shapesCppBase\n{\n  friend int yyparse();\n" in out
        assert "  shape(\n    label * nameIn)\n    {\n      name = nameIn;\n    }\n" in out
        assert "  void printSelf() = 0;" in out

    def test_leaf_class_with_inherited_attributes(self, ir) -> None:
        out = emit_cpp_to_string(ir)
        assert "class circle :\n  public instance,\n  public shape\n{" in out
        assert (
            "  circle(\n"
            "    label * nameIn,\n"
            "    cartesianPoint * centerIn,\n"
            "    double radiusIn) :\n"
            "      shape(\n"
            "        nameIn)\n"
            "    {\n"
            "      center = centerIn;\n"
            "      radius = radiusIn;\n"
            "    }\n"
        ) in out
        assert "    { return ((aType == circle_E) ||\n\t      (aType == shape_E));\n    }" in out

    def test_accessors_and_members(self, ir) -> None:
        out = emit_cpp_to_string(ir)
        assert "  double get_x()\n    {return x;}\n  void set_x(double xIn)\n    {x = xIn;}" in out
        assert "private:\n  double x;\n  double y;\n};" in out

    def test_supertypes_printed_before_subtypes(self, ir) -> None:
        out = emit_cpp_to_string(ir)
        assert out.index("class shape :") < out.index("class circle :")
        assert out.index("class instance :") < out.index("class cartesianPoint :")


class TestEmitYacc:
    def test_tokens(self, ir) -> None:
        out = emit_yacc_to_string(ir)
        assert "%token CIRCLE\n" in out
        assert "%token <ival> INTSTRING\n" in out
        assert "%token <rval> REALSTRING\n" in out
        assert "%token <sval> CHARSTRING\n" in out
        assert "%start file\n" in out

    def test_union_and_types(self, ir) -> None:
        out = emit_yacc_to_string(ir)
        assert "  std::list<instance *>            * val2;" in out
        assert "%type <val4> instance\n%type <val4> instancePlus\n" in out
        assert "%type <val8> label\n%type <val8> optLabel\n" in out

    def test_first_production(self, ir) -> None:
        out = emit_yacc_to_string(ir)
        assert "file :\n\t  HEADER SEMICOLON instanceList ENDSEC SEMICOLON\n" in out
        assert "\t    { $$ = new file($3);\n\t      tree = $$; }\n" in out

    def test_plain_production_records_references(self, ir) -> None:
        out = emit_yacc_to_string(ir)
        assert "circle :\n\t  CIRCLE LPAREN optLabel C instanceId C REALSTRING RPAREN\n" in out
        assert "\t    { $$ = new circle($3, 0, $7);\n" in out
        assert "\t      cartesianPoint_refs.push_back(&($$->center));\n" in out
        assert "\t      cartesianPoint_nums.push_back($5->get_val());\n" in out

    def test_list_and_recovery(self, ir) -> None:
        out = emit_yacc_to_string(ir)
        assert "\t| instanceList instancePlus\n\t    { $$ = $1;\n\t      $$->push_back($2); }\n" in out
        assert "instancePlus :\n\t  instanceId EQUALS instance SEMICOLON\n" in out
        assert "\t| error SEMICOLON\n" in out

    def test_supertype_and_wrapper(self, ir) -> None:
        out = emit_yacc_to_string(ir)
        assert "instance :\n\t  cartesianPoint\n\t    { $$ = $1; }\n\t| circle\n" in out
        assert "optLabel :\n\t  label\n\t    { $$ = $1; }\n\t| DOLLAR\n\t    { $$ = 0; }\n\t;\n" in out

    def test_linkers(self, ir) -> None:
        out = emit_yacc_to_string(ir)
        assert "#define WRITE_LINKER(TYP)" in out
        assert "std::vector<TYP **> TYP ## _refs;" in out
        assert "else if (instances[*numIter]->isA(TYP ## _E))" in out
        assert "WRITE_LINKER(cartesianPoint)\n" in out
        assert "WRITE_LINKER(shape)\n" in out
        assert "WRITE_LINKER(label)" not in out
        assert "instance * instances[INSTANCEMAX] = {0};" in out
        assert "char lineText[4096];\nchar lexMessage[80];\n" in out

    def test_link_all_and_parse_functions(self, ir) -> None:
        out = emit_yacc_to_string(ir)
        epilogue = out.split("%%\n")[-1]
        assert epilogue.startswith("\nvoid linkAll()\n{\n")
        assert "  link_cartesianPoint();\n" in epilogue
        assert "  link_circle();\n" in epilogue
        assert epilogue.index("void linkAll()") < epilogue.index("int yyerror(const char * s)")
        assert "      fprintf(report, \"%s\\n\", lexMessage);\n" in epilogue
        assert "int parseOneFile(\n const char * part21Name,\n char * reportName,\n bool quiet)\n" in epilogue
        assert "  if (numErrors == 0)\n    linkAll();\n" in epilogue
        assert "int parseManyFiles(\n" in epilogue
        assert "main(" not in epilogue

    def test_optional_instance_carrier(self, resolve) -> None:
        model = resolve(
            "file = FILE, holder ;\n"
            "holder = HOLDER, '(', opt, ')' ;\n"
            "instance = thing ;\n"
            "opt = thing | '$' ;\n"
            "thing = THING, '(', INTSTRING, ')' ;\n"
            "(* Start attributes *)\n(* holder : item *)\n(* thing : n *)\n(* End attributes *)\n"
        )
        out = emit_yacc_to_string(build_model_ir(model, "t"))
        assert "opt :\n\t  instanceId\n\t    { $$ = new thing(0);\n\t      $$->set_id($1);\n" in out
        assert "\t\t  thing_refs.push_back(&($$->item));\n" in out
        assert "\t\t  delete $3->get_id();\n" in out

    def test_first_production_must_be_plain(self, resolve) -> None:
        model = resolve("xs = x | xs, x ;\nx = X ;", required=False)
        with pytest.raises(ValueError, match="emit_yacc: first production xs"):
            emit_yacc_to_string(build_model_ir(model, "t"))


class TestEmitCc:
    def test_header_and_print_helpers(self, ir) -> None:
        out = emit_cc_to_string(ir)
        assert out.startswith("/* shapesclasses.cc : generated by sebnfc. Do not edit. */\n")
        assert '#include "shapesclasses.hh"' in out
        assert "void printDouble(\n double num)\n" in out
        assert "        putchar('\\''); // apostrophe is doubled\n" in out

    def test_only_concrete_classes(self, ir) -> None:
        out = emit_cc_to_string(ir)
        for name in ("file", "instanceId", "cartesianPoint", "circle", "line", "label"):
            assert f"void {name}::printSelf()\n" in out
            assert f"{name}::~{name}()\n" in out
        assert "shape::printSelf" not in out
        assert "instance::printSelf" not in out

    def test_leaf_printer(self, ir) -> None:
        out = emit_cc_to_string(ir)
        assert (
            "void circle::printSelf()\n{\n"
            '  printf("CIRCLE");\n'
            '  printf("(");\n'
            "  if (get_name())\n"
            "    get_name()->printSelf();\n"
            "  else\n"
            '    printf("$");\n'
            '  printf(",");\n'
            "  center->get_id()->printSelf();\n"
            '  printf(",");\n'
            "  printDouble(radius);\n"
            '  printf(")");\n'
            "}\n"
        ) in out
        assert '  printf("#");\n  printf("%d", val);\n' in out
        assert "  printString(text);\n" in out

    def test_file_prints_each_instance(self, ir) -> None:
        out = emit_cc_to_string(ir)
        assert '  printf("HEADER");\n  printf(";\\n");\n  if (instances->begin() != instances->end())\n' in out
        assert (
            "          (*iter)->get_id()->printSelf();\n"
            '          printf("=");\n'
            "          (*iter)->printSelf();\n"
        ) in out

    def test_destructors(self, ir) -> None:
        out = emit_cc_to_string(ir)
        assert "circle::~circle()\n{\n  delete get_name();\n}\n" in out
        assert "cartesianPoint::~cartesianPoint()\n{\n}\n" in out
        assert "label::~label()\n{\n  delete text;\n}\n" in out
        assert "        delete *iter;\n      }\n  }\n  delete instances;\n}\n" in out

    def test_referenced_instances_are_not_deleted(self, resolve) -> None:
        model = resolve(
            "file = FILE, '(', things, ')' ;\n"
            "things = thing | things, c, thing ;\n"
            "instance = thing ;\n"
            "thing = THING, '(', INTSTRING, ')' ;\n"
            "(* Start attributes *)\n(* file : items *)\n(* thing : n *)\n(* End attributes *)\n"
        )
        out = emit_cc_to_string(build_model_ir(model, "t"))
        assert "          (*iter)->get_id()->printSelf();\n          if (++iter == items->end())\n" in out
        assert "file::~file()\n{\n  delete items;\n}\n" in out


class TestEmitLex:
    def test_keyword_rules(self, ir) -> None:
        out = emit_lex_to_string(ir)
        rule = "{_}{L}{I}{N}{E}{_} "
        assert rule.ljust(40) + "{ECH; return LINE;}" in out
        assert '{_}{C}{A}{R}{T}{E}{S}{I}{A}{N}"_"{P}{O}{I}{N}{T}{_} ' in out

    def test_comma_token_is_not_a_keyword(self, ir) -> None:
        out = emit_lex_to_string(ir)
        assert "return C;}" in out
        assert "{_}{C}{_}" not in out

    def test_fixed_sections(self, ir) -> None:
        out = emit_lex_to_string(ir)
        assert '#include "shapesclasses.hh"' in out
        assert "A [aA]\n" in out
        assert "%x INSTRING\n" in out
        assert out.rstrip().endswith("}")

    def test_revised_spelling(self, resolve) -> None:
        model = resolve("f = ISO ;\nISO = 'Ii', 'S', 'O', '-', '2' ;", required=False)
        out = emit_lex_to_string(build_model_ir(model, "t"))
        assert '{_}{I}{S}{O}"-""2"{_} ' in out
