# tests/test_line_builder.py
import io

import pytest

import microasm
from microasm import Token


def test_entry_protocol_commits_on_newline(asm):
    asm.entry(True, "label_MICROPC_START")
    asm.entry(False, "OP_ADD")
    asm.entry(False, "offset_next")
    asm.entry(True, "label_next")
    asm.entry(False, "OP_SUB")
    image = asm.finalize()
    assert len(asm.lines) == 2
    assert asm.labels == {"MICROPC_START": 0, "next": 1}
    assert asm.lines[0].values == {"OP_": Token.symbol("OP_ADD"), "PROCEDURE_": Token.literal(1)}
    assert asm.lines[1].values == {"OP_": Token.symbol("OP_SUB")}
    assert len(image) == 2


def test_empty_flush_is_noop(asm):
    asm.end_line()
    asm.assign("OP_ADD")
    asm.end_line()
    asm.end_line()
    asm.entry(True, "label_X")
    assert len(asm.lines) == 1
    assert asm.labels["X"] == 1


def test_label_points_at_pending_line(asm):
    asm.assign("OP_ADD")
    asm.end_line()
    asm.declare_label("here")
    asm.assign("OP_SUB")
    assert asm.labels["here"] == 1


def test_duplicate_field_on_one_line(asm):
    asm.assign("OP_ADD")
    with pytest.raises(microasm.DuplicateFieldError) as exc:
        asm.assign("OP_SUB")
    assert exc.value.name == "OP_"
    assert exc.value.line_index == 0


def test_same_field_after_flush(asm):
    asm.assign("OP_ADD")
    asm.end_line()
    asm.assign("OP_SUB")
    asm.end_line()
    assert [l.values["OP_"] for l in asm.lines] == [Token.symbol("OP_ADD"), Token.symbol("OP_SUB")]


def test_literal_and_symbol_collide(asm):
    asm.assign_value("OP_", 1)
    with pytest.raises(microasm.DuplicateFieldError):
        asm.entry(False, "OP_ADD")


def test_two_branches_on_one_line(asm):
    asm.reference_label("a")
    with pytest.raises(microasm.DuplicateFieldError):
        asm.entry(False, "offset_b")


def test_duplicate_label(asm):
    asm.declare_label("L")
    asm.assign("OP_ADD")
    asm.end_line()
    with pytest.raises(microasm.DuplicateLabelError) as exc:
        asm.entry(True, "label_L")
    assert exc.value.name == "L"
    assert "first at line 0" in str(exc.value)


def test_unknown_prefix(asm):
    with pytest.raises(microasm.UnknownPrefixError) as exc:
        asm.assign("ALU_ADD")
    assert exc.value.name == "ALU_ADD"
    with pytest.raises(microasm.UnknownPrefixError):
        asm.assign_value("ALU_", 3)


def test_branch_without_branch_field(symbols):
    asm = microasm.Assembler(microasm.FieldLayout({"OP_": (0, 2)}), symbols)
    with pytest.raises(microasm.UnknownPrefixError):
        asm.entry(False, "offset_L")


def test_longest_prefix_wins():
    layout = microasm.FieldLayout({"LOAD_": (0, 0), "LOAD_EA_": (1, 2)})
    asm = microasm.Assembler(layout)
    asm.assign("LOAD_EA_SRC")
    asm.assign("LOAD_YES")
    assert set(asm.current_line.values) == {"LOAD_", "LOAD_EA_"}
    assert asm.current_line.values["LOAD_EA_"] == Token.symbol("LOAD_EA_SRC")


def test_not_initialized():
    asm = microasm.Assembler()
    with pytest.raises(microasm.NotInitializedError):
        asm.entry(True, "OP_ADD")
    with pytest.raises(microasm.NotInitializedError):
        asm.declare_label("L")
    with pytest.raises(microasm.NotInitializedError):
        asm.finalize()
    with pytest.raises(microasm.NotInitializedError):
        microasm.emit_defines(asm, io.StringIO())


def test_empty_label_name(asm):
    with pytest.raises(microasm.AsmError):
        asm.entry(False, "label_")


def test_builder_closed_after_finalize(asm):
    asm.assign("OP_ADD")
    asm.finalize()
    with pytest.raises(microasm.AsmError):
        asm.assign("OP_SUB")
    with pytest.raises(microasm.AsmError):
        asm.declare_label("MICROPC_LATE")
    with pytest.raises(microasm.AsmError):
        asm.entry(False, "label_X")
    with pytest.raises(microasm.AsmError):
        asm.end_line()
    with pytest.raises(microasm.AsmError):
        asm.finalize()
    assert asm.labels == {}
    out = io.StringIO()
    microasm.emit_defines(asm, out)
    assert "MICROPC_LATE" not in out.getvalue()


def test_immediate_must_be_int(asm):
    with pytest.raises(microasm.ParseError) as exc:
        asm.assign_value("OP_", "5")
    assert exc.value.name == "OP_"
    assert asm.current_line.values == {}


@pytest.mark.parametrize("name", ["label_MICROPC_é", "offset_dön"])
def test_non_ascii_labels(asm, name):
    with pytest.raises(microasm.ParseError):
        asm.entry(False, name)
    assert asm.labels == {}


def test_non_ascii_prefix():
    with pytest.raises(microasm.ParseError):
        microasm.FieldLayout({"ÖP_": (0, 2)})


def test_failed_pack_closes_builder(asm):
    asm.assign("OP_MISSING")
    with pytest.raises(microasm.UnknownSymbolError):
        asm.finalize()
    assert asm.resolved
    with pytest.raises(microasm.AsmError):
        asm.finalize()
