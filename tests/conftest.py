# tests/conftest.py
import sys, os
# Add project root to sys.path so `microasm` is importable without installing
ROOT = os.path.dirname(os.path.dirname(__file__))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import pytest

import microasm


@pytest.fixture
def layout():
    return microasm.FieldLayout({"OP_": [0, 2], "PROCEDURE_": [3, 6]})


@pytest.fixture
def symbols():
    return microasm.SymbolTable({"OP_ADD": 5, "OP_SUB": 3, "OP_NOP": 0})


@pytest.fixture
def asm(layout, symbols):
    return microasm.Assembler(layout, symbols)
