import pytest

from classtrace.errors import ContractViolation, FrozenBufferError
from classtrace.fragments import FragmentBuffer


def test_flatten_keeps_append_order():
    buffer = FragmentBuffer("class")
    buffer.append("a")
    buffer.append("b")
    buffer.append("")
    buffer.append("c")

    assert buffer.flatten() == "abc"
    assert len(buffer) == 3


def test_placeholder_resolves_content_appended_later():
    parent = FragmentBuffer("class")
    child = FragmentBuffer("method")

    parent.append("header\n")
    parent.append_buffer(child)
    parent.append("}\n")
    child.append("  body\n")

    assert parent.flatten() == "header\n  body\n}\n"


def test_sibling_placeholders_stay_in_declaration_order():
    parent = FragmentBuffer("class")
    first = FragmentBuffer("first")
    second = FragmentBuffer("second")
    parent.append_buffer(first)
    parent.append_buffer(second)

    second.append("2")
    first.append("1")

    assert parent.flatten() == "12"


def test_frozen_buffer_rejects_appends():
    buffer = FragmentBuffer("field")
    buffer.append("x")
    buffer.freeze()

    assert buffer.frozen
    with pytest.raises(FrozenBufferError, match="frozen"):
        buffer.append("y")
    with pytest.raises(FrozenBufferError):
        buffer.append_buffer(FragmentBuffer())
    assert buffer.flatten() == "x"


def test_buffer_cannot_contain_itself():
    outer = FragmentBuffer("outer")
    inner = FragmentBuffer("inner")
    outer.append_buffer(inner)

    with pytest.raises(ContractViolation, match="contain itself"):
        inner.append_buffer(outer)
    with pytest.raises(ContractViolation):
        outer.append_buffer(outer)


def test_iter_leaves_descends_into_children():
    parent = FragmentBuffer()
    child = FragmentBuffer()
    parent.append("<")
    parent.append_buffer(child)
    parent.append(">")
    child.append("nested")

    assert list(parent.iter_leaves()) == ["<", "nested", ">"]
    assert parent.flatten() == "<nested>"
