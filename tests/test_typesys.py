import pytest

from mosslang.typesys import ProtoType, Type, TypeBinding, TypeKind


@pytest.mark.parametrize(
    "ty, text",
    [
        (Type.ANY, "Any"),
        (Type.BOOL, "Bool"),
        (Type.INT, "Int"),
        (Type.FLOAT, "Float"),
        (Type.STR, "String"),
        (Type.UNKNOWN, "Unknown"),
        (Type.VOID, "Void"),
    ],
)
def test_atomic_display(ty, text):
    assert str(ty) == text


def test_list_display():
    assert str(Type.list_of(Type.INT)) == "List<Int>"


def test_func_display():
    assert str(Type.func(Type.INT, Type.BOOL)) == "Func<Int, Bool>"


def test_applied_display():
    applied = Type.applied(Type.user_defined("Map"), Type.STR, Type.INT)
    assert str(applied) == "Map<String, Int>"


def test_user_defined_displays_its_name():
    assert str(Type.user_defined("Point")) == "Point"


def test_structural_equality():
    assert Type.list_of(Type.INT) == Type.list_of(Type.INT)
    assert Type.list_of(Type.INT) != Type.list_of(Type.FLOAT)
    assert Type.func(Type.INT, Type.INT) == Type(TypeKind.FUNC, (Type.INT, Type.INT))


def test_types_are_hashable():
    types = {Type.INT, Type.INT, Type.list_of(Type.STR), Type.list_of(Type.STR)}
    assert len(types) == 2


def test_func_parts():
    ty = Type.func(Type.INT, Type.STR, Type.BOOL)
    assert ty.param_types == (Type.INT, Type.STR)
    assert ty.return_type == Type.BOOL


def test_list_element():
    assert Type.list_of(Type.STR).element == Type.STR


def test_element_of_non_list_raises():
    point = Type.user_defined("Point")
    assert str(point) == "Point"
    with pytest.raises(ValueError):
        Type.user_defined("Point").element


def test_return_type_of_non_func_raises():
    with pytest.raises(ValueError):
        Type.list_of(Type.INT).return_type


def test_prototype_atomic_and_applied():
    atomic = ProtoType.atomic("Int")
    applied = ProtoType.applied("List", ProtoType.atomic("Int"))
    assert atomic.is_applied is False
    assert applied.is_applied is True
    assert applied.args == (atomic,)
    assert ProtoType.applied("List") == ProtoType("List", ())


def test_type_binding_kinds():
    atomic = TypeBinding.atomic(Type.INT)
    applied = TypeBinding.applied(2)
    assert atomic.ty == Type.INT
    assert atomic.is_applied is False
    assert applied.arity == 2
    assert applied.is_applied is True