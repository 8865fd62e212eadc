#  This file is part of evocase.
#
#  SPDX-FileCopyrightText: 2019–2025 evocase Contributors
#
#  SPDX-License-Identifier: MIT
#
from unittest.mock import MagicMock

import pytest

import evocase.assertion.assertion as ass
import evocase.testcase.defaulttestcase as dtc
import evocase.testcase.statement as stmt
import evocase.testcase.testcasevisitor as tcv
import evocase.testcase.variablereference as vr

from evocase.analyses.typesystem import ANY
from evocase.analyses.typesystem import Instance
from evocase.analyses.typesystem import TypeInfo
from evocase.utils.exceptions import ConstructionFailedException
from evocase.utils.exceptions import ForwardReferenceError
from evocase.utils.exceptions import StructuralInconsistencyError


def _int_type() -> Instance:
    return Instance(TypeInfo(int))


def test_accept(default_test_case):
    visitor = MagicMock(tcv.TestCaseVisitor)
    default_test_case.accept(visitor)
    visitor.visit_default_test_case.assert_called_once_with(default_test_case)


def test_add_statement_end(default_test_case):
    first = stmt.IntPrimitiveStatement(default_test_case, 1)
    second = stmt.IntPrimitiveStatement(default_test_case, 2)
    assert default_test_case.add_statement(first) is first.ret_val
    assert default_test_case.add_statement(second) is second.ret_val
    assert default_test_case.statements == [first, second]
    assert first.position == 0
    assert second.position == 1


def test_add_statement_middle_renumbers(calculator_test_case):
    calculator, int_0, add, triple = calculator_test_case.statements
    inserted = stmt.IntPrimitiveStatement(calculator_test_case, 42)
    calculator_test_case.add_statement(inserted, 1)
    assert calculator_test_case.size() == 5
    assert inserted.position == 1
    assert [calculator.position, int_0.position, add.position, triple.position] == [0, 2, 3, 4]
    assert calculator_test_case.is_valid()


def test_add_statement_out_of_range(default_test_case):
    with pytest.raises(IndexError):
        default_test_case.add_statement(stmt.IntPrimitiveStatement(default_test_case, 1), 3)


def test_add_statement_detached_operand(default_test_case, triple_function):
    detached = vr.VariableReference(default_test_case, _int_type())
    call = stmt.FunctionStatement(default_test_case, triple_function, {"number": detached})
    with pytest.raises(ForwardReferenceError):
        default_test_case.add_statement(call)
    assert default_test_case.size() == 0
    assert call.position == -1


def test_add_statement_before_dependency_rolls_back(calculator_test_case, triple_function):
    int_0 = calculator_test_case.get_statement(1)
    call = stmt.FunctionStatement(calculator_test_case, triple_function, {"number": int_0.ret_val})
    with pytest.raises(ForwardReferenceError):
        calculator_test_case.add_statement(call, 1)
    assert calculator_test_case.size() == 4
    assert call.position == -1
    assert [s.position for s in calculator_test_case.statements] == [0, 1, 2, 3]
    assert calculator_test_case.is_valid()


def test_add_statement_foreign_reference(default_test_case, triple_function):
    other = dtc.DefaultTestCase()
    foreign = other.add_statement(stmt.IntPrimitiveStatement(other, 3))
    default_test_case.add_statement(stmt.IntPrimitiveStatement(default_test_case, 3))
    call = stmt.FunctionStatement(default_test_case, triple_function, {"number": foreign})
    with pytest.raises(ForwardReferenceError):
        default_test_case.add_statement(call)
    assert default_test_case.size() == 1


def test_add_statements(default_test_case):
    statements = [stmt.IntPrimitiveStatement(default_test_case, i) for i in range(3)]
    default_test_case.add_statements(statements)
    assert default_test_case.statements == statements


def test_remove_used_value(calculator_test_case):
    with pytest.raises(StructuralInconsistencyError):
        calculator_test_case.remove(1)
    assert calculator_test_case.size() == 4


def test_remove_last(calculator_test_case):
    last = calculator_test_case.get_statement(3)
    calculator_test_case.remove(3)
    assert calculator_test_case.size() == 3
    assert last.position == -1
    assert not calculator_test_case.contains(last)


def test_remove_unused_renumbers(calculator_test_case):
    unused = stmt.StringPrimitiveStatement(calculator_test_case, "unused")
    calculator_test_case.add_statement(unused, 0)
    calculator_test_case.remove(0)
    assert unused.position == -1
    assert [s.position for s in calculator_test_case.statements] == [0, 1, 2, 3]
    assert calculator_test_case.is_valid()


def test_remove_out_of_range(calculator_test_case):
    calculator_test_case.remove(10)
    assert calculator_test_case.size() == 4


def test_remove_statement(calculator_test_case):
    last = calculator_test_case.get_statement(3)
    calculator_test_case.remove_statement(last)
    assert calculator_test_case.size() == 3


def test_remove_statement_unknown(calculator_test_case):
    with pytest.raises(ValueError, match="not found"):
        calculator_test_case.remove_statement(
            stmt.IntPrimitiveStatement(calculator_test_case, 5)
        )


def test_remove_with_forward_dependencies(calculator_test_case):
    assert calculator_test_case.remove_with_forward_dependencies(1) == [3, 2, 1]
    assert calculator_test_case.size() == 1
    assert calculator_test_case.is_valid()


def test_remove_with_forward_dependencies_out_of_bounds(calculator_test_case):
    with pytest.raises(ValueError, match="out of bounds"):
        calculator_test_case.remove_with_forward_dependencies(4)


def test_chop(calculator_test_case):
    popped = calculator_test_case.statements[2:]
    calculator_test_case.chop(1)
    assert calculator_test_case.size() == 2
    assert all(statement.position == -1 for statement in popped)
    assert calculator_test_case.is_valid()


def test_contains(calculator_test_case):
    assert calculator_test_case.contains(calculator_test_case.get_statement(0))
    other = dtc.DefaultTestCase()
    assert not calculator_test_case.contains(stmt.IntPrimitiveStatement(other, 5))


def test_has_statement(calculator_test_case):
    assert calculator_test_case.has_statement(3)
    assert not calculator_test_case.has_statement(4)
    assert not calculator_test_case.has_statement(-1)


def test_set_statement_rewires_later_uses(calculator_test_case):
    old = calculator_test_case.get_statement(1)
    replacement = stmt.IntPrimitiveStatement(calculator_test_case, 7)
    new_ret_val = calculator_test_case.set_statement(replacement, 1)
    assert new_ret_val is replacement.ret_val
    assert calculator_test_case.get_statement(1) is replacement
    assert calculator_test_case.get_statement(2).args["amount"] is replacement.ret_val
    assert old.position == -1
    assert calculator_test_case.is_valid()


def test_set_statement_forward_reference_rolls_back(calculator_test_case, triple_function):
    old = calculator_test_case.get_statement(1)
    later = calculator_test_case.get_statement(2).ret_val
    replacement = stmt.FunctionStatement(calculator_test_case, triple_function, {"number": later})
    with pytest.raises(ForwardReferenceError):
        calculator_test_case.set_statement(replacement, 1)
    assert calculator_test_case.get_statement(1) is old
    assert old.position == 1
    assert replacement.position == -1


def test_clone(calculator_test_case):
    clone = calculator_test_case.clone()
    assert clone == calculator_test_case
    assert hash(clone) == hash(calculator_test_case)
    assert all(
        copy is not original and copy.test_case is clone
        for copy, original in zip(
            clone.statements, calculator_test_case.statements, strict=True
        )
    )
    assert clone.get_statement(2).args["amount"] is clone.get_statement(1).ret_val
    assert clone.get_statement(3).args["number"] is clone.get_statement(2).ret_val
    assert clone.is_valid()


def test_clone_limit(calculator_test_case):
    clone = calculator_test_case.clone(limit=2)
    assert clone.size() == 2
    assert clone.get_statement(1).value == 5


def test_clone_is_independent(calculator_test_case):
    clone = calculator_test_case.clone()
    clone.get_statement(1).value = 6
    assert calculator_test_case.get_statement(1).value == 5
    assert clone != calculator_test_case


def test_append_test_case(calculator_test_case, triple_function):
    other = dtc.DefaultTestCase()
    number = other.add_statement(stmt.IntPrimitiveStatement(other, 3))
    other.add_statement(stmt.FunctionStatement(other, triple_function, {"number": number}))
    calculator_test_case.append_test_case(other)
    assert calculator_test_case.size() == 6
    appended = calculator_test_case.get_statement(5)
    assert appended.args["number"] is calculator_test_case.get_statement(4).ret_val
    assert appended.test_case is calculator_test_case
    assert other.size() == 2
    assert calculator_test_case.is_valid()


def test_get_dependencies(calculator_test_case):
    statements = calculator_test_case.statements
    dependencies = calculator_test_case.get_dependencies(statements[3].ret_val)
    assert list(dependencies) == [s.ret_val for s in statements[:3]]


def test_get_dependencies_of_literal(calculator_test_case):
    literal = calculator_test_case.get_statement(1).ret_val
    assert len(calculator_test_case.get_dependencies(literal)) == 0


def test_get_forward_dependencies(calculator_test_case):
    statements = calculator_test_case.statements
    dependencies = calculator_test_case.get_forward_dependencies(statements[0].ret_val)
    assert list(dependencies) == [statements[2].ret_val, statements[3].ret_val]


def test_dependency_graph(calculator_test_case):
    graph = calculator_test_case.dependency_graph()
    assert set(graph.nodes) == {0, 1, 2, 3}
    assert set(graph.edges) == {(0, 2), (1, 2), (2, 3)}


def test_get_objects(calculator_test_case):
    statements = calculator_test_case.statements
    assert calculator_test_case.get_objects(_int_type(), 3) == [
        statements[1].ret_val,
        statements[2].ret_val,
    ]


def test_get_objects_bounded_by_size(calculator_test_case):
    assert len(calculator_test_case.get_objects(ANY, 100)) == 4


def test_get_objects_skips_assignments(default_test_case, point_constructor):
    x_0 = default_test_case.add_statement(stmt.IntPrimitiveStatement(default_test_case, 1))
    y_0 = default_test_case.add_statement(stmt.IntPrimitiveStatement(default_test_case, 2))
    point = default_test_case.add_statement(
        stmt.ConstructorStatement(default_test_case, point_constructor, {"x": x_0, "y": y_0})
    )
    default_test_case.add_statement(stmt.AssignmentStatement(default_test_case, x_0, y_0))
    assert default_test_case.get_objects(ANY, 4) == [x_0, y_0, point]


def test_get_all_objects_skips_none(default_test_case):
    default_test_case.add_statement(stmt.NoneStatement(default_test_case))
    int_0 = default_test_case.add_statement(stmt.IntPrimitiveStatement(default_test_case, 1))
    assert default_test_case.get_all_objects(2) == [int_0]


def test_get_random_object(calculator_test_case):
    calculator = calculator_test_case.get_statement(0).ret_val
    assert calculator_test_case.get_random_object(calculator.type, 4) is calculator


def test_get_random_object_none_found(calculator_test_case):
    with pytest.raises(ConstructionFailedException):
        calculator_test_case.get_random_object(Instance(TypeInfo(str)), 4)


def test_size_with_assertions(calculator_test_case):
    statement = calculator_test_case.get_statement(1)
    statement.add_assertion(ass.ObjectAssertion(statement.ret_val, 5))
    assert calculator_test_case.size_with_assertions() == 5
    assert calculator_test_case.get_assertions() == [ass.ObjectAssertion(statement.ret_val, 5)]


def test_eq_other_type(calculator_test_case):
    assert calculator_test_case != "foo"


def test_eq_different_size(calculator_test_case):
    assert calculator_test_case != calculator_test_case.clone(limit=3)


def test_empty_test_cases_equal():
    assert dtc.DefaultTestCase() == dtc.DefaultTestCase()
    assert hash(dtc.DefaultTestCase()) == hash(dtc.DefaultTestCase())
