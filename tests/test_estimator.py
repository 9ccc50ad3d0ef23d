"""Tests for cardinality estimation."""

import pytest

from relopt.optimiser import EstimationError, Estimator
from relopt.plan import (
    Attribute,
    AttrEqAttr,
    AttrEqValue,
    Join,
    NamedRelation,
    Product,
    Project,
    Scan,
    Select,
)


@pytest.fixture
def estimator():
    return Estimator()


@pytest.fixture
def employee():
    return NamedRelation(
        "Employee",
        10000,
        [Attribute("emp_id", 10000), Attribute("dept_id", 50), Attribute("age", 47)],
    )


@pytest.fixture
def department():
    return NamedRelation(
        "Department", 50, [Attribute("dept_id", 50), Attribute("dept_name", 50)]
    )


def estimated_scan(estimator, relation):
    scan = Scan(relation)
    estimator.estimate(scan)
    return scan


class TestScan:
    """Test scan estimation."""

    def test_scan_copies_statistics(self, estimator, employee):
        scan = estimated_scan(estimator, employee)

        assert scan.output == employee.copy()
        assert scan.output is not employee
        assert scan.output.attribute_names() == ["emp_id", "dept_id", "age"]


class TestProject:
    """Test projection estimation."""

    def test_project_keeps_tuple_count(self, estimator, employee):
        scan = estimated_scan(estimator, employee)
        project = Project(scan, [Attribute("age"), Attribute("emp_id")])
        output = estimator.estimate(project)

        assert output.tuple_count == 10000
        assert output.attribute_names() == ["age", "emp_id"]
        assert output.get_attribute("age").value_count == 47

    def test_project_unknown_attribute_gets_zero_values(self, estimator, employee):
        scan = estimated_scan(estimator, employee)
        output = estimator.estimate(Project(scan, [Attribute("dept_name", 50)]))

        assert output.tuple_count == 10000
        assert output.get_attribute("dept_name").value_count == 0


class TestSelect:
    """Test selection estimation."""

    def test_select_value(self, estimator, employee):
        scan = estimated_scan(estimator, employee)
        output = estimator.estimate(Select(scan, AttrEqValue(Attribute("age"), "30")))

        assert output.tuple_count == 10000 // 47
        assert output.get_attribute("age").value_count == 1
        assert output.get_attribute("dept_id").value_count == 50

    def test_select_value_on_missing_attribute(self, estimator, department):
        scan = estimated_scan(estimator, department)
        output = estimator.estimate(Select(scan, AttrEqValue(Attribute("age"), "30")))

        assert output.tuple_count == 0
        assert output.attribute_names() == ["dept_id", "dept_name"]

    def test_select_value_with_zero_value_count(self, estimator):
        scan = estimated_scan(estimator, NamedRelation("Ghost", 10, [Attribute("g", 0)]))
        output = estimator.estimate(Select(scan, AttrEqValue(Attribute("g"), "x")))

        assert output.tuple_count == 0

    def test_select_attribute_pair(self, estimator):
        relation = NamedRelation("R", 100, [Attribute("x", 10), Attribute("y", 20)])
        scan = estimated_scan(estimator, relation)
        predicate = AttrEqAttr(Attribute("x"), Attribute("y"))
        output = estimator.estimate(Select(scan, predicate))

        assert output.tuple_count == 5
        assert output.get_attribute("x").value_count == 5
        assert output.get_attribute("y").value_count == 5

    def test_select_attribute_pair_keeps_min_when_below_tuples(self, estimator):
        relation = NamedRelation("R", 1000, [Attribute("x", 4), Attribute("y", 10)])
        scan = estimated_scan(estimator, relation)
        output = estimator.estimate(
            Select(scan, AttrEqAttr(Attribute("x"), Attribute("y")))
        )

        assert output.tuple_count == 100
        assert output.get_attribute("x").value_count == 4
        assert output.get_attribute("y").value_count == 4

    def test_select_attribute_pair_missing_side(self, estimator, employee):
        scan = estimated_scan(estimator, employee)
        predicate = AttrEqAttr(Attribute("age"), Attribute("dept_name"))
        output = estimator.estimate(Select(scan, predicate))

        assert output.tuple_count == 0
        assert len(output.attributes) == 3


class TestProduct:
    """Test cartesian product estimation."""

    def test_product(self, estimator, employee, department):
        product = Product(
            estimated_scan(estimator, employee), estimated_scan(estimator, department)
        )
        output = estimator.estimate(product)

        assert output.tuple_count == 500000
        assert output.attribute_names() == [
            "emp_id",
            "dept_id",
            "age",
            "dept_id",
            "dept_name",
        ]


class TestJoin:
    """Test join estimation."""

    def test_join(self, estimator, employee, department):
        join = Join(
            estimated_scan(estimator, employee),
            estimated_scan(estimator, department),
            AttrEqAttr(Attribute("dept_id"), Attribute("dept_id")),
        )
        output = estimator.estimate(join)

        assert output.tuple_count == 10000 * 50 // 50
        assert len(output.attributes) == 5

    def test_join_sets_min_value_count_on_both_sides(self, estimator):
        left = NamedRelation("A", 100, [Attribute("a", 10)])
        right = NamedRelation("B", 100, [Attribute("b", 25), Attribute("c", 7)])
        join = Join(
            estimated_scan(estimator, left),
            estimated_scan(estimator, right),
            AttrEqAttr(Attribute("a"), Attribute("b")),
        )
        output = estimator.estimate(join)

        assert output.tuple_count == 100 * 100 // 25
        assert output.get_attribute("a").value_count == 10
        assert output.get_attribute("b").value_count == 10
        assert output.get_attribute("c").value_count == 7

    def test_join_predicate_written_the_other_way(self, estimator):
        left = NamedRelation("A", 100, [Attribute("a", 10)])
        right = NamedRelation("B", 100, [Attribute("b", 25)])
        join = Join(
            estimated_scan(estimator, left),
            estimated_scan(estimator, right),
            AttrEqAttr(Attribute("b"), Attribute("a")),
        )

        assert estimator.estimate(join).tuple_count == 400

    def test_join_unresolvable_predicate(self, estimator, employee, department):
        join = Join(
            estimated_scan(estimator, employee),
            estimated_scan(estimator, department),
            AttrEqAttr(Attribute("age"), Attribute("salary")),
        )
        output = estimator.estimate(join)

        assert output.tuple_count == 0
        assert len(output.attributes) == 5

    def test_join_zero_value_count(self, estimator):
        left = NamedRelation("A", 10, [Attribute("a", 0)])
        right = NamedRelation("B", 10, [Attribute("b", 0)])
        join = Join(
            estimated_scan(estimator, left),
            estimated_scan(estimator, right),
            AttrEqAttr(Attribute("a"), Attribute("b")),
        )

        assert estimator.estimate(join).tuple_count == 0


class TestEstimationOrder:
    """Test the post-order precondition."""

    def test_unestimated_input_raises(self, estimator, employee):
        project = Project(Scan(employee), [Attribute("age")])

        with pytest.raises(EstimationError):
            estimator.estimate(project)

    def test_estimate_plan_visits_inputs_first(self, estimator, employee, department):
        plan = Project(
            Select(
                Product(Scan(employee), Scan(department)),
                AttrEqValue(Attribute("age"), "30"),
            ),
            [Attribute("emp_id")],
        )
        output = estimator.estimate_plan(plan)

        assert output.tuple_count == 500000 // 47
        assert plan.input.input.left.is_estimated()
        assert plan.tuple_count() == output.tuple_count
