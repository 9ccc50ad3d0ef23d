"""Tests for relation statistics and predicates."""

import pytest

from relopt.plan import (
    Attribute,
    AttrEqAttr,
    AttrEqValue,
    NamedRelation,
    Relation,
    empty_relation,
)


class TestAttribute:
    """Test attribute identity."""

    def test_equality_ignores_value_count(self):
        assert Attribute("a", 10) == Attribute("a", 99)
        assert hash(Attribute("a", 10)) == hash(Attribute("a", 99))

    def test_different_names_differ(self):
        assert Attribute("a", 10) != Attribute("b", 10)

    def test_with_value_count_copies(self):
        original = Attribute("a", 10)
        changed = original.with_value_count(3)

        assert changed.value_count == 3
        assert original.value_count == 10

    def test_render(self):
        assert Attribute("age", 47).render() == "age,47"
        assert str(Attribute("age", 47)) == "age"


class TestRelation:
    """Test relation invariants."""

    def test_value_count_clamped_to_tuple_count(self):
        relation = Relation(20, [Attribute("c", 50)])

        assert relation.get_attribute("c").value_count == 20

    def test_value_count_below_tuple_count_kept(self):
        relation = Relation(100, [Attribute("a", 10)])

        assert relation.get_attribute("a").value_count == 10

    def test_negative_tuple_count_rejected(self):
        with pytest.raises(ValueError):
            Relation(-1)

    def test_lookup_by_name_or_attribute(self):
        relation = Relation(100, [Attribute("a", 10), Attribute("b", 5)])

        assert relation.get_attribute(Attribute("b")).value_count == 5
        assert relation.has_attribute("a")
        assert not relation.has_attribute("z")
        assert relation.get_attribute("z") is None

    def test_equality_ignores_attribute_order(self):
        first = Relation(100, [Attribute("a", 10), Attribute("b", 5)])
        second = Relation(100, [Attribute("b", 5), Attribute("a", 10)])

        assert first == second

    def test_equality_compares_value_counts(self):
        first = Relation(100, [Attribute("a", 10)])
        second = Relation(100, [Attribute("a", 11)])

        assert first != second

    def test_render(self):
        relation = Relation(50, [Attribute("a", 50), Attribute("b", 10)])

        assert relation.render() == "50:a,50:b,10"


class TestNamedRelation:
    """Test named relations and the empty placeholder."""

    def test_render_includes_name(self):
        relation = NamedRelation("Department", 50, [Attribute("dept_id", 50)])

        assert relation.render() == "Department:50:dept_id,50"
        assert str(relation) == "Department"

    def test_copy_is_unnamed(self):
        relation = NamedRelation("Department", 50, [Attribute("dept_id", 50)])
        copied = relation.copy()

        assert not isinstance(copied, NamedRelation)
        assert copied == Relation(50, [Attribute("dept_id", 50)])

    def test_names_take_part_in_equality(self):
        assert NamedRelation("R", 1) != NamedRelation("S", 1)

    def test_empty_relation(self):
        empty = empty_relation()

        assert empty.is_empty_placeholder()
        assert empty.tuple_count == 0
        assert empty.attributes == []


class TestPredicates:
    """Test predicate rendering and identity."""

    def test_render(self):
        assert str(AttrEqAttr(Attribute("a"), Attribute("b"))) == "a=b"
        assert str(AttrEqValue(Attribute("a"), "x")) == 'a="x"'

    def test_same_text_predicates_are_distinct(self):
        first = AttrEqValue(Attribute("a"), "x")
        second = AttrEqValue(Attribute("a"), "x")

        assert first != second
        assert [first, second].count(first) == 1

    def test_same_name_pair(self):
        assert AttrEqAttr(Attribute("a"), Attribute("a")).is_same_name()
        assert not AttrEqAttr(Attribute("a"), Attribute("b")).is_same_name()

    def test_swapped(self):
        predicate = AttrEqAttr(Attribute("a"), Attribute("b"))

        assert str(predicate.swapped()) == "b=a"
        assert predicate.attributes() == [Attribute("a"), Attribute("b")]
        assert not predicate.equals_value()
