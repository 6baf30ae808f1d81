"""Tests for derived query parsing."""

import pytest
from cosmos_test_support import Person
from pydantic import BaseModel

from cosmos_data import CriteriaType, Sort
from cosmos_data.core.query import Order
from cosmos_data.exceptions import IllegalQueryError
from cosmos_data.repository.query import PartTree, QueryKind

pytestmark = pytest.mark.unit


class Product(BaseModel):
    id: str
    name: str
    name_and_code: str
    in_stock: bool
    price: float


class TestPartTree:
    def test_is_derived_query(self):
        assert PartTree.is_derived_query("find_by_last_name")
        assert PartTree.is_derived_query("count_by_age")
        assert PartTree.is_derived_query("find_top3_by_age")
        assert not PartTree.is_derived_query("find_all")
        assert not PartTree.is_derived_query("save")

    def test_simple_equality(self):
        tree = PartTree.parse("find_by_last_name", Person)

        assert tree.kind is QueryKind.FIND
        assert tree.arity == 1
        criteria = tree.create_query(["Doe"]).criteria
        assert criteria.type is CriteriaType.IS_EQUAL
        assert criteria.subject == "last_name"
        assert criteria.values == ("Doe",)

    def test_and_binds_arguments_in_order(self):
        tree = PartTree.parse("find_by_last_name_and_age_greater_than", Person)

        criteria = tree.create_query(["Doe", 30]).criteria

        assert criteria.type is CriteriaType.AND
        left, right = criteria.sub_criteria
        assert (left.subject, left.values) == ("last_name", ("Doe",))
        assert (right.type, right.subject, right.values) == (CriteriaType.GREATER_THAN, "age", (30,))

    def test_or_groups(self):
        tree = PartTree.parse("find_by_first_name_or_last_name_and_age", Person)

        criteria = tree.create_query(["Jane", "Doe", 3]).criteria

        assert criteria.type is CriteriaType.OR
        assert criteria.sub_criteria[0].subject == "first_name"
        assert criteria.sub_criteria[1].type is CriteriaType.AND

    @pytest.mark.parametrize(
        ("method_name", "criteria_type", "arity"),
        [
            ("find_by_age_between", CriteriaType.BETWEEN, 2),
            ("find_by_age_in", CriteriaType.IN, 1),
            ("find_by_age_not_in", CriteriaType.NOT_IN, 1),
            ("find_by_age_is_null", CriteriaType.IS_NULL, 0),
            ("find_by_age_is_not_null", CriteriaType.IS_NOT_NULL, 0),
            ("find_by_age_less_than_equal", CriteriaType.LESS_THAN_EQUAL, 1),
            ("find_by_first_name_starts_with", CriteriaType.STARTS_WITH, 1),
            ("find_by_first_name_not_containing", CriteriaType.NOT_CONTAINING, 1),
            ("find_by_hobbies_array_contains", CriteriaType.ARRAY_CONTAINS, 1),
            ("find_by_first_name_is_not", CriteriaType.NOT, 1),
            ("find_by_age_exists", CriteriaType.EXISTS, 0),
        ],
    )
    def test_operators(self, method_name, criteria_type, arity):
        tree = PartTree.parse(method_name, Person)

        assert tree.groups[0][0].type is criteria_type
        assert tree.arity == arity

    def test_ignore_case(self):
        tree = PartTree.parse("find_by_first_name_starts_with_ignore_case", Person)

        part = tree.groups[0][0]
        assert part.type is CriteriaType.STARTS_WITH
        assert part.ignore_case

    def test_field_names_containing_keywords(self):
        tree = PartTree.parse("find_by_name_and_code_and_in_stock_is_true", Product)

        parts = tree.groups[0]
        assert [(p.field, p.type) for p in parts] == [
            ("name_and_code", CriteriaType.IS_EQUAL),
            ("in_stock", CriteriaType.TRUE),
        ]

    def test_backtracks_to_shorter_field(self):
        tree = PartTree.parse("find_by_name_and_price_less_than", Product)

        assert [p.field for p in tree.groups[0]] == ["name", "price"]

    def test_order_by(self):
        tree = PartTree.parse("find_by_last_name_order_by_age_desc_and_first_name", Person)

        assert tree.sort == Sort(orders=(Order.desc("age"), Order.asc("first_name")))
        assert tree.create_query(["Doe"]).sort == tree.sort

    def test_limits(self):
        assert PartTree.parse("find_first_by_last_name", Person).limit == 1
        assert PartTree.parse("find_top5_by_last_name", Person).create_query(["Doe"]).limit == 5
        assert PartTree.parse("find_all_by_last_name", Person).limit is None

    def test_kinds(self):
        assert PartTree.parse("count_by_last_name", Person).kind is QueryKind.COUNT
        assert PartTree.parse("exists_by_last_name", Person).kind is QueryKind.EXISTS
        assert PartTree.parse("delete_by_last_name", Person).kind is QueryKind.DELETE
        assert PartTree.parse("get_by_last_name", Person).kind is QueryKind.FIND

    def test_wrong_argument_count(self):
        tree = PartTree.parse("find_by_last_name_and_age", Person)

        with pytest.raises(TypeError):
            tree.create_query(["Doe"])

    @pytest.mark.parametrize(
        "method_name",
        [
            "find_by_nickname",
            "find_by_last_name_and",
            "find_by_age_greater_than_ignore_case",
            "find_all",
            "find_top0_by_age",
        ],
    )
    def test_invalid_names(self, method_name):
        with pytest.raises(IllegalQueryError):
            PartTree.parse(method_name, Person)

    def test_invalid_order_clause(self):
        with pytest.raises(IllegalQueryError):
            PartTree.parse("find_by_age_order_by_unknown", Person)
