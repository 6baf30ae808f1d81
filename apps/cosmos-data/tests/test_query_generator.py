"""Tests for Cosmos SQL generation."""

from datetime import datetime

import pytest
from cosmos_test_support import Order, Person
from pydantic import BaseModel, Field

from cosmos_data import Criteria, DocumentQuery, PageRequest, Sort, cosmos_document, where
from cosmos_data.core.generator import QueryGenerator, property_path
from cosmos_data.core.mapping import get_entity_information
from cosmos_data.core.query import Order as SortOrder
from cosmos_data.exceptions import IllegalQueryError

pytestmark = pytest.mark.unit


class Address(BaseModel):
    postal_code: str = Field(alias="postalCode")
    city_name: str = Field(alias="cityName")


@cosmos_document(container="customers")
class Customer(BaseModel):
    id: str
    addresses: list[Address] = Field(default_factory=list)
    home: Address | None = Field(default=None, alias="homeAddress")


@pytest.fixture
def generator(converter) -> QueryGenerator:
    return QueryGenerator(converter)


def find_sql(generator: QueryGenerator, criteria: Criteria, entity_class=Person, **query_options):
    query = generator.resolve(DocumentQuery(criteria, **query_options), get_entity_information(entity_class))
    return generator.generate_find(query)


class TestPropertyPath:
    def test_plain_and_nested(self):
        assert property_path("lastName") == "r.lastName"
        assert property_path("address.city") == "r.address.city"

    def test_bracket_notation_for_non_identifiers(self):
        assert property_path("first-name") == 'r["first-name"]'
        assert property_path("2nd") == 'r["2nd"]'

    @pytest.mark.parametrize("subject", ["", "a b", "a;DROP", "a..b", 'x"]'])
    def test_rejects_unsafe_names(self, subject):
        with pytest.raises(IllegalQueryError):
            property_path(subject)


class TestGenerateFind:
    def test_find_all(self, generator):
        spec = generator.generate_find(DocumentQuery())

        assert spec.query_text == "SELECT * FROM ROOT r"
        assert spec.parameters == []

    def test_equal_uses_document_property(self, generator):
        spec = find_sql(generator, where("last_name").is_equal("Doe"))

        assert spec.query_text == "SELECT * FROM ROOT r WHERE r.lastName = @lastName0"
        assert spec.parameters == [{"name": "@lastName0", "value": "Doe"}]

    def test_and_or_are_parenthesised(self, generator):
        criteria = (where("last_name").is_equal("Doe") & where("age").greater_than(30)) | where("age").less_than(5)

        spec = find_sql(generator, criteria)

        assert spec.query_text == (
            "SELECT * FROM ROOT r WHERE ((r.lastName = @lastName0 AND r.age > @age1) OR r.age < @age2)"
        )
        assert [p["value"] for p in spec.parameters] == ["Doe", 30, 5]

    def test_in_and_not_in(self, generator):
        spec = find_sql(generator, where("first_name").in_(["Jane", "John"]))
        assert spec.query_text == "SELECT * FROM ROOT r WHERE ARRAY_CONTAINS(@firstName0, r.firstName)"
        assert spec.parameters[0]["value"] == ["Jane", "John"]

        spec = find_sql(generator, where("first_name").not_in(["Jane"]))
        assert spec.query_text == "SELECT * FROM ROOT r WHERE NOT ARRAY_CONTAINS(@firstName0, r.firstName)"

    def test_empty_collections(self, generator):
        assert find_sql(generator, where("age").in_([])).query_text == "SELECT * FROM ROOT r WHERE false"
        assert find_sql(generator, where("age").not_in([])).query_text == "SELECT * FROM ROOT r WHERE true"

    def test_between(self, generator):
        spec = find_sql(generator, where("age").between(18, 65))

        assert spec.query_text == "SELECT * FROM ROOT r WHERE (r.age >= @age0 AND r.age <= @age1)"
        assert [p["value"] for p in spec.parameters] == [18, 65]

    def test_string_functions(self, generator):
        assert (
            find_sql(generator, where("first_name").starts_with("J")).query_text
            == "SELECT * FROM ROOT r WHERE STARTSWITH(r.firstName, @firstName0)"
        )
        assert (
            find_sql(generator, where("first_name").ends_with("e", ignore_case=True)).query_text
            == "SELECT * FROM ROOT r WHERE ENDSWITH(r.firstName, @firstName0, true)"
        )
        assert (
            find_sql(generator, where("first_name").not_containing("x")).query_text
            == "SELECT * FROM ROOT r WHERE NOT CONTAINS(r.firstName, @firstName0)"
        )
        assert (
            find_sql(generator, where("hobbies").array_contains("chess")).query_text
            == "SELECT * FROM ROOT r WHERE ARRAY_CONTAINS(r.hobbies, @hobbies0)"
        )

    def test_equal_ignore_case(self, generator):
        spec = find_sql(generator, where("first_name").is_equal("jane", ignore_case=True))

        assert spec.query_text == "SELECT * FROM ROOT r WHERE UPPER(r.firstName) = UPPER(@firstName0)"

    def test_unary_and_closed(self, generator):
        assert find_sql(generator, where("age").is_null()).query_text == "SELECT * FROM ROOT r WHERE IS_NULL(r.age)"
        assert (
            find_sql(generator, where("age").is_not_null()).query_text
            == "SELECT * FROM ROOT r WHERE NOT IS_NULL(r.age)"
        )
        assert find_sql(generator, where("age").exists()).query_text == "SELECT * FROM ROOT r WHERE IS_DEFINED(r.age)"
        assert (
            generator.generate_find(DocumentQuery(where("active").is_true())).query_text
            == "SELECT * FROM ROOT r WHERE r.active = true"
        )

    def test_nested_property_parameters(self, generator):
        spec = generator.generate_find(DocumentQuery(where("address.city").is_equal("Oslo")))

        assert spec.query_text == "SELECT * FROM ROOT r WHERE r.address.city = @address_city0"

    def test_nested_fields_resolve_through_aliases(self, generator):
        spec = find_sql(
            generator,
            where("addresses.postal_code").is_equal("98052") & where("home.city_name").is_equal("Redmond"),
            entity_class=Customer,
            sort=Sort.by("home.postal_code"),
        )

        assert spec.query_text == (
            "SELECT * FROM ROOT r WHERE (r.addresses.postalCode = @addresses_postalCode0"
            " AND r.homeAddress.cityName = @homeAddress_cityName1) ORDER BY r.homeAddress.postalCode ASC"
        )

    def test_unknown_nested_segments_are_kept(self, generator):
        spec = find_sql(generator, where("home.extra.postal_code").is_equal("x"), entity_class=Customer)

        assert spec.query_text == (
            "SELECT * FROM ROOT r WHERE r.homeAddress.extra.postal_code = @homeAddress_extra_postal_code0"
        )

    def test_id_values_become_strings(self, generator):
        spec = find_sql(generator, where("id").is_equal(5))

        assert spec.parameters == [{"name": "@id0", "value": "5"}]

    def test_custom_id_field_maps_to_id(self, generator):
        spec = find_sql(generator, where("order_id").in_([1, 2]), entity_class=Order)

        assert spec.query_text == "SELECT * FROM ROOT r WHERE ARRAY_CONTAINS(@id0, r.id)"
        assert spec.parameters[0]["value"] == ["1", "2"]

    def test_datetime_parameters_are_iso_strings(self, generator):
        spec = find_sql(generator, where("created_at").before(datetime(2024, 1, 1)), entity_class=Order)

        assert spec.query_text == "SELECT * FROM ROOT r WHERE r.created_at < @created_at0"
        assert spec.parameters[0]["value"] == "2024-01-01T00:00:00"

    def test_sort_and_limit(self, generator):
        spec = find_sql(
            generator,
            where("age").greater_than(1),
            sort=Sort.by("last_name", SortOrder.desc("age")),
            limit=5,
        )

        assert spec.query_text == (
            "SELECT * FROM ROOT r WHERE r.age > @age0 ORDER BY r.lastName ASC, r.age DESC OFFSET 0 LIMIT 5"
        )

    def test_paged_query_has_no_limit(self, generator):
        query = DocumentQuery(limit=3).with_pageable(PageRequest.of(0, 10))

        assert "LIMIT" not in generator.generate_find(query).query_text


class TestGenerateOther:
    def test_count(self, generator):
        query = generator.resolve(DocumentQuery(where("last_name").is_equal("Doe")), get_entity_information(Person))

        spec = generator.generate_count(query)

        assert spec.query_text == "SELECT VALUE COUNT(1) FROM r WHERE r.lastName = @lastName0"

    def test_find_by_ids(self, generator):
        spec = generator.generate_find_by_ids([1, "2"])

        assert spec.query_text == "SELECT * FROM ROOT r WHERE ARRAY_CONTAINS(@ids, r.id)"
        assert spec.parameters == [{"name": "@ids", "value": ["1", "2"]}]

    def test_requires_converter(self):
        with pytest.raises(ValueError):
            QueryGenerator(None)
