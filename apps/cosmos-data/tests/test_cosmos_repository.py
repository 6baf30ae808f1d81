"""Tests for SimpleCosmosRepository."""

from unittest.mock import MagicMock, call

import pytest
from cosmos_test_support import Note, Order, Person

from cosmos_data import CosmosOperations, CriteriaType, PageRequest, SimpleCosmosRepository, Sort, where
from cosmos_data.core.mapping import get_entity_information
from cosmos_data.exceptions import ConfigurationError, IllegalQueryError

pytestmark = pytest.mark.unit


class PersonRepository(SimpleCosmosRepository[Person]):
    pass


class NoteRepository(SimpleCosmosRepository[Note]):
    pass


@pytest.fixture
def operations() -> MagicMock:
    return MagicMock(spec=CosmosOperations)


@pytest.fixture
def repository(operations) -> PersonRepository:
    return PersonRepository(operations)


class TestConstruction:
    def test_entity_class_from_generic_base(self, repository, operations):
        assert repository.entity_class is Person
        assert repository.container_name == "people"
        operations.create_container_if_not_exists.assert_called_once_with(get_entity_information(Person))

    def test_explicit_entity_class(self, operations):
        repository = SimpleCosmosRepository(operations, Order)

        assert repository.entity_class is Order
        # Order opts out of container creation
        operations.create_container_if_not_exists.assert_not_called()

    def test_unresolvable_entity_class(self, operations):
        with pytest.raises(ConfigurationError):
            SimpleCosmosRepository(operations)

    def test_requires_operations(self):
        with pytest.raises(ValueError):
            PersonRepository(None)


class TestCrud:
    def test_save_inserts_new_entities(self, repository, operations):
        person = Person(first_name="Jane", last_name="Doe")
        operations.insert.return_value = person.model_copy(update={"id": "1"})

        saved = repository.save(person)

        operations.insert.assert_called_once_with(person, "people")
        assert saved.id == "1"

    def test_save_upserts_existing_entities(self, repository, operations):
        person = Person(id="1", first_name="Jane", last_name="Doe")

        repository.save(person)

        operations.upsert.assert_called_once_with(person, "people")
        operations.insert.assert_not_called()

    def test_save_all(self, repository, operations):
        operations.upsert.side_effect = lambda entity, container: entity
        people = [Person(id=str(i), first_name="J", last_name="Doe") for i in range(3)]

        assert repository.save_all(people) == people

    def test_find_by_id(self, repository, operations):
        repository.find_by_id("1", "Doe")

        operations.find_by_id.assert_called_once_with("1", Person, "Doe", "people")

    def test_exists_by_id(self, repository, operations):
        operations.find_by_id.return_value = None

        assert not repository.exists_by_id("1")

    def test_find_all_unsorted_and_sorted(self, repository, operations):
        repository.find_all()
        operations.find_all.assert_called_once_with(Person, "people")

        repository.find_all(Sort.by("age"))
        query = operations.find.call_args.args[0]
        assert query.sort == Sort.by("age")

    def test_find_all_page(self, repository, operations):
        repository.find_all_page(PageRequest.of(0, 10))

        query = operations.paginate_query.call_args.args[0]
        assert query.pageable.size == 10

    def test_find_with_criteria(self, repository, operations):
        repository.find(where("age").greater_than(3))

        query = operations.find.call_args.args[0]
        assert query.criteria.type is CriteriaType.GREATER_THAN

    def test_count(self, repository, operations):
        operations.count.return_value = 7

        assert repository.count() == 7
        operations.count.assert_called_once_with("people")


class TestDeletes:
    def test_delete_by_id_with_partition_key(self, repository, operations):
        repository.delete_by_id("1", "Doe")

        operations.delete_by_id.assert_called_once_with("people", "1", "Doe")
        operations.find_by_id.assert_not_called()

    def test_delete_by_id_looks_up_partition_key(self, repository, operations):
        operations.find_by_id.return_value = Person(id="1", first_name="Jane", last_name="Doe")

        repository.delete_by_id("1")

        operations.delete_by_id.assert_called_once_with("people", "1", "Doe")

    def test_delete_by_id_missing_entity(self, repository, operations):
        operations.find_by_id.return_value = None

        repository.delete_by_id("1")

        operations.delete_by_id.assert_not_called()

    def test_delete_by_id_partitioned_by_id(self, operations):
        NoteRepository(operations).delete_by_id("n1")

        operations.delete_by_id.assert_called_once_with("Note", "n1", "n1")

    def test_delete_entity(self, repository, operations):
        person = Person(id="1", first_name="Jane", last_name="Doe")

        repository.delete(person)

        operations.delete_entity.assert_called_once_with("people", person)

    def test_delete_all(self, repository, operations):
        repository.delete_all()

        operations.delete_all.assert_called_once_with("people", Person)

    def test_delete_all_by_id_deletes_each_id(self, operations):
        repository = NoteRepository(operations)

        repository.delete_all_by_id(["n1", "n2"])

        assert operations.delete_by_id.call_args_list == [call("Note", "n1", "n1"), call("Note", "n2", "n2")]
        operations.delete.assert_not_called()


class TestDerivedQueries:
    def test_find_by(self, repository, operations):
        operations.find.return_value = []

        assert repository.find_by_last_name_and_age_greater_than("Doe", 30) == []

        query = operations.find.call_args.args[0]
        assert query.criteria.type is CriteriaType.AND
        assert operations.find.call_args.args[1:] == (Person, "people")

    def test_count_by(self, repository, operations):
        operations.count.return_value = 2

        assert repository.count_by_last_name("Doe") == 2

        container_name, query, entity_class = operations.count.call_args.args
        assert (container_name, entity_class) == ("people", Person)
        assert query.criteria.values == ("Doe",)

    def test_exists_by(self, repository, operations):
        operations.exists.return_value = True

        assert repository.exists_by_first_name_ignore_case("jane")

        assert operations.exists.call_args.args[0].criteria.ignore_case

    def test_delete_by(self, repository, operations):
        repository.delete_by_age_less_than(18)

        query = operations.delete.call_args.args[0]
        assert query.criteria.type is CriteriaType.LESS_THAN

    def test_top_limit(self, repository, operations):
        repository.find_top2_by_last_name_order_by_age_desc("Doe")

        query = operations.find.call_args.args[0]
        assert query.limit == 2
        assert query.sort.is_sorted

    def test_wrong_argument_count(self, repository):
        with pytest.raises(TypeError):
            repository.find_by_last_name()

    def test_unknown_field(self, repository):
        with pytest.raises(IllegalQueryError):
            repository.find_by_nickname("x")

    def test_unknown_attribute(self, repository):
        with pytest.raises(AttributeError):
            repository.does_not_exist
