"""
Repository core tests

🧪 Registry Semantics:
Uniqueness, not-found symmetry, round-trips, copy isolation, containment
teardown and scoped addressing, checked against every storage backend.
"""

import pytest

from aasregistry.persistence.repositories.base import (
    InvalidRequestError, ResourceAlreadyExistsError, ResourceNotFoundError,
)


def _ids(descriptors):
    return sorted(d.id for d in descriptors)


class TestUniqueness:
    """No two shells or submodels share an id"""

    def test_duplicate_shell_rejected(self, repository, make_shell):
        repository.create_shell(make_shell("aas-1", id_short="original"))

        with pytest.raises(ResourceAlreadyExistsError, match=r"AAS already exists \(id: aas-1\)"):
            repository.create_shell(make_shell("aas-1", id_short="second"))

        assert repository.get_shell("aas-1").id_short == "original"
        assert len(repository.get_shells()) == 1

    def test_duplicate_standalone_submodel_rejected(self, repository, make_submodel):
        repository.add_submodel(make_submodel("sm-1"))

        with pytest.raises(ResourceAlreadyExistsError, match=r"Submodel already exists \(id: sm-1\)"):
            repository.add_submodel(make_submodel("sm-1"))

    def test_nested_id_taken_by_standalone_submodel(self, repository, make_shell, make_submodel):
        repository.add_submodel(make_submodel("sm-1"))

        with pytest.raises(ResourceAlreadyExistsError):
            repository.create_shell(make_shell("aas-1", [make_submodel("sm-1")]))

        with pytest.raises(ResourceNotFoundError):
            repository.get_shell("aas-1")

    def test_repeated_nested_ids_rejected(self, repository, make_shell, make_submodel):
        with pytest.raises(ResourceAlreadyExistsError):
            repository.create_shell(make_shell("aas-1", [make_submodel("sm-1"), make_submodel("sm-1")]))

        assert repository.get_shells() == []
        assert repository.get_submodels() == []

    def test_scoped_add_of_taken_id_rejected(self, repository, make_shell, make_submodel):
        repository.create_shell(make_shell("aas-1", [make_submodel("sm-1")]))
        repository.create_shell(make_shell("aas-2"))

        with pytest.raises(ResourceAlreadyExistsError):
            repository.add_submodel(make_submodel("sm-1"), "aas-2")

        assert repository.get_shell("aas-2").submodel_descriptors is None

    def test_identifiers_are_case_sensitive(self, repository, make_shell):
        repository.create_shell(make_shell("AAS-1"))
        repository.create_shell(make_shell("aas-1"))

        assert _ids(repository.get_shells()) == ["AAS-1", "aas-1"]


class TestNotFound:
    """Operations on missing ids fail without side effects"""

    def test_shell_operations(self, repository, make_shell):
        repository.create_shell(make_shell("aas-1"))

        with pytest.raises(ResourceNotFoundError, match=r"AAS not found \(id: missing\)"):
            repository.get_shell("missing")
        with pytest.raises(ResourceNotFoundError):
            repository.update_shell("missing", make_shell("missing"))
        with pytest.raises(ResourceNotFoundError):
            repository.delete_shell("missing")
        with pytest.raises(ResourceNotFoundError):
            repository.get_submodels_of_shell("missing")

        assert _ids(repository.get_shells()) == ["aas-1"]

    def test_submodel_operations(self, repository, make_submodel):
        with pytest.raises(ResourceNotFoundError, match=r"Submodel not found \(id: sm-x\)"):
            repository.get_submodel("sm-x")
        with pytest.raises(ResourceNotFoundError):
            repository.update_submodel("sm-x", make_submodel("sm-x"))
        with pytest.raises(ResourceNotFoundError):
            repository.delete_submodel("sm-x")

        assert repository.get_submodels() == []

    def test_scoped_submodel_operations(self, repository, make_shell, make_submodel):
        repository.create_shell(make_shell("aas-1", [make_submodel("sm-1")]))
        repository.add_submodel(make_submodel("sm-2"))

        with pytest.raises(ResourceNotFoundError, match=r"Submodel not found in AAS \(AAS: aas-1, submodel: sm-2\)"):
            repository.get_submodel("sm-2", "aas-1")
        with pytest.raises(ResourceNotFoundError):
            repository.delete_submodel("sm-2", "aas-1")
        with pytest.raises(ResourceNotFoundError):
            repository.update_submodel("sm-2", make_submodel("sm-2"), "aas-1")
        with pytest.raises(ResourceNotFoundError, match="AAS not found"):
            repository.add_submodel(make_submodel("sm-3"), "missing")

        assert _ids(repository.get_submodels()) == ["sm-1", "sm-2"]

    def test_missing_arguments_rejected(self, repository, make_submodel):
        with pytest.raises(InvalidRequestError):
            repository.get_shell(None)
        with pytest.raises(InvalidRequestError):
            repository.create_shell(None)
        with pytest.raises(InvalidRequestError):
            repository.add_submodel(make_submodel(None))


class TestRoundTrip:
    """Stored descriptors come back equal and unaliased"""

    def test_shell_round_trip(self, repository, make_shell, make_submodel):
        shell = make_shell("aas-1", [make_submodel("sm-1"), make_submodel("sm-2")])

        repository.create_shell(shell)

        assert repository.get_shell("aas-1").model_dump() == shell.model_dump()

    def test_submodel_round_trip(self, repository, make_submodel):
        submodel = make_submodel("sm-1")

        repository.add_submodel(submodel)

        assert repository.get_submodel("sm-1").model_dump() == submodel.model_dump()

    def test_mutating_input_after_create(self, repository, make_shell, make_submodel):
        shell = make_shell("aas-1", [make_submodel("sm-1")])
        repository.create_shell(shell)

        shell.id_short = "mutated"
        shell.submodel_descriptors[0].id_short = "mutated"
        shell.submodel_descriptors.append(make_submodel("sm-2"))

        stored = repository.get_shell("aas-1")
        assert stored.id_short == "short-aas-1"
        assert [s.id_short for s in stored.submodel_descriptors] == ["short-sm-1"]
        assert repository.get_submodel("sm-1").id_short == "short-sm-1"

    def test_mutating_returned_value(self, repository, make_shell):
        returned = repository.create_shell(make_shell("aas-1"))

        returned.id_short = "mutated"
        repository.get_shell("aas-1").description.clear()

        stored = repository.get_shell("aas-1")
        assert stored.id_short == "short-aas-1"
        assert len(stored.description) == 1


class TestContainment:
    """Nested submodels follow their shell"""

    def test_delete_shell_removes_nested_submodels(self, repository, make_shell, make_submodel):
        repository.create_shell(make_shell("S1", [make_submodel("M1")]))
        repository.add_submodel(make_submodel("M2"))

        repository.delete_shell("S1")

        with pytest.raises(ResourceNotFoundError):
            repository.get_submodel("M1")
        assert _ids(repository.get_submodels()) == ["M2"]

    def test_scoped_add_is_visible_both_ways(self, repository, make_shell, make_submodel):
        repository.create_shell(make_shell("S1"))

        repository.add_submodel(make_submodel("M1"), "S1")

        assert repository.get_submodel("M1", "S1").id == "M1"
        assert repository.get_submodel("M1").id == "M1"
        assert [s.id for s in repository.get_submodels_of_shell("S1")] == ["M1"]

    def test_scoped_delete_removes_from_flat_view(self, repository, make_shell, make_submodel):
        repository.create_shell(make_shell("S1", [make_submodel("M1"), make_submodel("M2")]))

        repository.delete_submodel("M1", "S1")

        with pytest.raises(ResourceNotFoundError):
            repository.get_submodel("M1")
        assert [s.id for s in repository.get_submodels_of_shell("S1")] == ["M2"]

    def test_unscoped_delete_detaches_from_shell(self, repository, make_shell, make_submodel):
        repository.create_shell(make_shell("S1", [make_submodel("M1"), make_submodel("M2")]))

        repository.delete_submodel("M1")

        assert [s.id for s in repository.get_submodels_of_shell("S1")] == ["M2"]
        with pytest.raises(ResourceNotFoundError):
            repository.get_submodel("M1", "S1")

    def test_shell_without_nested_list(self, repository, make_shell):
        repository.create_shell(make_shell("S1"))

        assert repository.get_submodels_of_shell("S1") == []

    def test_deleted_submodel_id_can_be_reused(self, repository, make_shell, make_submodel):
        repository.create_shell(make_shell("S1", [make_submodel("M1")]))
        repository.delete_shell("S1")

        repository.add_submodel(make_submodel("M1"))

        assert repository.get_submodel("M1").id == "M1"


class TestUpdates:
    """Updates replace wholesale inside one transaction"""

    def test_update_shell_replaces_descriptor(self, repository, make_shell, make_submodel):
        repository.create_shell(make_shell("aas-1", [make_submodel("sm-1"), make_submodel("sm-2")]))

        repository.update_shell("aas-1", make_shell("aas-1", [make_submodel("sm-2"), make_submodel("sm-3")],
                                                    id_short="updated"))

        stored = repository.get_shell("aas-1")
        assert stored.id_short == "updated"
        assert [s.id for s in stored.submodel_descriptors] == ["sm-2", "sm-3"]
        assert _ids(repository.get_submodels()) == ["sm-2", "sm-3"]

    def test_update_shell_can_change_id(self, repository, make_shell):
        repository.create_shell(make_shell("aas-1"))

        repository.update_shell("aas-1", make_shell("aas-new"))

        assert _ids(repository.get_shells()) == ["aas-new"]

    def test_update_shell_to_taken_id_changes_nothing(self, repository, make_shell, make_submodel):
        repository.create_shell(make_shell("aas-1", [make_submodel("sm-1")]))
        repository.create_shell(make_shell("aas-2"))

        with pytest.raises(ResourceAlreadyExistsError):
            repository.update_shell("aas-1", make_shell("aas-2"))

        assert _ids(repository.get_shells()) == ["aas-1", "aas-2"]
        assert repository.get_submodel("sm-1", "aas-1").id == "sm-1"

    def test_update_shell_with_foreign_nested_id_changes_nothing(self, repository, make_shell, make_submodel):
        repository.create_shell(make_shell("aas-1", [make_submodel("sm-1")]))
        repository.add_submodel(make_submodel("sm-2"))

        with pytest.raises(ResourceAlreadyExistsError):
            repository.update_shell("aas-1", make_shell("aas-1", [make_submodel("sm-2")]))

        assert [s.id for s in repository.get_submodels_of_shell("aas-1")] == ["sm-1"]
        assert _ids(repository.get_submodels()) == ["sm-1", "sm-2"]

    def test_update_standalone_submodel(self, repository, make_submodel):
        repository.add_submodel(make_submodel("sm-1"))

        repository.update_submodel("sm-1", make_submodel("sm-1", id_short="updated"))

        assert repository.get_submodel("sm-1").id_short == "updated"

    def test_scoped_update_moves_entry_to_end(self, repository, make_shell, make_submodel):
        repository.create_shell(make_shell("S1", [make_submodel("M1"), make_submodel("M2")]))

        repository.update_submodel("M1", make_submodel("M1", id_short="updated"), "S1")

        nested = repository.get_submodels_of_shell("S1")
        assert [s.id for s in nested] == ["M2", "M1"]
        assert nested[1].id_short == "updated"
        assert repository.get_submodel("M1").id_short == "updated"

    def test_unscoped_update_of_nested_submodel_keeps_owner(self, repository, make_shell, make_submodel):
        repository.create_shell(make_shell("S1", [make_submodel("M1")]))

        repository.update_submodel("M1", make_submodel("M1-new"))

        assert [s.id for s in repository.get_submodels_of_shell("S1")] == ["M1-new"]
        assert _ids(repository.get_submodels()) == ["M1-new"]

    def test_update_submodel_to_taken_id_changes_nothing(self, repository, make_submodel):
        repository.add_submodel(make_submodel("sm-1"))
        repository.add_submodel(make_submodel("sm-2"))

        with pytest.raises(ResourceAlreadyExistsError):
            repository.update_submodel("sm-1", make_submodel("sm-2"))

        assert _ids(repository.get_submodels()) == ["sm-1", "sm-2"]


class TestScenario:
    """End-to-end walk through the registry lifecycle"""

    def test_lifecycle(self, repository, make_shell, make_submodel):
        repository.create_shell(make_shell("aas-1"))

        with pytest.raises(ResourceAlreadyExistsError):
            repository.create_shell(make_shell("aas-1"))

        repository.add_submodel(make_submodel("sm-1"), "aas-1")
        assert repository.get_submodel("sm-1", "aas-1").id == "sm-1"
        assert repository.get_submodel("sm-1").id == "sm-1"

        repository.delete_shell("aas-1")

        with pytest.raises(ResourceNotFoundError):
            repository.get_submodel("sm-1")
        with pytest.raises(ResourceNotFoundError):
            repository.get_shell("aas-1")
