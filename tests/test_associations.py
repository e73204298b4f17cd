"""Tests for the Association Resolver."""

import asyncio

import pytest

from cmr_graph.associations.resolver import AssociationResolver
from cmr_graph.datasource.concepts import ConceptDataSource
from cmr_graph.keymaps.registry import load_key_map
from cmr_graph.models.keymap import Relation
from cmr_graph.query.selection import FieldSelection


def _resolver(client) -> AssociationResolver:
    return AssociationResolver(ConceptDataSource(client))


def _selection(name: str, *fields: str, **arguments) -> FieldSelection:
    return FieldSelection(
        name=name,
        arguments=arguments,
        selections=[FieldSelection(name=f) for f in fields],
    )


def _relation(concept_type: str, name: str) -> Relation:
    return load_key_map(concept_type).relations[name]


class TestAssociationKind:
    def test_no_associations_block_makes_no_call(self, stub, client):
        parent = {"conceptId": "C100000-EDSC"}

        result = asyncio.run(_resolver(client).resolve(
            parent, _relation("collection", "services"), _selection("services", "conceptId"),
        ))

        assert result == []
        assert stub.requests == []

    def test_other_association_types_make_no_call(self, stub, client):
        parent = {"conceptId": "C100000-EDSC", "associations": {"variables": ["V100000-EDSC"]}}

        result = asyncio.run(_resolver(client).resolve(
            parent, _relation("collection", "services"), _selection("services", "conceptId"),
        ))

        assert result == []
        assert stub.requests == []

    def test_empty_id_list_makes_no_call(self, stub, client):
        parent = {"conceptId": "C100000-EDSC", "associations": {"services": []}}

        result = asyncio.run(_resolver(client).resolve(
            parent, _relation("collection", "services"), _selection("services", "conceptId"),
        ))

        assert result == []
        assert stub.requests == []

    def test_one_batched_call_sized_to_the_ids(self, stub, client):
        stub.add(
            "POST", r"/search/services\.json$",
            body="concept_id%5B%5D=S100000-EDSC&concept_id%5B%5D=S100001-EDSC&page_size=2",
            json={"items": [{"concept_id": "S100001-EDSC"}, {"concept_id": "S100000-EDSC"}]},
        )
        parent = {
            "conceptId": "C100000-EDSC",
            "associations": {"services": ["S100000-EDSC", "S100001-EDSC"]},
        }

        result = asyncio.run(_resolver(client).resolve(
            parent, _relation("collection", "services"), _selection("services", "conceptId"),
        ))

        assert len(stub.requests) == 1
        # Upstream order is kept, not the association order
        assert [r["conceptId"] for r in result] == ["S100001-EDSC", "S100000-EDSC"]

    def test_batched_filter_wins_over_caller_arguments(self, stub, client):
        stub.add("POST", r"/search/variables\.json$", json={"items": [{"concept_id": "V1-EDSC"}]})
        parent = {"conceptId": "C1-EDSC", "associations": {"variables": ["V1-EDSC"]}}

        asyncio.run(_resolver(client).resolve(
            parent,
            _relation("collection", "variables"),
            _selection("variables", "conceptId", limit=50, conceptId="V9-EDSC", provider="EDSC"),
        ))

        assert stub.bodies(r"variables\.json$") == [
            "concept_id%5B%5D=V1-EDSC&page_size=1&provider=EDSC"
        ]


class TestReferenceKind:
    def test_reference_fetches_single_record(self, stub, client):
        stub.add(
            "POST", r"/search/collections\.json$",
            body="concept_id=C100000-EDSC&page_size=20",
            json={"feed": {"entry": [{"id": "C100000-EDSC"}]}},
        )
        parent = {"conceptId": "SUB100000-EDSC", "collectionConceptId": "C100000-EDSC"}

        result = asyncio.run(_resolver(client).resolve(
            parent, _relation("subscription", "collection"), _selection("collection", "conceptId"),
        ))

        assert result == {"conceptId": "C100000-EDSC"}

    def test_reference_without_id_makes_no_call(self, stub, client):
        result = asyncio.run(_resolver(client).resolve(
            {"conceptId": "SUB100000-EDSC"},
            _relation("subscription", "collection"),
            _selection("collection", "conceptId"),
        ))

        assert result is None
        assert stub.requests == []


class TestChildrenKind:
    def test_children_filtered_by_parent_id(self, stub, client):
        stub.add(
            "POST", r"/search/granules\.json$",
            body="collection_concept_id=C100000-EDSC&page_size=20",
            json={"feed": {"entry": [{"id": "G100000-EDSC"}, {"id": "G100001-EDSC"}]}},
        )

        result = asyncio.run(_resolver(client).resolve(
            {"conceptId": "C100000-EDSC"},
            _relation("collection", "granules"),
            _selection("granules", "conceptId"),
        ))

        assert [r["conceptId"] for r in result] == ["G100000-EDSC", "G100001-EDSC"]

    def test_caller_page_size_alias_replaces_default(self, stub, client):
        stub.add(
            "POST", r"/search/granules\.json$",
            body="collection_concept_id=C100000-EDSC&page_size=5",
            json={"feed": {"entry": [{"id": "G100000-EDSC"}]}},
        )

        asyncio.run(_resolver(client).resolve(
            {"conceptId": "C100000-EDSC"},
            _relation("collection", "granules"),
            _selection("granules", "conceptId", first=5),
        ))

        assert stub.bodies(r"granules\.json$") == ["collection_concept_id=C100000-EDSC&page_size=5"]


class TestUnknownKind:
    def test_unknown_relation_kind(self, client):
        relation = Relation(kind="sideways", conceptType="tool")

        with pytest.raises(ValueError):
            asyncio.run(_resolver(client).resolve({"conceptId": "C1"}, relation, _selection("tools")))
