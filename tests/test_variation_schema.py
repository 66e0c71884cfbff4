# tests/test_variation_schema.py

"""
Pytest test suite for the schema descriptions and the mapping engine.
"""

import pytest
from sqlalchemy import Integer, MetaData, String, create_engine
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Session

from db.models import INCOMPLETE_ENTITIES, JOIN_ENTITIES, metadata
from db.orm_models.variation_record import VariationRecord
from db.schema.table_schema import (
    Cardinality,
    ColumnSpec,
    TableSchema,
    belongs_to,
    has_many,
    has_one,
    table_name_for,
)
from db.schema_registry import SchemaRegistry, variation_registry
from db.variation_repository import VariationRepository
from utils.exceptions import SchemaDefinitionError

DECLARED_ENTITIES = {
    "Allele", "AlleleGroup", "AlleleGroupAllele", "Sample", "IndividualPopulation", "Individual",
    "IndividualGenotypeMultipleBp", "CompressedGenotypeSingleBp", "ReadCoverage", "Population",
    "PopulationStructure", "PopulationGenotype", "SampleSynonym", "Source", "VariationSynonym",
    "VariationGroup", "VariationGroupVariation", "VariationGroupFeature", "FlankingSequence",
    "TaggedVariationFeature", "Httag",
}

PRIMARY_KEY_OVERRIDES = {
    "Allele": "allele_id",
    "AlleleGroup": "allele_group_id",
    "Sample": "sample_id",
    "PopulationGenotype": "population_genotype_id",
    "SampleSynonym": "sample_synonym_id",
    "Source": "source_id",
    "VariationSynonym": "variation_synonym_id",
    "VariationGroup": "variation_group_id",
    "VariationGroupFeature": "variation_group_feature_id",
    "Httag": "httag_id",
    "Variation": "variation_id",
    "VariationFeature": "variation_feature_id",
}


def test_every_declared_entity_is_registered():
    registered = {schema.entity for schema in variation_registry.schemas()}
    assert DECLARED_ENTITIES <= registered
    assert registered - DECLARED_ENTITIES == {"Variation", "VariationFeature"}


@pytest.mark.parametrize("entity", sorted(DECLARED_ENTITIES | {"Variation", "VariationFeature"}))
def test_primary_key_columns(entity):
    """
    Primary key overrides are respected; every other table uses `id`.
    """
    expected = PRIMARY_KEY_OVERRIDES.get(entity, "id")
    table = variation_registry.table_for(entity)
    assert [column.name for column in table.primary_key.columns] == [expected]


def test_table_names_are_singular_snake_case():
    assert table_name_for("AlleleGroupAllele") == "allele_group_allele"
    assert table_name_for("IndividualGenotypeMultipleBp") == "individual_genotype_multiple_bp"
    assert table_name_for("Httag") == "httag"
    assert "compressed_genotype_single_bp" in metadata.tables


def test_join_and_incomplete_entities():
    assert {cls.__name__ for cls in JOIN_ENTITIES} == {
        "AlleleGroupAllele", "IndividualPopulation", "VariationGroupVariation", "TaggedVariationFeature",
    }
    assert {cls.__name__ for cls in INCOMPLETE_ENTITIES} == {"Individual", "PopulationStructure"}


def test_population_structure_is_a_bare_stub():
    schema = variation_registry.schema_for("PopulationStructure")
    assert schema.relationships == ()
    assert [column.name for column in metadata.tables["population_structure"].columns] == ["id"]


def test_sample_relationship_cardinalities():
    schema = variation_registry.schema_for("Sample")
    cardinalities = {spec.name: spec.cardinality for spec in schema.relationships}
    assert cardinalities == {
        "individual": Cardinality.ONE_TO_ONE,
        "sample_synonym": Cardinality.ONE_TO_ONE,
        "individual_genotype_multiple_bp": Cardinality.ONE_TO_MANY,
        "compressed_genotype_single_bp": Cardinality.ONE_TO_MANY,
        "read_coverage": Cardinality.ONE_TO_MANY,
        "population": Cardinality.ONE_TO_ONE,
        "tagged_variation_features": Cardinality.ONE_TO_MANY,
    }


def test_source_relationships_are_all_one_to_many():
    schema = variation_registry.schema_for("Source")
    assert {spec.name for spec in schema.relationships} == {
        "sample_synonyms", "allele_groups", "variations", "variation_groups", "httags", "variation_synonyms",
    }
    assert all(spec.cardinality is Cardinality.ONE_TO_MANY for spec in schema.relationships)


@pytest.mark.parametrize(
    "table_name, column_name, referenced",
    [
        ("allele", "sample_id", "sample.sample_id"),
        ("allele", "variation_id", "variation.variation_id"),
        ("allele", "population_id", "population.id"),
        ("population", "sample_id", "sample.sample_id"),
        ("individual", "sample_id", "sample.sample_id"),
        ("allele_group_allele", "allele_group_id", "allele_group.allele_group_id"),
        ("tagged_variation_feature", "variation_feature_id", "variation_feature.variation_feature_id"),
        ("variation", "source_id", "source.source_id"),
        ("httag", "variation_group_id", "variation_group.variation_group_id"),
    ],
)
def test_derived_foreign_keys(table_name, column_name, referenced):
    column = metadata.tables[table_name].c[column_name]
    assert [fk.target_fullname for fk in column.foreign_keys] == [referenced]


def test_relationships_never_bypass_join_tables():
    """
    No mapped relationship uses a secondary table: join entities are always a direct hop.
    """
    for entity in variation_registry.entities():
        for relationship in sa_inspect(entity).relationships:
            assert relationship.secondary is None
            assert relationship.viewonly
            assert relationship.lazy == "raise"


def test_map_all_is_idempotent():
    assert variation_registry.is_mapped
    assert variation_registry.map_all() is metadata


def test_foreign_key_name_conventions():
    schema = TableSchema(entity="VariationGroup", primary_key="variation_group_id")
    assert schema.foreign_key_name(belongs_to("source", "Source")) == "source_id"
    assert schema.foreign_key_name(has_one("httag", "Httag")) == "variation_group_id"
    assert schema.foreign_key_name(has_many("httags", "Httag", foreign_key="group_ref")) == "group_ref"


# Validation of hand-written registries
def test_unknown_target_is_rejected():
    schema_registry = SchemaRegistry(MetaData())

    @schema_registry.register(TableSchema(entity="Gadget", relationships=(belongs_to("widget", "Widget"),)))
    class Gadget(VariationRecord):
        pass

    with pytest.raises(SchemaDefinitionError):
        schema_registry.validate()


def test_duplicate_and_misnamed_registration_is_rejected():
    schema_registry = SchemaRegistry(MetaData())
    schema = TableSchema(entity="Gizmo")

    @schema_registry.register(schema)
    class Gizmo(VariationRecord):
        pass

    with pytest.raises(SchemaDefinitionError):
        schema_registry.register(schema)(Gizmo)

    with pytest.raises(SchemaDefinitionError):
        @schema_registry.register(TableSchema(entity="Sprocket"))
        class Cog(VariationRecord):
            pass


def test_join_entity_must_link_two_entities():
    schema_registry = SchemaRegistry(MetaData())

    @schema_registry.register(TableSchema(entity="Left"))
    class Left(VariationRecord):
        pass

    @schema_registry.register(
        TableSchema(entity="Bridge", relationships=(belongs_to("left", "Left"),), is_join=True)
    )
    class Bridge(VariationRecord):
        pass

    with pytest.raises(SchemaDefinitionError):
        schema_registry.validate()


def test_conflicting_foreign_keys_are_rejected():
    schema_registry = SchemaRegistry(MetaData())

    @schema_registry.register(TableSchema(entity="Part", relationships=(belongs_to("box", "Box"),)))
    class Part(VariationRecord):
        pass

    @schema_registry.register(TableSchema(entity="Box"))
    class Box(VariationRecord):
        pass

    # Crate claims part.box_id as a reference to crate.id
    @schema_registry.register(TableSchema(entity="Crate", relationships=(has_many("parts", "Part", "box_id"),)))
    class Crate(VariationRecord):
        pass

    with pytest.raises(SchemaDefinitionError):
        schema_registry.validate()


def test_incomplete_entity_cannot_declare_columns():
    schema_registry = SchemaRegistry(MetaData())

    @schema_registry.register(
        TableSchema(entity="Draft", columns=(ColumnSpec("title", String(20)),), incomplete=True)
    )
    class Draft(VariationRecord):
        pass

    with pytest.raises(SchemaDefinitionError):
        schema_registry.validate()


def test_relationship_cannot_shadow_column():
    schema_registry = SchemaRegistry(MetaData())

    @schema_registry.register(TableSchema(entity="Owner"))
    class Owner(VariationRecord):
        pass

    @schema_registry.register(
        TableSchema(
            entity="Pet",
            columns=(ColumnSpec("owner", Integer),),
            relationships=(belongs_to("owner", "Owner"),),
        )
    )
    class Pet(VariationRecord):
        pass

    with pytest.raises(SchemaDefinitionError):
        schema_registry.validate()


def test_generic_engine_maps_any_registered_schema():
    """
    The same engine maps an unrelated pair of entities and supports traversal.
    """
    schema_registry = SchemaRegistry(MetaData())

    @schema_registry.register(
        TableSchema(
            entity="Shelf",
            primary_key="shelf_id",
            columns=(ColumnSpec("label", String(20)),),
            relationships=(has_many("books", "Book"),),
        )
    )
    class Shelf(VariationRecord):
        pass

    @schema_registry.register(
        TableSchema(entity="Book", columns=(ColumnSpec("title", String(50)),),
                    relationships=(belongs_to("shelf", "Shelf"),))
    )
    class Book(VariationRecord):
        pass

    library_metadata = schema_registry.map_all()
    assert [column.name for column in library_metadata.tables["book"].columns] == ["id", "title", "shelf_id"]

    engine = create_engine("sqlite://")
    library_metadata.create_all(engine)
    with engine.begin() as conn:
        conn.execute(library_metadata.tables["shelf"].insert(), [{"shelf_id": 1, "label": "A"}])
        conn.execute(
            library_metadata.tables["book"].insert(),
            [{"id": 1, "title": "Genomes", "shelf_id": 1}, {"id": 2, "title": "Alleles", "shelf_id": 1}],
        )

    with Session(engine) as session:
        repository = VariationRepository(session, schema_registry)
        shelf = repository.get(Shelf, 1)
        books = repository.related(shelf, "books").force()
        assert [book.title for book in books] == ["Genomes", "Alleles"]
        assert repository.related(books[0], "shelf").force() is shelf

    with pytest.raises(SchemaDefinitionError):
        @schema_registry.register(TableSchema(entity="Lamp"))
        class Lamp(VariationRecord):
            pass
    engine.dispose()
