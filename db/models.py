# db/models.py
"""
This module ensures all variation entities are registered and mapped onto the shared
metadata, so they can be used by the repository, the schema checker and the tests.
"""

from db.schema_registry import variation_registry

# Import all entity classes to register them with the registry
from db.orm_models.variation_objects import (
    Allele,
    AlleleGroup,
    AlleleGroupAllele,
    CompressedGenotypeSingleBp,
    FlankingSequence,
    Httag,
    Individual,
    IndividualGenotypeMultipleBp,
    IndividualPopulation,
    Population,
    PopulationGenotype,
    PopulationStructure,
    ReadCoverage,
    Sample,
    SampleSynonym,
    Source,
    TaggedVariationFeature,
    Variation,
    VariationFeature,
    VariationGroup,
    VariationGroupFeature,
    VariationGroupVariation,
    VariationSynonym,
)

metadata = variation_registry.map_all()

JOIN_ENTITIES = tuple(
    variation_registry.entity(schema.entity) for schema in variation_registry.schemas() if schema.is_join
)
INCOMPLETE_ENTITIES = tuple(
    variation_registry.entity(schema.entity) for schema in variation_registry.schemas() if schema.incomplete
)
