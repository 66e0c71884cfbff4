# orm_models/variation_objects.py

"""
File: variation_objects.py
Entity classes of the Ensembl variation database. Each class is a plain
VariationRecord registered with its TableSchema; db/models.py maps them.

Example:
    >>> with get_session_context(session_factory) as session:
    ...     repository = VariationRepository(session)
    ...     allele = repository.get(Allele, 1)
    ...     print(allele.to_yaml())
"""

from db.orm_models.variation_record import VariationRecord
from db.schema import variation_schema as schema
from db.schema_registry import variation_registry


@variation_registry.register(schema.ALLELE)
class Allele(VariationRecord):
    """
    A single allele of a variation. Besides the nucleotide(s), or their absence,
    frequency and population information may be present.
    """


@variation_registry.register(schema.ALLELE_GROUP)
class AlleleGroup(VariationRecord):
    """
    A grouping of alleles with tight linkage that are usually present together,
    commonly known as a haplotype or haplotype block.
    """


@variation_registry.register(schema.ALLELE_GROUP_ALLELE)
class AlleleGroupAllele(VariationRecord):
    """
    Connection between alleles and allele groups. Traverse it from AlleleGroup
    to reach the variations of a group.
    """


@variation_registry.register(schema.SAMPLE)
class Sample(VariationRecord):
    """
    A specimen: individuals and populations are both stored as samples.
    """


@variation_registry.register(schema.INDIVIDUAL_POPULATION)
class IndividualPopulation(VariationRecord):
    """Connection between individuals and populations."""


@variation_registry.register(schema.INDIVIDUAL)
class Individual(VariationRecord):
    """
    A single organism. Only its link to Sample is declared; the remaining columns
    must be read from the upstream database (see utils.schema_checker).
    """


@variation_registry.register(schema.INDIVIDUAL_GENOTYPE_MULTIPLE_BP)
class IndividualGenotypeMultipleBp(VariationRecord):
    """Genotype of an individual for a variation spanning several base pairs."""


@variation_registry.register(schema.COMPRESSED_GENOTYPE_SINGLE_BP)
class CompressedGenotypeSingleBp(VariationRecord):
    """Packed single base pair genotypes of an individual along a region."""


@variation_registry.register(schema.READ_COVERAGE)
class ReadCoverage(VariationRecord):
    """A region of a sample covered by resequencing reads at a given level."""


@variation_registry.register(schema.POPULATION)
class Population(VariationRecord):
    """A named group of samples."""


@variation_registry.register(schema.POPULATION_STRUCTURE)
class PopulationStructure(VariationRecord):
    """
    Super/sub population hierarchy. Declared without columns or relationships
    until the upstream definition is settled.
    """


@variation_registry.register(schema.POPULATION_GENOTYPE)
class PopulationGenotype(VariationRecord):
    """Genotype frequency of a variation in a population."""


@variation_registry.register(schema.SAMPLE_SYNONYM)
class SampleSynonym(VariationRecord):
    """An alternative name of a sample, given by a Source."""


@variation_registry.register(schema.SOURCE)
class Source(VariationRecord):
    """
    A provider of variation data such as dbSNP. Most entities point back to the
    source they were imported from.
    """


@variation_registry.register(schema.VARIATION_SYNONYM)
class VariationSynonym(VariationRecord):
    """An alternative identifier of a variation, given by a Source."""


@variation_registry.register(schema.VARIATION_GROUP)
class VariationGroup(VariationRecord):
    """A group of variations that are linked together."""


@variation_registry.register(schema.VARIATION_GROUP_VARIATION)
class VariationGroupVariation(VariationRecord):
    """Connection between variations and variation groups."""


@variation_registry.register(schema.VARIATION_GROUP_FEATURE)
class VariationGroupFeature(VariationRecord):
    """Placement of a variation group on a sequence region."""


@variation_registry.register(schema.FLANKING_SEQUENCE)
class FlankingSequence(VariationRecord):
    """
    Sequence surrounding a variation. When up_seq or down_seq is NULL the sequence
    must be read from the core database using the stored coordinates.
    """


@variation_registry.register(schema.TAGGED_VARIATION_FEATURE)
class TaggedVariationFeature(VariationRecord):
    """Connection between tag variation features and samples."""


@variation_registry.register(schema.HTTAG)
class Httag(VariationRecord):
    """A haplotype tag."""


@variation_registry.register(schema.VARIATION)
class Variation(VariationRecord):
    """A genomic polymorphism such as a SNP, identified by name (e.g. rs number)."""


@variation_registry.register(schema.VARIATION_FEATURE)
class VariationFeature(VariationRecord):
    """A placement of a variation on the genome."""
