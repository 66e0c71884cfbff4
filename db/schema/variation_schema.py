"""
This module declares the schema of the Ensembl variation database tables.

Each entity is described by a `TableSchema`: its primary key (when it is not the
default `id`), its data columns and its relationships. Foreign key columns are not
listed; the mapping engine derives them from the relationships.

Join tables (AlleleGroupAllele, IndividualPopulation, VariationGroupVariation,
TaggedVariationFeature) only link two other entities and are never bypassed:
reaching an Allele group's variations always goes through AlleleGroupAllele.

Individual and PopulationStructure are marked incomplete. Their upstream columns
are not declared here; `utils.schema_checker` reports them from a live database.
"""

from sqlalchemy import Float, Integer, LargeBinary, String, Text

from db.schema.table_schema import ColumnSpec, TableSchema, belongs_to, has_many, has_one

ALLELE = TableSchema(
    entity="Allele",
    primary_key="allele_id",
    columns=(
        ColumnSpec("allele", Text, doc="Nucleotide(s) of the allele, '-' for a deletion."),
        ColumnSpec("frequency", Float, doc="Allele frequency in the sampled population."),
    ),
    relationships=(
        belongs_to("sample", "Sample"),
        belongs_to("variation", "Variation"),
        belongs_to("population", "Population"),
    ),
    description="A single allele of a variation, with optional frequency information.",
)

ALLELE_GROUP = TableSchema(
    entity="AlleleGroup",
    primary_key="allele_group_id",
    columns=(
        ColumnSpec("name", String(255)),
        ColumnSpec("frequency", Float),
    ),
    relationships=(
        belongs_to("variation_group", "VariationGroup"),
        belongs_to("source", "Source"),
        belongs_to("sample", "Sample"),
        # Upstream the key lives on allele_group_allele, so this is has_one rather than belongs_to
        has_one("allele_group_allele", "AlleleGroupAllele"),
    ),
    description="A haplotype: alleles in tight linkage that are usually inherited together.",
)

ALLELE_GROUP_ALLELE = TableSchema(
    entity="AlleleGroupAllele",
    columns=(ColumnSpec("allele", String(255)),),
    relationships=(
        belongs_to("variation", "Variation"),
        belongs_to("allele_group", "AlleleGroup"),
    ),
    is_join=True,
    description="Links alleles of a variation to an allele group.",
)

SAMPLE = TableSchema(
    entity="Sample",
    primary_key="sample_id",
    columns=(
        ColumnSpec("name", String(255)),
        ColumnSpec("size", Integer),
        ColumnSpec("description", Text),
    ),
    relationships=(
        has_one("individual", "Individual"),
        has_one("sample_synonym", "SampleSynonym"),
        has_many("individual_genotype_multiple_bp", "IndividualGenotypeMultipleBp"),
        has_many("compressed_genotype_single_bp", "CompressedGenotypeSingleBp"),
        has_many("read_coverage", "ReadCoverage"),
        has_one("population", "Population"),
        has_many("tagged_variation_features", "TaggedVariationFeature"),
    ),
    description="A specimen, either an individual or a population.",
)

INDIVIDUAL_POPULATION = TableSchema(
    entity="IndividualPopulation",
    relationships=(
        belongs_to("individual", "Individual"),
        belongs_to("population", "Population"),
    ),
    is_join=True,
    description="Links individuals to the populations they belong to.",
)

INDIVIDUAL = TableSchema(
    entity="Individual",
    relationships=(belongs_to("sample", "Sample"),),
    incomplete=True,
    description="A single organism from which samples were drawn.",
)

INDIVIDUAL_GENOTYPE_MULTIPLE_BP = TableSchema(
    entity="IndividualGenotypeMultipleBp",
    columns=(
        ColumnSpec("allele_1", String(255)),
        ColumnSpec("allele_2", String(255)),
    ),
    relationships=(
        belongs_to("sample", "Sample"),
        belongs_to("variation", "Variation"),
    ),
    description="Genotype of an individual for variations spanning more than one base pair.",
)

COMPRESSED_GENOTYPE_SINGLE_BP = TableSchema(
    entity="CompressedGenotypeSingleBp",
    columns=(
        ColumnSpec("seq_region_id", Integer, nullable=False),
        ColumnSpec("seq_region_start", Integer, nullable=False),
        ColumnSpec("genotypes", LargeBinary, doc="Packed genotypes for consecutive single-bp variations."),
    ),
    relationships=(belongs_to("sample", "Sample"),),
    description="Compressed single base pair genotypes of an individual along a sequence region.",
)

READ_COVERAGE = TableSchema(
    entity="ReadCoverage",
    columns=(
        ColumnSpec("seq_region_id", Integer, nullable=False),
        ColumnSpec("seq_region_start", Integer, nullable=False),
        ColumnSpec("seq_region_end", Integer, nullable=False),
        ColumnSpec("level", Integer, doc="Minimum read depth for the region."),
    ),
    relationships=(belongs_to("sample", "Sample"),),
    description="Regions of a sample covered by resequencing reads.",
)

POPULATION = TableSchema(
    entity="Population",
    columns=(ColumnSpec("is_strain", Integer, doc="1 when the population is a strain."),),
    relationships=(belongs_to("sample", "Sample"),),
    description="A named group of samples.",
)

POPULATION_STRUCTURE = TableSchema(
    entity="PopulationStructure",
    incomplete=True,
    description="Hierarchy of super- and sub-populations.",
)

POPULATION_GENOTYPE = TableSchema(
    entity="PopulationGenotype",
    primary_key="population_genotype_id",
    columns=(
        ColumnSpec("allele_1", String(255)),
        ColumnSpec("allele_2", String(255)),
        ColumnSpec("frequency", Float),
    ),
    relationships=(
        belongs_to("variation", "Variation"),
        belongs_to("population", "Population"),
    ),
    description="Genotype frequency of a variation within a population.",
)

SAMPLE_SYNONYM = TableSchema(
    entity="SampleSynonym",
    primary_key="sample_synonym_id",
    columns=(ColumnSpec("name", String(255)),),
    relationships=(
        belongs_to("source", "Source"),
        belongs_to("sample", "Sample"),
        belongs_to("population", "Population"),
    ),
    description="An alternative name of a sample given by another source.",
)

SOURCE = TableSchema(
    entity="Source",
    primary_key="source_id",
    columns=(
        ColumnSpec("name", String(255), nullable=False),
        ColumnSpec("version", Integer),
        ColumnSpec("description", String(255)),
    ),
    relationships=(
        has_many("sample_synonyms", "SampleSynonym"),
        has_many("allele_groups", "AlleleGroup"),
        has_many("variations", "Variation"),
        has_many("variation_groups", "VariationGroup"),
        has_many("httags", "Httag"),
        has_many("variation_synonyms", "VariationSynonym"),
    ),
    description="A data source such as dbSNP.",
)

VARIATION_SYNONYM = TableSchema(
    entity="VariationSynonym",
    primary_key="variation_synonym_id",
    columns=(
        ColumnSpec("name", String(255)),
        ColumnSpec("moltype", String(50)),
    ),
    relationships=(
        belongs_to("variation", "Variation"),
        belongs_to("source", "Source"),
    ),
    description="An alternative identifier of a variation given by another source.",
)

VARIATION_GROUP = TableSchema(
    entity="VariationGroup",
    primary_key="variation_group_id",
    columns=(
        ColumnSpec("name", String(255)),
        ColumnSpec("type", String(16), doc="Either 'haplotype' or 'tag'."),
    ),
    relationships=(
        belongs_to("source", "Source"),
        has_one("variation_group_variation", "VariationGroupVariation"),
        has_one("httag", "Httag"),
        has_one("variation_group_feature", "VariationGroupFeature"),
        has_one("allele_group", "AlleleGroup"),
    ),
    description="A group of variations that are linked together.",
)

VARIATION_GROUP_VARIATION = TableSchema(
    entity="VariationGroupVariation",
    relationships=(
        belongs_to("variation", "Variation"),
        belongs_to("variation_group", "VariationGroup"),
    ),
    is_join=True,
    description="Links variations to variation groups.",
)

VARIATION_GROUP_FEATURE = TableSchema(
    entity="VariationGroupFeature",
    primary_key="variation_group_feature_id",
    columns=(
        ColumnSpec("seq_region_id", Integer, nullable=False),
        ColumnSpec("seq_region_start", Integer, nullable=False),
        ColumnSpec("seq_region_end", Integer, nullable=False),
        ColumnSpec("seq_region_strand", Integer, nullable=False),
        ColumnSpec("variation_group_name", String(255)),
    ),
    relationships=(belongs_to("variation_group", "VariationGroup"),),
    description="Genomic placement of a variation group.",
)

FLANKING_SEQUENCE = TableSchema(
    entity="FlankingSequence",
    columns=(
        ColumnSpec("up_seq", Text),
        ColumnSpec("down_seq", Text),
        ColumnSpec("up_seq_region_start", Integer),
        ColumnSpec("up_seq_region_end", Integer),
        ColumnSpec("down_seq_region_start", Integer),
        ColumnSpec("down_seq_region_end", Integer),
        ColumnSpec("seq_region_id", Integer),
        ColumnSpec("seq_region_strand", Integer),
    ),
    relationships=(belongs_to("variation", "Variation"),),
    description="Upstream and downstream sequence around a variation.",
)

TAGGED_VARIATION_FEATURE = TableSchema(
    entity="TaggedVariationFeature",
    relationships=(
        belongs_to("variation_feature", "VariationFeature"),
        belongs_to("sample", "Sample"),
    ),
    is_join=True,
    description="Links tag variation features to the samples in which they were tagged.",
)

HTTAG = TableSchema(
    entity="Httag",
    primary_key="httag_id",
    columns=(ColumnSpec("name", String(255)),),
    relationships=(
        belongs_to("variation_group", "VariationGroup"),
        belongs_to("source", "Source"),
    ),
    description="A haplotype tag: the variations that identify a haplotype.",
)

# Entities referenced by the tables above but defined in the core of the variation schema

VARIATION = TableSchema(
    entity="Variation",
    primary_key="variation_id",
    columns=(
        ColumnSpec("name", String(255), doc="Identifier such as an rs number."),
        ColumnSpec("validation_status", String(255)),
        ColumnSpec("ancestral_allele", Text),
    ),
    relationships=(
        belongs_to("source", "Source"),
        has_many("alleles", "Allele"),
        has_many("variation_synonyms", "VariationSynonym"),
        has_one("flanking_sequence", "FlankingSequence"),
        has_many("population_genotypes", "PopulationGenotype"),
        has_many("variation_features", "VariationFeature"),
    ),
    description="A genomic polymorphism such as a SNP.",
)

VARIATION_FEATURE = TableSchema(
    entity="VariationFeature",
    primary_key="variation_feature_id",
    columns=(
        ColumnSpec("seq_region_id", Integer, nullable=False),
        ColumnSpec("seq_region_start", Integer, nullable=False),
        ColumnSpec("seq_region_end", Integer, nullable=False),
        ColumnSpec("seq_region_strand", Integer, nullable=False),
        ColumnSpec("allele_string", Text),
        ColumnSpec("variation_name", String(255)),
        ColumnSpec("map_weight", Integer),
        ColumnSpec("validation_status", String(255)),
        ColumnSpec("consequence_type", String(255)),
    ),
    relationships=(
        belongs_to("variation", "Variation"),
        belongs_to("source", "Source"),
    ),
    description="Placement of a variation on a sequence region.",
)

VARIATION_TABLES = (
    ALLELE,
    ALLELE_GROUP,
    ALLELE_GROUP_ALLELE,
    SAMPLE,
    INDIVIDUAL_POPULATION,
    INDIVIDUAL,
    INDIVIDUAL_GENOTYPE_MULTIPLE_BP,
    COMPRESSED_GENOTYPE_SINGLE_BP,
    READ_COVERAGE,
    POPULATION,
    POPULATION_STRUCTURE,
    POPULATION_GENOTYPE,
    SAMPLE_SYNONYM,
    SOURCE,
    VARIATION_SYNONYM,
    VARIATION_GROUP,
    VARIATION_GROUP_VARIATION,
    VARIATION_GROUP_FEATURE,
    FLANKING_SEQUENCE,
    TAGGED_VARIATION_FEATURE,
    HTTAG,
    VARIATION,
    VARIATION_FEATURE,
)
