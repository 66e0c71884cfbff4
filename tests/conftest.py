# tests/conftest.py
import os
import sys

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

# Add the parent directory to the system path to ensure correct module import
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from config.db_config import create_session_factory, get_session_context  # noqa: E402
from db.models import metadata  # noqa: E402
from db.variation_repository import VariationRepository  # noqa: E402

VARIATION_ENV_VARS = (
    "VARIATION_DB_URL",
    "VARIATION_DB_DIALECT",
    "VARIATION_DB_USER",
    "VARIATION_DB_PASSWORD",
    "VARIATION_DB_HOST",
    "VARIATION_DB_PORT",
    "VARIATION_DB_NAME",
    "VARIATION_SPECIES",
    "VARIATION_RELEASE",
    "VARIATION_ASSEMBLY",
    "VARIATION_DB_POOL_SIZE",
    "VARIATION_DB_MAX_OVERFLOW",
    "VARIATION_DB_POOL_TIMEOUT",
    "VARIATION_DB_POOL_RECYCLE",
    "DEBUG",
)


@pytest.fixture
def clean_env(monkeypatch):
    """
    Removes every variation setting from the environment and restores the
    original state afterwards, including values loaded from .env files.
    """
    for name in VARIATION_ENV_VARS:
        monkeypatch.setenv(name, "placeholder")
        monkeypatch.delenv(name)
    return monkeypatch


@pytest.fixture
def engine():
    """
    In-memory SQLite database holding every declared variation table.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def insert_rows(engine):
    """
    Inserts rows through SQLAlchemy Core, the way upstream loaders populate the database.
    """
    def _insert(table_name, *rows):
        with engine.begin() as conn:
            conn.execute(metadata.tables[table_name].insert(), list(rows))
    return _insert


@pytest.fixture
def variation_data(insert_rows):
    """
    A small, consistent slice of a variation database.
    """
    insert_rows(
        "source",
        {"source_id": 1, "name": "dbSNP", "version": 128, "description": "NCBI dbSNP"},
        {"source_id": 2, "name": "Affy GeneChip", "version": None, "description": None},
    )
    insert_rows(
        "sample",
        {"sample_id": 10, "name": "CEU", "size": 90, "description": "Utah residents"},
        {"sample_id": 11, "name": "NA12878", "size": 1, "description": "CEPH individual"},
        {"sample_id": 12, "name": "YRI", "size": 90, "description": "Yoruba in Ibadan"},
    )
    insert_rows(
        "population",
        {"id": 5, "sample_id": 10, "is_strain": 0},
        {"id": 6, "sample_id": 12, "is_strain": 0},
    )
    insert_rows("individual", {"id": 1, "sample_id": 11})
    insert_rows("individual_population", {"id": 1, "individual_id": 1, "population_id": 5})
    insert_rows(
        "variation",
        {"variation_id": 100, "name": "rs123", "source_id": 1, "validation_status": "cluster"},
        {"variation_id": 101, "name": "rs456", "source_id": 1, "validation_status": None},
        {"variation_id": 102, "name": "SNP_A-8575125", "source_id": 2, "validation_status": None},
    )
    insert_rows(
        "allele",
        {"allele_id": 1, "variation_id": 100, "allele": "A", "frequency": 0.6, "sample_id": 10, "population_id": 5},
        {"allele_id": 2, "variation_id": 100, "allele": "G", "frequency": 0.4, "sample_id": 10, "population_id": 5},
        {"allele_id": 3, "variation_id": 101, "allele": "T", "frequency": None, "sample_id": None, "population_id": None},
        {"allele_id": 4, "variation_id": 101, "allele": "C", "frequency": None, "sample_id": 12, "population_id": 999},
    )
    insert_rows("variation_synonym", {"variation_synonym_id": 1, "variation_id": 100, "source_id": 2, "name": "SNP_A-1"})
    insert_rows(
        "sample_synonym",
        {"sample_synonym_id": 1, "sample_id": 11, "source_id": 1, "population_id": 5, "name": "NA12878-syn"},
    )
    insert_rows("variation_group", {"variation_group_id": 20, "name": "HAP1", "source_id": 1, "type": "haplotype"})
    insert_rows(
        "variation_group_variation",
        {"id": 1, "variation_id": 100, "variation_group_id": 20},
        {"id": 2, "variation_id": 101, "variation_group_id": 20},
    )
    insert_rows(
        "allele_group",
        {"allele_group_id": 30, "variation_group_id": 20, "source_id": 1, "sample_id": 10, "name": "HAP1-A"},
    )
    insert_rows("allele_group_allele", {"id": 1, "allele_group_id": 30, "variation_id": 100, "allele": "A"})
    insert_rows("httag", {"httag_id": 40, "variation_group_id": 20, "source_id": 1, "name": "tag1"})
    insert_rows(
        "variation_group_feature",
        {"variation_group_feature_id": 50, "variation_group_id": 20, "seq_region_id": 1,
         "seq_region_start": 100, "seq_region_end": 200, "seq_region_strand": 1, "variation_group_name": "HAP1"},
    )
    insert_rows(
        "variation_feature",
        {"variation_feature_id": 60, "variation_id": 100, "source_id": 1, "seq_region_id": 1,
         "seq_region_start": 150, "seq_region_end": 150, "seq_region_strand": 1,
         "allele_string": "A/G", "variation_name": "rs123", "map_weight": 1},
    )
    insert_rows("tagged_variation_feature", {"id": 1, "variation_feature_id": 60, "sample_id": 10})
    insert_rows("flanking_sequence", {"id": 1, "variation_id": 100, "up_seq": "ACGT", "down_seq": "TTGA"})
    insert_rows(
        "population_genotype",
        {"population_genotype_id": 70, "variation_id": 100, "population_id": 5,
         "allele_1": "A", "allele_2": "G", "frequency": 0.5},
    )
    insert_rows(
        "individual_genotype_multiple_bp",
        {"id": 1, "sample_id": 11, "variation_id": 101, "allele_1": "AT", "allele_2": "AT"},
        {"id": 2, "sample_id": 11, "variation_id": 102, "allele_1": "-", "allele_2": "GC"},
    )
    insert_rows(
        "compressed_genotype_single_bp",
        {"id": 1, "sample_id": 11, "seq_region_id": 1, "seq_region_start": 1000, "genotypes": b"\x01\x02"},
    )
    insert_rows(
        "read_coverage",
        {"id": 1, "sample_id": 11, "seq_region_id": 1, "seq_region_start": 1, "seq_region_end": 500, "level": 1},
        {"id": 2, "sample_id": 11, "seq_region_id": 2, "seq_region_start": 1, "seq_region_end": 800, "level": 2},
    )


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def session(session_factory):
    with get_session_context(session_factory) as session:
        yield session


@pytest.fixture
def repository(session):
    return VariationRepository(session)
