"""
Shared test fixtures for the oPOSSUM test suite.
"""

import tempfile
from pathlib import Path

import numpy as np
import pytest

from opossum.core.counts import CountsTable
from opossum.core.results import CombinedResultSet, ScoreResult
from opossum.core.values import ValuesTable

TF_IDS = ["MA0001", "MA0002", "MA0003"]


# ============================================================================
# Counts tables
# ============================================================================


@pytest.fixture
def tf_ids():
    return list(TF_IDS)


@pytest.fixture
def tf_widths():
    """Profile widths for the fixture TFs."""
    return {"MA0001": 6, "MA0002": 8, "MA0003": 10}


@pytest.fixture
def background_counts():
    """Ten background genes.

    MA0001: 3 genes with 1 site each; MA0002: 1 gene with 4 sites;
    MA0003: never seen.
    """
    counts = CountsTable(entity_ids=[f"bg{i}" for i in range(1, 11)], tf_ids=TF_IDS)
    for gene in ("bg1", "bg2", "bg3"):
        counts.set_count(gene, "MA0001", 1)
    counts.set_count("bg1", "MA0002", 4)
    return counts


@pytest.fixture
def target_counts():
    """Five target genes.

    MA0001: 4 genes with 2 sites each; MA0002: 1 gene with 1 site;
    MA0003: 1 gene with 1 site.
    """
    counts = CountsTable(entity_ids=[f"t{i}" for i in range(1, 6)], tf_ids=TF_IDS)
    for gene in ("t1", "t2", "t3", "t4"):
        counts.set_count(gene, "MA0001", 2)
    counts.set_count("t1", "MA0002", 1)
    counts.set_count("t2", "MA0003", 1)
    return counts


@pytest.fixture
def bg_total_length():
    return 20000


@pytest.fixture
def t_total_length():
    return 5000


# ============================================================================
# Values tables
# ============================================================================


@pytest.fixture
def background_values():
    """Site distances spread over [-500, 500] for MA0001 and MA0002."""
    rng = np.random.default_rng(42)
    values = ValuesTable(entity_ids=[f"bg{i}" for i in range(1, 11)], tf_ids=TF_IDS)
    for gene in values.entity_ids:
        for v in rng.uniform(-500, 500, 10):
            values.append_value(gene, "MA0001", float(v))
        for v in rng.uniform(-500, 500, 5):
            values.append_value(gene, "MA0002", float(v))
    return values


@pytest.fixture
def target_values():
    """MA0001 sites clustered near 0; MA0002 spread; MA0003 only in the target."""
    rng = np.random.default_rng(7)
    values = ValuesTable(entity_ids=[f"t{i}" for i in range(1, 6)], tf_ids=TF_IDS)
    for gene in values.entity_ids:
        for v in rng.normal(0, 20, 10):
            values.append_value(gene, "MA0001", float(v))
        for v in rng.uniform(-500, 500, 5):
            values.append_value(gene, "MA0002", float(v))
    values.append_value("t1", "MA0003", 12.0)
    return values


# ============================================================================
# Result sets
# ============================================================================


@pytest.fixture
def zscore_result_set():
    """Twenty results with distinct Z-scores, TF1..TF20 scoring 0.5..10."""
    results = CombinedResultSet()
    for i in range(1, 21):
        results.add_result(ScoreResult(
            id=f"TF{i}",
            zscore=i * 0.5,
            fisher_score=float(21 - i),
            bg_tfbs_hits=i,
            bg_gene_hits=1,
        ))
    return results


# ============================================================================
# Temporary files
# ============================================================================


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that gets cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_counts_file(temp_dir):
    """A small detail format counts file."""
    path = temp_dir / "counts.txt"
    path.write_text(
        ">TFBS\n"
        "MA0001\t6\n"
        "MA0002\t8\n"
        ">Genes\n"
        "101\t2500\n"
        "102\t3000\n"
        "103\t1500\n"
        ">Counts\n"
        "2\t0\n"
        "0\t0\n"
        "1\t3\n"
    )
    return path
