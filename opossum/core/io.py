"""
Counts, values and results file I/O.

Counts are stored in a sectioned "detail" format::

    >TFBS
    MA0001.1    12
    >Genes
    gene_1      2500
    >Counts
    0   3   1
    ...

i.e. TF IDs with their profile widths, entity IDs with their searched
sequence lengths, then one tab-delimited row of counts per entity in the
>Genes order. Values are tab-delimited ``entity_id, tf_id, value`` rows.
Result lists are written as tab-delimited tables for reporting.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Hashable, List, Mapping, Optional, Union

import pandas as pd

from .counts import CountsTable
from .exceptions import CountsFileFormatError, ValuesFileFormatError
from .results import ScoreResult
from .values import ValuesTable

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

VALUES_COLUMNS = ["entity_id", "tf_id", "value"]

NA = "N/A"


@dataclass
class CountsFile:
    """Contents of a detail format counts file."""
    counts: CountsTable
    tf_widths: Dict[Hashable, int] = field(default_factory=dict)
    entity_lengths: Dict[Hashable, int] = field(default_factory=dict)

    @property
    def total_length(self) -> int:
        return sum(self.entity_lengths.values())


# =============================================================================
# Counts
# =============================================================================

def _parse_id_number(line: str, section: str, line_no: int):
    parts = line.split()
    if len(parts) != 2 or not parts[1].isdigit():
        raise CountsFileFormatError(f"Error reading {section} at line {line_no}: '{line}'")
    return parts[0], int(parts[1])


def read_counts(path: PathLike) -> CountsFile:
    """
    Read a detail format counts file.

    Raises
    ------
    CountsFileFormatError
        On a malformed line, a count row of the wrong length or a wrong
        number of count rows.
    """
    tf_widths: Dict[str, int] = {}
    entity_lengths: Dict[str, int] = {}
    rows: List[List[int]] = []

    section = None
    with open(path, "r") as f:
        for line_no, raw in enumerate(f, start=1):
            line = raw.rstrip("\n")
            if not line.strip():
                continue

            if line.startswith(">TFBS"):
                section = "TFBS"
            elif line.startswith(">Genes"):
                section = "Genes"
            elif line.startswith(">Counts"):
                section = "Counts"
            elif section == "TFBS":
                tf_id, width = _parse_id_number(line, "TFBSs", line_no)
                tf_widths[tf_id] = width
            elif section == "Genes":
                entity_id, length = _parse_id_number(line, "genes", line_no)
                entity_lengths[entity_id] = length
            elif section == "Counts":
                if not tf_widths:
                    raise CountsFileFormatError("No TFBSs read before counts")
                if not entity_lengths:
                    raise CountsFileFormatError("No genes read before counts")

                values = line.strip().split("\t")
                entity_ids = list(entity_lengths)
                if len(rows) >= len(entity_ids):
                    raise CountsFileFormatError(
                        f"More count rows than genes ({len(entity_ids)}) at line {line_no}"
                    )
                if len(values) != len(tf_widths):
                    raise CountsFileFormatError(
                        f"Number of counts read does not match number of TFBSs for gene "
                        f"number {len(rows) + 1} ID {entity_ids[len(rows)]}"
                    )
                try:
                    rows.append([int(v) for v in values])
                except ValueError:
                    raise CountsFileFormatError(
                        f"Non-integer count for gene {entity_ids[len(rows)]} at line {line_no}"
                    ) from None
            else:
                raise CountsFileFormatError(f"Unexpected line {line_no} outside any section: '{line}'")

    if len(rows) != len(entity_lengths):
        raise CountsFileFormatError(
            f"Number of gene count rows ({len(rows)}) does not match number of genes ({len(entity_lengths)})"
        )

    tf_ids = list(tf_widths)
    counts = CountsTable(entity_ids=list(entity_lengths), tf_ids=tf_ids)
    for entity_id, row in zip(entity_lengths, rows):
        for tf_id, count in zip(tf_ids, row):
            if count:
                counts.set_count(entity_id, tf_id, count)

    logger.info(f"Read counts for {counts.num_entities} genes and {counts.num_tfs} TFs from {path}")

    return CountsFile(counts=counts, tf_widths=tf_widths, entity_lengths=entity_lengths)


def write_counts(
    path: PathLike,
    counts: CountsTable,
    fmt: str = "detail",
    tf_widths: Optional[Mapping[Hashable, int]] = None,
    entity_lengths: Optional[Mapping[Hashable, int]] = None,
) -> Path:
    """
    Write a counts table.

    Args:
        path: Output file
        counts: Counts to write
        fmt: 'detail' (readable by ``read_counts``), 'fisher'
            (TF, gene hits, gene non-hits) or 'zscore'
            (TF, width, total length, site hits)
        tf_widths: TF profile widths, written as 0 if absent
        entity_lengths: Searched length per entity, written as 0 if absent

    Returns:
        Path written
    """
    path = Path(path)
    tf_widths = tf_widths or {}
    entity_lengths = entity_lengths or {}
    fmt = fmt.lower()

    if fmt == "detail":
        lines = [">TFBS"]
        lines += [f"{tf_id}\t{tf_widths.get(tf_id, 0)}" for tf_id in counts.tf_ids]
        lines.append(">Genes")
        lines += [f"{e}\t{entity_lengths.get(e, 0)}" for e in counts.entity_ids]
        lines.append(">Counts")
        matrix = counts.to_dataframe()
        for _, row in matrix.iterrows():
            lines.append("\t".join(str(int(v)) for v in row.values))
    elif fmt == "fisher":
        lines = [
            f"{tf_id}\t{counts.hit_entity_count(tf_id)}\t{counts.no_hit_entity_count(tf_id)}"
            for tf_id in counts.tf_ids
        ]
    elif fmt == "zscore":
        total_length = sum(entity_lengths.get(e, 0) for e in counts.entity_ids)
        lines = [
            f"{tf_id}\t{tf_widths.get(tf_id, 0)}\t{total_length}\t{counts.total_hits(tf_id)}"
            for tf_id in counts.tf_ids
        ]
    else:
        raise ValueError(f"Unknown counts format: {fmt}. Supported: detail, fisher, zscore")

    path.write_text("\n".join(lines) + "\n")
    logger.info(f"Wrote {fmt} counts to {path}")

    return path


# =============================================================================
# Values
# =============================================================================

def read_values(path: PathLike) -> ValuesTable:
    """Read a tab-delimited values file (entity_id, tf_id, value)."""
    try:
        df = pd.read_csv(path, sep="\t", dtype={"entity_id": str, "tf_id": str})
    except pd.errors.EmptyDataError:
        raise ValuesFileFormatError(f"Values file {path} is empty") from None

    missing = [c for c in VALUES_COLUMNS if c not in df.columns]
    if missing:
        raise ValuesFileFormatError(f"Values file {path} is missing columns: {missing}")

    values = pd.to_numeric(df["value"], errors="coerce")
    bad = values.isna()
    if bad.any():
        first = df.index[bad][0]
        raise ValuesFileFormatError(f"Non-numeric value in {path} on data row {first + 1}")

    table = ValuesTable()
    for entity_id, tf_id, value in zip(df["entity_id"], df["tf_id"], values):
        table.append_value(entity_id, tf_id, value)

    return table


def write_values(path: PathLike, values: ValuesTable) -> Path:
    path = Path(path)
    values.to_dataframe().to_csv(path, sep="\t", index=False)
    return path


# =============================================================================
# Results
# =============================================================================

def _fmt(value, fmt_spec: str) -> str:
    return NA if value is None else format(value, fmt_spec)


def results_to_dataframe(
    results: List[ScoreResult],
    tf_info: Optional[Mapping[Hashable, Mapping[str, str]]] = None,
) -> pd.DataFrame:
    """
    Tabulate a result list in report form, keeping its order.

    Args:
        results: Results, e.g. from ``CombinedResultSet.get_list``
        tf_info: Optional TF ID -> {'name', 'class', 'family'} metadata

    Returns:
        DataFrame of formatted (string) report columns
    """
    tf_info = tf_info or {}
    with_ks = any(r.ks_score is not None for r in results)

    rows = []
    for r in results:
        info = tf_info.get(r.id, {})
        row = {
            "TF ID": r.id,
            "TF Name": info.get("name") or NA,
            "Class": info.get("class") or NA,
            "Family": info.get("family") or NA,
            "Target gene hits": r.t_gene_hits or 0,
            "Target gene non-hits": r.t_gene_no_hits or 0,
            "Background gene hits": r.bg_gene_hits or 0,
            "Background gene non-hits": r.bg_gene_no_hits or 0,
            "Target TFBS hits": r.t_tfbs_hits or 0,
            "Target TFBS nucleotide rate": _fmt(r.t_tfbs_rate, ".3f"),
            "Background TFBS hits": r.bg_tfbs_hits or 0,
            "Background TFBS nucleotide rate": _fmt(r.bg_tfbs_rate, ".3f"),
            "Z-score": _fmt(r.zscore, ".3f"),
            "Fisher score": _fmt(r.fisher_score, ".3g"),
        }
        if with_ks:
            row["KS score"] = _fmt(r.ks_score, ".3g")
            row["KS background"] = r.ks_bg_distribution or NA
        rows.append(row)

    return pd.DataFrame(rows)


def write_results(
    path: PathLike,
    results: List[ScoreResult],
    tf_info: Optional[Mapping[Hashable, Mapping[str, str]]] = None,
) -> Optional[Path]:
    """Write a result list as a tab-delimited report; nothing is written for an empty list."""
    if not results:
        logger.warning("No results to write")
        return None

    path = Path(path)
    results_to_dataframe(results, tf_info).to_csv(path, sep="\t", index=False)
    logger.info(f"Writing analysis results to {path}")

    return path
