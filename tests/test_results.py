"""Tests for result records, result sets and result combination."""

import dataclasses
import logging
import math

import pytest

from opossum.config import Settings
from opossum.core.exceptions import DuplicateResultError, InvalidParameterError, InvalidSortFieldError
from opossum.core.results import (
    CombinedResultSet,
    ScoreResult,
    SortField,
    combine_results,
    sort_results,
)


class TestScoreResult:

    def test_defaults_are_none(self):
        r = ScoreResult(id="MA0001")
        assert r.fisher_score is None
        assert r.zscore is None
        assert r.ks_score is None

    def test_immutable(self):
        r = ScoreResult(id="MA0001", zscore=1.0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            r.zscore = 2.0

    def test_p_value_aliases(self):
        r = ScoreResult(id="MA0001", fisher_score=3.0, ks_score=5.0)

        assert r.fisher_p_value == 3.0
        assert r.ks_p_value == 5.0
        assert r.fisher_probability == pytest.approx(math.exp(-3.0))
        assert r.ks_probability == pytest.approx(math.exp(-5.0))

    def test_probability_of_missing_score(self):
        assert ScoreResult(id="MA0001").fisher_probability is None

    def test_zero_background(self):
        assert ScoreResult(id="a", bg_gene_hits=0).has_zero_background
        assert ScoreResult(id="a", bg_tfbs_hits=0).has_zero_background
        assert not ScoreResult(id="a", bg_gene_hits=2, bg_tfbs_hits=3).has_zero_background
        assert not ScoreResult(id="a").has_zero_background

    def test_merge(self):
        fisher = ScoreResult(id="MA0001", t_gene_hits=4, fisher_score=2.0)
        zscore = ScoreResult(id="MA0001", t_gene_hits=4, t_tfbs_hits=8, zscore=3.5)

        merged = fisher.merge(zscore)

        assert merged.fisher_score == 2.0
        assert merged.zscore == 3.5
        assert merged.t_tfbs_hits == 8
        assert fisher.zscore is None

    def test_merge_different_ids(self):
        with pytest.raises(ValueError):
            ScoreResult(id="a").merge(ScoreResult(id="b"))

    def test_to_dict(self):
        d = ScoreResult(id="MA0001", zscore=1.5).to_dict()
        assert d["id"] == "MA0001"
        assert d["zscore"] == 1.5
        assert "ks_bg_distribution" in d


class TestSortField:

    @pytest.mark.parametrize("name,expected", [
        ("zscore", SortField.ZSCORE),
        ("Z-score", SortField.ZSCORE),
        ("z_score", SortField.ZSCORE),
        ("fisher", SortField.FISHER_SCORE),
        ("fisher_p_value", SortField.FISHER_SCORE),
        ("ks_p_value", SortField.KS_SCORE),
        ("t_tfbs_hits", SortField.T_TFBS_HITS),
        (SortField.ID, SortField.ID),
    ])
    def test_parse(self, name, expected):
        assert SortField.parse(name) is expected

    def test_descending(self):
        assert SortField.ZSCORE.descending
        assert SortField.FISHER_SCORE.descending
        assert SortField.BG_TFBS_RATE.descending
        assert not SortField.ZSCORE_P_VALUE.descending
        assert not SortField.ID.descending

    def test_parse_invalid(self):
        with pytest.raises(InvalidSortFieldError):
            SortField.parse("name")


class TestSortResults:

    def test_missing_values_last_both_directions(self):
        results = [
            ScoreResult(id="a", zscore=None),
            ScoreResult(id="b", zscore=2.0),
            ScoreResult(id="c", zscore=-1.0),
        ]

        assert [r.id for r in sort_results(results, "zscore")] == ["c", "b", "a"]
        assert [r.id for r in sort_results(results, "zscore", reverse=True)] == ["b", "c", "a"]

    def test_ties_broken_by_id(self):
        results = [ScoreResult(id=i, zscore=1.0) for i in ("c", "a", "b")]

        assert [r.id for r in sort_results(results, "zscore")] == ["a", "b", "c"]
        assert [r.id for r in sort_results(results, "zscore", reverse=True)] == ["a", "b", "c"]

    def test_numeric_ids(self):
        results = [ScoreResult(id=i) for i in ("10", "9", "2")]
        assert [r.id for r in sort_results(results)] == ["2", "9", "10"]


class TestCombinedResultSet:

    def test_add_and_get(self):
        results = CombinedResultSet()
        results.add_result(ScoreResult(id="MA0001", zscore=1.0))

        assert len(results) == 1
        assert "MA0001" in results
        assert results.get_result("MA0001").zscore == 1.0
        assert results.get_result("MA9999") is None

    def test_duplicate_rejected(self):
        results = CombinedResultSet([ScoreResult(id="MA0001")])
        with pytest.raises(DuplicateResultError):
            results.add_result(ScoreResult(id="MA0001"))

    def test_non_result_rejected(self):
        with pytest.raises(TypeError):
            CombinedResultSet().add_result({"id": "MA0001"})

    def test_top_n_by_zscore(self, zscore_result_set):
        top = zscore_result_set.get_list(sort_by="zscore", reverse=True, num_results=5)

        assert [r.id for r in top] == ["TF20", "TF19", "TF18", "TF17", "TF16"]
        zscores = [r.zscore for r in top]
        assert zscores == sorted(zscores, reverse=True)
        others = [r.zscore for r in zscore_result_set if r not in top]
        assert min(zscores) >= max(others)

    def test_ascending_sort(self, zscore_result_set):
        lowest = zscore_result_set.get_list(sort_by="fisher_score", num_results=3)
        assert [r.fisher_score for r in lowest] == [1.0, 2.0, 3.0]

    def test_sort_field_enum(self, zscore_result_set):
        top = zscore_result_set.get_list(sort_by=SortField.ZSCORE, reverse=True, num_results=1)
        assert top[0].id == "TF20"

    def test_default_returns_everything(self, zscore_result_set):
        assert len(zscore_result_set.get_list()) == 20

    @pytest.mark.parametrize("num_results,expected", [("all", 20), ("ALL", 20), (None, 20), ("3", 3), (25, 20)])
    def test_num_results_forms(self, zscore_result_set, num_results, expected):
        assert len(zscore_result_set.get_list(num_results=num_results)) == expected

    @pytest.mark.parametrize("num_results", [0, -1, "ten", "2.5"])
    def test_invalid_num_results(self, zscore_result_set, num_results):
        with pytest.raises(InvalidParameterError):
            zscore_result_set.get_list(num_results=num_results)

    def test_invalid_sort_field(self, zscore_result_set):
        with pytest.raises(InvalidSortFieldError):
            zscore_result_set.get_list(sort_by="tf_name")

    def test_zscore_cutoff_inclusive(self, zscore_result_set):
        kept = zscore_result_set.get_list(zscore_cutoff=8.0)
        assert sorted(r.zscore for r in kept) == [8.0, 8.5, 9.0, 9.5, 10.0]

    def test_cutoff_before_truncation(self, zscore_result_set):
        kept = zscore_result_set.get_list(
            sort_by="fisher_score", reverse=True, num_results=3, zscore_cutoff=8.0
        )
        # highest Fisher scores overall fail the Z-score cutoff
        assert [r.id for r in kept] == ["TF16", "TF17", "TF18"]

    def test_combined_cutoffs(self, zscore_result_set):
        kept = zscore_result_set.get_list(zscore_cutoff=5.0, fisher_cutoff=8.0)
        assert sorted(r.id for r in kept) == ["TF10", "TF11", "TF12", "TF13"]

    def test_cutoff_excludes_missing(self):
        results = CombinedResultSet([
            ScoreResult(id="a", zscore=3.0),
            ScoreResult(id="b", zscore=None),
            ScoreResult(id="c", zscore=1.0, ks_score=4.0),
        ])

        assert [r.id for r in results.get_list(zscore_cutoff=0.0)] == ["a", "c"]
        assert [r.id for r in results.get_list(ks_cutoff=2.0)] == ["c"]

    def test_empty_set(self):
        assert CombinedResultSet().get_list(sort_by="zscore", num_results=5) == []

    def test_zero_background_warning(self, caplog):
        results = CombinedResultSet([
            ScoreResult(id="MA0001", bg_tfbs_hits=0, zscore=None),
            ScoreResult(id="MA0002", bg_tfbs_hits=4, zscore=1.0),
        ])

        with caplog.at_level(logging.WARNING, logger="opossum.core.results"):
            results.get_list()

        assert "MA0001" in caplog.text
        assert "MA0002" not in caplog.text
        assert results.zero_background_ids() == ["MA0001"]

    def test_settings_defaults(self, zscore_result_set):
        defaults = Settings(default_num_results=4).result_list_defaults()
        top = zscore_result_set.get_list(**defaults)

        assert [r.id for r in top] == ["TF20", "TF19", "TF18", "TF17"]

    def test_settings_defaults_p_value_most_significant_first(self):
        results = CombinedResultSet([
            ScoreResult(id="a", zscore_p_value=0.001, bg_tfbs_hits=2),
            ScoreResult(id="b", zscore_p_value=0.5, bg_tfbs_hits=2),
            ScoreResult(id="c", zscore_p_value=0.04, bg_tfbs_hits=2),
        ])
        defaults = Settings(
            _env_file=None, default_sort_by="zscore_p_value", default_num_results=2
        ).result_list_defaults()

        assert [r.id for r in results.get_list(**defaults)] == ["a", "c"]

    def test_to_dataframe(self, zscore_result_set):
        df = zscore_result_set.to_dataframe()

        assert len(df) == 20
        assert "zscore" in df.columns
        assert "ks_bg_distribution" in df.columns


class TestCombineResults:

    def test_union_of_ids(self):
        fisher = CombinedResultSet([ScoreResult(id=f"TF{i}", fisher_score=float(i)) for i in range(1, 11)])
        zscore = CombinedResultSet([ScoreResult(id=f"TF{i}", zscore=float(i)) for i in range(8, 16)])

        combined = combine_results(fisher_results=fisher, zscore_results=zscore)

        assert len(combined) == 15
        both = [r for r in combined if r.fisher_score is not None and r.zscore is not None]
        assert sorted(r.id for r in both) == ["TF10", "TF8", "TF9"]
        assert combined.get_result("TF1").zscore is None
        assert combined.get_result("TF15").fisher_score is None

    def test_keeps_fields_of_each_analysis(self):
        fisher = CombinedResultSet([ScoreResult(id="MA0001", t_gene_hits=4, fisher_score=2.5)])
        ks = CombinedResultSet([ScoreResult(id="MA0001", ks_score=7.0, ks_bg_distribution="data")])

        r = combine_results(fisher_results=fisher, ks_results=ks).get_result("MA0001")

        assert r.fisher_score == 2.5
        assert r.t_gene_hits == 4
        assert r.ks_score == 7.0
        assert r.ks_bg_distribution == "data"

    def test_params_merged(self):
        fisher = CombinedResultSet(params={"bg_num_entities": 10})
        zscore = CombinedResultSet(params={"bg_seq_length": 20000})

        combined = combine_results(fisher_results=fisher, zscore_results=zscore)
        assert combined.params == {"bg_num_entities": 10, "bg_seq_length": 20000}

    def test_no_inputs(self):
        assert len(combine_results()) == 0
