"""
Pydantic schemas for analysis and result list parameters.

Defines schemas for:
- Result list filtering/sorting options
- End-to-end analysis configuration
"""

from typing import Optional, Tuple, Union

from pydantic import BaseModel, Field, field_validator, model_validator


class ResultListParams(BaseModel):
    """Options accepted by ``CombinedResultSet.get_list``."""

    sort_by: Optional[str] = Field(default=None, description="Field to sort on, default 'id'")
    reverse: bool = Field(default=False, description="Sort in descending order")
    num_results: Union[int, str, None] = Field(
        default=None, description="Top N results to keep, or 'all'"
    )
    zscore_cutoff: Optional[float] = Field(default=None, description="Minimum Z-score")
    fisher_cutoff: Optional[float] = Field(default=None, description="Minimum Fisher score (-ln p)")
    ks_cutoff: Optional[float] = Field(default=None, description="Minimum KS score (-ln p)")

    @field_validator("num_results")
    @classmethod
    def check_num_results(cls, v):
        if v is None:
            return None
        if isinstance(v, bool):
            raise ValueError("num_results must be a positive integer or 'all'")
        if isinstance(v, str):
            if v.strip().lower() == "all":
                return None
            if not v.strip().isdigit():
                raise ValueError("num_results must be a positive integer or 'all'")
            v = int(v)
        if v < 1:
            raise ValueError("num_results must be a positive integer or 'all'")
        return v


class AnalysisParams(BaseModel):
    """Configuration of one target vs. background analysis."""

    bg_total_length: int = Field(..., gt=0, description="Nucleotides searched in the background set")
    t_total_length: int = Field(..., gt=0, description="Nucleotides searched in the target set")

    run_fisher: bool = True
    run_zscore: bool = True
    run_ks: bool = False

    # None means compare against background values (two-sample test)
    ks_distribution: Optional[str] = None
    ks_distribution_args: Tuple[float, ...] = ()

    @model_validator(mode="after")
    def check_analyses(self):
        if not (self.run_fisher or self.run_zscore or self.run_ks):
            raise ValueError("At least one of run_fisher, run_zscore or run_ks must be set")
        return self
