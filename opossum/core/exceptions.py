"""
Custom exception classes for oPOSSUM.

Provides clear, module-specific error types for the counts/values
containers, the statistical scorers and the result handling layer.
"""


class OPOSSUMError(Exception):
    """Base exception for all oPOSSUM errors."""
    pass


# ============================================================================
# Input validation errors
# ============================================================================

class ValidationError(OPOSSUMError):
    """Raised when input data fails validation checks."""
    pass


class InvalidParameterError(ValidationError):
    """Raised when a parameter value is out of valid range."""

    def __init__(self, param: str, value, valid_range: str = ""):
        msg = f"Invalid value for '{param}': {value}"
        if valid_range:
            msg += f". Expected: {valid_range}"
        super().__init__(msg)
        self.param = param
        self.value = value


class TFUniverseMismatchError(ValidationError):
    """Raised when paired background/target tables have different TF IDs."""

    def __init__(self, position: int, background_id=None, target_id=None, reason: str = ""):
        if reason:
            msg = f"Background and target TF IDs differ: {reason}"
        else:
            msg = (
                f"Background and target TF ID {position} differ: "
                f"{background_id} {target_id}"
            )
        super().__init__(msg)
        self.position = position
        self.background_id = background_id
        self.target_id = target_id


class MissingWidthError(ValidationError):
    """Raised when no profile width is known for one or more TF IDs."""

    def __init__(self, tf_ids: list):
        shown = ", ".join(str(t) for t in tf_ids[:10])
        more = f" (and {len(tf_ids) - 10} more)" if len(tf_ids) > 10 else ""
        super().__init__(f"No TF profile width provided for TF IDs: {shown}{more}")
        self.tf_ids = tf_ids


class InvalidSortFieldError(ValidationError):
    """Raised when results are sorted on an unknown field."""

    def __init__(self, field: str, valid: list = None):
        valid_str = f" Valid fields: {valid}" if valid else ""
        super().__init__(f"Invalid sort field '{field}'.{valid_str}")
        self.field = field
        self.valid = valid


# ============================================================================
# Table errors
# ============================================================================

class TableError(OPOSSUMError):
    """Base class for counts/values table errors."""
    pass


class FrozenTableError(TableError):
    """Raised when a frozen table is modified."""
    pass


# ============================================================================
# Analysis errors
# ============================================================================

class AnalysisError(OPOSSUMError):
    """Base class for analysis-specific errors."""
    pass


class FisherAnalysisError(AnalysisError):
    """Raised when the Fisher exact test analysis fails."""
    pass


class KSAnalysisError(AnalysisError):
    """Raised when the Kolmogorov-Smirnov analysis fails."""
    pass


class UnknownDistributionError(KSAnalysisError):
    """Raised when a KS reference distribution name is not recognised."""

    def __init__(self, name: str):
        super().__init__(f"Unknown reference distribution for KS test: '{name}'")
        self.name = name


# ============================================================================
# Result errors
# ============================================================================

class DuplicateResultError(OPOSSUMError):
    """Raised when a result ID is added twice to a result set."""

    def __init__(self, result_id):
        super().__init__(f"Result with ID {result_id} already exists in set")
        self.result_id = result_id


# ============================================================================
# File errors
# ============================================================================

class FileFormatError(OPOSSUMError):
    """Raised when an input file has an unexpected or invalid format."""
    pass


class CountsFileFormatError(FileFormatError):
    """Raised when a counts file is malformed."""
    pass


class ValuesFileFormatError(FileFormatError):
    """Raised when a values file is malformed."""
    pass


# ============================================================================
# Validation helpers
# ============================================================================

def validate_positive_length(value, name: str) -> None:
    """Validate a total sequence length is a positive number.

    Raises
    ------
    InvalidParameterError
        If the value is missing, zero or negative.
    """
    if value is None or isinstance(value, bool):
        raise InvalidParameterError(name, value, "> 0")
    try:
        positive = value > 0
    except TypeError:
        raise InvalidParameterError(name, value, "> 0") from None
    if not positive:
        raise InvalidParameterError(name, value, "> 0")

