"""
oPOSSUM - over-represented TFBS detection.

Scores transcription factor binding site over-representation in a target
set of genes/sequences against a background set using Fisher exact,
Z-score and Kolmogorov-Smirnov statistics.
"""

__version__ = "3.0.0"
__author__ = "oPOSSUM Team"
