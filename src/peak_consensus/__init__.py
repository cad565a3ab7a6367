"""
Consensus regions of point-like genomic features across experiments.

Given point features (e.g. ChIP-Seq peak summits or nucleosome centers) called
in several experiments, this package finds the regions where enough distinct
experiments agree. Regions are found per chromosome by iterative window
convergence on the point positions and can optionally be resized to the
intervals (e.g. narrowPeak regions) linked to their supporting points.
"""

__version__ = "0.1.0"

# Import main functionality to expose at package level
from peak_consensus.consensus import (
    compute_consensus_regions,
    find_consensus_peak_regions,
)
from peak_consensus.errors import (
    ConsensusError,
    ConvergenceError,
    InputValidationError,
    MissingLinkedFeatureError,
)
from peak_consensus.features import (
    ChromosomeInfo,
    ConsensusOptions,
    ConsensusRegion,
    ConsensusResult,
    IntervalFeature,
    PointFeature,
)
from peak_consensus.io import (
    load_experiment_table,
    read_chrom_sizes,
    read_narrowpeak,
    read_summits_bed,
    write_consensus_bed,
)

__all__ = [
    "compute_consensus_regions",
    "find_consensus_peak_regions",
    "ConsensusError",
    "ConvergenceError",
    "InputValidationError",
    "MissingLinkedFeatureError",
    "ChromosomeInfo",
    "ConsensusOptions",
    "ConsensusRegion",
    "ConsensusResult",
    "IntervalFeature",
    "PointFeature",
    "load_experiment_table",
    "read_chrom_sizes",
    "read_narrowpeak",
    "read_summits_bed",
    "write_consensus_bed",
]
