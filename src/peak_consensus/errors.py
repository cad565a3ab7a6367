"""
Exception hierarchy for the peak consensus package.

Every exception keeps its constructor arguments in ``args`` so that it can be
pickled by a worker process and re-raised intact in the parent.
"""


class ConsensusError(Exception):
    """Base class for all errors raised by peak_consensus."""


class InputValidationError(ConsensusError, ValueError):
    """Raised when feature collections or option values are invalid."""


class MissingLinkedFeatureError(ConsensusError, LookupError):
    """
    Raised when a point feature has no linked interval feature during resizing.

    Args:
        name: Name of the point feature
        experiment: Experiment tag of the point feature
        chromosome: Chromosome being processed
    """

    def __init__(self, name: str, experiment: str, chromosome: str):
        super().__init__(name, experiment, chromosome)
        self.name = name
        self.experiment = experiment
        self.chromosome = chromosome

    def __str__(self) -> str:
        return (
            f"No interval feature named '{self.name}' for experiment "
            f"'{self.experiment}' on chromosome '{self.chromosome}'"
        )


class ConvergenceError(ConsensusError, RuntimeError):
    """
    Raised when a candidate window fails to stabilize within the iteration cap.

    Args:
        chromosome: Chromosome being processed
        position: Position of the seed point
        max_iterations: Iteration cap that was exceeded
    """

    def __init__(self, chromosome: str, position: int, max_iterations: int):
        super().__init__(chromosome, position, max_iterations)
        self.chromosome = chromosome
        self.position = position
        self.max_iterations = max_iterations

    def __str__(self) -> str:
        return (
            f"Window seeded at {self.chromosome}:{self.position} did not "
            f"converge within {self.max_iterations} iterations"
        )
