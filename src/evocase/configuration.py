#  This file is part of evocase.
#
#  SPDX-FileCopyrightText: 2019–2025 evocase Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides a configuration interface for the statement representation."""

import dataclasses


@dataclasses.dataclass
class TestCreationConfiguration:
    """Configuration related to creating and regenerating statement values."""

    max_delta: int = 20
    """Largest step a numeric literal moves by when it is perturbed"""

    max_int: int = 2048
    """Bound on the magnitude of random integers, in both directions"""

    string_length: int = 20
    """Longest random string"""

    bytes_length: int = 20
    """Longest random bytes literal"""

    collection_size: int = 5
    """Most elements a freshly filled collection gets"""


@dataclasses.dataclass
class SearchAlgorithmConfiguration:
    """General configuration for the mutation operators of the search."""

    test_delete_probability: float = 1.0 / 3.0
    """Probability of deleting an element from a collection statement"""

    test_change_probability: float = 1.0 / 3.0
    """Probability of changing an element of a collection statement"""

    test_insert_probability: float = 1.0 / 3.0
    """Probability of inserting an element into a collection statement"""

    random_perturbation: float = 0.2
    """Chance that a literal is regenerated from scratch instead of being nudged
    by a delta."""

    change_parameter_probability: float = 0.1
    """Chance, per argument, that a call statement gets another value for it.
    Within [0,1]"""

    change_call_probability: float = 0.1
    """Probability of replacing the invoked operation of a call statement with an
    alternative operation of compatible signature.  Expects values in [0,1]"""


@dataclasses.dataclass
class ExecutionConfiguration:
    """Configuration related to executing statements against the subject."""

    suppress_output: bool = True
    """Redirect stdout and stderr of the subject while a test case is executed."""

    float_precision: float = 0.01
    """Relative and absolute tolerance when numbers are compared"""

    format_with_black: bool = True
    """Format rendered test modules using black."""


@dataclasses.dataclass
class Configuration:
    """General configuration for the statement representation."""

    test_creation: TestCreationConfiguration = dataclasses.field(
        default_factory=TestCreationConfiguration
    )
    """Value generation."""

    search_algorithm: SearchAlgorithmConfiguration = dataclasses.field(
        default_factory=SearchAlgorithmConfiguration
    )
    """Mutation operators."""

    execution: ExecutionConfiguration = dataclasses.field(
        default_factory=ExecutionConfiguration
    )
    """Running statements and rendering them."""

    seed: int | None = None
    """Fixed seed for the shared random generator; drawn from the clock if unset."""


# Shared by all modules; tests replace it wholesale.
configuration = Configuration()
