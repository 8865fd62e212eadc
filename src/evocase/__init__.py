#  This file is part of evocase.
#
#  SPDX-FileCopyrightText: 2019–2025 evocase Contributors
#
#  SPDX-License-Identifier: MIT
#
"""evocase provides the statement representation of an evolutionary test generator."""

import evocase.configuration as config


Configuration = config.Configuration
ExecutionConfiguration = config.ExecutionConfiguration
SearchAlgorithmConfiguration = config.SearchAlgorithmConfiguration
TestCreationConfiguration = config.TestCreationConfiguration

__all__ = [
    "Configuration",
    "ExecutionConfiguration",
    "SearchAlgorithmConfiguration",
    "TestCreationConfiguration",
]
