#  This file is part of evocase.
#
#  SPDX-FileCopyrightText: 2019–2025 evocase Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Double dispatch over the concrete test case classes."""

from __future__ import annotations

from abc import ABC
from abc import abstractmethod
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    import evocase.testcase.defaulttestcase as dtc


class TestCaseVisitor(ABC):
    """Receives a test case through ``TestCase.accept``."""

    @abstractmethod
    def visit_default_test_case(self, test_case: dtc.DefaultTestCase) -> None:
        """Handles a list-backed test case.

        Args:
            test_case: The visited test case
        """
