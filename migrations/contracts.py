#!/usr/bin/env python3
"""
Contract kinds deployed by the initial migration

Each kind maps to the artifact name the compiler toolchain emits. Names may
carry a source sub-directory prefix (fuzzing/, tests/); the compiled contract
name is always the last path component.
"""

from enum import Enum


class ContractKind(Enum):
    """Closed set of contracts known to the migrations"""

    PRIMARY_TOKEN = "WJ"
    PRIMARY_TOKEN_FUZZING = "fuzzing/WJFuzzing"
    TEST_FLASH_LENDER = "tests/TestFlashLender"
    TEST_TRANSFER_RECEIVER = "tests/TestTransferReceiver"

    @property
    def artifact_name(self) -> str:
        return self.value

    @property
    def source_dir(self) -> str:
        """Source sub-directory prefix of the artifact name, empty for top-level contracts"""
        return self.value.rpartition("/")[0]

    @property
    def contract_name(self) -> str:
        """Contract name as it appears in the compiled artifact"""
        return self.value.rsplit("/", 1)[-1]

    def __str__(self) -> str:
        return self.contract_name
