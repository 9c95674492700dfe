"""Pytest configuration and shared fixtures for endur-holdings tests."""

import asyncio
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import pytest

from endur_holdings.config import HoldingsSettings
from endur_holdings.core.models import BlockIdentifier, NetworkConfig
from endur_holdings.data import get_network_config

USER = "0x" + "ab" * 32
BLOCK_TIMESTAMP = 1_735_689_600  # 2025-01-01T00:00:00Z


@dataclass
class RecordedCall:
    contract_address: str
    entrypoint: str
    calldata: list[Any]
    block_identifier: BlockIdentifier


class FakeChainReader:
    """
    In-memory chain reader.

    Responses are keyed by ``(contract_address, entrypoint)``. A value may be a
    plain result, an exception to raise, or a callable
    ``(calldata, block_identifier) -> result``. Unknown calls raise.
    Each call yields to the event loop once, so ``peak_in_flight`` shows how
    many calls overlapped.

    """

    def __init__(self, responses: Mapping[tuple[str, str], Any] | None = None, timestamp: int = BLOCK_TIMESTAMP):
        self.responses: dict[tuple[str, str], Any] = dict(responses or {})
        self.timestamp = timestamp
        self.calls: list[RecordedCall] = []
        self.blocks: list[BlockIdentifier] = []
        self.in_flight = 0
        self.peak_in_flight = 0

    def set(self, contract_address: str, entrypoint: str, value: Any) -> None:
        self.responses[(contract_address, entrypoint)] = value

    def calls_to(self, entrypoint: str) -> list[RecordedCall]:
        return [call for call in self.calls if call.entrypoint == entrypoint]

    async def call(
        self,
        contract_address: str,
        entrypoint: str,
        calldata: Sequence[Any],
        block_identifier: BlockIdentifier,
    ) -> Any:
        self.calls.append(RecordedCall(contract_address, entrypoint, list(calldata), block_identifier))
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
        finally:
            self.in_flight -= 1

        key = (contract_address, entrypoint)
        if key not in self.responses:
            msg = f"Unexpected call {entrypoint} on {contract_address}"
            raise RuntimeError(msg)

        value = self.responses[key]
        if isinstance(value, Exception):
            raise value
        if callable(value):
            value = value(list(calldata), block_identifier)
            if isinstance(value, Exception):
                raise value
        return value

    async def get_block(self, block_identifier: BlockIdentifier) -> dict[str, Any]:
        self.blocks.append(block_identifier)
        return {"timestamp": self.timestamp, "block_number": block_identifier}


@pytest.fixture()
def user() -> str:
    return USER


@pytest.fixture()
def reader() -> FakeChainReader:
    return FakeChainReader()


@pytest.fixture(scope="session")
def mainnet_config() -> NetworkConfig:
    return get_network_config("mainnet")


@pytest.fixture()
def settings() -> HoldingsSettings:
    """Settings with retries that do not sleep."""
    return HoldingsSettings(network="mainnet", retry_delay=0.0)
