"""
Read-only web3 adapters.

`ChainlinkFeed` reads an AggregatorV3 feed over JSON-RPC. It only issues
`eth_call`s; nothing here signs or submits transactions.
"""

from __future__ import annotations

from typing import Optional

from web3 import HTTPProvider, Web3

from ..core.oracle import FeedReading
from .collaborators import PriceFeed

AGGREGATOR_V3_ABI = [
    {
        "inputs": [],
        "name": "decimals",
        "outputs": [{"internalType": "uint8", "name": "", "type": "uint8"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "latestRoundData",
        "outputs": [
            {"internalType": "uint80", "name": "roundId", "type": "uint80"},
            {"internalType": "int256", "name": "answer", "type": "int256"},
            {"internalType": "uint256", "name": "startedAt", "type": "uint256"},
            {"internalType": "uint256", "name": "updatedAt", "type": "uint256"},
            {"internalType": "uint80", "name": "answeredInRound", "type": "uint80"},
        ],
        "stateMutability": "view",
        "type": "function",
    },
]


class ChainlinkFeed(PriceFeed):
    def __init__(self, w3: Web3, address: str, *, name: Optional[str] = None) -> None:
        self._address = w3.to_checksum_address(address)
        self._contract = w3.eth.contract(address=self._address, abi=AGGREGATOR_V3_ABI)
        self.name = name or self._address
        self._decimals: Optional[int] = None

    @classmethod
    def from_rpc(cls, rpc_url: str, address: str, *, timeout_s: float = 10.0, name: Optional[str] = None) -> "ChainlinkFeed":
        w3 = Web3(HTTPProvider(rpc_url, request_kwargs={"timeout": timeout_s}))
        if not w3.is_connected():
            raise ValueError(f"Web3 not connected: {rpc_url}")
        return cls(w3, address, name=name)

    def decimals(self) -> int:
        # Aggregator decimals are immutable; read once.
        if self._decimals is None:
            self._decimals = int(self._contract.functions.decimals().call())
        return self._decimals

    def latest_round_data(self) -> FeedReading:
        round_id, answer, _started_at, updated_at, answered_in_round = (
            self._contract.functions.latestRoundData().call()
        )
        return FeedReading(
            round_id=int(round_id),
            answer=int(answer),
            updated_at=int(updated_at),
            answered_in_round=int(answered_in_round),
        )
