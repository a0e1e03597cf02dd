import asyncio
from typing import Protocol
import aiohttp
from web3 import AsyncWeb3
from web3.exceptions import Web3Exception
from web3.providers import AsyncHTTPProvider
from chains.dto import ChainConfig
from clients.evm.dto import Call, CallResult
from clients.evm.errors import TransportError
from config import settings


class Aggregator(Protocol):
    async def aggregate(self, calls: list[Call]) -> tuple[int, list[bytes]]:
        ...

    async def try_aggregate(self, calls: list[Call]) -> list[CallResult]:
        ...

    async def close(self) -> None:
        ...


class Multicall3Client:
    MULTICALL3_ABI = [
        {
            "inputs": [
                {
                    "components": [
                        {"internalType": "address", "name": "target", "type": "address"},
                        {"internalType": "bytes", "name": "callData", "type": "bytes"},
                    ],
                    "internalType": "struct Multicall3.Call[]",
                    "name": "calls",
                    "type": "tuple[]",
                }
            ],
            "name": "aggregate",
            "outputs": [
                {"internalType": "uint256", "name": "blockNumber", "type": "uint256"},
                {"internalType": "bytes[]", "name": "returnData", "type": "bytes[]"},
            ],
            "stateMutability": "payable",
            "type": "function",
        },
        {
            "inputs": [
                {
                    "components": [
                        {
                            "internalType": "address",
                            "name": "target",
                            "type": "address",
                        },
                        {
                            "internalType": "bool",
                            "name": "allowFailure",
                            "type": "bool",
                        },
                        {"internalType": "bytes", "name": "callData", "type": "bytes"},
                    ],
                    "internalType": "struct Multicall3.Call3[]",
                    "name": "calls",
                    "type": "tuple[]",
                }
            ],
            "name": "aggregate3",
            "outputs": [
                {
                    "components": [
                        {"internalType": "bool", "name": "success", "type": "bool"},
                        {
                            "internalType": "bytes",
                            "name": "returnData",
                            "type": "bytes",
                        },
                    ],
                    "internalType": "struct Multicall3.Result[]",
                    "name": "returnData",
                    "type": "tuple[]",
                }
            ],
            "stateMutability": "payable",
            "type": "function",
        },
    ]

    TRANSPORT_ERRORS = (
        Web3Exception,
        aiohttp.ClientError,
        asyncio.TimeoutError,
        OSError,
        ValueError,
    )

    def __init__(
        self,
        chain_config: ChainConfig,
        rpc_url: str | None = None,
        timeout: float | None = None,
    ):
        self.chain_config = chain_config
        self.rpc_url = rpc_url or settings.rpc_url_for(chain_config.name, chain_config.rpc_url)
        self.timeout = timeout if timeout is not None else settings.RPC_TIMEOUT_SECONDS
        self._w3: AsyncWeb3 | None = None

    async def __aenter__(self):
        if self._w3 is None:
            self._w3 = AsyncWeb3(AsyncHTTPProvider(self.rpc_url))
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        if self._w3 is not None:
            await self._w3.provider.disconnect()

            self._w3 = None

    @property
    def w3(self) -> AsyncWeb3:
        if self._w3 is None:
            self._w3 = AsyncWeb3(AsyncHTTPProvider(self.rpc_url))
        return self._w3

    @staticmethod
    def _create_call(target: str, calldata: bytes, allow_failure: bool = True) -> tuple:
        return (AsyncWeb3.to_checksum_address(target), allow_failure, calldata)

    def _get_multicall_contract(self):
        return self.w3.eth.contract(
            AsyncWeb3.to_checksum_address(self.chain_config.multicall3_address),
            abi=self.MULTICALL3_ABI,
        )

    async def aggregate(self, calls: list[Call]) -> tuple[int, list[bytes]]:
        multicall = self._get_multicall_contract()
        payload = [
            (AsyncWeb3.to_checksum_address(call.target), call.call_data)
            for call in calls
        ]

        try:
            block_number, return_data = await asyncio.wait_for(
                multicall.functions.aggregate(payload).call(),
                timeout=self.timeout,
            )
        except self.TRANSPORT_ERRORS as e:
            raise TransportError(f"aggregate failed: {e!r}") from e

        return int(block_number), [bytes(data) for data in return_data]

    async def try_aggregate(self, calls: list[Call]) -> list[CallResult]:
        multicall = self._get_multicall_contract()
        payload = [self._create_call(call.target, call.call_data) for call in calls]

        try:
            results = await asyncio.wait_for(
                multicall.functions.aggregate3(payload).call(),
                timeout=self.timeout,
            )
        except self.TRANSPORT_ERRORS as e:
            raise TransportError(f"aggregate3 failed: {e!r}") from e

        return [CallResult(bool(success), bytes(data)) for success, data in results]
