import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from clients.evm.base import Aggregator
from clients.evm.codec import CallCodec, codec as default_codec
from clients.evm.dto import Call, CallResult
from clients.evm.errors import DecodeError, TransportError
from clients.evm.events import ChunkFailed, EventListener, log_event
from config import settings


module_logger = logging.getLogger(__name__)


class AggregationMode(str, Enum):
    # any reverting call fails the whole chunk
    STRICT = "strict"
    # per-call success flags
    LENIENT = "lenient"


@dataclass(frozen=True)
class CallRequest:
    target: str
    function: str
    args: tuple = ()


@dataclass(frozen=True)
class BatchRequest:
    key: str
    calls: list[CallRequest]


@dataclass(frozen=True)
class BatchRecord:
    key: str
    values: list[Any] = field(default_factory=list)


class MulticallBatcher:
    """Runs read-only calls for many addresses in chunked aggregation invocations."""

    def __init__(
        self,
        aggregator: Aggregator,
        codec: CallCodec = default_codec,
        chunk_size: int | None = None,
        concurrency: int | None = None,
        chain_name: str = "",
        listener: EventListener = log_event,
    ):
        self.aggregator = aggregator
        self.codec = codec
        self.chunk_size = chunk_size if chunk_size is not None else settings.MULTICALL_CHUNK_SIZE
        self.concurrency = concurrency if concurrency is not None else settings.MULTICALL_CONCURRENCY
        self.chain_name = chain_name
        self.listener = listener

        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")
        if self.concurrency <= 0:
            raise ValueError(f"concurrency must be positive, got {self.concurrency}")

    async def fetch(
        self,
        addresses: list[str],
        functions: list[str],
        mode: AggregationMode = AggregationMode.LENIENT,
    ) -> list[BatchRecord]:
        if not functions:
            raise ValueError("At least one function is required")

        requests = [
            BatchRequest(address, [CallRequest(address, function) for function in functions])
            for address in addresses
        ]
        return await self.fetch_requests(requests, mode)

    async def fetch_requests(
        self,
        requests: list[BatchRequest],
        mode: AggregationMode = AggregationMode.LENIENT,
    ) -> list[BatchRecord]:
        if not requests:
            return []

        if any(not request.calls for request in requests):
            raise ValueError("Every batch request needs at least one call")

        chunks = [
            requests[i:i + self.chunk_size]
            for i in range(0, len(requests), self.chunk_size)
        ]

        if self.concurrency == 1:
            chunk_records = [
                await self._run_chunk(index, chunk, mode)
                for index, chunk in enumerate(chunks)
            ]
        else:
            semaphore = asyncio.Semaphore(self.concurrency)

            async def bounded(index: int, chunk: list[BatchRequest]) -> list[BatchRecord]:
                async with semaphore:
                    return await self._run_chunk(index, chunk, mode)

            chunk_records = await asyncio.gather(
                *[bounded(index, chunk) for index, chunk in enumerate(chunks)]
            )

        return [record for records in chunk_records for record in records]

    def _build_calls(self, chunk: list[BatchRequest]) -> tuple[list[Call], list[int]]:
        calls = []
        offsets = []

        for request in chunk:
            offsets.append(len(calls))
            calls.extend(
                Call(req.target, self.codec.encode(req.function, req.args))
                for req in request.calls
            )

        return calls, offsets

    async def _execute(self, calls: list[Call], mode: AggregationMode) -> list[CallResult]:
        if mode == AggregationMode.STRICT:
            _, return_data = await self.aggregator.aggregate(calls)
            return [CallResult(True, data) for data in return_data]

        return await self.aggregator.try_aggregate(calls)

    async def _run_chunk(
        self,
        index: int,
        chunk: list[BatchRequest],
        mode: AggregationMode,
    ) -> list[BatchRecord]:
        calls, offsets = self._build_calls(chunk)

        try:
            results = await self._execute(calls, mode)
        except TransportError as e:
            self.listener(ChunkFailed(self.chain_name, index, len(chunk), str(e)))
            return []
        except Exception as e:
            self.listener(ChunkFailed(self.chain_name, index, len(chunk), repr(e)))
            return []

        if len(results) != len(calls):
            self.listener(
                ChunkFailed(
                    self.chain_name,
                    index,
                    len(chunk),
                    f"expected {len(calls)} results, got {len(results)}",
                )
            )
            return []

        records = []
        for request, offset in zip(chunk, offsets):
            record = self._decode_request(request, results[offset:offset + len(request.calls)])
            if record is not None:
                records.append(record)

        return records

    def _decode_request(
        self,
        request: BatchRequest,
        results: list[CallResult],
    ) -> BatchRecord | None:
        if not all(result.success for result in results):
            return None

        values = []
        for call, result in zip(request.calls, results):
            try:
                values.append(self.codec.decode(call.function, result.return_data))
            except DecodeError as e:
                module_logger.debug(f"[{self.chain_name}] Skipping {request.key}: {e}")
                return None

        return BatchRecord(request.key, values)
