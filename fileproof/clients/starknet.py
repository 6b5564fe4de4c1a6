"""Starknet client — read-only contract calls against a JSON-RPC node.

Request envelope (starknet_call):
    {"jsonrpc": "2.0", "method": "starknet_call",
     "params": {"request": {"contract_address", "entry_point_selector", "calldata"},
                "block_id": "latest"},
     "id": 1}

Every call returns one of Success / RpcError / TransportFailure and never
raises past this module, except UnknownFunction which is raised before any
network activity. No internal retries.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Sequence, Union

import httpx
from eth_utils import keccak

from fileproof.clients.base import APIError, BaseClient, ResponseDecodeError
from fileproof.codec import (
    SHORT_STRING_MAX_LEN,
    felt_to_short_string,
    hex_to_unsigned_int,
    short_string_to_felt,
    unsigned_int_to_hex,
)
from fileproof.errors import MalformedScalar, UnknownFunction
from fileproof.felt import FieldElement, parse_strict_felt

log = logging.getLogger("fileproof.starknet")

DEFAULT_RPC_URL = "https://starknet-sepolia.public.blastapi.io/rpc/v0_7"
DEFAULT_CONTRACT_ADDRESS = "0x06ebf0234be358bd087fdf5165d4b5cf7103fa1d00b8a4edb32b6e61b6d764f0"

# Synthetic code for envelopes that are neither a result nor an error
MALFORMED_RESPONSE_CODE = 0

_SELECTOR_MASK = 2**250 - 1

CONTRACT_FUNCTIONS = (
    "is_file_registered",
    "verify_file",
    "get_author_files",
    "register_file",
)


def selector_from_name(name: str) -> FieldElement:
    """Starknet entry point selector: keccak256(name) truncated to 250 bits."""
    return FieldElement(int.from_bytes(keccak(name.encode("ascii")), "big") & _SELECTOR_MASK)


FUNCTION_SELECTORS: Mapping[str, FieldElement] = MappingProxyType(
    {name: selector_from_name(name) for name in CONTRACT_FUNCTIONS}
)


@dataclass(frozen=True)
class ContractConfig:
    """Target contract address and its selector table. Built once, never mutated."""

    contract_address: FieldElement
    selectors: Mapping[str, FieldElement] = field(default_factory=lambda: FUNCTION_SELECTORS)

    @classmethod
    def from_address(cls, address: str) -> ContractConfig:
        return cls(contract_address=parse_strict_felt(address))

    def selector(self, function_name: str) -> FieldElement:
        try:
            return self.selectors[function_name]
        except KeyError:
            raise UnknownFunction(function_name) from None


# ── Call results ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class Success:
    values: tuple[FieldElement, ...]


@dataclass(frozen=True)
class RpcError:
    code: int
    message: str


@dataclass(frozen=True)
class TransportFailure:
    cause: str


@dataclass(frozen=True)
class Submitted:
    """Write-path outcome: an opaque handle, not a verified transaction hash."""

    handle: str


ChainCallResult = Union[Success, RpcError, TransportFailure]
RegistrationResult = Union[Submitted, RpcError, TransportFailure]


def build_call_request(
    contract: ContractConfig,
    selector: FieldElement,
    calldata: Sequence[FieldElement],
) -> dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "method": "starknet_call",
        "params": {
            "request": {
                "contract_address": contract.contract_address.to_hex(),
                "entry_point_selector": selector.to_hex(),
                "calldata": [felt.to_hex() for felt in calldata],
            },
            "block_id": "latest",
        },
        "id": 1,
    }


def parse_call_response(body: Any) -> Success | RpcError:
    """Interpret a decoded JSON-RPC envelope."""
    if not isinstance(body, dict):
        return RpcError(MALFORMED_RESPONSE_CODE, "malformed response: envelope is not an object")

    error = body.get("error")
    if error is not None:
        if not isinstance(error, dict):
            return RpcError(MALFORMED_RESPONSE_CODE, f"malformed response: error={error!r}")
        code = error.get("code", MALFORMED_RESPONSE_CODE)
        if isinstance(code, bool) or not isinstance(code, int):
            code = MALFORMED_RESPONSE_CODE
        return RpcError(code, str(error.get("message", "")))

    result = body.get("result")
    if not isinstance(result, list):
        return RpcError(MALFORMED_RESPONSE_CODE, "malformed response: missing result array")

    try:
        values = tuple(parse_strict_felt(entry) for entry in result)
    except MalformedScalar as e:
        return RpcError(MALFORMED_RESPONSE_CODE, f"malformed response: {e}")
    return Success(values)


class StarknetClient:
    """Read-only Starknet contract client plus the stubbed registration write."""

    def __init__(
        self,
        rpc_url: str = DEFAULT_RPC_URL,
        contract: ContractConfig | None = None,
        timeout: float = 10.0,
        rate_limit: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.rpc_url = rpc_url
        self.contract = contract or ContractConfig.from_address(DEFAULT_CONTRACT_ADDRESS)
        self._http = BaseClient(
            rate_limit=rate_limit,
            timeout=timeout,
            provider_name="starknet",
            transport=transport,
        )

    async def call(self, function_name: str, calldata: Sequence[FieldElement]) -> ChainCallResult:
        selector = self.contract.selector(function_name)
        payload = build_call_request(self.contract, selector, calldata)

        try:
            body = await self._http.post_json(self.rpc_url, payload)
        except ResponseDecodeError as e:
            return RpcError(MALFORMED_RESPONSE_CODE, f"malformed response: {e}")
        except APIError as e:
            log.warning("starknet_call %s transport failure: %s", function_name, e)
            return TransportFailure(str(e))

        result = parse_call_response(body)
        if isinstance(result, RpcError):
            log.warning("starknet_call %s rpc error %s: %s", function_name, result.code, result.message)
        return result

    async def is_file_registered(self, content_hash: FieldElement) -> bool | None:
        """True when the contract confirms registration, None otherwise.

        A missing confirmation is not evidence of absence, so this never
        returns False.
        """
        result = await self.call("is_file_registered", [content_hash])
        if isinstance(result, Success) and result.values == (FieldElement(1),):
            return True
        return None

    async def get_file_details(self, content_hash: FieldElement) -> dict[str, Any] | None:
        """Decode verify_file's (author, filename, file_type, size, timestamp) tuple."""
        result = await self.call("verify_file", [content_hash])
        if not isinstance(result, Success) or len(result.values) < 5:
            return None

        author, filename, file_type, size, timestamp = result.values[:5]
        try:
            return {
                "author_address": author.to_hex(),
                "filename": felt_to_short_string(filename),
                "file_type": felt_to_short_string(file_type),
                "file_size": hex_to_unsigned_int(size.to_hex()),
                "timestamp": hex_to_unsigned_int(timestamp.to_hex()),
            }
        except MalformedScalar as e:
            log.warning("verify_file %s: undecodable field: %s", content_hash.to_hex(), e)
            return None

    async def register_file(
        self,
        content_hash: FieldElement,
        filename: str,
        file_type: str,
        file_size: int,
    ) -> RegistrationResult:
        """Stubbed register_file write.

        Builds and validates the calldata a signed invoke would carry, then
        returns an opaque handle derived from wall-clock time and the hash.
        No transaction is signed or sent. Raises MalformedScalar when the
        metadata cannot be packed into calldata.
        """
        self.contract.selector("register_file")
        calldata = [
            content_hash,
            short_string_to_felt(filename[:SHORT_STRING_MAX_LEN]),
            short_string_to_felt(file_type[:SHORT_STRING_MAX_LEN]),
            FieldElement(file_size),
        ]
        log.info(
            "register_file (stub) hash=%s calldata=%s",
            content_hash.to_hex(),
            [felt.to_hex() for felt in calldata],
        )
        handle = unsigned_int_to_hex(time.time_ns() // 1_000_000) + f"{content_hash.value & 0xFFFFFFFF:08x}"
        return Submitted(handle)

    async def close(self) -> None:
        await self._http.close()
