"""fileproof — content-addressed file registry with Starknet verification.

Felt:    fileproof/felt.py    (field elements, strict vs reducing parse)
Hasher:  fileproof/hasher.py  (bytes -> felt, hex validity)
Codec:   fileproof/codec.py   (short strings, u64 hex)
Chain:   fileproof/clients/starknet.py (starknet_call client)
Service: fileproof/service.py (register / verify orchestration)
Store:   fileproof/store.py   (SQLite record store)
"""

from fileproof.errors import (
    ConflictError,
    DuplicateContent,
    FileProofError,
    InvalidInput,
    MalformedScalar,
    StoreConflict,
    UnknownFunction,
)
from fileproof.felt import MODULUS, FieldElement, parse_strict_felt, reduce_to_field
from fileproof.hasher import ContentHasher, is_valid_field_hex, keccak256
from fileproof.codec import (
    felt_to_short_string,
    hex_to_unsigned_int,
    short_string_to_felt,
    unsigned_int_to_hex,
)
from fileproof.clients.starknet import (
    FUNCTION_SELECTORS,
    ContractConfig,
    RpcError,
    StarknetClient,
    Submitted,
    Success,
    TransportFailure,
)
from fileproof.store import FileRecord, RecordStore, SqliteRecordStore
from fileproof.service import FileMetadata, FileService, Found, NotFound

__all__ = [
    # Errors
    "ConflictError",
    "DuplicateContent",
    "FileProofError",
    "InvalidInput",
    "MalformedScalar",
    "StoreConflict",
    "UnknownFunction",
    # Field / hashing / codec
    "MODULUS",
    "FieldElement",
    "parse_strict_felt",
    "reduce_to_field",
    "ContentHasher",
    "is_valid_field_hex",
    "keccak256",
    "felt_to_short_string",
    "hex_to_unsigned_int",
    "short_string_to_felt",
    "unsigned_int_to_hex",
    # Chain
    "FUNCTION_SELECTORS",
    "ContractConfig",
    "RpcError",
    "StarknetClient",
    "Submitted",
    "Success",
    "TransportFailure",
    # Store / service
    "FileRecord",
    "RecordStore",
    "SqliteRecordStore",
    "FileMetadata",
    "FileService",
    "Found",
    "NotFound",
]
