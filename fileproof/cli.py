"""fileproof CLI — hash, register, and verify files.

Usage:
    python3 -m fileproof.cli hash report.pdf
    python3 -m fileproof.cli register report.pdf --author 0xabc [--file-type application/pdf]
    python3 -m fileproof.cli verify 0x1234...
    python3 -m fileproof.cli list [--author 0xabc]

Prints JSON to stdout; logs go to stderr.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import mimetypes
import sys
from pathlib import Path
from typing import Any

from fileproof.clients.starknet import ContractConfig, StarknetClient
from fileproof.config import Settings, load_settings
from fileproof.errors import ConflictError, InvalidInput, MalformedScalar
from fileproof.felt import parse_strict_felt
from fileproof.hasher import ContentHasher
from fileproof.service import FileMetadata, FileService, Found
from fileproof.store import SqliteRecordStore


def build_service(settings: Settings) -> FileService:
    chain = StarknetClient(
        rpc_url=settings.rpc_url,
        contract=ContractConfig.from_address(settings.contract_address),
        timeout=settings.timeout_seconds,
        rate_limit=settings.rate_limit,
    )
    return FileService(
        store=SqliteRecordStore(settings.db_path),
        chain=chain,
        settings=settings,
    )


async def cmd_register(service: FileService, path: Path, author: str, file_type: str | None) -> dict[str, Any]:
    guessed = file_type or mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    record = await service.register(
        path.read_bytes(),
        author,
        FileMetadata(filename=path.name, file_type=guessed),
    )
    return {"status": "OK", "record": record.model_dump(mode="json")}


async def cmd_verify(service: FileService, hash_hex: str) -> dict[str, Any]:
    content_hash = parse_strict_felt(hash_hex)
    result = await service.verify(content_hash)
    if not isinstance(result, Found):
        return {"status": "NOT_FOUND", "content_hash": content_hash.to_hex()}

    out: dict[str, Any] = {
        "status": "FOUND",
        "record": result.record.model_dump(mode="json"),
        "chain_confirmed": result.chain_cross_check,
    }
    if service.settings.cross_check_on_verify:
        details = await service.chain_details(content_hash)
        if details is not None:
            out["chain_details"] = details
    return out


async def run(args: argparse.Namespace) -> dict[str, Any]:
    if args.command == "hash":
        content_hash = ContentHasher().hash_file(args.path)
        return {"status": "OK", "path": str(args.path), "content_hash": content_hash.to_hex()}

    service = build_service(load_settings())
    try:
        if args.command == "register":
            return await cmd_register(service, args.path, args.author, args.file_type)
        if args.command == "verify":
            return await cmd_verify(service, args.hash)
        records = service.files_by_author(args.author) if args.author else service.list_files()
        return {
            "status": "OK",
            "count": len(records),
            "files": [r.model_dump(mode="json") for r in records],
        }
    finally:
        await service.chain.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="fileproof — content-addressed file registry")
    sub = parser.add_subparsers(dest="command", required=True)

    p_hash = sub.add_parser("hash", help="Print the field-element hash of a file")
    p_hash.add_argument("path", type=Path)

    p_reg = sub.add_parser("register", help="Register a file")
    p_reg.add_argument("path", type=Path)
    p_reg.add_argument("--author", required=True, help="Author address (hex)")
    p_reg.add_argument("--file-type", default=None, help="MIME type (guessed if omitted)")

    p_ver = sub.add_parser("verify", help="Verify a content hash")
    p_ver.add_argument("hash", help="0x-prefixed field element")

    p_list = sub.add_parser("list", help="List registered files, newest first")
    p_list.add_argument("--author", default=None)

    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, stream=sys.stderr, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    try:
        result = asyncio.run(run(args))
    except (InvalidInput, MalformedScalar) as e:
        result = {"status": "ERROR", "error": str(e)}
    except ConflictError as e:
        result = {"status": "CONFLICT", "error": str(e), "content_hash": e.content_hash}

    print(json.dumps(result, indent=2))
    sys.exit(0 if result["status"] in ("OK", "FOUND", "NOT_FOUND") else 1)


if __name__ == "__main__":
    main()
