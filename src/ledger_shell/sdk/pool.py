"""Pool ledger configs built from genesis transactions, and pool connections."""

from __future__ import annotations

import json
import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ledger_shell.client import GatewayClient
from ledger_shell.errors import (
    GatewayUnavailableError,
    PoolAlreadyExistsError,
    PoolError,
    PoolNotFoundError,
)
from ledger_shell.sdk.base import PoolInfo, PoolOptions

SUPPORTED_PROTOCOL_VERSIONS = (1, 2)

logger = logging.getLogger(__name__)


def read_genesis_nodes(path: Path) -> list[str]:
    """Return node aliases declared by a genesis transactions file."""
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError as exc:
        raise PoolError(f"Can't read genesis transactions file: {path}") from exc

    aliases: list[str] = []
    for number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        try:
            txn = json.loads(line)
        except json.JSONDecodeError as exc:
            raise PoolError(f"Invalid genesis transaction at line {number}: {exc.msg}") from exc
        if not isinstance(txn, dict):
            raise PoolError(f"Invalid genesis transaction at line {number}")
        if isinstance(txn.get("txn"), dict):
            data = txn["txn"].get("data", {}).get("data")
        else:
            data = txn.get("data")
        if isinstance(data, dict) and isinstance(data.get("alias"), str):
            aliases.append(data["alias"])
    if not aliases:
        raise PoolError(f"Genesis transactions file contains no nodes: {path}")
    return aliases


@dataclass
class PoolConnection:
    name: str
    nodes: list[str]
    options: PoolOptions
    client: GatewayClient = field(repr=False)
    closed: bool = False

    def _ensure_open(self) -> None:
        if self.closed:
            raise PoolError(f"pool \"{self.name}\" is closed")

    def submit(self, request: dict) -> dict[str, Any]:
        self._ensure_open()
        return self.client.submit(request, timeout=self.options.extended_timeout)

    def submit_action(
        self,
        request: dict,
        *,
        nodes: list[str] | None = None,
        timeout: int | None = None,
    ) -> dict[str, Any]:
        self._ensure_open()
        unknown = [node for node in nodes or [] if node not in self.nodes]
        if unknown:
            raise PoolError(f"Unknown nodes: {', '.join(unknown)}")
        return self.client.submit_action(request, nodes=nodes, timeout=timeout)

    def refresh(self) -> None:
        self._ensure_open()
        self.client.refresh()

    def close(self) -> None:
        if self.closed:
            return
        self.client.close()
        self.closed = True


class LocalPoolStore:
    def __init__(self, root: Path) -> None:
        self.root = root

    def _pool_dir(self, name: str) -> Path:
        return self.root / name

    def info(self, name: str) -> PoolInfo:
        config_path = self._pool_dir(name) / "config.json"
        if not config_path.exists():
            raise PoolNotFoundError(f"Pool \"{name}\" does not exist.")
        try:
            payload = json.loads(config_path.read_text(encoding="utf-8"))
        except Exception as exc:
            raise PoolError(f"invalid pool config: {config_path}") from exc
        return PoolInfo(
            name=name,
            genesis_path=str(payload["genesis_txn"]),
            gateway=payload.get("gateway"),
        )

    def create(self, name: str, genesis_path: Path, *, gateway: str | None = None) -> PoolInfo:
        pool_dir = self._pool_dir(name)
        if pool_dir.exists():
            raise PoolAlreadyExistsError(f"Pool \"{name}\" already exists")
        read_genesis_nodes(genesis_path)

        pool_dir.mkdir(parents=True)
        target = pool_dir / f"{name}.txn"
        shutil.copyfile(genesis_path, target)
        record = {"genesis_txn": str(target), "gateway": gateway}
        (pool_dir / "config.json").write_text(
            json.dumps(record, sort_keys=True, indent=2) + "\n", encoding="utf-8"
        )
        logger.info("created pool config %s", name)
        return PoolInfo(name=name, genesis_path=str(target), gateway=gateway)

    def delete(self, name: str) -> None:
        pool_dir = self._pool_dir(name)
        if not pool_dir.exists():
            raise PoolNotFoundError(f"Pool \"{name}\" does not exist.")
        shutil.rmtree(pool_dir)

    def list(self) -> list[PoolInfo]:
        if not self.root.exists():
            return []
        return [
            self.info(path.name)
            for path in sorted(self.root.iterdir())
            if (path / "config.json").exists()
        ]

    def open(self, name: str, options: PoolOptions) -> PoolConnection:
        if options.protocol_version not in SUPPORTED_PROTOCOL_VERSIONS:
            raise PoolError(f"Unexpected Pool protocol version \"{options.protocol_version}\".")
        info = self.info(name)
        nodes = read_genesis_nodes(Path(info.genesis_path))
        unknown = [node for node in options.pre_ordered_nodes if node not in nodes]
        if unknown:
            raise PoolError(f"Unknown pre-ordered nodes: {', '.join(unknown)}")
        if not info.gateway:
            raise PoolError(f"Pool \"{name}\" has no ledger gateway configured")

        client = GatewayClient(
            base_url=info.gateway,
            timeout=float(options.timeout) if options.timeout else 20.0,
        )
        try:
            client.status()
        except GatewayUnavailableError:
            client.close()
            raise
        logger.info("connected to pool %s through %s", name, info.gateway)
        return PoolConnection(name=name, nodes=nodes, options=options, client=client)
