"""
TOML-based configuration for Electra wallets.

Loads settings from a TOML file and/or environment variables.
Environment variables take precedence over file values.

Usage:
    from electra_core.config import load_config
    cfg = load_config("electra.toml")
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomllib  # type: ignore[import]
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore[import,no-redef]

from electra_core.cipher import DEFAULT_KDF_ITERATIONS


@dataclass
class RPCConfig:
    """Remote node binding.

    When ``uri`` is non-empty the wallet delegates lock / unlock / staking
    calls to that node instead of handling key material locally.
    """
    uri: str = ""
    username: str = ""
    password: str = ""
    timeout_seconds: float | None = None   # None = wait as long as the node does

    @property
    def enabled(self) -> bool:
        return bool(self.uri)


@dataclass
class ExplorerConfig:
    """Block explorer used for per-address balance lookups."""
    base_url: str = "http://127.0.0.1:3001"
    timeout_seconds: float = 30.0


@dataclass
class CipherConfig:
    """Private-key ciphering settings."""
    kdf_iterations: int = DEFAULT_KDF_ITERATIONS


@dataclass
class LoggingConfig:
    """Logging settings."""
    level: str = "INFO"
    format: str = "human"   # "human" or "json"
    file: str | None = None
    rpc_level: str | None = None   # None = same as level


@dataclass
class ElectraConfig:
    """Top-level configuration container."""
    rpc: RPCConfig = field(default_factory=RPCConfig)
    explorer: ExplorerConfig = field(default_factory=ExplorerConfig)
    cipher: CipherConfig = field(default_factory=CipherConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _merge(dc: Any, raw: dict[str, Any]) -> None:
    """Merge a raw dict into a dataclass instance (in-place)."""
    for key, value in raw.items():
        key_under = key.replace("-", "_")
        if hasattr(dc, key_under):
            setattr(dc, key_under, value)


def load_config(path: str | None = None) -> ElectraConfig:
    """
    Load configuration from a TOML file, then overlay environment variables.

    Env-var mapping:
        ELECTRA_RPC_URI         -> rpc.uri
        ELECTRA_RPC_USER        -> rpc.username
        ELECTRA_RPC_PASSWORD    -> rpc.password
        ELECTRA_EXPLORER_URL    -> explorer.base_url
        ELECTRA_KDF_ITERATIONS  -> cipher.kdf_iterations
        ELECTRA_LOG_LEVEL       -> logging.level
        ELECTRA_LOG_FMT         -> logging.format
    """
    cfg = ElectraConfig()

    # ── TOML file ────────────────────────────────────────────────
    if path is not None:
        p = Path(path)
        if p.exists():
            with open(p, "rb") as f:
                data = tomllib.load(f)
            for section_name, section_dc in [
                ("rpc", cfg.rpc),
                ("explorer", cfg.explorer),
                ("cipher", cfg.cipher),
                ("logging", cfg.logging),
            ]:
                if section_name in data:
                    _merge(section_dc, data[section_name])

    # ── Environment variable overrides ───────────────────────────
    if v := os.environ.get("ELECTRA_RPC_URI"):
        cfg.rpc.uri = v
    if v := os.environ.get("ELECTRA_RPC_USER"):
        cfg.rpc.username = v
    if v := os.environ.get("ELECTRA_RPC_PASSWORD"):
        cfg.rpc.password = v
    if v := os.environ.get("ELECTRA_EXPLORER_URL"):
        cfg.explorer.base_url = v
    if v := os.environ.get("ELECTRA_KDF_ITERATIONS"):
        cfg.cipher.kdf_iterations = int(v)
    if v := os.environ.get("ELECTRA_LOG_LEVEL"):
        cfg.logging.level = v.upper()
    if v := os.environ.get("ELECTRA_LOG_FMT"):
        cfg.logging.format = v

    return cfg
