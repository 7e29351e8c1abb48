"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Any

import pytest

from auction_ranker.chains.defichain import parser
from auction_ranker.config import (
    AppConfig,
    AuctionsConfig,
    FilterConfig,
    LoggingConfig,
    PricingConfig,
    RpcConfig,
    ServerConfig,
)
from auction_ranker.models import AuctionBatch, Vault

from tests.fakes import MARKET_POOLS, FakeDataSource


# ---------------------------------------------------------------------------
# Sample on-chain data
# ---------------------------------------------------------------------------

SAMPLE_AUCTIONS: list[dict[str, Any]] = [
    {
        "vaultId": "vault1",
        "loanSchemeId": "MIN150",
        "state": "inLiquidation",
        "liquidationHeight": 1500000,
        "batchCount": 2,
        "batches": [
            {
                "index": 0,
                "collaterals": ["100.00000000@DFI"],
                "loan": "80.00000000@DUSD",
            },
            {
                "index": 1,
                "collaterals": ["1.00000000@dTSLA"],
                "loan": "150.00000000@DUSD",
                "highestBid": {"amount": "160.00000000@DUSD", "owner": "bidder1"},
            },
        ],
    },
    {
        "vaultId": "vault2",
        "loanSchemeId": "MIN150",
        "state": "inLiquidation",
        "liquidationHeight": 1500100,
        "batchCount": 1,
        "batches": [
            {
                "index": 0,
                "collaterals": ["10.00000000@BTC"],
                "loan": "20.00000000@DFI",
            },
        ],
    },
]


@pytest.fixture()
def sample_auctions_raw() -> list[dict[str, Any]]:
    return SAMPLE_AUCTIONS


@pytest.fixture()
def sample_batches() -> list[AuctionBatch]:
    return parser.flatten_auctions(SAMPLE_AUCTIONS)


@pytest.fixture()
def sample_vaults() -> dict[str, Vault]:
    return {raw["vaultId"]: parser.parse_vault(raw) for raw in SAMPLE_AUCTIONS}


@pytest.fixture()
def market_source(
    sample_batches: list[AuctionBatch], sample_vaults: dict[str, Vault]
) -> FakeDataSource:
    return FakeDataSource(
        auctions=sample_batches, vaults=sample_vaults, pools=MARKET_POOLS
    )


@pytest.fixture()
def make_source() -> type[FakeDataSource]:
    return FakeDataSource


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_pricing() -> PricingConfig:
    return PricingConfig()


@pytest.fixture()
def sample_app_config(sample_pricing: PricingConfig) -> AppConfig:
    return AppConfig(
        rpc=RpcConfig(endpoints=("http://rpc1.example.com:8554",), timeout=5),
        server=ServerConfig(host="127.0.0.1", port=3000),
        pricing=sample_pricing,
        auctions=AuctionsConfig(
            cool_down_ms=0,
            explorer_url="https://defiscan.live",
            filters=FilterConfig(),
        ),
        logging=LoggingConfig(level="INFO", directory=""),
    )


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent("""\
    rpc:
      endpoints: ["${CLIENT_ENDPOINT_URL}", "http://backup.example.com:8554"]
      timeout: 10
    server:
      host: 127.0.0.1
      port: "${PORT}"
    pricing:
      reference_symbol: DUSD
      base_symbol: DFI
      first_bid_premium: "1.05"
    auctions:
      cool_down_ms: "${COOL_DOWN}"
      explorer_url: https://defiscan.live
      filters:
        min_margin: "2.5"
        min_diff: "1"
        max_starting_bid: null
    logging:
      level: DEBUG
      directory: ""
""")


@pytest.fixture()
def required_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CLIENT_ENDPOINT_URL", "http://node.example.com:8554")
    monkeypatch.setenv("PORT", "3000")
    monkeypatch.setenv("COOL_DOWN", "500")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
