"""
Unit Tests for the Bitcoin Fee Provider Chain

These tests verify that the chain:
- Tries providers strictly in order and stops at the first accepted estimate
- Treats fetch errors, unreadable payloads and non-positive tiers alike
- Returns None (and never raises) when every provider fails

Run with:
    pytest tests/unit/test_bitcoin_fees.py -v
"""

import pytest

from core.exceptions import HttpError, RequestTimeout
from core.schemas import FeeEstimate
from providers.bitcoin_fees import (
    BitcoinFeeChain,
    FeeMultipliers,
    ProviderSpec,
    default_bitcoin_providers,
    parse_blockchain_info,
    parse_blockchair,
    parse_mempool_space,
)

from tests.unit.helpers import FakeFetcher, MEMPOOL_PAYLOAD


def _static_provider(name, estimate):
    """Provider whose parser ignores the payload and returns estimate."""
    return ProviderSpec(name=name, endpoint=f"https://{name}.test/fees", parse=lambda data: estimate)


# ============================================
# Parsers
# ============================================

class TestParsers:
    """Tests for the per-provider payload parsers"""

    def test_mempool_space_maps_tiers(self):
        assert parse_mempool_space(MEMPOOL_PAYLOAD) == FeeEstimate(low=5, standard=8, fast=12)

    def test_mempool_space_missing_tier(self):
        assert parse_mempool_space({"fastestFee": 12, "halfHourFee": 8}) is None

    def test_blockchain_info_derives_fast_tier(self):
        result = parse_blockchain_info({"regular": 4, "priority": 6})
        assert result == FeeEstimate(low=4, standard=6, fast=9)

    def test_blockchain_info_uses_standard_multiplier(self):
        result = parse_blockchain_info({"regular": 4, "priority": 10}, FeeMultipliers(standard=2.0, fast=3.0))
        assert result.fast == 20

    def test_blockchair_scales_single_fee(self):
        result = parse_blockchair({"data": {"suggested_transaction_fee_per_byte_sat": 7}})
        assert result == FeeEstimate(low=7, standard=11, fast=14)

    def test_blockchair_without_data_object(self):
        assert parse_blockchair({"suggested_transaction_fee_per_byte_sat": 7}) is None

    @pytest.mark.parametrize("parser", [parse_mempool_space, parse_blockchain_info, parse_blockchair])
    def test_non_object_payloads(self, parser):
        assert parser(None) is None
        assert parser([1, 2, 3]) is None
        assert parser("busy") is None

    def test_zero_rates_are_rejected(self):
        assert parse_mempool_space({"fastestFee": 12, "halfHourFee": 0, "hourFee": 5}) is None

    def test_rounding_is_half_up(self):
        result = parse_mempool_space({"fastestFee": 12.5, "halfHourFee": 8.4, "hourFee": 4.5})
        assert (result.low, result.standard, result.fast) == (5, 8, 13)


class TestDefaultProviders:
    """Tests for default_bitcoin_providers"""

    def test_order_and_endpoints(self, test_settings):
        providers = default_bitcoin_providers(test_settings)
        assert [p.name for p in providers] == ["mempool.space", "blockchain.info", "blockchair.com"]
        assert providers[0].endpoint == "https://mempool.space/api/v1/fees/recommended"
        assert providers[1].endpoint.endswith("/mempool/fees")
        assert providers[2].endpoint.endswith("/bitcoin/stats")

    def test_multipliers_come_from_config(self, test_settings):
        config = test_settings.model_copy(update={"fee_multiplier_standard": 3.0, "fee_multiplier_fast": 4.0})
        blockchair = default_bitcoin_providers(config)[2]
        result = blockchair.parse({"data": {"suggested_transaction_fee_per_byte_sat": 2}})
        assert result == FeeEstimate(low=2, standard=6, fast=8)


# ============================================
# Provider Chain
# ============================================

class TestBitcoinFeeChain:
    """Tests for BitcoinFeeChain.estimate"""

    @pytest.mark.asyncio
    async def test_first_provider_wins(self):
        """A successful first provider means no further calls"""
        fetcher = FakeFetcher({"p1": {}, "p2": {}, "p3": {}})
        providers = [
            ProviderSpec("p1", "https://p1.test", lambda data: FeeEstimate(low=1, standard=2, fast=3)),
            ProviderSpec("p2", "https://p2.test", lambda data: FeeEstimate(low=9, standard=9, fast=9)),
        ]
        chain = BitcoinFeeChain(fetcher, providers, timeout_ms=5_000)

        result = await chain.estimate()

        assert result == FeeEstimate(low=1, standard=2, fast=3)
        assert fetcher.calls == [("https://p1.test", 5_000)]

    @pytest.mark.asyncio
    async def test_falls_through_failure_and_invalid_tiers(self):
        """P1 times out, P2 reports a zero tier, P3 is accepted"""
        fetcher = FakeFetcher({
            "p1": RequestTimeout(5_000, "https://p1.test"),
            "p2": {},
            "p3": {},
        })
        providers = [
            _static_provider("p1", FeeEstimate(low=1, standard=1, fast=1)),
            _static_provider("p2", FeeEstimate(low=5, standard=0, fast=10)),
            _static_provider("p3", FeeEstimate(low=5, standard=10, fast=20)),
        ]
        chain = BitcoinFeeChain(fetcher, providers)

        result = await chain.estimate()

        assert result == FeeEstimate(low=5, standard=10, fast=20)
        assert fetcher.count("p1") == 1
        assert fetcher.count("p2") == 1
        assert fetcher.count("p3") == 1

    @pytest.mark.asyncio
    async def test_later_providers_not_called_after_success(self):
        fetcher = FakeFetcher({"p1": HttpError(503, "Service Unavailable"), "p2": {}, "p3": {}})
        providers = [
            _static_provider("p1", None),
            _static_provider("p2", FeeEstimate(low=3, standard=4, fast=5)),
            _static_provider("p3", FeeEstimate(low=6, standard=7, fast=8)),
        ]

        result = await BitcoinFeeChain(fetcher, providers).estimate()

        assert result.low == 3
        assert fetcher.count("p3") == 0

    @pytest.mark.asyncio
    async def test_parser_exception_counts_as_failure(self):
        def broken(data):
            raise KeyError("fastestFee")

        fetcher = FakeFetcher({"p1": {}, "p2": {}})
        providers = [
            ProviderSpec("p1", "https://p1.test", broken),
            _static_provider("p2", FeeEstimate(low=1, standard=2, fast=3)),
        ]

        result = await BitcoinFeeChain(fetcher, providers).estimate()

        assert result == FeeEstimate(low=1, standard=2, fast=3)

    @pytest.mark.asyncio
    async def test_all_providers_fail_returns_none(self, test_settings, caplog):
        """Total failure is a normal outcome, not an exception"""
        fetcher = FakeFetcher({})
        chain = BitcoinFeeChain(fetcher, default_bitcoin_providers(test_settings))

        with caplog.at_level("WARNING", logger="coinpeek"):
            result = await chain.estimate()

        assert result is None
        assert len(fetcher.calls) == 3
        assert "All Bitcoin fee providers failed" in caplog.text

    @pytest.mark.asyncio
    async def test_default_chain_reads_mempool_space(self, test_settings):
        fetcher = FakeFetcher({"fees/recommended": MEMPOOL_PAYLOAD})
        chain = BitcoinFeeChain(fetcher, default_bitcoin_providers(test_settings))

        result = await chain.estimate()

        assert result == FeeEstimate(low=5, standard=8, fast=12)
        assert len(fetcher.calls) == 1

    @pytest.mark.asyncio
    async def test_default_chain_falls_back_to_blockchair(self, test_settings):
        fetcher = FakeFetcher({
            "fees/recommended": {"error": "rate limited"},
            "mempool/fees": HttpError(500),
            "bitcoin/stats": {"data": {"suggested_transaction_fee_per_byte_sat": 10}},
        })
        chain = BitcoinFeeChain(fetcher, default_bitcoin_providers(test_settings))

        result = await chain.estimate()

        assert result == FeeEstimate(low=10, standard=15, fast=20)

    def test_empty_provider_list_rejected(self):
        with pytest.raises(ValueError):
            BitcoinFeeChain(FakeFetcher(), [])
