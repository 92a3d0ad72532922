"""Tests for the price comparison engine."""

import orjson
import pytest

from express_mcp.client import Operation, UpstreamError
from express_mcp.models import ErrorKind
from express_mcp.pricing import PriceComparisonEngine, describe_quote


def price(value, days=None):
    data = {"price": str(value)}
    if days is not None:
        data["estimatedDays"] = days
    return {"result": True, "returnCode": "200", "data": data}


def make_engine(signer, transport, carriers, timeout=0.2):
    return PriceComparisonEngine(signer, transport, carriers=carriers, carrier_timeout=timeout)


class TestPriceComparisonEngine:
    """Tests for PriceComparisonEngine."""

    @pytest.mark.asyncio
    async def test_one_carrier_times_out(self, signer, fake_transport):
        """Beijing -> Shanghai, 2 kg, middle carrier too slow."""
        transport = fake_transport(pricing={"shunfeng": price(23), "yuantong": 5.0, "zhongtong": price(12, 2)})
        engine = make_engine(signer, transport, ["shunfeng", "yuantong", "zhongtong"])

        outcome = await engine.compare_price(weight=2, origin="Beijing", destination="Shanghai")

        assert outcome.success
        quotes = outcome.value.quotes
        assert len(quotes) == 3
        assert [q.carrier_id for q in quotes] == ["zhongtong", "shunfeng", "yuantong"]
        assert [q.price for q in quotes[:2]] == [12.0, 23.0]
        assert quotes[0].estimated_days == 2
        assert quotes[2].error == ErrorKind.TIMEOUT
        assert quotes[2].price is None

    @pytest.mark.asyncio
    async def test_requests_dispatched_in_carrier_order(self, signer, fake_transport):
        carriers = ["a", "b", "c"]
        transport = fake_transport(pricing={c: price(10) for c in carriers})
        engine = make_engine(signer, transport, carriers)

        await engine.compare_price(2, 30, None, 10, origin="Beijing", destination="Shanghai")

        assert [orjson.loads(form["param"])["kuaidicom"] for _, form in transport.calls] == carriers
        operation, form = transport.calls[0]
        assert operation == Operation.PRICING
        assert orjson.loads(form["param"]) == {
            "kuaidicom": "a",
            "sendAddr": "Beijing",
            "recAddr": "Shanghai",
            "weight": "2",
            "length": "30",
            "height": "10",
        }
        assert form["sign"] == signer.sign(orjson.loads(form["param"]))["sign"]

    @pytest.mark.asyncio
    async def test_ties_keep_carrier_order(self, signer, fake_transport):
        transport = fake_transport(pricing={"a": price(10), "b": price(10), "c": price(5)})
        engine = make_engine(signer, transport, ["a", "b", "c"])

        outcome = await engine.compare_price(origin="Beijing", destination="Shanghai")

        assert [q.carrier_id for q in outcome.value.quotes] == ["c", "a", "b"]

    @pytest.mark.asyncio
    async def test_failures_after_successes_in_carrier_order(self, signer, fake_transport):
        transport = fake_transport(
            pricing={
                "a": UpstreamError(ErrorKind.TRANSPORT_FAILURE, "could not reach the pricing service"),
                "b": price(20),
                "c": {"result": True, "data": {"message": "no price here"}},
                "d": UpstreamError(ErrorKind.UPSTREAM_REJECTED, "不支持该线路 (500)"),
                "e": price(7.5),
            }
        )
        engine = make_engine(signer, transport, ["a", "b", "c", "d", "e"])

        outcome = await engine.compare_price(origin="Beijing", destination="Shanghai")

        quotes = outcome.value.quotes
        assert [q.carrier_id for q in quotes] == ["e", "b", "a", "c", "d"]
        assert [q.error for q in quotes[2:]] == [
            ErrorKind.TRANSPORT_FAILURE,
            ErrorKind.DECODE_FAILURE,
            ErrorKind.UPSTREAM_REJECTED,
        ]
        assert quotes[4].error_message == "不支持该线路 (500)"

    @pytest.mark.asyncio
    async def test_all_carriers_fail(self, signer, fake_transport):
        transport = fake_transport(
            pricing={
                "a": UpstreamError(ErrorKind.UPSTREAM_REJECTED, "bad sign"),
                "b": 5.0,
            }
        )
        engine = make_engine(signer, transport, ["a", "b"])

        outcome = await engine.compare_price(origin="Beijing", destination="Shanghai")

        assert not outcome.success
        assert outcome.error_kind == ErrorKind.ALL_CARRIERS_FAILED
        assert "a: upstream_rejected (bad sign)" in outcome.error
        assert "b: timeout" in outcome.error

    @pytest.mark.asyncio
    async def test_no_carriers_configured(self, signer, fake_transport):
        engine = make_engine(signer, fake_transport(), [])

        outcome = await engine.compare_price(origin="Beijing", destination="Shanghai")

        assert outcome.error_kind == ErrorKind.ALL_CARRIERS_FAILED

    @pytest.mark.asyncio
    @pytest.mark.parametrize("origin, destination", [("", "Shanghai"), ("Beijing", ""), (None, "Shanghai")])
    async def test_invalid_argument_before_any_call(self, signer, fake_transport, origin, destination):
        transport = fake_transport(pricing={"a": price(1)})
        engine = make_engine(signer, transport, ["a"])

        outcome = await engine.compare_price(origin=origin, destination=destination)

        assert outcome.error_kind == ErrorKind.INVALID_ARGUMENT
        assert transport.calls == []

    @pytest.mark.asyncio
    async def test_unexpected_error_isolated(self, signer, fake_transport):
        """A bug in one carrier's task does not drop the other quotes."""
        transport = fake_transport(pricing={"b": price(3)})
        engine = make_engine(signer, transport, ["a", "b"])

        outcome = await engine.compare_price(origin="Beijing", destination="Shanghai")

        assert [q.carrier_id for q in outcome.value.quotes] == ["b", "a"]
        assert outcome.value.quotes[1].error == ErrorKind.TRANSPORT_FAILURE


class TestParseQuote:
    """Tests for quote normalization."""

    def test_nested_data(self):
        quote = PriceComparisonEngine.parse_quote("jd", {"data": {"price": "15.5", "days": "3", "currency": "CNY"}})

        assert quote.price == 15.5
        assert quote.estimated_days == 3

    def test_top_level_price(self):
        quote = PriceComparisonEngine.parse_quote("jd", {"price": 9})
        assert quote.price == 9.0

    def test_unparseable_price(self):
        quote = PriceComparisonEngine.parse_quote("jd", {"data": {"price": "n/a"}})

        assert quote.error == ErrorKind.DECODE_FAILURE

    def test_describe(self):
        quote = PriceComparisonEngine.parse_quote("shunfeng", price(23, 1))
        assert describe_quote(quote) == "顺丰速运: 23.00 CNY, ~1 day(s)"

    @pytest.mark.parametrize("value", ["Infinity", "inf", "-inf", "NaN"])
    def test_non_finite_price(self, value):
        quote = PriceComparisonEngine.parse_quote("jd", {"data": {"price": value}})

        assert quote.error == ErrorKind.DECODE_FAILURE
        assert quote.price is None

    def test_negative_price(self):
        quote = PriceComparisonEngine.parse_quote("jd", {"data": {"price": "-5"}})

        assert quote.error == ErrorKind.DECODE_FAILURE
        assert "negative" in quote.error_message

    def test_non_finite_days_dropped(self):
        quote = PriceComparisonEngine.parse_quote("jd", {"data": {"price": "8", "days": "inf"}})

        assert quote.price == 8.0
        assert quote.estimated_days is None


class TestUnusablePrices:
    """Unusable prices never outrank real quotes."""

    @pytest.mark.asyncio
    async def test_bad_prices_ranked_as_failures(self, signer, fake_transport):
        transport = fake_transport(
            pricing={
                "a": {"data": {"price": "Infinity"}},
                "b": {"data": {"price": "-5"}},
                "c": price(12),
            }
        )
        engine = make_engine(signer, transport, ["a", "b", "c"])

        outcome = await engine.compare_price(origin="Beijing", destination="Shanghai")

        result = outcome.value
        assert result.cheapest.carrier_id == "c"
        assert [q.carrier_id for q in result.quotes] == ["c", "a", "b"]
        for quote in result.model_dump(mode="json")["quotes"]:
            assert (quote["price"] is None) != (quote["error"] is None)
