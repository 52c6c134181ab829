"""
Unit Tests - Dashboard View Builders
"""
from dataclasses import replace

import pytest

from src.analytics import views
from src.analytics.aggregator import AccumulatorBundle, Aggregator, RetainedRecord
from src.config import DEFAULT_DEFINITIONS


def _bundle(**fields) -> AccumulatorBundle:
    bundle = AccumulatorBundle.fresh(DEFAULT_DEFINITIONS)
    for name, value in fields.items():
        setattr(bundle, name, value)
    return bundle


def _retained(index: int, sold: float) -> RetainedRecord:
    return RetainedRecord(
        id=index,
        name=f"Product {index}",
        sku=f"SKU-{index}",
        price_amount=10.0,
        price_currency="SAR",
        quantity=index,
        sold_quantity=sold,
        views=0,
        status="sale",
        revenue=10.0 * sold,
    )


class TestRounding:
    """Tests for rounding helpers"""

    def test_round_half_up(self):
        """Test half-up rounding"""
        assert views.round_half_up(2.675) == 2.68
        assert views.round_half_up(0.5, 0) == 1
        assert views.round_half_up(2.5, 0) == 3
        assert isinstance(views.round_half_up(2.4, 0), int)

    def test_large_and_non_finite_values(self):
        """Test rounding of large and non-finite values"""
        assert views.round_half_up(1e30) == 1e30
        assert views.round_half_up(1e308, 0) == 10 ** 308
        assert views.round_half_up(float("inf")) == float("inf")

    def test_percentage_of_zero_is_zero(self):
        """Test zero denominators"""
        assert views.percentage(5, 0) == 0
        assert views.percent_change(5, 0) == 0


class TestStatusBreakdown:
    """Tests for the status breakdown view"""

    def test_first_seen_order_and_percentages(self):
        """Test status order and percentages"""
        bundle = _bundle(product_count=4, status_counts={"sale": 3, "out": 1})
        result = views.build_status_breakdown(bundle, DEFAULT_DEFINITIONS)

        assert [entry["name"] for entry in result] == ["sale", "out"]
        assert [entry["percentage"] for entry in result] == [75, 25]

    def test_palette_cycles(self):
        """Test status colors cycle the palette"""
        definitions = replace(DEFAULT_DEFINITIONS, status_palette=("#111", "#222"))
        bundle = _bundle(product_count=3, status_counts={"a": 1, "b": 1, "c": 1})
        colors = [entry["color"] for entry in views.build_status_breakdown(bundle, definitions)]

        assert colors == ["#111", "#222", "#111"]

    def test_percentages_bounded(self):
        """Test status percentages stay within bounds"""
        bundle = _bundle(product_count=7, status_counts={"a": 3, "b": 3, "c": 1})
        percentages = [entry["percentage"] for entry in views.build_status_breakdown(bundle, DEFAULT_DEFINITIONS)]

        assert all(0 <= p <= 100 for p in percentages)
        assert sum(percentages) <= 100.05


class TestChannels:
    """Tests for channel distribution and summary"""

    def test_percentages_are_of_tag_occurrences(self):
        """Test channel percentages use tag occurrences"""
        bundle = _bundle(product_count=2, channel_counts={"web": 2, "app": 1})
        result = views.build_channel_distribution(bundle, DEFAULT_DEFINITIONS)

        assert [(e["name"], e["percentage"]) for e in result] == [("web", 66.67), ("app", 33.33)]
        assert result[0]["label"] == "Web Store"
        assert result[0]["color"] == DEFAULT_DEFINITIONS.channel("web").color

    def test_unknown_channel_color_is_stable(self):
        """Test unknown channel colors are stable"""
        bundle = _bundle(product_count=1, channel_counts={"tiktok": 1})
        first = views.build_channel_distribution(bundle, DEFAULT_DEFINITIONS)[0]
        second = views.build_channel_distribution(bundle, DEFAULT_DEFINITIONS)[0]

        assert first["color"] == second["color"]
        assert first["color"] in DEFAULT_DEFINITIONS.channel_palette
        assert first["label"] == "tiktok"

    def test_summary(self):
        """Test channel summary"""
        distribution = [{"percentage": 66.67}, {"percentage": 33.33}]
        assert views.build_channel_summary(distribution) == {"value": 66.67, "change": 33.34, "average": 50}

    def test_summary_single_and_empty(self):
        """Test channel summary edge cases"""
        assert views.build_channel_summary([{"percentage": 100}]) == {"value": 100, "change": 0, "average": 100}
        assert views.build_channel_summary([]) == {"value": 0, "change": 0, "average": 0}


class TestOrderHeatmap:
    """Tests for the calendar heatmap"""

    def test_sorted_by_day_then_hour(self):
        """Test heatmap ordering"""
        bundle = _bundle(calendar_cells={(3, 5): 1, (0, 23): 2, (0, 1): 1, (6, 0): 4})
        result = views.build_order_heatmap(bundle, DEFAULT_DEFINITIONS)

        assert [(e["day_index"], e["hour"]) for e in result] == [(0, 1), (0, 23), (3, 5), (6, 0)]
        assert [e["day"] for e in result] == ["Sun", "Sun", "Wed", "Sat"]


class TestSalesFunnel:
    """Tests for the synthetic funnel"""

    def test_uses_total_views(self):
        """Test funnel with recorded views"""
        result = views.build_sales_funnel(_bundle(product_count=5, total_views=1000, total_sold=50))

        assert [s["value"] for s in result["stages"]] == [1000, 300, 50]
        assert [s["percentage"] for s in result["stages"]] == [100, 30, 5]
        assert result["funnel_rate"] == 5

    def test_estimates_views_from_product_count(self):
        """Test funnel view estimate"""
        result = views.build_sales_funnel(_bundle(product_count=1, total_sold=3))

        assert [s["value"] for s in result["stages"]] == [12, 6, 3]
        assert result["funnel_rate"] == 25

    def test_views_stage_never_zero(self):
        """Test funnel with no data"""
        result = views.build_sales_funnel(_bundle())

        assert result["stages"][0]["value"] == 1
        assert result["funnel_rate"] == 0


class TestDailySales:
    """Tests for the daily revenue series"""

    def test_series_sorted_with_summary(self):
        """Test daily series and summary"""
        bundle = _bundle(daily_revenue={"2024-03-06": 50.0, "2024-03-05": 250.0})
        result = views.build_daily_sales(bundle)

        assert result["series"] == [
            {"date": "2024-03-05", "revenue": 250},
            {"date": "2024-03-06", "revenue": 50},
        ]
        assert result["summary"] == {"total": 300, "previous": 270, "change": 11.11, "average": 150}

    def test_empty(self):
        """Test empty daily series"""
        result = views.build_daily_sales(_bundle())
        assert result == {"series": [], "summary": {"total": 0, "previous": 0, "change": 0, "average": 0}}


class TestTopProducts:
    """Tests for the best-seller ranking"""

    def test_top_ten_sorted_descending(self):
        """Test top products ranking"""
        retained = [_retained(i, sold=i) for i in range(1, 13)]
        bundle = _bundle(retained=retained, total_sold=sum(range(1, 13)))
        result = views.build_top_products(bundle, DEFAULT_DEFINITIONS)

        assert len(result) == 10
        assert [p["sold_quantity"] for p in result] == list(range(12, 2, -1))
        assert sum(p["percentage"] for p in result) <= 100
        assert result[0]["percentage"] == views.round_half_up(12 / 78 * 100)

    def test_ties_keep_input_order(self):
        """Test ranking ties keep input order"""
        retained = [_retained(1, sold=5), _retained(2, sold=5), _retained(3, sold=9)]
        result = views.build_top_products(_bundle(retained=retained, total_sold=19), DEFAULT_DEFINITIONS)
        assert [p["id"] for p in result] == [3, 1, 2]

    def test_zero_sold_denominator(self):
        """Test ranking with nothing sold"""
        result = views.build_top_products(_bundle(retained=[_retained(1, sold=0)]), DEFAULT_DEFINITIONS)
        assert result[0]["percentage"] == 0


class TestSummaryCards:
    """Tests for the summary cards"""

    def test_synthetic_previous_values(self):
        """Test summary card previous values"""
        bundle = _bundle(product_count=1, total_quantity=10, total_sold=3, total_views=0)
        cards = {card["key"]: card for card in views.build_summary_cards(bundle)}

        assert list(cards) == ["total_products", "total_quantity", "total_sold_quantity", "total_views"]
        assert (cards["total_quantity"]["previous"], cards["total_quantity"]["change"]) == (9, 11.11)
        assert (cards["total_products"]["previous"], cards["total_products"]["change"]) == (1, 0)
        assert (cards["total_views"]["previous"], cards["total_views"]["change"]) == (0, 0)


class TestTable:
    """Tests for the tabular projection"""

    def test_columns_and_row_limit(self, product_factory):
        """Test table columns and row limit"""
        aggregator = Aggregator(DEFAULT_DEFINITIONS)
        for index in range(25):
            aggregator.add_raw(product_factory(id=index, sku=f"SKU-{index}"))

        columns, rows = views.build_table(aggregator.bundle, DEFAULT_DEFINITIONS)

        assert [c["field"] for c in columns] == ["sku", "price", "quantity", "sold", "status", "views"]
        assert len(rows) == 20
        assert rows[0]["sku"] == {"value": "SKU-0"}
        assert rows[0]["price"] == {"value": 100, "unit": "SAR"}
        assert rows[0]["quantity"] == {"value": 10, "unit": "pcs", "status": "success"}
        assert rows[0]["status"] == {"value": "sale", "status": "success"}

    @pytest.mark.parametrize("quantity,tone", [(None, "unknown"), (0, "danger"), (3, "warning"), (50, "success")])
    def test_stock_tone(self, quantity, tone):
        """Test stock tone thresholds"""
        bundle = _bundle(retained=[replace(_retained(1, sold=0), quantity=quantity)])
        _, rows = views.build_table(bundle, DEFAULT_DEFINITIONS)
        assert rows[0]["quantity"]["status"] == tone


class TestInventoryBands:
    """Tests for the price-band view"""

    def test_ratio_and_counts(self):
        """Test inventory band ratios"""
        bundle = AccumulatorBundle.fresh(DEFAULT_DEFINITIONS)
        bundle.bucket_stats[0].available = 1
        bundle.bucket_stats[0].sold = 3
        result = views.build_inventory_bands(bundle, DEFAULT_DEFINITIONS)

        assert [band["label"] for band in result] == ["0-50", "50-100", "100-200", "200-500", "500+"]
        assert result[0]["ratio"] == [25, 75]
        assert result[0]["counts"] == [1, 3]
        assert result[1]["ratio"] == [0, 0]
        assert result[-1]["end"] is None
