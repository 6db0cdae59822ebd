"""
Tests for revenue/profit aggregation and purchase-price resolution.
"""
from datetime import date, datetime
from decimal import Decimal

import pytest

from pharmacy.exceptions import InvalidInputError
from pharmacy.models.medicine import Medicine
from pharmacy.models.sale import Sale
from pharmacy.schemas.sale import SaleCreate
from pharmacy.services import analytics_service, sale_service, stock_service
from pharmacy.services.analytics_service import MedicineIndex, aggregate, strip_qualifier


def _med(id, name, clinic="Clinic1", price="5"):
    return Medicine(id=id, name=name, clinic=clinic, quantity=10, purchase_price=Decimal(price))


def _sale(medicine_id, name, quantity, rate, clinic="Clinic1"):
    rate = Decimal(rate)
    return Sale(
        medicine_id=medicine_id,
        medicine_name=name,
        clinic=clinic,
        quantity=quantity,
        rate=rate,
        total=rate * quantity,
        sold_by="alice",
        sold_at=datetime(2025, 6, 10),
    )


class TestStripQualifier:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Panadol new", "panadol"),
            ("Panadol (New)", "panadol"),
            ("  PANADOL Latest ", "panadol"),
            ("Panadol - updated", "panadol"),
            ("Panadol old", "panadol"),
            ("Panadol", "panadol"),
            ("Renew", "renew"),
            ("New", "new"),
        ],
    )
    def test_strip(self, raw, expected):
        assert strip_qualifier(raw) == expected


class TestPurchasePriceResolution:
    def test_direct_reference_wins(self):
        index = MedicineIndex([_med("m1", "Panadol", price="5"), _med("m2", "Panadol", price="9")])
        assert index.purchase_price(_sale("m1", "Panadol", 1, "8")) == Decimal("5")

    def test_exact_name_case_insensitive(self):
        index = MedicineIndex([_med("m2", "  panadol ", price="4")])
        assert index.purchase_price(_sale("gone", "PANADOL", 1, "8")) == Decimal("4")

    def test_qualifier_fallback_both_sides(self):
        index = MedicineIndex([_med("m2", "Panadol (old)", price="3")])
        assert index.purchase_price(_sale("gone", "Panadol new", 1, "8")) == Decimal("3")

    def test_exact_name_preferred_over_qualifier_match(self):
        index = MedicineIndex([_med("m2", "Panadol new", price="3"), _med("m3", "Panadol", price="6")])
        assert index.purchase_price(_sale("gone", "Panadol", 1, "8")) == Decimal("6")

    def test_exact_clinic_preferred(self):
        index = MedicineIndex([
            _med("a", "Panadol", clinic="Clinic2", price="2"),
            _med("b", "Panadol", clinic="Clinic1", price="7"),
        ])
        assert index.purchase_price(_sale("gone", "Panadol", 1, "8", clinic="Clinic1")) == Decimal("7")

    def test_clinic_prefix_preferred_over_any(self):
        index = MedicineIndex([
            _med("a", "Panadol", clinic="Clinic2", price="2"),
            _med("b", "Panadol", clinic="clinic1", price="7"),
        ])
        sale = _sale("gone", "Panadol", 1, "8", clinic="Clinic1 (Alice)")
        assert index.purchase_price(sale) == Decimal("7")

    def test_blank_clinic_is_not_a_prefix_match(self):
        index = MedicineIndex([
            _med("a", "Panadol", clinic="  ", price="1"),
            _med("b", "Panadol", clinic="Clinic1 Main", price="9"),
        ])
        sale = _sale("gone", "Panadol", 1, "8", clinic="Clinic1 Main (Alice)")
        assert index.purchase_price(sale) == Decimal("9")

    def test_any_candidate_as_last_resort(self):
        index = MedicineIndex([_med("a", "Panadol", clinic="Clinic9", price="2")])
        assert index.purchase_price(_sale("gone", "Panadol", 1, "8")) == Decimal("2")

    def test_unresolvable(self):
        index = MedicineIndex([_med("a", "Brufen")])
        assert index.purchase_price(_sale("gone", "Panadol", 1, "8")) is None


class TestAggregate:
    def test_totals_and_profit(self):
        index = MedicineIndex([_med("m1", "Panadol", price="5"), _med("m2", "Brufen", price="1")])
        result = aggregate(
            [_sale("m1", "Panadol", 10, "8"), _sale("m2", "Brufen", 4, "2.5"), _sale("m1", "Panadol", 2, "7")],
            index,
        )
        assert result.total_sales == 16
        assert result.total_revenue == Decimal("104")
        # (8-5)*10 + (2.5-1)*4 + (7-5)*2
        assert result.total_profit == Decimal("40")
        assert [(b.name, b.quantity, b.profit) for b in result.top_medicines] == [
            ("Panadol", 12, Decimal("34")),
            ("Brufen", 4, Decimal("6")),
        ]

    def test_unresolved_group_profit_is_unknown_not_zero(self):
        index = MedicineIndex([_med("m1", "Panadol", price="5")])
        result = aggregate([_sale("m1", "Panadol", 1, "8"), _sale("gone", "Mystery", 3, "10")], index)

        mystery = next(b for b in result.top_medicines if b.name == "Mystery")
        assert mystery.profit is None
        assert mystery.unpriced_quantity == 3
        assert mystery.revenue == Decimal("30")
        assert result.total_profit == Decimal("3")
        assert result.total_revenue == Decimal("38")

    def test_partially_priced_group_profit_is_unknown(self):
        index = MedicineIndex([_med("m1", "Old Name", price="5")])
        result = aggregate([_sale("m1", "Old Name", 1, "8"), _sale("gone", "Old Name", 100, "8")], index)

        [bucket] = result.top_medicines
        assert bucket.quantity == 101
        assert bucket.unpriced_quantity == 100
        assert bucket.profit is None
        assert bucket.priced_profit == Decimal("3")
        assert result.total_profit == Decimal("3")

    def test_total_profit_unknown_when_nothing_resolves(self):
        result = aggregate([_sale("gone", "Mystery", 3, "10")], MedicineIndex([]))
        assert result.total_profit is None
        assert result.total_sales == 3

    def test_no_sales(self):
        result = aggregate([], MedicineIndex([]))
        assert (result.total_sales, result.total_revenue, result.total_profit, result.top_medicines) == (
            0, Decimal("0"), Decimal("0"), [],
        )

    def test_groups_by_snapshot_name_across_clinics(self):
        index = MedicineIndex([_med("a", "Panadol", "Clinic1", "5"), _med("b", "Panadol", "Clinic2", "6")])
        result = aggregate([_sale("a", "Panadol", 1, "8"), _sale("b", "Panadol", 1, "8")], index)
        [bucket] = result.top_medicines
        assert bucket.quantity == 2
        assert bucket.profit == Decimal("5")

    def test_top_ten_stable_on_ties(self):
        names = [f"Med{i}" for i in range(12)]
        sales = [_sale("x", n, 1, "1") for n in names]
        sales.append(_sale("x", "Med11", 1, "1"))
        result = aggregate(sales, MedicineIndex([]))

        assert len(result.top_medicines) == 10
        assert [b.name for b in result.top_medicines] == ["Med11"] + names[:9]


class TestWindows:
    def _record(self, db, medicine, quantity, rate, sold_at, clinic="Clinic1"):
        return sale_service.record_sale(
            db,
            SaleCreate(
                medicine_id=medicine.id,
                medicine_name=medicine.name,
                clinic=clinic,
                quantity=quantity,
                rate=Decimal(rate),
                sold_by="alice",
                sold_at=sold_at,
            ),
        )

    def test_deleted_reference_resolves_via_same_clinic_name(self, db, make_medicine):
        original = make_medicine(name="Panadol", quantity=100, purchase_price="5")
        self._record(db, original, 10, "8", datetime(2025, 6, 15, 10, 0))
        stock_service.delete_medicine(db, original.id)
        make_medicine(name="Panadol", quantity=50, purchase_price="5")

        result = analytics_service.analytics(db, "Clinic1", date(2025, 6, 1), date(2025, 6, 30))

        assert result.total_profit == Decimal("30")
        assert result.top_medicines[0].profit == Decimal("30")

    def test_range_is_inclusive_to_end_of_day(self, db, make_medicine):
        med = make_medicine(quantity=100)
        self._record(db, med, 1, "8", datetime(2025, 6, 1, 0, 0))
        self._record(db, med, 2, "8", datetime(2025, 6, 30, 23, 59, 59))
        self._record(db, med, 4, "8", datetime(2025, 7, 1, 0, 0))
        self._record(db, med, 8, "8", datetime(2025, 5, 31, 23, 59, 59))

        assert analytics_service.analytics(db, "Clinic1", date(2025, 6, 1), date(2025, 6, 30)).total_sales == 3
        assert analytics_service.analytics(db, "Clinic1", start=date(2025, 6, 1)).total_sales == 7
        assert analytics_service.analytics(db, "Clinic1", end=date(2025, 6, 30)).total_sales == 11
        assert analytics_service.analytics(db, "Clinic1").total_sales == 15

    def test_range_validation(self, db):
        with pytest.raises(InvalidInputError):
            analytics_service.analytics(db, "")
        with pytest.raises(InvalidInputError):
            analytics_service.analytics(db, "Clinic1", date(2025, 7, 1), date(2025, 6, 1))

    def test_monthly_uses_business_calendar(self, db, make_medicine):
        med = make_medicine(quantity=100)
        # 19:30 UTC on May 31st is already June 1st in Karachi
        self._record(db, med, 1, "8", datetime(2025, 5, 31, 19, 30))
        self._record(db, med, 2, "8", datetime(2025, 6, 30, 18, 59))
        # 19:00 UTC on June 30th is July 1st in Karachi
        self._record(db, med, 4, "8", datetime(2025, 6, 30, 19, 0))
        self._record(db, med, 8, "8", datetime(2025, 6, 10), clinic="Clinic2")

        result = analytics_service.monthly_analytics(db, "Clinic1", "2025-06")
        assert result.total_sales == 3
        assert result.total_revenue == Decimal("24")

    def test_monthly_validation(self, db):
        with pytest.raises(InvalidInputError):
            analytics_service.monthly_analytics(db, "Clinic1", "")
        with pytest.raises(InvalidInputError):
            analytics_service.monthly_analytics(db, "Clinic1", "June")
