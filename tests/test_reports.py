from datetime import date
from decimal import Decimal
from types import SimpleNamespace

from services import classify
from services.reports import RecipeCmv, cmv_report, purchase_summary


def row(recipe_id, cost, price):
    cost = Decimal(cost)
    price = Decimal(price) if price is not None else None
    cmv = cost / price * 100 if price else None
    return RecipeCmv(
        recipe_id=recipe_id,
        name=f'Receita {recipe_id}',
        total_cost=cost,
        sale_price=price,
        gross_margin=price - cost if price else None,
        cmv_percentage=cmv,
        classification=classify(cmv),
    )


def test_cmv_report_aggregates():
    rows = [row(1, '20', '100'), row(2, '30', '100'), row(3, '40', '50'), row(4, '5', None)]
    report = cmv_report(rows, target=Decimal('30'))

    assert report.recipe_count == 4
    assert report.computable_count == 3
    assert report.total_cost == Decimal('95')
    assert report.total_sale_price == Decimal('250')
    assert report.gross_margin == Decimal('160')
    # (20 + 30 + 80) / 3
    assert abs(report.average_cmv - Decimal('43.3333333')) < Decimal('0.0001')
    assert report.weighted_cmv == Decimal('36')
    assert report.best.recipe_id == 1
    assert report.worst.recipe_id == 3
    assert report.by_classification == {
        'excellent': 1, 'good': 1, 'high': 1, 'not applicable': 1,
    }
    assert [r.recipe_id for r in report.above_target] == [3]


def test_target_is_exclusive():
    report = cmv_report([row(1, '30', '100')], target=30)
    assert report.above_target == ()


def test_empty_report():
    report = cmv_report([], errors=[{'recipe_id': 7, 'error': 'ProductNotFound'}])
    assert report.recipe_count == 0
    assert report.average_cmv is None
    assert report.weighted_cmv is None
    assert report.best is None
    assert report.target_cmv == Decimal('30')
    assert report.errors == ({'recipe_id': 7, 'error': 'ProductNotFound'},)


def make_purchase(day, total, items):
    return SimpleNamespace(
        purchase_date=day,
        total_value=Decimal(total),
        items=[
            SimpleNamespace(product_id=pid, product=SimpleNamespace(name=name),
                            quantity=Decimal(qty), subtotal=Decimal(sub))
            for pid, name, qty, sub in items
        ],
    )


def test_purchase_summary():
    purchases = [
        make_purchase(date(2026, 9, 28), '100', [(1, 'Farinha', '10', '100')]),
        make_purchase(date(2026, 10, 3), '250', [(1, 'Farinha', '10', '90'), (2, 'Leite', '12', '160')]),
        make_purchase(date(2026, 10, 20), '40', [(3, 'Ovos', '2', '40')]),
    ]
    summary = purchase_summary(purchases, month=(2026, 10), top=2)

    assert summary.purchase_count == 3
    assert summary.total_value == Decimal('390')
    assert summary.month_value == Decimal('290')
    assert [p['name'] for p in summary.top_products] == ['Farinha', 'Leite']
    assert summary.top_products[0]['quantity'] == Decimal('20')
    assert summary.top_products[0]['spend'] == Decimal('190')


def test_purchase_summary_without_month():
    summary = purchase_summary([])
    assert summary.total_value == 0
    assert summary.month_value == 0
    assert summary.top_products == []
