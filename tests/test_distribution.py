import os
import sys
import pandas as pd
import pytest

# Add the project root (parent directory of tests/) to Python path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from analysis.payment_dashboard.distribution import company_distribution, distribution_drilldown
from payment.inference import infer
from payment.normalizer import normalize
from payment.schema import records_to_frame

TODAY = "2024-06-30"
WINDOW = ("2024-03-01", "2024-03-31")


def _frame(rows):
    return normalize(records_to_frame(rows, today=TODAY))


def _row(company, day, amount, department='D', **extra):
    return {'company_name': company, 'department': department, 'invoice_date': day,
            'invoice_amount': amount, **extra}


def test_groups_by_company_and_day():
    frame = _frame([
        _row('A', '2024-03-05', 10.0),
        _row('A', '2024-03-05', 15.0),
        _row('A', '2024-03-06', 5.0),
        _row('B', '2024-03-05', 100.0),
    ])
    result = company_distribution(frame, 'D', date_range=WINDOW)
    points = {(p['company_name'], p['day']): p for p in result['points']}

    assert set(points) == {('A', '2024-03-05'), ('A', '2024-03-06'), ('B', '2024-03-05')}
    assert points[('A', '2024-03-05')]['amount'] == pytest.approx(25.0)
    assert points[('A', '2024-03-05')]['invoice_count'] == 2
    assert points[('A', '2024-03-06')]['total_company_amount'] == pytest.approx(30.0)
    assert result['ordered_companies'] == ['A', 'B'], "Companies ordered smallest total first"


def test_window_is_inclusive_and_filters_department_and_companies():
    frame = _frame([
        _row('A', '2024-03-01', 10.0),
        _row('A', '2024-03-31', 10.0),
        _row('A', '2024-04-01', 10.0),
        _row('B', '2024-03-10', 10.0),
        _row('C', '2024-03-10', 10.0, department='Other'),
    ])
    result = company_distribution(frame, 'D', companies={'A'}, date_range=WINDOW)
    assert sorted(p['day'] for p in result['points']) == ['2024-03-01', '2024-03-31']
    assert result['ordered_companies'] == ['A']

    everything = company_distribution(frame, 'D', companies=set(), date_range=WINDOW)
    assert everything['ordered_companies'] == ['A', 'B'] or everything['ordered_companies'] == ['B', 'A']
    assert 'C' not in everything['ordered_companies']


def test_top_twenty_companies_cap():
    rows = [_row(f'Vendor {i:02d}', '2024-03-10', float(i * 10)) for i in range(1, 26)]
    result = company_distribution(_frame(rows), 'D', date_range=WINDOW)

    assert len(result['ordered_companies']) == 20
    assert result['ordered_companies'][0] == 'Vendor 06'
    assert result['ordered_companies'][-1] == 'Vendor 25'
    assert {p['company_name'] for p in result['points']} <= set(result['ordered_companies'])


def test_cap_is_configurable():
    rows = [_row(f'Vendor {i}', '2024-03-10', float(i)) for i in range(1, 6)]
    result = company_distribution(_frame(rows), 'D', date_range=WINDOW, cfg={'top_n_companies': 3})
    assert result['ordered_companies'] == ['Vendor 3', 'Vendor 4', 'Vendor 5']


def test_non_positive_groups_are_dropped():
    frame = _frame([
        _row('A', '2024-03-05', 50.0),
        _row('A', '2024-03-06', -20.0),
        _row('B', '2024-03-05', -5.0),
    ])
    result = company_distribution(frame, 'D', date_range=WINDOW)
    assert [(p['company_name'], p['day']) for p in result['points']] == [('A', '2024-03-05')]
    assert result['points'][0]['total_company_amount'] == pytest.approx(30.0)
    assert result['ordered_companies'] == ['B', 'A']


def test_payment_basis_uses_check_dates():
    frame = infer(_frame([
        _row('A', '2024-02-20', 80.0, check_date='2024-03-02', actual_paid_amount=75.0),
        _row('A', '2024-03-03', 60.0),
    ]), today=TODAY)
    result = company_distribution(frame, 'D', date_range=WINDOW, basis='payment')
    assert [(p['day'], p['amount']) for p in result['points']] == [('2024-03-02', 75.0)]


def test_empty_selection():
    frame = _frame([_row('A', '2024-03-05', 10.0)])
    assert company_distribution(frame, 'Nope', date_range=WINDOW) == {'points': [], 'ordered_companies': []}


def test_open_bounds_cover_all_data():
    frame = _frame([_row('A', '2023-01-05', 10.0), _row('A', '2025-01-05', 10.0)])
    result = company_distribution(frame, 'D')
    assert len(result['points']) == 2


def test_drilldown_returns_bubble_records():
    frame = _frame([
        _row('A', '2024-03-05', 10.0, invoice_number='I-1'),
        _row('A', '2024-03-05', 15.0, invoice_number='I-2'),
        _row('A', '2024-03-06', 5.0, invoice_number='I-3'),
    ])
    records = distribution_drilldown(frame, 'D', 'A', '2024-03-05')
    assert list(records['invoice_number']) == ['I-1', 'I-2']
    assert isinstance(records, pd.DataFrame)
