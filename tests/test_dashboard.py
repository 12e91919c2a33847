import os
import sys
import pandas as pd
import pytest

# Add the project root (parent directory of tests/) to Python path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from analysis.payment_dashboard import build_dashboard
from analysis.payment_dashboard import main as dashboard_main
from analysis.payment_dashboard.export import buckets_to_frame, export_to_excel, nested_to_frame

TODAY = "2024-03-20"


def _ledger():
    return pd.DataFrame([
        {'company_name': 'Metro', 'department': '杂货', 'invoice_date': '2024-03-04', 'invoice_amount': 100.0},
        {'company_name': 'Metro', 'department': '杂货', 'invoice_date': '2024-02-01', 'invoice_amount': 60.0,
         'actual_paid_amount': 60.0, 'check_date': '2024-02-11'},
        {'company_name': 'Hydro*', 'department': '杂货', 'invoice_date': '2024-03-01', 'invoice_amount': 40.0},
        {'company_name': 'Sysco', 'department': '菜部', 'invoice_date': '2024-03-12', 'invoice_amount': 80.0},
        {'company_name': 'Sysco', 'department': '菜部', 'invoice_date': '2024-01-10', 'invoice_amount': 50.0,
         'actual_paid_amount': 50.0, 'check_date': '2024-01-15'},
        {'company_name': 'SLEEMAN', 'department': '酒水', 'invoice_date': '2024-03-05', 'invoice_amount': 999.0},
        {'company_name': 'Metro', 'department': '杂货', 'invoice_date': 'oops', 'invoice_amount': 20.0},
    ])


@pytest.fixture
def tables():
    return build_dashboard(_ledger(), today=TODAY)


def test_selectors_default_to_current_month_and_department(tables):
    assert tables['today'] == TODAY
    assert tables['months'] == ['2024-01', '2024-02', '2024-03']
    assert tables['month'] == '2024-03'
    assert tables['departments'] == ['杂货', '菜部', '酒水']
    assert tables['department'] == '杂货'


def test_unparseable_dates_are_counted(tables):
    assert tables['date_fallbacks'] == 1


def test_purchase_and_payment_views(tables):
    assert [m['month'] for m in tables['monthly']] == ['2024-01', '2024-02', '2024-03']
    assert tables['monthly'][1]['total_amount'] == pytest.approx(60.0)

    payment = {m['month']: m['total_amount'] for m in tables['payment_monthly']}
    assert payment == pytest.approx({'2024-01': 50.0, '2024-02': 60.0, '2024-03': 40.0}), \
        "The auto-pay vendor is settled on its due date"

    assert [w['week_range'] for w in tables['weekly']] == [
        '2024-02-26 ~ 2024-03-03',
        '2024-03-04 ~ 2024-03-10',
        '2024-03-11 ~ 2024-03-17',
        '2024-03-18 ~ 2024-03-24',
    ]
    assert all(set(w['by_department']) == {'杂货'} for w in tables['company_weekly'])


def test_distribution_views(tables):
    assert tables['distribution']['ordered_companies'] == ['Hydro*', 'Metro']
    paid_points = {(p['company_name'], p['day']) for p in tables['payment_distribution']['points']}
    assert paid_points == {('Metro', '2024-02-11'), ('Hydro*', '2024-03-11')}


def test_metrics_and_forecast_share_the_clock(tables):
    metrics = tables['department_cycle_metrics'].set_index('company_name')
    assert metrics.loc['Metro', 'median_days'] == 10
    assert metrics.loc['Hydro*', 'median_days'] == 10

    forecast = tables['forecast']
    assert forecast['total_due_this_week'] == pytest.approx(180.0)
    assert forecast['by_dept'] == pytest.approx({'杂货': 100.0, '菜部': 80.0})
    assert len(forecast['all_records']) == 3

    assert tables['unpaid']['total_unpaid'] == pytest.approx(200.0)


def test_explicit_month_and_department():
    tables = build_dashboard(_ledger(), today=TODAY, month='2024-02', department='菜部')
    assert [w['week_range'] for w in tables['weekly']] == ['2024-01-29 ~ 2024-02-04']
    assert tables['company_weekly'] == []
    assert list(tables['department_cycle_metrics']['company_name']) == ['Sysco']


def test_latest_month_when_current_month_has_no_data():
    # without the unparseable row, which would land in the current month
    tables = build_dashboard(_ledger().iloc[:-1], today='2024-07-01')
    assert tables['month'] == '2024-03'


def test_export_writes_one_workbook(tables, tmp_path):
    outfile = export_to_excel(tables, output_dir=str(tmp_path))

    assert outfile.name == 'payment_dashboard_2024-03-20.xlsx'
    with pd.ExcelFile(outfile) as workbook:
        assert workbook.sheet_names == [
            'Monthly Purchase', 'Weekly Purchase', 'Monthly Payment', 'Weekly Payment',
            'Unpaid', 'Payment Cycle', 'Forecast', 'Due This Week',
        ]
        assert len(workbook.parse('Forecast')) == 3


def test_frame_helpers():
    buckets = [
        {'month': '2024-01', 'total_amount': 5.0, 'by_department': {'A': 5.0}},
        {'month': '2024-02', 'total_amount': 7.0, 'by_department': {'B': 7.0}},
    ]
    frame = buckets_to_frame(buckets, 'month')
    assert list(frame['A']) == [5.0, 0.0]
    assert list(buckets_to_frame([], 'month').columns) == ['month', 'total_amount']

    nested = nested_to_frame({'D': {'X': 1.0, 'Y': 2.0}}, 'department', 'company_name')
    assert list(nested.itertuples(index=False, name=None)) == [('D', 'X', 1.0), ('D', 'Y', 2.0)]


def test_cli_builds_workbook_from_excel(tmp_path, monkeypatch):
    workbook = tmp_path / 'ledger.xlsx'
    with pd.ExcelWriter(workbook) as xl:
        pd.DataFrame({
            '公司名称': ['Metro'], '部门': ['杂货'], '发票日期': ['2024-03-04'], '发票金额': [100.0],
        }).to_excel(xl, sheet_name='数据源', index=False)

    out_dir = tmp_path / 'out'
    monkeypatch.setattr(sys, 'argv', [
        'payment-dashboard', '--excel', str(workbook), '--today', TODAY,
        '--config', str(tmp_path / 'missing.yml'), '--output-dir', str(out_dir),
    ])
    dashboard_main.main()

    assert (out_dir / 'payment_dashboard_2024-03-20.xlsx').exists()
