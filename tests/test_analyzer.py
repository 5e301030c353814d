from datetime import date
from decimal import Decimal

from mibalance.models.common import TransactionType
from mibalance.utils.analyzer import (
    UNCATEGORIZED_COLOR,
    UNCATEGORIZED_NAME,
    BudgetRecord,
    CategoryRecord,
    FinanceAnalyzer,
    GoalRecord,
    TransactionRecord,
    month_window,
    resolve_window,
)

INCOME = TransactionType.INCOME
EXPENSE = TransactionType.EXPENSE

NOVEMBER = month_window(2025, 11)

categories = [
    CategoryRecord(id=1, name="Salario", type=INCOME, color="#10B981", icon="briefcase"),
    CategoryRecord(id=2, name="Alimentación", type=EXPENSE, color="#F59E0B", icon="utensils"),
    CategoryRecord(id=3, name="Transporte", type=EXPENSE, color="#EF4444", icon="car"),
]

sample_transactions = [
    TransactionRecord(id=1, amount=Decimal("2500.00"), type=INCOME, date=date(2025, 11, 1), category_id=1),
    TransactionRecord(id=2, amount=Decimal("250.00"), type=EXPENSE, date=date(2025, 11, 3), category_id=2),
    TransactionRecord(id=3, amount=Decimal("150.00"), type=EXPENSE, date=date(2025, 11, 9), category_id=2),
    TransactionRecord(id=4, amount=Decimal("80.50"), type=EXPENSE, date=date(2025, 11, 30), category_id=3),
    TransactionRecord(id=5, amount=Decimal("19.50"), type=EXPENSE, date=date(2025, 11, 12)),
    # Outside November
    TransactionRecord(id=6, amount=Decimal("999.00"), type=EXPENSE, date=date(2025, 10, 31), category_id=2),
    TransactionRecord(id=7, amount=Decimal("300.00"), type=INCOME, date=date(2025, 12, 1), category_id=1),
]


def test_balance_scenario():
    analyzer = FinanceAnalyzer()
    transactions = [
        TransactionRecord(id=1, amount=Decimal("100"), type=INCOME, date=date(2025, 11, 2)),
        TransactionRecord(id=2, amount=Decimal("40"), type=EXPENSE, date=date(2025, 11, 2)),
        TransactionRecord(id=3, amount=Decimal("10"), type=EXPENSE, date=date(2025, 11, 2)),
    ]
    result = analyzer.compute_balance(transactions, NOVEMBER)
    assert result.total_income == Decimal("100")
    assert result.total_expenses == Decimal("50")
    assert result.balance == Decimal("50")
    assert result.transaction_count.income == 1
    assert result.transaction_count.expense == 2


def test_balance_respects_window():
    analyzer = FinanceAnalyzer()
    result = analyzer.compute_balance(sample_transactions, NOVEMBER)
    assert result.total_income == Decimal("2500.00")
    assert result.total_expenses == Decimal("500.00")
    assert result.balance == result.total_income - result.total_expenses


def test_balance_decimal_precision():
    analyzer = FinanceAnalyzer()
    transactions = [
        TransactionRecord(id=i, amount=Decimal("0.10"), type=INCOME, date=date(2025, 11, 5))
        for i in range(3)
    ]
    result = analyzer.compute_balance(transactions, NOVEMBER)
    assert result.total_income == Decimal("0.30")
    assert result.balance == Decimal("0.30")


def test_balance_empty():
    result = FinanceAnalyzer().compute_balance([], NOVEMBER)
    assert result.total_income == 0
    assert result.total_expenses == 0
    assert result.balance == 0


def test_balance_to_dict_uses_camel_case():
    data = FinanceAnalyzer().compute_balance(sample_transactions, NOVEMBER).to_dict()
    assert set(data) == {"totalIncome", "totalExpenses", "balance", "transactionCount", "period"}
    assert data["transactionCount"] == {"income": 1, "expense": 4}
    assert data["period"] == {"startDate": date(2025, 11, 1), "endDate": date(2025, 11, 30)}


def test_resolve_window_defaults_to_current_month():
    window = resolve_window(today=date(2024, 2, 14))
    assert window.start_date == date(2024, 2, 1)
    assert window.end_date == date(2024, 2, 29)


def test_resolve_window_needs_both_bounds():
    assert resolve_window(date(2024, 1, 5), None, today=date(2024, 3, 3)) == month_window(2024, 3)
    window = resolve_window(date(2024, 1, 5), date(2024, 1, 20), today=date(2024, 3, 3))
    assert (window.start_date, window.end_date) == (date(2024, 1, 5), date(2024, 1, 20))


def test_category_breakdown_sorted_with_percentages():
    analyzer = FinanceAnalyzer()
    result = analyzer.category_breakdown(sample_transactions, categories, NOVEMBER)

    amounts = [share.amount for share in result.categories]
    assert amounts == sorted(amounts, reverse=True)
    assert result.total_amount == Decimal("3000.00")
    assert sum(share.amount for share in result.categories) == result.total_amount
    assert abs(sum(share.percentage for share in result.categories) - 100) < 1e-9

    top = result.categories[0]
    assert top.category_name == "Salario"
    assert abs(top.percentage - 250 / 3) < 1e-9

    food = next(s for s in result.categories if s.category_id == 2)
    assert food.amount == Decimal("400.00")
    assert food.transaction_count == 2
    assert food.category_color == "#F59E0B"


def test_category_breakdown_uncategorized_sentinel():
    analyzer = FinanceAnalyzer()
    orphan = TransactionRecord(id=9, amount=Decimal("5.00"), type=EXPENSE, date=date(2025, 11, 5), category_id=42)
    result = analyzer.category_breakdown(sample_transactions + [orphan], categories, NOVEMBER, EXPENSE)

    unknown = [s for s in result.categories if s.category_name == UNCATEGORIZED_NAME]
    assert {s.category_id for s in unknown} == {None, 42}
    assert all(s.category_color == UNCATEGORIZED_COLOR for s in unknown)
    assert all(s.category_icon is None for s in unknown)
    assert all(s.type == EXPENSE for s in result.categories)


def test_category_breakdown_ties_keep_grouping_order():
    analyzer = FinanceAnalyzer()
    transactions = [
        TransactionRecord(id=1, amount=Decimal("10"), type=EXPENSE, date=date(2025, 11, 1), category_id=3),
        TransactionRecord(id=2, amount=Decimal("10"), type=EXPENSE, date=date(2025, 11, 2), category_id=2),
    ]
    result = analyzer.category_breakdown(transactions, categories, NOVEMBER)
    assert [s.category_id for s in result.categories] == [3, 2]
    assert [s.percentage for s in result.categories] == [50.0, 50.0]


def test_category_breakdown_empty():
    result = FinanceAnalyzer().category_breakdown([], categories, NOVEMBER)
    assert result.categories == []
    assert result.total_amount == 0


def test_monthly_trend_has_twelve_rows():
    analyzer = FinanceAnalyzer()
    result = analyzer.monthly_trend(sample_transactions, 2025)

    assert [row.month for row in result.monthly_data] == list(range(1, 13))
    assert result.monthly_data[0].month_name == "enero"

    october, november, december = result.monthly_data[9:12]
    assert october.expense == Decimal("999.00")
    assert october.balance == Decimal("-999.00")
    assert november.income == Decimal("2500.00")
    assert november.expense == Decimal("500.00")
    assert november.balance == Decimal("2000.00")
    assert november.transaction_count.expense == 4
    assert december.income == Decimal("300.00")

    for row in result.monthly_data[:9]:
        assert (row.income, row.expense, row.balance) == (0, 0, 0)

    assert result.yearly_totals.total_income == Decimal("2800.00")
    assert result.yearly_totals.total_expense == Decimal("1499.00")
    assert result.yearly_totals.total_balance == Decimal("1301.00")


def test_monthly_trend_type_filter_and_other_years():
    analyzer = FinanceAnalyzer()
    result = analyzer.monthly_trend(sample_transactions, 2025, type_filter=INCOME)
    assert all(row.expense == 0 for row in result.monthly_data)
    assert result.yearly_totals.total_income == Decimal("2800.00")

    empty = analyzer.monthly_trend(sample_transactions, 2019)
    assert len(empty.monthly_data) == 12
    assert all(row.balance == 0 for row in empty.monthly_data)


def test_savings_stats():
    analyzer = FinanceAnalyzer()
    today = date(2025, 11, 10)
    goals = [
        GoalRecord(id=1, name="Vacaciones", target_amount=Decimal("2000"), current_amount=Decimal("800"),
                   target_date=date(2025, 12, 10)),
        GoalRecord(id=2, name="Laptop", target_amount=Decimal("1200"), current_amount=Decimal("1200"),
                   target_date=date(2025, 11, 20), is_achieved=True),
        GoalRecord(id=3, name="Fondo", target_amount=Decimal("5000"), current_amount=Decimal("0")),
        GoalRecord(id=4, name="Coche", target_amount=Decimal("800"), current_amount=Decimal("100"),
                   target_date=date(2025, 12, 11)),
    ]
    stats = analyzer.savings_stats(goals, today)

    assert stats.total_goals == 4
    assert stats.achieved_goals == 1
    assert stats.active_goals == 3
    assert stats.total_target_amount == Decimal("9000")
    assert stats.total_current_amount == Decimal("2100")
    assert abs(stats.overall_progress - 70 / 3) < 1e-9
    # Goal 1 lands exactly on the 30-day horizon, goal 4 one day past it
    assert stats.upcoming_goals == 1


def test_savings_stats_overall_progress_is_capped():
    goal = GoalRecord(id=1, name="Meta", target_amount=Decimal("200"), current_amount=Decimal("250"), is_achieved=True)
    stats = FinanceAnalyzer().savings_stats([goal], date(2025, 1, 1))
    assert stats.overall_progress == 100.0


def test_savings_stats_empty():
    stats = FinanceAnalyzer().savings_stats([], date(2025, 1, 1))
    assert stats.total_goals == 0
    assert stats.overall_progress == 0.0
    assert stats.upcoming_goals == 0


def test_goal_progress():
    today = date(2025, 11, 10)
    overdue = GoalRecord(id=1, name="Viaje", target_amount=Decimal("100"), current_amount=Decimal("25"),
                         target_date=date(2025, 11, 1))
    progress = FinanceAnalyzer.goal_progress(overdue, today)
    assert progress.progress == 25.0
    assert progress.days_remaining == 0
    assert progress.is_overdue is True

    undated = GoalRecord(id=2, name="Libre", target_amount=Decimal("100"), current_amount=Decimal("300"))
    progress = FinanceAnalyzer.goal_progress(undated, today)
    assert progress.progress == 100.0
    assert progress.days_remaining is None
    assert progress.is_overdue is False


def test_budget_actuals():
    analyzer = FinanceAnalyzer()
    budgets = [
        BudgetRecord(id=1, category_id=2, budget_amount=Decimal("300.00"), month=11, year=2025),
        BudgetRecord(id=2, category_id=3, budget_amount=Decimal("100.00"), month=11, year=2025),
    ]
    report = analyzer.budget_actuals(budgets, sample_transactions, 11, 2025)

    food, transport = report.budgets
    assert food.actual_spent == Decimal("400.00")
    assert food.remaining == Decimal("-100.00")
    assert food.percentage_used == 100.0
    assert food.is_over_budget is True

    assert transport.actual_spent == Decimal("80.50")
    assert transport.remaining == Decimal("19.50")
    assert transport.percentage_used == 80.5
    assert transport.is_over_budget is False

    summary = report.summary
    assert summary.total_budget == Decimal("400.00")
    # Uncategorized spend counts towards the month total
    assert summary.total_spent == Decimal("500.00")
    assert summary.total_remaining == Decimal("-100.00")
    assert summary.percentage_used == 125.0


def test_budget_zero_amount_guard():
    analyzer = FinanceAnalyzer()
    budgets = [BudgetRecord(id=1, category_id=2, budget_amount=Decimal("0"), month=11, year=2025)]
    spend = [TransactionRecord(id=1, amount=Decimal("50"), type=EXPENSE, date=date(2025, 11, 4), category_id=2)]
    report = analyzer.budget_actuals(budgets, spend, 11, 2025)

    assert report.budgets[0].percentage_used == 0.0
    assert report.budgets[0].is_over_budget is True
    assert report.summary.percentage_used == 0.0


def test_budget_at_limit_is_not_over():
    analyzer = FinanceAnalyzer()
    budgets = [BudgetRecord(id=1, category_id=2, budget_amount=Decimal("400.00"), month=11, year=2025)]
    report = analyzer.budget_actuals(budgets, sample_transactions, 11, 2025)
    assert report.budgets[0].percentage_used == 100.0
    assert report.budgets[0].is_over_budget is False


def test_budget_actuals_empty():
    report = FinanceAnalyzer().budget_actuals([], [], 1, 2025)
    assert report.budgets == []
    assert report.summary.total_budget == 0
    assert report.summary.total_spent == 0
    assert report.summary.percentage_used == 0.0
