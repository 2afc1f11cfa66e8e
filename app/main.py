from dataclasses import replace
from datetime import datetime, time as dtime

import streamlit as st
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from expense_tracker import config
from expense_tracker.domain import (
    ALL_CATEGORIES,
    Budget,
    BudgetPeriod,
    Category,
    Expense,
    FilterSpec,
    SortKey,
    TimeRange,
)
from expense_tracker.events import (
    EXPENSE_ADDED,
    EXPENSE_DELETED,
    EXPENSE_UPDATED,
    EXPENSES_RESET,
    BUDGET_ADDED,
    BUDGET_UPDATED,
    BUDGET_DELETED,
    EventBus,
    register_default_handlers,
)
from expense_tracker.export import ExportFormat, export_filename, format_expenses
from expense_tracker.filters import apply_filters
from expense_tracker.functional import pipe
from expense_tracker.preferences import PreferenceStore
from expense_tracker.services import BudgetService, ReportService
from expense_tracker.sorting import sort_expenses
from expense_tracker.store import RecordStore
from expense_tracker.transforms import load_seed, save_seed

config.configure_logging()
config.ensure_data_directories()

st.set_page_config(page_title="Expense Tracker", layout="wide")

CATEGORY_OPTIONS = [c.label for c in Category]


def _persist(event, payload: dict) -> dict:
    expenses, budgets = st.session_state.store.snapshot()
    outcome = save_seed(config.STORE_PATH, expenses, budgets)
    if outcome.is_left():
        st.error(outcome.get_error()["message"])
    return {"saved": outcome.is_right()}


if "store" not in st.session_state:
    bus = register_default_handlers(EventBus())
    for name in (EXPENSE_ADDED, EXPENSE_UPDATED, EXPENSE_DELETED, EXPENSES_RESET,
                 BUDGET_ADDED, BUDGET_UPDATED, BUDGET_DELETED):
        bus.subscribe(name, _persist)
    expenses, budgets = load_seed(config.STORE_PATH)
    st.session_state.store = RecordStore(expenses, budgets, bus=bus)
    st.session_state.filters = FilterSpec.default(datetime.now())

store: RecordStore = st.session_state.store
prefs = PreferenceStore(config.PREFERENCES_PATH)


def expenses_to_df(expenses) -> pd.DataFrame:
    rows = [
        {
            "id": e.id,
            "name": e.name,
            "date": pd.to_datetime(e.date),
            "amount": e.value,
            "category": e.category.label,
        }
        for e in expenses
    ]
    return pd.DataFrame(rows, columns=["id", "name", "date", "amount", "category"])


def render_filters(spec: FilterSpec) -> FilterSpec:
    st.sidebar.markdown("### 🔎 Filters")
    now = datetime.now()
    search = st.sidebar.text_input("Search expenses", value=spec.search_text)

    date_active = st.sidebar.toggle("Enable date filter", value=spec.date_filter_active)
    start, end = spec.start_date, spec.end_date
    if date_active:
        start_d = st.sidebar.date_input("Start date", value=(start or now).date())
        end_d = st.sidebar.date_input("End date", value=(end or now).date())
        start = datetime.combine(start_d, dtime.min)
        end = datetime.combine(end_d, dtime.max)

    amount_active = st.sidebar.toggle("Enable amount filter", value=spec.amount_filter_active)
    min_amount, max_amount = spec.min_amount, spec.max_amount
    if amount_active:
        min_amount = st.sidebar.number_input("Min", min_value=0.0, value=float(spec.min_amount))
        unbounded = st.sidebar.checkbox("No maximum", value=spec.max_amount is None)
        if unbounded:
            max_amount = None
        else:
            max_amount = st.sidebar.number_input("Max", min_value=0.0, value=float(spec.max_amount or 0.0))

    selected = st.sidebar.multiselect(
        "Categories",
        CATEGORY_OPTIONS,
        default=[c.label for c in Category if c in spec.categories],
    )

    new_spec = replace(
        spec,
        search_text=search,
        date_filter_active=date_active,
        start_date=start,
        end_date=end,
        amount_filter_active=amount_active,
        min_amount=min_amount,
        max_amount=max_amount,
        categories=frozenset(Category(label) for label in selected),
    )
    if new_spec.is_any_filter_active and st.sidebar.button("Reset filters"):
        new_spec = new_spec.reset(now)
    return new_spec


menu = st.sidebar.radio("Menu", ["🧾 Expenses", "📊 Dashboard", "🎯 Budgets"])

if menu == "🧾 Expenses":
    st.title("🧾 Expenses")
    st.session_state.filters = render_filters(st.session_state.filters)

    with st.expander("➕ Add expense"):
        with st.form("add_expense", clear_on_submit=True):
            name = st.text_input("Name")
            value = st.number_input("Value", min_value=0.0, step=1.0)
            day = st.date_input("Date", value=datetime.now().date())
            category = st.selectbox("Category", CATEGORY_OPTIONS, index=CATEGORY_OPTIONS.index("Other"))
            if st.form_submit_button("Save"):
                result = store.add_expense(Expense(
                    name=name,
                    date=datetime.combine(day, datetime.now().time()),
                    value=value,
                    category=Category(category),
                ))
                if result.is_left():
                    st.error(result.get_error()["message"])
                else:
                    st.success(f"Added {name}")

    sort_labels = [k.value for k in SortKey]
    saved_sort = prefs.get("sort_key", SortKey.DATE_DESC.value)
    sort_label = st.selectbox(
        "Sort by",
        sort_labels,
        index=sort_labels.index(saved_sort) if saved_sort in sort_labels else 1,
    )
    if sort_label != saved_sort:
        prefs.set("sort_key", sort_label)

    visible = pipe(
        store.fetch_expenses(),
        lambda es: apply_filters(es, st.session_state.filters),
        lambda es: sort_expenses(es, SortKey(sort_label)),
    )

    if not store.fetch_expenses():
        st.info("No expenses yet. Add your first one above.")
    elif not visible:
        st.warning("No matching expenses. Try changing your search or filters.")
    else:
        df = expenses_to_df(visible)
        disp = df.drop(columns=["id"]).copy()
        disp["date"] = disp["date"].dt.strftime("%Y-%m-%d")
        st.dataframe(disp, use_container_width=True, hide_index=True)

        labels = {e.id: f"{e.name} ({e.date:%Y-%m-%d}, {e.value:,.2f})" for e in visible}
        to_delete = st.selectbox("Delete expense", [""] + list(labels), format_func=lambda i: labels.get(i, "—"))
        if to_delete and st.button("Delete"):
            store.delete_expense(to_delete)
            st.rerun()

        col1, col2 = st.columns(2)
        for col, kind in ((col1, ExportFormat.CSV), (col2, ExportFormat.JSON)):
            outcome = format_expenses(visible, kind)
            with col:
                if outcome.is_right():
                    st.download_button(
                        f"⬇ Export {kind.value.upper()}",
                        outcome.get_or_else(""),
                        file_name=export_filename(kind, datetime.now().date()),
                    )
                else:
                    st.error(outcome.get_error()["message"])

    if store.fetch_expenses() and st.button("🗑 Reset all expenses"):
        store.reset_expenses()
        st.rerun()

elif menu == "📊 Dashboard":
    st.title("📊 Dashboard")
    range_labels = [r.value for r in TimeRange]
    saved_range = prefs.get("dashboard_range", TimeRange.MONTH.value)
    range_label = st.radio(
        "Time range",
        range_labels,
        index=range_labels.index(saved_range) if saved_range in range_labels else 1,
        horizontal=True,
    )
    if range_label != saved_range:
        prefs.set("dashboard_range", range_label)

    svc = ReportService(first_weekday=config.FIRST_WEEKDAY)
    rpt = svc.dashboard(store.fetch_expenses(), TimeRange(range_label), datetime.now())
    result = rpt["result"]

    k1, k2 = st.columns(2)
    k1.metric("Total spending", f"{result['total']:,.2f}")
    k2.metric("Expenses", rpt["count"])

    if rpt["count"] == 0:
        st.info("No expenses in this period.")
    else:
        by_cat = pd.DataFrame(
            [(c.label, total) for c, total in result["by_category"]],
            columns=["category", "total"],
        )
        fig_cat = px.bar(by_cat, x="category", y="total", title="Spending by category", template="plotly_dark")
        st.plotly_chart(fig_cat, use_container_width=True)

        by_day = pd.DataFrame(result["by_day"], columns=["day", "total"])
        fig_day = go.Figure()
        fig_day.add_trace(go.Scatter(x=by_day["day"], y=by_day["total"], mode="lines+markers", name="Daily"))
        fig_day.update_layout(template="plotly_dark", title="Daily spending", margin=dict(t=40, b=10, l=10, r=10))
        st.plotly_chart(fig_day, use_container_width=True)

elif menu == "🎯 Budgets":
    st.title("🎯 Budgets")

    with st.expander("➕ Add budget"):
        with st.form("add_budget", clear_on_submit=True):
            category = st.selectbox("Category", CATEGORY_OPTIONS)
            amount = st.number_input("Budget amount", min_value=0.0, step=10.0)
            period = st.selectbox("Period", [p.value for p in BudgetPeriod], index=1)
            start = st.date_input("Start date", value=datetime.now().date())
            if st.form_submit_button("Save"):
                result = store.add_budget(Budget(
                    category=Category(category),
                    amount=amount,
                    period=BudgetPeriod(period),
                    start_date=datetime.combine(start, dtime.min),
                ))
                if result.is_left():
                    st.error(result.get_error()["message"])
                else:
                    st.success(f"Budget for {category} saved")

    expenses, budgets = store.snapshot()
    rpt = BudgetService(bus=store.bus).budget_report(budgets, expenses, datetime.now())

    for alert in rpt["alerts"]:
        st.error(f"🔴 {alert['alert']}")

    def render_status(status, editable: bool):
        b = status.budget
        c1, c2, c3 = st.columns([3, 2, 1])
        with c1:
            st.markdown(f"**{b.category.label}** · {b.period.value}")
            st.caption(f"{b.start_date:%Y-%m-%d} → {status.end_date:%Y-%m-%d}")
            st.progress(max(0.0, status.progress))
        with c2:
            st.metric("Spent", f"{status.spent:,.2f}", delta=f"{status.remaining:,.2f} left")
        with c3:
            if editable:
                new_amount = st.number_input("Amount", min_value=0.0, value=float(b.amount), key=f"amt_{b.id}")
                if new_amount != b.amount:
                    outcome = store.update_budget_amount(b.id, new_amount)
                    if outcome.is_left():
                        st.error(outcome.get_error()["message"])
            if st.button("Delete", key=f"del_{b.id}"):
                store.delete_budget(b.id)
                st.rerun()

    st.header("Active")
    if not rpt["active"]:
        st.info("No active budgets.")
    for status in rpt["active"]:
        render_status(status, editable=True)

    if rpt["inactive"]:
        st.header("Inactive")
        for status in rpt["inactive"]:
            render_status(status, editable=False)

    st.caption(f"{len(rpt['active'])} active · {len(rpt['inactive'])} inactive · {len(ALL_CATEGORIES)} categories")
