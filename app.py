from __future__ import annotations

import logging
from typing import Sequence

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from wealth_tracker import (
    DEFAULT_PLANNER,
    DEFAULT_REBALANCE,
    AllocationPlanner,
    MessageLevel,
    OperationResult,
    PerformanceEstimator,
    PortfolioSnapshot,
    RebalanceAnalyzer,
    ServiceMessage,
    SnapshotRepository,
    TaxCalculator,
    TransactionRecorder,
    backup_filename,
    export_csv,
    export_filename,
    financial_year_for,
    portfolio_totals,
    to_json,
)
from wealth_tracker.config import MAX_FY_START_YEAR
from wealth_tracker.dates import format_period, format_timestamp, utc_now

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

# ------------------ Page config ------------------ #
st.set_page_config(page_title="Street-Smart Wealth Tracker", layout="centered")
st.title("Street-Smart Wealth Tracker")
st.caption("Local-first · ETFs + Gold · Aussie CGT (basic) · No fluff.")

COLORS = ["#0ea5e9", "#22c55e", "#a78bfa", "#f59e0b", "#ef4444", "#14b8a6"]

repository = SnapshotRepository()
recorder = TransactionRecorder()
planner = AllocationPlanner(recorder)
analyzer = RebalanceAnalyzer()
estimator = PerformanceEstimator()
tax_calculator = TaxCalculator()


# ------------------ Utilities ------------------ #
def _money(value: float) -> str:
    return f"${value:,.2f}"


def _display_messages(messages: Sequence[ServiceMessage]) -> None:
    for message in messages:
        if message.level == MessageLevel.ERROR:
            st.error(message.text)
        elif message.level == MessageLevel.WARNING:
            st.warning(message.text)
        else:
            st.info(message.text)


def _snapshot() -> PortfolioSnapshot:
    if "snapshot" not in st.session_state:
        snapshot, messages = repository.load()
        st.session_state["snapshot"] = snapshot
        st.session_state["pending_messages"] = messages
    return st.session_state["snapshot"]


def _commit(result: OperationResult) -> None:
    """Keeps the new snapshot and persists it when the operation applied."""
    st.session_state["pending_messages"] = list(result.messages)
    if result.applied:
        st.session_state["snapshot"] = result.snapshot
        repository.save(result.snapshot)


def _weights_donut(snapshot: PortfolioSnapshot) -> go.Figure:
    tickers = [asset.ticker for asset in snapshot.assets]
    colors = [COLORS[i % len(COLORS)] for i in range(len(tickers))]
    fig = go.Figure()
    fig.add_trace(
        go.Pie(
            labels=tickers,
            values=[asset.market_value for asset in snapshot.assets],
            hole=0.6,
            sort=False,
            marker={"colors": colors},
            name="Current",
            domain={"x": [0, 1], "y": [0, 1]},
        )
    )
    fig.add_trace(
        go.Pie(
            labels=tickers,
            values=[asset.target_weight for asset in snapshot.assets],
            hole=0.5,
            sort=False,
            marker={"colors": colors},
            name="Target",
            textinfo="none",
            domain={"x": [0.2, 0.8], "y": [0.2, 0.8]},
        )
    )
    fig.update_layout(title="Current (outer) vs Target (inner)", showlegend=True)
    return fig


def _holdings_frame(snapshot: PortfolioSnapshot) -> pd.DataFrame:
    totals = portfolio_totals(snapshot.assets)
    now = utc_now()
    rows = []
    for asset in snapshot.assets:
        first = asset.first_contribution_date
        rows.append(
            {
                "Ticker": asset.ticker,
                "Name": asset.name,
                "Units": asset.units,
                "Price": asset.price,
                "Invested": asset.invested,
                "Value": asset.market_value,
                "Current (%)": totals.weights.get(asset.ticker, 0.0) * 100,
                "Target (%)": asset.target_weight * 100,
                "CAGR (%)": estimator.cagr(asset, now) * 100,
                "Held for": format_period(first, now) if first else "-",
            }
        )
    return pd.DataFrame(rows)


def _transactions_frame(snapshot: PortfolioSnapshot) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "Date": format_timestamp(t.date),
                "Kind": t.kind.value,
                "Ticker": t.ticker,
                "Units": t.units,
                "Price": t.price,
                "Amount": t.amount,
                "Gain": t.gain,
                "Discounted gain": t.discount_gain,
            }
            for t in snapshot.transactions_newest_first()
        ]
    )


def main() -> None:
    snapshot = _snapshot()
    _display_messages(st.session_state.pop("pending_messages", []))

    totals = portfolio_totals(snapshot.assets)
    col1, col2, col3 = st.columns(3)
    col1.metric("Invested (AUD)", _money(totals.invested))
    col2.metric("Value (AUD)", _money(totals.value))
    col3.metric("Gain/Loss", _money(totals.gain), f"{totals.variation_pct:.2f}%")

    tab_plan, tab_holdings, tab_prices, tab_cgt, tab_settings = st.tabs(
        ["Plan", "Holdings", "Prices", "CGT", "Settings"]
    )

    # ------------------ Planner ------------------ #
    with tab_plan:
        c1, c2, c3 = st.columns(3)
        budget = c1.number_input("Budget (AUD)", min_value=0.0, value=DEFAULT_PLANNER.budget, step=100.0)
        fees = c2.number_input("Fees (flat AUD)", min_value=0.0, value=DEFAULT_PLANNER.fees_flat, step=1.0)
        buffer_pct = c3.number_input("Cash buffer (%)", min_value=0.0, value=DEFAULT_PLANNER.buffer_pct, step=1.0)

        plan = planner.plan(snapshot.assets, budget, fees, buffer_pct)
        if plan.splits:
            frame = plan.to_frame()
            frame["Est. Units"] = frame["Est. Units"].map(
                lambda units: "set price" if pd.isna(units) else f"{units:,.4f}"
            )
            st.dataframe(frame.set_index("Ticker").style.format({"Amount (AUD)": "{:,.2f}", "Target (%)": "{:.2f}"}))
            st.caption(f"Spendable after fees and buffer: **{_money(plan.spendable)}**")
        else:
            st.info("Enter a budget to see the split.")

        if st.button("Allocate now"):
            _commit(planner.allocate_now(snapshot, budget, fees, buffer_pct))
            st.rerun()

    # ------------------ Holdings ------------------ #
    with tab_holdings:
        enabled = st.toggle("Rebalancing alerts", value=DEFAULT_REBALANCE.enabled)
        threshold = st.number_input(
            "Drift threshold (%)", min_value=0.0, value=DEFAULT_REBALANCE.threshold_pct, step=0.5
        )
        for suggestion in analyzer.analyze(snapshot.assets, totals.value, threshold, enabled):
            direction = "over" if suggestion.overweight else "under"
            st.warning(
                f"{suggestion.ticker} is {abs(suggestion.drift_pct):.1f}% {direction} target "
                f"({suggestion.current_weight * 100:.1f}% vs {suggestion.target_weight * 100:.0f}%)."
            )

        st.dataframe(
            _holdings_frame(snapshot).set_index("Ticker").style.format(
                {
                    "Units": "{:,.6f}",
                    "Price": "{:,.4f}",
                    "Invested": "{:,.2f}",
                    "Value": "{:,.2f}",
                    "Current (%)": "{:.1f}",
                    "Target (%)": "{:.0f}",
                    "CAGR (%)": "{:.2f}",
                }
            )
        )
        if totals.value > 0:
            st.plotly_chart(_weights_donut(snapshot), use_container_width=True)

        ticker = st.selectbox("Asset", [asset.ticker for asset in snapshot.assets])
        amount = st.number_input("Amount (AUD)", min_value=0.0, value=1000.0, step=100.0)
        b1, b2 = st.columns(2)
        if b1.button("Buy"):
            _commit(recorder.buy(snapshot, ticker, amount))
            st.rerun()
        if b2.button("Sell"):
            _commit(recorder.sell(snapshot, ticker, amount))
            st.rerun()

        log = _transactions_frame(snapshot)
        if not log.empty:
            st.subheader("Transactions")
            st.dataframe(log, hide_index=True)

    # ------------------ Prices ------------------ #
    with tab_prices:
        with st.form("prices"):
            entries = {}
            for asset in snapshot.assets:
                p1, p2 = st.columns(2)
                entries[asset.ticker] = (
                    p1.number_input(f"{asset.ticker} price", min_value=0.0, value=asset.price, format="%.4f"),
                    p2.number_input(
                        f"{asset.ticker} target (%)",
                        min_value=0.0,
                        max_value=100.0,
                        value=min(100.0, asset.target_weight * 100),
                    ),
                )
            if st.form_submit_button("Save prices"):
                updated = snapshot
                for ticker, (price, target_pct) in entries.items():
                    updated = recorder.set_price(updated, ticker, price).snapshot
                    updated = recorder.set_target_weight(updated, ticker, target_pct / 100).snapshot
                _commit(OperationResult(snapshot=updated, applied=True))
                st.rerun()

    # ------------------ CGT ------------------ #
    with tab_cgt:
        fy_year = st.number_input(
            "FY starting year", min_value=1900, max_value=MAX_FY_START_YEAR, value=financial_year_for(), step=1
        )
        summary = tax_calculator.summarize_financial_year(snapshot.transactions, int(fy_year))
        st.markdown(f"**{summary.label}** · Events {summary.event_count}")
        st.markdown(f"Gross gains (no losses netting): **{_money(summary.gross_gain)}**")
        st.markdown(f"Discounted gains (50% rule on lots held 12+ months): **{_money(summary.discount_gain)}**")
        st.caption("Export CSV and verify with your tax accountant.")

    # ------------------ Settings ------------------ #
    with tab_settings:
        st.download_button(
            "Save backup (.json)",
            data=to_json(snapshot).encode("utf-8"),
            file_name=backup_filename(),
            mime="application/json",
        )
        st.download_button(
            "Export CSV",
            data=export_csv(snapshot).encode("utf-8"),
            file_name=export_filename(),
            mime="text/csv",
        )
        uploaded = st.file_uploader("Restore backup", type=["json"])
        if uploaded is not None and st.button("Restore"):
            _commit(repository.restore(snapshot, uploaded.getvalue()))
            st.rerun()

        confirm = st.checkbox("I understand this clears every asset and transaction")
        if st.button("Reset all data", disabled=not confirm):
            repository.clear()
            _commit(recorder.reset())
            st.rerun()


if __name__ == "__main__":
    main()
