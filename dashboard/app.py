"""
Don't Perish: Streamlit Dashboard
==================================

Optional interactive UI over an in-memory ``InventorySession``.  The catalog
file is read once per browser session; every edit afterwards lives only in
``st.session_state`` and is lost on reload.

Why optional?
-------------
- Streamlit adds ~100 MB of dependencies not needed for headless runs.
- The engine and CLI work without it.
- Every number shown here is also available via the ``dont-perish`` CLI.

App structure (5 tabs)
----------------------
  1. Alerts       - HIGH / MEDIUM risk products with mark-sold, ignore and
                    (admin only) edit and delete actions.
  2. Discounts    - markdown suggestions; staff see which ones need an admin.
  3. Procurement  - reorders for stock selling out within a week.
  4. Analytics    - value metrics, category risk chart, expiry timeline.
  5. Inventory    - full catalog table + CSV download.

The sidebar holds the role selector (cosmetic, nothing is authenticated), the
reference date and the "Add New Product" form.  Dark mode follows Streamlit's
own theme setting.

Usage
-----
    pip install -e ".[dashboard]"
    streamlit run dashboard/app.py
"""

from __future__ import annotations

import logging
import sys
from datetime import date
from pathlib import Path

# ── Ensure project root is importable ────────────────────────────────────────
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import streamlit as st

from dont_perish.config import load_config

_CONFIG = load_config()

# ── Must be the first Streamlit call ─────────────────────────────────────────
st.set_page_config(
    page_title=_CONFIG.dashboard.page_title,
    layout="wide",
    initial_sidebar_state="expanded",
)

from pydantic import ValidationError

from dashboard.data_loader import (
    alerts_frame,
    apply_edit,
    category_frame,
    discount_frame,
    distribution_frame,
    inventory_frame,
    load_session,
    procurement_frame,
    timeline_frame,
)
from dont_perish.access import can_edit_products
from dont_perish.catalog import InventorySession, ProductNotFoundError
from dont_perish.engine import (
    assess_inventory,
    compute_analytics,
    recommend_procurement,
    suggest_discounts,
)
from dont_perish.engine.discounts import total_carbon_savings
from dont_perish.models.product import ProductDraft
from dont_perish.taxonomy.risk_taxonomy import (
    IGNORE_REASONS,
    PRODUCT_CATEGORIES,
    RiskLevel,
    UserRole,
)
from dont_perish.utils.logging import configure_logging
from dont_perish.utils.time_utils import today as local_today

logger = logging.getLogger(__name__)

_CURRENCY = _CONFIG.dashboard.currency_symbol
_STAFF_LIMIT = _CONFIG.access.staff_max_discount_pct


def _catalog_path() -> Path:
    path = Path(_CONFIG.data.catalog_file)
    return path if path.is_absolute() else _ROOT / path


def _edit_form(product) -> None:
    """Admin edit form for one product; only changed fields are replaced."""
    pid = product.product_id
    with st.form(f"edit_{pid}"):
        st.markdown("**Edit product**")
        categories = list(PRODUCT_CATEGORIES)
        if product.category not in categories:
            categories.append(product.category)
        # Unparseable expiry strings show as today's date until fixed.
        expiry_value = (
            product.expiry_date if isinstance(product.expiry_date, date) else local_today()
        )
        values = {
            "name": st.text_input("Name", value=product.name, key=f"edit_name_{pid}"),
            "category": st.selectbox(
                "Category", options=categories,
                index=categories.index(product.category), key=f"edit_cat_{pid}",
            ),
            "quantity": int(st.number_input(
                "Quantity", min_value=0, step=1, value=product.quantity, key=f"edit_qty_{pid}",
            )),
            "expiry_date": st.date_input("Expiry date", value=expiry_value, key=f"edit_exp_{pid}"),
            "average_sales_per_day": st.number_input(
                "Average sales per day", min_value=0.0, step=0.5,
                value=float(product.average_sales_per_day), key=f"edit_sales_{pid}",
            ),
            "cost_price": st.number_input(
                f"Cost price ({_CURRENCY})", min_value=0.0, step=1.0,
                value=float(product.cost_price), key=f"edit_cost_{pid}",
            ),
            "selling_price": st.number_input(
                f"Selling price ({_CURRENCY})", min_value=0.0, step=1.0,
                value=float(product.selling_price), key=f"edit_price_{pid}",
            ),
        }
        if st.form_submit_button("Save changes"):
            try:
                apply_edit(session, pid, values)
            except ValidationError as exc:
                st.error(f"Invalid edit: {exc.errors()[0]['msg']}")
            except ProductNotFoundError:
                st.error("Product no longer exists.")
            else:
                st.rerun()


# ── Session bootstrap ────────────────────────────────────────────────────────

if "session" not in st.session_state:
    configure_logging(_CONFIG.logging)
    try:
        st.session_state["session"] = load_session(_catalog_path(), local_today())
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Could not load catalog: %s", exc)
        st.session_state["session"] = InventorySession()
        st.session_state["load_error"] = str(exc)

session: InventorySession = st.session_state["session"]


# ── Sidebar ───────────────────────────────────────────────────────────────────

with st.sidebar:
    st.title(_CONFIG.dashboard.page_title)
    st.caption("Expiry risk, markdowns and reorders for perishable stock")
    st.divider()

    roles = [r.value for r in UserRole]
    role = UserRole(st.selectbox(
        "Role",
        options=roles,
        index=roles.index(_CONFIG.access.default_role.value),
        help=f"Staff may apply discounts up to {_STAFF_LIMIT:.0f}% and cannot edit or delete products.",
    ))

    today = st.date_input("Reference date", value=local_today())

    st.divider()
    with st.form("add_product", clear_on_submit=True):
        st.subheader("Add New Product")
        name = st.text_input("Name")
        category = st.selectbox("Category", options=PRODUCT_CATEGORIES)
        quantity = st.number_input("Quantity", min_value=0, step=1, value=0)
        expiry = st.date_input("Expiry date", value=today)
        sales = st.number_input("Average sales per day", min_value=0.0, step=0.5, value=0.0)
        cost = st.number_input(f"Cost price ({_CURRENCY})", min_value=0.0, step=1.0, value=0.0)
        price = st.number_input(f"Selling price ({_CURRENCY})", min_value=0.0, step=1.0, value=0.0)
        if st.form_submit_button("Add product"):
            try:
                draft = ProductDraft(
                    name=name,
                    category=category,
                    quantity=int(quantity),
                    expiry_date=expiry,
                    average_sales_per_day=sales,
                    cost_price=cost,
                    selling_price=price,
                )
            except ValidationError as exc:
                st.error(f"Invalid product: {exc.errors()[0]['msg']}")
            else:
                added = session.add_product(draft, today=today)
                st.success(f"Added {added.name}.")


if load_error := st.session_state.get("load_error"):
    st.error(f"Catalog could not be loaded, starting empty: {load_error}")

products = session.snapshot()
analyses = assess_inventory(products, today)
suggestions = suggest_discounts(products, today)
recommendations = recommend_procurement(products, today)
summary = compute_analytics(products, today)


# ── Tabs ──────────────────────────────────────────────────────────────────────

tab_alerts, tab_disc, tab_proc, tab_analytics, tab_inv = st.tabs(
    ["Alerts", "Discounts", "Procurement", "Analytics", "Inventory"]
)


# ══════════════════════════════════════════════════════════════════════════════
# Tab 1 - Alerts
# ══════════════════════════════════════════════════════════════════════════════

with tab_alerts:
    st.header("Expiry Risk Alerts")
    at_risk = [a for a in analyses if a.risk_level is not RiskLevel.LOW]

    if not at_risk:
        st.success("No products at risk.")
    else:
        st.dataframe(alerts_frame(analyses), use_container_width=True, hide_index=True)

        for a in at_risk:
            pid = a.product.product_id
            badge = "🔴" if a.risk_level is RiskLevel.HIGH else "🟠"
            with st.expander(f"{badge} {a.product.name} - {a.risk_level.value.upper()}"):
                st.write(
                    f"Expires in **{a.days_until_expiry}**, sells out in "
                    f"**{a.days_until_sold_out}**. Potential loss "
                    f"**{_CURRENCY}{a.potential_loss:,.2f}**."
                )
                col_sold, col_ignore, col_delete = st.columns(3)
                with col_sold:
                    if st.button("Mark as sold", key=f"sold_{pid}"):
                        session.mark_as_sold(pid)
                        st.rerun()
                with col_ignore:
                    reason = st.selectbox("Reason", IGNORE_REASONS, key=f"reason_{pid}")
                    if st.button("Ignore alert", key=f"ignore_{pid}"):
                        session.ignore_alert(pid, reason)
                        st.rerun()
                with col_delete:
                    if can_edit_products(role):
                        if st.button("Delete", key=f"delete_{pid}"):
                            session.delete_product(pid)
                            st.rerun()
                    else:
                        st.caption("Edit / delete: admin only")

                if can_edit_products(role):
                    _edit_form(a.product)


# ══════════════════════════════════════════════════════════════════════════════
# Tab 2 - Discounts
# ══════════════════════════════════════════════════════════════════════════════

with tab_disc:
    st.header("Smart Discount Suggestions")
    if not suggestions:
        st.info("No discounts suggested for the current stock.")
    else:
        carbon = total_carbon_savings(suggestions)
        c1, c2, c3 = st.columns(3)
        c1.metric("Suggestions", len(suggestions))
        c2.metric("Food waste prevented", f"{carbon.food_waste_prevented_kg:.1f} kg")
        c3.metric("CO2 saved", f"{carbon.co2_saved_kg:.1f} kg")

        st.dataframe(
            discount_frame(suggestions, role, _STAFF_LIMIT),
            use_container_width=True,
            hide_index=True,
        )
        if role is UserRole.STAFF:
            st.caption(f"Discounts above {_STAFF_LIMIT:.0f}% need an admin to apply.")


# ══════════════════════════════════════════════════════════════════════════════
# Tab 3 - Procurement
# ══════════════════════════════════════════════════════════════════════════════

with tab_proc:
    st.header("Procurement Recommendations")
    if not recommendations:
        st.info("Nothing sells out within the next 7 days.")
    else:
        total_revenue = sum(r.estimated_revenue for r in recommendations)
        st.metric("Estimated revenue", f"{_CURRENCY}{total_revenue:,.2f}")
        st.dataframe(procurement_frame(recommendations), use_container_width=True, hide_index=True)


# ══════════════════════════════════════════════════════════════════════════════
# Tab 4 - Analytics
# ══════════════════════════════════════════════════════════════════════════════

with tab_analytics:
    st.header("Inventory Analytics")
    m1, m2, m3, m4 = st.columns(4)
    m1.metric("Total value", f"{_CURRENCY}{summary.total_value:,.2f}")
    m2.metric("At-risk value", f"{_CURRENCY}{summary.at_risk_value:,.2f}")
    m3.metric("Potential waste", f"{summary.potential_waste:,.0f} units")
    m4.metric("High-risk products", summary.high_risk_count)

    left, right = st.columns(2)
    with left:
        st.subheader("Risk by category")
        st.bar_chart(category_frame(summary))
    with right:
        st.subheader("Risk distribution")
        st.dataframe(distribution_frame(summary), use_container_width=True, hide_index=True)

    st.subheader("Expiry timeline")
    st.line_chart(timeline_frame(summary, _CONFIG.dashboard.timeline_days))


# ══════════════════════════════════════════════════════════════════════════════
# Tab 5 - Inventory
# ══════════════════════════════════════════════════════════════════════════════

with tab_inv:
    st.header("Inventory")
    df_inv = inventory_frame(products)
    st.dataframe(df_inv, use_container_width=True, hide_index=True)
    st.download_button(
        "Download CSV",
        data=df_inv.to_csv(index=False).encode("utf-8"),
        file_name=f"inventory-report-{today.isoformat()}.csv",
        mime="text/csv",
    )
