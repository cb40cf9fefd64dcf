"""
Streamlit UI for the Shipping Cost Calculator.

Features:
- Package form with method-specific weight hints
- Per-field validation messages and error count
- Package summary panel
- Cost breakdown table with CSV export
"""
import streamlit as st
import pandas as pd
import asyncio
import sys
from pathlib import Path
from datetime import datetime

# Add src to path for imports
src_path = Path(__file__).parent.parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from shipping_estimator.config.logging import configure_logging
from shipping_estimator.config.settings import get_settings
from shipping_estimator.engine import PricingEngine
from shipping_estimator.engine.models import DestinationZone, ShippingMethod
from shipping_estimator.engine.validator import DIMENSION_FIELDS, weight_limit_info
from shipping_estimator.form.state import ShippingFormState


st.set_page_config(
    page_title="Shipping Cost Calculator",
    layout="wide",
    initial_sidebar_state="collapsed"
)


@st.cache_resource
def get_engine():
    """Get cached engine instance."""
    settings = get_settings()
    configure_logging(settings.log_level)
    return PricingEngine(settings)


engine = get_engine()

if 'form' not in st.session_state:
    st.session_state.form = ShippingFormState()
form: ShippingFormState = st.session_state.form

WIDGET_KEYS = ("shippingMethod", "weight", "destinationZone") + DIMENSION_FIELDS

METHOD_LABELS = {
    m.value: f"{m.value.capitalize()} Shipping ({weight_limit_info(m).replace('kg - ', '-')})"
    for m in ShippingMethod
}


# ============================================================================
# CALLBACKS
# ============================================================================
def _on_field(name):
    form.update_field(name, st.session_state[name])


def _on_dimension(name):
    form.update_dimensions(name, st.session_state[name] or 0)


def _on_reset():
    form.reset_form()
    for key in WIDGET_KEYS:
        st.session_state.pop(key, None)


def _on_calculate():
    result = asyncio.run(form.calculate_shipping(engine))
    if result is None:
        st.session_state.flash = form.error_summary()


def _show_error(name):
    if form.show_validation and form.errors.get(name):
        st.error(form.errors[name])


# ============================================================================
# HEADER
# ============================================================================
st.title("📦 Shipping Cost Calculator")
st.caption(f"Enter your package details to calculate shipping costs | {datetime.now().strftime('%Y-%m-%d')}")

flash = st.session_state.pop('flash', None)
if flash:
    st.warning(f"❌ {flash}\n\nCheck the highlighted fields below for details.")


# ============================================================================
# RESULTS
# ============================================================================
result = form.shipping_result
if result:
    with st.container(border=True):
        st.subheader("✅ Shipping Cost Calculated")

        m1, m2 = st.columns(2)
        m1.metric("Total Cost", f"${result.shipping_cost:.2f}")
        m2.metric("Estimated Delivery", f"{result.estimated_delivery_days} business days")

        for warning in result.warnings:
            st.warning(warning)

        breakdown_df = pd.DataFrame(result.breakdown.as_rows())
        st.markdown("##### Cost Breakdown")
        st.dataframe(breakdown_df, use_container_width=True, hide_index=True)

        with st.expander("🔍 Calculation Trace"):
            st.text(result.get_trace_text())

        btn_col1, btn_col2 = st.columns(2)
        with btn_col1:
            st.download_button(
                "📥 CSV",
                data=breakdown_df.to_csv(index=False),
                file_name="shipping_quote.csv",
                mime="text/csv",
                use_container_width=True
            )
        with btn_col2:
            st.button("Close", on_click=form.clear_results, use_container_width=True)


# ============================================================================
# FORM
# ============================================================================
col1, col2 = st.columns([1.5, 1], gap="large")

with col1:
    method = form.form_data["shippingMethod"]

    st.selectbox(
        "Shipping Method *",
        options=list(METHOD_LABELS),
        format_func=METHOD_LABELS.get,
        key="shippingMethod",
        on_change=_on_field,
        args=("shippingMethod",),
    )
    _show_error("shippingMethod")
    st.caption(f"Weight limit: {weight_limit_info(method)}")

    st.number_input(
        "Weight (kg) *",
        min_value=0.0,
        step=0.1,
        value=float(form.form_data["weight"]),
        key="weight",
        on_change=_on_field,
        args=("weight",),
    )
    _show_error("weight")
    st.caption(f"Allowed range for {method}: {weight_limit_info(method)}")

    st.markdown("**Dimensions (cubic cm) ***")
    dim_cols = st.columns(3)
    for dim_col, name in zip(dim_cols, DIMENSION_FIELDS):
        with dim_col:
            st.number_input(
                name.capitalize(),
                min_value=0.0,
                step=1.0,
                value=float(form.form_data["dimensions"][name]),
                key=name,
                on_change=_on_dimension,
                args=(name,),
            )
            _show_error(name)
    _show_error("dimensions")
    st.caption("Each dimension max 200cm, total max 400cm")

with col2:
    st.selectbox(
        "Destination Zone *",
        options=[z.value for z in DestinationZone],
        format_func=str.capitalize,
        key="destinationZone",
        on_change=_on_field,
        args=("destinationZone",),
    )
    _show_error("destinationZone")
    st.caption("Select your delivery zone for accurate pricing")

    with st.container(border=True):
        st.markdown("##### 📦 Package Summary")
        for label, value in form.package_summary().items():
            if label == "Status":
                st.markdown(f"**{label}:** :red[❌ {value}]")
            else:
                st.markdown(f"**{label}:** {value}")
        st.caption(f"Limit: {weight_limit_info(method)}")


st.divider()
act1, act2 = st.columns(2)
with act1:
    st.button("🔄 Reset Form", on_click=_on_reset, use_container_width=True)
with act2:
    st.button(
        "💰 Calculate Shipping Cost",
        type="primary",
        on_click=_on_calculate,
        disabled=form.loading,
        use_container_width=True,
    )
