"""
Streamlit Frontend for Stash

The screens a user interacts with:
1. Snapshots - monthly chart plus the list of snapshots (edit / delete)
2. Add Snapshot - record today's balances
3. Trends - per-snapshot lines per category, with a date lookup
4. Settings - currency, reminders, CSV import

The UI only holds form state. Every change goes through the
orchestrator flows, which go through the SnapshotStore.
"""

from datetime import date

import plotly.graph_objects as go
import streamlit as st

from stash.aggregation import category_totals
from stash.importer import CSVImportError
from stash.models.chart import OVERALL_TOTAL
from stash.models.preferences import SUPPORTED_CURRENCIES, ReminderFrequency
from stash.models.snapshot import AccountCategory
from stash.orchestrator import AppComponents, SnapshotForm, create_app_components
from stash.services.formatting import locale_for_currency
from stash.services.storage import DuplicateError, NotFoundError, PersistenceError


# Page configuration
st.set_page_config(
    page_title="Stash",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .hint {
        color: #6c757d;
        font-size: 0.85em;
    }
</style>
""", unsafe_allow_html=True)


CHART_LAYOUT = dict(
    height=320,
    margin=dict(l=10, r=10, t=30, b=10),
    legend=dict(orientation="h", yanchor="bottom", y=1.02, x=0),
    hovermode="x unified",
)


@st.cache_resource
def get_components() -> AppComponents:
    """Get or create application components (cached)."""
    try:
        components = create_app_components(use_storage=True)
    except Exception as e:
        st.error(f"Failed to initialize: {e}")
        components = create_app_components(use_storage=False)
    # first render should show the stored snapshots, not an empty list
    components.store.flush(timeout=10)
    return components


def main():
    """Main application entry point."""
    components = get_components()

    # Sidebar navigation
    st.sidebar.title("💰 Stash")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Snapshots", "➕ Add Snapshot", "📈 Trends", "⚙️ Settings"],
        index=0,
    )

    render_reminders(components)
    render_error_banner(components)

    # Route to appropriate page
    if page == "📊 Snapshots":
        render_snapshots_page(components)
    elif page == "➕ Add Snapshot":
        render_add_page(components)
    elif page == "📈 Trends":
        render_trends_page(components)
    elif page == "⚙️ Settings":
        render_settings_page(components)


def render_reminders(components: AppComponents):
    """Show any reminder that fired since the last render."""
    scheduler = components.preferences.scheduler
    if scheduler is None or not hasattr(scheduler, "due_reminders"):
        return
    for plan in scheduler.due_reminders():
        st.toast(f"**{plan.title}**\n\n{plan.body}")


def render_error_banner(components: AppComponents):
    """Surface a persistence error once, until dismissed."""
    message = components.store.last_error
    if not message:
        return
    st.error(message)
    if st.button("Dismiss", key="dismiss_error"):
        components.store.dismiss_error()
        st.rerun()


def render_snapshots_page(components: AppComponents):
    """Render the monthly chart and the snapshot list."""
    st.title("📊 Snapshots")
    fmt = components.preferences.format

    edit_error = st.session_state.pop("edit_error", None)
    if edit_error:
        st.error(edit_error)

    totals = components.charts.monthly_totals()
    fig = go.Figure()
    for category in sorted({item.category for item in totals}):
        items = [item for item in totals if item.category == category]
        fig.add_trace(go.Scatter(
            x=[item.month for item in items],
            y=[float(item.total) for item in items],
            mode="lines+markers",
            name=category,
            hovertemplate="%{y:,.2f}",
        ))
    fig.update_layout(**CHART_LAYOUT)
    st.plotly_chart(fig, use_container_width=True, config={"displayModeBar": False})

    snapshots = components.store.sorted_snapshots()
    if not snapshots:
        st.info(
            "📋 Your snapshots will appear here once you add them. "
            "Use the 'Add Snapshot' page or import a CSV from Settings."
        )
        return

    latest = components.charts.latest()
    if latest is not None:
        st.metric("Latest net worth", fmt(latest.total), help=latest.date.strftime("%d %B %Y"))

    st.markdown("---")

    for snapshot in snapshots:
        key = str(snapshot.id)
        with st.expander(f"{snapshot.date.strftime('%d %B %Y')} — Total: {fmt(snapshot.total)}"):
            if snapshot.accounts:
                for account in snapshot.accounts:
                    st.markdown(
                        f"{account.institution or '—'} · "
                        f"{account.category.value}: **{fmt(account.amount)}**"
                    )
            else:
                st.caption("No accounts recorded for this snapshot.")

            col1, col2 = st.columns(2)
            with col1:
                if st.button("✏️ Edit", key=f"edit_{key}"):
                    st.session_state.edit_form = components.edit_flow.edit_form(snapshot.id)
            with col2:
                if st.button("🗑️ Delete", key=f"delete_{key}"):
                    st.session_state.pending_delete = snapshot.id

            if st.session_state.get("pending_delete") == snapshot.id:
                st.warning(
                    "Are you sure you want to delete this snapshot? "
                    "This action cannot be undone."
                )
                confirm, cancel = st.columns(2)
                with confirm:
                    if st.button("Delete", key=f"confirm_delete_{key}", type="primary"):
                        components.edit_flow.delete([snapshot.id])
                        st.session_state.pending_delete = None
                        st.rerun()
                with cancel:
                    if st.button("Cancel", key=f"cancel_delete_{key}"):
                        st.session_state.pending_delete = None
                        st.rerun()

    form = st.session_state.get("edit_form")
    if form is not None:
        render_edit_form(components, form)


def render_account_rows(form: SnapshotForm, key_prefix: str):
    """Editable rows for every account in a form."""
    remove = []
    categories = list(AccountCategory)
    for index, account in enumerate(form.accounts):
        col1, col2, col3, col4 = st.columns([3, 2, 2, 1])
        with col1:
            institution = st.text_input(
                "Institution",
                value=account.institution,
                key=f"{key_prefix}_inst_{account.id}",
            )
        with col2:
            amount = st.text_input(
                "Amount",
                value=str(account.amount),
                key=f"{key_prefix}_amount_{account.id}",
            )
        with col3:
            category = st.selectbox(
                "Category",
                options=categories,
                index=categories.index(account.category),
                format_func=lambda c: c.value,
                key=f"{key_prefix}_cat_{account.id}",
            )
        with col4:
            if st.button("✖", key=f"{key_prefix}_remove_{account.id}"):
                remove.append(index)
        form.update_account(index, institution=institution, amount=amount, category=category)
    if remove:
        form.remove_accounts(remove)
        st.rerun()


def render_edit_form(components: AppComponents, form: SnapshotForm):
    """Full-replace editor for one snapshot."""
    st.markdown("---")
    st.subheader("✏️ Edit Snapshot")

    form.date = st.date_input("Date", value=form.date, key="edit_date")
    render_account_rows(form, "edit")

    if st.button("➕ Add Account", key="edit_add_account"):
        form.add_blank_account()
        st.rerun()

    col1, col2 = st.columns(2)
    with col1:
        if st.button("💾 Save", type="primary", key="edit_save"):
            try:
                components.edit_flow.save(form)
            except NotFoundError as e:
                # Shown on the next run, after the rerun below
                st.session_state.edit_error = str(e)
            st.session_state.edit_form = None
            st.rerun()
    with col2:
        if st.button("Cancel", key="edit_cancel"):
            st.session_state.edit_form = None
            st.rerun()


def render_add_page(components: AppComponents):
    """Render the add-snapshot form."""
    st.title("➕ Add Snapshot")
    fmt = components.preferences.format

    if "new_form" not in st.session_state:
        st.session_state.new_form = components.edit_flow.new_form()
    form: SnapshotForm = st.session_state.new_form

    st.markdown("### New Account")
    col1, col2, col3 = st.columns([3, 2, 2])
    with col1:
        institution = st.text_input("Institution", key="new_institution")
    with col2:
        amount = st.text_input("Amount", key="new_amount")
    with col3:
        category = st.selectbox(
            "Category",
            options=list(AccountCategory),
            index=list(AccountCategory).index(AccountCategory.SAVINGS),
            format_func=lambda c: c.value,
            key="new_category",
        )

    if st.button("Add Account"):
        if form.add_account(institution, amount, category):
            st.rerun()
        else:
            st.error("Please enter an institution and a valid amount")

    form.date = st.date_input("Snapshot Date", value=form.date, key="new_date")

    st.markdown("### Accounts")
    if not form.accounts:
        st.caption("No accounts added yet.")
    for index, account in enumerate(form.accounts):
        col1, col2 = st.columns([5, 1])
        with col1:
            st.markdown(
                f"**{account.institution}** · {account.category.value} · {fmt(account.amount)}"
            )
        with col2:
            if st.button("✖", key=f"new_remove_{account.id}"):
                form.remove_accounts([index])
                st.rerun()

    if form.accounts:
        st.markdown(f"**Total:** {fmt(form.total)}")

    if st.button("💾 Save Snapshot", type="primary"):
        try:
            snapshot = components.edit_flow.save(form)
        except DuplicateError as e:
            st.error(str(e))
        else:
            st.session_state.new_form = components.edit_flow.new_form()
            st.success(f"Saved snapshot for {snapshot.date.strftime('%d %B %Y')}")


def render_trends_page(components: AppComponents):
    """Per-snapshot category lines with point markers."""
    st.title("📈 Trends")
    fmt = components.preferences.format

    show_overall = st.toggle("Show Overall Total", value=True)
    points = components.charts.series(include_overall=show_overall)

    if not points:
        st.info("Add a snapshot to see your trends.")
        return

    fig = go.Figure()
    for category in sorted({p.category for p in points}, key=lambda c: (c == OVERALL_TOTAL, c)):
        series = [p for p in points if p.category == category]
        fig.add_trace(go.Scatter(
            x=[p.date for p in series],
            y=[float(p.total) for p in series],
            mode="lines+markers",
            name=category,
            line=dict(dash="dash") if category == OVERALL_TOTAL else None,
        ))
    fig.update_layout(**CHART_LAYOUT)
    st.plotly_chart(fig, use_container_width=True, config={"displayModeBar": False})

    st.markdown("### Look up a date")
    query = st.date_input("Closest snapshot to", value=date.today(), key="nearest_query")
    nearest = components.charts.nearest(query)
    if nearest is not None:
        st.markdown(f"**{nearest.date.strftime('%d %B %Y')}** · {fmt(nearest.total)}")
        for category, total in category_totals(nearest).items():
            st.markdown(f"- {category.value}: {fmt(total)}")


def render_settings_page(components: AppComponents):
    """Render the settings page."""
    st.title("⚙️ Settings")
    preferences = components.preferences

    st.markdown("### Currency")
    currencies = list(SUPPORTED_CURRENCIES)
    symbol = st.selectbox(
        "Currency",
        options=currencies,
        index=currencies.index(preferences.currency_symbol),
    )
    st.caption(
        f"Amounts are shown the {locale_for_currency(preferences.currency_symbol)} way, "
        f"e.g. {preferences.format(1234.56)}"
    )
    if symbol != preferences.currency_symbol:
        try:
            preferences.set_currency_symbol(symbol)
        except PersistenceError as e:
            st.error(f"Failed to save setting: {e}")
        else:
            st.rerun()

    st.markdown("### Reminders")
    frequencies = list(ReminderFrequency)
    frequency = st.selectbox(
        "Reminder",
        options=frequencies,
        index=frequencies.index(preferences.reminder_frequency),
        format_func=lambda f: f.display_name,
    )
    if frequency != preferences.reminder_frequency:
        try:
            preferences.set_reminder_frequency(frequency)
        except PersistenceError as e:
            st.error(f"Failed to save setting: {e}")
        else:
            st.rerun()

    scheduler = preferences.scheduler
    next_fire = getattr(scheduler, "next_fire", lambda: None)()
    if next_fire is not None:
        st.caption(f"Next reminder: {next_fire.strftime('%A %d %B %Y, %H:%M')}")

    st.markdown("### Data Management")
    uploaded = st.file_uploader("Import from CSV", type=["csv"])
    st.markdown(
        '<p class="hint">Columns: date,institution,amount,category '
        "(date as YYYY-MM-DD, category exactly as shown in the app).</p>",
        unsafe_allow_html=True,
    )
    if uploaded is not None and st.button("📥 Import", type="primary"):
        try:
            result = components.import_flow.import_bytes(uploaded.getvalue())
        except (CSVImportError, DuplicateError) as e:
            st.error(f"Error importing file: {e}")
        else:
            st.success(result.summary())

    st.markdown("---")
    st.markdown("### Configuration")

    from stash.config import validate_all_settings

    status = validate_all_settings()
    if status.get("storage", False):
        st.success(f"✅ Storage - {components.store.storage.location}")
    else:
        st.error(f"❌ Storage - {status.get('storage_error', 'Not configured')}")
    st.markdown(
        "Set `STASH_STORAGE_DATA_DIR` (or add it to a `.env` file) "
        "to change where your data is kept."
    )


if __name__ == "__main__":
    main()
