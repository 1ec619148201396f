"""
Streamlit Frontend for the Expense Splitter

The page a group opens to record who paid for what and see who owes whom.

DESIGN PRINCIPLES:
1. One session object per browser session, held in st.session_state
2. Every change goes through the session, which persists it
3. Shared links carry the whole state in a `token` query parameter;
   the token is loaded once and then removed from the address bar
"""

import asyncio
from decimal import Decimal

import streamlit as st

from splitter.config import get_settings, validate_all_settings
from splitter.ledger import total_spent
from splitter.session import InvalidInputError, SplitterSession, create_session


# Page configuration
st.set_page_config(
    page_title="Expense Splitter",
    page_icon="💸",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .settle-box {
        padding: 12px 20px;
        background-color: #cce5ff;
        border-radius: 10px;
        border-left: 5px solid #004085;
        margin: 6px 0;
    }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def get_session() -> SplitterSession:
    """Get or create this browser session's splitter state."""
    if "splitter" not in st.session_state:
        session = create_session(use_storage=True)

        token_param = get_settings().sharing.token_param
        token = st.query_params.get(token_param)
        from_token = session.initialize(token=token)
        if token:
            # Strip the token so a refresh does not reload stale state
            del st.query_params[token_param]
            if from_token:
                st.toast("Loaded shared expenses from link")
            else:
                st.toast("That link could not be read, showing saved data instead")

        st.session_state.splitter = session
    return st.session_state.splitter


def format_money(amount: Decimal) -> str:
    return f"{amount:,.2f}"


def main():
    """Main application entry point."""
    session = get_session()

    st.sidebar.title("💸 Expense Splitter")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["👥 Friends", "🧾 Expenses", "⚖️ Balances", "🔗 Share", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    st.sidebar.markdown(
        """
        **How to use:**
        1. Add everyone in the group
        2. Record each expense and who shared it
        3. Check balances to see who pays whom
        """
    )

    if page == "👥 Friends":
        render_friends_page(session)
    elif page == "🧾 Expenses":
        render_expenses_page(session)
    elif page == "⚖️ Balances":
        render_balances_page(session)
    elif page == "🔗 Share":
        render_share_page(session)
    elif page == "⚙️ Settings":
        render_settings_page()


def render_friends_page(session: SplitterSession):
    """Render the roster page."""
    st.title("👥 Friends")

    with st.form("add_friend", clear_on_submit=True):
        name = st.text_input("Name", placeholder="e.g., Alice")
        if st.form_submit_button("➕ Add Friend", type="primary"):
            try:
                session.add_participant(name)
                st.rerun()
            except InvalidInputError as e:
                st.error(str(e))

    participants = session.participants
    if not participants:
        st.info("No friends yet. Add the people you are splitting with.")
        return

    for participant in participants:
        col1, col2 = st.columns([4, 1])
        col1.markdown(f"**{participant.name}**")
        if col2.button("🗑️ Remove", key=f"remove_friend_{participant.id}"):
            deleted = session.remove_participant(participant.id)
            if deleted:
                st.warning(f"{len(deleted)} expenses involving {participant.name} were removed")
            st.rerun()


def render_expenses_page(session: SplitterSession):
    """Render the expense list and the add-expense form."""
    st.title("🧾 Expenses")

    participants = session.participants
    if not participants:
        st.info("Add some friends first.")
        return

    ids = [p.id for p in participants]
    default_currency = get_settings().app.default_currency

    with st.form("add_expense", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            description = st.text_input("Description *", placeholder="e.g., Dinner")
            amount = st.number_input(
                "Amount *",
                min_value=0.0,
                step=0.01,
                format="%.2f",
            )
            currency = st.text_input("Currency", value=default_currency)
        with col2:
            paid_by = st.selectbox(
                "Paid by *",
                options=ids,
                format_func=session.get_name,
            )
            shared_with = st.multiselect(
                "Split between *",
                options=ids,
                default=ids,
                format_func=session.get_name,
            )

        if st.form_submit_button("➕ Add Expense", type="primary"):
            try:
                session.add_expense(
                    description=description,
                    amount=Decimal(str(amount)),
                    currency=currency,
                    paid_by=paid_by,
                    participants=shared_with,
                )
                st.rerun()
            except InvalidInputError as e:
                st.error(str(e))

    st.markdown("---")

    expenses = session.expenses
    if not expenses:
        st.info("No expenses recorded yet.")
        return

    st.metric("Total spent", format_money(total_spent(expenses)))

    for expense in reversed(expenses):
        col1, col2 = st.columns([4, 1])
        names = ", ".join(session.get_name(pid) for pid in expense.participants)
        col1.markdown(
            f"**{expense.description}** - {format_money(expense.amount)} {expense.currency}  \n"
            f"Paid by {session.get_name(expense.paid_by)}, split between {names}"
        )
        if col2.button("🗑️ Remove", key=f"remove_expense_{expense.id}"):
            session.remove_expense(expense.id)
            st.rerun()


def render_balances_page(session: SplitterSession):
    """Render balances and settlements."""
    st.title("⚖️ Balances")

    balances = session.calculate_balances()
    if not balances:
        st.info("Nothing to show yet.")
        return

    st.subheader("Net balance")
    for participant_id, balance in balances.items():
        name = session.get_name(participant_id)
        if balance > 0:
            st.success(f"{name} gets back {format_money(balance)}")
        elif balance < 0:
            st.error(f"{name} owes {format_money(-balance)}")
        else:
            st.markdown(f"{name} is settled up")

    st.subheader("Who pays whom")
    settlements = session.calculate_settlements()
    if not settlements:
        st.info("Everyone is settled up. 🎉")
        return

    for settlement in settlements:
        st.markdown(f"""
        <div class="settle-box">
            <strong>{session.get_name(settlement.from_id)}</strong> pays
            <strong>{session.get_name(settlement.to_id)}</strong>
            {format_money(settlement.amount)}
        </div>
        """, unsafe_allow_html=True)


def render_share_page(session: SplitterSession):
    """Render sharing and reset controls."""
    st.title("🔗 Share")
    st.markdown("Anyone opening this link sees the same friends and expenses.")

    link = session.generate_shareable_link()
    st.code(link, language=None)

    if st.button("📋 Copy to clipboard"):
        if run_async(session.copy_shareable_link()):
            st.success("Link copied")
        else:
            st.warning("Could not copy automatically. Use the copy icon on the link above.")

    st.markdown("---")
    st.subheader("Danger zone")
    confirm = st.checkbox("I understand this deletes everything")
    if st.button("🧹 Clear all data", disabled=not confirm):
        session.clear_all()
        st.rerun()

    with st.expander("Recent activity"):
        for event in session.audit_logger.recent_events(limit=20):
            st.markdown(
                f"`{event.timestamp:%H:%M:%S}` {event.description}"
            )


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Configuration Status")

    status = validate_all_settings()

    sections = [
        ("Storage (local JSON files)", "storage"),
        ("Sharing (links and clipboard)", "sharing"),
        ("Application defaults", "app"),
    ]

    for name, key in sections:
        if status.get(key, False):
            st.success(f"✅ {name} - OK")
        else:
            error = status.get(f"{key}_error", "Invalid configuration")
            st.error(f"❌ {name} - {error}")

    if status.get("storage", False):
        st.markdown(f"Data directory: `{get_settings().storage.data_dir}`")

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "Settings are read from environment variables or a `.env` file. "
        "Storage variables start with `SPLITTER_STORAGE_`, sharing variables "
        "with `SPLITTER_SHARING_`."
    )


if __name__ == "__main__":
    main()
