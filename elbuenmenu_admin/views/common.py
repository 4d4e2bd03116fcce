"""Session state helpers shared by every screen."""
from __future__ import annotations

import functools
from typing import Any, Callable, Optional

import streamlit as st

from elbuenmenu_admin.api import AdminContext, AuthExpiredError, BotNotifier, get_admin_context
from elbuenmenu_admin.api.errors import AdminApiError
from elbuenmenu_admin.config import get_config
from elbuenmenu_admin.data.interface import DataAccess
from elbuenmenu_admin.data.util import get_data_access
from elbuenmenu_admin.logging import get_logger
from elbuenmenu_admin.services.query import DataQuery, PollingSchedule

logger = get_logger(__name__)

CONTEXT_KEY = "admin_context"
DATA_KEY = "data_access"
QUERIES_KEY = "queries"
CONTROLLERS_KEY = "crud_controllers"


def get_context() -> AdminContext:
    if CONTEXT_KEY not in st.session_state:
        st.session_state[CONTEXT_KEY] = get_admin_context()
    return st.session_state[CONTEXT_KEY]


def set_context(context: AdminContext) -> None:
    """Swap the session credentials and drop everything fetched with the old ones."""
    st.session_state[CONTEXT_KEY] = context
    for key in (DATA_KEY, QUERIES_KEY, CONTROLLERS_KEY):
        st.session_state.pop(key, None)


def get_data() -> DataAccess:
    if DATA_KEY not in st.session_state:
        st.session_state[DATA_KEY] = get_data_access(context=get_context())
    return st.session_state[DATA_KEY]


def get_bot() -> Optional[BotNotifier]:
    if not get_config().bot_webhook_url:
        return None
    return BotNotifier()


def get_schedule() -> PollingSchedule:
    return PollingSchedule.from_config()


def get_query(name: str, fetch: Callable[[], Any], default: Any = None, screen: Optional[str] = None) -> DataQuery:
    """One DataQuery per name and session, polled on the screen's interval."""
    queries: dict[str, DataQuery] = st.session_state.setdefault(QUERIES_KEY, {})
    if name not in queries:
        interval = get_schedule().interval(screen) if screen else None
        queries[name] = DataQuery(fetch, interval=interval, default=default, name=name)
    return queries[name]


def invalidate(*names: str) -> None:
    queries: dict[str, DataQuery] = st.session_state.get(QUERIES_KEY, {})
    for name in names:
        if name in queries:
            queries[name].invalidate()


def expire_session() -> None:
    logger.warning("Admin session expired, asking for a new token")
    set_context(get_context().cleared())


def session_guard(func: Callable[..., Any]) -> Callable[..., Any]:
    """Expire the session from inside a fragment.

    Fragment reruns never reach the page-level handler in app.py, so an
    expired token is handled here and the whole app is rerun to the login form.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except AuthExpiredError:
            expire_session()
            st.rerun(scope="app")

    return wrapper


def show_query_error(query: DataQuery) -> None:
    if query.error is not None:
        st.warning(f"No se pudo actualizar: {query.error.message}")


def run_action(
    action: Callable[[], Any],
    success: Optional[str] = None,
    refresh: tuple[str, ...] = (),
    rerun: bool = False,
) -> bool:
    """Run a mutation, report the outcome and mark the given queries stale.

    With rerun=True the script reruns only after a success, so a failure
    message stays on screen. An expired session is re-raised so the app can
    ask for a new token.
    """
    try:
        action()
    except AuthExpiredError:
        raise
    except AdminApiError as exc:
        st.error(exc.message)
        return False
    if success:
        st.toast(success)
    invalidate(*refresh)
    if rerun:
        st.rerun()
    return True


def confirm_button(label: str, key: str, help: Optional[str] = None) -> bool:
    """Two-step button: the first click arms it, the second confirms."""
    armed_key = f"{key}__armed"
    if st.session_state.get(armed_key):
        col1, col2 = st.columns(2)
        if col1.button("Confirmar", key=f"{key}__yes", type="primary"):
            st.session_state[armed_key] = False
            return True
        if col2.button("Cancelar", key=f"{key}__no"):
            st.session_state[armed_key] = False
            st.rerun()
        return False
    if st.button(label, key=key, help=help):
        st.session_state[armed_key] = True
        st.rerun()
    return False
