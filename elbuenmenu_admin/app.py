import streamlit as st

from elbuenmenu_admin.api import AuthExpiredError, get_admin_context
from elbuenmenu_admin.config import get_config
from elbuenmenu_admin.logging import get_logger
from elbuenmenu_admin.views import business, catalog, loyalty, orders, sales, settings
from elbuenmenu_admin.views.common import expire_session, get_context, set_context

st.set_page_config(page_title="El Buen Menú · Admin", page_icon="🍔", layout="wide")

logger = get_logger(__name__)
config = get_config()

# -----------------------------------------------------------------------------
# Screens, grouped as in the sidebar
# -----------------------------------------------------------------------------
PAGES = {
    "Operación": {
        "Pedidos": orders.render,
        "Tiempo real": sales.render_realtime,
        "Ventas": sales.render_sales,
    },
    "Marketing": {
        "Cupones": catalog.render_coupons,
        "Códigos promocionales": catalog.render_promo_codes,
        "Promociones": catalog.render_promotions,
        "Fidelización": loyalty.render,
        "Reseñas": business.render_reviews,
    },
    "Negocio": {
        "Gastos": business.render_expenses,
        "Empleados": business.render_employees,
        "Inventario": business.render_inventory,
        "Categorías de tiendas": catalog.render_store_categories,
    },
    "Configuración": {
        "Local": settings.render_store,
        "Métodos de pago": settings.render_payments,
        "Avanzada": settings.render_advanced,
        "Sistema": settings.render_system,
    },
}


def login_form() -> None:
    """Ask for the admin token (and optionally the store) when the session has none."""
    st.title("El Buen Menú · Panel de administración")
    st.info("Ingresá tu token de administrador para continuar.")
    with st.form("login"):
        token = st.text_input("Token", type="password")
        store_id = st.text_input("ID del local", value=config.admin_store_id or "")
        if st.form_submit_button("Ingresar", type="primary") and token:
            set_context(get_admin_context(token=token, store_id=store_id or None))
            st.rerun()


context = get_context()
if config.data_backend == "http" and not context.is_authenticated:
    login_form()
    st.stop()

# -----------------------------------------------------------------------------
# Sidebar navigation
# -----------------------------------------------------------------------------
st.sidebar.title("El Buen Menú")
section = st.sidebar.selectbox("Sección", list(PAGES))
page = st.sidebar.radio("Pantalla", list(PAGES[section]))
st.sidebar.caption(f"Local: {context.store_id or 'todos'} · Backend: {config.data_backend}")
if st.sidebar.button("Cerrar sesión"):
    set_context(context.cleared())
    st.rerun()

try:
    PAGES[section][page]()
except AuthExpiredError as exc:
    expire_session()
    st.error(f"La sesión expiró: {exc.message}")
    if st.button("Volver a ingresar"):
        st.rerun()
