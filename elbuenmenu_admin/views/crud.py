"""Generic list + create/edit form screen around a CrudController."""
from __future__ import annotations

from typing import Any, Callable, Optional

import pandas as pd
import streamlit as st

from elbuenmenu_admin.api import AuthExpiredError
from elbuenmenu_admin.api.errors import AdminApiError
from elbuenmenu_admin.data.models import ApiModel
from elbuenmenu_admin.data.resources import Resource
from elbuenmenu_admin.services.crud import CrudController

from .common import CONTROLLERS_KEY, confirm_button, get_data

RowFn = Callable[[Any], dict]
FormFn = Callable[[Any, str], ApiModel]


def get_controller(resource: Resource, params: Optional[dict] = None) -> CrudController:
    """One controller per resource and session, loaded on first use."""
    controllers: dict[str, CrudController] = st.session_state.setdefault(CONTROLLERS_KEY, {})
    controller = controllers.get(resource.name)
    if controller is None or controller.params != params:
        controller = CrudController(get_data(), resource, params=params)
        controllers[resource.name] = controller
        try:
            controller.load()
        except AuthExpiredError:
            raise
        except AdminApiError as exc:
            controller.error = exc.message
    return controller


def records_frame(records: list, row: RowFn) -> pd.DataFrame:
    return pd.DataFrame([row(record) for record in records])


def _render_form(controller: CrudController, form: FormFn) -> None:
    resource = controller.resource
    title = "Editar" if controller.is_editing else "Nuevo"
    key = f"{resource.name}_form_{controller.editing_id or 'new'}"
    with st.form(key):
        st.markdown(f"#### {title}: {resource.label}")
        draft = form(controller.draft, key)
        col1, col2 = st.columns(2)
        save = col1.form_submit_button("Guardar", type="primary", disabled=controller.saving)
        cancel = col2.form_submit_button("Cancelar")
    if cancel:
        controller.close()
        st.rerun()
    if save:
        try:
            controller.submit(draft)
        except AuthExpiredError:
            raise
        except AdminApiError as exc:
            st.error(exc.message)
            return
        st.toast(f"{resource.label}: guardado")
        st.rerun()


def render_crud(
    controller: CrudController,
    row: RowFn,
    form: FormFn,
    create_defaults: Optional[Callable[[], dict]] = None,
    actions: Optional[Callable[[Any], None]] = None,
    records: Optional[list] = None,
) -> None:
    """Table of records, a create button, and per-record edit/delete controls."""
    resource = controller.resource
    if controller.error and not controller.is_open:
        st.error(controller.error)

    if st.button(f"➕ Nuevo", key=f"{resource.name}_new"):
        controller.open_create(**(create_defaults() if create_defaults else {}))
    if controller.is_open:
        _render_form(controller, form)

    records = controller.records if records is None else records
    if not records:
        st.info(f"No hay {resource.label.lower()} cargados.")
        return

    st.dataframe(records_frame(records, row), use_container_width=True, hide_index=True)
    for record in records:
        label = row(record)
        first = next(iter(label.values()), record.id)
        with st.expander(f"{first}"):
            cols = st.columns(2)
            if cols[0].button("Editar", key=f"{resource.name}_{record.id}_edit"):
                controller.open_edit(record)
                st.rerun()
            with cols[1]:
                if confirm_button("Eliminar", key=f"{resource.name}_{record.id}_delete"):
                    try:
                        controller.delete(record.id)
                    except AuthExpiredError:
                        raise
                    except AdminApiError as exc:
                        st.error(exc.message)
                    else:
                        st.toast(f"{resource.label}: eliminado")
                        st.rerun()
            if actions is not None:
                actions(record)
