import pytest

from elbuenmenu_admin.api import ApiResponseError, ValidationError
from elbuenmenu_admin.data.models import Coupon, EmployeePayment, Expense
from elbuenmenu_admin.data.resources import COUPONS, EXPENSES
from elbuenmenu_admin.services.crud import (
    CrudController,
    slugify,
    validate_coupon,
    validate_employee_payment,
    validate_review_response,
)

SAVED = [Coupon(id="c1", code="HOLA10", discount_value=10)]


@pytest.fixture
def data(fake_data):
    return fake_data(list_records=lambda: list(SAVED))


def test_load_passes_params(data):
    controller = CrudController(data, EXPENSES, params={"month": "2024-05"})
    controller.load()
    assert data.called("list_records") == [((EXPENSES,), {"params": {"month": "2024-05"}})]


def test_create_posts_then_reloads_and_closes(data):
    controller = CrudController(data, COUPONS)
    controller.open_create(code="NUEVO", discount_value=15)
    assert controller.is_open and not controller.is_editing
    assert controller.submit() is True
    (args, _), = data.called("create_record")
    assert args[0] is COUPONS
    assert args[1].code == "NUEVO"
    assert data.called("update_record") == []
    assert not controller.is_open
    assert [c.id for c in controller.records] == ["c1"]


def test_edit_puts_by_id_on_a_copy(data):
    controller = CrudController(data, COUPONS)
    original = SAVED[0]
    draft = controller.open_edit(original)
    draft.discount_value = 20
    assert original.discount_value == 10
    controller.submit()
    (args, _), = data.called("update_record")
    assert args[1] == "c1"
    assert args[2].discount_value == 20


def test_validation_error_keeps_draft_open_and_sends_nothing(data):
    controller = CrudController(data, COUPONS)
    controller.open_create(code="  ", discount_value=10)
    with pytest.raises(ValidationError) as excinfo:
        controller.submit()
    assert excinfo.value.field == "code"
    assert controller.is_open
    assert controller.error == "El código es obligatorio"
    assert data.calls == []


def test_backend_failure_keeps_draft_open(fake_data):
    data = fake_data(create_record=ApiResponseError("Error del servidor", status=500))
    controller = CrudController(data, EXPENSES)
    controller.open_create(description="Nafta", amount=100, category="combustible", date="2024-05-02")
    with pytest.raises(ApiResponseError):
        controller.submit()
    assert controller.is_open
    assert not controller.saving
    assert controller.error == "Error del servidor"
    assert data.called("list_records") == []


def test_duplicate_submit_is_ignored(data):
    controller = CrudController(data, COUPONS)
    controller.open_create(code="X", discount_value=1)
    controller.saving = True
    assert controller.submit() is False
    assert data.calls == []
    assert controller.is_open


def test_submit_with_explicit_draft(data):
    controller = CrudController(data, EXPENSES)
    controller.submit(Expense(description="Pan", amount=50, date="2024-05-01"))
    assert len(data.called("create_record")) == 1


def test_submit_without_draft(data):
    with pytest.raises(ValidationError):
        CrudController(data, COUPONS).submit()


def test_delete_reloads(data):
    controller = CrudController(data, COUPONS)
    controller.delete("c1")
    assert data.called("delete_record") == [((COUPONS, "c1"), {})]
    assert len(data.called("list_records")) == 1


@pytest.mark.parametrize(
    "overrides,field",
    [
        ({"discount_value": 0}, "discount_value"),
        ({"discount_value": 150}, "discount_value"),
        ({"valid_from": "2024-05-10T00:00:00Z", "valid_until": "2024-05-01T00:00:00Z"}, "valid_until"),
    ],
)
def test_validate_coupon(overrides, field):
    values = {"code": "A", "discount_value": 10, **overrides}
    with pytest.raises(ValidationError) as excinfo:
        validate_coupon(Coupon(**values))
    assert excinfo.value.field == field


def test_fixed_coupon_may_exceed_100():
    validate_coupon(Coupon(code="A", discount_type="fixed", discount_value=1500))


def test_other_validators():
    with pytest.raises(ValidationError):
        validate_employee_payment(EmployeePayment(employee_id="e1", amount=0, payment_date="2024-05-01"))
    with pytest.raises(ValidationError):
        validate_review_response("   ")
    assert validate_review_response(" ¡Gracias! ") == "¡Gracias!"


def test_slugify():
    assert slugify("Comida Rápida & Más") == "comida-rapida-mas"
