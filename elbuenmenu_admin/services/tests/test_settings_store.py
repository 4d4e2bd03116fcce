import json

from elbuenmenu_admin.api import ApiConnectionError
from elbuenmenu_admin.data.models import PaymentConfig
from elbuenmenu_admin.services.settings import PaymentConfigStore


def sample_config():
    return PaymentConfig.model_validate(
        {
            "mercadoPago": {"publicKey": "APP_USR-pub", "accessToken": "APP_USR-secret", "enabled": True},
            "transferencia": {"alias": "buen.menu", "cvu": "0000003100000000000001", "titular": "El Buen Menú", "enabled": True},
        }
    )


def test_load_defaults_when_missing(fake_data, tmp_path):
    store = PaymentConfigStore(fake_data(), tmp_path / "missing.json")
    config = store.load()
    assert config.efectivo.enabled
    assert not config.mercado_pago.enabled


def test_load_defaults_when_corrupt(fake_data, tmp_path):
    path = tmp_path / "payment_config.json"
    path.write_text("{not json", encoding="utf-8")
    assert PaymentConfigStore(fake_data(), path).load() == PaymentConfig()


def test_default_path_comes_from_config(fake_data, tmp_path):
    assert PaymentConfigStore(fake_data()).path == tmp_path / "payment_config.json"


def test_save_writes_both_copies(fake_data, tmp_path):
    data = fake_data()
    path = tmp_path / "nested" / "payment_config.json"
    store = PaymentConfigStore(data, path)
    report = store.save(sample_config())
    assert report.fully_saved
    assert report.errors == []
    saved = json.loads(path.read_text(encoding="utf-8"))
    assert saved["mercadoPago"]["accessToken"] == "APP_USR-secret"
    assert saved["transferencia"]["titular"] == "El Buen Menú"
    assert store.load() == sample_config()
    assert len(data.called("save_payment_config")) == 1


def test_backend_failure_still_saves_locally(fake_data, tmp_path):
    data = fake_data(save_payment_config=ApiConnectionError("No se pudo conectar"))
    report = PaymentConfigStore(data, tmp_path / "payment_config.json").save(sample_config())
    assert report.local_saved and not report.backend_saved
    assert report.saved_anywhere and not report.fully_saved
    assert report.errors == ["Servidor: No se pudo conectar"]


def test_local_failure_still_saves_backend(fake_data, tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    data = fake_data()
    report = PaymentConfigStore(data, blocker / "payment_config.json").save(sample_config())
    assert report.backend_saved and not report.local_saved
    assert report.errors[0].startswith("Local:")
