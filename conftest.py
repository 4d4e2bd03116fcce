import json

import pytest

from elbuenmenu_admin.config import set_config_for_test


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=None):
        self.status_code = status_code
        if text is None:
            text = "" if body is None else json.dumps(body)
        self.text = text

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        return json.loads(self.text)


class FakeSession:
    """Records outgoing requests and replays queued responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def post(self, url, **kwargs):
        return self.request("POST", url, **kwargs)


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture(autouse=True)
def clear_env(monkeypatch, tmp_path):
    for var in [
        "API_URL", "ADMIN_TOKEN", "ADMIN_STORE_ID", "BOT_WEBHOOK_URL", "BOT_API_KEY",
        "DATA_BACKEND", "DATA_DIR", "PAYMENT_CONFIG_FILE", "LOG_LEVEL", "LOG_FILE",
    ]:
        monkeypatch.delenv(var, raising=False)
    set_config_for_test(
        api_url="https://api.test/api",
        bot_webhook_url="http://bot.test",
        bot_api_key="secret",
        data_dir=str(tmp_path / "data"),
        payment_config_file=str(tmp_path / "payment_config.json"),
    )


class FakeDataAccess:
    """Stands in for a DataAccess backend: records every call and returns canned results.

    A result may be a value, a callable producing the value, or an exception to raise.
    """

    def __init__(self, **results):
        self.results = results
        self.calls = []

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)

        def method(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            result = self.results.get(name)
            if isinstance(result, Exception):
                raise result
            return result() if callable(result) else result

        return method

    def called(self, name):
        return [(args, kwargs) for call, args, kwargs in self.calls if call == name]


@pytest.fixture
def fake_data():
    return FakeDataAccess
