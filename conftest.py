import pytest

from config import Config
from server import create_app


@pytest.fixture
def config(tmp_path):
    return Config(
        host="127.0.0.1",
        port=4567,
        data_dir=tmp_path / "data",
        users_file=tmp_path / "users.yml",
        secret_key="test-secret",
    )


@pytest.fixture
def app(config):
    app = create_app(config)
    app.config["TESTING"] = True
    app.extensions["slate.users"].create("admin", "secret")
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def documents(app):
    return app.extensions["slate.documents"]


@pytest.fixture
def users(app):
    return app.extensions["slate.users"]


@pytest.fixture
def admin(client):
    with client.session_transaction() as sess:
        sess["username"] = "admin"
    return client


@pytest.fixture
def session_data(client):

    def read():
        with client.session_transaction() as sess:
            return dict(sess)
    return read
