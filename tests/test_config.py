import pytest

from viewgate.config import (
    Credentials,
    InstancesConfig,
    ServerConfig,
    ServerInstance,
    instances_from_dict,
    load_instances,
    load_instances_file,
    parse_server_url,
)
from viewgate.errors import ConfigurationError, MalformedUrlError


def test_parse_server_url_ok():
    assert parse_server_url("https://cov.example.com:8443") == "https://cov.example.com:8443"
    assert parse_server_url("  http://localhost/  ") == "http://localhost/"


@pytest.mark.parametrize(
    "url, fragment",
    [
        ("", "no protocol"),
        ("cov.example.com", "no protocol"),
        ("ftp://cov.example.com", "unknown protocol: ftp"),
        ("http://", "no host"),
        ("http://cov.example.com:notaport", "invalid port"),
    ],
)
def test_parse_server_url_malformed(url, fragment):
    with pytest.raises(MalformedUrlError, match=fragment):
        parse_server_url(url)


def test_malformed_url_is_a_value_error():
    assert issubclass(MalformedUrlError, ValueError)


def test_server_config_api_url():
    cfg = ServerConfig.build("https://cov.example.com/", Credentials("u", "p"))
    assert cfg.api_url("/api/views/v1") == "https://cov.example.com/api/views/v1"


def test_instance_credentials_both_or_neither(monkeypatch):
    assert ServerInstance(url="http://a").credentials() is None
    assert ServerInstance(url="http://a", username="u", password="p").credentials() == Credentials("u", "p")

    with pytest.raises(ValueError, match="incomplete"):
        ServerInstance(url="http://a", username="u").credentials()
    with pytest.raises(ValueError, match="incomplete"):
        ServerInstance(url="http://a", password="p").credentials()

    monkeypatch.setenv("COV_PW", "from-env")
    creds = ServerInstance(url="http://a", username="u", password_env="COV_PW").credentials()
    assert creds.password == "from-env"


def test_password_not_in_repr():
    assert "hunter2" not in repr(ServerInstance(url="http://a", username="u", password="hunter2"))
    assert "hunter2" not in repr(Credentials("u", "hunter2"))


def test_find_instance_ignores_trailing_slash():
    cfg = InstancesConfig(instances=(ServerInstance(url="https://a.example.com/"),))
    assert cfg.find_instance("https://a.example.com") is not None
    assert cfg.find_instance("https://b.example.com") is None
    assert cfg.find_instance("") is None
    assert cfg.find_instance(None) is None


def test_load_instances_file(tmp_path):
    path = tmp_path / "instances.yaml"
    path.write_text(
        """
instances:
  - url: https://cov.example.com:8443
    username: builder
    password_env: COV_PW
  - url: http://localhost:8080
views_cache_seconds: 60
"""
    )
    cfg = load_instances_file(path)
    assert cfg.urls() == ["https://cov.example.com:8443", "http://localhost:8080"]
    assert cfg.views_cache_seconds == 60
    assert cfg.timeout_s == 30
    assert cfg.instances[0].password_env == "COV_PW"


def test_load_instances_file_schema_violation(tmp_path):
    path = tmp_path / "instances.yaml"
    path.write_text("instances:\n  - username: nobody\n")
    with pytest.raises(ConfigurationError, match="Invalid instances file"):
        load_instances_file(path)


def test_load_instances_file_bad_url(tmp_path):
    path = tmp_path / "instances.yaml"
    path.write_text("instances:\n  - url: not-a-url\n")
    with pytest.raises(ConfigurationError, match="not a valid URL"):
        load_instances_file(path)


def test_load_instances_file_bad_yaml(tmp_path):
    path = tmp_path / "instances.yaml"
    path.write_text("instances: [unclosed\n")
    with pytest.raises(ConfigurationError):
        load_instances_file(path)


def test_instances_from_dict_unknown_key():
    with pytest.raises(ConfigurationError):
        instances_from_dict({"instances": [{"url": "http://a", "token": "x"}]})


def test_load_instances_resolution(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("VIEWGATE_CONFIG", raising=False)
    assert load_instances().is_empty()

    env_file = tmp_path / "env.yaml"
    env_file.write_text("instances:\n  - url: http://from-env\n")
    monkeypatch.setenv("VIEWGATE_CONFIG", str(env_file))
    assert load_instances().urls() == ["http://from-env"]

    with pytest.raises(ConfigurationError, match="not found"):
        load_instances(tmp_path / "missing.yaml")
