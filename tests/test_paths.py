import yaml

from viewgate.config import instances_from_dict
from viewgate.init import write_templates
from viewgate.util.paths import copy_template, ensure_dir


def test_ensure_dir(tmp_path):
    d = tmp_path / "subdir" / "nested"
    assert not d.exists()
    ensure_dir(d)
    assert d.is_dir()
    ensure_dir(d)


def test_copy_template(tmp_path):
    dest = tmp_path / "instances.yaml"

    assert copy_template("instances.yaml", dest) is True
    original = dest.read_text(encoding="utf-8")
    assert "instances:" in original

    # Second write (no overwrite)
    dest.write_text("Modified", encoding="utf-8")
    assert copy_template("instances.yaml", dest) is False
    assert dest.read_text(encoding="utf-8") == "Modified"

    # Force overwrite
    assert copy_template("instances.yaml", dest, overwrite=True) is True
    assert dest.read_text(encoding="utf-8") == original


def test_written_template_is_a_valid_config(tmp_path):
    dest = write_templates(tmp_path)
    assert dest == tmp_path / ".viewgate" / "instances.yaml"
    config = instances_from_dict(yaml.safe_load(dest.read_text(encoding="utf-8")))
    assert not config.is_empty()
    assert config.views_cache_seconds == 300
