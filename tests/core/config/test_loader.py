import pytest
import json

import yaml

from strahlkorper.core.base.exceptions import ConfigurationError
from strahlkorper.core.config.loader import (
    JSONConfigLoader,
    YAMLConfigLoader,
    get_config_loader,
    load_config_file,
    save_config_file,
)
from strahlkorper.core.config.settings import SurfaceConfig


@pytest.fixture
def json_loader():
    return JSONConfigLoader()


@pytest.fixture
def yaml_loader():
    return YAMLConfigLoader()


class TestConfigLoaderSubclasses:
    valid_data = {"key": "value", "number": 123}

    @pytest.mark.parametrize(
        "loader_fixture, valid_content, invalid_content, filename_ext",
        [
            ("json_loader", '{"key": "value", "number": 123}', "{'key': 'value'}", "json"),
            ("yaml_loader", "key: value\nnumber: 123", "key: value\n  number: 123", "yaml"),
        ],
    )
    def test_load_valid_and_invalid_files(
        self, loader_fixture, valid_content, invalid_content, filename_ext, request, tmp_path
    ):
        loader = request.getfixturevalue(loader_fixture)
        valid = tmp_path / f"valid.{filename_ext}"
        invalid = tmp_path / f"invalid.{filename_ext}"
        valid.write_text(valid_content)
        invalid.write_text(invalid_content)

        assert loader.load(valid) == self.valid_data
        with pytest.raises(ConfigurationError):
            loader.load(invalid)

    @pytest.mark.parametrize("loader_fixture, ext", [("json_loader", "json"), ("yaml_loader", "yml")])
    def test_save_and_reload(self, loader_fixture, ext, request, tmp_path):
        loader = request.getfixturevalue(loader_fixture)
        path = tmp_path / "nested" / f"cfg.{ext}"
        loader.save({"path": tmp_path, "items": (1, 2)}, path)
        assert loader.load(path) == {"path": str(tmp_path), "items": [1, 2]}

    def test_missing_file(self, json_loader, tmp_path):
        with pytest.raises(ConfigurationError):
            json_loader.load(tmp_path / "absent.json")

    def test_non_mapping(self, json_loader, yaml_loader, tmp_path):
        (tmp_path / "list.json").write_text("[1, 2]")
        (tmp_path / "list.yaml").write_text("- 1\n- 2\n")
        with pytest.raises(ConfigurationError):
            json_loader.load(tmp_path / "list.json")
        with pytest.raises(ConfigurationError):
            yaml_loader.load(tmp_path / "list.yaml")

    def test_empty_yaml_is_empty_dict(self, yaml_loader, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert yaml_loader.load(path) == {}

    def test_save_rejects_non_dict(self, json_loader, tmp_path):
        with pytest.raises(ConfigurationError):
            json_loader.save([1, 2], tmp_path / "x.json")


class TestGetConfigLoader:
    @pytest.mark.parametrize("name, loader_type", [
        ("a.json", JSONConfigLoader),
        ("a.yaml", YAMLConfigLoader),
        ("a.YML", YAMLConfigLoader),
    ])
    def test_by_extension(self, name, loader_type):
        assert isinstance(get_config_loader(name), loader_type)

    def test_unsupported(self):
        with pytest.raises(ConfigurationError):
            get_config_loader("config.toml")


class TestConfigFiles:
    def test_round_trip(self, tmp_path):
        cfg = SurfaceConfig(default_l_max=10, default_m_max=5, default_frame="Grid",
                            log_file=tmp_path / "log.txt")
        for name in ("cfg.json", "cfg.yaml"):
            save_config_file(cfg, tmp_path / name)
            loaded = load_config_file(tmp_path / name)
            assert loaded.to_dict() == cfg.to_dict()

    def test_section_in_larger_file(self, tmp_path):
        path = tmp_path / "run.yaml"
        path.write_text(yaml.safe_dump({"strahlkorper": {"default_l_max": 20}, "other": {"x": 1}}))
        assert load_config_file(path).default_l_max == 20

    def test_invalid_values_name_the_file(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"default_m_max": 9, "default_l_max": 3}))
        with pytest.raises(ConfigurationError) as info:
            load_config_file(path)
        assert info.value.get_detail("config_file") == str(path)

    def test_unknown_keys(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"nside": 64}))
        with pytest.raises(ConfigurationError):
            load_config_file(path)
