from __future__ import annotations

from pathlib import Path
from typing import Dict

import pytest

from image_reducer.config.config_manager import ConfigManager
from image_reducer.config.config_validator import ConfigValidator
from image_reducer.core.errors import ConfigError


@pytest.fixture()
def paths(tmp_path: Path) -> Dict[str, str]:
    source = tmp_path / "source"
    source.mkdir()
    return {"source_path": str(source), "dest_path": str(tmp_path / "dest")}


@pytest.fixture(autouse=True)
def no_default_config_files(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(ConfigManager, "DEFAULT_CONFIG_LOCATIONS", [])


def test_validator_coerces_raw_values(paths: Dict[str, str]) -> None:
    options = ConfigValidator().validate({
        **paths,
        "max-width": "640",
        "jpeg-blur": "1.5",
        "recursive": "yes",
        "verbose": "no",
        "direct-color-bit-depth": "8",
    })

    assert options["max_width"] == 640
    assert options["jpeg_blur"] == 1.5
    assert options["recursive"] is True
    assert options["verbose"] is False
    assert options["direct_color_bit_depth"] == 8


def test_validator_skips_private_and_empty_options(paths: Dict[str, str]) -> None:
    options = ConfigValidator().validate({**paths, "_": ["extra"], "quality": None})
    assert set(options) == {"source_path", "dest_path"}


@pytest.mark.parametrize(
    ("options", "message"),
    [
        ({"colour": "red"}, 'Unknown option "colour"'),
        ({"quality": 101}, '"quality" may not exceed 100'),
        ({"max_width": 0}, '"max_width" may not be less than 1'),
        ({"indexed_color_bit_depth": 9}, "may not exceed 8"),
        ({"direct_color_bit_depth": 7}, 'Invalid value for "direct_color_bit_depth"'),
        ({"force_direct_color_output_format": "bmp"}, "Invalid value"),
        ({"max_height": "tall"}, "must be of type int"),
        ({"jpeg_blur": "nan"}, "must be of type float"),
        ({"jpeg_blur": "inf"}, "must be of type float"),
        ({"force_png_to_indexed": True, "force_png_to_jpg": True}, "may not be used together"),
        ({"force_png_to_indexed": True, "force_direct_color_output_format": "jpg"}, "may not be used together"),
    ],
)
def test_validator_rejects_invalid_options(paths: Dict[str, str], options: Dict, message: str) -> None:
    with pytest.raises(ConfigError, match=message):
        ConfigValidator().validate({**paths, **options})


def test_validator_requires_paths(paths: Dict[str, str]) -> None:
    with pytest.raises(ConfigError, match="Required option missing: dest_path"):
        ConfigValidator().validate({"source_path": paths["source_path"]})


def test_validator_checks_source_directory(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Source path is not a directory"):
        ConfigValidator().validate({"source_path": str(tmp_path / "nope"), "dest_path": str(tmp_path / "out")})


def test_validator_rejects_destination_inside_source(paths: Dict[str, str]) -> None:
    nested = str(Path(paths["source_path"]) / "out")

    for recursive in (True, False):
        with pytest.raises(ConfigError, match="inside the source path"):
            ConfigValidator().validate({"source_path": paths["source_path"], "dest_path": nested, "recursive": recursive})


def test_validator_resolves_symlinks_before_comparing_paths(tmp_path: Path, paths: Dict[str, str]) -> None:
    link = tmp_path / "link"
    link.symlink_to(paths["source_path"], target_is_directory=True)

    with pytest.raises(ConfigError, match="inside the source path"):
        ConfigValidator().validate({"source_path": paths["source_path"], "dest_path": str(link / "out")})

    with pytest.raises(ConfigError, match="must differ"):
        ConfigValidator().validate({"source_path": paths["source_path"], "dest_path": str(link)})


def test_validator_accepts_sibling_with_common_prefix(tmp_path: Path, paths: Dict[str, str]) -> None:
    sibling = str(tmp_path / "source-small")

    options = ConfigValidator().validate({"source_path": paths["source_path"], "dest_path": sibling, "recursive": True})

    assert options["dest_path"] == sibling


def test_config_error_is_a_value_error() -> None:
    assert issubclass(ConfigError, ValueError)


def test_manager_without_file_uses_defaults(paths: Dict[str, str]) -> None:
    manager = ConfigManager()
    manager.load_config()

    config = manager.build_scan_configuration(paths)

    assert config.recursive is False
    assert config.min_size_reduction == 0
    assert config.quality is None
    assert manager.get_logging_config() == {"level": "INFO", "file": None}
    assert manager.config_file is None


def test_manager_merges_file_and_cli_options(tmp_path: Path, paths: Dict[str, str]) -> None:
    config_file = tmp_path / "reducer.yaml"
    config_file.write_text(
        "options:\n"
        f"  source-path: {paths['source_path']}\n"
        f"  dest-path: {paths['dest_path']}\n"
        "  max-width: 800\n"
        "  quality: 60\n"
        "logging:\n"
        "  level: DEBUG\n",
        encoding="utf-8",
    )
    manager = ConfigManager(str(config_file))
    manager.load_config()

    config = manager.build_scan_configuration({"quality": 40, "max_height": None})

    assert config.max_width == 800
    assert config.quality == 40
    assert config.max_height is None
    assert manager.get_logging_config()["level"] == "DEBUG"


def test_full_optimization_preset(paths: Dict[str, str]) -> None:
    manager = ConfigManager()
    manager.load_config()

    config = manager.build_scan_configuration({**paths, "full_optimization": True, "quality": 90})

    assert config.max_width == 420
    assert config.max_height == 600
    assert config.min_size_reduction == 30
    assert config.quality == 20
    assert config.direct_color_bit_depth == 8
    assert config.indexed_color_bit_depth == 5
    assert config.force_png_to_indexed is True
    assert config.jpeg_blur == 2
    assert config.recursive is True


def test_missing_explicit_config_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        ConfigManager(str(tmp_path / "absent.yaml")).load_config()


def test_invalid_yaml_is_a_config_error(tmp_path: Path) -> None:
    config_file = tmp_path / "broken.yaml"
    config_file.write_text("options: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Invalid YAML"):
        ConfigManager(str(config_file)).load_config()


def test_options_section_must_be_mapping(tmp_path: Path) -> None:
    config_file = tmp_path / "list.yaml"
    config_file.write_text("options:\n  - quality\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="must be a mapping"):
        ConfigManager(str(config_file)).load_config()
