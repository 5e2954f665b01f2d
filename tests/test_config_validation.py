"""Configuration loading and validation tests."""

from __future__ import annotations

import shutil
from pathlib import Path

import pytest
import yaml

from brawler.domain.config import ConfigError
from brawler.domain.models import Seeding
from brawler.infrastructure.config.loader import collect_configs, load_configs, load_tournament


def _copy_config_tree(tmp_path: Path) -> Path:
    destination = tmp_path / "config"
    shutil.copytree(Path("config"), destination)
    return destination


def _rewrite(path: Path, **changes) -> None:
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    data.update(changes)
    path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")


def test_sample_configs_load() -> None:
    configs = load_configs(Path("config"))
    assert set(configs.fighters) == {"iron-golem", "alley-cat", "storm-knight", "swamp-witch", "brick-brawler"}
    assert set(configs.arenas) == {"colosseum", "bare-pit"}
    assert set(configs.narrators) == {"static", "ollama-qwen", "openai-mini", "anthropic-haiku"}
    assert set(configs.tournaments) == {"four-way", "five-way-open"}

    golem = configs.fighter("iron-golem")
    assert golem.stats.health == 500
    assert golem.stats.unique_abilities == frozenset({"riveted plating"})
    cat = configs.fighter("alley-cat")
    assert cat.stats.max_health == cat.stats.health == 120

    open_cfg = configs.tournaments["five-way-open"]
    assert open_cfg.settings.seeding is Seeding.SHUFFLED
    assert open_cfg.settings.seed == 7
    assert open_cfg.narrator is None
    assert configs.arena("colosseum").to_arena().sorted_objects() == [
        "broken column",
        "marble throne",
        "sand-covered ground",
    ]


def test_load_tournament_by_name_and_path() -> None:
    by_name = load_tournament("four-way", Path("config"))
    by_path = load_tournament("four-way.yaml", Path("config"))
    assert by_name.name == by_path.name == "four-way"


def test_unknown_tournament_suggests_a_name() -> None:
    with pytest.raises(ConfigError) as excinfo:
        load_tournament("four-wya", Path("config"))
    assert "Did you mean 'four-way'?" in str(excinfo.value)


def test_unknown_fighter_reference(tmp_path: Path) -> None:
    config_dir = _copy_config_tree(tmp_path)
    _rewrite(
        config_dir / "tournaments" / "four-way.yaml",
        fighters=["iron-golm", "alley-cat", "storm-knight"],
    )
    with pytest.raises(ConfigError) as excinfo:
        load_configs(config_dir)
    message = str(excinfo.value)
    assert "iron-golm" in message
    assert "Did you mean 'iron-golem'?" in message


def test_duplicate_fighter_in_tournament(tmp_path: Path) -> None:
    config_dir = _copy_config_tree(tmp_path)
    _rewrite(config_dir / "tournaments" / "four-way.yaml", fighters=["alley-cat", "alley-cat"])
    with pytest.raises(ConfigError) as excinfo:
        load_configs(config_dir)
    assert "more than once" in str(excinfo.value)


def test_duplicate_fighter_names_across_files(tmp_path: Path) -> None:
    config_dir = _copy_config_tree(tmp_path)
    shutil.copy(config_dir / "fighters" / "alley-cat.yaml", config_dir / "fighters" / "alley-cat-copy.yaml")
    with pytest.raises(ConfigError) as excinfo:
        collect_configs(config_dir)
    assert "Duplicate fighter identifier 'alley-cat'" in str(excinfo.value)


def test_schema_rejects_single_fighter_tournament(tmp_path: Path) -> None:
    config_dir = _copy_config_tree(tmp_path)
    _rewrite(config_dir / "tournaments" / "four-way.yaml", fighters=["alley-cat"])
    with pytest.raises(ConfigError) as excinfo:
        load_configs(config_dir)
    assert "four-way.yaml" in str(excinfo.value)


def test_schema_rejects_missing_stats(tmp_path: Path) -> None:
    config_dir = _copy_config_tree(tmp_path)
    path = config_dir / "fighters" / "alley-cat.yaml"
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    del data["stats"]["strength"]
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    with pytest.raises(ConfigError) as excinfo:
        load_configs(config_dir)
    assert "strength" in str(excinfo.value)


def test_health_above_max_health_is_rejected(tmp_path: Path) -> None:
    config_dir = _copy_config_tree(tmp_path)
    path = config_dir / "fighters" / "iron-golem.yaml"
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    data["stats"]["health"] = 900
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    with pytest.raises(ConfigError) as excinfo:
        load_configs(config_dir)
    assert "max_health" in str(excinfo.value)


def test_unknown_narrator_adapter_is_rejected(tmp_path: Path) -> None:
    config_dir = _copy_config_tree(tmp_path)
    _rewrite(config_dir / "narrators" / "static.yaml", adapter="gemini")
    with pytest.raises(ConfigError):
        load_configs(config_dir)


def test_invalid_yaml_is_reported(tmp_path: Path) -> None:
    config_dir = _copy_config_tree(tmp_path)
    (config_dir / "arenas" / "broken.yaml").write_text("name: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError) as excinfo:
        load_configs(config_dir)
    assert "Invalid YAML" in str(excinfo.value)


def test_missing_fighters_directory(tmp_path: Path) -> None:
    config_dir = _copy_config_tree(tmp_path)
    shutil.rmtree(config_dir / "fighters")
    with pytest.raises(ConfigError):
        load_configs(config_dir)


def test_fighter_named_draw_is_rejected(tmp_path: Path) -> None:
    config_dir = _copy_config_tree(tmp_path)
    _rewrite(config_dir / "fighters" / "alley-cat.yaml", name="draw")
    with pytest.raises(ConfigError) as excinfo:
        load_configs(config_dir)
    assert "reserved" in str(excinfo.value)
