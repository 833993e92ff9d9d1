import pytest

from commentguard.capability import DEFAULT_OLLAMA_MODEL
from commentguard.classify.rules import Tier, classify
from commentguard.config import EngineConfig, config_from_dict, load_config, save_config
from commentguard.errors import ConfigError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("OLLAMA_URL", raising=False)
    monkeypatch.delenv("OLLAMA_MODEL", raising=False)


def test_defaults_without_file() -> None:
    config = load_config(None)
    assert config.batch_size == 5
    assert config.inter_batch_delay_ms == 100
    assert config.max_periodic_rescans is None
    assert config.ollama_model == DEFAULT_OLLAMA_MODEL
    assert "buy now" in config.high_keywords


def test_load_yaml_file(tmp_path) -> None:
    path = tmp_path / "commentguard.yaml"
    path.write_text(
        "batch_size: 3\n"
        "inter_batch_delay_ms: 250\n"
        "max_periodic_rescans: 4\n"
        "keywords:\n"
        "  override: [Crypto King]\n"
        "  medium: []\n"
        "ollama:\n"
        "  model: qwen2.5:0.5b\n",
        encoding="utf-8",
    )

    config = load_config(str(path))

    assert config.batch_size == 3
    assert config.inter_batch_delay_ms == 250
    assert config.max_periodic_rescans == 4
    assert config.ollama_model == "qwen2.5:0.5b"
    assert config.medium_keywords == []
    # Tables not named keep their defaults
    assert "buy now" in config.high_keywords

    tables = config.keyword_tables()
    assert classify("the CRYPTO KING strikes", tables) == Tier.SPAM
    assert classify("follow me", tables) == Tier.SAFE


def test_env_overrides_file(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OLLAMA_URL", "http://gpu-box:11434")
    config = load_config(None)
    assert config.ollama_url == "http://gpu-box:11434"


def test_missing_file_raises(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))


@pytest.mark.parametrize(
    "data",
    [
        {"batch_size": 0},
        {"batch_size": "five"},
        {"inter_batch_delay_ms": -1},
        {"classify_timeout_s": 0},
        {"max_periodic_rescans": 0},
        {"keywords": ["buy now"]},
        {"keywords": {"high": "buy now"}},
        {"ollama": "localhost"},
        ["not", "a", "mapping"],
    ],
)
def test_invalid_values_raise(data) -> None:
    with pytest.raises(ConfigError):
        config_from_dict(data)


def test_config_error_is_value_error() -> None:
    with pytest.raises(ValueError):
        config_from_dict({"debounce_ms": True})


def test_save_then_load(tmp_path) -> None:
    config = EngineConfig(batch_size=2, high_keywords=["act now"], system_prompt="only say spam or safe")
    path = tmp_path / "nested" / "commentguard.yaml"

    save_config(str(path), config)
    loaded = load_config(str(path))

    assert loaded.batch_size == 2
    assert loaded.high_keywords == ["act now"]
    assert loaded.system_prompt == "only say spam or safe"
