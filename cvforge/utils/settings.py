"""
Runtime settings.

Loads cvforge/config/settings.yaml (or the file named by CVFORGE_SETTINGS_PATH)
with OmegaConf, then applies environment overrides:

    LLM_PROVIDER   -> llm.provider
    LLM_MODEL      -> llm.model
    ARTIFACTS_PATH -> storage.root
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from omegaconf import DictConfig, OmegaConf

load_dotenv()
DEFAULT_SETTINGS_PATH = Path(__file__).resolve().parent.parent / "config" / "settings.yaml"

# Environment variable -> dotted settings key
ENV_OVERRIDES = {
    "LLM_PROVIDER": "llm.provider",
    "LLM_MODEL": "llm.model",
    "ARTIFACTS_PATH": "storage.root",
}


def load_settings(settings_path: Path = None) -> DictConfig:
    """
    Load settings from YAML and apply environment overrides.

    Args:
        settings_path: YAML file to load (default: CVFORGE_SETTINGS_PATH or the packaged defaults)

    Returns:
        Read-only DictConfig

    Example:
        settings = load_settings()
        settings.llm.timeout_s  # 30
    """
    if settings_path is None:
        settings_path = Path(os.getenv("CVFORGE_SETTINGS_PATH", DEFAULT_SETTINGS_PATH))

    # User file is merged over the packaged defaults so partial files are allowed
    settings = OmegaConf.load(DEFAULT_SETTINGS_PATH)
    if Path(settings_path).resolve() != DEFAULT_SETTINGS_PATH:
        settings = OmegaConf.merge(settings, OmegaConf.load(settings_path))

    for env_var, key in ENV_OVERRIDES.items():
        value = os.getenv(env_var)
        if value:
            OmegaConf.update(settings, key, value)

    OmegaConf.set_readonly(settings, True)
    return settings
