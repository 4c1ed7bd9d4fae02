"""
provider.py – External LLM client with provider routing and validation.
-----------------------------------------------------------------------
In the overall data-flow this file sits at the infrastructure layer.
It is the single place where we talk to the external LLM platform (OpenAI, or an
OpenAI-compatible endpoint such as Nebius).

Why a *provider* module?
• Keeps third-party SDK initialisation separate from the completion proxy logic.
• Offers a tiny, easily mockable `get_client()` function instead of a
  global singleton. Tests can monkey-patch this function or inject a fake
  client without importing heavy objects.
• Routes on CONFIG["llm"]["provider"] so switching vendors needs no code change.

Validation happens at client creation time (not import time), so the service starts
without credentials and the reply chain simply falls through to its lower tiers.

Provider routing logic:
- "openai": OpenAI's official API with OPENAI_API_KEY (OMNIDIMENSION_API_KEY accepted)
- "nebius": OpenAI-compatible API at CONFIG["llm"]["base_url"] with LLM_API_KEY/NEBIUS_API_KEY
- Unsupported providers raise ValueError with clear error message
"""

import logging
import os
from typing import Dict, List, Tuple

from openai import OpenAI
from config import CONFIG

logger = logging.getLogger(__name__)

PROVIDER_ENV_VARS = {
    "openai": ["OPENAI_API_KEY", "OMNIDIMENSION_API_KEY"],
    "nebius": ["LLM_API_KEY", "NEBIUS_API_KEY"],
}


def require_any_env(var_names: List[str]) -> Tuple[str, str]:
    """
    Check that at least one of the specified environment variables is present and non-empty.

    The function never logs or returns more than the name of the variable that was used,
    alongside the value for the caller to hand to the SDK.

    Args:
        var_names (List[str]): Environment variable names to check, in order of preference.

    Returns:
        Tuple[str, str]: (selected_var_name, value).

    Raises:
        RuntimeError: If none of the variables is present or non-empty.
    """
    for var_name in var_names:
        value = os.getenv(var_name, "")
        if value:
            return var_name, value

    var_list = ", ".join(var_names)
    raise RuntimeError(
        f"Missing required environment variable. Set one of: {var_list}"
    )


def _selected_provider(config: Dict) -> str:
    return str((config.get("llm", {}) or {}).get("provider", "openai")).strip().lower()


def validate_env_for_provider(config: Dict) -> None:
    """
    Validate that the API key environment variables for the configured provider are present.

    Args:
        config (Dict): The configuration dictionary with an 'llm' section.

    Raises:
        ValueError: If an unsupported provider is configured.
        RuntimeError: If the provider's API key variables are missing or empty.
    """
    provider = _selected_provider(config)

    if provider not in PROVIDER_ENV_VARS:
        raise ValueError(f"Unsupported LLM provider: {provider}")

    selected_var, _ = require_any_env(PROVIDER_ENV_VARS[provider])
    logger.info("Using environment variable: %s", selected_var)


def has_credentials(config: Dict = None) -> bool:
    """Return True when the configured provider's API key is available (live mode)."""
    config = CONFIG if config is None else config
    names = PROVIDER_ENV_VARS.get(_selected_provider(config), [])
    return any(os.getenv(name) for name in names)


def get_client() -> OpenAI:
    """
    Build and return a configured OpenAI-compatible client for the selected provider.

    Returns:
        OpenAI: A ready-to-use client.

    Raises:
        RuntimeError: If required environment variables are missing.
        ValueError: If an unsupported provider is configured.
    """
    validate_env_for_provider(CONFIG)

    llm_config = CONFIG.get("llm", {})
    provider = _selected_provider(CONFIG)
    _, api_key = require_any_env(PROVIDER_ENV_VARS[provider])

    if provider == "nebius":
        base_url = llm_config.get("base_url", "https://api.studio.nebius.com/v1/")
    else:
        base_url = "https://api.openai.com/v1"
    logger.info("LLM provider selected: %s | base_url=%s", provider, base_url)

    return OpenAI(
        base_url=base_url,
        api_key=api_key,
        timeout=llm_config.get("timeout", 30),  # seconds – explicit is better than implicit
    )
