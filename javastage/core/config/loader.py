"""
Configuration loader — builds the staging context and plugin settings.

Two kinds of configuration flow through here:

    - The staging context: directories, the service catalog, application
      metadata and the raw ``JBP_CONFIG_*`` override strings, read once
      from the environment at process start.
    - Per-plugin settings: defaults in code, overlaid by
      ``<buildpack>/config/<name>.yml``, overlaid by the plugin's
      ``JBP_CONFIG_<NAME>`` override.

Override values are small inline YAML blobs, e.g.
``JBP_CONFIG_JMX='{enabled: true, port: 5001}'``.  A malformed override
is a recoverable problem: the plugin falls back to its defaults.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from javastage.core.context import StagingContext
from javastage.core.models.binding import ApplicationInfo
from javastage.core.services.credentials import ServiceCatalog

logger = logging.getLogger(__name__)

OVERRIDE_PREFIX = "JBP_CONFIG_"
APPLICATION_ENV = "VCAP_APPLICATION"
BUILDPACK_DIR_ENV = "JAVASTAGE_BUILDPACK_DIR"
CONFIG_SUBDIR = "config"


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""


def override_key(name: str) -> str:
    """Environment key for a plugin override: ``open-jdk jre`` → ``JBP_CONFIG_OPEN_JDK_JRE``."""
    snake = re.sub(r"[^A-Za-z0-9]+", "_", name).strip("_").upper()
    return f"{OVERRIDE_PREFIX}{snake}"


def parse_override(raw: str) -> dict[str, Any]:
    """Parse an override blob into a mapping.

    Accepted shapes:
        - a mapping:                ``{enabled: true}``
        - a quoted mapping string:  ``'{enabled: true}'``
        - a list of mappings:       ``[from_environment: false, java_opts: -Xss1m]``
          (legacy; merged left to right)

    Raises:
        ConfigError: If the blob is not YAML or has another shape.
    """
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML: {e}") from e

    if isinstance(data, str):
        try:
            data = yaml.safe_load(data)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in quoted value: {e}") from e

    if data is None:
        return {}
    if isinstance(data, dict):
        return {str(k): v for k, v in data.items()}
    if isinstance(data, list):
        merged: dict[str, Any] = {}
        for item in data:
            if not isinstance(item, dict):
                raise ConfigError(f"Expected a list of mappings, found {type(item).__name__}")
            merged.update({str(k): v for k, v in item.items()})
        return merged

    raise ConfigError(f"Expected a YAML mapping, got {type(data).__name__}")


def merge_config(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-merge ``overlay`` onto a copy of ``base``; nested mappings merge, everything else replaces."""
    result = copy.deepcopy(dict(base))
    for key, value in overlay.items():
        if isinstance(value, Mapping) and isinstance(result.get(key), Mapping):
            result[key] = merge_config(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def load_plugin_config(
    ctx: StagingContext,
    name: str,
    defaults: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Resolve the effective settings for one plugin.

    Never raises: unreadable config files and malformed overrides are
    logged and skipped, leaving the earlier layers in effect.
    """
    config = dict(defaults or {})

    if ctx.buildpack_dir is not None:
        config_file = ctx.buildpack_dir / CONFIG_SUBDIR / f"{name}.yml"
        if config_file.is_file():
            try:
                data = yaml.safe_load(config_file.read_text(encoding="utf-8"))
            except (OSError, yaml.YAMLError) as e:
                logger.warning("Ignoring unreadable %s: %s", config_file, e)
            else:
                if isinstance(data, dict):
                    config = merge_config(config, data)
                elif data is not None:
                    logger.warning("Ignoring %s: expected a YAML mapping", config_file)

    key = override_key(name)
    raw = ctx.override(key)
    if raw:
        try:
            config = merge_config(config, parse_override(raw))
        except ConfigError as e:
            logger.warning("Ignoring malformed %s, using defaults: %s", key, e)

    return config


def load_application(environ: Mapping[str, str]) -> ApplicationInfo:
    """Parse application metadata; missing or malformed JSON yields empty metadata."""
    raw = environ.get(APPLICATION_ENV)
    if not raw:
        return ApplicationInfo()
    try:
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        return ApplicationInfo.model_validate(data)
    except Exception as e:
        logger.warning("Ignoring malformed %s: %s", APPLICATION_ENV, e)
        return ApplicationInfo()


def load_context(
    build_dir: Path,
    cache_dir: Path,
    deps_dir: Path,
    deps_index: str = "0",
    environ: Mapping[str, str] | None = None,
    buildpack_dir: Path | None = None,
) -> StagingContext:
    """Build the immutable staging context.

    Args:
        build_dir: The application directory being staged.
        cache_dir: Build cache directory.
        deps_dir: Root of the shared deps directory.
        deps_index: This buildpack's slot under ``deps_dir``.
        environ: Environment snapshot (default: a copy of ``os.environ``).
        buildpack_dir: Directory holding ``manifest.yml``, ``config/`` and
            offline ``dependencies/`` (default: ``$JAVASTAGE_BUILDPACK_DIR``).

    Raises:
        ConfigError: If the directories or deps index are unusable.
    """
    env = dict(os.environ if environ is None else environ)

    if not deps_index.isdigit():
        raise ConfigError(f"Deps index must be a non-negative integer, got {deps_index!r}")
    if not build_dir.is_dir():
        raise ConfigError(f"Build directory not found: {build_dir}")

    if buildpack_dir is None and env.get(BUILDPACK_DIR_ENV):
        buildpack_dir = Path(env[BUILDPACK_DIR_ENV])

    overrides = {k: v for k, v in env.items() if k.startswith(OVERRIDE_PREFIX)}

    ctx = StagingContext(
        build_dir=build_dir.resolve(),
        cache_dir=cache_dir.resolve(),
        deps_dir=deps_dir.resolve(),
        deps_index=deps_index,
        buildpack_dir=buildpack_dir.resolve() if buildpack_dir else None,
        services=ServiceCatalog.from_environ(env),
        application=load_application(env),
        overrides=overrides,
        environ=env,
    )
    logger.debug(
        "Staging context: build=%s deps=%s services=%d overrides=%s",
        ctx.build_dir,
        ctx.dep_dir,
        len(ctx.services),
        sorted(overrides),
    )
    return ctx
