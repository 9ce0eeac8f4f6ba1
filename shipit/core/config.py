"""Layered parameter resolution.

Parameters and secrets can come from several places. ``resolve`` walks
the sources in precedence order for each requested key and keeps the
first non-empty value:

1. ``--param key=value`` flags
2. environment variables (``web_deploy_username`` -> ``WEB_DEPLOY_USERNAME``)
3. the ``[params]`` table of ``shipit.toml``
4. the secret store
5. declared defaults

Only the keys that the planned targets reference are looked up, so the
secret store is never asked for a value no target needs. Missing values
are not an error here; the executor checks the requirements of every
planned target before the first one runs.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Protocol

from .result import Err, Ok, Result
from .structured import as_str_dict, get_table, scalar_table

__all__ = [
    "ConfigError",
    "ConfigSnapshot",
    "DefaultSource",
    "EnvironmentSource",
    "FileSource",
    "FlagSource",
    "ResolvedValue",
    "Secret",
    "SecretFileSource",
    "ValueSource",
    "env_name",
    "parse_param_flags",
    "resolve",
]


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when configuration input cannot be read or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class Secret:
    """A value that must not be printed.

    ``str()`` and ``repr()`` are masked; call ``reveal()`` at the point of use.
    """

    _value: str = field(repr=False)

    def reveal(self) -> str:
        return self._value

    def __str__(self) -> str:
        return "********"

    def __repr__(self) -> str:
        return "Secret(********)"


type RawValue = str | Secret


class ValueSource(Protocol):
    """A read-only supplier of named string values."""

    @property
    def name(self) -> str: ...

    def lookup(self, key: str) -> RawValue | None:
        """Return the value for ``key`` or None if this source has none."""
        ...


def env_name(key: str) -> str:
    return key.upper().replace("-", "_")


class FlagSource:
    name = "flag"

    def __init__(self, values: Mapping[str, str]) -> None:
        self._values = dict(values)

    def lookup(self, key: str) -> RawValue | None:
        return self._values.get(key)


class EnvironmentSource:
    name = "environment"

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = os.environ if environ is None else environ

    def lookup(self, key: str) -> RawValue | None:
        return self._environ.get(env_name(key))


class FileSource:
    """Values from the ``[params]`` table of ``shipit.toml``."""

    name = "shipit.toml"

    def __init__(self, values: Mapping[str, str]) -> None:
        self._values = dict(values)

    def lookup(self, key: str) -> RawValue | None:
        return self._values.get(key)


class SecretFileSource:
    """Secret store backed by a TOML file.

    The file holds a flat ``[secrets]`` table keyed by vault secret name.
    ``aliases`` maps a parameter key to the secret name when the two
    differ (``web_deploy_username -> "Demo-WebDeployUsername"``).
    Every value returned is wrapped in ``Secret``.
    """

    name = "secret store"

    def __init__(self, secrets: Mapping[str, str], aliases: Mapping[str, str] | None = None) -> None:
        self._secrets = dict(secrets)
        self._aliases = dict(aliases or {})
        self.lookups: list[str] = []

    def lookup(self, key: str) -> RawValue | None:
        secret_name = self._aliases.get(key, key)
        self.lookups.append(secret_name)
        value = self._secrets.get(secret_name)
        if value is None:
            return None
        return Secret(value)

    @classmethod
    def load(
        cls,
        path: Path,
        aliases: Mapping[str, str] | None = None,
    ) -> Result[SecretFileSource, ConfigError]:
        """Load the store from ``path``; a missing file is an empty store."""
        import tomllib

        if not path.exists():
            return Ok(cls({}, aliases))

        try:
            data_obj: object = tomllib.loads(path.read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError as e:
            return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
        except OSError as e:
            return Err(ConfigError(f"Error reading secrets: {e}", path=path))

        data = as_str_dict(data_obj) or {}
        table = get_table(data, "secrets") or data
        return Ok(cls(scalar_table(table), aliases))


class DefaultSource:
    name = "default"

    def __init__(self, defaults: Mapping[str, str]) -> None:
        self._defaults = dict(defaults)

    def lookup(self, key: str) -> RawValue | None:
        return self._defaults.get(key)


@dataclass(frozen=True, slots=True)
class ResolvedValue:
    value: RawValue
    source: str

    @property
    def is_secret(self) -> bool:
        return isinstance(self.value, Secret)

    def plain(self) -> str:
        if isinstance(self.value, Secret):
            return self.value.reveal()
        return self.value


@dataclass(frozen=True, slots=True)
class ConfigSnapshot:
    """Immutable result of one resolution pass, shared by every target of a run."""

    values: Mapping[str, ResolvedValue] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def of(cls, values: Mapping[str, str], *, source: str = "literal") -> ConfigSnapshot:
        """Build a snapshot directly from plain values (tests, previews)."""
        return cls(
            MappingProxyType({k: ResolvedValue(v, source) for k, v in values.items() if v.strip()})
        )

    def __contains__(self, key: object) -> bool:
        return key in self.values

    def get(self, key: str, default: str | None = None) -> str | None:
        resolved = self.values.get(key)
        if resolved is None:
            return default
        return resolved.plain()

    def expect(self, key: str) -> str:
        """Return a value a target declared as required.

        Raises:
            KeyError: The key was not resolved. Target bodies only call this
                for keys listed in their requirements, which the executor
                has already checked.
        """
        resolved = self.values.get(key)
        if resolved is None:
            raise KeyError(key)
        return resolved.plain()

    def source_of(self, key: str) -> str | None:
        resolved = self.values.get(key)
        return resolved.source if resolved else None

    def redacted(self) -> dict[str, str]:
        """Values safe to print: secrets are masked."""
        return {k: str(v.value) for k, v in sorted(self.values.items())}


def _is_present(value: RawValue | None) -> bool:
    if value is None:
        return False
    text = value.reveal() if isinstance(value, Secret) else value
    return bool(text.strip())


def resolve(sources: Sequence[ValueSource], keys: Iterable[str]) -> ConfigSnapshot:
    """Resolve ``keys`` against ``sources``; first non-empty source wins.

    Keys no source can supply are simply absent from the snapshot.
    """
    resolved: dict[str, ResolvedValue] = {}
    for key in sorted(set(keys)):
        for source in sources:
            value = source.lookup(key)
            if _is_present(value):
                assert value is not None
                if isinstance(value, str):
                    value = value.strip()
                resolved[key] = ResolvedValue(value, source.name)
                break
    return ConfigSnapshot(MappingProxyType(resolved))


def parse_param_flags(items: Sequence[str]) -> Result[dict[str, str], ConfigError]:
    """Parse ``--param key=value`` flags.

    Dashes in keys are normalized to underscores so ``app-service-name``
    and ``app_service_name`` address the same parameter.
    """
    out: dict[str, str] = {}
    for item in items:
        key, sep, value = item.partition("=")
        key = key.strip().replace("-", "_")
        if not sep or not key:
            return Err(ConfigError(f"invalid --param '{item}' (expected key=value)"))
        out[key] = value
    return Ok(out)
