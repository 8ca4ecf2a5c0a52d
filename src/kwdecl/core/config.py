import tomllib
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

from .errors import ConfigError
from .registry import RedeclarationPolicy

CONFIG_FILENAME = "kwdecl.toml"


class ErrorMode(StrEnum):
    """What replaces a call site whose expansion failed."""

    PLACEHOLDER = "placeholder"
    KEEP = "keep"


@dataclass
class RewriteConfig:
    """How declarations and invocations are recognised and rewritten."""

    declaration_keyword: str = "declare"
    invocation_marker: str = ""  # "!" for foo!(...) invocations
    strip_declarations: bool = True
    on_error: ErrorMode = ErrorMode.PLACEHOLDER
    placeholder: str = "__kwdecl_error__"


@dataclass
class RegistryConfig:
    """Declaration registry behaviour."""

    redeclaration: RedeclarationPolicy = RedeclarationPolicy.OVERWRITE


@dataclass
class FilesConfig:
    """Which files the CLI picks up when given a directory."""

    include: list[str] = field(default_factory=lambda: ["*.kw"])


@dataclass
class KwdeclConfig:
    """
    Configuration loaded from kwdecl.toml.

    Example:

        [rewrite]
        declaration_keyword = "declare"
        invocation_marker = "!"
        on_error = "keep"

        [registry]
        redeclaration = "error"
    """

    rewrite: RewriteConfig = field(default_factory=RewriteConfig)
    registry: RegistryConfig = field(default_factory=RegistryConfig)
    files: FilesConfig = field(default_factory=FilesConfig)
    path: Path | None = None


def _choice(enum_type: type[StrEnum], value: object, key: str) -> StrEnum:
    try:
        return enum_type(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_type)
        raise ConfigError(f"Invalid value {value!r} for {key} (expected one of: {allowed})")


def _boolean(value: object, key: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"Invalid value {value!r} for {key} (expected true or false)")
    return value


def _string(value: object, key: str) -> str:
    if not isinstance(value, str):
        raise ConfigError(f"Invalid value {value!r} for {key} (expected a string)")
    return value


def load_config(path: Path) -> KwdeclConfig:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}")

    rewrite_data = data.get("rewrite", {})
    registry_data = data.get("registry", {})
    files_data = data.get("files", {})

    keyword = rewrite_data.get("declaration_keyword", "declare")
    if not isinstance(keyword, str) or not keyword.isidentifier():
        raise ConfigError(f"declaration_keyword must be an identifier, got {keyword!r}")

    rewrite_config = RewriteConfig(
        declaration_keyword=keyword,
        invocation_marker=_string(rewrite_data.get("invocation_marker", ""), "invocation_marker"),
        strip_declarations=_boolean(
            rewrite_data.get("strip_declarations", True), "strip_declarations"
        ),
        on_error=_choice(ErrorMode, rewrite_data.get("on_error", "placeholder"), "on_error"),
        placeholder=_string(rewrite_data.get("placeholder", "__kwdecl_error__"), "placeholder"),
    )

    registry_config = RegistryConfig(
        redeclaration=_choice(
            RedeclarationPolicy,
            registry_data.get("redeclaration", "overwrite"),
            "redeclaration",
        ),
    )

    include = files_data.get("include", ["*.kw"])
    if isinstance(include, str):
        include = [include]

    return KwdeclConfig(
        rewrite=rewrite_config,
        registry=registry_config,
        files=FilesConfig(include=list(include)),
        path=path,
    )


def find_config(start: Path) -> Path | None:
    """Look for kwdecl.toml in `start` and its parents."""
    start = start if start.is_dir() else start.parent
    for directory in (start, *start.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.exists():
            return candidate
    return None


def resolve_config(path: Path | None, start: Path | None = None) -> KwdeclConfig:
    """Load an explicit config, or the nearest kwdecl.toml, or defaults."""
    if path is not None:
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        return load_config(path)

    found = find_config(start or Path.cwd())
    if found is None:
        return KwdeclConfig()
    return load_config(found)
