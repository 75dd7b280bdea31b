"""Configuration management for notecal."""

import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field

try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib  # Python < 3.11


def _find_repo_root(start_dir: Path) -> Path:
    """Find repository root by walking upward looking for .git or pyproject.toml."""
    current_dir = start_dir

    while True:
        if (current_dir / ".git").exists() or (current_dir / "pyproject.toml").exists():
            return current_dir

        parent_dir = current_dir.parent

        # Stop if we reach filesystem root
        if parent_dir == current_dir:
            return start_dir

        current_dir = parent_dir


def _load_repo_config_data(repo_root: Path) -> Optional[dict]:
    """Load repo config data from .notecal/config.toml if it exists."""
    config_file = repo_root / ".notecal" / "config.toml"

    if not config_file.exists():
        return None

    try:
        with open(config_file, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError):
        # If config file is malformed, ignore it
        return None


def _get_repo_config_value(data: Optional[dict], keys: list[str]) -> Optional[str]:
    """Safely get a nested repo config value."""
    if not data:
        return None
    current = data
    for key in keys:
        if not isinstance(current, dict) or key not in current:
            return None
        current = current[key]
    if isinstance(current, str):
        return current
    return None


def _has_vault_markers(vault_path: Path) -> bool:
    """Check if a directory is an Obsidian vault."""
    return (vault_path / ".obsidian").is_dir()


def resolve_vault_root(
    mode: Literal["use_existing", "create_ok"],
    cli_vault_path: Optional[str] = None,
) -> Path:
    """Resolve vault root path with the following precedence:

    1. CLI --vault option (if provided)
    2. repo-local .notecal/config.toml (walk upward from CWD)
    3. NOTECAL_VAULT environment variable
    4. Auto-discovery by walking up from cwd looking for an .obsidian folder
    5. Error with helpful message

    Args:
        mode: "use_existing" requires the vault directory to exist
        cli_vault_path: Vault path from CLI --vault option

    Returns:
        Absolute path to vault root directory

    Raises:
        FileNotFoundError: If vault cannot be found and mode is "use_existing"
    """
    # 1. CLI option takes highest precedence
    if cli_vault_path:
        vault_path = Path(cli_vault_path).resolve()
        if mode == "use_existing" and not vault_path.exists():
            raise FileNotFoundError(f"Specified vault path does not exist: {vault_path}")
        return vault_path

    # 2. Repo-local config (.notecal/config.toml)
    repo_config = _load_repo_config_data(_find_repo_root(Path.cwd()))
    repo_vault = _get_repo_config_value(repo_config, ["vault_root"])
    if repo_vault:
        vault_path = Path(repo_vault).expanduser().resolve()
        if mode == "use_existing" and not vault_path.exists():
            raise FileNotFoundError(f"Vault path from .notecal/config.toml does not exist: {vault_path}")
        return vault_path

    # 3. Environment variable
    env_vault = os.environ.get("NOTECAL_VAULT")
    if env_vault:
        vault_path = Path(env_vault).expanduser().resolve()
        if mode == "use_existing" and not vault_path.exists():
            raise FileNotFoundError(f"NOTECAL_VAULT path does not exist: {vault_path}")
        return vault_path

    # 4. Auto-discovery by walking up from cwd
    current_dir = Path.cwd()
    while True:
        if _has_vault_markers(current_dir):
            return current_dir
        parent_dir = current_dir.parent
        if parent_dir == current_dir:
            break
        current_dir = parent_dir

    # 5. Nothing found
    if mode == "use_existing":
        raise FileNotFoundError(
            "Vault not found. Searched for:\n"
            f"  - .obsidian folder upward from {Path.cwd()}\n"
            f"  - .notecal/config.toml in repo at {_find_repo_root(Path.cwd())}\n"
            "  - NOTECAL_VAULT environment variable\n"
            "Try one of:\n"
            "  • notecal --vault \"/path/to/vault\" <command>\n"
            "  • export NOTECAL_VAULT=\"/path/to/vault\"\n"
            "  • cd into the vault directory (auto-discovery)"
        )
    return Path.cwd()


class CalendarConfig(BaseModel):
    """Configuration for daily-note calendar operations."""

    vault_path: Path = Field(default_factory=lambda: Path(os.environ.get("NOTECAL_VAULT", ".")))
    daily_folder: str = Field(default="", description="Daily notes folder, relative to the vault")
    daily_format: str = Field(default="%Y-%m-%d", description="strftime pattern of daily note names")
    insert_after: str = Field(default="", description="Heading/text new events are inserted after")
    process_entries_below: str = Field(default="", description="Marker below which entries live")
    delete_file: str = Field(default="delete.md", description="Soft-delete ledger file name")

    model_config = {"frozen": False}

    @classmethod
    def from_env(
        cls,
        cli_vault_path: Optional[str] = None,
        mode: Literal["use_existing", "create_ok"] = "use_existing",
    ) -> "CalendarConfig":
        """Load configuration from CLI, .notecal/config.toml, environment and defaults.

        Environment variables override the ``[calendar]`` table of the repo config.
        """
        vault_path = resolve_vault_root(mode, cli_vault_path)
        repo_config = _load_repo_config_data(_find_repo_root(Path.cwd()))

        def setting(key: str, env_name: str, default: str) -> str:
            env_value = os.environ.get(env_name)
            if env_value is not None:
                return env_value
            repo_value = _get_repo_config_value(repo_config, ["calendar", key])
            return repo_value if repo_value is not None else default

        return cls(
            vault_path=vault_path,
            daily_folder=setting("daily_folder", "NOTECAL_DAILY_FOLDER", ""),
            daily_format=setting("daily_format", "NOTECAL_DAILY_FORMAT", "%Y-%m-%d"),
            insert_after=setting("insert_after", "NOTECAL_INSERT_AFTER", ""),
            process_entries_below=setting("process_entries_below", "NOTECAL_PROCESS_ENTRIES_BELOW", ""),
            delete_file=setting("delete_file", "NOTECAL_DELETE_FILE", "delete.md"),
        )

    def to_toml_str(self) -> str:
        """Generate the [calendar] table for .notecal/config.toml."""
        return f"""# notecal configuration

vault_root = '{self.vault_path}'

[calendar]
daily_folder = '{self.daily_folder}'
daily_format = '{self.daily_format}'
insert_after = '{self.insert_after}'
process_entries_below = '{self.process_entries_below}'
delete_file = '{self.delete_file}'
"""
