"""Path management for the vault layout notecal works in."""

from pathlib import Path

from .config import CalendarConfig


class VaultPaths:
    """Manages paths within an Obsidian vault holding daily notes."""

    def __init__(self, vault_root: Path, daily_folder: str = "", delete_file: str = "delete.md"):
        """Initialize vault paths from root directory.

        Args:
            vault_root: Root directory of the vault
            daily_folder: Daily notes folder relative to the vault root
            delete_file: File name of the soft-delete ledger
        """
        self.root = vault_root

        # Daily notes and the soft-delete ledger live side by side
        self.daily = vault_root / daily_folder if daily_folder else vault_root
        self.delete_file = self.daily / delete_file

        # notecal's own state
        self.system = vault_root / ".notecal"
        self.config_file = self.system / "config.toml"
        self.journal_file = self.system / "journal.jsonl"

    @classmethod
    def from_config(cls, config: CalendarConfig) -> "VaultPaths":
        """Create VaultPaths from a CalendarConfig."""
        return cls(config.vault_path, config.daily_folder, config.delete_file)

    def get_all_directories(self) -> list[Path]:
        """Get list of all directories that should exist in the vault."""
        return [self.daily, self.system]
