"""Configuration manager for Umeko."""
import logging
import os
from typing import Any, Dict, Optional
import yaml

PLACEHOLDER_TOKEN = "YOUR_DISCORD_BOT_TOKEN_HERE"


class ConfigManager:
    """
    Configuration manager for Umeko.

    Handles loading and accessing configuration values from the config file.
    Credentials may also come from the environment, which takes precedence.
    """

    def __init__(self, config_path: str = "config/config.yaml"):
        """
        Initialize the ConfigManager.

        Args:
            config_path: Path to the configuration file

        Raises:
            FileNotFoundError: If the configuration file does not exist
            yaml.YAMLError: If the configuration file is not valid YAML
        """
        self.logger = logging.getLogger("umeko.config")
        self.config_path = config_path
        self.config: Dict[str, Any] = {}

        self._load_config()

    def _load_config(self) -> None:
        """
        Load the configuration from the config file.

        Raises:
            FileNotFoundError: If the configuration file does not exist
            yaml.YAMLError: If the configuration file is not valid YAML
        """
        if not os.path.exists(self.config_path):
            example_path = f"{self.config_path}.example"
            if os.path.exists(example_path):
                self.logger.error(
                    f"Configuration file {self.config_path} not found. "
                    f"Please copy {example_path} to {self.config_path} and update it."
                )
            else:
                self.logger.error(f"Configuration file {self.config_path} not found.")
            raise FileNotFoundError(f"Configuration file {self.config_path} not found")

        try:
            with open(self.config_path, 'r', encoding='utf-8') as config_file:
                self.config = yaml.safe_load(config_file) or {}
                self.logger.debug(f"Loaded configuration from {self.config_path}")
        except yaml.YAMLError as e:
            self.logger.error(f"Error parsing configuration file: {e}")
            raise

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            key: The configuration key (dot notation for nested keys)
            default: Default value to return if the key is not found

        Returns:
            The configuration value or the default value if not found
        """
        keys = key.split('.')
        value = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                self.logger.debug(f"Configuration key '{key}' not found, using default: {default}")
                return default

        return value

    def get_discord_token(self) -> str:
        """
        Get the Discord bot token.

        The DISCORD_BOT_TOKEN environment variable overrides the config file.

        Returns:
            The Discord bot token

        Raises:
            ValueError: If the Discord bot token is not set
        """
        token = os.getenv('DISCORD_BOT_TOKEN') or self.get('discord.token')
        if not token or token == PLACEHOLDER_TOKEN:
            self.logger.error("Discord bot token not set in configuration")
            raise ValueError("Discord bot token not set in configuration")
        return token

    def get_application_id(self) -> Optional[str]:
        """
        Get the Discord application ID used for command upload.

        Returns:
            The application ID or None if not set
        """
        application_id = os.getenv('DISCORD_APPLICATION_ID') or self.get('discord.application_id')
        return str(application_id) if application_id else None

    def get_guild_id(self) -> Optional[int]:
        """
        Get the guild commands are uploaded to.

        Returns:
            The guild ID, or None for global upload
        """
        guild_id = self.get('discord.guild_id')
        if guild_id in (None, ''):
            return None
        try:
            return int(guild_id)
        except (TypeError, ValueError):
            self.logger.warning(f"Invalid discord.guild_id '{guild_id}', uploading globally")
            return None

    def get_api_base_url(self) -> str:
        return self.get('discord.api_base', 'https://discord.com/api/v10')

    def get_commands_directory(self) -> str:
        """
        Get the directory scanned for command files at startup.

        Returns:
            The commands directory path
        """
        return self.get('commands.directory', './commands')

    def get_reload_delay(self) -> float:
        """
        Get the debounce delay applied to command file changes.

        Returns:
            The delay in seconds
        """
        return float(self.get('commands.reload_delay', 10))

    def is_hot_reload_enabled(self) -> bool:
        return self.get('commands.hot_reload', True)

    def should_upload_on_ready(self) -> bool:
        return self.get('commands.upload_on_ready', True)

    def should_reply_on_error(self) -> bool:
        return self.get('commands.reply_on_error', True)

    def get_log_level(self) -> str:
        """
        Get the logging level.

        Returns:
            The logging level
        """
        return self.get('logging.level', 'INFO')

    def get_log_file(self) -> Optional[str]:
        """
        Get the log file path.

        Returns:
            The log file path or None if not set
        """
        return self.get('logging.file', None)

    def get_log_max_size(self) -> int:
        """
        Get the maximum log file size.

        Returns:
            The maximum log file size in bytes
        """
        return self.get('logging.max_size', 10485760)  # 10 MB

    def get_log_backup_count(self) -> int:
        """
        Get the number of backup log files to keep.

        Returns:
            The number of backup log files
        """
        return self.get('logging.backup_count', 5)
