"""
Configuration Management System for the fare interpreter
Handles environment-based configuration, grammar locations and fare settings.
"""
import os
import json
from typing import Optional, Dict, Any
from pathlib import Path
from dataclasses import dataclass, field
from dotenv import load_dotenv

from exceptions import ConfigurationError

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class SystemConfig:
    """System-wide configuration settings."""
    environment: str = "development"
    log_level: str = "INFO"
    version: str = "0.1.0"


@dataclass
class GrammarConfig:
    """Grammar loading and evaluation settings."""
    grammars_path: str = "grammars"
    default_grammar: str = "free_ride"
    cache_enabled: bool = False
    cache_max_entries: int = 1024


@dataclass
class FareConfig:
    """Fare charged to riders who are not exempt."""
    amount: float = 2
    currency: str = "元"

    def display(self) -> str:
        """Fare as shown to riders, e.g. '2元'."""
        amount = int(self.amount) if float(self.amount).is_integer() else self.amount
        return f"{amount}{self.currency}"


@dataclass
class InterpreterConfig:
    """Complete configuration for the fare interpreter."""
    system: SystemConfig = field(default_factory=SystemConfig)
    grammar: GrammarConfig = field(default_factory=GrammarConfig)
    fare: FareConfig = field(default_factory=FareConfig)

    def validate(self) -> None:
        """
        Validate configuration settings.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if self.system.log_level.upper() not in VALID_LOG_LEVELS:
            raise ConfigurationError(
                f"Invalid log level: {self.system.log_level}",
                component="ConfigManager"
            )

        if not self.grammar.default_grammar:
            raise ConfigurationError(
                "A default grammar id is required",
                component="ConfigManager"
            )

        if self.grammar.cache_max_entries <= 0:
            raise ConfigurationError(
                f"Cache size must be positive, got {self.grammar.cache_max_entries}",
                component="ConfigManager"
            )

        if self.fare.amount < 0:
            raise ConfigurationError(
                f"Fare amount must be non-negative, got {self.fare.amount}",
                component="ConfigManager"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "system": {
                "environment": self.system.environment,
                "log_level": self.system.log_level,
                "version": self.system.version
            },
            "grammar": {
                "grammars_path": self.grammar.grammars_path,
                "default_grammar": self.grammar.default_grammar,
                "cache_enabled": self.grammar.cache_enabled,
                "cache_max_entries": self.grammar.cache_max_entries
            },
            "fare": {
                "amount": self.fare.amount,
                "currency": self.fare.currency
            }
        }


def _parse_bool(value: str) -> bool:
    return value.lower() in ('true', '1', 'yes', 'on')


class ConfigManager:
    """
    Manages configuration loading from environment variables and files.
    Implements fail-fast principle for invalid configurations.
    """

    def __init__(self, config_path: Optional[str] = None, use_dotenv: bool = True):
        """
        Initialize configuration manager.

        Args:
            config_path: Optional path to JSON config file
            use_dotenv: Read a .env file into the environment before loading
        """
        self.config_path = config_path
        self.use_dotenv = use_dotenv
        self._config: Optional[InterpreterConfig] = None

    def load(self) -> InterpreterConfig:
        """
        Load configuration from environment and optional file.
        Priority: Environment Variables > Config File > Defaults

        Returns:
            InterpreterConfig: Validated configuration

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if self.use_dotenv:
            load_dotenv()

        config = InterpreterConfig()

        if self.config_path:
            config = self._load_from_file(self.config_path)

        config = self._load_from_environment(config)

        config.validate()

        self._config = config
        return config

    def _load_from_file(self, file_path: str) -> InterpreterConfig:
        """
        Load configuration from JSON file.

        Args:
            file_path: Path to configuration file

        Returns:
            InterpreterConfig: Configuration object

        Raises:
            ConfigurationError: If file cannot be loaded
        """
        path = Path(file_path)
        if not path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {file_path}",
                component="ConfigManager"
            )

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Invalid JSON in configuration file: {e}",
                component="ConfigManager"
            )

        config = InterpreterConfig()

        try:
            if 'system' in data:
                sys_data = data['system']
                config.system.environment = sys_data.get('environment', config.system.environment)
                config.system.log_level = str(sys_data.get('log_level', config.system.log_level)).upper()

            if 'grammar' in data:
                grammar_data = data['grammar']
                config.grammar.grammars_path = grammar_data.get('grammars_path', config.grammar.grammars_path)
                config.grammar.default_grammar = grammar_data.get('default_grammar', config.grammar.default_grammar)
                config.grammar.cache_enabled = bool(grammar_data.get('cache_enabled', config.grammar.cache_enabled))
                config.grammar.cache_max_entries = int(
                    grammar_data.get('cache_max_entries', config.grammar.cache_max_entries)
                )

            if 'fare' in data:
                fare_data = data['fare']
                config.fare.amount = float(fare_data.get('amount', config.fare.amount))
                config.fare.currency = fare_data.get('currency', config.fare.currency)
        except (AttributeError, TypeError, ValueError) as e:
            raise ConfigurationError(
                f"Error loading configuration file: {e}",
                component="ConfigManager"
            )

        return config

    def _load_from_environment(self, config: InterpreterConfig) -> InterpreterConfig:
        """
        Override configuration with environment variables.

        Args:
            config: Base configuration to override

        Returns:
            InterpreterConfig: Configuration with environment overrides
        """
        config.system.environment = os.getenv('INTERPRETER_ENV', config.system.environment)

        log_level = os.getenv('LOG_LEVEL')
        if log_level:
            config.system.log_level = log_level.upper()

        # Grammar settings
        grammars_path = os.getenv('GRAMMARS_PATH')
        if grammars_path:
            config.grammar.grammars_path = grammars_path

        default_grammar = os.getenv('DEFAULT_GRAMMAR')
        if default_grammar:
            config.grammar.default_grammar = default_grammar

        cache_enabled = os.getenv('GRAMMAR_CACHE_ENABLED')
        if cache_enabled:
            config.grammar.cache_enabled = _parse_bool(cache_enabled)

        cache_max = os.getenv('GRAMMAR_CACHE_MAX_ENTRIES')
        if cache_max:
            try:
                config.grammar.cache_max_entries = int(cache_max)
            except ValueError:
                raise ConfigurationError(
                    f"Invalid GRAMMAR_CACHE_MAX_ENTRIES: {cache_max}",
                    component="ConfigManager"
                )

        # Fare settings
        fare_amount = os.getenv('FARE_AMOUNT')
        if fare_amount:
            try:
                config.fare.amount = float(fare_amount)
            except ValueError:
                raise ConfigurationError(
                    f"Invalid FARE_AMOUNT: {fare_amount}",
                    component="ConfigManager"
                )

        fare_currency = os.getenv('FARE_CURRENCY')
        if fare_currency:
            config.fare.currency = fare_currency

        return config

    @property
    def config(self) -> InterpreterConfig:
        """
        Get current configuration.

        Returns:
            InterpreterConfig: Current configuration

        Raises:
            ConfigurationError: If configuration not loaded
        """
        if self._config is None:
            raise ConfigurationError(
                "Configuration not loaded. Call load() first.",
                component="ConfigManager"
            )
        return self._config


def load_config(config_path: Optional[str] = None, use_dotenv: bool = True) -> InterpreterConfig:
    """
    Load and validate configuration.

    Args:
        config_path: Optional path to configuration file
        use_dotenv: Read a .env file into the environment before loading

    Returns:
        InterpreterConfig: Validated configuration

    Raises:
        ConfigurationError: If configuration is invalid
    """
    return ConfigManager(config_path, use_dotenv=use_dotenv).load()
