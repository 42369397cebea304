"""
Configuration management module.

Provides centralized configuration loading and validation.
"""

import os
import yaml
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union
from dataclasses import dataclass, field
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

DATA_FILE_ENV = "ETH_FORECAST_DATA_FILE"

DEFAULT_COMBINER_MEMBERS = ["arima", "ets", "holt_winters", "nnetar"]


@dataclass
class DataConfig:
    """Input series configuration."""
    csv_path: Path
    date_column: str = "DATE"
    price_column: str = "CBETHUSD"
    origin_date: Optional[str] = None


@dataclass
class SplitConfig:
    """Train/test split configuration."""
    train_end: Union[str, Tuple[int, int]]


@dataclass
class CombinerConfig:
    """Forecast combination configuration."""
    enabled: bool = True
    members: List[str] = field(default_factory=lambda: list(DEFAULT_COMBINER_MEMBERS))


class Config:
    """
    Central configuration manager.

    Loads configuration from YAML file and provides typed access
    to all settings with validation.
    """

    REQUIRED_SECTIONS = ['data', 'split', 'models', 'output']

    def __init__(self, config_path: str = "config/config.yaml", setup_logging: bool = True):
        """
        Initialize configuration.

        Args:
            config_path: Path to YAML configuration file
            setup_logging: Configure the root logger from the `logging` section
        """
        self.config_path = Path(config_path)
        self._raw_config: Dict[str, Any] = {}
        self._load_config()
        if setup_logging:
            self._setup_logging()
        self._validate_config()

    @classmethod
    def from_dict(cls, raw_config: Dict[str, Any]) -> 'Config':
        """Build a configuration from an in-memory dictionary (no logging setup)."""
        instance = cls.__new__(cls)
        instance.config_path = Path("<memory>")
        instance._raw_config = dict(raw_config)
        instance._validate_config()
        return instance

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config file not found: {self.config_path}")

        with open(self.config_path, 'r') as f:
            self._raw_config = yaml.safe_load(f) or {}

        if os.getenv(DATA_FILE_ENV):
            self._raw_config.setdefault('data', {})['csv_path'] = os.getenv(DATA_FILE_ENV)

        logger.info(f"Configuration loaded from {self.config_path}")

    def _setup_logging(self) -> None:
        """Configure logging based on settings."""
        log_config = self._raw_config.get('logging', {})
        log_level = getattr(logging, log_config.get('level', 'INFO'))
        log_format = log_config.get('format', '%(asctime)s - %(levelname)s - %(message)s')
        log_file = log_config.get('file', 'logs/report.log')

        handlers: List[logging.Handler] = [logging.StreamHandler()]
        if log_file:
            # Create logs directory
            os.makedirs(os.path.dirname(log_file) or '.', exist_ok=True)
            handlers.insert(0, logging.FileHandler(log_file))

        # Configure root logger
        logging.basicConfig(
            level=log_level,
            format=log_format,
            handlers=handlers
        )

        # Third-party fitting chatter
        for noisy in log_config.get('quiet', ['prophet', 'cmdstanpy']):
            logging.getLogger(noisy).setLevel(logging.WARNING)

    def _validate_config(self) -> None:
        """Validate configuration values."""
        for section in self.REQUIRED_SECTIONS:
            if section not in self._raw_config:
                raise ValueError(f"Missing required config section: {section}")

        data_config = self._raw_config['data']
        for key in ['csv_path', 'price_column']:
            if key not in data_config:
                raise ValueError(f"Missing data setting: {key}")

        if 'train_end' not in self._raw_config['split']:
            raise ValueError("Missing split setting: train_end")

        enabled = self.enabled_models
        if not enabled:
            raise ValueError("No models enabled")

        unknown = [m for m in self.combiner_config.members if m not in enabled]
        if self.combiner_config.enabled and unknown:
            raise ValueError(f"Combiner members not enabled as models: {unknown}")

        logger.info("Configuration validation passed")

    # ==========================================================================
    # Data Configuration
    # ==========================================================================

    @property
    def data_config(self) -> DataConfig:
        """Get input series configuration."""
        data = self._raw_config['data']
        return DataConfig(
            csv_path=Path(data['csv_path']),
            date_column=data.get('date_column', 'DATE'),
            price_column=data['price_column'],
            origin_date=data.get('origin_date')
        )

    @property
    def split_config(self) -> SplitConfig:
        """Get train/test split configuration."""
        train_end = self._raw_config['split']['train_end']

        # YAML lists come through as [year, day_of_year]
        if isinstance(train_end, (list, tuple)):
            train_end = (int(train_end[0]), int(train_end[1]))

        return SplitConfig(train_end=train_end)

    @property
    def strict_validation(self) -> bool:
        return self._raw_config.get('validation', {}).get('strict', True)

    # ==========================================================================
    # Model Configuration
    # ==========================================================================

    @property
    def enabled_models(self) -> List[str]:
        """Get the ordered list of enabled model names."""
        return list(self._raw_config['models'].get('enabled', []))

    def model_params(self, name: str) -> Dict[str, Any]:
        """Get parameters for a single model (empty dict when unset)."""
        return dict(self._raw_config['models'].get(name) or {})

    @property
    def combiner_config(self) -> CombinerConfig:
        """Get forecast combination configuration."""
        combiner = self._raw_config.get('combiner', {})

        return CombinerConfig(
            enabled=combiner.get('enabled', True),
            members=list(combiner.get('members', DEFAULT_COMBINER_MEMBERS))
        )

    @property
    def random_seed(self) -> int:
        return self._raw_config.get('random_seed', 42)

    # ==========================================================================
    # Evaluation Configuration
    # ==========================================================================

    @property
    def mase_seasonal_period(self) -> int:
        return self._raw_config.get('evaluation', {}).get('mase_seasonal_period', 1)

    @property
    def ljung_box_period(self) -> int:
        return self._raw_config.get('evaluation', {}).get('ljung_box_period', 1)

    # ==========================================================================
    # Output Configuration
    # ==========================================================================

    @property
    def reports_path(self) -> Path:
        return Path(self._raw_config['output']['reports_path'])

    @property
    def visualizations_path(self) -> Path:
        output = self._raw_config['output']
        return Path(output.get('visualizations_path', self.reports_path / 'figures'))

    @property
    def plots_enabled(self) -> bool:
        return self._raw_config['output'].get('plots', True)

    # ==========================================================================
    # Storage Configuration
    # ==========================================================================

    @property
    def models_path(self) -> Path:
        return Path(self._raw_config.get('storage', {}).get('models_path', 'models'))

    @property
    def save_models(self) -> bool:
        return self._raw_config.get('storage', {}).get('save_models', False)

    # ==========================================================================
    # Utility Methods
    # ==========================================================================

    def override(self, section: str, key: Optional[str], value: Any) -> None:
        """
        Override a single setting (used by the command line scripts).

        With `key=None` the whole top-level entry `section` is replaced,
        e.g. `override('random_seed', None, 7)`.
        """
        if key is None:
            self._raw_config[section] = value
        else:
            self._raw_config.setdefault(section, {})[key] = value
        self._validate_config()

    def restrict_models(self, models: List[str]) -> None:
        """Enable only `models`, dropping combiner members that are no longer enabled."""
        combiner = self._raw_config.setdefault('combiner', {})
        members = [m for m in self.combiner_config.members if m in models]

        combiner['members'] = members
        if not members:
            combiner['enabled'] = False

        self.override('models', 'enabled', list(models))

    def create_directories(self) -> None:
        """Create all required directories."""
        directories = [self.reports_path]
        if self.plots_enabled:
            directories.append(self.visualizations_path)
        if self.save_models:
            directories.append(self.models_path)

        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)

        logger.info("All directories created")

    def to_dict(self) -> Dict[str, Any]:
        """Return raw configuration dictionary."""
        return self._raw_config.copy()

    def __repr__(self) -> str:
        return f"Config(path={self.config_path}, models={self.enabled_models})"


# Convenience function for loading config
def load_config(config_path: str = "config/config.yaml") -> Config:
    """Load configuration from file."""
    return Config(config_path)
