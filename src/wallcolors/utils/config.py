"""Configuration management for wallcolors."""

import json
import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, Field

from .logging import get_logger

logger = get_logger(__name__)

MAX_BITMAP_SIZE = 112
MAX_WALLPAPER_EXTRACTION_AREA = MAX_BITMAP_SIZE * MAX_BITMAP_SIZE


class QuantizationBudget(str, Enum):
    """Which quantizer strategy builds the color histogram."""

    FAST = "fast"
    HIGH_QUALITY = "high-quality"

    @classmethod
    def parse(cls, value: Union[str, "QuantizationBudget"]) -> "QuantizationBudget":
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower().replace("_", "-")
        for budget in cls:
            if budget.value == normalized:
                return budget
        raise ValueError(
            f"Unknown quantization budget: {value}. "
            f"Available: {[b.value for b in cls]}"
        )


class Config(BaseModel):
    """Settings for one extraction run."""

    dim_amount: float = 0.0
    quantization_budget: QuantizationBudget = QuantizationBudget.HIGH_QUALITY
    max_extraction_area: int = Field(default=MAX_WALLPAPER_EXTRACTION_AREA, gt=0)
    fast_max_colors: int = Field(default=5, gt=0)
    quality_max_colors: int = Field(default=128, gt=0)
    random_seed: int = 42
    device: str = "cpu"


class ConfigManager:
    """Manage configuration settings for wallcolors."""

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """Initialize configuration manager.

        Args:
            config_path: Path to configuration file
        """
        self.config_path = Path(config_path) if config_path else None
        self._config = self.get_default_config()

        if self.config_path and self.config_path.exists():
            self.load_config()

    def get_default_config(self) -> Dict[str, Any]:
        """Get default configuration."""
        return {
            "extraction": {
                "dim_amount": 0.0,
                "max_extraction_area": MAX_WALLPAPER_EXTRACTION_AREA,
                "device": "cpu",
            },
            "quantization": {
                "budget": QuantizationBudget.HIGH_QUALITY.value,
                "fast_max_colors": 5,
                "quality_max_colors": 128,
                "random_seed": 42,
            },
            "output": {
                "format": "table",
            },
        }

    def load_config(self) -> None:
        """Load configuration from file."""
        if not self.config_path or not self.config_path.exists():
            return

        try:
            with open(self.config_path, "r") as f:
                if self.config_path.suffix.lower() in (".yaml", ".yml"):
                    loaded_config = yaml.safe_load(f)
                else:
                    loaded_config = json.load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ValueError(
                f"Failed to load configuration from {self.config_path}: {e}"
            )

        if loaded_config is None:
            loaded_config = {}
        if not isinstance(loaded_config, dict):
            raise ValueError(
                f"Configuration in {self.config_path} must be a mapping, "
                f"got {type(loaded_config).__name__}"
            )

        self._config = self._deep_merge(self._config, loaded_config)
        logger.debug(f"Loaded configuration from {self.config_path}")

    def save_config(self, output_path: Optional[Union[str, Path]] = None) -> None:
        """Save current configuration to file.

        Args:
            output_path: Optional output path, defaults to current config_path
        """
        save_path = Path(output_path) if output_path else self.config_path

        if not save_path:
            raise ValueError("No output path specified")

        save_path.parent.mkdir(parents=True, exist_ok=True)

        with open(save_path, "w") as f:
            if save_path.suffix.lower() in (".yaml", ".yml"):
                yaml.dump(self._config, f, default_flow_style=False, indent=2)
            else:
                json.dump(self._config, f, indent=2)

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key.

        Args:
            key: Configuration key (supports dot notation)
            default: Default value if key not found

        Returns:
            Configuration value
        """
        value = self._config

        try:
            for k in key.split("."):
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key: str, value: Any) -> None:
        """Set configuration value.

        Args:
            key: Configuration key (supports dot notation)
            value: Value to set
        """
        keys = key.split(".")
        config = self._config

        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

    def update(self, updates: Dict[str, Any]) -> None:
        """Update configuration with dictionary of changes.

        Args:
            updates: Dictionary of configuration updates
        """
        self._config = self._deep_merge(self._config, updates)

    def _deep_merge(self, base: Dict, update: Dict) -> Dict:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in update.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def get_extraction_config(self) -> Config:
        """Get the extraction settings as a validated ``Config``."""
        extraction = self.get("extraction", {})
        quantization = self.get("quantization", {})

        return Config(
            dim_amount=extraction.get("dim_amount", 0.0),
            quantization_budget=QuantizationBudget.parse(
                quantization.get("budget", QuantizationBudget.HIGH_QUALITY)
            ),
            max_extraction_area=extraction.get(
                "max_extraction_area", MAX_WALLPAPER_EXTRACTION_AREA
            ),
            fast_max_colors=quantization.get("fast_max_colors", 5),
            quality_max_colors=quantization.get("quality_max_colors", 128),
            random_seed=quantization.get("random_seed", 42),
            device=extraction.get("device", "cpu"),
        )

    @classmethod
    def from_env(
        cls, config_path: Optional[Union[str, Path]] = None
    ) -> "ConfigManager":
        """Create configuration manager with environment variable overrides."""
        config_manager = cls(config_path)

        env_mappings = {
            "WALLCOLORS_DIM_AMOUNT": "extraction.dim_amount",
            "WALLCOLORS_MAX_AREA": "extraction.max_extraction_area",
            "WALLCOLORS_DEVICE": "extraction.device",
            "WALLCOLORS_BUDGET": "quantization.budget",
            "WALLCOLORS_RANDOM_SEED": "quantization.random_seed",
            "WALLCOLORS_FORMAT": "output.format",
        }

        for env_var, config_key in env_mappings.items():
            value = os.getenv(env_var)
            if value is None:
                continue

            # Keep as string when no numeric form applies
            if value.lstrip("-").isdigit():
                value = int(value)
            else:
                try:
                    value = float(value)
                except ValueError:
                    pass

            logger.debug(f"Overriding {config_key} from {env_var}")
            config_manager.set(config_key, value)

        return config_manager

    def validate_config(self) -> Tuple[bool, List[str]]:
        """Validate current configuration.

        Returns:
            Tuple of (is_valid, list_of_errors)
        """
        errors = []

        extraction = self.get("extraction", {})
        if not isinstance(extraction, dict):
            errors.append("extraction must be a mapping")
            extraction = {}
        dim_amount = extraction.get("dim_amount", 0.0)
        if not isinstance(dim_amount, (int, float)):
            errors.append("extraction.dim_amount must be a number")
        elif not 0.0 <= dim_amount <= 1.0:
            # Out of range values are saturated at run time
            errors.append("extraction.dim_amount must be between 0 and 1")

        max_area = extraction.get("max_extraction_area", 0)
        if not isinstance(max_area, int) or isinstance(max_area, bool):
            errors.append("extraction.max_extraction_area must be an integer")
        elif max_area <= 0:
            errors.append("extraction.max_extraction_area must be positive")

        quantization = self.get("quantization", {})
        if not isinstance(quantization, dict):
            errors.append("quantization must be a mapping")
            quantization = {}
        try:
            QuantizationBudget.parse(quantization.get("budget", ""))
        except ValueError as e:
            errors.append(f"quantization.budget: {e}")

        for key in ("fast_max_colors", "quality_max_colors"):
            value = quantization.get(key, 0)
            if not isinstance(value, int) or isinstance(value, bool):
                errors.append(f"quantization.{key} must be an integer")
            elif value <= 0:
                errors.append(f"quantization.{key} must be positive")

        if self.get("output.format") not in ("table", "json"):
            errors.append("output.format must be 'table' or 'json'")

        return len(errors) == 0, errors

    def get_profile_configs(self) -> Dict[str, Dict]:
        """Get predefined configuration profiles."""
        return {
            "fast": {
                "quantization": {
                    "budget": QuantizationBudget.FAST.value,
                    "fast_max_colors": 5,
                },
            },
            "balanced": {
                "quantization": {
                    "budget": QuantizationBudget.HIGH_QUALITY.value,
                    "quality_max_colors": 64,
                },
            },
            "quality": {
                "quantization": {
                    "budget": QuantizationBudget.HIGH_QUALITY.value,
                    "quality_max_colors": 128,
                },
            },
        }

    def apply_profile(self, profile_name: str) -> None:
        """Apply a predefined configuration profile.

        Args:
            profile_name: Name of profile to apply
        """
        profiles = self.get_profile_configs()

        if profile_name not in profiles:
            raise ValueError(
                f"Unknown profile: {profile_name}. Available: {list(profiles.keys())}"
            )

        self.update(profiles[profile_name])
