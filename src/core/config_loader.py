"""
Resilience Layer - Config Loader Implementation
Charge la configuration de la couche de résilience depuis un fichier YAML.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import ValidationError

from .interfaces import ResilienceSettings

CONFIG_ENV_VAR = "RESILIENCE_CONFIG"


class ConfigError(Exception):
    """Configuration absente ou invalide."""

    pass


class ConfigLoader:
    """Chargement de ResilienceSettings depuis un fichier YAML."""

    def __init__(self, config_path: Union[str, Path]):
        self.config_path = Path(config_path)

    def load(self) -> ResilienceSettings:
        """
        Charge et valide la configuration.

        Returns:
            ResilienceSettings validés

        Raises:
            ConfigError: Si fichier inexistant, YAML invalide ou valeurs hors bornes
        """
        if not self.config_path.exists():
            raise ConfigError(f"Configuration non trouvée: {self.config_path}")

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Erreur de parsing YAML: {e}")
        except OSError as e:
            raise ConfigError(f"Erreur de lecture fichier: {e}")

        # Fichier vide = valeurs par défaut
        if raw is None:
            raw = {}

        if not isinstance(raw, dict):
            raise ConfigError("Configuration doit être un objet YAML")

        return parse_settings(raw)


def parse_settings(raw: Dict[str, Any]) -> ResilienceSettings:
    """
    Valide un dictionnaire de configuration.

    Args:
        raw: Données brutes (sections cache, retry, network, logging)

    Returns:
        ResilienceSettings validés

    Raises:
        ConfigError: Si une valeur est invalide
    """
    try:
        return ResilienceSettings.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"Configuration invalide: {e}")


def load_settings(config_path: Optional[Union[str, Path]] = None) -> ResilienceSettings:
    """
    Charge la configuration depuis config_path ou la variable RESILIENCE_CONFIG.

    Sans fichier configuré, retourne les valeurs par défaut.
    """
    path = config_path or os.environ.get(CONFIG_ENV_VAR)
    if not path:
        return ResilienceSettings()
    return ConfigLoader(path).load()
