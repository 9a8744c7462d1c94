"""
Configuration loader with validation.
"""
from dotenv import load_dotenv

from .config import AdmissionAgentConfig
from .config_validator import (
    get_bool_env,
    get_float_env,
    get_float_list_env,
    get_int_env,
    get_optional_env,
    validate_path,
)


def load_config_from_env(load_env_file: bool = True) -> AdmissionAgentConfig:
    """
    Load configuration from environment variables with validation.

    Usage:
        config = load_config_from_env()
        app = AdmissionAgentApp(config)
        app.initialize()

    :param load_env_file: Read a local .env file first (development)
    :return: Validated AdmissionAgentConfig instance
    :raises: ConfigurationError if values are missing or invalid
    """
    if load_env_file:
        load_dotenv()

    defaults = AdmissionAgentConfig()
    config = AdmissionAgentConfig(
        catalog_dir=get_optional_env("ADMISSION_CATALOG_DIR", default="data/catalog"),
        acceptance_threshold=get_float_env(
            "ADMISSION_ACCEPTANCE_THRESHOLD", defaults.acceptance_threshold
        ),
        min_similarity=get_float_env("ADMISSION_MIN_SIMILARITY", defaults.min_similarity),
        ambiguity_margin=get_float_env("ADMISSION_AMBIGUITY_MARGIN", defaults.ambiguity_margin),
        suggestion_limit=get_int_env("ADMISSION_SUGGESTION_LIMIT", defaults.suggestion_limit),
        intent_min_score=get_float_env("ADMISSION_INTENT_MIN_SCORE", defaults.intent_min_score),
        default_safety_margin=get_float_env(
            "ADMISSION_SAFETY_MARGIN", defaults.default_safety_margin
        ),
        scenario_margins=get_float_list_env(
            "ADMISSION_SCENARIO_MARGINS", defaults.scenario_margins
        ),
        include_scenarios=get_bool_env("ADMISSION_INCLUDE_SCENARIOS", defaults.include_scenarios),
        max_achievable_score=get_float_env(
            "ADMISSION_MAX_SCORE", defaults.max_achievable_score
        ),
        base_points=get_float_env("ADMISSION_BASE_POINTS", defaults.base_points),
        diploma_points=get_float_env("ADMISSION_DIPLOMA_POINTS", defaults.diploma_points),
        history_size=get_int_env("ADMISSION_HISTORY_SIZE", defaults.history_size),
    )

    validate_path(config.catalog_dir, "ADMISSION_CATALOG_DIR", must_exist=True)

    return config


def create_config_for_production() -> AdmissionAgentConfig:
    """
    Create configuration for production deployment.

    Environment variables only; no .env file is read.
    """
    return load_config_from_env(load_env_file=False)
