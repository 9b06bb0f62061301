from .settings import DetectionConfig, create_example_env_file, load_config, setup_logging

__all__ = ["DetectionConfig", "create_example_env_file", "load_config", "setup_logging"]
