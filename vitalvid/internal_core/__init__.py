from .collaborators import Collaborators, build_collaborators
from .config import AppConfig, load_config
from .logging_setup import configure_logging

__all__ = ["AppConfig", "Collaborators", "build_collaborators", "configure_logging", "load_config"]
