"""Bootstrapp - instantiate projects from parametrized template bundles."""

from .config import Config
from .errors import BootstrappError
from .models import (
    BootstrappPackage,
    BootstrappParameter,
    BootstrappSpecification,
    TemplateBundle,
)
from .pipeline import Instantiator, instantiate_template

__version__ = "0.1.0"

__all__ = [
    "BootstrappError",
    "BootstrappPackage",
    "BootstrappParameter",
    "BootstrappSpecification",
    "Config",
    "Instantiator",
    "TemplateBundle",
    "instantiate_template",
]
