"""Exceptions raised by depconverge."""

from typing import Optional, Union

from .models import ModuleRef


class ConvergenceError(Exception):
    """Base class for analysis failures."""


class CollectionError(ConvergenceError):
    """A module's dependency tree could not be collected."""

    def __init__(self, module: Union[ModuleRef, str], message: str, cause: Optional[BaseException] = None):
        self.module = module
        self.cause = cause
        super().__init__(f"Could not build dependency tree for {module}: {message}")
