"""Target resolution, scope and validation."""

from .models import Target
from .resolver import check_resolvable, resolve_target, resolve_targets
from .scope import Scope
from .validator import ValidationResult, validate_proxy, validate_url

__all__ = [
    "Scope",
    "Target",
    "ValidationResult",
    "check_resolvable",
    "resolve_target",
    "resolve_targets",
    "validate_proxy",
    "validate_url",
]
