"""
HashMangle — Transform Engine (Base + Registry)
================================================
Every rewrite applied to a build artifact goes through a registered,
deterministic transformer: same inputs, same output, same edits.
"""

from typing import Any, Dict, List, Tuple, Type

from hashmangle.models import ConversionResult, TransformType


class BaseTransformer:
    """A rewrite pass over one script; subclasses set `name` and register themselves."""

    name: TransformType = None

    def apply(self, source_code: str, params: Dict[str, Any]) -> ConversionResult:
        """
        Rewrite `source_code` and return the new code, its stats and the
        edits that produced it. `params` carries filename, language and strict.
        Repeated calls with the same input yield identical names and edits.
        """
        raise NotImplementedError

    def describe(self, params: Dict[str, Any]) -> str:
        """One-line summary of the pass for the log, e.g. which file it ran on."""
        raise NotImplementedError


# TransformType -> transformer class, filled in by @register_transform at import
_TRANSFORM_REGISTRY: Dict[TransformType, Type[BaseTransformer]] = {}


def register_transform(cls: Type[BaseTransformer]) -> Type[BaseTransformer]:
    """Class decorator adding a transformer under its `name`; a later class with the same name replaces it."""
    _TRANSFORM_REGISTRY[cls.name] = cls
    return cls


def get_transformer(transform_type: TransformType) -> BaseTransformer:
    """Instantiate the transformer registered for `transform_type`; ValueError if none is."""
    if transform_type not in _TRANSFORM_REGISTRY:
        raise ValueError(f"Unknown transform type: {transform_type}")
    return _TRANSFORM_REGISTRY[transform_type]()


def list_transforms() -> List[TransformType]:
    """Transform types in registration order, as shown by `hashmangle transforms`."""
    return list(_TRANSFORM_REGISTRY.keys())


def apply_transform(
    source_code: str,
    transform_type: TransformType,
    params: Dict[str, Any],
) -> Tuple[ConversionResult, str]:
    """
    Run the transformer registered for `transform_type` over `source_code`.
    Returns (result, description); the CLI logs the description.
    """
    transformer = get_transformer(transform_type)
    result = transformer.apply(source_code, params)
    description = transformer.describe(params)
    return result, description
