"""Field descriptions for structured types.

The binding layer never inspects classes directly. It asks :func:`describe`
for an ordered tuple of :class:`FieldSpec` objects and walks those. Out of
the box this understands dataclasses, pydantic models and ``NamedTuple``
classes; any other class can take part by defining an ``__env_fields__``
classmethod that returns field specs.
"""

from __future__ import annotations

import dataclasses
import types
import typing
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field

ENV_METADATA_KEY = "env"


class FieldSpec(BaseModel):
    """Description of one field of a structured type.

    Parameters
    ----------
    name : str
        Logical field name, used as the attribute name on encode.
    key : str | None
        Explicit environment key. If None, the upper-cased name is used.
    annotation : Any
        Field type.
    optional : bool
        Whether the field accepts None.
    required : bool
        Whether the constructor needs a value, i.e. there is no default.
    argument : str | None
        Constructor keyword. If None, ``name`` is used.

    Examples
    --------
    >>> spec = FieldSpec(name="hello", annotation=str)
    >>> spec.env_key
    'HELLO'
    >>> FieldSpec(name="user", key="USERNAME", annotation=str).env_key
    'USERNAME'
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(description="Logical field name")
    key: str | None = Field(default=None, description="Explicit environment key")
    annotation: Any = Field(default=str, description="Field type")
    optional: bool = Field(default=False, description="Field accepts None")
    required: bool = Field(default=True, description="Field has no default")
    argument: str | None = Field(default=None, description="Constructor keyword")

    @property
    def env_key(self) -> str:
        """Key of this field in its parent map."""
        return self.key if self.key is not None else self.name.upper()

    @property
    def init_name(self) -> str:
        """Keyword used when constructing the owning type."""
        return self.argument if self.argument is not None else self.name


def unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    """Strip ``None`` from a union annotation.

    Returns
    -------
    tuple[Any, bool]
        The remaining annotation and whether ``None`` was part of it.

    Examples
    --------
    >>> unwrap_optional(int | None)
    (<class 'int'>, True)
    >>> unwrap_optional(str)
    (<class 'str'>, False)
    """
    origin = typing.get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = typing.get_args(annotation)
        remaining = tuple(arg for arg in args if arg is not type(None))
        if len(remaining) == len(args):
            return annotation, False
        if len(remaining) == 1:
            return remaining[0], True
        return Union[remaining], True  # noqa: UP007
    return annotation, False


def _is_namedtuple(cls: Any) -> bool:
    return isinstance(cls, type) and issubclass(cls, tuple) and hasattr(cls, "_fields")


def is_structured(cls: Any) -> bool:
    """Return whether :func:`describe` can enumerate the fields of ``cls``."""
    if not isinstance(cls, type) or typing.get_origin(cls) is not None:
        return False
    return (
        hasattr(cls, "__env_fields__")
        or dataclasses.is_dataclass(cls)
        or issubclass(cls, BaseModel)
        or _is_namedtuple(cls)
    )


def describe(cls: type) -> tuple[FieldSpec, ...]:
    """Describe the fields of a structured type in declaration order.

    Parameters
    ----------
    cls : type
        Dataclass, pydantic model, ``NamedTuple`` or a class defining
        ``__env_fields__``.

    Returns
    -------
    tuple[FieldSpec, ...]
        Field descriptions.

    Raises
    ------
    TypeError
        If ``cls`` is not a supported structured type.
    """
    hook = getattr(cls, "__env_fields__", None)
    if hook is not None:
        return tuple(hook())

    if isinstance(cls, type) and dataclasses.is_dataclass(cls):
        return _describe_dataclass(cls)

    if isinstance(cls, type) and issubclass(cls, BaseModel):
        return _describe_model(cls)

    if _is_namedtuple(cls):
        return _describe_namedtuple(cls)

    raise TypeError(f"Cannot describe fields of {cls!r}")


def _describe_dataclass(cls: type) -> tuple[FieldSpec, ...]:
    hints = typing.get_type_hints(cls)
    specs: list[FieldSpec] = []
    for field in dataclasses.fields(cls):
        if not field.init:
            continue
        annotation = hints.get(field.name, field.type)
        _, optional = unwrap_optional(annotation)
        has_default = (
            field.default is not dataclasses.MISSING
            or field.default_factory is not dataclasses.MISSING
        )
        specs.append(
            FieldSpec(
                name=field.name,
                key=field.metadata.get(ENV_METADATA_KEY),
                annotation=annotation,
                optional=optional,
                required=not has_default,
            )
        )
    return tuple(specs)


def _describe_model(cls: type[BaseModel]) -> tuple[FieldSpec, ...]:
    specs: list[FieldSpec] = []
    for name, info in cls.model_fields.items():
        _, optional = unwrap_optional(info.annotation)
        specs.append(
            FieldSpec(
                name=name,
                key=info.alias,
                annotation=info.annotation,
                optional=optional,
                required=info.is_required(),
                argument=info.alias,
            )
        )
    return tuple(specs)


def _describe_namedtuple(cls: type) -> tuple[FieldSpec, ...]:
    hints = typing.get_type_hints(cls)
    defaults: dict[str, Any] = getattr(cls, "_field_defaults", {})
    specs: list[FieldSpec] = []
    for name in cls._fields:  # type: ignore[attr-defined]
        annotation = hints.get(name, Any)
        _, optional = unwrap_optional(annotation)
        specs.append(
            FieldSpec(
                name=name,
                annotation=annotation,
                optional=optional,
                required=name not in defaults,
            )
        )
    return tuple(specs)


def construct(cls: type, arguments: dict[str, Any]) -> Any:
    """Instantiate a structured type from constructor keywords.

    Pydantic models go through ``model_validate`` so their validators run;
    a failure there raises ``pydantic.ValidationError``.
    """
    if issubclass(cls, BaseModel):
        return cls.model_validate(arguments)
    return cls(**arguments)
