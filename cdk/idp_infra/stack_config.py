import logging
from typing import Annotated, Any, Dict, Mapping, Optional

from constructs import Construct
from pydantic import AfterValidator, BaseModel, ConfigDict, ValidationError, constr, create_model

logger = logging.getLogger(__name__)

NonEmptyStr = constr(strict=True, min_length=1)


class ConfigurationError(ValueError):
    """A stack configuration is missing a field, has a wrong value or points at a foreign stack."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


def _is_construct(value: Any) -> bool:
    # imported resources come back from jsii as interface proxies, not Construct subclasses
    return isinstance(value, Construct) or (value is not None and hasattr(value, "node"))


def _construct_handle(value: Any) -> Any:
    if not _is_construct(value):
        raise ValueError("expected a construct handle")
    return value


ConstructHandle = Annotated[Any, AfterValidator(_construct_handle)]


class StackConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)


def union_of(name: str, *field_sets: type) -> type:
    """Build a config model whose fields are the union of ``field_sets``."""
    collected: Dict[str, tuple] = {}
    for field_set in field_sets:
        for field_name, info in field_set.model_fields.items():
            if field_name in collected:
                declared = collected[field_name][1]
                if (declared.annotation, declared.metadata) != (info.annotation, info.metadata):
                    raise ConfigurationError(
                        f"{name}: field '{field_name}' is declared as "
                        f"{declared.annotation} and {info.annotation}",
                        field=field_name,
                    )
            collected[field_name] = (info.annotation, info)
    return create_model(name, __base__=StackConfig, **collected)


def required_fields(config_cls: type) -> set:
    return {name for name, info in config_cls.model_fields.items() if info.is_required()}


def _as_mapping(partial: Any) -> Mapping[str, Any]:
    if isinstance(partial, BaseModel):
        # only what the partial supplied; not model_dump, which copies the construct handles
        return {name: getattr(partial, name) for name in partial.model_fields_set}
    if isinstance(partial, Mapping):
        return partial
    raise ConfigurationError(f"cannot merge a {type(partial).__name__} into a stack configuration")


def compose(config_cls: type, *partials: Any):
    """Merge ``partials`` into one ``config_cls`` record and validate it.

    A field may be supplied by exactly one partial.
    """
    merged: Dict[str, Any] = {}
    for partial in partials:
        values = _as_mapping(partial)
        for key in values:
            if key in merged:
                raise ConfigurationError(
                    f"{config_cls.__name__}: field '{key}' is supplied more than once", field=key
                )
        merged.update(values)

    try:
        return config_cls(**merged)
    except ValidationError as e:
        error = e.errors()[0]
        field = str(error["loc"][0]) if error["loc"] else None
        raise ConfigurationError(f"{config_cls.__name__}: field '{field}': {error['msg']}", field=field) from e


def validate(config: Any):
    """Validate ``config`` again, including records built with ``model_construct``."""
    if not isinstance(config, StackConfig):
        raise ConfigurationError(f"expected a stack configuration, got {type(config).__name__}")
    return compose(type(config), config)


def construct_handles(config: Any) -> Dict[str, Any]:
    return {
        name: getattr(config, name)
        for name in type(config).model_fields
        if _is_construct(getattr(config, name))
    }


def ensure_same_app(scope: Construct, config: Any) -> None:
    """Reject handles that were declared in a different CDK app than ``scope``."""
    root = scope.node.root
    for name, handle in construct_handles(config).items():
        if handle.node.root is not root:
            raise ConfigurationError(
                f"{type(config).__name__}: field '{name}' references {handle.node.path}, "
                "which was not constructed in this app",
                field=name,
            )
    logger.debug("%s handles resolved in app", type(config).__name__)


def split_repository(repository: str, field: str = "repository"):
    """Split a GitHub ``owner/name`` identifier."""
    owner, _, name = repository.partition("/")
    if not owner or not name or "/" in name:
        raise ConfigurationError(
            f"'{repository}' is not a GitHub repository in owner/name form", field=field
        )
    return owner, name
