"""Turns pydantic validation failures into option-level messages."""

from pydantic import ValidationError as PydanticValidationError


def flatten_pydantic_errors(exc: PydanticValidationError) -> list[str]:
    """Describe each failed option on one line.

    Option paths use the configuration file spelling (``network.bindAddress``).
    Cross-field failures such as the TensorRT hardware check carry no
    location and are reported against ``config``.

    Example:
        >>> from ffstack.models.deployment import DeploymentConfig
        >>> try:
        ...     DeploymentConfig.model_validate({"network": {"port": 0}})
        ... except PydanticValidationError as e:
        ...     flatten_pydantic_errors(e)[0].startswith("Field 'network.port'")
        True
    """
    messages: list[str] = []
    for error in exc.errors():
        loc = error.get("loc", ())
        option = ".".join(str(part) for part in loc) if loc else "config"
        msg = error.get("msg", "Unknown error")

        if error.get("type") == "value_error" and loc:
            messages.append(
                f"Field '{option}': {msg} (received: {error.get('input')!r})"
            )
        else:
            messages.append(f"Field '{option}': {msg}")

    return messages or ["Validation failed with unknown error"]
