"""
Load Options

Immutable settings governing a single load call, and the option
functions that build them.

Example:
    ```python
    read(config, with_file(".myapp.yaml"), with_env_prefix("MYAPP_"))

    # Equivalent
    read_with_options(config, LoadOptions(file=".myapp.yaml", env_prefix="MYAPP_"))
    ```
"""

from typing import Callable, Iterable

from pydantic import BaseModel


class LoadOptions(BaseModel):
    """Settings for one load. An empty value disables the optional source."""

    # File to read configuration from.
    #
    # A relative path or bare name is looked up in the user home directory
    # first, then in the current directory.
    file: str = ""
    # Prepended to every environment variable name.
    env_prefix: str = ""

    model_config = {
        "frozen": True,
        "extra": "forbid",
    }


LoadOption = Callable[[LoadOptions], LoadOptions]

DEFAULT_OPTIONS = LoadOptions()


def with_file(file: str) -> LoadOption:
    """Read configuration from `file` before the environment overlay."""
    def apply(options: LoadOptions) -> LoadOptions:
        return options.model_copy(update={"file": file})
    return apply


def with_env_prefix(prefix: str) -> LoadOption:
    """Prefix every bound environment variable name with `prefix`."""
    def apply(options: LoadOptions) -> LoadOptions:
        return options.model_copy(update={"env_prefix": prefix})
    return apply


def build_options(
    options: Iterable[LoadOption],
    base: LoadOptions = DEFAULT_OPTIONS,
) -> LoadOptions:
    """
    Apply option functions in order to `base`.

    Later functions win when they touch the same setting.

    Args:
        options: Option functions, applied left to right
        base: Starting settings

    Returns:
        The resulting settings
    """
    result = base
    for option in options:
        result = option(result)
    return result
