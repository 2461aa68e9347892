"""
Configuration Loader

Populates a record from a file, then the environment, then validates it.

Example:
    ```python
    class MyConfig(BaseModel):
        port: Annotated[int, Json("port"), Env("PORT"), Field(gt=0)] = 0
        username: Annotated[str, Json("username"), Env("USERNAME", overwrite=True)] = ""

    conf = MyConfig()
    read(conf, with_file("defaults.json"))
    ```

Each stage runs only if the previous one succeeded. On failure the
record keeps whatever the failing stage had assigned so far.
"""

from typing import TypeVar

from pydantic import BaseModel

from layerconfig.core.exceptions import LayerConfigError
from layerconfig.core.options import LoadOption, LoadOptions, build_options
from layerconfig.observability import get_logger, timed_stage
from layerconfig.sources.decoder import decode_into
from layerconfig.sources.environment import overlay_environment
from layerconfig.sources.file import read_file
from layerconfig.validation import validate_record

R = TypeVar("R", bound=BaseModel)

log = get_logger(__name__, operation="load")


def read(record: R, *options: LoadOption) -> R:
    """
    Load configuration into `record` using option functions.

    Args:
        record: Target record, populated in place
        *options: Option functions such as `with_file`, applied in order

    Returns:
        The same record, populated and validated

    Raises:
        ConfigFileError: If the configured file cannot be read
        DecodeError: If the file contents cannot be decoded
        EnvOverlayError: If an environment variable cannot be applied
        ConfigValidationError: If the populated record breaks its rules
    """
    return read_with_options(record, build_options(options))


def read_with_options(record: R, options: LoadOptions) -> R:
    """
    Load configuration into `record` using a settings value.

    See `read` for the raised errors.
    """
    record_type = type(record).__name__
    stage_log = log.with_context(record=record_type)

    try:
        if options.file:
            with timed_stage(stage_log, "file", path=options.file):
                data = read_file(options.file)
            with timed_stage(stage_log, "decode", path=options.file):
                decode_into(record, data, options.file)

        with timed_stage(stage_log, "environment", prefix=options.env_prefix or None):
            overlay_environment(record, prefix=options.env_prefix)

        with timed_stage(stage_log, "validation"):
            validate_record(record)
    except LayerConfigError as e:
        stage_log.warning(
            "Configuration load failed",
            error_type=type(e).__name__,
            stage=e.context.stage,
            path=e.context.path,
            field=e.context.field,
            env_var=e.context.env_var,
            **e.context.metadata,
        )
        raise

    stage_log.debug("Configuration loaded")
    return record
