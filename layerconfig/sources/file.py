"""
File Resolver

Locates and reads the configuration file.

Resolution rules, first match wins:
- "/etc/app.yaml": absolute, read as is
- "~/app.yaml": joined onto the home directory, no fallback
- "app.yaml", "./app.yaml", ".app.yaml": home directory first,
  then the current working directory
"""

from pathlib import Path

from layerconfig.core.exceptions import ConfigFileError
from layerconfig.observability import get_logger

log = get_logger(__name__, stage="file")


def home_dir() -> Path:
    """The current user's home directory."""
    return Path.home()


def resolve_candidates(reference: str) -> list[Path]:
    """
    Ordered paths tried for a file reference.

    Args:
        reference: Non-empty file reference

    Returns:
        One path for absolute and "~" references, two for bare relative ones
    """
    if reference.startswith("/"):
        return [Path(reference)]
    home = home_dir()
    if reference.startswith("~"):
        return [home / reference[1:].lstrip("/")]
    return [home / reference, Path(reference)]


def read_file(reference: str) -> bytes:
    """
    Read the file a reference resolves to.

    Args:
        reference: Non-empty file reference

    Returns:
        Raw file contents

    Raises:
        ConfigFileError: If no candidate could be read; carries the last
            candidate's failure
    """
    candidates = resolve_candidates(reference)
    last_error: OSError = FileNotFoundError(reference)
    tried = None

    for path in candidates:
        tried = path
        try:
            data = path.read_bytes()
        except OSError as e:
            log.debug("Config file candidate not readable", path=str(path), error=e.strerror)
            last_error = e
            continue
        log.debug("Read config file", path=str(path), size=len(data))
        return data

    raise ConfigFileError(
        f"Cannot read config file '{reference}': {last_error.strerror or last_error}",
        path=str(tried),
        cause=last_error,
    )
