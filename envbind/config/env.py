"""Environment variable support for envbind's own options.

Options can be set without code through ``ENVBIND_``-prefixed variables,
e.g. ``ENVBIND_SEPARATOR=.`` or ``ENVBIND_PRESERVE_ORDER=false``. They are
read with envbind itself.
"""

from __future__ import annotations

from collections.abc import Mapping

from envbind.config.options import CodecOptions

DEFAULT_PREFIX = "ENVBIND_"


def load_options_from_env(
    prefix: str = DEFAULT_PREFIX, environ: Mapping[str, str] | None = None
) -> CodecOptions:
    """Load codec options from environment variables.

    Parameters
    ----------
    prefix : str
        Environment variable prefix to filter on.
    environ : Mapping[str, str] | None
        Environment to read. If None, the process environment is used.

    Returns
    -------
    CodecOptions
        Options with every matching variable applied over the defaults.

    Raises
    ------
    DecodeError
        If a variable does not fit its option, e.g. an invalid separator.

    Examples
    --------
    >>> load_options_from_env(environ={"ENVBIND_SEPARATOR": "."}).separator
    '.'
    """
    # Lazy import to avoid circular import
    from envbind.api import Envfile  # noqa: PLC0415

    reader = Envfile(CodecOptions(prefix=prefix))
    return reader.from_env(CodecOptions, environ)
