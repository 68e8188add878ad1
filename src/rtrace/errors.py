"""
Exceptions raised by the renderer.
"""


class RtraceError(Exception):
    """Base class for all renderer errors."""


class InvalidConfigurationError(RtraceError, ValueError):
    """A scene, camera or render setting cannot be used to render."""


class SamplingError(RtraceError, RuntimeError):
    """A rejection sampler gave up after its iteration cap."""


class RenderError(RtraceError, RuntimeError):
    """A render worker failed before delivering all of its rows."""
