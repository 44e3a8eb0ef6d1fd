"""
Exception types for setup and render-pass failures.

Configuration errors point at a broken scene setup rather than a runtime
condition: they are raised as soon as the problem is detected and abort the
render pass that hit them.
"""


class ConfigurationError(Exception):
    """Base class for unrecoverable scene configuration errors."""
    pass


class GeometryError(ConfigurationError):
    """Degenerate primitive (zero or negative radius/side)."""
    pass


class MaterialError(ConfigurationError):
    """Material coefficients outside the range the shading model accepts."""
    pass


class CameraError(ConfigurationError):
    """Camera basis cannot be built (forward is zero or parallel to up)."""
    pass


class SkyboxProjectionError(ConfigurationError):
    """A skybox lookup produced a texel outside the face image."""
    pass
