"""
Errores del núcleo de visualización

Cada fallo se clasifica con su propio tipo para que los consumidores internos
y los tests puedan distinguirlos. La capa HTTP los traduce todos a un error 500.
"""


class MotovizError(Exception):
    """Base class for every classified failure raised by motoviz."""


class ConfigurationError(MotovizError):
    """A collaborator was constructed without the configuration it needs."""


class ImageIOError(MotovizError):
    """An image could not be read, decoded or written."""


class GeometryError(MotovizError):
    """A mask was requested for a zero-sized canvas."""


class ServiceError(MotovizError):
    """The inpainting service failed or reported an error."""

    def __init__(self, code: int, message: str):
        super().__init__(f"[{code}] {message}")
        self.code = code
        self.message = message


class ArtifactCleanupError(MotovizError):
    """A temporary mask artifact could not be deleted. Only ever logged."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Could not delete {path}: {reason}")
        self.path = path
        self.reason = reason
