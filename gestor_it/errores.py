# gestor_it/errores.py
from typing import List, Optional


class GestorError(Exception):
    """Base de todos los errores que la aplicación reporta al usuario."""

    def __init__(self, mensaje: str):
        super().__init__(mensaje)
        self.mensaje = mensaje


class NetworkError(GestorError):
    """La petición no pudo enviarse o no se recibió respuesta."""


class ApiError(GestorError):
    """El API respondió con un estado distinto de 2xx."""

    def __init__(self, status: int, mensaje: Optional[str] = None):
        super().__init__(mensaje or f"El API respondió con estado {status}.")
        self.status = status
        # Solo el mensaje enviado por el servidor; None si no lo incluyó
        self.mensaje_servidor = mensaje


class ValidationError(GestorError):
    def __init__(self, campos: List[str]):
        super().__init__("Por favor, complete todos los campos obligatorios: " + ", ".join(campos) + ".")
        self.campos = campos


class AuthorizationError(GestorError):
    pass


class SessionCorruptionError(GestorError):
    pass
