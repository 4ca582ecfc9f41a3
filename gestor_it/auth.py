# gestor_it/auth.py
import enum
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, NamedTuple, Optional

from .almacen import KeyValueStore
from .api import ApiClient
from .config import CLAVE_TOKEN, CLAVE_USUARIO, ROL_ADMIN, ROLES_PERMISOS
from .errores import ApiError, NetworkError, SessionCorruptionError

logger = logging.getLogger(__name__)

MENSAJE_ERROR_AUTENTICACION = "Error de autenticación"
MENSAJE_RESPUESTA_INVALIDA = "Respuesta inválida del servidor."
MENSAJE_SIN_SERVIDOR = "No se pudo conectar con el servidor API."


class EstadoSesion(enum.Enum):
    NO_AUTENTICADO = "no_autenticado"
    AUTENTICANDO = "autenticando"
    AUTENTICADO = "autenticado"


@dataclass(frozen=True)
class Usuario:
    id: Any
    nombre_completo: str
    rol: str
    email: str

    @classmethod
    def from_dict(cls, datos: Dict[str, Any]) -> "Usuario":
        if not isinstance(datos, dict):
            raise SessionCorruptionError("Los datos del usuario no son un objeto.")
        usuario_id = datos.get("usuarioID", datos.get("id"))
        rol = datos.get("rol")
        if usuario_id is None or not isinstance(rol, str):
            raise SessionCorruptionError("Faltan campos obligatorios del usuario.")
        return cls(
            id=usuario_id,
            nombre_completo=datos.get("nombreCompleto") or "",
            rol=rol,
            email=datos.get("email") or "",
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"usuarioID": self.id, "nombreCompleto": self.nombre_completo, "rol": self.rol, "email": self.email}


@dataclass(frozen=True)
class Sesion:
    usuario: Usuario
    token: str


class Resultado(NamedTuple):
    exito: bool
    mensaje: Optional[str] = None


def parsear_usuario(texto: str) -> Usuario:
    try:
        datos = json.loads(texto)
    except (TypeError, ValueError) as exc:
        raise SessionCorruptionError("El usuario guardado no es JSON válido.") from exc
    return Usuario.from_dict(datos)


class SessionManager:
    """
    Dueño de la sesión del cliente: login, logout y restauración desde el almacén.
    El token y el usuario se guardan y se borran siempre juntos.
    """
    def __init__(self, almacen: KeyValueStore, api: ApiClient):
        self.almacen = almacen
        self.api = api
        self.estado = EstadoSesion.NO_AUTENTICADO
        self.sesion: Optional[Sesion] = None

    # --- Restauración ---
    def restore(self):
        """Lee token y usuario guardados; si están dañados, cierra la sesión y limpia el almacén."""
        token = self.almacen.get(CLAVE_TOKEN)
        usuario_json = self.almacen.get(CLAVE_USUARIO)

        if token is None and usuario_json is None:
            return

        try:
            if not token or usuario_json is None:
                raise SessionCorruptionError("Sesión guardada incompleta.")
            usuario = parsear_usuario(usuario_json)
        except SessionCorruptionError as exc:
            logger.error("No se pudo restaurar la sesión: %s", exc.mensaje)
            self.logout()
            return

        self.sesion = Sesion(usuario, token)
        self.estado = EstadoSesion.AUTENTICADO
        logger.info("Sesión restaurada para el usuario %s", usuario.id)

    # --- Login / Logout ---
    async def login(self, username: str, password: str) -> Resultado:
        """
        Un login fallido no toca el almacén ni la sesión vigente: si ya había
        una sesión abierta, sigue siendo la misma en memoria y en disco.
        """
        previa, estado_previo = self.sesion, self.estado
        self.estado = EstadoSesion.AUTENTICANDO
        try:
            datos = await self.api.post("/auth/login", {"usuario": username, "password": password})
            token = datos.get("token")
            if not isinstance(token, str) or not token:
                raise SessionCorruptionError(MENSAJE_RESPUESTA_INVALIDA)
            usuario = Usuario.from_dict(datos.get("user"))
        except ApiError as exc:
            mensaje = exc.mensaje_servidor or MENSAJE_ERROR_AUTENTICACION
        except NetworkError:
            mensaje = MENSAJE_SIN_SERVIDOR
        except SessionCorruptionError:
            mensaje = MENSAJE_RESPUESTA_INVALIDA
        else:
            self._persistir(token, usuario)
            self.sesion = Sesion(usuario, token)
            self.estado = EstadoSesion.AUTENTICADO
            logger.info("Login exitoso para '%s'", username)
            return Resultado(True)

        logger.warning("Login fallido para '%s': %s", username, mensaje)
        self.sesion, self.estado = previa, estado_previo
        return Resultado(False, mensaje)

    def _persistir(self, token: str, usuario: Usuario):
        # Si falla la escritura, memoria y almacén quedan ambos vacíos.
        try:
            self.almacen.set(CLAVE_TOKEN, token)
            self.almacen.set(CLAVE_USUARIO, json.dumps(usuario.to_dict()))
        except Exception:
            logger.exception("No se pudo guardar la sesión")
            self.sesion = None
            self.estado = EstadoSesion.NO_AUTENTICADO
            self._limpiar_almacen()
            raise

    def _limpiar_almacen(self):
        self.almacen.remove(CLAVE_TOKEN)
        self.almacen.remove(CLAVE_USUARIO)

    def logout(self):
        try:
            self._limpiar_almacen()
        except Exception:
            logger.exception("No se pudo limpiar el almacén de sesión")
        self.sesion = None
        self.estado = EstadoSesion.NO_AUTENTICADO

    # --- Accesores ---
    def get_token(self) -> Optional[str]:
        return self.sesion.token if self.sesion else None

    @property
    def usuario(self) -> Optional[Usuario]:
        return self.sesion.usuario if self.sesion else None

    @property
    def autenticado(self) -> bool:
        return self.estado is EstadoSesion.AUTENTICADO

    @property
    def is_admin(self) -> bool:
        return self.usuario is not None and self.usuario.rol == ROL_ADMIN

    @property
    def user_id(self):
        return self.usuario.id if self.usuario else None


# --- CONTROL DE ACCESO BASADO EN ROLES ---
def tiene_permiso(sesion: SessionManager, permiso: str) -> bool:
    if sesion.usuario is None:
        return False
    return permiso in ROLES_PERMISOS.get(sesion.usuario.rol, set())


def puede_eliminar(sesion: SessionManager, equipo=None) -> bool:
    """Solo un administrador elimina, y nunca un equipo que está asignado."""
    if not sesion.is_admin or not tiene_permiso(sesion, "eliminar_equipo"):
        return False
    return equipo is None or equipo.estado != "Asignado"
