# gestor_it/controlador.py
"""
Controlador genérico de colecciones: listar, crear, editar y eliminar.

El API es la única fuente de verdad. Cada escritura exitosa vuelve a pedir la
colección completa en lugar de parchear la caché local, y el refresco solo se
lanza después de observar la respuesta de éxito de la escritura.
"""
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from .api import ApiClient
from .auth import SessionManager
from .errores import ApiError, AuthorizationError, GestorError, ValidationError
from .notificaciones import NotificationCenter

logger = logging.getLogger(__name__)

MENSAJE_EN_CURSO = "Ya hay una operación en curso. Espere a que termine."
MENSAJE_SIN_FORMULARIO = "No hay ningún formulario abierto."

Confirmador = Callable[[str], Union[bool, Awaitable[bool]]]


@dataclass
class Borrador:
    datos: Dict[str, Any] = field(default_factory=dict)
    item: Optional[Any] = None

    @property
    def editando(self) -> bool:
        return self.item is not None


class RecursoController:
    """Estado de una colección del API ligada a un tipo de recurso.

    Las subclases definen la ruta, los campos obligatorios y cómo convertir
    entre el JSON del API y sus objetos.
    """
    ruta: str = ""
    ruta_catalogo: Optional[str] = None
    nombre: str = "registro"
    campos_requeridos: Dict[str, str] = {}
    valores_iniciales: Dict[str, Any] = {}

    def __init__(self, api: ApiClient, sesion: SessionManager,
                 notificaciones: NotificationCenter, confirmar: Confirmador):
        self.api = api
        self.sesion = sesion
        self.notificaciones = notificaciones
        self.confirmar = confirmar

        self.items: List[Any] = []
        self.catalogo: List[Any] = []
        self.borrador: Optional[Borrador] = None
        self.error: Optional[str] = None
        self.cargando = False
        self._catalogo_cargado = False
        self._en_curso = False
        self._descartado = False

    # --- Conversión (a definir por cada recurso) ---
    def convertir(self, datos: Dict[str, Any]) -> Any:
        return datos

    def convertir_catalogo(self, datos: Dict[str, Any]) -> Any:
        return datos

    def id_de(self, item: Any) -> Any:
        return item["id"]

    def a_borrador(self, item: Any) -> Dict[str, Any]:
        return dict(item)

    def texto_busqueda(self, item: Any) -> str:
        return " ".join(str(v) for v in self.a_borrador(item).values() if v)

    def verificar_eliminacion(self, item: Optional[Any]):
        if not self.sesion.is_admin:
            raise AuthorizationError(f"Solo los administradores pueden eliminar un {self.nombre}.")

    # --- Lectura ---
    async def list(self) -> bool:
        """Reemplaza la caché con la colección del API. Si falla, la caché se conserva."""
        self.cargando = True
        self.error = None
        try:
            datos = await self.api.get(self.ruta, token=self.sesion.get_token())
        except GestorError as exc:
            if self._ignorar_respuesta("list"):
                return False
            self.error = self._mensaje_error(exc, f"Error al cargar los {self.nombre}s.")
            self.notificaciones.error(self.error)
            return False
        finally:
            self.cargando = False

        if self._ignorar_respuesta("list"):
            return False
        registros = self._registros(datos)
        if registros is None:
            self.error = f"Error al cargar los {self.nombre}s."
            logger.warning("Respuesta mal formada en %s", self.ruta)
            self.notificaciones.error(self.error)
            return False
        self.items = [self.convertir(d) for d in registros]
        return True

    async def load_reference_data(self) -> bool:
        if self._catalogo_cargado or not self.ruta_catalogo:
            return self._catalogo_cargado
        try:
            datos = await self.api.get(self.ruta_catalogo, token=self.sesion.get_token())
        except GestorError as exc:
            logger.warning("No se pudo cargar el catálogo %s: %s", self.ruta_catalogo, exc.mensaje)
            return False
        if self._ignorar_respuesta("load_reference_data"):
            return False
        registros = self._registros(datos)
        if registros is None:
            logger.warning("Respuesta mal formada en %s", self.ruta_catalogo)
            return False
        self.catalogo = [self.convertir_catalogo(d) for d in registros]
        self._catalogo_cargado = True
        return True

    def buscar_por_id(self, item_id: Any) -> Optional[Any]:
        return next((item for item in self.items if self.id_de(item) == item_id), None)

    def buscar(self, texto: str) -> List[Any]:
        texto = texto.strip().lower()
        if not texto:
            return list(self.items)
        return [item for item in self.items if texto in self.texto_busqueda(item).lower()]

    # --- Formulario ---
    def begin_create(self) -> Borrador:
        self.borrador = Borrador(dict(self.valores_iniciales))
        return self.borrador

    def begin_edit(self, item: Any) -> Borrador:
        self.borrador = Borrador(self.a_borrador(item), item)
        return self.borrador

    def cancel(self):
        self.borrador = None

    def validar(self, datos: Dict[str, Any]):
        faltantes = [etiqueta for campo, etiqueta in self.campos_requeridos.items()
                     if not str(datos.get(campo) or "").strip()]
        if faltantes:
            raise ValidationError(faltantes)

    async def submit(self, borrador: Optional[Borrador] = None) -> bool:
        borrador = borrador or self.borrador
        if borrador is None:
            self.notificaciones.error(MENSAJE_SIN_FORMULARIO)
            return False
        if self._en_curso:
            self.notificaciones.error(MENSAJE_EN_CURSO)
            return False
        try:
            self.validar(borrador.datos)
        except ValidationError as exc:
            self.notificaciones.error(exc.mensaje)
            return False

        accion, hecho = ("actualizar", "actualizado") if borrador.editando else ("crear", "creado")
        token = self.sesion.get_token()
        self._en_curso = True
        try:
            if borrador.editando:
                ruta = f"{self.ruta}/{self.id_de(borrador.item)}"
                datos = await self.api.put(ruta, borrador.datos, token=token)
            else:
                datos = await self.api.post(self.ruta, borrador.datos, token=token)
        except GestorError as exc:
            if not self._ignorar_respuesta("submit"):
                self.notificaciones.error(self._mensaje_error(exc, f"Error al {accion} el {self.nombre}."))
            return False
        finally:
            self._en_curso = False

        if self._ignorar_respuesta("submit"):
            return False
        if self.borrador is borrador:
            self.borrador = None
        self.notificaciones.exito(datos.get("message") or f"{self.nombre.capitalize()} {hecho} correctamente.")
        await self.list()
        return True

    # --- Eliminación ---
    async def delete(self, item_id: Any) -> bool:
        try:
            self.verificar_eliminacion(self.buscar_por_id(item_id))
        except AuthorizationError as exc:
            self.notificaciones.error(exc.mensaje)
            return False
        if self._en_curso:
            self.notificaciones.error(MENSAJE_EN_CURSO)
            return False

        self._en_curso = True
        try:
            confirmado = self.confirmar(
                f"¿Está seguro de que quiere eliminar este {self.nombre}? Esta acción es irreversible.")
            if inspect.isawaitable(confirmado):
                confirmado = await confirmado
            if not confirmado:
                return False
            datos = await self.api.delete(f"{self.ruta}/{item_id}", token=self.sesion.get_token())
        except GestorError as exc:
            if not self._ignorar_respuesta("delete"):
                self.notificaciones.error(self._mensaje_error(exc, f"Error al eliminar el {self.nombre}."))
            return False
        finally:
            self._en_curso = False

        if self._ignorar_respuesta("delete"):
            return False
        self.notificaciones.exito(datos.get("message") or f"{self.nombre.capitalize()} eliminado correctamente.")
        await self.list()
        return True

    # --- Ciclo de vida ---
    def unmount(self):
        """Marca el controlador como descartado; las respuestas que lleguen después se ignoran."""
        self._descartado = True

    @property
    def montado(self) -> bool:
        return not self._descartado

    def _ignorar_respuesta(self, operacion: str) -> bool:
        if self._descartado:
            logger.debug("Respuesta de %s ignorada: el controlador de %s ya no está montado", operacion, self.nombre)
        return self._descartado

    @staticmethod
    def _registros(datos: Dict[str, Any]) -> Optional[List[Dict[str, Any]]]:
        """Lista de objetos bajo "data"; None si el cuerpo no tiene esa forma."""
        registros = datos.get("data")
        if registros is None:
            return []
        if not isinstance(registros, list) or not all(isinstance(r, dict) for r in registros):
            return None
        return registros

    @staticmethod
    def _mensaje_error(exc: GestorError, por_defecto: str) -> str:
        if isinstance(exc, ApiError):
            return exc.mensaje_servidor or por_defecto
        return exc.mensaje
