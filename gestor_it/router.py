# gestor_it/router.py
import logging
from dataclasses import dataclass
from typing import List, Optional

from .auth import SessionManager
from .errores import AuthorizationError

logger = logging.getLogger(__name__)

# --- Vistas ---
DASHBOARD = "dashboard"
EQUIPOS = "equipos"
INVENTARIO = "inventario"
MANTENIMIENTO = "mantenimiento"
USUARIOS = "usuarios"


@dataclass(frozen=True)
class EntradaNavegacion:
    vista: str
    titulo: str
    solo_admin: bool = False


NAVEGACION = [
    EntradaNavegacion(DASHBOARD, "Dashboard"),
    EntradaNavegacion(EQUIPOS, "Gestión de Equipos"),
    EntradaNavegacion(INVENTARIO, "Gestión de Inventario"),
    EntradaNavegacion(MANTENIMIENTO, "Reportes de Mantenimiento"),
    EntradaNavegacion(USUARIOS, "Gestión de Usuarios", solo_admin=True),
]


class ViewRouter:
    """Vista activa y entradas de navegación visibles según el rol."""

    def __init__(self, sesion: SessionManager, vista_inicial: str = EQUIPOS):
        self.sesion = sesion
        self.vista_activa = vista_inicial
        # Controlador montado por la vista activa, si tiene uno
        self.controlador = None

    def entradas(self) -> List[EntradaNavegacion]:
        es_admin = self.sesion.is_admin
        return [e for e in NAVEGACION if es_admin or not e.solo_admin]

    def entrada_activa(self) -> Optional[EntradaNavegacion]:
        return next((e for e in NAVEGACION if e.vista == self.vista_activa), None)

    def ir_a(self, vista: str):
        entrada = next((e for e in NAVEGACION if e.vista == vista), None)
        if entrada is None:
            raise ValueError(f"Vista desconocida: {vista}")
        if entrada not in self.entradas():
            raise AuthorizationError(f"No tiene acceso a '{entrada.titulo}'.")

        # Las peticiones en vuelo no se cancelan; sus respuestas se ignoran
        if self.controlador is not None:
            self.controlador.unmount()
            self.controlador = None
        logger.debug("Vista %s -> %s", self.vista_activa, vista)
        self.vista_activa = vista

    def montar(self, controlador):
        if self.controlador is not None and self.controlador is not controlador:
            self.controlador.unmount()
        self.controlador = controlador
        return controlador
