# gestor_it/equipos.py
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .auth import puede_eliminar
from .config import ESTADO_INICIAL
from .controlador import RecursoController
from .errores import AuthorizationError

# Nombres de campo del API (última revisión del esquema)
CAMPOS_EQUIPO = [
    "TipoEquipo", "Marca", "Modelo", "NumeroSerie", "NumeroEquipo",
    "DireccionIP", "FechaCompra", "Estado", "AsignadoA"
]

ETIQUETAS = {
    "TipoEquipo": "Tipo",
    "Marca": "Marca",
    "Modelo": "Modelo",
    "NumeroSerie": "Número de serie",
    "NumeroEquipo": "Número de equipo",
    "DireccionIP": "Dirección IP",
    "FechaCompra": "Fecha de compra",
    "Estado": "Estado",
    "AsignadoA": "Asignado a",
}


@dataclass(frozen=True)
class Equipo:
    id: Any
    tipo: str
    marca: str
    modelo: str
    numero_serie: str
    numero_equipo: str
    estado: str = ESTADO_INICIAL
    direccion_ip: Optional[str] = None
    fecha_compra: Optional[str] = None
    asignado_a: Optional[str] = None

    @classmethod
    def from_api(cls, datos: Dict[str, Any]) -> "Equipo":
        return cls(
            id=datos.get("EquipoID"),
            tipo=datos.get("TipoEquipo") or "",
            marca=datos.get("Marca") or "",
            modelo=datos.get("Modelo") or "",
            numero_serie=datos.get("NumeroSerie") or "",
            numero_equipo=datos.get("NumeroEquipo") or "",
            estado=datos.get("Estado") or ESTADO_INICIAL,
            direccion_ip=datos.get("DireccionIP"),
            fecha_compra=datos.get("FechaCompra"),
            asignado_a=datos.get("AsignadoA"),
        )

    def to_api(self) -> Dict[str, Any]:
        return {
            "TipoEquipo": self.tipo,
            "Marca": self.marca,
            "Modelo": self.modelo,
            "NumeroSerie": self.numero_serie,
            "NumeroEquipo": self.numero_equipo,
            "DireccionIP": self.direccion_ip or "",
            "FechaCompra": self.fecha_compra or "",
            "Estado": self.estado,
            "AsignadoA": self.asignado_a or "",
        }


@dataclass(frozen=True)
class TipoEquipo:
    id: Any
    nombre: str


class EquiposController(RecursoController):
    ruta = "/equipos"
    ruta_catalogo = "/equipos/tipos"
    nombre = "equipo"
    campos_requeridos = {campo: ETIQUETAS[campo] for campo in ("TipoEquipo", "Marca", "NumeroSerie", "NumeroEquipo")}
    valores_iniciales = {campo: "" for campo in CAMPOS_EQUIPO}
    valores_iniciales["Estado"] = ESTADO_INICIAL

    def convertir(self, datos: Dict[str, Any]) -> Equipo:
        return Equipo.from_api(datos)

    def convertir_catalogo(self, datos: Dict[str, Any]) -> TipoEquipo:
        return TipoEquipo(datos.get("id"), datos.get("name") or "")

    def id_de(self, item: Equipo) -> Any:
        return item.id

    def a_borrador(self, item: Equipo) -> Dict[str, Any]:
        return item.to_api()

    def texto_busqueda(self, item: Equipo) -> str:
        return " ".join([item.marca, item.modelo, item.numero_serie, item.numero_equipo, item.asignado_a or ""])

    def verificar_eliminacion(self, item: Optional[Equipo]):
        if puede_eliminar(self.sesion, item):
            return
        if not self.sesion.is_admin:
            raise AuthorizationError("Solo los administradores pueden eliminar equipos.")
        raise AuthorizationError("No se puede eliminar un equipo asignado. Libérelo primero.")
