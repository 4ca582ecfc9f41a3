# gestor_it/config.py
import logging
import os
from dataclasses import dataclass

# --- Roles y Permisos ---
ROLES = ["Admin", "Standard"]
ROL_ADMIN = "Admin"

ROLES_PERMISOS = {
    "Admin": {
        "ver_inventario",
        "registrar_equipo",
        "editar_equipo",
        "eliminar_equipo",
        "gestionar_usuarios",
        "generar_reportes"
    },
    "Standard": {
        "ver_inventario",
        "generar_reportes"
    }
}

# --- Equipos ---
ESTADOS_EQUIPO = ["Disponible", "Asignado", "En Mantenimiento", "Baja"]
ESTADO_INICIAL = "Disponible"

# --- Almacenamiento de sesión ---
CLAVE_TOKEN = "token"
CLAVE_USUARIO = "user"

# --- Notificaciones ---
DURACION_NOTIFICACION = 4.0  # segundos
TAMANO_HISTORIAL = 20


@dataclass(frozen=True)
class Configuracion:
    api_base_url: str
    api_timeout: float
    db_path: str
    db_name: str
    log_level: str
    log_file: str

    @property
    def ruta_db(self) -> str:
        return os.path.join(self.db_path, self.db_name)


def cargar_configuracion() -> Configuracion:
    """Lee la configuración desde variables de entorno (ya cargadas con load_dotenv)."""
    return Configuracion(
        api_base_url=os.getenv("API_BASE_URL", "http://localhost:5000/api").rstrip("/"),
        api_timeout=float(os.getenv("API_TIMEOUT", "10")),
        db_path=os.getenv("DB_PATH", "app/data"),
        db_name=os.getenv("DB_NAME", "sesion.db"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_file=os.getenv("LOG_FILE", "gestor_it.log"),
    )


def configurar_logging(config: Configuracion):
    """Envía el log a un archivo; la consola se limpia entre pantallas."""
    logging.basicConfig(
        filename=config.log_file,
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
