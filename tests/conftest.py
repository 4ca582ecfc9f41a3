# tests/conftest.py
import json
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest

from gestor_it.almacen import MemoryStore
from gestor_it.api import ApiClient
from gestor_it.auth import EstadoSesion, Sesion, SessionManager, Usuario
from gestor_it.notificaciones import NotificationCenter

BASE_URL = "http://test/api"

ADMIN = Usuario(id=1, nombre_completo="Ana Admin", rol="Admin", email="ana@empresa.com")
ESTANDAR = Usuario(id=2, nombre_completo="Luis Soporte", rol="Standard", email="luis@empresa.com")


class RelojFalso:
    def __init__(self, ahora: float = 1000.0):
        self.ahora = ahora

    def __call__(self) -> float:
        return self.ahora

    def avanzar(self, segundos: float) -> None:
        self.ahora += segundos


class ApiFalsa:
    """Handler para httpx.MockTransport con respuestas encoladas por (método, ruta).

    Cada entrada es una tupla (status, cuerpo), una excepción a lanzar o una
    corrutina que recibe la petición y devuelve la tupla. La última entrada de
    cada ruta se repite.
    """

    def __init__(self) -> None:
        self.rutas: Dict[Tuple[str, str], List[Any]] = {}
        self.peticiones: List[Tuple[str, str, httpx.Headers, Optional[dict]]] = []

    def responder(self, metodo: str, ruta: str, status: int, cuerpo: Optional[dict] = None) -> None:
        self.agregar(metodo, ruta, (status, cuerpo))

    def agregar(self, metodo: str, ruta: str, entrada: Any) -> None:
        self.rutas.setdefault((metodo, ruta), []).append(entrada)

    def llamadas(self, metodo: Optional[str] = None, ruta: Optional[str] = None) -> list:
        return [
            p for p in self.peticiones
            if (metodo is None or p[0] == metodo) and (ruta is None or p[1] == ruta)
        ]

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        ruta = request.url.path[len("/api"):]
        cuerpo = json.loads(request.content) if request.content else None
        self.peticiones.append((request.method, ruta, request.headers, cuerpo))

        cola = self.rutas.get((request.method, ruta))
        if not cola:
            raise AssertionError(f"Petición inesperada: {request.method} {ruta}")
        entrada = cola.pop(0) if len(cola) > 1 else cola[0]

        if isinstance(entrada, Exception):
            raise entrada
        if callable(entrada):
            entrada = await entrada(request)
        status, datos = entrada
        if datos is None:
            return httpx.Response(status)
        return httpx.Response(status, json=datos)


def autenticar(sesion: SessionManager, usuario: Usuario, token: str = "tok-123") -> SessionManager:
    sesion.sesion = Sesion(usuario, token)
    sesion.estado = EstadoSesion.AUTENTICADO
    return sesion


@pytest.fixture
def reloj() -> RelojFalso:
    return RelojFalso()


@pytest.fixture
def notificaciones(reloj: RelojFalso) -> NotificationCenter:
    return NotificationCenter(reloj=reloj)


@pytest.fixture
def almacen() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def api_falsa() -> ApiFalsa:
    return ApiFalsa()


@pytest.fixture
def api(api_falsa: ApiFalsa) -> ApiClient:
    return ApiClient(BASE_URL, transport=httpx.MockTransport(api_falsa))


@pytest.fixture
def sesion(almacen: MemoryStore, api: ApiClient) -> SessionManager:
    return SessionManager(almacen, api)


@pytest.fixture
def sesion_admin(sesion: SessionManager) -> SessionManager:
    return autenticar(sesion, ADMIN, token="tok-admin")


@pytest.fixture
def sesion_estandar(sesion: SessionManager) -> SessionManager:
    return autenticar(sesion, ESTANDAR, token="tok-estandar")
