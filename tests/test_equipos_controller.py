import asyncio
import logging

import httpx
import pytest

from gestor_it.api import MENSAJE_SIN_CONEXION
from gestor_it.controlador import MENSAJE_EN_CURSO
from gestor_it.equipos import Equipo, EquiposController, TipoEquipo
from gestor_it.notificaciones import ERROR, EXITO


def equipo_api(equipo_id, estado="Disponible", **extra):
    datos = {
        "EquipoID": equipo_id,
        "TipoEquipo": "Laptop",
        "Marca": "Dell",
        "Modelo": "Latitude 5420",
        "NumeroSerie": f"SN{equipo_id}",
        "NumeroEquipo": f"EQ-{equipo_id:03d}",
        "Estado": estado,
    }
    datos.update(extra)
    return datos


def borrador_valido(controlador):
    borrador = controlador.begin_create()
    borrador.datos.update({
        "TipoEquipo": "Monitor",
        "Marca": "LG",
        "Modelo": "27UL500",
        "NumeroSerie": "MN-778",
        "NumeroEquipo": "EQ-002",
    })
    return borrador


class Confirmador:
    def __init__(self, respuesta=True):
        self.respuesta = respuesta
        self.mensajes = []

    def __call__(self, mensaje):
        self.mensajes.append(mensaje)
        return self.respuesta


@pytest.fixture
def confirmador():
    return Confirmador()


@pytest.fixture
def crear_controlador(api, notificaciones, confirmador):
    def _crear(sesion):
        return EquiposController(api, sesion, notificaciones, confirmador)
    return _crear


# --- list ---

@pytest.mark.asyncio
async def test_list_replaces_collection(sesion_admin, crear_controlador, api_falsa):
    api_falsa.responder("GET", "/equipos", 200, {"data": [equipo_api(1), equipo_api(2)]})
    api_falsa.responder("GET", "/equipos", 200, {"data": [equipo_api(3)]})
    controlador = crear_controlador(sesion_admin)

    assert await controlador.list()
    assert [e.id for e in controlador.items] == [1, 2]
    assert isinstance(controlador.items[0], Equipo)

    assert await controlador.list()
    assert [e.id for e in controlador.items] == [3]
    assert api_falsa.peticiones[0][2]["Authorization"] == "Bearer tok-admin"


@pytest.mark.asyncio
async def test_first_load_failure_leaves_collection_empty(sesion_admin, crear_controlador, api_falsa, notificaciones):
    api_falsa.responder("GET", "/equipos", 500, {"message": "Base de datos caída"})
    controlador = crear_controlador(sesion_admin)

    assert not await controlador.list()

    assert controlador.items == []
    assert controlador.error == "Base de datos caída"
    assert notificaciones.actual.tipo == ERROR
    assert not controlador.cargando


@pytest.mark.asyncio
async def test_refresh_failure_keeps_cached_items(sesion_admin, crear_controlador, api_falsa, notificaciones):
    api_falsa.responder("GET", "/equipos", 200, {"data": [equipo_api(1)]})
    api_falsa.agregar("GET", "/equipos", httpx.ConnectError("sin red"))
    controlador = crear_controlador(sesion_admin)
    await controlador.list()

    assert not await controlador.list()

    assert [e.id for e in controlador.items] == [1]
    assert controlador.error == MENSAJE_SIN_CONEXION
    assert notificaciones.actual.texto == MENSAJE_SIN_CONEXION


@pytest.mark.asyncio
@pytest.mark.parametrize("cuerpo", [{"data": {"EquipoID": 1}}, {"data": [None]}, {"data": "equipos"}])
async def test_malformed_collection_keeps_cache(sesion_admin, crear_controlador, api_falsa, notificaciones, cuerpo):
    api_falsa.responder("GET", "/equipos", 200, {"data": [equipo_api(1)]})
    api_falsa.responder("GET", "/equipos", 200, cuerpo)
    controlador = crear_controlador(sesion_admin)
    await controlador.list()

    assert not await controlador.list()

    assert [e.id for e in controlador.items] == [1]
    assert controlador.error == "Error al cargar los equipos."
    assert notificaciones.actual.texto == "Error al cargar los equipos."
    assert not controlador.cargando


# --- catálogo ---

@pytest.mark.asyncio
async def test_reference_data_loaded_once(sesion_admin, crear_controlador, api_falsa):
    api_falsa.responder("GET", "/equipos/tipos", 200, {"data": [{"id": 1, "name": "Laptop"}, {"id": 2, "name": "Monitor"}]})
    controlador = crear_controlador(sesion_admin)

    assert await controlador.load_reference_data()
    assert await controlador.load_reference_data()

    assert controlador.catalogo == [TipoEquipo(1, "Laptop"), TipoEquipo(2, "Monitor")]
    assert len(api_falsa.llamadas("GET", "/equipos/tipos")) == 1


@pytest.mark.asyncio
async def test_reference_data_failure_is_only_logged(sesion_admin, crear_controlador, api_falsa, notificaciones, caplog):
    caplog.set_level(logging.WARNING)
    api_falsa.responder("GET", "/equipos/tipos", 503)
    controlador = crear_controlador(sesion_admin)

    assert not await controlador.load_reference_data()

    assert controlador.catalogo == []
    assert notificaciones.actual is None
    assert "/equipos/tipos" in caplog.text


@pytest.mark.asyncio
async def test_malformed_reference_data_is_only_logged(sesion_admin, crear_controlador, api_falsa, notificaciones, caplog):
    caplog.set_level(logging.WARNING)
    api_falsa.responder("GET", "/equipos/tipos", 200, {"data": [None]})
    controlador = crear_controlador(sesion_admin)

    assert not await controlador.load_reference_data()

    assert controlador.catalogo == []
    assert notificaciones.actual is None
    assert "/equipos/tipos" in caplog.text


# --- formulario ---

def test_begin_edit_prefills_and_replaces_open_draft(sesion_admin, crear_controlador):
    controlador = crear_controlador(sesion_admin)
    nuevo = controlador.begin_create()
    assert nuevo.datos["Estado"] == "Disponible"
    assert not nuevo.editando

    equipo = Equipo.from_api(equipo_api(5, estado="Asignado", AsignadoA="Luis"))
    edicion = controlador.begin_edit(equipo)

    assert controlador.borrador is edicion
    assert edicion.editando
    assert edicion.datos["NumeroEquipo"] == "EQ-005"
    assert edicion.datos["AsignadoA"] == "Luis"

    controlador.cancel()
    assert controlador.borrador is None


@pytest.mark.asyncio
async def test_submit_missing_inventory_code_makes_no_request(sesion_admin, crear_controlador, api_falsa, notificaciones):
    controlador = crear_controlador(sesion_admin)
    borrador = borrador_valido(controlador)
    borrador.datos["NumeroEquipo"] = "   "

    assert not await controlador.submit()

    assert api_falsa.peticiones == []
    assert notificaciones.actual.tipo == ERROR
    assert "Número de equipo" in notificaciones.actual.texto
    assert controlador.borrador is borrador


@pytest.mark.asyncio
async def test_submit_new_item_scenario(sesion_admin, crear_controlador, api_falsa, notificaciones):
    api_falsa.responder("GET", "/equipos", 200, {"data": [equipo_api(1)]})
    api_falsa.responder("GET", "/equipos", 200, {"data": [equipo_api(1), equipo_api(2)]})
    api_falsa.responder("POST", "/equipos", 201, {"message": "created"})
    controlador = crear_controlador(sesion_admin)
    await controlador.list()
    borrador = borrador_valido(controlador)

    assert await controlador.submit(borrador)

    assert controlador.borrador is None
    assert len(controlador.items) == 2
    assert len(api_falsa.llamadas("GET", "/equipos")) == 2
    assert [n.texto for n in notificaciones.historial] == ["created"]
    assert notificaciones.actual.tipo == EXITO
    post = api_falsa.llamadas("POST", "/equipos")[0]
    assert post[3] == borrador.datos


@pytest.mark.asyncio
async def test_submit_of_other_draft_keeps_open_form(sesion_admin, crear_controlador, api_falsa):
    api_falsa.responder("POST", "/equipos", 201, {"message": "created"})
    api_falsa.responder("GET", "/equipos", 200, {"data": [equipo_api(2)]})
    controlador = crear_controlador(sesion_admin)
    abierto = controlador.begin_create()
    otro = borrador_valido(crear_controlador(sesion_admin))

    assert await controlador.submit(otro)

    assert controlador.borrador is abierto


@pytest.mark.asyncio
async def test_submit_edit_sends_put(sesion_admin, crear_controlador, api_falsa, notificaciones):
    api_falsa.responder("PUT", "/equipos/4", 200, {})
    api_falsa.responder("GET", "/equipos", 200, {"data": [equipo_api(4, estado="En Mantenimiento")]})
    controlador = crear_controlador(sesion_admin)
    borrador = controlador.begin_edit(Equipo.from_api(equipo_api(4)))
    borrador.datos["Estado"] = "En Mantenimiento"

    assert await controlador.submit()

    assert api_falsa.llamadas("PUT", "/equipos/4")[0][3]["Estado"] == "En Mantenimiento"
    assert notificaciones.actual.texto == "Equipo actualizado correctamente."
    assert controlador.items[0].estado == "En Mantenimiento"


@pytest.mark.asyncio
async def test_submit_failure_keeps_draft_open(sesion_admin, crear_controlador, api_falsa, notificaciones):
    api_falsa.responder("POST", "/equipos", 409, {"message": "Número de serie duplicado"})
    controlador = crear_controlador(sesion_admin)
    borrador = borrador_valido(controlador)

    assert not await controlador.submit()

    assert controlador.borrador is borrador
    assert notificaciones.actual.texto == "Número de serie duplicado"
    assert api_falsa.llamadas("GET") == []


@pytest.mark.asyncio
async def test_reentrant_submit_is_rejected(sesion_admin, crear_controlador, api_falsa, notificaciones):
    liberar = asyncio.Event()

    async def respuesta_lenta(request):
        await liberar.wait()
        return 201, {"message": "creado"}

    api_falsa.agregar("POST", "/equipos", respuesta_lenta)
    api_falsa.responder("GET", "/equipos", 200, {"data": [equipo_api(2)]})
    controlador = crear_controlador(sesion_admin)
    borrador = borrador_valido(controlador)

    primera = asyncio.create_task(controlador.submit(borrador))
    await asyncio.sleep(0)
    assert not await controlador.submit(borrador)
    assert notificaciones.actual.texto == MENSAJE_EN_CURSO

    liberar.set()
    assert await primera
    assert len(api_falsa.llamadas("POST", "/equipos")) == 1


# --- delete ---

@pytest.mark.asyncio
async def test_delete_by_standard_user_is_blocked(sesion_estandar, crear_controlador, api_falsa, notificaciones, confirmador):
    controlador = crear_controlador(sesion_estandar)

    assert not await controlador.delete(1)

    assert api_falsa.peticiones == []
    assert confirmador.mensajes == []
    assert notificaciones.actual.texto == "Solo los administradores pueden eliminar equipos."


@pytest.mark.asyncio
async def test_delete_requires_confirmation(sesion_admin, crear_controlador, api_falsa, confirmador):
    confirmador.respuesta = False
    controlador = crear_controlador(sesion_admin)

    assert not await controlador.delete(1)

    assert len(confirmador.mensajes) == 1
    assert api_falsa.peticiones == []


@pytest.mark.asyncio
async def test_delete_accepts_async_confirmation(sesion_admin, api, notificaciones, api_falsa):
    async def confirmar(mensaje):
        return True

    api_falsa.responder("DELETE", "/equipos/1", 200, {"message": "Equipo eliminado"})
    api_falsa.responder("GET", "/equipos", 200, {"data": []})
    controlador = EquiposController(api, sesion_admin, notificaciones, confirmar)

    assert await controlador.delete(1)


@pytest.mark.asyncio
async def test_delete_success_refreshes(sesion_admin, crear_controlador, api_falsa, notificaciones):
    api_falsa.responder("GET", "/equipos", 200, {"data": [equipo_api(1), equipo_api(2)]})
    api_falsa.responder("GET", "/equipos", 200, {"data": [equipo_api(2)]})
    api_falsa.responder("DELETE", "/equipos/1", 200, {"message": "Equipo eliminado"})
    controlador = crear_controlador(sesion_admin)
    await controlador.list()

    assert await controlador.delete(1)

    assert [e.id for e in controlador.items] == [2]
    assert notificaciones.actual.texto == "Equipo eliminado"


@pytest.mark.asyncio
async def test_delete_failure_leaves_collection_unchanged(sesion_admin, crear_controlador, api_falsa, notificaciones):
    api_falsa.responder("GET", "/equipos", 200, {"data": [equipo_api(1)]})
    api_falsa.responder("DELETE", "/equipos/1", 500)
    controlador = crear_controlador(sesion_admin)
    await controlador.list()

    assert not await controlador.delete(1)

    assert [e.id for e in controlador.items] == [1]
    assert notificaciones.actual.texto == "Error al eliminar el equipo."
    assert len(api_falsa.llamadas("GET", "/equipos")) == 1


@pytest.mark.asyncio
async def test_delete_assigned_equipment_is_blocked(sesion_admin, crear_controlador, api_falsa, notificaciones):
    api_falsa.responder("GET", "/equipos", 200, {"data": [equipo_api(1, estado="Asignado")]})
    controlador = crear_controlador(sesion_admin)
    await controlador.list()

    assert not await controlador.delete(1)

    assert api_falsa.llamadas("DELETE") == []
    assert "asignado" in notificaciones.actual.texto


# --- ciclo de vida ---

@pytest.mark.asyncio
async def test_response_after_unmount_is_ignored(sesion_admin, crear_controlador, api_falsa, notificaciones):
    liberar = asyncio.Event()

    async def respuesta_lenta(request):
        await liberar.wait()
        return 200, {"data": [equipo_api(1)]}

    api_falsa.agregar("GET", "/equipos", respuesta_lenta)
    controlador = crear_controlador(sesion_admin)

    tarea = asyncio.create_task(controlador.list())
    await asyncio.sleep(0)
    controlador.unmount()
    liberar.set()

    assert not await tarea
    assert controlador.items == []
    assert notificaciones.actual is None


def test_search_filters_cached_items(sesion_admin, crear_controlador):
    controlador = crear_controlador(sesion_admin)
    controlador.items = [
        Equipo.from_api(equipo_api(1, AsignadoA="María Pérez")),
        Equipo.from_api(equipo_api(2, Marca="HP")),
    ]

    assert [e.id for e in controlador.buscar("maría")] == [1]
    assert [e.id for e in controlador.buscar("hp")] == [2]
    assert len(controlador.buscar("  ")) == 2
