# gestor_it/modules/gestion_equipos.py
import os
from datetime import datetime
from typing import List, Optional

from colorama import Fore, Style

from .. import ui
from ..auth import SessionManager, tiene_permiso
from ..config import ESTADOS_EQUIPO
from ..controlador import Borrador
from ..equipos import Equipo, EquiposController, CAMPOS_EQUIPO, ETIQUETAS
from ..notificaciones import NotificationCenter
from ..reportes import exportar_equipos_excel

# --- FUNCIONES AUXILIARES PARA EL FORMULARIO ---

def _seleccionar_opcion(titulo: str, items: List[str], actual: str = "") -> Optional[str]:
    """Muestra una lista numerada; Enter conserva el valor actual."""
    print(Fore.CYAN + f"\n{titulo}:")
    for i, item in enumerate(items, 1):
        print(f"  {i}. {item}")
    print()

    valor = ui.solicitar_input(Fore.YELLOW + "Opción: ")
    if not valor:
        return actual or None
    try:
        seleccion_idx = int(valor) - 1
        if 0 <= seleccion_idx < len(items):
            return items[seleccion_idx]
        return None
    except ValueError:
        return None

def _procesar_campo(controlador: EquiposController, campo: str, datos: dict, editando: bool) -> bool:
    """Procesa un único campo del formulario. Devuelve True si se puede avanzar."""
    if campo == "TipoEquipo" and controlador.catalogo:
        seleccion = _seleccionar_opcion("Seleccione un Tipo de Equipo", [t.nombre for t in controlador.catalogo], datos[campo])
        if not seleccion: return False
        datos[campo] = seleccion
        return True

    if campo == "Estado":
        # El estado solo se cambia al editar; un equipo nuevo queda Disponible
        if not editando: return True
        seleccion = _seleccionar_opcion("Seleccione el Estado", ESTADOS_EQUIPO, datos[campo])
        if not seleccion: return False
        datos[campo] = seleccion
        return True

    valor = ui.solicitar_input(Fore.YELLOW + f"Ingrese {ETIQUETAS[campo]}: ", default=datos.get(campo, ""))
    if campo == "FechaCompra" and valor:
        try:
            datetime.strptime(valor, "%Y-%m-%d")
        except ValueError:
            print(Fore.RED + "Fecha inválida. Use el formato AAAA-MM-DD."); ui.pausar_pantalla()
            return False
    datos[campo] = valor.upper() if campo in ("NumeroSerie", "NumeroEquipo") else valor
    return True

async def _formulario_equipo(controlador: EquiposController, borrador: Borrador, sesion: SessionManager):
    titulo = "Editar Equipo" if borrador.editando else "Crear Nuevo Equipo"
    indice_actual = 0
    try:
        while indice_actual < len(CAMPOS_EQUIPO):
            campo_actual = CAMPOS_EQUIPO[indice_actual]
            ui.mostrar_formulario_interactivo(titulo, CAMPOS_EQUIPO, borrador.datos, indice_actual, sesion.usuario)
            if _procesar_campo(controlador, campo_actual, borrador.datos, borrador.editando):
                indice_actual += 1

        ui.mostrar_formulario_interactivo(titulo, CAMPOS_EQUIPO, borrador.datos, -1, sesion.usuario)
        if ui.solicitar_input(Fore.YELLOW + "\n¿Guardar el equipo? (s/n): ").lower() != 's':
            controlador.cancel()
            print(Fore.CYAN + "\n🚫 Operación cancelada.")
            ui.pausar_pantalla()
            return
        await controlador.submit(borrador)
    except KeyboardInterrupt:
        controlador.cancel()
        print(Fore.CYAN + "\n\n🚫 Operación cancelada.")
        ui.pausar_pantalla()

def _pedir_equipo(controlador: EquiposController, accion: str) -> Optional[Equipo]:
    valor = ui.solicitar_input(Fore.YELLOW + f"ID del equipo a {accion}: ")
    equipo = next((e for e in controlador.items if str(e.id) == valor), None)
    if equipo is None:
        print(Fore.RED + "No existe un equipo con ese ID."); ui.pausar_pantalla()
    return equipo

def _buscar_equipos(controlador: EquiposController, sesion: SessionManager):
    texto = ui.solicitar_input(Fore.YELLOW + "Texto a buscar (marca, modelo, serie, número, asignado): ")
    ui.mostrar_encabezado(f"Resultados para '{texto}'", usuario=sesion.usuario)
    ui.mostrar_tabla_equipos(controlador.buscar(texto))
    ui.pausar_pantalla()

def _exportar_equipos(controlador: EquiposController, notificaciones: NotificationCenter):
    nombre = f"inventario_equipos_{datetime.now().strftime('%Y%m%d_%H%M%S')}.xlsx"
    try:
        ruta = exportar_equipos_excel(controlador.items, os.path.join("reportes", nombre))
    except ValueError as e:
        notificaciones.error(str(e))
        return
    notificaciones.exito(f"Reporte generado en {ruta}")

# --- PANTALLA PRINCIPAL DE EQUIPOS ---

async def pantalla_equipos(controlador: EquiposController, sesion: SessionManager, notificaciones: NotificationCenter):
    """Bucle de la pantalla de Gestión de Equipos mientras el controlador esté montado."""
    await controlador.list()
    await controlador.load_reference_data()

    while controlador.montado:
        ui.mostrar_encabezado("Gestión de Equipos", usuario=sesion.usuario)
        ui.mostrar_notificacion(notificaciones)
        ui.mostrar_tabla_equipos(controlador.items)

        opciones = []
        if tiene_permiso(sesion, "registrar_equipo"):
            opciones.append(("Nuevo Equipo", "nuevo"))
        if tiene_permiso(sesion, "editar_equipo"):
            opciones.append(("Editar Equipo", "editar"))
        if tiene_permiso(sesion, "eliminar_equipo"):
            opciones.append(("Eliminar Equipo", "eliminar"))
        opciones += [("Buscar", "buscar"), ("Refrescar", "refrescar")]
        if tiene_permiso(sesion, "generar_reportes"):
            opciones.append(("Exportar a Excel", "exportar"))
        opciones.append(("Volver al Menú Principal", "volver"))

        ui.mostrar_menu([texto for texto, _ in opciones])
        opcion = ui.solicitar_input(Fore.YELLOW + "Seleccione una opción: ")
        accion = {str(i): clave for i, (_, clave) in enumerate(opciones, 1)}.get(opcion)
        if accion is None:
            print(Fore.RED + "Opción no válida." + Style.RESET_ALL); ui.pausar_pantalla()
            continue

        if accion == "nuevo":
            await _formulario_equipo(controlador, controlador.begin_create(), sesion)
        elif accion == "editar":
            equipo = _pedir_equipo(controlador, "editar")
            if equipo: await _formulario_equipo(controlador, controlador.begin_edit(equipo), sesion)
        elif accion == "eliminar":
            equipo = _pedir_equipo(controlador, "eliminar")
            if equipo: await controlador.delete(equipo.id)
        elif accion == "buscar":
            _buscar_equipos(controlador, sesion)
        elif accion == "refrescar":
            await controlador.list()
        elif accion == "exportar":
            _exportar_equipos(controlador, notificaciones)
        elif accion == "volver":
            break
