# gestor_it/menus.py
from colorama import Fore, Style
from . import ui
from . import router as vistas
from .api import ApiClient
from .auth import SessionManager
from .equipos import EquiposController
from .errores import AuthorizationError
from .modules.gestion_equipos import pantalla_equipos
from .notificaciones import NotificationCenter

INTENTOS_LOGIN = 3

async def pantalla_login(sesion: SessionManager, notificaciones: NotificationCenter) -> bool:
    """Pide credenciales hasta tres veces. Devuelve True si la sesión quedó autenticada."""
    username, intentos = "", 0
    while intentos < INTENTOS_LOGIN:
        ui.mostrar_encabezado("Inicio de Sesión")
        print("Bienvenido a IT Manager App.")
        print(Fore.WHITE + "─" * 80)
        ui.mostrar_notificacion(notificaciones)

        username = ui.solicitar_input(Fore.YELLOW + "👤 Usuario (vacío para salir): ", default=username)
        if not username: return False
        contrasena = ui.solicitar_contrasena_con_asteriscos(Fore.YELLOW + "🔑 Contraseña: ")
        if not contrasena: continue

        print(Fore.CYAN + "\nIngresando...", end="", flush=True)
        resultado = await sesion.login(username, contrasena)
        print("\r" + " " * 30 + "\r", end="", flush=True)

        if resultado.exito:
            notificaciones.exito("¡Autenticación exitosa!")
            return True
        notificaciones.error(resultado.mensaje)
        intentos += 1
    print(Fore.RED + "\n❌ Demasiados intentos fallidos."); return False

def _pantalla_inicio(sesion: SessionManager):
    ui.mostrar_encabezado("Dashboard", usuario=sesion.usuario)
    print(Fore.GREEN + f"¡Bienvenido, {sesion.usuario.nombre_completo or sesion.usuario.email}!\n")
    print(f"  {'Gestión de Equipos'.ljust(28)} Registro, edición y baja de equipos de IT.")
    print(f"  {'Gestión de Inventario'.ljust(28)} Control de existencias y movimientos.")
    print(f"  {'Reportes de Mantenimiento'.ljust(28)} Seguimiento de incidencias y reparaciones.")
    ui.pausar_pantalla()

def _pantalla_en_desarrollo(sesion: SessionManager, titulo: str):
    ui.mostrar_encabezado(titulo, usuario=sesion.usuario)
    print(Fore.CYAN + "Este módulo se encuentra en desarrollo.")
    ui.pausar_pantalla()

async def mostrar_menu_principal(api: ApiClient, sesion: SessionManager, notificaciones: NotificationCenter):
    """Bucle principal después de un inicio de sesión exitoso; termina al cerrar sesión."""
    navegador = vistas.ViewRouter(sesion)

    while sesion.autenticado:
        ui.mostrar_encabezado("Menú Principal", usuario=sesion.usuario)
        ui.mostrar_notificacion(notificaciones)

        entradas = navegador.entradas()
        ui.mostrar_menu([e.titulo for e in entradas] + ["↪️  Cerrar Sesión"])
        opcion = ui.solicitar_input(Fore.YELLOW + "Seleccione un módulo: ")

        if opcion == str(len(entradas) + 1):
            sesion.logout()
            print(Fore.GREEN + "\nSesión cerrada.")
            break

        entrada = {str(i): e for i, e in enumerate(entradas, 1)}.get(opcion)
        if entrada is None:
            print(Fore.RED + "\n❌ Opción no válida." + Style.RESET_ALL); ui.pausar_pantalla()
            continue

        try:
            navegador.ir_a(entrada.vista)
        except AuthorizationError as e:
            notificaciones.error(e.mensaje)
            continue

        if entrada.vista == vistas.EQUIPOS:
            controlador = navegador.montar(EquiposController(api, sesion, notificaciones, ui.confirmar))
            await pantalla_equipos(controlador, sesion, notificaciones)
        elif entrada.vista == vistas.DASHBOARD:
            _pantalla_inicio(sesion)
        else:
            _pantalla_en_desarrollo(sesion, entrada.titulo)
