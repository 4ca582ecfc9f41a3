# gestor_it/ui.py
import os
from typing import Dict, List, Optional
from colorama import init, Fore, Style, Back

from .auth import Usuario
from .equipos import Equipo, ETIQUETAS
from .notificaciones import NotificationCenter, EXITO

try:
    import msvcrt
    def get_char(): return msvcrt.getch().decode('utf-8', errors='ignore')
except ImportError:
    import sys, tty, termios
    def get_char():
        fd = sys.stdin.fileno()
        old_settings = termios.tcgetattr(fd)
        try:
            tty.setraw(sys.stdin.fileno()); ch = sys.stdin.read(1)
        finally:
            termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)
        return ch

init(autoreset=True)

def mostrar_encabezado(titulo: str, ancho: int = 80, color: str = Fore.WHITE, usuario: Optional[Usuario] = None):
    os.system('cls' if os.name == 'nt' else 'clear')
    print(Fore.WHITE + Style.BRIGHT + "═" * ancho)
    print(Back.WHITE + Style.DIM + Fore.BLACK + " IT Manager App ".center(ancho, ' ') + Style.RESET_ALL)
    if usuario:
        info_usuario = f"{usuario.nombre_completo.title()} ({usuario.email}) / Rol: {usuario.rol}"
        print(Back.WHITE + Fore.BLACK + Style.BRIGHT + f" {info_usuario} ".center(ancho, ' ') + Style.RESET_ALL)
    else:
        print(Back.WHITE + Fore.BLACK + Style.BRIGHT + " Acceso para personal de IT ".center(ancho, ' ') + Style.RESET_ALL)
    print(Fore.WHITE + Style.BRIGHT + "═" * ancho + Style.RESET_ALL)
    print("\n" + color + Style.BRIGHT + f" {titulo.upper()} ".center(ancho, ' ') + Style.RESET_ALL)
    print(color + "─" * ancho + Style.RESET_ALL)

def mostrar_menu(opciones: List[str]):
    for i, opcion in enumerate(opciones, 1):
        print(Fore.YELLOW + f"{i}." + Style.RESET_ALL + f" {opcion}")
    print(Style.BRIGHT + Fore.WHITE + "═" * 80 + Style.RESET_ALL)

def pausar_pantalla():
    input(Fore.CYAN + "\nPresione Enter para continuar..." + Style.RESET_ALL)

def solicitar_input(prompt: str, default: str = "") -> str:
    return input(prompt + Style.RESET_ALL).strip() or default

def solicitar_contrasena_con_asteriscos(prompt: str) -> str:
    print(prompt, end="", flush=True); password = ""
    while True:
        char = get_char()
        if char in ('\r', '\n'): print(); break
        elif char in ('\b', '\x7f'):
            if len(password) > 0: print("\b \b", end="", flush=True); password = password[:-1]
        elif char == '\x03': raise KeyboardInterrupt
        else: password += char; print("*", end="", flush=True)
    return password

def confirmar(mensaje: str) -> bool:
    """Pide una confirmación explícita (s/n) antes de una acción irreversible."""
    print(Fore.YELLOW + f"\n⚠️  {mensaje}" + Style.RESET_ALL)
    return solicitar_input(Fore.CYAN + "Escriba 's' para confirmar: ").lower() == 's'

def mostrar_notificacion(notificaciones: NotificationCenter):
    """Muestra el mensaje vigente, si no ha expirado."""
    actual = notificaciones.actual
    if actual is None:
        return
    if actual.tipo == EXITO:
        print(Fore.GREEN + f"✅ {actual.texto}" + Style.RESET_ALL)
    else:
        print(Fore.RED + f"❌ {actual.texto}" + Style.RESET_ALL)

def mostrar_formulario_interactivo(titulo: str, campos: List[str], datos: Dict, indice_actual: int, usuario: Usuario):
    mostrar_encabezado(titulo, color=Fore.BLUE, usuario=usuario)
    print(Fore.CYAN + "💡 Complete los siguientes campos. Puede presionar Ctrl+C para cancelar." + Style.RESET_ALL)
    for i, campo in enumerate(campos):
        indicador = Fore.YELLOW + " -> " if i == indice_actual else "    "
        valor_mostrado = f"{Fore.GREEN}{datos.get(campo, '')}{Style.RESET_ALL}" if datos.get(campo) else ""
        print(f"{indicador}{ETIQUETAS[campo].ljust(30)}: {valor_mostrado}")
    print(Fore.WHITE + "─" * 80 + Style.RESET_ALL)

def mostrar_tabla_equipos(equipos: List[Equipo]):
    colores_estado = {
        "Disponible": Fore.GREEN, "Asignado": Fore.YELLOW,
        "En Mantenimiento": Fore.BLUE, "Baja": Fore.RED
    }
    print(f"{Fore.CYAN}{'ID':<6} {'TIPO':<14} {'MARCA / MODELO':<24} {'N° EQUIPO':<12} {'ESTADO':<17} {'ASIGNADO A'}{Style.RESET_ALL}")
    print(Fore.CYAN + "-" * 90 + Style.RESET_ALL)
    if not equipos:
        print(Fore.YELLOW + "No hay equipos registrados.")
    else:
        for equipo in equipos:
            marca_modelo = f"{equipo.marca} {equipo.modelo}".strip()
            if len(marca_modelo) > 23: marca_modelo = marca_modelo[:20] + "..."
            color = colores_estado.get(equipo.estado, Fore.WHITE)
            print(f"{str(equipo.id):<6} {equipo.tipo:<14} {marca_modelo:<24} {equipo.numero_equipo:<12} "
                  f"{color}{equipo.estado:<17}{Style.RESET_ALL} {equipo.asignado_a or 'Ninguno'}")
    print(Fore.CYAN + "-" * 90 + Style.RESET_ALL)
