# main.py
import asyncio
import logging
from dotenv import load_dotenv
from colorama import Fore
from gestor_it.almacen import SqliteStore
from gestor_it.api import ApiClient
from gestor_it.auth import SessionManager
from gestor_it.config import cargar_configuracion, configurar_logging
from gestor_it.menus import pantalla_login, mostrar_menu_principal
from gestor_it.notificaciones import NotificationCenter
from gestor_it.ui import mostrar_encabezado

async def main():
    """
    Inicializa el almacén de sesión y el cliente del API, restaura la sesión
    guardada y corre el bucle de la aplicación.
    """
    load_dotenv()
    config = cargar_configuracion()
    configurar_logging(config)

    almacen = SqliteStore(config.ruta_db)
    notificaciones = NotificationCenter()

    try:
        async with ApiClient(config.api_base_url, timeout=config.api_timeout) as api:
            sesion = SessionManager(almacen, api)
            sesion.restore()

            while True:
                if not sesion.autenticado and not await pantalla_login(sesion, notificaciones):
                    break
                await mostrar_menu_principal(api, sesion, notificaciones)
    finally:
        almacen.close()

    mostrar_encabezado("Fin del Programa")
    print(Fore.GREEN + "\n¡Gracias por usar IT Manager App!")

if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print(Fore.RED + "\n\nPrograma interrumpido por el usuario.")
    except Exception as e:
        logging.getLogger(__name__).exception("Error inesperado")
        print(Fore.RED + f"\n\n❌ Un error inesperado ha ocurrido: {str(e)}")
