# gestor_it/api.py
import logging
from typing import Any, Dict, Optional

import httpx

from .errores import ApiError, NetworkError

logger = logging.getLogger(__name__)

MENSAJE_SIN_CONEXION = "Error de conexión con el API."
DEFAULT_TIMEOUT = 10.0


class ApiClient:
    """Cliente del API REST de equipos.

    Convierte los fallos de transporte en `NetworkError` y las respuestas
    no 2xx en `ApiError` con el mensaje del servidor cuando lo envía.
    """

    def __init__(self, base_url: str, timeout: float = DEFAULT_TIMEOUT,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        await self.close()
        return False

    async def close(self) -> None:
        await self._client.aclose()

    async def request(self, metodo: str, ruta: str, *, token: Optional[str] = None,
                      json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = await self._client.request(metodo, ruta, headers=headers, json=json)
        except httpx.HTTPError as exc:
            logger.warning("%s %s falló: %s", metodo, ruta, exc)
            raise NetworkError(MENSAJE_SIN_CONEXION) from exc

        datos = _leer_json(response)
        if response.is_success:
            return datos

        mensaje = datos.get("message") if isinstance(datos.get("message"), str) else None
        logger.warning("%s %s respondió %s: %s", metodo, ruta, response.status_code, mensaje)
        raise ApiError(response.status_code, mensaje)

    async def get(self, ruta: str, *, token: Optional[str] = None) -> Dict[str, Any]:
        return await self.request("GET", ruta, token=token)

    async def post(self, ruta: str, json: Dict[str, Any], *, token: Optional[str] = None) -> Dict[str, Any]:
        return await self.request("POST", ruta, token=token, json=json)

    async def put(self, ruta: str, json: Dict[str, Any], *, token: Optional[str] = None) -> Dict[str, Any]:
        return await self.request("PUT", ruta, token=token, json=json)

    async def delete(self, ruta: str, *, token: Optional[str] = None) -> Dict[str, Any]:
        return await self.request("DELETE", ruta, token=token)


def _leer_json(response: httpx.Response) -> Dict[str, Any]:
    """Devuelve el cuerpo JSON como dict; un cuerpo vacío o no JSON cuenta como {}."""
    try:
        datos = response.json()
    except ValueError:
        return {}
    return datos if isinstance(datos, dict) else {}
