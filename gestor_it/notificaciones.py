# gestor_it/notificaciones.py
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, List, Optional

from .config import DURACION_NOTIFICACION, TAMANO_HISTORIAL

EXITO = "success"
ERROR = "error"


@dataclass(frozen=True)
class Notificacion:
    texto: str
    tipo: str
    expira_en: float


class NotificationCenter:
    """
    Mantiene como máximo un mensaje transitorio visible.

    Un mensaje nuevo reemplaza al pendiente (no hay cola real). La expiración
    se comprueba contra el reloj inyectado, en `tick()` o al leer `actual`.
    """

    def __init__(self, reloj: Callable[[], float] = time.monotonic,
                 duracion: float = DURACION_NOTIFICACION):
        self.reloj = reloj
        self.duracion = duracion
        self._slot = deque(maxlen=1)
        self.historial = deque(maxlen=TAMANO_HISTORIAL)

    def notify(self, texto: str, tipo: str = EXITO) -> Notificacion:
        notificacion = Notificacion(texto, tipo, self.reloj() + self.duracion)
        # maxlen=1: añadir desplaza al mensaje anterior
        self._slot.append(notificacion)
        self.historial.append(notificacion)
        return notificacion

    def exito(self, texto: str) -> Notificacion:
        return self.notify(texto, EXITO)

    def error(self, texto: str) -> Notificacion:
        return self.notify(texto, ERROR)

    def dismiss(self):
        self._slot.clear()

    def tick(self):
        if self._slot and self.reloj() >= self._slot[0].expira_en:
            self._slot.clear()

    @property
    def actual(self) -> Optional[Notificacion]:
        self.tick()
        return self._slot[0] if self._slot else None

    def ultimas(self, cantidad: int = 5) -> List[Notificacion]:
        return list(self.historial)[-cantidad:]
