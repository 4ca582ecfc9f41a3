# gestor_it/almacen.py
import logging
import os
import sqlite3
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class KeyValueStore:
    """Almacenamiento persistente del cliente: valores de texto bajo claves fijas."""

    def get(self, clave: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, clave: str, valor: str) -> None:
        raise NotImplementedError

    def remove(self, clave: str) -> None:
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    def __init__(self, valores: Optional[Dict[str, str]] = None):
        self.valores = dict(valores or {})

    def get(self, clave: str) -> Optional[str]:
        return self.valores.get(clave)

    def set(self, clave: str, valor: str) -> None:
        self.valores[clave] = valor

    def remove(self, clave: str) -> None:
        self.valores.pop(clave, None)


class SqliteStore(KeyValueStore):
    """
    Guarda las entradas en una tabla SQLite de dos columnas.
    Ocupa el lugar del almacenamiento local del navegador.
    """
    def __init__(self, db_name: str):
        self.db_name = db_name
        self.conn = None
        self.connect()
        self.create_tables()

    def connect(self):
        """Conecta a la base de datos y configura el modo de fila."""
        directorio = os.path.dirname(self.db_name)
        if directorio and not os.path.exists(directorio):
            os.makedirs(directorio)
            logger.info("Directorio '%s' creado.", directorio)
        try:
            self.conn = sqlite3.connect(self.db_name)
            self.conn.row_factory = sqlite3.Row
        except sqlite3.Error:
            logger.exception("Error al conectar a la base de datos %s", self.db_name)
            raise

    def close(self):
        """Cierra la conexión a la base de datos."""
        if self.conn: self.conn.close()

    def execute_query(self, query: str, params: tuple = ()) -> sqlite3.Cursor:
        cursor = self.conn.cursor()
        cursor.execute(query, params)
        return cursor

    def commit(self):
        self.conn.commit()

    def create_tables(self):
        self.execute_query('CREATE TABLE IF NOT EXISTS almacen (clave TEXT PRIMARY KEY, valor TEXT NOT NULL)')
        self.commit()

    # --- Operaciones clave/valor ---
    def get(self, clave: str) -> Optional[str]:
        row = self.execute_query("SELECT valor FROM almacen WHERE clave = ?", (clave,)).fetchone()
        return row['valor'] if row else None

    def set(self, clave: str, valor: str) -> None:
        self.execute_query(
            "INSERT OR REPLACE INTO almacen (clave, valor) VALUES (?, ?)",
            (clave, valor))
        self.commit()

    def remove(self, clave: str) -> None:
        self.execute_query("DELETE FROM almacen WHERE clave = ?", (clave,)); self.commit()
