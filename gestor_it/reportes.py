# gestor_it/reportes.py
import os
from typing import List

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, Border, Side, PatternFill
from openpyxl.utils import get_column_letter

from .equipos import Equipo

ENCABEZADOS = [
    "ID", "TIPO", "MARCA", "MODELO", "NÚMERO DE SERIE", "NÚMERO DE EQUIPO",
    "DIRECCIÓN IP", "FECHA DE COMPRA", "ESTADO", "ASIGNADO A"
]
COLUMNA_ESTADO = 9

COLORES_ESTADO = {
    "Disponible": "C6EFCE", "Asignado": "FFEB9C",
    "En Mantenimiento": "DDEBF7", "Baja": "FFC7CE"
}


def exportar_equipos_excel(equipos: List[Equipo], ruta: str) -> str:
    """Genera un reporte Excel con los equipos de la caché y devuelve la ruta del archivo."""
    if not equipos:
        raise ValueError("No hay equipos para generar un reporte.")

    wb = Workbook()
    ws = wb.active
    ws.title = "Inventario de Equipos"

    header_fill = PatternFill(start_color="4F81BD", end_color="4F81BD", fill_type="solid")
    header_font = Font(color="FFFFFF", bold=True)
    border = Border(left=Side(style='thin'), right=Side(style='thin'), top=Side(style='thin'), bottom=Side(style='thin'))

    for col_num, encabezado in enumerate(ENCABEZADOS, 1):
        ws.column_dimensions[get_column_letter(col_num)].width = max(15, len(encabezado) + 6)
        celda = ws.cell(row=1, column=col_num, value=encabezado)
        celda.fill = header_fill
        celda.font = header_font
        celda.alignment = Alignment(horizontal='center')
        celda.border = border

    for row_num, equipo in enumerate(equipos, 2):
        data_row = [
            equipo.id, equipo.tipo, equipo.marca, equipo.modelo, equipo.numero_serie,
            equipo.numero_equipo, equipo.direccion_ip or "", equipo.fecha_compra or "",
            equipo.estado, equipo.asignado_a or "Ninguno"
        ]
        for col_num, cell_value in enumerate(data_row, 1):
            cell = ws.cell(row=row_num, column=col_num, value=cell_value)
            cell.border = border

        color_hex = COLORES_ESTADO.get(equipo.estado)
        if color_hex:
            ws.cell(row=row_num, column=COLUMNA_ESTADO).fill = PatternFill(start_color=color_hex, end_color=color_hex, fill_type="solid")

    ws.freeze_panes = "A2"

    directorio = os.path.dirname(ruta)
    if directorio and not os.path.exists(directorio):
        os.makedirs(directorio)
    wb.save(ruta)
    return ruta
