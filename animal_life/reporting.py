"""
Animal Life — Herd Reports
Excel workbook export of the herd: animals, health and pending products.
"""

from typing import List
import logging

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

from .config import DAY_MS

logger = logging.getLogger(__name__)


HEADER_FILL = PatternFill(start_color="1F4E79", end_color="1F4E79", fill_type="solid")
HEADER_FONT = Font(bold=True, color="FFFFFF")
SICK_FILL = PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid")
PREGNANT_FILL = PatternFill(start_color="FFEB9C", end_color="FFEB9C", fill_type="solid")
THIN_BORDER = Border(
    left=Side(style='thin'), right=Side(style='thin'),
    top=Side(style='thin'), bottom=Side(style='thin')
)

ANIMAL_HEADERS = ['ID', 'Name', 'Species', 'Gender', 'Age (days)', 'Health', 'Happiness',
                  'Hunger', 'Mood', 'Generation', 'Breeding Value', 'Pregnant']
HEALTH_HEADERS = ['Animal ID', 'Name', 'Disease', 'Severity', 'Stage', 'Days Sick', 'Treatment']
PRODUCT_HEADERS = ['Product ID', 'Animal ID', 'Product', 'Quantity', 'Quality', 'Tier',
                   'Freshness', 'Value']


def _write_table(ws, title: str, headers: List[str], rows: List[list]):
    ws['A1'] = title
    ws['A1'].font = Font(bold=True, size=14)

    for col, header in enumerate(headers, 1):
        cell = ws.cell(row=3, column=col, value=header)
        cell.fill = HEADER_FILL
        cell.font = HEADER_FONT
        cell.border = THIN_BORDER

    for row_idx, row_data in enumerate(rows, 4):
        for col_idx, value in enumerate(row_data, 1):
            cell = ws.cell(row=row_idx, column=col_idx, value=value)
            cell.border = THIN_BORDER

    for col, header in enumerate(headers, 1):
        ws.column_dimensions[get_column_letter(col)].width = max(12, len(header) + 4)


def build_herd_workbook(simulation) -> Workbook:
    """Build the Animals / Health / Products workbook for a simulation."""
    wb = Workbook()
    registry = simulation.registry

    # ===== SHEET 1: Animals =====
    ws1 = wb.active
    ws1.title = "Animals"
    animal_rows = [
        [
            a.animal_id, a.name, a.species, a.gender.name.lower(), round(a.age_days, 1),
            round(a.stats.health, 3), round(a.stats.happiness, 3), round(a.stats.hunger, 3),
            a.behavior.mood.name.lower(), a.genetics.pedigree.generation,
            round(simulation.genetics.calculate_breeding_value(a.genetics), 3),
            "yes" if a.is_pregnant else "no",
        ]
        for a in registry.all()
    ]
    _write_table(ws1, f"HERD REPORT - DAY {simulation.current_day}", ANIMAL_HEADERS, animal_rows)

    for row_idx, animal in enumerate(registry.all(), 4):
        if registry.diseases_of(animal.animal_id):
            ws1.cell(row=row_idx, column=2).fill = SICK_FILL
        if animal.is_pregnant:
            ws1.cell(row=row_idx, column=12).fill = PREGNANT_FILL

    # ===== SHEET 2: Health =====
    ws2 = wb.create_sheet("Health")
    health_rows = []
    for animal_id, diseases in registry.all_diseases().items():
        animal = registry.get(animal_id)
        for d in diseases:
            health_rows.append([
                animal_id, animal.name, d.name, d.severity.name.lower(), d.stage.name.lower(),
                round(d.duration / DAY_MS, 1),
                d.current_treatment.treatment_id if d.current_treatment else "",
            ])
    _write_table(ws2, "ACTIVE DISEASES", HEALTH_HEADERS, health_rows)

    # ===== SHEET 3: Products =====
    ws3 = wb.create_sheet("Products")
    product_rows = [
        [p.product_id, p.animal_id, p.name, p.quantity, round(p.quality, 3), p.tier,
         round(p.freshness, 3), round(p.value * p.freshness, 2)]
        for p in simulation.get_all_pending_products()
    ]
    _write_table(ws3, "PENDING PRODUCTS", PRODUCT_HEADERS, product_rows)

    return wb


def export_herd_workbook(simulation, output_path: str) -> str:
    """Write the herd workbook to `output_path` (.xlsx) and return the path."""
    wb = build_herd_workbook(simulation)
    wb.save(output_path)
    logger.info(f"Herd report saved to {output_path}")
    return output_path
