"""
Exporter Module
Exports an EstimateReport to Excel and JSON formats.

Excel sheets:
- Summary
- Concrete
- Masonry
- Finishes
- Steel_Members
- Steel_Diameters
- DQE (when a priced estimate is given)
"""

import json
from pathlib import Path
from typing import Optional
from io import BytesIO
import pandas as pd
import logging

from ..estimate import EstimateReport
from ..pricing.dqe import DQE

logger = logging.getLogger(__name__)


def build_concrete_df(report: EstimateReport) -> pd.DataFrame:
    """Build concrete work-items DataFrame."""
    columns = [
        'Work Item', 'Dosage', 'Volume (m³)', 'Cement (bags)',
        'Sand (m³)', 'Gravel (m³)', 'Water (L)'
    ]
    data = []
    for index, item in enumerate(report.concrete.work_items):
        if item is None:
            data.append({
                'Work Item': f"#{index + 1}",
                'Dosage': 'not defined',
                'Volume (m³)': None,
                'Cement (bags)': None,
                'Sand (m³)': None,
                'Gravel (m³)': None,
                'Water (L)': None,
            })
            continue
        data.append({
            'Work Item': f"#{index + 1}",
            'Dosage': item.dosage_name,
            'Volume (m³)': round(item.volume_m3, 3),
            'Cement (bags)': item.materials.cement_bags,
            'Sand (m³)': round(item.materials.sand_m3, 2),
            'Gravel (m³)': round(item.materials.gravel_m3, 2),
            'Water (L)': round(item.materials.water_l, 0),
        })

    if not data:
        return pd.DataFrame(columns=columns)

    df = pd.DataFrame(data, columns=columns)

    # Add totals row
    totals = report.concrete.total_materials
    df = pd.concat([df, pd.DataFrame([{
        'Work Item': 'TOTAL',
        'Dosage': '',
        'Volume (m³)': round(report.concrete.total_volume_m3, 3),
        'Cement (bags)': totals.cement_bags,
        'Sand (m³)': round(totals.sand_m3, 2),
        'Gravel (m³)': round(totals.gravel_m3, 2),
        'Water (L)': round(totals.water_l, 0),
    }])], ignore_index=True)

    return df


def build_masonry_df(report: EstimateReport) -> pd.DataFrame:
    """Build masonry DataFrame."""
    masonry = report.masonry
    if masonry is None:
        return pd.DataFrame(columns=['Item', 'Value', 'Unit'])

    data = [
        {'Item': 'Wall Surface', 'Value': round(masonry.total_surface_m2, 2), 'Unit': 'm²'},
        {'Item': 'Blocks per m²', 'Value': round(masonry.blocks_per_m2, 2), 'Unit': 'nos/m²'},
        {'Item': 'Blocks Needed', 'Value': masonry.blocks_needed, 'Unit': 'nos'},
    ]
    if masonry.mortar is not None:
        data += [
            {'Item': 'Mortar Volume', 'Value': round(masonry.mortar.volume_m3, 3), 'Unit': 'm³'},
            {'Item': 'Mortar Cement', 'Value': masonry.mortar.cement_bags, 'Unit': 'bags'},
            {'Item': 'Mortar Sand', 'Value': round(masonry.mortar.sand_m3, 2), 'Unit': 'm³'},
        ]
    return pd.DataFrame(data)


def build_finishes_df(report: EstimateReport) -> pd.DataFrame:
    """Build plaster and waterproofing DataFrame."""
    data = []

    plaster = report.plaster
    if plaster is None:
        data.append({'Finish': 'Plaster', 'Item': 'Status', 'Value': 'not computable', 'Unit': ''})
    elif not plaster.has_result:
        data.append({'Finish': 'Plaster', 'Item': 'Status', 'Value': 'no surface defined', 'Unit': ''})
    else:
        data += [
            {'Finish': 'Plaster', 'Item': 'Surface', 'Value': round(plaster.total_surface_m2, 2), 'Unit': 'm²'},
            {'Finish': 'Plaster', 'Item': 'Volume', 'Value': round(plaster.total_volume_m3, 3), 'Unit': 'm³'},
            {'Finish': 'Plaster', 'Item': 'Cement', 'Value': plaster.materials.cement_bags, 'Unit': 'bags'},
            {'Finish': 'Plaster', 'Item': 'Sand', 'Value': round(plaster.materials.sand_m3, 2), 'Unit': 'm³'},
        ]

    waterproofing = report.waterproofing
    if waterproofing is None:
        data.append({'Finish': 'Waterproofing', 'Item': 'Status', 'Value': 'not computable', 'Unit': ''})
    elif not waterproofing.has_result:
        data.append({'Finish': 'Waterproofing', 'Item': 'Status', 'Value': 'no surface defined', 'Unit': ''})
    else:
        data += [
            {'Finish': 'Waterproofing', 'Item': 'Surface', 'Value': round(waterproofing.total_surface_m2, 2), 'Unit': 'm²'},
            {'Finish': 'Waterproofing', 'Item': 'Product', 'Value': round(waterproofing.total_product_kg, 1), 'Unit': 'kg'},
        ]

    return pd.DataFrame(data)


def build_steel_members_df(report: EstimateReport) -> pd.DataFrame:
    """Build steel members DataFrame."""
    columns = [
        'Member', 'Longitudinal', 'Longitudinal (kg)', 'Ties',
        'Tie Count', 'Transversal (kg)', 'Total (kg)'
    ]
    data = []
    for index, member in enumerate(report.steel.members):
        if member is None:
            data.append({'Member': f"#{index + 1}", 'Longitudinal': 'not computable'})
            continue
        data.append({
            'Member': member.name or f"#{index + 1}",
            'Longitudinal': f"HA{member.longitudinal_diameter}",
            'Longitudinal (kg)': round(member.longitudinal_weight_kg, 2),
            'Ties': f"HA{member.transversal_diameter}",
            'Tie Count': member.tie_count,
            'Transversal (kg)': round(member.transversal_weight_kg, 2),
            'Total (kg)': round(member.total_weight_kg, 2),
        })
    return pd.DataFrame(data, columns=columns)


def build_steel_diameters_df(report: EstimateReport) -> pd.DataFrame:
    """Build steel by diameter DataFrame."""
    columns = ['Diameter', 'Length (m)', 'Weight (kg)', 'Commercial Bars (12 m)']
    data = [
        {
            'Diameter': f"HA{entry.diameter}",
            'Length (m)': round(entry.length_m, 2),
            'Weight (kg)': round(entry.weight_kg, 2),
            'Commercial Bars (12 m)': entry.commercial_bars,
        }
        for entry in report.steel.by_diameter.values()
    ]
    return pd.DataFrame(data, columns=columns)


def build_summary_df(report: EstimateReport) -> pd.DataFrame:
    """Build summary DataFrame."""
    masonry = report.masonry
    data = [
        {'Item': 'Total Concrete', 'Value': round(report.concrete.total_volume_m3, 3), 'Unit': 'm³'},
        {'Item': 'Concrete Cement', 'Value': report.concrete.total_materials.cement_bags, 'Unit': 'bags'},
        {'Item': 'Wall Surface', 'Value': round(report.wall_surface.value, 2), 'Unit': 'm²'},
        {'Item': 'Blocks', 'Value': masonry.blocks_needed if masonry else '-', 'Unit': 'nos'},
        {'Item': 'Total Steel', 'Value': round(report.steel.total_weight_kg, 1), 'Unit': 'kg'},
        {'Item': 'Total Steel', 'Value': round(report.steel.total_weight_kg / 1000, 3), 'Unit': 'tonnes'},
    ]
    return pd.DataFrame(data)


def build_dqe_df(dqe: DQE) -> pd.DataFrame:
    """Build priced estimate DataFrame."""
    columns = ['Section', 'Description', 'Quantity', 'Unit', 'Unit Price', 'Amount']
    data = [
        {
            'Section': line.section,
            'Description': line.description,
            'Quantity': round(line.quantity, 3),
            'Unit': line.unit,
            'Unit Price': line.unit_price,
            'Amount': round(line.amount, 2) if line.amount is not None else None,
        }
        for line in dqe.lines
    ]
    df = pd.DataFrame(data, columns=columns)
    if len(df) > 0:
        df = pd.concat([df, pd.DataFrame([{
            'Section': 'TOTAL',
            'Description': dqe.currency,
            'Amount': round(dqe.total, 2),
        }])], ignore_index=True)
    return df


def export_to_excel(
    report: EstimateReport,
    filepath: Optional[Path] = None,
    dqe: Optional[DQE] = None,
) -> BytesIO:
    """
    Export an estimate to an Excel file with one sheet per tab.

    Args:
        report: EstimateReport to export
        filepath: Optional file path to save (if None, returns BytesIO)
        dqe: Optional priced estimate, written to a DQE sheet

    Returns:
        BytesIO buffer with Excel file
    """
    sheets = {
        'Summary': build_summary_df(report),
        'Concrete': build_concrete_df(report),
        'Masonry': build_masonry_df(report),
        'Finishes': build_finishes_df(report),
        'Steel_Members': build_steel_members_df(report),
        'Steel_Diameters': build_steel_diameters_df(report),
    }
    if dqe is not None:
        sheets['DQE'] = build_dqe_df(dqe)

    buffer = BytesIO()

    with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
        for sheet_name, df in sheets.items():
            df.to_excel(writer, sheet_name=sheet_name, index=False)

        # Format columns width
        for sheet_name in writer.sheets:
            worksheet = writer.sheets[sheet_name]
            for column in worksheet.columns:
                lengths = [len(str(cell.value)) for cell in column if cell.value is not None]
                max_length = max(lengths, default=0)
                column_letter = column[0].column_letter
                worksheet.column_dimensions[column_letter].width = min(max_length + 2, 60)

    buffer.seek(0)

    # Optionally save to file
    if filepath:
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, 'wb') as f:
            f.write(buffer.getvalue())
        buffer.seek(0)
        logger.info(f"Excel exported to: {filepath}")

    return buffer


def export_to_json(
    report: EstimateReport,
    filepath: Optional[Path] = None,
    dqe: Optional[DQE] = None,
    indent: int = 2
) -> str:
    """
    Export an estimate to JSON.

    Args:
        report: EstimateReport to export
        filepath: Optional file path to save
        dqe: Optional priced estimate, added under "dqe"
        indent: JSON indentation

    Returns:
        JSON string
    """
    json_data = report.to_dict()
    if dqe is not None:
        json_data["dqe"] = dqe.to_dict()
    json_str = json.dumps(json_data, indent=indent, ensure_ascii=False)

    if filepath:
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, 'w', encoding='utf-8') as f:
            f.write(json_str)
        logger.info(f"JSON exported to: {filepath}")

    return json_str
