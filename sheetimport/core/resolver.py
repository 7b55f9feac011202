"""Selection and ordering of cell descriptions for a sheet section."""

from __future__ import annotations

from .schema import CellDescription, SheetDescription, SheetSection


def resolve_cell_descriptions(
    section: SheetSection | str,
    sheet: SheetDescription,
) -> tuple[CellDescription, ...]:
    """Return the section's descriptions with addressless fields last.

    The sort is stable, so addressed fields keep their declared order and so
    do addressless ones. Addressless (virtual) fields are evaluated after the
    fields they may read from.
    """

    section = SheetSection(section)
    selected = [cell for cell in sheet.content if cell.section is section]
    return tuple(sorted(selected, key=lambda cell: not cell.address))


__all__ = ["resolve_cell_descriptions"]
