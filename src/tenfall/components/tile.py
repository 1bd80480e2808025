from dataclasses import dataclass

@dataclass(slots=True)
class TileValue:
    """Numeric face of the tile occupying a cell.

    Only meaningful while the cell's ActiveSwitch is on; cleared cells keep
    their last value until refilled.
    """
    value: int = 0
