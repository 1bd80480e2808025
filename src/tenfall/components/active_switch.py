from dataclasses import dataclass

@dataclass(slots=True)
class ActiveSwitch:
    """Per-cell occupancy flag.

    active: True if the cell currently holds a tile; False if cleared/empty.
    The value itself lives in a separate TileValue component.
    """
    active: bool = True
