"""
Bulkhead configuration for multi-row wet wells
Schedule of open bulkheads and the virtual outlets they form

Bulkheads are stacked in rows across a number of slots. The schedule
gives, for each date, the number of open (missing) bulkheads in every row
of every wet well. Each row with openings becomes a line-sink "virtual
outlet" at the row midpoint.
"""
import numpy as np
import pandas as pd
from .config import DEFAULT_CONFIG

FEET_PER_METER = 3.28084


class ConfigurationError(Exception):
    """Custom exception for invalid bulkhead configurations"""
    pass


class VirtualOutlet:
    """One synthetic withdrawal point in a wet well"""

    def __init__(self, elevation, width, half_height, hlc):
        self.elevation = elevation    # m
        self.width = width            # m
        self.half_height = half_height  # m
        self.hlc = hlc                # head-loss coefficient

    @property
    def area(self):
        """Width times half-height [m2]"""
        return self.width * self.half_height

    def __repr__(self):
        return (f"VirtualOutlet(elevation={self.elevation:.3f}, width={self.width:.3f}, "
                f"half_height={self.half_height:.3f}, hlc={self.hlc:.2f})")


def _to_meters(value, units):
    units = units.lower()
    if units in ('ft', 'foot', 'feet'):
        return float(value) / FEET_PER_METER
    if units in ('m', 'meter', 'meters', 'metre', 'metres'):
        return float(value)
    raise ConfigurationError(f"Units must be feet or meters, got '{units}'")


def make_schedule(entries, num_ww, num_rows):
    """
    Build a schedule DataFrame

    Parameters:
    -----------
    entries : dict
        {date: open-bulkhead counts shaped [well][row]}
    num_ww, num_rows : int
        Number of wet wells and bulkhead rows

    Returns:
    --------
    DataFrame indexed by timestamp, one column per (well, row)
    """
    columns = pd.MultiIndex.from_product([range(num_ww), range(num_rows)], names=['well', 'row'])
    index = pd.DatetimeIndex([pd.Timestamp(d) for d in entries.keys()], name='date')
    rows = []
    for counts in entries.values():
        counts = np.asarray(counts, dtype=np.int64)
        if counts.shape != (num_ww, num_rows):
            raise ConfigurationError(
                f"Schedule entry has shape {counts.shape}, expected ({num_ww}, {num_rows})"
            )
        rows.append(counts.reshape(-1))
    schedule = pd.DataFrame(rows, index=index, columns=columns)
    return schedule.sort_index()


class BulkheadConfig:
    """Wet-well bulkhead geometry and schedule (lengths in meters)"""

    def __init__(self, num_ww, ww_names, num_slots, num_rows, bh_width, bh_height,
                 base_elev, schedule, hlc_base=0.5, hlc_inc=0.2):
        """
        Parameters:
        -----------
        num_ww : int
            Number of wet wells
        ww_names : list of str
            Wet-well outlet names
        num_slots : list of int
            Bulkhead slots per wet well
        num_rows : int
            Bulkhead rows
        bh_width, bh_height : float
            Bulkhead width and height [m]
        base_elev : float
            Baseline (bottom of row 0) elevation [m]
        schedule : DataFrame or dict
            Open-bulkhead counts by date (see make_schedule)
        hlc_base, hlc_inc : float
            Baseline head-loss coefficient and increment per outlet
        """
        self.num_ww = int(num_ww)
        self.ww_names = list(ww_names)
        self.num_slots = [int(n) for n in num_slots]
        self.num_rows = int(num_rows)
        self.bh_width = float(bh_width)
        self.bh_height = float(bh_height)
        self.base_elev = float(base_elev)
        self.hlc_base = float(hlc_base)
        self.hlc_inc = float(hlc_inc)
        if isinstance(schedule, dict):
            schedule = make_schedule(schedule, self.num_ww, self.num_rows)
        self.schedule = schedule.sort_index()

    @classmethod
    def from_units(cls, num_ww, ww_names, num_slots, num_rows,
                   bh_width, bh_height, base_elev, schedule,
                   width_units='feet', height_units='feet', elev_units='feet',
                   hlc_base=0.5, hlc_inc=0.2):
        """Build a configuration from lengths in feet or meters"""
        return cls(num_ww, ww_names, num_slots, num_rows,
                   _to_meters(bh_width, width_units),
                   _to_meters(bh_height, height_units),
                   _to_meters(base_elev, elev_units),
                   schedule, hlc_base=hlc_base, hlc_inc=hlc_inc)

    @classmethod
    def libby_defaults(cls, ww_names, num_slots, schedule):
        """Libby Dam geometry: 2 wells, 18 rows of 27 x 10.34 ft bulkheads above 2222 ft"""
        return cls.from_units(2, ww_names, num_slots, 18, 27.0, 10.34, 2222.0, schedule)

    def well_index(self, name):
        """Index of a wet well by name"""
        try:
            return self.ww_names.index(name)
        except ValueError:
            raise KeyError(f"Unknown wet well '{name}'") from None

    def schedule_at(self, date):
        """
        Schedule entry in force on a date: the latest one not after it,
        or the first entry for dates before the schedule starts

        Returns:
        --------
        (Timestamp, ndarray shaped [well, row])
        """
        if self.schedule.empty:
            raise ConfigurationError("Bulkhead schedule is empty")
        pos = self.schedule.index.searchsorted(pd.Timestamp(date), side='right') - 1
        pos = max(pos, 0)
        counts = self.schedule.iloc[pos].to_numpy(dtype=np.int64)
        return self.schedule.index[pos], counts.reshape(self.num_ww, self.num_rows)

    def open_bulkheads(self, well, date):
        """Open bulkheads per row (bottom row first) for one wet well"""
        _, counts = self.schedule_at(date)
        return counts[well]

    def __repr__(self):
        return (f"BulkheadConfig(num_ww={self.num_ww}, num_rows={self.num_rows}, "
                f"bh={self.bh_width:.3f}x{self.bh_height:.3f} m, base={self.base_elev:.3f} m)")


class BulkheadValidator:
    """Validates a bulkhead configuration"""

    def __init__(self, config, verbose=True):
        self.config = config
        self.verbose = verbose
        self.errors = []
        self.warnings = []

    def validate_all(self):
        """
        Run all validation checks

        Raises:
            ConfigurationError: If any validation fails
        """
        self.errors = []
        self.warnings = []
        cfg = self.config

        if cfg.num_rows <= 0:
            self.errors.append("Number of bulkhead rows must be positive")
        if cfg.bh_width <= 0.0 or cfg.bh_height <= 0.0:
            self.errors.append("Bulkhead width and height must be positive")

        expected = cfg.num_ww * cfg.num_rows
        if cfg.schedule.shape[1] != expected:
            self.errors.append(
                f"Schedule has {cfg.schedule.shape[1]} columns, expected {expected} "
                f"({cfg.num_ww} wet wells x {cfg.num_rows} rows)"
            )
        elif cfg.schedule.empty:
            self.errors.append("Bulkhead schedule has no dates")

        for nw in range(cfg.num_ww):
            if nw >= len(cfg.num_slots) or cfg.num_slots[nw] <= 0:
                self.errors.append(f"Check the number of bulkhead slots for wet well {nw + 1}")
            elif cfg.schedule.shape[1] == expected and not cfg.schedule.empty:
                max_open = int(cfg.schedule.to_numpy().reshape(-1, cfg.num_ww, cfg.num_rows)[:, nw, :].max())
                if cfg.num_slots[nw] < max_open:
                    self.errors.append(
                        f"Number of bulkhead slots for wet well {nw + 1} is less than the "
                        f"maximum number of open slots ({max_open}) for that wet well"
                    )
            if nw >= len(cfg.ww_names) or not cfg.ww_names[nw]:
                self.errors.append("You must specify names for the wet well outlets")

        if not cfg.schedule.empty and (cfg.schedule.to_numpy() < 0).any():
            self.errors.append("Open bulkhead counts must be non-negative")

        if self.verbose:
            for warning in self.warnings:
                print(f"  WARNING: {warning}")
            for error in self.errors:
                print(f"  ERROR: {error}")

        if self.errors:
            raise ConfigurationError(f"Bulkhead configuration invalid: {'; '.join(self.errors)}")
        return True


def build_virtual_outlets(config, well, date, wsel, settings=None):
    """
    Configure the virtual outlets of a wet well on a date

    Rows are walked from the bottom. Partially open rows add an outlet
    as wide as their openings; a fully open row adds a full-width outlet
    and ends the walk. A full-width outlet is then added half a row above
    the top of the stack when the walk found nothing or the top row is not
    fully open. Outlets stay at least the surface clearance below the water
    surface.

    Parameters:
    -----------
    config : BulkheadConfig
    well : int
        Wet-well index
    date : datetime-like
        Evaluation date
    wsel : float
        Water-surface elevation [m]
    settings : Config, optional
        Supplies the surface clearance

    Returns:
    --------
    list of VirtualOutlet, index 0 topmost
    """
    settings = settings or DEFAULT_CONFIG
    clearance = settings.surface_clearance
    nopen = config.open_bulkheads(well, date)
    nslots = config.num_slots[well]

    outlets = []
    for nr in range(config.num_rows):
        elev = config.base_elev + (nr + 0.5) * config.bh_height
        if elev > wsel - clearance:
            break
        if nopen[nr] > 0:
            outlets.append(VirtualOutlet(elev, nopen[nr] * config.bh_width, config.bh_height / 2.0,
                                         config.hlc_base + len(outlets) * config.hlc_inc))
            if nopen[nr] == nslots:
                break

    top = config.base_elev + (config.num_rows + 0.5) * config.bh_height
    if (not outlets or nopen[config.num_rows - 1] < nslots) and top <= wsel - clearance:
        outlets.append(VirtualOutlet(top, nslots * config.bh_width, config.bh_height / 2.0,
                                     config.hlc_base + len(outlets) * config.hlc_inc))

    outlets.reverse()
    return outlets
