"""
Configuration file parser for release temperature calculations
"""
import configparser
import os


class Config:
    """Configuration manager for withdrawal and wet-well mixing calculations"""

    def __init__(self, config_file=None):
        self.config_file = config_file
        self.config = configparser.ConfigParser(allow_no_value=True, inline_comment_prefixes=('#',))
        if config_file is not None:
            if not os.path.exists(config_file):
                raise FileNotFoundError(f"Configuration file not found: {config_file}")
            self.config.read(config_file)

    def getint(self, section, key, default=None):
        """Get integer value"""
        try:
            return self.config.getint(section, key)
        except (configparser.NoSectionError, configparser.NoOptionError, ValueError):
            return default

    def getfloat(self, section, key, default=None):
        """Get float value"""
        try:
            return self.config.getfloat(section, key)
        except (configparser.NoSectionError, configparser.NoOptionError, ValueError):
            return default

    # Physical constants
    @property
    def gravity(self):
        """Gravitational acceleration [m/s2]"""
        return self.getfloat('PHYSICS', 'gravity', 9.81)

    @property
    def nonzero(self):
        """Small value that keeps denominators away from zero"""
        return self.getfloat('PHYSICS', 'nonzero', 1.0e-20)

    @property
    def no_data_temperature(self):
        """Sentinel release temperature when there is no flow"""
        return self.getfloat('PHYSICS', 'no_data_temperature', -99.0)

    # Root search
    @property
    def solver_tolerance(self):
        return self.getfloat('SOLVER', 'tolerance', 1.0e-8)

    @property
    def solver_max_iterations(self):
        return self.getint('SOLVER', 'max_iterations', 100)

    @property
    def solver_eps(self):
        return self.getfloat('SOLVER', 'eps', 3.0e-10)

    # Wet well
    @property
    def surface_clearance(self):
        """Minimum depth of a virtual outlet below the water surface [m]"""
        return self.getfloat('WETWELL', 'surface_clearance', 1.0)

    @property
    def density_passes(self):
        """Passes of the outlet-density refinement; more than 2 can oscillate"""
        return self.getint('WETWELL', 'density_passes', 2)

    @property
    def flow_match_tolerance(self):
        """Allowed mismatch before outlet flows are rescaled to the target [m3/s]"""
        return self.getfloat('WETWELL', 'flow_match_tolerance', 1.0e-7)

    @property
    def critical_flow_margin(self):
        """Margin used when comparing outlet flows with critical flows [m3/s]"""
        return self.getfloat('WETWELL', 'critical_flow_margin', 1.0e-5)


def create_default_config(filename):
    """Create a default configuration file"""
    config_content = """# Release temperature configuration file
# All values in SI units

[PHYSICS]
# Gravitational acceleration (m/s2)
gravity = 9.81

# Floor for denominators in density-frequency calculations
nonzero = 1.0e-20

# Release temperature reported when there is no flow
no_data_temperature = -99.0

[SOLVER]
# Brent root search for the wet-well head drop
tolerance = 1.0e-8
max_iterations = 100
eps = 3.0e-10

[WETWELL]
# Virtual outlets must stay this far below the water surface (m)
surface_clearance = 1.0

# Outlet-density refinement passes (more than 2 can oscillate)
density_passes = 2

# Outlet flows are rescaled when their sum misses the target by more than this (m3/s)
flow_match_tolerance = 1.0e-7

# Margin when testing outlet flows against critical flows (m3/s)
critical_flow_margin = 1.0e-5
"""

    with open(filename, 'w') as f:
        f.write(config_content)

    print(f"Default configuration created: {filename}")


DEFAULT_CONFIG = Config()
