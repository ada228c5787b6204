#!/usr/bin/env python3
"""
Command line entry point for release temperature settings
"""
import os
import sys
import argparse
from .config import Config, create_default_config

SETTINGS = (
    ('PHYSICS', 'gravity'),
    ('PHYSICS', 'nonzero'),
    ('PHYSICS', 'no_data_temperature'),
    ('SOLVER', 'solver_tolerance'),
    ('SOLVER', 'solver_max_iterations'),
    ('SOLVER', 'solver_eps'),
    ('WETWELL', 'surface_clearance'),
    ('WETWELL', 'density_passes'),
    ('WETWELL', 'flow_match_tolerance'),
    ('WETWELL', 'critical_flow_margin'),
)


def print_settings(config):
    """Print the effective settings, grouped by section"""
    section = None
    for name, attr in SETTINGS:
        if name != section:
            print(f"[{name}]")
            section = name
        print(f"  {attr} = {getattr(config, attr)}")


def main(argv=None):
    """Main entry point"""
    parser = argparse.ArgumentParser(
        description='W2 release temperature settings',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create default configuration
  w2release --create-config release.ini

  # Show the settings a configuration file resolves to
  w2release release.ini
        """
    )

    parser.add_argument('config', nargs='?', help='Configuration file')
    parser.add_argument('--create-config', metavar='FILE',
                        help='Create default configuration file')

    args = parser.parse_args(argv)

    if args.create_config:
        create_default_config(args.create_config)
        return 0

    if not args.config:
        print_settings(Config())
        return 0

    if not os.path.exists(args.config):
        print(f"Error: Configuration file not found: {args.config}")
        print(f"\nCreate a default configuration with:")
        print(f"  w2release --create-config {args.config}")
        return 1

    print_settings(Config(args.config))
    return 0


if __name__ == '__main__':
    sys.exit(main())
