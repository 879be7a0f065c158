"""
print_config.py
----------------
Loads YAML configs, merges overrides (if any), validates, and prints the final config.
No side effects besides stdout.
"""

from __future__ import annotations

import argparse
import sys

import yaml

from wle_har.utils.config import load_config


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Print the resolved report config")
    ap.add_argument("--config", required=True, help="Base config YAML")
    ap.add_argument("--extra-config", action="append", default=[], help="Additional YAML merged over the base")
    ap.add_argument("--set", dest="overrides", action="append", default=[], help="Override key.path=value")
    args = ap.parse_args(argv)

    cfg = load_config(args.config, args.extra_config, args.overrides)
    yaml.safe_dump(cfg, sys.stdout, sort_keys=False)
    return 0


if __name__ == "__main__":
    sys.exit(main())
