#!/usr/bin/env python3
"""Configuration validation script."""

import argparse
import sys
from pathlib import Path

import yaml

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from midas_app.config.loader import ConfigLoader
from midas_app.config.validation import ConfigValidator


def main(argv=None) -> int:
    """Main validation function."""
    parser = argparse.ArgumentParser(description="Validate Midas batch simulator settings")
    parser.add_argument("--config-dir", help="Directory holding settings.yaml")
    args = parser.parse_args(argv)

    loader = ConfigLoader.create(Path(args.config_dir) if args.config_dir else None)
    settings_file = loader.config_dir / "settings.yaml"

    if settings_file.exists():
        print(f"🔍 Validating {settings_file}...")
    else:
        print(f"🔍 No {settings_file.name} in {loader.config_dir}, validating defaults...")

    try:
        config = loader.merge_config()
    except yaml.YAMLError as e:
        print(f"❌ Could not parse settings: {e}")
        return 1

    errors = ConfigValidator.validate_config(config)

    if errors:
        print(f"❌ Found {len(errors)} validation errors:")
        for error in errors:
            print(f"  • {error.field}: {error.message} (value: {error.value})")
        return 1

    template = loader.build_template(config)
    print(f"✅ Configuration is valid")
    print(f"  • service: {config['service']['base_url']}")
    print(f"  • stop-loss: {template.stop_loss.mode.value}, take-profit: {template.take_profit.mode.value}")
    print(f"  • batch workers: {config['batch']['max_workers']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
