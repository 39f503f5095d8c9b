"""
Setup check for Latesh Analysis Bot
Reports which required and optional environment variables are configured
"""

import os
import sys
from typing import Dict, Optional

from . import config


def check_environment(environ: Optional[Dict[str, str]] = None) -> bool:
    """Print the status of each variable. Returns False when a required one is missing."""
    environ = os.environ if environ is None else environ
    all_good = True

    print("🔍 Checking Latesh Analysis Bot setup...\n")
    print("📋 Checking environment variables:")

    for name in config.REQUIRED_ENV_VARS:
        if environ.get(name):
            print(f"   ✅ {name}: Set")
        else:
            print(f"   ❌ {name}: Missing (Required)")
            all_good = False

    for name in config.OPTIONAL_ENV_VARS:
        if environ.get(name):
            print(f"   ✅ {name}: Set")
        else:
            print(f"   ⚠️  {name}: Not set (Optional)")

    print("\n" + "=" * 50)
    if all_good:
        print("🎉 Setup looks good! You can start the bot with:")
        print("   latesh-bot")
    else:
        print("❌ Setup incomplete. Please fix the issues above.")

    print("\n🔗 Useful links:")
    print("   Discord Developer Portal: https://discord.com/developers/applications")
    print("   The Blue Alliance API: https://www.thebluealliance.com/apidocs")
    return all_good


def main():
    if not check_environment():
        sys.exit(1)


if __name__ == "__main__":
    main()
