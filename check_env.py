#!/usr/bin/env python3
"""Helper script to check and create the .env file for the quoting service."""

from pathlib import Path
import os

SECRET_KEYS = ("DQ_SUPABASE_KEY", "DQ_MAPBOX_ACCESS_TOKEN", "MAPBOX_ACCESS_TOKEN", "DQ_JWT_SECRET")

TEMPLATE = """# Supabase Configuration (quotes and pricing rules are kept in memory when unset)
# Get these from: https://supabase.com/dashboard → Your Project → Settings → API
DQ_SUPABASE_URL=https://your-project-id.supabase.co
DQ_SUPABASE_KEY=your-service-role-key-here

# Mapbox Directions (optional - distances fall back to haversine when unset)
DQ_MAPBOX_ACCESS_TOKEN=
DQ_MAPBOX_TIMEOUT_SECONDS=10

# Admin endpoints: secret shared with the identity provider that signs tokens
DQ_JWT_SECRET=change-me
DQ_JWT_ALGORITHM=HS256

# Pricing
DQ_PRICING_RULES_ENABLED=false
DQ_PRICING_TIMEZONE=Africa/Kampala

# API Configuration
DQ_API_PREFIX=/api
DQ_LOG_LEVEL=INFO
# DQ_FRONTEND_ALLOWED_ORIGINS - JSON array or comma-separated list
"""


def _mask(value: str) -> str:
    if len(value) > 20:
        return value[:12] + "..." + value[-6:]
    return value


def main():
    project_root = Path(__file__).parent
    env_file = project_root / ".env"

    print("=" * 60)
    print("Delivery Quotes Environment Checker")
    print("=" * 60)
    print()

    if env_file.exists():
        print(f"✅ Found .env file at: {env_file}")
        print()
        print("Current contents:")
        print("-" * 60)
        with open(env_file, "r", encoding="utf-8") as f:
            for line in f.read().split("\n"):
                key, sep, value = line.partition("=")
                if sep and key.strip() in SECRET_KEYS and value.strip():
                    print(f"{key}={_mask(value.strip())}")
                else:
                    print(line)
        print("-" * 60)
        print()
    else:
        print(f"❌ .env file NOT found at: {env_file}")
        print()
        with open(env_file, "w", encoding="utf-8") as f:
            f.write(TEMPLATE)
        print(f"✅ Created template .env file at: {env_file}")
        print("⚠️  Edit .env and fill in the credentials you need.")
        return

    print("Testing config loading...")
    print()

    try:
        from src.delivery_quotes.config import settings
    except Exception as e:
        print(f"❌ Error loading config: {e}")
        print("Make sure you're running this from the project root directory")
        return

    checks = {
        "Supabase": bool(settings.supabase_url and settings.supabase_key),
        "Mapbox directions": bool(settings.mapbox_access_token),
        "Admin JWT secret": bool(settings.jwt_secret),
    }
    for name, ok in checks.items():
        print(f"{'✅' if ok else '⚠️ '} {name}: {'configured' if ok else 'not configured'}")
    print()
    print(f"Pricing rules enabled: {settings.pricing_rules_enabled} (timezone {settings.pricing_timezone})")
    if not checks["Supabase"]:
        print("Quotes will be stored in process memory only.")
    if os.getenv("MAPBOX_ACCESS_TOKEN") and not os.getenv("DQ_MAPBOX_ACCESS_TOKEN"):
        print("Using MAPBOX_ACCESS_TOKEN from the environment.")


if __name__ == "__main__":
    main()
