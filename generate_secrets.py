#!/usr/bin/env python3
"""
Generate secure secrets for NFL Playoff Picks
Run this script to generate SECRET_KEY and ADMIN_PASSWORD values
"""

import secrets


def generate_secrets():
    """Generate secure random values for the application"""
    print("🔐 Generating secure secrets for NFL Playoff Picks...")
    print("=" * 50)

    secret_key = secrets.token_urlsafe(32)
    admin_password = secrets.token_urlsafe(12)

    print(f"SECRET_KEY={secret_key}")
    print(f"ADMIN_PASSWORD={admin_password}")

    print("=" * 50)
    print("📝 Copy these values to your .env file")
    print("⚠️  Keep these secrets secure and never commit them to version control!")


if __name__ == "__main__":
    generate_secrets()
