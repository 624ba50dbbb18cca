#!/usr/bin/env python3
"""
Generate secure secrets for the ProAce Predictions application
Prints a SECRET_KEY and an initial ADMIN_PASSWORD for the .env file
"""

import secrets


def generate_secrets():
    """Generate secure random values for the application"""
    print("Generating secure secrets for ProAce Predictions...")
    print("=" * 50)

    print(f"SECRET_KEY={secrets.token_urlsafe(32)}")
    print(f"ADMIN_PASSWORD={secrets.token_urlsafe(12)}")

    print("=" * 50)
    print("Copy these values to your .env file and run 'python manage.py seed'")
    print("Keep these secrets secure and never commit them to version control!")


if __name__ == "__main__":
    generate_secrets()
