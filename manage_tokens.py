#!/usr/bin/env python3
"""
Token Management Utility

Issues and inspects development access tokens for the write endpoints:
- Issue a token for a subject
- Decode a token and show its claims
"""

import sys
from datetime import datetime
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from jose import JWTError

from api.auth import create_access_token, decode_access_token
from api.config import config


def issue_token(subject: str, minutes: int = None):
    """Print a new access token for ``subject``."""
    token = create_access_token(subject, expires_minutes=minutes)
    lifetime = config.access_token_expire_minutes if minutes is None else minutes

    print("\n" + "=" * 80)
    print("🔑 ACCESS TOKEN")
    print("=" * 80)
    print(f"Subject: {subject}")
    print(f"Expires in: {lifetime} minutes")
    print()
    print(token)
    print()
    print("Use it as:")
    print(f"  Authorization: Bearer {token[:20]}...")


def show_token(token: str):
    """Print the claims of ``token`` if it verifies."""
    try:
        claims = decode_access_token(token)
    except JWTError as e:
        print(f"❌ Invalid token: {e}")
        sys.exit(1)

    print("\n" + "=" * 80)
    print("🔍 TOKEN CLAIMS")
    print("=" * 80)
    for key, value in claims.items():
        if key in ("exp", "iat"):
            value = f"{value} ({datetime.utcfromtimestamp(value).isoformat()}Z)"
        print(f"  {key}: {value}")


def main():
    """Main function."""
    if len(sys.argv) < 3:
        print("Usage: python manage_tokens.py [issue|decode] <subject|token> [minutes]")
        print()
        print("Commands:")
        print("  issue   - Issue a token for a subject")
        print("  decode  - Verify a token and print its claims")
        print()
        print("Examples:")
        print("  python manage_tokens.py issue admin@example.com")
        print("  python manage_tokens.py issue admin@example.com 120")
        print("  python manage_tokens.py decode eyJhbGciOiJIUzI1NiIs...")
        sys.exit(1)

    command = sys.argv[1].lower()

    if command == "issue":
        minutes = None
        if len(sys.argv) > 3:
            try:
                minutes = int(sys.argv[3])
            except ValueError:
                print(f"❌ Error: minutes must be an integer, got '{sys.argv[3]}'")
                sys.exit(1)
        issue_token(sys.argv[2], minutes)
    elif command == "decode":
        show_token(sys.argv[2])
    else:
        print(f"❌ Unknown command: {command}")
        print("Available commands: issue, decode")
        sys.exit(1)


if __name__ == "__main__":
    main()
