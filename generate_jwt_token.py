#!/usr/bin/env python3
"""Generate a JWT for calling the records API by hand (curl, HTTP clients)."""

import sys

from dotenv import load_dotenv

from student_records.src.services.auth import AuthError, AuthService
from student_records.src.services.config import get_config


def generate_token(username=None):
    """Generate a JWT token for the specified user."""
    config = get_config()
    auth_service = AuthService(config=config)
    username = username or config.admin_username

    try:
        token = auth_service.create_jwt(username)
    except AuthError as e:
        print(f"Error generating token: {e.message}")
        print("Set JWT_SECRET_KEY (or ENVIRONMENT=development) and try again")
        return None

    print(f"Generated JWT for '{username}' (valid {config.token_ttl_minutes} minutes):")
    print(f"Authorization: Bearer {token}")
    return token


if __name__ == "__main__":
    load_dotenv()
    generate_token(sys.argv[1] if len(sys.argv) > 1 else None)
