#!/usr/bin/env python3
"""
Issue a session token for an existing user without going through Google.

Handy for calling the API from scripts or curl during development:

    python create_token.py --user-id 65f1c2a4e13b4c0012a3b4c5 --days 30
    curl -H "Authorization: Bearer <token>" http://localhost:3000/api/v1/users/

The token is signed with ``SESSION_SECRET``, so run this with the same
environment as the server.
"""

import argparse
import sys

from events_service_api.app.core.db import Collection
from events_service_api.app.core.security import create_session_token
from events_service_api.app.core.validation import is_object_id


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a session token for a user.")
    parser.add_argument("--user-id", required=True, help="24 character user id")
    parser.add_argument("--days", type=int, default=1, help="token lifetime in days")
    args = parser.parse_args()

    if not is_object_id(args.user_id):
        print("Invalid user id format.", file=sys.stderr)
        return 2
    if Collection("users").find_one(args.user_id) is None:
        print(f"User {args.user_id} not found.", file=sys.stderr)
        return 1

    print(create_session_token({"sub": args.user_id}, max_age=args.days * 24 * 60 * 60))
    return 0


if __name__ == "__main__":
    sys.exit(main())
