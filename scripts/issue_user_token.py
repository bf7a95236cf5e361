"""Print the bearer token a device must send for a user uuid.

Uses USER_TOKEN_SECRET from the environment / .env unless --secret is given.
"""

from __future__ import annotations

import argparse


def main() -> int:
    parser = argparse.ArgumentParser(description="Issue a per-user bearer token.")
    parser.add_argument("user_uuid")
    parser.add_argument("--secret", default=None, help="Override USER_TOKEN_SECRET")
    args = parser.parse_args()

    from radar_backend.security import issue_user_token

    print(issue_user_token(args.user_uuid, secret=args.secret))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
