"""
Runtime Environment Validation Module

Validates the configuration at application startup. If validation fails,
the application refuses to start (hard fail) instead of erroring later on
the first request that touches a misconfigured collaborator.
"""

import sys

from pydantic import ValidationError

from mowsy.core.config import Settings


def _fatal(*lines: str) -> None:
    for line in lines:
        print(line, file=sys.stderr)
    sys.exit(1)


def validate_environment() -> Settings:
    """
    Validate all required environment variables at startup.

    Called from the application lifespan before the readiness gate opens.

    Returns:
        Settings: Validated settings object

    Raises:
        SystemExit: If validation fails (exit code 1)
    """
    try:
        settings = Settings()
    except ValidationError as e:
        print("❌ FATAL: Environment validation failed", file=sys.stderr)
        print("\nMissing or invalid environment variables:", file=sys.stderr)
        for error in e.errors():
            field = " -> ".join(str(loc) for loc in error["loc"])
            print(f"   • {field}: {error['msg']}", file=sys.stderr)
        _fatal(
            "\nThe application cannot start with invalid configuration.",
            "Please check your .env file or environment variables.",
        )

    # 1. CORS: wildcard is only tolerated in debug mode
    if not settings.debug and "*" in settings.cors_origins:
        _fatal(
            "❌ FATAL: Wildcard CORS origin (*) detected in production mode.",
            "   Set ALLOWED_ORIGINS to specific domains (comma-separated).",
        )

    # 2. Database URL: PostgreSQL outside of debug mode
    if not settings.debug and not settings.database_url.startswith("postgresql"):
        _fatal(
            "❌ FATAL: DATABASE_URL must be a PostgreSQL connection string (postgresql:// or postgresql+asyncpg://)",
        )

    # 3. S3: credentials come as a pair
    if bool(settings.aws_access_key_id) != bool(settings.aws_secret_access_key):
        _fatal(
            "❌ FATAL: AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY must be set together",
        )

    # Optional collaborators: warn only
    if not settings.stripe_secret_key:
        print("⚠️  STRIPE_SECRET_KEY not set; payment endpoints will fail", file=sys.stderr)
    if not settings.geocodio_api_key:
        print("⚠️  GEOCODIO_API_KEY not set; addresses will not be geocoded", file=sys.stderr)
    if not settings.aws_s3_bucket_name:
        print("⚠️  AWS_S3_BUCKET_NAME not set; uploads will fail", file=sys.stderr)
    if not settings.admin_api_key:
        print("⚠️  ADMIN_API_KEY not set; admin endpoints are disabled", file=sys.stderr)

    print("✅ Environment validation passed")
    print(f"   App: {settings.app_name}")
    print(f"   Debug: {settings.debug}")
    print(f"   CORS Origins: {settings.allowed_origins}")

    return settings


if __name__ == "__main__":
    validate_environment()
    print("\n✅ All environment variables are valid!")
