"""
Setup verification script for the website generator.
Checks dependencies, configuration, the database and the running API.
"""
import asyncio
import sys
import os
from typing import List, Tuple

# Color codes for terminal output
GREEN = "\033[92m"
RED = "\033[91m"
YELLOW = "\033[93m"
BLUE = "\033[94m"
RESET = "\033[0m"


def print_status(message: str, status: bool):
    """Print colored status message."""
    symbol = f"{GREEN}✓{RESET}" if status else f"{RED}✗{RESET}"
    print(f"{symbol} {message}")


async def check_python_version() -> bool:
    """Check Python version is 3.10+."""
    version = sys.version_info
    if version.major == 3 and version.minor >= 10:
        print_status(f"Python version: {version.major}.{version.minor}.{version.micro}", True)
        return True
    else:
        print_status(f"Python version {version.major}.{version.minor} (requires 3.10+)", False)
        return False


async def check_dependencies() -> bool:
    """Check if required packages are installed."""
    required_packages = [
        "fastapi",
        "uvicorn",
        "sqlalchemy",
        "asyncpg",
        "httpx",
        "pydantic_settings",
    ]

    all_installed = True
    for package in required_packages:
        try:
            __import__(package)
            print_status(f"Package '{package}' installed", True)
        except ImportError:
            print_status(f"Package '{package}' missing", False)
            all_installed = False

    return all_installed


async def check_env_file() -> bool:
    """Check if .env file exists (optional: defaults are used otherwise)."""
    if os.path.exists(".env"):
        print_status(".env file exists", True)
    else:
        print(f"  {YELLOW}No .env file; built-in defaults will be used{RESET}")
    return True


async def check_database() -> bool:
    """Check that the configured project store is reachable."""
    from sqlalchemy import text

    from app.config import settings

    if settings.STORE_BACKEND == "memory":
        print_status("STORE_BACKEND=memory, database not required", True)
        return True

    from app.database import engine

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        print_status(f"Database reachable ({engine.url.render_as_string(hide_password=True)})", True)
        return True
    except Exception as e:
        print_status(f"Database connection failed: {str(e)}", False)
        print(f"  {YELLOW}Check DATABASE_URL or set STORE_BACKEND=memory{RESET}")
        return False
    finally:
        await engine.dispose()


async def check_api() -> bool:
    """Check whether the backend answers on API_BASE_URL."""
    import httpx

    from app.config import settings

    try:
        async with httpx.AsyncClient(timeout=5.0) as client:
            response = await client.get(f"{settings.API_BASE_URL}/api/health/")
        ok = response.status_code == 200
        print_status(f"API at {settings.API_BASE_URL} (status {response.status_code})", ok)
        return ok
    except httpx.HTTPError as e:
        print_status(f"API not reachable: {str(e)}", False)
        print(f"  {YELLOW}Start it with: uvicorn app.main:app --port {settings.PORT}{RESET}")
        return False


async def main():
    """Run all verification checks."""
    print(f"\n{BLUE}{'='*60}{RESET}")
    print(f"{BLUE}Website Generator - Setup Verification{RESET}")
    print(f"{BLUE}{'='*60}{RESET}\n")

    checks: List[Tuple[str, callable]] = [
        ("Python Version", check_python_version),
        ("Dependencies", check_dependencies),
        ("Environment File", check_env_file),
        ("Database", check_database),
        ("API", check_api),
    ]

    results = []

    for check_name, check_func in checks:
        print(f"\n{BLUE}Checking {check_name}...{RESET}")
        try:
            result = await check_func()
            results.append(result)
        except Exception as e:
            print_status(f"Error during check: {str(e)}", False)
            results.append(False)

    # Summary
    print(f"\n{BLUE}{'='*60}{RESET}")
    passed = sum(results)
    total = len(results)

    if passed == total:
        print(f"{GREEN}✓ All checks passed! ({passed}/{total}){RESET}")
    else:
        print(f"{RED}✗ Some checks failed ({passed}/{total} passed){RESET}")
        print(f"\n{YELLOW}Please fix the issues above before running the generator.{RESET}")
        sys.exit(1)

    print(f"{BLUE}{'='*60}{RESET}\n")


if __name__ == "__main__":
    asyncio.run(main())
