"""
Terminal front end for the website generator.

    website-generator generate "A bakery in downtown"
    website-generator list
    website-generator interactive

In interactive mode every line typed is treated as the new contents of the
idea field (debounced lookups); an empty line submits the current text.
"""
import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from app.client.api import ClientError, ProjectsClient
from app.client.generator import GeneratorState, WebsiteGenerator
from app.config import settings

logger = logging.getLogger(__name__)

# Color codes for terminal output
GREEN = "\033[92m"
RED = "\033[91m"
YELLOW = "\033[93m"
BLUE = "\033[94m"
RESET = "\033[0m"


def print_state(state: GeneratorState) -> None:
    """Print one render of the generator state."""
    if state.error:
        print(f"{RED}✗ {state.error}{RESET}")
    if not state.sections:
        return
    if state.is_optimistic:
        label = f"{YELLOW}Suggested sections (generating…){RESET}"
    else:
        label = f"{GREEN}Generated sections{RESET}"
    print(label)
    for section in state.sections:
        print(f"  • {section}")


async def _generate(api: ProjectsClient, idea: str) -> int:
    generator = WebsiteGenerator(api, on_render=print_state)
    generator.on_input(idea)
    await generator.submit()
    return 1 if generator.state.error else 0


async def _list(api: ProjectsClient) -> int:
    try:
        projects = await api.list_projects()
    except ClientError as exc:
        print(f"{RED}✗ {exc}{RESET}")
        return 1
    if not projects:
        print("No projects yet.")
    for project in projects:
        print(f"{BLUE}{project.created_at}{RESET}  {project.website_idea}")
        print(f"    {', '.join(project.sections)}")
    return 0


async def _interactive(api: ProjectsClient) -> int:
    generator = WebsiteGenerator(api, on_render=print_state)
    loop = asyncio.get_running_loop()
    print(f"{BLUE}Type a website idea (empty line submits, Ctrl-D quits){RESET}")
    try:
        while True:
            line = await loop.run_in_executor(None, sys.stdin.readline)
            if not line:
                break
            text = line.rstrip("\n")
            if text:
                generator.on_input(text)
            else:
                await generator.submit()
        await generator.wait_idle()
    finally:
        await generator.aclose()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="website-generator",
        description="Turn a website idea into a list of page sections.",
    )
    parser.add_argument(
        "--api-url",
        default=settings.API_BASE_URL,
        help=f"Backend base URL (default: {settings.API_BASE_URL})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command", required=True)
    gen = sub.add_parser("generate", help="Generate sections for one idea")
    gen.add_argument("idea", nargs="+", help="The website idea")
    sub.add_parser("list", help="List stored projects, newest first")
    sub.add_parser("interactive", help="Type ideas and watch sections update")
    return parser


async def _run(args: argparse.Namespace) -> int:
    async with ProjectsClient(base_url=args.api_url) as api:
        if args.command == "generate":
            return await _generate(api, " ".join(args.idea))
        if args.command == "list":
            return await _list(api)
        return await _interactive(api)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    return asyncio.run(_run(args))


if __name__ == "__main__":
    sys.exit(main())
