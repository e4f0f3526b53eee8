from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Dict, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from .core.audit import audit_resolver
from .core.catalog import load_directory, load_packaged
from .core.config import Settings, settings
from .core.i18n import Resolver
from .core.logging_config import get_logger, setup_logging
from .core.negotiation import pick_locale, system_locale
from .infra import db
from .infra.migrate import migrate
from .infra.preference_repo import PreferenceRepo

log = get_logger(__name__)


def make_resolver(cfg: Settings) -> Resolver:
    """Build a resolver with the packaged catalogs plus ``LOCALES_DIR``."""
    resolver = Resolver(active=cfg.FALLBACK_LOCALE, fallback=cfg.FALLBACK_LOCALE)
    load_packaged(resolver)
    if cfg.LOCALES_DIR:
        load_directory(resolver, cfg.LOCALES_DIR)
    if cfg.FALLBACK_LOCALE not in resolver.locales:
        log.warning(
            "Fallback locale %s has no catalog; missing keys will show as raw keys",
            cfg.FALLBACK_LOCALE,
        )
    return resolver


async def open_store(cfg: Settings) -> None:
    await db.init_engine(cfg.DATABASE_URL)
    db.init_sessionmaker()
    await migrate()


async def load_preference(cfg: Settings) -> Optional[str]:
    try:
        await open_store(cfg)
        async with db.SessionLocal() as s:  # type: ignore[misc]
            return await PreferenceRepo(s).get_locale(cfg.PREFERENCE_SCOPE)
    except (SQLAlchemyError, OSError) as e:
        log.warning("Could not read stored locale preference: %s", e)
        return None


async def save_preference(cfg: Settings, locale: Optional[str]) -> bool:
    """Store ``locale`` for the configured scope; ``None`` clears it."""
    try:
        await open_store(cfg)
        async with db.SessionLocal() as s:  # type: ignore[misc]
            repo = PreferenceRepo(s)
            if locale is None:
                await repo.clear(cfg.PREFERENCE_SCOPE)
            else:
                await repo.set_locale(cfg.PREFERENCE_SCOPE, locale)
            await s.commit()
        return True
    except (SQLAlchemyError, OSError) as e:
        log.error("Could not store locale preference: %s", e)
        return False


async def bootstrap(cfg: Settings) -> Resolver:
    """Resolver with the startup locale applied.

    Order: stored preference, ``DEFAULT_LOCALE``, system locale, fallback.
    """
    resolver = make_resolver(cfg)
    stored = await load_preference(cfg)
    active = pick_locale(
        [stored, cfg.DEFAULT_LOCALE, system_locale()],
        resolver.locales,
        default=cfg.FALLBACK_LOCALE,
    )
    resolver.set_locale(active)
    log.debug("Startup locale %s (stored=%s)", resolver.active_locale, stored)
    return resolver


def parse_params(pairs: Sequence[str]) -> Dict[str, str]:
    params: Dict[str, str] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise argparse.ArgumentTypeError(f"Invalid parameter {pair!r}, expected NAME=VALUE")
        params[name] = value
    return params


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lingo", description="Resolve UI translation keys.")
    parser.add_argument("--debug", action="store_true", help="verbose logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("translate", help="print the text for a key")
    p.add_argument("key")
    p.add_argument("-l", "--locale", help="locale for this call only")
    p.add_argument(
        "-p", "--param", action="append", default=[], metavar="NAME=VALUE",
        help="placeholder value (repeatable)",
    )

    sub.add_parser("locales", help="list loaded locales")

    p = sub.add_parser("use", help="switch and remember the active locale")
    p.add_argument("locale")

    sub.add_parser("reset", help="forget the remembered locale")
    sub.add_parser("check", help="report catalog gaps against the fallback locale")
    return parser


async def run(args: argparse.Namespace, cfg: Settings) -> int:
    try:
        resolver = await bootstrap(cfg)

        if args.command == "translate":
            try:
                params = parse_params(args.param)
            except argparse.ArgumentTypeError as e:
                print(f"error: {e}", file=sys.stderr)
                return 2
            if args.locale and not resolver.set_locale(args.locale):
                print(f"error: unknown locale {args.locale!r}", file=sys.stderr)
                return 1
            print(resolver.translate(args.key, params))
            return 0

        if args.command == "locales":
            for code in resolver.locales:
                marks: List[str] = []
                if code == resolver.active_locale:
                    marks.append("active")
                if code == resolver.fallback_locale:
                    marks.append("fallback")
                print(f"{code} ({', '.join(marks)})" if marks else code)
            return 0

        if args.command == "use":
            if not resolver.set_locale(args.locale):
                print(
                    f"error: unknown locale {args.locale!r} "
                    f"(available: {', '.join(resolver.locales)})",
                    file=sys.stderr,
                )
                return 1
            if not await save_preference(cfg, resolver.active_locale):
                return 1
            print(resolver.active_locale)
            return 0

        if args.command == "reset":
            return 0 if await save_preference(cfg, None) else 1

        if args.command == "check":
            issues = audit_resolver(resolver)
            for issue in issues:
                print(issue)
            if issues:
                log.warning("%d catalog issue(s) found", len(issues))
                return 1
            return 0

        raise AssertionError(f"unhandled command {args.command!r}")
    finally:
        await db.dispose_engine()


def main(argv: Optional[Sequence[str]] = None, cfg: Optional[Settings] = None) -> int:
    cfg = cfg or settings
    args = build_parser().parse_args(argv)
    setup_logging(
        log_file=cfg.LOG_FILE,
        debug=args.debug or cfg.LOG_LEVEL == "DEBUG",
        level=cfg.LOG_LEVEL,
    )
    return asyncio.run(run(args, cfg))


if __name__ == "__main__":
    sys.exit(main())
