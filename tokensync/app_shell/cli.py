import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from tokensync.adapters.figma_api import FigmaVariablesApi
from tokensync.adapters.fs.mapping_store import JsonMappingStore
from tokensync.adapters.git_recorder import GitChangeRecorder
from tokensync.adapters.log_observer import LoggingObserver
from tokensync.components.publish import PublishInput, run_publish
from tokensync.components.transform import TransformInput, run_transform
from tokensync.components.values import ColorProfile
from tokensync.core.ports.remote import VariablesApiError
from tokensync.domain.variables import RemoteVariablesState
from tokensync.rules.loader import get_access_token, load_rules
from tokensync.rules.models import Rules

logger = logging.getLogger("cli")

RULES_PATH = "rules.yaml"
PROFILES = [p.value for p in ColorProfile]


def get_rules(path: str) -> Rules:
    rules_path = Path(path)
    if not rules_path.exists():
        if path == RULES_PATH:
            return Rules()
        logger.error(f"Rules file {path} not found.")
        sys.exit(1)
    try:
        return load_rules(rules_path)
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)


def read_json(path: str) -> Any:
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Could not read {path}: {e}")
        sys.exit(1)


def write_json(data: dict[str, Any], out: str | None) -> None:
    text = json.dumps(data, indent=2)
    if out:
        Path(out).write_text(text + "\n", encoding="utf-8")
        print(f"Wrote {out}")
    else:
        print(text)


def color_profile(rules: Rules, override: str | None) -> ColorProfile:
    if override is None:
        return rules.transform.color_profile
    return ColorProfile.parse(override)


def handle_transform(rules: Rules, args: argparse.Namespace) -> int:
    remote_state = RemoteVariablesState.empty()
    if args.remote_state:
        remote_state = RemoteVariablesState.from_api_response(read_json(args.remote_state))
    mapping = read_json(args.mapping) if args.mapping else {}

    result = run_transform(
        TransformInput(
            token_system=read_json(args.system),
            remote_state=remote_state,
            persisted_mapping=mapping,
            color_profile=color_profile(rules, args.color_profile),
            naming_platform=rules.transform.naming_platform,
        ),
        observer=LoggingObserver(),
    )
    write_json(result.to_dict(), args.out)

    if not result.success:
        for err in result.errors:
            logger.error(f"{err.code}: {err.message}")
        return 1
    stats = result.stats
    logger.info(
        f"{stats.created} to create, {stats.updated} to update, "
        f"{len(result.warnings)} warning(s)"
    )
    return 0


def handle_publish(rules: Rules, args: argparse.Namespace) -> int:
    token = get_access_token(rules)
    if token is None:
        logger.error(f"Set {rules.api.access_token_env} to a Figma personal access token.")
        return 1

    try:
        api = FigmaVariablesApi(
            token, base_url=rules.api.base_url, timeout=rules.api.timeout_seconds
        )
    except VariablesApiError as e:
        logger.error(str(e))
        return 1
    store = JsonMappingStore(args.mapping_dir or rules.mappings.directory)
    recorder = GitChangeRecorder(message_template=rules.mappings.commit_message)

    output = asyncio.run(
        run_publish(
            PublishInput(
                file_key=args.file_key,
                token_system=read_json(args.system),
                color_profile=color_profile(rules, args.color_profile),
                naming_platform=rules.transform.naming_platform,
                record_changes=rules.mappings.record_changes and not args.no_record,
            ),
            api,
            store,
            recorder,
            observer=LoggingObserver(),
        )
    )

    if not output.success:
        assert output.error is not None
        logger.error(f"{output.error.code}: {output.error.message}")
        if output.result is not None:
            for err in output.result.errors:
                logger.error(f"{err.code}: {err.message}")
        return 1

    assert output.result is not None
    stats = output.result.stats
    print(
        f"Published {stats.created} new and {stats.updated} updated variables "
        f"to {args.file_key}."
    )
    print(f"Mapping: {output.mapping_path}")
    if output.pruned:
        print(f"Pruned {len(output.pruned)} stale mapping entries.")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Design tokens to Figma variables")
    parser.add_argument("--rules", default=RULES_PATH, help="Path to rules.yaml")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # transform
    transform_parser = subparsers.add_parser(
        "transform", help="Build the variables payload without contacting Figma"
    )
    transform_parser.add_argument("system", help="Token system JSON file")
    transform_parser.add_argument("--remote-state", help="Saved GET variables/local response")
    transform_parser.add_argument("--mapping", help="Persisted mapping JSON file")
    transform_parser.add_argument(
        "--color-profile", choices=PROFILES, help="Override transform.color_profile"
    )
    transform_parser.add_argument("--out", help="Write the result here instead of stdout")

    # publish
    publish_parser = subparsers.add_parser("publish", help="Publish tokens to a Figma file")
    publish_parser.add_argument("system", help="Token system JSON file")
    publish_parser.add_argument("--file-key", required=True, help="Figma file key")
    publish_parser.add_argument("--mapping-dir", help="Override mappings.directory")
    publish_parser.add_argument(
        "--color-profile", choices=PROFILES, help="Override transform.color_profile"
    )
    publish_parser.add_argument(
        "--no-record", action="store_true", help="Do not commit the updated mapping"
    )

    args = parser.parse_args(argv)

    rules = get_rules(args.rules)
    logging.basicConfig(level=getattr(logging, rules.logging.level))

    if args.command == "transform":
        return handle_transform(rules, args)
    return handle_publish(rules, args)


if __name__ == "__main__":
    sys.exit(main())
