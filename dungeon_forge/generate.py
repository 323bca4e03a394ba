"""
Dungeon Forge - Command Line Entry Point
========================================

Usage:
    # Seed-only fallback dungeon
    python -m dungeon_forge.generate --seed 42

    # Run a generator graph with parameter overrides
    python -m dungeon_forge.generate --graph generator.json --seed 7 --param minRoomSize=6

    # Batch simulation over seeds 100..599 on 4 processes
    python -m dungeon_forge.generate --graph generator.json --simulate 500 --seed-start 100 --workers 4

    # Write the JSON result to a file
    python -m dungeon_forge.generate --seed 1 --output layout.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from dungeon_forge.core.errors import GraphError
from dungeon_forge.pipeline.generation_pipeline import generate_once
from dungeon_forge.pipeline.models import GenerationRequest, SimulationConfig
from dungeon_forge.pipeline.simulation import run_simulation

logger = logging.getLogger(__name__)


def parse_param(text: str) -> Tuple[str, Any]:
    """Parse KEY=VALUE; the value is read as JSON, falling back to a plain string."""
    if '=' not in text:
        raise argparse.ArgumentTypeError(f"Expected KEY=VALUE, got '{text}'")
    key, raw = text.split('=', 1)
    key = key.strip()
    if not key:
        raise argparse.ArgumentTypeError(f"Empty parameter name in '{text}'")
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        value = raw
    return key, value


def load_graph_file(path: str) -> Dict[str, Any]:
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise GraphError(f"{path}: generator document must be a JSON object")
    return data


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='python -m dungeon_forge.generate',
        description='Dungeon Forge - node-graph dungeon layout generator',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        '--seed', '-s', type=int, default=0,
        help='Seed for a single generation (default: 0)'
    )
    parser.add_argument(
        '--graph', '-g', type=str,
        help='Generator document (JSON); omit for the seed-only fallback generator'
    )
    parser.add_argument(
        '--param', '-p', type=parse_param, action='append', default=[],
        metavar='KEY=VALUE',
        help='Generation parameter, value parsed as JSON (repeatable)'
    )
    parser.add_argument(
        '--simulate', '-n', type=int, metavar='N',
        help='Run a batch simulation of N generations instead of one'
    )
    parser.add_argument(
        '--seed-start', type=int,
        help='First seed of a simulation (default: 0)'
    )
    parser.add_argument(
        '--workers', '-w', type=int, default=1,
        help='Processes used by a simulation (default: 1)'
    )
    parser.add_argument(
        '--output', '-o', type=str,
        help='Write the JSON result here instead of stdout'
    )
    parser.add_argument(
        '--verbose', '-v', action='store_true',
        help='Debug logging'
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s | %(levelname)s | %(name)s | %(message)s',
        datefmt='%H:%M:%S',
        stream=sys.stderr,
    )

    generator = None
    if args.graph:
        try:
            generator = load_graph_file(args.graph)
        except (OSError, json.JSONDecodeError, GraphError) as e:
            logger.error(f"Could not load generator: {e}")
            return 2

    parameters = dict(args.param)

    try:
        if args.simulate is not None:
            config = SimulationConfig(
                run_count=args.simulate,
                generator_id=str(generator.get('id', '')) if generator else '',
                seed_start=args.seed_start,
                parameters=parameters,
                generator=generator,
                workers=args.workers,
            )
            payload = run_simulation(config).to_dict()
        else:
            request = GenerationRequest(
                seed=args.seed,
                generator=generator,
                generator_id=str(generator.get('id', '')) if generator else '',
                parameters=parameters,
            )
            payload = generate_once(request).to_dict()
    except ValueError as e:
        parser.error(str(e))

    text = json.dumps(payload, indent=2)
    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(text + '\n', encoding='utf-8')
        logger.info(f"Wrote result to {output_path}")
    else:
        print(text)
    return 0


if __name__ == '__main__':
    sys.exit(main())
