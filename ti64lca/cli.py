"""
Command-line front end.

  python scripts/optimize_powder.py --mass 1 --category GW --region EU --diameter 45
  python scripts/optimize_powder.py                       # prompts for the inputs
  python scripts/optimize_powder.py --config run.json --plot out/breakdown.png

Exit codes: 0 converged, 1 invalid input, 2 not converged / infeasible.
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

from .coefficients import CATEGORIES, REGIONS
from .config import build_config, load_json_config
from .errors import InfeasibleConstraintError, InputValidationError, NumericalDegeneracyError
from .inputs import prompt_inputs
from .pipeline import compare_regions, run_optimization
from .reporting import format_comparison, format_report, plot_breakdown

EXIT_OK = 0
EXIT_INPUT = 1
EXIT_NOT_CONVERGED = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Environmentally optimal operating point for Ti6Al4V powder production",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    g = parser.add_argument_group("Run inputs (prompted for when missing)")
    g.add_argument("--mass", type=str, default=None, help="Final powder mass [kg]")
    g.add_argument("--category", type=str, default=None,
                   help="Impact category: " + ", ".join(CATEGORIES))
    g.add_argument("--region", type=str, default=None, help=" | ".join(REGIONS))
    g.add_argument("--diameter", type=str, default=None, help="Target particle diameter [um]")
    g.add_argument("--no-prompt", action="store_true",
                   help="Fail instead of prompting for missing inputs")

    c = parser.add_argument_group("Configuration (defaults -> --config JSON -> flags)")
    c.add_argument("--config", type=str, default=None, help="JSON configuration file")
    c.add_argument("--phi0", type=float, default=None, help="Initial electrode diameter [m] (default: 0.06)")
    c.add_argument("--p0", type=float, default=None, help="Initial atomization pressure [MPa] (default: 6)")
    c.add_argument("--beta0", type=float, default=None, help="Initial TiO2 fraction (default: 0.86)")
    c.add_argument("--max-evaluations", type=int, default=None, help="Default: 10000")
    c.add_argument("--max-iterations", type=int, default=None, help="Default: 5000")
    c.add_argument("--constraint-tolerance", type=float, default=None, help="Default: 1e-6")

    o = parser.add_argument_group("Output")
    o.add_argument("--compare-regions", action="store_true",
                   help="Optimize for every region and print a comparison")
    o.add_argument("--strict", action="store_true",
                   help="Treat an infeasible final point as an error")
    o.add_argument("--plot", type=str, default=None, help="Save the impact breakdown chart here")
    o.add_argument("--save-report", type=str, default=None, metavar="DIR",
                   help="Write the text report to DIR/report_<timestamp>.txt")
    o.add_argument("-v", "--verbose", action="count", default=0)
    return parser


def _cli_overrides(args) -> dict:
    return {
        'initial': {'phi': args.phi0, 'p': args.p0, 'beta': args.beta0},
        'solver': {
            'max_evaluations': args.max_evaluations,
            'max_iterations': args.max_iterations,
            'constraint_tolerance': args.constraint_tolerance,
        },
    }


def _save_report(text: str, directory) -> Path:
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    path = directory / f"report_{timestamp}.txt"
    path.write_text(text + "\n", encoding="utf-8")
    return path


def main(argv=None, input_fn=input) -> int:
    args = build_parser().parse_args(argv)

    level = logging.WARNING - 10 * min(args.verbose, 2)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        json_overrides = load_json_config(args.config) if args.config else None
        config = build_config(json_overrides, _cli_overrides(args))
        given = dict(final_powder_mass=args.mass, impact_category=args.category,
                     region=args.region, target_diameter=args.diameter)
        if args.no_prompt:
            missing = [k for k, v in given.items() if v is None]
            if args.compare_regions and 'region' in missing:
                missing.remove('region')
                given['region'] = REGIONS[0]
            if missing:
                raise InputValidationError(f"Missing inputs: {', '.join(missing)}")
        elif args.compare_regions and given['region'] is None:
            given['region'] = REGIONS[0]
        inputs = prompt_inputs(input_fn=input_fn, **given)
    except (InputValidationError, OSError, json.JSONDecodeError) as e:
        print(f"✗ {e}", file=sys.stderr)
        return EXIT_INPUT

    try:
        if args.compare_regions:
            runs = compare_regions(inputs.final_powder_mass, inputs.impact_category,
                                   inputs.target_diameter, config=config)
        else:
            run = run_optimization(*inputs, config=config)
    except InputValidationError as e:
        # initial guess or bounds from the configuration
        print(f"✗ {e}", file=sys.stderr)
        return EXIT_INPUT

    if args.compare_regions:
        text = "\n\n".join(format_report(run) for run in runs.values())
        text += "\n\n" + format_comparison(runs)
        exit_code = EXIT_OK if all(r.result.success for r in runs.values()) else EXIT_NOT_CONVERGED
        run = runs[inputs.region]
    else:
        runs = {inputs.region: run}
        text = format_report(run)
        exit_code = EXIT_OK if run.result.success else EXIT_NOT_CONVERGED

    if args.strict:
        for label, r in runs.items():
            try:
                r.result.require_feasible()
            except InfeasibleConstraintError as e:
                print(f"✗ {label}: {e}", file=sys.stderr)
                exit_code = EXIT_NOT_CONVERGED

    for label, r in runs.items():
        try:
            r.check_finite()
        except NumericalDegeneracyError as e:
            print(f"✗ {label}: {e}", file=sys.stderr)
            exit_code = EXIT_NOT_CONVERGED

    print(text)
    if args.plot:
        print(f"\n  Saved: {plot_breakdown(run, args.plot)}")
    if args.save_report:
        print(f"  📄 Report saved: {_save_report(text, args.save_report)}")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
