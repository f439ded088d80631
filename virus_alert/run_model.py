"""
This is the main module used to run the simulations listed in a configuration file
"""
# pylint: disable=import-error
import argparse
import logging
import logging.config
from pathlib import Path
import sys
import time
from typing import List, Optional

import pandas as pd  # type: ignore

from virus_alert import loaders
from virus_alert.report import Report
from virus_alert.simulation import SimulationBuilder

# Default logger, used if module not called as __main__
logger = logging.getLogger(__name__)


def main(argv):
    """
    Main function to run the simulations
    """
    t0 = time.time()

    args = build_args(argv)
    setup_logger(args)
    logger.info("Parameters\n%s", "\n".join(f"\t{key}={value}" for key, value in args._get_kwargs()))  # pylint: disable=protected-access

    builders = read_config(args.config)
    args.output_dir.mkdir(parents=True, exist_ok=True)
    max_workers = None if not args.workers else args.workers

    reports: List[Report] = []
    for i, builder in enumerate(builders):
        logger.info(
            "Running simulation %s/%s: %s runs of %s days",
            i + 1, len(builders), builder.report_plan.num_simulations, builder.report_plan.days,
        )
        simulation = builder.build()
        seed = None if args.seed is None else args.seed + i
        if args.last_day:
            last_day = simulation.run_last_day(random_seed=seed, max_workers=max_workers)
            last_day.to_pandas().to_csv(args.output_dir / f"last_day_{i}.csv", index=False)
            continue
        report = simulation.run(random_seed=seed, max_workers=max_workers)
        writeResults(report, args.output_dir, i)
        reports.append(report)

    if args.plot and reports:
        # Imported here so that the simulations can run without a display backend being configured
        from virus_alert import visualisation  # pylint: disable=import-outside-toplevel
        fig = visualisation.plot_evolution(reports)
        fig.savefig(args.output_dir / "evolution.png")
        logger.info("Plot saved in %s", args.output_dir / "evolution.png")

    logger.info("Took %.2fs to run the simulations.", time.time() - t0)


def read_config(path: Path) -> List[SimulationBuilder]:
    """
    Reads the simulations in the configuration file, exiting the program if the file can not be used

    :param path: path of the YAML configuration
    :return: the simulations listed in the file
    """
    try:
        with open(path) as fp:
            return loaders.readSimulationBuilders(fp)
    except OSError:
        logger.error("Failed opening %s, please check the path of the configuration file", path, exc_info=True)
        raise SystemExit(1)
    except ValueError as e:
        logger.error("Failed to load config %s: %s", path, e)
        raise SystemExit(1)


def writeResults(report: Report, output_dir: Path, index: int):
    """Writes the raw counting tables, their average and the infection probability of a report

    :param report: the results of a simulation
    :param output_dir: directory where the csv files are written
    :param index: position of the simulation in the configuration file
    """
    raw = output_dir / f"raw_results_{index}.csv"
    raw.unlink(missing_ok=True)
    for counting_table in report.counting_tables:
        counting_table.write_csv(raw, mode="a")

    report.to_pandas().to_csv(output_dir / f"average_{index}.csv", index=False)

    probability = report.infection_probability()
    pd.DataFrame([{"mean": probability.mean, "error": probability.error}]).to_csv(
        output_dir / f"infection_probability_{index}.csv", index=False
    )
    logger.info(
        "Simulation %s: infection probability %.2f +- %.2f, %.0f%% contained outbreaks",
        index, probability.mean, probability.error, 100 * report.contained(),
    )


def setup_logger(args: Optional[argparse.Namespace] = None) -> None:
    """
    Sends the package logs to stderr, and to a file when ``args.logfile`` is set. Without arguments only INFO and
    above reach stderr.

    :param args: parsed CLI arguments, ``quiet`` lowers stderr to warnings and ``debug`` raises every handler to DEBUG
    """
    logconf = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "[%(asctime)s] [%(name)s] [%(levelname)s] %(message)s",
            },
        },
        "handlers": {
            "stderr": {
                "level": "INFO",
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "stream": "ext://sys.stderr",
            },
        },
        "loggers": {__package__: {"handlers": ["stderr"], "level": "DEBUG"}},
    }

    if args is not None and args.logfile is not None:
        logdir = args.logfile.parent
        try:
            logdir.mkdir(parents=True, exist_ok=True)
        except OSError:
            logger.error("Could not create %s for logging", logdir, exc_info=True)
            raise SystemExit(1)
        logconf["handlers"]["logfile"] = {  # type: ignore
            "class": "logging.FileHandler",
            "level": "INFO",
            "formatter": "standard",
            "filename": str(args.logfile),
            "encoding": "utf8",
        }
        logconf["loggers"][__package__]["handlers"].append("logfile")  # type: ignore

    if args is not None and args.quiet:
        logconf["handlers"]["stderr"]["level"] = "WARNING"  # type: ignore
    elif args is not None and args.debug:
        for handler in logconf["handlers"].values():  # type: ignore
            handler["level"] = "DEBUG"

    logging.config.dictConfig(logconf)


def build_args(argv: List[str]) -> argparse.Namespace:
    """Parses the command line of `main`"""
    parser = argparse.ArgumentParser(
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        description="Runs the virus alert board game simulations listed in a configuration file",
    )
    parser.add_argument(
        "-c",
        "--config",
        default=Path("config.yaml"),
        type=Path,
        help="YAML file with the list of simulations to run",
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        default=Path("."),
        type=Path,
        help="Directory where the results are written",
    )
    parser.add_argument(
        "--last-day",
        action="store_true",
        help="Only keep the last day of every run (faster, useful for a large number of runs)",
    )
    parser.add_argument(
        "--plot",
        action="store_true",
        help="Plot the evolution of healthy people for every simulation",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed. Simulation i uses seed + i. Runs are not reproducible if not provided",
    )
    parser.add_argument(
        "-l",
        "--logfile",
        dest="logfile",
        default=None,
        type=Path,
        help="Also write the logs to this file",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        dest="quiet",
        action="store_true",
        help="Prints only warnings to stderr",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Write debug messages too"
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Number of processes running the games, 0 means the number of CPUs in the machine",
    )

    return parser.parse_args(argv)


if __name__ == "__main__":
    # The logger name inherits from the package, if called as __main__
    logger = logging.getLogger(f"{__package__}.{__name__}")
    main(sys.argv[1:])
