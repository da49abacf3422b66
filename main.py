#!/usr/bin/env python3
"""
Weekday News Shares Analysis - Main Pipeline
=============================================

Runs the share-count analysis once per weekday.

Steps per weekday:
    1. Filter - Keep the weekday's articles, drop non-predictive columns
    2. Split - Stratified train/test split with a recorded seed
    3. EDA - Descriptive statistics and plots of shares
    4. Training - Pruned regression tree, boosted ensemble, linear model
    5. Evaluation - Test-set RMSE per model
    6. Report - Markdown report, figures and metrics

Usage:
    # All seven weekdays
    python main.py --data data/raw/OnlineNewsPopularity.csv

    # Selected weekdays, in parallel
    python main.py --data data/raw/OnlineNewsPopularity.csv --day monday --day friday --jobs 2

    # Descriptive statistics only
    python main.py --data data/raw/OnlineNewsPopularity.csv --phase eda
"""

import argparse
import logging
import sys
from pathlib import Path
from datetime import datetime
from typing import Dict, Any, Optional, List, Union

import pandas as pd
from joblib import Parallel, delayed

from newsshares.data_loader import load_config, load_data, validate_data, print_data_summary
from newsshares.eda import generate_eda_report, print_correlation_insights
from newsshares.evaluation import compare_models, print_evaluation_report
from newsshares.exceptions import NewsSharesError
from newsshares.model import CancellationToken, train_models, print_model_summary
from newsshares.preprocessing import Weekday, preprocess_pipeline, print_preprocessing_summary
from newsshares.report import write_weekday_report, write_batch_summary

logger = logging.getLogger(__name__)

PHASES = ('eda', 'train', 'all')


def setup_logging(level: str = "INFO", log_dir: Optional[Union[str, Path]] = None) -> None:
    """Configure logging for the pipeline."""
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_dir is not None:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(
            Path(log_dir) / f'pipeline_{datetime.now().strftime("%Y%m%d_%H%M%S")}.log'
        ))
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


def run_weekday(
    df: pd.DataFrame,
    day: Union[str, Weekday],
    config: Dict[str, Any],
    output_root: Optional[Union[str, Path]] = None,
    phase: str = 'all',
    cancel_token: Optional[CancellationToken] = None,
    verbose: bool = False
) -> Dict[str, Any]:
    """
    Run the full analysis for a single weekday.

    Args:
        df: Raw article table
        day: Weekday to analyze
        config: Configuration dictionary
        output_root: Root directory for reports (None: nothing written)
        phase: 'eda' stops after descriptive statistics, 'train' skips
            them, 'all' runs everything
        cancel_token: Optional token forwarded to the tuned trainers
        verbose: Print console summaries

    Returns:
        Dictionary containing all step results
    """
    if phase not in PHASES:
        raise ValueError(f"Unknown phase: {phase}. Choose from: {', '.join(PHASES)}")

    weekday = Weekday.parse(day)
    split_cfg = config.get('split', {})
    target = config.get('data', {}).get('target', 'shares')
    seed = split_cfg.get('seed', 42)

    output_dir = Path(output_root) / weekday.value if output_root is not None else None

    preprocessing = preprocess_pipeline(
        df,
        weekday,
        train_fraction=split_cfg.get('train_fraction', 0.7),
        seed=seed,
        target=target,
        min_rows=split_cfg.get('min_rows', 10)
    )
    if verbose:
        print_preprocessing_summary(preprocessing)

    results: Dict[str, Any] = {
        'weekday': weekday,
        'seed': seed,
        'preprocessing': preprocessing
    }

    if phase in ('eda', 'all'):
        results['eda'] = generate_eda_report(
            preprocessing['split'].train,
            output_dir=output_dir / "figures" if output_dir is not None else None,
            predictors=config.get('eda', {}).get('predictors'),
            target=target
        )
        if verbose:
            print_correlation_insights(results['eda']['correlation_with_shares'])

    if phase in ('train', 'all'):
        results['models'] = train_models(
            preprocessing['X_train'],
            preprocessing['y_train'],
            config,
            seed=seed,
            cancel_token=cancel_token,
            save_dir=output_dir / "models" if output_dir is not None else None
        )
        if verbose:
            print_model_summary(results['models'])

        results['evaluation'] = compare_models(
            results['models'],
            preprocessing['X_test'],
            preprocessing['y_test'],
            output_dir=output_dir
        )
        if verbose:
            print_evaluation_report(results['evaluation']['comparison'])

    if output_dir is not None:
        results['report_path'] = write_weekday_report(results, output_dir)

    return results


def _run_weekday_isolated(
    df: pd.DataFrame,
    day: Weekday,
    config: Dict[str, Any],
    output_root: Optional[Union[str, Path]],
    phase: str
) -> Dict[str, Any]:
    try:
        return run_weekday(df, day, config, output_root=output_root, phase=phase)
    except NewsSharesError as exc:
        logger.error(f"{day.value} run failed: {exc}")
        return {'weekday': day, 'error': exc}


def run_all_weekdays(
    data_path: Union[str, Path],
    config: Dict[str, Any],
    days: Optional[List[Union[str, Weekday]]] = None,
    n_jobs: int = 1,
    phase: str = 'all',
    output_root: Optional[Union[str, Path]] = None
) -> Dict[str, Dict[str, Any]]:
    """
    Load the dataset once and run the analysis for each weekday.

    A weekday whose run fails is reported under its name with an 'error'
    entry; the other weekdays are unaffected.

    Args:
        data_path: Path to the input CSV file
        config: Configuration dictionary
        days: Weekdays to analyze (default: all seven)
        n_jobs: Parallel weekday runs (joblib)
        phase: Phase passed to run_weekday
        output_root: Root directory for reports

    Returns:
        Mapping of weekday name to run results
    """
    weekdays = [Weekday.parse(d) for d in (days or list(Weekday))]
    target = config.get('data', {}).get('target', 'shares')
    if output_root is None:
        output_root = config.get('output', {}).get('reports_path', 'reports/')

    df = load_data(data_path, target=target)
    validate_data(df, target=target, strict=False)

    logger.info(f"Running {len(weekdays)} weekday analyses with n_jobs={n_jobs}")
    outcomes = Parallel(n_jobs=n_jobs)(
        delayed(_run_weekday_isolated)(df, day, config, output_root, phase)
        for day in weekdays
    )
    all_results = {day.value: outcome for day, outcome in zip(weekdays, outcomes)}

    completed = {day: res for day, res in all_results.items() if 'error' not in res}
    if completed and phase != 'eda':
        write_batch_summary(completed, output_root)

    return all_results


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point with argument parsing."""
    parser = argparse.ArgumentParser(
        description="Per-weekday share count analysis of online news articles",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --data data/raw/OnlineNewsPopularity.csv
  python main.py --data data/raw/OnlineNewsPopularity.csv --day monday --phase eda
  python main.py --data data/raw/OnlineNewsPopularity.csv --jobs 4
        """
    )

    parser.add_argument(
        '--data', '-d',
        type=str,
        required=True,
        help='Path to the input CSV file'
    )

    parser.add_argument(
        '--config', '-c',
        type=str,
        default='config/config.yaml',
        help='Path to configuration file (default: config/config.yaml)'
    )

    parser.add_argument(
        '--day',
        action='append',
        choices=[d.value for d in Weekday],
        help='Weekday to analyze; repeat for several (default: all seven)'
    )

    parser.add_argument(
        '--phase', '-p',
        type=str,
        choices=list(PHASES),
        default='all',
        help='Phase to run (default: all)'
    )

    parser.add_argument(
        '--jobs', '-j',
        type=int,
        default=1,
        help='Weekday runs to execute in parallel (default: 1)'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable debug logging'
    )

    args = parser.parse_args(argv)

    if not Path(args.data).exists():
        print(f"Error: Data file not found: {args.data}")
        return 1

    if not Path(args.config).exists():
        print(f"Error: Config file not found: {args.config}")
        return 1

    config = load_config(args.config)
    level = 'DEBUG' if args.verbose else config.get('logging', {}).get('level', 'INFO')
    setup_logging(level, config.get('logging', {}).get('log_dir'))

    try:
        if args.jobs == 1 and args.day and len(args.day) == 1:
            target = config.get('data', {}).get('target', 'shares')
            df = load_data(args.data, target=target)
            validate_data(df, target=target, strict=False)
            print_data_summary(df)
            run_weekday(
                df, args.day[0], config,
                output_root=config.get('output', {}).get('reports_path', 'reports/'),
                phase=args.phase,
                verbose=True
            )
            return 0

        all_results = run_all_weekdays(
            args.data, config,
            days=args.day,
            n_jobs=args.jobs,
            phase=args.phase
        )
        failed = [day for day, res in all_results.items() if 'error' in res]
        if failed:
            print(f"\n❌ Failed weekdays: {', '.join(failed)}")
            return 1
        return 0

    except Exception as e:
        logging.error(f"Pipeline failed: {e}", exc_info=True)
        print(f"\n❌ Pipeline failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
