"""
Report Module
=============

Writes the per-weekday Markdown report and the cross-weekday summary.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, List, Union

import pandas as pd

from .evaluation import MODEL_LABELS
from .model import REGRESSION_TREE, BOOSTED_ENSEMBLE, LINEAR_MODEL

logger = logging.getLogger(__name__)


def _tree_section(info: Dict[str, Any]) -> List[str]:
    sizes = pd.DataFrame({
        'leaves': info['candidate_sizes'],
        'alpha': info['candidate_alphas'],
        'cv_deviance': info['cv_deviance'],
    }).sort_values('leaves')
    lines = [
        "## Regression tree",
        "",
        f"Tree size chosen by {info['cv']} cross-validated deviance: "
        f"**{info['selected_size']} leaves** (unpruned: {info['unpruned_size']}, "
        f"alpha = {info['selected_alpha']:.6g}).",
        "",
        sizes.to_markdown(index=False, floatfmt=".6g"),
        "",
    ]
    return lines


def _boosting_section(info: Dict[str, Any]) -> List[str]:
    tuning = info['tuning']
    table = tuning.table.drop(columns=['error'])
    lines = [
        "## Boosted ensemble",
        "",
        f"{tuning.cv_folds}-fold cross-validation repeated {tuning.cv_repeats} times "
        f"(seed {tuning.seed}); {tuning.n_viable} of {len(table)} cells viable.",
        "",
        "Selected: " + ", ".join(f"{k} = {v}" for k, v in tuning.selected.as_dict().items()),
        "",
        table.to_markdown(index=False, floatfmt=".4f"),
        "",
    ]
    return lines


def _linear_section(info: Dict[str, Any]) -> List[str]:
    lines = [
        "## Linear model",
        "",
        f"Ordinary least squares on {len(info['coefficients'])} predictors, "
        f"training R² = {info['train_r2']:.4f}.",
        "",
    ]
    if info['aliased']:
        lines += [
            "Aliased (collinear) predictors dropped: " + ", ".join(f"`{c}`" for c in info['aliased']),
            "",
        ]
    return lines


def write_weekday_report(results: Dict[str, Any], output_dir: Union[str, Path]) -> Path:
    """
    Write the Markdown report for one weekday run.

    Args:
        results: Dictionary returned by main.run_weekday
        output_dir: Weekday output directory

    Returns:
        Path of the written report
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    weekday = results['weekday']
    split = results['preprocessing']['split']
    eda = results.get('eda')
    models = results.get('models', {})
    evaluation = results.get('evaluation')

    lines = [
        f"# {weekday.label} Articles: Share Count Analysis",
        "",
        f"Generated {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}.",
        "",
        "## Data",
        "",
        f"- Articles published on {weekday.label}: {len(results['preprocessing']['filtered'])}",
        f"- Training rows: {split.n_train} (train fraction {split.train_fraction})",
        f"- Test rows: {split.n_test}",
        f"- Split seed: {split.seed}",
        f"- Predictors: {len(results['preprocessing']['feature_names'])}",
        "",
    ]

    if eda is not None:
        stats_df = pd.DataFrame([eda['shares_statistics']])
        channel_df = eda['channel_table'].reset_index()
        lines += [
            "## Descriptive statistics",
            "",
            stats_df.to_markdown(index=False, floatfmt=".2f"),
            "",
            "### Shares by channel",
            "",
            channel_df.to_markdown(index=False, floatfmt=".1f"),
            "",
        ]
        lines += [f"![{name}](figures/{name})" for name in eda['figures']]
        lines.append("")

    if REGRESSION_TREE in models:
        lines += _tree_section(models[REGRESSION_TREE].training_info)
    if BOOSTED_ENSEMBLE in models:
        lines += _boosting_section(models[BOOSTED_ENSEMBLE].training_info)
    if LINEAR_MODEL in models:
        lines += _linear_section(models[LINEAR_MODEL].training_info)

    if evaluation is not None:
        comparison = evaluation['comparison'][['model', 'rmse', 'mae', 'r2']].copy()
        comparison['model'] = comparison['model'].map(lambda k: MODEL_LABELS.get(k, k))
        lines += [
            "## Test-set comparison",
            "",
            comparison.to_markdown(index=False, floatfmt=".4f"),
            "",
        ]
        lines += [f"![{name}](figures/{name})" for name in evaluation['figures']]
        lines.append("")

    report_path = output_dir / "report.md"
    report_path.write_text("\n".join(lines), encoding="utf-8")
    logger.info(f"Report written to {report_path}")
    return report_path


def write_batch_summary(
    all_results: Dict[str, Dict[str, Any]],
    output_dir: Union[str, Path]
) -> pd.DataFrame:
    """
    Write test RMSE per model per weekday as CSV and Markdown.

    Args:
        all_results: Mapping of weekday name to run_weekday results
        output_dir: Batch output directory

    Returns:
        Wide table with one row per weekday
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    rows = []
    for day, results in all_results.items():
        row = {'weekday': day}
        evaluation = results.get('evaluation')
        if evaluation is not None:
            for item in evaluation['comparison'].itertuples():
                row[f"{item.model}_rmse"] = item.rmse
        rows.append(row)

    summary = pd.DataFrame(rows)
    summary.to_csv(output_dir / "summary.csv", index=False)
    (output_dir / "summary.md").write_text(
        "# Test RMSE by Weekday\n\n" + summary.to_markdown(index=False, floatfmt=".2f") + "\n",
        encoding="utf-8"
    )
    logger.info(f"Batch summary written to {output_dir}")
    return summary
