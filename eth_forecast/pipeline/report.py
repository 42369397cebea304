"""
Report writer for the forecast comparison.

Writes to the report directory:
- accuracy.csv: training and test accuracy per model
- forecasts.csv: holdout actuals and every model's point forecast
- figures: forecast, residual and accuracy comparison plots
- report.md: ranked table, residual diagnostics and conclusions
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd
import numpy as np

from ..data.splitter import TrainTestSplit
from ..data.validator import ValidationReport
from ..evaluation.diagnostics import LjungBoxResult
from ..evaluation.evaluator import AccuracyReport
from ..evaluation.visualizer import ForecastVisualizer
from ..models.base import ForecastResult

logger = logging.getLogger(__name__)


def _markdown_table(df: pd.DataFrame, float_format: str = '{:.4f}') -> str:
    """Render a frame as a GitHub-flavoured Markdown table."""
    header = [df.index.name or ''] + [str(c) for c in df.columns]
    lines = [
        '| ' + ' | '.join(header) + ' |',
        '|' + '|'.join(['---'] * len(header)) + '|'
    ]

    for row in df.itertuples():
        cells = [str(row[0])]
        for value in row[1:]:
            if isinstance(value, (float, np.floating)):
                cells.append('NaN' if np.isnan(value) else float_format.format(value))
            else:
                cells.append(str(value))
        lines.append('| ' + ' | '.join(cells) + ' |')

    return '\n'.join(lines)


class ReportWriter:
    """Writes the comparison report for one pipeline run."""

    def __init__(
        self,
        output_dir: Path,
        figures_dir: Optional[Path] = None,
        plots: bool = True,
        combination_name: str = 'combination'
    ):
        """
        Initialize report writer.

        Args:
            output_dir: Directory receiving CSV and Markdown files
            figures_dir: Directory receiving PNG files (default: output_dir/figures)
            plots: Whether to draw figures
            combination_name: Name of the combined forecast
        """
        self.output_dir = Path(output_dir)
        self.figures_dir = Path(figures_dir) if figures_dir else self.output_dir / 'figures'
        self.plots = plots
        self.combination_name = combination_name

        self.output_dir.mkdir(parents=True, exist_ok=True)

    def write_accuracy(self, accuracy: AccuracyReport) -> Path:
        path = self.output_dir / 'accuracy.csv'
        accuracy.to_frame().to_csv(path)
        logger.info(f"Accuracy table saved to {path}")
        return path

    def write_forecasts(self, split: TrainTestSplit, results: Dict[str, ForecastResult]) -> Path:
        path = self.output_dir / 'forecasts.csv'

        frame = pd.DataFrame({'actual': split.test})
        for name, result in results.items():
            frame[name] = result.mean
        frame.index.name = 'date'

        frame.to_csv(path)
        logger.info(f"Forecasts saved to {path}")
        return path

    def write_plots(
        self,
        split: TrainTestSplit,
        results: Dict[str, ForecastResult],
        accuracy: AccuracyReport
    ) -> List[Path]:
        """Draw forecast, residual and accuracy comparison figures."""
        visualizer = ForecastVisualizer(self.figures_dir)
        paths = []

        for name, result in results.items():
            fig = visualizer.plot_forecast(result, split, save_name=f"{name}_forecast")
            visualizer.close(fig)
            paths.append(self.figures_dir / f"{name}_forecast.png")

            if result.fitted is not None:
                residuals = split.train - result.fitted
                fig = visualizer.plot_residuals(
                    residuals, title=f"{name} - training residuals",
                    save_name=f"{name}_residuals"
                )
                visualizer.close(fig)
                paths.append(self.figures_dir / f"{name}_residuals.png")

        fig = visualizer.plot_accuracy_comparison(
            accuracy.ranked(), metric='rmse',
            title='Test RMSE by model', save_name='accuracy_comparison'
        )
        visualizer.close(fig)
        paths.append(self.figures_dir / 'accuracy_comparison.png')

        logger.info(f"{len(paths)} figures saved to {self.figures_dir}")
        return paths

    def conclusions(
        self,
        accuracy: AccuracyReport,
        results: Dict[str, ForecastResult]
    ) -> List[str]:
        """Plain-language findings drawn from the ranked accuracy table."""
        lines = []
        ranked = accuracy.ranked()

        best = ranked.index[0]
        lines.append(f"The most accurate model on the test set is **{best}** "
                     f"(RMSE {ranked.loc[best, 'rmse']:.4f}).")

        combo = self.combination_name
        if combo in accuracy and combo in results:
            combo_rmse = accuracy.test_rmse(combo)
            members = results[combo].metadata.get('members', [])
            beaten = [m for m in members if m in accuracy and combo_rmse < accuracy.test_rmse(m)]
            not_beaten = [m for m in members if m in accuracy and m not in beaten]

            if beaten and not not_beaten:
                lines.append(f"The combination beats every member ({', '.join(members)}).")
            elif beaten:
                lines.append(f"The combination beats {', '.join(beaten)} "
                             f"but not {', '.join(not_beaten)}.")
            else:
                lines.append("The combination does not beat any of its members.")

        if 'arima' in results and 'order' in results['arima'].metadata:
            p, d, q = results['arima'].metadata['order']
            lines.append(f"The automatic ARIMA search selected ARIMA({p},{d},{q}).")

        if 'ets' in results and 'components' in results['ets'].metadata:
            lines.append(f"The ETS search selected {results['ets'].metadata['components']}.")

        if 'nnetar' in results and 'label' in results['nnetar'].metadata:
            lines.append(f"The neural network autoregression fitted an "
                         f"{results['nnetar'].metadata['label']}.")

        return lines

    def write_markdown(
        self,
        split: TrainTestSplit,
        results: Dict[str, ForecastResult],
        accuracy: AccuracyReport,
        diagnostics: Optional[Dict[str, LjungBoxResult]] = None,
        validation: Optional[ValidationReport] = None
    ) -> Path:
        path = self.output_dir / 'report.md'

        sections = [
            "# Ethereum daily log-price forecast comparison",
            "",
            f"Generated {datetime.now():%Y-%m-%d %H:%M}.",
            "",
            f"- Training window: {split.train.index[0].date()} to {split.train.index[-1].date()} "
            f"({len(split.train)} observations)",
            f"- Test window: {split.test.index[0].date()} to {split.test.index[-1].date()} "
            f"({split.horizon} observations)",
            f"- Models: {', '.join(results)}",
            ""
        ]

        if validation is not None:
            sections += ["## Data validation", "", "```", validation.summary(), "```", ""]

        sections += [
            "## Test set accuracy (ranked by RMSE)",
            "",
            _markdown_table(accuracy.ranked()),
            "",
            "## Training set accuracy",
            "",
            _markdown_table(
                pd.DataFrame({n: s['train'] for n, s in accuracy.scores.items()}).T.rename_axis('model')
            ),
            ""
        ]

        if diagnostics:
            table = pd.DataFrame({n: r.to_dict() for n, r in diagnostics.items()}).T.rename_axis('model')
            sections += ["## Residual diagnostics (Ljung-Box)", "", _markdown_table(table), ""]

        sections += ["## Conclusions", ""]
        sections += [f"- {line}" for line in self.conclusions(accuracy, results)]
        sections.append("")

        if self.plots:
            sections += ["## Figures", ""]
            sections.append(f"![Test RMSE by model]({self._relative_figure('accuracy_comparison')})")
            for name in results:
                sections.append(f"![{name} forecast]({self._relative_figure(f'{name}_forecast')})")
            sections.append("")

        path.write_text('\n'.join(sections), encoding='utf-8')
        logger.info(f"Report saved to {path}")
        return path

    def _relative_figure(self, save_name: str) -> str:
        figure = self.figures_dir / f"{save_name}.png"
        try:
            return str(figure.relative_to(self.output_dir))
        except ValueError:
            return str(figure)

    def write(
        self,
        split: TrainTestSplit,
        results: Dict[str, ForecastResult],
        accuracy: AccuracyReport,
        diagnostics: Optional[Dict[str, LjungBoxResult]] = None,
        validation: Optional[ValidationReport] = None
    ) -> Dict[str, Path]:
        """
        Write the full report.

        Args:
            split: Train/test split
            results: Forecasts by model name
            accuracy: Accuracy report
            diagnostics: Ljung-Box results by model name
            validation: Data validation report

        Returns:
            Dictionary of written artefact paths
        """
        written = {
            'accuracy': self.write_accuracy(accuracy),
            'forecasts': self.write_forecasts(split, results)
        }

        if self.plots:
            written['figures'] = self.figures_dir
            self.write_plots(split, results, accuracy)

        written['report'] = self.write_markdown(split, results, accuracy, diagnostics, validation)

        return written
